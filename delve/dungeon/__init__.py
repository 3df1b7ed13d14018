"""Public dungeon package interface."""

from .config import COLNO, ROWNO, DungeonConfig
from .dungeon import Dungeon
from .generator import Level, LevelGenerator, LevelType, generate_level
from .grid import Grid
from .levels import (
    DEFAULT_BRANCHES,
    MAIN_TOP,
    BranchInfo,
    ChangeKind,
    DungeonBranch,
    Landing,
    LandingType,
    LevelChange,
    LevelID,
)
from .pathfinding import PathFinder, find_path, is_passable, is_walkable_now
from .rect import NhRect, RectTracker, intersect
from .rooms import Room, RoomType
from .tiles import DoorState, EngraveType, Tile, TileFlags, TileType

__all__ = [
    "COLNO",
    "ROWNO",
    "DungeonConfig",
    "Dungeon",
    "Level",
    "LevelGenerator",
    "LevelType",
    "generate_level",
    "Grid",
    "DEFAULT_BRANCHES",
    "MAIN_TOP",
    "BranchInfo",
    "ChangeKind",
    "DungeonBranch",
    "Landing",
    "LandingType",
    "LevelChange",
    "LevelID",
    "PathFinder",
    "find_path",
    "is_passable",
    "is_walkable_now",
    "NhRect",
    "RectTracker",
    "intersect",
    "Room",
    "RoomType",
    "DoorState",
    "EngraveType",
    "Tile",
    "TileFlags",
    "TileType",
]
