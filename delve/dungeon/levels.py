"""Level identity, branch table and level-transition requests.

A level is identified by ``LevelID(branch, depth)`` where ``depth`` counts
from 1 inside its branch. ``BranchInfo`` maps that to an absolute dungeon
depth and records where the branch hangs off its parent.

``LevelChange`` values are produced by gameplay ("the player took the
stairs") and consumed by :class:`delve.dungeon.dungeon.Dungeon`, which picks or
generates the target level and resolves the ``Landing`` rule to a coordinate.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple


class DungeonBranch(Enum):
    MAIN = "main"
    MINES = "mines"
    SOKOBAN = "sokoban"
    GEHENNOM = "gehennom"
    QUEST = "quest"
    VLAD_TOWER = "vlad_tower"
    FORT_KNOX = "fort_knox"
    ASTRAL = "astral"
    END_GAME = "end_game"

    @classmethod
    def parse(cls, value: str) -> "DungeonBranch":
        """Case-insensitive lookup by name or value; raises ValueError."""
        key = str(value).strip().lower()
        for member in cls:
            if key in (member.value, member.name.lower()):
                return member
        raise ValueError(f"unknown branch: {value!r}")


@dataclass(frozen=True)
class LevelID:
    branch: DungeonBranch
    depth: int

    def __str__(self) -> str:
        return f"{self.branch.name}:{self.depth}"

    def sort_key(self) -> Tuple[str, int]:
        return (self.branch.value, self.depth)

    def __lt__(self, other: "LevelID") -> bool:
        return self.sort_key() < other.sort_key()

    @classmethod
    def parse(cls, text: str) -> "LevelID":
        """Parse ``"MAIN:3"`` style identifiers."""
        branch, _, depth = str(text).partition(":")
        if not depth:
            raise ValueError(f"expected BRANCH:DEPTH, got {text!r}")
        return cls(DungeonBranch.parse(branch), int(depth))


MAIN_TOP = LevelID(DungeonBranch.MAIN, 1)


class LandingType(Enum):
    STAIRS_UP = "stairs_up"
    STAIRS_DOWN = "stairs_down"
    COORDINATE = "coordinate"
    RANDOM = "random"
    CONNECTION = "connection"


@dataclass(frozen=True)
class Landing:
    kind: LandingType
    coord: Optional[Tuple[int, int]] = None
    source: Optional[LevelID] = None

    @classmethod
    def stairs_up(cls) -> "Landing":
        return cls(LandingType.STAIRS_UP)

    @classmethod
    def stairs_down(cls) -> "Landing":
        return cls(LandingType.STAIRS_DOWN)

    @classmethod
    def coordinate(cls, x: int, y: int) -> "Landing":
        return cls(LandingType.COORDINATE, coord=(x, y))

    @classmethod
    def random(cls) -> "Landing":
        return cls(LandingType.RANDOM)

    @classmethod
    def connection(cls, source: LevelID) -> "Landing":
        return cls(LandingType.CONNECTION, source=source)


class ChangeKind(Enum):
    NEXT_LEVEL = "next"
    PREV_LEVEL = "prev"
    TELEPORT = "teleport"


@dataclass(frozen=True)
class LevelChange:
    kind: ChangeKind
    target: Optional[LevelID] = None
    landing: Optional[Landing] = None

    @classmethod
    def next_level(cls) -> "LevelChange":
        return cls(ChangeKind.NEXT_LEVEL)

    @classmethod
    def prev_level(cls) -> "LevelChange":
        return cls(ChangeKind.PREV_LEVEL)

    @classmethod
    def teleport(cls, target: LevelID, landing: Optional[Landing] = None) -> "LevelChange":
        return cls(ChangeKind.TELEPORT, target=target, landing=landing or Landing.random())


@dataclass(frozen=True)
class BranchInfo:
    branch: DungeonBranch
    depth_start: int
    depth_end: int
    name: str
    entry_level: Optional[LevelID] = None
    has_special_levels: bool = False
    is_hellish: bool = False
    is_maze: bool = False
    is_tower: bool = False
    ascending: bool = False

    @property
    def num_levels(self) -> int:
        return max(self.depth_end - self.depth_start + 1, 1)

    def absolute_depth(self, relative: int) -> int:
        return self.depth_start + relative - 1

    def relative_level(self, absolute: int) -> int:
        return absolute - self.depth_start + 1

    def contains_depth(self, absolute: int) -> bool:
        return self.depth_start <= absolute <= self.depth_end


def _branch_table() -> Dict[DungeonBranch, BranchInfo]:
    B = DungeonBranch
    infos = [
        BranchInfo(B.MAIN, 1, 30, "The Dungeons of Doom", has_special_levels=True),
        BranchInfo(B.MINES, 3, 15, "The Gnomish Mines", entry_level=LevelID(B.MAIN, 3)),
        BranchInfo(B.SOKOBAN, 6, 10, "Sokoban", entry_level=LevelID(B.MAIN, 6), is_maze=True, ascending=True),
        BranchInfo(
            B.GEHENNOM, 25, 50, "Gehennom", entry_level=LevelID(B.MAIN, 25), is_hellish=True, has_special_levels=True
        ),
        BranchInfo(B.QUEST, 16, 22, "The Quest", entry_level=LevelID(B.MAIN, 14), has_special_levels=True),
        BranchInfo(
            B.VLAD_TOWER, 40, 43, "Vlad's Tower", entry_level=LevelID(B.GEHENNOM, 16), is_tower=True, ascending=True
        ),
        BranchInfo(B.ASTRAL, 51, 51, "The Astral Plane"),
    ]
    return {info.branch: info for info in infos}


DEFAULT_BRANCHES: Dict[DungeonBranch, BranchInfo] = _branch_table()

_MAIN_SPECIALS = {
    1: "Welcome Level",
    5: "The Oracle",
    10: "Big Room",
    14: "Quest Portal",
    20: "Castle",
    25: "Valley of the Dead",
}
_GEHENNOM_SPECIALS = {35: "Juiblex's Swamp", 40: "Asmodeus' Lair", 45: "Wizard's Tower", 50: "Sanctum"}
MINETOWN_DEPTH = 6

_SHORT_PREFIX = {
    DungeonBranch.MAIN: "Dlvl:",
    DungeonBranch.MINES: "Mine:",
    DungeonBranch.SOKOBAN: "Sok:",
    DungeonBranch.GEHENNOM: "Geh:",
    DungeonBranch.QUEST: "Qst:",
    DungeonBranch.VLAD_TOWER: "Vlad:",
}


def special_level_name(level: LevelID, branches: Optional[Dict[DungeonBranch, BranchInfo]] = None) -> Optional[str]:
    branches = branches or DEFAULT_BRANCHES
    info = branches.get(level.branch)
    if level.branch == DungeonBranch.MAIN:
        return _MAIN_SPECIALS.get(level.depth)
    if level.branch == DungeonBranch.MINES:
        if level.depth == MINETOWN_DEPTH:
            return "Minetown"
        if info is not None and level.depth == info.num_levels:
            return "Mine's End"
        return None
    if level.branch == DungeonBranch.GEHENNOM and info is not None:
        return _GEHENNOM_SPECIALS.get(info.absolute_depth(level.depth))
    if level.branch == DungeonBranch.ASTRAL:
        return "The Astral Plane"
    return None


def absolute_depth(level: LevelID, branches: Optional[Dict[DungeonBranch, BranchInfo]] = None) -> int:
    info = (branches or DEFAULT_BRANCHES).get(level.branch)
    return info.absolute_depth(level.depth) if info else level.depth


def describe_level(level: LevelID, branches: Optional[Dict[DungeonBranch, BranchInfo]] = None) -> str:
    branches = branches or DEFAULT_BRANCHES
    info = branches.get(level.branch)
    name = info.name if info else "Unknown"
    depth = absolute_depth(level, branches)
    special = special_level_name(level, branches)
    if special:
        return f"{name}: {special} (Depth {depth})"
    return f"{name}: Level {level.depth} (Depth {depth})"


def short_level_name(level: LevelID, branches: Optional[Dict[DungeonBranch, BranchInfo]] = None) -> str:
    if level.branch == DungeonBranch.ASTRAL:
        return "Astral"
    prefix = _SHORT_PREFIX.get(level.branch, "Lvl:")
    if level.branch in (DungeonBranch.MINES, DungeonBranch.SOKOBAN, DungeonBranch.QUEST, DungeonBranch.VLAD_TOWER):
        depth = level.depth
    else:
        depth = absolute_depth(level, branches)
    return f"{prefix}{depth}"


def max_monster_level(depth: int) -> int:
    return min(depth + 5, 49)


def item_difficulty(depth: int) -> int:
    return max(depth + 2, 1)


__all__ = [
    "DungeonBranch",
    "LevelID",
    "MAIN_TOP",
    "LandingType",
    "Landing",
    "ChangeKind",
    "LevelChange",
    "BranchInfo",
    "DEFAULT_BRANCHES",
    "MINETOWN_DEPTH",
    "special_level_name",
    "absolute_depth",
    "describe_level",
    "short_level_name",
    "max_monster_level",
    "item_difficulty",
]
