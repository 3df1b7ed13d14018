"""Level generation: layout, corridors, stairs/portals, fixtures.

``LevelGenerator(level_id, rng, config, branches).run()`` returns a
:class:`Level` owning a fully stamped :class:`Grid`. All randomness comes
from the caller's :class:`Rng`, in a fixed order, so the same engine state
and level id always produce the same level.

Phases (timed into ``metrics['phase_ms']`` when metrics are enabled):
  * choose level type (ordinary / big room / maze / dark mines-style)
  * rooms + corridors, or the big room, maze or mines cave layout
  * stairs and portals toward the surface, deeper, and into child branches
  * fixtures, special room types and floor traps (none in Sokoban)
  * reachability check; a breach is logged at error level
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..logging_utils import get_logger
from ..utils.rng import Rng
from .config import DungeonConfig
from .connectivity import unreachable_rooms
from .corridors import make_corridors
from .features import assign_room_types, free_floor_cell, place_fixtures, place_fountains, place_traps
from .grid import Grid
from .layouts import make_bigroom, make_maze, make_mines
from .levels import DEFAULT_BRANCHES, MINETOWN_DEPTH, BranchInfo, DungeonBranch, LevelID
from .metrics import init_metrics
from .rect import RectTracker
from .rooms import Room, make_rooms
from .tiles import TileType

log = get_logger("delve.dungeon.generator")

Coord = Tuple[int, int]


class LevelType(Enum):
    ORDINARY = "ordinary"
    BIGROOM = "bigroom"
    MAZE = "maze"
    MINES = "mines"
    MINETOWN = "minetown"
    SOKOBAN = "sokoban"

    @classmethod
    def for_depth(
        cls, level_id: LevelID, rng: Rng, branches: Optional[Dict[DungeonBranch, BranchInfo]] = None
    ) -> "LevelType":
        """Pick the layout family for a level; may draw from ``rng``."""
        info = (branches or DEFAULT_BRANCHES).get(level_id.branch)
        if level_id.branch == DungeonBranch.MINES:
            return cls.MINETOWN if level_id.depth == MINETOWN_DEPTH else cls.MINES
        if level_id.branch == DungeonBranch.SOKOBAN:
            return cls.SOKOBAN
        if info is not None and info.is_hellish:
            return cls.MAZE
        depth = level_id.depth
        if depth <= 1:
            return cls.ORDINARY
        if depth > 10 and rng.rn2(20) == 0:
            return cls.BIGROOM
        if 3 < depth < 20 and rng.rn2(15) == 0:
            return cls.MINES
        if depth > 15 and rng.rn2(10) == 0:
            return cls.MAZE
        return cls.ORDINARY


@dataclass
class Level:
    level_id: LevelID
    level_type: LevelType
    grid: Grid
    rooms: List[Room]
    up_stairs: Optional[Coord] = None
    down_stairs: Optional[Coord] = None
    branch_stairs: Dict[LevelID, Coord] = field(default_factory=dict)
    start_pos: Coord = (0, 0)
    metrics: Dict[str, Any] = field(default_factory=dict)

    def room_at(self, x: int, y: int) -> Optional[Room]:
        tile = self.grid.get_tile(x, y)
        if tile is None or tile.roomno <= 0:
            return None
        for room in self.rooms:
            if room.roomno == tile.roomno:
                return room
        return None

    def to_ascii(self) -> str:
        return self.grid.to_ascii()

    def to_json(self) -> dict:
        return {
            "level": str(self.level_id),
            "branch": self.level_id.branch.name,
            "depth": self.level_id.depth,
            "type": self.level_type.value,
            "up_stairs": list(self.up_stairs) if self.up_stairs else None,
            "down_stairs": list(self.down_stairs) if self.down_stairs else None,
            "start": list(self.start_pos),
            "rooms": [r.to_dict() for r in self.rooms],
            "grid": self.grid.to_json(),
        }


class LevelGenerator:
    def __init__(
        self,
        level_id: LevelID,
        rng: Rng,
        config: Optional[DungeonConfig] = None,
        branches: Optional[Dict[DungeonBranch, BranchInfo]] = None,
    ):
        self.level_id = level_id
        self.rng = rng
        self.config = config or DungeonConfig()
        self.branches = branches or DEFAULT_BRANCHES
        self.info = self.branches.get(level_id.branch) or BranchInfo(level_id.branch, 1, 1, "Unknown")
        self.depth = self.info.absolute_depth(level_id.depth)
        self.metrics: Dict[str, Any] = init_metrics()

    def run(self) -> Level:
        start = time.perf_counter()
        phase_times: Dict[str, int] = {}

        def _phase(label: str, fn: Callable, *a, **k):
            ps = time.perf_counter()
            r = fn(*a, **k)
            phase_times[label] = int((time.perf_counter() - ps) * 1000)
            return r

        grid = Grid(self.config.width, self.config.height)
        level_type = LevelType.for_depth(self.level_id, self.rng, self.branches)
        rooms = _phase("layout", self._layout, grid, level_type)
        level = Level(self.level_id, level_type, grid, rooms)
        _phase("stairs", self._place_stairs, level)
        _phase("features", self._decorate, level)

        missing = unreachable_rooms(grid, rooms)
        self.metrics["unreachable_rooms"] = len(missing)
        if missing:
            log.error(event="unreachable_rooms", level_id=str(self.level_id), rooms=",".join(map(str, missing)))
        self.metrics["phase_ms"] = phase_times
        self.metrics["runtime_ms"] = round((time.perf_counter() - start) * 1000, 3)
        if self.config.enable_metrics:
            level.metrics = self.metrics
        log.debug(
            event="level_generated",
            level_id=str(self.level_id),
            type=level_type.value,
            rooms=len(rooms),
            runtime_ms=self.metrics["runtime_ms"],
        )
        return level

    # --- phases ----------------------------------------------------------
    def _layout(self, grid: Grid, level_type: LevelType) -> List[Room]:
        if level_type == LevelType.BIGROOM:
            return make_bigroom(grid)
        if level_type == LevelType.MAZE:
            return make_maze(grid, self.rng)
        if level_type == LevelType.MINES:
            return make_mines(grid, self.rng, self.metrics)
        tracker = RectTracker(grid.width, grid.height, self.config.max_rects, self.config.xlim, self.config.ylim)
        rooms = make_rooms(grid, tracker, self.rng, self.config, self.depth, metrics=self.metrics)
        make_corridors(grid, rooms, self.rng, self.depth, extra=self.config.extra_corridors, metrics=self.metrics)
        return rooms

    def _put_stairs(self, level: Level, room: Room, kind: TileType, target: LevelID, taken: List[Coord]) -> Coord:
        pos = room.center
        tile = level.grid.get_tile(*pos)
        if pos in taken or tile is None or tile.typ != TileType.ROOM:
            pos = free_floor_cell(level.grid, room, self.rng, exclude=taken) or pos
        level.grid.set_type(pos[0], pos[1], kind)
        level.grid.add_portal(pos[0], pos[1], target)
        taken.append(pos)
        return pos

    def _place_stairs(self, level: Level) -> None:
        rooms = level.rooms
        lid, info = self.level_id, self.info
        toward_surface, deeper = (
            (TileType.STAIRS_DOWN, TileType.STAIRS_UP) if info.ascending else (TileType.STAIRS_UP, TileType.STAIRS_DOWN)
        )
        surface_target = LevelID(lid.branch, lid.depth - 1) if lid.depth > 1 else info.entry_level
        deeper_target = LevelID(lid.branch, lid.depth + 1) if lid.depth < info.num_levels else None
        taken: List[Coord] = []

        level.start_pos = rooms[0].center
        if surface_target is not None:
            pos = self._put_stairs(level, rooms[0], toward_surface, surface_target, taken)
            level.start_pos = pos
            self._record(level, toward_surface, pos)
        if deeper_target is not None:
            pos = self._put_stairs(level, rooms[-1], deeper, deeper_target, taken)
            self._record(level, deeper, pos)

        for child in self.branches.values():
            if child.entry_level != lid:
                continue
            room = rooms[self.rng.rn2(len(rooms) - 2) + 1] if len(rooms) > 2 else rooms[0]
            kind = TileType.STAIRS_UP if child.ascending else TileType.STAIRS_DOWN
            target = LevelID(child.branch, 1)
            level.branch_stairs[target] = self._put_stairs(level, room, kind, target, taken)

    @staticmethod
    def _record(level: Level, kind: TileType, pos: Coord) -> None:
        if kind == TileType.STAIRS_UP:
            level.up_stairs = pos
        else:
            level.down_stairs = pos

    def _decorate(self, level: Level) -> None:
        if level.level_type == LevelType.BIGROOM:
            place_fountains(level.grid, level.rooms[0], self.rng, self.metrics)
        elif level.level_type not in (LevelType.MAZE, LevelType.MINES):
            place_fixtures(level.grid, level.rooms, self.rng, self.depth, self.metrics)
            stair_rooms = set()
            for x, y in level.grid.portals:
                stair_rooms.add(level.grid.locations[x][y].roomno)
            assign_room_types(level.rooms, self.rng, self.depth, stair_rooms)
        if level.level_type != LevelType.SOKOBAN:
            place_traps(level.grid, self.rng, self.depth, self.metrics)


def generate_level(
    level_id: LevelID,
    rng: Rng,
    config: Optional[DungeonConfig] = None,
    branches: Optional[Dict[DungeonBranch, BranchInfo]] = None,
) -> Level:
    return LevelGenerator(level_id, rng, config, branches).run()


__all__ = ["LevelType", "Level", "LevelGenerator", "generate_level"]
