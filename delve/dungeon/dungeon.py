"""
project: Delve
module: dungeon.py
License: MIT

The dungeon (world manager): sole owner of the random engine, the branch
table and every level generated so far.

Only one level is active at a time. Levels already visited stay in
``self.levels`` keyed by :class:`LevelID`, so returning to one finds doors,
lighting and engravings exactly as they were left. New levels are generated
lazily, on first entry, with the shared engine; the same seed and the same
sequence of level changes therefore always yield the same dungeon.

Typical turn:
    change = dungeon.stair_change(*dungeon.player_pos)   # player used stairs
    if change:
        dungeon.change_level(change)
    dungeon.advance_turn()
"""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from ..logging_utils import get_logger
from ..utils.rng import Rng, coerce_seed
from .config import DungeonConfig
from .generator import Level, generate_level
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
    describe_level,
    short_level_name,
    special_level_name,
)
from .pathfinding import is_passable
from .tiles import TileType

log = get_logger("delve.dungeon")

Coord = Tuple[int, int]


class Dungeon:
    def __init__(
        self,
        seed=None,
        config: Optional[DungeonConfig] = None,
        branches: Optional[Dict[DungeonBranch, BranchInfo]] = None,
        start: LevelID = MAIN_TOP,
    ):
        self.config = config or DungeonConfig()
        self.seed = coerce_seed(self.config.seed if seed is None else seed)
        self.rng = Rng(self.seed)
        self.branches: Dict[DungeonBranch, BranchInfo] = dict(branches or DEFAULT_BRANCHES)
        self.levels: Dict[LevelID, Level] = {}
        self.difficulty_offset = 0
        self.amulet_obtained = False
        self.deepest_reached = 0
        self.turn = 0
        if not self.is_valid_level(start):
            raise ValueError(f"start level {start} is outside the branch table")
        self.current_level = start
        self.player_pos: Coord = self._ensure_level(start).start_pos
        self.update_deepest()
        log.info(event="dungeon_created", seed=self.seed, start=str(start))

    # --- level cache -----------------------------------------------------
    @property
    def current(self) -> Level:
        return self.levels[self.current_level]

    def get_level(self, level_id: LevelID) -> Optional[Level]:
        return self.levels.get(level_id)

    def set_level(self, level: Level) -> None:
        self.levels[level.level_id] = level

    def level_exists(self, level_id: LevelID) -> bool:
        return level_id in self.levels

    def all_level_ids(self) -> List[LevelID]:
        return sorted(self.levels)

    def num_explored_levels(self) -> int:
        return len(self.levels)

    def _ensure_level(self, level_id: LevelID) -> Level:
        level = self.levels.get(level_id)
        if level is None:
            level = generate_level(level_id, self.rng, self.config, self.branches)
            self.levels[level_id] = level
            log.info(
                event="level_generated",
                level_id=str(level_id),
                type=level.level_type.value,
                rooms=len(level.rooms),
                runtime_ms=level.metrics.get("runtime_ms"),
            )
        return level

    # --- branch / depth queries -------------------------------------------
    def branch_info(self, branch: Optional[DungeonBranch] = None) -> Optional[BranchInfo]:
        return self.branches.get(branch or self.current_level.branch)

    def branch_name(self, branch: DungeonBranch) -> str:
        info = self.branches.get(branch)
        return info.name if info else "Unknown"

    def is_valid_level(self, level_id: LevelID) -> bool:
        info = self.branches.get(level_id.branch)
        return info is not None and 1 <= level_id.depth <= info.num_levels

    def level_depth(self, level_id: LevelID) -> int:
        info = self.branches.get(level_id.branch)
        return info.absolute_depth(level_id.depth) if info else level_id.depth

    def current_depth(self) -> int:
        return self.level_depth(self.current_level)

    def level_difficulty(self, player_level: int = 1) -> int:
        diff = self.current_depth() + player_level // 5 + self.difficulty_offset
        if self.amulet_obtained:
            diff += 5
        return max(diff, 1)

    def in_hell(self) -> bool:
        info = self.branch_info()
        return bool(info and info.is_hellish)

    def in_quest(self) -> bool:
        return self.current_level.branch == DungeonBranch.QUEST

    def in_mines(self) -> bool:
        return self.current_level.branch == DungeonBranch.MINES

    def in_sokoban(self) -> bool:
        return self.current_level.branch == DungeonBranch.SOKOBAN

    def on_tower(self) -> bool:
        return self.current_level.branch == DungeonBranch.VLAD_TOWER

    def update_deepest(self) -> None:
        self.deepest_reached = max(self.deepest_reached, self.current_depth())

    def next_level_down(self) -> Optional[LevelID]:
        lid = self.current_level
        candidate = LevelID(lid.branch, lid.depth + 1)
        return candidate if self.is_valid_level(candidate) else None

    def next_level_up(self) -> Optional[LevelID]:
        lid = self.current_level
        if lid.depth > 1:
            return LevelID(lid.branch, lid.depth - 1)
        info = self.branch_info()
        return info.entry_level if info else None

    def at_branch_bottom(self) -> bool:
        info = self.branch_info()
        return info is None or self.current_level.depth >= info.num_levels

    def at_branch_top(self) -> bool:
        return self.current_level.depth <= 1

    def special_level_name(self, level_id: Optional[LevelID] = None) -> Optional[str]:
        return special_level_name(level_id or self.current_level, self.branches)

    def describe_level(self, level_id: Optional[LevelID] = None) -> str:
        return describe_level(level_id or self.current_level, self.branches)

    def describe_current(self) -> str:
        return describe_level(self.current_level, self.branches)

    def short_level_name(self) -> str:
        return short_level_name(self.current_level, self.branches)

    # --- transitions -------------------------------------------------------
    def stair_change(self, x: Optional[int] = None, y: Optional[int] = None) -> Optional[LevelChange]:
        """Translate "use the stairs at (x, y)" into a LevelChange.

        A portal on the cell wins and lands on the matching connection;
        otherwise plain stairs mean the generic next/previous depth.
        """
        if x is None or y is None:
            x, y = self.player_pos
        grid = self.current.grid
        tile = grid.get_tile(x, y)
        if tile is None:
            return None
        target = grid.portal_at(x, y)
        if target is not None:
            return LevelChange.teleport(target, Landing.connection(self.current_level))
        if tile.typ == TileType.STAIRS_DOWN:
            return LevelChange.next_level()
        if tile.typ in (TileType.STAIRS_UP, TileType.LADDER):
            return LevelChange.prev_level()
        return None

    def use_stairs(self, x: Optional[int] = None, y: Optional[int] = None) -> Optional[Tuple[LevelID, Coord]]:
        change = self.stair_change(x, y)
        if change is None:
            return None
        return self.change_level(change)

    def _target_for(self, change: LevelChange) -> Optional[LevelID]:
        lid = self.current_level
        if change.kind == ChangeKind.NEXT_LEVEL:
            return LevelID(lid.branch, lid.depth + 1)
        if change.kind == ChangeKind.PREV_LEVEL:
            return LevelID(lid.branch, lid.depth - 1)
        return change.target

    def change_level(self, change: LevelChange) -> Optional[Tuple[LevelID, Coord]]:
        """Make the target of ``change`` the active level.

        Returns ``(level_id, landing position)`` or ``None`` when the target
        does not exist (above the top, below the bottom, unknown branch); the
        active level is unchanged in that case.
        """
        target = self._target_for(change)
        if target is None or not self.is_valid_level(target):
            log.info(event="level_change_rejected", level_id=str(self.current_level), change=change.kind.value)
            return None
        source = self.current_level
        level = self._ensure_level(target)

        if change.kind == ChangeKind.TELEPORT:
            pos = self.resolve_landing(level, change.landing or Landing.random(), source)
        else:
            stairs = Landing.stairs_up() if change.kind == ChangeKind.NEXT_LEVEL else Landing.stairs_down()
            pos = level.grid.portal_to(source) or self.resolve_landing(level, stairs, source)

        self.current_level = target
        self.player_pos = pos
        self.update_deepest()
        log.info(
            event="level_change",
            source=str(source),
            target=str(target),
            kind=change.kind.value,
            x=pos[0],
            y=pos[1],
        )
        return target, pos

    def resolve_landing(self, level: Level, landing: Landing, source: Optional[LevelID] = None) -> Coord:
        """Arrival coordinate on ``level``; falls back to the level's start."""
        grid = level.grid
        pos: Optional[Coord] = None
        if landing.kind == LandingType.STAIRS_UP:
            pos = level.up_stairs or grid.find_first(TileType.STAIRS_UP)
        elif landing.kind == LandingType.STAIRS_DOWN:
            pos = level.down_stairs or grid.find_first(TileType.STAIRS_DOWN)
        elif landing.kind == LandingType.COORDINATE:
            if landing.coord is not None and grid.in_bounds(*landing.coord):
                pos = landing.coord
        elif landing.kind == LandingType.RANDOM:
            for _ in range(self.config.landing_attempts):
                x = self.rng.rn2(grid.width)
                y = self.rng.rn2(grid.height)
                if is_passable(grid, x, y):
                    pos = (x, y)
                    break
        elif landing.kind == LandingType.CONNECTION:
            src = landing.source or source
            if src is not None:
                pos = grid.portal_to(src)
        return pos or level.start_pos

    # --- per-turn upkeep ---------------------------------------------------
    def advance_turn(self, turns: int = 1) -> int:
        """Advance the clock; engravings on the active level age and may fade."""
        self.turn += turns
        return self.current.grid.age_engravings(turns, fade_after=self.config.engraving_fade_turns)

    def light_at(self, x: int, y: int) -> int:
        return self.current.grid.light_room_at(x, y)

    def to_json(self) -> dict:
        return {
            "seed": self.seed,
            "turn": self.turn,
            "current": str(self.current_level),
            "description": self.describe_current(),
            "short_name": self.short_level_name(),
            "player": list(self.player_pos),
            "deepest_reached": self.deepest_reached,
            "levels": [str(lid) for lid in self.all_level_ids()],
        }


__all__ = ["Dungeon"]
