"""Shortest paths over a Grid with 8-directional unit-cost movement.

``PathFinder.find_path`` is stateless and cheap enough to be called once per
agent per turn. Passability is decided by the caller's predicate, except that
the goal cell is always enterable, so an agent can path onto an occupied or
otherwise blocked destination and let the caller decide what arrival means.
"""

from __future__ import annotations

import heapq
from typing import Callable, Dict, List, Optional, Tuple

from .grid import Grid
from .tiles import TileType

Coord = Tuple[int, int]
CanPass = Callable[[Grid, int, int], bool]

NEIGHBOURS = [(dx, dy) for dx in (-1, 0, 1) for dy in (-1, 0, 1) if (dx, dy) != (0, 0)]

_STRUCTURAL = frozenset(
    {
        TileType.ROOM,
        TileType.CORR,
        TileType.SCORR,
        TileType.DOOR,
        TileType.SDOOR,
        TileType.STAIRS_UP,
        TileType.STAIRS_DOWN,
        TileType.LADDER,
        TileType.FOUNTAIN,
        TileType.THRONE,
        TileType.SINK,
        TileType.GRAVE,
        TileType.ALTAR,
        TileType.ICE,
        TileType.DRAWBRIDGE_DOWN,
        TileType.AIR,
        TileType.CLOUD,
        TileType.HOLE,
        TileType.TRAPDOOR,
    }
)


def chebyshev(a: Coord, b: Coord) -> int:
    return max(abs(a[0] - b[0]), abs(a[1] - b[1]))


def is_passable(grid: Grid, x: int, y: int) -> bool:
    """Structural passability: floor, corridors, doors of any state, stairs."""
    tile = grid.get_tile(x, y)
    return tile is not None and tile.typ in _STRUCTURAL


def is_walkable_now(grid: Grid, x: int, y: int) -> bool:
    """Like :func:`is_passable` but closed, locked and hidden doors block."""
    tile = grid.get_tile(x, y)
    if tile is None or tile.typ not in _STRUCTURAL:
        return False
    if tile.typ == TileType.SCORR:
        return False
    return not tile.blocks_movement


class PathFinder:
    @staticmethod
    def find_path(
        grid: Grid,
        start: Coord,
        goal: Coord,
        can_pass: CanPass = is_passable,
        max_nodes: Optional[int] = None,
    ) -> Optional[List[Coord]]:
        """A* search from ``start`` to ``goal``.

        Returns the coordinates from ``start`` to ``goal`` inclusive, or
        ``None`` when the goal cannot be reached (or ``max_nodes`` expansions
        were spent). Open-set ties on ``g + h`` go to the larger position.
        """
        start = (int(start[0]), int(start[1]))
        goal = (int(goal[0]), int(goal[1]))
        if not (grid.in_bounds(*start) and grid.in_bounds(*goal)):
            return None
        if start == goal:
            return [start]

        width, height = grid.width, grid.height
        g_score: Dict[Coord, int] = {start: 0}
        came_from: Dict[Coord, Coord] = {}
        # (priority, -x, -y, cost): heapq is a min-heap, negated coords give larger-first ties
        open_heap = [(chebyshev(start, goal), -start[0], -start[1], 0)]
        expanded = 0

        while open_heap:
            _, nx_neg, ny_neg, cost = heapq.heappop(open_heap)
            pos = (-nx_neg, -ny_neg)
            if pos == goal:
                return _reconstruct(came_from, pos)
            if cost > g_score.get(pos, cost):
                continue
            expanded += 1
            if max_nodes is not None and expanded > max_nodes:
                return None
            x, y = pos
            for dx, dy in NEIGHBOURS:
                nx, ny = x + dx, y + dy
                if not (0 <= nx < width and 0 <= ny < height):
                    continue
                nxt = (nx, ny)
                if nxt != goal and not can_pass(grid, nx, ny):
                    continue
                tentative = cost + 1
                if tentative < g_score.get(nxt, tentative + 1):
                    came_from[nxt] = pos
                    g_score[nxt] = tentative
                    heapq.heappush(open_heap, (tentative + chebyshev(nxt, goal), -nx, -ny, tentative))
        return None


def _reconstruct(came_from: Dict[Coord, Coord], current: Coord) -> List[Coord]:
    path = [current]
    while current in came_from:
        current = came_from[current]
        path.append(current)
    path.reverse()
    return path


def find_path(grid: Grid, start: Coord, goal: Coord, can_pass: CanPass = is_passable, max_nodes: Optional[int] = None):
    return PathFinder.find_path(grid, start, goal, can_pass, max_nodes=max_nodes)


__all__ = ["PathFinder", "find_path", "chebyshev", "is_passable", "is_walkable_now", "NEIGHBOURS"]
