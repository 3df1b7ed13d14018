"""Reachability checks over a generated level.

Generation is expected to leave every room reachable; these helpers exist so
the generator can record (and loudly log) a breach, and so tests can assert
the invariant directly.
"""
from __future__ import annotations

from collections import deque
from typing import Iterable, List, Set, Tuple

from .grid import Grid
from .pathfinding import NEIGHBOURS, CanPass, is_passable
from .rooms import Room

Coord = Tuple[int, int]


def flood_reachable(grid: Grid, start: Coord, can_pass: CanPass = is_passable) -> Set[Coord]:
    """8-connected flood fill from ``start`` over cells accepted by ``can_pass``."""
    if not grid.in_bounds(*start):
        return set()
    visited = {start}
    q = deque([start])
    while q:
        cx, cy = q.popleft()
        for dx, dy in NEIGHBOURS:
            nx, ny = cx + dx, cy + dy
            if (nx, ny) in visited or not grid.in_bounds(nx, ny):
                continue
            if can_pass(grid, nx, ny):
                visited.add((nx, ny))
                q.append((nx, ny))
    return visited


def unreachable_rooms(grid: Grid, rooms: List[Room], can_pass: CanPass = is_passable) -> List[int]:
    """Room ids whose center cannot be reached from the first room's center."""
    if not rooms:
        return []
    reachable = flood_reachable(grid, rooms[0].center, can_pass)
    return [r.roomno for r in rooms if r.center not in reachable]


def all_connected(grid: Grid, points: Iterable[Coord], can_pass: CanPass = is_passable) -> bool:
    pts = list(points)
    if len(pts) < 2:
        return True
    reachable = flood_reachable(grid, pts[0], can_pass)
    return all(p in reachable for p in pts[1:])


__all__ = ["flood_reachable", "unreachable_rooms", "all_connected"]
