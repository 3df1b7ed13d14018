"""Corridor digging and door cutting between placed rooms.

Rooms are joined pairwise: a door cell is picked on each room's facing wall
and an L-shaped corridor is dug between the cells just outside the two
doors. A union-find label per room tracks which rooms are already connected
so the sweep can join whatever is still isolated.

Optional extra corridors ("nxcor") add loops; they may dead-end and then
cut no doors.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from ..utils.rng import Rng
from .grid import Grid
from .rooms import Room
from .tiles import DoorState, TileFlags, TileType

Coord = Tuple[int, int]

DEAD_END_CHANCE = 35


def finddpos(rng: Rng, xl: int, yl: int, xh: int, yh: int) -> Coord:
    """Pick a door position on the wall segment (xl, yl)-(xh, yh)."""
    return (rng.rn1(xh - xl + 1, xl), rng.rn1(yh - yl + 1, yl))


def roll_door(rng: Rng, depth: int) -> Tuple[DoorState, bool, bool]:
    """Return ``(state, secret, trapped)`` for a freshly cut door."""
    if rng.rn2(8) == 0:
        state = DoorState.LOCKED if rng.rn2(5) == 0 else DoorState.CLOSED
        trapped = depth >= 5 and rng.rn2(25) == 0
        return state, True, trapped
    if rng.rn2(3) == 0:
        if rng.rn2(5) == 0:
            state = DoorState.OPEN
        elif rng.rn2(6) == 0:
            state = DoorState.LOCKED
        else:
            state = DoorState.CLOSED
        trapped = state != DoorState.OPEN and depth >= 5 and rng.rn2(25) == 0
        return state, False, trapped
    return DoorState.NO_DOOR, False, False


def dodoor(grid: Grid, x: int, y: int, room: Room, rng: Rng, depth: int, metrics: Optional[Dict] = None) -> bool:
    tile = grid.get_tile_mut(x, y)
    if tile is None or tile.typ.is_door:
        return False
    state, secret, trapped = roll_door(rng, depth)
    tile.make_door(state, secret=secret)
    tile.set_flag(TileFlags.TRAPPED, trapped)
    room.doorct += 1
    if metrics is not None:
        metrics["doors_created"] += 1
        if secret:
            metrics["secret_doors"] += 1
    return True


def _dig_cell(grid: Grid, x: int, y: int) -> None:
    tile = grid.get_tile_mut(x, y)
    if tile is None:
        return
    if tile.typ in (TileType.STONE, TileType.SCORR):
        tile.typ = TileType.CORR
    elif tile.typ.is_wall:
        if tile.roomno > 0:
            tile.make_door(DoorState.NO_DOOR)
        else:
            tile.typ = TileType.CORR


def l_path(org: Coord, dest: Coord, horizontal_first: bool) -> List[Coord]:
    """Cells of an L-shaped walk from ``org`` to ``dest``, both inclusive."""
    (x, y), (tx, ty) = org, dest
    cells = [(x, y)]
    legs = ("x", "y") if horizontal_first else ("y", "x")
    for axis in legs:
        if axis == "x":
            while x != tx:
                x += 1 if tx > x else -1
                cells.append((x, y))
        else:
            while y != ty:
                y += 1 if ty > y else -1
                cells.append((x, y))
    return cells


def dig_corridor(grid: Grid, org: Coord, dest: Coord, rng: Rng, nxcor: bool = False) -> bool:
    """Dig from ``org`` to ``dest``; False when an extra corridor gave up early."""
    horizontal_first = rng.rn2(2) == 0
    for x, y in l_path(org, dest, horizontal_first):
        if nxcor and rng.rn2(DEAD_END_CHANCE) == 0:
            return False
        _dig_cell(grid, x, y)
    return True


def join(
    grid: Grid,
    rooms: List[Room],
    a: int,
    b: int,
    rng: Rng,
    depth: int,
    nxcor: bool = False,
    smeq: Optional[List[int]] = None,
    metrics: Optional[Dict] = None,
) -> bool:
    croom, troom = rooms[a], rooms[b]
    if a == b or croom.irregular or troom.irregular:
        return False
    if troom.lx > croom.hx:
        dx, dy = 1, 0
        dd = finddpos(rng, croom.hx + 1, croom.ly, croom.hx + 1, croom.hy)
        tt = finddpos(rng, troom.lx - 1, troom.ly, troom.lx - 1, troom.hy)
    elif troom.hy < croom.ly:
        dx, dy = 0, -1
        dd = finddpos(rng, croom.lx, croom.ly - 1, croom.hx, croom.ly - 1)
        tt = finddpos(rng, troom.lx, troom.hy + 1, troom.hx, troom.hy + 1)
    elif troom.hx < croom.lx:
        dx, dy = -1, 0
        dd = finddpos(rng, croom.lx - 1, croom.ly, croom.lx - 1, croom.hy)
        tt = finddpos(rng, troom.hx + 1, troom.ly, troom.hx + 1, troom.hy)
    else:
        dx, dy = 0, 1
        dd = finddpos(rng, croom.lx, croom.hy + 1, croom.hx, croom.hy + 1)
        tt = finddpos(rng, troom.lx, troom.ly - 1, troom.hx, troom.ly - 1)
    org = (dd[0] + dx, dd[1] + dy)
    dest = (tt[0] - dx, tt[1] - dy)

    if not dig_corridor(grid, org, dest, rng, nxcor=nxcor):
        if metrics is not None:
            metrics["dead_ends"] += 1
        return False
    if metrics is not None:
        metrics["corridors_dug"] += 1
    dodoor(grid, dd[0], dd[1], croom, rng, depth, metrics)
    dodoor(grid, tt[0], tt[1], troom, rng, depth, metrics)
    if smeq is not None:
        _merge(smeq, a, b)
    return True


def _merge(smeq: List[int], a: int, b: int) -> None:
    la, lb = smeq[a], smeq[b]
    if la == lb:
        return
    lo, hi = min(la, lb), max(la, lb)
    for i, label in enumerate(smeq):
        if label == hi:
            smeq[i] = lo


def make_corridors(
    grid: Grid,
    rooms: List[Room],
    rng: Rng,
    depth: int,
    extra: bool = True,
    metrics: Optional[Dict] = None,
) -> List[int]:
    """Connect every room; returns the final connectivity labels."""
    n = len(rooms)
    smeq = list(range(n))
    for a in range(n - 1):
        join(grid, rooms, a, a + 1, rng, depth, smeq=smeq, metrics=metrics)
        if rng.rn2(50) == 0:
            break
    for a in range(n - 2):
        if smeq[a] != smeq[a + 2]:
            join(grid, rooms, a, a + 2, rng, depth, smeq=smeq, metrics=metrics)
    for b in range(1, n):
        if smeq[b] != smeq[0]:
            join(grid, rooms, 0, b, rng, depth, smeq=smeq, metrics=metrics)
    if extra and n > 2:
        for _ in range(rng.rn2(n) + 4):
            a = rng.rn2(n)
            b = rng.rn2(n - 2)
            if b >= a:
                b += 2
            join(grid, rooms, a, b, rng, depth, nxcor=True, smeq=smeq, metrics=metrics)
    return smeq


__all__ = ["finddpos", "roll_door", "dodoor", "dig_corridor", "join", "make_corridors", "l_path"]
