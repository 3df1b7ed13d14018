"""Room fixtures (fountains, sinks, altars, graves), special room types and floor traps.

Runs after stairs are placed so fixtures never land on a staircase.
"""
from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Tuple

from ..utils.rng import Rng
from .grid import Grid
from .rooms import Room, RoomType
from .tiles import TileFlags, TileType

Coord = Tuple[int, int]

FREE_CELL_TRIES = 20
TRAP_TRIES = 50


def free_floor_cell(grid: Grid, room: Room, rng: Rng, exclude: Iterable[Coord] = ()) -> Optional[Coord]:
    """A random interior floor cell with nothing on it, or ``None``.

    A few random picks first, then a scan of the room in column-major order.
    """
    excluded = set(exclude)

    def usable(pos: Coord) -> bool:
        tile = grid.get_tile(*pos)
        return tile is not None and tile.typ == TileType.ROOM and pos not in excluded and pos not in grid.portals

    for _ in range(FREE_CELL_TRIES):
        pos = room.somexy(rng)
        if usable(pos):
            return pos
    for pos in room.cells():
        if usable(pos):
            return pos
    return None


def _place(grid: Grid, room: Room, rng: Rng, typ: TileType, metrics: Optional[Dict]) -> bool:
    pos = free_floor_cell(grid, room, rng)
    if pos is None:
        return False
    grid.set_type(pos[0], pos[1], typ)
    if metrics is not None:
        metrics["fixtures"] += 1
    return True


def place_fixtures(grid: Grid, rooms: List[Room], rng: Rng, depth: int, metrics: Optional[Dict] = None) -> None:
    grave_odds = max(80 - depth * 2, 2)
    for room in rooms:
        if room.irregular:
            continue
        if rng.rn2(10) == 0:
            _place(grid, room, rng, TileType.FOUNTAIN, metrics)
        if rng.rn2(60) == 0:
            _place(grid, room, rng, TileType.SINK, metrics)
        if rng.rn2(60) == 0:
            _place(grid, room, rng, TileType.ALTAR, metrics)
        if rng.rn2(grave_odds) == 0:
            _place(grid, room, rng, TileType.GRAVE, metrics)


def place_fountains(grid: Grid, room: Room, rng: Rng, metrics: Optional[Dict] = None) -> None:
    for _ in range(rng.rn2(2) + 1):
        _place(grid, room, rng, TileType.FOUNTAIN, metrics)


def place_traps(grid: Grid, rng: Rng, depth: int, metrics: Optional[Dict] = None) -> int:
    """Arm ``depth // 4 + 2 + rn2(5)`` floor or corridor cells; returns how many.

    Each trap gets a fixed number of random picks; stairs, portals, fixtures
    and cells already trapped are skipped.
    """
    placed = 0
    for _ in range(max(abs(depth), 1) // 4 + 2 + rng.rn2(5)):
        for _ in range(TRAP_TRIES):
            x, y = rng.rn2(grid.width), rng.rn2(grid.height)
            tile = grid.locations[x][y]
            if tile.typ not in (TileType.ROOM, TileType.CORR) or tile.has_flag(TileFlags.TRAPPED):
                continue
            if (x, y) in grid.portals:
                continue
            tile.set_flag(TileFlags.TRAPPED, True)
            placed += 1
            break
    if metrics is not None:
        metrics["traps"] += placed
    return placed


def assign_room_types(rooms: List[Room], rng: Rng, depth: int, stair_rooms: Iterable[int] = ()) -> Optional[Room]:
    """Promote at most one room to a shop, zoo or morgue.

    Rooms holding stairs are never picked. Shops need exactly one door.
    Returns the promoted room, if any.
    """
    taken = set(stair_rooms)
    candidates = [r for r in rooms if r.roomno not in taken and not r.irregular]
    if not candidates:
        return None
    if depth > 1 and len(rooms) >= 3 and rng.rn2(depth) < 3:
        shops = [r for r in candidates if r.doorct == 1]
        if shops:
            room = shops[rng.rn2(len(shops))]
            room.rtype = RoomType.SHOP
            return room
    if depth > 6 and rng.rn2(7) == 0:
        room = candidates[rng.rn2(len(candidates))]
        room.rtype = RoomType.ZOO
        return room
    if depth > 11 and rng.rn2(6) == 0:
        room = candidates[rng.rn2(len(candidates))]
        room.rtype = RoomType.MORGUE
        return room
    return None


__all__ = ["free_floor_cell", "place_fixtures", "place_fountains", "assign_room_types", "place_traps"]
