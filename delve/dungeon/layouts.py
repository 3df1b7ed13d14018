"""Alternate level layouts: the open big hall, the maze and the mines cave."""
from __future__ import annotations

from typing import Dict, List, Optional

from ..utils.rng import Rng
from .connectivity import flood_reachable
from .corridors import dig_corridor
from .grid import Grid
from .rect import intersect
from .rooms import Room, stamp_room
from .tiles import TileType

_MAZE_DIRS = [(0, -2), (2, 0), (0, 2), (-2, 0)]


def make_bigroom(grid: Grid) -> List[Room]:
    """One lit hall filling the grid inside a one-tile margin."""
    room = Room(2, 2, grid.width - 3, grid.height - 3, roomno=1, lit=True)
    stamp_room(grid, room)
    return [room]


def make_maze(grid: Grid, rng: Rng) -> List[Room]:
    """Recursive-backtracker maze over the even cells, plus two chambers.

    The start chamber sits in the top-left corner and the end chamber in the
    bottom-right; both are unwalled floor so they join the maze directly.
    """
    w, h = grid.width, grid.height

    def carvable(x: int, y: int) -> bool:
        return 1 < x < w - 2 and 1 < y < h - 2

    start = (2, 2)
    grid.set_type(*start, TileType.CORR)
    stack = [start]
    while stack:
        x, y = stack[-1]
        options = []
        for dx, dy in _MAZE_DIRS:
            nx, ny = x + dx, y + dy
            if carvable(nx, ny) and grid.locations[nx][ny].typ == TileType.STONE:
                options.append((nx, ny, dx, dy))
        if not options:
            stack.pop()
            continue
        nx, ny, dx, dy = options[rng.rn2(len(options))]
        grid.set_type(x + dx // 2, y + dy // 2, TileType.CORR)
        grid.set_type(nx, ny, TileType.CORR)
        stack.append((nx, ny))

    rooms = [
        Room(2, 2, 4, 4, roomno=1, irregular=True),
        Room(w - 5, h - 5, w - 3, h - 3, roomno=2, irregular=True),
    ]
    for room in rooms:
        stamp_room(grid, room)
    return rooms


def _carve_blob(grid: Grid, rng: Rng, x: int, y: int) -> None:
    w, h = grid.width, grid.height
    for _ in range(5 + rng.rn2(15)):
        for nx in range(x - 1, x + 2):
            for ny in range(y - 1, y + 2):
                if 0 < nx < w - 1 and 0 < ny < h - 1:
                    grid.set_type(nx, ny, TileType.CORR)
        x = min(max(x + rng.rn2(3) - 1, 2), w - 3)
        y = min(max(y + rng.rn2(3) - 1, 2), h - 3)


def make_mines(grid: Grid, rng: Rng, metrics: Optional[Dict] = None) -> List[Room]:
    """Gnomish-mines cave: random-walk blobs around a dark start room.

    Each blob is a short drunkard's walk stamping 3x3 patches of corridor.
    Blob origins clear of every other room become small unwalled chambers.
    Every origin is tunnelled to the start room, then any pocket still cut
    off is tunnelled the same way, so the cave is one region.
    """
    w, h = grid.width, grid.height
    origins = []
    for _ in range(15 + rng.rn2(10)):
        x, y = rng.rn2(w - 10) + 5, rng.rn2(h - 8) + 4
        origins.append((x, y))
        _carve_blob(grid, rng, x, y)

    cx, cy = w // 2, h // 2
    start = Room(cx - 2, cy - 2, cx + 2, cy + 2, lit=False)
    rooms = [start]
    for x, y in origins:
        chamber = Room(x - 1, y - 1, x + 1, y + 1, lit=False, irregular=True)
        if any(intersect(chamber.bounds, r.bounds) is not None for r in rooms):
            continue
        rooms.append(chamber)
    rooms.sort(key=lambda r: (r.lx, r.ly))
    for i, room in enumerate(rooms, start=1):
        room.roomno = i
        stamp_room(grid, room)

    hub = start.center
    tunnels = 0
    for origin in origins:
        dig_corridor(grid, origin, hub, rng)
        tunnels += 1
    while True:
        reachable = flood_reachable(grid, hub)
        strays = ((x, y) for x, y, tile in grid.tiles() if tile.typ == TileType.CORR and (x, y) not in reachable)
        stray = next(strays, None)
        if stray is None:
            break
        dig_corridor(grid, stray, hub, rng)
        tunnels += 1

    if metrics is not None:
        metrics["rooms_placed"] = len(rooms)
        metrics["corridors_dug"] += tunnels
    return rooms


__all__ = ["make_bigroom", "make_maze", "make_mines"]
