from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple

from ..utils.rng import Rng
from .config import DungeonConfig
from .grid import Grid
from .rect import NhRect, RectTracker, intersect
from .tiles import TileFlags, TileType


class RoomType(Enum):
    ORDINARY = "ordinary"
    SHOP = "shop"
    ZOO = "zoo"
    MORGUE = "morgue"


@dataclass
class Room:
    """A placed room. ``lx..hx`` / ``ly..hy`` are the floor (interior) bounds.

    Walls sit one cell outside the interior unless the room is irregular
    (maze chambers, open halls carved without a wall ring).
    """

    lx: int
    ly: int
    hx: int
    hy: int
    roomno: int = 0
    lit: bool = False
    rtype: RoomType = RoomType.ORDINARY
    irregular: bool = False
    doorct: int = 0

    @property
    def bounds(self) -> NhRect:
        if self.irregular:
            return NhRect(self.lx, self.ly, self.hx, self.hy)
        return NhRect(self.lx - 1, self.ly - 1, self.hx + 1, self.hy + 1)

    @property
    def center(self) -> Tuple[int, int]:
        return (self.lx + (self.hx - self.lx) // 2, self.ly + (self.hy - self.ly) // 2)

    @property
    def area(self) -> int:
        return (self.hx - self.lx + 1) * (self.hy - self.ly + 1)

    def cells(self) -> Iterator[Tuple[int, int]]:
        for ix in range(self.lx, self.hx + 1):
            for iy in range(self.ly, self.hy + 1):
                yield ix, iy

    def contains(self, x: int, y: int) -> bool:
        return self.lx <= x <= self.hx and self.ly <= y <= self.hy

    def somexy(self, rng: Rng) -> Tuple[int, int]:
        dx = self.hx - self.lx
        dy = self.hy - self.ly
        x = self.lx + dx // 2 if dx <= 2 else self.lx + 1 + rng.rn2(dx - 1)
        y = self.ly + dy // 2 if dy <= 2 else self.ly + 1 + rng.rn2(dy - 1)
        return (x, y)

    def to_dict(self) -> Dict:
        return {
            "id": self.roomno,
            "lx": self.lx,
            "ly": self.ly,
            "hx": self.hx,
            "hy": self.hy,
            "lit": self.lit,
            "type": self.rtype.value,
            "doors": self.doorct,
        }


def roll_lit(rng: Rng, depth: int) -> bool:
    return rng.rnd(1 + abs(depth)) < 11 and rng.rn2(77) != 0


def create_room(
    grid: Grid,
    tracker: RectTracker,
    rooms: List[Room],
    rng: Rng,
    config: DungeonConfig,
    depth: int,
    lit: Optional[bool] = None,
    metrics: Optional[Dict] = None,
) -> Optional[Room]:
    """Try to place one room inside a random free rectangle.

    Returns the placed (not yet stamped) room, or ``None`` once every
    attempt failed or the tracker ran dry.
    """
    width, height = grid.width, grid.height
    xlim, ylim = config.xlim, config.ylim
    rlit = roll_lit(rng, depth) if lit is None else lit
    for _ in range(config.room_attempts):
        r1 = tracker.rnd_rect(rng)
        if r1 is None:
            return None
        if metrics is not None:
            metrics["rooms_attempted"] += 1
        lx, ly, hx, hy = r1.as_tuple()
        dx = 2 + rng.rn2(12 if hx - lx > 28 else 8)
        dy = 2 + rng.rn2(4)
        if dx * dy > 50:
            dy = 50 // dx
        xborder = 2 * xlim if (lx > 0 and hx < width - 1) else xlim + 1
        yborder = 2 * ylim if (ly > 0 and hy < height - 1) else ylim + 1
        if hx - lx < dx + 3 + xborder or hy - ly < dy + 3 + yborder:
            continue
        xabs = lx + (xlim if lx > 0 else 3) + rng.rn2(hx - (lx if lx > 0 else 3) - dx - xborder + 1)
        yabs = ly + (ylim if ly > 0 else 2) + rng.rn2(hy - (ly if ly > 0 else 2) - dy - yborder + 1)
        # full-height rectangles: pull the room up so the map is not bottom-heavy
        if ly == 0 and hy >= height - 1 and (not rooms or rng.rn2(len(rooms)) == 0) and yabs + dy > height // 2:
            yabs = rng.rn1(3, 2)
            if len(rooms) < 4 and dy > 1:
                dy -= 1
        hix = min(xabs + dx, width - 3)
        hiy = min(yabs + dy, height - 3)
        if hix <= xabs or hiy <= yabs:
            continue
        room = Room(xabs, yabs, hix, hiy, lit=rlit)
        walls = room.bounds
        if any(intersect(walls, other.bounds) is not None for other in rooms):
            continue
        tracker.split_rects(r1, walls)
        return room
    return None


def make_rooms(
    grid: Grid,
    tracker: RectTracker,
    rng: Rng,
    config: DungeonConfig,
    depth: int,
    metrics: Optional[Dict] = None,
) -> List[Room]:
    """Place rooms until the cap is hit or a room cannot be placed.

    Rooms are sorted left to right, numbered from 1 and stamped onto the
    grid. A level always gets at least one room.
    """
    rooms: List[Room] = []
    while len(rooms) < config.max_rooms and tracker.count:
        room = create_room(grid, tracker, rooms, rng, config, depth, metrics=metrics)
        if room is None:
            break
        rooms.append(room)
    if not rooms:
        cx, cy = grid.width // 2, grid.height // 2
        rooms.append(Room(cx - 3, cy - 2, cx + 3, cy + 2, lit=True))
    rooms.sort(key=lambda r: (r.lx, r.ly))
    for i, room in enumerate(rooms, start=1):
        room.roomno = i
        stamp_room(grid, room)
    if metrics is not None:
        metrics["rooms_placed"] = len(rooms)
        metrics["rects_remaining"] = tracker.count
        metrics["rects_dropped"] = tracker.dropped
    return rooms


def stamp_room(grid: Grid, room: Room) -> None:
    """Write a room's walls and floor into the grid."""
    lit_flag = TileFlags.LIT if room.lit else TileFlags.NONE
    if not room.irregular:
        b = room.bounds
        for x in range(b.lx, b.hx + 1):
            for y in range(b.ly, b.hy + 1):
                tile = grid.get_tile_mut(x, y)
                if tile is None:
                    continue
                tile.typ = _wall_kind(b, x, y)
                tile.roomno = room.roomno
                tile.flags = lit_flag
                if tile.typ == TileType.HWALL or y in (b.ly, b.hy):
                    tile.flags |= TileFlags.HORIZONTAL
    for x, y in room.cells():
        tile = grid.get_tile_mut(x, y)
        if tile is None:
            continue
        tile.typ = TileType.ROOM
        tile.roomno = room.roomno
        tile.flags = lit_flag


def _wall_kind(b: NhRect, x: int, y: int) -> TileType:
    if x == b.lx:
        if y == b.ly:
            return TileType.TLCORNER
        if y == b.hy:
            return TileType.BLCORNER
        return TileType.VWALL
    if x == b.hx:
        if y == b.ly:
            return TileType.TRCORNER
        if y == b.hy:
            return TileType.BRCORNER
        return TileType.VWALL
    if y in (b.ly, b.hy):
        return TileType.HWALL
    return TileType.ROOM


__all__ = ["Room", "RoomType", "create_room", "make_rooms", "stamp_room", "roll_lit"]
