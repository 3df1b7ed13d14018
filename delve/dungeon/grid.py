"""Per-level tile matrix plus its portal table.

Tiles are stored column-major (``locations[x][y]``). Every accessor is
bounds-checked: out-of-range coordinates, negative ones included, read as
``None`` instead of raising.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Iterator, List, Optional, Tuple

from .config import COLNO, ROWNO
from .tiles import EngraveType, Tile, TileFlags, TileType

if TYPE_CHECKING:  # pragma: no cover
    from .levels import LevelID

Coord = Tuple[int, int]

LIGHT_RADIUS = 2


class Grid:
    def __init__(self, width: int = COLNO, height: int = ROWNO):
        self.width = width
        self.height = height
        self.locations: List[List[Tile]] = [[Tile() for _ in range(height)] for _ in range(width)]
        self.portals: Dict[Coord, "LevelID"] = {}

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def get_tile(self, x: int, y: int) -> Optional[Tile]:
        """Read access; ``None`` when (x, y) is outside the grid."""
        if not self.in_bounds(x, y):
            return None
        return self.locations[x][y]

    def get_tile_mut(self, x: int, y: int) -> Optional[Tile]:
        """Write access; same bounds contract as :meth:`get_tile`.

        Tiles are plain mutable objects so this returns the same reference;
        callers use it to signal intent to mutate.
        """
        if not self.in_bounds(x, y):
            return None
        return self.locations[x][y]

    def set_type(self, x: int, y: int, typ: TileType, roomno: Optional[int] = None) -> bool:
        tile = self.get_tile_mut(x, y)
        if tile is None:
            return False
        tile.typ = typ
        if roomno is not None:
            tile.roomno = roomno
        return True

    def tiles(self) -> Iterator[Tuple[int, int, Tile]]:
        """Yield ``(x, y, tile)`` in column-major order."""
        for x in range(self.width):
            column = self.locations[x]
            for y in range(self.height):
                yield x, y, column[y]

    def find_first(self, typ: TileType) -> Optional[Coord]:
        for x, y, tile in self.tiles():
            if tile.typ == typ:
                return (x, y)
        return None

    def tiles_of_room(self, roomno: int) -> List[Coord]:
        return [(x, y) for x, y, tile in self.tiles() if tile.roomno == roomno]

    # --- lighting --------------------------------------------------------
    def light_room_at(self, x: int, y: int) -> int:
        """Light the room containing (x, y), or a 5x5 box around it.

        Room tiles (room id > 0) light every tile sharing that room id, walls
        included. Anywhere else only the radius-2 neighbourhood is lit,
        clipped to the grid. Returns the number of tiles touched.
        """
        tile = self.get_tile(x, y)
        if tile is None:
            return 0
        touched = 0
        if tile.roomno > 0:
            roomno = tile.roomno
            for _, _, t in self.tiles():
                if t.roomno == roomno:
                    t.lit = True
                    touched += 1
            return touched
        for lx in range(max(0, x - LIGHT_RADIUS), min(self.width, x + LIGHT_RADIUS + 1)):
            for ly in range(max(0, y - LIGHT_RADIUS), min(self.height, y + LIGHT_RADIUS + 1)):
                self.locations[lx][ly].lit = True
                touched += 1
        return touched

    def lit_count(self) -> int:
        return sum(1 for _, _, t in self.tiles() if t.flags & TileFlags.LIT)

    # --- portals ---------------------------------------------------------
    def add_portal(self, x: int, y: int, target: "LevelID") -> bool:
        if not self.in_bounds(x, y):
            return False
        self.portals[(x, y)] = target
        return True

    def portal_at(self, x: int, y: int) -> Optional["LevelID"]:
        return self.portals.get((x, y))

    def portal_to(self, target: "LevelID") -> Optional[Coord]:
        """First portal cell (in insertion order) leading to ``target``."""
        for pos, dest in self.portals.items():
            if dest == target:
                return pos
        return None

    # --- engravings ------------------------------------------------------
    def engrave(self, x: int, y: int, text: str, method: EngraveType = EngraveType.DUST) -> bool:
        tile = self.get_tile_mut(x, y)
        if tile is None or tile.typ.is_wall or tile.typ == TileType.STONE:
            return False
        tile.engrave(text, method)
        return True

    def age_engravings(self, turns: int = 1, fade_after: Optional[int] = None) -> int:
        """Age every engraving; dust and blood fade once older than ``fade_after``.

        Returns the number of engravings that faded.
        """
        faded = 0
        for _, _, tile in self.tiles():
            eng = tile.engraving
            if eng is None:
                continue
            eng.age += turns
            if fade_after is not None and eng.method.fades and eng.age > fade_after:
                tile.engraving = None
                faded += 1
        return faded

    # --- export ----------------------------------------------------------
    def to_ascii(self) -> str:
        rows = []
        for y in range(self.height):
            rows.append("".join(self.locations[x][y].symbol for x in range(self.width)).rstrip())
        return "\n".join(rows)

    def to_json(self) -> dict:
        return {
            "width": self.width,
            "height": self.height,
            "rows": [[int(self.locations[x][y].typ) for x in range(self.width)] for y in range(self.height)],
            "portals": [
                {"x": x, "y": y, "branch": dest.branch.name, "depth": dest.depth}
                for (x, y), dest in self.portals.items()
            ],
        }


__all__ = ["Grid", "Coord", "LIGHT_RADIUS"]
