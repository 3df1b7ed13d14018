"""Terrain kinds, per-cell flags and the Tile container.

Integer values of ``TileType`` are stable; anything persisted or sent over
the wire refers to them by value.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum, IntFlag
from typing import Optional


class TileType(IntEnum):
    STONE = 0
    VWALL = 1
    HWALL = 2
    TLCORNER = 3
    TRCORNER = 4
    BLCORNER = 5
    BRCORNER = 6
    CROSSWALL = 7
    TUWALL = 8
    TDWALL = 9
    TLWALL = 10
    TRWALL = 11
    DBWALL = 12
    TREE = 13
    SDOOR = 14
    SCORR = 15
    POOL = 16
    MOAT = 17
    WATER = 18
    DRAWBRIDGE_UP = 19
    LAVAPOOL = 20
    IRONBARS = 21
    DOOR = 22
    CORR = 23
    ROOM = 24
    STAIRS_UP = 25
    LADDER = 26
    FOUNTAIN = 27
    THRONE = 28
    SINK = 29
    GRAVE = 30
    ALTAR = 31
    ICE = 32
    DRAWBRIDGE_DOWN = 33
    AIR = 34
    CLOUD = 35
    STAIRS_DOWN = 36
    HOLE = 37
    TRAPDOOR = 38

    @property
    def is_wall(self) -> bool:
        return TileType.VWALL <= self <= TileType.DBWALL

    @property
    def is_door(self) -> bool:
        return self in (TileType.DOOR, TileType.SDOOR)

    @property
    def is_stairs(self) -> bool:
        return self in (TileType.STAIRS_UP, TileType.STAIRS_DOWN, TileType.LADDER)

    @property
    def is_fixture(self) -> bool:
        return self in _FIXTURES

    @property
    def is_liquid(self) -> bool:
        return self in (TileType.POOL, TileType.MOAT, TileType.WATER, TileType.LAVAPOOL)

    @property
    def is_open_ground(self) -> bool:
        return self in _OPEN_GROUND


_FIXTURES = frozenset(
    {TileType.FOUNTAIN, TileType.THRONE, TileType.SINK, TileType.GRAVE, TileType.ALTAR}
)
_OPEN_GROUND = frozenset(
    {TileType.ROOM, TileType.CORR, TileType.ICE, TileType.AIR, TileType.CLOUD, TileType.DRAWBRIDGE_DOWN}
)


class TileFlags(IntFlag):
    NONE = 0
    LIT = 1
    WAS_LIT = 2
    HORIZONTAL = 4
    EDGE = 8
    SEARCHED = 16
    TRAPPED = 32


class DoorState(Enum):
    NO_DOOR = "no_door"
    BROKEN = "broken"
    OPEN = "open"
    CLOSED = "closed"
    LOCKED = "locked"


class EngraveType(Enum):
    DUST = "dust"
    BLOOD = "blood"
    SCRATCHED = "scratched"
    BURNED = "burned"
    ETCHED = "etched"

    @property
    def fades(self) -> bool:
        return self in (EngraveType.DUST, EngraveType.BLOOD)


@dataclass
class Engraving:
    text: str
    method: EngraveType = EngraveType.DUST
    age: int = 0

    def to_dict(self):
        return {"text": self.text, "method": self.method.value, "age": self.age}


SYMBOLS = {
    TileType.STONE: " ",
    TileType.VWALL: "|",
    TileType.HWALL: "-",
    TileType.TLCORNER: "-",
    TileType.TRCORNER: "-",
    TileType.BLCORNER: "-",
    TileType.BRCORNER: "-",
    TileType.CROSSWALL: "-",
    TileType.TUWALL: "-",
    TileType.TDWALL: "-",
    TileType.TLWALL: "|",
    TileType.TRWALL: "|",
    TileType.DBWALL: "|",
    TileType.TREE: "#",
    TileType.SCORR: " ",
    TileType.POOL: "}",
    TileType.MOAT: "}",
    TileType.WATER: "}",
    TileType.DRAWBRIDGE_UP: "#",
    TileType.LAVAPOOL: "}",
    TileType.IRONBARS: "#",
    TileType.CORR: "#",
    TileType.ROOM: ".",
    TileType.STAIRS_UP: "<",
    TileType.LADDER: "<",
    TileType.FOUNTAIN: "{",
    TileType.THRONE: "\\",
    TileType.SINK: "#",
    TileType.GRAVE: "|",
    TileType.ALTAR: "_",
    TileType.ICE: ".",
    TileType.DRAWBRIDGE_DOWN: ".",
    TileType.AIR: " ",
    TileType.CLOUD: "#",
    TileType.STAIRS_DOWN: ">",
    TileType.HOLE: "^",
    TileType.TRAPDOOR: "^",
}


class Tile:
    """One grid cell: terrain, flags, owning room and mutable extras."""

    __slots__ = ("typ", "flags", "roomno", "door_state", "engraving")

    def __init__(self, typ: TileType = TileType.STONE, flags: TileFlags = TileFlags.NONE, roomno: int = 0):
        self.typ = typ
        self.flags = flags
        self.roomno = roomno
        self.door_state: Optional[DoorState] = None
        self.engraving: Optional[Engraving] = None

    # --- flags -----------------------------------------------------------
    @property
    def lit(self) -> bool:
        return bool(self.flags & TileFlags.LIT)

    @lit.setter
    def lit(self, value: bool):
        if value:
            self.flags |= TileFlags.LIT
        else:
            if self.flags & TileFlags.LIT:
                self.flags |= TileFlags.WAS_LIT
            self.flags &= ~TileFlags.LIT

    def has_flag(self, flag: TileFlags) -> bool:
        return bool(self.flags & flag)

    def set_flag(self, flag: TileFlags, on: bool = True):
        if on:
            self.flags |= flag
        else:
            self.flags &= ~flag

    # --- doors -----------------------------------------------------------
    def make_door(self, state: DoorState = DoorState.NO_DOOR, secret: bool = False):
        self.typ = TileType.SDOOR if secret else TileType.DOOR
        self.door_state = state

    def open_door(self) -> bool:
        if self.typ != TileType.DOOR or self.door_state != DoorState.CLOSED:
            return False
        self.door_state = DoorState.OPEN
        return True

    def close_door(self) -> bool:
        if self.typ != TileType.DOOR or self.door_state != DoorState.OPEN:
            return False
        self.door_state = DoorState.CLOSED
        return True

    def lock_door(self) -> bool:
        if self.typ not in (TileType.DOOR, TileType.SDOOR) or self.door_state != DoorState.CLOSED:
            return False
        self.door_state = DoorState.LOCKED
        return True

    def unlock_door(self) -> bool:
        if self.door_state != DoorState.LOCKED:
            return False
        self.door_state = DoorState.CLOSED
        return True

    def break_door(self) -> bool:
        if self.typ != TileType.DOOR or self.door_state in (DoorState.NO_DOOR, DoorState.BROKEN):
            return False
        self.door_state = DoorState.BROKEN
        self.set_flag(TileFlags.TRAPPED, False)
        return True

    def reveal(self) -> bool:
        """Turn a secret door or corridor into its visible form."""
        if self.typ == TileType.SDOOR:
            self.typ = TileType.DOOR
            if self.door_state is None:
                self.door_state = DoorState.CLOSED
            return True
        if self.typ == TileType.SCORR:
            self.typ = TileType.CORR
            return True
        return False

    @property
    def blocks_movement(self) -> bool:
        """True for closed, locked or hidden doors."""
        if self.typ == TileType.SDOOR:
            return True
        return self.typ == TileType.DOOR and self.door_state in (DoorState.CLOSED, DoorState.LOCKED)

    # --- engravings ------------------------------------------------------
    def engrave(self, text: str, method: EngraveType = EngraveType.DUST) -> Engraving:
        self.engraving = Engraving(text=text, method=method)
        return self.engraving

    def wipe_engraving(self) -> bool:
        had = self.engraving is not None
        self.engraving = None
        return had

    # --- presentation ----------------------------------------------------
    @property
    def symbol(self) -> str:
        if self.typ == TileType.DOOR:
            if self.door_state in (DoorState.CLOSED, DoorState.LOCKED):
                return "+"
            if self.door_state == DoorState.OPEN:
                return "|"
            return "."
        if self.typ == TileType.SDOOR:
            return "-" if self.has_flag(TileFlags.HORIZONTAL) else "|"
        return SYMBOLS.get(self.typ, "?")

    def to_dict(self):
        out = {"type": self.typ.name.lower(), "flags": int(self.flags), "room": self.roomno}
        if self.door_state is not None:
            out["door"] = self.door_state.value
        if self.engraving is not None:
            out["engraving"] = self.engraving.to_dict()
        return out

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"Tile({self.typ.name}, flags={int(self.flags)}, room={self.roomno})"


__all__ = [
    "TileType",
    "TileFlags",
    "DoorState",
    "EngraveType",
    "Engraving",
    "Tile",
    "SYMBOLS",
]
