"""Free-space rectangle tracker.

Holds a bounded set of axis-aligned rectangles describing space still
available for room placement. When a room is placed, ``split_rects`` removes
the chosen rectangle, re-splits every other tracked rectangle that the room
clips, and keeps the residual strips that are still big enough to host a
room plus its corridor lane.

The set is capped (``max_rects``); candidates beyond the cap are dropped
silently, which only means fewer rooms later on.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, List, Optional

from .config import COLNO, MAXRECT, ROWNO, XLIM, YLIM

if TYPE_CHECKING:  # pragma: no cover
    from ..utils.rng import Rng


@dataclass(frozen=True)
class NhRect:
    lx: int
    ly: int
    hx: int
    hy: int

    @property
    def width(self) -> int:
        return self.hx - self.lx + 1

    @property
    def height(self) -> int:
        return self.hy - self.ly + 1

    def contains(self, other: "NhRect") -> bool:
        return self.lx <= other.lx and self.ly <= other.ly and self.hx >= other.hx and self.hy >= other.hy

    def as_tuple(self):
        return (self.lx, self.ly, self.hx, self.hy)


def intersect(r1: NhRect, r2: NhRect) -> Optional[NhRect]:
    """Overlap of two rectangles, or ``None`` when they do not meet."""
    if r2.lx > r1.hx or r2.ly > r1.hy or r2.hx < r1.lx or r2.hy < r1.ly:
        return None
    lx = max(r1.lx, r2.lx)
    ly = max(r1.ly, r2.ly)
    hx = min(r1.hx, r2.hx)
    hy = min(r1.hy, r2.hy)
    if lx > hx or ly > hy:
        return None
    return NhRect(lx, ly, hx, hy)


class RectTracker:
    """Bounded container of free rectangles.

    Removal swaps the last entry into the hole, so indices are not stable
    across removals; ``split_rects`` works from a snapshot for that reason.
    """

    def __init__(
        self,
        width: int = COLNO,
        height: int = ROWNO,
        max_rects: int = MAXRECT,
        xlim: int = XLIM,
        ylim: int = YLIM,
    ):
        self.width = width
        self.height = height
        self.max_rects = max_rects
        self.xlim = xlim
        self.ylim = ylim
        self.dropped = 0
        self.rects: List[NhRect] = []
        self.init_rect()

    def init_rect(self):
        self.rects = [NhRect(0, 0, self.width - 1, self.height - 1)]
        self.dropped = 0

    @property
    def count(self) -> int:
        return len(self.rects)

    def __len__(self) -> int:
        return len(self.rects)

    def get_rect_ind(self, r: NhRect) -> Optional[int]:
        for i, cur in enumerate(self.rects):
            if cur == r:
                return i
        return None

    def get_rect(self, r: NhRect) -> Optional[NhRect]:
        """First tracked rectangle that fully contains ``r``."""
        for cur in self.rects:
            if cur.contains(r):
                return cur
        return None

    def rnd_rect(self, rng: "Rng") -> Optional[NhRect]:
        if not self.rects:
            return None
        return self.rects[rng.rn2(len(self.rects))]

    def remove_rect(self, r: NhRect) -> None:
        ind = self.get_rect_ind(r)
        if ind is None:
            return
        last = self.rects.pop()
        if ind < len(self.rects):
            self.rects[ind] = last

    def add_rect(self, r: NhRect) -> bool:
        if len(self.rects) >= self.max_rects:
            self.dropped += 1
            return False
        if self.get_rect(r) is not None:
            return False
        self.rects.append(r)
        return True

    def split_rects(self, placed: NhRect, carved: NhRect) -> None:
        """Carve ``carved`` (a room's wall rectangle) out of ``placed``.

        Every other tracked rectangle overlapping ``carved`` is split
        recursively, visiting a snapshot from the highest index down. Residual
        strips of ``placed`` are kept only if wider than the margin needed for
        a minimal room; strips touching the grid edge need a smaller margin
        since no corridor lane runs along the boundary.
        """
        self.remove_rect(placed)
        snapshot = list(self.rects)
        for i in range(len(snapshot) - 1, -1, -1):
            overlap = intersect(snapshot[i], carved)
            if overlap is not None:
                self.split_rects(snapshot[i], overlap)

        xlim, ylim = self.xlim, self.ylim
        max_x, max_y = self.width - 1, self.height - 1

        if carved.ly - placed.ly - 1 > (2 * ylim if placed.hy < max_y else ylim + 1) + 4:
            self.add_rect(replace(placed, hy=carved.ly - 2))
        if carved.lx - placed.lx - 1 > (2 * xlim if placed.hx < max_x else xlim + 1) + 4:
            self.add_rect(replace(placed, hx=carved.lx - 2))
        if placed.hy - carved.hy - 1 > (2 * ylim if placed.ly > 0 else ylim + 1) + 4:
            self.add_rect(replace(placed, ly=carved.hy + 2))
        if placed.hx - carved.hx - 1 > (2 * xlim if placed.lx > 0 else xlim + 1) + 4:
            self.add_rect(replace(placed, lx=carved.hx + 2))


__all__ = ["NhRect", "RectTracker", "intersect"]
