"""Deterministic random engine.

A 64-bit linear congruential generator exposing the classic roguelike draw
primitives (``rn2``, ``rnd``, ``rn1``, ``d``, ``rne``, ``rnz``, ``rnl``).
The arithmetic is fixed: two engines seeded identically and driven through
the same sequence of calls produce the same values, which is what makes
seed sharing and replays work. Never reorder draws inside a generation step.

A second, 32-bit ``DisplayRng`` is provided for cosmetic draws (hallucinated
glyphs and the like) so they never perturb the gameplay stream.
"""

from __future__ import annotations

import hashlib
import random

MASK64 = (1 << 64) - 1
MASK32 = (1 << 32) - 1
LCG_MULTIPLIER = 6364136223846793005
LCG_INCREMENT = 1
DISPLAY_MULTIPLIER = 2739110765


def _to_i32(value: int) -> int:
    value &= MASK32
    return value - (1 << 32) if value & 0x80000000 else value


def _tdiv(a: int, b: int) -> int:
    """Integer division truncating toward zero."""
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b >= 0) else -q


class Rng:
    """Seeded engine with bit-exact draw contracts.

    Usage:
        rng = Rng(42)
        rng.rn2(10)   # 0..9
        rng.d(3, 6)   # 3d6
    """

    __slots__ = ("state",)

    def __init__(self, seed: int = 0):
        self.state = int(seed) & MASK64

    @classmethod
    def from_state(cls, state: int) -> "Rng":
        rng = cls.__new__(cls)
        rng.state = int(state) & MASK64
        return rng

    def _next(self) -> int:
        self.state = (self.state * LCG_MULTIPLIER + LCG_INCREMENT) & MASK64
        return self.state

    def rn2(self, x: int) -> int:
        """Uniform draw in ``[0, x)``; ``x <= 0`` yields 0 without advancing."""
        if x <= 0:
            return 0
        return _to_i32(self._next() % x)

    def rnd(self, x: int) -> int:
        return self.rn2(x) + 1

    def rn1(self, x: int, y: int) -> int:
        return self.rn2(x) + y

    def d(self, n: int, x: int) -> int:
        """Roll ``n`` dice of ``x`` sides. Invalid combinations roll 1."""
        if x < 0 or n < 0 or (x == 0 and n != 0):
            return 1
        tmp = n
        for _ in range(n):
            tmp += self.rn2(x)
        return tmp

    def rne(self, x: int, ulevel: int) -> int:
        utmp = 5 if ulevel < 15 else ulevel // 3
        tmp = 1
        while tmp < utmp and self.rn2(x) == 0:
            tmp += 1
        return tmp

    def rnz(self, i: int, ulevel: int) -> int:
        """Fuzz ``i`` up or down by a level-scaled factor."""
        x = i
        tmp = 1000 + self.rn2(1000)
        tmp *= self.rne(4, ulevel)
        if self.rn2(2) == 0:
            x = _tdiv(x * tmp, 1000)
        else:
            x = _tdiv(x * 1000, tmp)
        return _to_i32(x)

    def rnl(self, x: int, luck: int = 0) -> int:
        """Luck-adjusted ``rn2``: good luck pulls the result toward 0."""
        if x <= 15:
            adjustment = (abs(luck) + 1) // 3
            if luck < 0:
                adjustment = -adjustment
        else:
            adjustment = luck
        i = self.rn2(x)
        if adjustment != 0 and self.rn2(37 + abs(adjustment)) != 0:
            i -= adjustment
            if i < 0:
                i = 0
            elif i >= x:
                i = x - 1
        return i

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"Rng(state={self.state:#018x})"


class DisplayRng:
    """Display-only 32-bit stream; never consulted by generation."""

    __slots__ = ("seed",)

    def __init__(self, seed: int = 1):
        self.seed = int(seed) & MASK32

    def rn2(self, x: int) -> int:
        if x <= 0:
            return 0
        self.seed = (self.seed * DISPLAY_MULTIPLIER) & MASK32
        return (self.seed >> 16) % x


def coerce_seed(value) -> int:
    """Convert an int or str seed into a non-negative 64-bit integer.

    Digit strings are parsed; other strings are hashed with SHA-256 so a
    human-friendly phrase always maps to the same dungeon. ``None`` or an
    empty string picks a fresh random seed.
    """
    if value is None:
        return random.randint(1, 1_000_000)
    if isinstance(value, bool):
        value = int(value)
    if isinstance(value, int):
        return value & MASK64
    if isinstance(value, str):
        s = value.strip()
        if not s:
            return random.randint(1, 1_000_000)
        if s.isdigit():
            return int(s) & MASK64
        digest = hashlib.sha256(s.encode("utf-8")).digest()
        return int.from_bytes(digest[:8], "big")
    raise TypeError(f"unsupported seed type: {type(value).__name__}")


__all__ = ["Rng", "DisplayRng", "coerce_seed", "MASK64"]
