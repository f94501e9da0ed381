"""Precalculated trigonometric tables."""

from __future__ import annotations

import math
from typing import ClassVar, Optional

PI = math.pi
PI2 = PI / 2
PI4 = PI / 4
_FULL_TURN = 2 * PI


def _fast_arctan(x: float) -> float:
    return PI4 * x - x * (x - 1) * (0.2447 + 0.0663 * x)


class MathCache:
    """Shared table-based approximations of trigonometric functions."""

    PRECISION: ClassVar[int] = 16384
    _shared: ClassVar[Optional["MathCache"]] = None

    def __init__(self) -> None:
        p = self.PRECISION
        steps = range(p + 1)
        self._tan = [math.tan(i * PI4 / p) for i in steps]
        self._atan = [math.atan(i * PI4 / p) for i in steps]
        self._cos = [math.cos(i * _FULL_TURN / p) for i in steps]
        self._sin = [math.sin(i * _FULL_TURN / p) for i in steps]

    @classmethod
    def instance(cls) -> "MathCache":
        """Return the process-wide cache, building it on first use."""
        if cls._shared is None:
            cls._shared = cls()
        return cls._shared

    def _quarter_lookup(self, table: list[float], x: float) -> float:
        if not math.isfinite(x):
            return math.nan
        index = int(abs(x) / PI4 * self.PRECISION)
        value = table[index % (self.PRECISION + 1)]
        return -value if x < 0 else value

    def _turn_lookup(self, table: list[float], x: float) -> float:
        if not math.isfinite(x):
            return math.nan
        if x < _FULL_TURN:
            x += math.ceil((_FULL_TURN - x) / _FULL_TURN) * _FULL_TURN
        while x < _FULL_TURN:
            x += _FULL_TURN
        index = int(x / _FULL_TURN * self.PRECISION)
        return table[index % (self.PRECISION + 1)]

    def arctan(self, x: float) -> float:
        """Arc tangent from the table (accurate for ``|x| <= pi/4``)."""
        return self._quarter_lookup(self._atan, x)

    def arctan2(self, dy: float, dx: float) -> float:
        """Two-argument arc tangent using a fast polynomial approximation."""
        y, x = dy, dx
        if x == 1.0:
            return math.atan(y)
        m = 2 * int(x < 0) + int(y < 0)
        if y == 0:
            if m in (0, 1):
                return y
            return PI if m == 2 else -PI
        if x == 0:
            return -PI2 if m & 1 else PI2
        v = abs(y / x)
        z = _fast_arctan(v) if v < 1 else math.atan(v)
        if m == 0:
            return z
        if m == 1:
            return -z
        if m == 2:
            return PI - z
        return z - PI

    def cos(self, x: float) -> float:
        """Cosine from the table."""
        return self._turn_lookup(self._cos, x)

    def sin(self, x: float) -> float:
        """Sine from the table."""
        return self._turn_lookup(self._sin, x)

    def tan(self, x: float) -> float:
        """Tangent from the table (accurate for ``|x| <= pi/4``)."""
        return self._quarter_lookup(self._tan, x)