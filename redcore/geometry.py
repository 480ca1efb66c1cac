"""Screen geometry types and small integer helpers."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class Point:
    """A pixel position."""

    x: int = 0
    y: int = 0


@dataclass
class Size:
    """A width and height in pixels."""

    width: int = 0
    height: int = 0


@dataclass
class Rect:
    """A rectangle given by its top-left point and its size."""

    point: Point = field(default_factory=Point)
    size: Size = field(default_factory=Size)


def _trunc_div(numerator: int, denominator: int) -> int:
    quotient = abs(numerator) // abs(denominator)
    return quotient if (numerator < 0) == (denominator < 0) else -quotient


def lerp(i: int, start: int, end: int, steps: int) -> int:
    """Interpolate step ``i`` of ``steps`` from ``start`` to ``end`` with integer division."""
    return start + _trunc_div((end - start) * i, steps)


def sign(x: int) -> int:
    """Return -1 for negative numbers and 1 otherwise, zero included."""
    negative = int(x < 0)
    return 1 - 2 * negative