"""Integer grid points, rectangles and floating-point positions."""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class Point:
    """An integer point on the tile grid."""

    x: int = 0
    y: int = 0

    def add(self, other: Point) -> Point:
        return Point(self.x + other.x, self.y + other.y)

    def mul(self, k: int) -> Point:
        return Point(self.x * k, self.y * k)


ZERO_POINT = Point(0, 0)


@dataclass(frozen=True)
class Rect:
    """A rectangle spanning ``min`` inclusive to ``max`` exclusive."""

    min: Point = ZERO_POINT
    max: Point = ZERO_POINT

    def canon(self) -> Rect:
        """Return the rectangle with its corners ordered."""
        x0, x1 = sorted((self.min.x, self.max.x))
        y0, y1 = sorted((self.min.y, self.max.y))
        return Rect(Point(x0, y0), Point(x1, y1))

    def size(self) -> Point:
        return Point(self.max.x - self.min.x, self.max.y - self.min.y)

    def is_empty(self) -> bool:
        return self.min.x >= self.max.x or self.min.y >= self.max.y

    def overlaps(self, other: Rect) -> bool:
        """Whether the two rectangles share a non-empty area."""
        return (
            not self.is_empty()
            and not other.is_empty()
            and self.min.x < other.max.x
            and other.min.x < self.max.x
            and self.min.y < other.max.y
            and other.min.y < self.max.y
        )


def rect(x0: int, y0: int, x1: int, y1: int) -> Rect:
    """Build a rectangle from two corners in any order."""
    return Rect(Point(x0, y0), Point(x1, y1)).canon()


def _round_half_away(value: float) -> float:
    truncated = math.trunc(value)
    if abs(value - truncated) >= 0.5:
        truncated += 1 if value > 0 else -1
    return float(truncated)


def _sign(value: float) -> int:
    return (value > 0) - (value < 0)


@dataclass(frozen=True)
class PF:
    """A point with floating-point coordinates."""

    x: float = 0.0
    y: float = 0.0

    def image_point(self) -> Point:
        """Truncate towards zero to a grid point."""
        return Point(int(self.x), int(self.y))

    def add(self, other: PF) -> PF:
        return PF(self.x + other.x, self.y + other.y)

    def mul(self, a: float) -> PF:
        return PF(self.x * a, self.y * a)

    def step(self, target: PF) -> PF:
        """One grid step from the rounded position towards the rounded target."""
        start = self.round()
        goal = target.round()
        return PF(start.x + _sign(goal.x - start.x), start.y + _sign(goal.y - start.y))

    def round(self) -> PF:
        """Round each coordinate, halves away from zero."""
        return PF(_round_half_away(self.x), _round_half_away(self.y))

    def ints(self) -> tuple[int, int]:
        rounded = self.round()
        return int(rounded.x), int(rounded.y)

    def dist(self, target: PF) -> float:
        dx, dy = target.x - self.x, target.y - self.y
        return math.sqrt(dx * dx + dy * dy)


def to_pf(p: Point) -> PF:
    return PF(float(p.x), float(p.y))


def dist(p1: Point, p2: Point) -> float:
    """Euclidean distance between two grid points."""
    dx, dy = float(p2.x - p1.x), float(p2.y - p1.y)
    return math.sqrt(dx * dx + dy * dy)


def next_step(s: Point, target: Point) -> Point:
    """The neighbouring grid point one step from ``s`` towards ``target``."""
    return Point(s.x + _sign(target.x - s.x), s.y + _sign(target.y - s.y))