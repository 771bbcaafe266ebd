"""Basic 2D primitives shared by hit-testing, simplification and export.

- `Point`: immutable coordinate.
- `BBox`: axis-aligned bounds (min/max/center/size) of a point set.
- `distance_to_segment`: projection distance with clamped parameter.
- `polyline_path`: straight-join path data for live draft previews.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Iterable, Optional, Sequence


@dataclass(frozen=True)
class Point:
    x: float
    y: float

    def as_tuple(self) -> tuple[float, float]:
        return (float(self.x), float(self.y))

    def to_dict(self) -> dict[str, float]:
        return {"x": float(self.x), "y": float(self.y)}

    @staticmethod
    def from_any(v: Any) -> "Point":
        """Coerce dict {x,y}, (x, y) or Point into a Point."""
        if isinstance(v, Point):
            return v
        if isinstance(v, dict):
            return Point(float(v.get("x", 0.0)), float(v.get("y", 0.0)))
        return Point(float(v[0]), float(v[1]))


ORIGIN = Point(0.0, 0.0)


@dataclass(frozen=True)
class BBox:
    min: Point
    max: Point

    @property
    def center(self) -> Point:
        return Point((self.min.x + self.max.x) / 2.0, (self.min.y + self.max.y) / 2.0)

    @property
    def size(self) -> Point:
        return Point(self.max.x - self.min.x, self.max.y - self.min.y)

    def as_dict(self) -> dict[str, dict[str, float]]:
        return {
            "min": self.min.to_dict(),
            "max": self.max.to_dict(),
            "center": self.center.to_dict(),
            "size": self.size.to_dict(),
        }


def bounding_box(points: Iterable[Point]) -> BBox:
    """Bounds of `points`. An empty set yields a zero box at the origin."""
    pts = list(points)
    if not pts:
        return BBox(ORIGIN, ORIGIN)
    xs = [p.x for p in pts]
    ys = [p.y for p in pts]
    return BBox(Point(min(xs), min(ys)), Point(max(xs), max(ys)))


def distance(a: Point, b: Point) -> float:
    return math.hypot(b.x - a.x, b.y - a.y)


def distance_to_segment(p: Point, a: Point, b: Point) -> float:
    """Distance from `p` to the segment a-b (degenerate a == b -> distance to a)."""
    dx = b.x - a.x
    dy = b.y - a.y
    l2 = dx * dx + dy * dy
    if l2 == 0.0:
        return distance(p, a)
    t = ((p.x - a.x) * dx + (p.y - a.y) * dy) / l2
    t = max(0.0, min(1.0, t))
    return math.hypot(p.x - (a.x + t * dx), p.y - (a.y + t * dy))


def _fmt(v: float) -> str:
    # Enteros sin ".0" para que el d sea igual al que produce el editor.
    f = float(v)
    return str(int(f)) if f.is_integer() else repr(f)


def polyline_path(points: Sequence[Point]) -> str:
    """Path data with straight joins (`M x y L x y ...`)."""
    if not points:
        return ""
    head = f"M {_fmt(points[0].x)} {_fmt(points[0].y)}"
    tail = " ".join(f"L {_fmt(p.x)} {_fmt(p.y)}" for p in points[1:])
    return f"{head} {tail}" if tail else head


def nearest_segment_index(
    points: Sequence[Point],
    p: Point,
    *,
    closed: bool = False,
    threshold: float = 20.0,
) -> Optional[int]:
    """Insertion index for a new vertex near the polyline, or None.

    The closing segment (last -> first) is considered when `closed` and there
    are more than two points; a hit there appends at the end.
    """
    best_idx: Optional[int] = None
    best = float(threshold)
    for i in range(len(points) - 1):
        d = distance_to_segment(p, points[i], points[i + 1])
        if d < best:
            best = d
            best_idx = i + 1
    if closed and len(points) > 2:
        d = distance_to_segment(p, points[-1], points[0])
        if d < best:
            best_idx = len(points)
    return best_idx
