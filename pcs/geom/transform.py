"""Affine transform model: translate, rotation about a pivot, scale about a pivot.

Forward mapping of a base point `p` with pivot `c`:

    q = c + (p - c) * (sx, sy)          # scale about pivot
    r = c + R(rotation) * (q - c)       # rotate about pivot
    out = r + (x, y)                    # translate

`invert_transform` undoes the three steps in reverse order and is the exact
inverse (up to float error) as long as the scale is not degenerate.
The pivot is always `bbox_center(base points) + (px, py)`, where base points are
the untransformed geometry of the level the transform belongs to.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Any, Iterable, Optional, Sequence

from pcs.core.version import MIN_SCALE
from pcs.geom.primitives import Point, bounding_box


def guard_scale(s: float) -> float:
    """Clamp |s| to MIN_SCALE keeping the sign (0 -> +MIN_SCALE)."""
    s = float(s)
    if abs(s) < MIN_SCALE:
        return math.copysign(MIN_SCALE, s) if s != 0.0 else MIN_SCALE
    return s


@dataclass(frozen=True)
class Transform:
    x: float = 0.0
    y: float = 0.0
    rotation: float = 0.0  # grados
    scale: float = 1.0
    scale_x: Optional[float] = None
    scale_y: Optional[float] = None
    px: float = 0.0
    py: float = 0.0

    @property
    def sx(self) -> float:
        return float(self.scale if self.scale_x is None else self.scale_x)

    @property
    def sy(self) -> float:
        return float(self.scale if self.scale_y is None else self.scale_y)

    def is_identity(self) -> bool:
        return (
            self.x == 0.0
            and self.y == 0.0
            and self.rotation == 0.0
            and self.sx == 1.0
            and self.sy == 1.0
        )

    def with_changes(self, **changes: Any) -> "Transform":
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "x": float(self.x),
            "y": float(self.y),
            "rotation": float(self.rotation),
            "scale": float(self.scale),
            "px": float(self.px),
            "py": float(self.py),
        }
        if self.scale_x is not None:
            d["scale_x"] = float(self.scale_x)
        if self.scale_y is not None:
            d["scale_y"] = float(self.scale_y)
        return d

    @staticmethod
    def from_dict(d: Any) -> "Transform":
        """Acepta snake_case y camelCase (scaleX/scaleY)."""
        if not isinstance(d, dict):
            return Transform()
        sx = d.get("scale_x", d.get("scaleX"))
        sy = d.get("scale_y", d.get("scaleY"))
        return Transform(
            x=float(d.get("x", 0.0) or 0.0),
            y=float(d.get("y", 0.0) or 0.0),
            rotation=float(d.get("rotation", 0.0) or 0.0),
            scale=float(d.get("scale", 1.0) if d.get("scale") is not None else 1.0),
            scale_x=None if sx is None else float(sx),
            scale_y=None if sy is None else float(sy),
            px=float(d.get("px", 0.0) or 0.0),
            py=float(d.get("py", 0.0) or 0.0),
        )


IDENTITY = Transform()


def pivot_point(t: Transform, base_points: Iterable[Point]) -> Point:
    c = bounding_box(base_points).center
    return Point(c.x + t.px, c.y + t.py)


def apply_transform(t: Transform, p: Point, pivot: Point) -> Point:
    qx = pivot.x + (p.x - pivot.x) * t.sx
    qy = pivot.y + (p.y - pivot.y) * t.sy
    a = math.radians(t.rotation)
    cos_a, sin_a = math.cos(a), math.sin(a)
    dx, dy = qx - pivot.x, qy - pivot.y
    rx = pivot.x + dx * cos_a - dy * sin_a
    ry = pivot.y + dx * sin_a + dy * cos_a
    return Point(rx + t.x, ry + t.y)


def invert_transform(t: Transform, p: Point, pivot: Point) -> Point:
    ux = p.x - t.x
    uy = p.y - t.y
    a = math.radians(-t.rotation)
    cos_a, sin_a = math.cos(a), math.sin(a)
    dx, dy = ux - pivot.x, uy - pivot.y
    rx = dx * cos_a - dy * sin_a
    ry = dx * sin_a + dy * cos_a
    return Point(pivot.x + rx / guard_scale(t.sx), pivot.y + ry / guard_scale(t.sy))


def transform_points(
    t: Optional[Transform],
    points: Sequence[Point],
    pivot_base: Optional[Sequence[Point]] = None,
) -> list[Point]:
    """Forward-map `points`; the pivot comes from `pivot_base` (default: `points`)."""
    if t is None or t.is_identity():
        return list(points)
    pivot = pivot_point(t, points if pivot_base is None else pivot_base)
    return [apply_transform(t, p, pivot) for p in points]


def screen_delta_to_local(t: Transform, dx: float, dy: float) -> tuple[float, float]:
    """Undo the linear part (rotation, scale) of `t` on a delta; translation does not apply."""
    a = math.radians(-t.rotation)
    cos_a, sin_a = math.cos(a), math.sin(a)
    return (
        (dx * cos_a - dy * sin_a) / guard_scale(t.sx),
        (dx * sin_a + dy * cos_a) / guard_scale(t.sy),
    )


def accumulate_pivot_delta(t: Transform, dx: float, dy: float) -> Transform:
    """Move the pivot by a screen-space delta.

    The delta is rotated by -rotation and divided by the current scale so the
    pivot handle follows the cursor under any orientation or scale.
    """
    lx, ly = screen_delta_to_local(t, dx, dy)
    return replace(t, px=t.px + lx, py=t.py + ly)
