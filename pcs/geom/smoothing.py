"""Catmull-Rom style curve smoothing.

`smooth_path` turns an ordered point list into a chain of cubic beziers. The
result is a list of `PathCommand` so the same geometry can be fed to the SVG
exporter (`path_data`) and to the Qt adapter (`pcs.svg.qpath_render`) without
re-deriving control points.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from pcs.core.version import TENSION_MAX, TENSION_MIN
from pcs.geom.primitives import Point, _fmt


@dataclass(frozen=True)
class PathCommand:
    """One drawing instruction: M (1 pt), L (1 pt), C (3 pts) or Z (0 pts)."""

    op: str
    points: tuple[Point, ...] = ()


def clamp_tension(k: float) -> float:
    try:
        k = float(k)
    except (TypeError, ValueError):
        return TENSION_MIN
    return max(TENSION_MIN, min(TENSION_MAX, k))


def _cubic(p0: Point, p1: Point, p2: Point, p3: Point, k: float) -> PathCommand:
    c1 = Point(p1.x + (p2.x - p0.x) / 6.0 * k, p1.y + (p2.y - p0.y) / 6.0 * k)
    c2 = Point(p2.x - (p3.x - p1.x) / 6.0 * k, p2.y - (p3.y - p1.y) / 6.0 * k)
    return PathCommand("C", (c1, c2, p2))


def smooth_path(points: Sequence[Point], k: float = 1.0, closed: bool = False) -> list[PathCommand]:
    """Smooth `points` into a cubic chain with tension `k` (clamped to [0, 1.5]).

    - 0 points -> []
    - 1 point -> single move
    - 2 open points -> straight segment (no neighbours to smooth with)
    - closed -> one cubic per point (wrapping neighbours) + explicit Z
    - open -> one cubic per pair; neighbours past the ends clamp to the endpoint
    """
    n = len(points)
    if n == 0:
        return []
    if n == 1:
        return [PathCommand("M", (points[0],))]
    if n == 2 and not closed:
        return [PathCommand("M", (points[0],)), PathCommand("L", (points[1],))]

    k = clamp_tension(k)
    out = [PathCommand("M", (points[0],))]
    if closed:
        for i in range(n):
            out.append(
                _cubic(points[(i - 1) % n], points[i], points[(i + 1) % n], points[(i + 2) % n], k)
            )
        out.append(PathCommand("Z"))
        return out

    for i in range(n - 1):
        p1 = points[i]
        p0 = points[i - 1] if i > 0 else p1
        p2 = points[i + 1]
        p3 = points[i + 2] if i + 2 < n else p2
        out.append(_cubic(p0, p1, p2, p3, k))
    return out


def path_data(commands: Sequence[PathCommand]) -> str:
    """Format commands as an SVG `d` string (cubic points with 2 decimals)."""
    parts: list[str] = []
    for cmd in commands:
        if cmd.op in ("M", "L"):
            p = cmd.points[0]
            parts.append(f"{cmd.op} {_fmt(p.x)} {_fmt(p.y)}")
        elif cmd.op == "C":
            c1, c2, p = cmd.points
            parts.append(
                f"C {c1.x:.2f} {c1.y:.2f}, {c2.x:.2f} {c2.y:.2f}, {p.x:.2f} {p.y:.2f}"
            )
        elif cmd.op == "Z":
            parts.append("Z")
    return " ".join(parts)


def smooth_path_data(points: Sequence[Point], k: float = 1.0, closed: bool = False) -> str:
    return path_data(smooth_path(points, k, closed))
