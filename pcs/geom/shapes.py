"""Shape generators and pointer snapping for drawing gestures.

Shapes are plain closed point lists (the smoothing tension decides how round
they look). Snapping first tries existing vertices, then the symmetry center
lines.
"""

from __future__ import annotations

import math
from typing import Iterable, Optional, Sequence

from pcs.core.tool_mode import ShapeTool, coerce_shape_tool
from pcs.core.version import DEFAULT_SNAP_PX
from pcs.geom.primitives import Point
from pcs.geom.symmetry import SymmetrySettings

CIRCLE_SAMPLES = 16
STAR_TIPS = 5
STAR_INNER_RATIO = 0.4


def make_shape(tool: ShapeTool | str, start: Point, end: Point) -> list[Point]:
    """Vertices of `tool` dragged from `start` to `end` (pen -> [start, end])."""
    tool = coerce_shape_tool(tool)
    dx = end.x - start.x
    dy = end.y - start.y

    if tool is ShapeTool.SQUARE:
        return [
            Point(start.x, start.y),
            Point(end.x, start.y),
            Point(end.x, end.y),
            Point(start.x, end.y),
        ]
    if tool is ShapeTool.CIRCLE:
        r = math.hypot(dx, dy)
        return [
            Point(
                start.x + math.cos(i / CIRCLE_SAMPLES * 2.0 * math.pi) * r,
                start.y + math.sin(i / CIRCLE_SAMPLES * 2.0 * math.pi) * r,
            )
            for i in range(CIRCLE_SAMPLES)
        ]
    if tool is ShapeTool.TRIANGLE:
        return [
            Point(start.x + dx / 2.0, start.y),
            Point(end.x, end.y),
            Point(start.x, end.y),
        ]
    if tool is ShapeTool.STAR:
        r = math.hypot(dx, dy)
        n = STAR_TIPS * 2
        out: list[Point] = []
        for i in range(n):
            a = i / n * 2.0 * math.pi - math.pi / 2.0
            cr = r if i % 2 == 0 else r * STAR_INNER_RATIO
            out.append(Point(start.x + math.cos(a) * cr, start.y + math.sin(a) * cr))
        return out
    return [start, end]


def snap_point(
    p: Point,
    existing: Iterable[Sequence[Point]] = (),
    draft: Sequence[Point] = (),
    *,
    symmetry: Optional[SymmetrySettings] = None,
    center: Optional[Point] = None,
    threshold: float = DEFAULT_SNAP_PX,
    snap_to_points: bool = True,
    snap_to_guides: bool = True,
) -> Point:
    """Snap `p` to the closest vertex within `threshold`, else to the symmetry axes."""
    if snap_to_points:
        best_sq = threshold * threshold
        best: Optional[Point] = None
        for pts in list(existing) + [draft]:
            for q in pts:
                d_sq = (p.x - q.x) ** 2 + (p.y - q.y) ** 2
                if d_sq < best_sq:
                    best_sq = d_sq
                    best = q
        if best is not None:
            return best

    if not snap_to_guides or symmetry is None or center is None:
        return p

    x, y = p.x, p.y
    if (symmetry.horizontal or symmetry.center) and abs(x - center.x) < threshold:
        x = center.x
    if (symmetry.vertical or symmetry.center) and abs(y - center.y) < threshold:
        y = center.y
    return Point(x, y)
