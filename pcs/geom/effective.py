"""Single resolution point for "which transform applies right now".

Rendering, hit-testing and export all call `resolve_effective_transform` so a
layer looks (and picks) the same everywhere, whether it is static, animated,
compound, or all at once. Layers are read by attribute (see
`pcs.core.models.Layer`); nothing here mutates them.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Sequence

from pcs.core.version import CANVAS_H, CANVAS_W
from pcs.geom.keyframes import interpolate_transform
from pcs.geom.primitives import Point
from pcs.geom.symmetry import MultiVariant, apply_symmetry_multi
from pcs.geom.transform import IDENTITY, Transform, transform_points

if TYPE_CHECKING:  # pragma: no cover
    from pcs.core.models import Layer

CANVAS_CENTER = Point(CANVAS_W / 2.0, CANVAS_H / 2.0)


def _segment_item(arr, index: int):
    if arr is None or index < 0 or index >= len(arr):
        return None
    return arr[index]


def resolve_effective_transform(
    layer: "Layer",
    time: Optional[float] = None,
    segment: Optional[int] = None,
) -> Transform:
    """Transform of the whole layer (`segment=None`) or of one segment.

    With a `time` and a non-empty track, the interpolated value wins over the
    static transform; otherwise the static transform, otherwise identity.
    """
    if segment is None:
        track = layer.keyframes
        static = layer.transform
    else:
        track = _segment_item(layer.segment_keyframes, segment) or []
        static = _segment_item(layer.segment_transforms, segment)

    if time is not None and track:
        t = interpolate_transform(track, time)
        if t is not None:
            return t
    return static if static is not None else IDENTITY


def _nested_segments(
    layer: "Layer",
    segments: Sequence[Sequence[Point]],
    time: Optional[float],
) -> list[list[Point]]:
    # Los pivots salen siempre de la geometría base, aunque `segments` venga espejada.
    base_all = list(layer.points)
    base_segs = layer.all_segments()
    outer = resolve_effective_transform(layer, time)

    out: list[list[Point]] = []
    for i, seg in enumerate(segments):
        pts = list(seg)
        if layer.segments is not None:
            inner = resolve_effective_transform(layer, time, i)
            pts = transform_points(inner, pts, pivot_base=base_segs[i])
        out.append(transform_points(outer, pts, pivot_base=base_all))
    return out


def render_segments(layer: "Layer", time: Optional[float] = None) -> list[list[Point]]:
    """Final geometry per segment: segment transform nested inside the layer transform."""
    return _nested_segments(layer, layer.all_segments(), time)


def render_points(layer: "Layer", time: Optional[float] = None) -> list[Point]:
    return [p for seg in render_segments(layer, time) for p in seg]


def render_variants(
    layer: "Layer",
    time: Optional[float] = None,
    center: Point = CANVAS_CENTER,
) -> list[MultiVariant]:
    """Every symmetry variant of the layer as drawn at `time`.

    Mirrors the base geometry first and then runs each variant through the same
    nested transforms (same pivots), so the whole set moves as one group. The
    "I" variant equals `render_segments`.
    """
    return [
        MultiVariant(v.tag, _nested_segments(layer, v.segments, time))
        for v in apply_symmetry_multi(layer.all_segments(), layer.symmetry, center.x, center.y)
    ]


def render_variant_points(
    layer: "Layer",
    time: Optional[float] = None,
    center: Point = CANVAS_CENTER,
) -> list[Point]:
    return [p for v in render_variants(layer, time, center) for seg in v.segments for p in seg]
