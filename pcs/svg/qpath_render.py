# File: pcs/svg/qpath_render.py
# Project: PolyCurveStudio (PCS)
# Version: 0.1.0
# Status: stable
# Date: 2026-10-18
# Purpose: Capas -> QPainterPath (adaptador para el canvas Qt).
# Notes:
#   - Consume los mismos PathCommand que el exporter: lo que se ve es lo que se exporta.
#   - Sin QtSvg: el path se arma a mano (moveTo/lineTo/cubicTo/closeSubpath).
#   - Una entrada vacía devuelve un QPainterPath vacío.
from __future__ import annotations

from typing import Optional, Sequence

from PySide6.QtGui import QPainterPath

from pcs.core.models import Layer
from pcs.geom.effective import CANVAS_CENTER, render_segments, render_variants
from pcs.geom.primitives import Point
from pcs.geom.smoothing import PathCommand, smooth_path


def commands_to_qpath(commands: Sequence[PathCommand], out: Optional[QPainterPath] = None) -> QPainterPath:
    """Agrega `commands` a `out` (o a un path nuevo) y lo devuelve."""
    q = out if out is not None else QPainterPath()
    for cmd in commands:
        if cmd.op == "M":
            p = cmd.points[0]
            q.moveTo(p.x, p.y)
        elif cmd.op == "L":
            p = cmd.points[0]
            q.lineTo(p.x, p.y)
        elif cmd.op == "C":
            c1, c2, p = cmd.points
            q.cubicTo(c1.x, c1.y, c2.x, c2.y, p.x, p.y)
        elif cmd.op == "Z":
            q.closeSubpath()
    return q


def points_to_qpath(points: Sequence[Point], k: float = 1.0, closed: bool = False) -> QPainterPath:
    return commands_to_qpath(smooth_path(points, k, closed))


def layer_to_qpath(
    layer: Layer,
    time: Optional[float] = None,
    *,
    with_symmetry: bool = True,
    center: Point = CANVAS_CENTER,
) -> QPainterPath:
    """Todos los segmentos de la capa (y sus variantes espejo) en un único path."""
    if with_symmetry:
        groups = [v.segments for v in render_variants(layer, time, center)]
    else:
        groups = [render_segments(layer, time)]

    q = QPainterPath()
    for group in groups:
        for i, seg in enumerate(group):
            tension = layer.segment_tensions[i] if layer.segment_tensions else layer.tension
            closed = layer.segment_closed[i] if layer.segment_closed else layer.closed
            commands_to_qpath(smooth_path(seg, tension, bool(closed)), q)
    return q
