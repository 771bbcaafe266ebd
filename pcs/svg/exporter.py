# File: pcs/svg/exporter.py
# Project: PolyCurveStudio (PCS)
# Version: 0.1.0
# Status: stable
# Date: 2026-10-18
# Purpose: Export SVG del documento (canvas 800x600) con el mismo suavizado del editor.
# Notes:
# - Geometría = render_variants(capa, t): espejo sobre la base y luego los mismos
#   transforms que canvas y hit-test.
# - Cada variante de simetría activa se exporta como un <path> más, con su
#   animación ajustada a la paridad del espejo (data-animation-*).
# - Capas ocultas no se exportan.
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Sequence
from xml.etree.ElementTree import Element, SubElement, tostring

from pcs.core.models import AnimationSettings, Layer
from pcs.core.version import CANVAS_H, CANVAS_W
from pcs.geom.effective import render_variants
from pcs.geom.primitives import Point
from pcs.geom.smoothing import smooth_path_data
from pcs.geom.symmetry import mirror_animation
from pcs.utils.errors import PcsIOError

log = logging.getLogger(__name__)

SVG_NS = "http://www.w3.org/2000/svg"


def _num(v: float) -> str:
    return f"{float(v):g}"


def _seg_style(layer: Layer, i: int) -> tuple[str, str, float, float, bool]:
    def pick(arr, default):
        if arr is None or i >= len(arr) or arr[i] is None:
            return default
        return arr[i]

    return (
        pick(layer.segment_colors, layer.color),
        pick(layer.segment_fills, layer.fill),
        float(pick(layer.segment_widths, layer.width)),
        float(pick(layer.segment_tensions, layer.tension)),
        bool(pick(layer.segment_closed, layer.closed)),
    )


def _animation_attrs(anim: Optional[AnimationSettings], tag: str) -> dict[str, str]:
    """data-* de la animación tal como corre sobre la variante `tag`."""
    if anim is None or not anim.active_types():
        return {}
    direction = anim.direction
    invert_travel = False
    for anim_type in anim.active_types():
        m = mirror_animation(anim_type, tag, anim.direction)
        if m.direction != anim.direction:
            direction = m.direction
        invert_travel = invert_travel or m.invert_travel
    attrs = {
        "data-animation": " ".join(anim.active_types()),
        "data-animation-duration": _num(anim.duration),
        "data-animation-delay": _num(anim.delay),
        "data-animation-ease": anim.ease,
        "data-animation-direction": direction,
    }
    if invert_travel:
        attrs["data-animation-invert-travel"] = "true"
    return attrs


def _seg_animation(layer: Layer, i: int) -> Optional[AnimationSettings]:
    arr = layer.segment_animations
    if arr is not None and i < len(arr) and arr[i] is not None:
        return arr[i]
    return layer.animation


def _add_layer(parent: Element, layer: Layer, time: Optional[float], center: Point) -> int:
    variants = render_variants(layer, time, center)
    n_paths = sum(1 for v in variants for s in v.segments if s)
    if n_paths == 0:
        return 0

    target = parent
    if n_paths > 1:
        target = SubElement(parent, "g", {"id": layer.id})
    for v in variants:
        for i, seg in enumerate(v.segments):
            if not seg:
                continue
            color, fill, width, tension, closed = _seg_style(layer, i)
            attrs = {
                "d": smooth_path_data(seg, tension, closed),
                "stroke": color,
                "stroke-opacity": _num(layer.stroke_opacity),
                "stroke-width": _num(width),
                "fill": fill or "none",
                "fill-opacity": _num(layer.fill_opacity),
                "stroke-linecap": "round",
                "stroke-linejoin": "round",
            }
            attrs.update(_animation_attrs(_seg_animation(layer, i), v.tag))
            if n_paths == 1:
                attrs = {"id": layer.id, **attrs}
            SubElement(target, "path", attrs)
    return n_paths


def build_svg(layers: Sequence[Layer], *, time: Optional[float] = None) -> Element:
    svg = Element(
        "svg",
        {
            "xmlns": SVG_NS,
            "width": _num(CANVAS_W),
            "height": _num(CANVAS_H),
            "viewBox": f"0 0 {_num(CANVAS_W)} {_num(CANVAS_H)}",
        },
    )
    center = Point(CANVAS_W / 2.0, CANVAS_H / 2.0)
    total = 0
    for layer in layers:
        if not layer.visible:
            continue
        total += _add_layer(svg, layer, time, center)
    log.debug("SVG armado: %d path(s) de %d capa(s)", total, len(layers))
    return svg


def export_svg_string(layers: Sequence[Layer], *, time: Optional[float] = None) -> str:
    return tostring(build_svg(layers, time=time), encoding="unicode")


def export_svg(layers: Sequence[Layer], out_path: str | Path, *, time: Optional[float] = None) -> Path:
    """Escribe el SVG en `out_path` (fuerza extensión .svg)."""
    p = Path(out_path)
    if p.suffix.lower() != ".svg":
        p = p.with_suffix(".svg")
    xml = export_svg_string(layers, time=time)
    try:
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(xml, encoding="utf-8")
    except OSError as e:
        raise PcsIOError(f"No se pudo exportar SVG: {p}") from e
    log.info("SVG exportado: %s", p)
    return p
