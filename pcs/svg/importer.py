# File: pcs/svg/importer.py
# Project: PolyCurveStudio (PCS)
# Version: 0.1.0
# Status: stable
# Date: 2026-10-18
# Purpose: Import de SVG -> capas, normalizado al frame canónico 800x600.
# Notes:
# - <path> usa el parser propio (pcs.svg.path_data): mismo muestreo que el editor.
# - Figuras básicas (rect/circle/ellipse/line/polyline/polygon) pasan por svgelements
#   para obtener un `d` equivalente.
# - Lo que vive en defs/mask/clipPath/pattern/symbol no se dibuja: se ignora.
from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, Optional

from svgelements import Circle, Ellipse, Path as SvgPath, Polygon, Polyline, Rect, SimpleLine

from pcs.core.models import Layer, new_layer_id
from pcs.core.version import CANVAS_H, CANVAS_W, DEFAULT_FILL, DEFAULT_STROKE, DEFAULT_WIDTH
from pcs.geom.primitives import Point, bounding_box
from pcs.svg.path_data import SubPath, parse_path_data_ex
from pcs.utils.errors import PcsIOError, PcsValidationError

log = logging.getLogger(__name__)

# Contenedores cuyo contenido no se renderiza directamente.
SKIPPED_CONTAINERS = {"defs", "mask", "clipPath", "pattern", "symbol", "marker", "filter"}

_BASIC_SHAPES = {
    "rect": Rect,
    "circle": Circle,
    "ellipse": Ellipse,
    "line": SimpleLine,
    "polyline": Polyline,
    "polygon": Polygon,
}

_NUM_RE = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)\s*(px)?\s*$")


@dataclass(frozen=True)
class SvgInspection:
    width: Optional[float]
    height: Optional[float]
    viewbox: Optional[tuple[float, float, float, float]]
    shape_count: int
    skipped: list[str] = field(default_factory=list)


@dataclass
class _RawShape:
    subpaths: list[SubPath]
    stroke: str
    fill: str
    width: float
    stroke_opacity: float
    fill_opacity: float
    name: Optional[str]


def _strip_ns(tag: str) -> str:
    if "}" in tag:
        return tag.split("}", 1)[1]
    return tag


def _is_svg_root(tag: str) -> bool:
    return _strip_ns(tag) == "svg"


def _parse_viewbox(vb: Optional[str]) -> Optional[tuple[float, float, float, float]]:
    if not vb:
        return None
    parts = [p for p in re.split(r"[\s,]+", vb.strip()) if p]
    if len(parts) != 4:
        return None
    try:
        x, y, w, h = (float(p) for p in parts)
    except ValueError:
        return None
    if w <= 0 or h <= 0:
        return None
    return (x, y, w, h)


def _parse_length(v: Optional[str]) -> Optional[float]:
    """Largo en user units. Solo sin unidad o px: el resto no se adivina."""
    if not v:
        return None
    m = _NUM_RE.match(v)
    if not m:
        return None
    return float(m.group(1))


def _style_map(el: ET.Element) -> dict[str, str]:
    out = {k: v for k, v in el.attrib.items() if isinstance(k, str)}
    style = el.attrib.get("style")
    if style:
        for decl in style.split(";"):
            if ":" in decl:
                k, v = decl.split(":", 1)
                out[k.strip()] = v.strip()
    return out


def _opacity(v: Optional[str]) -> float:
    try:
        return max(0.0, min(1.0, float(v))) if v is not None else 1.0
    except ValueError:
        return 1.0


def _iter_drawables(el: ET.Element, skipped: list[str]) -> Iterator[ET.Element]:
    for child in el:
        if not isinstance(child.tag, str):
            continue
        tag = _strip_ns(child.tag)
        if tag in SKIPPED_CONTAINERS:
            skipped.append(tag)
            continue
        if tag == "path" or tag in _BASIC_SHAPES:
            yield child
        else:
            yield from _iter_drawables(child, skipped)


def _shape_to_d(el: ET.Element) -> Optional[str]:
    tag = _strip_ns(el.tag)
    if tag == "path":
        return el.attrib.get("d")
    values = {k: v for k, v in el.attrib.items() if k != "transform"}
    try:
        d = SvgPath(_BASIC_SHAPES[tag](values)).d()
    except (ValueError, TypeError, ZeroDivisionError) as e:
        log.debug("<%s> ignorado (svgelements): %s", tag, e)
        return None
    return d or None


def _read_shape(el: ET.Element) -> Optional[_RawShape]:
    d = _shape_to_d(el)
    if not d:
        return None
    subpaths = [s for s in parse_path_data_ex(d) if s.points]
    if not subpaths:
        return None
    st = _style_map(el)
    fill = st.get("fill") or DEFAULT_FILL
    stroke = st.get("stroke") or DEFAULT_STROKE
    if stroke == "none":
        stroke = DEFAULT_STROKE
    width = _parse_length(st.get("stroke-width"))
    return _RawShape(
        subpaths=subpaths,
        stroke=stroke,
        fill=fill,
        width=width if width is not None else DEFAULT_WIDTH,
        stroke_opacity=_opacity(st.get("stroke-opacity")),
        fill_opacity=_opacity(st.get("fill-opacity")),
        name=el.attrib.get("id"),
    )


def _frame_for(
    viewbox: Optional[tuple[float, float, float, float]],
    width: Optional[float],
    height: Optional[float],
    shapes: list[_RawShape],
) -> tuple[float, float, float, float]:
    if viewbox is not None:
        return viewbox
    if width and height:
        return (0.0, 0.0, width, height)
    bb = bounding_box(p for s in shapes for sp in s.subpaths for p in sp.points)
    return (bb.min.x, bb.min.y, bb.size.x, bb.size.y)


def _fit(frame: tuple[float, float, float, float]) -> tuple[float, float, float]:
    """(scale, tx, ty) que centra `frame` dentro de 800x600 sin deformar."""
    x, y, w, h = frame
    if w > 0 and h > 0:
        s = min(CANVAS_W / w, CANVAS_H / h)
    elif w > 0:
        s = CANVAS_W / w
    elif h > 0:
        s = CANVAS_H / h
    else:
        s = 1.0
    tx = (CANVAS_W - w * s) / 2.0 - x * s
    ty = (CANVAS_H - h * s) / 2.0 - y * s
    return s, tx, ty


def inspect_svg_string(text: str) -> tuple[ET.Element, SvgInspection]:
    try:
        root = ET.fromstring(text)
    except ET.ParseError as e:
        raise PcsValidationError(f"SVG inválido (XML malformado): {e}") from e
    if not _is_svg_root(root.tag):
        raise PcsValidationError(f"No parece SVG (root={root.tag!r})")

    skipped: list[str] = []
    count = sum(1 for _ in _iter_drawables(root, skipped))
    info = SvgInspection(
        width=_parse_length(root.attrib.get("width")),
        height=_parse_length(root.attrib.get("height")),
        viewbox=_parse_viewbox(root.attrib.get("viewBox") or root.attrib.get("viewbox")),
        shape_count=count,
        skipped=sorted(set(skipped)),
    )
    return root, info


def import_svg_string(text: str) -> list[Layer]:
    """Convierte un documento SVG en capas dentro del frame 800x600.

    Un elemento con varios subpaths se importa como una capa compuesta.
    """
    root, info = inspect_svg_string(text)
    shapes: list[_RawShape] = []
    for el in _iter_drawables(root, []):
        shape = _read_shape(el)
        if shape is not None:
            shapes.append(shape)
    if info.skipped:
        log.info("SVG: contenedores no renderizables ignorados: %s", ", ".join(info.skipped))
    if not shapes:
        log.info("SVG sin geometría importable")
        return []

    frame = _frame_for(info.viewbox, info.width, info.height, shapes)
    if frame == (0.0, 0.0, CANVAS_W, CANVAS_H):
        s, tx, ty = 1.0, 0.0, 0.0
    else:
        s, tx, ty = _fit(frame)
        log.debug("SVG normalizado: frame=%s scale=%.4f offset=(%.2f, %.2f)", frame, s, tx, ty)

    def norm(p: Point) -> Point:
        return Point(p.x * s + tx, p.y * s + ty)

    layers: list[Layer] = []
    for shape in shapes:
        segs = [[norm(p) for p in sp.points] for sp in shape.subpaths]
        layer = Layer(
            id=new_layer_id(),
            color=shape.stroke,
            fill=shape.fill,
            width=shape.width,
            stroke_opacity=shape.stroke_opacity,
            fill_opacity=shape.fill_opacity,
            name=shape.name,
        )
        if len(segs) == 1:
            layer.points = segs[0]
            layer.closed = shape.subpaths[0].closed
        else:
            n = len(segs)
            layer.segments = segs
            layer.closed = all(sp.closed for sp in shape.subpaths)
            layer.segment_closed = [sp.closed for sp in shape.subpaths]
            layer.segment_colors = [shape.stroke] * n
            layer.segment_fills = [shape.fill] * n
            layer.segment_widths = [shape.width] * n
            layer.sync_points()
        layers.append(layer)

    log.info("SVG importado: %d capa(s) de %d elemento(s)", len(layers), info.shape_count)
    return layers


def import_svg(path: str | Path) -> list[Layer]:
    p = Path(path)
    try:
        raw = p.read_text(encoding="utf-8")
    except UnicodeDecodeError:
        # fallback común en Windows
        raw = p.read_text(encoding="utf-8-sig", errors="replace")
    except OSError as e:
        raise PcsIOError(f"No se pudo leer SVG: {p}") from e
    try:
        return import_svg_string(raw)
    except PcsValidationError as e:
        raise PcsValidationError(f"{p}: {e}") from e
