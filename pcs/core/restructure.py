# File: pcs/core/restructure.py
# Project: PolyCurveStudio (PCS)
# Version: 0.1.0
# Status: stable
# Date: 2026-10-18
# Purpose: Merge (N capas -> 1 compuesta) y split (compuesta -> N capas).
# Notes:
# - Ambas son funciones puras sobre la lista ordenada de capas (no mutan entradas).
# - merge resetea el transform/keyframes de la capa nueva: la animación de cada
#   fuente baja a nivel segmento para no aplicarse dos veces.
# - split de un grupo de 1 segmento colapsa los arrays a escalares: el resultado
#   es indistinguible de una capa que nunca se mergeó.
from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from pcs.core.models import AnimationSettings, Layer, new_layer_id
from pcs.geom.keyframes import Keyframe
from pcs.geom.primitives import Point
from pcs.geom.symmetry import SymmetrySettings
from pcs.geom.transform import Transform

log = logging.getLogger(__name__)


@dataclass
class _Seg:
    """Estado por segmento mientras se redistribuyen los arrays paralelos."""

    points: list[Point]
    color: str
    fill: str
    width: float
    transform: Optional[Transform]
    keyframes: list[Keyframe]
    closed: bool
    tension: float
    animation: Optional[AnimationSettings]


def _pick(arr: Optional[list[Any]], i: int, default: Any) -> Any:
    if arr is None or i >= len(arr):
        return default
    v = arr[i]
    return default if v is None else v


def _push_down(
    outer_t: Optional[Transform],
    outer_kf: list[Keyframe],
    seg: _Seg,
    owner: str,
) -> None:
    """Baja el transform/track de la capa al segmento si el segmento no tiene propio."""
    has_outer = (outer_t is not None and not outer_t.is_identity()) or bool(outer_kf)
    if not has_outer:
        return
    has_inner = (seg.transform is not None and not seg.transform.is_identity()) or bool(seg.keyframes)
    if has_inner:
        log.warning("Capa %s: transform de capa descartado (el segmento ya tiene el suyo)", owner)
        return
    seg.transform = copy.deepcopy(outer_t)
    seg.keyframes = list(outer_kf)


def _explode(layer: Layer) -> list[_Seg]:
    """Segmentos de una capa (simple -> 1 segmento, defaults desde los escalares)."""
    if layer.segments is None:
        return [
            _Seg(
                points=list(layer.points),
                color=layer.color,
                fill=layer.fill,
                width=layer.width,
                transform=copy.deepcopy(layer.transform),
                keyframes=list(layer.keyframes),
                closed=layer.closed,
                tension=layer.tension,
                animation=copy.deepcopy(layer.animation),
            )
        ]
    out: list[_Seg] = []
    for i, seg_pts in enumerate(layer.segments):
        s = _Seg(
            points=list(seg_pts),
            color=_pick(layer.segment_colors, i, layer.color),
            fill=_pick(layer.segment_fills, i, layer.fill),
            width=_pick(layer.segment_widths, i, layer.width),
            transform=copy.deepcopy(_pick(layer.segment_transforms, i, None)),
            keyframes=list(_pick(layer.segment_keyframes, i, [])),
            closed=_pick(layer.segment_closed, i, layer.closed),
            tension=_pick(layer.segment_tensions, i, layer.tension),
            animation=copy.deepcopy(_pick(layer.segment_animations, i, layer.animation)),
        )
        _push_down(layer.transform, layer.keyframes, s, layer.id)
        out.append(s)
    return out


def _meta(layer: Layer) -> dict[str, Any]:
    return {
        "id": layer.id,
        "name": layer.name,
        "stroke_opacity": layer.stroke_opacity,
        "fill_opacity": layer.fill_opacity,
        "visible": layer.visible,
        "symmetry": layer.symmetry.to_dict(),
        "color": layer.color,
        "fill": layer.fill,
        "width": float(layer.width),
        "tension": float(layer.tension),
        "closed": bool(layer.closed),
        "group_counts": list(layer.group_counts) if layer.group_counts else None,
        "group_meta": copy.deepcopy(layer.group_meta) if layer.group_meta else None,
    }


def _compound(layer_id: str, segs: list[_Seg], base: Layer) -> Layer:
    out = Layer(
        id=layer_id,
        color=base.color,
        fill=base.fill,
        width=base.width,
        tension=base.tension,
        closed=base.closed,
        stroke_opacity=base.stroke_opacity,
        fill_opacity=base.fill_opacity,
        visible=base.visible,
        name=base.name,
        symmetry=copy.deepcopy(base.symmetry),
        segments=[s.points for s in segs],
        segment_colors=[s.color for s in segs],
        segment_fills=[s.fill for s in segs],
        segment_widths=[float(s.width) for s in segs],
        segment_transforms=[s.transform for s in segs],
        segment_keyframes=[s.keyframes for s in segs],
        segment_closed=[bool(s.closed) for s in segs],
        segment_tensions=[float(s.tension) for s in segs],
        segment_animations=[s.animation for s in segs],
    )
    out.sync_points()
    return out


def merge_layers(
    layers: Sequence[Layer],
    ids: Sequence[str],
    *,
    new_id: Optional[str] = None,
) -> list[Layer]:
    """Fusiona las capas `ids` en una compuesta ubicada donde estaba la primera.

    Con menos de 2 capas elegibles devuelve una copia de la lista sin cambios.
    """
    wanted = set(ids)
    selected = [l for l in layers if l.id in wanted]
    if len(selected) < 2:
        log.debug("merge ignorado: %d capa(s) elegible(s)", len(selected))
        return list(layers)

    segs: list[_Seg] = []
    counts: list[int] = []
    metas: list[dict[str, Any]] = []
    for src in selected:
        part = _explode(src)
        segs.extend(part)
        counts.append(len(part))
        metas.append(_meta(src))

    merged = _compound(new_id or new_layer_id("merged"), segs, selected[0])
    merged.group_counts = counts
    merged.group_meta = metas
    merged.transform = None
    merged.keyframes = []
    merged.animation = None

    out: list[Layer] = []
    inserted = False
    for l in layers:
        if l.id in wanted:
            if not inserted:
                out.append(merged)
                inserted = True
            continue
        out.append(l)
    log.info("merge: %d capas -> %s (%d segmentos)", len(selected), merged.id, len(segs))
    return out


def _restore(segs: list[_Seg], meta: dict[str, Any], base: Layer) -> Layer:
    lid = str(meta.get("id") or new_layer_id("path"))
    if len(segs) == 1:
        s = segs[0]
        layer = Layer(
            id=lid,
            points=list(s.points),
            color=s.color,
            fill=s.fill,
            width=float(s.width),
            tension=float(s.tension),
            closed=bool(s.closed),
            animation=s.animation,
            transform=s.transform,
            keyframes=list(s.keyframes),
        )
    else:
        layer = _compound(lid, segs, base)
        layer.color = str(meta.get("color", base.color))
        layer.fill = str(meta.get("fill", base.fill))
        layer.width = float(meta.get("width", base.width))
        layer.tension = float(meta.get("tension", base.tension))
        layer.closed = bool(meta.get("closed", base.closed))
        layer.group_counts = meta.get("group_counts") or None
        layer.group_meta = meta.get("group_meta") or None
        if layer.group_counts is not None and sum(layer.group_counts) != len(segs):
            layer.group_counts = None
            layer.group_meta = None

    layer.name = meta.get("name", base.name)
    layer.stroke_opacity = float(meta.get("stroke_opacity", base.stroke_opacity))
    layer.fill_opacity = float(meta.get("fill_opacity", base.fill_opacity))
    layer.visible = bool(meta.get("visible", base.visible))
    sym = meta.get("symmetry")
    layer.symmetry = SymmetrySettings.from_dict(sym) if sym is not None else copy.deepcopy(base.symmetry)
    return layer


def split_layer(layers: Sequence[Layer], layer_id: str) -> list[Layer]:
    """Separa una capa compuesta según `group_counts` (1 grupo por segmento si falta).

    Una capa no compuesta (o inexistente) devuelve la lista sin cambios.
    """
    idx = next((i for i, l in enumerate(layers) if l.id == layer_id), None)
    if idx is None or not layers[idx].is_compound:
        log.debug("split ignorado: %r no es una capa compuesta", layer_id)
        return list(layers)

    src = layers[idx]
    segs = _explode(src)
    counts = list(src.group_counts) if src.group_counts else [1] * len(segs)
    if sum(counts) != len(segs):
        log.warning("Capa %s: group_counts inconsistente, se separa por segmento", src.id)
        counts = [1] * len(segs)
    metas = list(src.group_meta) if src.group_meta and len(src.group_meta) == len(counts) else [{} for _ in counts]

    children: list[Layer] = []
    used_ids = {l.id for i, l in enumerate(layers) if i != idx}
    start = 0
    for count, meta in zip(counts, metas):
        meta = dict(meta)
        if meta.get("id") in used_ids:
            meta["id"] = None
        child = _restore(segs[start:start + count], meta, src)
        used_ids.add(child.id)
        children.append(child)
        start += count

    log.info("split: %s -> %d capas", src.id, len(children))
    return list(layers[:idx]) + children + list(layers[idx + 1:])
