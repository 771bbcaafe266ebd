# File: pcs/core/document.py
# Project: PolyCurveStudio (PCS)
# Version: 0.1.0
# Status: stable
# Date: 2026-10-18
# Purpose: Documento editable: lista ordenada de capas + historial + selección + timeline.
# Notes:
# - Toda mutación construye una lista nueva (las capas tocadas se copian); el
#   `present` del historial nunca se modifica in-place.
# - La selección no entra en el historial; se poda al leerla (undo puede borrar ids).
# - Operaciones sin objetivo (nada seleccionado, id desconocido) son no-op con log.debug.
from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional, Sequence

from pcs.core.history import History
from pcs.core.models import AnimationSettings, Layer, new_layer_id
from pcs.core.playback import PlaybackClock
from pcs.core.restructure import merge_layers, split_layer
from pcs.core.settings import EditorSettings
from pcs.core.tool_mode import ShapeTool, coerce_shape_tool
from pcs.core.version import CANVAS_H, CANVAS_W, KEYFRAME_EPSILON
from pcs.geom.effective import render_variant_points, resolve_effective_transform
from pcs.geom.hit_test import VertexHit, hit_vertex, pick_layer, to_local
from pcs.geom.keyframes import Easing, Keyframe, coerce_easing, remove_keyframe, update_keyframe, upsert_keyframe
from pcs.geom.primitives import Point, nearest_segment_index
from pcs.geom.shapes import make_shape, snap_point
from pcs.geom.simplify import simplify_path
from pcs.geom.smoothing import clamp_tension
from pcs.geom.symmetry import SymmetrySettings, mirror_point
from pcs.geom.transform import IDENTITY, accumulate_pivot_delta, screen_delta_to_local

log = logging.getLogger(__name__)

DUPLICATE_OFFSET = 20.0

# Campo escalar de la capa -> array paralelo por segmento.
_SEGMENT_FIELDS = {
    "color": "segment_colors",
    "fill": "segment_fills",
    "width": "segment_widths",
    "closed": "segment_closed",
    "tension": "segment_tensions",
    "transform": "segment_transforms",
    "keyframes": "segment_keyframes",
    "animation": "segment_animations",
}


@dataclass(frozen=True)
class SelectionStyle:
    """Proyección del estilo de la selección (None = valores mezclados)."""

    color: Optional[str]
    fill: Optional[str]
    width: Optional[float]
    tension: Optional[float]
    closed: Optional[bool]
    stroke_opacity: Optional[float]
    fill_opacity: Optional[float]
    count: int


def _layers_copy(layers: list[Layer]) -> list[Layer]:
    return [l.copy() for l in layers]


class Document:
    def __init__(
        self,
        layers: Optional[Iterable[Layer]] = None,
        *,
        settings: Optional[EditorSettings] = None,
        clock: Optional[PlaybackClock] = None,
    ) -> None:
        self.settings = settings or EditorSettings()
        self.history: History[list[Layer]] = History(
            list(layers or []),
            limit=self.settings.history_limit,
            copier=_layers_copy,
        )
        self.clock = clock or PlaybackClock(self.settings.timeline_ms)
        self.symmetry = SymmetrySettings()
        self.tension = clamp_tension(self.settings.default_tension)
        self.center = Point(CANVAS_W / 2.0, CANVAS_H / 2.0)
        self._selection: list[str] = []
        # Segmento enfocado dentro de la capa seleccionada (None = capa completa).
        self.focus_segment: Optional[int] = None

    # ----------------------------
    # Lectura
    # ----------------------------
    @property
    def layers(self) -> list[Layer]:
        return self.history.present

    def get_layer(self, layer_id: str) -> Optional[Layer]:
        return next((l for l in self.layers if l.id == layer_id), None)

    def index_of(self, layer_id: str) -> Optional[int]:
        return next((i for i, l in enumerate(self.layers) if l.id == layer_id), None)

    # ----------------------------
    # Helpers funcionales
    # ----------------------------
    def _replace_layer(self, layer_id: str, fn: Callable[[Layer], Layer]) -> Callable[[list[Layer]], list[Layer]]:
        def action(layers: list[Layer]) -> list[Layer]:
            return [fn(l.copy()) if l.id == layer_id else l for l in layers]

        return action

    def _commit_layer(self, layer_id: str, fn: Callable[[Layer], Layer], *, live: bool = False) -> bool:
        if self.get_layer(layer_id) is None:
            log.debug("Capa %r inexistente: operación ignorada", layer_id)
            return False
        action = self._replace_layer(layer_id, fn)
        if live:
            self.history.update_live_edit(action)
            return True
        return self.history.set_state(action)

    # ----------------------------
    # CRUD
    # ----------------------------
    def add_layer(self, layer: Layer, *, select: bool = True) -> Layer:
        layer.validate()
        if self.get_layer(layer.id) is not None:
            layer = _with_id(layer, new_layer_id())
        stored = layer.copy()
        self.history.set_state(lambda ls: ls + [stored])
        if select:
            self.select([layer.id])
        return layer

    def update_layer(self, layer_id: str, **changes: Any) -> bool:
        """Cambia atributos de la capa (1 paso de undo). Ej.: color="#fff", visible=False."""
        unknown = [k for k in changes if k not in Layer.__dataclass_fields__]
        if unknown:
            raise AttributeError(f"Layer no tiene: {unknown}")

        def fn(l: Layer) -> Layer:
            for k, v in changes.items():
                setattr(l, k, v)
            if "segments" in changes:
                l.sync_points()
            l.validate()
            return l

        return self._commit_layer(layer_id, fn)

    def update_segment(self, layer_id: str, index: int, **changes: Any) -> bool:
        """Como update_layer, pero sobre un segmento de una capa compuesta."""
        layer = self.get_layer(layer_id)
        if layer is None or layer.segments is None or not 0 <= index < len(layer.segments):
            log.debug("update_segment ignorado: %r[%s]", layer_id, index)
            return False
        bad = [k for k in changes if k not in _SEGMENT_FIELDS]
        if bad:
            raise AttributeError(f"Campos no editables por segmento: {bad}")

        def fn(l: Layer) -> Layer:
            for k, v in changes.items():
                arr_name = _SEGMENT_FIELDS[k]
                arr = getattr(l, arr_name)
                if arr is None:
                    default = getattr(l, k)
                    arr = [copy.deepcopy(default) for _ in l.segments]
                arr = list(arr)
                arr[index] = v
                setattr(l, arr_name, arr)
            return l

        return self._commit_layer(layer_id, fn)

    def delete_layers(self, ids: Iterable[str]) -> bool:
        doomed = set(ids)
        changed = self.history.set_state(lambda ls: [l for l in ls if l.id not in doomed])
        if changed:
            self._selection = [i for i in self._selection if i not in doomed]
            self.focus_segment = None
        return changed

    def delete_selected(self) -> bool:
        return self.delete_layers(self.selection)

    def duplicate_layer(self, layer_id: str) -> Optional[Layer]:
        """Copia la capa (id nuevo, desplazada) justo encima de la original."""
        idx = self.index_of(layer_id)
        if idx is None:
            log.debug("duplicate ignorado: %r no existe", layer_id)
            return None
        dup = _offset_layer(self.layers[idx], DUPLICATE_OFFSET, DUPLICATE_OFFSET)
        dup.id = new_layer_id()
        self.history.set_state(lambda ls: ls[: idx + 1] + [dup] + ls[idx + 1:])
        self.select([dup.id])
        return dup

    def reorder(self, layer_id: str, new_index: int) -> bool:
        idx = self.index_of(layer_id)
        if idx is None:
            return False

        def action(ls: list[Layer]) -> list[Layer]:
            out = list(ls)
            item = out.pop(idx)
            pos = max(0, min(len(out), int(new_index)))
            out.insert(pos, item)
            return out

        return self.history.set_state(action)

    def clear(self) -> bool:
        changed = self.history.set_state(lambda ls: [])
        self._selection = []
        self.focus_segment = None
        return changed

    # ----------------------------
    # Selección
    # ----------------------------
    @property
    def selection(self) -> list[str]:
        present = {l.id for l in self.layers}
        return [i for i in self._selection if i in present]

    def select(self, ids: Iterable[str], *, additive: bool = False, segment: Optional[int] = None) -> None:
        present = {l.id for l in self.layers}
        wanted = [i for i in ids if i in present]
        if additive:
            wanted = self.selection + [i for i in wanted if i not in self._selection]
        self._selection = wanted
        self.focus_segment = segment if len(wanted) == 1 else None

    def select_at(self, p: Point, *, additive: bool = False) -> Optional[tuple[str, int]]:
        hit = pick_layer(
            self.layers, p, self.clock.time, tolerance=self.settings.hit_px, center=self.center
        )
        if hit is None:
            if not additive:
                self.select([])
            return None
        layer_id, seg = hit
        layer = self.get_layer(layer_id)
        self.select([layer_id], additive=additive, segment=seg if layer is not None and layer.is_compound else None)
        return hit

    def selected_layers(self) -> list[Layer]:
        sel = set(self.selection)
        return [l for l in self.layers if l.id in sel]

    def selection_style(self) -> Optional[SelectionStyle]:
        layers = self.selected_layers()
        if not layers:
            return None

        def common(values: list[Any]) -> Any:
            return values[0] if all(v == values[0] for v in values) else None

        seg = self.focus_segment
        if len(layers) == 1 and seg is not None and layers[0].segments is not None:
            l = layers[0]
            rows = [{
                "color": _seg_value(l, "color", seg),
                "fill": _seg_value(l, "fill", seg),
                "width": _seg_value(l, "width", seg),
                "tension": _seg_value(l, "tension", seg),
                "closed": _seg_value(l, "closed", seg),
            }]
        else:
            rows = [
                {"color": l.color, "fill": l.fill, "width": l.width, "tension": l.tension, "closed": l.closed}
                for l in layers
            ]
        return SelectionStyle(
            color=common([r["color"] for r in rows]),
            fill=common([r["fill"] for r in rows]),
            width=common([r["width"] for r in rows]),
            tension=common([r["tension"] for r in rows]),
            closed=common([r["closed"] for r in rows]),
            stroke_opacity=common([l.stroke_opacity for l in layers]),
            fill_opacity=common([l.fill_opacity for l in layers]),
            count=len(layers),
        )

    # ----------------------------
    # Edición live (drag)
    # ----------------------------
    def begin_live_edit(self) -> None:
        self.history.begin_live_edit()

    def update_live_edit(self, action: Callable[[list[Layer]], list[Layer]]) -> None:
        self.history.update_live_edit(action)

    def commit(self) -> bool:
        return self.history.commit()

    def revert(self) -> bool:
        return self.history.revert()

    def hit_vertex(self, layer_id: str, p: Point) -> Optional[VertexHit]:
        layer = self.get_layer(layer_id)
        if layer is None:
            return None
        return hit_vertex(layer, p, self.clock.time, radius=self.settings.hit_px, center=self.center)

    def move_vertex(self, layer_id: str, hit: VertexHit, p: Point) -> bool:
        """Mueve el vértice `hit` a la posición de pantalla `p` (live; cerrar con commit)."""
        layer = self.get_layer(layer_id)
        if layer is None or hit.segment >= layer.segment_count:
            log.debug("move_vertex ignorado: %r", layer_id)
            return False
        seg_idx = hit.segment if layer.segments is not None else None
        local = to_local(layer, p, self.clock.time, seg_idx)
        # Un vértice espejado se mueve espejando el cursor (el flip es involutivo).
        local = mirror_point(local, hit.variant, self.center.x, self.center.y)

        def fn(l: Layer) -> Layer:
            if l.segments is None:
                pts = list(l.points)
                if 0 <= hit.index < len(pts):
                    pts[hit.index] = local
                l.points = pts
            else:
                segs = [list(s) for s in l.segments]
                if 0 <= hit.index < len(segs[hit.segment]):
                    segs[hit.segment][hit.index] = local
                l.segments = segs
                l.sync_points()
            return l

        return self._commit_layer(layer_id, fn, live=True)

    def drag_pivot(self, layer_id: str, dx: float, dy: float, *, segment: Optional[int] = None) -> bool:
        """Desplaza el pivot por un delta de pantalla (live).

        Se aplica al transform estático y a cada keyframe del track, cada uno
        con su propia rotación/escala. Para un segmento, el delta pasa antes
        por la inversa del transform de capa vigente (el pivot del segmento
        vive dentro del espacio de la capa).
        """
        def fn(l: Layer) -> Layer:
            if segment is None:
                l.transform = accumulate_pivot_delta(l.transform or IDENTITY, dx, dy)
                l.keyframes = [
                    _kf_with_value(k, accumulate_pivot_delta(k.value, dx, dy)) for k in l.keyframes
                ]
            elif l.segments is not None and 0 <= segment < len(l.segments):
                n = len(l.segments)
                outer = resolve_effective_transform(l, self.clock.time)
                ldx, ldy = screen_delta_to_local(outer, dx, dy)
                ts = list(l.segment_transforms or [None] * n)
                ts[segment] = accumulate_pivot_delta(ts[segment] or IDENTITY, ldx, ldy)
                l.segment_transforms = ts
                tracks = [list(t) for t in (l.segment_keyframes or [[] for _ in range(n)])]
                tracks[segment] = [
                    _kf_with_value(k, accumulate_pivot_delta(k.value, ldx, ldy)) for k in tracks[segment]
                ]
                l.segment_keyframes = tracks
            return l

        return self._commit_layer(layer_id, fn, live=True)

    def insert_vertex(self, layer_id: str, p: Point) -> Optional[tuple[int, int]]:
        """Inserta un vértice en el tramo más cercano a `p` (umbral `insert_px`).

        Devuelve (segmento, índice) del vértice nuevo o None si no hubo tramo cerca.
        """
        layer = self.get_layer(layer_id)
        if layer is None:
            return None
        compound = layer.segments is not None
        best: Optional[tuple[int, int, Point]] = None
        for si, seg in enumerate(layer.all_segments()):
            local = to_local(layer, p, self.clock.time, si if compound else None)
            closed = _seg_value(layer, "closed", si) if compound else layer.closed
            idx = nearest_segment_index(seg, local, closed=bool(closed), threshold=self.settings.insert_px)
            if idx is not None:
                best = (si, idx, local)
                break
        if best is None:
            log.debug("insert_vertex: ningún tramo cerca de %s", p)
            return None
        si, idx, local = best

        def fn(l: Layer) -> Layer:
            if l.segments is None:
                pts = list(l.points)
                pts.insert(idx, local)
                l.points = pts
            else:
                segs = [list(s) for s in l.segments]
                segs[si].insert(idx, local)
                l.segments = segs
                l.sync_points()
            return l

        self._commit_layer(layer_id, fn)
        return (si, idx)

    # ----------------------------
    # Keyframes
    # ----------------------------
    def _focus(self, layer_id: Optional[str], segment: Optional[int]) -> Optional[tuple[Layer, Optional[int]]]:
        if layer_id is None:
            sel = self.selection
            if not sel:
                return None
            layer_id = sel[0]
            if segment is None:
                segment = self.focus_segment
        layer = self.get_layer(layer_id)
        if layer is None:
            return None
        if segment is not None and (layer.segments is None or not 0 <= segment < len(layer.segments)):
            segment = None
        return layer, segment

    def _edit_track(
        self,
        layer_id: str,
        segment: Optional[int],
        fn: Callable[[list[Keyframe]], list[Keyframe]],
    ) -> bool:
        def apply(l: Layer) -> Layer:
            if segment is None:
                l.keyframes = fn(list(l.keyframes))
            else:
                tracks = [list(t) for t in (l.segment_keyframes or [[] for _ in l.segments or []])]
                tracks[segment] = fn(tracks[segment])
                l.segment_keyframes = tracks
            return l

        return self._commit_layer(layer_id, apply)

    def add_keyframe(
        self,
        layer_id: Optional[str] = None,
        *,
        segment: Optional[int] = None,
        value=None,
        ease: Easing | str = Easing.LINEAR,
    ) -> Optional[Keyframe]:
        """Captura un keyframe en `clock.time` (valor = transform efectivo actual)."""
        target = self._focus(layer_id, segment)
        if target is None:
            log.debug("add_keyframe sin objetivo")
            return None
        layer, seg = target
        t = self.clock.time
        if value is None:
            value = resolve_effective_transform(layer, t, seg)
        kf = Keyframe(time=t, value=value, ease=coerce_easing(ease))
        self._edit_track(layer.id, seg, lambda tr: upsert_keyframe(tr, kf, KEYFRAME_EPSILON))
        return kf

    def update_keyframe(self, kf_id: str, layer_id: Optional[str] = None, *, segment: Optional[int] = None, **changes: Any) -> bool:
        target = self._focus(layer_id, segment)
        if target is None:
            log.debug("update_keyframe sin objetivo")
            return False
        layer, seg = target
        return self._edit_track(layer.id, seg, lambda tr: update_keyframe(tr, kf_id, KEYFRAME_EPSILON, **changes))

    def delete_keyframe(self, kf_id: str, layer_id: Optional[str] = None, *, segment: Optional[int] = None) -> bool:
        target = self._focus(layer_id, segment)
        if target is None:
            log.debug("delete_keyframe sin objetivo")
            return False
        layer, seg = target
        return self._edit_track(layer.id, seg, lambda tr: remove_keyframe(tr, kf_id))

    # ----------------------------
    # Merge / split
    # ----------------------------
    def merge_selected(self) -> Optional[str]:
        sel = self.selection
        if len(sel) < 2:
            log.debug("merge_selected: se necesitan 2+ capas (hay %d)", len(sel))
            return None
        merged_id = new_layer_id("merged")
        if not self.history.set_state(lambda ls: merge_layers(ls, sel, new_id=merged_id)):
            return None
        self.select([merged_id])
        return merged_id

    def split_selected(self) -> list[str]:
        sel = self.selection
        if len(sel) != 1:
            log.debug("split_selected: se necesita exactamente 1 capa")
            return []
        before = {l.id for l in self.layers}
        if not self.history.set_state(lambda ls: split_layer(ls, sel[0])):
            return []
        new_ids = [l.id for l in self.layers if l.id not in before]
        self.select(new_ids)
        return new_ids

    # ----------------------------
    # Undo / redo
    # ----------------------------
    def undo(self) -> bool:
        return self.history.undo()

    def redo(self) -> bool:
        return self.history.redo()

    @property
    def can_undo(self) -> bool:
        return self.history.can_undo

    @property
    def can_redo(self) -> bool:
        return self.history.can_redo

    # ----------------------------
    # Estilo / herramientas
    # ----------------------------
    def toggle_symmetry(self, key: str) -> SymmetrySettings:
        """Conmuta un eje en las capas seleccionadas o, sin selección, en el borrador."""
        layers = self.selected_layers()
        if not layers:
            self.symmetry = self.symmetry.toggled(key)
            return self.symmetry
        ids = {l.id for l in layers}
        new_sym = layers[0].symmetry.toggled(key)

        def action(ls: list[Layer]) -> list[Layer]:
            out = []
            for l in ls:
                if l.id in ids:
                    l = l.copy()
                    l.symmetry = new_sym
                out.append(l)
            return out

        self.history.set_state(action)
        return new_sym

    def set_tension(self, k: float) -> float:
        """Aplica la tensión (recortada) a la selección; sin selección, al borrador."""
        k = clamp_tension(k)
        layers = self.selected_layers()
        if not layers:
            self.tension = k
            return k
        seg = self.focus_segment
        if len(layers) == 1 and seg is not None and layers[0].segments is not None:
            self.update_segment(layers[0].id, seg, tension=k)
            return k
        ids = {l.id for l in layers}

        def action(ls: list[Layer]) -> list[Layer]:
            out = []
            for l in ls:
                if l.id in ids:
                    l = l.copy()
                    l.tension = k
                    if l.segment_tensions is not None:
                        l.segment_tensions = [k] * len(l.segment_tensions)
                out.append(l)
            return out

        self.history.set_state(action)
        return k

    def snap(self, p: Point, draft: Sequence[Point] = ()) -> Point:
        return snap_point(
            p,
            [
                render_variant_points(l, self.clock.time, self.center)
                for l in self.layers
                if l.visible
            ],
            draft,
            symmetry=self.symmetry,
            center=self.center,
            threshold=self.settings.snap_px,
            snap_to_points=self.settings.snap_to_points,
            snap_to_guides=self.settings.snap_to_guides,
        )

    # ----------------------------
    # Fin de gesto
    # ----------------------------
    def _new_layer(self, points: list[Point], closed: bool) -> Layer:
        return Layer(
            id=new_layer_id(),
            points=points,
            tension=self.tension,
            closed=closed,
            symmetry=copy.copy(self.symmetry),
        )

    def finish_stroke(
        self,
        points: Sequence[Point],
        *,
        closed: bool = False,
        simplify: Optional[float] = None,
    ) -> Optional[Layer]:
        """Crea una capa desde un trazo (simplificado con RDP si tolerancia > 0)."""
        pts = list(points)
        if len(pts) < 2:
            log.debug("finish_stroke: trazo de %d punto(s) descartado", len(pts))
            return None
        tol = self.settings.simplify_tolerance if simplify is None else float(simplify)
        if tol > 0:
            before = len(pts)
            pts = simplify_path(pts, tol)
            log.debug("finish_stroke: RDP %d -> %d puntos (tol=%s)", before, len(pts), tol)
        return self.add_layer(self._new_layer(pts, closed))

    def finish_shape(self, tool: ShapeTool | str, start: Point, end: Point) -> Optional[Layer]:
        tool = coerce_shape_tool(tool)
        if start == end:
            log.debug("finish_shape: drag nulo ignorado")
            return None
        pts = make_shape(tool, start, end)
        return self.add_layer(self._new_layer(pts, closed=tool is not ShapeTool.PEN))

    def set_animation(self, layer_id: str, animation: Optional[AnimationSettings]) -> bool:
        return self.update_layer(layer_id, animation=animation)

    def reset(self, layers: Iterable[Layer]) -> None:
        """Reemplaza el documento (p.ej. al cargar) vaciando el historial."""
        self.history.reset(list(layers))
        self._selection = []
        self.focus_segment = None


def _seg_value(layer: Layer, field_name: str, index: int) -> Any:
    arr = getattr(layer, _SEGMENT_FIELDS[field_name])
    if arr is None or index >= len(arr) or arr[index] is None:
        return getattr(layer, field_name)
    return arr[index]


def _kf_with_value(k: Keyframe, value) -> Keyframe:
    return Keyframe(time=k.time, value=value, ease=k.ease, id=k.id)


def _with_id(layer: Layer, layer_id: str) -> Layer:
    out = layer.copy()
    out.id = layer_id
    return out


def _offset_layer(layer: Layer, dx: float, dy: float) -> Layer:
    out = layer.copy()
    if out.segments is not None:
        out.segments = [[Point(p.x + dx, p.y + dy) for p in seg] for seg in out.segments]
        out.sync_points()
    else:
        out.points = [Point(p.x + dx, p.y + dy) for p in out.points]
    return out
