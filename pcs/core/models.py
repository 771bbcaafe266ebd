# File: pcs/core/models.py
# Project: PolyCurveStudio (PCS)
# Version: 0.1.0
# Status: stable
# Date: 2026-10-18
# Purpose: Modelos de datos del documento (capas, animación, arrays por segmento).
# Notes:
# - Una capa compuesta guarda `segments` + arrays paralelos segment_* (mismo largo).
# - Los segmentos no apuntan a su capa: se accede por índice a los arrays del padre.
from __future__ import annotations

import copy
import uuid
from dataclasses import dataclass, field
from typing import Any, Iterable, Literal, Optional

from pcs.core.version import DEFAULT_FILL, DEFAULT_STROKE, DEFAULT_TENSION, DEFAULT_WIDTH
from pcs.geom.keyframes import Keyframe, sorted_track
from pcs.geom.primitives import Point
from pcs.geom.symmetry import SymmetrySettings
from pcs.geom.transform import Transform
from pcs.utils.errors import PcsSchemaError

ANIMATION_TYPES = (
    "none", "draw", "pulse", "float", "spin", "bounce", "glow", "shake", "swing", "tada",
)
AnimationDirection = Literal["forward", "reverse", "alternate"]


@dataclass
class AnimationSettings:
    """Efecto de movimiento tipo CSS (loop infinito) de una capa o segmento."""

    types: list[str] = field(default_factory=list)
    duration: float = 2.0  # segundos
    delay: float = 0.0     # segundos
    ease: str = "ease-in-out"
    direction: AnimationDirection = "forward"

    def active_types(self) -> list[str]:
        return [t for t in self.types if t != "none"]

    def to_dict(self) -> dict[str, Any]:
        return {
            "types": [str(t) for t in self.types],
            "duration": float(self.duration),
            "delay": float(self.delay),
            "ease": str(self.ease),
            "direction": str(self.direction),
        }

    @staticmethod
    def from_dict(d: dict[str, Any]) -> "AnimationSettings":
        raw_types = d.get("types")
        if raw_types is None and d.get("type") is not None:
            # Compat: el editor viejo guardaba un único `type`.
            raw_types = [d.get("type")]
        types = [str(t) for t in (raw_types or [])]
        bad = [t for t in types if t not in ANIMATION_TYPES]
        if bad:
            raise PcsSchemaError(f"animation.types inválido: {bad!r}")
        direction = str(d.get("direction", "forward"))
        if direction not in ("forward", "reverse", "alternate"):
            raise PcsSchemaError(f"animation.direction inválido: {direction!r}")
        return AnimationSettings(
            types=types,
            duration=_as_float(d.get("duration", 2.0), "animation.duration"),
            delay=_as_float(d.get("delay", 0.0), "animation.delay"),
            ease=str(d.get("ease", "ease-in-out")),
            direction=direction,  # type: ignore[arg-type]
        )


@dataclass
class Layer:
    id: str
    points: list[Point] = field(default_factory=list)

    # Estilo
    color: str = DEFAULT_STROKE
    fill: str = DEFAULT_FILL
    width: float = DEFAULT_WIDTH
    tension: float = DEFAULT_TENSION
    closed: bool = False
    stroke_opacity: float = 1.0
    fill_opacity: float = 1.0
    visible: bool = True
    name: Optional[str] = None
    symmetry: SymmetrySettings = field(default_factory=SymmetrySettings)
    animation: Optional[AnimationSettings] = None

    # Transform de la capa completa (estático) + track de keyframes
    transform: Optional[Transform] = None
    keyframes: list[Keyframe] = field(default_factory=list)

    # Solo capas compuestas (merge). Todos los arrays tienen len(segments).
    segments: Optional[list[list[Point]]] = None
    segment_colors: Optional[list[str]] = None
    segment_fills: Optional[list[str]] = None
    segment_widths: Optional[list[float]] = None
    segment_transforms: Optional[list[Optional[Transform]]] = None
    segment_keyframes: Optional[list[list[Keyframe]]] = None
    segment_closed: Optional[list[bool]] = None
    segment_tensions: Optional[list[float]] = None
    segment_animations: Optional[list[Optional[AnimationSettings]]] = None
    # Cantidad de segmentos aportados por cada capa original (para split) y los
    # escalares de esa capa que no tienen array propio (id, nombre, opacidades...).
    group_counts: Optional[list[int]] = None
    group_meta: Optional[list[dict[str, Any]]] = None

    @property
    def is_compound(self) -> bool:
        return self.segments is not None and len(self.segments) >= 2

    @property
    def segment_count(self) -> int:
        return len(self.segments) if self.segments is not None else 1

    def segment_points(self, index: int) -> list[Point]:
        if self.segments is None:
            return list(self.points)
        return list(self.segments[index])

    def all_segments(self) -> list[list[Point]]:
        return [list(s) for s in self.segments] if self.segments is not None else [list(self.points)]

    def sync_points(self) -> None:
        """Recalcula `points` como concatenación de `segments`."""
        if self.segments is not None:
            self.points = [p for seg in self.segments for p in seg]

    def copy(self) -> "Layer":
        return copy.deepcopy(self)

    def validate(self) -> None:
        """Chequea invariantes de capa compuesta. Lanza PcsSchemaError."""
        if self.segments is None:
            return
        flat = [p for seg in self.segments for p in seg]
        if flat != list(self.points):
            raise PcsSchemaError(f"Capa {self.id!r}: points != concat(segments)")
        n = len(self.segments)
        for name in _SEGMENT_ARRAYS:
            arr = getattr(self, name)
            if arr is not None and len(arr) != n:
                raise PcsSchemaError(f"Capa {self.id!r}: {name} tiene {len(arr)} items (se esperan {n})")
        if self.group_counts is not None and sum(self.group_counts) != n:
            raise PcsSchemaError(f"Capa {self.id!r}: group_counts no suma {n}")
        if self.group_meta is not None and self.group_counts is not None:
            if len(self.group_meta) != len(self.group_counts):
                raise PcsSchemaError(f"Capa {self.id!r}: group_meta no coincide con group_counts")

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": str(self.id),
            "points": [p.to_dict() for p in self.points],
            "color": str(self.color),
            "fill": str(self.fill),
            "width": float(self.width),
            "tension": float(self.tension),
            "closed": bool(self.closed),
            "stroke_opacity": float(self.stroke_opacity),
            "fill_opacity": float(self.fill_opacity),
            "visible": bool(self.visible),
            "name": self.name,
            "symmetry": self.symmetry.to_dict(),
            "animation": self.animation.to_dict() if self.animation else None,
            "transform": self.transform.to_dict() if self.transform else None,
            "keyframes": [k.to_dict() for k in self.keyframes],
        }
        # Limpieza: los arrays por segmento solo se escriben en capas compuestas.
        if self.segments is not None:
            d["segments"] = [[p.to_dict() for p in seg] for seg in self.segments]
            d["segment_colors"] = _opt_list(self.segment_colors, str)
            d["segment_fills"] = _opt_list(self.segment_fills, str)
            d["segment_widths"] = _opt_list(self.segment_widths, float)
            d["segment_transforms"] = _opt_list(
                self.segment_transforms, lambda t: t.to_dict() if t else None
            )
            d["segment_keyframes"] = _opt_list(
                self.segment_keyframes, lambda tr: [k.to_dict() for k in tr]
            )
            d["segment_closed"] = _opt_list(self.segment_closed, bool)
            d["segment_tensions"] = _opt_list(self.segment_tensions, float)
            d["segment_animations"] = _opt_list(
                self.segment_animations, lambda a: a.to_dict() if a else None
            )
            d["group_counts"] = _opt_list(self.group_counts, int)
            d["group_meta"] = _opt_list(self.group_meta, lambda m: copy.deepcopy(dict(m)))
        return d

    @staticmethod
    def from_dict(d: dict[str, Any]) -> "Layer":
        if not isinstance(d, dict):
            raise PcsSchemaError("Capa inválida: se esperaba dict")
        lid = str(d.get("id", "")).strip()
        if not lid:
            raise PcsSchemaError("Capa inválida: falta 'id'")
        raw_points = d.get("points")
        if not isinstance(raw_points, list):
            raise PcsSchemaError(f"Capa {lid!r}: points inválido (se espera lista)")

        anim_raw = d.get("animation")
        t_raw = d.get("transform")
        layer = Layer(
            id=lid,
            points=_as_points(raw_points, f"{lid}.points"),
            color=str(d.get("color") or DEFAULT_STROKE),
            fill=str(d.get("fill") or DEFAULT_FILL),
            width=_as_float(d.get("width", DEFAULT_WIDTH), f"{lid}.width"),
            tension=_as_float(d.get("tension", DEFAULT_TENSION), f"{lid}.tension"),
            closed=bool(d.get("closed", False)),
            stroke_opacity=_as_float(_pick(d, "stroke_opacity", "strokeOpacity", default=1.0), f"{lid}.stroke_opacity"),
            fill_opacity=_as_float(_pick(d, "fill_opacity", "fillOpacity", default=1.0), f"{lid}.fill_opacity"),
            visible=bool(d.get("visible", True)),
            name=(str(d["name"]) if d.get("name") not in (None, "") else None),
            symmetry=SymmetrySettings.from_dict(d.get("symmetry")),
            animation=AnimationSettings.from_dict(anim_raw) if isinstance(anim_raw, dict) else None,
            transform=Transform.from_dict(t_raw) if isinstance(t_raw, dict) else None,
            keyframes=sorted_track(_as_track(d.get("keyframes"), f"{lid}.keyframes")),
        )

        segs_raw = _pick(d, "segments", "multiPathPoints")
        if isinstance(segs_raw, list):
            layer.segments = [_as_points(s, f"{lid}.segments") for s in segs_raw]
            layer.segment_colors = _opt_list(_pick(d, "segment_colors", "segmentColors"), str)
            layer.segment_fills = _opt_list(_pick(d, "segment_fills", "segmentFills"), str)
            layer.segment_widths = _opt_list(_pick(d, "segment_widths", "segmentWidths"), float)
            layer.segment_transforms = _opt_list(
                _pick(d, "segment_transforms", "segmentTransforms"),
                lambda t: Transform.from_dict(t) if isinstance(t, dict) else None,
            )
            layer.segment_keyframes = _opt_list(
                _pick(d, "segment_keyframes", "segmentKeyframes"),
                lambda tr: sorted_track(_as_track(tr, f"{lid}.segment_keyframes")),
            )
            layer.segment_closed = _opt_list(_pick(d, "segment_closed", "segmentClosed"), bool)
            layer.segment_tensions = _opt_list(_pick(d, "segment_tensions", "segmentTensions"), float)
            layer.segment_animations = _opt_list(
                _pick(d, "segment_animations", "segmentAnimations"),
                lambda a: AnimationSettings.from_dict(a) if isinstance(a, dict) else None,
            )
            layer.group_counts = _opt_list(_pick(d, "group_counts", "groupCounts"), int)
            layer.group_meta = _opt_list(d.get("group_meta"), lambda m: dict(m) if isinstance(m, dict) else {})
            if not layer.points:
                layer.sync_points()
        layer.validate()
        return layer


_SEGMENT_ARRAYS = (
    "segment_colors",
    "segment_fills",
    "segment_widths",
    "segment_transforms",
    "segment_keyframes",
    "segment_closed",
    "segment_tensions",
    "segment_animations",
)


def _pick(d: dict[str, Any], *keys: str, default: Any = None) -> Any:
    for k in keys:
        if k in d and d[k] is not None:
            return d[k]
    return default


def _opt_list(values: Optional[Iterable[Any]], conv) -> Optional[list[Any]]:
    if values is None:
        return None
    return [conv(v) for v in values]


def _as_points(raw: Any, field_name: str) -> list[Point]:
    if not isinstance(raw, list):
        raise PcsSchemaError(f"Campo {field_name} inválido (lista de puntos)")
    try:
        return [Point.from_any(p) for p in raw]
    except (TypeError, ValueError, KeyError, IndexError) as e:
        raise PcsSchemaError(f"Campo {field_name} inválido (punto): {raw!r}") from e


def _as_track(raw: Any, field_name: str) -> list[Keyframe]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise PcsSchemaError(f"Campo {field_name} inválido (lista de keyframes)")
    try:
        return [Keyframe.from_dict(k) for k in raw if isinstance(k, dict)]
    except (TypeError, ValueError, KeyError) as e:
        raise PcsSchemaError(f"Campo {field_name} inválido (keyframe)") from e


def _as_float(value: Any, field_name: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise PcsSchemaError(f"Campo {field_name} inválido (float): {value!r}") from e


def new_layer_id(prefix: str = "path") -> str:
    """Genera un id corto y único.

    Nota: se usa UUID truncado para evitar colisiones sin depender de estado global.
    """
    return f"{prefix}_{uuid.uuid4().hex[:8]}"
