"""Symmetry expansion (mirror variants of a shape).

Variants are tagged I (identity), H (mirror across the vertical center line,
x -> 2cx - x), V (mirror across the horizontal center line, y -> 2cy - y) and
C (point symmetry, both). Mirrored arrays keep order and length so index based
operations (vertex dragging, per-segment styles) line up across variants.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence

from pcs.geom.primitives import Point

VARIANT_TAGS = ("I", "H", "V", "C")


@dataclass
class SymmetrySettings:
    horizontal: bool = False
    vertical: bool = False
    center: bool = False

    def active_axes(self) -> tuple[bool, bool, bool]:
        """(H, V, C) after closing the group: two mirrors imply the third."""
        h, v, c = self.horizontal, self.vertical, self.center
        return (h or (v and c), v or (h and c), c or (h and v))

    def toggled(self, key: str) -> "SymmetrySettings":
        if key not in ("horizontal", "vertical", "center"):
            raise ValueError(f"eje de simetría desconocido: {key!r}")
        d = self.to_dict()
        d[key] = not d[key]
        return SymmetrySettings(**d)

    def to_dict(self) -> dict[str, bool]:
        return {
            "horizontal": bool(self.horizontal),
            "vertical": bool(self.vertical),
            "center": bool(self.center),
        }

    @staticmethod
    def from_dict(d: Any) -> "SymmetrySettings":
        if not isinstance(d, dict):
            return SymmetrySettings()
        return SymmetrySettings(
            horizontal=bool(d.get("horizontal", False)),
            vertical=bool(d.get("vertical", False)),
            center=bool(d.get("center", False)),
        )


@dataclass(frozen=True)
class Variant:
    tag: str
    points: list[Point]


@dataclass(frozen=True)
class MultiVariant:
    tag: str
    segments: list[list[Point]]


def mirror_point(p: Point, tag: str, cx: float, cy: float) -> Point:
    if tag == "H":
        return Point(2.0 * cx - p.x, p.y)
    if tag == "V":
        return Point(p.x, 2.0 * cy - p.y)
    if tag == "C":
        return Point(2.0 * cx - p.x, 2.0 * cy - p.y)
    return p


def _active_tags(settings: SymmetrySettings) -> list[str]:
    h, v, c = settings.active_axes()
    tags = ["I"]
    if h:
        tags.append("H")
    if v:
        tags.append("V")
    if c:
        tags.append("C")
    return tags


def apply_symmetry(
    points: Sequence[Point],
    settings: SymmetrySettings,
    cx: float,
    cy: float,
) -> list[Variant]:
    """Identity first, then every active mirror (H, V, C order)."""
    out: list[Variant] = []
    for tag in _active_tags(settings):
        if tag == "I":
            out.append(Variant("I", list(points)))
        else:
            out.append(Variant(tag, [mirror_point(p, tag, cx, cy) for p in points]))
    return out


def apply_symmetry_multi(
    segments: Sequence[Sequence[Point]],
    settings: SymmetrySettings,
    cx: float,
    cy: float,
) -> list[MultiVariant]:
    """Same as `apply_symmetry` for a compound shape: every segment gets the same tag."""
    out: list[MultiVariant] = []
    for tag in _active_tags(settings):
        out.append(
            MultiVariant(tag, [[mirror_point(p, tag, cx, cy) for p in seg] for seg in segments])
        )
    return out


# Reglas de paridad bajo espejo, por tipo de animación. Son reglas derivadas a
# mano del comportamiento visual (no de un álgebra general): un giro se invierte
# bajo un único espejo (H o V) pero no bajo simetría central; la flotación
# invierte su recorrido cuando el eje vertical queda espejado (V o C).
_MIRROR_RULES: dict[tuple[str, str], str] = {
    ("spin", "H"): "reverse_direction",
    ("spin", "V"): "reverse_direction",
    ("float", "V"): "invert_travel",
    ("float", "C"): "invert_travel",
}

_FLIP_DIRECTION = {"forward": "reverse", "reverse": "forward"}


@dataclass(frozen=True)
class MirroredAnimation:
    direction: str
    invert_travel: bool = False


def mirror_animation(anim_type: str, tag: str, direction: str = "forward") -> MirroredAnimation:
    """Playback parameters of `anim_type` when drawn on the `tag` variant.

    `alternate` never flips: it already plays both ways.
    """
    rule = _MIRROR_RULES.get((anim_type, tag))
    if rule == "reverse_direction":
        return MirroredAnimation(_FLIP_DIRECTION.get(direction, direction))
    if rule == "invert_travel":
        return MirroredAnimation(direction, invert_travel=True)
    return MirroredAnimation(direction)
