"""Keyframe tracks and eased interpolation.

A keyframe's easing describes the *outgoing* blend toward the next keyframe,
not how the track arrives at it. Tracks are kept sorted by time and never hold
two keyframes closer than `KEYFRAME_EPSILON` (the newer one wins).
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Iterable, Optional, Sequence

from pcs.core.version import KEYFRAME_EPSILON
from pcs.geom.transform import Transform


class Easing(str, Enum):
    LINEAR = "linear"
    EASE_IN = "ease-in"
    EASE_OUT = "ease-out"
    EASE_IN_OUT = "ease-in-out"


def coerce_easing(v: object, default: Easing = Easing.LINEAR) -> Easing:
    s = str(getattr(v, "value", v) or "").strip().lower()
    for e in Easing:
        if e.value == s:
            return e
    return default


def ease(mode: Easing, t: float) -> float:
    """Quadratic easing curves on t in [0, 1]."""
    if mode is Easing.EASE_IN:
        return t * t
    if mode is Easing.EASE_OUT:
        return t * (2.0 - t)
    if mode is Easing.EASE_IN_OUT:
        return 2.0 * t * t if t < 0.5 else -1.0 + (4.0 - 2.0 * t) * t
    return t


def new_keyframe_id() -> str:
    return f"kf_{uuid.uuid4().hex[:8]}"


@dataclass(frozen=True)
class Keyframe:
    time: float
    value: Transform = field(default_factory=Transform)
    ease: Easing = Easing.LINEAR
    id: str = field(default_factory=new_keyframe_id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "time": float(self.time),
            "value": self.value.to_dict(),
            "ease": self.ease.value,
        }

    @staticmethod
    def from_dict(d: dict[str, Any]) -> "Keyframe":
        return Keyframe(
            id=str(d.get("id") or new_keyframe_id()),
            time=float(d.get("time", 0.0)),
            value=Transform.from_dict(d.get("value") or {}),
            ease=coerce_easing(d.get("ease")),
        )


def _lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def sorted_track(track: Iterable[Keyframe]) -> list[Keyframe]:
    return sorted(track, key=lambda k: k.time)


def interpolate_transform(track: Sequence[Keyframe], time: float) -> Optional[Transform]:
    """Transform of `track` at `time` (None for an empty track).

    Clamps to the first/last value outside the track; inside, blends every
    numeric field with k1's easing applied to the normalized parameter.
    """
    if not track:
        return None
    ks = sorted_track(track)
    if time <= ks[0].time:
        return ks[0].value
    if time >= ks[-1].time:
        return ks[-1].value

    for k1, k2 in zip(ks, ks[1:]):
        if k1.time <= time < k2.time:
            span = k2.time - k1.time
            t = (time - k1.time) / span if span > 0 else 1.0
            e = ease(k1.ease, t)
            a, b = k1.value, k2.value
            return Transform(
                x=_lerp(a.x, b.x, e),
                y=_lerp(a.y, b.y, e),
                rotation=_lerp(a.rotation, b.rotation, e),
                scale=_lerp(a.scale, b.scale, e),
                scale_x=_lerp(a.sx, b.sx, e),
                scale_y=_lerp(a.sy, b.sy, e),
                px=_lerp(a.px, b.px, e),
                py=_lerp(a.py, b.py, e),
            )
    return ks[-1].value


def upsert_keyframe(
    track: Sequence[Keyframe],
    kf: Keyframe,
    epsilon: float = KEYFRAME_EPSILON,
) -> list[Keyframe]:
    """Insert `kf` replacing any keyframe within `epsilon` of its time."""
    kept = [k for k in track if abs(k.time - kf.time) >= epsilon and k.id != kf.id]
    kept.append(kf)
    return sorted_track(kept)


def update_keyframe(
    track: Sequence[Keyframe],
    kf_id: str,
    epsilon: float = KEYFRAME_EPSILON,
    **changes: Any,
) -> list[Keyframe]:
    """Apply `changes` (time/value/ease) to keyframe `kf_id`; unknown id -> copy."""
    target = next((k for k in track if k.id == kf_id), None)
    if target is None:
        return list(track)
    if "ease" in changes:
        changes["ease"] = coerce_easing(changes["ease"])
    if "time" in changes:
        changes["time"] = float(changes["time"])
    updated = replace(target, **changes)
    rest = [k for k in track if k.id != kf_id]
    return upsert_keyframe(rest, updated, epsilon)


def remove_keyframe_at(
    track: Sequence[Keyframe],
    time: float,
    epsilon: float = KEYFRAME_EPSILON,
) -> list[Keyframe]:
    return [k for k in track if abs(k.time - time) >= epsilon]


def remove_keyframe(track: Sequence[Keyframe], kf_id: str) -> list[Keyframe]:
    return [k for k in track if k.id != kf_id]
