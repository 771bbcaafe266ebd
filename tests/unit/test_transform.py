"""
Unit tests for the transform model, keyframe tracks and effective transforms.
"""

import itertools
import math

import pytest

from pcs.core.models import Layer
from pcs.geom.effective import (
    render_points, render_segments, render_variant_points, render_variants, resolve_effective_transform,
)
from pcs.geom.keyframes import (
    Easing, Keyframe, ease, interpolate_transform, remove_keyframe, remove_keyframe_at,
    update_keyframe, upsert_keyframe,
)
from pcs.geom.primitives import Point
from pcs.geom.symmetry import SymmetrySettings
from pcs.geom.transform import (
    IDENTITY, Transform, accumulate_pivot_delta, apply_transform, guard_scale, invert_transform,
    pivot_point, screen_delta_to_local, transform_points,
)


class TestTransform:
    """Tests for forward/inverse mapping."""

    @pytest.mark.parametrize(
        "rotation,scale",
        list(itertools.product([0, 37, 90, 180, 271], [0.1, 1, 3])),
    )
    def test_inverse_roundtrip(self, rotation, scale):
        t = Transform(x=12.5, y=-7, rotation=rotation, scale=scale, px=3, py=-4)
        pivot = Point(150, 150)
        for p in (Point(0, 0), Point(123.4, -56.7), Point(800, 600)):
            back = invert_transform(t, apply_transform(t, p, pivot), pivot)
            assert back.x == pytest.approx(p.x, abs=1e-6)
            assert back.y == pytest.approx(p.y, abs=1e-6)

    def test_non_uniform_scale_roundtrip(self):
        t = Transform(rotation=45, scale=1, scale_x=2, scale_y=0.5)
        pivot = Point(10, 10)
        p = Point(30, -5)
        back = invert_transform(t, apply_transform(t, p, pivot), pivot)
        assert back.x == pytest.approx(p.x) and back.y == pytest.approx(p.y)

    def test_rotation_about_pivot(self):
        t = Transform(rotation=90)
        out = apply_transform(t, Point(20, 10), Point(10, 10))
        assert out.x == pytest.approx(10) and out.y == pytest.approx(20)

    def test_zero_scale_is_guarded(self):
        t = Transform(scale=0)
        out = invert_transform(t, Point(5, 5), Point(0, 0))
        assert math.isfinite(out.x) and math.isfinite(out.y)
        assert guard_scale(0) > 0
        assert guard_scale(-1e-12) < 0

    def test_pivot_point_from_base_bbox(self, square_points):
        assert pivot_point(Transform(px=5, py=-5), square_points) == Point(155, 145)

    def test_transform_points_identity_copy(self, square_points):
        out = transform_points(IDENTITY, square_points)
        assert out == square_points and out is not square_points

    def test_scale_fallback(self):
        t = Transform(scale=2)
        assert (t.sx, t.sy) == (2.0, 2.0)
        assert Transform(scale=2, scale_x=3).sx == 3.0

    def test_dict_accepts_camel_case(self):
        t = Transform.from_dict({"x": 1, "scaleX": 2, "scaleY": 3})
        assert (t.x, t.scale_x, t.scale_y) == (1.0, 2.0, 3.0)
        assert Transform.from_dict(t.to_dict()) == t

    def test_pivot_delta_follows_cursor(self, square_points):
        """Screen delta is rotated by -rotation and divided by the scale."""
        t = Transform(x=20, rotation=37, scale=2)
        t2 = accumulate_pivot_delta(t, 10, 0)
        a = math.radians(-37)
        assert t2.px == pytest.approx(10 * math.cos(a) / 2)
        assert t2.py == pytest.approx(10 * math.sin(a) / 2)

    def test_pivot_delta_without_rotation(self):
        t2 = accumulate_pivot_delta(Transform(scale=4), 8, -4)
        assert (t2.px, t2.py) == (pytest.approx(2), pytest.approx(-1))

    def test_screen_delta_ignores_translation(self):
        dx, dy = screen_delta_to_local(Transform(x=500, y=-40, rotation=90, scale=2), 10, 0)
        assert dx == pytest.approx(0)
        assert dy == pytest.approx(-5)


class TestKeyframes:
    """Tests for eased interpolation and track edits."""

    def _track(self, ease_mode=Easing.LINEAR):
        return [
            Keyframe(time=0, value=Transform(x=0, rotation=0), ease=ease_mode, id="a"),
            Keyframe(time=1000, value=Transform(x=100, rotation=90), id="b"),
        ]

    def test_empty_track(self):
        assert interpolate_transform([], 10) is None

    def test_clamps_outside_track(self):
        track = self._track()
        assert interpolate_transform(track, -5).x == 0
        assert interpolate_transform(track, 5000).x == 100

    def test_linear_midpoint(self):
        mid = interpolate_transform(self._track(), 500)
        assert mid.x == pytest.approx(50)
        assert mid.rotation == pytest.approx(45)

    def test_outgoing_easing_belongs_to_first_keyframe(self):
        assert interpolate_transform(self._track(Easing.EASE_IN), 500).x == pytest.approx(25)
        assert interpolate_transform(self._track(Easing.EASE_OUT), 500).x == pytest.approx(75)

    def test_ease_curves(self):
        for mode in Easing:
            assert ease(mode, 0.0) == pytest.approx(0.0)
            assert ease(mode, 1.0) == pytest.approx(1.0)
        assert ease(Easing.EASE_IN_OUT, 0.25) == pytest.approx(0.125)
        assert ease(Easing.EASE_IN_OUT, 0.75) == pytest.approx(0.875)

    def test_missing_axis_scale_falls_back(self):
        track = [
            Keyframe(time=0, value=Transform(scale=1)),
            Keyframe(time=100, value=Transform(scale=3, scale_x=5)),
        ]
        mid = interpolate_transform(track, 50)
        assert mid.sx == pytest.approx(3)
        assert mid.sy == pytest.approx(2)

    def test_upsert_overwrites_within_epsilon(self):
        track = self._track()
        new = Keyframe(time=1000.4, value=Transform(x=7), id="c")
        out = upsert_keyframe(track, new, epsilon=1.0)
        assert [k.id for k in out] == ["a", "c"]

    def test_upsert_keeps_sorted(self):
        out = upsert_keyframe(self._track(), Keyframe(time=500, id="m"))
        assert [k.time for k in out] == [0, 500, 1000]

    def test_update_and_remove(self):
        track = self._track()
        moved = update_keyframe(track, "b", time=200, ease="ease-out")
        assert [(k.id, k.time) for k in moved] == [("a", 0), ("b", 200)]
        assert moved[1].ease is Easing.EASE_OUT
        assert update_keyframe(track, "zzz", time=1) == track
        assert [k.id for k in remove_keyframe(track, "a")] == ["b"]
        assert [k.id for k in remove_keyframe_at(track, 999.5)] == ["a"]

    def test_keyframe_dict_roundtrip(self):
        k = Keyframe(time=250, value=Transform(x=3, scale_y=2), ease=Easing.EASE_IN_OUT, id="kf_1")
        assert Keyframe.from_dict(k.to_dict()) == k


class TestEffectiveTransform:
    """Tests for transform resolution and nested rendering."""

    def test_identity_without_transform(self, square_points):
        layer = Layer(id="a", points=square_points)
        assert resolve_effective_transform(layer, 100) == IDENTITY
        assert render_points(layer) == square_points

    def test_static_transform(self, square_points):
        layer = Layer(id="a", points=square_points, transform=Transform(x=10))
        assert render_points(layer)[0] == Point(110, 100)

    def test_track_wins_over_static(self, line_layer):
        line_layer.transform = Transform(x=999)
        assert resolve_effective_transform(line_layer, 1000).x == 100
        # Sin tiempo: se usa el transform estático.
        assert resolve_effective_transform(line_layer, None).x == 999

    def test_segment_nested_inside_layer(self, compound_layer):
        compound_layer.transform = Transform(x=100)
        segs = render_segments(compound_layer)
        # Segmento 0 sin transform propio: solo traslación de la capa.
        assert segs[0][0] == Point(100, 0)
        # Segmento 1 rotado 90° sobre su propio centro (55, 50) y luego trasladado.
        assert segs[1][0].x == pytest.approx(155)
        assert segs[1][0].y == pytest.approx(45)


class TestRenderVariants:
    """Mirrored copies are built from base geometry and share the layer transforms."""

    def _layer(self):
        return Layer(
            id="m",
            points=[Point(100, 300), Point(150, 350)],
            transform=Transform(x=100),
            symmetry=SymmetrySettings(horizontal=True),
        )

    def test_identity_variant_matches_render_segments(self, compound_layer):
        compound_layer.transform = Transform(x=100, rotation=30)
        variants = render_variants(compound_layer)
        assert variants[0].tag == "I"
        assert variants[0].segments == render_segments(compound_layer)

    def test_mirror_happens_before_translation(self):
        """The mirrored copy travels with the layer instead of the opposite way."""
        variants = render_variants(self._layer())
        assert [v.tag for v in variants] == ["I", "H"]
        assert variants[0].segments == [[Point(200, 300), Point(250, 350)]]
        assert variants[1].segments == [[Point(800, 300), Point(750, 350)]]

    def test_mirrored_segment_rotates_about_base_pivot(self, compound_layer):
        """Segment 1 mirrors to (750, 50)-(740, 50), then rotates 90 about the base center (55, 50)."""
        h = render_variants(compound_layer)[1].segments[1]
        assert h[0].x == pytest.approx(55)
        assert h[0].y == pytest.approx(745)
        assert h[1].y == pytest.approx(735)
        assert render_variant_points(compound_layer)[-1] == h[-1]
