"""
Unit tests for inverse-transform hit testing.
"""

import pytest

from pcs.core.models import Layer
from pcs.geom.effective import render_points, render_variants
from pcs.geom.hit_test import VertexHit, hit_segment, hit_vertex, pick_layer, to_local
from pcs.geom.primitives import Point
from pcs.geom.symmetry import SymmetrySettings
from pcs.geom.transform import Transform


class TestToLocal:
    """Tests for pointer -> base coordinate mapping."""

    def test_translate_only(self, square_points):
        layer = Layer(id="a", points=square_points, transform=Transform(x=100, y=-10))
        assert to_local(layer, Point(200, 90)) == Point(100, 100)

    def test_animated_frame(self, line_layer):
        """At t=1000 the track translates by +100 in x."""
        local = to_local(line_layer, Point(500, 100), time=1000)
        assert local.x == pytest.approx(400)
        assert local.y == pytest.approx(100)

    def test_compound_inverts_both_levels(self, compound_layer):
        compound_layer.transform = Transform(x=100)
        local = to_local(compound_layer, Point(155, 45), segment=1)
        assert local.x == pytest.approx(50)
        assert local.y == pytest.approx(50)


class TestHitVertex:
    """Tests for vertex picking."""

    def test_hit_rendered_vertex(self, square_points):
        layer = Layer(id="a", points=square_points, transform=Transform(rotation=90, scale=2))
        target = render_points(layer)[2]
        assert hit_vertex(layer, target) == VertexHit(0, 2, "I")

    def test_miss(self, square_points):
        layer = Layer(id="a", points=square_points)
        assert hit_vertex(layer, Point(150, 150)) is None

    def test_mirrored_variant(self, square_points):
        layer = Layer(id="a", points=square_points, symmetry=SymmetrySettings(horizontal=True))
        assert hit_vertex(layer, Point(700, 100)) == VertexHit(0, 0, "H")

    def test_mirrored_variant_on_translated_layer(self):
        """The vertex drawn at the mirrored, translated position is the one picked."""
        layer = Layer(
            id="a",
            points=[Point(100, 300), Point(150, 350)],
            transform=Transform(x=100),
            symmetry=SymmetrySettings(horizontal=True),
        )
        drawn = render_variants(layer)[1].segments[0][0]
        assert drawn == Point(800, 300)
        assert hit_vertex(layer, drawn) == VertexHit(0, 0, "H")
        assert hit_vertex(layer, Point(600, 300)) is None

    def test_radius_scales_with_layer(self, square_points):
        """A 10px screen radius is 5 local units at scale 2."""
        layer = Layer(id="a", points=square_points, transform=Transform(scale=2))
        v = render_points(layer)[0]
        assert hit_vertex(layer, Point(v.x + 9, v.y), radius=10) is not None
        assert hit_vertex(layer, Point(v.x + 11, v.y), radius=10) is None

    def test_degenerate_scale_does_not_raise(self, square_points):
        layer = Layer(id="a", points=square_points, transform=Transform(scale=0))
        hit_vertex(layer, Point(150, 150))


class TestHitSegment:
    """Tests for outline picking."""

    def test_simple_layer_returns_zero(self, square_points):
        layer = Layer(id="a", points=square_points)
        assert hit_segment(layer, Point(150, 102)) == 0
        assert hit_segment(layer, Point(150, 150)) is None

    def test_closing_edge_only_when_closed(self, square_points):
        layer = Layer(id="a", points=square_points)
        assert hit_segment(layer, Point(101, 150)) is None
        layer.closed = True
        assert hit_segment(layer, Point(101, 150)) == 0

    def test_compound_segment(self, compound_layer):
        """Segment 1 is rotated 90 degrees about (55, 50)."""
        assert hit_segment(compound_layer, Point(55, 52)) == 1
        assert hit_segment(compound_layer, Point(5, 1)) == 0

    def test_mirrored_outline_picks_segment(self):
        layer = Layer(id="a", points=[Point(100, 100), Point(200, 100)], symmetry=SymmetrySettings(horizontal=True))
        assert hit_segment(layer, Point(650, 101)) == 0

    def test_mirrored_compound_segment(self, compound_layer):
        """Every rendered variant of segment 1 picks segment 1."""
        for variant in render_variants(compound_layer):
            a, b = variant.segments[1]
            mid = Point((a.x + b.x) / 2, (a.y + b.y) / 2)
            assert hit_segment(compound_layer, mid) == 1


class TestPickLayer:
    """Tests for top-most layer resolution."""

    def test_top_most_wins(self, square_points):
        bottom = Layer(id="bottom", points=square_points)
        top = Layer(id="top", points=list(square_points))
        assert pick_layer([bottom, top], Point(150, 100)) == ("top", 0)

    def test_hidden_layers_are_skipped(self, square_points):
        bottom = Layer(id="bottom", points=square_points)
        top = Layer(id="top", points=list(square_points), visible=False)
        assert pick_layer([bottom, top], Point(150, 100)) == ("bottom", 0)

    def test_nothing_under_pointer(self, square_points):
        assert pick_layer([Layer(id="a", points=square_points)], Point(700, 500)) is None

    def test_mirrored_copy_selects_layer(self):
        layer = Layer(id="id", points=[Point(100, 100), Point(200, 100)], symmetry=SymmetrySettings(horizontal=True))
        assert pick_layer([layer], Point(650, 100)) == ("id", 0)
