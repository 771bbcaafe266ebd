"""
Unit tests for shape generators and pointer snapping.
"""

import pytest

from pcs.core.tool_mode import ShapeTool, coerce_shape_tool
from pcs.geom.primitives import Point, distance
from pcs.geom.shapes import make_shape, snap_point
from pcs.geom.symmetry import SymmetrySettings


class TestMakeShape:
    """Vertex counts and geometry per tool."""

    @pytest.mark.parametrize(
        "tool,count",
        [(ShapeTool.SQUARE, 4), (ShapeTool.CIRCLE, 16), (ShapeTool.TRIANGLE, 3), (ShapeTool.STAR, 10)],
    )
    def test_vertex_counts(self, tool, count):
        assert len(make_shape(tool, Point(100, 100), Point(160, 180))) == count

    def test_square_corners(self):
        pts = make_shape(ShapeTool.SQUARE, Point(0, 0), Point(10, 20))
        assert pts == [Point(0, 0), Point(10, 0), Point(10, 20), Point(0, 20)]

    def test_circle_radius(self):
        pts = make_shape("circle", Point(50, 50), Point(53, 54))
        for p in pts:
            assert distance(p, Point(50, 50)) == pytest.approx(5.0)

    def test_triangle_apex(self):
        pts = make_shape(ShapeTool.TRIANGLE, Point(0, 0), Point(10, 10))
        assert pts[0] == Point(5, 0)

    def test_star_alternates_radius(self):
        c = Point(0, 0)
        pts = make_shape(ShapeTool.STAR, c, Point(0, 10))
        assert distance(pts[0], c) == pytest.approx(10.0)
        assert distance(pts[1], c) == pytest.approx(4.0)
        # Primera punta hacia arriba.
        assert pts[0].x == pytest.approx(0.0, abs=1e-9)
        assert pts[0].y == pytest.approx(-10.0)

    def test_pen(self):
        assert make_shape(ShapeTool.PEN, Point(1, 2), Point(3, 4)) == [Point(1, 2), Point(3, 4)]

    def test_coerce_tool(self):
        assert coerce_shape_tool(" Square ") is ShapeTool.SQUARE
        assert coerce_shape_tool(None) is ShapeTool.PEN
        assert coerce_shape_tool("x", ShapeTool.STAR) is ShapeTool.STAR


class TestSnap:
    """Tests for snap_point."""

    def test_snaps_to_nearest_vertex(self):
        existing = [[Point(0, 0), Point(100, 100)]]
        assert snap_point(Point(3, 4), existing, threshold=10) == Point(0, 0)

    def test_draft_points_count(self):
        assert snap_point(Point(52, 50), [], [Point(50, 50)], threshold=10) == Point(50, 50)

    def test_outside_threshold(self):
        assert snap_point(Point(30, 30), [[Point(0, 0)]], threshold=10) == Point(30, 30)

    def test_snaps_to_axes(self):
        sym = SymmetrySettings(horizontal=True)
        p = snap_point(Point(405, 305), symmetry=sym, center=Point(400, 300), threshold=10)
        # Solo el eje vertical (x = centro) para simetría horizontal.
        assert p == Point(400, 305)

    def test_center_symmetry_snaps_both(self):
        sym = SymmetrySettings(center=True)
        p = snap_point(Point(395, 306), symmetry=sym, center=Point(400, 300), threshold=10)
        assert p == Point(400, 300)

    def test_vertex_wins_over_axis(self):
        sym = SymmetrySettings(horizontal=True)
        p = snap_point(Point(405, 300), [[Point(408, 300)]], symmetry=sym, center=Point(400, 300), threshold=10)
        assert p == Point(408, 300)

    def test_disabled(self):
        sym = SymmetrySettings(center=True)
        p = snap_point(Point(401, 301), [[Point(401, 302)]], symmetry=sym, center=Point(400, 300),
                       snap_to_points=False, snap_to_guides=False)
        assert p == Point(401, 301)
