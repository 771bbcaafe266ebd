"""
Unit tests for the Qt painter-path adapter (skipped without PySide6).
"""

import pytest

QtGui = pytest.importorskip("PySide6.QtGui")

from pcs.core.models import Layer  # noqa: E402
from pcs.geom.primitives import Point  # noqa: E402
from pcs.geom.smoothing import PathCommand  # noqa: E402
from pcs.geom.symmetry import SymmetrySettings  # noqa: E402
from pcs.geom.transform import Transform  # noqa: E402
from pcs.svg.qpath_render import commands_to_qpath, layer_to_qpath, points_to_qpath  # noqa: E402


class TestQPath:
    def test_empty(self):
        assert commands_to_qpath([]).isEmpty()

    def test_line(self):
        q = commands_to_qpath([PathCommand("M", (Point(0, 0),)), PathCommand("L", (Point(10, 5),))])
        assert q.elementCount() == 2
        r = q.boundingRect()
        assert (r.width(), r.height()) == (10, 5)

    def test_points_closed(self, square_points):
        q = points_to_qpath(square_points, 0.5, closed=True)
        r = q.boundingRect()
        assert r.left() <= 100 and r.right() >= 200

    def test_layer_with_symmetry(self):
        layer = Layer(id="a", points=[Point(100, 100), Point(200, 100)], symmetry=SymmetrySettings(horizontal=True))
        with_sym = layer_to_qpath(layer).boundingRect()
        without = layer_to_qpath(layer, with_symmetry=False).boundingRect()
        assert with_sym.right() == pytest.approx(700)
        assert without.right() == pytest.approx(200)

    def test_layer_uses_transform_time(self, line_layer):
        r = layer_to_qpath(line_layer, 1000).boundingRect()
        assert r.left() == pytest.approx(500)

    def test_mirror_moves_with_layer(self):
        layer = Layer(
            id="a",
            points=[Point(100, 300), Point(150, 350)],
            transform=Transform(x=100),
            symmetry=SymmetrySettings(horizontal=True),
        )
        r = layer_to_qpath(layer).boundingRect()
        assert r.left() == pytest.approx(200)
        assert r.right() == pytest.approx(800)
