"""
Unit tests for symmetry expansion and mirrored animation parity.
"""

import pytest

from pcs.geom.primitives import Point
from pcs.geom.symmetry import (
    SymmetrySettings, apply_symmetry, apply_symmetry_multi, mirror_animation, mirror_point,
)


CX, CY = 400.0, 300.0


class TestSymmetrySettings:
    """Tests for flag closure and toggling."""

    def test_two_mirrors_imply_center(self):
        assert SymmetrySettings(horizontal=True, vertical=True).active_axes() == (True, True, True)

    def test_vertical_and_center_imply_horizontal(self):
        assert SymmetrySettings(vertical=True, center=True).active_axes() == (True, True, True)

    def test_single_flag_stays_single(self):
        assert SymmetrySettings(center=True).active_axes() == (False, False, True)

    def test_toggled_returns_new_settings(self):
        s = SymmetrySettings()
        t = s.toggled("vertical")
        assert t.vertical is True
        assert s.vertical is False

    def test_toggled_unknown_axis(self):
        with pytest.raises(ValueError):
            SymmetrySettings().toggled("diagonal")

    def test_dict_roundtrip(self):
        s = SymmetrySettings(horizontal=True, center=True)
        assert SymmetrySettings.from_dict(s.to_dict()) == s
        assert SymmetrySettings.from_dict(None) == SymmetrySettings()


class TestApplySymmetry:
    """Tests for variant expansion."""

    def test_no_flags_single_identity(self, square_points):
        variants = apply_symmetry(square_points, SymmetrySettings(), CX, CY)
        assert len(variants) == 1
        assert variants[0].tag == "I"
        assert variants[0].points == square_points

    def test_h_and_v_include_center(self, square_points):
        variants = apply_symmetry(square_points, SymmetrySettings(horizontal=True, vertical=True), CX, CY)
        assert [v.tag for v in variants] == ["I", "H", "V", "C"]
        c = variants[3].points
        assert c[0] == Point(2 * CX - 100, 2 * CY - 100)

    def test_mirror_formulas(self):
        p = Point(100, 50)
        assert mirror_point(p, "H", CX, CY) == Point(700, 50)
        assert mirror_point(p, "V", CX, CY) == Point(100, 550)
        assert mirror_point(p, "C", CX, CY) == Point(700, 550)
        assert mirror_point(p, "I", CX, CY) == p

    def test_order_and_length_preserved(self, zigzag_points):
        for v in apply_symmetry(zigzag_points, SymmetrySettings(center=True), CX, CY):
            assert len(v.points) == len(zigzag_points)
            assert [mirror_point(q, v.tag, CX, CY) for q in v.points] == zigzag_points

    def test_multi_keeps_segments_together(self):
        segs = [[Point(0, 0), Point(1, 1)], [Point(5, 5)]]
        out = apply_symmetry_multi(segs, SymmetrySettings(horizontal=True), CX, CY)
        assert [v.tag for v in out] == ["I", "H"]
        assert [len(s) for s in out[1].segments] == [2, 1]
        assert out[1].segments[1][0] == Point(795, 5)


class TestMirrorAnimation:
    """Tests for the parity lookup table."""

    def test_spin_reverses_under_single_mirror(self):
        assert mirror_animation("spin", "H").direction == "reverse"
        assert mirror_animation("spin", "V", "reverse").direction == "forward"

    def test_spin_unchanged_under_center(self):
        assert mirror_animation("spin", "C").direction == "forward"

    def test_float_inverts_travel(self):
        assert mirror_animation("float", "V").invert_travel is True
        assert mirror_animation("float", "C").invert_travel is True
        assert mirror_animation("float", "H").invert_travel is False

    def test_alternate_never_flips(self):
        assert mirror_animation("spin", "H", "alternate").direction == "alternate"

    def test_other_types_unchanged(self):
        m = mirror_animation("pulse", "H", "reverse")
        assert m.direction == "reverse"
        assert m.invert_travel is False
