"""Tests for contour simplification and curve fitting."""

import numpy as np
import pytest


class TestSimplify:
    """Tests for RDP simplification."""

    def test_straight_line_reduced_to_endpoints(self):
        """Test that collinear points collapse to their endpoints."""
        from mathoutline.curves.simplify import rdp_simplify

        points = [(float(i), 0.0) for i in range(30)]
        assert rdp_simplify(points, 1.5) == [(0.0, 0.0), (29.0, 0.0)]

    def test_corner_kept(self):
        """Test that an L-shape keeps its corner."""
        from mathoutline.curves.simplify import rdp_simplify

        points = [(float(i), 0.0) for i in range(10)] + [(9.0, float(j)) for j in range(1, 10)]
        assert rdp_simplify(points, 1.0) == [(0.0, 0.0), (9.0, 0.0), (9.0, 9.0)]

    def test_closed_loop_keeps_corners(self):
        """Test that a traced square keeps all four corners."""
        from mathoutline.curves.simplify import simplify_contour

        square = ([(x, 0) for x in range(10)] + [(10, y) for y in range(10)]
                  + [(x, 10) for x in range(10, 0, -1)] + [(0, y) for y in range(10, 0, -1)])

        simplified = simplify_contour(square, 1.0)

        for corner in [(0, 0), (10, 0), (10, 10), (0, 10)]:
            assert corner in simplified


class TestLinear:
    """Tests for the linear fitter."""

    def test_segments_and_closing(self):
        """Test segment lengths and the closing segment back to the start."""
        from mathoutline.curves.fit import fit_linear

        outline = fit_linear([(0.0, 0.0), (10.0, 0.0), (10.0, 10.0)])

        assert outline.kind == "linear"
        assert [s.length for s in outline.segments] == pytest.approx([10.0, 10.0, 200 ** 0.5])
        closing = outline.segments[-1]
        assert (closing.x2, closing.y2) == (0.0, 0.0)

    def test_short_steps_carried_forward(self):
        """Test that a short step is bridged instead of leaving a gap."""
        from mathoutline.curves.fit import fit_linear

        points = [(0.0, 0.0), (20.0, 0.0), (23.0, 3.0), (23.0, 40.0)]
        outline = fit_linear(points, close=False)

        assert len(outline.segments) == 2
        bridge = outline.segments[1]
        assert (bridge.x1, bridge.y1) == (20.0, 0.0)
        assert (bridge.x2, bridge.y2) == (23.0, 40.0)
        assert sum(s.length for s in outline.segments) == pytest.approx(20.0 + (9 + 1600) ** 0.5)

    def test_closing_starts_at_last_kept_point(self):
        """Test that the closing segment leaves from the last kept end point."""
        from mathoutline.curves.fit import fit_linear

        outline = fit_linear([(0.0, 0.0), (10.0, 0.0), (10.0, 10.0), (9.0, 12.0)])

        closing = outline.segments[-1]
        assert (closing.x1, closing.y1) == (10.0, 10.0)
        assert (closing.x2, closing.y2) == (0.0, 0.0)

    def test_no_closing_when_disabled(self):
        """Test that close=False leaves the outline open."""
        from mathoutline.curves.fit import fit_linear

        outline = fit_linear([(0.0, 0.0), (10.0, 0.0), (10.0, 10.0)], close=False)
        assert len(outline.segments) == 2

    def test_all_short_segments(self):
        """Test that nothing above the length floor yields None."""
        from mathoutline.curves.fit import fit_linear

        assert fit_linear([(0.0, 0.0), (1.0, 0.0), (2.0, 1.0)]) is None

    def test_straight_contour(self):
        """Test that a straight traced contour becomes one segment."""
        from mathoutline.curves.fit import fit_outline

        contour = [(i, 0) for i in range(30)]
        outline = fit_outline(contour, "linear")

        assert len(outline.segments) == 1
        assert outline.segments[0].length == pytest.approx(29.0)


class TestQuadraticAndSpline:
    """Tests for the quadratic and spline fitters."""

    def test_quadratic_triples_step_by_two(self):
        """Test that consecutive triples share their end points."""
        from mathoutline.curves.fit import fit_quadratic

        points = [(0.0, 0.0), (10.0, 5.0), (20.0, 0.0), (30.0, 5.0), (40.0, 0.0)]
        outline = fit_quadratic(points)

        assert len(outline.curves) == 2
        assert outline.curves[1].points()[0] == (20.0, 0.0)

    def test_quadratic_needs_long_segments(self):
        """Test that triples with a short side are skipped."""
        from mathoutline.curves.fit import fit_quadratic

        assert fit_quadratic([(0.0, 0.0), (3.0, 0.0), (20.0, 0.0)]) is None

    def test_spline_quadruples(self):
        """Test that quadruples become Bezier control points verbatim."""
        from mathoutline.curves.fit import fit_spline

        points = [(0.0, 0.0), (5.0, 10.0), (15.0, 10.0), (20.0, 0.0)]
        outline = fit_spline(points)

        assert len(outline.pieces) == 1
        assert outline.pieces[0].points() == points

    def test_spline_short_chord(self):
        """Test that small quadruples are dropped."""
        from mathoutline.curves.fit import fit_spline

        assert fit_spline([(0.0, 0.0), (1.0, 1.0), (2.0, 1.0), (3.0, 0.0)]) is None


class TestFitOutlines:
    """Tests for multi-contour fitting."""

    def test_all_mode_needs_expansion(self):
        """Test that fit_outline rejects the aggregate mode."""
        from mathoutline.curves.fit import fit_outline

        with pytest.raises(ValueError):
            fit_outline([(0, 0), (20, 0), (20, 20)], "all")

    def test_all_mode_fits_every_kind(self):
        """Test that 'all' produces linear, quadratic and spline outlines."""
        from mathoutline.curves.fit import fit_outlines
        from mathoutline.config import CurveConfig

        contour = ([(x, 0) for x in range(30)] + [(30, y) for y in range(30)]
                   + [(x, 30) for x in range(30, 0, -1)] + [(0, y) for y in range(30, 0, -1)])

        outlines = fit_outlines([contour], "all", CurveConfig())

        assert [o.kind for o in outlines] == ["linear", "quadratic", "spline"]

    def test_outline_count_capped(self):
        """Test that no more than max_outlines are returned."""
        from mathoutline.config import CurveConfig
        from mathoutline.curves.fit import fit_outlines

        contours = [[(0, y), (40, y), (40, y + 40)] for y in range(8)]
        outlines = fit_outlines(contours, "linear", CurveConfig(simplify=False, max_outlines=5))

        assert len(outlines) == 5

    def test_empty_fits_dropped(self):
        """Test that contours without qualifying pieces produce nothing."""
        from mathoutline.curves.fit import fit_outlines

        assert fit_outlines([[(0, 0), (1, 0), (2, 0)]], "quadratic") == []
