"""Tests for equations, formula text and drawing commands."""

import numpy as np
import pytest


class TestEquations:
    """Tests for closed-form coefficients."""

    def test_line(self):
        """Test slope and intercept through two points."""
        from mathoutline.curves.render import line_equation

        eq = line_equation(0.0, 1.0, 4.0, 9.0)

        assert eq.kind == "line"
        assert eq.coefficients == pytest.approx((2.0, 1.0))
        assert eq.domain == (0.0, 4.0)

    def test_vertical_line(self):
        """Test that equal x values give x = k."""
        from mathoutline.curves.render import line_equation

        eq = line_equation(3.0, 8.0, 3.05, 2.0)

        assert eq.kind == "vertical"
        assert eq.coefficients == (3.0,)
        assert eq.domain == (2.0, 8.0)

    def test_parabola_through_points(self):
        """Test that y = x^2 is recovered from three of its points."""
        from mathoutline.curves.render import quadratic_equation
        from mathoutline.models import QuadTriple

        eq = quadratic_equation(QuadTriple(x1=0, y1=0, x2=1, y2=1, x3=2, y3=4))

        assert eq.kind == "quadratic"
        assert eq.coefficients == pytest.approx((1.0, 0.0, 0.0))

    def test_opening_downward(self):
        """Test the sign of a for a downward parabola."""
        from mathoutline.curves.render import quadratic_equation
        from mathoutline.models import QuadTriple

        curve = QuadTriple(x1=0, y1=0, x2=10, y2=10, x3=20, y3=0)
        a, b, c = quadratic_equation(curve).coefficients

        assert a < 0
        for x, y in curve.points():
            assert a * x * x + b * x + c == pytest.approx(y, abs=1e-9)

    def test_collinear_points_fall_back_to_line(self):
        """Test that three points on y = x give the line, not a flat quadratic."""
        from mathoutline.curves.render import quadratic_equation
        from mathoutline.models import QuadTriple

        eq = quadratic_equation(QuadTriple(x1=0, y1=0, x2=1, y2=1, x3=2, y3=2))

        assert eq.kind == "line"
        assert eq.coefficients == pytest.approx((1.0, 0.0))
        assert eq.domain == (0.0, 2.0)

    def test_repeated_x_falls_back_to_line(self):
        """Test that a singular system gives the line from first to third point."""
        from mathoutline.curves.render import quadratic_equation
        from mathoutline.models import QuadTriple

        eq = quadratic_equation(QuadTriple(x1=0, y1=0, x2=0, y2=5, x3=3, y3=3))

        assert eq.kind == "line"
        assert eq.coefficients == pytest.approx((1.0, 0.0))

    def test_bezier_endpoints(self):
        """Test that t = 0 and t = 1 hit the end control points."""
        from mathoutline.curves.render import bezier_point

        controls = [(0.0, 0.0), (5.0, 10.0), (15.0, 10.0), (20.0, 0.0)]

        assert bezier_point(controls, 0.0) == pytest.approx((0.0, 0.0))
        assert bezier_point(controls, 1.0) == pytest.approx((20.0, 0.0))
        assert bezier_point(controls, 0.5) == pytest.approx((10.0, 7.5))


class TestFormulaText:
    """Tests for Desmos-style formulas."""

    def test_line_formula(self):
        """Test the line format and its x restriction."""
        from mathoutline.curves.render import format_equation, line_equation

        text = format_equation(line_equation(0.0, 0.0, 10.0, 5.0))
        assert text == "y = 0.500x + 0.000 \\{0.0 < x < 10.0\\}"

    def test_vertical_formula(self):
        """Test the vertical format and its y restriction."""
        from mathoutline.curves.render import format_equation, line_equation

        text = format_equation(line_equation(2.0, 0.0, 2.0, 10.0))
        assert text == "x = 2.0 \\{0.0 < y < 10.0\\}"

    def test_quadratic_formula(self):
        """Test the quadratic format."""
        from mathoutline.curves.render import format_equation, quadratic_equation
        from mathoutline.models import QuadTriple

        text = format_equation(quadratic_equation(QuadTriple(x1=0, y1=0, x2=1, y2=1, x3=2, y3=4)))

        assert text.startswith("y = 1.000x^2")
        assert text.endswith("\\{0.0 < x < 2.0\\}")

    def test_cubic_formula(self):
        """Test that cubics print parametric x(t) and y(t)."""
        from mathoutline.curves.render import to_formula_text
        from mathoutline.models import CubicQuad, SplineOutline

        outline = SplineOutline(pieces=[CubicQuad(x1=0, y1=0, x2=5, y2=10, x3=15, y3=10, x4=20, y4=0)])
        lines = to_formula_text(outline).split("\n")

        assert lines[0].startswith("x(t) = (1-t)^3 * 0.0")
        assert lines[1].startswith("y(t) = (1-t)^3 * 0.0")
        assert lines[1].endswith("\\{0 < t < 1\\}")

    def test_formula_listing_headers(self):
        """Test one comment header per outline."""
        from mathoutline.curves.render import format_formulas
        from mathoutline.models import LinearOutline, Segment

        outline = LinearOutline(segments=[Segment(x1=0, y1=0, x2=10, y2=5, length=11.18)])
        text = format_formulas([outline, outline])

        assert text.count("/* Outline") == 2
        assert text.startswith("/* Outline 1 (linear) */\n")
        assert "/* Outline 2 (linear) */" in text


class TestDrawing:
    """Tests for sampling and drawing commands."""

    def test_linear_commands_form_one_path(self):
        """Test one move_to followed by a line_to per segment."""
        from mathoutline.curves.render import to_draw_commands
        from mathoutline.models import LinearOutline, Segment

        outline = LinearOutline(segments=[
            Segment(x1=0, y1=0, x2=10, y2=0, length=10),
            Segment(x1=10, y1=0, x2=10, y2=10, length=10),
        ])

        assert to_draw_commands(outline) == [
            ("move_to", 0.0, 0.0),
            ("line_to", 10.0, 0.0),
            ("line_to", 10.0, 10.0),
        ]

    def test_quad_to_follows_parabola(self):
        """Test that the quadratic Bezier passes through the parabola's midpoint."""
        from mathoutline.curves.render import to_draw_commands
        from mathoutline.models import QuadraticOutline, QuadTriple

        outline = QuadraticOutline(curves=[QuadTriple(x1=0, y1=0, x2=1, y2=1, x3=2, y3=4)])
        move, quad = to_draw_commands(outline)

        assert move == ("move_to", 0.0, 0.0)
        assert quad[0] == "quad_to"
        _, cx, cy, ex, ey = quad
        mid_x = 0.25 * move[1] + 0.5 * cx + 0.25 * ex
        mid_y = 0.25 * move[2] + 0.5 * cy + 0.25 * ey
        assert (mid_x, mid_y) == pytest.approx((1.0, 1.0))
        assert (ex, ey) == pytest.approx((2.0, 4.0))

    def test_spline_commands(self):
        """Test bezier_to with the stored control points."""
        from mathoutline.curves.render import to_draw_commands
        from mathoutline.models import CubicQuad, SplineOutline

        outline = SplineOutline(pieces=[CubicQuad(x1=0, y1=0, x2=5, y2=10, x3=15, y3=10, x4=20, y4=0)])

        assert to_draw_commands(outline) == [
            ("move_to", 0.0, 0.0),
            ("bezier_to", 5.0, 10.0, 15.0, 10.0, 20.0, 0.0),
        ]

    def test_sampling(self):
        """Test sample spacing and endpoints per piece kind."""
        from mathoutline.curves.render import cubic_equation, quadratic_equation, sample_equation
        from mathoutline.models import CubicQuad, QuadTriple

        quad = sample_equation(quadratic_equation(QuadTriple(x1=0, y1=0, x2=1, y2=1, x3=2, y3=4)))
        assert [x for x, _ in quad] == [0.0, 0.5, 1.0, 1.5, 2.0]
        assert quad[-1] == pytest.approx((2.0, 4.0))

        piece = CubicQuad(x1=0, y1=0, x2=5, y2=10, x3=15, y3=10, x4=20, y4=0)
        cubic = sample_equation(cubic_equation(piece))
        assert len(cubic) == 101
        assert cubic[0] == pytest.approx((0.0, 0.0))
        assert cubic[-1] == pytest.approx((20.0, 0.0))

    def test_render_outlines(self):
        """Test that outlines are drawn in black on white."""
        from mathoutline.curves.render import render_outlines
        from mathoutline.models import LinearOutline, Segment

        outline = LinearOutline(segments=[Segment(x1=2, y1=5, x2=17, y2=5, length=15)])
        canvas = render_outlines([outline], width=20, height=10)

        assert canvas.shape == (10, 20)
        assert canvas[5, 10] == 0
        assert canvas[0, 0] == 255
        assert np.count_nonzero(canvas == 0) == 16
