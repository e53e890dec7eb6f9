"""
Rendering of fitted outlines from their stored points.

Every piece is reduced to an Equation (line, vertical line, quadratic or
parametric cubic) which drives point sampling, drawing commands and the
Desmos-style formula text, so all three views agree.
"""

from collections import namedtuple

import cv2
import numpy as np

from mathoutline.models import LinearOutline, QuadraticOutline, SplineOutline


COLLINEAR_EPSILON = 0.001
VERTICAL_EPSILON = 0.1
QUADRATIC_X_STEP = 0.5
CUBIC_T_STEP = 0.01


# kind: "line" (m, c), "vertical" (k,), "quadratic" (a, b, c) or "cubic"
# (control points). domain is (min, max) over x, y or t respectively.
Equation = namedtuple("Equation", ["kind", "coefficients", "domain"])


def line_equation(x1, y1, x2, y2, vertical_epsilon=VERTICAL_EPSILON):
    """y = mx + c through two points, or x = k when |x2 - x1| < vertical_epsilon."""
    if abs(x2 - x1) < vertical_epsilon:
        return Equation("vertical", (x1,), (min(y1, y2), max(y1, y2)))
    m = (y2 - y1) / (x2 - x1)
    c = y1 - m * x1
    return Equation("line", (m, c), (min(x1, x2), max(x1, x2)))


def quadratic_equation(curve, epsilon=COLLINEAR_EPSILON, vertical_epsilon=VERTICAL_EPSILON):
    """
    Solve y = ax^2 + bx + c through the three points of a QuadTriple.

    When the points are collinear (|cross product| <= epsilon) or two share
    an x value (|det| <= epsilon), the line from the first to the third
    point is returned instead.
    """
    x1, y1, x2, y2, x3, y3 = curve.x1, curve.y1, curve.x2, curve.y2, curve.x3, curve.y3

    cross = (x2 - x1) * (y3 - y1) - (x3 - x1) * (y2 - y1)
    det = (x1 - x2) * (x2 - x3) * (x3 - x1)
    if abs(cross) <= epsilon or abs(det) <= epsilon:
        return line_equation(x1, y1, x3, y3, vertical_epsilon)

    a = ((y2 - y3) * (x1 - x2) - (y1 - y2) * (x2 - x3)) / det
    b = ((y1 - y2) * (x2 * x2 - x3 * x3) - (y2 - y3) * (x1 * x1 - x2 * x2)) / det
    c = y1 - a * x1 * x1 - b * x1
    return Equation("quadratic", (a, b, c), (min(x1, x2, x3), max(x1, x2, x3)))


def cubic_equation(piece):
    return Equation("cubic", tuple(piece.points()), (0.0, 1.0))


def bezier_point(control_points, t):
    """Point on a cubic Bezier at parameter t (Bernstein form)."""
    (x1, y1), (x2, y2), (x3, y3), (x4, y4) = control_points
    u = 1.0 - t
    b0, b1, b2, b3 = u ** 3, 3 * u * u * t, 3 * u * t * t, t ** 3
    return (b0 * x1 + b1 * x2 + b2 * x3 + b3 * x4,
            b0 * y1 + b1 * y2 + b2 * y3 + b3 * y4)


def outline_equations(outline):
    """Equations for every piece of an outline, in order."""
    if isinstance(outline, LinearOutline):
        return [line_equation(s.x1, s.y1, s.x2, s.y2) for s in outline.segments]
    if isinstance(outline, QuadraticOutline):
        return [quadratic_equation(c) for c in outline.curves]
    if isinstance(outline, SplineOutline):
        return [cubic_equation(p) for p in outline.pieces]
    raise TypeError(f"Unsupported outline type: {type(outline).__name__}")


def _quadratic_value(coefficients, x):
    a, b, c = coefficients
    return a * x * x + b * x + c


def sample_equation(equation):
    """
    Points along one piece: endpoints for lines, 0.5 px x-steps for
    quadratics (ending exactly at the right end), t-steps of 0.01 for cubics.
    """
    low, high = equation.domain

    if equation.kind == "vertical":
        (k,) = equation.coefficients
        return [(k, low), (k, high)]

    if equation.kind == "line":
        m, c = equation.coefficients
        return [(low, m * low + c), (high, m * high + c)]

    if equation.kind == "quadratic":
        xs = np.arange(low, high, QUADRATIC_X_STEP).tolist() + [high]
        return [(x, _quadratic_value(equation.coefficients, x)) for x in xs]

    steps = int(round(1.0 / CUBIC_T_STEP))
    return [bezier_point(equation.coefficients, i / steps) for i in range(steps + 1)]


def sample_outline(outline):
    """One sampled polyline per piece."""
    return [sample_equation(eq) for eq in outline_equations(outline)]


def to_draw_commands(outline):
    """
    Drawing-command sequence for an outline.

    Commands are tuples: ("move_to", x, y), ("line_to", x, y),
    ("quad_to", cx, cy, x, y) and ("bezier_to", c1x, c1y, c2x, c2y, x, y).
    Linear outlines form one connected path; quadratic and spline pieces
    each start with their own move_to.
    """
    commands = []

    if isinstance(outline, LinearOutline):
        for i, segment in enumerate(outline.segments):
            if i == 0:
                commands.append(("move_to", segment.x1, segment.y1))
            commands.append(("line_to", segment.x2, segment.y2))
        return commands

    for equation in outline_equations(outline):
        if equation.kind == "cubic":
            (x1, y1), (x2, y2), (x3, y3), (x4, y4) = equation.coefficients
            commands.append(("move_to", x1, y1))
            commands.append(("bezier_to", x2, y2, x3, y3, x4, y4))
        elif equation.kind == "quadratic":
            # Exact Bezier form of the parabola over its x domain
            low, high = equation.domain
            a, b, _ = equation.coefficients
            y_low = _quadratic_value(equation.coefficients, low)
            slope = 2 * a * low + b
            control = ((low + high) / 2.0, y_low + slope * (high - low) / 2.0)
            commands.append(("move_to", low, y_low))
            commands.append(("quad_to", control[0], control[1],
                             high, _quadratic_value(equation.coefficients, high)))
        else:
            start, end = sample_equation(equation)
            commands.append(("move_to", *start))
            commands.append(("line_to", *end))

    return commands


def format_equation(equation):
    """Desmos-style formula text for one piece (may span two lines for cubics)."""
    low, high = equation.domain

    if equation.kind == "vertical":
        (k,) = equation.coefficients
        return f"x = {k:.1f} \\{{{low:.1f} < y < {high:.1f}\\}}"

    if equation.kind == "line":
        m, c = equation.coefficients
        return f"y = {m:.3f}x + {c:.3f} \\{{{low:.1f} < x < {high:.1f}\\}}"

    if equation.kind == "quadratic":
        a, b, c = equation.coefficients
        return f"y = {a:.3f}x^2 + {b:.3f}x + {c:.3f} \\{{{low:.1f} < x < {high:.1f}\\}}"

    (x1, y1), (x2, y2), (x3, y3), (x4, y4) = equation.coefficients
    return (
        f"x(t) = (1-t)^3 * {x1:.1f} + 3(1-t)^2 * t * {x2:.1f} + 3(1-t) * t^2 * {x3:.1f} + t^3 * {x4:.1f}\n"
        f"y(t) = (1-t)^3 * {y1:.1f} + 3(1-t)^2 * t * {y2:.1f} + 3(1-t) * t^2 * {y3:.1f} + t^3 * {y4:.1f}"
        f" \\{{0 < t < 1\\}}"
    )


def to_formula_text(outline):
    """Formula block for one outline, one piece per line."""
    return "\n".join(format_equation(eq) for eq in outline_equations(outline))


def format_formulas(outlines):
    """Formula blocks for all outlines with a comment header per outline."""
    blocks = []
    for i, outline in enumerate(outlines, start=1):
        blocks.append(f"/* Outline {i} ({outline.kind}) */\n{to_formula_text(outline)}\n")
    return "\n".join(blocks)


def render_outlines(outlines, width, height, thickness=1):
    """Draw sampled outlines in black on a white uint8 canvas."""
    canvas = np.full((height, width), 255, dtype=np.uint8)
    for outline in outlines:
        for polyline in sample_outline(outline):
            pts = np.rint(np.asarray(polyline, dtype=np.float64)).astype(np.int32)
            cv2.polylines(canvas, [pts], isClosed=False, color=0, thickness=thickness)
    return canvas
