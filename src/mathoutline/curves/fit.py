"""
Curve fitting: turn a contour into a linear, quadratic or spline outline.

Fitters store the points that define each piece; closed-form coefficients
are derived from them in mathoutline.curves.render.
"""

import math

from mathoutline.config import CurveConfig
from mathoutline.curves.simplify import simplify_contour
from mathoutline.models import (
    CubicQuad, CurveMode, LinearOutline, QuadraticOutline, QuadTriple, Segment, SplineOutline,
)
from mathoutline.tracer import get_tracer, trace


def _distance(p, q):
    return math.hypot(q[0] - p[0], q[1] - p[1])


def fit_linear(points, min_length=5.0, close=True, closing_min_length=2.0):
    """
    Connected segments longer than min_length, plus an optional closing
    segment back to the first point.

    A point closer than min_length to the current segment start is skipped
    and the start carried forward, so kept segments always join end to end.

    Returns None when no segment clears the length floor.
    """
    segments = []
    start = points[0] if points else None
    for q in points[1:]:
        length = _distance(start, q)
        if length > min_length:
            segments.append(Segment(x1=start[0], y1=start[1], x2=q[0], y2=q[1], length=length))
            start = q

    if not segments:
        return None

    if close and len(points) > 2:
        first = points[0]
        length = _distance(start, first)
        if length > closing_min_length:
            segments.append(Segment(x1=start[0], y1=start[1], x2=first[0], y2=first[1], length=length))

    return LinearOutline(segments=segments)


def fit_quadratic(points, min_length=8.0):
    """
    Triples (p[i], p[i+1], p[i+2]) stepping by two, kept when both adjacent
    segment lengths exceed min_length.

    Returns None when no triple qualifies.
    """
    curves = []
    for i in range(0, len(points) - 2, 2):
        p1, p2, p3 = points[i], points[i + 1], points[i + 2]
        if _distance(p1, p2) > min_length and _distance(p2, p3) > min_length:
            curves.append(QuadTriple(x1=p1[0], y1=p1[1], x2=p2[0], y2=p2[1], x3=p3[0], y3=p3[1]))

    if not curves:
        return None
    return QuadraticOutline(curves=curves)


def fit_spline(points, min_chord=12.0):
    """
    Quadruples stepping by three, used verbatim as cubic Bezier control
    points when their summed chord length exceeds min_chord.

    Returns None when no quadruple qualifies.
    """
    pieces = []
    for i in range(0, len(points) - 3, 3):
        p1, p2, p3, p4 = points[i:i + 4]
        chord = _distance(p1, p2) + _distance(p2, p3) + _distance(p3, p4)
        if chord > min_chord:
            pieces.append(CubicQuad(
                x1=p1[0], y1=p1[1], x2=p2[0], y2=p2[1],
                x3=p3[0], y3=p3[1], x4=p4[0], y4=p4[1],
            ))

    if not pieces:
        return None
    return SplineOutline(pieces=pieces)


def prepare_points(contour, config):
    """Float (x, y) points, RDP-simplified when config.simplify is set."""
    points = [(float(x), float(y)) for x, y in contour]
    if config.simplify:
        points = simplify_contour(points, config.rdp_epsilon)
    return points


def fit_outline(contour, mode=CurveMode.LINEAR, config=None):
    """
    Fit one contour in a single concrete mode.

    Returns an outline model or None when the contour yields no pieces.
    """
    config = config or CurveConfig()
    mode = CurveMode(mode)
    points = prepare_points(contour, config)

    if mode is CurveMode.LINEAR:
        return fit_linear(points, config.min_segment_length,
                          config.close_outline, config.closing_min_length)
    if mode is CurveMode.QUADRATIC:
        return fit_quadratic(points, config.quadratic_min_length)
    if mode is CurveMode.SPLINE:
        return fit_spline(points, config.spline_min_chord)
    raise ValueError(f"fit_outline needs a concrete mode, got {mode.value!r}")


@trace(label="fit_outlines")
def fit_outlines(contours, mode=CurveMode.LINEAR, config=None):
    """
    Fit every contour in the requested mode ("all" fits each contour in all
    three modes), dropping empty fits and capping the result at
    config.max_outlines.
    """
    tracer = get_tracer()
    config = config or CurveConfig()
    modes = CurveMode(mode).expand()

    outlines = []
    for contour in contours:
        for concrete in modes:
            outline = fit_outline(contour, concrete, config)
            if outline is not None:
                outlines.append(outline)

    capped = outlines[:config.max_outlines]
    tracer.event(f"Fitted {len(outlines)} outlines, kept {len(capped)} "
                 f"(modes={[m.value for m in modes]})")
    return capped
