"""
Contour simplification using the Ramer-Douglas-Peucker algorithm.

Traced contours advance one pixel per point; simplifying first lets the
fitters' length floors see real straight runs instead of unit steps.
"""

import numpy as np


def rdp_simplify(points, epsilon):
    """
    Ramer-Douglas-Peucker simplification of an open polyline.

    Recursively drops points within epsilon of the chord between the
    endpoints of each span. Endpoints are always kept.
    """
    if len(points) <= 2:
        return list(points)

    points_arr = np.asarray(points, dtype=np.float64)
    distances = _perpendicular_distances(points_arr, points_arr[0], points_arr[-1])
    max_idx = int(np.argmax(distances))

    if distances[max_idx] > epsilon:
        left = rdp_simplify(points[:max_idx + 1], epsilon)
        right = rdp_simplify(points[max_idx:], epsilon)
        return left[:-1] + right

    return [points[0], points[-1]]


def simplify_contour(contour, epsilon):
    """
    Simplify a traced contour, treating it as a closed loop.

    The loop is split at the point farthest from the start so that both
    halves have distinct endpoints; this keeps corners of closed outlines
    that a single chord from start to end would collapse.
    """
    contour = [tuple(p) for p in contour]
    if len(contour) <= 3:
        return contour

    points_arr = np.asarray(contour, dtype=np.float64)
    far_idx = int(np.argmax(np.linalg.norm(points_arr - points_arr[0], axis=1)))
    if far_idx == 0:
        return [contour[0]]

    first = rdp_simplify(contour[:far_idx + 1], epsilon)
    second = rdp_simplify(contour[far_idx:], epsilon)
    return first[:-1] + second


def _perpendicular_distances(points, start, end):
    """Distance from each point to the segment start-end."""
    line_vec = end - start
    line_len = np.linalg.norm(line_vec)

    if line_len == 0:
        return np.linalg.norm(points - start, axis=1)

    line_unit = line_vec / line_len
    projections = np.clip(np.dot(points - start, line_unit), 0, line_len)
    nearest = start + np.outer(projections, line_unit)
    return np.linalg.norm(points - nearest, axis=1)
