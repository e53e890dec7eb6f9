"""
Geometric measurements of traced contours.

Contours are lists of (x, y) points treated as closed rings.
"""

import math

import numpy as np
from shapely.geometry import LineString, Polygon


def bounding_box(contour):
    """(min_x, min_y, max_x, max_y) of the contour points."""
    points = np.asarray(contour, dtype=np.float64)
    min_x, min_y = points.min(axis=0)
    max_x, max_y = points.max(axis=0)
    return float(min_x), float(min_y), float(max_x), float(max_y)


def contour_area(contour):
    """Enclosed area of the ring through the points (0 for fewer than 3)."""
    if len(contour) < 3:
        return 0.0
    return abs(Polygon(contour).area)


def contour_perimeter(contour):
    """Length of the closed ring through the points."""
    if len(contour) < 2:
        return 0.0
    if len(contour) < 3:
        return LineString(contour).length * 2
    return Polygon(contour).exterior.length


def compactness(contour):
    """perimeter^2 / (4 pi area); 1 for a circle, larger for elongated or ragged shapes."""
    area = contour_area(contour)
    if area <= 0:
        return math.inf
    return contour_perimeter(contour) ** 2 / (4 * math.pi * area)


def elongation(contour):
    """
    Ratio of the larger to the smaller eigenvalue of the point covariance.

    1 for an isotropic point cloud, inf for collinear points.
    """
    points = np.asarray(contour, dtype=np.float64)
    if len(points) < 2:
        return 1.0
    eigenvalues = np.linalg.eigvalsh(np.cov(points, rowvar=False))
    small, large = float(eigenvalues[0]), float(eigenvalues[-1])
    if large <= 0:
        return 1.0
    if small <= 1e-12:
        return math.inf
    return large / small


def turn_angles(contour):
    """Absolute turning angle in degrees at every interior point."""
    points = np.asarray(contour, dtype=np.float64)
    if len(points) < 3:
        return np.zeros(0)

    incoming = points[1:-1] - points[:-2]
    outgoing = points[2:] - points[1:-1]
    heading_in = np.arctan2(incoming[:, 1], incoming[:, 0])
    heading_out = np.arctan2(outgoing[:, 1], outgoing[:, 0])

    turn = np.abs(heading_out - heading_in)
    turn = np.where(turn > np.pi, 2 * np.pi - turn, turn)
    return np.degrees(turn)
