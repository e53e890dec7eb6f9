"""
Multi-operator gradient computation.

Sobel, Prewitt and a diagonal pair each give a gradient field; their
magnitudes are blended with the absolute Laplacian using configurable weights.
"""

from collections import namedtuple

import numpy as np

from mathoutline.edges.kernels import (
    DIAGONAL_X, DIAGONAL_Y, LAPLACIAN, PREWITT_X, PREWITT_Y, SOBEL_X, SOBEL_Y,
    convolve3x3,
)


GradientField = namedtuple("GradientField", ["magnitude", "direction"])

OPERATORS = {
    "sobel": (SOBEL_X, SOBEL_Y),
    "prewitt": (PREWITT_X, PREWITT_Y),
    "directional": (DIAGONAL_X, DIAGONAL_Y),
}


def gradient_field(data, kernel_x, kernel_y):
    """Magnitude and direction (radians, atan2(gy, gx)) for one operator pair."""
    gx = convolve3x3(data, kernel_x)
    gy = convolve3x3(data, kernel_y)
    magnitude = np.hypot(gx, gy).astype(np.float32)
    direction = np.arctan2(gy, gx).astype(np.float32)
    return GradientField(magnitude, direction)


def laplacian_response(data):
    """Absolute 8-neighbour Laplacian (centre weight +8)."""
    return np.abs(convolve3x3(data, LAPLACIAN))


def compute_gradients(blurred):
    """Gradient field for every configured operator, keyed by operator name."""
    return {name: gradient_field(blurred, kx, ky) for name, (kx, ky) in OPERATORS.items()}


def combine_magnitudes(fields, laplacian, weights):
    """
    Weighted blend of operator magnitudes and |Laplacian|.

    weights maps "sobel", "prewitt", "directional" and "laplacian" to floats;
    missing keys count as zero.
    """
    combined = weights.get("laplacian", 0.0) * laplacian
    for name, field in fields.items():
        combined = combined + weights.get(name, 0.0) * field.magnitude
    return combined.astype(np.float32)


def combined_gradient(blurred, weights):
    """
    Blended gradient magnitude plus the Sobel direction used for suppression.
    """
    fields = compute_gradients(blurred)
    magnitude = combine_magnitudes(fields, laplacian_response(blurred), weights)
    return GradientField(magnitude, fields["sobel"].direction)
