"""
Texture-based weak-edge recovery for fine structures such as hair.
"""

import numpy as np

from mathoutline.edges.kernels import window_mean
from mathoutline.edges.suppression import WEAK


def texture_score(gray, radius=2):
    """
    Mean absolute grey difference to the (2r+1)^2 - 1 neighbours, in [0, 1].

    Out-of-bounds neighbours contribute nothing but the divisor stays fixed,
    so border pixels score lower.
    """
    data = gray.astype(np.float64)
    height, width = data.shape
    total = np.zeros_like(data)

    for dy in range(-radius, radius + 1):
        for dx in range(-radius, radius + 1):
            if dx == 0 and dy == 0:
                continue
            ys, yd = slice(max(0, dy), height + min(0, dy)), slice(max(0, -dy), height - max(0, dy))
            xs, xd = slice(max(0, dx), width + min(0, dx)), slice(max(0, -dx), width - max(0, dx))
            total[yd, xd] += np.abs(data[yd, xd] - data[ys, xs])

    neighbours = (2 * radius + 1) ** 2 - 1
    return total / neighbours / 255.0


def local_variance(gray, window=7):
    """Variance over the in-bounds part of a window x window neighbourhood."""
    data = gray.astype(np.float64)
    mean = window_mean(data, window)
    mean_sq = window_mean(data * data, window)
    return np.maximum(mean_sq - mean * mean, 0.0)


def enhance_with_texture(edges, gray, score_threshold=0.3, variance_threshold=500.0):
    """
    Mark textured interior non-edge pixels as weak edges.

    Existing edge values are untouched and the outer one-pixel ring is
    never marked, so the tri-level classification is preserved.
    """
    result = edges.copy()
    height, width = edges.shape
    if height < 3 or width < 3:
        return result

    textured = (texture_score(gray) > score_threshold) | (local_variance(gray) > variance_threshold)

    interior = np.zeros(edges.shape, dtype=bool)
    interior[1:-1, 1:-1] = True

    result[interior & (edges == 0) & textured] = WEAK
    return result
