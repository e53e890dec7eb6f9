"""
Skin-proximity edge boost.
"""

import numpy as np

from mathoutline.edges.kernels import window_mean


def skin_ratio_map(skin_mask, window=5):
    """Fraction of skin pixels in the in-bounds window around every pixel."""
    return window_mean(skin_mask > 0, window)


def boost_near_skin(edges, skin_mask, window=5, ratio_threshold=0.1):
    """
    Scale edge values by (1 + skin ratio) where the ratio exceeds the threshold.

    Non-edge pixels stay zero; boosted values are clamped to 255.
    """
    values = edges.astype(np.float64)
    ratio = skin_ratio_map(skin_mask, window)

    boost = (values > 0) & (ratio > ratio_threshold)
    values = np.where(boost, values * (1.0 + ratio), values)
    return np.clip(values, 0, 255).astype(np.uint8)
