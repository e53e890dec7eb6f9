"""
Local edge-pattern maps used to score person likelihood.

Pattern ratios are measured on the non-zero edge mask: vertical and
horizontal line runs, a curved-neighbourhood ratio and a disc density for
heads. Body-part maps apply them inside fixed vertical bands of the image.
"""

import numpy as np
from scipy import ndimage

from mathoutline.edges.kernels import disc_footprint, footprint_ratio, window_mean


def vertical_ratio(mask, half_length=5):
    """Fraction of in-bounds pixels set within +/- half_length rows."""
    footprint = np.zeros((2 * half_length + 1, 1))
    footprint[:, 0] = 1
    return footprint_ratio(mask, footprint)


def horizontal_ratio(mask, half_length=5):
    """Fraction of in-bounds pixels set within +/- half_length columns."""
    footprint = np.ones((1, 2 * half_length + 1))
    return footprint_ratio(mask, footprint)


def curved_ratio(mask, radius=3):
    """
    Share of set pixels in the (2r+1)^2 square that lie on the radius-r disc
    around the pixel, centre excluded.
    """
    data = mask.astype(np.float64)
    square = np.ones((2 * radius + 1, 2 * radius + 1))
    on_disc = ndimage.correlate(data, disc_footprint(radius, include_centre=False), mode="constant", cval=0.0)
    in_square = ndimage.correlate(data, square, mode="constant", cval=0.0)
    return np.divide(on_disc, in_square, out=np.zeros_like(on_disc), where=in_square > 0)


def person_probability(edges, line_half_length=5, window=7):
    """
    Person-likelihood map: mean of vertical, horizontal and curved ratios at
    edge pixels, averaged over a window x window neighbourhood.
    """
    mask = edges > 0
    if not mask.any():
        return np.zeros(edges.shape, dtype=np.float64)

    pattern = (vertical_ratio(mask, line_half_length)
               + horizontal_ratio(mask, line_half_length)
               + curved_ratio(mask)) / 3.0
    pattern = np.where(mask, pattern, 0.0)
    return window_mean(pattern, window)


def _band(height, start, end):
    rows = np.zeros(height, dtype=bool)
    rows[int(height * start):int(height * end)] = True
    return rows[:, np.newaxis]


def body_part_maps(edges, head_radius=10, line_half_length=5, arm_half_length=10):
    """
    Per-part likelihood maps, keyed head, torso, arm and leg.

    Bands by image height: head 0-15%, torso 15-60%, arms 20-70%,
    legs 60-100%. Only edge pixels inside a band score.
    """
    height = edges.shape[0]
    mask = edges > 0
    vertical = vertical_ratio(mask, line_half_length)

    maps = {
        "head": (_band(height, 0.0, 0.15), footprint_ratio(mask, disc_footprint(head_radius))),
        "torso": (_band(height, 0.15, 0.6), vertical),
        "arm": (_band(height, 0.2, 0.7), horizontal_ratio(mask, arm_half_length)),
        "leg": (_band(height, 0.6, 1.0), vertical),
    }
    return {name: np.where(mask & band, ratio, 0.0) for name, (band, ratio) in maps.items()}


def body_part_probability(edges, weights, head_radius=10, line_half_length=5, arm_half_length=10):
    """Weighted sum of the body-part maps."""
    maps = body_part_maps(edges, head_radius, line_half_length, arm_half_length)
    combined = np.zeros(edges.shape, dtype=np.float64)
    for name, part in maps.items():
        combined += weights.get(name, 0.0) * part
    return combined
