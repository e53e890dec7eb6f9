"""
Connected-component operations on edge rasters.

Both passes use 8-connectivity via scipy's labelling, which replaces an
explicit flood fill with a per-call label array.
"""

import numpy as np
from scipy import ndimage

from mathoutline.edges.suppression import STRONG, WEAK


EIGHT_CONNECTED = np.ones((3, 3), dtype=bool)


def label_components(mask):
    """Label 8-connected regions of a boolean mask. Returns (labels, count)."""
    return ndimage.label(mask, structure=EIGHT_CONNECTED)


def prune_small_components(edges, min_size):
    """
    Drop weak/strong components with fewer than min_size pixels.

    Surviving pixels keep their original classification.
    """
    labels, count = label_components(edges >= WEAK)
    if count == 0:
        return np.zeros_like(edges)

    sizes = np.bincount(labels.ravel())
    keep = sizes >= min_size
    keep[0] = False

    return np.where(keep[labels], edges, 0).astype(edges.dtype)


def grow_regions(edges):
    """
    Promote every non-zero component that touches a strong pixel to strong.

    The result is a fixed point: growing it again changes nothing.
    """
    labels, count = label_components(edges > 0)
    result = edges.copy()
    if count == 0:
        return result

    seeded = np.unique(labels[edges == STRONG])
    seeded = seeded[seeded > 0]
    result[np.isin(labels, seeded)] = STRONG
    return result
