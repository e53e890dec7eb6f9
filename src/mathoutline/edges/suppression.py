"""
Magnitude cleanup, non-maximum suppression and double thresholding.

The thresholding functions produce the tri-level edge classification:
0 (none), 128 (weak) and 255 (strong).
"""

import numpy as np
from scipy import ndimage

from mathoutline.edges.kernels import zero_border


WEAK = 128
STRONG = 255


def morphological_cleanup(magnitude):
    """
    Suppress isolated magnitude spikes with a 3x3 grey opening (erode then
    dilate). Ridges come out flattened to plateaus a few pixels wide, which
    non-maximum suppression keeps as bands for contour thinning to collapse.
    """
    height, width = magnitude.shape
    if height < 3 or width < 3:
        return np.zeros_like(magnitude)

    eroded = ndimage.grey_erosion(magnitude, size=(3, 3), mode="nearest")
    opened = ndimage.grey_dilation(eroded, size=(3, 3), mode="nearest")
    return zero_border(opened.astype(magnitude.dtype))


def _direction_classes(direction):
    degrees = (np.degrees(direction) + 360.0) % 360.0
    horizontal = (degrees < 22.5) | ((degrees >= 157.5) & (degrees < 202.5)) | (degrees >= 337.5)
    falling = ((degrees >= 22.5) & (degrees < 67.5)) | ((degrees >= 202.5) & (degrees < 247.5))
    vertical = ((degrees >= 67.5) & (degrees < 112.5)) | ((degrees >= 247.5) & (degrees < 292.5))
    return horizontal, falling, vertical


def non_maximum_suppression(magnitude, direction, diagonal_weight=1.0):
    """
    Thin ridges to pixels that dominate both neighbours along the gradient.

    Directions are bucketed into four classes (0, 45, 90, 135 degrees, each
    +/- 22.5). With diagonal_weight < 1 the diagonal neighbours are scaled
    down before comparison; 1.0 gives the plain variant.

    Rows grow downward, so a 45 degree gradient points toward (x+1, y+1).
    """
    height, width = magnitude.shape
    result = np.zeros_like(magnitude)
    if height < 3 or width < 3:
        return result

    m = magnitude[1:-1, 1:-1]
    east, west = magnitude[1:-1, 2:], magnitude[1:-1, :-2]
    north, south = magnitude[:-2, 1:-1], magnitude[2:, 1:-1]
    north_east, south_west = magnitude[:-2, 2:], magnitude[2:, :-2]
    north_west, south_east = magnitude[:-2, :-2], magnitude[2:, 2:]

    horizontal, falling, vertical = _direction_classes(direction[1:-1, 1:-1])
    classes = [horizontal, falling, vertical]

    # Remaining pixels belong to the 135 degree class
    first = np.select(classes, [east, south_east, south], default=south_west)
    second = np.select(classes, [west, north_west, north], default=north_east)

    weight = np.where(horizontal | vertical, 1.0, diagonal_weight)
    keep = (m >= first * weight) & (m >= second * weight)

    result[1:-1, 1:-1] = np.where(keep, m, 0)
    return result


def classify(magnitude, high, low):
    """Map magnitudes to 255 (>= high), 128 (>= low) or 0. Zero stays zero."""
    edges = np.zeros(magnitude.shape, dtype=np.uint8)
    present = magnitude > 0
    edges[present & (magnitude >= low)] = WEAK
    edges[present & (magnitude >= high)] = STRONG
    return edges


def adaptive_thresholds(magnitude, threshold, config):
    """
    High and low thresholds from the mean non-zero magnitude.

    Each threshold is the larger of a base-threshold fraction and a mean
    fraction, so an empty field falls back to the base-derived floors.
    """
    nonzero = magnitude[magnitude > 0]
    mean = float(nonzero.mean()) if nonzero.size else 0.0

    high = max(threshold * config.high_base_factor, mean * config.high_mean_factor)
    low = max(threshold * config.low_base_factor, mean * config.low_mean_factor)
    return high, low, mean


def adaptive_double_threshold(magnitude, threshold, config):
    high, low, _ = adaptive_thresholds(magnitude, threshold, config)
    return classify(magnitude, high, low)


def double_threshold(magnitude, threshold):
    """Fixed double threshold: high = threshold, low = threshold / 2."""
    return classify(magnitude, float(threshold), threshold * 0.5)
