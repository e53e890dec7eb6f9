"""
Convolution kernels and the windowed filters built on them.

All filters use correlation (kernel not flipped), matching how the 3x3
operators are written out below.
"""

import math

import numpy as np
from scipy import ndimage


SOBEL_X = np.array([[-1, 0, 1], [-2, 0, 2], [-1, 0, 1]], dtype=np.float32)
SOBEL_Y = np.array([[-1, -2, -1], [0, 0, 0], [1, 2, 1]], dtype=np.float32)

PREWITT_X = np.array([[-1, 0, 1], [-1, 0, 1], [-1, 0, 1]], dtype=np.float32)
PREWITT_Y = np.array([[-1, -1, -1], [0, 0, 0], [1, 1, 1]], dtype=np.float32)

# Diagonal-emphasis pair (45 and 135 degree Sobel)
DIAGONAL_X = np.array([[0, 1, 2], [-1, 0, 1], [-2, -1, 0]], dtype=np.float32)
DIAGONAL_Y = np.array([[-2, -1, 0], [-1, 0, 1], [0, 1, 2]], dtype=np.float32)

LAPLACIAN = np.array([[-1, -1, -1], [-1, 8, -1], [-1, -1, -1]], dtype=np.float32)


def gaussian_kernel(sigma):
    """
    Square Gaussian kernel of size ceil(6 * sigma), unnormalized.

    For even sizes the centre sits at size // 2, so offsets run from
    -size // 2 to size // 2 - 1.
    """
    size = max(1, math.ceil(sigma * 6))
    half = size // 2
    offsets = np.arange(size, dtype=np.float64) - half
    dy, dx = np.meshgrid(offsets, offsets, indexing="ij")
    return np.exp(-(dx * dx + dy * dy) / (2 * sigma * sigma))


def gaussian_blur(gray, sigma):
    """
    Gaussian blur normalized by the in-bounds kernel weight at each pixel.

    Near the border the kernel is truncated rather than padded, so a uniform
    image stays uniform. Returns uint8.
    """
    if gray.size == 0:
        return np.zeros_like(gray, dtype=np.uint8)

    kernel = gaussian_kernel(sigma)
    data = gray.astype(np.float64)

    weighted = ndimage.correlate(data, kernel, mode="constant", cval=0.0)
    weight_sum = ndimage.correlate(np.ones_like(data), kernel, mode="constant", cval=0.0)

    blurred = weighted / weight_sum
    return np.clip(np.rint(blurred), 0, 255).astype(np.uint8)


def zero_border(data, width=1):
    """Copy of data with a border of the given width set to zero."""
    result = data.copy()
    result[:width, :] = 0
    result[-width:, :] = 0
    result[:, :width] = 0
    result[:, -width:] = 0
    return result


def convolve3x3(data, kernel):
    """
    Apply a 3x3 kernel to interior pixels only.

    Border pixels have no full neighbourhood and are left at zero; rasters
    smaller than 3x3 come back all zero.
    """
    height, width = data.shape[:2]
    if height < 3 or width < 3:
        return np.zeros(data.shape, dtype=np.float32)

    response = ndimage.correlate(data.astype(np.float32), kernel, mode="nearest")
    return zero_border(response)


def window_sum(data, window):
    """Sum over a window x window neighbourhood, out-of-bounds cells counting as 0."""
    kernel = np.ones((window, window), dtype=np.float64)
    return ndimage.correlate(data.astype(np.float64), kernel, mode="constant", cval=0.0)


def window_mean(data, window):
    """Mean over the in-bounds part of a window x window neighbourhood."""
    total = window_sum(data, window)
    count = window_sum(np.ones(data.shape, dtype=np.float64), window)
    return total / count


def footprint_ratio(mask, footprint):
    """
    Fraction of in-bounds footprint cells that are set in mask.

    footprint is any odd-sized 0/1 array centred on the pixel.
    """
    footprint = footprint.astype(np.float64)
    hits = ndimage.correlate(mask.astype(np.float64), footprint, mode="constant", cval=0.0)
    count = ndimage.correlate(np.ones(mask.shape, dtype=np.float64), footprint, mode="constant", cval=0.0)
    return np.divide(hits, count, out=np.zeros_like(hits), where=count > 0)


def disc_footprint(radius, include_centre=True):
    """0/1 disc of the given radius (Euclidean distance <= radius)."""
    offsets = np.arange(-radius, radius + 1)
    dy, dx = np.meshgrid(offsets, offsets, indexing="ij")
    disc = (np.sqrt(dx * dx + dy * dy) <= radius).astype(np.float64)
    if not include_centre:
        disc[radius, radius] = 0
    return disc
