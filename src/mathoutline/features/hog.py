"""
Coarse histogram-of-gradients density over the edge raster.

Each 8x8 cell's gradient histogram is reduced to its total per unit area,
which serves as a texture-density cue rather than a real HOG descriptor.
"""

import numpy as np

from mathoutline.edges.kernels import window_mean


def edge_gradients(edges):
    """
    Central-difference gradients of the edge raster scaled to [0, 1].

    Returns (magnitude, angle); border pixels have zero magnitude.
    """
    data = edges.astype(np.float64) / 255.0
    gx = np.zeros_like(data)
    gy = np.zeros_like(data)
    if data.shape[0] >= 3 and data.shape[1] >= 3:
        gx[1:-1, 1:-1] = data[1:-1, 2:] - data[1:-1, :-2]
        gy[1:-1, 1:-1] = data[2:, 1:-1] - data[:-2, 1:-1]
    return np.hypot(gx, gy), np.arctan2(gy, gx)


def orientation_bins(angle, bins=9):
    """Bin index floor((angle + pi) / 2pi * bins), clamped to [0, bins - 1]."""
    index = np.floor((angle + np.pi) / (2 * np.pi) * bins).astype(np.int64)
    return np.clip(index, 0, bins - 1)


def cell_histograms(edges, cell_size=8, bins=9):
    """
    Magnitude-weighted orientation histogram per cell.

    Returns an array of shape (cells_y, cells_x, bins); partial cells at the
    right and bottom edges are included.
    """
    height, width = edges.shape
    cells_y = -(-height // cell_size)
    cells_x = -(-width // cell_size)
    histograms = np.zeros((cells_y, cells_x, bins), dtype=np.float64)
    if height == 0 or width == 0:
        return histograms

    magnitude, angle = edge_gradients(edges)
    ys, xs = np.indices(edges.shape)
    np.add.at(
        histograms,
        (ys // cell_size, xs // cell_size, orientation_bins(angle, bins)),
        magnitude,
    )
    return histograms


def hog_density_map(edges, cell_size=8, bins=9):
    """Per-pixel cell density: histogram total / cell area, clipped to [0, 1]."""
    height, width = edges.shape
    totals = cell_histograms(edges, cell_size, bins).sum(axis=2) / (cell_size * cell_size)
    expanded = np.repeat(np.repeat(totals, cell_size, axis=0), cell_size, axis=1)
    return np.clip(expanded[:height, :width], 0.0, 1.0)


def hog_strength(edges, cell_size=8, bins=9, window=5):
    """Cell density averaged over the in-bounds window around each pixel."""
    if edges.size == 0:
        return np.zeros(edges.shape, dtype=np.float64)
    return window_mean(hog_density_map(edges, cell_size, bins), window)
