"""
Contour extraction by greedy 8-directional tracing.

Thresholds are processed strongest first. A pixel is claimed by at most one
contour across all passes, so weaker passes only pick up what stronger ones
missed and the whole extraction touches each pixel a bounded number of times.
"""

import numpy as np
from scipy import ndimage
from skimage.morphology import skeletonize

from mathoutline.config import ContourConfig
from mathoutline.deadline import ensure_deadline
from mathoutline.tracer import get_tracer, trace


# (dx, dy) in priority order: E, SE, S, SW, W, NW, N, NE
DIRECTIONS = [
    (1, 0), (1, 1), (0, 1), (-1, 1),
    (-1, 0), (-1, -1), (0, -1), (1, -1),
]


# 8-neighbour cycle clockwise from north, as (dy, dx)
NEIGHBOUR_CYCLE = [
    (-1, 0), (-1, 1), (0, 1), (1, 1),
    (1, 0), (1, -1), (0, -1), (-1, -1),
]


def _neighbours(mask, y, x):
    height, width = mask.shape
    for dx, dy in DIRECTIONS:
        ny, nx = y + dy, x + dx
        if 0 <= ny < height and 0 <= nx < width and mask[ny, nx]:
            yield ny, nx


def crossing_numbers(mask):
    """
    Number of 0 -> 1 transitions around the 8-neighbour cycle of every pixel.

    On a one-pixel-wide skeleton, 1 marks an endpoint, 2 a curve pixel and
    3 or more a junction.
    """
    height, width = mask.shape
    padded = np.pad(mask.astype(bool), 1)
    ring = [padded[1 + dy:1 + dy + height, 1 + dx:1 + dx + width] for dy, dx in NEIGHBOUR_CYCLE]
    crossings = np.zeros((height, width), dtype=np.int32)
    for current, following in zip(ring, ring[1:] + ring[:1]):
        crossings += ~current & following
    return crossings


def _crossing_number(mask, y, x):
    height, width = mask.shape
    ring = [0 <= y + dy < height and 0 <= x + dx < width and bool(mask[y + dy, x + dx])
            for dy, dx in NEIGHBOUR_CYCLE]
    return sum(1 for current, following in zip(ring, ring[1:] + ring[:1])
               if not current and following)


def _spur_from(mask, y, x, max_length):
    # Walk from an endpoint until the next step would enter a junction. None if
    # the branch outgrows max_length or runs out without meeting one.
    branch = [(y, x)]
    on_branch = {(y, x)}

    while len(branch) <= max_length:
        following = [n for n in _neighbours(mask, *branch[-1]) if n not in on_branch]
        if not following:
            return None
        if any(_crossing_number(mask, *n) >= 3 for n in following):
            return branch
        branch.append(following[0])
        on_branch.add(following[0])

    return None


def prune_spurs(mask, max_length=8, iterations=3):
    """
    Remove short skeleton branches that end in a free endpoint.

    A branch is removed when it reaches a junction within max_length
    pixels. Closed loops and open curves without junctions are left intact.
    """
    mask = mask.astype(bool, copy=True)
    for _ in range(iterations):
        removed = 0
        for y, x in np.argwhere(mask & (crossing_numbers(mask) == 1)):
            y, x = int(y), int(x)
            if not mask[y, x] or _crossing_number(mask, y, x) != 1:
                continue
            spur = _spur_from(mask, y, x, max_length)
            if spur is None:
                continue
            for py, px in spur:
                mask[py, px] = False
            removed += 1
        if removed == 0:
            break
    return mask


def merge_ridges(edges, window=3):
    """
    Grey closing of the edge raster with a window x window square.

    A thin bright line gives a ridge on each side of it; closing fills the
    gap between them so thinning yields one centre line instead of two.
    """
    if window <= 1:
        return edges
    return ndimage.grey_closing(edges, size=(window, window))


def thin_edges(edges, spur_max_length=8, spur_iterations=3, merge_window=3):
    """
    Merge parallel ridges, skeletonize the non-zero mask and prune short
    spurs, keeping the merged values on the remaining skeleton pixels.
    """
    merged = merge_ridges(edges, merge_window)
    skeleton = skeletonize(merged > 0)
    if spur_max_length > 0 and spur_iterations > 0:
        skeleton = prune_spurs(skeleton, spur_max_length, spur_iterations)
    return np.where(skeleton, merged, 0).astype(edges.dtype)


def _next_pixel(values, visited, x, y, minimum):
    height, width = values.shape
    for dx, dy in DIRECTIONS:
        nx, ny = x + dx, y + dy
        if 0 <= nx < width and 0 <= ny < height:
            if not visited[ny, nx] and values[ny, nx] >= minimum:
                return nx, ny
    return None


def trace_contour(values, visited, start_x, start_y, threshold, max_failures=5):
    """
    Walk from a start pixel, always taking the first unvisited neighbour in
    DIRECTIONS order whose value meets the threshold.

    When no such neighbour exists the walk stops if it is back next to its
    start (closed loop); otherwise it relaxes to any non-zero neighbour, at
    most max_failures times in a row. visited is updated in place.

    Returns the contour as a list of (x, y).
    """
    contour = [(start_x, start_y)]
    visited[start_y, start_x] = True

    x, y = start_x, start_y
    failures = 0

    while True:
        step = _next_pixel(values, visited, x, y, threshold)
        if step is None:
            if len(contour) > 2 and abs(x - start_x) <= 1 and abs(y - start_y) <= 1:
                break

            step = _next_pixel(values, visited, x, y, 1)
            if step is None:
                break
            failures += 1
            if failures > max_failures:
                break
        else:
            failures = 0

        x, y = step
        visited[y, x] = True
        contour.append((x, y))

    return contour


@trace(label="extract_contours")
def extract_contours(edges, config=None, deadline=None, debug_writer=None):
    """
    Trace contours in an edge raster.

    Returns a list of contours, each a list of integer (x, y) points with at
    least config.min_length points.
    """
    tracer = get_tracer()
    config = config or ContourConfig()
    deadline = ensure_deadline(deadline)

    if edges.size == 0:
        return []

    if config.thin_edges:
        values = thin_edges(edges, config.spur_max_length, config.spur_prune_iterations,
                            config.merge_window)
    else:
        values = edges
    visited = np.zeros(values.shape, dtype=bool)

    contours = []
    discarded = 0

    for threshold in config.thresholds:
        # argwhere yields (row, col) in row-major order
        for y, x in np.argwhere(values >= threshold):
            if visited[y, x]:
                continue
            deadline.check("contour tracing")

            contour = trace_contour(values, visited, int(x), int(y), threshold, config.max_failures)
            if len(contour) >= config.min_length:
                contours.append(contour)
            else:
                discarded += 1

    lengths = [len(c) for c in contours]
    tracer.event(f"Contours: kept={len(contours)} discarded={discarded} "
                 f"longest={max(lengths) if lengths else 0}")

    if debug_writer:
        preview = (values > 0).astype(np.uint8) * 128
        debug_writer.save_overlay(
            preview, "contours", "01_contours.png",
            polylines=contours[:debug_writer.max_contours],
        )
        debug_writer.save_json({
            "thin_edges": config.thin_edges,
            "merge_window": config.merge_window,
            "thresholds": list(config.thresholds),
            "min_length": config.min_length,
            "contour_count": len(contours),
            "discarded": discarded,
            "lengths": lengths,
        }, "contours", "contours_metrics.json")

    return contours
