"""
Edge detection: RGBA raster to tri-level edge raster.

Grayscale, Gaussian blur, multi-operator gradients, morphological cleanup,
non-maximum suppression, double thresholding, component pruning, region
growing and (optionally) texture recovery, in that order.
"""

import numpy as np

from mathoutline.config import EdgeConfig
from mathoutline.deadline import ensure_deadline
from mathoutline.edges.components import grow_regions, prune_small_components
from mathoutline.edges.gradients import combined_gradient
from mathoutline.edges.kernels import gaussian_blur
from mathoutline.edges.suppression import (
    STRONG, WEAK, adaptive_thresholds, classify, double_threshold,
    morphological_cleanup, non_maximum_suppression,
)
from mathoutline.edges.texture import enhance_with_texture
from mathoutline.preprocess.raster_prep import PreparedRaster, ensure_rgba, to_grayscale
from mathoutline.tracer import get_tracer, trace


def _magnitude_preview(magnitude):
    peak = float(magnitude.max()) if magnitude.size else 0.0
    if peak <= 0:
        return np.zeros(magnitude.shape, dtype=np.uint8)
    return np.clip(magnitude / peak * 255.0, 0, 255).astype(np.uint8)


@trace(label="detect_edges", arg_names=["threshold", "smoothing"])
def detect_edges(image, threshold=None, smoothing=None, config=None, deadline=None, debug_writer=None):
    """
    Detect edges in an image.

    image may be a PreparedRaster or any array accepted by ensure_rgba.
    threshold and smoothing override the config values when given.

    Returns a uint8 raster with values in {0, 128, 255}. Rasters smaller
    than 3x3 have no interior pixels and come back all zero.
    """
    tracer = get_tracer()
    config = config or EdgeConfig()
    deadline = ensure_deadline(deadline)
    threshold = config.threshold if threshold is None else threshold
    smoothing = config.smoothing if smoothing is None else smoothing

    if isinstance(image, PreparedRaster):
        gray = image.gray
    else:
        gray = to_grayscale(ensure_rgba(image))

    height, width = gray.shape
    if height < 3 or width < 3:
        tracer.event(f"Raster {width}x{height} too small for 3x3 operators, no edges")
        return np.zeros((height, width), dtype=np.uint8)

    with tracer.span("blur", module="detector"):
        blurred = gaussian_blur(gray, smoothing)

    with tracer.span("gradients", module="detector"):
        gradient = combined_gradient(blurred, config.operator_weights)
        magnitude = gradient.magnitude
        if config.morph_cleanup:
            magnitude = morphological_cleanup(magnitude)

    with tracer.span("suppression", module="detector"):
        diagonal_weight = config.diagonal_weight if config.nms == "improved" else 1.0
        thinned = non_maximum_suppression(magnitude, gradient.direction, diagonal_weight)
        tracer.event(f"NMS variant={config.nms} survivors={int(np.count_nonzero(thinned))}")

    with tracer.span("threshold", module="detector"):
        if config.adaptive_threshold:
            high, low, mean = adaptive_thresholds(thinned, threshold, config)
            edges = classify(thinned, high, low)
            tracer.event(f"Adaptive thresholds: mean={mean:.2f} high={high:.2f} low={low:.2f}")
        else:
            high, low, mean = float(threshold), threshold * 0.5, None
            edges = double_threshold(thinned, threshold)

    deadline.check("component pruning")
    with tracer.span("components", module="detector"):
        classified = edges
        edges = prune_small_components(edges, config.min_component_size)
        if config.region_grow:
            edges = grow_regions(edges)

    if config.texture_enhancement:
        with tracer.span("texture", module="detector"):
            edges = enhance_with_texture(
                edges, blurred,
                score_threshold=config.texture_score_threshold,
                variance_threshold=config.texture_variance_threshold,
            )

    strong = int(np.count_nonzero(edges == STRONG))
    weak = int(np.count_nonzero(edges == WEAK))
    tracer.event(f"Edges: strong={strong} weak={weak}")

    if debug_writer:
        debug_writer.save_image(gray, "edges", "01_gray.png")
        debug_writer.save_image(blurred, "edges", "02_blurred.png")
        debug_writer.save_image(_magnitude_preview(magnitude), "edges", "03_magnitude.png")
        debug_writer.save_image(classified, "edges", "04_thresholded.png")
        debug_writer.save_image(edges, "edges", "05_edges.png")

        metrics = {
            "threshold": int(threshold),
            "smoothing": float(smoothing),
            "nms": config.nms,
            "adaptive": config.adaptive_threshold,
            "mean_magnitude": None if mean is None else round(mean, 3),
            "high": round(float(high), 3),
            "low": round(float(low), 3),
            "strong_pixels": strong,
            "weak_pixels": weak,
            "image_width": width,
            "image_height": height,
        }
        debug_writer.save_json(metrics, "edges", "edges_metrics.json")

    return edges
