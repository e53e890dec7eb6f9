"""
Feature enhancement: boost edges near skin and in person-like regions.
"""

import numpy as np

from mathoutline.config import FeatureConfig
from mathoutline.features.body_parts import body_part_probability, person_probability
from mathoutline.features.hog import hog_strength
from mathoutline.features.skin import boost_near_skin
from mathoutline.preprocess.raster_prep import PreparedRaster, ensure_rgba, skin_mask
from mathoutline.tracer import get_tracer, trace


def person_likelihood(edges, config):
    """
    Combined per-pixel person score from the probability map, HOG density
    and body-part maps, using config.combine_weights.
    """
    weights = config.combine_weights
    person = person_probability(edges, config.line_half_length, config.person_window)
    hog = hog_strength(edges, config.hog_cell_size, config.hog_bins, config.hog_window)
    parts = body_part_probability(
        edges, config.body_part_weights,
        head_radius=config.head_radius,
        line_half_length=config.line_half_length,
        arm_half_length=config.arm_half_length,
    )
    return (weights.get("person", 0.0) * person
            + weights.get("hog", 0.0) * hog
            + weights.get("body_part", 0.0) * parts)


def boost_person_regions(edges, config):
    """Scale edge values by (1 + score) where the person score exceeds the threshold."""
    combined = person_likelihood(edges, config)
    values = edges.astype(np.float64)
    boost = (values > 0) & (combined > config.combine_threshold)
    values = np.where(boost, values * (1.0 + combined), values)
    return np.clip(values, 0, 255).astype(np.uint8), combined


@trace(label="enhance_edges")
def enhance_edges(edges, image, config=None, debug_writer=None):
    """
    Enhance an edge raster using colour information.

    image is a PreparedRaster or an RGBA/RGB array of the same size. The
    result stays within [0, 255] but is no longer strictly tri-level.
    """
    tracer = get_tracer()
    config = config or FeatureConfig()

    if edges.size == 0:
        return edges.copy()

    if isinstance(image, PreparedRaster):
        skin = image.skin_mask
    else:
        skin = skin_mask(ensure_rgba(image))

    enhanced = edges.copy()
    if config.skin_boost:
        enhanced = boost_near_skin(enhanced, skin, config.skin_window, config.skin_ratio_threshold)

    combined = None
    if config.person_enhancement:
        enhanced, combined = boost_person_regions(enhanced, config)

    changed = int(np.count_nonzero(enhanced != edges))
    tracer.event(f"Enhanced {changed} of {int(np.count_nonzero(edges))} edge pixels")

    if debug_writer:
        debug_writer.save_image(skin, "features", "01_skin_mask.png")
        if combined is not None:
            preview = np.clip(combined * 255.0, 0, 255).astype(np.uint8)
            debug_writer.save_image(preview, "features", "02_person_score.png")
        debug_writer.save_image(enhanced, "features", "03_enhanced.png")
        debug_writer.save_json({
            "skin_pixels": int(np.count_nonzero(skin)),
            "edge_pixels": int(np.count_nonzero(edges)),
            "boosted_pixels": changed,
        }, "features", "features_metrics.json")

    return enhanced
