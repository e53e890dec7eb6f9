"""
Configuration management for the outline pipeline.

Every heuristic constant used by the stages (operator weights, threshold
factors, minimum sizes, confidence weights) lives here. Configuration is
built from a named preset and optionally overridden from YAML.
"""

import os
from dataclasses import asdict, dataclass, field, fields

import yaml


@dataclass
class EdgeConfig:
    """Configuration for edge detection."""
    threshold: int = 50  # base threshold, 1-255
    smoothing: float = 1.0  # Gaussian sigma
    operator_weights: dict = field(default_factory=lambda: {
        "sobel": 0.3,
        "prewitt": 0.2,
        "directional": 0.3,
        "laplacian": 0.2,
    })
    morph_cleanup: bool = True
    nms: str = "improved"  # "improved" or "plain"
    diagonal_weight: float = 0.707
    adaptive_threshold: bool = True
    high_base_factor: float = 0.5
    high_mean_factor: float = 1.0
    low_base_factor: float = 0.1
    low_mean_factor: float = 0.3
    min_component_size: int = 10
    region_grow: bool = True
    texture_enhancement: bool = False
    texture_score_threshold: float = 0.3
    texture_variance_threshold: float = 500.0


@dataclass
class FeatureConfig:
    """Configuration for skin and person-likelihood edge enhancement."""
    skin_boost: bool = True
    skin_window: int = 5
    skin_ratio_threshold: float = 0.1
    person_enhancement: bool = True
    person_window: int = 7
    hog_cell_size: int = 8
    hog_bins: int = 9
    hog_window: int = 5
    head_radius: int = 10
    line_half_length: int = 5
    arm_half_length: int = 10
    body_part_weights: dict = field(default_factory=lambda: {
        "head": 0.3,
        "torso": 0.4,
        "arm": 0.2,
        "leg": 0.1,
    })
    combine_weights: dict = field(default_factory=lambda: {
        "person": 0.4,
        "hog": 0.3,
        "body_part": 0.3,
    })
    combine_threshold: float = 0.2


@dataclass
class ContourConfig:
    """Configuration for contour extraction."""
    thresholds: list = field(default_factory=lambda: [255, 128, 64])
    min_length: int = 20
    max_failures: int = 5
    thin_edges: bool = True
    merge_window: int = 3  # grey closing that merges parallel ridges before thinning, 0 disables
    spur_max_length: int = 8  # skeleton branches up to this many pixels are removed
    spur_prune_iterations: int = 3


@dataclass
class PersonFilterConfig:
    """Configuration for person-likelihood contour selection."""
    max_candidates: int = 5
    confidence_floor: float = 0.3
    fallback_confidence: float = 0.2
    min_points: int = 10
    weights: dict = field(default_factory=lambda: {
        "shape": 0.10,
        "edge_density": 0.10,
        "area": 0.10,
        "complexity": 0.15,
        "proportions": 0.10,
        "symmetry": 0.10,
        "smoothness": 0.10,
        "pose": 0.10,
        "features": 0.15,
    })
    ideal_proportions: dict = field(default_factory=lambda: {
        "head": 0.15,
        "torso": 0.35,
        "legs": 0.50,
    })
    area_reference: float = 0.1  # fraction of the image area that scores 1.0
    symmetry_tolerance: float = 3.0
    smoothness_angle: float = 45.0  # degrees
    edge_density_samples: int = 100
    aspect_range: list = field(default_factory=lambda: [1.5, 3.0])


@dataclass
class CurveConfig:
    """Configuration for curve fitting and rendering."""
    mode: str = "linear"  # "linear", "quadratic", "spline" or "all"
    simplify: bool = True
    rdp_epsilon: float = 1.5
    min_segment_length: float = 5.0
    close_outline: bool = True
    closing_min_length: float = 2.0
    quadratic_min_length: float = 8.0
    spline_min_chord: float = 12.0
    max_outlines: int = 5


@dataclass
class TracingConfig:
    """Configuration for runtime tracing."""
    enabled: bool = False
    level: str = "INFO"
    file_path: str = None
    json_output: bool = False


@dataclass
class DebugConfig:
    """Configuration for debug artifact generation."""
    enabled: bool = False
    max_contours: int = 50
    max_edge_scale: int = 1600


@dataclass
class PipelineConfig:
    """Complete pipeline configuration."""
    preset: str = "default"
    edges: EdgeConfig = field(default_factory=EdgeConfig)
    features: FeatureConfig = field(default_factory=FeatureConfig)
    contours: ContourConfig = field(default_factory=ContourConfig)
    person: PersonFilterConfig = field(default_factory=PersonFilterConfig)
    curves: CurveConfig = field(default_factory=CurveConfig)
    tracing: TracingConfig = field(default_factory=TracingConfig)
    debug: DebugConfig = field(default_factory=DebugConfig)


SECTIONS = ("edges", "features", "contours", "person", "curves", "tracing", "debug")


def _fine_detail(config):
    # Tuned for hair and other thin structures: keep small components and
    # short traces, lower the adaptive thresholds, add the texture pass.
    config.edges.min_component_size = 5
    config.edges.high_base_factor = 0.6
    config.edges.high_mean_factor = 0.6
    config.edges.low_base_factor = 0.2
    config.edges.low_mean_factor = 0.2
    config.edges.texture_enhancement = True
    config.contours.min_length = 10
    return config


def _strict(config):
    config.edges.nms = "plain"
    config.person.confidence_floor = 0.5
    config.person.max_candidates = 3
    return config


PRESETS = {
    "default": lambda config: config,
    "fine_detail": _fine_detail,
    "strict": _strict,
}


def get_preset(name):
    """Build a fresh PipelineConfig for a named preset."""
    if name not in PRESETS:
        raise ValueError(f"Unknown preset '{name}', expected one of {sorted(PRESETS)}")
    config = PRESETS[name](PipelineConfig())
    config.preset = name
    return config


def load_config(config_path=None, preset=None):
    """
    Load configuration from a preset and an optional YAML file.

    The YAML file may name its own preset; an explicit preset argument wins.
    Missing values fall back to the preset's.
    """
    yaml_data = {}
    if config_path and os.path.exists(config_path):
        with open(config_path, "r", encoding="utf-8") as f:
            yaml_data = yaml.safe_load(f) or {}

    config = get_preset(preset or yaml_data.get("preset", "default"))
    return _merge_config(config, yaml_data)


def _merge_config(config, yaml_data):
    """Merge YAML sections into the config, ignoring unknown keys."""
    for section_name in SECTIONS:
        values = yaml_data.get(section_name)
        if not values:
            continue

        section = getattr(config, section_name)
        known = {f.name for f in fields(section)}
        for key, value in values.items():
            if key not in known:
                continue
            current = getattr(section, key)
            if isinstance(current, dict) and isinstance(value, dict):
                merged = dict(current)
                merged.update(value)
                value = merged
            setattr(section, key, value)

    return config


def save_default_config(path, preset="default"):
    """Save a preset's configuration to YAML for reference."""
    config = get_preset(preset)
    yaml_data = asdict(config)

    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(yaml_data, f, default_flow_style=False, sort_keys=False)
