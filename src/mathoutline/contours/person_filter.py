"""
Person-likelihood scoring and selection of traced contours.

Each contour gets a set of sub-scores in [0, 1]; the confidence is their
weighted mean using PersonFilterConfig.weights. The best candidates above
the confidence floor are kept, and when none qualify the largest contour
is returned as a low-confidence fallback.
"""

import numpy as np
from scipy.spatial import cKDTree
from shapely.geometry import MultiPoint

from mathoutline.config import PersonFilterConfig
from mathoutline.contours.shape_metrics import (
    bounding_box, compactness, contour_area, contour_perimeter, elongation, turn_angles,
)
from mathoutline.models import PersonCandidate
from mathoutline.tracer import get_tracer, trace


# Relative-height windows for pose landmarks
HEAD_BAND = (0.0, 0.2)
SHOULDER_BAND = (0.2, 0.35)
HIP_BAND = (0.45, 0.6)

FACE_REGION = 0.3
HAIR_REGION = 0.3
HAIR_RADIUS = 3.0
HAIR_TEXTURE_THRESHOLD = 0.4


def _relative_heights(points, bbox):
    min_y, max_y = bbox[1], bbox[3]
    height = max_y - min_y
    if height <= 0:
        return np.zeros(len(points))
    return (points[:, 1] - min_y) / height


def shape_score(contour):
    """
    Mean of a circularity penalty (1 - 1/compactness) and an elongation
    score that saturates at a 3:1 principal-axis ratio.
    """
    c = compactness(contour)
    circularity = 0.0 if not np.isfinite(c) else min(1.0, max(0.0, 1.0 - 1.0 / c))

    e = elongation(contour)
    stretch = 0.0 if not np.isfinite(e) else min(1.0, max(0.0, (np.sqrt(e) - 1.0) / 2.0))

    return (circularity + stretch) / 2.0


def edge_density_score(contour, edges, samples=100):
    """Fraction of evenly sampled contour points lying on non-zero edge pixels."""
    points = np.asarray(contour, dtype=np.int64)
    if len(points) == 0 or edges.size == 0:
        return 0.0

    index = np.unique(np.linspace(0, len(points) - 1, min(samples, len(points))).astype(np.int64))
    sampled = points[index]
    height, width = edges.shape
    inside = ((sampled[:, 0] >= 0) & (sampled[:, 0] < width)
              & (sampled[:, 1] >= 0) & (sampled[:, 1] < height))
    sampled = sampled[inside]
    if len(sampled) == 0:
        return 0.0
    return float(np.count_nonzero(edges[sampled[:, 1], sampled[:, 0]] > 0)) / len(index)


def area_score(contour, width, height, reference=0.1):
    """Enclosed area relative to reference * image area, capped at 1."""
    image_area = width * height
    if image_area <= 0:
        return 0.0
    return min(1.0, contour_area(contour) / (reference * image_area))


def complexity_score(contour):
    """1 - convex hull perimeter / contour perimeter: 0 for convex outlines."""
    perimeter = contour_perimeter(contour)
    if perimeter <= 0 or len(contour) < 3:
        return 0.0
    hull = MultiPoint(contour).convex_hull
    return min(1.0, max(0.0, 1.0 - hull.length / perimeter))


def proportions_score(contour, ideal):
    """
    Compare the share of points in head/torso/leg height bands with the
    ideal shares; each band scores 1 - |actual - ideal| / ideal.
    """
    points = np.asarray(contour, dtype=np.float64)
    rel = _relative_heights(points, bounding_box(contour))

    head_end = ideal["head"]
    torso_end = ideal["head"] + ideal["torso"]
    actual = {
        "head": np.count_nonzero(rel < head_end),
        "torso": np.count_nonzero((rel >= head_end) & (rel < torso_end)),
        "legs": np.count_nonzero(rel >= torso_end),
    }

    terms = [max(0.0, 1.0 - abs(actual[band] / len(points) - share) / share)
             for band, share in ideal.items() if share > 0]
    return float(np.mean(terms)) if terms else 0.0


def symmetry_score(contour, tolerance=3.0, centre_x=None):
    """
    Fraction of points whose mirror image about the vertical centre line of
    the bounding box has a contour point within tolerance (Chebyshev).
    """
    points = np.asarray(contour, dtype=np.float64)
    if len(points) == 0:
        return 0.0
    if centre_x is None:
        min_x, _, max_x, _ = bounding_box(contour)
        centre_x = (min_x + max_x) / 2.0

    mirrored = points.copy()
    mirrored[:, 0] = 2 * centre_x - points[:, 0]

    distances, _ = cKDTree(points).query(mirrored, p=np.inf, distance_upper_bound=tolerance + 1e-9)
    return float(np.count_nonzero(np.isfinite(distances))) / len(points)


def smoothness_score(contour, max_angle=45.0):
    """Fraction of interior points whose turning angle is below max_angle."""
    angles = turn_angles(contour)
    if len(angles) == 0:
        return 0.0
    return float(np.count_nonzero(angles < max_angle)) / len(angles)


def _band_points(points, rel, band):
    return points[(rel >= band[0]) & (rel < band[1])]


def pose_score(contour, aspect_range=(1.5, 3.0)):
    """
    Landmark heuristic: a head band, shoulder and hip bands with points on
    both sides of the centre line, shoulders wider than the head, plus a
    bonus for a height:width ratio inside aspect_range.
    """
    points = np.asarray(contour, dtype=np.float64)
    bbox = bounding_box(contour)
    rel = _relative_heights(points, bbox)
    centre_x = (bbox[0] + bbox[2]) / 2.0

    head = _band_points(points, rel, HEAD_BAND)
    shoulders = _band_points(points, rel, SHOULDER_BAND)
    hips = _band_points(points, rel, HIP_BAND)

    def paired(band):
        return len(band) > 0 and band[:, 0].min() < centre_x < band[:, 0].max()

    def span(band):
        return band[:, 0].max() - band[:, 0].min() if len(band) else 0.0

    landmarks = [
        len(head) > 0,
        paired(shoulders),
        paired(hips),
        len(head) > 0 and span(shoulders) > span(head),
    ]
    joints = sum(landmarks) / len(landmarks)

    width = bbox[2] - bbox[0]
    height = bbox[3] - bbox[1]
    aspect = height / width if width > 0 else 0.0
    bonus = 1.0 if aspect_range[0] <= aspect <= aspect_range[1] else 0.0

    return 0.7 * joints + 0.3 * bonus


def facial_score(contour, tolerance=3.0):
    """
    Symmetry and horizontal-run density of the points in the top of the
    bounding box, averaged.
    """
    points = np.asarray(contour, dtype=np.float64)
    bbox = bounding_box(contour)
    rel = _relative_heights(points, bbox)
    face_mask = rel <= FACE_REGION
    face = points[face_mask]
    if len(face) < 2:
        return 0.0

    centre_x = (bbox[0] + bbox[2]) / 2.0
    symmetry = symmetry_score(face, tolerance, centre_x=centre_x)

    # Consecutive contour steps inside the face region that run horizontally
    steps = np.diff(points, axis=0)
    in_face = face_mask[:-1] & face_mask[1:]
    horizontal = in_face & (steps[:, 1] == 0) & (steps[:, 0] != 0)
    density = np.count_nonzero(horizontal) / max(1, np.count_nonzero(in_face))

    return (symmetry + density) / 2.0


def hair_score(contour):
    """
    Share of top-region points whose mean distance to contour neighbours
    within HAIR_RADIUS exceeds the texture threshold, doubled and capped at 1.
    """
    points = np.asarray(contour, dtype=np.float64)
    rel = _relative_heights(points, bounding_box(contour))
    upper = points[rel <= HAIR_REGION]
    if len(upper) == 0:
        return 0.0

    tree = cKDTree(points)
    hair_points = 0
    for point, neighbours in zip(upper, tree.query_ball_point(upper, r=HAIR_RADIUS)):
        distances = np.linalg.norm(points[neighbours] - point, axis=1)
        distances = distances[distances > 0]
        if len(distances) and distances.mean() > HAIR_TEXTURE_THRESHOLD:
            hair_points += 1

    return min(1.0, 2.0 * hair_points / len(upper))


def feature_score(contour, tolerance=3.0):
    return 0.6 * facial_score(contour, tolerance) + 0.4 * hair_score(contour)


def score_contour(contour, edges, width, height, config=None):
    """
    Person-likelihood sub-scores and weighted confidence for one contour.

    Returns (confidence, scores). Contours shorter than config.min_points
    score 0 with no sub-scores.
    """
    config = config or PersonFilterConfig()
    if len(contour) < config.min_points:
        return 0.0, {}

    scores = {
        "shape": shape_score(contour),
        "edge_density": edge_density_score(contour, edges, config.edge_density_samples),
        "area": area_score(contour, width, height, config.area_reference),
        "complexity": complexity_score(contour),
        "proportions": proportions_score(contour, config.ideal_proportions),
        "symmetry": symmetry_score(contour, config.symmetry_tolerance),
        "smoothness": smoothness_score(contour, config.smoothness_angle),
        "pose": pose_score(contour, config.aspect_range),
        "features": feature_score(contour, config.symmetry_tolerance),
    }

    total_weight = sum(config.weights.get(name, 0.0) for name in scores)
    if total_weight <= 0:
        return 0.0, scores

    confidence = sum(config.weights.get(name, 0.0) * value for name, value in scores.items())
    confidence = min(1.0, max(0.0, confidence / total_weight))
    return confidence, {name: round(float(value), 4) for name, value in scores.items()}


@trace(label="filter_person_contours")
def filter_person_contours(contours, edges, width, height, config=None, debug_writer=None):
    """
    Select the most person-like contours.

    Returns up to config.max_candidates PersonCandidates sorted by
    descending confidence. If none clear the floor, the largest-area
    contour is returned alone with the fallback confidence. Empty input
    gives an empty list.
    """
    tracer = get_tracer()
    config = config or PersonFilterConfig()

    if not contours:
        tracer.event("No contours to filter")
        return []

    scored = []
    for contour in contours:
        confidence, scores = score_contour(contour, edges, width, height, config)
        scored.append((confidence, scores, contour))

    passing = [item for item in scored if item[0] > config.confidence_floor]
    passing.sort(key=lambda item: item[0], reverse=True)

    candidates = [
        PersonCandidate(contour=[(int(x), int(y)) for x, y in contour],
                        confidence=confidence, scores=scores)
        for confidence, scores, contour in passing[:config.max_candidates]
    ]

    if not candidates:
        largest = max(contours, key=contour_area)
        candidates = [PersonCandidate(
            contour=[(int(x), int(y)) for x, y in largest],
            confidence=config.fallback_confidence,
            fallback=True,
        )]
        tracer.event(f"No contour above floor {config.confidence_floor}, "
                     f"falling back to largest ({len(largest)} points)", level="WARN")
    else:
        tracer.event(f"Selected {len(candidates)} of {len(contours)} contours, "
                     f"best confidence={candidates[0].confidence:.3f}")

    if debug_writer:
        preview = np.where(edges > 0, 96, 0).astype(np.uint8)
        debug_writer.save_overlay(
            preview, "person", "01_selected.png",
            polylines=[c.contour for c in candidates],
        )
        debug_writer.save_json({
            "confidence_floor": config.confidence_floor,
            "max_candidates": config.max_candidates,
            "scored": [round(float(s[0]), 4) for s in scored[:debug_writer.max_contours]],
            "selected": [c.model_dump(exclude={"contour"}) for c in candidates],
        }, "person", "person_metrics.json")

    return candidates
