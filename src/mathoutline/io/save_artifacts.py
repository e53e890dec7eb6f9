"""
Artifact saving utilities for the outline pipeline.

Handles writing result files and per-stage debug images and JSON.
"""

import json
import os

import cv2
import numpy as np

from mathoutline.tracer import get_tracer


def ensure_dir(path):
    """Create directory if it does not exist."""
    if path:
        os.makedirs(path, exist_ok=True)


def get_debug_dir(out_dir, run_id, stage_name):
    """
    Get the debug directory path for a stage.

    Creates the directory if it does not exist.
    """
    debug_dir = os.path.join(out_dir, "debug", run_id, stage_name)
    ensure_dir(debug_dir)
    return debug_dir


def save_image(img, path, max_edge=None):
    """
    Save an image to disk.

    Optionally downscales to max_edge while preserving aspect ratio.
    RGB and RGBA inputs are converted to OpenCV's BGR/BGRA order.
    """
    tracer = get_tracer()

    if max_edge and max(img.shape[:2]) > max_edge:
        scale = max_edge / max(img.shape[:2])
        new_size = (max(1, int(img.shape[1] * scale)), max(1, int(img.shape[0] * scale)))
        img = cv2.resize(img, new_size, interpolation=cv2.INTER_AREA)

    if img.ndim == 3 and img.shape[2] == 3:
        img = cv2.cvtColor(img, cv2.COLOR_RGB2BGR)
    elif img.ndim == 3 and img.shape[2] == 4:
        img = cv2.cvtColor(img, cv2.COLOR_RGBA2BGRA)

    ensure_dir(os.path.dirname(path))
    cv2.imwrite(path, img)
    tracer.event(f"Saved image: {path}")


def save_json(data, path, indent=2):
    """
    Save a dictionary or Pydantic model to JSON.
    """
    tracer = get_tracer()

    ensure_dir(os.path.dirname(path))

    if hasattr(data, "model_dump"):
        data = data.model_dump(mode="json")

    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=indent, default=str)

    tracer.event(f"Saved JSON: {path}")


def save_text(text, path):
    """Save plain text (formula listings)."""
    tracer = get_tracer()

    ensure_dir(os.path.dirname(path))
    with open(path, "w", encoding="utf-8") as f:
        f.write(text)

    tracer.event(f"Saved text: {path}")


def draw_overlay(base_img, polylines=None, polyline_color=(0, 255, 0)):
    """
    Draw debug polylines on a copy of an image.

    polylines: list of [(x, y), ...] polylines
    """
    if base_img.ndim == 2:
        overlay = cv2.cvtColor(base_img, cv2.COLOR_GRAY2BGR)
    elif base_img.shape[2] == 4:
        overlay = cv2.cvtColor(base_img, cv2.COLOR_RGBA2BGR)
    else:
        overlay = cv2.cvtColor(base_img.copy(), cv2.COLOR_RGB2BGR)

    for polyline in polylines or []:
        if len(polyline) < 2:
            continue
        pts = np.asarray(polyline, dtype=np.int32)
        cv2.polylines(overlay, [pts], isClosed=False, color=polyline_color, thickness=1)

    return cv2.cvtColor(overlay, cv2.COLOR_BGR2RGB)


class DebugArtifactWriter:
    """
    Helper class to manage debug artifact writing for a single run.

    Handles creation of debug directories and provides convenience methods
    for saving various artifact types.
    """

    def __init__(self, out_dir, run_id, enabled=True, max_edge=1600, max_contours=50):
        self.out_dir = out_dir
        self.run_id = run_id
        self.enabled = enabled
        self.max_edge = max_edge
        self.max_contours = max_contours

    def get_stage_dir(self, stage_name):
        """Get the debug directory for a stage."""
        return get_debug_dir(self.out_dir, self.run_id, stage_name)

    def save_image(self, img, stage_name, filename):
        """Save an image artifact."""
        if not self.enabled:
            return
        path = os.path.join(self.get_stage_dir(stage_name), filename)
        save_image(img, path, max_edge=self.max_edge)

    def save_json(self, data, stage_name, filename):
        """Save a JSON artifact."""
        if not self.enabled:
            return
        path = os.path.join(self.get_stage_dir(stage_name), filename)
        save_json(data, path)

    def save_overlay(self, base_img, stage_name, filename, **kwargs):
        """Draw and save an overlay image."""
        if not self.enabled:
            return
        overlay = draw_overlay(base_img, **kwargs)
        self.save_image(overlay, stage_name, filename)
