"""
Image loading for the outline pipeline.

Images are read with OpenCV and returned as RGBA arrays, the layout the
raster preparation stage expects.
"""

import os

import cv2
import numpy as np

from mathoutline.tracer import get_tracer, trace


SUPPORTED_EXTENSIONS = [".png", ".jpg", ".jpeg", ".tiff", ".tif", ".bmp", ".webp"]


@trace(label="load_image")
def load_image(path):
    """
    Load an image from disk.

    Returns a tuple of (image, metadata) where:
    - image: RGBA numpy array (H, W, 4), alpha 255 when the file has none
    - metadata: dict with width, height, channels, source_path

    Raises FileNotFoundError if path does not exist.
    Raises ValueError if image cannot be loaded.
    """
    tracer = get_tracer()

    if not os.path.exists(path):
        raise FileNotFoundError(f"Image not found: {path}")

    img = cv2.imread(path, cv2.IMREAD_UNCHANGED)
    if img is None:
        raise ValueError(f"Failed to load image: {path}")

    channels = 1 if img.ndim == 2 else img.shape[2]

    # 16-bit PNG/TIFF inputs keep their high byte
    if img.dtype == np.uint16:
        img = (img >> 8).astype(np.uint8)
    elif img.dtype != np.uint8:
        raise ValueError(f"Unsupported pixel type {img.dtype}: {path}")

    if channels == 1:
        rgba = cv2.cvtColor(img, cv2.COLOR_GRAY2RGBA)
    elif channels == 3:
        rgba = cv2.cvtColor(img, cv2.COLOR_BGR2RGBA)
    else:
        rgba = cv2.cvtColor(img, cv2.COLOR_BGRA2RGBA)

    height, width = rgba.shape[:2]
    tracer.event(f"Loaded image: {width}x{height}, channels={channels}")

    metadata = {
        "width": width,
        "height": height,
        "channels": channels,
        "source_path": os.path.abspath(path),
    }

    return rgba, metadata


def validate_image_input(path):
    """
    Check that path exists and looks like a readable image.

    Returns a list of error messages (empty if valid).
    """
    if not os.path.exists(path):
        return [f"File not found: {path}"]

    ext = os.path.splitext(path)[1].lower()
    if ext not in SUPPORTED_EXTENSIONS:
        return [f"Unsupported image format: {path}"]

    return []
