"""
Raster preparation: decode RGBA pixel data into the auxiliary rasters used by
later stages (luminance and skin mask).

Rasters are numpy arrays indexed [y, x], origin top-left. Every function
returns a new array and leaves its input untouched.
"""

import math
from dataclasses import dataclass

import numpy as np

from mathoutline.tracer import get_tracer, trace


LUMA_WEIGHTS = (0.299, 0.587, 0.114)


class RasterShapeError(ValueError):
    """Raised when pixel data does not match its declared dimensions."""


@dataclass(frozen=True)
class PreparedRaster:
    """RGBA source plus the rasters derived from it."""
    rgba: np.ndarray
    gray: np.ndarray
    skin_mask: np.ndarray

    @property
    def width(self):
        return self.rgba.shape[1]

    @property
    def height(self):
        return self.rgba.shape[0]


def rgba_from_buffer(buffer, width, height):
    """
    Wrap a flat RGBA byte buffer as an (height, width, 4) uint8 array.

    Raises RasterShapeError if the buffer length is not width * height * 4.
    """
    if width < 0 or height < 0:
        raise RasterShapeError(f"Negative raster dimensions: {width}x{height}")

    if isinstance(buffer, np.ndarray):
        data = buffer.astype(np.uint8).ravel()
    else:
        data = np.frombuffer(bytes(buffer), dtype=np.uint8)

    expected = width * height * 4
    if data.size != expected:
        raise RasterShapeError(
            f"Buffer holds {data.size} bytes but {width}x{height} RGBA needs {expected}"
        )

    return data.reshape(height, width, 4).copy()


def ensure_rgba(image):
    """
    Normalize an image array to (height, width, 4) uint8.

    Accepts grayscale (H, W), RGB (H, W, 3) or RGBA (H, W, 4) input.
    """
    image = np.asarray(image)

    if image.ndim == 2:
        gray = image.astype(np.uint8)
        alpha = np.full_like(gray, 255)
        return np.dstack([gray, gray, gray, alpha])

    if image.ndim != 3 or image.shape[2] not in (3, 4):
        raise RasterShapeError(f"Expected an (H, W), (H, W, 3) or (H, W, 4) image, got {image.shape}")

    if image.shape[2] == 3:
        alpha = np.full(image.shape[:2], 255, dtype=np.uint8)
        return np.dstack([image.astype(np.uint8), alpha])

    return image.astype(np.uint8, copy=True)


def to_grayscale(rgba):
    """Luminance 0.299R + 0.587G + 0.114B, rounded and clamped to [0, 255]."""
    rgb = rgba[..., :3].astype(np.float32)
    gray = rgb[..., 0] * LUMA_WEIGHTS[0] + rgb[..., 1] * LUMA_WEIGHTS[1] + rgb[..., 2] * LUMA_WEIGHTS[2]
    return np.clip(np.rint(gray), 0, 255).astype(np.uint8)


def is_skin_tone(r, g, b):
    """
    Classify one RGB colour as skin.

    True if any of the RGB, YCrCb or HSV rules fires.
    """
    max_c = max(r, g, b)
    min_c = min(r, g, b)
    delta = max_c - min_c

    rgb_rule = (r > 95 and g > 40 and b > 20 and delta > 15
                and abs(r - g) > 15 and r > g and r > b)

    y = LUMA_WEIGHTS[0] * r + LUMA_WEIGHTS[1] * g + LUMA_WEIGHTS[2] * b
    cr = 0.713 * (r - y) + 128
    cb = 0.564 * (b - y) + 128
    ycrcb_rule = 133 <= cr <= 173 and 77 <= cb <= 127

    h = 0.0
    if delta != 0:
        if max_c == r:
            # fmod keeps the sign of the dividend; negative hues wrap below
            h = math.fmod((g - b) / delta, 6)
        elif max_c == g:
            h = (b - r) / delta + 2
        else:
            h = (r - g) / delta + 4
        h *= 60
        if h < 0:
            h += 360
    s = 0.0 if max_c == 0 else delta / max_c
    v = max_c / 255.0
    hsv_rule = 0 <= h <= 50 and 0.1 <= s <= 0.8 and v >= 0.2

    return bool(rgb_rule or ycrcb_rule or hsv_rule)


def skin_mask(rgba):
    """
    Vectorized skin classification over a whole raster.

    Returns uint8 (H, W) with 255 for skin pixels and 0 otherwise.
    """
    rgb = rgba[..., :3].astype(np.float64)
    r, g, b = rgb[..., 0], rgb[..., 1], rgb[..., 2]

    max_c = rgb.max(axis=2)
    min_c = rgb.min(axis=2)
    delta = max_c - min_c

    rgb_rule = ((r > 95) & (g > 40) & (b > 20) & (delta > 15)
                & (np.abs(r - g) > 15) & (r > g) & (r > b))

    y = LUMA_WEIGHTS[0] * r + LUMA_WEIGHTS[1] * g + LUMA_WEIGHTS[2] * b
    cr = 0.713 * (r - y) + 128
    cb = 0.564 * (b - y) + 128
    ycrcb_rule = (cr >= 133) & (cr <= 173) & (cb >= 77) & (cb <= 127)

    safe_delta = np.where(delta == 0, 1.0, delta)
    hue = np.where(
        max_c == r,
        np.fmod((g - b) / safe_delta, 6),
        np.where(max_c == g, (b - r) / safe_delta + 2, (r - g) / safe_delta + 4),
    )
    hue = np.where(delta == 0, 0.0, hue * 60)
    hue = np.where(hue < 0, hue + 360, hue)
    sat = np.where(max_c == 0, 0.0, delta / np.where(max_c == 0, 1.0, max_c))
    val = max_c / 255.0
    hsv_rule = (hue >= 0) & (hue <= 50) & (sat >= 0.1) & (sat <= 0.8) & (val >= 0.2)

    mask = rgb_rule | ycrcb_rule | hsv_rule
    return np.where(mask, 255, 0).astype(np.uint8)


@trace(label="prepare_raster")
def prepare_raster(image):
    """Build the luminance and skin rasters for an RGBA (or RGB/gray) image."""
    tracer = get_tracer()

    rgba = ensure_rgba(image)
    gray = to_grayscale(rgba)
    skin = skin_mask(rgba)

    if rgba.size:
        tracer.event(f"Prepared {rgba.shape[1]}x{rgba.shape[0]} raster, "
                     f"skin_ratio={np.count_nonzero(skin) / skin.size:.3f}")

    return PreparedRaster(rgba=rgba, gray=gray, skin_mask=skin)
