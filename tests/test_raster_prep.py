"""Tests for raster preparation."""

import numpy as np
import pytest


class TestBuffer:
    """Tests for flat RGBA buffer handling."""

    def test_buffer_reshaped(self):
        """Test that a matching buffer becomes an (H, W, 4) array."""
        from mathoutline.preprocess.raster_prep import rgba_from_buffer

        buffer = bytes(range(24))
        rgba = rgba_from_buffer(buffer, width=3, height=2)

        assert rgba.shape == (2, 3, 4)
        assert rgba[1, 2, 3] == 23

    def test_buffer_length_mismatch(self):
        """Test that a short buffer is rejected."""
        from mathoutline.preprocess.raster_prep import RasterShapeError, rgba_from_buffer

        with pytest.raises(RasterShapeError):
            rgba_from_buffer(bytes(23), width=3, height=2)

    def test_shape_error_is_value_error(self):
        """Test that callers catching ValueError also catch shape errors."""
        from mathoutline.preprocess.raster_prep import RasterShapeError

        assert issubclass(RasterShapeError, ValueError)


class TestEnsureRgba:
    """Tests for input normalization."""

    def test_grayscale_expanded(self):
        """Test that a 2D image is replicated into RGB with opaque alpha."""
        from mathoutline.preprocess.raster_prep import ensure_rgba

        gray = np.full((4, 5), 77, dtype=np.uint8)
        rgba = ensure_rgba(gray)

        assert rgba.shape == (4, 5, 4)
        assert np.all(rgba[..., :3] == 77)
        assert np.all(rgba[..., 3] == 255)

    def test_rgb_gets_alpha(self):
        """Test that RGB input gains an alpha channel."""
        from mathoutline.preprocess.raster_prep import ensure_rgba

        rgba = ensure_rgba(np.zeros((2, 2, 3), dtype=np.uint8))
        assert rgba.shape == (2, 2, 4)

    def test_bad_shape_rejected(self):
        """Test that two-channel images are rejected."""
        from mathoutline.preprocess.raster_prep import RasterShapeError, ensure_rgba

        with pytest.raises(RasterShapeError):
            ensure_rgba(np.zeros((2, 2, 2), dtype=np.uint8))

    def test_input_not_modified(self):
        """Test that the caller's array is copied."""
        from mathoutline.preprocess.raster_prep import ensure_rgba

        img = np.zeros((2, 2, 4), dtype=np.uint8)
        rgba = ensure_rgba(img)
        rgba[0, 0, 0] = 9

        assert img[0, 0, 0] == 0


class TestGrayscale:
    """Tests for luminance conversion."""

    def test_pure_red(self):
        """Test luminance weights on a pure red pixel."""
        from mathoutline.preprocess.raster_prep import to_grayscale

        rgba = np.array([[[255, 0, 0, 255]]], dtype=np.uint8)
        assert to_grayscale(rgba)[0, 0] == 76

    def test_white_and_black(self):
        """Test the extremes map to 255 and 0."""
        from mathoutline.preprocess.raster_prep import to_grayscale

        rgba = np.array([[[255, 255, 255, 255], [0, 0, 0, 255]]], dtype=np.uint8)
        gray = to_grayscale(rgba)

        assert gray[0, 0] == 255
        assert gray[0, 1] == 0


class TestSkin:
    """Tests for skin classification."""

    def test_skin_tone_detected(self):
        """Test that a typical skin colour is classified as skin."""
        from mathoutline.preprocess.raster_prep import is_skin_tone

        assert is_skin_tone(220, 180, 140)

    def test_blue_not_skin(self):
        """Test that a saturated blue is not skin."""
        from mathoutline.preprocess.raster_prep import is_skin_tone

        assert not is_skin_tone(10, 10, 200)

    def test_vectorized_matches_scalar(self):
        """Test that the raster mask agrees with the per-pixel rule."""
        from mathoutline.preprocess.raster_prep import is_skin_tone, skin_mask

        rng = np.random.default_rng(7)
        colours = rng.integers(0, 256, size=(20, 20, 3), dtype=np.uint8)
        rgba = np.dstack([colours, np.full((20, 20), 255, dtype=np.uint8)])

        mask = skin_mask(rgba)
        for y in range(20):
            for x in range(20):
                r, g, b = (int(v) for v in colours[y, x])
                assert (mask[y, x] == 255) == is_skin_tone(r, g, b)

    def test_prepare_raster(self, skin_disc_image):
        """Test that prepare_raster builds gray and skin rasters of the same size."""
        from mathoutline.preprocess.raster_prep import prepare_raster

        prepared = prepare_raster(skin_disc_image)

        assert prepared.width == 60
        assert prepared.height == 60
        assert prepared.gray.shape == (60, 60)
        assert prepared.skin_mask[30, 30] == 255
        assert prepared.skin_mask[2, 2] == 0
