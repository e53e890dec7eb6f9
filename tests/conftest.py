"""Pytest fixtures for mathoutline tests."""

import os
import tempfile

import cv2
import numpy as np
import pytest


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test outputs."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


@pytest.fixture
def torso_rectangle_image():
    """A white filled 20x50 rectangle on a black 40x80 RGBA canvas."""
    img = np.zeros((80, 40, 4), dtype=np.uint8)
    img[..., 3] = 255
    cv2.rectangle(img, (10, 15), (29, 64), (255, 255, 255, 255), -1)
    return img


@pytest.fixture
def torso_outline_image():
    """A one-pixel white 20x50 rectangle outline on a black 40x80 RGBA canvas."""
    img = np.zeros((80, 40, 4), dtype=np.uint8)
    img[..., 3] = 255
    cv2.rectangle(img, (10, 15), (29, 64), (255, 255, 255, 255), 1)
    return img


@pytest.fixture
def skin_disc_image():
    """A skin-coloured disc on a blue background."""
    img = np.zeros((60, 60, 4), dtype=np.uint8)
    img[..., 2] = 200
    img[..., 3] = 255
    cv2.circle(img, (30, 30), 15, (220, 180, 140, 255), -1)
    return img


@pytest.fixture
def blank_image():
    """A uniform grey RGBA image."""
    img = np.full((50, 50, 4), 128, dtype=np.uint8)
    img[..., 3] = 255
    return img


@pytest.fixture
def ring_edges():
    """A one-pixel square ring of strong edges from (5, 5) to (20, 20)."""
    edges = np.zeros((30, 30), dtype=np.uint8)
    cv2.rectangle(edges, (5, 5), (20, 20), 255, 1)
    return edges


@pytest.fixture
def default_config():
    """Create default pipeline configuration."""
    from mathoutline.config import PipelineConfig
    return PipelineConfig()


@pytest.fixture
def synthetic_input_file(temp_dir, torso_rectangle_image):
    """Write the rectangle image to a PNG for file-based tests."""
    path = os.path.join(temp_dir, "torso.png")
    cv2.imwrite(path, cv2.cvtColor(torso_rectangle_image, cv2.COLOR_RGBA2BGRA))
    return path
