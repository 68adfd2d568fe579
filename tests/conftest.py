"""
Pytest configuration and shared fixtures for Pixel Forge tests.

This module provides shared test fixtures and configuration
used across multiple test modules.
"""

import numpy as np
import pytest
from PIL import Image

from PF_Libs.ImageEditingLib.image_models import PixelBuffer


@pytest.fixture
def sample_rgba_colors():
    """
    Provide a list of sample RGBA color tuples for testing.

    Returns:
        List of (R, G, B, A) tuples with common test colors
    """
    return [
        (255, 0, 0, 255),    # Red
        (0, 255, 0, 255),    # Green
        (0, 0, 255, 255),    # Blue
        (255, 255, 255, 255),  # White
        (0, 0, 0, 255),      # Black
        (128, 128, 128, 255),  # Gray
    ]


@pytest.fixture
def make_uniform():
    """Factory for single-color buffers: make_uniform(width, height, color)."""
    def _make(width, height, color=(100, 150, 200, 255)):
        return PixelBuffer.new(width, height, fill=color)
    return _make


@pytest.fixture
def varied_buffer():
    """
    A 6x5 buffer where every pixel and every alpha value is different.

    Returns:
        PixelBuffer built from a seeded random array
    """
    rng = np.random.default_rng(1234)
    return PixelBuffer(rng.integers(0, 256, size=(5, 6, 4), dtype=np.uint8))


@pytest.fixture
def png_file(tmp_path):
    """A 4x3 RGBA PNG on disk with a red top-left pixel."""
    path = tmp_path / "sample.png"
    image = Image.new("RGBA", (4, 3), (10, 20, 30, 200))
    image.putpixel((0, 0), (255, 0, 0, 255))
    image.save(path)
    return path
