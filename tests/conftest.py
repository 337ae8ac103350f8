"""
Pytest configuration and fixtures for testing.
"""
import numpy as np
import pytest

from tests.utils import encode_pil


@pytest.fixture
def two_tone_image():
    """100x200 RGB photo: left half red, right half blue."""
    pixels = np.zeros((100, 200, 3), dtype=np.uint8)
    pixels[:, :100] = (255, 0, 0)
    pixels[:, 100:] = (0, 0, 255)
    return pixels


@pytest.fixture
def gray_template_png():
    """20x20 PNG template: gray 150 garment block on a white background."""
    pixels = np.full((20, 20, 3), 255, dtype=np.uint8)
    pixels[5:15, 5:15] = (150, 150, 150)
    return encode_pil(pixels)
