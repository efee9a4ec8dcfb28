"""Shared fixtures: small synthetic images and palettes."""
import numpy as np
import pytest

from tracevec.palette import as_palette
from tracevec.types import PixelBuffer


@pytest.fixture
def two_color_palette():
    """Black (index 0) and white (index 1)."""
    return as_palette([(0, 0, 0), (255, 255, 255)])


@pytest.fixture
def palette():
    """Red (index 0, never drawn in tests), black (1) and white (2)."""
    return as_palette([(255, 0, 0), (0, 0, 0), (255, 255, 255)])


@pytest.fixture
def make_pixels():
    """Build a PixelBuffer from a 2D array of palette indices."""
    def _make(indices, palette):
        indices = np.asarray(indices)
        return PixelBuffer.from_array(np.asarray(palette)[indices])
    return _make


@pytest.fixture
def square_image(palette, make_pixels):
    """4x4 white image with a 2x2 black square in the middle."""
    indices = np.full((4, 4), 2)
    indices[1:3, 1:3] = 1
    return make_pixels(indices, palette)


@pytest.fixture
def blob_image(palette, make_pixels):
    """24x24 image with a black disc and a white square on white/black stripes."""
    yy, xx = np.mgrid[0:24, 0:24]
    indices = np.where((xx // 6) % 2 == 0, 2, 1)
    indices[(yy - 12) ** 2 + (xx - 9) ** 2 <= 30] = 1
    indices[15:21, 14:22] = 2
    return make_pixels(indices, palette)
