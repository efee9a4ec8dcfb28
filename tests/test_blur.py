"""Tests for the selective gaussian blur."""
import numpy as np
import pytest

from tracevec.blur import GAUSSIAN_KERNELS, selective_blur
from tracevec.types import PixelBuffer


def _noisy(seed=0, size=12):
    rng = np.random.default_rng(seed)
    data = np.full((size, size, 3), 120, dtype=np.int64)
    data += rng.integers(-6, 7, size=data.shape)
    return PixelBuffer.from_array(data)


class TestSelectiveBlur:
    """Test selective_blur()."""

    @pytest.mark.parametrize("radius", [0, -2])
    def test_radius_below_one_is_identity(self, radius):
        """Blurring is off for radius < 1; the input comes back untouched."""
        pixels = _noisy()
        assert selective_blur(pixels, radius, 20) is pixels

    def test_kernels_are_normalised(self):
        for radius, kernel in enumerate(GAUSSIAN_KERNELS, start=1):
            assert len(kernel) == 2 * radius + 1
            assert kernel.sum() == pytest.approx(1.0, abs=1e-3)

    def test_uniform_image_unchanged(self):
        """Edge samples are renormalised, so a flat image stays flat."""
        data = np.zeros((7, 9, 4), dtype=np.uint8)
        data[...] = [90, 160, 33, 255]
        pixels = PixelBuffer(width=9, height=7, data=data)

        for radius in range(1, 6):
            result = selective_blur(pixels, radius, 1024)
            np.testing.assert_array_equal(result.data, data)

    def test_flat_areas_keep_every_level(self):
        """Renormalised sums land a hair under the level; flooring must not drop it.

        delta is maximal so no pixel is restored from the original.
        """
        for v in range(64):
            data = np.zeros((5, 7, 4), dtype=np.uint8)
            data[...] = [v, v + 64, v + 128, v + 192]
            pixels = PixelBuffer(width=7, height=5, data=data)

            for radius in range(1, 6):
                result = selective_blur(pixels, radius, 1024)
                np.testing.assert_array_equal(
                    result.data, data, err_msg=f"level {v} radius {radius}"
                )

    def test_smooths_small_noise(self):
        pixels = _noisy()
        result = selective_blur(pixels, 2, 1024)

        assert result.data.dtype == np.uint8
        assert result.data.shape == pixels.data.shape
        assert result.data[..., :3].astype(float).std() < pixels.data[..., :3].astype(float).std()

    def test_zero_delta_restores_every_change(self):
        pixels = _noisy(seed=3)
        result = selective_blur(pixels, 3, 0)

        np.testing.assert_array_equal(result.data, pixels.data)

    def test_hard_edge_preserved(self):
        """Pixels next to a strong edge change too much and are restored."""
        data = np.zeros((6, 8, 3), dtype=np.uint8)
        data[:, 4:] = 255
        pixels = PixelBuffer.from_array(data)

        result = selective_blur(pixels, 1, 20)

        np.testing.assert_array_equal(result.data, pixels.data)

    def test_radius_clamped(self):
        pixels = _noisy(seed=5)
        np.testing.assert_array_equal(
            selective_blur(pixels, 9, 1024).data,
            selective_blur(pixels, 5, 1024).data
        )

    def test_input_not_modified(self):
        pixels = _noisy(seed=7)
        before = pixels.data.copy()

        selective_blur(pixels, 2, 10)

        np.testing.assert_array_equal(pixels.data, before)
