"""Nearest-color quantization onto a fixed palette."""
import logging

import numpy as np

from tracevec.types import ConfigurationError, PixelBuffer

logger = logging.getLogger(__name__)

# Distance matrix entries per chunk (pixels * palette size)
_CHUNK_PIXELS = 1 << 18


def quantize(pixels: PixelBuffer, palette: np.ndarray) -> np.ndarray:
    """
    Map every pixel to the index of its nearest palette color.

    Distance is Euclidean in (R, G, B, A). Ties resolve to the first
    palette entry. The result is padded with a one-cell ring of index 0
    so every interior cell has a full 3x3 neighbourhood.

    Args:
        pixels: Decoded RGBA image
        palette: (K, 4) uint8 palette

    Returns:
        (H+2, W+2) int32 index grid

    Raises:
        ConfigurationError: If the palette is empty
    """
    palette = np.asarray(palette)
    if palette.size == 0 or len(palette) == 0:
        raise ConfigurationError("Cannot quantize with an empty palette")

    h, w = pixels.height, pixels.width
    grid = np.zeros((h + 2, w + 2), dtype=np.int32)
    if h == 0 or w == 0:
        return grid

    colors = palette.astype(np.int64)
    flat = pixels.data.reshape(-1, 4).astype(np.int64)
    indices = np.empty(len(flat), dtype=np.int32)

    chunk = max(1, _CHUNK_PIXELS // len(colors))
    for lo in range(0, len(flat), chunk):
        block = flat[lo:lo + chunk]
        dist = ((block[:, None, :] - colors[None, :, :]) ** 2).sum(axis=2)
        # argmin returns the first minimum, matching palette order
        indices[lo:lo + chunk] = np.argmin(dist, axis=1)

    grid[1:-1, 1:-1] = indices.reshape(h, w)

    logger.debug(f"Quantized {h}x{w} image to {len(np.unique(indices))} of {len(colors)} colors")

    return grid


def palette_image(grid: np.ndarray, palette: np.ndarray) -> np.ndarray:
    """
    Render the interior of an index grid back to RGBA pixels.

    Args:
        grid: Padded index grid
        palette: (K, 4) palette

    Returns:
        (H, W, 4) uint8 image
    """
    return np.asarray(palette)[grid[1:-1, 1:-1]]
