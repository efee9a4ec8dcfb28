"""Palettes: the built-in halftone table and explicit k-means palettes."""
import logging
from typing import Sequence as SequenceType, Union

import numpy as np
from sklearn.cluster import KMeans

from tracevec.types import ConfigurationError, PixelBuffer

logger = logging.getLogger(__name__)


def _halftone_256() -> np.ndarray:
    # 8 red x 8 green x 4 blue levels, opaque
    reds = np.linspace(0, 255, 8).round().astype(np.uint8)
    greens = np.linspace(0, 255, 8).round().astype(np.uint8)
    blues = np.linspace(0, 255, 4).round().astype(np.uint8)
    r, g, b = np.meshgrid(reds, greens, blues, indexing='ij')
    colors = np.stack(
        [r.ravel(), g.ravel(), b.ravel(), np.full(r.size, 255, dtype=np.uint8)],
        axis=1
    )
    colors.flags.writeable = False
    return colors


HALFTONE_256 = _halftone_256()


def as_palette(colors: Union[np.ndarray, SequenceType]) -> np.ndarray:
    """
    Normalise a palette to a (K, 4) uint8 RGBA array.

    Args:
        colors: Sequence of RGB or RGBA tuples, or a (K, 3) / (K, 4) array

    Returns:
        Read-only (K, 4) uint8 array, opaque alpha added for RGB input

    Raises:
        ConfigurationError: If the palette is empty or malformed
    """
    if colors is None:
        raise ConfigurationError("Palette is required")

    try:
        arr = np.asarray(colors, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Palette is not a sequence of colors: {e}") from e

    if arr.size == 0:
        raise ConfigurationError("Palette must contain at least one color")
    if arr.ndim != 2 or arr.shape[1] not in (3, 4):
        raise ConfigurationError(f"Palette must be Kx3 or Kx4, got shape {arr.shape}")
    if np.any(arr < 0) or np.any(arr > 255):
        raise ConfigurationError("Palette channels must be in 0-255")

    if arr.shape[1] == 3:
        arr = np.hstack([arr, np.full((len(arr), 1), 255.0)])

    palette = arr.astype(np.uint8)
    palette.flags.writeable = False
    return palette


def kmeans_palette(pixels: PixelBuffer, n_colors: int, random_state: int = 42) -> np.ndarray:
    """
    Derive an RGBA palette from the image with K-means clustering.

    Only used when the caller asks for it explicitly; the pipeline itself
    always takes the palette it is given.

    Args:
        pixels: Decoded image
        n_colors: Number of palette entries (must be >= 1)
        random_state: Random seed for reproducibility

    Returns:
        (K, 4) uint8 palette, K <= n_colors (fewer for images with
        fewer distinct colors)
    """
    if n_colors < 1:
        raise ConfigurationError(f"n_colors must be >= 1, got {n_colors}")

    flat = pixels.data.reshape(-1, 4)
    distinct = np.unique(flat, axis=0)
    if len(distinct) <= n_colors:
        logger.info(f"Image has {len(distinct)} distinct colors, using them as palette")
        return as_palette(distinct)

    kmeans = KMeans(n_clusters=n_colors, random_state=random_state, n_init=10)
    kmeans.fit(np.float32(flat))
    centers = np.clip(np.round(kmeans.cluster_centers_), 0, 255)
    logger.info(f"K-means palette with {n_colors} colors")
    return as_palette(centers)
