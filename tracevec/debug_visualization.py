"""Debug visualization for tracing pipeline stages."""
import logging
from pathlib import Path
from typing import List

import cv2
import numpy as np
from PIL import Image
import matplotlib
matplotlib.use('Agg')  # Non-interactive backend
from matplotlib import pyplot as plt
from skimage.segmentation import find_boundaries

from tracevec.quantization import palette_image
from tracevec.types import IndexedImage, LineSegment, PixelBuffer

logger = logging.getLogger(__name__)


def visualize_quantization(
    original: np.ndarray,
    grid: np.ndarray,
    palette: np.ndarray,
    output_path: Path
):
    """
    Stage 1: Original next to its palette-quantized version.
    """
    fig, axes = plt.subplots(1, 2, figsize=(12, 6))

    axes[0].imshow(original)
    axes[0].set_title('Original')
    axes[0].axis('off')

    quantized = palette_image(grid, palette)
    used = len(np.unique(grid[1:-1, 1:-1]))
    axes[1].imshow(quantized)
    axes[1].set_title(f'Quantized ({used} of {len(palette)} colors)')
    axes[1].axis('off')

    plt.tight_layout()
    plt.savefig(output_path, dpi=100, bbox_inches='tight')
    plt.close()


def visualize_layers(grid: np.ndarray, palette: np.ndarray, output_path: Path):
    """
    Stage 2: Quantized image with color layer boundaries in red.
    """
    interior = grid[1:-1, 1:-1]
    boundaries = find_boundaries(interior, mode='inner')

    viz = palette_image(grid, palette)[..., :3].copy()
    viz[boundaries] = [255, 0, 0]

    Image.fromarray(viz).save(output_path)


def visualize_paths(
    boundaries: List[List[np.ndarray]],
    palette: np.ndarray,
    width: int,
    height: int,
    output_path: Path,
    zoom: int = 4
):
    """
    Stage 3: Scanned boundary polygons drawn in their layer colors.
    """
    canvas = np.full((height * zoom + 1, width * zoom + 1, 3), 255, dtype=np.uint8)

    for layer_index, polygons in enumerate(boundaries):
        color = tuple(int(c) for c in palette[layer_index][:3])
        for polygon in polygons:
            pts = (polygon * zoom).reshape(-1, 1, 2).astype(np.int32)
            cv2.polylines(canvas, [pts], True, color, 1)

    Image.fromarray(canvas).save(output_path)


def visualize_segments(indexed: IndexedImage, output_path: Path):
    """
    Stage 4: Fitted segments; lines in black, quadratics in blue with
    their control points.
    """
    fig, ax = plt.subplots(figsize=(10, 10))

    for layer in indexed.layers:
        for segments in layer:
            for segment in segments:
                if isinstance(segment, LineSegment):
                    ax.plot(
                        [segment.p0.x, segment.p1.x], [segment.p0.y, segment.p1.y],
                        color='black', linewidth=0.8
                    )
                else:
                    t = np.linspace(0, 1, 16)[:, None]
                    p0 = np.array([segment.p0.x, segment.p0.y])
                    p1 = np.array([segment.p1.x, segment.p1.y])
                    p2 = np.array([segment.p2.x, segment.p2.y])
                    curve = (1 - t) ** 2 * p0 + 2 * (1 - t) * t * p1 + t ** 2 * p2
                    ax.plot(curve[:, 0], curve[:, 1], color='tab:blue', linewidth=0.8)
                    ax.plot(p1[0], p1[1], 'o', color='cyan', markersize=2)

    ax.set_xlim(0, indexed.image_width)
    ax.set_ylim(indexed.image_height, 0)  # Invert Y for image coords
    ax.set_aspect('equal')
    ax.set_title(f'Fitted Segments ({indexed.path_count} paths)')

    plt.tight_layout()
    plt.savefig(output_path, dpi=100, bbox_inches='tight')
    plt.close()


def save_stages(
    pixels: PixelBuffer,
    indexed: IndexedImage,
    boundaries: List[List[np.ndarray]],
    output_dir: Path
) -> List[Path]:
    """
    Write all stage images to a directory.

    Returns:
        Paths of the written files
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    stages = [
        ('1_quantization.png',
         lambda p: visualize_quantization(pixels.data, indexed.array, indexed.palette, p)),
        ('2_layers.png',
         lambda p: visualize_layers(indexed.array, indexed.palette, p)),
        ('3_paths.png',
         lambda p: visualize_paths(boundaries, indexed.palette, pixels.width, pixels.height, p)),
        ('4_segments.png',
         lambda p: visualize_segments(indexed, p)),
    ]

    written = []
    for filename, render in stages:
        path = output_dir / filename
        try:
            render(path)
            written.append(path)
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to save stage {filename}: {e}")

    return written
