"""Main pipeline orchestrator for tracevec."""
import logging
import time
from concurrent.futures import ProcessPoolExecutor
from pathlib import Path
from typing import List, Optional, Tuple

import numpy as np

from tracevec.blur import selective_blur
from tracevec.boundary_scan import scan_paths
from tracevec.curve_fitting import trace_path
from tracevec.interpolation import interpolate
from tracevec.layering import build_layer
from tracevec.palette import HALFTONE_256, as_palette
from tracevec.quantization import quantize
from tracevec.raster_ingest import ImageSource, decode
from tracevec.svg_export import save_svg, to_svg
from tracevec.types import (
    GeometryAnomaly,
    IndexedImage,
    Options,
    PixelBuffer,
    Segment,
    TracingOptions,
)

logger = logging.getLogger(__name__)


def trace_layer(
    grid: np.ndarray,
    index: int,
    options: TracingOptions
) -> Tuple[List[List[Segment]], List[np.ndarray]]:
    """
    Trace every path of one palette index.

    Builds the edge node layer, scans it into boundary polygons, then
    interpolates and fits each polygon. A path that turns out degenerate
    is dropped; the rest of the layer is unaffected.

    Args:
        grid: Padded index grid
        index: Palette index
        options: Tracing options

    Returns:
        Tuple of (fitted paths, boundary polygons they came from)
    """
    layer = build_layer(grid, index)
    polygons = scan_paths(layer, options.min_path_size)

    fitted = []
    kept = []
    for n, polygon in enumerate(polygons):
        try:
            segments = trace_path(interpolate(polygon), options)
        except GeometryAnomaly as e:
            logger.debug(f"Layer {index} path {n}: skipped, {e}")
            continue
        fitted.append(segments)
        kept.append(polygon)

    return fitted, kept


def _trace_layer_task(args) -> Tuple[List[List[Segment]], List[np.ndarray]]:
    grid, index, options = args
    return trace_layer(grid, index, options)


class TracePipeline:
    """Raster to SVG tracing pipeline."""

    def __init__(self, options: Optional[Options] = None, palette=None):
        """
        Initialize pipeline with configuration.

        Args:
            options: Pipeline options. Uses defaults if None.
            palette: RGB/RGBA colors. Uses HALFTONE_256 if None.

        Raises:
            ConfigurationError: If options or palette are invalid
        """
        self.options = options or Options()
        self.options.validate()
        self.palette = HALFTONE_256 if palette is None else as_palette(palette)
        self.boundaries: List[List[np.ndarray]] = []
        self.timings = {}
        self.pixels: Optional[PixelBuffer] = None
        self.indexed: Optional[IndexedImage] = None

    def trace(self, pixels: PixelBuffer) -> IndexedImage:
        """
        Trace a pixel buffer into fitted segments per layer.

        Args:
            pixels: Decoded image

        Returns:
            IndexedImage with layers[layer][path] segment lists
        """
        self.options.validate()
        self.timings = {}

        start = time.time()
        blur = self.options.blur
        if blur.radius > 0:
            pixels = selective_blur(pixels, blur.radius, blur.delta)
        self.timings['blur'] = time.time() - start

        # Step 1: Color quantization
        start = time.time()
        grid = quantize(pixels, self.palette)
        self.timings['quantize'] = time.time() - start

        # Steps 2-5: layering, path scan, interpolation and fitting per layer
        start = time.time()
        # Absent colors have no boundary nodes
        present = set(np.unique(grid[1:-1, 1:-1]).tolist())
        indices = [k for k in range(len(self.palette)) if k in present]
        results = self._trace_layers(grid, indices)
        self.timings['trace'] = time.time() - start

        layers = [[] for _ in range(len(self.palette))]
        self.boundaries = [[] for _ in range(len(self.palette))]
        for index, (fitted, polygons) in zip(indices, results):
            layers[index] = fitted
            self.boundaries[index] = polygons

        indexed = IndexedImage(
            image_width=pixels.width,
            image_height=pixels.height,
            palette=self.palette,
            array=grid,
            layers=layers
        )

        logger.info(
            f"Traced {pixels.width}x{pixels.height} image: {len(indices)} layers, "
            f"{indexed.path_count} paths in {sum(self.timings.values()):.2f}s"
        )

        return indexed

    def _trace_layers(self, grid: np.ndarray, indices: List[int]):
        tracing = self.options.tracing
        workers = min(self.options.workers, len(indices))

        if workers > 1:
            logger.info(f"Tracing {len(indices)} layers using {workers} workers...")
            tasks = [(grid, index, tracing) for index in indices]
            with ProcessPoolExecutor(max_workers=workers) as executor:
                # map keeps palette order, so output matches the serial run
                return list(executor.map(_trace_layer_task, tasks))

        return [trace_layer(grid, index, tracing) for index in indices]

    def render(self, indexed: IndexedImage) -> str:
        """Serialize a traced image to SVG."""
        return to_svg(indexed, self.options.rendering)

    def process(self, image_path: ImageSource, output_path: Optional[str] = None) -> str:
        """
        Decode, trace and render an image.

        Args:
            image_path: Path to input image (or bytes / PIL image)
            output_path: Optional path to save SVG output

        Returns:
            SVG string

        Raises:
            DecodeError: If the image cannot be read
            ConfigurationError: If options or palette are invalid
        """
        pixels = decode(image_path)
        self.pixels = pixels
        self.indexed = self.trace(pixels)
        svg = self.render(self.indexed)

        if output_path:
            Path(output_path).parent.mkdir(parents=True, exist_ok=True)
            save_svg(svg, str(output_path))
            logger.info(f"Saved SVG to {output_path} ({len(svg):,} bytes)")

        return svg


def trace_to_model(
    pixels: PixelBuffer,
    options: Optional[Options] = None,
    palette=None
) -> IndexedImage:
    """
    Run the pipeline up to curve fitting.

    Args:
        pixels: Decoded image
        options: Pipeline options, defaults if None
        palette: RGB/RGBA colors, HALFTONE_256 if None

    Returns:
        IndexedImage with fitted segments
    """
    return TracePipeline(options, palette).trace(pixels)


def trace_to_vector(
    pixels: PixelBuffer,
    options: Optional[Options] = None,
    palette=None
) -> str:
    """
    Run the full pipeline and return the SVG document.

    Example:
        >>> svg = trace_to_vector(PixelBuffer.from_array(image), palette=[(0, 0, 0), (255, 255, 255)])
    """
    pipeline = TracePipeline(options, palette)
    return pipeline.render(pipeline.trace(pixels))


def image_to_svg(
    image_path: ImageSource,
    output_path: Optional[str] = None,
    options: Optional[Options] = None,
    palette=None
) -> str:
    """
    Trace an image file to SVG.

    Convenience function for one-off processing.

    Args:
        image_path: Path to input image (JPG/PNG/...)
        output_path: Optional path to save SVG output
        options: Optional pipeline options
        palette: Optional palette, HALFTONE_256 if None

    Returns:
        SVG string

    Example:
        >>> svg = image_to_svg("input.png", "output.svg")
    """
    return TracePipeline(options, palette).process(image_path, output_path)
