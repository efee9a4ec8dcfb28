"""tracevec: raster to SVG tracing with lines and quadratic curves.

Quantizes an image to a palette, walks the boundaries of every color
layer and fits them with straight and quadratic bezier segments.
"""

__version__ = "0.1.0"

from tracevec.types import (
    BlurOptions,
    ConfigurationError,
    DecodeError,
    GeometryAnomaly,
    IndexedImage,
    LineSegment,
    Options,
    PixelBuffer,
    Point,
    QuadraticSegment,
    RenderingOptions,
    SegmentKind,
    TracingOptions,
    VectorizationError,
)
from tracevec.palette import HALFTONE_256
from tracevec.raster_ingest import decode
from tracevec.pipeline import TracePipeline, image_to_svg, trace_to_model, trace_to_vector

__all__ = [
    "BlurOptions",
    "ConfigurationError",
    "DecodeError",
    "GeometryAnomaly",
    "HALFTONE_256",
    "IndexedImage",
    "LineSegment",
    "Options",
    "PixelBuffer",
    "Point",
    "QuadraticSegment",
    "RenderingOptions",
    "SegmentKind",
    "TracePipeline",
    "TracingOptions",
    "VectorizationError",
    "decode",
    "image_to_svg",
    "trace_to_model",
    "trace_to_vector",
]
