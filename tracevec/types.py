"""Core types for the tracing pipeline."""
import numbers
import warnings
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Dict, List, NamedTuple, Optional, Union

import numpy as np


class VectorizationError(Exception):
    """Base exception for vectorization errors."""
    pass


class ConfigurationError(VectorizationError):
    """Invalid palette or options, raised before any pixel work."""
    pass


class DecodeError(VectorizationError):
    """Image could not be read into a pixel buffer."""
    pass


class GeometryAnomaly(VectorizationError):
    """A single path could not be traced or fitted.

    Raised inside the scan/interpolate/fit stages and absorbed by the
    pipeline, which drops the affected path.
    """
    pass


def _require_number(name: str, value: Any):
    # bool is an int subclass but never a meaningful option value
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise ConfigurationError(f"{name} must be a number, got {value!r}")


@dataclass
class PixelBuffer:
    """Decoded RGBA image, top-left origin."""
    width: int
    height: int
    data: np.ndarray  # (H, W, 4) uint8

    def __post_init__(self):
        if self.data.shape != (self.height, self.width, 4):
            raise ValueError(
                f"Pixel data shape {self.data.shape} does not match "
                f"{self.height}x{self.width}x4"
            )

    @classmethod
    def from_array(cls, array: np.ndarray) -> "PixelBuffer":
        """
        Build a buffer from a grey, RGB or RGBA array.

        Args:
            array: (H, W), (H, W, 3) or (H, W, 4) array with values 0-255

        Returns:
            PixelBuffer with an opaque alpha channel added where missing
        """
        array = np.asarray(array)
        if array.ndim == 2:
            array = np.stack([array, array, array], axis=-1)
        if array.ndim != 3 or array.shape[2] not in (3, 4):
            raise ValueError(f"Expected HxW, HxWx3 or HxWx4 array, got {array.shape}")

        array = np.clip(array, 0, 255).astype(np.uint8)
        if array.shape[2] == 3:
            alpha = np.full(array.shape[:2] + (1,), 255, dtype=np.uint8)
            array = np.concatenate([array, alpha], axis=-1)

        h, w = array.shape[:2]
        return cls(width=w, height=h, data=np.ascontiguousarray(array))

    @classmethod
    def from_bytes(cls, width: int, height: int, raw: bytes) -> "PixelBuffer":
        """Build a buffer from packed RGBA bytes (4 per pixel, row-major)."""
        if len(raw) != width * height * 4:
            raise ValueError(
                f"Expected {width * height * 4} bytes for {width}x{height} RGBA, got {len(raw)}"
            )
        data = np.frombuffer(raw, dtype=np.uint8).reshape(height, width, 4).copy()
        return cls(width=width, height=height, data=data)


class PixelGroup(NamedTuple):
    """Palette indices of a 3x3 neighbourhood, mid is the centre cell."""
    top_left: int
    top_mid: int
    top_right: int
    mid_left: int
    mid: int
    mid_right: int
    bottom_left: int
    bottom_mid: int
    bottom_right: int


class InterpolationPoint(NamedTuple):
    """Smoothed path point with its 8-way direction code."""
    x: float
    y: float
    direction: int


@dataclass
class InterpolatedPath:
    """Midpoint path with one direction code per point."""
    points: np.ndarray      # (N, 2) float, x then y
    directions: np.ndarray  # (N,) int, 0-7

    def __len__(self) -> int:
        return len(self.points)

    def __getitem__(self, i: int) -> InterpolationPoint:
        return InterpolationPoint(
            float(self.points[i, 0]), float(self.points[i, 1]), int(self.directions[i])
        )


@dataclass
class Sequence:
    """Run of interpolated points eligible for one curve fit.

    Covers points start..end; end is 0 for the run that wraps back to
    the first point of the path. axis_aligned is informational: it marks
    runs made only of horizontal and vertical steps and does not change
    how the run is fitted.
    """
    start: int
    end: int
    axis_aligned: bool = False


class SegmentKind(Enum):
    """Discriminator of fitted segments."""
    LINE = 1
    QUADRATIC = 2


@dataclass
class Point:
    """2D point with float coordinates."""
    x: float
    y: float


@dataclass
class LineSegment:
    """Straight segment."""
    p0: Point
    p1: Point

    kind = SegmentKind.LINE

    @property
    def start(self) -> Point:
        return self.p0

    @property
    def end(self) -> Point:
        return self.p1


@dataclass
class QuadraticSegment:
    """Quadratic bezier segment."""
    p0: Point
    p1: Point  # Control point
    p2: Point

    kind = SegmentKind.QUADRATIC

    @property
    def start(self) -> Point:
        return self.p0

    @property
    def control(self) -> Point:
        return self.p1

    @property
    def end(self) -> Point:
        return self.p2


Segment = Union[LineSegment, QuadraticSegment]


@dataclass
class IndexedImage:
    """Traced image: palette plus fitted segments per layer and path."""
    image_width: int
    image_height: int
    palette: np.ndarray   # (K, 4) uint8
    array: np.ndarray     # (H+2, W+2) padded index grid
    layers: List[List[List[Segment]]] = field(default_factory=list)

    @property
    def array_width(self) -> int:
        return self.image_width + 2

    @property
    def array_height(self) -> int:
        return self.image_height + 2

    @property
    def path_count(self) -> int:
        return sum(len(layer) for layer in self.layers)


@dataclass
class TracingOptions:
    """Error tolerances and small-path omission for curve fitting."""
    line_error_tolerance: float = 1.0
    curve_error_tolerance: float = 1.0
    min_path_size: float = 8.0

    def __post_init__(self):
        self.validate()

    def validate(self):
        for f in fields(self):
            _require_number(f.name, getattr(self, f.name))
        if self.line_error_tolerance < 0:
            raise ConfigurationError(
                f"line_error_tolerance must be >= 0, got {self.line_error_tolerance}"
            )
        if self.curve_error_tolerance < 0:
            raise ConfigurationError(
                f"curve_error_tolerance must be >= 0, got {self.curve_error_tolerance}"
            )
        if self.min_path_size < 0:
            raise ConfigurationError(f"min_path_size must be >= 0, got {self.min_path_size}")


@dataclass
class BlurOptions:
    """Selective gaussian blur applied before quantization (radius 0 = off)."""
    radius: int = 0
    delta: float = 20.0

    def __post_init__(self):
        self.validate()

    def validate(self):
        _require_number("radius", self.radius)
        _require_number("delta", self.delta)
        if int(self.radius) != self.radius:
            raise ConfigurationError(f"Blur radius must be an integer, got {self.radius}")
        if abs(self.delta) > 1024:
            warnings.warn(f"Blur delta {self.delta} is clamped to 1024")


@dataclass
class RenderingOptions:
    """SVG output knobs."""
    scale: float = 1.0
    linear_control_radius: float = 0.0
    quadratic_control_radius: float = 0.0
    round_coords: Optional[int] = None  # None = full precision
    viewbox: bool = False
    desc: bool = False

    def __post_init__(self):
        self.validate()

    def validate(self):
        _require_number("scale", self.scale)
        _require_number("linear_control_radius", self.linear_control_radius)
        _require_number("quadratic_control_radius", self.quadratic_control_radius)
        if self.round_coords is not None:
            _require_number("round_coords", self.round_coords)
        if self.scale <= 0:
            raise ConfigurationError(f"scale must be > 0, got {self.scale}")
        if self.linear_control_radius < 0 or self.quadratic_control_radius < 0:
            raise ConfigurationError("Control point radii must be >= 0")
        if self.round_coords is not None:
            if int(self.round_coords) != self.round_coords or self.round_coords < 0:
                raise ConfigurationError(
                    f"round_coords must be None or a non-negative integer, got {self.round_coords}"
                )
        if self.scale < 0.01:
            warnings.warn(f"scale {self.scale} collapses the output to almost nothing")


@dataclass
class Options:
    """Complete pipeline configuration."""
    tracing: TracingOptions = field(default_factory=TracingOptions)
    blur: BlurOptions = field(default_factory=BlurOptions)
    rendering: RenderingOptions = field(default_factory=RenderingOptions)

    # Performance
    workers: int = 1  # > 1 traces layers in a process pool

    def __post_init__(self):
        self._check_workers()

    def _check_workers(self):
        if isinstance(self.workers, bool) or not isinstance(self.workers, numbers.Integral):
            raise ConfigurationError(f"workers must be an integer, got {self.workers!r}")
        if self.workers < 1:
            raise ConfigurationError(f"workers must be >= 1, got {self.workers}")

    def validate(self):
        """Re-check every section; the dataclasses stay mutable after construction."""
        self.tracing.validate()
        self.blur.validate()
        self.rendering.validate()
        self._check_workers()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Options":
        """
        Build options from a nested mapping.

        Example:
            >>> Options.from_dict({"tracing": {"min_path_size": 0}, "workers": 2})
        """
        sections = {
            "tracing": TracingOptions,
            "blur": BlurOptions,
            "rendering": RenderingOptions,
        }
        if not isinstance(data, Mapping):
            raise ConfigurationError(f"Options must be a mapping, got {type(data).__name__}")
        kwargs = {}
        for key, value in data.items():
            if key in sections:
                if not isinstance(value, Mapping):
                    raise ConfigurationError(
                        f"Option section {key} must be a mapping, got {type(value).__name__}"
                    )
                known = {f.name for f in fields(sections[key])}
                unknown = set(value) - known
                if unknown:
                    raise ConfigurationError(f"Unknown {key} options: {sorted(unknown)}")
                kwargs[key] = sections[key](**value)
            elif key == "workers":
                kwargs[key] = value
            else:
                raise ConfigurationError(f"Unknown option section: {key}")
        return cls(**kwargs)
