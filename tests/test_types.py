"""Tests for core types and option validation."""
import numpy as np
import pytest

from tracevec.types import (
    BlurOptions,
    ConfigurationError,
    DecodeError,
    GeometryAnomaly,
    IndexedImage,
    InterpolatedPath,
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


class TestPixelBuffer:
    """Test PixelBuffer construction."""

    def test_from_rgb_array_adds_alpha(self):
        """RGB input gets an opaque alpha channel."""
        rgb = np.zeros((3, 5, 3), dtype=np.uint8)
        rgb[..., 0] = 200

        buf = PixelBuffer.from_array(rgb)

        assert (buf.width, buf.height) == (5, 3)
        assert buf.data.shape == (3, 5, 4)
        assert buf.data.dtype == np.uint8
        assert np.all(buf.data[..., 3] == 255)
        assert np.all(buf.data[..., 0] == 200)

    def test_from_grey_array(self):
        """Greyscale input is replicated to RGB."""
        grey = np.arange(6, dtype=np.uint8).reshape(2, 3)
        buf = PixelBuffer.from_array(grey)

        np.testing.assert_array_equal(buf.data[..., 0], grey)
        np.testing.assert_array_equal(buf.data[..., 2], grey)

    def test_from_bytes(self):
        """Packed RGBA bytes are read row-major."""
        raw = bytes([1, 2, 3, 4, 5, 6, 7, 8])
        buf = PixelBuffer.from_bytes(2, 1, raw)

        assert tuple(buf.data[0, 1]) == (5, 6, 7, 8)

    def test_from_bytes_wrong_length(self):
        """Byte count must match width x height x 4."""
        with pytest.raises(ValueError):
            PixelBuffer.from_bytes(2, 2, bytes(10))

    def test_shape_mismatch(self):
        """Declared size must match the data."""
        with pytest.raises(ValueError):
            PixelBuffer(width=3, height=2, data=np.zeros((3, 2, 4), dtype=np.uint8))


class TestSegments:
    """Test segment types."""

    def test_kinds(self):
        line = LineSegment(Point(0, 0), Point(1, 0))
        quad = QuadraticSegment(Point(0, 0), Point(1, 1), Point(2, 0))

        assert line.kind is SegmentKind.LINE
        assert quad.kind is SegmentKind.QUADRATIC
        assert line.end == Point(1, 0)
        assert quad.control == Point(1, 1)
        assert quad.start == Point(0, 0)
        assert quad.end == Point(2, 0)

    def test_indexed_image_counts(self):
        line = LineSegment(Point(0, 0), Point(1, 0))
        indexed = IndexedImage(
            image_width=4,
            image_height=3,
            palette=np.zeros((2, 4), dtype=np.uint8),
            array=np.zeros((5, 6), dtype=np.int32),
            layers=[[[line]], [[line], [line]]]
        )

        assert indexed.array_width == 6
        assert indexed.array_height == 5
        assert indexed.path_count == 3

    def test_interpolated_path_indexing(self):
        path = InterpolatedPath(
            points=np.array([[0.5, 0.0], [1.0, 0.5]]),
            directions=np.array([1, 3])
        )

        assert len(path) == 2
        point = path[1]
        assert (point.x, point.y, point.direction) == (1.0, 0.5, 3)


class TestErrors:
    """Test the exception hierarchy."""

    def test_all_errors_are_vectorization_errors(self):
        for error in (ConfigurationError, DecodeError, GeometryAnomaly):
            assert issubclass(error, VectorizationError)


class TestOptions:
    """Test option defaults and validation."""

    def test_defaults(self):
        options = Options()

        assert options.tracing.line_error_tolerance == 1.0
        assert options.tracing.curve_error_tolerance == 1.0
        assert options.tracing.min_path_size == 8.0
        assert options.blur.radius == 0
        assert options.rendering.scale == 1.0
        assert options.rendering.round_coords is None
        assert options.workers == 1

    @pytest.mark.parametrize("kwargs", [
        {"line_error_tolerance": -1},
        {"curve_error_tolerance": -0.5},
        {"min_path_size": -1},
    ])
    def test_negative_tracing_options(self, kwargs):
        with pytest.raises(ConfigurationError):
            TracingOptions(**kwargs)

    @pytest.mark.parametrize("scale", [0, -1.0])
    def test_non_positive_scale(self, scale):
        with pytest.raises(ConfigurationError):
            RenderingOptions(scale=scale)

    def test_tiny_scale_warns(self):
        with pytest.warns(UserWarning):
            RenderingOptions(scale=0.001)

    def test_bad_round_coords(self):
        with pytest.raises(ConfigurationError):
            RenderingOptions(round_coords=-1)
        with pytest.raises(ConfigurationError):
            RenderingOptions(round_coords=1.5)

    def test_fractional_blur_radius(self):
        with pytest.raises(ConfigurationError):
            BlurOptions(radius=1.5)

    def test_zero_workers(self):
        with pytest.raises(ConfigurationError):
            Options(workers=0)

    def test_validate_catches_mutation(self):
        """Options stay mutable, validate() re-checks them."""
        options = Options()
        options.tracing.min_path_size = -3

        with pytest.raises(ConfigurationError):
            options.validate()

    def test_from_dict(self):
        options = Options.from_dict({
            "tracing": {"min_path_size": 0, "line_error_tolerance": 0.5},
            "rendering": {"round_coords": 1, "viewbox": True},
            "workers": 2,
        })

        assert options.tracing.min_path_size == 0
        assert options.tracing.line_error_tolerance == 0.5
        assert options.tracing.curve_error_tolerance == 1.0
        assert options.rendering.round_coords == 1
        assert options.rendering.viewbox is True
        assert options.workers == 2

    @pytest.mark.parametrize("data", [
        {"tracing": None},
        {"rendering": [("scale", 2)]},
        {"tracing": {"line_error_tolerance": "1"}},
        {"tracing": {"min_path_size": None}},
        {"rendering": {"scale": None}},
        {"rendering": {"round_coords": "2"}},
        {"blur": {"radius": "3"}},
        {"workers": "2"},
        {"workers": 1.5},
    ])
    def test_from_dict_malformed_values(self, data):
        """Wrongly typed sections and values are configuration errors."""
        with pytest.raises(ConfigurationError):
            Options.from_dict(data)

    def test_from_dict_not_a_mapping(self):
        with pytest.raises(ConfigurationError):
            Options.from_dict(None)

    def test_validate_catches_wrong_type(self):
        options = Options()
        options.rendering.scale = "2"

        with pytest.raises(ConfigurationError):
            options.validate()

    def test_numpy_numbers_accepted(self):
        options = TracingOptions(line_error_tolerance=np.float64(0.5), min_path_size=np.int64(4))
        assert options.min_path_size == 4

    def test_from_dict_unknown_keys(self):
        with pytest.raises(ConfigurationError):
            Options.from_dict({"tracing": {"ltres": 1}})
        with pytest.raises(ConfigurationError):
            Options.from_dict({"colors": 8})
