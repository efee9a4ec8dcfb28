"""Tests for boundary path scanning."""
import logging

import numpy as np
import pytest

from tracevec.boundary_scan import PATHSCAN_LOOKUP, scan_paths
from tracevec.layering import build_layer


def _padded(indices):
    indices = np.asarray(indices)
    grid = np.zeros((indices.shape[0] + 2, indices.shape[1] + 2), dtype=np.int32)
    grid[1:-1, 1:-1] = indices
    return grid


def _as_tuples(path):
    return [tuple(int(v) for v in p) for p in path]


class TestLookupTable:
    """Test PATHSCAN_LOOKUP."""

    def test_shape(self):
        assert len(PATHSCAN_LOOKUP) == 16
        assert all(len(row) == 4 for row in PATHSCAN_LOOKUP)

    def test_empty_and_full_nodes_have_no_continuation(self):
        for code in (0, 15):
            assert all(entry[0] == -1 for entry in PATHSCAN_LOOKUP[code])

    def test_steps_are_unit_moves(self):
        for row in PATHSCAN_LOOKUP:
            for new_code, direction, dx, dy in row:
                if new_code < 0:
                    continue
                assert abs(dx) + abs(dy) == 1
                assert direction in (0, 1, 2, 3)


class TestScanPaths:
    """Test scan_paths()."""

    def test_single_pixel_square(self):
        """A lone pixel traces its four corners clockwise from the top-left."""
        grid = _padded([[2, 2, 2], [2, 1, 2], [2, 2, 2]])
        paths = scan_paths(build_layer(grid, 1), min_path_size=0)

        assert len(paths) == 1
        assert _as_tuples(paths[0]) == [(1, 1), (2, 1), (2, 2), (1, 2)]

    def test_small_paths_omitted(self):
        """Paths below min_path_size points are dropped."""
        grid = _padded([[2, 2, 2], [2, 1, 2], [2, 2, 2]])
        layer = build_layer(grid, 1)

        assert scan_paths(layer, min_path_size=8) == []
        assert len(scan_paths(layer, min_path_size=4)) == 1
        assert scan_paths(layer, min_path_size=4.5) == []

    def test_square_outline(self):
        grid = _padded([[2, 2, 2, 2], [2, 1, 1, 2], [2, 1, 1, 2], [2, 2, 2, 2]])
        paths = scan_paths(build_layer(grid, 1))

        assert len(paths) == 1
        assert _as_tuples(paths[0]) == [
            (1, 1), (2, 1), (3, 1), (3, 2), (3, 3), (2, 3), (1, 3), (1, 2)
        ]

    def test_hole_outlines_dropped(self):
        """A ring keeps its outer outline only."""
        indices = np.full((5, 5), 2)
        indices[1:4, 1:4] = 1
        indices[2, 2] = 2
        paths = scan_paths(build_layer(_padded(indices), 1), min_path_size=0)

        assert len(paths) == 1
        assert len(paths[0]) == 12
        assert (2, 2) not in _as_tuples(paths[0])

    def test_background_outline_follows_image_border(self):
        indices = np.full((5, 5), 2)
        indices[2, 2] = 1
        paths = scan_paths(build_layer(_padded(indices), 2), min_path_size=0)

        assert len(paths) == 1
        points = _as_tuples(paths[0])
        assert len(points) == 20
        assert points[0] == (0, 0)
        assert all(x in (0, 5) or y in (0, 5) for x, y in points)

    def test_diagonal_touch_is_one_path(self):
        """Pixels meeting at a corner share the saddle node and form one path."""
        grid = _padded([[1, 2], [2, 1]])

        paths = scan_paths(build_layer(grid, 1), min_path_size=0)
        assert len(paths) == 1
        assert _as_tuples(paths[0]) == [
            (0, 0), (1, 0), (1, 1), (2, 1), (2, 2), (1, 2), (1, 1), (0, 1)
        ]

        paths = scan_paths(build_layer(grid, 2), min_path_size=0)
        assert len(paths) == 1
        assert _as_tuples(paths[0]) == [
            (1, 0), (2, 0), (2, 1), (1, 1), (1, 2), (0, 2), (0, 1), (1, 1)
        ]

    def test_layer_not_modified(self):
        grid = _padded([[1, 2], [2, 1]])
        layer = build_layer(grid, 1)
        before = layer.copy()

        scan_paths(layer, min_path_size=0)

        np.testing.assert_array_equal(layer, before)

    @pytest.mark.parametrize("i", [1, 4])
    def test_broken_walk_is_skipped(self, i):
        """A start node leading nowhere is skipped instead of raising."""
        layer = np.zeros((5, 5), dtype=np.uint8)
        layer[1, i] = 4

        assert scan_paths(layer, min_path_size=0) == []

    def test_broken_walk_does_not_stop_the_scan(self):
        grid = _padded([[2, 2, 2], [2, 1, 2], [2, 2, 2]])
        layer = build_layer(grid, 1)
        layer[1, 1] = 4

        paths = scan_paths(layer, min_path_size=0)

        assert len(paths) == 1
        assert _as_tuples(paths[0]) == [(1, 1), (2, 1), (2, 2), (1, 2)]

    def test_paths_are_closed_lattice_walks(self):
        """Consecutive points, including last to first, are one unit apart."""
        rng = np.random.default_rng(3)
        grid = _padded(rng.integers(1, 3, size=(12, 12)))

        for index in (1, 2):
            for path in scan_paths(build_layer(grid, index), min_path_size=0):
                steps = np.abs(np.roll(path, -1, axis=0) - path).sum(axis=1)
                assert np.all(steps == 1)

    def test_border_region_of_first_color_warns(self, caplog):
        """A palette[0] region reaching the border merges with the padding.

        Its walk cannot close; the skip is reported once at WARNING.
        """
        grid = _padded([[1, 1, 1], [1, 0, 1], [1, 0, 1]])

        with caplog.at_level(logging.WARNING, logger="tracevec.boundary_scan"):
            paths = scan_paths(build_layer(grid, 0), min_path_size=0)

        assert paths == []
        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert len(warnings) == 1
        assert "1 boundary walks" in warnings[0].getMessage()

    def test_clean_layer_does_not_warn(self, caplog):
        grid = _padded([[2, 2, 2], [2, 1, 2], [2, 2, 2]])

        with caplog.at_level(logging.WARNING, logger="tracevec.boundary_scan"):
            scan_paths(build_layer(grid, 1), min_path_size=0)

        assert not [r for r in caplog.records if r.levelno >= logging.WARNING]
