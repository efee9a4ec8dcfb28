"""Interpolation of boundary polygons into direction-tagged midpoints."""
import numpy as np

from tracevec.types import GeometryAnomaly, InterpolatedPath

# Direction codes, y grows downward
EAST, SOUTH_EAST, SOUTH, SOUTH_WEST, WEST, NORTH_WEST, NORTH, NORTH_EAST = range(8)
CENTER = 8

# _DIRECTIONS[sign(dy) + 1][sign(dx) + 1]
_DIRECTIONS = np.array([
    [NORTH_WEST, NORTH, NORTH_EAST],
    [WEST, CENTER, EAST],
    [SOUTH_WEST, SOUTH, SOUTH_EAST],
])


def get_direction(x1: float, y1: float, x2: float, y2: float) -> int:
    """Octant code of the step from (x1, y1) to (x2, y2); CENTER for no step."""
    return int(_DIRECTIONS[int(np.sign(y2 - y1)) + 1, int(np.sign(x2 - x1)) + 1])


def interpolate(path: np.ndarray) -> InterpolatedPath:
    """
    Replace each boundary edge by its midpoint and tag it with a direction.

    Midpoints cut the pixel staircase corners, so straight and diagonal
    runs line up for curve fitting. The direction of point i is the
    octant of the step to point i+1 (wrapping).

    Args:
        path: (N, 2) closed boundary polygon

    Returns:
        InterpolatedPath with N points

    Raises:
        GeometryAnomaly: If two consecutive midpoints coincide
    """
    path = np.asarray(path, dtype=np.float64)
    if len(path) < 3:
        raise GeometryAnomaly(f"Path with {len(path)} points cannot be interpolated")

    mids = (path + np.roll(path, -1, axis=0)) / 2.0
    step = np.roll(mids, -1, axis=0) - mids
    sx = np.sign(step[:, 0]).astype(int)
    sy = np.sign(step[:, 1]).astype(int)
    directions = _DIRECTIONS[sy + 1, sx + 1]

    if np.any(directions == CENTER):
        raise GeometryAnomaly("Degenerate path: consecutive points coincide")

    return InterpolatedPath(points=mids, directions=directions.astype(np.int8))
