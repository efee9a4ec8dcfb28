"""Recursive line / quadratic bezier fitting on interpolated paths."""
import logging
from typing import List, Union

import numpy as np

from tracevec.sequencing import create_sequences
from tracevec.types import (
    GeometryAnomaly,
    InterpolatedPath,
    LineSegment,
    Point,
    QuadraticSegment,
    Segment,
    TracingOptions,
)

logger = logging.getLogger(__name__)


def _point(xy: np.ndarray) -> Point:
    return Point(float(xy[0]), float(xy[1]))


def _fit_range(
    points: np.ndarray,
    start: int,
    lo: int,
    hi: int,
    line_tolerance: float,
    curve_tolerance: float
) -> Union[Segment, int]:
    """
    Fit one primitive on offsets lo..hi of a run starting at point start.

    Returns:
        The fitted segment, or the offset to split the range at
    """
    n = len(points)
    length = hi - lo
    p0 = points[(start + lo) % n]
    p2 = points[(start + hi) % n]

    if length <= 1:
        return LineSegment(_point(p0), _point(p2))

    offsets = np.arange(1, length)
    inner = points[(start + lo + offsets) % n]
    t = (offsets / length)[:, None]

    # Straight line, each point measured against its evenly spaced position
    line = p0 + (p2 - p0) * t
    line_errors = np.hypot(*(inner - line).T)
    # A zero tolerance accepts only ranges without interior points
    if line_tolerance > 0 and line_errors.max() <= line_tolerance:
        return LineSegment(_point(p0), _point(p2))

    # Quadratic through the worst point of the line fit
    fit = int(offsets[np.argmax(line_errors)])
    tf = fit / length
    t1, t2, t3 = (1 - tf) ** 2, 2 * (1 - tf) * tf, tf ** 2
    control = (t1 * p0 + t3 * p2 - inner[fit - 1]) / -t2

    curve = (1 - t) ** 2 * p0 + 2 * (1 - t) * t * control + t ** 2 * p2
    curve_errors = np.hypot(*(inner - curve).T)
    if curve_tolerance > 0 and curve_errors.max() <= curve_tolerance:
        return QuadraticSegment(_point(p0), _point(control), _point(p2))

    worst = int(offsets[np.argmax(curve_errors)])
    split = min(max((fit + worst) // 2, 1), length - 1)
    return lo + split


def fit_sequence(
    points: np.ndarray,
    start: int,
    end: int,
    line_tolerance: float = 1.0,
    curve_tolerance: float = 1.0
) -> List[Segment]:
    """
    Fit straight and quadratic segments on points start..end.

    Tries a line, then a quadratic forced through the worst line-fit
    point. When both exceed their tolerance the range is split halfway
    between the worst line-fit and worst curve-fit points and both halves
    are fitted the same way. Ranges without interior points are lines, so
    the subdivision always terminates.

    Args:
        points: (N, 2) interpolated path points
        start: Index of the first point
        end: Index of the last point, may wrap past the end of the path;
            equal to start for a run covering the whole path
        line_tolerance: Max distance of a point from the fitted line
        curve_tolerance: Max distance of a point from the fitted curve

    Returns:
        Segments chained end to start, from points[start] to points[end]

    Raises:
        GeometryAnomaly: If the path has fewer than two points
    """
    n = len(points)
    if n < 2:
        raise GeometryAnomaly(f"Cannot fit a path of {n} points")
    # start == end is the whole closed path
    length = (end - start) % n or n

    segments = []
    stack = [(0, length)]
    while stack:
        lo, hi = stack.pop()
        result = _fit_range(points, start, lo, hi, line_tolerance, curve_tolerance)
        if isinstance(result, int):
            stack.append((result, hi))
            stack.append((lo, result))
        else:
            segments.append(result)

    return segments


def trace_path(path: InterpolatedPath, options: TracingOptions) -> List[Segment]:
    """
    Fit a whole interpolated path.

    Args:
        path: Interpolated path
        options: Tracing tolerances

    Returns:
        Closed chain of segments; the last one ends at the first one's start
    """
    segments = []
    for sequence in create_sequences(path.directions):
        segments.extend(fit_sequence(
            path.points,
            sequence.start,
            sequence.end,
            options.line_error_tolerance,
            options.curve_error_tolerance
        ))
    return segments
