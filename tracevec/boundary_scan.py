"""Boundary path scanning over an edge node layer."""
import logging
from typing import List, Tuple

import numpy as np

from tracevec.types import GeometryAnomaly

logger = logging.getLogger(__name__)

# Walk directions
EAST, NORTH, WEST, SOUTH = 0, 1, 2, 3

# PATHSCAN_LOOKUP[code][direction] = (replacement code, new direction, dx, dy)
# A walker entering a node moving in `direction` clears (or, for the saddle
# codes 5 and 10, reduces) the node, turns and steps to the next node.
_NONE = (-1, -1, -1, -1)
PATHSCAN_LOOKUP = (
    (_NONE, _NONE, _NONE, _NONE),                              # 0
    ((0, 1, 0, -1), _NONE, _NONE, (0, 2, -1, 0)),              # 1
    (_NONE, _NONE, (0, 1, 0, -1), (0, 0, 1, 0)),               # 2
    ((0, 0, 1, 0), _NONE, (0, 2, -1, 0), _NONE),               # 3
    (_NONE, (0, 0, 1, 0), (0, 3, 0, 1), _NONE),                # 4
    ((13, 3, 0, 1), (13, 2, -1, 0), (7, 1, 0, -1), (7, 0, 1, 0)),   # 5
    (_NONE, (0, 1, 0, -1), _NONE, (0, 3, 0, 1)),               # 6
    ((0, 3, 0, 1), (0, 2, -1, 0), _NONE, _NONE),               # 7
    ((0, 3, 0, 1), (0, 2, -1, 0), _NONE, _NONE),               # 8
    (_NONE, (0, 1, 0, -1), _NONE, (0, 3, 0, 1)),               # 9
    ((11, 1, 0, -1), (14, 0, 1, 0), (14, 3, 0, 1), (11, 2, -1, 0)),  # 10
    (_NONE, (0, 0, 1, 0), (0, 3, 0, 1), _NONE),                # 11
    ((0, 0, 1, 0), _NONE, (0, 2, -1, 0), _NONE),               # 12
    (_NONE, _NONE, (0, 1, 0, -1), (0, 0, 1, 0)),               # 13
    ((0, 1, 0, -1), _NONE, _NONE, (0, 2, -1, 0)),              # 14
    (_NONE, _NONE, _NONE, _NONE),                              # 15
)

OUTLINE_START = 4
HOLE_START = 11
# 10 can be reduced to 11 during an earlier walk
_START_CANDIDATES = (4, 10, 11)


def _walk(nodes: np.ndarray, j: int, i: int) -> List[Tuple[int, int]]:
    """
    Follow one boundary from node (j, i) until it returns there.

    Mutates nodes: every visited node is cleared or reduced.

    Returns:
        Boundary points in image coordinates (node index minus padding)

    Raises:
        GeometryAnomaly: If a node has no continuation for the walk direction
    """
    h, w = nodes.shape
    px, py = i, j
    direction = NORTH
    points = []

    while True:
        code = int(nodes[py, px])
        points.append((px - 1, py - 1))

        new_code, new_direction, dx, dy = PATHSCAN_LOOKUP[code][direction]
        if new_code < 0:
            raise GeometryAnomaly(
                f"No continuation from node ({px - 1}, {py - 1}) code {code} direction {direction}"
            )

        nodes[py, px] = new_code
        direction = new_direction
        px += dx
        py += dy

        if not (0 <= px < w and 0 <= py < h):
            raise GeometryAnomaly(f"Boundary walk left the grid at ({px - 1}, {py - 1})")

        if px == i and py == j:
            return points


def scan_paths(layer: np.ndarray, min_path_size: float = 8.0) -> List[np.ndarray]:
    """
    Walk an edge node layer into closed boundary polygons.

    Nodes are visited in raster order. A walk starts at an outline corner
    (code 4) or a hole corner (code 11). Hole outlines are traced so their
    nodes are consumed, then dropped: the region inside a hole is painted
    on top of the enclosing shape. Outlines with fewer than min_path_size
    points are dropped as noise.

    Args:
        layer: (H+2, W+2) edge node grid, left unmodified
        min_path_size: Minimum number of points of a kept path

    Returns:
        List of (N, 2) int arrays of (x, y) boundary points
    """
    nodes = layer.astype(np.int16, copy=True)
    paths = []
    omitted = 0
    anomalies = 0

    candidates = np.argwhere(np.isin(nodes, _START_CANDIDATES))
    for j, i in candidates:
        start_code = nodes[j, i]
        if start_code != OUTLINE_START and start_code != HOLE_START:
            continue

        try:
            points = _walk(nodes, int(j), int(i))
        except GeometryAnomaly as e:
            anomalies += 1
            logger.debug(f"Skipping boundary at node ({i - 1}, {j - 1}): {e}")
            continue

        if start_code == HOLE_START:
            continue
        if len(points) < min_path_size:
            omitted += 1
            continue

        paths.append(np.array(points, dtype=np.int32))

    if anomalies:
        # palette[0] regions touching the border merge with the padding ring
        logger.warning(f"{anomalies} boundary walks ended without closing and were skipped")
    logger.debug(f"Scanned {len(paths)} paths, omitted {omitted} below {min_path_size} points")

    return paths
