"""Layer separation and edge node detection.

Every lattice node sits between four pixels. Its code records which of
those pixels belong to the layer color (light) and which do not (dark):

    12  ░░  ▓░  ░▓  ▓▓  ░░  ▓░  ░▓  ▓▓  ░░  ▓░  ░▓  ▓▓  ░░  ▓░  ░▓  ▓▓
    48  ░░  ░░  ░░  ░░  ░▓  ░▓  ░▓  ░▓  ▓░  ▓░  ▓░  ▓░  ▓▓  ▓▓  ▓▓  ▓▓
        0   1   2   3   4   5   6   7   8   9   10  11  12  13  14  15

Bit 1 is the top-left pixel, 2 top-right, 4 bottom-right, 8 bottom-left.
Node [j][i] of a layer is the top-left corner of padded grid cell [j][i].
"""
from typing import List, Tuple

import numpy as np

from tracevec.types import PixelGroup


def pixel_group(grid: np.ndarray, j: int, i: int) -> PixelGroup:
    """3x3 neighbourhood of interior cell (j, i) of a padded index grid."""
    return PixelGroup(
        top_left=int(grid[j - 1, i - 1]),
        top_mid=int(grid[j - 1, i]),
        top_right=int(grid[j - 1, i + 1]),
        mid_left=int(grid[j, i - 1]),
        mid=int(grid[j, i]),
        mid_right=int(grid[j, i + 1]),
        bottom_left=int(grid[j + 1, i - 1]),
        bottom_mid=int(grid[j + 1, i]),
        bottom_right=int(grid[j + 1, i + 1]),
    )


def node_writes(pg: PixelGroup) -> List[Tuple[Tuple[int, int], int]]:
    """
    Edge node codes a pixel contributes to its own color layer.

    Args:
        pg: Neighbourhood of the pixel

    Returns:
        List of ((dj, di), code) where (dj, di) is the node offset from
        the pixel's own cell
    """
    m = pg.mid
    writes = [
        # X: 1, 3, 5, 7, 9, 11, 13, 15
        ((1, 1), 1 + 2 * (pg.mid_right == m) + 4 * (pg.bottom_right == m)
         + 8 * (pg.bottom_mid == m)),
    ]
    if pg.mid_left != m:
        # A: 2, 6, 10, 14
        writes.append(((1, 0), 2 + 4 * (pg.bottom_mid == m) + 8 * (pg.bottom_left == m)))
    if pg.top_mid != m:
        # B: 8, 10, 12, 14
        writes.append(((0, 1), 8 + 2 * (pg.top_right == m) + 4 * (pg.mid_right == m)))
    if pg.top_left != m:
        # C: 4, 6, 12, 14
        writes.append(((0, 0), 4 + 2 * (pg.top_mid == m) + 8 * (pg.mid_left == m)))
    return writes


def build_layer(grid: np.ndarray, index: int) -> np.ndarray:
    """
    Compute the edge node grid of one palette index.

    Evaluates the node_writes() table for all pixels at once. Every write
    a pixel makes equals the 2x2 window code of that node, so only the
    condition for a node being written at all needs care: its top-left
    pixel is an interior pixel of the color, or the top-left pixel is of
    another color and one of the other three is an interior pixel of the
    color.

    Args:
        grid: (H+2, W+2) padded index grid
        index: Palette index of the layer

    Returns:
        (H+2, W+2) uint8 grid of node codes 0-15
    """
    member = grid == index
    interior = np.zeros_like(member)
    interior[1:-1, 1:-1] = True
    owned = member & interior

    tl, tr = member[:-1, :-1], member[:-1, 1:]
    bl, br = member[1:, :-1], member[1:, 1:]
    code = (
        tl.astype(np.uint8)
        + 2 * tr.astype(np.uint8)
        + 4 * br.astype(np.uint8)
        + 8 * bl.astype(np.uint8)
    )

    written = owned[:-1, :-1] | (~tl & (owned[:-1, 1:] | owned[1:, :-1] | owned[1:, 1:]))

    layer = np.zeros(grid.shape, dtype=np.uint8)
    layer[1:, 1:] = np.where(written, code, 0)
    return layer


def build_layers(grid: np.ndarray, n_colors: int) -> List[np.ndarray]:
    """Edge node grids for every palette index, in palette order."""
    return [build_layer(grid, k) for k in range(n_colors)]
