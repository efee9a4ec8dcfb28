"""Splitting interpolated paths into runs of at most two directions."""
from typing import List

import numpy as np

from tracevec.types import Sequence

_AXIS_DIRECTIONS = {0, 2, 4, 6}


def create_sequences(directions: np.ndarray) -> List[Sequence]:
    """
    Partition a closed path into sequences for curve fitting.

    A run extends while every direction code in it belongs to at most two
    distinct values; a single line or quadratic can plausibly follow such
    a run. The last run wraps to point 0 so the fitted path closes.

    Args:
        directions: (N,) direction codes of an interpolated path

    Returns:
        Sequences in path order; each shares its end point with the
        next one's start
    """
    directions = [int(d) for d in directions]
    n = len(directions)
    sequences = []
    pcnt = 0

    while pcnt < n:
        first = directions[pcnt]
        second = None
        end = pcnt + 1
        while end < n - 1 and (
            directions[end] == first or directions[end] == second or second is None
        ):
            if directions[end] != first and second is None:
                second = directions[end]
            end += 1
        if end >= n - 1:
            end = 0

        run = directions[pcnt:] if end == 0 else directions[pcnt:end]
        sequences.append(Sequence(
            start=pcnt,
            end=end,
            axis_aligned=set(run) <= _AXIS_DIRECTIONS
        ))

        pcnt = end if end > 0 else n

    return sequences
