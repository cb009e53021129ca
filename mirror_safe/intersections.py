"""
Crossing search between a forward and a backward beam.

A crossing is a cell where a segment of one beam meets a perpendicular
segment of the other and no mirror stands yet; a mirror inserted there joins
the two paths.
"""
from typing import List

import numpy as np

from ._core import _crossings
from .beam import BeamTrace
from .grid import MirrorGrid, Point
from .intervals import SegmentIntervalIndex


def _probe(segments: np.ndarray, index: SegmentIntervalIndex,
           grid: MirrorGrid, segments_are_rows: bool) -> np.ndarray:
    segments = np.ascontiguousarray(segments, dtype=np.int64).reshape(-1, 3)
    keys, offsets, highs, lows = index.arrays
    mirror_keys, mirror_offsets, mirror_cols, _ = grid.row_table
    args = (segments, keys, offsets, highs, lows,
            mirror_keys, mirror_offsets, mirror_cols, segments_are_rows)

    # count, then fill an exactly sized buffer
    n = _crossings(*args, np.empty((0, 2), dtype=np.int64))
    out = np.empty((n, 2), dtype=np.int64)
    if n:
        _crossings(*args, out)
    return out


def find_crossings(
    forward_horizontal: np.ndarray,
    forward_vertical: np.ndarray,
    backward_horizontal: np.ndarray,
    backward_vertical: np.ndarray,
    grid: MirrorGrid,
) -> np.ndarray:
    """
    Return every mirror-free cell where the two beams cross at right angles.

    Segments are ``(n, 3)`` arrays of ``(line, low, high)``. The result is an
    ``(k, 2)`` array of distinct ``(row, col)`` rows sorted lexicographically.
    """
    forward_rows = SegmentIntervalIndex.from_segments(forward_horizontal)
    forward_cols = SegmentIntervalIndex.from_segments(forward_vertical)

    found = np.concatenate((
        _probe(backward_horizontal, forward_cols, grid, True),
        _probe(backward_vertical, forward_rows, grid, False),
    ))
    if found.shape[0] == 0:
        return found
    return np.unique(found, axis=0)


def find_trace_crossings(forward: BeamTrace, backward: BeamTrace, grid: MirrorGrid) -> np.ndarray:
    return find_crossings(
        forward.horizontal_segments,
        forward.vertical_segments,
        backward.horizontal_segments,
        backward.vertical_segments,
        grid,
    )


def as_points(crossings: np.ndarray) -> List[Point]:
    return [Point(int(r), int(c)) for r, c in crossings]
