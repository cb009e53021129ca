"""
Numba-accelerated mirror safe checker.

Public API
----------
SafeChecker(rows, cols, left_to_up, left_to_down).check_safe()
    - does the beam from (1, 1) leave (rows, cols) moving right, and if not,
      how many cells (and which smallest one) could take one extra mirror

MirrorGrid(rows, cols, left_to_up, left_to_down)
    - row- and column-indexed mirror tables, beam tracing and plotting
"""
from .beam import BeamSegment, BeamState, BeamTrace
from .checker import SafeChecker, SafeCheckOutcome, SafeCheckResult, check_safe
from .grid import MirrorGrid, MirrorOrientation, Point, trace_beam
from .intersections import find_crossings
from .intervals import SegmentIntervalIndex

__all__ = [
    "BeamSegment",
    "BeamState",
    "BeamTrace",
    "MirrorGrid",
    "MirrorOrientation",
    "Point",
    "SafeCheckOutcome",
    "SafeCheckResult",
    "SafeChecker",
    "SegmentIntervalIndex",
    "check_safe",
    "find_crossings",
    "trace_beam",
]
