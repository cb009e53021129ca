"""
Beam state, segments and traced paths, with helpers delegating to a MirrorGrid.
"""
from typing import Iterator, NamedTuple

import numpy as np

from .grid import MirrorGrid, Point


class BeamSegment(NamedTuple):
    """Straight run ``[low, high]`` along the row or column numbered ``line``."""

    line: int
    low: int
    high: int

    def covers(self, position: int) -> bool:
        return self.low <= position <= self.high


class BeamState(NamedTuple):
    """Where a beam is and which way it moves. Right and down are positive."""

    position: Point
    positive: bool
    horizontal: bool

    @classmethod
    def at(cls, row: int, col: int, positive: bool = True, horizontal: bool = True) -> "BeamState":
        return cls(Point(int(row), int(col)), bool(positive), bool(horizontal))

    def trace(self, grid: MirrorGrid) -> "BeamTrace":
        """Delegate to MirrorGrid.trace."""
        end, horizontal, vertical = grid.trace(
            self.position.row, self.position.col,
            positive=self.positive, horizontal=self.horizontal,
        )
        return BeamTrace(self, BeamState.at(*end), horizontal, vertical)


class BeamTrace:
    """Full path of one beam: its end state and its segments split by axis."""

    def __init__(self, start: BeamState, end: BeamState,
                 horizontal_segments: np.ndarray, vertical_segments: np.ndarray):
        self.start = start
        self.end = end
        self.horizontal_segments = np.asarray(horizontal_segments, dtype=np.int64).reshape(-1, 3)
        self.vertical_segments = np.asarray(vertical_segments, dtype=np.int64).reshape(-1, 3)

    def __repr__(self) -> str:
        return (f"BeamTrace(start={tuple(self.start)}, end={tuple(self.end)}, "
                f"horizontal={len(self.horizontal_segments)}, vertical={len(self.vertical_segments)})")

    def segments(self, horizontal: bool) -> Iterator[BeamSegment]:
        """Yield the segments on one axis in trace order."""
        arr = self.horizontal_segments if horizontal else self.vertical_segments
        for line, low, high in arr:
            yield BeamSegment(int(line), int(low), int(high))

    def exits_at(self, row: int, col: int, positive: bool, horizontal: bool) -> bool:
        """True if the beam leaves the grid from ``(row, col)`` moving that way."""
        return self.end == BeamState.at(row, col, positive, horizontal)
