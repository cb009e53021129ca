"""
Per-line interval lookup over one beam's segments on one axis.

Each line (row or column) maps a segment's high end to its low end, sorted by
the high end. A position is covered iff the first entry whose high end is
>= position starts at or before it.
"""
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

from ._core import _covers, _last_unique, _line_offsets, _lower_bound


class SegmentIntervalIndex:
    """Segments grouped by line, queryable in O(log n)."""

    def __init__(self, segments: Iterable[Sequence[int]] = ()) -> None:
        self._pending: List[Tuple[int, int, int]] = []
        self._arrays: Optional[Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]] = None
        for line, start, end in segments:
            self.add_segment(line, start, end)

    @classmethod
    def from_segments(cls, segments: np.ndarray) -> "SegmentIntervalIndex":
        """Build from an ``(n, 3)`` array of ``(line, start, end)`` rows."""
        index = cls()
        index._arrays = index._compile(np.asarray(segments, dtype=np.int64).reshape(-1, 3))
        return index

    def add_segment(self, line: int, start: int, end: int) -> None:
        """Record ``[min(start, end), max(start, end)]`` on *line*."""
        if self._arrays is not None:
            # fold the compiled rows back in so later writes still win
            keys, offsets, highs, lows = self._arrays
            lines = np.repeat(keys, np.diff(offsets))
            self._pending = [(int(n), int(lo), int(hi)) for n, lo, hi in zip(lines, lows, highs)]
            self._arrays = None
        self._pending.append((int(line), int(start), int(end)))

    @staticmethod
    def _compile(rows: np.ndarray) -> Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
        lines = rows[:, 0]
        lows = np.minimum(rows[:, 1], rows[:, 2])
        highs = np.maximum(rows[:, 1], rows[:, 2])
        keep = _last_unique(lines, highs)
        keys, offsets = _line_offsets(lines[keep])
        return keys, offsets, np.ascontiguousarray(highs[keep]), np.ascontiguousarray(lows[keep])

    @property
    def arrays(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
        """``(keys, offsets, highs, lows)`` in CSR layout."""
        if self._arrays is None:
            rows = np.asarray(self._pending, dtype=np.int64).reshape(-1, 3)
            self._arrays = self._compile(rows)
            self._pending = []
        return self._arrays

    def __len__(self) -> int:
        return int(self.arrays[2].shape[0])

    def has_intersection(self, line: int, position: int) -> bool:
        """True if some segment on *line* covers *position*."""
        keys, offsets, highs, lows = self.arrays
        return bool(_covers(keys, offsets, highs, lows, int(line), int(position)))

    def lines_between(self, lo: int, hi: int) -> np.ndarray:
        """Line numbers in ``[lo, hi]``, ascending."""
        keys = self.arrays[0]
        start = _lower_bound(keys, 0, keys.shape[0], int(lo))
        stop = _lower_bound(keys, start, keys.shape[0], int(hi) + 1)
        return keys[start:stop]
