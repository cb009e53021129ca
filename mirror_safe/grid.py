"""
User-facing MirrorGrid class and top-level helpers.
"""
from enum import IntEnum
from typing import Iterable, Iterator, NamedTuple, Optional, Sequence, Tuple

import numpy as np
import matplotlib.pyplot as plt
from matplotlib.axes import Axes
from matplotlib.collections import LineCollection

from ._core import (
    LEFT_TO_DOWN,
    LEFT_TO_UP,
    _last_unique,
    _line_offsets,
    _mirror_at,
    _next_mirror,
    _trace,
)

START_POSITION = 1


class Point(NamedTuple):
    """1-based grid cell; tuple ordering is row first, then column."""

    row: int
    col: int


class MirrorOrientation(IntEnum):
    """The two diagonal mirror types."""

    LEFT_TO_UP = LEFT_TO_UP      # "/"
    LEFT_TO_DOWN = LEFT_TO_DOWN  # "\"

    @property
    def symbol(self) -> str:
        return "/" if self is MirrorOrientation.LEFT_TO_UP else "\\"

    @staticmethod
    def from_symbol(symbol: str) -> "MirrorOrientation":
        if symbol == "/":
            return MirrorOrientation.LEFT_TO_UP
        if symbol == "\\":
            return MirrorOrientation.LEFT_TO_DOWN
        raise ValueError(f"Unknown mirror symbol: {symbol!r}")


def _as_positions(points: Iterable[Sequence[int]]) -> np.ndarray:
    arr = np.asarray([tuple(p) for p in points], dtype=np.int64)
    return arr.reshape(-1, 2)


class MirrorGrid:
    """Rectangular grid of fixed mirrors, indexed by row and by column."""

    def __init__(
        self,
        rows: int,
        cols: int,
        left_to_up: Iterable[Sequence[int]] = (),
        left_to_down: Iterable[Sequence[int]] = (),
    ) -> None:
        self.rows = int(rows)
        self.cols = int(cols)
        if self.rows < START_POSITION:
            raise ValueError(f"Incorrect rows count: {self.rows}")
        if self.cols < START_POSITION:
            raise ValueError(f"Incorrect columns count: {self.cols}")

        up = _as_positions(left_to_up)
        down = _as_positions(left_to_down)
        for positions in (up, down):
            self._check_bounds(positions)

        # "\" positions come second, so they win a cell listed in both
        positions = np.concatenate((up, down))
        kinds = np.concatenate((
            np.full(up.shape[0], LEFT_TO_UP, dtype=np.int8),
            np.full(down.shape[0], LEFT_TO_DOWN, dtype=np.int8),
        ))
        keep = _last_unique(positions[:, 0], positions[:, 1])
        mirror_rows = positions[keep, 0]
        mirror_cols = positions[keep, 1]
        kinds = kinds[keep]

        # Row-wise table: ``keep`` is already ordered by (row, col)
        self._row_keys, self._row_offsets = _line_offsets(mirror_rows)
        self._row_cols = np.ascontiguousarray(mirror_cols)
        self._row_kinds = np.ascontiguousarray(kinds)

        # Column-wise table
        order = np.lexsort((mirror_rows, mirror_cols))
        self._col_keys, self._col_offsets = _line_offsets(mirror_cols[order])
        self._col_rows = np.ascontiguousarray(mirror_rows[order])
        self._col_kinds = np.ascontiguousarray(kinds[order])

    def _check_bounds(self, positions: np.ndarray) -> None:
        bad_row = (positions[:, 0] < START_POSITION) | (positions[:, 0] > self.rows)
        if bad_row.any():
            raise ValueError(f"Incorrect row value: {positions[bad_row][0, 0]}")
        bad_col = (positions[:, 1] < START_POSITION) | (positions[:, 1] > self.cols)
        if bad_col.any():
            raise ValueError(f"Incorrect column value: {positions[bad_col][0, 1]}")

    @property
    def shape(self) -> Tuple[int, int]:
        return self.rows, self.cols

    def __len__(self) -> int:
        return int(self._row_cols.shape[0])

    def __repr__(self) -> str:
        return f"MirrorGrid(rows={self.rows}, cols={self.cols}, mirrors={len(self)})"

    @property
    def row_table(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
        """``(keys, offsets, cols, kinds)`` of the row-indexed mirror table."""
        return self._row_keys, self._row_offsets, self._row_cols, self._row_kinds

    @property
    def col_table(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
        """``(keys, offsets, rows, kinds)`` of the column-indexed mirror table."""
        return self._col_keys, self._col_offsets, self._col_rows, self._col_kinds

    # ---------------------------------------------------------------------
    # Lookups
    # ---------------------------------------------------------------------
    def orientation_at(self, row: int, col: int) -> Optional[MirrorOrientation]:
        """Return the mirror standing in ``(row, col)`` or *None*."""
        k = _mirror_at(self._row_keys, self._row_offsets, self._row_cols, int(row), int(col))
        if k < 0:
            return None
        return MirrorOrientation(int(self._row_kinds[k]))

    def has_mirror(self, row: int, col: int) -> bool:
        return self.orientation_at(row, col) is not None

    def mirrors_in_row(self, row: int) -> Iterator[Tuple[int, MirrorOrientation]]:
        """Yield ``(col, orientation)`` for the mirrors of *row*, left to right."""
        yield from self._line(self._row_keys, self._row_offsets,
                              self._row_cols, self._row_kinds, row)

    def mirrors_in_col(self, col: int) -> Iterator[Tuple[int, MirrorOrientation]]:
        """Yield ``(row, orientation)`` for the mirrors of *col*, top to bottom."""
        yield from self._line(self._col_keys, self._col_offsets,
                              self._col_rows, self._col_kinds, col)

    @staticmethod
    def _line(keys, offsets, minor, kinds, line):
        i = np.searchsorted(keys, line)
        if i == keys.shape[0] or keys[i] != line:
            return
        for k in range(offsets[i], offsets[i + 1]):
            yield int(minor[k]), MirrorOrientation(int(kinds[k]))

    def next_mirror(
        self, row: int, col: int, positive: bool, horizontal: bool
    ) -> Optional[Tuple[Point, MirrorOrientation]]:
        """Nearest mirror strictly ahead of ``(row, col)``, or *None* up to the edge."""
        if horizontal:
            k = _next_mirror(self._row_keys, self._row_offsets, self._row_cols,
                             int(row), int(col), bool(positive))
            if k < 0:
                return None
            return Point(int(row), int(self._row_cols[k])), MirrorOrientation(int(self._row_kinds[k]))
        k = _next_mirror(self._col_keys, self._col_offsets, self._col_rows,
                         int(col), int(row), bool(positive))
        if k < 0:
            return None
        return Point(int(self._col_rows[k]), int(col)), MirrorOrientation(int(self._col_kinds[k]))

    # ---------------------------------------------------------------------
    # Tracing
    # ---------------------------------------------------------------------
    def trace(
        self,
        row: int,
        col: int,
        positive: bool = True,
        horizontal: bool = True,
    ) -> Tuple[Tuple[int, int, bool, bool], np.ndarray, np.ndarray]:
        """
        Follow a beam from ``(row, col)`` until it leaves the grid.

        Returns ``((row, col, positive, horizontal), horizontal_segments,
        vertical_segments)``; segments are ``(n, 3)`` int64 arrays of
        ``(line, low, high)`` rows in trace order.
        """
        # Each mirror is passed at most twice (once per reflecting side)
        max_segments = 2 * len(self) + 2
        buf_seg = np.empty((max_segments, 3), dtype=np.int64)
        buf_horizontal = np.empty(max_segments, dtype=np.bool_)

        count, end_row, end_col, end_positive, end_horizontal, finished = _trace(
            int(row),
            int(col),
            bool(positive),
            bool(horizontal),
            self.rows,
            self.cols,
            self._row_keys,
            self._row_offsets,
            self._row_cols,
            self._row_kinds,
            self._col_keys,
            self._col_offsets,
            self._col_rows,
            self._col_kinds,
            buf_seg,
            buf_horizontal,
        )
        if not finished:
            raise RuntimeError(
                f"Beam from ({row}, {col}) did not leave the grid after {count} segments"
            )

        segments = buf_seg[:count]
        axis = buf_horizontal[:count]
        end = (int(end_row), int(end_col), bool(end_positive), bool(end_horizontal))
        return end, segments[axis], segments[~axis]

    # ---------------------------------------------------------------------
    # Visualization
    # ---------------------------------------------------------------------
    def plot(
        self,
        traces: Iterable[Tuple[np.ndarray, np.ndarray]] = (),
        crossings: Optional[np.ndarray] = None,
        ax: Optional[Axes] = None,
        mirror_color: str = 'k',
        beam_colors: Sequence[str] = ('tab:red', 'tab:blue'),
        crossing_color: str = 'tab:green',
        set_limits: bool = True,
        show: bool = True,
    ) -> Axes:
        """
        Plot mirrors, beam segments and crossing points. Columns run along x,
        rows along y growing downwards.

        ``traces`` holds ``(horizontal_segments, vertical_segments)`` pairs.
        """
        if ax is None:
            fig = plt.figure()
            ax = fig.add_subplot(111)

        # One diagonal stroke per mirror, across its cell
        rows = np.repeat(self._row_keys, np.diff(self._row_offsets)).astype(float)
        cols = self._row_cols.astype(float)
        up = self._row_kinds == LEFT_TO_UP
        dy = np.where(up, -0.4, 0.4)
        strokes = np.stack([
            np.column_stack((cols - 0.4, rows - dy)),
            np.column_stack((cols + 0.4, rows + dy)),
        ], axis=1)
        ax.add_collection(LineCollection(strokes, colors=mirror_color, linewidths=2))

        for i, (horizontal, vertical) in enumerate(traces):
            color = beam_colors[i % len(beam_colors)]
            h = np.asarray(horizontal, dtype=float).reshape(-1, 3)
            v = np.asarray(vertical, dtype=float).reshape(-1, 3)
            lines = np.concatenate([
                np.stack([np.column_stack((h[:, 1], h[:, 0])),
                          np.column_stack((h[:, 2], h[:, 0]))], axis=1),
                np.stack([np.column_stack((v[:, 0], v[:, 1])),
                          np.column_stack((v[:, 0], v[:, 2]))], axis=1),
            ])
            ax.add_collection(LineCollection(lines, colors=color, linewidths=1.5))

        if crossings is not None and len(crossings):
            pts = np.asarray(crossings).reshape(-1, 2)
            ax.scatter(pts[:, 1], pts[:, 0], color=crossing_color, marker='o', zorder=3)

        if set_limits:
            ax.set_xlim(START_POSITION - 0.5, self.cols + 0.5)
            ax.set_ylim(self.rows + 0.5, START_POSITION - 0.5)
            ax.set_aspect('equal')

        if show:
            plt.show()
        return ax


# -------------------------------------------------------------------------
# Convenience top-level helpers
# -------------------------------------------------------------------------
def trace_beam(
    rows,
    cols,
    start,
    *,
    left_to_up=(),
    left_to_down=(),
    positive=True,
    horizontal=True,
):
    grid = MirrorGrid(rows, cols, left_to_up, left_to_down)
    return grid.trace(start[0], start[1], positive=positive, horizontal=horizontal)
