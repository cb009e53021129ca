"""
Low-level NumPy+Numba helpers for per-line mirror lookups, beam tracing
and crossing search.

Every ordered table is stored CSR-style: ``keys`` holds the sorted line
numbers, ``offsets[i]:offsets[i + 1]`` is the slice of the flat, per-line
sorted ``minor`` array that belongs to ``keys[i]``.
"""
import numpy as np
from numba import njit
from typing import Tuple

LEFT_TO_UP = 0
LEFT_TO_DOWN = 1


def _last_unique(major: np.ndarray, minor: np.ndarray) -> np.ndarray:
    """
    Indices of the last occurrence of every ``(major, minor)`` pair, ordered
    by ``major`` then ``minor``.
    """
    n = major.shape[0]
    if n == 0:
        return np.empty(0, dtype=np.int64)
    pairs = np.column_stack((major, minor))[::-1]
    _, first = np.unique(pairs, axis=0, return_index=True)
    return (n - 1 - first).astype(np.int64)


def _line_offsets(major: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Split a sorted ``major`` column into line keys and CSR offsets."""
    keys, starts = np.unique(major, return_index=True)
    offsets = np.append(starts, major.shape[0]).astype(np.int64)
    return keys.astype(np.int64), offsets


@njit(cache=True)
def _lower_bound(values: np.ndarray, lo: int, hi: int, x: int) -> int:
    """First index in ``[lo, hi)`` with ``values[i] >= x``."""
    while lo < hi:
        mid = (lo + hi) >> 1
        if values[mid] < x:
            lo = mid + 1
        else:
            hi = mid
    return lo


@njit(cache=True)
def _line_span(keys: np.ndarray, offsets: np.ndarray, line: int) -> Tuple[int, int]:
    """Slice of the flat arrays holding ``line``, empty if the line is absent."""
    i = _lower_bound(keys, 0, keys.shape[0], line)
    if i == keys.shape[0] or keys[i] != line:
        return 0, 0
    return offsets[i], offsets[i + 1]


@njit(cache=True)
def _mirror_at(keys: np.ndarray, offsets: np.ndarray, minor: np.ndarray,
               line: int, position: int) -> int:
    """Flat index of the entry at ``(line, position)`` or -1."""
    start, stop = _line_span(keys, offsets, line)
    i = _lower_bound(minor, start, stop, position)
    if i < stop and minor[i] == position:
        return i
    return -1


@njit(cache=True)
def _next_mirror(keys: np.ndarray, offsets: np.ndarray, minor: np.ndarray,
                 line: int, position: int, positive: bool) -> int:
    """
    Flat index of the nearest entry strictly ahead of ``position`` on
    ``line``, or -1 when the line is clear up to the grid edge.
    """
    start, stop = _line_span(keys, offsets, line)
    if positive:
        i = _lower_bound(minor, start, stop, position + 1)
        return i if i < stop else -1
    i = _lower_bound(minor, start, stop, position)
    return i - 1 if i > start else -1


@njit(cache=True)
def _covers(keys: np.ndarray, offsets: np.ndarray,
            highs: np.ndarray, lows: np.ndarray,
            line: int, position: int) -> bool:
    """True if a segment stored on ``line`` covers ``position``."""
    start, stop = _line_span(keys, offsets, line)
    i = _lower_bound(highs, start, stop, position)
    return i < stop and lows[i] <= position


@njit(cache=True)
def _trace(row: int, col: int, positive: bool, horizontal: bool,
           n_rows: int, n_cols: int,
           row_keys: np.ndarray, row_offsets: np.ndarray,
           row_cols: np.ndarray, row_kinds: np.ndarray,
           col_keys: np.ndarray, col_offsets: np.ndarray,
           col_rows: np.ndarray, col_kinds: np.ndarray,
           out_seg: np.ndarray, out_horizontal: np.ndarray):
    """
    Follow a beam from ``(row, col)`` until it leaves the grid.

    Fills ``out_seg`` with ``(line, low, high)`` rows and ``out_horizontal``
    with the axis of each row. Returns
    ``(count, row, col, positive, horizontal, finished)``; ``finished`` is
    False only when the buffers ran out before the beam left the grid.
    """
    # 1) Deflection by a mirror already standing in the start cell
    k = _mirror_at(row_keys, row_offsets, row_cols, row, col)
    if k >= 0:
        horizontal = not horizontal
        if row_kinds[k] == LEFT_TO_UP:
            positive = not positive

    # 2) One straight run per iteration
    count = 0
    max_segments = out_seg.shape[0]
    while count < max_segments:
        if horizontal:
            k = _next_mirror(row_keys, row_offsets, row_cols, row, col, positive)
            if k < 0:
                nxt = n_cols if positive else 1
            else:
                nxt = row_cols[k]
            out_seg[count, 0] = row
            out_seg[count, 1] = min(col, nxt)
            out_seg[count, 2] = max(col, nxt)
            out_horizontal[count] = True
            col = nxt
            kind = LEFT_TO_UP if k < 0 else row_kinds[k]
        else:
            k = _next_mirror(col_keys, col_offsets, col_rows, col, row, positive)
            if k < 0:
                nxt = n_rows if positive else 1
            else:
                nxt = col_rows[k]
            out_seg[count, 0] = col
            out_seg[count, 1] = min(row, nxt)
            out_seg[count, 2] = max(row, nxt)
            out_horizontal[count] = False
            row = nxt
            kind = LEFT_TO_UP if k < 0 else col_kinds[k]
        count += 1
        if k < 0:
            return count, row, col, positive, horizontal, True

        # 3) Reflect
        horizontal = not horizontal
        if kind == LEFT_TO_UP:
            positive = not positive

    return count, row, col, positive, horizontal, False


@njit(cache=True)
def _crossings(segments: np.ndarray,
               keys: np.ndarray, offsets: np.ndarray,
               highs: np.ndarray, lows: np.ndarray,
               mirror_keys: np.ndarray, mirror_offsets: np.ndarray,
               mirror_cols: np.ndarray,
               segments_are_rows: bool,
               out: np.ndarray) -> int:
    """
    Probe every ``(line, low, high)`` row of ``segments`` against the
    perpendicular lines of an interval index whose keys fall in
    ``[low, high]``.

    Writes up to ``out.shape[0]`` ``(row, col)`` crossings that hold no mirror
    and returns how many were found, so a call with an empty buffer counts.
    """
    count = 0
    n_keys = keys.shape[0]
    for s in range(segments.shape[0]):
        fixed = segments[s, 0]
        k = _lower_bound(keys, 0, n_keys, segments[s, 1])
        while k < n_keys and keys[k] <= segments[s, 2]:
            stop = offsets[k + 1]
            i = _lower_bound(highs, offsets[k], stop, fixed)
            if i < stop and lows[i] <= fixed:
                if segments_are_rows:
                    r = fixed
                    c = keys[k]
                else:
                    r = keys[k]
                    c = fixed
                if _mirror_at(mirror_keys, mirror_offsets, mirror_cols, r, c) < 0:
                    if count < out.shape[0]:
                        out[count, 0] = r
                        out[count, 1] = c
                    count += 1
            k += 1
    return count
