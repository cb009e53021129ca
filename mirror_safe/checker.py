"""
Safe check: does the beam entering at the top-left corner leave at the
bottom-right one, and if not, where could one extra mirror fix that?

The forward beam starts in cell ``(1, 1)`` moving right. The safe opens when
it leaves cell ``(rows, cols)`` moving right. Otherwise a beam is traced
backwards from ``(rows, cols)`` moving left; a mirror inserted at any
mirror-free cell where the two paths cross at right angles links them.
"""
import logging
from enum import Enum
from typing import Iterable, List, NamedTuple, Optional, Sequence

import numpy as np
from matplotlib.axes import Axes

from .beam import BeamState, BeamTrace
from .grid import START_POSITION, MirrorGrid, Point
from .intersections import as_points, find_trace_crossings

logger = logging.getLogger(__name__)

MAX_POSITIONS = 2**32 - 1


class SafeCheckOutcome(Enum):
    OPENS_WITHOUT_INSERTING = "opens_without_inserting"
    CANNOT_BE_OPENED = "cannot_be_opened"
    REQUIRES_MIRROR_INSERTION = "requires_mirror_insertion"


class SafeCheckResult(NamedTuple):
    """
    Outcome of a check. ``count``, ``row`` and ``col`` are meaningful only for
    REQUIRES_MIRROR_INSERTION: the number of cells where one inserted mirror
    opens the safe, and the lexicographically smallest such cell.
    """

    outcome: SafeCheckOutcome
    count: int = 0
    row: int = 0
    col: int = 0

    @classmethod
    def opens(cls) -> "SafeCheckResult":
        return cls(SafeCheckOutcome.OPENS_WITHOUT_INSERTING)

    @classmethod
    def cannot_be_opened(cls) -> "SafeCheckResult":
        return cls(SafeCheckOutcome.CANNOT_BE_OPENED)

    @classmethod
    def requires_insertion(cls, count: int, row: int, col: int) -> "SafeCheckResult":
        return cls(SafeCheckOutcome.REQUIRES_MIRROR_INSERTION, count, row, col)

    @property
    def position(self) -> Optional[Point]:
        if self.outcome is not SafeCheckOutcome.REQUIRES_MIRROR_INSERTION:
            return None
        return Point(self.row, self.col)


class SafeChecker:
    """Answers the safe check for one fixed mirror layout."""

    def __init__(
        self,
        rows: int,
        cols: int,
        left_to_up: Iterable[Sequence[int]] = (),
        left_to_down: Iterable[Sequence[int]] = (),
    ) -> None:
        self.grid = MirrorGrid(rows, cols, left_to_up, left_to_down)

    @classmethod
    def from_grid(cls, grid: MirrorGrid) -> "SafeChecker":
        checker = cls.__new__(cls)
        checker.grid = grid
        return checker

    def __repr__(self) -> str:
        return f"SafeChecker({self.grid!r})"

    # ---------------------------------------------------------------------
    # Beams
    # ---------------------------------------------------------------------
    def forward_start(self) -> BeamState:
        return BeamState.at(START_POSITION, START_POSITION, positive=True, horizontal=True)

    def backward_start(self) -> BeamState:
        return BeamState.at(self.grid.rows, self.grid.cols, positive=False, horizontal=True)

    def trace_forward(self) -> BeamTrace:
        return self.forward_start().trace(self.grid)

    def trace_backward(self) -> BeamTrace:
        return self.backward_start().trace(self.grid)

    def opens(self, forward: BeamTrace) -> bool:
        return forward.exits_at(self.grid.rows, self.grid.cols, positive=True, horizontal=True)

    def crossings(self) -> List[Point]:
        """All cells where inserting one mirror joins the forward and backward beams."""
        return as_points(find_trace_crossings(self.trace_forward(), self.trace_backward(), self.grid))

    # ---------------------------------------------------------------------
    # Check
    # ---------------------------------------------------------------------
    def check_safe(self) -> SafeCheckResult:
        forward = self.trace_forward()
        logger.debug("Forward beam: %r", forward)
        if self.opens(forward):
            logger.debug("Safe opens without inserting a mirror")
            return SafeCheckResult.opens()

        backward = self.trace_backward()
        logger.debug("Backward beam: %r", backward)

        crossings = find_trace_crossings(forward, backward, self.grid)
        count = int(crossings.shape[0])
        if count == 0:
            logger.debug("No crossing cells; safe cannot be opened")
            return SafeCheckResult.cannot_be_opened()
        if count > MAX_POSITIONS:
            raise RuntimeError(
                f"Internal logic error: crossings count {count} exceeds {MAX_POSITIONS}"
            )

        # rows come back sorted, the first is the lexicographic minimum
        row, col = (int(v) for v in crossings[0])
        logger.debug("%d crossing cells, smallest at (%d, %d)", count, row, col)
        return SafeCheckResult.requires_insertion(count, row, col)

    # ---------------------------------------------------------------------
    # Visualization
    # ---------------------------------------------------------------------
    def plot(self, ax: Optional[Axes] = None, show: bool = True) -> Axes:
        """Plot the grid with the forward beam, the backward beam and their crossings."""
        forward = self.trace_forward()
        backward = self.trace_backward()
        crossings = (np.empty((0, 2), dtype=np.int64) if self.opens(forward)
                     else find_trace_crossings(forward, backward, self.grid))
        return self.grid.plot(
            traces=[(forward.horizontal_segments, forward.vertical_segments),
                    (backward.horizontal_segments, backward.vertical_segments)],
            crossings=crossings,
            ax=ax,
            show=show,
        )


# -------------------------------------------------------------------------
# Convenience top-level helper
# -------------------------------------------------------------------------
def check_safe(rows, cols, left_to_up=(), left_to_down=()) -> SafeCheckResult:
    return SafeChecker(rows, cols, left_to_up, left_to_down).check_safe()
