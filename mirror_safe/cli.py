"""
Command line front end.

Reads ``R C M N`` followed by M "/" and N "\\" mirror positions (whitespace
separated integers) and prints ``0``, ``-1`` or ``"<count> <row> <col>"``.
"""
import argparse
import logging
import sys
from typing import Iterator, List, Optional, Sequence, TextIO, Tuple

from .checker import SafeChecker, SafeCheckOutcome, SafeCheckResult

logger = logging.getLogger(__name__)

MAX_SIDE = 1_000_000
MAX_MIRRORS = 200_000


class InputError(ValueError):
    """Malformed or out-of-range program input."""


class Problem:
    """Parsed program input."""

    def __init__(self, rows: int, cols: int,
                 left_to_up: List[Tuple[int, int]], left_to_down: List[Tuple[int, int]]):
        self.rows = rows
        self.cols = cols
        self.left_to_up = left_to_up
        self.left_to_down = left_to_down


def _integers(stream: TextIO) -> Iterator[int]:
    for line in stream:
        for token in line.split():
            try:
                yield int(token)
            except ValueError:
                raise InputError(f"Not an integer: {token!r}") from None


def _take(values: Iterator[int], name: str) -> int:
    try:
        return next(values)
    except StopIteration:
        raise InputError(f"Unexpected end of input while reading {name}") from None


def _check_range(name: str, value: int, low: int, high: int) -> int:
    if value < low or value > high:
        raise InputError(f"Incorrect {name} value: {value}")
    return value


def _read_mirrors(values: Iterator[int], count: int, rows: int, cols: int) -> List[Tuple[int, int]]:
    mirrors = []
    for _ in range(count):
        r = _check_range("ri", _take(values, "ri"), 1, rows)
        c = _check_range("ci", _take(values, "ci"), 1, cols)
        mirrors.append((r, c))
    return mirrors


def read_problem(stream: TextIO, max_side: int = MAX_SIDE, max_mirrors: int = MAX_MIRRORS) -> Problem:
    values = _integers(stream)
    rows = _check_range("r", _take(values, "r"), 1, max_side)
    cols = _check_range("c", _take(values, "c"), 1, max_side)
    m = _check_range("m", _take(values, "m"), 0, max_mirrors)
    n = _check_range("n", _take(values, "n"), 0, max_mirrors)
    left_to_up = _read_mirrors(values, m, rows, cols)
    left_to_down = _read_mirrors(values, n, rows, cols)
    return Problem(rows, cols, left_to_up, left_to_down)


def format_result(result: SafeCheckResult) -> str:
    if result.outcome is SafeCheckOutcome.OPENS_WITHOUT_INSERTING:
        return "0"
    if result.outcome is SafeCheckOutcome.CANNOT_BE_OPENED:
        return "-1"
    return f"{result.count} {result.row} {result.col}"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mirror-safe",
        description="Check whether the mirror safe opens, or where one extra mirror opens it.",
    )
    parser.add_argument("input", nargs="?", type=argparse.FileType("r"), default=sys.stdin,
                        help="Input file (default: stdin)")
    parser.add_argument("--max-side", type=int, default=MAX_SIDE,
                        help="Largest accepted row/column count")
    parser.add_argument("--max-mirrors", type=int, default=MAX_MIRRORS,
                        help="Largest accepted mirror count per orientation")
    parser.add_argument("--plot", action="store_true",
                        help="Show the grid, both beams and the crossing cells")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Enable debug logging")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
        stream=sys.stderr,
    )

    try:
        problem = read_problem(args.input, max_side=args.max_side, max_mirrors=args.max_mirrors)
        checker = SafeChecker(problem.rows, problem.cols, problem.left_to_up, problem.left_to_down)
    except ValueError as exc:
        print(f"mirror-safe: {exc}", file=sys.stderr)
        return 1

    logger.debug("Loaded %r", checker.grid)
    print(format_result(checker.check_safe()))

    if args.plot:
        checker.plot(show=True)
    return 0
