import logging

import pytest

from mirror_safe import (
    MirrorGrid,
    Point,
    SafeChecker,
    SafeCheckOutcome,
    SafeCheckResult,
    check_safe,
)

OPENS = SafeCheckResult.opens()
CLOSED = SafeCheckResult.cannot_be_opened()


def insert(count, row, col):
    return SafeCheckResult.requires_insertion(count, row, col)


@pytest.mark.parametrize(
    "rows, cols, left_to_up, left_to_down, expected",
    [
        pytest.param(5, 6, [(2, 3)], [(1, 2), (2, 5), (4, 2), (5, 5)], insert(2, 4, 3),
                     id="two_possible_solutions"),
        pytest.param(100, 100, [], [(1, 77), (100, 77)], OPENS, id="opens_without_inserting"),
        pytest.param(100, 100, [], [], CLOSED, id="empty_square_cannot_open"),
        pytest.param(1, 1, [], [], OPENS, id="one_cell"),
        pytest.param(1, 1, [(1, 1)], [], CLOSED, id="one_cell_with_mirror"),
        pytest.param(3, 4, [], [(1, 4)], insert(1, 3, 4), id="insert_at_the_end"),
        pytest.param(4, 4, [], [(4, 4)], insert(1, 1, 4), id="insert_at_end_of_first_row"),
        pytest.param(4, 4, [(4, 4)], [], CLOSED, id="one_mirror_at_end_cannot_open"),
        pytest.param(5, 6, [], [(1, 4), (3, 4), (5, 4)], CLOSED, id="crossing_on_mirror"),
        pytest.param(5, 6, [], [(5, 1)], insert(1, 1, 1), id="insert_at_the_beginning"),
        pytest.param(5, 6, [(5, 1)], [], CLOSED, id="mirror_in_lower_corner"),
        pytest.param(5, 5, [], [(1, 1), (5, 1)], OPENS, id="mirrors_in_left_corners"),
        pytest.param(5, 5, [], [(1, 1)], insert(1, 5, 1), id="insert_in_left_bottom_corner"),
        pytest.param(4, 4, [(4, 3)], [(1, 2), (4, 2), (2, 4), (4, 4)], insert(2, 2, 2),
                     id="two_possible_solutions_small"),
        pytest.param(5, 5, [], [(1, 5), (5, 5)], OPENS, id="mirrors_in_right_corners"),
        pytest.param(4, 4, [(1, 2)], [(1, 1), (1, 4), (4, 4)], CLOSED, id="multiple_mirrors_closed"),
        pytest.param(3, 4, [(1, 3)], [(3, 2)], insert(1, 1, 2), id="one_insertion"),
        pytest.param(4, 4, [(1, 4)], [(4, 1)], insert(1, 1, 1), id="insert_at_start_cell"),
        pytest.param(2, 1, [], [(1, 1)], insert(1, 2, 1), id="one_column_requires_insertion"),
        pytest.param(2, 1, [(1, 1)], [], CLOSED, id="one_column_cannot_open"),
        pytest.param(2, 1, [], [(1, 1), (2, 1)], OPENS, id="one_column_opens"),
        pytest.param(6, 7, [(2, 2), (2, 6), (4, 2), (4, 6)],
                     [(1, 6), (3, 2), (3, 6), (5, 6), (6, 6)], insert(1, 5, 2),
                     id="long_trace"),
        pytest.param(6, 7, [(2, 1), (2, 7), (4, 1), (4, 7)],
                     [(1, 7), (3, 1), (3, 7), (5, 7), (6, 7)], insert(1, 5, 1),
                     id="long_trace_near_sides"),
        pytest.param(6, 6, [(2, 2), (2, 6), (4, 2), (4, 6)],
                     [(1, 6), (3, 2), (3, 6), (5, 2), (6, 3)], insert(5, 1, 3),
                     id="long_trace_multiple_crossings"),
        pytest.param(5, 5, [], [(1, 5), (5, 1)], insert(2, 1, 1), id="mirrors_in_opposite_corners"),
        pytest.param(5, 5, [], [(1, 1), (5, 5)], CLOSED, id="mirrors_in_opposite_corners_closed"),
        pytest.param(6, 6, [(1, 4), (4, 4), (4, 6)], [(1, 2), (4, 2), (1, 6)], insert(1, 6, 4),
                     id="double_reflection"),
        pytest.param(10, 10, [], [], CLOSED, id="no_mirrors"),
        pytest.param(3, 1, [(3, 1)], [(1, 1)], CLOSED, id="single_column_closed"),
        pytest.param(9_000_000, 9_500_000,
                     [(5_600_000, 3_200_011), (5_600_000, 4_500_000)],
                     [(1, 4_500_000), (7_700_025, 6_700_000),
                      (8_912_398, 3_200_011), (9_000_000, 6_700_000)],
                     insert(2, 7_700_025, 3_200_011), id="large_field"),
        pytest.param(6, 6, [(6, 3), (1, 3)], [(1, 2), (1, 4), (3, 6), (6, 6), (6, 2)],
                     insert(3, 3, 2), id="multiple_horizontal_crossings"),
    ],
)
def test_check_safe(rows, cols, left_to_up, left_to_down, expected):
    assert SafeChecker(rows, cols, left_to_up, left_to_down).check_safe() == expected


@pytest.mark.parametrize("rows, cols", [(1, 1), (1, 7), (2, 1), (5, 5), (3, 8)])
def test_no_mirrors_opens_only_for_a_single_row(rows, cols):
    result = check_safe(rows, cols)
    if rows == 1:
        assert result.outcome is SafeCheckOutcome.OPENS_WITHOUT_INSERTING
    else:
        assert result.outcome is SafeCheckOutcome.CANNOT_BE_OPENED


def test_mirror_at_unobstructed_exit_is_the_only_insertion():
    # the forward beam would leave (1, 6); a "\" there sends it down column 6
    checker = SafeChecker(4, 6, left_to_down=[(1, 6)])
    assert checker.check_safe() == insert(1, 4, 6)
    assert checker.crossings() == [Point(4, 6)]


def test_check_safe_is_idempotent():
    checker = SafeChecker(6, 6, [(2, 2), (2, 6), (4, 2), (4, 6)],
                          [(1, 6), (3, 2), (3, 6), (5, 2), (6, 3)])
    first = checker.check_safe()
    assert checker.check_safe() == first
    assert checker.check_safe() == first


@pytest.mark.parametrize("rows, cols", [(0, 1), (1, 0), (0, 0)])
def test_zero_space(rows, cols):
    with pytest.raises(ValueError):
        SafeChecker(rows, cols)


@pytest.mark.parametrize("position", [(0, 1), (7, 1), (1, 0), (1, 6)])
def test_incorrect_mirror_positions(position):
    with pytest.raises(ValueError):
        SafeChecker(6, 5, left_to_up=[position])
    with pytest.raises(ValueError):
        SafeChecker(6, 5, left_to_down=[position])


def test_result_position():
    assert insert(2, 4, 3).position == Point(4, 3)
    assert OPENS.position is None
    assert CLOSED.position is None


def test_from_grid_shares_the_grid():
    grid = MirrorGrid(5, 5, left_to_down=[(1, 5), (5, 1)])
    checker = SafeChecker.from_grid(grid)
    assert checker.grid is grid
    assert checker.check_safe() == insert(2, 1, 1)
    assert checker.crossings() == [Point(1, 1), Point(5, 5)]


def test_check_logs_beams(caplog):
    with caplog.at_level(logging.DEBUG, logger="mirror_safe.checker"):
        check_safe(5, 6, [(2, 3)], [(1, 2), (2, 5), (4, 2), (5, 5)])
    assert "Forward beam" in caplog.text
    assert "Backward beam" in caplog.text
    assert "2 crossing cells, smallest at (4, 3)" in caplog.text


def test_plot_checker():
    import matplotlib
    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    ax = SafeChecker(5, 6, [(2, 3)], [(1, 2), (2, 5), (4, 2), (5, 5)]).plot(show=False)
    # mirrors, forward beam, backward beam, crossings
    assert len(ax.collections) == 4
    plt.close("all")
