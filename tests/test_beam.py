import numpy as np

from mirror_safe import BeamSegment, BeamState, BeamTrace, MirrorGrid, Point


def test_beam_state_at():
    state = BeamState.at(2, 3, positive=False, horizontal=True)
    assert state.position == Point(2, 3)
    assert state.position.row == 2 and state.position.col == 3
    assert not state.positive
    assert state.horizontal


def test_beam_state_trace_delegates_to_grid():
    g = MirrorGrid(3, 4, left_to_down=[(1, 4)])
    trace = BeamState.at(1, 1).trace(g)
    assert isinstance(trace, BeamTrace)
    assert trace.start == BeamState.at(1, 1)
    assert trace.end == BeamState.at(3, 4, positive=True, horizontal=False)
    assert list(trace.segments(horizontal=True)) == [BeamSegment(1, 1, 4)]
    assert list(trace.segments(horizontal=False)) == [BeamSegment(4, 1, 3)]


def test_exits_at():
    g = MirrorGrid(1, 5)
    trace = BeamState.at(1, 1).trace(g)
    assert trace.exits_at(1, 5, positive=True, horizontal=True)
    assert not trace.exits_at(1, 5, positive=True, horizontal=False)
    assert not trace.exits_at(1, 4, positive=True, horizontal=True)


def test_reversed_beam_ends_at_entry_column():
    g = MirrorGrid(4, 4)
    trace = BeamState.at(4, 4, positive=False).trace(g)
    assert trace.end == BeamState.at(4, 1, positive=False, horizontal=True)
    np.testing.assert_array_equal(trace.horizontal_segments, [[4, 1, 4]])
    assert trace.vertical_segments.shape == (0, 3)


def test_segment_covers_closed_range():
    seg = BeamSegment(3, 2, 5)
    assert seg.covers(2)
    assert seg.covers(5)
    assert not seg.covers(1)
    assert not seg.covers(6)
