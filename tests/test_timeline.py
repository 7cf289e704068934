import pytest

from cpusched.models import IDLE, Segment
from cpusched.timeline import Timeline, busy_time, merge_segments, to_slices


def _segments(*pairs):
    return [Segment(occupant=o, end_time=t) for o, t in pairs]


def test_merge_collapses_adjacent_runs():
    raw = _segments((1, 1), (1, 2), (IDLE, 3), (IDLE, 4), (2, 5), (1, 6), (1, 7))
    assert merge_segments(raw) == _segments((1, 2), (IDLE, 4), (2, 5), (1, 7))


def test_merge_is_idempotent():
    raw = _segments((3, 1), (3, 2), (1, 4), (IDLE, 5), (1, 6), (1, 9))
    once = merge_segments(raw)
    assert merge_segments(once) == once


def test_merge_does_not_modify_input():
    raw = _segments((1, 1), (1, 2))
    merge_segments(raw)
    assert raw == _segments((1, 1), (1, 2))


def test_merge_empty():
    assert merge_segments([]) == []


def test_slices_start_where_previous_segment_ended():
    slices = to_slices(_segments((IDLE, 2), (1, 5), (2, 6)))
    assert [(s.label, s.start_time, s.end_time) for s in slices] == [
        ("IDLE", 0, 2),
        ("P1", 2, 5),
        ("P2", 5, 6),
    ]


def test_busy_time_ignores_idle():
    assert busy_time(_segments((IDLE, 2), (1, 5), (IDLE, 7), (2, 8))) == 4


def test_recorder_appends_in_order():
    tl = Timeline()
    tl.record(1, 2)
    tl.record_idle(4)
    tl.record(2, 4)
    assert tl.end_time == 4
    assert [seg.is_idle for seg in tl.segments] == [False, True, False]


def test_recorder_rejects_going_back_in_time():
    tl = Timeline()
    tl.record(1, 5)
    with pytest.raises(ValueError):
        tl.record(2, 3)


def test_segments_is_a_copy():
    tl = Timeline()
    tl.record(1, 1)
    segs = tl.segments
    segs.append(Segment(2, 2))
    assert tl.segments == [Segment(1, 1)]
