from datetime import datetime, timedelta, timezone

import pytest

from reservation_engine.errors import InvalidInterval
from reservation_engine.intervals import Interval


def slot(start_h, start_m, end_h, end_m):
    return Interval(datetime(2030, 1, 2, start_h, start_m), datetime(2030, 1, 2, end_h, end_m))


def test_end_must_be_after_start():
    with pytest.raises(InvalidInterval):
        slot(10, 0, 10, 0)
    with pytest.raises(InvalidInterval):
        slot(11, 0, 10, 0)


def test_rejects_non_datetimes():
    with pytest.raises(InvalidInterval):
        Interval("2030-01-02T10:00", datetime(2030, 1, 2, 11))


def test_partial_overlap():
    assert slot(10, 0, 11, 0).overlaps(slot(10, 30, 11, 30))
    assert slot(10, 30, 11, 30).overlaps(slot(10, 0, 11, 0))


def test_contained_overlap():
    assert slot(10, 0, 12, 0).overlaps(slot(10, 15, 10, 45))
    assert slot(10, 15, 10, 45).overlaps(slot(10, 0, 12, 0))


def test_touching_boundaries_do_not_overlap():
    assert not slot(10, 0, 11, 0).overlaps(slot(11, 0, 12, 0))
    assert not slot(11, 0, 12, 0).overlaps(slot(10, 0, 11, 0))


def test_disjoint_intervals_do_not_overlap():
    assert not slot(9, 0, 9, 59).overlaps(slot(10, 0, 11, 0))


def test_duration_hours_round_up():
    assert slot(10, 0, 11, 1).duration_hours_ceil() == 2
    assert slot(10, 0, 11, 0).duration_hours_ceil() == 1
    assert slot(10, 0, 10, 1).duration_hours_ceil() == 1
    assert slot(10, 0, 12, 30).duration_hours_ceil() == 3


def test_aware_datetimes_are_stored_as_utc():
    paris_winter = timezone(timedelta(hours=1))
    interval = Interval(
        datetime(2030, 1, 2, 10, 0, tzinfo=paris_winter),
        datetime(2030, 1, 2, 12, 0, tzinfo=paris_winter),
    )
    assert interval.start == datetime(2030, 1, 2, 9, 0)
    assert interval.end == datetime(2030, 1, 2, 11, 0)
    assert interval.start.tzinfo is None


def test_contains_is_half_open():
    interval = slot(10, 0, 11, 0)
    assert interval.contains(datetime(2030, 1, 2, 10, 0))
    assert not interval.contains(datetime(2030, 1, 2, 11, 0))
