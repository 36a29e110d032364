from datetime import date, datetime, time

import pytest

from shared.domain.value_objects import TimeRange, parse_date, parse_time


def window(start: str, end: str, day: str = "2025-03-01") -> TimeRange:
    return TimeRange.on_day(day, start, end)


def test_on_day_combines_date_and_times():
    slot = window("10:00", "11:00")

    assert slot.start == datetime(2025, 3, 1, 10, 0)
    assert slot.end == datetime(2025, 3, 1, 11, 0)
    assert slot.day == date(2025, 3, 1)
    assert (slot.start_time, slot.end_time) == ("10:00", "11:00")
    assert str(slot) == "2025-03-01 10:00-11:00"


@pytest.mark.parametrize("start,end", [("11:00", "10:00"), ("10:00", "10:00")])
def test_start_must_precede_end(start, end):
    with pytest.raises(ValueError):
        window(start, end)


@pytest.mark.parametrize(
    "other,expected",
    [
        (("10:30", "11:30"), True),
        (("09:00", "10:30"), True),
        (("10:15", "10:45"), True),
        (("09:00", "12:00"), True),
        (("11:00", "12:00"), False),
        (("09:00", "10:00"), False),
        (("12:00", "13:00"), False),
    ],
)
def test_overlap_is_half_open(other, expected):
    slot = window("10:00", "11:00")
    candidate = window(*other)

    assert slot.overlaps_with(candidate) is expected
    assert candidate.overlaps_with(slot) is expected


def test_same_times_on_different_days_do_not_overlap():
    assert not window("10:00", "11:00").overlaps_with(window("10:00", "11:00", day="2025-03-02"))


def test_overlap_requires_time_range():
    with pytest.raises(TypeError):
        window("10:00", "11:00").overlaps_with((1, 2))


def test_equal_windows_compare_equal():
    assert window("10:00", "11:00") == window("10:00", "11:00")
    assert window("10:00", "11:00") != window("10:00", "11:30")


def test_parse_helpers():
    assert parse_date("2025-03-01") == date(2025, 3, 1)
    assert parse_date(datetime(2025, 3, 1, 9, 30)) == date(2025, 3, 1)
    assert parse_time("09:05") == time(9, 5)
    assert parse_time(time(9, 5, 42)) == time(9, 5)

    with pytest.raises(ValueError, match="YYYY-MM-DD"):
        parse_date("01/03/2025")
    with pytest.raises(ValueError, match="HH:MM"):
        parse_time("9am")
