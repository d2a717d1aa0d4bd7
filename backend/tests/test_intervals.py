import pytest

from campus_timetable.core.exceptions import InvalidTimeFormat
from campus_timetable.services.intervals import format_time, free_gaps, overlaps, parse_time, within


def test_parse_and_format_time():
    assert parse_time("00:00") == 0
    assert parse_time("09:30") == 570
    assert parse_time(" 23:59 ") == 23 * 60 + 59
    assert format_time(570) == "09:30"
    assert format_time(22 * 60) == "22:00"


@pytest.mark.parametrize("value", ["9:30", "24:00", "12:60", "noon", "", "12:3"])
def test_parse_time_rejects_malformed_values(value):
    with pytest.raises(InvalidTimeFormat) as exc_info:
        parse_time(value)
    assert exc_info.value.status_code == 400
    assert exc_info.value.details["value"] == value


def test_parse_time_rejects_non_strings():
    with pytest.raises(InvalidTimeFormat):
        parse_time(930)


def test_overlap_is_symmetric():
    ranges = [(540, 600), (570, 630), (600, 660), (480, 720), (700, 760)]
    for a_start, a_end in ranges:
        for b_start, b_end in ranges:
            assert overlaps(a_start, a_end, b_start, b_end) == overlaps(b_start, b_end, a_start, a_end)


def test_touching_ranges_do_not_overlap():
    assert overlaps(9 * 60, 10 * 60, 10 * 60, 11 * 60) is False
    assert overlaps(9 * 60, 10 * 60 + 1, 10 * 60, 11 * 60) is True
    assert overlaps(9 * 60, 12 * 60, 10 * 60, 11 * 60) is True


def test_within_window():
    assert within(420, 480, 420, 1320)
    assert not within(400, 480, 420, 1320)
    assert not within(1300, 1330, 420, 1320)


def test_free_gaps_between_busy_ranges():
    busy = [(600, 660), (540, 600), (900, 960)]
    assert free_gaps(busy, 420, 1320) == [(420, 540), (660, 900), (960, 1320)]


def test_free_gaps_merges_overlapping_busy_ranges():
    assert free_gaps([(420, 600), (500, 700)], 420, 1320) == [(700, 1320)]
    assert free_gaps([(420, 1320)], 420, 1320) == []
    assert free_gaps([], 420, 1320) == [(420, 1320)]
