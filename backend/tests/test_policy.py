import pytest

from campus_timetable.core.config import Settings
from campus_timetable.core.exceptions import InvalidArgumentError
from campus_timetable.services.policy import SchedulingPolicy


def test_policy_from_settings_reads_business_hours():
    settings = Settings(
        business_day_start="08:00",
        business_day_end="20:00",
        min_lesson_minutes=45,
        occupancy_hours_per_day=12,
        occupancy_days_per_week=6,
    )
    policy = SchedulingPolicy.from_settings(settings)
    assert policy.day_start == 8 * 60
    assert policy.day_end == 20 * 60
    assert policy.min_lesson_minutes == 45
    assert policy.weekly_operating_hours == 72


def test_default_policy_operates_75_hours_a_week():
    assert SchedulingPolicy().weekly_operating_hours == 75


@pytest.mark.parametrize(
    ("start", "end", "fragment"),
    [
        (600, 600, "after start"),
        (660, 600, "after start"),
        (6 * 60, 7 * 60, "institution hours"),
        (21 * 60 + 30, 22 * 60 + 30, "institution hours"),
        (600, 620, "Minimum"),
        (420, 420 + 241, "Maximum"),
    ],
)
def test_time_shape_errors(start, end, fragment):
    errors = SchedulingPolicy().time_shape_errors(start, end)
    assert any(fragment in error for error in errors)


def test_check_time_shape_raises_invalid_argument_with_reasons():
    with pytest.raises(InvalidArgumentError) as exc_info:
        SchedulingPolicy().check_time_shape(6 * 60, 6 * 60 + 10)
    details = exc_info.value.details
    assert details["start_time"] == "06:00"
    assert len(details["reasons"]) == 2


def test_boundaries_of_the_business_day_are_accepted():
    policy = SchedulingPolicy()
    assert policy.time_shape_errors(7 * 60, 7 * 60 + 30) == []
    assert policy.time_shape_errors(18 * 60, 22 * 60) == []
