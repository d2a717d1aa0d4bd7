from __future__ import annotations

from dataclasses import dataclass

from campus_timetable.core.config import Settings, get_settings
from campus_timetable.core.exceptions import InvalidArgumentError
from campus_timetable.services.intervals import duration_minutes, format_time, parse_time


@dataclass(frozen=True)
class SchedulingPolicy:
    day_start: int = 7 * 60
    day_end: int = 22 * 60
    min_lesson_minutes: int = 30
    max_lesson_minutes: int = 240
    occupancy_hours_per_day: int = 15
    occupancy_days_per_week: int = 5
    require_teaching_period: bool = False
    sweep_deduplicate: bool = True

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "SchedulingPolicy":
        settings = settings or get_settings()
        return cls(
            day_start=parse_time(settings.business_day_start),
            day_end=parse_time(settings.business_day_end),
            min_lesson_minutes=settings.min_lesson_minutes,
            max_lesson_minutes=settings.max_lesson_minutes,
            occupancy_hours_per_day=settings.occupancy_hours_per_day,
            occupancy_days_per_week=settings.occupancy_days_per_week,
            require_teaching_period=settings.require_teaching_period,
            sweep_deduplicate=settings.sweep_deduplicate,
        )

    @property
    def weekly_operating_hours(self) -> int:
        return self.occupancy_hours_per_day * self.occupancy_days_per_week

    def time_shape_errors(self, start: int, end: int) -> list[str]:
        errors: list[str] = []
        if end <= start:
            errors.append("End time must be after start time")
            return errors
        if start < self.day_start or end > self.day_end:
            errors.append(
                "Time range must be within institution hours "
                f"({format_time(self.day_start)} - {format_time(self.day_end)})"
            )
        duration = duration_minutes(start, end)
        if duration < self.min_lesson_minutes:
            errors.append(f"Minimum lesson duration is {self.min_lesson_minutes} minutes")
        elif duration > self.max_lesson_minutes:
            errors.append(f"Maximum lesson duration is {self.max_lesson_minutes} minutes")
        return errors

    def check_time_shape(self, start: int, end: int) -> None:
        errors = self.time_shape_errors(start, end)
        if errors:
            raise InvalidArgumentError(
                errors[0],
                details={
                    "start_time": format_time(start),
                    "end_time": format_time(end),
                    "reasons": errors,
                },
            )
