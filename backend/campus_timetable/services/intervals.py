"""Minute-of-day helpers shared by every scheduling component.

Times travel as "HH:MM" strings and are compared as integer minute offsets
from midnight. Ranges are half-open: ``[start, end)``.
"""

from __future__ import annotations

import re

from campus_timetable.core.exceptions import InvalidTimeFormat

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")

MINUTES_PER_DAY = 24 * 60


def parse_time(value: str) -> int:
    if not isinstance(value, str):
        raise InvalidTimeFormat(value)
    match = TIME_PATTERN.match(value.strip())
    if match is None:
        raise InvalidTimeFormat(value)
    return int(match.group(1)) * 60 + int(match.group(2))


def format_time(minutes: int) -> str:
    if not 0 <= minutes <= MINUTES_PER_DAY:
        raise ValueError(f"{minutes} is not a minute of the day")
    hours, remainder = divmod(minutes, 60)
    return f"{hours:02d}:{remainder:02d}"


def overlaps(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
    # Touching endpoints do not overlap.
    return a_start < b_end and b_start < a_end


def duration_minutes(start: int, end: int) -> int:
    return end - start


def within(start: int, end: int, window_start: int, window_end: int) -> bool:
    return window_start <= start < end <= window_end


def free_gaps(busy: list[tuple[int, int]], window_start: int, window_end: int) -> list[tuple[int, int]]:
    """Return the parts of ``[window_start, window_end)`` not covered by ``busy``."""
    gaps: list[tuple[int, int]] = []
    cursor = window_start
    for start, end in sorted(busy):
        if start > cursor:
            gaps.append((cursor, min(start, window_end)))
        cursor = max(cursor, end)
        if cursor >= window_end:
            break
    if cursor < window_end:
        gaps.append((cursor, window_end))
    return [(start, end) for start, end in gaps if start < end]
