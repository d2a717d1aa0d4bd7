from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel

from campus_timetable.core.exceptions import InvalidTimeFormat
from campus_timetable.services.intervals import parse_time

T = TypeVar("T")


def validate_time_string(value: str) -> str:
    try:
        parse_time(value)
    except InvalidTimeFormat as exc:
        raise ValueError("Time must be in HH:MM 24-hour format") from exc
    return value.strip()


class PageOut(BaseModel, Generic[T]):
    items: list[T]
    total: int
    page: int
    total_pages: int

    @classmethod
    def from_page(cls, page) -> "PageOut[T]":
        return cls.model_validate(page, from_attributes=True)
