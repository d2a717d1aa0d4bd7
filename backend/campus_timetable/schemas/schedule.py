from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from campus_timetable.models.schedule_entry import Weekday
from campus_timetable.schemas.common import validate_time_string


class TimeSlotIn(BaseModel):
    # Times are parsed per slot by the bulk path so every bad slot is reported together.
    weekday: Weekday
    start_time: str = Field(max_length=10)
    end_time: str = Field(max_length=10)


class ScheduleEntryCreate(TimeSlotIn):
    subject_id: str = Field(min_length=1, max_length=36)
    professor_id: str = Field(min_length=1, max_length=36)
    room_id: str | None = Field(default=None, max_length=36)
    academic_period: str = Field(min_length=1, max_length=20)
    expected_attendance: int | None = Field(default=None, ge=0)

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, value: str) -> str:
        return validate_time_string(value)


class ScheduleEntryUpdate(BaseModel):
    subject_id: str | None = Field(default=None, min_length=1, max_length=36)
    professor_id: str | None = Field(default=None, min_length=1, max_length=36)
    room_id: str | None = Field(default=None, max_length=36)
    weekday: Weekday | None = None
    start_time: str | None = None
    end_time: str | None = None
    academic_period: str | None = Field(default=None, min_length=1, max_length=20)
    expected_attendance: int | None = Field(default=None, ge=0)
    active: bool | None = None

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, value: str | None) -> str | None:
        return validate_time_string(value) if value is not None else None


class BulkScheduleCreate(BaseModel):
    subject_id: str = Field(min_length=1, max_length=36)
    professor_id: str = Field(min_length=1, max_length=36)
    room_id: str | None = Field(default=None, max_length=36)
    academic_period: str = Field(min_length=1, max_length=20)
    expected_attendance: int | None = Field(default=None, ge=0)
    slots: list[TimeSlotIn] = Field(min_length=1, max_length=50)


class ScheduleFilters(BaseModel):
    subject_id: str | None = None
    professor_id: str | None = None
    room_id: str | None = None
    weekday: Weekday | None = None
    academic_period: str | None = None
    active: bool | None = None
    start_from: str | None = None
    end_until: str | None = None
    search: str | None = Field(default=None, max_length=100)

    @field_validator("start_from", "end_until")
    @classmethod
    def validate_time(cls, value: str | None) -> str | None:
        return validate_time_string(value) if value is not None else None


class ScheduleEntryOut(BaseModel):
    id: str
    subject_id: str
    professor_id: str
    room_id: str | None
    weekday: Weekday
    start_time: str
    end_time: str
    academic_period: str
    expected_attendance: int | None
    active: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class BulkScheduleOut(BaseModel):
    created: int
    entries: list[ScheduleEntryOut]
