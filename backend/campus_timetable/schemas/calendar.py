from datetime import date, datetime

from pydantic import BaseModel, Field, model_validator

from campus_timetable.models.calendar_event import EventType


class CalendarEventCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    start_date: date
    end_date: date
    academic_period: str = Field(min_length=1, max_length=20)
    event_type: EventType
    description: str | None = Field(default=None, max_length=5000)

    @model_validator(mode="after")
    def validate_date_order(self) -> "CalendarEventCreate":
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class CalendarEventUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    start_date: date | None = None
    end_date: date | None = None
    academic_period: str | None = Field(default=None, min_length=1, max_length=20)
    event_type: EventType | None = None
    description: str | None = Field(default=None, max_length=5000)
    active: bool | None = None


class CalendarFilters(BaseModel):
    academic_period: str | None = None
    event_type: EventType | None = None
    active: bool | None = None
    date_from: date | None = None
    date_until: date | None = None
    search: str | None = Field(default=None, max_length=100)


class CalendarEventOut(BaseModel):
    id: str
    name: str
    start_date: date
    end_date: date
    academic_period: str
    event_type: EventType
    description: str | None
    active: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}
