import uuid
from datetime import date, datetime
from enum import Enum

from sqlalchemy import Boolean, CheckConstraint, Date, DateTime, Enum as SAEnum, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from campus_timetable.db.base import Base


class EventType(str, Enum):
    teaching_period = "teaching_period"
    break_ = "break"
    exam_window = "exam_window"
    holiday = "holiday"
    academic_event = "academic_event"
    maintenance = "maintenance"


class AcademicCalendarEvent(Base):
    __tablename__ = "academic_calendar_events"
    __table_args__ = (CheckConstraint("start_date <= end_date", name="ck_calendar_events_date_order"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    academic_period: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    event_type: Mapped[EventType] = mapped_column(
        SAEnum(EventType, name="event_type", values_callable=lambda members: [member.value for member in members]),
        nullable=False,
    )
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())
