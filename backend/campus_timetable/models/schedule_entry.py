import uuid
from datetime import date, datetime
from enum import Enum

from sqlalchemy import Boolean, CheckConstraint, DateTime, Enum as SAEnum, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from campus_timetable.db.base import Base
from campus_timetable.services.intervals import format_time


class Weekday(str, Enum):
    SUN = "SUN"
    MON = "MON"
    TUE = "TUE"
    WED = "WED"
    THU = "THU"
    FRI = "FRI"
    SAT = "SAT"

    @property
    def position(self) -> int:
        return WEEKDAY_ORDER.index(self)

    @classmethod
    def from_date(cls, value: date) -> "Weekday":
        # date.weekday() counts from Monday
        return WEEKDAY_ORDER[(value.weekday() + 1) % 7]


WEEKDAY_ORDER: tuple[Weekday, ...] = tuple(Weekday)


class ScheduleEntry(Base):
    __tablename__ = "schedule_entries"
    __table_args__ = (
        CheckConstraint("start_minute < end_minute", name="ck_schedule_entries_time_order"),
        Index("ix_schedule_entries_professor_slot", "professor_id", "weekday", "academic_period"),
        Index("ix_schedule_entries_room_slot", "room_id", "weekday", "academic_period"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    subject_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    professor_id: Mapped[str] = mapped_column(String(36), nullable=False)
    room_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("classrooms.id", ondelete="SET NULL"),
        nullable=True,
    )
    weekday: Mapped[Weekday] = mapped_column(SAEnum(Weekday, name="weekday"), nullable=False)
    start_minute: Mapped[int] = mapped_column(Integer, nullable=False)
    end_minute: Mapped[int] = mapped_column(Integer, nullable=False)
    academic_period: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    expected_attendance: Mapped[int | None] = mapped_column(Integer, nullable=True)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())

    @property
    def start_time(self) -> str:
        return format_time(self.start_minute)

    @property
    def end_time(self) -> str:
        return format_time(self.end_minute)

    @property
    def duration_minutes(self) -> int:
        return self.end_minute - self.start_minute
