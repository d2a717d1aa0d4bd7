import datetime

from pydantic import BaseModel

from campus_timetable.models.schedule_entry import Weekday
from campus_timetable.schemas.classroom import ClassroomOut
from campus_timetable.schemas.conflict import ConflictRecordOut
from campus_timetable.schemas.schedule import ScheduleEntryOut


class GridSlotOut(BaseModel):
    start_time: str
    end_time: str
    available: bool
    entry: ScheduleEntryOut | None = None


class DayScheduleOut(BaseModel):
    weekday: Weekday
    slots: list[GridSlotOut]


class WeeklyGridOut(BaseModel):
    academic_period: str | None
    professor_id: str | None = None
    room_id: str | None = None
    days: list[DayScheduleOut]


class ProfessorRef(BaseModel):
    id: str
    name: str


class SubjectLoadOut(BaseModel):
    subject_id: str
    subject_code: str | None
    subject_name: str | None
    weekly_hours: float
    entries: list[ScheduleEntryOut]


class ProfessorAgendaOut(BaseModel):
    professor: ProfessorRef
    academic_period: str
    total_hours: float
    subjects: list[SubjectLoadOut]
    conflicts: list[ConflictRecordOut]
    weekly_grid: WeeklyGridOut


class FreeWindowOut(BaseModel):
    weekday: Weekday
    start_time: str
    end_time: str


class RoomOccupancyOut(BaseModel):
    room: ClassroomOut
    academic_period: str
    occupied_hours: float
    operating_hours: float
    occupancy_ratio: float
    entries: list[ScheduleEntryOut]
    free_windows: list[FreeWindowOut]
    conflicts: list[ConflictRecordOut]


class AvailabilitySlotOut(BaseModel):
    start_time: str
    end_time: str
    available: bool
    reason: str | None = None
    entry_id: str | None = None


class RoomAvailabilityOut(BaseModel):
    room: ClassroomOut
    academic_period: str
    date: datetime.date
    weekday: Weekday
    slots: list[AvailabilitySlotOut]
