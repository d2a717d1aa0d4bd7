from datetime import datetime

from pydantic import BaseModel, Field

from campus_timetable.models.conflict_record import ConflictType


class ConflictFilters(BaseModel):
    conflict_type: ConflictType | None = None
    resolved: bool | None = None
    professor_id: str | None = None
    room_id: str | None = None
    academic_period: str | None = Field(default=None, max_length=20)


class ConflictRecordOut(BaseModel):
    id: str
    conflict_type: ConflictType
    description: str
    primary_entry_id: str
    secondary_entry_id: str | None
    professor_id: str | None
    room_id: str | None
    detected_at: datetime | None
    resolved: bool
    resolved_at: datetime | None

    model_config = {"from_attributes": True}


class SweepOut(BaseModel):
    academic_period: str
    entries_scanned: int
    created: int
    conflicts: list[ConflictRecordOut]
