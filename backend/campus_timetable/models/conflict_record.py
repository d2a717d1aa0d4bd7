import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import Boolean, DateTime, Enum as SAEnum, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from campus_timetable.db.base import Base


class ConflictType(str, Enum):
    professor_overlap = "professor_overlap"
    room_overlap = "room_overlap"
    capacity_exceeded = "capacity_exceeded"
    room_unavailable = "room_unavailable"


class ConflictRecord(Base):
    __tablename__ = "conflict_records"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    conflict_type: Mapped[ConflictType] = mapped_column(
        SAEnum(ConflictType, name="conflict_type"),
        nullable=False,
        index=True,
    )
    description: Mapped[str] = mapped_column(Text, nullable=False)
    # Plain ids: a record must survive deletion of the entries it mentions.
    primary_entry_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    secondary_entry_id: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)
    professor_id: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)
    room_id: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)
    detected_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    resolved: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    resolved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
