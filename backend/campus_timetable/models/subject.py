import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, Enum as SAEnum, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from campus_timetable.db.base import Base


class SubjectStatus(str, Enum):
    active = "active"
    inactive = "inactive"


class Subject(Base):
    """Owned by the curriculum module; read here only for existence and status checks."""

    __tablename__ = "subjects"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    code: Mapped[str] = mapped_column(String(50), unique=True, index=True, nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    status: Mapped[SubjectStatus] = mapped_column(
        SAEnum(SubjectStatus, name="subject_status"),
        nullable=False,
        default=SubjectStatus.active,
    )

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
