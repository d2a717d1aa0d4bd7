from __future__ import annotations

from datetime import datetime, timezone
import logging

from sqlalchemy import and_, or_, select
from sqlalchemy.orm import Session, aliased

from campus_timetable.core.exceptions import InvalidStateError, NotFoundError
from campus_timetable.models.conflict_record import ConflictRecord, ConflictType
from campus_timetable.models.schedule_entry import ScheduleEntry
from campus_timetable.schemas.conflict import ConflictFilters
from campus_timetable.services.pagination import Page, PageRequest, paginate
from campus_timetable.services.persistence import commit_or_raise

logger = logging.getLogger(__name__)


def _pair(first_id: str, second_id: str | None) -> tuple[str, str | None]:
    if second_id is None:
        return first_id, None
    return (first_id, second_id) if first_id <= second_id else (second_id, first_id)


class ConflictLedger:
    """Durable conflict records with an unresolved -> resolved lifecycle.

    Records never change once resolved and are never deleted automatically;
    they may outlive the schedule entries they mention.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def find_unresolved(
        self,
        conflict_type: ConflictType,
        primary_entry_id: str,
        secondary_entry_id: str | None = None,
    ) -> ConflictRecord | None:
        primary, secondary = _pair(primary_entry_id, secondary_entry_id)
        query = select(ConflictRecord).where(
            ConflictRecord.conflict_type == conflict_type,
            ConflictRecord.resolved.is_(False),
            ConflictRecord.primary_entry_id == primary,
        )
        if secondary is None:
            query = query.where(ConflictRecord.secondary_entry_id.is_(None))
        else:
            query = query.where(ConflictRecord.secondary_entry_id == secondary)
        return self.db.execute(query.order_by(ConflictRecord.detected_at).limit(1)).scalar_one_or_none()

    def record(
        self,
        *,
        conflict_type: ConflictType,
        description: str,
        primary_entry_id: str,
        secondary_entry_id: str | None = None,
        professor_id: str | None = None,
        room_id: str | None = None,
        deduplicate: bool = True,
    ) -> tuple[ConflictRecord, bool]:
        """Stage a record; returns ``(record, created)``. The caller commits."""
        if deduplicate:
            existing = self.find_unresolved(conflict_type, primary_entry_id, secondary_entry_id)
            if existing is not None:
                return existing, False

        primary, secondary = _pair(primary_entry_id, secondary_entry_id)
        record = ConflictRecord(
            conflict_type=conflict_type,
            description=description,
            primary_entry_id=primary,
            secondary_entry_id=secondary,
            professor_id=professor_id,
            room_id=room_id,
            detected_at=datetime.now(timezone.utc),
            resolved=False,
        )
        self.db.add(record)
        self.db.flush()
        return record, True

    def get(self, conflict_id: str) -> ConflictRecord:
        record = self.db.get(ConflictRecord, conflict_id)
        if record is None:
            raise NotFoundError("Conflict", conflict_id)
        return record

    def resolve(self, conflict_id: str) -> ConflictRecord:
        record = self.get(conflict_id)
        if record.resolved:
            raise InvalidStateError(
                "Conflict is already resolved",
                details={"conflict_id": conflict_id, "resolved_at": record.resolved_at.isoformat() if record.resolved_at else None},
            )
        record.resolved = True
        record.resolved_at = datetime.now(timezone.utc)
        commit_or_raise(self.db, "resolve conflict")
        self.db.refresh(record)
        logger.info("Conflict %s (%s) resolved", record.id, record.conflict_type.value)
        return record

    def _query(
        self,
        *,
        conflict_type: ConflictType | None = None,
        resolved: bool | None = None,
        professor_id: str | None = None,
        room_id: str | None = None,
        period: str | None = None,
    ):
        query = select(ConflictRecord)
        if conflict_type is not None:
            query = query.where(ConflictRecord.conflict_type == conflict_type)
        if resolved is not None:
            query = query.where(ConflictRecord.resolved.is_(resolved))
        if professor_id:
            query = query.where(ConflictRecord.professor_id == professor_id)
        if room_id:
            query = query.where(ConflictRecord.room_id == room_id)
        if period:
            primary = aliased(ScheduleEntry)
            secondary = aliased(ScheduleEntry)
            query = (
                query.outerjoin(primary, primary.id == ConflictRecord.primary_entry_id)
                .outerjoin(secondary, secondary.id == ConflictRecord.secondary_entry_id)
                .where(
                    or_(
                        primary.academic_period == period,
                        and_(secondary.id.is_not(None), secondary.academic_period == period),
                    )
                )
            )
        return query.order_by(ConflictRecord.detected_at.desc(), ConflictRecord.id)

    def list(self, filters: ConflictFilters, page: PageRequest) -> Page:
        query = self._query(
            conflict_type=filters.conflict_type,
            resolved=filters.resolved,
            professor_id=filters.professor_id,
            room_id=filters.room_id,
            period=filters.academic_period,
        )
        return paginate(self.db, query, page)

    def unresolved(
        self,
        *,
        professor_id: str | None = None,
        room_id: str | None = None,
        period: str | None = None,
    ) -> list[ConflictRecord]:
        query = self._query(resolved=False, professor_id=professor_id, room_id=room_id, period=period)
        return list(self.db.execute(query).scalars())
