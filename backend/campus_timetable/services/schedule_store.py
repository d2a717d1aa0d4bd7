from __future__ import annotations

import logging
from typing import Iterable

from sqlalchemy import case, func, or_, select
from sqlalchemy.orm import Session
from sqlalchemy.sql import Select

from campus_timetable.core.exceptions import NotFoundError
from campus_timetable.models.classroom import Classroom
from campus_timetable.models.schedule_entry import WEEKDAY_ORDER, ScheduleEntry, Weekday
from campus_timetable.models.subject import Subject
from campus_timetable.models.user import User
from campus_timetable.schemas.schedule import ScheduleFilters
from campus_timetable.services.intervals import parse_time
from campus_timetable.services.pagination import Page, PageRequest, paginate

logger = logging.getLogger(__name__)

# Enum columns sort by label; the week has to sort SUN..SAT.
WEEKDAY_POSITION = case({day: day.position for day in WEEKDAY_ORDER}, value=ScheduleEntry.weekday)


def ordered(query: Select) -> Select:
    return query.order_by(WEEKDAY_POSITION, ScheduleEntry.start_minute, ScheduleEntry.id)


class ScheduleStore:
    def __init__(self, db: Session) -> None:
        self.db = db

    def add(self, entry: ScheduleEntry) -> ScheduleEntry:
        self.db.add(entry)
        self.db.flush()
        return entry

    def add_all(self, entries: Iterable[ScheduleEntry]) -> list[ScheduleEntry]:
        items = list(entries)
        self.db.add_all(items)
        self.db.flush()
        return items

    def find(self, entry_id: str) -> ScheduleEntry | None:
        return self.db.get(ScheduleEntry, entry_id)

    def get(self, entry_id: str) -> ScheduleEntry:
        entry = self.find(entry_id)
        if entry is None:
            raise NotFoundError("Schedule entry", entry_id)
        return entry

    def get_many(self, entry_ids: Iterable[str | None]) -> dict[str, ScheduleEntry]:
        ids = {item for item in entry_ids if item}
        if not ids:
            return {}
        rows = self.db.execute(select(ScheduleEntry).where(ScheduleEntry.id.in_(ids))).scalars()
        return {row.id: row for row in rows}

    def delete(self, entry: ScheduleEntry) -> None:
        self.db.delete(entry)
        self.db.flush()

    def find_overlapping(
        self,
        *,
        weekday: Weekday,
        period: str,
        start: int,
        end: int,
        professor_id: str | None = None,
        room_id: str | None = None,
        exclude_id: str | None = None,
    ) -> list[ScheduleEntry]:
        """Active entries on the same weekday/period whose range intersects ``[start, end)``."""
        if professor_id is None and room_id is None:
            raise ValueError("find_overlapping needs a professor_id or a room_id")

        query = select(ScheduleEntry).where(
            ScheduleEntry.active.is_(True),
            ScheduleEntry.weekday == weekday,
            ScheduleEntry.academic_period == period,
            ScheduleEntry.start_minute < end,
            ScheduleEntry.end_minute > start,
        )
        if professor_id is not None:
            query = query.where(ScheduleEntry.professor_id == professor_id)
        if room_id is not None:
            query = query.where(ScheduleEntry.room_id == room_id)
        if exclude_id is not None:
            query = query.where(ScheduleEntry.id != exclude_id)
        return list(self.db.execute(ordered(query)).scalars())

    def active_entries(
        self,
        *,
        period: str | None = None,
        professor_id: str | None = None,
        room_id: str | None = None,
        weekday: Weekday | None = None,
    ) -> list[ScheduleEntry]:
        query = select(ScheduleEntry).where(ScheduleEntry.active.is_(True))
        if period is not None:
            query = query.where(ScheduleEntry.academic_period == period)
        if professor_id is not None:
            query = query.where(ScheduleEntry.professor_id == professor_id)
        if room_id is not None:
            query = query.where(ScheduleEntry.room_id == room_id)
        if weekday is not None:
            query = query.where(ScheduleEntry.weekday == weekday)
        return list(self.db.execute(ordered(query)).scalars())

    def list(self, filters: ScheduleFilters, page: PageRequest) -> Page:
        query = select(ScheduleEntry)
        if filters.subject_id:
            query = query.where(ScheduleEntry.subject_id == filters.subject_id)
        if filters.professor_id:
            query = query.where(ScheduleEntry.professor_id == filters.professor_id)
        if filters.room_id:
            query = query.where(ScheduleEntry.room_id == filters.room_id)
        if filters.weekday is not None:
            query = query.where(ScheduleEntry.weekday == filters.weekday)
        if filters.academic_period:
            query = query.where(ScheduleEntry.academic_period == filters.academic_period)
        if filters.active is not None:
            query = query.where(ScheduleEntry.active.is_(filters.active))
        if filters.start_from:
            query = query.where(ScheduleEntry.start_minute >= parse_time(filters.start_from))
        if filters.end_until:
            query = query.where(ScheduleEntry.end_minute <= parse_time(filters.end_until))
        if filters.search:
            pattern = f"%{filters.search.strip().lower()}%"
            query = (
                query.outerjoin(Subject, Subject.id == ScheduleEntry.subject_id)
                .outerjoin(User, User.id == ScheduleEntry.professor_id)
                .outerjoin(Classroom, Classroom.id == ScheduleEntry.room_id)
                .where(
                    or_(
                        func.lower(Subject.name).like(pattern),
                        func.lower(Subject.code).like(pattern),
                        func.lower(User.name).like(pattern),
                        func.lower(Classroom.name).like(pattern),
                    )
                )
            )
        return paginate(self.db, ordered(query), page)
