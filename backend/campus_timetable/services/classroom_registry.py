from __future__ import annotations

import logging
from typing import Iterable

from sqlalchemy import func, or_, select, update
from sqlalchemy.orm import Session

from campus_timetable.core.exceptions import ConflictError, NotFoundError
from campus_timetable.models.classroom import Classroom
from campus_timetable.models.schedule_entry import ScheduleEntry
from campus_timetable.schemas.classroom import ClassroomCreate, ClassroomFilters, ClassroomUpdate
from campus_timetable.services.pagination import Page, PageRequest, paginate
from campus_timetable.services.persistence import commit_or_raise

logger = logging.getLogger(__name__)


def _duplicate_name(name: str) -> ConflictError:
    return ConflictError("Room name already exists", details={"name": name})


class ClassroomRegistry:
    """Bookable rooms. Holds no scheduling logic of its own."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def _ensure_unique_name(self, name: str, exclude_id: str | None = None) -> None:
        query = select(Classroom.id).where(Classroom.name == name)
        if exclude_id is not None:
            query = query.where(Classroom.id != exclude_id)
        if self.db.execute(query).first() is not None:
            raise _duplicate_name(name)

    def create(self, payload: ClassroomCreate) -> Classroom:
        self._ensure_unique_name(payload.name)
        room = Classroom(**payload.model_dump())
        self.db.add(room)
        # The unique index still rejects a concurrent insert of the same name.
        commit_or_raise(self.db, "create room", on_integrity_error=_duplicate_name(room.name))
        self.db.refresh(room)
        logger.info("Room %s created (%s, capacity %d)", room.id, room.name, room.capacity)
        return room

    def list(self, filters: ClassroomFilters, page: PageRequest) -> Page:
        query = select(Classroom)
        if filters.room_type is not None:
            query = query.where(Classroom.room_type == filters.room_type)
        if filters.min_capacity is not None:
            query = query.where(Classroom.capacity >= filters.min_capacity)
        if filters.available is not None:
            query = query.where(Classroom.available.is_(filters.available))
        if filters.search:
            pattern = f"%{filters.search.strip().lower()}%"
            query = query.where(
                or_(
                    func.lower(Classroom.name).like(pattern),
                    func.lower(func.coalesce(Classroom.location, "")).like(pattern),
                )
            )
        query = query.order_by(Classroom.name.asc(), Classroom.id.asc())
        return paginate(self.db, query, page)

    def get(self, room_id: str) -> Classroom:
        room = self.db.get(Classroom, room_id)
        if room is None:
            raise NotFoundError("Room", room_id)
        return room

    def find(self, room_id: str) -> Classroom | None:
        return self.db.get(Classroom, room_id)

    def get_many(self, room_ids: Iterable[str | None]) -> dict[str, Classroom]:
        ids = {item for item in room_ids if item}
        if not ids:
            return {}
        rows = self.db.execute(select(Classroom).where(Classroom.id.in_(ids))).scalars()
        return {row.id: row for row in rows}

    def update(self, room_id: str, payload: ClassroomUpdate) -> Classroom:
        room = self.get(room_id)
        data = payload.model_dump(exclude_unset=True)
        if data.get("name") is not None and data["name"] != room.name:
            self._ensure_unique_name(data["name"], exclude_id=room_id)

        for key, value in data.items():
            if value is None and key in {"name", "capacity", "room_type", "equipment", "available"}:
                continue
            setattr(room, key, value)
        commit_or_raise(self.db, "update room", on_integrity_error=_duplicate_name(room.name))
        self.db.refresh(room)
        logger.info("Room %s updated: %s", room_id, sorted(data))
        return room

    def active_entry_count(self, room_id: str) -> int:
        return self.db.execute(
            select(func.count())
            .select_from(ScheduleEntry)
            .where(ScheduleEntry.room_id == room_id, ScheduleEntry.active.is_(True))
        ).scalar_one()

    def delete(self, room_id: str) -> None:
        room = self.get(room_id)
        in_use = self.active_entry_count(room_id)
        if in_use:
            raise ConflictError(
                f"Room {room.name} cannot be deleted: {in_use} active schedule entr{'y' if in_use == 1 else 'ies'} use it",
                details={"room_id": room_id, "active_entries": in_use},
            )
        # Inactive entries keep their history without the room.
        self.db.execute(update(ScheduleEntry).where(ScheduleEntry.room_id == room_id).values(room_id=None))
        self.db.delete(room)
        commit_or_raise(self.db, "delete room")
        logger.info("Room %s (%s) deleted", room_id, room.name)
