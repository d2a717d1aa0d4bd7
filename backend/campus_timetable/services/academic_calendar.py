from __future__ import annotations

from datetime import date
import logging

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from campus_timetable.core.exceptions import ConflictError, InvalidArgumentError, NotFoundError
from campus_timetable.models.calendar_event import AcademicCalendarEvent, EventType
from campus_timetable.schemas.calendar import CalendarEventCreate, CalendarEventUpdate, CalendarFilters
from campus_timetable.services.pagination import Page, PageRequest, paginate
from campus_timetable.services.persistence import commit_or_raise

logger = logging.getLogger(__name__)

# Event types that close rooms for teaching on the dates they cover.
BLOCKING_EVENT_TYPES = frozenset({EventType.holiday, EventType.break_, EventType.maintenance})


class AcademicCalendar:
    def __init__(self, db: Session) -> None:
        self.db = db

    def _overlapping(
        self,
        *,
        event_type: EventType,
        period: str,
        start_date: date,
        end_date: date,
        exclude_id: str | None = None,
    ) -> list[AcademicCalendarEvent]:
        # Date ranges are inclusive on both ends.
        query = select(AcademicCalendarEvent).where(
            AcademicCalendarEvent.event_type == event_type,
            AcademicCalendarEvent.academic_period == period,
            AcademicCalendarEvent.active.is_(True),
            AcademicCalendarEvent.start_date <= end_date,
            AcademicCalendarEvent.end_date >= start_date,
        )
        if exclude_id is not None:
            query = query.where(AcademicCalendarEvent.id != exclude_id)
        return list(self.db.execute(query).scalars())

    def _reject_overlap(self, **kwargs) -> None:
        clashes = self._overlapping(**kwargs)
        if clashes:
            raise ConflictError(
                f"Event overlaps {clashes[0].name}",
                details={"event_ids": [item.id for item in clashes]},
            )

    def create(self, payload: CalendarEventCreate) -> AcademicCalendarEvent:
        self._reject_overlap(
            event_type=payload.event_type,
            period=payload.academic_period,
            start_date=payload.start_date,
            end_date=payload.end_date,
        )
        event = AcademicCalendarEvent(**payload.model_dump())
        self.db.add(event)
        commit_or_raise(self.db, "create calendar event")
        self.db.refresh(event)
        logger.info("Calendar event %s created (%s, %s)", event.id, event.event_type.value, event.academic_period)
        return event

    def get(self, event_id: str) -> AcademicCalendarEvent:
        event = self.db.get(AcademicCalendarEvent, event_id)
        if event is None:
            raise NotFoundError("Calendar event", event_id)
        return event

    def list(self, filters: CalendarFilters, page: PageRequest) -> Page:
        query = select(AcademicCalendarEvent)
        if filters.academic_period:
            query = query.where(AcademicCalendarEvent.academic_period == filters.academic_period)
        if filters.event_type is not None:
            query = query.where(AcademicCalendarEvent.event_type == filters.event_type)
        if filters.active is not None:
            query = query.where(AcademicCalendarEvent.active.is_(filters.active))
        if filters.date_from is not None:
            query = query.where(AcademicCalendarEvent.end_date >= filters.date_from)
        if filters.date_until is not None:
            query = query.where(AcademicCalendarEvent.start_date <= filters.date_until)
        if filters.search:
            pattern = f"%{filters.search.strip().lower()}%"
            query = query.where(
                or_(
                    func.lower(AcademicCalendarEvent.name).like(pattern),
                    func.lower(func.coalesce(AcademicCalendarEvent.description, "")).like(pattern),
                )
            )
        query = query.order_by(AcademicCalendarEvent.start_date, AcademicCalendarEvent.id)
        return paginate(self.db, query, page)

    def update(self, event_id: str, payload: CalendarEventUpdate) -> AcademicCalendarEvent:
        event = self.get(event_id)
        data = {
            key: value
            for key, value in payload.model_dump(exclude_unset=True).items()
            if value is not None or key == "description"
        }

        start_date = data.get("start_date", event.start_date)
        end_date = data.get("end_date", event.end_date)
        if end_date < start_date:
            raise InvalidArgumentError("end_date must not be before start_date")

        if data.get("active", event.active):
            self._reject_overlap(
                event_type=data.get("event_type", event.event_type),
                period=data.get("academic_period", event.academic_period),
                start_date=start_date,
                end_date=end_date,
                exclude_id=event_id,
            )

        for key, value in data.items():
            setattr(event, key, value)
        commit_or_raise(self.db, "update calendar event")
        self.db.refresh(event)
        logger.info("Calendar event %s updated: %s", event_id, sorted(data))
        return event

    def delete(self, event_id: str) -> None:
        event = self.get(event_id)
        self.db.delete(event)
        commit_or_raise(self.db, "delete calendar event")
        logger.info("Calendar event %s deleted", event_id)

    def has_teaching_period(self, period: str) -> bool:
        query = select(AcademicCalendarEvent.id).where(
            AcademicCalendarEvent.event_type == EventType.teaching_period,
            AcademicCalendarEvent.academic_period == period,
            AcademicCalendarEvent.active.is_(True),
        )
        return self.db.execute(query.limit(1)).first() is not None

    def blocking_events(self, period: str, on: date) -> list[AcademicCalendarEvent]:
        query = select(AcademicCalendarEvent).where(
            AcademicCalendarEvent.academic_period == period,
            AcademicCalendarEvent.active.is_(True),
            AcademicCalendarEvent.event_type.in_(BLOCKING_EVENT_TYPES),
            AcademicCalendarEvent.start_date <= on,
            AcademicCalendarEvent.end_date >= on,
        )
        return list(self.db.execute(query.order_by(AcademicCalendarEvent.start_date)).scalars())
