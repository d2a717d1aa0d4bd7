from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from campus_timetable.core.exceptions import (
    BulkScheduleError,
    ConflictError,
    InvalidStateError,
    InvalidTimeFormat,
    NotFoundError,
)
from campus_timetable.models.classroom import Classroom
from campus_timetable.models.schedule_entry import ScheduleEntry, Weekday
from campus_timetable.schemas.schedule import (
    BulkScheduleCreate,
    ScheduleEntryCreate,
    ScheduleEntryUpdate,
    ScheduleFilters,
)
from campus_timetable.services.academic_calendar import AcademicCalendar
from campus_timetable.services.booking_locks import BookingLockRegistry, booking_keys
from campus_timetable.services.classroom_registry import ClassroomRegistry
from campus_timetable.services.conflict_detector import ConflictCandidate, ConflictDetector, classify_pair
from campus_timetable.services.intervals import format_time, parse_time
from campus_timetable.services.pagination import Page, PageRequest
from campus_timetable.services.persistence import commit_or_raise
from campus_timetable.services.policy import SchedulingPolicy
from campus_timetable.services.providers import SubjectInfo, SubjectProvider, UserInfo, UserProvider
from campus_timetable.services.schedule_store import ScheduleStore

logger = logging.getLogger(__name__)

NON_NULLABLE_FIELDS = {"subject_id", "professor_id", "weekday", "start_time", "end_time", "academic_period", "active"}


class ScheduleService:
    """Validated writes to the schedule store.

    Every write checks references, time policy and double-bookings before
    anything is persisted, holding the booking locks for the affected
    (professor, weekday, period) and (room, weekday, period) keys until commit.
    """

    def __init__(
        self,
        db: Session,
        *,
        store: ScheduleStore,
        rooms: ClassroomRegistry,
        detector: ConflictDetector,
        subjects: SubjectProvider,
        users: UserProvider,
        calendar: AcademicCalendar,
        locks: BookingLockRegistry,
        policy: SchedulingPolicy,
    ) -> None:
        self.db = db
        self.store = store
        self.rooms = rooms
        self.detector = detector
        self.subjects = subjects
        self.users = users
        self.calendar = calendar
        self.locks = locks
        self.policy = policy

    # -- reference checks -------------------------------------------------

    def _require_subject(self, subject_id: str) -> SubjectInfo:
        subject = self.subjects.get_subject(subject_id)
        if subject is None:
            raise NotFoundError("Subject", subject_id)
        if not subject.active:
            raise InvalidStateError(f"Subject {subject.code} is not active", details={"subject_id": subject_id})
        return subject

    def _require_professor(self, professor_id: str) -> UserInfo:
        user = self.users.get_user(professor_id)
        if user is None or not user.is_professor:
            raise NotFoundError("Professor", professor_id)
        return user

    def _require_room(self, room_id: str) -> Classroom:
        room = self.rooms.get(room_id)
        if not room.available:
            raise InvalidStateError(f"Room {room.name} is not available", details={"room_id": room_id})
        return room

    def _require_teaching_period(self, period: str) -> None:
        if self.policy.require_teaching_period and not self.calendar.has_teaching_period(period):
            raise InvalidStateError(
                f"No active teaching period is registered for {period}",
                details={"academic_period": period},
            )

    # -- conflict checks --------------------------------------------------

    def _find_conflicts(
        self,
        professor_id: str,
        room_id: str | None,
        weekday: Weekday,
        start: int,
        end: int,
        period: str,
        exclude_id: str | None = None,
    ) -> tuple[list[ConflictCandidate], list[ConflictCandidate]]:
        professor_hits = self.detector.check_professor_conflicts(professor_id, weekday, start, end, period, exclude_id)
        room_hits = self.detector.check_room_conflicts(room_id, weekday, start, end, period, exclude_id)
        return professor_hits, room_hits

    def _raise_on_conflicts(self, professor_hits: list[ConflictCandidate], room_hits: list[ConflictCandidate]) -> None:
        for hits, label in ((professor_hits, "Professor"), (room_hits, "Room")):
            if not hits:
                continue
            first = hits[0]
            logger.info("Booking rejected: %s", first.description)
            raise ConflictError(
                f"{label} is already booked at this time: {first.description}",
                details={"conflicts": [hit.as_detail() for hit in hits]},
            )

    # -- reads ------------------------------------------------------------

    def get(self, entry_id: str) -> ScheduleEntry:
        return self.store.get(entry_id)

    def list(self, filters: ScheduleFilters, page: PageRequest) -> Page:
        return self.store.list(filters, page)

    # -- writes -----------------------------------------------------------

    def create(self, payload: ScheduleEntryCreate) -> ScheduleEntry:
        self._require_subject(payload.subject_id)
        self._require_professor(payload.professor_id)
        if payload.room_id:
            self._require_room(payload.room_id)

        start, end = parse_time(payload.start_time), parse_time(payload.end_time)
        self.policy.check_time_shape(start, end)
        self._require_teaching_period(payload.academic_period)

        keys = booking_keys(payload.professor_id, payload.room_id, payload.weekday, payload.academic_period)
        with self.locks.hold(self.db, keys):
            self._raise_on_conflicts(
                *self._find_conflicts(
                    payload.professor_id,
                    payload.room_id,
                    payload.weekday,
                    start,
                    end,
                    payload.academic_period,
                )
            )
            entry = self.store.add(
                ScheduleEntry(
                    subject_id=payload.subject_id,
                    professor_id=payload.professor_id,
                    room_id=payload.room_id or None,
                    weekday=payload.weekday,
                    start_minute=start,
                    end_minute=end,
                    academic_period=payload.academic_period,
                    expected_attendance=payload.expected_attendance,
                    active=True,
                )
            )
            commit_or_raise(self.db, "create schedule entry")

        self.db.refresh(entry)
        logger.info(
            "Schedule entry %s created: professor %s, subject %s, %s %s-%s (%s)",
            entry.id,
            entry.professor_id,
            entry.subject_id,
            entry.weekday.value,
            entry.start_time,
            entry.end_time,
            entry.academic_period,
        )
        return entry

    def update(self, entry_id: str, patch: ScheduleEntryUpdate) -> ScheduleEntry:
        entry = self.store.get(entry_id)
        changes = {
            key: value
            for key, value in patch.model_dump(exclude_unset=True).items()
            if value is not None or key not in NON_NULLABLE_FIELDS
        }

        subject_id = changes.get("subject_id", entry.subject_id)
        professor_id = changes.get("professor_id", entry.professor_id)
        room_id = changes.get("room_id", entry.room_id) or None
        weekday = changes.get("weekday", entry.weekday)
        period = changes.get("academic_period", entry.academic_period)
        active = changes.get("active", entry.active)
        start = parse_time(changes["start_time"]) if "start_time" in changes else entry.start_minute
        end = parse_time(changes["end_time"]) if "end_time" in changes else entry.end_minute

        if subject_id != entry.subject_id:
            self._require_subject(subject_id)
        self.policy.check_time_shape(start, end)

        keys = set()
        if active:
            # Inactive entries never collide; only an active result is re-checked.
            self._require_professor(professor_id)
            if room_id:
                self._require_room(room_id)
            keys = booking_keys(professor_id, room_id, weekday, period)

        with self.locks.hold(self.db, keys):
            if active:
                self._raise_on_conflicts(
                    *self._find_conflicts(professor_id, room_id, weekday, start, end, period, exclude_id=entry_id)
                )
            entry.subject_id = subject_id
            entry.professor_id = professor_id
            entry.room_id = room_id
            entry.weekday = weekday
            entry.start_minute = start
            entry.end_minute = end
            entry.academic_period = period
            entry.active = active
            if "expected_attendance" in changes:
                entry.expected_attendance = changes["expected_attendance"]
            commit_or_raise(self.db, "update schedule entry")

        self.db.refresh(entry)
        logger.info("Schedule entry %s updated: %s", entry_id, sorted(changes))
        return entry

    def delete(self, entry_id: str) -> None:
        # Conflict records that mention the entry stay in the ledger.
        entry = self.store.get(entry_id)
        professor_id, subject_id = entry.professor_id, entry.subject_id
        self.store.delete(entry)
        commit_or_raise(self.db, "delete schedule entry")
        logger.info("Schedule entry %s deleted (professor %s, subject %s)", entry_id, professor_id, subject_id)

    def create_bulk(self, payload: BulkScheduleCreate) -> list[ScheduleEntry]:
        """Create every slot or none.

        Each slot is checked against stored entries and against the other
        slots of the batch; all failures are reported together.
        """
        self._require_subject(payload.subject_id)
        self._require_professor(payload.professor_id)
        room_id = payload.room_id or None
        if room_id:
            self._require_room(room_id)
        self._require_teaching_period(payload.academic_period)

        failures: dict[int, dict] = {}

        def fail(index: int, *, reason: str | None = None, conflict: dict | None = None) -> None:
            slot = payload.slots[index]
            failure = failures.setdefault(
                index,
                {
                    "index": index,
                    "weekday": slot.weekday.value,
                    "start_time": slot.start_time,
                    "end_time": slot.end_time,
                    "reasons": [],
                    "conflicts": [],
                },
            )
            if reason is not None:
                failure["reasons"].append(reason)
            if conflict is not None:
                failure["conflicts"].append(conflict)

        candidates: dict[int, ScheduleEntry] = {}
        for index, slot in enumerate(payload.slots):
            try:
                start, end = parse_time(slot.start_time), parse_time(slot.end_time)
            except InvalidTimeFormat as exc:
                fail(index, reason=exc.message)
                continue
            shape_errors = self.policy.time_shape_errors(start, end)
            if shape_errors:
                for reason in shape_errors:
                    fail(index, reason=reason)
                continue
            candidates[index] = ScheduleEntry(
                subject_id=payload.subject_id,
                professor_id=payload.professor_id,
                room_id=room_id,
                weekday=slot.weekday,
                start_minute=start,
                end_minute=end,
                academic_period=payload.academic_period,
                expected_attendance=payload.expected_attendance,
                active=True,
            )

        keys = set()
        for candidate in candidates.values():
            keys |= booking_keys(payload.professor_id, room_id, candidate.weekday, payload.academic_period)

        with self.locks.hold(self.db, keys):
            for index, candidate in candidates.items():
                professor_hits, room_hits = self._find_conflicts(
                    payload.professor_id,
                    room_id,
                    candidate.weekday,
                    candidate.start_minute,
                    candidate.end_minute,
                    payload.academic_period,
                )
                for hit in professor_hits + room_hits:
                    fail(index, reason=hit.description, conflict=hit.as_detail())

            indexes = sorted(candidates)
            for position, first_index in enumerate(indexes):
                for second_index in indexes[position + 1:]:
                    first, second = candidates[first_index], candidates[second_index]
                    sides = ((first_index, second_index, second), (second_index, first_index, first))
                    for conflict_type in classify_pair(first, second):
                        for own, other_index, other in sides:
                            span = f"{other.weekday.value} {other.start_time}-{other.end_time}"
                            fail(
                                own,
                                reason=f"Overlaps slot {other_index} ({span}) in the same batch",
                                conflict={
                                    "conflict_type": conflict_type.value,
                                    "slot_index": other_index,
                                    "weekday": other.weekday.value,
                                    "start_time": format_time(other.start_minute),
                                    "end_time": format_time(other.end_minute),
                                },
                            )

            if failures:
                logger.info(
                    "Bulk schedule for professor %s rejected: %d of %d slot(s) failed",
                    payload.professor_id,
                    len(failures),
                    len(payload.slots),
                )
                raise BulkScheduleError([failures[index] for index in sorted(failures)])

            entries = self.store.add_all(candidates[index] for index in sorted(candidates))
            commit_or_raise(self.db, "bulk create schedule entries")

        for entry in entries:
            self.db.refresh(entry)
        logger.info(
            "Bulk schedule created %d entries for professor %s, subject %s (%s)",
            len(entries),
            payload.professor_id,
            payload.subject_id,
            payload.academic_period,
        )
        return entries
