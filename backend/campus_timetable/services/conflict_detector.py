from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
import logging

from campus_timetable.models.classroom import Classroom
from campus_timetable.models.conflict_record import ConflictRecord, ConflictType
from campus_timetable.models.schedule_entry import ScheduleEntry, Weekday
from campus_timetable.services.classroom_registry import ClassroomRegistry
from campus_timetable.services.conflict_ledger import ConflictLedger
from campus_timetable.services.intervals import format_time, overlaps
from campus_timetable.services.persistence import commit_or_raise
from campus_timetable.services.policy import SchedulingPolicy
from campus_timetable.services.providers import UserProvider
from campus_timetable.services.schedule_store import ScheduleStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConflictCandidate:
    conflict_type: ConflictType
    description: str
    entry_id: str
    professor_id: str
    room_id: str | None
    weekday: Weekday
    start: int
    end: int
    academic_period: str
    professor_name: str | None = None
    room_name: str | None = None

    def as_detail(self) -> dict:
        return {
            "conflict_type": self.conflict_type.value,
            "description": self.description,
            "entry_id": self.entry_id,
            "professor_id": self.professor_id,
            "professor_name": self.professor_name,
            "room_id": self.room_id,
            "room_name": self.room_name,
            "weekday": self.weekday.value,
            "start_time": format_time(self.start),
            "end_time": format_time(self.end),
            "academic_period": self.academic_period,
        }


def _span(entry: ScheduleEntry) -> str:
    return f"{entry.weekday.value} {format_time(entry.start_minute)}-{format_time(entry.end_minute)}"


def describe_conflict(
    conflict_type: ConflictType,
    first: ScheduleEntry,
    second: ScheduleEntry | None = None,
    *,
    professor_name: str | None = None,
    room: Classroom | None = None,
) -> str:
    room_label = room.name if room is not None else (first.room_id or "unassigned room")
    if conflict_type == ConflictType.professor_overlap:
        who = professor_name or first.professor_id
        return f"Professor {who} is booked twice: {_span(first)} overlaps {_span(second)}"
    if conflict_type == ConflictType.room_overlap:
        return f"Room {room_label} is booked twice: {_span(first)} overlaps {_span(second)}"
    if conflict_type == ConflictType.capacity_exceeded:
        capacity = room.capacity if room is not None else "?"
        return (
            f"Room {room_label} holds {capacity} but {_span(first)} "
            f"expects {first.expected_attendance} attendees"
        )
    if conflict_type == ConflictType.room_unavailable:
        return f"Room {room_label} is marked unavailable but still booked for {_span(first)}"
    raise ValueError(f"Unhandled conflict type: {conflict_type!r}")


def classify_pair(first: ScheduleEntry, second: ScheduleEntry) -> list[ConflictType]:
    """Conflict types between two entries, empty when they can coexist."""
    if first.weekday != second.weekday or first.academic_period != second.academic_period:
        return []
    if not overlaps(first.start_minute, first.end_minute, second.start_minute, second.end_minute):
        return []
    found: list[ConflictType] = []
    if first.professor_id == second.professor_id:
        found.append(ConflictType.professor_overlap)
    if first.room_id is not None and first.room_id == second.room_id:
        found.append(ConflictType.room_overlap)
    return found


def classify_single(entry: ScheduleEntry, room: Classroom | None) -> list[ConflictType]:
    if entry.room_id is None or room is None:
        return []
    found: list[ConflictType] = []
    if not room.available:
        found.append(ConflictType.room_unavailable)
    if entry.expected_attendance is not None and entry.expected_attendance > room.capacity:
        found.append(ConflictType.capacity_exceeded)
    return found


class ConflictDetector:
    def __init__(
        self,
        store: ScheduleStore,
        rooms: ClassroomRegistry,
        users: UserProvider,
        ledger: ConflictLedger,
        policy: SchedulingPolicy | None = None,
    ) -> None:
        self.store = store
        self.rooms = rooms
        self.users = users
        self.ledger = ledger
        self.policy = policy or SchedulingPolicy.from_settings()

    def _candidates(self, conflict_type: ConflictType, entries: list[ScheduleEntry]) -> list[ConflictCandidate]:
        professors = self.users.get_users(entry.professor_id for entry in entries)
        rooms = self.rooms.get_many(entry.room_id for entry in entries)
        candidates: list[ConflictCandidate] = []
        for entry in entries:
            professor = professors.get(entry.professor_id)
            room = rooms.get(entry.room_id) if entry.room_id else None
            if conflict_type == ConflictType.professor_overlap:
                description = (
                    f"Professor {professor.name if professor else entry.professor_id} "
                    f"already teaches {_span(entry)}"
                )
            else:
                description = f"Room {room.name if room else entry.room_id} is already booked {_span(entry)}"
            candidates.append(
                ConflictCandidate(
                    conflict_type=conflict_type,
                    description=description,
                    entry_id=entry.id,
                    professor_id=entry.professor_id,
                    room_id=entry.room_id,
                    weekday=entry.weekday,
                    start=entry.start_minute,
                    end=entry.end_minute,
                    academic_period=entry.academic_period,
                    professor_name=professor.name if professor else None,
                    room_name=room.name if room else None,
                )
            )
        return candidates

    def check_professor_conflicts(
        self,
        professor_id: str,
        weekday: Weekday,
        start: int,
        end: int,
        period: str,
        exclude_id: str | None = None,
    ) -> list[ConflictCandidate]:
        entries = self.store.find_overlapping(
            professor_id=professor_id,
            weekday=weekday,
            period=period,
            start=start,
            end=end,
            exclude_id=exclude_id,
        )
        return self._candidates(ConflictType.professor_overlap, entries)

    def check_room_conflicts(
        self,
        room_id: str | None,
        weekday: Weekday,
        start: int,
        end: int,
        period: str,
        exclude_id: str | None = None,
    ) -> list[ConflictCandidate]:
        if room_id is None:
            return []
        entries = self.store.find_overlapping(
            room_id=room_id,
            weekday=weekday,
            period=period,
            start=start,
            end=end,
            exclude_id=exclude_id,
        )
        return self._candidates(ConflictType.room_overlap, entries)

    def sweep_period(self, period: str) -> tuple[list[ConflictRecord], int, int]:
        """Scan every active entry of ``period`` and log each collision.

        Returns ``(records, entries_scanned, created)``. With deduplication on,
        a collision that already has an unresolved record reuses it.
        """
        entries = self.store.active_entries(period=period)
        rooms = self.rooms.get_many(entry.room_id for entry in entries)
        professors = self.users.get_users(entry.professor_id for entry in entries)
        dedupe = self.policy.sweep_deduplicate

        records: list[ConflictRecord] = []
        seen: set[str] = set()
        created = 0

        def keep(record: ConflictRecord, is_new: bool) -> None:
            nonlocal created
            created += int(is_new)
            if record.id not in seen:
                seen.add(record.id)
                records.append(record)

        by_day: dict[Weekday, list[ScheduleEntry]] = defaultdict(list)
        for entry in entries:
            by_day[entry.weekday].append(entry)

        for day_entries in by_day.values():
            for i, first in enumerate(day_entries):
                for second in day_entries[i + 1:]:
                    for conflict_type in classify_pair(first, second):
                        professor = professors.get(first.professor_id)
                        room = rooms.get(first.room_id) if first.room_id else None
                        description = describe_conflict(
                            conflict_type,
                            first,
                            second,
                            professor_name=professor.name if professor else None,
                            room=room,
                        )
                        is_professor = conflict_type == ConflictType.professor_overlap
                        keep(
                            *self.ledger.record(
                                conflict_type=conflict_type,
                                description=description,
                                primary_entry_id=first.id,
                                secondary_entry_id=second.id,
                                professor_id=first.professor_id if is_professor else None,
                                room_id=None if is_professor else first.room_id,
                                deduplicate=dedupe,
                            )
                        )

        for entry in entries:
            room = rooms.get(entry.room_id) if entry.room_id else None
            for conflict_type in classify_single(entry, room):
                keep(
                    *self.ledger.record(
                        conflict_type=conflict_type,
                        description=describe_conflict(conflict_type, entry, room=room),
                        primary_entry_id=entry.id,
                        room_id=entry.room_id,
                        deduplicate=dedupe,
                    )
                )

        commit_or_raise(self.ledger.db, "conflict sweep")
        logger.info(
            "Conflict sweep for %s: %d entries scanned, %d conflicts (%d new)",
            period,
            len(entries),
            len(records),
            created,
        )
        return records, len(entries), created
