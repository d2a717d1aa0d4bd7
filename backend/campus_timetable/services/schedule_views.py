from __future__ import annotations

from collections import OrderedDict
from datetime import date

from campus_timetable.core.exceptions import NotFoundError
from campus_timetable.models.schedule_entry import WEEKDAY_ORDER, ScheduleEntry, Weekday
from campus_timetable.schemas.classroom import ClassroomOut
from campus_timetable.schemas.conflict import ConflictRecordOut
from campus_timetable.schemas.schedule import ScheduleEntryOut
from campus_timetable.schemas.views import (
    AvailabilitySlotOut,
    DayScheduleOut,
    FreeWindowOut,
    GridSlotOut,
    ProfessorAgendaOut,
    ProfessorRef,
    RoomAvailabilityOut,
    RoomOccupancyOut,
    SubjectLoadOut,
    WeeklyGridOut,
)
from campus_timetable.services.academic_calendar import AcademicCalendar
from campus_timetable.services.classroom_registry import ClassroomRegistry
from campus_timetable.services.conflict_ledger import ConflictLedger
from campus_timetable.services.intervals import format_time, free_gaps
from campus_timetable.services.policy import SchedulingPolicy
from campus_timetable.services.providers import SubjectProvider, UserProvider
from campus_timetable.services.schedule_store import ScheduleStore


def _hours(minutes: int) -> float:
    return round(minutes / 60, 2)


class ScheduleViews:
    """Read-side projections over the schedule store and the conflict ledger."""

    def __init__(
        self,
        *,
        store: ScheduleStore,
        rooms: ClassroomRegistry,
        ledger: ConflictLedger,
        subjects: SubjectProvider,
        users: UserProvider,
        calendar: AcademicCalendar,
        policy: SchedulingPolicy,
    ) -> None:
        self.store = store
        self.rooms = rooms
        self.ledger = ledger
        self.subjects = subjects
        self.users = users
        self.calendar = calendar
        self.policy = policy

    @property
    def operating_weekdays(self) -> list[Weekday]:
        # Operating days run from Monday onward.
        days = max(0, min(7, self.policy.occupancy_days_per_week))
        return [WEEKDAY_ORDER[(1 + offset) % 7] for offset in range(days)]

    def weekly_grid(
        self,
        professor_id: str | None = None,
        room_id: str | None = None,
        period: str | None = None,
    ) -> WeeklyGridOut:
        entries = self.store.active_entries(period=period, professor_id=professor_id, room_id=room_id)
        by_day: dict[Weekday, list[GridSlotOut]] = {day: [] for day in WEEKDAY_ORDER}
        for entry in entries:
            by_day[entry.weekday].append(
                GridSlotOut(
                    start_time=entry.start_time,
                    end_time=entry.end_time,
                    available=False,
                    entry=ScheduleEntryOut.model_validate(entry),
                )
            )
        return WeeklyGridOut(
            academic_period=period,
            professor_id=professor_id,
            room_id=room_id,
            days=[DayScheduleOut(weekday=day, slots=by_day[day]) for day in WEEKDAY_ORDER],
        )

    def professor_agenda(self, professor_id: str, period: str) -> ProfessorAgendaOut:
        professor = self.users.get_user(professor_id)
        if professor is None or not professor.is_professor:
            raise NotFoundError("Professor", professor_id)

        entries = self.store.active_entries(period=period, professor_id=professor_id)
        subjects = self.subjects.get_subjects(entry.subject_id for entry in entries)

        grouped: OrderedDict[str, list[ScheduleEntry]] = OrderedDict()
        for entry in entries:
            grouped.setdefault(entry.subject_id, []).append(entry)

        loads: list[SubjectLoadOut] = []
        total_minutes = 0
        for subject_id, subject_entries in grouped.items():
            minutes = sum(entry.duration_minutes for entry in subject_entries)
            total_minutes += minutes
            info = subjects.get(subject_id)
            loads.append(
                SubjectLoadOut(
                    subject_id=subject_id,
                    subject_code=info.code if info else None,
                    subject_name=info.name if info else None,
                    weekly_hours=_hours(minutes),
                    entries=[ScheduleEntryOut.model_validate(entry) for entry in subject_entries],
                )
            )

        conflicts = self.ledger.unresolved(professor_id=professor_id, period=period)
        return ProfessorAgendaOut(
            professor=ProfessorRef(id=professor.id, name=professor.name),
            academic_period=period,
            total_hours=_hours(total_minutes),
            subjects=loads,
            conflicts=[ConflictRecordOut.model_validate(record) for record in conflicts],
            weekly_grid=self.weekly_grid(professor_id=professor_id, period=period),
        )

    def room_occupancy(self, room_id: str, period: str) -> RoomOccupancyOut:
        room = self.rooms.get(room_id)
        entries = self.store.active_entries(period=period, room_id=room_id)

        occupied_minutes = sum(entry.duration_minutes for entry in entries)
        operating_hours = self.policy.weekly_operating_hours
        ratio = round(occupied_minutes / 60 / operating_hours, 4) if operating_hours else 0.0

        free_windows: list[FreeWindowOut] = []
        for day in self.operating_weekdays:
            busy = [(entry.start_minute, entry.end_minute) for entry in entries if entry.weekday == day]
            for start, end in free_gaps(busy, self.policy.day_start, self.policy.day_end):
                free_windows.append(FreeWindowOut(weekday=day, start_time=format_time(start), end_time=format_time(end)))

        conflicts = self.ledger.unresolved(room_id=room_id, period=period)
        return RoomOccupancyOut(
            room=ClassroomOut.model_validate(room),
            academic_period=period,
            occupied_hours=_hours(occupied_minutes),
            operating_hours=float(operating_hours),
            occupancy_ratio=ratio,
            entries=[ScheduleEntryOut.model_validate(entry) for entry in entries],
            free_windows=free_windows,
            conflicts=[ConflictRecordOut.model_validate(record) for record in conflicts],
        )

    def room_availability(self, room_id: str, on: date, period: str) -> RoomAvailabilityOut:
        room = self.rooms.get(room_id)
        weekday = Weekday.from_date(on)
        day_start, day_end = self.policy.day_start, self.policy.day_end

        def closed(reason: str) -> RoomAvailabilityOut:
            return RoomAvailabilityOut(
                room=ClassroomOut.model_validate(room),
                academic_period=period,
                date=on,
                weekday=weekday,
                slots=[
                    AvailabilitySlotOut(
                        start_time=format_time(day_start),
                        end_time=format_time(day_end),
                        available=False,
                        reason=reason,
                    )
                ],
            )

        if not room.available:
            return closed(f"Room {room.name} is marked unavailable")
        blocking = self.calendar.blocking_events(period, on)
        if blocking:
            event = blocking[0]
            return closed(f"{event.event_type.value.replace('_', ' ').capitalize()}: {event.name}")

        entries = self.store.active_entries(period=period, room_id=room_id, weekday=weekday)
        subjects = self.subjects.get_subjects(entry.subject_id for entry in entries)

        slots: list[AvailabilitySlotOut] = []
        cursor = day_start
        for entry in entries:
            start = max(entry.start_minute, cursor)
            if start > cursor:
                slots.append(
                    AvailabilitySlotOut(start_time=format_time(cursor), end_time=format_time(start), available=True)
                )
            if entry.end_minute > start:
                subject = subjects.get(entry.subject_id)
                label = f"{subject.code} - {subject.name}" if subject else entry.subject_id
                slots.append(
                    AvailabilitySlotOut(
                        start_time=format_time(start),
                        end_time=format_time(entry.end_minute),
                        available=False,
                        reason=f"Booked for {label}",
                        entry_id=entry.id,
                    )
                )
            cursor = max(cursor, entry.end_minute)
        if cursor < day_end:
            slots.append(AvailabilitySlotOut(start_time=format_time(cursor), end_time=format_time(day_end), available=True))

        return RoomAvailabilityOut(
            room=ClassroomOut.model_validate(room),
            academic_period=period,
            date=on,
            weekday=weekday,
            slots=slots,
        )
