from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.orm import Session

from campus_timetable.services.academic_calendar import AcademicCalendar
from campus_timetable.services.booking_locks import BookingLockRegistry, get_booking_locks
from campus_timetable.services.classroom_registry import ClassroomRegistry
from campus_timetable.services.conflict_detector import ConflictDetector
from campus_timetable.services.conflict_ledger import ConflictLedger
from campus_timetable.services.policy import SchedulingPolicy
from campus_timetable.services.providers import SqlSubjectProvider, SqlUserProvider, SubjectProvider, UserProvider
from campus_timetable.services.schedule_service import ScheduleService
from campus_timetable.services.schedule_store import ScheduleStore
from campus_timetable.services.schedule_views import ScheduleViews


@dataclass
class Services:
    rooms: ClassroomRegistry
    store: ScheduleStore
    ledger: ConflictLedger
    calendar: AcademicCalendar
    detector: ConflictDetector
    schedules: ScheduleService
    views: ScheduleViews


def build_services(
    db: Session,
    *,
    policy: SchedulingPolicy | None = None,
    locks: BookingLockRegistry | None = None,
    subjects: SubjectProvider | None = None,
    users: UserProvider | None = None,
) -> Services:
    """Wire every scheduling component around one session."""
    policy = policy or SchedulingPolicy.from_settings()
    locks = locks or get_booking_locks()
    subjects = subjects or SqlSubjectProvider(db)
    users = users or SqlUserProvider(db)

    rooms = ClassroomRegistry(db)
    store = ScheduleStore(db)
    ledger = ConflictLedger(db)
    calendar = AcademicCalendar(db)
    detector = ConflictDetector(store, rooms, users, ledger, policy)
    schedules = ScheduleService(
        db,
        store=store,
        rooms=rooms,
        detector=detector,
        subjects=subjects,
        users=users,
        calendar=calendar,
        locks=locks,
        policy=policy,
    )
    views = ScheduleViews(
        store=store,
        rooms=rooms,
        ledger=ledger,
        subjects=subjects,
        users=users,
        calendar=calendar,
        policy=policy,
    )
    return Services(
        rooms=rooms,
        store=store,
        ledger=ledger,
        calendar=calendar,
        detector=detector,
        schedules=schedules,
        views=views,
    )
