"""Seed demo reference data and a sample timetable.

Run:
  PYTHONPATH=backend python scripts/seed_demo_data.py
"""

from __future__ import annotations

from datetime import date
import os

from sqlalchemy import func, select

from campus_timetable.core.exceptions import AppError
from campus_timetable.db.bootstrap import ensure_schema
from campus_timetable.db.session import SessionLocal, engine
from campus_timetable.models import (
    AcademicCalendarEvent,
    Classroom,
    EventType,
    RoomType,
    ScheduleEntry,
    Subject,
    SubjectStatus,
    User,
    UserRole,
    Weekday,
)
from campus_timetable.schemas.schedule import BulkScheduleCreate, TimeSlotIn
from campus_timetable.services.wiring import build_services

ACADEMIC_PERIOD = os.getenv("SEED_ACADEMIC_PERIOD", "2026.1").strip() or "2026.1"
EMAIL_DOMAIN = os.getenv("SEED_EMAIL_DOMAIN", "university.edu").strip().lower() or "university.edu"

PROFESSORS = ["Ada Lovelace", "Alan Turing", "Grace Hopper", "Edsger Dijkstra"]

SUBJECTS = [
    ("CS101", "Introduction to Programming"),
    ("CS201", "Data Structures"),
    ("CS305", "Operating Systems"),
    ("MA110", "Discrete Mathematics"),
]

ROOMS = [
    ("A101", 60, RoomType.ordinary, ["projector"]),
    ("A102", 60, RoomType.ordinary, ["projector"]),
    ("LAB-1", 30, RoomType.lab, ["workstations", "projector"]),
    ("AUD-1", 250, RoomType.auditorium, ["sound system", "projector"]),
]

# (subject code, professor index, room name, slots)
TIMETABLE = [
    ("CS101", 0, "AUD-1", [(Weekday.MON, "08:00", "10:00"), (Weekday.WED, "08:00", "10:00")]),
    ("CS201", 1, "A101", [(Weekday.TUE, "10:00", "12:00"), (Weekday.THU, "10:00", "12:00")]),
    ("CS305", 2, "LAB-1", [(Weekday.MON, "14:00", "17:00")]),
    ("MA110", 3, "A102", [(Weekday.FRI, "09:00", "11:00")]),
]


def email_for(name: str) -> str:
    return f"{name.lower().replace(' ', '.')}@{EMAIL_DOMAIN}"


def upsert_professor(session, name: str) -> User:
    email = email_for(name)
    user = session.execute(select(User).where(func.lower(User.email) == email)).scalar_one_or_none()
    if user is None:
        user = User(name=name, email=email, role=UserRole.professor, is_active=True)
        session.add(user)
    else:
        user.name = name
        user.role = UserRole.professor
        user.is_active = True
    session.flush()
    return user


def upsert_subject(session, code: str, name: str) -> Subject:
    subject = session.execute(select(Subject).where(Subject.code == code)).scalar_one_or_none()
    if subject is None:
        subject = Subject(code=code, name=name, status=SubjectStatus.active)
        session.add(subject)
    else:
        subject.name = name
        subject.status = SubjectStatus.active
    session.flush()
    return subject


def upsert_room(session, name: str, capacity: int, room_type: RoomType, equipment: list[str]) -> Classroom:
    room = session.execute(select(Classroom).where(Classroom.name == name)).scalar_one_or_none()
    if room is None:
        room = Classroom(name=name, capacity=capacity, room_type=room_type, equipment=equipment, available=True)
        session.add(room)
    else:
        room.capacity = capacity
        room.room_type = room_type
        room.equipment = equipment
    session.flush()
    return room


def upsert_teaching_period(session) -> None:
    existing = session.execute(
        select(AcademicCalendarEvent).where(
            AcademicCalendarEvent.academic_period == ACADEMIC_PERIOD,
            AcademicCalendarEvent.event_type == EventType.teaching_period,
        )
    ).scalar_one_or_none()
    if existing is None:
        year = int(ACADEMIC_PERIOD.split(".")[0])
        session.add(
            AcademicCalendarEvent(
                name=f"Teaching period {ACADEMIC_PERIOD}",
                start_date=date(year, 2, 16),
                end_date=date(year, 6, 30),
                academic_period=ACADEMIC_PERIOD,
                event_type=EventType.teaching_period,
                active=True,
            )
        )
        session.flush()


def seed_timetable(session, professors: list[User], subjects: dict[str, Subject], rooms: dict[str, Classroom]) -> int:
    services = build_services(session)
    created = 0
    for code, professor_index, room_name, slots in TIMETABLE:
        already = session.execute(
            select(func.count(ScheduleEntry.id)).where(
                ScheduleEntry.subject_id == subjects[code].id,
                ScheduleEntry.academic_period == ACADEMIC_PERIOD,
            )
        ).scalar_one()
        if already:
            continue
        payload = BulkScheduleCreate(
            subject_id=subjects[code].id,
            professor_id=professors[professor_index].id,
            room_id=rooms[room_name].id,
            academic_period=ACADEMIC_PERIOD,
            slots=[TimeSlotIn(weekday=weekday, start_time=start, end_time=end) for weekday, start, end in slots],
        )
        try:
            created += len(services.schedules.create_bulk(payload))
        except AppError as exc:
            print(f"Skipped {code}: {exc.message}")
    return created


def main() -> None:
    ensure_schema(engine)
    with SessionLocal() as session:
        professors = [upsert_professor(session, name) for name in PROFESSORS]
        subjects = {code: upsert_subject(session, code, name) for code, name in SUBJECTS}
        rooms = {name: upsert_room(session, name, *rest) for name, *rest in ROOMS}
        upsert_teaching_period(session)
        session.commit()

        created = seed_timetable(session, professors, subjects, rooms)
        entry_count = session.execute(
            select(func.count(ScheduleEntry.id)).where(ScheduleEntry.academic_period == ACADEMIC_PERIOD)
        ).scalar_one()

    print("Demo data seeded successfully.")
    print("")
    print(f"Academic period: {ACADEMIC_PERIOD}")
    print(f"Professors: {len(professors)}")
    print(f"Subjects: {len(subjects)}")
    print(f"Rooms: {len(rooms)}")
    print(f"Schedule entries created now: {created} (total {entry_count})")


if __name__ == "__main__":
    main()
