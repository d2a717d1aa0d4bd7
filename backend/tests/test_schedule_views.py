from datetime import date

import pytest

from conftest import PERIOD, add_professor, add_subject
from campus_timetable.core.exceptions import NotFoundError
from campus_timetable.models import ScheduleEntry, UserRole, Weekday
from campus_timetable.schemas.calendar import CalendarEventCreate
from campus_timetable.schemas.classroom import ClassroomUpdate
from campus_timetable.schemas.schedule import ScheduleEntryCreate

MONDAY = date(2026, 10, 19)


def book(services, subject, professor, room=None, weekday=Weekday.MON, start="09:00", end="10:00"):
    return services.schedules.create(
        ScheduleEntryCreate(
            subject_id=subject.id,
            professor_id=professor.id,
            room_id=room.id if room is not None else None,
            weekday=weekday,
            start_time=start,
            end_time=end,
            academic_period=PERIOD,
        )
    )


def test_weekly_grid_groups_entries_by_day(services, subject, professor, room):
    book(services, subject, professor, room, weekday=Weekday.WED, start="14:00", end="15:00")
    book(services, subject, professor, room, weekday=Weekday.WED, start="08:00", end="09:00")
    book(services, subject, professor, weekday=Weekday.SAT)

    grid = services.views.weekly_grid(professor_id=professor.id, period=PERIOD)

    assert [day.weekday for day in grid.days] == list(Weekday)
    wednesday = grid.days[3]
    assert [slot.start_time for slot in wednesday.slots] == ["08:00", "14:00"]
    assert all(slot.available is False and slot.entry is not None for slot in wednesday.slots)
    assert len(grid.days[6].slots) == 1

    room_grid = services.views.weekly_grid(room_id=room.id, period=PERIOD)
    assert sum(len(day.slots) for day in room_grid.days) == 2


def test_professor_agenda_sums_hours_per_subject(db_session, services, subject, professor):
    algebra = add_subject(db_session, code="MA201", name="Linear Algebra")
    book(services, subject, professor, weekday=Weekday.MON, start="09:00", end="10:30")
    book(services, subject, professor, weekday=Weekday.WED, start="09:00", end="10:30")
    book(services, algebra, professor, weekday=Weekday.TUE, start="14:00", end="16:00")

    agenda = services.views.professor_agenda(professor.id, PERIOD)

    assert agenda.professor.name == professor.name
    assert agenda.total_hours == 5.0
    loads = {load.subject_code: load.weekly_hours for load in agenda.subjects}
    assert loads == {"CS101": 3.0, "MA201": 2.0}
    assert agenda.conflicts == []
    assert sum(len(day.slots) for day in agenda.weekly_grid.days) == 3


def test_professor_agenda_includes_unresolved_conflicts(db_session, services, subject, professor):
    for start, end in ((540, 630), (600, 660)):
        db_session.add(
            ScheduleEntry(
                subject_id=subject.id,
                professor_id=professor.id,
                weekday=Weekday.THU,
                start_minute=start,
                end_minute=end,
                academic_period=PERIOD,
            )
        )
    db_session.commit()
    services.detector.sweep_period(PERIOD)

    agenda = services.views.professor_agenda(professor.id, PERIOD)

    assert len(agenda.conflicts) == 1
    assert agenda.conflicts[0].professor_id == professor.id


def test_professor_agenda_requires_a_professor(db_session, services):
    staff = add_professor(db_session, name="Front Desk", role=UserRole.staff)
    with pytest.raises(NotFoundError):
        services.views.professor_agenda(staff.id, PERIOD)
    with pytest.raises(NotFoundError):
        services.views.professor_agenda("missing", PERIOD)


def test_room_occupancy_is_zero_without_entries(services, room):
    report = services.views.room_occupancy(room.id, PERIOD)

    assert report.occupancy_ratio == 0
    assert report.occupied_hours == 0
    assert report.operating_hours == 75
    assert len(report.free_windows) == 5
    assert all(window.start_time == "07:00" and window.end_time == "22:00" for window in report.free_windows)


def test_room_occupancy_is_one_when_fully_booked(services, subject, professor, room):
    blocks = [("07:00", "11:00"), ("11:00", "15:00"), ("15:00", "19:00"), ("19:00", "22:00")]
    for weekday in (Weekday.MON, Weekday.TUE, Weekday.WED, Weekday.THU, Weekday.FRI):
        for start, end in blocks:
            book(services, subject, professor, room, weekday=weekday, start=start, end=end)

    report = services.views.room_occupancy(room.id, PERIOD)

    assert report.occupied_hours == 75
    assert report.occupancy_ratio == pytest.approx(1.0)
    assert report.free_windows == []
    assert len(report.entries) == 20


def test_room_occupancy_reports_partial_load_and_free_windows(services, subject, professor, room):
    book(services, subject, professor, room, weekday=Weekday.MON, start="09:00", end="11:30")

    report = services.views.room_occupancy(room.id, PERIOD)

    assert report.occupied_hours == 2.5
    assert report.occupancy_ratio == pytest.approx(2.5 / 75, abs=1e-4)
    monday = [(w.start_time, w.end_time) for w in report.free_windows if w.weekday == Weekday.MON]
    assert monday == [("07:00", "09:00"), ("11:30", "22:00")]


def test_room_availability_lists_gaps_and_bookings(services, subject, professor, room):
    book(services, subject, professor, room, weekday=Weekday.MON, start="10:00", end="12:00")
    book(services, subject, professor, room, weekday=Weekday.MON, start="14:00", end="15:30")
    book(services, subject, professor, room, weekday=Weekday.TUE, start="07:00", end="09:00")

    report = services.views.room_availability(room.id, MONDAY, PERIOD)

    assert report.weekday == Weekday.MON
    assert [(slot.start_time, slot.end_time, slot.available) for slot in report.slots] == [
        ("07:00", "10:00", True),
        ("10:00", "12:00", False),
        ("12:00", "14:00", True),
        ("14:00", "15:30", False),
        ("15:30", "22:00", True),
    ]
    booked = report.slots[1]
    assert booked.reason == "Booked for CS101 - Intro to Programming"
    assert booked.entry_id is not None


def test_room_availability_for_unavailable_room(services, room):
    services.rooms.update(room.id, ClassroomUpdate(available=False))

    report = services.views.room_availability(room.id, MONDAY, PERIOD)

    assert len(report.slots) == 1
    assert report.slots[0].available is False
    assert "unavailable" in report.slots[0].reason


def test_room_availability_during_holiday(services, room):
    services.calendar.create(
        CalendarEventCreate(
            name="Founders' Day",
            start_date=MONDAY,
            end_date=MONDAY,
            academic_period=PERIOD,
            event_type="holiday",
        )
    )

    report = services.views.room_availability(room.id, MONDAY, PERIOD)

    assert [(slot.start_time, slot.end_time, slot.available) for slot in report.slots] == [("07:00", "22:00", False)]
    assert report.slots[0].reason == "Holiday: Founders' Day"


def test_room_views_require_an_existing_room(services):
    with pytest.raises(NotFoundError):
        services.views.room_occupancy("missing", PERIOD)
    with pytest.raises(NotFoundError):
        services.views.room_availability("missing", MONDAY, PERIOD)
