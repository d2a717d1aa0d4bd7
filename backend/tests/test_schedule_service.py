from datetime import date

import pytest

from conftest import PERIOD, add_professor, add_room, add_subject
from campus_timetable.core.exceptions import (
    ConflictError,
    InvalidArgumentError,
    InvalidStateError,
    NotFoundError,
)
from campus_timetable.models import SubjectStatus, UserRole, Weekday
from campus_timetable.schemas.calendar import CalendarEventCreate
from campus_timetable.schemas.schedule import ScheduleEntryCreate, ScheduleEntryUpdate, ScheduleFilters
from campus_timetable.services.pagination import PageRequest
from campus_timetable.services.policy import SchedulingPolicy
from campus_timetable.services.wiring import build_services


def entry_payload(subject, professor, room=None, weekday=Weekday.MON, start="09:00", end="10:00", **extra):
    return ScheduleEntryCreate(
        subject_id=subject.id,
        professor_id=professor.id,
        room_id=room.id if room is not None else None,
        weekday=weekday,
        start_time=start,
        end_time=end,
        academic_period=extra.pop("academic_period", PERIOD),
        **extra,
    )


def test_create_entry_persists_times_as_minutes(services, subject, professor, room):
    entry = services.schedules.create(entry_payload(subject, professor, room, start="09:00", end="10:30"))

    assert entry.id
    assert entry.start_minute == 540
    assert entry.end_minute == 630
    assert entry.start_time == "09:00"
    assert entry.end_time == "10:30"
    assert entry.active is True
    assert services.schedules.get(entry.id).room_id == room.id


def test_overlapping_professor_booking_is_rejected(services, subject, professor):
    services.schedules.create(entry_payload(subject, professor, start="09:00", end="10:30"))

    with pytest.raises(ConflictError) as exc_info:
        services.schedules.create(entry_payload(subject, professor, start="10:00", end="11:00"))

    conflicts = exc_info.value.details["conflicts"]
    assert len(conflicts) == 1
    assert conflicts[0]["conflict_type"] == "professor_overlap"
    assert conflicts[0]["professor_name"] == professor.name
    assert conflicts[0]["start_time"] == "09:00"
    assert conflicts[0]["end_time"] == "10:30"


def test_adjacent_bookings_both_succeed(services, subject, professor, room):
    first = services.schedules.create(entry_payload(subject, professor, room, start="09:00", end="10:00"))
    second = services.schedules.create(entry_payload(subject, professor, room, start="10:00", end="11:00"))

    assert first.id != second.id


def test_overlap_in_another_period_or_weekday_is_allowed(services, subject, professor):
    services.schedules.create(entry_payload(subject, professor, start="09:00", end="10:30"))
    services.schedules.create(entry_payload(subject, professor, start="09:00", end="10:30", weekday=Weekday.TUE))
    services.schedules.create(
        entry_payload(subject, professor, start="09:00", end="10:30", academic_period="2026.2")
    )


def test_room_double_booking_is_rejected(db_session, services, subject, professor, room):
    other = add_professor(db_session, name="Grace Hopper")
    services.schedules.create(entry_payload(subject, professor, room, start="14:00", end="16:00"))

    with pytest.raises(ConflictError) as exc_info:
        services.schedules.create(entry_payload(subject, other, room, start="15:00", end="17:00"))

    conflict = exc_info.value.details["conflicts"][0]
    assert conflict["conflict_type"] == "room_overlap"
    assert conflict["room_name"] == room.name


def test_entries_without_room_never_collide_on_room(db_session, services, subject, professor):
    other = add_professor(db_session, name="Grace Hopper")
    services.schedules.create(entry_payload(subject, professor, start="14:00", end="16:00"))
    services.schedules.create(entry_payload(subject, other, start="14:00", end="16:00"))


def test_inactive_entries_do_not_block_new_bookings(services, subject, professor):
    entry = services.schedules.create(entry_payload(subject, professor, start="09:00", end="10:00"))
    services.schedules.update(entry.id, ScheduleEntryUpdate(active=False))

    services.schedules.create(entry_payload(subject, professor, start="09:00", end="10:00"))


def test_reference_validation_order(db_session, services, subject, professor, room):
    with pytest.raises(NotFoundError) as exc_info:
        services.schedules.create(
            ScheduleEntryCreate(
                subject_id="missing-subject",
                professor_id="missing-professor",
                weekday=Weekday.MON,
                start_time="09:00",
                end_time="10:00",
                academic_period=PERIOD,
            )
        )
    assert exc_info.value.details["resource_type"] == "Subject"

    inactive = add_subject(db_session, code="CS999", status=SubjectStatus.inactive)
    with pytest.raises(InvalidStateError):
        services.schedules.create(entry_payload(inactive, professor))

    student = add_professor(db_session, name="Sam Student", role=UserRole.student)
    with pytest.raises(NotFoundError) as exc_info:
        services.schedules.create(entry_payload(subject, student))
    assert exc_info.value.details["resource_type"] == "Professor"

    closed = add_room(db_session, name="Closed Lab", available=False)
    with pytest.raises(InvalidStateError):
        services.schedules.create(entry_payload(subject, professor, closed))


def test_inactive_professor_is_not_found(db_session, services, subject):
    retired = add_professor(db_session, name="Retired Prof", is_active=False)
    with pytest.raises(NotFoundError):
        services.schedules.create(entry_payload(subject, retired))


def test_unknown_room_is_not_found(services, subject, professor):
    payload = entry_payload(subject, professor)
    payload.room_id = "missing-room"
    with pytest.raises(NotFoundError) as exc_info:
        services.schedules.create(payload)
    assert exc_info.value.details["resource_type"] == "Room"


@pytest.mark.parametrize(
    ("start", "end"),
    [("10:00", "09:00"), ("06:30", "08:00"), ("21:00", "22:30"), ("09:00", "09:15"), ("08:00", "12:30")],
)
def test_time_policy_violations_are_invalid_arguments(services, subject, professor, start, end):
    with pytest.raises(InvalidArgumentError):
        services.schedules.create(entry_payload(subject, professor, start=start, end=end))


def test_update_with_unchanged_times_does_not_conflict_with_itself(services, subject, professor, room):
    entry = services.schedules.create(entry_payload(subject, professor, room, start="09:00", end="10:30"))

    updated = services.schedules.update(
        entry.id,
        ScheduleEntryUpdate(start_time="09:00", end_time="10:30", weekday=Weekday.MON),
    )

    assert updated.id == entry.id
    assert updated.start_time == "09:00"


def test_update_into_an_occupied_slot_is_rejected(services, subject, professor):
    services.schedules.create(entry_payload(subject, professor, start="09:00", end="10:00"))
    movable = services.schedules.create(entry_payload(subject, professor, start="11:00", end="12:00"))

    with pytest.raises(ConflictError):
        services.schedules.update(movable.id, ScheduleEntryUpdate(start_time="09:30", end_time="10:30"))

    assert services.schedules.get(movable.id).start_time == "11:00"


def test_update_revalidates_merged_time_range(services, subject, professor):
    entry = services.schedules.create(entry_payload(subject, professor, start="09:00", end="10:00"))

    with pytest.raises(InvalidArgumentError):
        services.schedules.update(entry.id, ScheduleEntryUpdate(end_time="08:30"))


def test_reactivating_an_entry_rechecks_conflicts(services, subject, professor):
    parked = services.schedules.create(entry_payload(subject, professor, start="09:00", end="10:00"))
    services.schedules.update(parked.id, ScheduleEntryUpdate(active=False))
    services.schedules.create(entry_payload(subject, professor, start="09:30", end="10:30"))

    with pytest.raises(ConflictError):
        services.schedules.update(parked.id, ScheduleEntryUpdate(active=True))


def test_update_can_detach_room(services, subject, professor, room):
    entry = services.schedules.create(entry_payload(subject, professor, room))

    updated = services.schedules.update(entry.id, ScheduleEntryUpdate(room_id=None))

    assert updated.room_id is None


def test_delete_entry(services, subject, professor):
    entry = services.schedules.create(entry_payload(subject, professor))

    services.schedules.delete(entry.id)

    with pytest.raises(NotFoundError):
        services.schedules.get(entry.id)
    with pytest.raises(NotFoundError):
        services.schedules.delete(entry.id)


def test_list_filters_and_orders_by_weekday(db_session, services, subject, professor, room):
    other_subject = add_subject(db_session, code="MA201", name="Linear Algebra")
    services.schedules.create(entry_payload(subject, professor, room, weekday=Weekday.WED))
    services.schedules.create(entry_payload(other_subject, professor, weekday=Weekday.SUN, start="13:00", end="14:00"))
    services.schedules.create(entry_payload(subject, professor, weekday=Weekday.MON, start="15:00", end="16:00"))

    page = services.schedules.list(ScheduleFilters(professor_id=professor.id), PageRequest())
    assert page.total == 3
    assert [item.weekday for item in page.items] == [Weekday.SUN, Weekday.MON, Weekday.WED]

    by_room = services.schedules.list(ScheduleFilters(room_id=room.id), PageRequest())
    assert by_room.total == 1

    by_search = services.schedules.list(ScheduleFilters(search="algebra"), PageRequest())
    assert [item.subject_id for item in by_search.items] == [other_subject.id]

    afternoon = services.schedules.list(ScheduleFilters(start_from="13:00"), PageRequest())
    assert afternoon.total == 2

    morning = services.schedules.list(ScheduleFilters(end_until="12:00"), PageRequest())
    assert morning.total == 1


def test_list_pagination(services, subject, professor):
    for hour in range(8, 13):
        services.schedules.create(entry_payload(subject, professor, start=f"{hour:02d}:00", end=f"{hour:02d}:30"))

    page = services.schedules.list(ScheduleFilters(), PageRequest(skip=2, take=2))

    assert page.total == 5
    assert page.page == 2
    assert page.total_pages == 3
    assert [item.start_time for item in page.items] == ["10:00", "11:00"]


def test_teaching_period_requirement(db_session, subject, professor):
    services = build_services(db_session, policy=SchedulingPolicy(require_teaching_period=True))

    with pytest.raises(InvalidStateError):
        services.schedules.create(entry_payload(subject, professor))

    services.calendar.create(
        CalendarEventCreate(
            name="Semester 1",
            start_date=date(2026, 2, 16),
            end_date=date(2026, 6, 30),
            academic_period=PERIOD,
            event_type="teaching_period",
        )
    )
    services.schedules.create(entry_payload(subject, professor))
