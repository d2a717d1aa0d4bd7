from datetime import date

import pytest
from pydantic import ValidationError

from conftest import PERIOD
from campus_timetable.core.exceptions import ConflictError, InvalidArgumentError, NotFoundError
from campus_timetable.models import EventType
from campus_timetable.schemas.calendar import CalendarEventCreate, CalendarEventUpdate, CalendarFilters
from campus_timetable.services.pagination import PageRequest


def event_payload(name="Carnival", start=date(2026, 2, 16), end=date(2026, 2, 18), event_type=EventType.holiday, **extra):
    return CalendarEventCreate(
        name=name,
        start_date=start,
        end_date=end,
        academic_period=extra.pop("academic_period", PERIOD),
        event_type=event_type,
        **extra,
    )


def test_create_event(services):
    event = services.calendar.create(event_payload(description="No classes"))

    assert event.active is True
    assert services.calendar.get(event.id).description == "No classes"


def test_break_event_type_round_trips(db_session, services):
    event = services.calendar.create(event_payload(name="Winter break", event_type=EventType.break_))
    db_session.expire_all()
    assert services.calendar.get(event.id).event_type == EventType.break_


def test_date_order_is_validated():
    with pytest.raises(ValidationError):
        event_payload(start=date(2026, 3, 2), end=date(2026, 3, 1))


def test_overlapping_event_of_same_type_and_period_is_rejected(services):
    services.calendar.create(event_payload())

    with pytest.raises(ConflictError):
        services.calendar.create(event_payload(name="Other", start=date(2026, 2, 18), end=date(2026, 2, 20)))

    services.calendar.create(event_payload(name="Exams", event_type=EventType.exam_window))
    services.calendar.create(event_payload(name="Next term", academic_period="2026.2"))
    services.calendar.create(event_payload(name="Later", start=date(2026, 2, 19), end=date(2026, 2, 20)))


def test_update_rechecks_overlap_excluding_itself(services):
    first = services.calendar.create(event_payload())
    second = services.calendar.create(event_payload(name="Easter", start=date(2026, 4, 3), end=date(2026, 4, 5)))

    services.calendar.update(first.id, CalendarEventUpdate(end_date=date(2026, 2, 19)))

    with pytest.raises(ConflictError):
        services.calendar.update(second.id, CalendarEventUpdate(start_date=date(2026, 2, 19)))
    with pytest.raises(InvalidArgumentError):
        services.calendar.update(second.id, CalendarEventUpdate(end_date=date(2026, 4, 1)))


def test_deactivated_events_do_not_block(services):
    first = services.calendar.create(event_payload())
    services.calendar.update(first.id, CalendarEventUpdate(active=False))

    services.calendar.create(event_payload(name="Replacement"))


def test_list_and_delete(services):
    services.calendar.create(event_payload())
    services.calendar.create(event_payload(name="Semester", start=date(2026, 2, 2), end=date(2026, 6, 30), event_type=EventType.teaching_period))
    maintenance = services.calendar.create(
        event_payload(name="HVAC work", start=date(2026, 5, 4), end=date(2026, 5, 4), event_type=EventType.maintenance)
    )

    everything = services.calendar.list(CalendarFilters(academic_period=PERIOD), PageRequest())
    assert [event.name for event in everything.items] == ["Semester", "Carnival", "HVAC work"]

    may = services.calendar.list(CalendarFilters(date_from=date(2026, 5, 1), date_until=date(2026, 5, 31)), PageRequest())
    assert {event.name for event in may.items} == {"Semester", "HVAC work"}

    holidays = services.calendar.list(CalendarFilters(event_type=EventType.holiday), PageRequest())
    assert holidays.total == 1

    searched = services.calendar.list(CalendarFilters(search="hvac"), PageRequest())
    assert searched.total == 1

    services.calendar.delete(maintenance.id)
    with pytest.raises(NotFoundError):
        services.calendar.get(maintenance.id)


def test_teaching_period_and_blocking_lookups(services):
    assert services.calendar.has_teaching_period(PERIOD) is False
    services.calendar.create(
        event_payload(name="Semester", start=date(2026, 2, 2), end=date(2026, 6, 30), event_type=EventType.teaching_period)
    )
    services.calendar.create(event_payload())

    assert services.calendar.has_teaching_period(PERIOD) is True
    assert [event.name for event in services.calendar.blocking_events(PERIOD, date(2026, 2, 17))] == ["Carnival"]
    assert services.calendar.blocking_events(PERIOD, date(2026, 3, 10)) == []
    assert services.calendar.blocking_events("2026.2", date(2026, 2, 17)) == []
