from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from campus_timetable.api.deps import get_services, page_params
from campus_timetable.schemas.calendar import (
    CalendarEventCreate,
    CalendarEventOut,
    CalendarEventUpdate,
    CalendarFilters,
)
from campus_timetable.schemas.common import PageOut
from campus_timetable.services.pagination import PageRequest
from campus_timetable.services.wiring import Services

router = APIRouter()


@router.get("/", response_model=PageOut[CalendarEventOut])
def list_calendar_events(
    filters: Annotated[CalendarFilters, Query()],
    page: PageRequest = Depends(page_params),
    services: Services = Depends(get_services),
) -> PageOut[CalendarEventOut]:
    return PageOut[CalendarEventOut].from_page(services.calendar.list(filters, page))


@router.post("/", response_model=CalendarEventOut, status_code=status.HTTP_201_CREATED)
def create_calendar_event(payload: CalendarEventCreate, services: Services = Depends(get_services)) -> CalendarEventOut:
    return services.calendar.create(payload)


@router.get("/{event_id}", response_model=CalendarEventOut)
def get_calendar_event(event_id: str, services: Services = Depends(get_services)) -> CalendarEventOut:
    return services.calendar.get(event_id)


@router.put("/{event_id}", response_model=CalendarEventOut)
def update_calendar_event(
    event_id: str,
    payload: CalendarEventUpdate,
    services: Services = Depends(get_services),
) -> CalendarEventOut:
    return services.calendar.update(event_id, payload)


@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_calendar_event(event_id: str, services: Services = Depends(get_services)) -> None:
    services.calendar.delete(event_id)
