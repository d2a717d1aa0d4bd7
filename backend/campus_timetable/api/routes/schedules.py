from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from campus_timetable.api.deps import get_services, page_params
from campus_timetable.schemas.common import PageOut
from campus_timetable.schemas.schedule import (
    BulkScheduleCreate,
    BulkScheduleOut,
    ScheduleEntryCreate,
    ScheduleEntryOut,
    ScheduleEntryUpdate,
    ScheduleFilters,
)
from campus_timetable.services.pagination import PageRequest
from campus_timetable.services.wiring import Services

router = APIRouter()


@router.get("/", response_model=PageOut[ScheduleEntryOut])
def list_schedule_entries(
    filters: Annotated[ScheduleFilters, Query()],
    page: PageRequest = Depends(page_params),
    services: Services = Depends(get_services),
) -> PageOut[ScheduleEntryOut]:
    return PageOut[ScheduleEntryOut].from_page(services.schedules.list(filters, page))


@router.post("/", response_model=ScheduleEntryOut, status_code=status.HTTP_201_CREATED)
def create_schedule_entry(payload: ScheduleEntryCreate, services: Services = Depends(get_services)) -> ScheduleEntryOut:
    return services.schedules.create(payload)


@router.post("/bulk", response_model=BulkScheduleOut, status_code=status.HTTP_201_CREATED)
def create_bulk_schedule(payload: BulkScheduleCreate, services: Services = Depends(get_services)) -> BulkScheduleOut:
    entries = services.schedules.create_bulk(payload)
    return BulkScheduleOut(
        created=len(entries),
        entries=[ScheduleEntryOut.model_validate(entry) for entry in entries],
    )


@router.get("/{entry_id}", response_model=ScheduleEntryOut)
def get_schedule_entry(entry_id: str, services: Services = Depends(get_services)) -> ScheduleEntryOut:
    return services.schedules.get(entry_id)


@router.put("/{entry_id}", response_model=ScheduleEntryOut)
@router.patch("/{entry_id}", response_model=ScheduleEntryOut)
def update_schedule_entry(
    entry_id: str,
    payload: ScheduleEntryUpdate,
    services: Services = Depends(get_services),
) -> ScheduleEntryOut:
    return services.schedules.update(entry_id, payload)


@router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_schedule_entry(entry_id: str, services: Services = Depends(get_services)) -> None:
    services.schedules.delete(entry_id)
