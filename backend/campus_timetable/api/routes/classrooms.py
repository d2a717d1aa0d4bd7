from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from campus_timetable.api.deps import get_services, page_params
from campus_timetable.schemas.classroom import ClassroomCreate, ClassroomFilters, ClassroomOut, ClassroomUpdate
from campus_timetable.schemas.common import PageOut
from campus_timetable.services.pagination import PageRequest
from campus_timetable.services.wiring import Services

router = APIRouter()


@router.get("/", response_model=PageOut[ClassroomOut])
def list_classrooms(
    filters: Annotated[ClassroomFilters, Query()],
    page: PageRequest = Depends(page_params),
    services: Services = Depends(get_services),
) -> PageOut[ClassroomOut]:
    return PageOut[ClassroomOut].from_page(services.rooms.list(filters, page))


@router.post("/", response_model=ClassroomOut, status_code=status.HTTP_201_CREATED)
def create_classroom(payload: ClassroomCreate, services: Services = Depends(get_services)) -> ClassroomOut:
    return services.rooms.create(payload)


@router.get("/{room_id}", response_model=ClassroomOut)
def get_classroom(room_id: str, services: Services = Depends(get_services)) -> ClassroomOut:
    return services.rooms.get(room_id)


@router.put("/{room_id}", response_model=ClassroomOut)
def update_classroom(
    room_id: str,
    payload: ClassroomUpdate,
    services: Services = Depends(get_services),
) -> ClassroomOut:
    return services.rooms.update(room_id, payload)


@router.delete("/{room_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_classroom(room_id: str, services: Services = Depends(get_services)) -> None:
    services.rooms.delete(room_id)
