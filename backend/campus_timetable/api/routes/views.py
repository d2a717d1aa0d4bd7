from datetime import date

from fastapi import APIRouter, Depends, Query

from campus_timetable.api.deps import get_services
from campus_timetable.schemas.views import ProfessorAgendaOut, RoomAvailabilityOut, RoomOccupancyOut, WeeklyGridOut
from campus_timetable.services.wiring import Services

router = APIRouter()


@router.get("/weekly-grid", response_model=WeeklyGridOut)
def weekly_grid(
    professor_id: str | None = None,
    room_id: str | None = None,
    academic_period: str | None = None,
    services: Services = Depends(get_services),
) -> WeeklyGridOut:
    return services.views.weekly_grid(professor_id=professor_id, room_id=room_id, period=academic_period)


@router.get("/professors/{professor_id}/agenda", response_model=ProfessorAgendaOut)
def professor_agenda(
    professor_id: str,
    academic_period: str = Query(min_length=1, max_length=20),
    services: Services = Depends(get_services),
) -> ProfessorAgendaOut:
    return services.views.professor_agenda(professor_id, academic_period)


@router.get("/rooms/{room_id}/occupancy", response_model=RoomOccupancyOut)
def room_occupancy(
    room_id: str,
    academic_period: str = Query(min_length=1, max_length=20),
    services: Services = Depends(get_services),
) -> RoomOccupancyOut:
    return services.views.room_occupancy(room_id, academic_period)


@router.get("/rooms/{room_id}/availability", response_model=RoomAvailabilityOut)
def room_availability(
    room_id: str,
    on: date = Query(alias="date"),
    academic_period: str = Query(min_length=1, max_length=20),
    services: Services = Depends(get_services),
) -> RoomAvailabilityOut:
    return services.views.room_availability(room_id, on, academic_period)
