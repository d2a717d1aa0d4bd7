from typing import Annotated

from fastapi import APIRouter, Depends, Query

from campus_timetable.api.deps import get_services, page_params
from campus_timetable.schemas.common import PageOut
from campus_timetable.schemas.conflict import ConflictFilters, ConflictRecordOut, SweepOut
from campus_timetable.services.pagination import PageRequest
from campus_timetable.services.wiring import Services

router = APIRouter()


@router.get("/", response_model=PageOut[ConflictRecordOut])
def list_conflicts(
    filters: Annotated[ConflictFilters, Query()],
    page: PageRequest = Depends(page_params),
    services: Services = Depends(get_services),
) -> PageOut[ConflictRecordOut]:
    return PageOut[ConflictRecordOut].from_page(services.ledger.list(filters, page))


@router.post("/sweep", response_model=SweepOut)
def sweep_conflicts(
    academic_period: str = Query(min_length=1, max_length=20),
    services: Services = Depends(get_services),
) -> SweepOut:
    records, scanned, created = services.detector.sweep_period(academic_period)
    return SweepOut(
        academic_period=academic_period,
        entries_scanned=scanned,
        created=created,
        conflicts=[ConflictRecordOut.model_validate(record) for record in records],
    )


@router.get("/{conflict_id}", response_model=ConflictRecordOut)
def get_conflict(conflict_id: str, services: Services = Depends(get_services)) -> ConflictRecordOut:
    return services.ledger.get(conflict_id)


@router.post("/{conflict_id}/resolve", response_model=ConflictRecordOut)
def resolve_conflict(conflict_id: str, services: Services = Depends(get_services)) -> ConflictRecordOut:
    return services.ledger.resolve(conflict_id)
