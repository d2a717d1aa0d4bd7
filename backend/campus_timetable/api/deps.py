from collections.abc import Generator

from fastapi import Depends, Query
from sqlalchemy.orm import Session

from campus_timetable.core.config import Settings, get_settings
from campus_timetable.db.session import SessionLocal
from campus_timetable.services.booking_locks import BookingLockRegistry, get_booking_locks
from campus_timetable.services.pagination import PageRequest
from campus_timetable.services.policy import SchedulingPolicy
from campus_timetable.services.wiring import Services, build_services


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_policy(settings: Settings = Depends(get_settings)) -> SchedulingPolicy:
    return SchedulingPolicy.from_settings(settings)


def get_services(
    db: Session = Depends(get_db),
    policy: SchedulingPolicy = Depends(get_policy),
    locks: BookingLockRegistry = Depends(get_booking_locks),
) -> Services:
    return build_services(db, policy=policy, locks=locks)


def page_params(
    skip: int = Query(default=0, ge=0),
    take: int | None = Query(default=None, ge=1),
    settings: Settings = Depends(get_settings),
) -> PageRequest:
    size = take if take is not None else settings.default_page_size
    return PageRequest(skip=skip, take=min(size, settings.max_page_size))
