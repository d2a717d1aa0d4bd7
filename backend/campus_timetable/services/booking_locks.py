"""Serialize bookings per (professor, weekday, period) and per (room, weekday, period).

Conflict checks read before they write, so two requests for the same key must
not interleave. Every process takes an in-memory lock per key; on PostgreSQL a
transaction-scoped advisory lock per key extends the guarantee across workers.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
import hashlib
import logging
from threading import Lock
from weakref import WeakValueDictionary

from sqlalchemy import text
from sqlalchemy.orm import Session

from campus_timetable.models.schedule_entry import Weekday

logger = logging.getLogger(__name__)


@dataclass(frozen=True, order=True)
class BookingKey:
    kind: str
    resource_id: str
    weekday: str
    period: str

    @classmethod
    def professor(cls, professor_id: str, weekday: Weekday, period: str) -> "BookingKey":
        return cls("professor", professor_id, weekday.value, period)

    @classmethod
    def room(cls, room_id: str, weekday: Weekday, period: str) -> "BookingKey":
        return cls("room", room_id, weekday.value, period)

    @property
    def token(self) -> str:
        return f"{self.kind}|{self.resource_id}|{self.weekday}|{self.period}"

    @property
    def advisory_id(self) -> int:
        digest = hashlib.blake2b(self.token.encode("utf-8"), digest_size=8).digest()
        return int.from_bytes(digest, "big", signed=True)


def booking_keys(professor_id: str, room_id: str | None, weekday: Weekday, period: str) -> set[BookingKey]:
    keys = {BookingKey.professor(professor_id, weekday, period)}
    if room_id:
        keys.add(BookingKey.room(room_id, weekday, period))
    return keys


class BookingLockRegistry:
    def __init__(self) -> None:
        # A key's lock lives only while some request holds or waits on it.
        self._locks: WeakValueDictionary[BookingKey, Lock] = WeakValueDictionary()
        self._guard = Lock()

    def _lock_for(self, key: BookingKey) -> Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = Lock()
                self._locks[key] = lock
            return lock

    @contextmanager
    def hold(self, db: Session, keys: Iterable[BookingKey]) -> Iterator[None]:
        # Sorted acquisition keeps two overlapping batches from deadlocking.
        ordered_keys = sorted(set(keys))
        acquired: list[Lock] = []
        try:
            for key in ordered_keys:
                lock = self._lock_for(key)
                lock.acquire()
                acquired.append(lock)
            if db.get_bind().dialect.name == "postgresql":
                for key in ordered_keys:
                    db.execute(text("SELECT pg_advisory_xact_lock(:key)"), {"key": key.advisory_id})
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()

    def tracked_keys(self) -> int:
        with self._guard:
            return len(self._locks)

    def clear(self) -> None:
        with self._guard:
            self._locks.clear()


_registry = BookingLockRegistry()


def get_booking_locks() -> BookingLockRegistry:
    return _registry
