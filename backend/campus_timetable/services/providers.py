"""Read-only lookups into records owned by other modules (subjects and users)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Protocol

from sqlalchemy import select
from sqlalchemy.orm import Session

from campus_timetable.models.subject import Subject, SubjectStatus
from campus_timetable.models.user import User, UserRole


@dataclass(frozen=True)
class SubjectInfo:
    id: str
    code: str
    name: str
    active: bool


@dataclass(frozen=True)
class UserInfo:
    id: str
    name: str
    role: UserRole

    @property
    def is_professor(self) -> bool:
        return self.role == UserRole.professor


class SubjectProvider(Protocol):
    def get_subject(self, subject_id: str) -> SubjectInfo | None: ...

    def get_subjects(self, subject_ids: Iterable[str]) -> dict[str, SubjectInfo]: ...


class UserProvider(Protocol):
    def get_user(self, user_id: str) -> UserInfo | None: ...

    def get_users(self, user_ids: Iterable[str]) -> dict[str, UserInfo]: ...


def _subject_info(subject: Subject) -> SubjectInfo:
    return SubjectInfo(
        id=subject.id,
        code=subject.code,
        name=subject.name,
        active=subject.status == SubjectStatus.active,
    )


def _user_info(user: User) -> UserInfo:
    return UserInfo(id=user.id, name=user.name, role=user.role)


class SqlSubjectProvider:
    def __init__(self, db: Session) -> None:
        self.db = db

    def get_subject(self, subject_id: str) -> SubjectInfo | None:
        subject = self.db.get(Subject, subject_id)
        return _subject_info(subject) if subject is not None else None

    def get_subjects(self, subject_ids: Iterable[str]) -> dict[str, SubjectInfo]:
        ids = {item for item in subject_ids if item}
        if not ids:
            return {}
        rows = self.db.execute(select(Subject).where(Subject.id.in_(ids))).scalars()
        return {row.id: _subject_info(row) for row in rows}


class SqlUserProvider:
    def __init__(self, db: Session) -> None:
        self.db = db

    def get_user(self, user_id: str) -> UserInfo | None:
        user = self.db.get(User, user_id)
        if user is None or not user.is_active:
            return None
        return _user_info(user)

    def get_users(self, user_ids: Iterable[str]) -> dict[str, UserInfo]:
        ids = {item for item in user_ids if item}
        if not ids:
            return {}
        rows = self.db.execute(select(User).where(User.id.in_(ids), User.is_active.is_(True))).scalars()
        return {row.id: _user_info(row) for row in rows}
