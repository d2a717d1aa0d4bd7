import os

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite://")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from campus_timetable.api.deps import get_db  # noqa: E402
from campus_timetable.db.base import Base  # noqa: E402
from campus_timetable.main import app  # noqa: E402
from campus_timetable.models import Classroom, RoomType, Subject, SubjectStatus, User, UserRole  # noqa: E402
from campus_timetable.services.booking_locks import get_booking_locks  # noqa: E402
from campus_timetable.services.wiring import build_services  # noqa: E402

PERIOD = "2026.1"


@pytest.fixture()
def engine():
    # One shared in-memory database per test.
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db_session(session_factory):
    get_booking_locks().clear()
    db = session_factory()
    try:
        yield db
    finally:
        db.close()
        get_booking_locks().clear()


@pytest.fixture()
def services(db_session):
    return build_services(db_session)


@pytest.fixture()
def client(engine, session_factory):
    get_booking_locks().clear()

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.state.engine = engine

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
    get_booking_locks().clear()


def add_professor(db, name="Ada Lovelace", email=None, role=UserRole.professor, is_active=True):
    user = User(name=name, email=email or f"{name.lower().replace(' ', '.')}@campus.test", role=role, is_active=is_active)
    db.add(user)
    db.commit()
    return user


def add_subject(db, code="CS101", name="Intro to Programming", status=SubjectStatus.active):
    subject = Subject(code=code, name=name, status=status)
    db.add(subject)
    db.commit()
    return subject


def add_room(db, name="A-101", capacity=40, room_type=RoomType.ordinary, available=True):
    room = Classroom(name=name, capacity=capacity, room_type=room_type, equipment=[], available=available)
    db.add(room)
    db.commit()
    return room


@pytest.fixture()
def professor(db_session):
    return add_professor(db_session)


@pytest.fixture()
def subject(db_session):
    return add_subject(db_session)


@pytest.fixture()
def room(db_session):
    return add_room(db_session)


@pytest.fixture()
def seed(session_factory):
    """Reference rows committed through their own session, for API tests."""
    db = session_factory()
    try:
        professor = add_professor(db)
        other_professor = add_professor(db, name="Alan Turing")
        subject = add_subject(db)
        room = add_room(db)
        other_room = add_room(db, name="B-202", capacity=120, room_type=RoomType.auditorium)
        ids = {
            "professor": professor.id,
            "other_professor": other_professor.id,
            "subject": subject.id,
            "room": room.id,
            "other_room": other_room.id,
        }
    finally:
        db.close()
    return ids
