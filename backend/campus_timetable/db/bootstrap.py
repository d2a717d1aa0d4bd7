from __future__ import annotations

import logging

from sqlalchemy import inspect
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from campus_timetable.db.base import Base
import campus_timetable.models  # noqa: F401

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: dict[str, set[str]] = {
    "classrooms": {"id", "name", "capacity", "room_type", "available"},
    "schedule_entries": {
        "id",
        "subject_id",
        "professor_id",
        "room_id",
        "weekday",
        "start_minute",
        "end_minute",
        "academic_period",
        "active",
    },
    "conflict_records": {"id", "conflict_type", "primary_entry_id", "resolved", "resolved_at"},
    "academic_calendar_events": {"id", "start_date", "end_date", "academic_period", "event_type"},
}


def missing_schema_items(engine: Engine) -> tuple[list[str], dict[str, list[str]]]:
    with engine.connect() as connection:
        inspector = inspect(connection)
        table_names = set(inspector.get_table_names())
        missing_tables = sorted(name for name in REQUIRED_COLUMNS if name not in table_names)
        missing_columns: dict[str, list[str]] = {}
        for table_name, required in REQUIRED_COLUMNS.items():
            if table_name not in table_names:
                continue
            existing = {item["name"] for item in inspector.get_columns(table_name)}
            missing = sorted(required - existing)
            if missing:
                missing_columns[table_name] = missing
    return missing_tables, missing_columns


def ensure_schema(engine: Engine) -> None:
    try:
        Base.metadata.create_all(bind=engine)
        missing_tables, missing_columns = missing_schema_items(engine)
    except SQLAlchemyError as exc:
        logger.exception("Schema bootstrap failed")
        raise RuntimeError("Schema bootstrap failed") from exc

    if missing_tables:
        raise RuntimeError(f"Missing required tables: {', '.join(missing_tables)}")
    if missing_columns:
        flattened = [f"{table}.{column}" for table, columns in missing_columns.items() for column in columns]
        raise RuntimeError(f"Missing required columns: {', '.join(flattened)}")
    logger.info("Database schema ready (%d tables)", len(Base.metadata.tables))
