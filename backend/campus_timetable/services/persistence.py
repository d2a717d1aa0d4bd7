from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from campus_timetable.core.exceptions import AppError, InternalError

logger = logging.getLogger(__name__)


def commit_or_raise(db: Session, action: str, *, on_integrity_error: AppError | None = None) -> None:
    """Commit, or roll back and raise an ``AppError``.

    ``on_integrity_error`` is raised instead of ``InternalError`` when a
    constraint rejects the write, for callers that know which constraint that is.
    """
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        if on_integrity_error is None:
            logger.exception("Storage failure during %s", action)
            raise InternalError(f"Storage failure during {action}") from exc
        logger.info("Constraint rejected %s: %s", action, on_integrity_error.message)
        raise on_integrity_error from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Storage failure during %s", action)
        raise InternalError(f"Storage failure during {action}") from exc
