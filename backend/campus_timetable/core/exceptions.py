class AppError(Exception):
    """Base class for all application exceptions."""

    code = "error"

    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(AppError):
    """Raised when a referenced subject, professor, room, entry, conflict or event is absent."""

    code = "not_found"

    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} with id {resource_id} not found",
            status_code=404,
            details={"resource_type": resource_type, "resource_id": resource_id},
        )


class InvalidArgumentError(AppError):
    """Raised for malformed times and out-of-policy durations or hours."""

    code = "invalid_argument"

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=400, details=details)


class InvalidTimeFormat(InvalidArgumentError):
    code = "invalid_time_format"

    def __init__(self, value: object):
        super().__init__(
            f"Time {value!r} must be in HH:MM 24-hour format",
            details={"value": str(value)},
        )


class InvalidStateError(AppError):
    """Raised when a referenced resource exists but cannot be used right now."""

    code = "invalid_state"

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=400, details=details)


class ConflictError(AppError):
    """Raised for double-bookings, duplicate names and rooms still in use."""

    code = "conflict"

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=409, details=details)


class BulkScheduleError(AppError):
    """Aggregates every failing slot of a bulk creation into one error."""

    code = "bulk_validation_failed"

    def __init__(self, failures: list[dict]):
        has_conflict = any(failure.get("conflicts") for failure in failures)
        super().__init__(
            f"{len(failures)} time slot(s) failed validation; nothing was saved",
            status_code=409 if has_conflict else 400,
            details={"failures": failures},
        )
        self.failures = failures


class InternalError(AppError):
    """Raised when the storage layer fails."""

    code = "internal"

    def __init__(self, message: str = "Internal storage error"):
        super().__init__(message, status_code=500)
