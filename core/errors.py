"""Error taxonomy for the training tracker.

Every error carries a machine-readable code and the HTTP status the API layer
should answer with. Nothing here is fatal to the process: all of these are
recoverable at the request boundary.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional


class ErrorCode(str, Enum):
    INTERNAL_ERROR = "INTERNAL_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    UNAUTHORIZED = "UNAUTHORIZED"
    NOT_FOUND = "NOT_FOUND"
    SETTINGS_MISSING = "SETTINGS_MISSING"
    CONFLICT = "CONFLICT"
    ALREADY_COMPLETED = "ALREADY_COMPLETED"
    SLOT_CONFLICT = "SLOT_CONFLICT"
    OUT_OF_RANGE = "OUT_OF_RANGE"
    DEPENDENCY_ERROR = "DEPENDENCY_ERROR"


class TrackerError(Exception):
    """Base class for all tracker errors."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": {"code": self.code.value, "message": self.message}}
        if self.details:
            payload["error"]["details"] = self.details
        return payload

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code.value}, message={self.message!r})"


class ValidationError(TrackerError):
    """Malformed or missing required input."""

    def __init__(self, message: str, field: Optional[str] = None, details: Optional[dict[str, Any]] = None) -> None:
        error_details = dict(details or {})
        if field:
            error_details["field"] = field
        super().__init__(message, code=ErrorCode.VALIDATION_ERROR, status_code=400, details=error_details)


class AuthenticationError(TrackerError):
    def __init__(self, message: str = "Invalid webhook token") -> None:
        super().__init__(message, code=ErrorCode.UNAUTHORIZED, status_code=401)


class NotFoundError(TrackerError):
    def __init__(
        self,
        message: str,
        resource: Optional[str] = None,
        resource_id: Any = None,
        code: ErrorCode = ErrorCode.NOT_FOUND,
    ) -> None:
        details: dict[str, Any] = {}
        if resource:
            details["resource"] = resource
        if resource_id is not None:
            details["id"] = resource_id
        super().__init__(message, code=code, status_code=404, details=details)


class SettingsMissingError(NotFoundError):
    def __init__(self, message: str = "No settings found. Set up your race date first.") -> None:
        super().__init__(message, resource="settings", code=ErrorCode.SETTINGS_MISSING)


class ConflictError(TrackerError):
    """The request is well-formed but clashes with the current plan state."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.CONFLICT,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, code=code, status_code=409, details=details)


class AlreadyCompletedError(ConflictError):
    def __init__(self, workout_id: int) -> None:
        super().__init__(
            "Cannot reschedule completed workout",
            code=ErrorCode.ALREADY_COMPLETED,
            details={"workout_id": workout_id},
        )


class SlotConflictError(ConflictError):
    def __init__(self, week_number: int, day_of_week: int, occupant_id: int) -> None:
        super().__init__(
            "There is already a workout scheduled for that day",
            code=ErrorCode.SLOT_CONFLICT,
            details={"week_number": week_number, "day_of_week": day_of_week, "occupant_id": occupant_id},
        )


class OutOfRangeError(ConflictError):
    def __init__(self, target: Any) -> None:
        super().__init__(
            "Cannot reschedule outside of training plan dates",
            code=ErrorCode.OUT_OF_RANGE,
            details={"target_date": str(target)},
        )


class DependencyError(TrackerError):
    """An external collaborator (e.g. the analysis generator) failed."""

    def __init__(self, message: str, service: Optional[str] = None) -> None:
        details = {"service": service} if service else None
        super().__init__(message, code=ErrorCode.DEPENDENCY_ERROR, status_code=503, details=details)
