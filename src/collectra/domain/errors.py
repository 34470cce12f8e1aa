"""Domain errors for collection session management.

Every error carries an ErrorCode and a user-safe message. All of them are
terminal for the triggering call; ConflictError is the one callers are
expected to retry after reloading the session.
"""

from dataclasses import dataclass
from enum import Enum


class ErrorCode(str, Enum):
    """Domain error codes."""

    VALIDATION_FAILED = "VALIDATION_FAILED"
    INVALID_TRANSITION = "INVALID_TRANSITION"
    INVALID_STATE = "INVALID_STATE"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"


@dataclass
class FieldError:
    """A single input validation failure."""

    field: str
    message: str
    code: str


class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode = ErrorCode.VALIDATION_FAILED

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class ValidationError(DomainError):
    """Raised when required input is missing or malformed."""

    code = ErrorCode.VALIDATION_FAILED

    def __init__(self, errors: list[FieldError]) -> None:
        self.errors = errors
        summary = "; ".join(f"{e.field}: {e.message}" for e in errors)
        super().__init__(f"Validation failed: {summary}")

    @classmethod
    def single(cls, field: str, message: str, code: str) -> "ValidationError":
        """Build a ValidationError for one failing field."""
        return cls([FieldError(field=field, message=message, code=code)])


class InvalidTransitionError(DomainError):
    """Raised when a requested status change is not an edge of the status graph."""

    code = ErrorCode.INVALID_TRANSITION

    def __init__(self, current: str, target: str) -> None:
        self.current = current
        self.target = target
        super().__init__(f"Cannot transition session from '{current}' to '{target}'")


class InvalidStateError(DomainError):
    """Raised when an operation is not allowed in the current state."""

    code = ErrorCode.INVALID_STATE


class NotFoundError(DomainError):
    """Raised when a session or one of its problem reports does not exist."""

    code = ErrorCode.NOT_FOUND

    def __init__(self, entity: str, entity_id: str) -> None:
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found")


class ConflictError(DomainError):
    """Raised when a write is based on a stale version of the session."""

    code = ErrorCode.CONFLICT

    def __init__(
        self,
        session_id: str,
        expected_version: int | None = None,
        actual_version: int | None = None,
        message: str | None = None,
    ) -> None:
        self.session_id = session_id
        self.expected_version = expected_version
        self.actual_version = actual_version
        super().__init__(
            message
            or "Session was modified concurrently; reload and apply the change again"
        )


class AmountMismatchWarning(UserWarning):
    """Issued when a supplied actual amount differs from the paper-type total."""

    def __init__(self, session_id: str, actual_amount: float, paper_type_total: float) -> None:
        self.session_id = session_id
        self.actual_amount = actual_amount
        self.paper_type_total = paper_type_total
        super().__init__(
            f"Actual amount {actual_amount:g} differs from paper-type total "
            f"{paper_type_total:g} for session {session_id}"
        )
