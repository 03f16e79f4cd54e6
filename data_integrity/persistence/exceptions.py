"""Persistence layer exceptions.

All persistence exceptions inherit from PersistenceError for easy catching.
Unrelated database failures are never wrapped in these classes: the original
SQLAlchemy exception reaches the caller unchanged.
"""

from typing import Any, Optional

from data_integrity.domain.models import ResolvedViolation


class PersistenceError(Exception):
    """Base exception for all persistence layer errors."""

    pass


class DatabaseConnectionError(PersistenceError):
    """Raised when database connection or initialization fails.

    Examples:
    - Invalid database URL format
    - Database not reachable
    - Session requested before init_database()
    """

    pass


class DataIntegrityError(PersistenceError):
    """Raised when a constraint violation is translated for a caller without a record.

    Attributes:
        violation: The classified violation and the columns it maps to
        message: User-facing message resolved for the violation
    """

    def __init__(self, message: str, violation: ResolvedViolation):
        self.message = message
        self.violation = violation
        super().__init__(self._format_message())

    @property
    def field(self) -> Optional[str]:
        return self.violation.field

    def _format_message(self) -> str:
        if self.field is None:
            return self.message
        return f"{self.field} {self.message}"


class DuplicateKeyViolation(DataIntegrityError):
    """A row collided with an existing row on a unique key."""

    pass


class ForeignKeyViolation(DataIntegrityError):
    """A row referenced a related row that does not exist (or is still referenced)."""

    pass


class RecordNotSaved(PersistenceError):
    """Raised by strict saves when the record could not be saved."""

    def __init__(self, message: str = "Failed to save the record", record: Any = None):
        self.record = record
        super().__init__(message)


class RecordInvalid(PersistenceError):
    """Raised by strict saves when the record failed with validation errors."""

    def __init__(self, record: Any):
        self.record = record
        errors = getattr(record, "errors", None)
        messages = errors.full_messages() if errors else []
        detail = ", ".join(messages) if messages else "record is invalid"
        super().__init__(f"Validation failed: {detail}")
