"""Core domain models for constraint violations and validation errors.

This module defines the data structures passed between the violation
handling stages:
- ViolationType: classification of a raw database error
- IndexDefinition: one non-primary index as reported by schema introspection
- RawViolation / ResolvedViolation: a failed attempt before and after column resolution
- ErrorEntry / ErrorCollection: validation errors attached to a record
"""

from enum import Enum
from typing import Iterator, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ViolationType(str, Enum):
    """Classification of a persistence failure."""

    DUPLICATE_KEY = "duplicate_key"
    FOREIGN_KEY = "foreign_key"
    NONE = "none"


class IndexDefinition(BaseModel):
    """A table index and its ordered column list."""

    name: str = Field(..., min_length=1, description="Index name as known to the database")
    columns: Tuple[str, ...] = Field(..., description="Indexed columns in index order")
    unique: bool = Field(False, description="Whether the index enforces uniqueness")

    model_config = ConfigDict(frozen=True)


class RawViolation(BaseModel):
    """The driver error text of a failed attempt plus its classification."""

    text: str
    violation_type: ViolationType

    model_config = ConfigDict(frozen=True)


class ResolvedViolation(BaseModel):
    """A classified violation with the columns it maps to.

    An empty ``columns`` tuple means the violated key could not be determined.
    """

    violation_type: ViolationType
    columns: Tuple[str, ...] = ()

    model_config = ConfigDict(frozen=True)

    @property
    def field(self) -> Optional[str]:
        """Column the error is attached to, or None for a whole-record error."""
        return self.columns[0] if self.columns else None


class ErrorEntry(BaseModel):
    """A single validation error on a field, or on the record when field is None."""

    field: Optional[str] = None
    message: str

    model_config = ConfigDict(frozen=True)

    @field_validator("message")
    @classmethod
    def message_not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Error message cannot be empty or whitespace-only")
        return v

    def full_message(self) -> str:
        """Message prefixed with a humanized field name, e.g. "User name is taken"."""
        if self.field is None:
            return self.message
        return f"{self.field.replace('_', ' ').capitalize()} {self.message}"


class ErrorCollection:
    """Validation errors collected on a record during a save attempt."""

    def __init__(self):
        self._entries: List[ErrorEntry] = []

    def add(self, field: str, message: str) -> ErrorEntry:
        """Attach an error to ``field``."""
        entry = ErrorEntry(field=field, message=message)
        self._entries.append(entry)
        return entry

    def add_to_base(self, message: str) -> ErrorEntry:
        """Attach an error to the record as a whole."""
        entry = ErrorEntry(field=None, message=message)
        self._entries.append(entry)
        return entry

    def on(self, field: str) -> List[str]:
        """Messages recorded for ``field``."""
        return [entry.message for entry in self._entries if entry.field == field]

    def on_base(self) -> List[str]:
        """Messages recorded for the record as a whole."""
        return [entry.message for entry in self._entries if entry.field is None]

    def full_messages(self) -> List[str]:
        return [entry.full_message() for entry in self._entries]

    def clear(self) -> None:
        self._entries.clear()

    def __iter__(self) -> Iterator[ErrorEntry]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)

    def __repr__(self) -> str:
        return f"ErrorCollection({self._entries!r})"
