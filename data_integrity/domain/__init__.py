"""Domain models for violation handling."""

from .models import (
    ErrorCollection,
    ErrorEntry,
    IndexDefinition,
    RawViolation,
    ResolvedViolation,
    ViolationType,
)

__all__ = [
    "ViolationType",
    "IndexDefinition",
    "RawViolation",
    "ResolvedViolation",
    "ErrorEntry",
    "ErrorCollection",
]
