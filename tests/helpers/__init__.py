"""Test helper utilities for data-integrity tests."""

from .models import (
    FK_SPECIES_MESSAGE,
    SQLITE_PATTERNS,
    USER_INDEXES,
    Animal,
    Base,
    Species,
    User,
    duplicate_entry_error,
    foreign_key_error,
    mysql_integrity_error,
    unrelated_error,
)

__all__ = [
    "Base",
    "User",
    "Animal",
    "Species",
    "USER_INDEXES",
    "FK_SPECIES_MESSAGE",
    "SQLITE_PATTERNS",
    "mysql_integrity_error",
    "duplicate_entry_error",
    "foreign_key_error",
    "unrelated_error",
]
