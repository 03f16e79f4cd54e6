"""Persistence layer: database lifecycle, record saving and exceptions.

Public API:
    # Database initialization and session management
    - init_database(database_url: str, metadata: MetaData | None = None) -> Engine
    - get_session() -> ContextManager[Session]
    - close_database() -> None
    - get_engine() -> Engine

    # Saving records
    - IntegrityRepository: save / save_strict / delete with violation handling
    - IntegrityCheckedMixin: errors and violation markers for declarative models

    # Exceptions
    - PersistenceError: Base exception for all persistence errors
    - DatabaseConnectionError: Database connection/initialization failures
    - DataIntegrityError: Translated constraint violation (DuplicateKeyViolation,
      ForeignKeyViolation)
    - RecordNotSaved / RecordInvalid: strict save failures

Example usage:
    >>> from data_integrity.persistence import init_database, get_session, IntegrityRepository
    >>>
    >>> init_database("mysql+pymysql://app@localhost/app", Base.metadata)
    >>> with get_session() as session:
    ...     repo = IntegrityRepository(session, handler)
    ...     if not repo.save(user):
    ...         print(user.errors.full_messages())
"""

from .database import close_database, get_engine, get_session, init_database

from .repositories import IntegrityRepository
from .schema import IntegrityCheckedMixin, create_schema

from .exceptions import (
    DatabaseConnectionError,
    DataIntegrityError,
    DuplicateKeyViolation,
    ForeignKeyViolation,
    PersistenceError,
    RecordInvalid,
    RecordNotSaved,
)

__all__ = [
    # Database functions
    "init_database",
    "get_session",
    "close_database",
    "get_engine",
    "create_schema",
    # Records
    "IntegrityRepository",
    "IntegrityCheckedMixin",
    # Exceptions
    "PersistenceError",
    "DatabaseConnectionError",
    "DataIntegrityError",
    "DuplicateKeyViolation",
    "ForeignKeyViolation",
    "RecordNotSaved",
    "RecordInvalid",
]
