"""Model-side support for violation handling.

``IntegrityCheckedMixin`` gives SQLAlchemy declarative models the state the
violation handler reads and writes: an ``errors`` collection, the two
per-attempt markers, and an optional class-level violation config.
"""

import logging
from typing import ClassVar, Optional

from sqlalchemy import MetaData
from sqlalchemy.engine import Engine

from data_integrity.domain.models import ErrorCollection

logger = logging.getLogger(__name__)


class IntegrityCheckedMixin:
    """Mixin for models saved through the violation handler.

    Example:
        >>> class User(Base, IntegrityCheckedMixin):
        ...     __tablename__ = "users"
        ...     __violation_config__ = ViolationConfig().handle_unique_key_violation("user_name")
    """

    # ViolationConfig, looked up by the registry when the class is not registered
    __violation_config__: ClassVar[Optional[object]] = None

    duplicate_detected = False
    foreign_key_detected = False

    @property
    def errors(self) -> ErrorCollection:
        errors = getattr(self, "_integrity_errors", None)
        if errors is None:
            errors = ErrorCollection()
            self._integrity_errors = errors
        return errors

    def is_valid(self) -> bool:
        """True when no errors are recorded."""
        return not self.errors


def create_schema(engine: Engine, metadata: MetaData) -> None:
    """Create all tables and indexes of ``metadata`` that don't exist yet (idempotent).

    Args:
        engine: SQLAlchemy engine instance
        metadata: Metadata holding the application's tables
    """
    logger.info("Creating database schema if not exists")

    try:
        metadata.create_all(engine, checkfirst=True)

        from sqlalchemy import inspect

        tables = inspect(engine).get_table_names()
        logger.info(f"Database schema ready. Tables: {', '.join(tables)}")

    except Exception as e:
        logger.error(f"Failed to create database schema: {e}", exc_info=True)
        raise
