"""Repository saving records with data-integrity checks.

Saves run inside a SAVEPOINT so a trapped violation only rolls back the
failed statement; the surrounding session stays usable.
"""

import logging
from typing import TYPE_CHECKING, Any, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .exceptions import RecordNotSaved

if TYPE_CHECKING:
    from data_integrity.violations.handler import ViolationHandler

logger = logging.getLogger(__name__)

R = TypeVar("R")


class IntegrityRepository:
    """Insert, update and delete records, reporting violations as record errors."""

    def __init__(self, session: Session, handler: "ViolationHandler"):
        """Initialize repository with database session and violation handler.

        Args:
            session: SQLAlchemy session for database operations
            handler: Handler converting constraint violations into record errors
        """
        self.session = session
        self.handler = handler

    def save(self, record: Any) -> bool:
        """Insert or update ``record``.

        Returns:
            True if saved, False if a violation was recorded on ``record.errors``

        Raises:
            SQLAlchemyError: Unchanged, for failures other than constraint violations
        """
        record.errors.clear()

        def flush_record():
            with self.session.begin_nested():
                self.session.add(record)
                self.session.flush()

        try:
            saved = self.handler.execute_with_check(record, flush_record)
        except SQLAlchemyError as e:
            logger.error(f"Error saving {type(record).__name__}: {e}", exc_info=True)
            raise

        if not saved:
            logger.info(
                f"{type(record).__name__} not saved: {', '.join(record.errors.full_messages())}"
            )
        return saved

    def save_strict(self, record: R) -> R:
        """Save ``record`` or raise.

        Raises:
            RecordInvalid: If a constraint violation was recorded
            RecordNotSaved: If the save failed for any other reported reason
        """
        return self.handler.wrap_strict_save(record, lambda: self._save_or_raise(record))

    def delete(self, record: Any) -> bool:
        """Delete ``record``.

        Returns:
            True if deleted, False if a violation (e.g. rows still referencing
            it) was recorded on ``record.errors``
        """
        record.errors.clear()

        def flush_delete():
            with self.session.begin_nested():
                self.session.delete(record)
                self.session.flush()

        return self.handler.execute_with_check(record, flush_delete)

    def _save_or_raise(self, record: R) -> R:
        if not self.save(record):
            raise RecordNotSaved(f"Failed to save {type(record).__name__}", record)
        return record
