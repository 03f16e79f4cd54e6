"""Turn constraint violations raised during a save into validation errors.

The handler wraps a persistence operation. When the operation fails with a
SQLAlchemy ``DBAPIError`` whose driver message is a duplicate-key or
foreign-key violation, the failure is recorded on the record's ``errors``
and the wrapped call reports ``False``, the same way a failed validation
would. Any other database failure is re-raised untouched.

Example:
    >>> handler = ViolationHandler(SqlAlchemyIndexProvider(engine))
    >>> def insert():
    ...     with session.begin_nested():
    ...         session.add(user)
    ...         session.flush()
    >>> if not handler.execute_with_check(user, insert):
    ...     print(user.errors.full_messages())
"""

from typing import Any, Callable, List, Optional, Tuple, TypeVar

from sqlalchemy.exc import DBAPIError

from data_integrity.domain.models import ResolvedViolation, ViolationType
from data_integrity.logging import get_logger
from data_integrity.logging.context import log_context
from data_integrity.persistence.exceptions import (
    DataIntegrityError,
    DuplicateKeyViolation,
    ForeignKeyViolation,
    RecordInvalid,
    RecordNotSaved,
)

from .classifier import ErrorClassifier, error_text
from .introspection import IndexProvider
from .messages import MessageResolver
from .registry import ViolationConfig, ViolationRegistry, registry as default_registry
from .resolvers import ForeignKeyResolver, IndexResolver

logger = get_logger(__name__, component="violations")

T = TypeVar("T")

DUPLICATE_MARKER = "duplicate_detected"
FOREIGN_KEY_MARKER = "foreign_key_detected"

_MARKERS = {
    ViolationType.DUPLICATE_KEY: DUPLICATE_MARKER,
    ViolationType.FOREIGN_KEY: FOREIGN_KEY_MARKER,
}

_EXCEPTIONS = {
    ViolationType.DUPLICATE_KEY: DuplicateKeyViolation,
    ViolationType.FOREIGN_KEY: ForeignKeyViolation,
}


def reset_violation_state(record: Any) -> None:
    """Clear the per-attempt violation markers on ``record``."""
    setattr(record, DUPLICATE_MARKER, False)
    setattr(record, FOREIGN_KEY_MARKER, False)


def violation_detected(record: Any) -> bool:
    """Whether the last protected attempt on ``record`` hit a violation."""
    return bool(
        getattr(record, DUPLICATE_MARKER, False) or getattr(record, FOREIGN_KEY_MARKER, False)
    )


def _table_of(entity_type: Optional[type]) -> Tuple[Optional[str], Optional[Tuple[str, ...]]]:
    """Table name and column names of a mapped class, when it has a table."""
    table = getattr(entity_type, "__table__", None)
    if table is not None:
        return table.name, tuple(table.columns.keys())
    return getattr(entity_type, "__tablename__", None), None


class ViolationHandler:
    """Classify persistence failures and record violations on the failing record."""

    def __init__(
        self,
        index_provider: Optional[IndexProvider] = None,
        message_resolver: Optional[MessageResolver] = None,
        registry: ViolationRegistry = default_registry,
        classifier: Optional[ErrorClassifier] = None,
        index_resolver: Optional[IndexResolver] = None,
        foreign_key_resolver: Optional[ForeignKeyResolver] = None,
    ):
        """Initialize handler with its collaborators.

        Args:
            index_provider: Schema introspection used to resolve violated indexes;
                without one every duplicate gets the generic message
            message_resolver: Message composition (defaults and catalog)
            registry: Per-model violation configs
            classifier: Error classifier (MySQL patterns by default)
            index_resolver: Duplicate-key column resolution
            foreign_key_resolver: Foreign-key column extraction
        """
        self.index_provider = index_provider
        self.message_resolver = message_resolver or MessageResolver()
        self.registry = registry
        self.classifier = classifier or ErrorClassifier()
        self.index_resolver = index_resolver or IndexResolver(self.classifier.patterns)
        self.foreign_key_resolver = foreign_key_resolver or ForeignKeyResolver(
            self.classifier.patterns
        )

    def execute_with_check(self, record: Any, operation: Callable[[], Any]) -> bool:
        """Run ``operation`` and trap data-integrity violations onto ``record``.

        Args:
            record: Object being saved; must expose an ``errors`` ErrorCollection
            operation: Zero-argument callable performing the insert or update

        Returns:
            True if the operation completed, False if a violation was recorded

        Raises:
            DBAPIError: The original failure when it is not a data-integrity violation
        """
        reset_violation_state(record)
        try:
            operation()
        except DBAPIError as exc:
            if not self._record_violations(exc, record):
                raise
            return False
        return True

    def handle_error(self, exc: BaseException, record: Any) -> List[ResolvedViolation]:
        """Record the violations carried by ``exc`` on ``record``.

        For callers that catch the persistence failure themselves.

        Raises:
            exc: Unchanged, when it is not a data-integrity violation
        """
        resolved = self._record_violations(exc, record)
        if not resolved:
            raise exc
        return resolved

    def translate(
        self, exc: BaseException, entity_type: Optional[type] = None
    ) -> List[DataIntegrityError]:
        """Convert ``exc`` into violation exceptions without touching any record.

        Args:
            exc: Persistence failure
            entity_type: Mapped class the failed statement targeted, used for
                index lookup and custom messages

        Returns:
            One exception per detected violation; empty for unrelated failures
        """
        config = self.registry.get(entity_type) if entity_type else None
        table_name, _ = _table_of(entity_type)

        translated = []
        for violation in self.resolve(exc, table_name):
            message = self.message_resolver.resolve_message(
                violation.violation_type, violation.columns, config
            )
            translated.append(_EXCEPTIONS[violation.violation_type](message, violation))
        return translated

    def wrap_strict_save(self, record: Any, operation: Callable[[], T]) -> T:
        """Run a save that raises RecordNotSaved on failure.

        When the failure came from a violation recorded during this attempt,
        RecordInvalid is raised instead; otherwise RecordNotSaved propagates.
        """
        reset_violation_state(record)
        try:
            return operation()
        except RecordNotSaved as e:
            if violation_detected(record):
                raise RecordInvalid(record) from e
            raise

    def resolve(self, exc: BaseException, table_name: Optional[str]) -> List[ResolvedViolation]:
        """Classify ``exc`` and resolve the columns of each violation it carries."""
        return self.resolve_text(error_text(exc), table_name)

    def resolve_text(self, text: str, table_name: Optional[str]) -> List[ResolvedViolation]:
        """Classify a driver error message and resolve its columns."""
        resolved = []

        for kind in self.classifier.classify_all(text):
            if kind == ViolationType.DUPLICATE_KEY:
                columns = self._duplicate_columns(text, table_name)
            else:
                column = self.foreign_key_resolver.resolve_foreign_key(text)
                columns = (column,) if column else ()
            resolved.append(ResolvedViolation(violation_type=kind, columns=columns))

        return resolved

    def _duplicate_columns(self, text: str, table_name: Optional[str]) -> Tuple[str, ...]:
        if self.index_provider is None or not table_name:
            return ()
        indexes = self.index_provider.list_indexes(table_name)
        return self.index_resolver.resolve_columns(text, indexes)

    def _record_violations(self, exc: BaseException, record: Any) -> List[ResolvedViolation]:
        entity_type = type(record)
        table_name, column_names = _table_of(entity_type)

        with log_context(record_type=entity_type.__name__, table=table_name):
            resolved = self.resolve(exc, table_name)
            if not resolved:
                logger.debug(
                    "Persistence failure is not a data-integrity violation",
                    extra={"event": "violation.unrelated", "error_type": type(exc).__name__},
                )
                return []

            config = self.registry.get(entity_type)
            for violation in resolved:
                self._add_error(record, violation, config, column_names)
                setattr(record, _MARKERS[violation.violation_type], True)

        return resolved

    def _add_error(
        self,
        record: Any,
        violation: ResolvedViolation,
        config: ViolationConfig,
        column_names: Optional[Tuple[str, ...]],
    ) -> None:
        message = self.message_resolver.resolve_message(
            violation.violation_type, violation.columns, config
        )
        field = violation.field

        if field is None:
            record.errors.add_to_base(message)
        elif (
            violation.violation_type == ViolationType.FOREIGN_KEY
            and column_names is not None
            and field not in column_names
        ):
            record.errors.add_to_base(f"{field} {message}")
        else:
            record.errors.add(field, message)

        logger.info(
            f"Recorded {violation.violation_type.value} violation",
            extra={
                "event": f"violation.{violation.violation_type.value}",
                "field": field,
                "columns": list(violation.columns),
            },
        )
