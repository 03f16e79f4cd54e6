"""Declarative per-model configuration of violation checks.

A ``ViolationConfig`` is built once when a model class is defined and shared
read-only by all its instances::

    @registry.register(
        ViolationConfig()
        .handle_unique_key_violation("user_name", message="is taken")
        .handle_unique_key_violation("email", scope="tenant_id")
        .handle_foreign_key_violation("primary_email_id", message="is not available")
    )
    class User(Base, IntegrityCheckedMixin):
        ...

Every builder method returns a new config; existing configs never change.
"""

from typing import Dict, Iterable, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from data_integrity.logging import get_logger

logger = get_logger(__name__, component="violations")


class MessageKey(BaseModel):
    """A custom message given as a catalog key rather than literal text."""

    key: str = Field(..., min_length=1)

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return self.key


CustomMessage = Union[str, MessageKey, None]


class UniqueKeyCheck(BaseModel):
    """A field registered for unique-key violation handling."""

    field_name: str = Field(..., min_length=1)
    columns: Tuple[str, ...] = Field(..., description="Sorted, unique; field plus scope columns")
    message: CustomMessage = None

    model_config = ConfigDict(frozen=True)

    @field_validator("columns")
    @classmethod
    def normalize_columns(cls, v: Tuple[str, ...]) -> Tuple[str, ...]:
        return tuple(sorted(set(v)))


class ForeignKeyCheck(BaseModel):
    """A field registered for foreign-key violation handling."""

    field_name: str = Field(..., min_length=1)
    message: CustomMessage = None

    model_config = ConfigDict(frozen=True)


def _as_names(value: Union[str, Iterable[str], None]) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    return tuple(value)


class ViolationConfig(BaseModel):
    """Unique-key and foreign-key checks registered for one model class."""

    unique_key_checks: Dict[str, UniqueKeyCheck] = Field(default_factory=dict)
    foreign_key_checks: Dict[str, ForeignKeyCheck] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)

    def handle_unique_key_violation(
        self,
        *names: str,
        message: CustomMessage = None,
        scope: Union[str, Iterable[str], None] = None,
    ) -> "ViolationConfig":
        """Register unique-key handling for each of ``names``.

        Args:
            *names: Field names backed by a unique index
            message: Custom message (literal text or MessageKey)
            scope: Additional columns forming a composite key with each name

        Returns:
            New config including the checks
        """
        if not names:
            raise ValueError("handle_unique_key_violation requires at least one field name")

        scope_columns = _as_names(scope)
        checks = dict(self.unique_key_checks)
        for name in names:
            checks[name] = UniqueKeyCheck(
                field_name=name, columns=(name, *scope_columns), message=message
            )
        return self.model_copy(update={"unique_key_checks": checks})

    def handle_foreign_key_violation(
        self, name: str, message: CustomMessage = None
    ) -> "ViolationConfig":
        """Register foreign-key handling for ``name`` with an optional custom message."""
        checks = dict(self.foreign_key_checks)
        checks[name] = ForeignKeyCheck(field_name=name, message=message)
        return self.model_copy(update={"foreign_key_checks": checks})

    def handle_foreign_key_violations(
        self, messages: Mapping[str, CustomMessage]
    ) -> "ViolationConfig":
        """Register several foreign keys at once from a field-to-message mapping."""
        config = self
        for name, message in messages.items():
            config = config.handle_foreign_key_violation(name, message=message)
        return config

    def unique_check_for(self, columns: Tuple[str, ...]) -> Optional[UniqueKeyCheck]:
        """Find the check for a resolved column set.

        The check registered under the first column wins; otherwise a check
        whose column set equals the resolved one.
        """
        if not columns:
            return None

        check = self.unique_key_checks.get(columns[0])
        if check is not None:
            return check

        wanted = tuple(sorted(set(columns)))
        for candidate in self.unique_key_checks.values():
            if candidate.columns == wanted:
                return candidate
        return None

    def foreign_key_check_for(self, column: Optional[str]) -> Optional[ForeignKeyCheck]:
        if column is None:
            return None
        return self.foreign_key_checks.get(column)


EMPTY_CONFIG = ViolationConfig()


class ViolationRegistry:
    """Violation configs keyed by model class.

    Lookups walk the class MRO, so subclasses inherit their parents'
    registration unless they register their own.
    """

    def __init__(self):
        self._configs: Dict[type, ViolationConfig] = {}

    def register(self, config: ViolationConfig):
        """Class decorator attaching ``config`` to the decorated class."""

        def decorator(cls: type) -> type:
            self.set(cls, config)
            return cls

        return decorator

    def set(self, entity_type: type, config: ViolationConfig) -> None:
        self._configs[entity_type] = config
        logger.debug(
            f"Registered violation checks for {entity_type.__name__}",
            extra={
                "event": "violation.config.registered",
                "record_type": entity_type.__name__,
                "unique_keys": sorted(config.unique_key_checks),
                "foreign_keys": sorted(config.foreign_key_checks),
            },
        )

    def get(self, entity_type: type) -> ViolationConfig:
        """Config for ``entity_type``, falling back to its own ``__violation_config__``."""
        for klass in entity_type.__mro__:
            config = self._configs.get(klass)
            if config is not None:
                return config
        return getattr(entity_type, "__violation_config__", None) or EMPTY_CONFIG

    def __contains__(self, entity_type: type) -> bool:
        return any(klass in self._configs for klass in entity_type.__mro__)


registry = ViolationRegistry()
