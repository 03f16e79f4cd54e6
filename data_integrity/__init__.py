"""Convert database constraint violations into record validation errors.

Example:
    >>> from data_integrity import ViolationConfig, build_handler, registry
    >>>
    >>> @registry.register(ViolationConfig().handle_unique_key_violation("user_name"))
    ... class User(Base, IntegrityCheckedMixin):
    ...     __tablename__ = "users"
    >>>
    >>> handler = build_handler(bind=engine)
    >>> handler.execute_with_check(user, lambda: save(user))
    False
    >>> user.errors.on("user_name")
    ['has already been taken']
"""

from .factory import build_handler
from .persistence import (
    DataIntegrityError,
    DuplicateKeyViolation,
    ForeignKeyViolation,
    IntegrityCheckedMixin,
    IntegrityRepository,
    RecordInvalid,
    RecordNotSaved,
)
from .violations import (
    MessageKey,
    MessageTemplateSet,
    ViolationConfig,
    ViolationHandler,
    registry,
)

__version__ = "0.1.0"

__all__ = [
    "build_handler",
    "ViolationHandler",
    "ViolationConfig",
    "MessageKey",
    "MessageTemplateSet",
    "registry",
    "IntegrityCheckedMixin",
    "IntegrityRepository",
    "DataIntegrityError",
    "DuplicateKeyViolation",
    "ForeignKeyViolation",
    "RecordNotSaved",
    "RecordInvalid",
]
