"""Constraint violation handling.

Public API:
    - ViolationHandler: wraps saves and records violations on the record
    - ViolationConfig / registry: per-model unique-key and foreign-key checks
    - MessageResolver / MessageCatalog / MessageTemplateSet: message composition
    - ErrorClassifier / IndexResolver / ForeignKeyResolver: error parsing
    - SqlAlchemyIndexProvider / StaticIndexProvider: schema index listing
"""

from .classifier import MYSQL_PATTERNS, ErrorClassifier, PatternSet, error_text
from .handler import ViolationHandler, reset_violation_state, violation_detected
from .introspection import IndexProvider, SqlAlchemyIndexProvider, StaticIndexProvider
from .messages import (
    DEFAULT_TEMPLATES,
    MessageCatalog,
    MessageResolver,
    MessageTemplateSet,
    render_template,
)
from .registry import (
    ForeignKeyCheck,
    MessageKey,
    UniqueKeyCheck,
    ViolationConfig,
    ViolationRegistry,
    registry,
)
from .resolvers import ForeignKeyResolver, IndexResolver

__all__ = [
    # Orchestration
    "ViolationHandler",
    "reset_violation_state",
    "violation_detected",
    # Configuration
    "ViolationConfig",
    "ViolationRegistry",
    "UniqueKeyCheck",
    "ForeignKeyCheck",
    "MessageKey",
    "registry",
    # Messages
    "MessageResolver",
    "MessageCatalog",
    "MessageTemplateSet",
    "DEFAULT_TEMPLATES",
    "render_template",
    # Parsing
    "ErrorClassifier",
    "PatternSet",
    "MYSQL_PATTERNS",
    "error_text",
    "IndexResolver",
    "ForeignKeyResolver",
    # Introspection
    "IndexProvider",
    "SqlAlchemyIndexProvider",
    "StaticIndexProvider",
]
