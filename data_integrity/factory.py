"""Factory wiring a ViolationHandler from settings."""

import logging
from typing import Optional, Union

import yaml
from sqlalchemy.engine import Connection, Engine

from data_integrity.config.exceptions import ConfigurationError
from data_integrity.config.models import IntegritySettings
from data_integrity.violations.classifier import ErrorClassifier, PatternSet
from data_integrity.violations.handler import ViolationHandler
from data_integrity.violations.introspection import IndexProvider, SqlAlchemyIndexProvider
from data_integrity.violations.messages import MessageCatalog, MessageResolver
from data_integrity.violations.registry import ViolationRegistry, registry as default_registry

logger = logging.getLogger(__name__)


def build_handler(
    settings: Optional[IntegritySettings] = None,
    bind: Union[Engine, Connection, None] = None,
    index_provider: Optional[IndexProvider] = None,
    registry: ViolationRegistry = default_registry,
    patterns: Optional[PatternSet] = None,
) -> ViolationHandler:
    """Build a handler from settings.

    Args:
        settings: Validated settings (defaults when omitted)
        bind: Engine or connection used for index introspection
        index_provider: Explicit index provider; takes precedence over ``bind``
        registry: Per-model violation configs
        patterns: Error message patterns of the target engine (MySQL by default)

    Returns:
        Configured ViolationHandler

    Raises:
        ConfigurationError: If the message catalog cannot be loaded

    Example:
        >>> handler = build_handler(load_settings(Path("integrity.yaml")), bind=engine)
    """
    settings = settings or IntegritySettings()

    catalog = None
    if settings.catalog.path is not None:
        try:
            catalog = MessageCatalog.from_yaml(settings.catalog.path, settings.catalog.locale)
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise ConfigurationError(
                f"Failed to load message catalog: {e}",
                suggestions=[
                    f"Ensure {settings.catalog.path} exists and is valid YAML",
                    "Remove catalog.path to use the built-in messages",
                ],
            ) from e

    if index_provider is None and bind is not None:
        index_provider = SqlAlchemyIndexProvider(bind)

    logger.debug(
        "Building violation handler",
        extra={
            "catalog": str(settings.catalog.path) if settings.catalog.path else None,
            "locale": settings.catalog.locale,
            "introspection": type(index_provider).__name__ if index_provider else None,
        },
    )

    return ViolationHandler(
        index_provider=index_provider,
        message_resolver=MessageResolver(
            templates=settings.messages, catalog=catalog, scope=settings.catalog.scope
        ),
        registry=registry,
        classifier=ErrorClassifier(patterns) if patterns else None,
    )
