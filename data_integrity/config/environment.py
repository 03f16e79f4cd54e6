"""Environment variable loading and validation."""

import os
from typing import Optional

from .exceptions import ConfigurationError

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class EnvironmentConfig:
    """Environment variable configuration holder."""

    def __init__(
        self,
        log_level: Optional[str] = None,
        locale: Optional[str] = None,
        database_url: Optional[str] = None,
    ):
        self.log_level = log_level
        self.locale = locale
        self.database_url = database_url


def load_environment_config() -> EnvironmentConfig:
    """
    Load and validate environment variables.

    Optional environment variables:
    - DATA_INTEGRITY_LOG_LEVEL: Override log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    - DATA_INTEGRITY_LOCALE: Override the message catalog locale
    - DATABASE_URL: Database used for index introspection

    Returns:
        EnvironmentConfig object with validated values

    Raises:
        ConfigurationError: If a variable is set to an invalid value
    """
    errors = []

    log_level = os.getenv("DATA_INTEGRITY_LOG_LEVEL")
    locale = os.getenv("DATA_INTEGRITY_LOCALE")
    database_url = os.getenv("DATABASE_URL")

    if log_level:
        if log_level.upper() not in VALID_LOG_LEVELS:
            errors.append(
                f"Invalid DATA_INTEGRITY_LOG_LEVEL: '{log_level}'. "
                f"Must be one of: {', '.join(VALID_LOG_LEVELS)}"
            )
        else:
            log_level = log_level.upper()

    if locale is not None and not locale.strip():
        errors.append("DATA_INTEGRITY_LOCALE is set but empty")

    if errors:
        raise ConfigurationError(
            "Environment variable validation failed",
            errors=errors,
            suggestions=[
                "Unset variables you do not need; all of them are optional",
                "Check the variable values in your .env file",
            ],
        )

    return EnvironmentConfig(
        log_level=log_level,
        locale=locale.strip() if locale else None,
        database_url=database_url or None,
    )
