"""Settings management for data-integrity."""

from .environment import EnvironmentConfig, load_environment_config
from .exceptions import ConfigurationError
from .loader import apply_environment, load_settings, validate_settings_file
from .models import CatalogConfig, IntegritySettings, LogFormat, LoggingConfig, LogLevel

__all__ = [
    # Loader functions
    "load_settings",
    "apply_environment",
    "validate_settings_file",
    "load_environment_config",
    # Settings models
    "IntegritySettings",
    "CatalogConfig",
    "LoggingConfig",
    "EnvironmentConfig",
    # Enums
    "LogLevel",
    "LogFormat",
    # Exceptions
    "ConfigurationError",
]
