"""Settings loader for data-integrity."""

from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from .environment import EnvironmentConfig
from .exceptions import ConfigurationError
from .models import IntegritySettings


def load_settings(settings_path: Optional[Path] = None) -> IntegritySettings:
    """
    Load and validate settings from a YAML file.

    Without a path, built-in defaults are returned. A relative catalog path is
    resolved against the settings file's directory.

    Args:
        settings_path: Optional path to the settings file

    Returns:
        Validated IntegritySettings

    Raises:
        ConfigurationError: If the file is missing, unparsable or invalid
    """
    if settings_path is None:
        return IntegritySettings()

    settings_path = Path(settings_path)

    try:
        with open(settings_path, "r") as f:
            settings_dict = yaml.safe_load(f)
    except FileNotFoundError:
        raise ConfigurationError(
            f"Settings file not found: {settings_path}",
            suggestions=[f"Ensure {settings_path} exists and is readable"],
        )
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Failed to parse YAML settings: {e}",
            suggestions=[
                "Check YAML syntax in your settings file",
                "Ensure proper indentation (use spaces, not tabs)",
            ],
        )

    if settings_dict is None:
        settings_dict = {}

    if not isinstance(settings_dict, dict):
        raise ConfigurationError(
            "Settings file must contain a mapping at the top level",
            suggestions=["Start the file with keys such as 'messages:' or 'catalog:'"],
        )

    settings = _validate(settings_dict)

    catalog_path = settings.catalog.path
    if catalog_path is not None and not catalog_path.is_absolute():
        catalog = settings.catalog.model_copy(
            update={"path": settings_path.parent / catalog_path}
        )
        settings = settings.model_copy(update={"catalog": catalog})

    return settings


def _validate(settings_dict: Dict[str, Any]) -> IntegritySettings:
    try:
        return IntegritySettings.model_validate(settings_dict)
    except ValidationError as e:
        errors = []
        for error in e.errors():
            field_path = " -> ".join(str(loc) for loc in error["loc"])
            if error["type"] == "missing":
                errors.append(f"Missing required field: {field_path}")
            elif "enum" in error["type"]:
                errors.append(f"Invalid value for '{field_path}': {error['msg']}")
            else:
                errors.append(f"{field_path}: {error['msg']}")

        raise ConfigurationError(
            "Settings validation failed",
            errors=errors,
            suggestions=[
                "Message templates must be non-empty strings",
                "Verify field types match the expected schema",
            ],
        )


def apply_environment(
    settings: IntegritySettings, env_config: EnvironmentConfig
) -> IntegritySettings:
    """Return settings with environment overrides applied (environment wins)."""
    if env_config.log_level:
        settings = settings.model_copy(
            update={"logging": settings.logging.model_copy(update={"level": env_config.log_level})}
        )
    if env_config.locale:
        settings = settings.model_copy(
            update={"catalog": settings.catalog.model_copy(update={"locale": env_config.locale})}
        )
    return settings


def validate_settings_file(settings_path: Path) -> bool:
    """
    Validate a settings file and report the outcome on stdout.

    Returns:
        True if valid, False otherwise
    """
    try:
        load_settings(settings_path)
    except ConfigurationError as e:
        print(f"✗ Settings validation failed:\n{e}")
        return False

    print(f"✓ Settings file {settings_path} is valid")
    return True
