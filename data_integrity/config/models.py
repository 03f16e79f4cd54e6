"""Settings schema models using Pydantic."""

from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from data_integrity.violations.messages import DEFAULT_SCOPE, MessageTemplateSet


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log output formats."""

    JSON = "json"
    KEY_VALUE = "key-value"


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = Field(LogLevel.INFO, description="Log level")
    format: LogFormat = Field(LogFormat.KEY_VALUE, description="Log output format")

    model_config = ConfigDict(use_enum_values=True, frozen=True)


class CatalogConfig(BaseModel):
    """Where localized violation messages come from."""

    path: Optional[Path] = Field(None, description="YAML message catalog; none uses literal defaults")
    locale: str = Field("en", min_length=1, description="Top-level locale key in the catalog")
    scope: str = Field(DEFAULT_SCOPE, min_length=1, description="Key prefix of default templates")

    model_config = ConfigDict(frozen=True)

    @field_validator("locale", "scope")
    @classmethod
    def strip_whitespace(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("Field cannot be empty or whitespace-only")
        return stripped


class IntegritySettings(BaseModel):
    """Root settings object, built once at startup and never mutated."""

    messages: MessageTemplateSet = Field(
        default_factory=MessageTemplateSet, description="Default message templates"
    )
    catalog: CatalogConfig = Field(default_factory=CatalogConfig, description="Message catalog")
    logging: LoggingConfig = Field(default_factory=LoggingConfig, description="Logging settings")

    model_config = ConfigDict(frozen=True)
