"""User-facing messages for constraint violations.

Resolution order for a violation:

1. A custom message registered on the model's ViolationConfig. Literal text
   is used as-is; a ``MessageKey`` is looked up in the message catalog.
2. The default template for the violation shape, looked up in the catalog
   under ``<scope>.<template>`` with the literal template as fallback:

   ==================  =============================================
   foreign key         ``foreign_key``
   unknown columns     ``taken_generic``
   single column       ``taken``
   composite key       ``taken_multiple`` with ``{{context}}`` set to
                       the scope columns joined by ``/``
   ==================  =============================================

Templates are Jinja2 strings rendered with StrictUndefined.
"""

from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence, Union

import yaml
from jinja2 import Environment, StrictUndefined, TemplateError
from pydantic import BaseModel, ConfigDict, Field, field_validator

from data_integrity.domain.models import ViolationType
from data_integrity.logging import get_logger

from .registry import CustomMessage, MessageKey, ViolationConfig

logger = get_logger(__name__, component="messages")

DEFAULT_SCOPE = "data_integrity.errors.messages"

_jinja = Environment(undefined=StrictUndefined, autoescape=False)


def render_template(template: str, params: Optional[Mapping[str, Any]] = None) -> str:
    """Render a ``{{placeholder}}`` template string.

    Raises:
        jinja2.TemplateError: If the template is malformed or references a missing parameter
    """
    return _jinja.from_string(template).render(**(params or {}))


class MessageTemplateSet(BaseModel):
    """Default message templates, fixed for the life of the process."""

    taken: str = Field("has already been taken", min_length=1)
    taken_multiple: str = Field("has already been taken for {{context}}", min_length=1)
    taken_generic: str = Field("Duplicate field.", min_length=1)
    foreign_key: str = Field("association does not exist.", min_length=1)

    model_config = ConfigDict(frozen=True)

    @field_validator("taken", "taken_multiple", "taken_generic", "foreign_key")
    @classmethod
    def template_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Message template cannot be empty or whitespace-only")
        return v


DEFAULT_TEMPLATES = MessageTemplateSet()


class MessageCatalog:
    """Localized message lookup over a nested dictionary of templates.

    Keys are dotted paths (``data_integrity.errors.messages.taken``). The
    YAML layout mirrors that, rooted at the locale::

        en:
          data_integrity:
            errors:
              messages:
                taken: "is already in use"
    """

    def __init__(self, messages: Optional[Mapping[str, Any]] = None, locale: str = "en"):
        self.locale = locale
        self._messages: Mapping[str, Any] = messages or {}

    @classmethod
    def from_yaml(cls, path: Union[str, Path], locale: str = "en") -> "MessageCatalog":
        """Load the ``locale`` section of a YAML catalog file."""
        with open(path, "r", encoding="utf-8") as f:
            document = yaml.safe_load(f) or {}

        if not isinstance(document, dict):
            raise ValueError(f"Message catalog {path} must contain a mapping")

        messages = document.get(locale, {})
        logger.info(
            f"Loaded message catalog for locale {locale}",
            extra={"event": "messages.catalog.loaded", "path": str(path), "locale": locale},
        )
        return cls(messages, locale=locale)

    def lookup(self, key: str) -> Optional[str]:
        """Raw template stored under ``key``, or None."""
        node: Any = self._messages
        for part in key.split("."):
            if not isinstance(node, Mapping) or part not in node:
                return None
            node = node[part]
        return node if isinstance(node, str) else None

    def translate(
        self,
        key: str,
        defaults: Sequence[Union[str, MessageKey]] = (),
        params: Optional[Mapping[str, Any]] = None,
    ) -> str:
        """Translate ``key``, trying each default in turn.

        A ``MessageKey`` default is another catalog key; a plain string default
        is a literal template used when no key resolved.

        Raises:
            KeyError: If neither the key nor any default resolves
        """
        for candidate in (MessageKey(key=key), *defaults):
            if isinstance(candidate, MessageKey):
                template = self.lookup(candidate.key)
                if template is None:
                    continue
            else:
                template = candidate
            return render_template(template, params)

        raise KeyError(f"translation missing: {self.locale}.{key}")


class MessageResolver:
    """Compose the message recorded for a resolved violation."""

    def __init__(
        self,
        templates: MessageTemplateSet = DEFAULT_TEMPLATES,
        catalog: Optional[MessageCatalog] = None,
        scope: str = DEFAULT_SCOPE,
    ):
        self.templates = templates
        self.catalog = catalog
        self.scope = scope

    def resolve_message(
        self,
        violation_type: ViolationType,
        columns: Sequence[str],
        config: Optional[ViolationConfig] = None,
    ) -> str:
        """Message for a violation on ``columns``; never empty."""
        columns = tuple(columns)
        custom = self._custom_message(violation_type, columns, config)
        if custom and custom.strip():
            return custom

        if violation_type == ViolationType.FOREIGN_KEY:
            return self._default("foreign_key")
        if not columns:
            return self._default("taken_generic")
        if len(columns) == 1:
            return self._default("taken")
        return self._default("taken_multiple", {"context": "/".join(columns[1:])})

    def _custom_message(
        self,
        violation_type: ViolationType,
        columns: Sequence[str],
        config: Optional[ViolationConfig],
    ) -> Optional[str]:
        if config is None:
            return None

        if violation_type == ViolationType.FOREIGN_KEY:
            check = config.foreign_key_check_for(columns[0] if columns else None)
        else:
            check = config.unique_check_for(tuple(columns))

        if check is None or check.message is None:
            return None
        return self._render_custom(check.message)

    def _render_custom(self, message: CustomMessage) -> Optional[str]:
        if not isinstance(message, MessageKey):
            return message

        if self.catalog is None:
            logger.warning(
                f"No message catalog configured for key {message.key}",
                extra={"event": "messages.catalog.missing", "message_key": message.key},
            )
            return None

        try:
            return self.catalog.translate(message.key)
        except (KeyError, TemplateError) as e:
            logger.warning(
                f"Custom message key {message.key} could not be resolved: {e}",
                extra={"event": "messages.key.unresolved", "message_key": message.key},
            )
            return None

    def _default(self, name: str, params: Optional[Dict[str, Any]] = None) -> str:
        literal = getattr(self.templates, name)

        if self.catalog is not None:
            try:
                message = self.catalog.translate(
                    f"{self.scope}.{name}", defaults=[literal], params=params
                )
                if message.strip():
                    return message
            except TemplateError as e:
                logger.warning(
                    f"Catalog template {self.scope}.{name} failed to render: {e}",
                    extra={"event": "messages.template.invalid", "template": name},
                )

        try:
            return render_template(literal, params)
        except TemplateError as e:
            logger.warning(
                f"Default template {name} failed to render: {e}",
                extra={"event": "messages.template.invalid", "template": name},
            )
            return literal
