"""Tests for wiring a ViolationHandler from settings."""

from pathlib import Path

import pytest
from sqlalchemy import create_engine

from data_integrity.config import ConfigurationError, IntegritySettings, load_settings
from data_integrity.config.models import CatalogConfig
from data_integrity.domain.models import ViolationType
from data_integrity.factory import build_handler
from data_integrity.violations import (
    MessageKey,
    SqlAlchemyIndexProvider,
    StaticIndexProvider,
    ViolationConfig,
    ViolationRegistry,
)
from tests.helpers import USER_INDEXES, User, duplicate_entry_error

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def test_defaults():
    handler = build_handler()

    assert handler.index_provider is None
    assert handler.message_resolver.catalog is None
    assert handler.message_resolver.resolve_message(ViolationType.DUPLICATE_KEY, ()) == (
        "Duplicate field."
    )


def test_catalog_loaded_from_settings():
    handler = build_handler(load_settings(FIXTURES_DIR / "valid_settings.yaml"))
    resolver = handler.message_resolver

    assert resolver.catalog.locale == "en"
    assert resolver.resolve_message(ViolationType.DUPLICATE_KEY, ("user_name",)) == (
        "is already registered"
    )
    # Not in the catalog: the settings template is used
    assert resolver.resolve_message(ViolationType.DUPLICATE_KEY, ("email", "tenant_id")) == (
        "is already in use for tenant_id"
    )


def test_message_key_resolved_through_catalog():
    registry = ViolationRegistry()
    registry.set(
        User,
        ViolationConfig().handle_unique_key_violation(
            "user_name", message=MessageKey(key="users.user_name_taken")
        ),
    )
    handler = build_handler(
        load_settings(FIXTURES_DIR / "valid_settings.yaml"),
        index_provider=StaticIndexProvider({"users": USER_INDEXES}),
        registry=registry,
    )
    user = User(user_name="bob")

    handler.handle_error(duplicate_entry_error("'index_users_on_user_name'"), user)

    assert user.errors.on("user_name") == ["is claimed by another account"]


def test_bind_enables_introspection(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'app.db'}")

    handler = build_handler(bind=engine)

    assert isinstance(handler.index_provider, SqlAlchemyIndexProvider)
    engine.dispose()


def test_explicit_index_provider_wins(tmp_path):
    provider = StaticIndexProvider({})
    engine = create_engine(f"sqlite:///{tmp_path / 'app.db'}")

    assert build_handler(bind=engine, index_provider=provider).index_provider is provider
    engine.dispose()


def test_missing_catalog_raises_configuration_error(tmp_path):
    settings = IntegritySettings(catalog=CatalogConfig(path=tmp_path / "missing.yaml"))

    with pytest.raises(ConfigurationError, match="Failed to load message catalog"):
        build_handler(settings)


@pytest.mark.parametrize("content", ["en: [unclosed\n", "- just\n- a list\n"])
def test_malformed_catalog_raises_configuration_error(tmp_path, content):
    catalog = tmp_path / "messages.yaml"
    catalog.write_text(content)
    settings = IntegritySettings(catalog=CatalogConfig(path=catalog))

    with pytest.raises(ConfigurationError):
        build_handler(settings)
