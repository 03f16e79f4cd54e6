"""Shared fixtures for data-integrity tests."""

import pytest

from data_integrity.logging.context import clear_log_context
from data_integrity.violations import (
    StaticIndexProvider,
    ViolationConfig,
    ViolationHandler,
    ViolationRegistry,
)
from tests.helpers import USER_INDEXES, Animal, User


@pytest.fixture(autouse=True)
def clean_log_context():
    """Clear logging context before and after each test."""
    clear_log_context()
    yield
    clear_log_context()


@pytest.fixture
def index_provider():
    """Index listing for the users table; animals has no secondary indexes."""
    return StaticIndexProvider({"users": USER_INDEXES, "animals": []})


@pytest.fixture
def violation_registry():
    """Registry with nothing registered."""
    return ViolationRegistry()


@pytest.fixture
def handler(index_provider, violation_registry):
    """Handler with default messages and no model registrations."""
    return ViolationHandler(index_provider=index_provider, registry=violation_registry)


@pytest.fixture
def configured_registry(violation_registry):
    """Registry with User and Animal checks registered."""
    violation_registry.set(
        User,
        ViolationConfig()
        .handle_unique_key_violation("user_name", message="is taken")
        .handle_unique_key_violation("email", scope="tenant_id")
        .handle_foreign_key_violation("primary_email_id", message="is not available"),
    )
    violation_registry.set(
        Animal,
        ViolationConfig().handle_foreign_key_violation(
            "species_id", message="must be a known species"
        ),
    )
    return violation_registry


@pytest.fixture
def mock_env_vars(monkeypatch):
    """Environment variables recognised by load_environment_config."""
    monkeypatch.setenv("DATA_INTEGRITY_LOG_LEVEL", "debug")
    monkeypatch.setenv("DATA_INTEGRITY_LOCALE", "fr")
    monkeypatch.setenv("DATABASE_URL", "sqlite:///:memory:")
    return monkeypatch
