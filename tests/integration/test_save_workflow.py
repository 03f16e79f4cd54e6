"""End-to-end tests: settings file to record errors through a real database.

Uses a file-backed SQLite database with reflected indexes, a message catalog
loaded from settings, class-level violation configs and JSON log output.
"""

import io
import json
import logging
from pathlib import Path

import pytest
from sqlalchemy import ForeignKey, Index, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from data_integrity import (
    IntegrityCheckedMixin,
    IntegrityRepository,
    MessageKey,
    RecordInvalid,
    ViolationConfig,
    build_handler,
)
from data_integrity.config import load_settings
from data_integrity.logging.config import configure_logging
from data_integrity.persistence import close_database, get_engine, get_session, init_database
from data_integrity.violations import ViolationRegistry
from tests.helpers import SQLITE_PATTERNS

FIXTURES_DIR = Path(__file__).parent.parent / "fixtures"


class IntegrationBase(DeclarativeBase):
    pass


class Team(IntegrationBase, IntegrityCheckedMixin):
    __tablename__ = "teams"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(100))


class Account(IntegrationBase, IntegrityCheckedMixin):
    __tablename__ = "accounts"
    __violation_config__ = ViolationConfig().handle_unique_key_violation(
        "login", message=MessageKey(key="users.user_name_taken")
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    login: Mapped[str] = mapped_column(String(100))
    email: Mapped[str] = mapped_column(String(255))
    team_id: Mapped[int] = mapped_column(ForeignKey("teams.id"), nullable=True)

    # Named after their columns; SQLite reports columns, not index names
    __table_args__ = (
        Index("login", "login", unique=True),
        Index("email", "email", unique=True),
    )


@pytest.fixture
def workflow_database(tmp_path):
    """File database with the workflow tables."""
    init_database(f"sqlite:///{tmp_path / 'workflow.db'}", IntegrationBase.metadata)
    yield get_engine()
    close_database()


@pytest.fixture
def log_stream():
    """JSON log output captured in memory."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    stream = io.StringIO()

    configure_logging(level="INFO", format_type="json", environment="test", stream=stream)
    yield stream

    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def workflow_handler(workflow_database):
    return build_handler(
        load_settings(FIXTURES_DIR / "valid_settings.yaml"),
        bind=workflow_database,
        registry=ViolationRegistry(),
        patterns=SQLITE_PATTERNS,
    )


def log_events(stream):
    return [json.loads(line) for line in stream.getvalue().splitlines() if line.strip()]


class TestSaveWorkflow:
    """Saving records end to end."""

    def test_duplicate_login_uses_class_config_and_catalog(self, workflow_handler):
        duplicate = Account(login="bob", email="other@example.com")

        with get_session() as session:
            repo = IntegrityRepository(session, workflow_handler)
            assert repo.save(Account(login="bob", email="bob@example.com")) is True
            assert repo.save(duplicate) is False

        assert duplicate.errors.on("login") == ["is claimed by another account"]
        assert duplicate.errors.full_messages() == ["Login is claimed by another account"]

    def test_duplicate_without_custom_message_uses_catalog_default(self, workflow_handler):
        duplicate = Account(login="alice", email="bob@example.com")

        with get_session() as session:
            repo = IntegrityRepository(session, workflow_handler)
            repo.save(Account(login="bob", email="bob@example.com"))
            repo.save(duplicate)

        assert duplicate.errors.on("email") == ["is already registered"]

    def test_missing_team_is_a_record_error(self, workflow_handler):
        account = Account(login="bob", email="bob@example.com", team_id=999)

        with get_session() as session:
            assert IntegrityRepository(session, workflow_handler).save(account) is False

        assert account.errors.on_base() == ["refers to a missing record."]
        assert account.foreign_key_detected is True

    def test_session_keeps_valid_work(self, workflow_handler):
        """Test a trapped violation only discards the failed statement."""
        with get_session() as session:
            repo = IntegrityRepository(session, workflow_handler)
            team = Team(name="Platform")
            repo.save(team)
            repo.save(Account(login="bob", email="bob@example.com", team_id=team.id))
            repo.save(Account(login="bob", email="again@example.com"))

        with get_session() as session:
            logins = [account.login for account in session.query(Account).all()]
        assert logins == ["bob"]

    def test_save_strict(self, workflow_handler):
        with get_session() as session:
            repo = IntegrityRepository(session, workflow_handler)
            repo.save_strict(Account(login="bob", email="bob@example.com"))

            with pytest.raises(RecordInvalid) as exc_info:
                repo.save_strict(Account(login="bob", email="other@example.com"))

        assert str(exc_info.value) == "Validation failed: Login is claimed by another account"

    def test_violation_logged_with_record_context(self, workflow_handler, log_stream):
        with get_session() as session:
            repo = IntegrityRepository(session, workflow_handler)
            repo.save(Account(login="bob", email="bob@example.com"))
            repo.save(Account(login="bob", email="other@example.com"))

        events = [e for e in log_events(log_stream) if e.get("event") == "violation.duplicate_key"]
        assert len(events) == 1
        assert events[0]["field"] == "login"
        assert events[0]["columns"] == ["login"]
        assert events[0]["record_type"] == "Account"
        assert events[0]["table"] == "accounts"
        assert events[0]["component"] == "violations"
        assert events[0]["service"] == "data-integrity"
        assert events[0]["environment"] == "test"
