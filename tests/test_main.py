"""Unit tests for the command-line entry point.

Covers argument parsing, settings and environment precedence, index
introspection against a real database, and exit codes.
"""

import logging
from pathlib import Path

import pytest

from data_integrity.main import main
from data_integrity.persistence import close_database, init_database
from tests.helpers import FK_SPECIES_MESSAGE, Base

FIXTURES_DIR = Path(__file__).parent / "fixtures"

DUPLICATE_TEXT = "(1062, \"Duplicate entry 'bob' for key 'index_users_on_user_name'\")"
FOREIGN_KEY_TEXT = f"(1452, '{FK_SPECIES_MESSAGE}')"


@pytest.fixture(autouse=True)
def isolated_cli(monkeypatch):
    """Keep the CLI away from the developer's environment and root logger."""
    for name in ("DATA_INTEGRITY_LOG_LEVEL", "DATA_INTEGRITY_LOCALE", "DATABASE_URL"):
        monkeypatch.delenv(name, raising=False)

    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def users_database(tmp_path):
    """File database containing the test tables, closed before the CLI runs."""
    url = f"sqlite:///{tmp_path / 'app.db'}"
    init_database(url, Base.metadata)
    close_database()
    return url


def output_lines(capsys):
    return capsys.readouterr().out.strip().splitlines()


class TestExplain:
    """Tests for the explain command."""

    def test_duplicate_without_table(self, capsys):
        """Test a duplicate with no index information falls back to the generic message."""
        assert main(["explain", DUPLICATE_TEXT]) == 0

        assert output_lines(capsys) == [
            "classification: duplicate_key",
            "columns: (unknown)",
            "field: (record)",
            "message: Duplicate field.",
        ]

    def test_duplicate_with_introspected_indexes(self, capsys, users_database):
        exit_code = main(
            ["explain", DUPLICATE_TEXT, "--table", "users", "--database-url", users_database]
        )

        assert exit_code == 0
        assert output_lines(capsys) == [
            "classification: duplicate_key",
            "columns: user_name",
            "field: user_name",
            "message: has already been taken",
        ]

    def test_database_url_from_environment(self, capsys, monkeypatch, users_database):
        monkeypatch.setenv("DATABASE_URL", users_database)

        assert main(["explain", DUPLICATE_TEXT, "--table", "users"]) == 0
        assert "field: user_name" in output_lines(capsys)

    def test_foreign_key(self, capsys):
        assert main(["explain", FOREIGN_KEY_TEXT]) == 0

        assert output_lines(capsys) == [
            "classification: foreign_key",
            "columns: species_id",
            "field: species_id",
            "message: association does not exist.",
        ]

    def test_unrelated_error(self, capsys):
        exit_code = main(["explain", "(2006, 'MySQL server has gone away')"])

        assert exit_code == 1
        assert output_lines(capsys)[0].startswith("classification: none")

    def test_settings_catalog_is_used(self, capsys):
        exit_code = main(
            ["--settings", str(FIXTURES_DIR / "valid_settings.yaml"), "explain", FOREIGN_KEY_TEXT]
        )

        assert exit_code == 0
        assert "message: refers to a missing record." in output_lines(capsys)

    def test_environment_locale_overrides_settings(self, capsys, monkeypatch, users_database):
        """Test DATA_INTEGRITY_LOCALE selects the catalog section."""
        monkeypatch.setenv("DATA_INTEGRITY_LOCALE", "fr")

        exit_code = main(
            [
                "--settings",
                str(FIXTURES_DIR / "valid_settings.yaml"),
                "explain",
                DUPLICATE_TEXT,
                "--table",
                "users",
                "--database-url",
                users_database,
            ]
        )

        assert exit_code == 0
        assert "message: est déjà utilisé" in output_lines(capsys)


class TestExitCodes:
    """Tests for error handling in main()."""

    def test_missing_settings_file(self, capsys):
        exit_code = main(["--settings", "nonexistent.yaml", "explain", DUPLICATE_TEXT])

        assert exit_code == 2
        assert "Configuration error" in capsys.readouterr().err

    def test_invalid_environment(self, capsys, monkeypatch):
        monkeypatch.setenv("DATA_INTEGRITY_LOG_LEVEL", "chatty")

        assert main(["explain", DUPLICATE_TEXT]) == 2

    def test_unreachable_database(self, capsys):
        exit_code = main(
            ["explain", DUPLICATE_TEXT, "--table", "users", "--database-url", "nosuchdialect://x"]
        )

        assert exit_code == 3
        assert "Database error" in capsys.readouterr().err

    def test_invalid_log_level_argument(self):
        with pytest.raises(SystemExit) as exc_info:
            main(["--log-level", "LOUD", "explain", DUPLICATE_TEXT])

        assert exc_info.value.code == 2

    def test_command_required(self):
        with pytest.raises(SystemExit):
            main([])


class TestValidateConfig:
    """Tests for the validate-config command."""

    def test_valid_settings(self, capsys):
        assert main(["validate-config", str(FIXTURES_DIR / "valid_settings.yaml")]) == 0
        assert "is valid" in capsys.readouterr().out

    def test_invalid_settings(self, capsys):
        assert main(["validate-config", str(FIXTURES_DIR / "invalid_settings.yaml")]) == 1
        assert "Settings validation failed" in capsys.readouterr().out
