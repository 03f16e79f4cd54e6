"""Command-line entry point for inspecting violation handling."""

from dotenv import load_dotenv
load_dotenv()

import argparse
import os
import sys
from pathlib import Path
from typing import List, Optional

from data_integrity.config.environment import load_environment_config
from data_integrity.config.exceptions import ConfigurationError
from data_integrity.config.loader import apply_environment, load_settings, validate_settings_file
from data_integrity.factory import build_handler
from data_integrity.logging import get_logger
from data_integrity.logging.config import configure_logging
from data_integrity.persistence.database import close_database, init_database
from data_integrity.persistence.exceptions import DatabaseConnectionError

logger = get_logger(__name__, component="cli")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="data-integrity",
        description="Explain how database constraint violations map to record errors",
    )
    parser.add_argument(
        "--settings",
        type=Path,
        default=None,
        help="Path to settings file (default: built-in messages)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (overrides settings and environment)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    explain = subparsers.add_parser(
        "explain", help="Classify an error message and show the resulting record error"
    )
    explain.add_argument("error_text", help="Driver error message, e.g. from IntegrityError.orig")
    explain.add_argument("--table", default=None, help="Table the failed statement targeted")
    explain.add_argument(
        "--database-url",
        default=None,
        help="Database to read index definitions from (default: $DATABASE_URL)",
    )

    validate = subparsers.add_parser("validate-config", help="Validate a settings file")
    validate.add_argument("path", type=Path, help="Settings file to validate")

    return parser


def explain(args: argparse.Namespace, settings) -> int:
    database_url = args.database_url or os.environ.get("DATABASE_URL")
    engine = init_database(database_url) if database_url and args.table else None

    try:
        handler = build_handler(settings, bind=engine)
        resolved = handler.resolve_text(args.error_text, args.table)

        if not resolved:
            print("classification: none (not a data-integrity violation; re-raised unchanged)")
            return 1

        for violation in resolved:
            message = handler.message_resolver.resolve_message(
                violation.violation_type, violation.columns
            )
            print(f"classification: {violation.violation_type.value}")
            print(f"columns: {', '.join(violation.columns) or '(unknown)'}")
            print(f"field: {violation.field or '(record)'}")
            print(f"message: {message}")
        return 0
    finally:
        if engine is not None:
            close_database()


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the data-integrity CLI.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    args = _build_parser().parse_args(argv)

    if args.command == "validate-config":
        return 0 if validate_settings_file(args.path) else 1

    try:
        settings = apply_environment(load_settings(args.settings), load_environment_config())
        configure_logging(
            level=args.log_level or settings.logging.level,
            format_type=settings.logging.format,
            environment=os.environ.get("ENVIRONMENT", "local"),
            stream=sys.stderr,
        )
        logger.debug("Settings loaded", extra={"event": "config.loaded", "command": args.command})

        return explain(args, settings)

    except ConfigurationError as e:
        print(f"Configuration error:\n{e}", file=sys.stderr)
        return 2
    except DatabaseConnectionError as e:
        print(f"Database error: {e}", file=sys.stderr)
        return 3


if __name__ == "__main__":
    sys.exit(main())
