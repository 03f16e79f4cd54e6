"""Classification of raw database errors into constraint violations.

Only the MySQL error format is recognised. Messages arrive either as the
driver's tuple form (PyMySQL / mysqlclient)::

    (1062, "Duplicate entry 'bob' for key 'index_users_on_user_name'")

or the mysql-connector form::

    1062 (23000): Duplicate entry 'bob' for key 'index_users_on_user_name'

Patterns live in a ``PatternSet`` so that another engine can be supported by
supplying a different set without touching resolution or messaging.
"""

import re
from dataclasses import dataclass
from typing import List, Pattern

from sqlalchemy.exc import DBAPIError

from data_integrity.domain.models import RawViolation, ViolationType


@dataclass(frozen=True)
class PatternSet:
    """Regular expressions describing one engine's violation messages.

    Attributes:
        duplicate_entry: Matches a duplicate unique-key message
        foreign_key: Matches a foreign-key constraint failure message
        duplicate_key_ref: Captures ``key`` (index ordinal or name) from a duplicate message
        foreign_key_column: Captures ``column`` from a foreign-key message
    """

    duplicate_entry: Pattern
    foreign_key: Pattern
    duplicate_key_ref: Pattern
    foreign_key_column: Pattern


MYSQL_PATTERNS = PatternSet(
    duplicate_entry=re.compile(r"^\(?1062\b.*?Duplicate entry", re.DOTALL),
    foreign_key=re.compile(r"^\(?145[12]\b.*?foreign key constraint fails", re.DOTALL),
    # The tuple repr escapes quotes as \' when the value holds both quote kinds
    duplicate_key_ref=re.compile(
        r"Duplicate entry .* for key \\?'?(?P<key>[\w.$]+)\\?'?", re.DOTALL
    ),
    foreign_key_column=re.compile(r"FOREIGN KEY\s*\(`?(?P<column>\w+)`?\)"),
)


def error_text(exc: BaseException) -> str:
    """Extract the driver message from a persistence failure.

    SQLAlchemy wraps driver errors in DBAPIError and prefixes the text with the
    exception class and the SQL statement; the classification patterns are
    anchored on the driver message itself, which lives on ``exc.orig``.
    """
    if isinstance(exc, DBAPIError) and exc.orig is not None:
        return str(exc.orig)
    return str(exc)


class ErrorClassifier:
    """Decide whether an error message is a duplicate-key or foreign-key violation."""

    def __init__(self, patterns: PatternSet = MYSQL_PATTERNS):
        self.patterns = patterns

    def classify_all(self, text: str) -> List[ViolationType]:
        """Every violation type the text matches, duplicate first.

        A single failure normally matches at most one pattern.
        """
        matched = []
        if self.patterns.duplicate_entry.search(text):
            matched.append(ViolationType.DUPLICATE_KEY)
        if self.patterns.foreign_key.search(text):
            matched.append(ViolationType.FOREIGN_KEY)
        return matched

    def classify(self, text: str) -> ViolationType:
        """Classify ``text``; NONE means the failure is not a data-integrity violation."""
        matched = self.classify_all(text)
        return matched[0] if matched else ViolationType.NONE

    def raw_violations(self, text: str) -> List[RawViolation]:
        return [RawViolation(text=text, violation_type=kind) for kind in self.classify_all(text)]
