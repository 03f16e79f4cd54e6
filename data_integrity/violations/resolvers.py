"""Map violation messages onto the columns they concern."""

from typing import Optional, Sequence, Tuple

from data_integrity.domain.models import IndexDefinition
from data_integrity.logging import get_logger

from .classifier import MYSQL_PATTERNS, PatternSet

logger = get_logger(__name__, component="violations")

# MySQL numbers keys from 1 and counts PRIMARY first; introspected index
# lists exclude the primary key.
ORDINAL_OFFSET = 2


class IndexResolver:
    """Resolve a duplicate-key message to the violated index's columns."""

    def __init__(self, patterns: PatternSet = MYSQL_PATTERNS):
        self.patterns = patterns

    def resolve_columns(
        self, text: str, table_indexes: Sequence[IndexDefinition]
    ) -> Tuple[str, ...]:
        """Return the columns of the violated index, or () if it cannot be determined.

        Args:
            text: Duplicate-key error message
            table_indexes: Non-primary indexes in the order the database reports them

        Returns:
            Column names of the matched index in index order
        """
        match = self.patterns.duplicate_key_ref.search(text)
        if not match:
            return ()

        key = match.group("key").strip()
        index = (
            self._by_ordinal(int(key), table_indexes)
            if key.isdecimal()
            else self._by_name(key, table_indexes)
        )

        if index is None:
            logger.debug(
                f"No index matches key reference {key!r}",
                extra={"event": "violation.index_unresolved", "key": key},
            )
            return ()

        return tuple(index.columns)

    @staticmethod
    def _by_ordinal(
        ordinal: int, table_indexes: Sequence[IndexDefinition]
    ) -> Optional[IndexDefinition]:
        position = ordinal - ORDINAL_OFFSET
        if 0 <= position < len(table_indexes):
            return table_indexes[position]
        return None

    @staticmethod
    def _by_name(
        name: str, table_indexes: Sequence[IndexDefinition]
    ) -> Optional[IndexDefinition]:
        # MySQL 8 reports keys qualified with the table name ("users.index_name")
        candidates = [name]
        if "." in name:
            candidates.append(name.rsplit(".", 1)[1])

        for candidate in candidates:
            for index in table_indexes:
                if index.name == candidate:
                    return index
        return None


class ForeignKeyResolver:
    """Extract the offending column from a foreign-key constraint message."""

    def __init__(self, patterns: PatternSet = MYSQL_PATTERNS):
        self.patterns = patterns

    def resolve_foreign_key(self, text: str) -> Optional[str]:
        match = self.patterns.foreign_key_column.search(text)
        if not match:
            return None
        return match.group("column")
