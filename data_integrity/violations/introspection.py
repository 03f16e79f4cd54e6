"""Schema introspection: list a table's non-primary indexes in database order."""

from typing import Dict, List, Mapping, Protocol, Sequence, Union

from sqlalchemy import inspect
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import NoSuchTableError, SQLAlchemyError

from data_integrity.domain.models import IndexDefinition
from data_integrity.logging import get_logger

logger = get_logger(__name__, component="introspection")


class IndexProvider(Protocol):
    """Anything that can list a table's indexes, primary key excluded."""

    def list_indexes(self, table_name: str) -> List[IndexDefinition]:
        ...


class SqlAlchemyIndexProvider:
    """Index listing backed by ``sqlalchemy.inspect(bind).get_indexes()``.

    SQLAlchemy never reports the primary key among the indexes, which matches
    the ordinal arithmetic of the index resolver.
    """

    def __init__(self, bind: Union[Engine, Connection]):
        self.bind = bind

    def list_indexes(self, table_name: str) -> List[IndexDefinition]:
        try:
            reflected = inspect(self.bind).get_indexes(table_name)
        except NoSuchTableError:
            logger.warning(
                f"Table {table_name} not found while listing indexes",
                extra={"event": "introspection.table_missing", "table": table_name},
            )
            return []
        except SQLAlchemyError as e:
            logger.error(
                f"Failed to list indexes for {table_name}: {e}",
                extra={"event": "introspection.failed", "table": table_name},
                exc_info=True,
            )
            return []

        indexes = [
            IndexDefinition(
                name=index["name"],
                columns=tuple(column for column in index["column_names"] if column),
                unique=bool(index.get("unique")),
            )
            for index in reflected
            if index.get("name")
        ]
        logger.debug(
            f"Listed {len(indexes)} indexes for {table_name}",
            extra={"event": "introspection.indexes_listed", "table": table_name},
        )
        return indexes


class StaticIndexProvider:
    """Fixed index lists per table, for tests and offline use."""

    def __init__(self, indexes: Mapping[str, Sequence[IndexDefinition]]):
        self._indexes: Dict[str, List[IndexDefinition]] = {
            table: list(table_indexes) for table, table_indexes in indexes.items()
        }

    def list_indexes(self, table_name: str) -> List[IndexDefinition]:
        return list(self._indexes.get(table_name, []))
