import uuid
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Tuple, Type

if TYPE_CHECKING:
    from dbhelper.base.connection import ConnectionDescriptor


def generate_id() -> str:
    """Generate a new unique ID for object instances."""
    return uuid.uuid4().hex


class PreparedStatement(ABC):
    """
    A statement bound to one connection, wrapping a DB-API cursor.

    Rows are always returned as plain dictionaries keyed by column name.
    """

    def __init__(self, cursor: Any, sql: str):
        self._cursor = cursor
        self.sql = sql

    @abstractmethod
    def execute(self, variables: Mapping[str, Any]) -> None:
        """Executes the statement with the given (normalized) variables."""
        pass

    def fetch_one(self) -> Optional[Dict[str, Any]]:
        row = self._cursor.fetchone()
        if row is None:
            return None
        return dict(row)

    def fetch_all(self) -> List[Dict[str, Any]]:
        return [dict(row) for row in self._cursor.fetchall()]

    @property
    def row_count(self) -> int:
        return self._cursor.rowcount

    @property
    def last_insert_id(self) -> Any:
        return self._cursor.lastrowid

    def close(self) -> None:
        self._cursor.close()


class Driver(ABC):
    """
    Adapter for one database engine.

    Holds the engine specific SQL so the statements built by the helper,
    the filter criteria and the collections stay engine neutral.
    """

    name: str = ""

    transaction_start_statement = "START TRANSACTION"
    transaction_commit_statement = "COMMIT"
    transaction_rollback_statement = "ROLLBACK"

    # Appended to LIKE comparisons so that "\_" matches a literal underscore
    like_escape_clause = ""

    @property
    @abstractmethod
    def error_class(self) -> Type[Exception]:
        """Base class of the exceptions raised by the driver module."""
        pass

    @abstractmethod
    def connect(self, descriptor: "ConnectionDescriptor") -> Any:
        """Opens and returns a native connection handle."""
        pass

    def disconnect(self, handle: Any) -> None:
        handle.close()

    @abstractmethod
    def prepare(self, handle: Any, sql: str, variables: Mapping[str, Any]) -> PreparedStatement:
        pass

    @abstractmethod
    def table_names_query(self, descriptor: "ConnectionDescriptor") -> Tuple[str, Dict[str, Any]]:
        """Query returning one row per table, the name in the first column."""
        pass

    @abstractmethod
    def column_exists_query(self, descriptor: "ConnectionDescriptor", table: str, column: str) -> Tuple[str, Dict[str, Any]]:
        """Query returning a `count` column, greater than zero if the column exists."""
        pass

    def empty_insert_statement(self, table: str) -> str:
        return f"INSERT INTO `{table}` () VALUES ()"

    def truncate_statement(self, table: str) -> str:
        return f"TRUNCATE TABLE `{table}`"

    @abstractmethod
    def drop_table_statements(self, tables: List[str]) -> List[str]:
        pass
