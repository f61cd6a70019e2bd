import logging
import re
import sqlite3
from typing import Any, Dict, List, Mapping, Tuple, Type

from dbhelper.base.interfaces import Driver, PreparedStatement

base_logger = logging.getLogger("dbhelper.db_implementations.sqlite_driver")


def _regexp(pattern: str, value: Any) -> bool:
    if value is None:
        return False
    try:
        return re.search(pattern, str(value)) is not None
    except re.error:
        return False


class SQLiteStatement(PreparedStatement):
    def execute(self, variables: Mapping[str, Any]) -> None:
        self._cursor.execute(self.sql, dict(variables))


class SQLiteDriver(Driver):
    """
    SQLite driver using the standard library module.

    The connection string is the database path, taken from the name of the
    connection descriptor (":memory:" for an in-memory database).
    Transactions are controlled explicitly: the connection runs in
    autocommit mode (``isolation_level=None``).
    """

    name = "sqlite"

    transaction_start_statement = "BEGIN"
    like_escape_clause = " ESCAPE '\\'"

    @property
    def error_class(self) -> Type[Exception]:
        return sqlite3.Error

    def connect(self, descriptor) -> sqlite3.Connection:
        handle = sqlite3.connect(descriptor.name, isolation_level=None)
        handle.row_factory = sqlite3.Row
        handle.create_function("REGEXP", 2, _regexp)

        if descriptor.init_command:
            handle.executescript(descriptor.init_command)

        base_logger.debug(f"Opened SQLite database '{descriptor.name}'.")
        return handle

    def prepare(self, handle: sqlite3.Connection, sql: str, variables: Mapping[str, Any]) -> SQLiteStatement:
        return SQLiteStatement(handle.cursor(), sql)

    def table_names_query(self, descriptor) -> Tuple[str, Dict[str, Any]]:
        return (
            "SELECT `name` FROM `sqlite_master` "
            "WHERE `type`='table' AND `name` NOT LIKE 'sqlite\\_%' ESCAPE '\\' "
            "ORDER BY `name`",
            {},
        )

    def column_exists_query(self, descriptor, table: str, column: str) -> Tuple[str, Dict[str, Any]]:
        return (
            "SELECT COUNT(*) AS `count` FROM pragma_table_info(:table) WHERE `name`=:column",
            {"table": table, "column": column},
        )

    def empty_insert_statement(self, table: str) -> str:
        return f"INSERT INTO `{table}` DEFAULT VALUES"

    def truncate_statement(self, table: str) -> str:
        return f"DELETE FROM `{table}`"

    def drop_table_statements(self, tables: List[str]) -> List[str]:
        statements = ["PRAGMA foreign_keys = OFF"]
        statements.extend(f"DROP TABLE IF EXISTS `{table}`" for table in tables)
        statements.append("PRAGMA foreign_keys = ON")
        return statements
