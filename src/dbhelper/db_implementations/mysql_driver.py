import logging
from typing import Any, Dict, List, Mapping, Tuple, Type

import pymysql
import pymysql.cursors

from dbhelper.base.interfaces import Driver, PreparedStatement
from dbhelper.base.utils import PLACEHOLDER_PATTERN

base_logger = logging.getLogger("dbhelper.db_implementations.mysql_driver")


def to_pyformat(sql: str, variables: Mapping[str, Any]) -> str:
    """
    Rewrites ``:name`` placeholders to PyMySQL's ``%(name)s`` style.

    Only names present in the variables are rewritten. Literal percent
    signs are doubled, as PyMySQL interpolates the query when parameters
    are given.
    """
    if not variables:
        return sql

    escaped = sql.replace("%", "%%")

    def replace(match) -> str:
        name = match.group(1)
        if name in variables:
            return f"%({name})s"
        return match.group(0)

    return PLACEHOLDER_PATTERN.sub(replace, escaped)


class MySQLStatement(PreparedStatement):
    def execute(self, variables: Mapping[str, Any]) -> None:
        variables = dict(variables)
        if variables:
            self._cursor.execute(to_pyformat(self.sql, variables), variables)
        else:
            self._cursor.execute(self.sql)


class MySQLDriver(Driver):
    """
    MySQL / MariaDB driver based on PyMySQL.

    Connections run in autocommit mode, transactions are started
    explicitly with ``START TRANSACTION``.
    """

    name = "mysql"

    @property
    def error_class(self) -> Type[Exception]:
        return pymysql.MySQLError

    def connect(self, descriptor) -> pymysql.connections.Connection:
        handle = pymysql.connect(
            host=descriptor.host,
            port=descriptor.port,
            user=descriptor.username,
            password=descriptor.get_password(),
            database=descriptor.name,
            init_command=descriptor.init_command or None,
            charset="utf8mb4",
            cursorclass=pymysql.cursors.DictCursor,
            autocommit=True,
        )
        base_logger.debug(f"Opened MySQL connection {descriptor.describe()}.")
        return handle

    def prepare(self, handle: pymysql.connections.Connection, sql: str, variables: Mapping[str, Any]) -> MySQLStatement:
        handle.ping(reconnect=False)
        return MySQLStatement(handle.cursor(), sql)

    def table_names_query(self, descriptor) -> Tuple[str, Dict[str, Any]]:
        return "SHOW TABLES", {}

    def column_exists_query(self, descriptor, table: str, column: str) -> Tuple[str, Dict[str, Any]]:
        return (
            "SELECT COUNT(*) AS `count` FROM `INFORMATION_SCHEMA`.`COLUMNS` "
            "WHERE `TABLE_SCHEMA`=:database AND `TABLE_NAME`=:table AND `COLUMN_NAME`=:column",
            {"database": descriptor.name, "table": table, "column": column},
        )

    def drop_table_statements(self, tables: List[str]) -> List[str]:
        statements = ["SET FOREIGN_KEY_CHECKS=0"]
        statements.extend(f"DROP TABLE IF EXISTS `{table}`" for table in tables)
        statements.append("SET FOREIGN_KEY_CHECKS=1")
        return statements
