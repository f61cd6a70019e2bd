"""
The DBHelper context object.

All state of a database session (registered connections, query log,
event listeners, caches, transaction flag and options) lives in one
``_HelperState`` instance owned by the helper, which ``reset()`` replaces
wholesale. Components like collections and filter criteria receive the
helper instance they work with.
"""

import logging
import sys
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import (Any, Callable, Dict, Generator, Iterable, List, Mapping,
                    Optional, TextIO, Tuple)

from dbhelper.base.connection import ConnectionDescriptor
from dbhelper.base.events import (EVENT_BEFORE_WRITE, EVENT_INIT,
                                  BeforeWriteEvent, Event, Listener,
                                  ListenerRegistry)
from dbhelper.base.exceptions import (DBHelperException, DuplicateConnectionID,
                                      ExecutingQueryFailed, FetchFailed,
                                      InsertFailed, InvalidParentRecord,
                                      NoActiveTransaction, NoConnectionsAdded,
                                      NoConnectionSelected,
                                      NoParentRecordSpecified,
                                      NotACollectionSettings,
                                      PreparingQueryFailed,
                                      TransactionAlreadyActive,
                                      TransactionRequired, UnknownConnection)
from dbhelper.base.interfaces import Driver, PreparedStatement
from dbhelper.base.operation_types import OperationType
from dbhelper.base.options import HelperOptions
from dbhelper.base.translation import Translator
from dbhelper.base.utils import (analyze_placeholders, build_limit_clause,
                                 format_query, normalize_placeholder_name,
                                 normalize_variables, quote_identifier)
from dbhelper.records.collection import CollectionSettings, RecordCollection

logger = logging.getLogger(__name__)

LOG_PREFIX = "DBHelper | "


@dataclass
class QueryRecord:
    """The statement currently being executed."""

    operation_type: OperationType
    sql: str
    variables: Dict[str, Any]
    started: float


@dataclass
class TrackedQuery:
    operation_type: OperationType
    sql: str
    variables: Dict[str, Any]
    duration: float

    def is_write(self) -> bool:
        return self.operation_type.is_write

    def is_select(self) -> bool:
        return self.operation_type.is_select

    def get_formatted_sql(self) -> str:
        return format_query(self.sql, self.variables)


@dataclass
class _HelperState:
    connections: Dict[str, ConnectionDescriptor] = field(default_factory=dict)
    selected_id: Optional[str] = None
    init_done: bool = False
    active_query: Optional[QueryRecord] = None
    active_statement: Optional[PreparedStatement] = None
    last_error_message: str = ""
    last_write_cancelled: bool = False
    query_count: int = 0
    queries: List[TrackedQuery] = field(default_factory=list)
    listeners: ListenerRegistry = field(default_factory=ListenerRegistry)
    column_cache: Dict[Tuple[str, str], bool] = field(default_factory=dict)
    collections: Dict[Tuple[str, Any], RecordCollection] = field(default_factory=dict)
    transaction_started: bool = False
    options: HelperOptions = field(default_factory=HelperOptions)
    log_callback: Optional[Callable[[str], Any]] = None
    debug_stream: Optional[TextIO] = None
    translator: Translator = field(default_factory=Translator)


class DBHelper:
    """
    Runs parameterized statements against the selected connection.

    Named placeholders (``:name``) are used in all queries, the values are
    always bound by the driver.

    Usage:
        helper = DBHelper()
        helper.add_connection("main", "shop", host="localhost", username="shop", password="...")
        rows = helper.fetch_all("SELECT * FROM `products` WHERE `price` > :price", {"price": 10})
    """

    def __init__(self):
        self._state = _HelperState()
        self._logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def reset(self) -> None:
        """Closes all connections and discards the complete session state."""
        self._close_active_statement()
        for descriptor in self._state.connections.values():
            descriptor.disconnect()
        self._state = _HelperState()
        self._logger.debug("Helper state has been reset.")

    # --- Connections ---

    def add_connection(
        self,
        connection_id: str,
        name: str,
        host: str = "localhost",
        port: int = 3306,
        username: str = "root",
        password: str = "",
        init_command: str = "",
        driver: str = "mysql",
    ) -> ConnectionDescriptor:
        """
        Registers a connection. The first added connection is selected.

        Args:
            connection_id: Unique key of the connection.
            name: The database name (for SQLite the database path).

        Raises:
            DuplicateConnectionID: If the ID has already been added.
        """
        if connection_id in self._state.connections:
            raise DuplicateConnectionID(
                "A connection with the same ID has already been added.",
                f"The connection [{connection_id}] has already been added.",
            )

        descriptor = ConnectionDescriptor(
            id=connection_id,
            name=name,
            host=host,
            port=port,
            username=username,
            password=password,
            init_command=init_command,
            driver=driver,
        )
        self._state.connections[connection_id] = descriptor

        if self._state.selected_id is None:
            self._state.selected_id = connection_id

        self._logger.info(f"Added connection '{connection_id}' ({descriptor.describe()}).")
        return descriptor

    def select_connection(self, connection_id: str) -> ConnectionDescriptor:
        descriptor = self.get_connection(connection_id)
        self._state.selected_id = connection_id
        self._logger.debug(f"Selected connection '{connection_id}'.")
        return descriptor

    def get_connection(self, connection_id: str) -> ConnectionDescriptor:
        if connection_id not in self._state.connections:
            raise UnknownConnection(
                "No connection has been added with this ID.",
                f"Tried selecting the connection [{connection_id}]. "
                f"Available connections: [{', '.join(self._state.connections)}].",
            )
        return self._state.connections[connection_id]

    def get_connections(self) -> List[ConnectionDescriptor]:
        return list(self._state.connections.values())

    def is_connection_selected(self) -> bool:
        return self._state.selected_id is not None

    def get_selected_connection(self) -> ConnectionDescriptor:
        if self._state.selected_id is None:
            raise NoConnectionSelected()
        return self._state.connections[self._state.selected_id]

    def get_driver(self) -> Driver:
        return self.get_selected_connection().get_driver()

    def init(self) -> None:
        """
        Connects to the selected database. The init event is triggered
        once, on the first call.
        """
        if self._state.init_done:
            return

        if not self._state.connections:
            raise NoConnectionsAdded()

        self.get_selected_connection().connect()
        self._state.init_done = True
        self._state.listeners.trigger(Event(EVENT_INIT))

    def _get_handle(self) -> Any:
        self.init()
        return self.get_selected_connection().connect()

    # --- Options ---

    def set_option(self, name: str, value: Any) -> None:
        self._state.options.set(name, value)

    def get_option(self, name: str) -> Any:
        return self._state.options.get(name)

    def enable_query_tracking(self, enabled: bool = True) -> None:
        self.set_option("track-queries", enabled)

    def enable_query_logging(self, enabled: bool = True) -> None:
        self.set_option("log-queries", enabled)

    def enable_debugging(self, enabled: bool = True) -> None:
        self.set_option("debugging", enabled)

    def is_debugging(self) -> bool:
        return self._state.options.debugging

    def set_log_callback(self, callback: Callable[[str], Any]) -> None:
        self._state.log_callback = callback

    def set_debug_stream(self, stream: Optional[TextIO]) -> None:
        """Sets the stream the debug output is written to (default: stdout)."""
        self._state.debug_stream = stream

    def set_translator(self, translator: Translator) -> None:
        self._state.translator = translator

    def get_translator(self) -> Translator:
        return self._state.translator

    def log(self, message: str) -> None:
        self._logger.debug(message)
        if self._state.options.log_queries and self._state.log_callback is not None:
            self._state.log_callback(f"{LOG_PREFIX}{message}")

    # --- Statement execution ---

    def execute(
        self,
        operation_type: OperationType,
        sql: str,
        variables: Optional[Mapping[str, Any]] = None,
        exception_on_error: bool = True,
    ) -> bool:
        """
        Executes a statement with the given placeholder values.

        Write operations are announced to the before-write listeners first,
        which may cancel them: in that case nothing is sent to the database
        and the statement is reported as successful.

        Args:
            operation_type: Classification of the statement.
            sql: The query with named placeholders.
            variables: Placeholder name -> value.
            exception_on_error: If False, errors return False instead of raising.

        Raises:
            PreparingQueryFailed: If the statement could not be prepared.
            ExecutingQueryFailed: If the statement failed.
        """
        return self._execute(operation_type, sql, variables, exception_on_error, register=True)

    def _execute(
        self,
        operation_type: OperationType,
        sql: str,
        variables: Optional[Mapping[str, Any]],
        exception_on_error: bool,
        register: bool,
    ) -> bool:
        handle = self._get_handle()
        driver = self.get_driver()
        state = self._state

        state.active_query = QueryRecord(operation_type, sql, dict(variables or {}), time.perf_counter())
        state.last_write_cancelled = False
        state.last_error_message = ""

        if operation_type.is_write:
            event = state.listeners.trigger(BeforeWriteEvent(operation_type, sql, variables or {}))
            if event is not None and event.is_cancelled():
                state.last_write_cancelled = True
                self._logger.info(
                    f"{operation_type.name} statement cancelled by a listener: {event.get_cancel_reason()}"
                )
                return True

        bound = normalize_variables(variables)

        try:
            statement = driver.prepare(handle, sql, bound)
        except driver.error_class as e:
            return self._fail(PreparingQueryFailed, "Could not prepare the query.", e, exception_on_error)

        self._close_active_statement()
        state.active_statement = statement

        try:
            statement.execute(bound)
        except driver.error_class as e:
            return self._fail(ExecutingQueryFailed, "The query could not be executed.", e, exception_on_error)

        state.query_count += 1

        if register:
            self._register_query(True)

        return True

    def _close_active_statement(self) -> None:
        statement = self._state.active_statement
        if statement is None:
            return

        self._state.active_statement = None
        try:
            statement.close()
        except self.get_driver().error_class:
            self._logger.warning("Closing the previous statement failed.", exc_info=True)

    def _fail(self, error_class, message: str, error: Exception, exception_on_error: bool) -> bool:
        self._state.last_error_message = str(error)
        query = self._state.active_query
        self._logger.error(f"{message} SQL: {query.sql if query else ''}", exc_info=True)

        if not exception_on_error:
            return False

        raise error_class(message, self.build_error_details()) from error

    def build_error_details(self) -> str:
        """
        Diagnostic text for the active query: the native error message,
        the connection, the SQL with the values filled in and the
        placeholder analysis.
        """
        lines = []
        if self._state.last_error_message:
            lines.append(f"Native error message: [{self._state.last_error_message}]")

        if self._state.selected_id is not None:
            lines.append(f"Database: {self.get_selected_connection().describe()}")

        query = self._state.active_query
        if query is not None:
            lines.append("SQL (with simulated variable values):")
            lines.append(format_query(query.sql, query.variables))
            lines.append(analyze_placeholders(query.sql, query.variables).render())

        return "\n".join(lines)

    def _register_query(self, result: Any) -> None:
        query = self._state.active_query
        if query is None:
            return

        duration = time.perf_counter() - query.started

        if self._state.options.track_queries:
            self._state.queries.append(
                TrackedQuery(query.operation_type, query.sql, query.variables, duration)
            )

        if self._state.options.log_queries:
            self.log(format_query(query.sql, query.variables))

        if self._state.options.debugging:
            self._debug_query(query, result)

    def _debug_query(self, query: QueryRecord, result: Any) -> None:
        stream = self._state.debug_stream or sys.stdout
        stream.write(f"{LOG_PREFIX}{query.operation_type.name}\n")
        stream.write(format_query(query.sql, query.variables) + "\n")
        stream.write(f"Result: {describe_result(result)}\n")

    def insert(self, sql: str, variables: Optional[Mapping[str, Any]] = None) -> Any:
        """
        Runs an insert statement and returns the generated primary key.

        Returns None if the insert was cancelled by a before-write listener.

        Raises:
            InsertFailed: If the statement failed.
        """
        try:
            self._execute(OperationType.INSERT, sql, variables, True, register=True)
        except (PreparingQueryFailed, ExecutingQueryFailed) as e:
            raise InsertFailed("The insert query failed.", e.details) from e

        if self._state.last_write_cancelled:
            return None

        return self._state.active_statement.last_insert_id

    def update(self, sql: str, variables: Optional[Mapping[str, Any]] = None) -> bool:
        return self.execute(OperationType.UPDATE, sql, variables)

    def delete(self, sql: str, variables: Optional[Mapping[str, Any]] = None) -> bool:
        return self.execute(OperationType.DELETE, sql, variables)

    # --- Fetching ---

    def fetch_one(self, sql: str, variables: Optional[Mapping[str, Any]] = None) -> Optional[Dict[str, Any]]:
        self._execute(OperationType.SELECT, sql, variables, True, register=False)
        row = self._fetch(lambda statement: statement.fetch_one())
        self._register_query(row)
        return row

    def fetch_all(self, sql: str, variables: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
        """
        Fetches all rows of a select query as dictionaries.

        Raises:
            FetchFailed: If the driver could not fetch the result set.
        """
        self._execute(OperationType.SELECT, sql, variables, True, register=False)
        rows = self._fetch(lambda statement: statement.fetch_all())
        self._register_query(rows)
        return rows

    def _fetch(self, fetcher: Callable[[PreparedStatement], Any]) -> Any:
        driver = self.get_driver()
        try:
            return fetcher(self._state.active_statement)
        except driver.error_class as e:
            self._state.last_error_message = str(e)
            self._logger.error("Fetching the query results failed.", exc_info=True)
            raise FetchFailed("Could not fetch the query results.", self.build_error_details()) from e

    def fetch_key(self, key: str, sql: str, variables: Optional[Mapping[str, Any]] = None) -> Any:
        row = self.fetch_one(sql, variables)
        if row is None:
            return None
        return row.get(key)

    def fetch_all_key(self, key: str, sql: str, variables: Optional[Mapping[str, Any]] = None) -> List[Any]:
        return [row[key] for row in self.fetch_all(sql, variables) if key in row]

    def fetch_count(self, sql: str, variables: Optional[Mapping[str, Any]] = None) -> int:
        """Fetches the `count` column of the first result row."""
        value = self.fetch_key("count", sql, variables)
        if value is None:
            return 0
        return int(value)

    def fetch_data(
        self,
        table: str,
        where: Optional[Mapping[str, Any]] = None,
        columns: Optional[Iterable[str]] = None,
    ) -> Optional[Dict[str, Any]]:
        """Fetches a single row of the table matching all where fields."""
        select = "*"
        if columns:
            select = ", ".join(quote_identifier(column) for column in columns)

        return self.fetch_one(
            f"SELECT {select} FROM {quote_identifier(table)} "
            f"WHERE {self.build_where_fields_statement(where)}",
            where,
        )

    # --- Dynamic statements ---

    def build_where_fields_statement(self, params: Optional[Mapping[str, Any]] = None) -> str:
        """
        Builds ```a`=:a AND `b`=:b`` from the keys of the map, or ``1``
        if the map is empty.
        """
        if not params:
            return "1"

        return " AND ".join(
            f"`{normalize_placeholder_name(name)}`=:{normalize_placeholder_name(name)}"
            for name in params
        )

    def build_set_statement(self, data: Mapping[str, Any]) -> str:
        return ", ".join(
            f"`{normalize_placeholder_name(name)}`=:{normalize_placeholder_name(name)}"
            for name in data
        )

    def get_limit_sql(self, limit: int = 0, offset: int = 0) -> str:
        return build_limit_clause(limit, offset)

    def insert_dynamic(self, table: str, data: Optional[Mapping[str, Any]] = None) -> Any:
        """
        Inserts a row built from the data keys and returns the new primary key.

        None values are inserted as SQL NULL.
        """
        data = normalize_variables(data)
        if not data:
            return self.insert(self.get_driver().empty_insert_statement(table))

        columns = []
        values = []
        variables = {}
        for name, value in data.items():
            columns.append(quote_identifier(name))
            if value is None:
                values.append("NULL")
            else:
                values.append(f":{name}")
                variables[name] = value

        return self.insert(
            f"INSERT INTO {quote_identifier(table)} ({', '.join(columns)}) VALUES ({', '.join(values)})",
            variables,
        )

    def update_dynamic(self, table: str, data: Mapping[str, Any], primary_fields: List[str]) -> bool:
        """Updates the row identified by the primary fields with the remaining data."""
        data = normalize_variables(data)
        where = self._primary_values(table, data, primary_fields)
        values = {name: value for name, value in data.items() if name not in where}
        if not values:
            return False

        return self.update(
            f"UPDATE {quote_identifier(table)} SET {self.build_set_statement(values)} "
            f"WHERE {self.build_where_fields_statement(where)}",
            data,
        )

    def insert_or_update(self, table: str, data: Mapping[str, Any], primary_fields: List[str]) -> Any:
        """
        Updates the row if a row with the same primary field values exists,
        inserts it otherwise.

        Returns the value of the first primary field, or the generated
        primary key of an inserted row without explicit key.
        """
        data = normalize_variables(data)
        where = self._primary_values(table, data, primary_fields)

        if self.record_exists(table, where):
            self.update_dynamic(table, data, primary_fields)
            return data[primary_fields[0]]

        new_id = self.insert_dynamic(table, data)
        if data.get(primary_fields[0]) is not None:
            return data[primary_fields[0]]
        return new_id

    def _primary_values(self, table: str, data: Mapping[str, Any], primary_fields: List[str]) -> Dict[str, Any]:
        missing = [name for name in primary_fields if name not in data]
        if missing:
            raise DBHelperException(
                "Missing primary field values.",
                f"The data for table [{table}] has no values for: [{', '.join(missing)}].",
            )
        return {name: data[name] for name in primary_fields}

    def delete_records(self, table: str, where: Optional[Mapping[str, Any]] = None) -> bool:
        return self.delete(
            f"DELETE FROM {quote_identifier(table)} WHERE {self.build_where_fields_statement(where)}",
            where,
        )

    def record_exists(self, table: str, where: Optional[Mapping[str, Any]] = None) -> bool:
        return self.fetch_count(
            f"SELECT COUNT(*) AS `count` FROM {quote_identifier(table)} "
            f"WHERE {self.build_where_fields_statement(where)}",
            where,
        ) > 0

    def key_exists(self, table: str, where: Mapping[str, Any], key: str) -> bool:
        """Whether a row matches the where fields and has a value in the key column."""
        value = self.fetch_key(
            key,
            f"SELECT {quote_identifier(key)} FROM {quote_identifier(table)} "
            f"WHERE {self.build_where_fields_statement(where)}",
            where,
        )
        return value is not None

    # --- Transactions ---

    def start_transaction(self) -> bool:
        if self._state.transaction_started:
            raise TransactionAlreadyActive()

        result = self.execute(OperationType.TRANSACTION, self.get_driver().transaction_start_statement)
        self._state.transaction_started = True
        return result

    def commit_transaction(self) -> bool:
        if not self._state.transaction_started:
            raise NoActiveTransaction("Cannot commit: no transaction has been started.")

        self._state.transaction_started = False
        return self.execute(OperationType.TRANSACTION, self.get_driver().transaction_commit_statement)

    def rollback_transaction(self) -> bool:
        if not self._state.transaction_started:
            raise NoActiveTransaction("Cannot roll back: no transaction has been started.")

        self._state.transaction_started = False
        return self.execute(OperationType.TRANSACTION, self.get_driver().transaction_rollback_statement)

    def is_transaction_started(self) -> bool:
        return self._state.transaction_started

    def require_transaction(self, operation_label: str) -> None:
        if not self._state.transaction_started:
            raise TransactionRequired(
                "This operation requires an active transaction.",
                f"The operation [{operation_label}] can only be done within a transaction.",
            )

    @contextmanager
    def transaction(self) -> Generator["DBHelper", None, None]:
        """Commits on success, rolls back if an exception is raised."""
        self.start_transaction()
        try:
            yield self
        except Exception:
            self._logger.warning("Exception within transaction, rolling back.", exc_info=True)
            self.rollback_transaction()
            raise
        self.commit_transaction()

    # --- Query introspection ---

    def get_queries(self) -> List[TrackedQuery]:
        return list(self._state.queries)

    def get_write_queries(self) -> List[TrackedQuery]:
        return [query for query in self._state.queries if query.is_write()]

    def get_select_queries(self) -> List[TrackedQuery]:
        return [query for query in self._state.queries if query.is_select()]

    def count_queries(self, operation_type: Optional[OperationType] = None) -> int:
        """Number of tracked queries, optionally of one operation type only."""
        if operation_type is None:
            return len(self._state.queries)
        return len([query for query in self._state.queries if query.operation_type is operation_type])

    def get_query_count(self) -> int:
        """Number of statements executed successfully since the last reset."""
        return self._state.query_count

    def get_sql(self) -> str:
        query = self._state.active_query
        if query is None:
            return ""
        return format_query(query.sql, query.variables)

    def get_error_message(self) -> str:
        return self._state.last_error_message

    def count_affected_rows(self) -> int:
        if self._state.active_statement is None:
            return 0
        return self._state.active_statement.row_count

    def get_last_insert_id(self) -> Any:
        if self._state.active_statement is None:
            return None
        return self._state.active_statement.last_insert_id

    # --- Schema ---

    def column_exists(self, table: str, column: str) -> bool:
        """Whether the table has the column. Results are cached."""
        key = (table, column)
        if key not in self._state.column_cache:
            descriptor = self.get_selected_connection()
            sql, variables = self.get_driver().column_exists_query(descriptor, table, column)
            self._state.column_cache[key] = self.fetch_count(sql, variables) > 0

        return self._state.column_cache[key]

    def fetch_table_names(self) -> List[str]:
        descriptor = self.get_selected_connection()
        sql, variables = self.get_driver().table_names_query(descriptor)
        return [next(iter(row.values())) for row in self.fetch_all(sql, variables)]

    def table_exists(self, table: str) -> bool:
        return table in self.fetch_table_names()

    def truncate(self, table: str) -> bool:
        return self.execute(OperationType.TRUNCATE, self.get_driver().truncate_statement(table))

    def drop_tables(self) -> bool:
        """Drops all tables of the selected database."""
        tables = self.fetch_table_names()
        for statement in self.get_driver().drop_table_statements(tables):
            self.execute(OperationType.DROP, statement)

        self._state.column_cache.clear()
        self._logger.info(f"Dropped {len(tables)} tables.")
        return True

    # --- Events ---

    def on_init(self, listener: Listener) -> int:
        """Adds a listener called once when the helper is initialized."""
        return self._state.listeners.add(EVENT_INIT, listener)

    def on_before_write_operation(self, listener: Listener) -> int:
        """
        Adds a listener called before each write statement. The listener
        receives a ``BeforeWriteEvent`` which it may cancel.
        """
        return self._state.listeners.add(EVENT_BEFORE_WRITE, listener)

    def remove_listener(self, listener_id: int) -> bool:
        return self._state.listeners.remove(listener_id)

    def remove_listeners(self, event_name: str) -> None:
        self._state.listeners.remove_all(event_name)

    def has_listener(self, event_name: str) -> bool:
        return self._state.listeners.has_listeners(event_name)

    def get_listener_ids(self, event_name: str) -> List[int]:
        return self._state.listeners.get_ids(event_name)

    def trigger_event(self, event: Event) -> Optional[Event]:
        return self._state.listeners.trigger(event)

    # --- Collections ---

    def create_collection(self, settings: CollectionSettings, parent_record=None) -> RecordCollection:
        """
        Returns the collection for the settings, creating it on first use.

        Collections that declare a parent collection need the parent record;
        one collection instance exists per parent record.
        """
        if not isinstance(settings, CollectionSettings):
            raise NotACollectionSettings(
                "The object is not a collection settings instance.",
                f"Got an object of type [{type(settings).__name__}].",
            )

        parent_id = None
        if settings.parent_collection is not None:
            if parent_record is None:
                raise NoParentRecordSpecified(
                    "A parent record is required to create this collection.",
                    f"The collection [{settings.type_name}] requires a [{settings.parent_collection.type_name}] record.",
                )
            if parent_record.get_collection().get_settings().type_name != settings.parent_collection.type_name:
                raise InvalidParentRecord(
                    "The parent record does not belong to the parent collection.",
                    f"Expected a [{settings.parent_collection.type_name}] record, "
                    f"got a [{parent_record.get_collection().get_settings().type_name}] record.",
                )
            parent_id = parent_record.get_id()

        key = (settings.type_name, parent_id)
        if key not in self._state.collections:
            collection = RecordCollection(self, settings)
            if parent_record is not None:
                collection.bind_parent_record(parent_record)
            self._state.collections[key] = collection

        return self._state.collections[key]


def describe_result(result: Any) -> str:
    """Coarse summary of a statement result for the debug output."""
    if isinstance(result, bool):
        return "true" if result else "false"
    if result is None:
        return "NULL"
    if isinstance(result, list):
        return f"{len(result)} entries"
    if isinstance(result, dict):
        return "1 entries"
    return "Unknown"
