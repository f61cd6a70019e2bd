import hashlib
import json
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional

from dbhelper.base.exceptions import (EmptySelectFieldsList,
                                      InvalidSortingOrder,
                                      InvalidWhereStatement,
                                      MissingSelectKeyword)
from dbhelper.base.utils import (build_limit_clause, find_placeholders,
                                 format_query, normalize_placeholder_name,
                                 quote_identifier)
from dbhelper.filters.search import FilterMessage, MessageType, SearchParser

if TYPE_CHECKING:
    from dbhelper.helper import DBHelper

ORDER_ASCENDING = "ASC"
ORDER_DESCENDING = "DESC"

QUERY_TEMPLATE = """SELECT
    {WHAT}
FROM
    %s
{JOINS}
{WHERE}
{GROUPBY}
{ORDERBY}
{LIMIT}"""


@dataclass
class FilterSource:
    """
    Describes what a filter criteria instance selects from.

    Attributes:
        table_name: Table to select from.
        table_alias: Alias of the table in the query.
        select_columns: Columns of the result rows (may be qualified).
        search_fields: Columns the free-text search compares against.
        order_field: Initial ORDER BY column.
        order_dir: Initial sort direction.
        count_column: Column counted by count queries.
    """

    table_name: str
    table_alias: str
    select_columns: List[str] = field(default_factory=list)
    search_fields: List[str] = field(default_factory=list)
    order_field: Optional[str] = None
    order_dir: str = ORDER_ASCENDING
    count_column: str = "*"


@dataclass
class CriteriaQuery:
    sql: str
    variables: Dict[str, Any]

    def get_formatted_sql(self) -> str:
        return format_query(self.sql, self.variables)


class FilterCriteria:
    """
    Builds and runs a parameterized SELECT (or COUNT) query from the
    configured WHERE, JOIN, GROUP BY, HAVING, ORDER BY and LIMIT fragments
    and an optional free-text search.

    The query is rebuilt on every call to ``get_items()`` or
    ``count_items()``.
    """

    def __init__(self, helper: "DBHelper", source: FilterSource):
        self._helper = helper
        self._source = source

        self._wheres: List[str] = []
        self._joins: List[str] = []
        self._group_bys: List[str] = []
        self._havings: List[str] = []
        self._select_columns: List[str] = []
        self._order_field: Optional[str] = source.order_field
        self._order_dir: str = ORDER_ASCENDING
        self._limit = 0
        self._offset = 0
        self._distinct = False
        self._search = ""
        self._select_alias: Optional[str] = None
        self._is_count = False
        self._dump_query = False

        # Explicit placeholders persist, generated ones are reset after each query
        self._placeholders: Dict[str, Any] = {}
        self._generated: Dict[str, Any] = {}
        self._placeholder_hashes: Dict[str, str] = {}
        self._placeholder_values: Dict[str, Any] = {}

        self._messages: List[FilterMessage] = []
        self._criteria_items: Dict[str, List[Any]] = {}
        self._queries: List[CriteriaQuery] = []
        self._total_unfiltered: Optional[int] = None

        self._logger = logging.getLogger(
            f"{__name__}.{self.__class__.__name__}[{source.table_name}]"
        )

        self.set_sort_order(source.order_dir)
        self.init()

    def init(self) -> None:
        """Called at the end of the constructor, for subclass setup."""
        pass

    def prepare_query(self) -> None:
        """Called before each query is built, to add joins, wheres and the like."""
        pass

    def get_helper(self) -> "DBHelper":
        return self._helper

    def get_table_name(self) -> str:
        return self._source.table_name

    def get_table_alias(self) -> str:
        return self._source.table_alias

    def create_pristine(self) -> "FilterCriteria":
        """A fresh instance of the same type, without any customization."""
        return self.__class__(self._helper, self._source)

    # --- Ordering and limits ---

    def set_order_by(self, field_name: str, order_dir: str = ORDER_ASCENDING) -> "FilterCriteria":
        self._order_field = field_name
        return self.set_sort_order(order_dir)

    def set_sort_order(self, order: str) -> "FilterCriteria":
        order = (order or "").upper()
        if order not in (ORDER_ASCENDING, ORDER_DESCENDING):
            raise InvalidSortingOrder(
                "Invalid sorting order.",
                f"The order [{order}] is not valid. Valid values are "
                f"[{ORDER_ASCENDING}] and [{ORDER_DESCENDING}].",
            )
        self._order_dir = order
        return self

    def get_sort_order(self) -> str:
        return self._order_dir

    def get_order_field(self) -> Optional[str]:
        return self._order_field

    def order_ascending(self) -> "FilterCriteria":
        return self.set_sort_order(ORDER_ASCENDING)

    def order_descending(self) -> "FilterCriteria":
        return self.set_sort_order(ORDER_DESCENDING)

    def set_limit(self, offset: int = 0, limit: int = 0) -> "FilterCriteria":
        self._offset = int(offset)
        self._limit = int(limit)
        return self

    def set_search(self, search: Optional[str]) -> "FilterCriteria":
        self._search = (search or "").strip()
        return self

    def get_search(self) -> str:
        return self._search

    def set_distinct(self, distinct: bool = True) -> "FilterCriteria":
        self._distinct = distinct
        return self

    def make_distinct(self) -> "FilterCriteria":
        return self.set_distinct(True)

    def set_select_alias(self, alias: Optional[str]) -> "FilterCriteria":
        self._select_alias = alias
        return self

    def debug_query(self, debug: bool = True) -> "FilterCriteria":
        """Enables the helper's debug output for the next query."""
        self._dump_query = debug
        return self

    # --- Query fragments ---

    def add_where(self, statement: str) -> "FilterCriteria":
        statement = (statement or "").strip()
        if statement in ("", "()"):
            raise InvalidWhereStatement(
                "Empty or invalid where statement.",
                f"The statement [{statement}] cannot be used as a where condition.",
            )
        if statement not in self._wheres:
            self._wheres.append(statement)
        return self

    def add_wheres(self, statements: Iterable[str]) -> "FilterCriteria":
        for statement in statements:
            self.add_where(statement)
        return self

    def add_where_column_equals(self, column: str, value: Any) -> "FilterCriteria":
        return self.add_where(f"{column} = {self.generate_placeholder(value)}")

    def add_where_column_not_equals(self, column: str, value: Any) -> "FilterCriteria":
        return self.add_where(f"{column} != {self.generate_placeholder(value)}")

    def add_where_column_is_null(self, column: str, is_null: bool = True) -> "FilterCriteria":
        return self.add_where(f"{column} IS {'' if is_null else 'NOT '}NULL")

    def add_where_column_in(self, column: str, values: Iterable[Any], exclude: bool = False) -> "FilterCriteria":
        values = list(values or [])
        if not values:
            return self

        tokens = [self.generate_placeholder(value) for value in values]
        connector = "NOT IN" if exclude else "IN"
        return self.add_where(f"{column} {connector}({','.join(tokens)})")

    def add_where_column_not_in(self, column: str, values: Iterable[Any]) -> "FilterCriteria":
        return self.add_where_column_in(column, values, exclude=True)

    def add_where_column_like(self, column: str, value: str) -> "FilterCriteria":
        if "`" not in column and "." not in column:
            column = quote_identifier(column)
        like_escape = self._helper.get_driver().like_escape_clause
        placeholder = self.generate_placeholder("%" + value.replace("_", "\\_") + "%")
        return self.add_where(f"{column} LIKE {placeholder}{like_escape}")

    def add_join(self, statement: str) -> "FilterCriteria":
        if statement not in self._joins:
            self._joins.append(statement)
        return self

    def add_having(self, statement: str) -> "FilterCriteria":
        if statement not in self._havings:
            self._havings.append(statement)
        return self

    def add_group_by(self, group_by: str) -> "FilterCriteria":
        if group_by not in self._group_bys:
            self._group_bys.append(group_by)
        return self

    def add_group_bys(self, group_bys: Iterable[str]) -> "FilterCriteria":
        for group_by in group_bys:
            self.add_group_by(group_by)
        return self

    def add_select_column(self, column: str) -> "FilterCriteria":
        if column not in self._select_columns:
            self._select_columns.append(column)
        return self

    # --- Placeholders ---

    def add_placeholder(self, name: str, value: Any) -> "FilterCriteria":
        self._placeholders[":" + normalize_placeholder_name(name)] = value
        return self

    def generate_placeholder(self, value: Any) -> str:
        """
        Returns the placeholder name for the value. Identical values share
        the same placeholder within one instance.
        """
        key = hashlib.md5(
            f"{type(value).__name__}:{value!r}".encode("utf-8")
        ).hexdigest()

        if key not in self._placeholder_hashes:
            self._placeholder_hashes[key] = f":PH{len(self._placeholder_hashes) + 1:04d}"

        name = self._placeholder_hashes[key]
        self._generated[name] = value
        self._placeholder_values[name] = value
        return name

    def get_query_variables(self) -> Dict[str, Any]:
        variables = dict(self._placeholders)
        variables.update(self._generated)
        return variables

    def reset_query_variables(self) -> None:
        self._generated = {}

    # --- Messages ---

    def _add_message(self, message: str, message_type: MessageType) -> None:
        self._messages.append(FilterMessage(message, message_type))

    def add_info(self, message: str) -> None:
        self._add_message(message, MessageType.INFO)

    def add_warning(self, message: str) -> None:
        self._add_message(message, MessageType.WARNING)

    def has_messages(self) -> bool:
        return bool(self._messages)

    def get_messages(self) -> List[FilterMessage]:
        return list(self._messages)

    def reset_messages(self) -> None:
        self._messages = []

    # --- Criteria values ---

    def select_criteria_value(self, criteria_type: str, value: Any) -> "FilterCriteria":
        """Stores a value for a criteria type, for use in ``prepare_query()``."""
        if value is None or value == "":
            return self

        values = self._criteria_items.setdefault(criteria_type, [])
        if value not in values:
            values.append(value)
        return self

    def select_criteria_values(self, criteria_type: str, values: Iterable[Any]) -> "FilterCriteria":
        for value in values or []:
            self.select_criteria_value(criteria_type, value)
        return self

    def get_criteria_values(self, criteria_type: str) -> List[Any]:
        return list(self._criteria_items.get(criteria_type, []))

    # --- Query building ---

    def get_select(self) -> List[str]:
        return list(self._source.select_columns)

    def get_search_fields(self) -> List[str]:
        return list(self._source.search_fields)

    def get_count_column(self) -> str:
        return self._source.count_column

    def resolve_table_from(self) -> str:
        return f"{quote_identifier(self.get_table_name())} AS {self.get_table_alias()}"

    def get_query(self) -> str:
        """
        The query template. The six tokens {WHAT}, {JOINS}, {WHERE},
        {GROUPBY}, {ORDERBY} and {LIMIT} are replaced when building.
        """
        self.prepare_query()
        return QUERY_TEMPLATE % self.resolve_table_from()

    def get_search_terms(self) -> List[str]:
        parser = SearchParser(self._helper.get_translator())
        terms = parser.get_search_terms(self._search)
        self._messages.extend(parser.messages)
        return terms

    def _build_search(self) -> str:
        if not self._search:
            return ""

        parser = SearchParser(self._helper.get_translator())
        terms = parser.get_search_terms(self._search)
        expression = parser.build_expression(
            terms,
            self.get_search_fields(),
            self.generate_placeholder,
            self._helper.get_driver().like_escape_clause,
        )
        self._messages.extend(parser.messages)

        for message in parser.messages:
            if message.is_warning():
                self._logger.warning(message.message)
            else:
                self._logger.info(message.message)

        return expression

    def _build_select(self) -> str:
        if self._is_count:
            distinct = "DISTINCT " if self._distinct else ""
            column = self.get_count_column()
            if self._distinct and column == "*":
                column = self._get_select_columns()[0]
            return f"COUNT({distinct}{column}) AS `count`"

        return ",\n    ".join(self._get_select_columns())

    def _get_select_columns(self) -> List[str]:
        columns: List[str] = []
        for column in self.get_select() + self._select_columns:
            if column not in columns:
                columns.append(column)

        # DISTINCT queries must select the column they are sorted by
        order_column = self._get_order_column()
        if self._distinct and order_column and columns:
            if not any(column == order_column or column.endswith("." + order_column) for column in columns):
                columns.append(order_column)

        if not columns:
            raise EmptySelectFieldsList(
                "No fields have been selected.",
                f"The filter criteria for table [{self.get_table_name()}] has an empty select list.",
            )

        return columns

    def _build_where(self, search_expression: str = "") -> str:
        wheres = list(self._wheres)
        if search_expression:
            wheres.append(search_expression)
        if not wheres:
            return ""
        return "WHERE\n    " + "\nAND\n    ".join(wheres)

    def _build_group_by(self) -> str:
        group_bys = list(self._group_bys)
        # DISTINCT item queries group by the selected columns, for this query only
        if self._distinct and not self._is_count:
            for column in self._get_select_columns():
                if column not in group_bys:
                    group_bys.append(column)

        if not group_bys:
            return ""

        sql = "GROUP BY\n    " + ",\n    ".join(group_bys)
        if self._havings:
            sql += "\nHAVING\n    " + "\nAND\n    ".join(self._havings)
        return sql

    def _get_order_column(self) -> str:
        order_field = self._order_field
        if not order_field:
            return ""

        # Qualified names are used as is
        if "." not in order_field:
            if not order_field.startswith("`"):
                order_field = quote_identifier(order_field)
            if self._select_alias:
                order_field = f"{self._select_alias}.{order_field}"
        return order_field

    def _build_order_by(self) -> str:
        if self._is_count or not self._order_field:
            return ""
        return f"ORDER BY\n    {self._get_order_column()} {self._order_dir}"

    def _build_limit(self) -> str:
        if self._is_count:
            return ""
        return build_limit_clause(self._limit, self._offset)

    def _add_distinct_keyword(self, sql: str) -> str:
        upper = sql.upper()
        position = upper.find("SELECT")
        if position < 0:
            raise MissingSelectKeyword(
                "No SELECT keyword found in the query.",
                f"Query: {sql}",
            )

        start = position + len("SELECT")
        if upper[start:].lstrip().startswith("DISTINCT"):
            return sql

        return sql[:start] + " DISTINCT" + sql[start:]

    def build_query(self, is_count: bool = False) -> str:
        self._is_count = is_count
        self._messages = []

        sql = self.get_query()

        what = self._build_select()
        search_expression = self._build_search()

        sql = sql.replace("{WHAT}", what)
        sql = sql.replace("{JOINS}", "\n".join(self._joins))
        sql = sql.replace("{WHERE}", self._build_where(search_expression))
        sql = sql.replace("{GROUPBY}", self._build_group_by())
        sql = sql.replace("{ORDERBY}", self._build_order_by())
        sql = sql.replace("{LIMIT}", self._build_limit())

        if self._distinct and not is_count:
            sql = self._add_distinct_keyword(sql)

        # Drop the empty lines of unused tokens
        sql = "\n".join(line for line in sql.split("\n") if line.strip())

        self._restore_placeholders(sql)
        return sql

    def _restore_placeholders(self, sql: str) -> None:
        # Fragments added before the last reset still reference their placeholders
        for name in find_placeholders(sql):
            name = ":" + name
            if name in self._placeholder_values and name not in self._generated:
                self._generated[name] = self._placeholder_values[name]

    # --- Execution ---

    def count_items(self) -> int:
        """Runs the count query and sums up the counts of all result rows."""
        sql = self.build_query(is_count=True)
        variables = self.get_query_variables()
        self._register_query(sql, variables)

        rows = self._helper.fetch_all(sql, variables)
        return sum(int(row["count"] or 0) for row in rows)

    def count_unfiltered(self) -> int:
        """
        Total number of items without any filtering, computed once with a
        pristine instance.
        """
        if self._total_unfiltered is None:
            self._total_unfiltered = self.create_pristine().count_items()
        return self._total_unfiltered

    def get_items(self) -> List[Dict[str, Any]]:
        sql = self.build_query(is_count=False)
        variables = self.get_query_variables()
        self.reset_query_variables()
        self._register_query(sql, variables)

        if not self._dump_query:
            return self._helper.fetch_all(sql, variables)

        debugging = self._helper.is_debugging()
        self._helper.enable_debugging(True)
        try:
            return self._helper.fetch_all(sql, variables)
        finally:
            self._helper.enable_debugging(debugging)

    def _register_query(self, sql: str, variables: Dict[str, Any]) -> None:
        self._queries.append(CriteriaQuery(sql, dict(variables)))
        self._logger.debug(f"Built query:\n{format_query(sql, variables)}")

    def get_queries(self) -> List[str]:
        """The queries run by this instance, with the values filled in."""
        return [query.get_formatted_sql() for query in self._queries]

    def debug(self) -> str:
        lines = []
        for query in self._queries:
            lines.append(query.get_formatted_sql())
            lines.append(json.dumps(query.variables, default=str, indent=4))
        return "\n".join(lines)
