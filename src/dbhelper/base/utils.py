import logging
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Optional

logger = logging.getLogger(__name__)

DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"

# Named placeholders like ":label" or ":PH0001". Time literals such as
# '10:30' are not matched, since names must not start with a digit.
PLACEHOLDER_PATTERN = re.compile(r"(?<![:\w]):([A-Za-z_][A-Za-z0-9_]*)")

_TRUE_STRINGS = {"yes", "true", "1", "on"}


def normalize_placeholder_name(name: str) -> str:
    return name[1:] if name.startswith(":") else name


def normalize_value(value: Any) -> Any:
    """Converts date/time values to the storage string format."""
    if isinstance(value, datetime):
        return value.strftime(DATETIME_FORMAT)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day).strftime(DATETIME_FORMAT)
    return value


def normalize_variables(variables: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """
    Prepares a placeholder map for binding.

    Leading colons are removed from the names and date/time values are
    converted to the ``YYYY-MM-DD HH:MM:SS`` format; all other values
    are passed through unchanged.
    """
    if not variables:
        return {}

    return {
        normalize_placeholder_name(name): normalize_value(value)
        for name, value in variables.items()
    }


def is_scalar(value: Any) -> bool:
    return value is None or isinstance(value, (str, int, float, bool, date))


def value_to_string(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (datetime, date)):
        return normalize_value(value)
    return str(value)


def are_strings_equal(a: Any, b: Any) -> bool:
    """Compares two scalar values by their string representation."""
    return value_to_string(a) == value_to_string(b)


def string_to_bool(value: Any) -> bool:
    """
    Converts a boolean string encoding to a bool.

    Accepts yes/no, true/false, 1/0 and on/off, case insensitive.
    """
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, (int, float)):
        return value != 0
    return str(value).strip().lower() in _TRUE_STRINGS


def bool_to_string(value: Any, yes_no: bool = False) -> str:
    if string_to_bool(value):
        return "yes" if yes_no else "true"
    return "no" if yes_no else "false"


def quote_identifier(name: str) -> str:
    return f"`{name}`"


def format_literal(value: Any) -> str:
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, (int, float)):
        return str(value)
    escaped = value_to_string(value).replace("'", "\\'")
    return f"'{escaped}'"


def format_query(sql: str, variables: Optional[Mapping[str, Any]] = None) -> str:
    """
    Replaces the placeholders in the query with their quoted values.

    For display only: the result must never be sent to the database.
    """
    values = normalize_variables(variables)
    if not values:
        return sql

    def replace(match: re.Match) -> str:
        name = match.group(1)
        if name in values:
            return format_literal(values[name])
        return match.group(0)

    return PLACEHOLDER_PATTERN.sub(replace, sql)


def find_placeholders(sql: str) -> List[str]:
    """Returns the distinct placeholder names used in the query, in order."""
    names: List[str] = []
    for name in PLACEHOLDER_PATTERN.findall(sql):
        if name not in names:
            names.append(name)
    return names


@dataclass
class PlaceholderInfo:
    name: str
    value: Any = None
    message: str = ""

    @property
    def is_valid(self) -> bool:
        return self.message == ""


@dataclass
class PlaceholderAnalysis:
    """Cross-check of the query placeholders against the supplied values."""

    placeholders: List[PlaceholderInfo] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return any(not info.is_valid for info in self.placeholders)

    @property
    def missing(self) -> List[str]:
        return [info.name for info in self.placeholders if info.message == MESSAGE_NOT_SPECIFIED]

    @property
    def unused(self) -> List[str]:
        return [info.name for info in self.placeholders if info.message == MESSAGE_NO_MATCH]

    def render(self) -> str:
        lines = []
        if self.has_errors:
            lines.append("Analysis: Placeholders have inconsistencies, see detail below.")
        lines.append(f"Placeholders: {len(self.placeholders)}")
        for info in self.placeholders:
            if info.is_valid:
                lines.append(f"- :{info.name} = {format_literal(info.value)}")
            else:
                lines.append(f"- :{info.name} = {info.message}")
        return "\n".join(lines)


MESSAGE_NOT_SPECIFIED = "Placeholder not specified in values list"
MESSAGE_NO_MATCH = "No matching placeholder in query"


def analyze_placeholders(sql: str, variables: Optional[Mapping[str, Any]] = None) -> PlaceholderAnalysis:
    values = normalize_variables(variables)
    names = find_placeholders(sql)
    analysis = PlaceholderAnalysis()

    for name in names:
        if name in values:
            analysis.placeholders.append(PlaceholderInfo(name, values[name]))
        else:
            analysis.placeholders.append(PlaceholderInfo(name, message=MESSAGE_NOT_SPECIFIED))

    for name, value in values.items():
        if name not in names:
            analysis.placeholders.append(PlaceholderInfo(name, value, MESSAGE_NO_MATCH))

    return analysis


# Largest row count accepted by both MySQL and SQLite
MAX_LIMIT = 9223372036854775807


def build_limit_clause(limit: int = 0, offset: int = 0) -> str:
    """
    Renders ``LIMIT x OFFSET y``, or an empty string if neither is set.

    An offset without a limit selects all remaining rows.
    """
    limit = int(limit or 0)
    offset = int(offset or 0)
    if limit <= 0 and offset <= 0:
        return ""
    if limit <= 0:
        limit = MAX_LIMIT
    return f"LIMIT {limit} OFFSET {offset}"
