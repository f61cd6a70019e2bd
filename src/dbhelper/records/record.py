import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Union

from dbhelper.base.exceptions import (RecordDoesNotExist, RecordKeyUnknown,
                                      RecordPrimaryKeyReadOnly,
                                      RecordValueNotScalar)
from dbhelper.base.utils import (DATETIME_FORMAT, are_strings_equal,
                                 bool_to_string, is_scalar, quote_identifier,
                                 string_to_bool)

if TYPE_CHECKING:
    from dbhelper.records.collection import RecordCollection

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Loaded:
    """Identity of a record loaded from the database."""

    record_id: Any


@dataclass(frozen=True)
class Template:
    """Identity of a metadata-only record that represents no row."""


RecordIdentity = Union[Loaded, Template]


@dataclass
class RegisteredKey:
    name: str
    label: str
    is_structural: bool = False


class BaseRecord:
    """
    A single row of a collection's table, with change tracking.

    Values are read through the typed getters and changed with
    ``set_record_key()``; ``save()`` writes only the modified columns.
    Subclass to add accessors and react to changes of registered keys.
    """

    def __init__(self, collection: "RecordCollection", identity: RecordIdentity):
        self._collection = collection
        self._helper = collection.get_helper()
        self._identity = identity
        self._record_data: Dict[str, Any] = {}
        self._record_keys: List[str] = []
        self._modified_keys: List[str] = []
        self._registered_keys: Dict[str, RegisteredKey] = {}

        self._load()
        self.init()

    def _load(self) -> None:
        table = self._collection.get_record_table_name()
        primary_name = self._collection.get_record_primary_name()

        if isinstance(self._identity, Template):
            self._record_data = {primary_name: None}
            self._record_keys = [primary_name]
            return

        where = self._collection.get_foreign_keys()
        where[primary_name] = self._identity.record_id

        row = self._helper.fetch_one(
            f"SELECT * FROM {quote_identifier(table)} "
            f"WHERE {self._helper.build_where_fields_statement(where)}",
            where,
        )

        if row is None:
            raise RecordDoesNotExist(
                "The record does not exist.",
                f"No record found in table [{table}] with [{primary_name}] = "
                f"[{self._identity.record_id}] (foreign keys: {self._collection.get_foreign_keys()}).",
            )

        self._record_data = row
        self._record_keys = list(row.keys())

    def init(self) -> None:
        """Called after the record has been loaded."""
        pass

    def on_created(self) -> None:
        """Called once after the record has been inserted and loaded."""
        pass

    def record_registered_key_modified(
        self,
        name: str,
        label: str,
        is_structural: bool,
        old_value: Any,
        new_value: Any,
    ) -> None:
        """Called when the value of a registered key has changed."""
        pass

    # --- Identity ---

    def is_template(self) -> bool:
        return isinstance(self._identity, Template)

    def get_identity(self) -> RecordIdentity:
        return self._identity

    def get_id(self) -> Any:
        """The primary key value, None for template records."""
        if self.is_template():
            return None
        return self._record_data.get(self._collection.get_record_primary_name(), self._identity.record_id)

    def get_collection(self) -> "RecordCollection":
        return self._collection

    def get_record_table(self) -> str:
        return self._collection.get_record_table_name()

    def get_record_primary_name(self) -> str:
        return self._collection.get_record_primary_name()

    def get_record_type_name(self) -> str:
        return self._collection.get_record_type_name()

    def get_parent_record(self):
        return self._collection.get_parent_record()

    def get_label(self) -> str:
        return f"{self.get_record_type_name()} #{self.get_id()}"

    # --- Reading values ---

    def get_record_data(self) -> Dict[str, Any]:
        return dict(self._record_data)

    def get_record_keys(self) -> List[str]:
        return list(self._record_keys)

    def record_key_exists(self, name: str) -> bool:
        return name in self._record_keys

    def get_record_key(self, name: str, default: Any = None) -> Any:
        value = self._record_data.get(name)
        if value is None:
            return default
        return value

    def get_record_int_key(self, name: str, default: int = 0) -> int:
        value = self.get_record_key(name)
        if value is None or value == "":
            return default
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    def get_record_string_key(self, name: str, default: str = "") -> str:
        value = self.get_record_key(name)
        if isinstance(value, str) and value != "":
            return value
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return default

    def get_record_boolean_key(self, name: str, default: bool = False) -> bool:
        value = self.get_record_key(name)
        if value is None or value == "":
            return default
        return string_to_bool(value)

    def get_record_date_key(self, name: str, default: Optional[datetime] = None) -> Optional[datetime]:
        value = self.get_record_key(name)
        if isinstance(value, datetime):
            return value
        if isinstance(value, date):
            return datetime(value.year, value.month, value.day)
        if not isinstance(value, str) or value == "":
            return default

        try:
            return datetime.strptime(value, DATETIME_FORMAT)
        except ValueError:
            pass
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            return default

    # --- Changing values ---

    def register_record_key(self, name: str, label: str, is_structural: bool = False) -> None:
        """
        Registers a key whose changes are reported to
        ``record_registered_key_modified()``.
        """
        self._registered_keys[name] = RegisteredKey(name, label, is_structural)

    def set_record_key(self, name: str, value: Any) -> bool:
        """
        Sets a column value. Returns False if the value did not change or
        the record is a template.

        Raises:
            RecordKeyUnknown: If the column does not exist in the record.
            RecordValueNotScalar: If the value is not a scalar value.
            RecordPrimaryKeyReadOnly: If the primary key would change.
        """
        if self.is_template():
            return False

        if not is_scalar(value):
            raise RecordValueNotScalar(
                "Record values must be scalar.",
                f"Tried setting [{name}] of record [{self.get_label()}] to a [{type(value).__name__}].",
            )

        if name not in self._record_keys:
            raise RecordKeyUnknown(
                "The record key does not exist.",
                f"The key [{name}] does not exist in table [{self.get_record_table()}]. "
                f"Available keys: [{', '.join(self._record_keys)}].",
            )

        previous = self._record_data.get(name)
        if are_strings_equal(previous, value):
            return False

        if name == self.get_record_primary_name():
            raise RecordPrimaryKeyReadOnly(
                "The primary key of a record cannot be changed.",
                f"Tried setting [{name}] of record [{self.get_label()}] to [{value}].",
            )

        self._record_data[name] = value
        if name not in self._modified_keys:
            self._modified_keys.append(name)

        registered = self._registered_keys.get(name)
        if registered is not None:
            self.record_registered_key_modified(
                name, registered.label, registered.is_structural, previous, value
            )

        return True

    def set_record_boolean_key(self, name: str, value: Any, yes_no: bool = True) -> bool:
        """Stores a boolean as ``yes``/``no`` (or ``true``/``false``)."""
        return self.set_record_key(name, bool_to_string(value, yes_no))

    def is_modified(self, key: Optional[str] = None) -> bool:
        if key is None:
            return bool(self._modified_keys)
        return key in self._modified_keys

    def get_modified_keys(self) -> List[str]:
        return list(self._modified_keys)

    def save(self) -> bool:
        """
        Writes the modified columns to the database.

        Returns False if there was nothing to save.

        Raises:
            TransactionRequired: If no transaction has been started.
        """
        if not self.is_modified():
            return False

        self._helper.require_transaction(f"Save the record [{self.get_label()}]")

        data = {name: self._record_data[name] for name in self._modified_keys}

        where = self._collection.get_foreign_keys()
        where[self.get_record_primary_name()] = self.get_id()

        # The WHERE values get their own placeholders, a modified foreign key
        # column appears in both clauses
        variables = dict(data)
        conditions = []
        for name, value in where.items():
            conditions.append(f"{quote_identifier(name)}=:where_{name}")
            variables[f"where_{name}"] = value

        self._helper.update(
            f"UPDATE {quote_identifier(self.get_record_table())} "
            f"SET {self._helper.build_set_statement(data)} "
            f"WHERE {' AND '.join(conditions)}",
            variables,
        )

        logger.debug(f"Saved record [{self.get_label()}], modified keys: {self._modified_keys}.")
        self._modified_keys = []
        return True
