import logging
from dataclasses import dataclass, field
from typing import (TYPE_CHECKING, Any, Dict, List, Optional, Type)

from dbhelper.base.exceptions import (BindingNotAllowed,
                                      CollectionAlreadyHasParent,
                                      CollectionHasNoParent,
                                      IdTableSameAsRecordTable,
                                      NoParentRecordBound)
from dbhelper.base.interfaces import generate_id
from dbhelper.base.utils import quote_identifier
from dbhelper.filters.criteria import (ORDER_ASCENDING, QUERY_TEMPLATE,
                                       FilterCriteria, FilterSource)
from dbhelper.records.record import BaseRecord, Loaded, Template

if TYPE_CHECKING:
    from dbhelper.helper import DBHelper


class CollectionFilterCriteria(FilterCriteria):
    """
    Filter criteria bound to a collection: selects the primary keys of the
    collection's table, restricted to the collection's foreign keys.
    """

    def __init__(self, collection: "RecordCollection"):
        self._collection = collection
        settings = collection.get_settings()

        super().__init__(
            collection.get_helper(),
            FilterSource(
                table_name=settings.table_name,
                table_alias=settings.table_alias or "",
                search_fields=list(settings.searchable_columns),
                order_field=settings.default_sort_key,
                order_dir=settings.default_sort_dir,
            ),
        )

        if settings.table_alias:
            self.set_select_alias(settings.table_alias)

    def create_pristine(self) -> "CollectionFilterCriteria":
        return self.__class__(self._collection)

    def get_collection(self) -> "RecordCollection":
        return self._collection

    def resolve_table_from(self) -> str:
        table = quote_identifier(self.get_table_name())
        if self._select_alias:
            return f"{table} AS {self._select_alias}"
        return table

    def resolve_table_selector(self) -> str:
        if self._select_alias:
            return self._select_alias
        return quote_identifier(self.get_table_name())

    def get_select(self) -> List[str]:
        return [f"{self.resolve_table_selector()}.`{self._collection.get_record_primary_name()}`"]

    def get_count_column(self) -> str:
        return f"{self.resolve_table_selector()}.`{self._collection.get_record_primary_name()}`"

    def get_search_fields(self) -> List[str]:
        fields = []
        for column in self._source.search_fields:
            if "." in column:
                fields.append(column)
            else:
                fields.append(f"{self.resolve_table_selector()}.`{column}`")
        return fields

    def get_query(self) -> str:
        self.prepare_query()

        for name, value in self._collection.get_foreign_keys().items():
            self.add_where_column_equals(f"{self.resolve_table_selector()}.`{name}`", value)

        return QUERY_TEMPLATE % self.resolve_table_from()

    def get_items_objects(self) -> List[BaseRecord]:
        primary_name = self._collection.get_record_primary_name()
        return [self._collection.get_by_id(row[primary_name]) for row in self.get_items()]

    def get_ids(self) -> List[Any]:
        primary_name = self._collection.get_record_primary_name()
        return [row[primary_name] for row in self.get_items()]


@dataclass
class CollectionSettings:
    """
    Describes the records of one table.

    Attributes:
        table_name: The record table.
        primary_name: The primary key column.
        type_name: Unique name of the record type, e.g. "product".
        default_sort_key: Column to sort by when nothing else is specified.
        default_sort_dir: ASC or DESC.
        searchable_columns: Column name -> human readable label.
        record_class: The record class to instantiate.
        filter_class: The filter criteria class to instantiate.
        parent_collection: Settings of the parent collection, if the records
            belong to a parent record (the parent's primary key is then a
            foreign key column in this table).
        id_table: Table used to generate the primary keys, if any.
        table_alias: Alias used for the table in filter queries.
    """

    table_name: str
    primary_name: str
    type_name: str
    default_sort_key: str
    default_sort_dir: str = ORDER_ASCENDING
    searchable_columns: Dict[str, str] = field(default_factory=dict)
    record_class: Type[BaseRecord] = BaseRecord
    filter_class: Type[CollectionFilterCriteria] = CollectionFilterCriteria
    parent_collection: Optional["CollectionSettings"] = None
    id_table: Optional[str] = None
    table_alias: Optional[str] = None
    collection_label: str = ""
    record_label: str = ""


class RecordCollection:
    """
    Access to the records of one table: loading, creating, deleting and
    filtering. Loaded records are cached per primary key, so the same
    instance is returned for the same ID.
    """

    def __init__(self, helper: "DBHelper", settings: CollectionSettings):
        self._helper = helper
        self._settings = settings
        self._instance_id = generate_id()
        self._records: Dict[str, BaseRecord] = {}
        self._foreign_keys: Dict[str, Any] = {}
        self._parent_record: Optional[BaseRecord] = None
        self._dummy_record: Optional[BaseRecord] = None

        self._logger = logging.getLogger(
            f"{__name__}.{self.__class__.__name__}[{settings.table_name}]"
        )

    # --- Settings ---

    def get_helper(self) -> "DBHelper":
        return self._helper

    def get_settings(self) -> CollectionSettings:
        return self._settings

    def get_instance_id(self) -> str:
        return self._instance_id

    def get_record_table_name(self) -> str:
        return self._settings.table_name

    def get_record_primary_name(self) -> str:
        return self._settings.primary_name

    def get_record_type_name(self) -> str:
        return self._settings.type_name

    def get_record_default_sort_key(self) -> str:
        return self._settings.default_sort_key

    def get_record_default_sort_dir(self) -> str:
        return self._settings.default_sort_dir

    def get_record_searchable_columns(self) -> Dict[str, str]:
        return dict(self._settings.searchable_columns)

    def get_record_searchable_keys(self) -> List[str]:
        return list(self._settings.searchable_columns)

    def get_foreign_keys(self) -> Dict[str, Any]:
        return dict(self._foreign_keys)

    def describe(self) -> Dict[str, Any]:
        return {
            "instance_id": self._instance_id,
            "type_name": self._settings.type_name,
            "table_name": self._settings.table_name,
            "primary_name": self._settings.primary_name,
            "id_table": self._settings.id_table,
            "foreign_keys": self.get_foreign_keys(),
            "parent_record": self._parent_record.get_label() if self._parent_record else None,
            "cached_records": len(self._records),
        }

    # --- Parent binding ---

    def has_parent_collection(self) -> bool:
        return self._settings.parent_collection is not None

    def bind_parent_record(self, record: BaseRecord) -> None:
        """
        Binds the collection to a parent record: all queries are then
        restricted to the records of that parent.
        """
        if self._parent_record is not None:
            raise CollectionAlreadyHasParent(
                "A parent record has already been bound to the collection.",
                f"Collection [{self._settings.type_name}] is bound to [{self._parent_record.get_label()}], "
                f"tried binding [{record.get_label()}].",
            )

        if not self.has_parent_collection():
            raise BindingNotAllowed(
                "The collection does not allow binding a parent record.",
                f"Collection [{self._settings.type_name}] has no parent collection.",
            )

        self._parent_record = record
        self._foreign_keys[record.get_record_primary_name()] = record.get_id()
        self._logger.debug(f"Bound to parent record [{record.get_label()}].")

    def get_parent_record(self) -> Optional[BaseRecord]:
        return self._parent_record

    def get_parent_collection(self) -> "RecordCollection":
        if not self.has_parent_collection():
            raise CollectionHasNoParent(
                "The collection has no parent collection.",
                f"Collection [{self._settings.type_name}].",
            )
        self._check_parent_record()
        return self._parent_record.get_collection()

    def _check_parent_record(self) -> None:
        if self.has_parent_collection() and self._parent_record is None:
            raise NoParentRecordBound(
                "The collection requires a parent record to be bound.",
                f"Collection [{self._settings.type_name}] requires a "
                f"[{self._settings.parent_collection.type_name}] record.",
            )

    # --- Records ---

    def get_by_id(self, record_id: Any) -> BaseRecord:
        """
        Returns the record with the primary key, loading it on first access.

        Raises:
            RecordDoesNotExist: If no such record exists.
            NoParentRecordBound: If the collection needs a parent record.
        """
        key = str(record_id)
        if key in self._records:
            return self._records[key]

        self._check_parent_record()

        record = self._settings.record_class(self, Loaded(record_id))
        self._records[key] = record
        return record

    def get_by_key(self, key: str, value: Any) -> Optional[BaseRecord]:
        """Returns the first record (in default sort order) with the key value."""
        if key == self._settings.primary_name:
            return self.get_by_id(value)

        record_id = self.record_key_value_exists(key, value)
        if record_id is None:
            return None

        return self.get_by_id(record_id)

    def record_key_value_exists(self, key: str, value: Any) -> Any:
        """Returns the ID of the first record with the key value, or None."""
        self._check_parent_record()

        where = self.get_foreign_keys()
        where[key] = value
        primary_name = self._settings.primary_name

        return self._helper.fetch_key(
            primary_name,
            f"SELECT {quote_identifier(primary_name)} FROM {quote_identifier(self._settings.table_name)} "
            f"WHERE {self._helper.build_where_fields_statement(where)} "
            f"ORDER BY {quote_identifier(self._settings.default_sort_key)} {self._settings.default_sort_dir} "
            f"LIMIT 1",
            where,
        )

    def id_exists(self, record_id: Any) -> bool:
        if str(record_id) in self._records:
            return True

        where = self.get_foreign_keys()
        where[self._settings.primary_name] = record_id
        return self._helper.record_exists(self._settings.table_name, where)

    def create_dummy_record(self) -> BaseRecord:
        """A template record, to access the record metadata without a row."""
        self._check_id_table()

        if self._dummy_record is None:
            self._dummy_record = self._settings.record_class(self, Template())
        return self._dummy_record

    def _check_id_table(self) -> None:
        if self._settings.id_table and self._settings.id_table == self._settings.table_name:
            raise IdTableSameAsRecordTable(
                "The ID table must not be the record table.",
                f"Collection [{self._settings.type_name}] uses [{self._settings.table_name}] for both.",
            )

    def create_new_record(self, data: Optional[Dict[str, Any]] = None) -> BaseRecord:
        """
        Inserts a new record and returns it.

        Raises:
            TransactionRequired: If no transaction has been started.
        """
        self._helper.require_transaction(f"Create a new [{self._settings.type_name}] record")
        self._check_parent_record()
        self._check_id_table()

        data = dict(data or {})
        data.update(self._foreign_keys)
        primary_name = self._settings.primary_name

        if self._settings.id_table:
            record_id = self._helper.insert_dynamic(self._settings.id_table, {primary_name: None})
            data[primary_name] = record_id
            self._helper.insert_dynamic(self._settings.table_name, data)
        else:
            record_id = self._helper.insert_dynamic(self._settings.table_name, data)

        record = self.get_by_id(record_id)
        record.on_created()

        self._logger.info(f"Created the record [{record.get_label()}].")
        return record

    def delete_record(self, record: BaseRecord) -> None:
        record_id = record.get_id()
        self._records.pop(str(record_id), None)

        where = self.get_foreign_keys()
        where[self._settings.primary_name] = record_id
        self._helper.delete_records(self._settings.table_name, where)

        self._logger.info(f"Deleted the record [{record.get_label()}].")

    def reset_collection(self) -> None:
        """Clears the record cache."""
        self._records = {}
        self._dummy_record = None

    # --- Filtering ---

    def get_filter_criteria(self) -> CollectionFilterCriteria:
        return self._settings.filter_class(self)

    def get_all(self) -> List[BaseRecord]:
        return self.get_filter_criteria().get_items_objects()

    def count_records(self) -> int:
        return self.get_filter_criteria().count_items()
