# tests/conftest.py
import logging
import os
import uuid
from typing import Dict

import pymysql
import pytest

from dbhelper import BaseRecord, CollectionSettings, DBHelper
from tests import create_mysql_tables, create_sqlite_tables

# Silence verbose loggers
logging.getLogger("pymysql").setLevel(logging.WARNING)


# --- Constants ---

# MySQL connection details
MYSQL_HOST = os.getenv("TEST_MYSQL_HOST", "localhost")
MYSQL_PORT = int(os.getenv("TEST_MYSQL_PORT", "3306"))
MYSQL_USER = os.getenv("TEST_MYSQL_USER", "testuser")
MYSQL_PASSWORD = os.getenv("TEST_MYSQL_PASSWORD", "password")

# --- List of backend keys ---
BACKENDS = ["sqlite", "mysql"]

PRODUCT_LABELS = [
    "Product one",
    "Product two",
    "Product three",
    "Product foo",
    "Product foo bar",
]


# --- Availability Checks ---
def is_mysql_available():
    """Check if a MySQL server is reachable with the test credentials."""
    try:
        conn = pymysql.connect(
            host=MYSQL_HOST,
            port=MYSQL_PORT,
            user=MYSQL_USER,
            password=MYSQL_PASSWORD,
            connect_timeout=2,
        )
    except pymysql.MySQLError as e:
        logging.warning(
            f"MySQL not found or not responsive at {MYSQL_HOST}:{MYSQL_PORT}: {e}. "
            "Skipping MySQL tests."
        )
        return False

    conn.close()
    logging.info(f"MySQL found and responsive at {MYSQL_HOST}:{MYSQL_PORT}")
    return True


AVAILABLE_BACKENDS = ["sqlite"]  # SQLite (in-memory) is always available
if is_mysql_available():
    AVAILABLE_BACKENDS.append("mysql")


# --- Test record types ---


class ProductRecord(BaseRecord):
    """Records the hook calls, to check them in the tests."""

    def init(self):
        self.modified_events = []
        self.created_calls = 0
        self.register_record_key("label", "Label", True)
        self.register_record_key("price", "Price", False)

    def record_registered_key_modified(self, name, label, is_structural, old_value, new_value):
        self.modified_events.append((name, label, is_structural, old_value, new_value))

    def on_created(self):
        self.created_calls += 1


PRODUCT_SETTINGS = CollectionSettings(
    table_name="products",
    primary_name="product_id",
    type_name="product",
    default_sort_key="label",
    searchable_columns={"label": "Label"},
    record_class=ProductRecord,
    collection_label="Products",
    record_label="Product",
)

VARIANT_SETTINGS = CollectionSettings(
    table_name="product_variants",
    primary_name="variant_id",
    type_name="product_variant",
    default_sort_key="label",
    searchable_columns={"label": "Label"},
    parent_collection=PRODUCT_SETTINGS,
    table_alias="variants",
)

ID_TABLE_SETTINGS = CollectionSettings(
    table_name="products",
    primary_name="product_id",
    type_name="product_with_id_table",
    default_sort_key="label",
    id_table="product_ids",
)


# --- Fixtures ---


@pytest.fixture
def sqlite_helper():
    """Helper connected to an in-memory SQLite database with the test tables."""
    helper = DBHelper()
    descriptor = helper.add_connection("tests", ":memory:", driver="sqlite")
    create_sqlite_tables.create_tables(descriptor.connect())
    yield helper
    helper.reset()


@pytest.fixture
def mysql_helper():
    """
    Helper connected to a temporary MySQL database with the test tables.
    """
    if "mysql" not in AVAILABLE_BACKENDS:
        pytest.skip("MySQL not available")

    temp_db_name = f"test_db_{uuid.uuid4().hex}"
    admin = pymysql.connect(
        host=MYSQL_HOST,
        port=MYSQL_PORT,
        user=MYSQL_USER,
        password=MYSQL_PASSWORD,
        autocommit=True,
    )

    try:
        with admin.cursor() as cursor:
            cursor.execute(f"CREATE DATABASE `{temp_db_name}`")

        helper = DBHelper()
        descriptor = helper.add_connection(
            "tests",
            temp_db_name,
            host=MYSQL_HOST,
            port=MYSQL_PORT,
            username=MYSQL_USER,
            password=MYSQL_PASSWORD,
            driver="mysql",
        )
        create_mysql_tables.create_tables(descriptor.connect())

        yield helper

        helper.reset()

        with admin.cursor() as cursor:
            cursor.execute(f"DROP DATABASE IF EXISTS `{temp_db_name}`")
    finally:
        admin.close()


@pytest.fixture(params=AVAILABLE_BACKENDS)
def helper(request):
    """Parametrized fixture providing a helper for each available backend."""
    yield request.getfixturevalue(f"{request.param}_helper")


@pytest.fixture
def products(helper) -> Dict[str, int]:
    """Inserts the test products, returns label -> product ID."""
    ids = {}
    for index, label in enumerate(PRODUCT_LABELS):
        ids[label] = helper.insert_dynamic(
            "products",
            {
                "label": label,
                "price": (index + 1) * 100,
                "date_added": "2024-01-15 10:30:00",
                "in_stock": "yes" if index % 2 == 0 else "no",
            },
        )
    return ids


@pytest.fixture
def product_collection(helper):
    return helper.create_collection(PRODUCT_SETTINGS)
