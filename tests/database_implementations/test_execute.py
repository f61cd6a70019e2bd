# tests/database_implementations/test_execute.py
import io
from datetime import datetime

import pytest

from dbhelper import OperationType
from dbhelper.base.exceptions import (ExecutingQueryFailed, FetchFailed,
                                      InsertFailed, UnknownConfigOption)
from tests.conftest import PRODUCT_LABELS


def test_fetch_all_and_one(helper, products):
    rows = helper.fetch_all("SELECT * FROM `products` ORDER BY `product_id`")
    assert [row["label"] for row in rows] == PRODUCT_LABELS

    row = helper.fetch_one(
        "SELECT `label` FROM `products` WHERE `product_id`=:id",
        {"id": products["Product two"]},
    )
    assert row == {"label": "Product two"}

    assert helper.fetch_one("SELECT * FROM `products` WHERE `product_id`=:id", {"id": 9999}) is None


def test_fetch_key_and_count(helper, products):
    assert helper.fetch_key(
        "label",
        "SELECT `label` FROM `products` WHERE `product_id`=:id",
        {":id": products["Product one"]},
    ) == "Product one"

    assert helper.fetch_count("SELECT COUNT(*) AS `count` FROM `products`") == 5
    assert sorted(helper.fetch_all_key("label", "SELECT `label` FROM `products`")) == sorted(PRODUCT_LABELS)


def test_fetch_data(helper, products):
    row = helper.fetch_data("products", {"label": "Product foo"}, ["product_id", "price"])
    assert row == {"product_id": products["Product foo"], "price": 400}


def test_insert_returns_new_id(helper):
    first = helper.insert("INSERT INTO `products` (`label`) VALUES (:label)", {"label": "A"})
    second = helper.insert("INSERT INTO `products` (`label`) VALUES (:label)", {"label": "B"})
    assert int(second) == int(first) + 1


def test_insert_failure(helper):
    with pytest.raises(InsertFailed) as excinfo:
        helper.insert("INSERT INTO `unknown_table` (`label`) VALUES (:label)", {"label": "A"})
    assert "unknown_table" in excinfo.value.details


def test_execute_failure_details(helper, products):
    sql = "UPDATE `products` SET `label`=:label WHERE `product_id`=:product_id"

    with pytest.raises(ExecutingQueryFailed) as excinfo:
        helper.execute(OperationType.UPDATE, sql, {"label": "Renamed", "unused": 5})

    details = excinfo.value.details
    assert "Placeholder not specified in values list" in details
    assert "No matching placeholder in query" in details
    assert "SET `label`='Renamed'" in details


def test_execute_without_exception(helper):
    assert helper.execute(OperationType.SELECT, "SELECT * FROM `no_such_table`", exception_on_error=False) is False
    assert helper.get_error_message() != ""
    assert helper.get_query_count() == 0


def test_datetime_values_are_normalized(helper):
    product_id = helper.insert_dynamic(
        "products",
        {"label": "Dated", "date_added": datetime(2024, 3, 1, 8, 15, 0)},
    )
    assert helper.record_exists(
        "products",
        {"product_id": product_id, "date_added": "2024-03-01 08:15:00"},
    )


def test_query_counter(helper, products):
    count = helper.get_query_count()
    helper.fetch_all("SELECT * FROM `products`")
    helper.update("UPDATE `products` SET `price`=1 WHERE `product_id`=:id", {"id": products["Product one"]})
    assert helper.get_query_count() == count + 2


def test_query_tracking(helper, products):
    helper.enable_query_tracking()

    helper.fetch_all("SELECT * FROM `products`")
    helper.update("UPDATE `products` SET `price`=:price", {"price": 5})
    helper.delete("DELETE FROM `products` WHERE `label`=:label", {"label": "Product one"})

    queries = helper.get_queries()
    assert len(queries) == 3
    assert helper.count_queries() == 3
    assert helper.count_queries(OperationType.SELECT) == 1
    assert len(helper.get_write_queries()) == 2
    assert len(helper.get_select_queries()) == 1
    assert all(query.duration >= 0 for query in queries)
    assert queries[1].get_formatted_sql() == "UPDATE `products` SET `price`=5"


def test_tracking_disabled_by_default(helper, products):
    helper.fetch_all("SELECT * FROM `products`")
    assert helper.get_queries() == []


def test_query_logging(helper, products):
    messages = []
    helper.set_log_callback(messages.append)
    helper.fetch_all("SELECT * FROM `products` WHERE `label`=:label", {"label": "Product one"})
    assert messages == []

    helper.enable_query_logging()
    helper.fetch_all("SELECT * FROM `products` WHERE `label`=:label", {"label": "Product one"})
    assert messages == ["DBHelper | SELECT * FROM `products` WHERE `label`='Product one'"]


def test_debug_output(helper, products):
    stream = io.StringIO()
    helper.set_debug_stream(stream)
    helper.enable_debugging()

    helper.fetch_all("SELECT * FROM `products`")
    helper.fetch_one("SELECT * FROM `products` WHERE `product_id`=:id", {"id": 9999})
    helper.update("UPDATE `products` SET `price`=1 WHERE `product_id`=:id", {"id": 9999})

    output = stream.getvalue()
    assert "Result: 5 entries" in output
    assert "Result: NULL" in output
    assert "Result: true" in output
    assert "WHERE `product_id`=9999" in output


def test_set_option(helper):
    helper.set_option("debugging", True)
    assert helper.get_option("debugging") is True
    assert helper.is_debugging()

    with pytest.raises(UnknownConfigOption):
        helper.set_option("verbose", True)


def test_affected_rows(helper, products):
    helper.update("UPDATE `products` SET `price`=:price WHERE `in_stock`='yes'", {"price": 1})
    assert helper.count_affected_rows() == 3


def test_get_sql(helper):
    helper.fetch_all("SELECT * FROM `products` WHERE `label`=:label", {"label": "x"})
    assert helper.get_sql() == "SELECT * FROM `products` WHERE `label`='x'"


def test_fetch_failure(sqlite_helper, monkeypatch):
    import sqlite3

    from dbhelper.db_implementations.sqlite_driver import SQLiteStatement

    def failing_fetch(self):
        raise sqlite3.OperationalError("result set lost")

    monkeypatch.setattr(SQLiteStatement, "fetch_all", failing_fetch)

    with pytest.raises(FetchFailed) as excinfo:
        sqlite_helper.fetch_all("SELECT * FROM `products`")
    assert "result set lost" in str(excinfo.value)


def test_previous_statement_is_closed(sqlite_helper, monkeypatch):
    from dbhelper.db_implementations.sqlite_driver import SQLiteStatement

    closed = []
    original_close = SQLiteStatement.close

    def recording_close(self):
        closed.append(self.sql)
        original_close(self)

    monkeypatch.setattr(SQLiteStatement, "close", recording_close)

    first = "SELECT * FROM `products`"
    second = "SELECT COUNT(*) AS `count` FROM `products`"

    sqlite_helper.fetch_all(first)
    assert closed == []

    sqlite_helper.fetch_one(second)
    assert closed == [first]

    sqlite_helper.reset()
    assert closed == [first, second]
