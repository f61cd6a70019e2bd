# tests/database_implementations/test_dynamic_queries.py
import pytest

from dbhelper import DBHelper
from dbhelper.base.exceptions import DBHelperException


def count_products(helper):
    return helper.fetch_count("SELECT COUNT(*) AS `count` FROM `products`")


def test_build_where_fields_statement():
    helper = DBHelper()
    assert helper.build_where_fields_statement({}) == "1"
    assert helper.build_where_fields_statement(None) == "1"
    assert helper.build_where_fields_statement({"a": 1, "b": 2}) == "`a`=:a AND `b`=:b"


def test_build_set_statement():
    helper = DBHelper()
    assert helper.build_set_statement({"label": "x", "price": 1}) == "`label`=:label, `price`=:price"


def test_get_limit_sql():
    helper = DBHelper()
    assert helper.get_limit_sql() == ""
    assert helper.get_limit_sql(10, 5) == "LIMIT 10 OFFSET 5"


def test_insert_dynamic_with_null(helper):
    product_id = helper.insert_dynamic("products", {"label": "Nulled", "date_added": None})
    row = helper.fetch_data("products", {"product_id": product_id})
    assert row["label"] == "Nulled"
    assert row["date_added"] is None
    assert row["in_stock"] == "yes"


def test_insert_dynamic_without_data(helper):
    product_id = helper.insert_dynamic("products")
    assert helper.record_exists("products", {"product_id": product_id})


def test_update_dynamic(helper, products):
    product_id = products["Product one"]
    helper.update_dynamic("products", {"product_id": product_id, "price": 999}, ["product_id"])

    row = helper.fetch_data("products", {"product_id": product_id})
    assert row["price"] == 999
    assert row["label"] == "Product one"


def test_update_dynamic_missing_primary(helper):
    with pytest.raises(DBHelperException):
        helper.update_dynamic("products", {"price": 1}, ["product_id"])


def test_insert_or_update(helper, products):
    product_id = products["Product two"]

    result = helper.insert_or_update(
        "products", {"product_id": product_id, "label": "Updated two"}, ["product_id"]
    )
    assert result == product_id
    assert count_products(helper) == 5
    assert helper.fetch_data("products", {"product_id": product_id})["label"] == "Updated two"

    result = helper.insert_or_update(
        "products", {"product_id": 500, "label": "Product 500"}, ["product_id"]
    )
    assert result == 500
    assert count_products(helper) == 6
    assert helper.record_exists("products", {"product_id": 500, "label": "Product 500"})


def test_delete_records(helper, products):
    helper.delete_records("products", {"in_stock": "no"})
    assert count_products(helper) == 3


def test_record_and_key_exists(helper, products):
    assert helper.record_exists("products", {"label": "Product foo"})
    assert not helper.record_exists("products", {"label": "Product bar"})
    assert helper.key_exists("products", {"label": "Product foo"}, "date_added")

    helper.insert_dynamic("products", {"label": "Undated", "date_added": None})
    assert not helper.key_exists("products", {"label": "Undated"}, "date_added")


def test_column_exists_is_cached(helper):
    assert helper.column_exists("products", "label") is True
    count = helper.get_query_count()

    assert helper.column_exists("products", "label") is True
    assert helper.get_query_count() == count

    assert helper.column_exists("products", "colour") is False
    assert helper.get_query_count() == count + 1


def test_table_names(helper):
    names = helper.fetch_table_names()
    assert {"products", "product_variants", "product_ids"} <= set(names)
    assert helper.table_exists("products")
    assert not helper.table_exists("orders")


def test_truncate(helper, products):
    helper.truncate("products")
    assert count_products(helper) == 0


def test_drop_tables(helper, products):
    helper.drop_tables()
    assert helper.fetch_table_names() == []
