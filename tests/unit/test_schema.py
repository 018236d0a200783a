"""
Unit tests — schema introspection and editor defaults.
"""
import httpx
import pytest

from neo_datasource.catalog.cache import get_catalog_cache
from neo_datasource.catalog.schema import (
    ColumnInfo,
    TableInfo,
    columns_sql,
    default_query_for_table,
    fetch_columns,
    fetch_tables,
    parse_columns,
    tables_sql,
)
from neo_datasource.compiler.spec import FilterClause, QuerySpec
from neo_datasource.db.client import NeoClient, ResultSet

TAG_COLUMNS = [
    ColumnInfo("NAME", 5, 80),
    ColumnInfo("TIME", 6, 8),
    ColumnInfo("VALUE", 20, 8),
]


@pytest.fixture(autouse=True)
def _fresh_cache():
    get_catalog_cache().clear()
    yield
    get_catalog_cache().clear()


# ── SQL & parsing ────────────────────────────────────────

def test_columns_sql_escapes_and_uppercases():
    sql = columns_sql("o'tag")
    assert "NAME = 'O''TAG'" in sql
    assert sql.startswith("SELECT NAME, TYPE, LENGTH FROM M$SYS_COLUMNS")


def test_parse_columns_without_length():
    cols = parse_columns(ResultSet(columns=["NAME", "TYPE"], rows=[["V", 20]]))
    assert cols == [ColumnInfo("V", 20, 0)]
    assert cols[0].is_numeric


def test_fetch_tables_is_cached():
    calls = []

    def handler(request):
        calls.append(request.url.params["q"])
        return httpx.Response(200, json={"success": True, "data": {
            "columns": ["NAME", "TYPE"], "types": ["string", "int32"],
            "rows": [["TAG", 6], ["LOGS", 0]],
        }})

    client = NeoClient(address="http://neo.test", transport=httpx.MockTransport(handler))
    first = fetch_tables(client)
    second = fetch_tables(client)
    assert first == second == [TableInfo("TAG", 6), TableInfo("LOGS", 0)]
    assert calls == [tables_sql()]
    assert first[0].is_tag_table


def test_fetch_columns():
    def handler(request):
        return httpx.Response(200, json={"success": True, "data": {
            "columns": ["NAME", "TYPE", "LENGTH"], "types": ["string", "int32", "int32"],
            "rows": [["NAME", 5, 80], ["TIME", 6, 8], ["VALUE", 20, 8]],
        }})

    client = NeoClient(address="http://neo.test", transport=httpx.MockTransport(handler))
    assert fetch_columns(client, "TAG") == TAG_COLUMNS


# ── Editor defaults ──────────────────────────────────────

def test_defaults_for_tag_table():
    spec = default_query_for_table(TableInfo("TAG", 6), TAG_COLUMNS)
    assert spec.table_name == "TAG"
    assert spec.value_field == "VALUE"
    assert spec.time_field == "TIME"
    assert spec.aggregation == "avg"
    assert spec.rollup_requested is True
    assert spec.filters[0].column_key == "NAME"
    assert spec.filters[0].value == ""


def test_defaults_for_log_table():
    columns = [ColumnInfo("_ARRIVAL_TIME", 6), ColumnInfo("MSG", 5), ColumnInfo("LEVEL", 8)]
    spec = default_query_for_table(TableInfo("LOGS", 0), columns)
    assert spec.rollup_requested is False
    assert spec.time_field == "_ARRIVAL_TIME"
    assert spec.value_field == "LEVEL"
    assert spec.filters == [FilterClause()]


def test_defaults_keep_choices_on_same_table():
    previous = QuerySpec(
        table_name="TAG", value_field="VALUE", time_field="TIME", aggregation="max",
        filters=[FilterClause(column_key="NAME", value="s1")], title="t",
    )
    spec = default_query_for_table(TableInfo("TAG", 6), TAG_COLUMNS, previous)
    assert spec.aggregation == "max"
    assert spec.filters[0].value == "s1"
    assert spec.title == "t"


def test_defaults_reset_choices_on_table_change():
    previous = QuerySpec(table_name="OTHER", aggregation="max")
    spec = default_query_for_table(TableInfo("TAG", 6), TAG_COLUMNS, previous)
    assert spec.aggregation == "avg"
