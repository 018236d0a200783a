"""
Unit tests — column type codes, table kinds and aggregation menus.
"""
import pytest

from neo_datasource.catalog.column_types import (
    COLUMN_TYPES,
    LOG_AGGREGATIONS,
    STRING_AGGREGATIONS,
    TAG_AGGREGATIONS,
    aggregations_for,
    is_numeric,
    is_tag_table,
    type_name,
)
from neo_datasource.compiler.spec import QuerySpec

NUMERIC_CODES = {4, 8, 12, 16, 20, 104, 108, 112}


@pytest.mark.parametrize("code", sorted(COLUMN_TYPES))
def test_numeric_exactly_for_number_codes(code):
    assert is_numeric(code) is (code in NUMERIC_CODES)


@pytest.mark.parametrize("code", [-1, 0, 7, 999])
def test_unknown_codes_are_not_numeric(code):
    assert is_numeric(code) is False


def test_type_name_lookup():
    assert type_name(5) == "VARCHAR"
    assert type_name(112) == "ULONG"
    assert type_name(3) is None


def test_tag_table():
    assert is_tag_table(6) is True
    assert is_tag_table(0) is False
    assert is_tag_table(-1) is False
    assert is_tag_table(1) is False


def test_string_column_gets_string_menu():
    assert aggregations_for(5, rollup=True) == STRING_AGGREGATIONS
    assert "count(*)" in aggregations_for(5)


def test_rollup_menu():
    assert aggregations_for(20, rollup=True) == TAG_AGGREGATIONS
    assert "first" not in aggregations_for(20, rollup=True)


def test_full_menu_without_rollup():
    assert aggregations_for(20) == LOG_AGGREGATIONS
    assert "stddev" in aggregations_for()


def test_tag_table_with_rollup_off_gets_full_menu():
    spec = QuerySpec(table_name="TAG", table_type=6, rollup_requested=False)
    menu = aggregations_for(20, rollup=spec.rollup_requested)
    assert {"first", "last", "stddev"} <= set(menu)
