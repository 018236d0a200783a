"""
Column-type and table-kind classification.

The backend reports column types and table kinds as integer codes.  This
module holds the fixed code table and the aggregation / operator menus
offered for each kind of column.
"""
from __future__ import annotations

# ── Table kinds ──────────────────────────────────────────

LOG_TABLE = 0
TAG_TABLE = 6
UNKNOWN_TABLE = -1

# ── Column type codes ────────────────────────────────────

VARCHAR = 5
DATETIME = 6

COLUMN_TYPES: dict[int, str] = {
    4: "SHORT",
    5: "VARCHAR",
    6: "DATETIME",
    8: "INTEGER",
    12: "LONG",
    16: "FLOAT",
    20: "DOUBLE",
    32: "IPV4",
    36: "IPV6",
    49: "TEXT",
    53: "CLOB",
    57: "BLOB",
    97: "BINARY",
    104: "USHORT",
    108: "UINTEGER",
    112: "ULONG",
}

_NUMERIC_NAMES = frozenset(
    {"SHORT", "INTEGER", "LONG", "FLOAT", "DOUBLE", "USHORT", "UINTEGER", "ULONG"}
)

# ── Editor menus ─────────────────────────────────────────

TAG_AGGREGATIONS: list[str] = ["none", "sum", "count", "min", "max", "avg", "sumsq"]

LOG_AGGREGATIONS: list[str] = [
    "none", "min", "max", "count", "sum", "avg", "sumsq",
    "first", "last", "stddev", "stddev_pop", "variance", "var_pop",
]

STRING_AGGREGATIONS: list[str] = ["none", "count", "count(*)"]

FILTER_OPERATORS: list[str] = ["=", "<>", ">", ">=", "<", "<=", "in"]


def type_name(code: int) -> str | None:
    """Symbolic name for a column type code, or None when unknown."""
    return COLUMN_TYPES.get(code)


def is_numeric(code: int) -> bool:
    """True when *code* names one of the integer or floating-point types."""
    return type_name(code) in _NUMERIC_NAMES


def is_tag_table(table_type: int) -> bool:
    """Tag tables (code 6) support rollups; log tables and anything else do not."""
    return table_type == TAG_TABLE


def aggregations_for(column_type: int | None = None, rollup: bool = False) -> list[str]:
    """Aggregation choices for a value column of *column_type*.

    Numeric columns get the short rollup menu while rollups are on and the
    full menu otherwise, whatever the table kind.
    """
    if column_type is not None and not is_numeric(column_type):
        return list(STRING_AGGREGATIONS)
    if rollup:
        return list(TAG_AGGREGATIONS)
    return list(LOG_AGGREGATIONS)
