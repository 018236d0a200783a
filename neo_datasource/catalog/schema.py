"""
Schema introspection against the backend's system catalog, plus the
defaults the panel editor applies when a table is picked.
"""
from __future__ import annotations

from dataclasses import dataclass

from neo_datasource.catalog.cache import get_catalog_cache
from neo_datasource.catalog.column_types import DATETIME, VARCHAR, is_numeric, is_tag_table
from neo_datasource.compiler.spec import FilterClause, QuerySpec, ValueMode
from neo_datasource.core.logging import get_logger
from neo_datasource.db.client import NeoClient, ResultSet

logger = get_logger(__name__)


@dataclass(frozen=True)
class TableInfo:
    name: str
    type: int

    @property
    def is_tag_table(self) -> bool:
        return is_tag_table(self.type)


@dataclass(frozen=True)
class ColumnInfo:
    name: str
    type: int
    length: int = 0

    @property
    def is_numeric(self) -> bool:
        return is_numeric(self.type)


# ── Catalog SQL ──────────────────────────────────────────

def tables_sql() -> str:
    return "SELECT NAME, TYPE FROM M$SYS_TABLES ORDER BY NAME"


def columns_sql(table: str) -> str:
    name = table.upper().replace("'", "''")
    return (
        "SELECT NAME, TYPE, LENGTH FROM M$SYS_COLUMNS "
        f"WHERE TABLE_ID = (SELECT ID FROM M$SYS_TABLES WHERE NAME = '{name}') "
        "ORDER BY ID"
    )


def parse_tables(result: ResultSet) -> list[TableInfo]:
    if not result.rows:
        return []
    names = result.column("name")
    types = result.column("type")
    return [TableInfo(name=str(n), type=int(t)) for n, t in zip(names, types)]


def parse_columns(result: ResultSet) -> list[ColumnInfo]:
    if not result.rows:
        return []
    names = result.column("name")
    types = result.column("type")
    lengths = result.column("length") if "length" in (c.lower() for c in result.columns) else [0] * len(names)
    return [
        ColumnInfo(name=str(n), type=int(t), length=int(l or 0))
        for n, t, l in zip(names, types, lengths)
    ]


# ── Fetching (cached) ────────────────────────────────────

def _cached_query(client: NeoClient, sql: str) -> ResultSet:
    cache = get_catalog_cache()
    hit = cache.get(client.address, sql)
    if hit is not None:
        return hit
    result = client.query(sql)
    cache.put(client.address, sql, result)
    return result


def fetch_tables(client: NeoClient) -> list[TableInfo]:
    return parse_tables(_cached_query(client, tables_sql()))


def fetch_columns(client: NeoClient, table: str) -> list[ColumnInfo]:
    return parse_columns(_cached_query(client, columns_sql(table)))


# ── Editor defaults ──────────────────────────────────────

def default_query_for_table(
    table: TableInfo,
    columns: list[ColumnInfo],
    previous: QuerySpec | None = None,
) -> QuerySpec:
    """Pre-fill a target for *table*.

    Choices made on the same table in *previous* are kept; otherwise the
    first numeric column becomes the value, the first DATETIME column the
    time, and the aggregation defaults to avg.  Tag tables get rollups on
    and a first filter keyed on their first VARCHAR column.
    """
    same_table = previous is not None and previous.table_name == table.name
    known = {c.name for c in columns}

    value_field = ""
    if same_table and previous.value_field in known:
        value_field = previous.value_field
    else:
        numeric = next((c for c in columns if c.is_numeric), None)
        if numeric is not None:
            value_field = numeric.name

    time_field = ""
    if same_table and previous.time_field:
        time_field = previous.time_field
    else:
        dt = next((c for c in columns if c.type == DATETIME), None)
        if dt is not None:
            time_field = dt.name

    aggregation = previous.aggregation if same_table and previous.aggregation else "avg"

    filters: list[FilterClause] = list(previous.filters) if previous is not None else []
    has_user_filter = bool(filters) and (filters[0].value != "" or filters[0].raw_condition != "")
    if not has_user_filter:
        filters = [FilterClause()]
        if table.is_tag_table:
            varchar = next((c for c in columns if c.type == VARCHAR), None)
            if varchar is not None:
                filters = [FilterClause(column_key=varchar.name, column_type_code=str(VARCHAR))]

    logger.debug("Defaults for %s: value=%s time=%s", table.name, value_field, time_field)
    return QuerySpec(
        ref_id=previous.ref_id if previous is not None else "A",
        table_name=table.name,
        table_type=table.type,
        value_field=value_field,
        value_mode=ValueMode.AGGREGATED,
        aggregation=aggregation,
        time_field=time_field,
        rollup_requested=table.is_tag_table,
        title=previous.title if previous is not None else "",
        filters=filters,
    )
