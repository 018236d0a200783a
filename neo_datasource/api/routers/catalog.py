"""
GET /tables, GET /tables/{name}/columns, GET /column-types, GET /aggregations
-- metadata endpoints backing the panel editor.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from neo_datasource.catalog.cache import get_catalog_cache
from neo_datasource.catalog.column_types import (
    COLUMN_TYPES,
    FILTER_OPERATORS,
    aggregations_for,
    is_numeric,
)
from neo_datasource.catalog.schema import default_query_for_table, fetch_columns, fetch_tables
from neo_datasource.core.logging import get_logger
from neo_datasource.db.client import NeoClient, NeoQueryError, get_client

logger = get_logger(__name__)
router = APIRouter()


class TableItem(BaseModel):
    name: str
    type: int
    is_tag_table: bool


class ColumnItem(BaseModel):
    name: str
    type: int
    length: int
    type_name: str | None
    is_numeric: bool


class ColumnTypeItem(BaseModel):
    code: int
    name: str
    is_numeric: bool


class CacheStatsResponse(BaseModel):
    size: int
    hits: int
    misses: int


@router.get("/tables", response_model=list[TableItem])
def list_tables(client: NeoClient = Depends(get_client)) -> list[TableItem]:
    try:
        tables = fetch_tables(client)
    except NeoQueryError as exc:
        logger.warning("Listing tables failed: %s", exc)
        raise HTTPException(status_code=502, detail=str(exc))
    return [TableItem(name=t.name, type=t.type, is_tag_table=t.is_tag_table) for t in tables]


@router.get("/tables/{name}/columns", response_model=list[ColumnItem])
def list_columns(name: str, client: NeoClient = Depends(get_client)) -> list[ColumnItem]:
    try:
        columns = fetch_columns(client, name)
    except NeoQueryError as exc:
        logger.warning("Listing columns of %s failed: %s", name, exc)
        raise HTTPException(status_code=502, detail=str(exc))
    return [
        ColumnItem(
            name=c.name,
            type=c.type,
            length=c.length,
            type_name=COLUMN_TYPES.get(c.type),
            is_numeric=c.is_numeric,
        )
        for c in columns
    ]


@router.get("/tables/{name}/defaults")
def table_defaults(name: str, client: NeoClient = Depends(get_client)) -> dict:
    """Pre-filled target for a freshly picked table."""
    try:
        tables = fetch_tables(client)
        table = next((t for t in tables if t.name.upper() == name.upper()), None)
        if table is None:
            raise HTTPException(status_code=404, detail=f"Unknown table '{name}'")
        columns = fetch_columns(client, table.name)
    except NeoQueryError as exc:
        logger.warning("Building defaults for %s failed: %s", name, exc)
        raise HTTPException(status_code=502, detail=str(exc))
    return default_query_for_table(table, columns).model_dump(by_alias=True, mode="json")


@router.get("/column-types", response_model=list[ColumnTypeItem])
def list_column_types() -> list[ColumnTypeItem]:
    return [
        ColumnTypeItem(code=code, name=name, is_numeric=is_numeric(code))
        for code, name in COLUMN_TYPES.items()
    ]


@router.get("/aggregations")
def list_aggregations(column_type: int | None = None, rollup: bool = False) -> dict:
    """Aggregation and operator menus for a value column."""
    return {
        "aggregations": aggregations_for(column_type, rollup),
        "operators": FILTER_OPERATORS,
    }


@router.get("/catalog/cache/stats", response_model=CacheStatsResponse)
def cache_stats_endpoint():
    cache = get_catalog_cache()
    return CacheStatsResponse(size=len(cache), hits=cache.hits, misses=cache.misses)


@router.post("/catalog/cache/clear")
def cache_clear_endpoint():
    removed = get_catalog_cache().clear()
    return {"cleared": removed}
