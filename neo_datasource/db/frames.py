"""
Conversion of column-oriented result sets into pandas frames.
"""
from __future__ import annotations

import ipaddress
from typing import Any

import pandas as pd

from neo_datasource.db.client import ResultSet
from neo_datasource.core.logging import get_logger

logger = get_logger(__name__)

# Backend type name -> pandas dtype.
_DTYPES: dict[str, str] = {
    "int16": "Int16",
    "int32": "Int32",
    "int64": "Int64",
    "float": "float32",
    "double": "float64",
    "string": "string",
}


def _ip(value: Any) -> Any:
    if value is None:
        return None
    try:
        return ipaddress.ip_address(value)
    except ValueError:
        return value


def _series(name: str, type_name: str, values: list[Any]) -> pd.Series:
    if not values:
        return pd.Series([], dtype="float64", name=name)

    if type_name in _DTYPES:
        return pd.Series(values, dtype=_DTYPES[type_name], name=name)
    if type_name == "datetime":
        return pd.Series(pd.to_datetime(values, unit="ns", utc=True), name=name)
    if type_name in ("ipv4", "ipv6"):
        return pd.Series([_ip(v) for v in values], dtype="object", name=name)
    if type_name == "binary":
        return pd.Series(values, dtype="object", name=name)

    logger.warning("Unknown column type %r for %s -- keeping raw values", type_name, name)
    return pd.Series(values, dtype="object", name=name)


def result_to_frame(result: ResultSet) -> pd.DataFrame:
    """Build one frame with a typed column per result column."""
    columns: dict[str, pd.Series] = {}
    for idx, name in enumerate(result.columns):
        type_name = result.types[idx] if idx < len(result.types) else ""
        values = [row[idx] for row in result.rows]
        columns[name] = _series(name, type_name, values)
    return pd.DataFrame(columns)


def frame_to_fields(frame: pd.DataFrame) -> list[dict[str, Any]]:
    """JSON-friendly view of *frame*: timestamps become epoch milliseconds."""
    fields: list[dict[str, Any]] = []
    for name in frame.columns:
        series = frame[name]
        if pd.api.types.is_datetime64_any_dtype(series):
            values = [None if pd.isna(ts) else ts.value // 1_000_000 for ts in series]
            kind = "time"
        else:
            values = [None if _is_missing(v) else _plain(v) for v in series.tolist()]
            kind = "number" if pd.api.types.is_numeric_dtype(series) else "string"
        fields.append({"name": str(name), "type": kind, "values": values})
    return fields


def _is_missing(value: Any) -> bool:
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _plain(value: Any) -> Any:
    if isinstance(value, (ipaddress.IPv4Address, ipaddress.IPv6Address)):
        return str(value)
    if isinstance(value, bytes):
        return value.hex()
    if hasattr(value, "item"):
        return value.item()
    return value
