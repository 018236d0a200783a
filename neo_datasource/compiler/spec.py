"""
QuerySpec -- the structured panel query that the compiler turns into SQL.

Field names are snake_case in Python; the camelCase names used by the
panel editor's JSON (``tableName``, ``aggrFunc``, ``isStr`` ...) are
accepted as aliases so a target can be validated straight off the wire.
"""
from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from neo_datasource.core.utils import millis_to_nanos


class ValueMode(str, Enum):
    AGGREGATED = "aggregated"
    LITERAL = "literal"


# Editor wire values for value_mode.
_VALUE_MODE_ALIASES = {"select": ValueMode.AGGREGATED, "input": ValueMode.LITERAL}


class FilterClause(BaseModel):
    """One row of the filter editor."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    column_key: str = Field("none", alias="key", description="Column name, 'none' when unset")
    column_type_code: str = Field("", alias="type", description="String-encoded column type code")
    value: str = Field("", description="Comparison value or comma-separated IN list")
    operator: str = Field("=", alias="op", description="= | <> | > | >= | < | <= | in")
    raw_condition: str = Field("", alias="condition", description="Free-text SQL condition")
    is_raw: bool = Field(False, alias="isStr", description="Use raw_condition instead of key/op/value")

    @field_validator("column_type_code", mode="before")
    @classmethod
    def _stringify_type(cls, v: Any) -> str:
        return "" if v is None else str(v)

    @property
    def is_placeholder(self) -> bool:
        if self.is_raw:
            return self.raw_condition == ""
        return self.column_key == "none" or self.value == ""


class QuerySpec(BaseModel):
    """One panel target."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    ref_id: str = Field("A", alias="refId")
    table_name: str = Field("", alias="tableName")
    table_type: int = Field(-1, alias="tableType", description="6 tag table, 0 log table, -1 unknown")
    value_field: str = Field("", alias="valueField", description="Column name or raw expression")
    value_mode: ValueMode = Field(ValueMode.AGGREGATED, alias="valueType")
    aggregation: str = Field("avg", alias="aggrFunc", description="Aggregation key or 'none'")
    time_field: str = Field("", alias="timeField")
    rollup_requested: bool = Field(True, alias="rollupTable")
    title: str = Field("", description="Optional series title override")
    filters: list[FilterClause] = Field(default_factory=list)
    hidden: bool = Field(False, alias="hide")

    @field_validator("value_mode", mode="before")
    @classmethod
    def _map_editor_value_mode(cls, v: Any) -> Any:
        if isinstance(v, str):
            return _VALUE_MODE_ALIASES.get(v, v)
        return v

    @field_validator("title", "aggregation", "time_field", "value_field", "table_name", mode="before")
    @classmethod
    def _none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @property
    def has_aggregation(self) -> bool:
        return self.aggregation not in ("", "none")


class CompiledQuery(QuerySpec):
    """A QuerySpec with its final SQL attached."""

    sql: str = Field(..., alias="queryText")

    @classmethod
    def from_spec(cls, spec: QuerySpec, sql: str) -> "CompiledQuery":
        return cls(**spec.model_dump(), sql=sql)


class TimeRange(BaseModel):
    """Requested window, in the store's nanosecond epoch, plus point spacing."""

    model_config = ConfigDict(frozen=True)

    from_nanos: int
    to_nanos: int
    resolution_ms: int = Field(..., description="Requested point spacing in milliseconds")
    max_data_points: int = Field(0, description="0 means no downsampling limit override")

    @classmethod
    def from_millis(
        cls,
        from_ms: int,
        to_ms: int,
        interval_ms: int,
        max_data_points: int = 0,
    ) -> "TimeRange":
        return cls(
            from_nanos=millis_to_nanos(from_ms),
            to_nanos=millis_to_nanos(to_ms),
            resolution_ms=int(interval_ms),
            max_data_points=max_data_points,
        )


class QueryRequest(BaseModel):
    """A panel refresh: one time window and many targets."""

    model_config = ConfigDict(populate_by_name=True)

    range_from_ms: int = Field(..., alias="rangeFromMs")
    range_to_ms: int = Field(..., alias="rangeToMs")
    interval_ms: int = Field(..., alias="intervalMs")
    max_data_points: int = Field(0, alias="maxDataPoints")
    targets: list[QuerySpec] = Field(default_factory=list)
    scoped_vars: dict[str, Any] = Field(default_factory=dict, alias="scopedVars")

    def time_range(self) -> TimeRange:
        return TimeRange.from_millis(
            self.range_from_ms, self.range_to_ms, self.interval_ms, self.max_data_points,
        )
