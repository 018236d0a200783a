"""
SQL Generator -- turns one panel QuerySpec into a single dialect SQL string.

The statement is assembled as a small ``SqlStatement`` (select, from, where,
group by, order by, limit) and rendered once at the end.  Each clause has
its own builder so the decision order can be tested clause by clause:

  1. sub-query mode for resolutions of a day or more
  2. value alias
  3. value projection (raw call / aggregate / bare column)
  4. rollup decision
  5. time bucket (ROLLUP, DATE_TRUNC or nanosecond integer division)
  6-7. time-range predicate and filters
  8. outer re-aggregation for rollup sub-queries
  9. series title
  10. limit
  11-12. assembly and variable interpolation
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from neo_datasource.catalog.column_types import is_tag_table
from neo_datasource.compiler.expressions import looks_like_call_expression
from neo_datasource.compiler.filters import compile_filters
from neo_datasource.compiler.intervals import MS_PER_DAY, Interval, duration_to_interval
from neo_datasource.compiler.spec import QuerySpec, TimeRange, ValueMode
from neo_datasource.compiler.templating import Substitute, interpolate
from neo_datasource.core.logging import get_logger
from neo_datasource.core.utils import NANOS_PER_MILLI

logger = get_logger(__name__)

SUB_QUERY_THRESHOLD_MS = MS_PER_DAY
SUB_QUERY_ROLLUP_WIDTH = "1 hour"
UNBOUNDED_LIMIT = 5000
VALUE_ALIAS = "VALUE"


# ── Statement intermediate ───────────────────────────────

@dataclass(frozen=True)
class SqlStatement:
    select: tuple[str, ...]
    from_: str
    where: str = ""
    group_by: str = ""
    order_by: str = ""
    limit: int | None = None

    def render(self) -> str:
        parts = ["SELECT " + ", ".join(self.select), f"FROM {self.from_}"]
        if self.where:
            parts.append(f"WHERE {self.where}")
        if self.group_by:
            parts.append(f"GROUP BY {self.group_by}")
        if self.order_by:
            parts.append(f"ORDER BY {self.order_by}")
        if self.limit is not None:
            parts.append(f"LIMIT {self.limit}")
        return " ".join(parts)

    def subquery(self) -> str:
        return f"({self.render()})"


@dataclass(frozen=True)
class Projection:
    expression: str
    grouped: bool


# ── Clause builders ──────────────────────────────────────

def is_sub_query(time_range: TimeRange) -> bool:
    return time_range.resolution_ms >= SUB_QUERY_THRESHOLD_MS


def value_alias(spec: QuerySpec) -> str:
    """Alias for the inner value column; aggregated mode is always ``VALUE``."""
    if spec.value_mode is ValueMode.AGGREGATED:
        return VALUE_ALIAS
    return f"'{spec.title}'" if spec.title else ""


def _aliased(expression: str, alias: str) -> str:
    return f"{expression} AS {alias}" if alias else expression


def select_projection(spec: QuerySpec, alias: str) -> Projection:
    if spec.value_mode is ValueMode.LITERAL and looks_like_call_expression(spec.value_field):
        return Projection(_aliased(spec.value_field, alias), grouped=True)

    if spec.has_aggregation:
        fn = spec.aggregation.lower()
        if fn == "count(*)":
            return Projection(f"count(*) AS {VALUE_ALIAS}", grouped=True)
        if fn in ("first", "last"):
            return Projection(
                f"{fn.upper()}({spec.time_field}, {spec.value_field}) AS {VALUE_ALIAS}",
                grouped=True,
            )
        return Projection(_aliased(f"{fn.upper()}({spec.value_field})", alias), grouped=True)

    return Projection(_aliased(spec.value_field, alias), grouped=False)


def use_rollup(spec: QuerySpec, interval: Interval, grouped: bool) -> bool:
    """Rollups only apply to grouped aggregates at one-second granularity or coarser."""
    return spec.rollup_requested and grouped and interval.unit != "msec"


def nano_bucket(time_range: TimeRange) -> int:
    return time_range.resolution_ms * NANOS_PER_MILLI


def time_bucket_expression(
    spec: QuerySpec,
    time_range: TimeRange,
    interval: Interval,
    rollup: bool,
    sub_query: bool,
) -> str:
    tf = spec.time_field
    if rollup and sub_query:
        return f"{tf} ROLLUP {SUB_QUERY_ROLLUP_WIDTH} AS TIME"
    if rollup:
        return f"{tf} ROLLUP {interval} AS TIME"
    if sub_query:
        ns = nano_bucket(time_range)
        return f"{tf} / {ns} * {ns} AS TIME"
    return f"DATE_TRUNC('{interval.unit}', {tf}, {interval.magnitude}) AS TIME"


def averaging_projection(spec: QuerySpec) -> str:
    """Average plus the sum/count needed to recombine it after re-bucketing."""
    v = spec.value_field
    return f"AVG({v}) AS {VALUE_ALIAS}, SUM({v}) AS SUMVAL, COUNT({v}) AS CNTVAL"


def time_range_predicate(spec: QuerySpec, time_range: TimeRange) -> str:
    return (
        f"{spec.time_field} BETWEEN FROM_TIMESTAMP({time_range.from_nanos})"
        f" AND FROM_TIMESTAMP({time_range.to_nanos})"
    )


def outer_aggregate(aggregation: str) -> str | None:
    """Re-aggregation of per-hour rollup rows into the requested buckets."""
    fn = aggregation.lower()
    if fn in ("sum", "sumsq", "count", "count(*)"):
        return f"SUM({VALUE_ALIAS})"
    if fn in ("min", "max"):
        return f"{fn.upper()}({VALUE_ALIAS})"
    if fn == "avg":
        return "SUM(SUMVAL)/SUM(CNTVAL)"
    return None


def series_title(spec: QuerySpec) -> str:
    """Display name of the value column; an explicit title always wins."""
    if spec.title:
        return f"'{spec.title}'"

    first = spec.filters[0] if spec.filters else None
    if (
        is_tag_table(spec.table_type)
        and spec.has_aggregation
        and first is not None
        and not first.is_raw
        and first.column_key != "none"
        and first.value != ""
    ):
        return f'"{first.value}({spec.aggregation})"'

    if not spec.has_aggregation:
        return f"'{spec.value_field}'"
    return f"'{spec.aggregation}({spec.value_field})'"


def limit_for(time_range: TimeRange, grouped: bool) -> int:
    if not grouped or time_range.max_data_points == 0:
        return UNBOUNDED_LIMIT
    return time_range.max_data_points * 2


# ── Assembly ─────────────────────────────────────────────

def build_statement(spec: QuerySpec, time_range: TimeRange) -> SqlStatement | None:
    """Build the statement for *spec*, or None when the target is skipped."""
    if spec.hidden or not spec.time_field:
        return None

    sub_query = is_sub_query(time_range)
    interval = duration_to_interval(time_range.resolution_ms)

    projection = select_projection(spec, value_alias(spec))
    rollup = use_rollup(spec, interval, projection.grouped)

    value_expr = projection.expression
    if rollup and sub_query and spec.aggregation.lower() == "avg":
        value_expr = averaging_projection(spec)

    if projection.grouped:
        time_expr = time_bucket_expression(spec, time_range, interval, rollup, sub_query)
    else:
        time_expr = f"{spec.time_field} AS TIME"

    where = time_range_predicate(spec, time_range) + compile_filters(spec.filters).rstrip()
    group_by = "TIME" if projection.grouped else ""
    limit = limit_for(time_range, projection.grouped)

    inner = SqlStatement(
        select=(time_expr, value_expr),
        from_=spec.table_name,
        where=where,
        group_by=group_by,
    )

    if spec.value_mode is ValueMode.LITERAL:
        return SqlStatement(
            select=inner.select,
            from_=inner.from_,
            where=inner.where,
            group_by=inner.group_by,
            order_by="TIME",
            limit=limit,
        )

    title = series_title(spec)
    reaggregate = outer_aggregate(spec.aggregation) if rollup and sub_query else None
    if reaggregate is not None:
        ns = nano_bucket(time_range)
        return SqlStatement(
            select=(f"TIME / {ns} * {ns} AS TIME", f"{reaggregate} AS {title}"),
            from_=inner.subquery(),
            group_by="TIME",
            order_by="TIME",
            limit=limit,
        )

    return SqlStatement(
        select=("TIME AS TIME", f"{VALUE_ALIAS} AS {title}"),
        from_=inner.subquery(),
        order_by="TIME",
        limit=limit,
    )


def compile_query(
    spec: QuerySpec,
    time_range: TimeRange,
    scoped_vars: Mapping[str, Any] | None = None,
    substitute: Substitute | None = None,
) -> str | None:
    """Compile *spec* to SQL text; None means the target is skipped."""
    statement = build_statement(spec, time_range)
    if statement is None:
        logger.debug("Skipping target refId=%s (hidden or no time field)", spec.ref_id)
        return None

    substitute = substitute or interpolate
    sql = substitute(statement.render(), scoped_vars or {})
    logger.debug("Compiled SQL refId=%s: %s", spec.ref_id, sql)
    return sql
