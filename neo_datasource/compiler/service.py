"""
Query service -- orchestrates compile -> execute -> frame for a panel refresh.

``compile_all`` is the pure batch step: every visible target with a time
column is compiled, in input order.  ``run_queries`` sends each compiled
statement to the backend and collects one ``QueryResult`` per target.  A
backend failure, or a reply that cannot be turned into a frame, is recorded
on that target only.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping

import pandas as pd

from neo_datasource.compiler.spec import CompiledQuery, QueryRequest, QuerySpec, TimeRange
from neo_datasource.compiler.sql_generator import compile_query
from neo_datasource.compiler.templating import Substitute
from neo_datasource.core.logging import get_logger
from neo_datasource.core.utils import stopwatch
from neo_datasource.db.client import NeoClient, NeoQueryError
from neo_datasource.db.frames import result_to_frame

logger = get_logger(__name__)


def compile_all(
    targets: Iterable[QuerySpec],
    time_range: TimeRange,
    scoped_vars: Mapping[str, Any] | None = None,
    substitute: Substitute | None = None,
) -> list[CompiledQuery]:
    """Compile every target; skipped targets are dropped, order is preserved."""
    compiled: list[CompiledQuery] = []
    for spec in targets:
        sql = compile_query(spec, time_range, scoped_vars, substitute)
        if sql is None:
            continue
        compiled.append(CompiledQuery.from_spec(spec, sql))
    logger.info("Compiled %d target(s)", len(compiled))
    return compiled


@dataclass
class QueryResult:
    ref_id: str
    sql: str
    frame: pd.DataFrame | None = None
    error: str | None = None
    latency_ms: int = 0

    @property
    def success(self) -> bool:
        return self.error is None


def run_queries(
    request: QueryRequest,
    client: NeoClient,
    substitute: Substitute | None = None,
) -> list[QueryResult]:
    """Compile and execute every target of *request*.

    An empty list means nothing survived compilation -- not an error.
    """
    compiled = compile_all(request.targets, request.time_range(), request.scoped_vars, substitute)

    results: list[QueryResult] = []
    for query in compiled:
        result = QueryResult(ref_id=query.ref_id, sql=query.sql)
        with stopwatch() as elapsed:
            try:
                rows = client.query(query.sql)
                result.frame = result_to_frame(rows)
            except NeoQueryError as exc:
                logger.warning("Query refId=%s failed: %s", query.ref_id, exc)
                result.error = str(exc)
            except (TypeError, ValueError) as exc:
                # rows that do not fit their declared column type
                logger.warning("Result for refId=%s could not be framed: %s", query.ref_id, exc)
                result.error = f"result conversion: {exc}"
        result.latency_ms = elapsed["elapsed_ms"]
        results.append(result)

    return results
