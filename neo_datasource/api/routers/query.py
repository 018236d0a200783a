"""POST /query -- compile and run panel targets; POST /query/compile -- dry run."""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field
from fastapi import APIRouter, Depends, HTTPException

from neo_datasource.compiler.service import compile_all, run_queries
from neo_datasource.compiler.spec import QueryRequest
from neo_datasource.core.logging import get_logger
from neo_datasource.db.client import NeoClient, get_client
from neo_datasource.db.frames import frame_to_fields

logger = get_logger(__name__)
router = APIRouter()


class CompiledTarget(BaseModel):
    ref_id: str = Field(..., serialization_alias="refId")
    table_name: str = Field(..., serialization_alias="tableName")
    query_text: str = Field(..., serialization_alias="queryText")


class CompileResponse(BaseModel):
    targets: list[CompiledTarget]


class TargetResult(BaseModel):
    ref_id: str = Field(..., serialization_alias="refId")
    sql: str
    fields: list[dict[str, Any]] = Field(default_factory=list)
    error: str | None = None
    latency_ms: int = Field(0, serialization_alias="latencyMs")


class QueryResponse(BaseModel):
    results: list[TargetResult]


@router.post("/compile", response_model=CompileResponse, response_model_by_alias=True)
def compile_endpoint(req: QueryRequest):
    """Dry run: compile every target without touching the backend."""
    try:
        compiled = compile_all(req.targets, req.time_range(), req.scoped_vars)
    except Exception as exc:
        logger.exception("Compilation failed")
        raise HTTPException(status_code=500, detail=str(exc))

    return CompileResponse(
        targets=[
            CompiledTarget(ref_id=q.ref_id, table_name=q.table_name, query_text=q.sql)
            for q in compiled
        ]
    )


@router.post("", response_model=QueryResponse, response_model_by_alias=True)
def query_endpoint(req: QueryRequest, client: NeoClient = Depends(get_client)):
    """Compile every target, run it, and return one frame per surviving target."""
    try:
        results = run_queries(req, client)
    except Exception as exc:
        logger.exception("Query run failed")
        raise HTTPException(status_code=500, detail=str(exc))

    return QueryResponse(
        results=[
            TargetResult(
                ref_id=r.ref_id,
                sql=r.sql,
                fields=frame_to_fields(r.frame) if r.frame is not None else [],
                error=r.error,
                latency_ms=r.latency_ms,
            )
            for r in results
        ]
    )
