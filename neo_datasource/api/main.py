"""
FastAPI application entry-point.
"""
from __future__ import annotations

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from neo_datasource.api.routers import catalog, query
from neo_datasource.db.client import NeoClient, get_client

app = FastAPI(
    title="Neo Datasource",
    version="0.1.0",
    description="Panel query compiler and executor for a tag/log time-series store",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(query.router, prefix="/query", tags=["Query"])
app.include_router(catalog.router, tags=["Catalog"])


@app.get("/health")
def health(client: NeoClient = Depends(get_client)):
    status = client.check_health()
    return {"status": "ok" if status.ok else "error", "message": status.message}
