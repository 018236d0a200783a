"""
HTTP client for the backend's query endpoint.

Every statement goes out as ``GET <address>/db/query?q=<sql>``.  The reply
is a JSON envelope whose ``data`` member is column-oriented::

    {"success": true, "reason": "success",
     "data": {"columns": ["TIME", "VALUE"], "types": ["datetime", "double"],
              "rows": [[1700000000000000000, 1.5], ...]}}

Failures of any kind (connection, HTTP status, ``success: false``, bad JSON)
raise ``NeoQueryError`` carrying the backend's reason verbatim.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import httpx

from neo_datasource.core.config import get_settings
from neo_datasource.core.logging import get_logger

logger = get_logger(__name__)

QUERY_PATH = "/db/query"
PING_SQL = "SELECT count(*) FROM V$TABLES"


class NeoQueryError(RuntimeError):
    """The backend could not run a statement."""


@dataclass
class ResultSet:
    columns: list[str] = field(default_factory=list)
    types: list[str] = field(default_factory=list)
    rows: list[list[Any]] = field(default_factory=list)
    lengths: list[int] = field(default_factory=list)

    @property
    def row_count(self) -> int:
        return len(self.rows)

    def column(self, name: str) -> list[Any]:
        """Values of the column called *name* (case-insensitive)."""
        lowered = [c.lower() for c in self.columns]
        idx = lowered.index(name.lower())
        return [row[idx] for row in self.rows]


@dataclass(frozen=True)
class HealthStatus:
    ok: bool
    message: str


class NeoClient:
    """Thin synchronous client; one instance per backend address."""

    def __init__(
        self,
        address: str | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        settings = get_settings()
        self.address = (address or settings.neo_address).rstrip("/")
        self._http = httpx.Client(
            base_url=self.address,
            timeout=timeout if timeout is not None else settings.neo_timeout_seconds,
            transport=transport,
        )

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "NeoClient":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    # ── Public API ──────────────────────────────────────

    def query(self, sql: str) -> ResultSet:
        logger.info("Executing SQL (%d chars) on %s", len(sql), self.address)
        try:
            rsp = self._http.get(QUERY_PATH, params={"q": sql})
        except httpx.HTTPError as exc:
            raise NeoQueryError(f"http request: {exc}") from exc

        payload = self._decode(rsp)
        if rsp.status_code != httpx.codes.OK:
            reason = payload.get("reason") if isinstance(payload, dict) else None
            raise NeoQueryError(f"status error {rsp.status_code}" + (f": {reason}" if reason else ""))
        if isinstance(payload, dict) and payload.get("success") is False:
            raise NeoQueryError(payload.get("reason") or "query failed")

        data = payload.get("data") if isinstance(payload, dict) else None
        result = ResultSet(
            columns=list((data or {}).get("columns") or []),
            types=list((data or {}).get("types") or []),
            rows=[list(r) for r in (data or {}).get("rows") or []],
            lengths=list((data or {}).get("lengths") or []),
        )
        logger.info("Returned %d rows", result.row_count)
        return result

    def ping(self) -> int:
        """Run the liveness statement; returns the number of tables."""
        result = self.query(PING_SQL)
        if not result.rows:
            return 0
        return int(result.rows[0][0])

    def check_health(self) -> HealthStatus:
        try:
            tables = self.ping()
        except NeoQueryError as exc:
            return HealthStatus(ok=False, message=str(exc))
        return HealthStatus(ok=True, message=f"Data source at {self.address} is working ({tables} tables)")

    # ── Internals ───────────────────────────────────────

    @staticmethod
    def _decode(rsp: httpx.Response) -> Any:
        try:
            return rsp.json()
        except ValueError as exc:
            if rsp.status_code != httpx.codes.OK:
                return {}
            raise NeoQueryError(f"rsp json unmarshal: {exc}") from exc


_client: NeoClient | None = None


def get_client() -> NeoClient:
    """Return the shared client for the configured backend (lazy-created)."""
    global _client
    if _client is None:
        _client = NeoClient()
        logger.info("Backend client created  address=%s", _client.address)
    return _client
