"""
Unit tests — backend HTTP client against a mocked transport.
"""
import httpx
import pytest

from neo_datasource.db.client import NeoClient, NeoQueryError, PING_SQL


def _client(handler) -> NeoClient:
    return NeoClient(address="http://neo.test", timeout=1.0, transport=httpx.MockTransport(handler))


def _ok(data: dict) -> httpx.Response:
    return httpx.Response(200, json={"success": True, "reason": "success", "data": data})


def test_query_sends_sql_as_q_param():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["q"] = request.url.params["q"]
        return _ok({"columns": ["N"], "types": ["int64"], "rows": [[1]]})

    result = _client(handler).query("SELECT 1 AS N")
    assert seen == {"path": "/db/query", "q": "SELECT 1 AS N"}
    assert result.columns == ["N"]
    assert result.rows == [[1]]
    assert result.row_count == 1


def test_column_lookup_is_case_insensitive():
    result = _client(lambda r: _ok({"columns": ["NAME", "TYPE"], "types": [], "rows": [["A", 6]]})).query("x")
    assert result.column("name") == ["A"]


def test_backend_reason_surfaces_on_failure():
    def handler(request):
        return httpx.Response(200, json={"success": False, "reason": "syntax error near FROM"})

    with pytest.raises(NeoQueryError, match="syntax error near FROM"):
        _client(handler).query("SELECT")


def test_http_status_error():
    with pytest.raises(NeoQueryError, match="status error 500"):
        _client(lambda r: httpx.Response(500, text="boom")).query("SELECT 1")


def test_connection_error_wrapped():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(NeoQueryError, match="http request"):
        _client(handler).query("SELECT 1")


def test_bad_json_wrapped():
    with pytest.raises(NeoQueryError, match="unmarshal"):
        _client(lambda r: httpx.Response(200, text="not json")).query("SELECT 1")


def test_missing_data_gives_empty_result():
    result = _client(lambda r: httpx.Response(200, json={"success": True})).query("SELECT 1")
    assert result.columns == []
    assert result.rows == []


def test_ping_and_health():
    def handler(request):
        assert request.url.params["q"] == PING_SQL
        return _ok({"columns": ["count(*)"], "types": ["int64"], "rows": [[3]]})

    client = _client(handler)
    assert client.ping() == 3
    status = client.check_health()
    assert status.ok is True
    assert "3 tables" in status.message


def test_health_reports_failure_without_raising():
    status = _client(lambda r: httpx.Response(503, text="down")).check_health()
    assert status.ok is False
    assert "503" in status.message
