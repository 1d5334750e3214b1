from __future__ import annotations

from fastapi.testclient import TestClient

from greeting_server.app.main import create_app
from greeting_server.app.mcp_protocol import ErrorCodes
from greeting_server.app.settings import Settings
from libs.common.errors import UpstreamTransientError

from tests.conftest import rpc_request


def test_mcp_endpoint_handles_tool_call(settings: Settings) -> None:
    with TestClient(create_app(settings)) as client:
        response = client.post(
            "/mcp",
            json=rpc_request(1, "tools/call", {"name": "calculator", "arguments": {"num1": 6, "num2": 7, "operator": "*"}}),
        )

    assert response.status_code == 200
    body = response.json()
    assert body["id"] == 1
    assert body["result"]["content"][0]["text"] == "6 * 7 = 42\n(6 곱하기 7는 42입니다)"


def test_mcp_endpoint_accepts_notifications_without_body(settings: Settings) -> None:
    with TestClient(create_app(settings)) as client:
        response = client.post("/mcp", json={"jsonrpc": "2.0", "method": "notifications/initialized"})

    assert response.status_code == 202
    assert response.content == b""


def test_mcp_endpoint_reports_parse_error(settings: Settings) -> None:
    with TestClient(create_app(settings)) as client:
        response = client.post("/mcp", content=b"{broken", headers={"content-type": "application/json"})

    assert response.status_code == 400
    assert response.json()["error"]["code"] == ErrorCodes.PARSE_ERROR


def test_healthz_reports_registered_capabilities(settings: Settings) -> None:
    with TestClient(create_app(settings)) as client:
        response = client.get("/healthz")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["frozen"] is True
    assert body["capabilities"]["resources"] == ["server-info"]


def test_mcp_endpoint_is_unavailable_without_lifespan(settings: Settings) -> None:
    client = TestClient(create_app(settings))
    response = client.post("/mcp", json=rpc_request(1, "ping"))
    assert response.status_code == 503


def test_escaped_errors_become_json_rpc_envelopes(settings: Settings) -> None:
    app = create_app(settings)

    @app.get("/_transient")
    async def _transient() -> None:
        raise UpstreamTransientError("잠시 후 다시 시도해주세요.")

    @app.get("/_crash")
    async def _crash() -> None:
        raise RuntimeError("boom")

    with TestClient(app, raise_server_exceptions=False) as client:
        transient = client.get("/_transient")
        crash = client.get("/_crash")

    assert transient.status_code == 400
    assert transient.json()["error"]["data"]["error_code"] == "UPSTREAM_TRANSIENT"
    assert transient.json()["error"]["data"]["retryable"] is True
    assert crash.status_code == 500
    assert crash.json()["jsonrpc"] == "2.0"
    assert crash.json()["error"]["code"] == ErrorCodes.INTERNAL_ERROR
