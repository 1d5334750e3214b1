from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import pytest

from greeting_server.app.rpc import JsonRpcSession
from greeting_server.app.settings import Settings
from greeting_server.capabilities.defaults import build_default_registry
from greeting_server.core.dispatcher import Dispatcher
from greeting_server.core.registry import CapabilityRegistry

FIXED_NOW = datetime(2025, 1, 2, 4, 5, 6, tzinfo=timezone.utc)


@pytest.fixture
def settings() -> Settings:
    """환경변수나 .env에 영향받지 않도록 값을 모두 지정한 설정이에요."""
    return Settings(
        _env_file=None,
        hf_token="",
        transport="stdio",
        default_timezone="Asia/Seoul",
        greeting_languages=[],
    )


@pytest.fixture
def registry(settings: Settings) -> CapabilityRegistry:
    return build_default_registry(settings)


@pytest.fixture
def dispatcher(registry: CapabilityRegistry) -> Dispatcher:
    return Dispatcher(registry)


@pytest.fixture
def session(dispatcher: Dispatcher) -> JsonRpcSession:
    return JsonRpcSession(dispatcher, server_name="greeting-server", server_version="1.0.0")


def rpc_request(request_id: Any, method: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
    """테스트용 JSON-RPC 요청 딕셔너리를 만드는 헬퍼예요."""
    message: dict[str, Any] = {"jsonrpc": "2.0", "id": request_id, "method": method}
    if params is not None:
        message["params"] = params
    return message
