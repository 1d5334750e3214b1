from __future__ import annotations

from fastapi import HTTPException, Request, status

from greeting_server.app.rpc import JsonRpcSession
from greeting_server.core.registry import CapabilityRegistry


def get_session(request: Request) -> JsonRpcSession:
    session = getattr(request.app.state, "session", None)
    if not isinstance(session, JsonRpcSession):
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="MCP 세션을 사용할 수 없어요.")
    return session


def get_registry(request: Request) -> CapabilityRegistry:
    registry = getattr(request.app.state, "registry", None)
    if not isinstance(registry, CapabilityRegistry):
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="레지스트리가 준비되지 않았어요.")
    return registry
