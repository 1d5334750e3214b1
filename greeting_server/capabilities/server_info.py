"""레지스트리의 현재 상태를 JSON으로 보여주는 자기 기술 리소스예요."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from greeting_server.capabilities.base import BaseResource
from greeting_server.core.registry import CapabilityKind, CapabilityRegistry

SERVER_INFO_URI = "mcp://server/info"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ServerInfoResource(BaseResource):
    """읽을 때마다 레지스트리를 다시 훑어서 새 스냅샷을 만들어요.

    레지스트리에 특별한 접근 권한이 있는 게 아니라, 다른 핸들러처럼
    `names()`와 `descriptors()`만 읽어요. 결과는 캐싱하지 않아요.
    """

    def __init__(
        self,
        *,
        registry: CapabilityRegistry,
        server_name: str,
        server_version: str,
        server_description: str,
        author: str,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._registry = registry
        self._server_name = server_name
        self._server_version = server_version
        self._server_description = server_description
        self._author = author
        self._clock = clock

    @property
    def name(self) -> str:
        return "server-info"

    @property
    def uri(self) -> str:
        return SERVER_INFO_URI

    @property
    def metadata(self) -> dict[str, Any]:
        return {
            "name": "MCP 서버 정보",
            "description": "현재 MCP 서버의 정보를 반환합니다",
            "mimeType": "application/json",
        }

    async def read(self) -> dict[str, Any]:
        tools = {
            descriptor.name: dict(descriptor.metadata) or {"description": descriptor.description}
            for descriptor in self._registry.descriptors(CapabilityKind.TOOL)
        }
        prompts = {
            descriptor.name: {
                "description": descriptor.description,
                "parameters": _describe_parameters(descriptor.input_schema or {}),
            }
            for descriptor in self._registry.descriptors(CapabilityKind.PROMPT)
        }
        return {
            "name": self._server_name,
            "version": self._server_version,
            "description": self._server_description,
            "capabilities": self._registry.snapshot(),
            "tools": tools,
            "prompts": prompts,
            "author": self._author,
            "lastUpdated": self._clock().isoformat().replace("+00:00", "Z"),
        }


def _describe_parameters(schema: dict[str, Any]) -> list[str]:
    required = set(schema.get("required", []))
    return [
        name if name in required else f"{name} (optional)"
        for name in schema.get("properties", {})
    ]
