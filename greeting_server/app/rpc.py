"""JSON-RPC 메시지를 디스패처 호출로 옮기는 MCP 세션이에요.

전송 계층(stdio, HTTP)은 메시지를 파싱해서 `JsonRpcSession.handle`에 넘기고,
돌아온 딕셔너리를 그대로 직렬화해서 보내기만 하면 돼요. 알림에는 ``None``이
돌아오고 응답을 보내지 않아요.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any

from greeting_server.app.mcp_protocol import (
    JSONRPC_VERSION,
    ErrorCodes,
    JsonRpcError,
    error_response,
    negotiate_protocol_version,
    prompt_to_wire,
    resource_to_wire,
    success_response,
    tool_to_wire,
)
from greeting_server.core.dispatcher import Dispatcher
from greeting_server.core.errors import (
    ArgumentValidationError,
    CapabilityFaultError,
    CapabilityNotFoundError,
)
from greeting_server.core.registry import CapabilityKind
from libs.common.errors import DomainError
from libs.common.logging import get_logger

logger = get_logger("greeting_server.rpc")

_MethodHandler = Callable[[dict[str, Any], Any], Awaitable[dict[str, Any] | None]]


class JsonRpcSession:
    def __init__(
        self,
        dispatcher: Dispatcher,
        *,
        server_name: str,
        server_version: str,
        instructions: str | None = None,
    ) -> None:
        self._dispatcher = dispatcher
        self._server_name = server_name
        self._server_version = server_version
        self._instructions = instructions
        self._client_info: dict[str, Any] | None = None
        self._methods: dict[str, _MethodHandler] = {
            "initialize": self._initialize,
            "ping": self._ping,
            "tools/list": self._list_tools,
            "tools/call": self._call_tool,
            "resources/list": self._list_resources,
            "resources/templates/list": self._list_resource_templates,
            "resources/read": self._read_resource,
            "prompts/list": self._list_prompts,
            "prompts/get": self._get_prompt,
        }

    @property
    def client_info(self) -> dict[str, Any] | None:
        return self._client_info

    async def handle(self, message: object) -> dict[str, Any] | None:
        if not isinstance(message, dict):
            return error_response(None, JsonRpcError(ErrorCodes.INVALID_REQUEST, "JSON-RPC 메시지는 객체여야 해요."))

        request_id = message.get("id")
        is_notification = "id" not in message
        method = message.get("method")

        if "method" not in message and ("result" in message or "error" in message):
            # 클라이언트가 보낸 응답 메시지예요. 이 서버는 요청을 보내지 않으므로 무시해요.
            return None
        if message.get("jsonrpc") != JSONRPC_VERSION or not isinstance(method, str):
            return error_response(request_id, JsonRpcError(ErrorCodes.INVALID_REQUEST, "올바른 JSON-RPC 요청이 아니에요."))

        if is_notification:
            self._handle_notification(method, message.get("params"))
            return None

        params = message.get("params")
        if params is None:
            params = {}
        if not isinstance(params, dict):
            return error_response(request_id, JsonRpcError(ErrorCodes.INVALID_PARAMS, "params는 객체여야 해요."))

        handler = self._methods.get(method)
        if handler is None:
            return error_response(
                request_id,
                JsonRpcError(ErrorCodes.METHOD_NOT_FOUND, f"지원하지 않는 메서드예요: {method}"),
            )

        try:
            result = await handler(params, request_id)
        except JsonRpcError as exc:
            return error_response(request_id, exc)
        except DomainError as exc:
            return error_response(request_id, _domain_error_to_rpc(exc))
        except Exception as exc:
            logger.exception("rpc_unexpected_error", method=method, request_id=request_id, error=str(exc))
            return error_response(
                request_id,
                JsonRpcError(ErrorCodes.INTERNAL_ERROR, "요청 처리 중 예상치 못한 오류가 발생했어요."),
            )
        return success_response(request_id, result or {})

    def _handle_notification(self, method: str, params: object) -> None:
        if method == "notifications/initialized":
            logger.info("client_initialized", client=self._client_info)
            return
        if method == "notifications/cancelled":
            # 실제 취소는 진행 중인 요청을 아는 전송 계층이 처리해요.
            return
        logger.debug("notification_ignored", method=method)

    async def _initialize(self, params: dict[str, Any], request_id: Any) -> dict[str, Any]:
        client_info = params.get("clientInfo")
        self._client_info = client_info if isinstance(client_info, dict) else None
        result: dict[str, Any] = {
            "protocolVersion": negotiate_protocol_version(params.get("protocolVersion")),
            "capabilities": {
                "tools": {"listChanged": False},
                "resources": {"subscribe": False, "listChanged": False},
                "prompts": {"listChanged": False},
            },
            "serverInfo": {"name": self._server_name, "version": self._server_version},
        }
        if self._instructions:
            result["instructions"] = self._instructions
        return result

    async def _ping(self, params: dict[str, Any], request_id: Any) -> dict[str, Any]:
        return {}

    async def _list_tools(self, params: dict[str, Any], request_id: Any) -> dict[str, Any]:
        registry = self._dispatcher.registry
        return {"tools": [tool_to_wire(descriptor) for descriptor in registry.descriptors(CapabilityKind.TOOL)]}

    async def _call_tool(self, params: dict[str, Any], request_id: Any) -> dict[str, Any]:
        name = _require_name(params, "name")
        result = await self._dispatcher.call_tool(name, params.get("arguments"), request_id=request_id)
        return result.to_wire()

    async def _list_resources(self, params: dict[str, Any], request_id: Any) -> dict[str, Any]:
        registry = self._dispatcher.registry
        return {
            "resources": [resource_to_wire(descriptor) for descriptor in registry.descriptors(CapabilityKind.RESOURCE)]
        }

    async def _list_resource_templates(self, params: dict[str, Any], request_id: Any) -> dict[str, Any]:
        return {"resourceTemplates": []}

    async def _read_resource(self, params: dict[str, Any], request_id: Any) -> dict[str, Any]:
        uri = _require_name(params, "uri")
        result = await self._dispatcher.read_resource(uri, request_id=request_id)
        return result.to_wire()

    async def _list_prompts(self, params: dict[str, Any], request_id: Any) -> dict[str, Any]:
        registry = self._dispatcher.registry
        return {"prompts": [prompt_to_wire(descriptor) for descriptor in registry.descriptors(CapabilityKind.PROMPT)]}

    async def _get_prompt(self, params: dict[str, Any], request_id: Any) -> dict[str, Any]:
        name = _require_name(params, "name")
        result = await self._dispatcher.get_prompt(name, params.get("arguments"), request_id=request_id)
        return result.to_wire()


def _require_name(params: dict[str, Any], key: str) -> str:
    value = params.get(key)
    if not isinstance(value, str) or not value:
        raise JsonRpcError(ErrorCodes.INVALID_PARAMS, f"params.{key}는 비어 있지 않은 문자열이어야 해요.")
    return value


def _domain_error_to_rpc(exc: DomainError) -> JsonRpcError:
    if isinstance(exc, CapabilityNotFoundError):
        code = ErrorCodes.RESOURCE_NOT_FOUND if exc.kind == CapabilityKind.RESOURCE.value else ErrorCodes.INVALID_PARAMS
        return JsonRpcError(code, exc.message, {"kind": exc.kind, "name": exc.name})
    if isinstance(exc, ArgumentValidationError):
        return JsonRpcError(
            ErrorCodes.INVALID_PARAMS,
            exc.message,
            {"violations": [violation.to_dict() for violation in exc.violations]},
        )
    if isinstance(exc, CapabilityFaultError):
        return JsonRpcError(ErrorCodes.INTERNAL_ERROR, exc.message)
    return JsonRpcError(
        ErrorCodes.INTERNAL_ERROR,
        exc.message,
        {"error_code": exc.error_code, "retryable": exc.retryable},
    )
