from __future__ import annotations

from typing import Any

import pytest

from greeting_server.core.dispatcher import UNEXPECTED_TOOL_FAILURE_TEXT, Dispatcher, InvocationRequest
from greeting_server.core.errors import ArgumentValidationError, CapabilityFaultError, CapabilityNotFoundError
from greeting_server.core.registry import CapabilityKind, CapabilityRegistry
from libs.common.errors import UpstreamError

NAME_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {"name": {"type": "string"}},
    "required": ["name"],
}


class _RecordingHandler:
    def __init__(self, outcome: object = "ok", error: Exception | None = None) -> None:
        self.calls: list[dict[str, Any]] = []
        self._outcome = outcome
        self._error = error

    async def __call__(self, arguments: dict[str, Any]) -> object:
        self.calls.append(arguments)
        if self._error is not None:
            raise self._error
        return self._outcome


def _dispatcher_with(handler: Any, *, kind: CapabilityKind = CapabilityKind.TOOL) -> Dispatcher:
    registry = CapabilityRegistry()
    if kind is CapabilityKind.TOOL:
        registry.register_tool("subject", "테스트 대상이에요.", NAME_SCHEMA, handler)
    else:
        registry.register_prompt("subject", "테스트 대상이에요.", NAME_SCHEMA, handler)
    registry.freeze()
    return Dispatcher(registry)


@pytest.mark.asyncio
async def test_handler_is_not_invoked_for_invalid_arguments() -> None:
    handler = _RecordingHandler()
    dispatcher = _dispatcher_with(handler)

    with pytest.raises(ArgumentValidationError):
        await dispatcher.call_tool("subject", {"name": 123})
    assert handler.calls == []


@pytest.mark.asyncio
async def test_unknown_tool_raises_not_found() -> None:
    dispatcher = _dispatcher_with(_RecordingHandler())
    with pytest.raises(CapabilityNotFoundError):
        await dispatcher.call_tool("does_not_exist", {})


@pytest.mark.asyncio
async def test_handler_receives_validated_copy() -> None:
    handler = _RecordingHandler(outcome="안녕")
    dispatcher = _dispatcher_with(handler)

    result = await dispatcher.call_tool("subject", {"name": "Mina", "ignored": True})
    assert handler.calls == [{"name": "Mina"}]
    assert result.first_text == "안녕"
    assert not result.is_error


@pytest.mark.asyncio
async def test_unexpected_tool_exception_becomes_error_result() -> None:
    dispatcher = _dispatcher_with(_RecordingHandler(error=RuntimeError("boom")))

    result = await dispatcher.call_tool("subject", {"name": "Mina"})
    assert result.is_error
    assert result.first_text == UNEXPECTED_TOOL_FAILURE_TEXT


@pytest.mark.asyncio
async def test_tool_domain_error_keeps_its_message() -> None:
    dispatcher = _dispatcher_with(_RecordingHandler(error=UpstreamError("업스트림 오류예요.")))

    result = await dispatcher.call_tool("subject", {"name": "Mina"})
    assert result.is_error
    assert result.first_text == "업스트림 오류예요."


@pytest.mark.asyncio
async def test_dispatcher_keeps_serving_after_fault() -> None:
    registry = CapabilityRegistry()
    registry.register_tool("broken", "항상 실패해요.", NAME_SCHEMA, _RecordingHandler(error=KeyError("x")))
    registry.register_tool("healthy", "항상 성공해요.", NAME_SCHEMA, _RecordingHandler(outcome="ok"))
    registry.freeze()
    dispatcher = Dispatcher(registry)

    failed = await dispatcher.call_tool("broken", {"name": "a"})
    succeeded = await dispatcher.call_tool("healthy", {"name": "b"})
    assert failed.is_error
    assert succeeded.first_text == "ok"


@pytest.mark.asyncio
async def test_sync_handlers_are_supported() -> None:
    registry = CapabilityRegistry()
    registry.register_tool("sync", "동기 핸들러예요.", NAME_SCHEMA, lambda arguments: f"hi {arguments['name']}")
    registry.freeze()

    result = await Dispatcher(registry).call_tool("sync", {"name": "Mina"})
    assert result.first_text == "hi Mina"


@pytest.mark.asyncio
async def test_invalid_handler_return_type_is_a_fault() -> None:
    dispatcher = _dispatcher_with(_RecordingHandler(outcome=object()))

    result = await dispatcher.call_tool("subject", {"name": "Mina"})
    assert result.is_error


@pytest.mark.asyncio
async def test_prompt_fault_is_raised_as_capability_fault() -> None:
    dispatcher = _dispatcher_with(_RecordingHandler(error=RuntimeError("boom")), kind=CapabilityKind.PROMPT)

    with pytest.raises(CapabilityFaultError):
        await dispatcher.get_prompt("subject", {"name": "Mina"})


@pytest.mark.asyncio
async def test_dispatch_routes_by_kind() -> None:
    dispatcher = _dispatcher_with(_RecordingHandler(outcome="프롬프트예요"), kind=CapabilityKind.PROMPT)

    result = await dispatcher.dispatch(
        InvocationRequest(CapabilityKind.PROMPT, "subject", {"name": "Mina"}, request_id=7)
    )
    assert result.to_wire()["messages"][0]["content"]["text"] == "프롬프트예요"


@pytest.mark.asyncio
async def test_read_resource_calls_handler_each_time() -> None:
    calls: list[int] = []

    async def _read() -> dict[str, int]:
        calls.append(1)
        return {"reads": len(calls)}

    registry = CapabilityRegistry()
    registry.register_resource("counter", "mcp://counter", {"mimeType": "application/json"}, _read)
    registry.freeze()
    dispatcher = Dispatcher(registry)

    await dispatcher.read_resource("mcp://counter")
    second = await dispatcher.read_resource("mcp://counter")
    assert '"reads": 2' in second.contents[0].text
