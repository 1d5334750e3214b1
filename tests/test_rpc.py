from __future__ import annotations

import json

import pytest

from greeting_server.app.mcp_protocol import MCP_PROTOCOL_VERSION, ErrorCodes
from greeting_server.app.rpc import JsonRpcSession

from tests.conftest import rpc_request


@pytest.mark.asyncio
async def test_initialize_negotiates_protocol_version(session: JsonRpcSession) -> None:
    response = await session.handle(
        rpc_request(
            1,
            "initialize",
            {"protocolVersion": "2025-06-18", "clientInfo": {"name": "tester", "version": "0.1"}},
        )
    )
    assert response is not None
    result = response["result"]
    assert result["protocolVersion"] == "2025-06-18"
    assert result["serverInfo"] == {"name": "greeting-server", "version": "1.0.0"}
    assert set(result["capabilities"]) == {"tools", "resources", "prompts"}
    assert session.client_info == {"name": "tester", "version": "0.1"}


@pytest.mark.asyncio
async def test_initialize_falls_back_to_latest_version(session: JsonRpcSession) -> None:
    response = await session.handle(rpc_request(1, "initialize", {"protocolVersion": "1999-01-01"}))
    assert response is not None
    assert response["result"]["protocolVersion"] == MCP_PROTOCOL_VERSION


@pytest.mark.asyncio
async def test_list_methods_describe_registered_capabilities(session: JsonRpcSession) -> None:
    tools = await session.handle(rpc_request(1, "tools/list"))
    prompts = await session.handle(rpc_request(2, "prompts/list"))
    resources = await session.handle(rpc_request(3, "resources/list"))
    assert tools is not None and prompts is not None and resources is not None

    assert [tool["name"] for tool in tools["result"]["tools"]] == ["greeting", "calculator", "time", "generate_image"]
    assert tools["result"]["tools"][0]["inputSchema"]["required"] == ["name", "language"]
    assert prompts["result"]["prompts"][0]["arguments"][0] == {
        "name": "code",
        "required": True,
        "description": "Code to review",
    }
    assert resources["result"]["resources"] == [
        {
            "uri": "mcp://server/info",
            "name": "server-info",
            "title": "MCP 서버 정보",
            "description": "현재 MCP 서버의 정보를 반환합니다",
            "mimeType": "application/json",
        }
    ]


@pytest.mark.asyncio
async def test_tools_call_returns_content(session: JsonRpcSession) -> None:
    response = await session.handle(
        rpc_request("call-1", "tools/call", {"name": "greeting", "arguments": {"name": "Mina", "language": "korean"}})
    )
    assert response == {
        "jsonrpc": "2.0",
        "id": "call-1",
        "result": {"content": [{"type": "text", "text": "안녕하세요, Mina님! 반갑습니다!"}], "isError": False},
    }


@pytest.mark.asyncio
async def test_tool_failure_is_result_not_protocol_error(session: JsonRpcSession) -> None:
    response = await session.handle(
        rpc_request(4, "tools/call", {"name": "calculator", "arguments": {"num1": 10, "num2": 0, "operator": "/"}})
    )
    assert response is not None
    assert "error" not in response
    assert response["result"]["isError"] is True


@pytest.mark.asyncio
async def test_unknown_tool_does_not_affect_later_requests(session: JsonRpcSession) -> None:
    missing = await session.handle(rpc_request(5, "tools/call", {"name": "does_not_exist", "arguments": {}}))
    assert missing is not None
    assert missing["error"]["code"] == ErrorCodes.INVALID_PARAMS
    assert missing["error"]["data"] == {"kind": "tool", "name": "does_not_exist"}

    later = await session.handle(
        rpc_request(6, "tools/call", {"name": "calculator", "arguments": {"num1": 6, "num2": 7, "operator": "*"}})
    )
    assert later is not None
    assert later["result"]["content"][0]["text"].startswith("6 * 7 = 42")


@pytest.mark.asyncio
async def test_invalid_arguments_report_violations(session: JsonRpcSession) -> None:
    response = await session.handle(
        rpc_request(7, "tools/call", {"name": "calculator", "arguments": {"num1": "10", "operator": "/"}})
    )
    assert response is not None
    error = response["error"]
    assert error["code"] == ErrorCodes.INVALID_PARAMS
    assert {violation["field"] for violation in error["data"]["violations"]} == {"num1", "num2"}


@pytest.mark.asyncio
async def test_read_resource(session: JsonRpcSession) -> None:
    response = await session.handle(rpc_request(8, "resources/read", {"uri": "mcp://server/info"}))
    assert response is not None
    item = response["result"]["contents"][0]
    assert item["mimeType"] == "application/json"
    assert json.loads(item["text"])["capabilities"]["prompts"] == ["code_review"]


@pytest.mark.asyncio
async def test_unknown_resource_uses_resource_not_found_code(session: JsonRpcSession) -> None:
    response = await session.handle(rpc_request(9, "resources/read", {"uri": "mcp://server/missing"}))
    assert response is not None
    assert response["error"]["code"] == ErrorCodes.RESOURCE_NOT_FOUND


@pytest.mark.asyncio
async def test_get_prompt(session: JsonRpcSession) -> None:
    response = await session.handle(
        rpc_request(10, "prompts/get", {"name": "code_review", "arguments": {"code": "x = 1"}})
    )
    assert response is not None
    message = response["result"]["messages"][0]
    assert message["role"] == "user"
    assert "```\nx = 1\n```" in message["content"]["text"]


@pytest.mark.asyncio
async def test_unknown_method(session: JsonRpcSession) -> None:
    response = await session.handle(rpc_request(11, "sampling/createMessage"))
    assert response is not None
    assert response["error"]["code"] == ErrorCodes.METHOD_NOT_FOUND


@pytest.mark.asyncio
async def test_missing_tool_name_is_invalid_params(session: JsonRpcSession) -> None:
    response = await session.handle(rpc_request(12, "tools/call", {"arguments": {}}))
    assert response is not None
    assert response["error"]["code"] == ErrorCodes.INVALID_PARAMS


@pytest.mark.asyncio
async def test_malformed_messages_are_invalid_requests(session: JsonRpcSession) -> None:
    not_object = await session.handle(["tools/list"])
    wrong_version = await session.handle({"jsonrpc": "1.0", "id": 1, "method": "ping"})
    bad_params = await session.handle({"jsonrpc": "2.0", "id": 2, "method": "ping", "params": [1]})

    assert not_object is not None and not_object["error"]["code"] == ErrorCodes.INVALID_REQUEST
    assert wrong_version is not None and wrong_version["error"]["code"] == ErrorCodes.INVALID_REQUEST
    assert bad_params is not None and bad_params["error"]["code"] == ErrorCodes.INVALID_PARAMS


@pytest.mark.asyncio
async def test_notifications_and_client_responses_get_no_reply(session: JsonRpcSession) -> None:
    assert await session.handle({"jsonrpc": "2.0", "method": "notifications/initialized"}) is None
    assert await session.handle({"jsonrpc": "2.0", "id": 99, "result": {}}) is None


@pytest.mark.asyncio
async def test_ping(session: JsonRpcSession) -> None:
    assert await session.handle(rpc_request(13, "ping")) == {"jsonrpc": "2.0", "id": 13, "result": {}}
