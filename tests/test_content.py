from __future__ import annotations

import base64
import json

import pytest

from greeting_server.core.content import (
    BinaryContent,
    InvocationResult,
    PromptMessage,
    PromptResult,
    TextContent,
    normalize_failure,
    normalize_prompt_result,
    normalize_resource_result,
    normalize_tool_result,
)
from libs.common.errors import UpstreamError


def test_string_result_becomes_single_text_block() -> None:
    result = normalize_tool_result("안녕하세요")
    assert result.to_wire() == {"content": [{"type": "text", "text": "안녕하세요"}], "isError": False}


def test_binary_image_block_is_base64_encoded() -> None:
    result = InvocationResult.binary(b"\x89PNG", "image/png", meta={"annotations": {"priority": 0.9}})
    wire = result.to_wire()

    assert wire["content"] == [
        {"type": "image", "data": base64.b64encode(b"\x89PNG").decode("ascii"), "mimeType": "image/png"}
    ]
    assert wire["_meta"] == {"annotations": {"priority": 0.9}}


def test_non_media_binary_becomes_embedded_resource() -> None:
    block = BinaryContent(data=b"%PDF", mime_type="application/pdf")
    wire = block.to_wire()
    assert wire["type"] == "resource"
    assert wire["resource"]["mimeType"] == "application/pdf"


def test_binary_content_requires_mime_type() -> None:
    with pytest.raises(ValueError):
        BinaryContent(data=b"data", mime_type="png")


def test_block_list_keeps_order() -> None:
    result = normalize_tool_result([TextContent("설명"), BinaryContent(b"x", "image/png")])
    assert [block.to_wire()["type"] for block in result.content] == ["text", "image"]


def test_unknown_result_type_is_rejected() -> None:
    with pytest.raises(TypeError):
        normalize_tool_result(42)


def test_error_result_requires_text_block() -> None:
    with pytest.raises(ValueError):
        InvocationResult(content=[BinaryContent(b"x", "image/png")], is_error=True)
    with pytest.raises(ValueError):
        InvocationResult(content=[])


def test_domain_error_message_becomes_failure_text() -> None:
    result = normalize_failure(UpstreamError("업스트림이 거절했어요."))
    assert result.is_error
    assert result.first_text == "업스트림이 거절했어요."


def test_prompt_result_keeps_description() -> None:
    result = normalize_prompt_result("리뷰해주세요", description="코드 리뷰")
    assert isinstance(result, PromptResult)
    assert result.to_wire() == {
        "messages": [{"role": "user", "content": {"type": "text", "text": "리뷰해주세요"}}],
        "description": "코드 리뷰",
    }


def test_resource_dict_is_serialized_as_json_text() -> None:
    result = normalize_resource_result({"name": "서버"}, uri="mcp://server/info", mime_type=None)
    item = result.to_wire()["contents"][0]
    assert item["uri"] == "mcp://server/info"
    assert item["mimeType"] == "application/json"
    assert json.loads(item["text"]) == {"name": "서버"}


def test_prompt_result_from_handler_is_not_modified() -> None:
    returned = PromptResult(messages=[PromptMessage(role="user", text="리뷰해주세요")])

    result = normalize_prompt_result(returned, description="코드 리뷰")
    assert returned.description is None
    assert result is not returned
    assert result.description == "코드 리뷰"
    assert result.messages == returned.messages
