"""핸들러 반환값을 MCP 콘텐츠 모델로 정규화하는 모듈이에요.

도구 결과는 항상 `InvocationResult` 하나로 모여요. 실패도 예외가 아니라
``is_error=True``와 사람이 읽을 수 있는 텍스트 블록으로 표현해요.
"""

from __future__ import annotations

import base64
import json
from dataclasses import dataclass, field
from typing import Any, Union

from libs.common.errors import DomainError


@dataclass(slots=True, frozen=True)
class TextContent:
    text: str

    def to_wire(self) -> dict[str, Any]:
        return {"type": "text", "text": self.text}


@dataclass(slots=True, frozen=True)
class BinaryContent:
    """이미 인코딩된 바이트와 그 MIME 타입이에요. 변환은 하지 않아요."""

    data: bytes
    mime_type: str

    def __post_init__(self) -> None:
        if not isinstance(self.data, (bytes, bytearray)):
            raise TypeError("BinaryContent.data는 bytes여야 해요.")
        if "/" not in self.mime_type:
            raise ValueError(f"MIME 타입이 올바르지 않아요: {self.mime_type!r}")

    def to_wire(self) -> dict[str, Any]:
        encoded = base64.b64encode(self.data).decode("ascii")
        major = self.mime_type.split("/", 1)[0]
        if major in ("image", "audio"):
            return {"type": major, "data": encoded, "mimeType": self.mime_type}
        return {
            "type": "resource",
            "resource": {"uri": "blob:inline", "mimeType": self.mime_type, "blob": encoded},
        }


ContentBlock = Union[TextContent, BinaryContent]


@dataclass(slots=True)
class InvocationResult:
    content: list[ContentBlock]
    is_error: bool = False
    meta: dict[str, Any] | None = None

    def __post_init__(self) -> None:
        if not self.content:
            raise ValueError("InvocationResult에는 콘텐츠 블록이 하나 이상 있어야 해요.")
        if self.is_error and not any(isinstance(block, TextContent) for block in self.content):
            raise ValueError("오류 결과에는 설명 텍스트 블록이 있어야 해요.")

    @classmethod
    def text(cls, text: str, *, meta: dict[str, Any] | None = None) -> "InvocationResult":
        return cls(content=[TextContent(text)], meta=meta)

    @classmethod
    def binary(cls, data: bytes, mime_type: str, *, meta: dict[str, Any] | None = None) -> "InvocationResult":
        return cls(content=[BinaryContent(data=data, mime_type=mime_type)], meta=meta)

    @classmethod
    def failure(cls, message: str) -> "InvocationResult":
        return cls(content=[TextContent(message)], is_error=True)

    @property
    def first_text(self) -> str:
        for block in self.content:
            if isinstance(block, TextContent):
                return block.text
        return ""

    def to_wire(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "content": [block.to_wire() for block in self.content],
            "isError": self.is_error,
        }
        if self.meta:
            payload["_meta"] = self.meta
        return payload


@dataclass(slots=True, frozen=True)
class PromptMessage:
    role: str
    text: str

    def to_wire(self) -> dict[str, Any]:
        return {"role": self.role, "content": {"type": "text", "text": self.text}}


@dataclass(slots=True)
class PromptResult:
    messages: list[PromptMessage]
    description: str | None = None

    def to_wire(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"messages": [message.to_wire() for message in self.messages]}
        if self.description:
            payload["description"] = self.description
        return payload


@dataclass(slots=True, frozen=True)
class ResourceContents:
    uri: str
    mime_type: str | None
    text: str | None = None
    blob: bytes | None = None

    def to_wire(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"uri": self.uri}
        if self.mime_type:
            payload["mimeType"] = self.mime_type
        if self.blob is not None:
            payload["blob"] = base64.b64encode(self.blob).decode("ascii")
        else:
            payload["text"] = self.text or ""
        return payload


@dataclass(slots=True)
class ResourceResult:
    contents: list[ResourceContents] = field(default_factory=list)

    def to_wire(self) -> dict[str, Any]:
        return {"contents": [item.to_wire() for item in self.contents]}


def normalize_tool_result(raw: object) -> InvocationResult:
    """도구 핸들러 반환값을 `InvocationResult`로 바꿔요.

    알 수 없는 타입은 프로그래밍 오류라서 `TypeError`를 올려요.
    디스패처가 이 예외를 잡아 capability 오류로 처리해요.
    """
    if isinstance(raw, InvocationResult):
        return raw
    if isinstance(raw, str):
        return InvocationResult.text(raw)
    if isinstance(raw, (TextContent, BinaryContent)):
        return InvocationResult(content=[raw])
    if isinstance(raw, list) and raw and all(isinstance(item, (TextContent, BinaryContent)) for item in raw):
        return InvocationResult(content=list(raw))
    raise TypeError(f"도구 결과 타입을 정규화할 수 없어요: {type(raw).__name__}")


def normalize_failure(exc: DomainError) -> InvocationResult:
    """도메인 오류를 그 오류의 메시지 그대로 오류 결과로 바꿔요."""
    return InvocationResult.failure(exc.message)


def normalize_prompt_result(raw: object, *, description: str | None) -> PromptResult:
    if isinstance(raw, PromptResult):
        if raw.description is not None:
            return raw
        return PromptResult(messages=list(raw.messages), description=description)
    if isinstance(raw, str):
        return PromptResult(messages=[PromptMessage(role="user", text=raw)], description=description)
    if isinstance(raw, list) and all(isinstance(item, PromptMessage) for item in raw):
        return PromptResult(messages=list(raw), description=description)
    raise TypeError(f"프롬프트 결과 타입을 정규화할 수 없어요: {type(raw).__name__}")


def normalize_resource_result(raw: object, *, uri: str, mime_type: str | None) -> ResourceResult:
    if isinstance(raw, ResourceResult):
        return raw
    if isinstance(raw, str):
        return ResourceResult(contents=[ResourceContents(uri=uri, mime_type=mime_type, text=raw)])
    if isinstance(raw, (bytes, bytearray)):
        return ResourceResult(contents=[ResourceContents(uri=uri, mime_type=mime_type, blob=bytes(raw))])
    if isinstance(raw, (dict, list)):
        text = json.dumps(raw, ensure_ascii=False, indent=2)
        return ResourceResult(
            contents=[ResourceContents(uri=uri, mime_type=mime_type or "application/json", text=text)]
        )
    raise TypeError(f"리소스 결과 타입을 정규화할 수 없어요: {type(raw).__name__}")
