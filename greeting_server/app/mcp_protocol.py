from __future__ import annotations

from enum import IntEnum
from typing import Any

from greeting_server.core.registry import CapabilityDescriptor
from greeting_server.core.schema import describe_prompt_arguments

JSONRPC_VERSION = "2.0"
MCP_PROTOCOL_VERSION = "2025-11-25"
SUPPORTED_PROTOCOL_VERSIONS = ("2025-11-25", "2025-06-18", "2025-03-26", "2024-11-05")


class ErrorCodes(IntEnum):
    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603
    RESOURCE_NOT_FOUND = -32002


class JsonRpcError(Exception):
    def __init__(self, code: int, message: str, data: Any | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.data = data

    def to_wire(self) -> dict[str, Any]:
        error: dict[str, Any] = {"code": int(self.code), "message": self.message}
        if self.data is not None:
            error["data"] = self.data
        return error


def success_response(request_id: Any, result: dict[str, Any]) -> dict[str, Any]:
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "result": result}


def error_response(request_id: Any, error: JsonRpcError) -> dict[str, Any]:
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "error": error.to_wire()}


def negotiate_protocol_version(requested: object) -> str:
    if isinstance(requested, str) and requested in SUPPORTED_PROTOCOL_VERSIONS:
        return requested
    return MCP_PROTOCOL_VERSION


def tool_to_wire(descriptor: CapabilityDescriptor) -> dict[str, Any]:
    return {
        "name": descriptor.name,
        "description": descriptor.description,
        "inputSchema": descriptor.input_schema or {"type": "object", "properties": {}},
    }


def prompt_to_wire(descriptor: CapabilityDescriptor) -> dict[str, Any]:
    return {
        "name": descriptor.name,
        "description": descriptor.description,
        "arguments": describe_prompt_arguments(descriptor.input_schema or {}),
    }


def resource_to_wire(descriptor: CapabilityDescriptor) -> dict[str, Any]:
    item: dict[str, Any] = {"uri": descriptor.uri, "name": descriptor.name}
    title = descriptor.metadata.get("name")
    if isinstance(title, str):
        item["title"] = title
    if descriptor.description:
        item["description"] = descriptor.description
    if descriptor.mime_type:
        item["mimeType"] = descriptor.mime_type
    return item
