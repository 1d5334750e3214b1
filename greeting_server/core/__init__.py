from greeting_server.core.content import (
    BinaryContent,
    InvocationResult,
    PromptMessage,
    PromptResult,
    ResourceContents,
    ResourceResult,
    TextContent,
)
from greeting_server.core.dispatcher import Dispatcher, InvocationRequest
from greeting_server.core.registry import CapabilityDescriptor, CapabilityKind, CapabilityRegistry

__all__ = [
    "BinaryContent",
    "CapabilityDescriptor",
    "CapabilityKind",
    "CapabilityRegistry",
    "Dispatcher",
    "InvocationRequest",
    "InvocationResult",
    "PromptMessage",
    "PromptResult",
    "ResourceContents",
    "ResourceResult",
    "TextContent",
]
