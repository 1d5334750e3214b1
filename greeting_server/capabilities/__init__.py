from greeting_server.capabilities.base import BasePrompt, BaseResource, BaseTool
from greeting_server.capabilities.defaults import build_default_registry

__all__ = [
    "BasePrompt",
    "BaseResource",
    "BaseTool",
    "build_default_registry",
]
