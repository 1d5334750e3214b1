from __future__ import annotations

from greeting_server.bootstrap.container import RuntimeComponents, build_runtime_components
from greeting_server.bootstrap.lifespan import create_lifespan

__all__ = [
    "RuntimeComponents",
    "build_runtime_components",
    "create_lifespan",
]
