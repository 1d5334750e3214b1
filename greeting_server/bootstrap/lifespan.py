from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from greeting_server.app.settings import Settings
from greeting_server.bootstrap.container import build_runtime_components


def create_lifespan(settings: Settings):
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        runtime = await build_runtime_components(settings)

        app.state.registry = runtime.registry
        app.state.dispatcher = runtime.dispatcher
        app.state.session = runtime.session
        app.state.settings = settings

        try:
            yield
        finally:
            app.state.session = None

    return lifespan
