from __future__ import annotations

from fastapi import FastAPI

from greeting_server.app.routes import router
from greeting_server.app.settings import Settings, load_settings
from greeting_server.bootstrap.lifespan import create_lifespan
from libs.common.http_handlers import register_exception_handlers


def create_app(settings: Settings | None = None) -> FastAPI:
    app_settings = settings or load_settings()
    app = FastAPI(
        title=app_settings.service_name,
        version=app_settings.service_version,
        lifespan=create_lifespan(app_settings),
    )
    app.include_router(router)
    register_exception_handlers(app, "greeting_server.errors")
    return app
