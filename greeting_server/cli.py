from __future__ import annotations

import asyncio
import sys

import uvicorn
from pydantic import ValidationError as SettingsValidationError

from greeting_server.app.settings import Settings, load_settings
from greeting_server.app.stdio import StdioTransport
from greeting_server.bootstrap.container import build_runtime_components
from greeting_server.capabilities.defaults import build_default_registry
from libs.common.errors import DomainError
from libs.common.logging import configure_logging, get_logger

EXIT_STARTUP_FAILURE = 1

logger = get_logger("greeting_server.cli")


async def _serve_stdio(settings: Settings) -> None:
    runtime = await build_runtime_components(settings)
    await StdioTransport(runtime.session).serve()


def _run_http(settings: Settings, *, reload_enabled: bool) -> None:
    uvicorn.run(
        "greeting_server.app.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=reload_enabled,
        log_level=settings.log_level.lower(),
    )


def _run(*, reload_enabled: bool) -> int:
    try:
        settings = load_settings()
    except SettingsValidationError as exc:
        configure_logging()
        logger.error("settings_invalid", error=str(exc))
        return EXIT_STARTUP_FAILURE

    configure_logging(settings.log_level)
    logger.info("server_starting", transport=settings.transport, version=settings.service_version)

    try:
        if settings.transport == "http":
            # 워커가 뜨기 전에 등록 오류를 먼저 확인해요.
            build_default_registry(settings)
            _run_http(settings, reload_enabled=reload_enabled)
        else:
            asyncio.run(_serve_stdio(settings))
    except DomainError as exc:
        # 등록 실패나 stdin 연결 실패는 요청을 받기 전에 종료해요.
        logger.error("server_start_failed", error_code=exc.error_code, error=exc.message)
        return EXIT_STARTUP_FAILURE
    except KeyboardInterrupt:
        logger.info("server_interrupted")
    return 0


def main() -> None:
    sys.exit(_run(reload_enabled=False))


def main_dev() -> None:
    sys.exit(_run(reload_enabled=True))
