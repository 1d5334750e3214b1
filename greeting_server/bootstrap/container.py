from __future__ import annotations

from dataclasses import dataclass

from greeting_server.app.rpc import JsonRpcSession
from greeting_server.app.settings import Settings
from greeting_server.capabilities.defaults import build_default_registry
from greeting_server.core.dispatcher import Dispatcher
from greeting_server.core.registry import CapabilityRegistry
from libs.common.logging import get_logger

logger = get_logger("greeting_server.bootstrap")

SERVER_INSTRUCTIONS = "인사말, 계산, 시간 조회, 이미지 생성 도구와 코드 리뷰 프롬프트를 제공해요."


@dataclass(slots=True)
class RuntimeComponents:
    registry: CapabilityRegistry
    dispatcher: Dispatcher
    session: JsonRpcSession


async def build_runtime_components(settings: Settings) -> RuntimeComponents:
    """등록을 끝내고 고정한 레지스트리 위에 디스패처와 세션을 올려요.

    등록 단계에서 잘못된 정의가 있으면 `DomainError`가 그대로 올라가요.
    이 경우 서버는 요청을 받기 전에 종료돼야 해요.
    """
    registry = build_default_registry(settings)
    dispatcher = Dispatcher(registry)
    session = JsonRpcSession(
        dispatcher,
        server_name=settings.service_name,
        server_version=settings.service_version,
        instructions=SERVER_INSTRUCTIONS,
    )
    logger.info(
        "runtime_ready",
        transport=settings.transport,
        **registry.snapshot(),
    )
    return RuntimeComponents(registry=registry, dispatcher=dispatcher, session=session)
