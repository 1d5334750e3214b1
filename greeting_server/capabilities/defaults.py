"""기본 capability를 모두 등록한 레지스트리를 만드는 팩토리예요."""

from __future__ import annotations

from greeting_server.app.settings import Settings
from greeting_server.capabilities.calculator import CalculatorTool
from greeting_server.capabilities.clock import TimeTool
from greeting_server.capabilities.code_review import CodeReviewPrompt
from greeting_server.capabilities.greeting import GREETING_TEMPLATES, GreetingTool
from greeting_server.capabilities.image import ImageGenerationTool
from greeting_server.capabilities.server_info import ServerInfoResource
from greeting_server.core.registry import CapabilityRegistry
from libs.common.errors import ConfigurationError


def build_default_registry(settings: Settings, *, freeze: bool = True) -> CapabilityRegistry:
    """도구 4개, 프롬프트 1개, 리소스 1개가 등록된 레지스트리를 만들어요.

    Args:
        settings: 토큰, 모델, 기본 타임존 등을 담은 설정이에요.
        freeze: True면 반환하기 전에 레지스트리를 고정해요.

    Returns:
        등록이 끝난 `CapabilityRegistry` 인스턴스예요.
    """
    registry = CapabilityRegistry()

    GreetingTool(templates=_select_greetings(settings.greeting_languages)).register(registry)
    CalculatorTool().register(registry)
    TimeTool(default_timezone=settings.default_timezone).register(registry)
    ImageGenerationTool(
        token=settings.hf_token,
        model=settings.image_model,
        base_url=settings.image_inference_base_url,
        inference_steps=settings.image_inference_steps,
        timeout_seconds=settings.image_timeout_seconds,
        retries=settings.image_retries,
        retry_base_delay_seconds=settings.image_retry_base_delay_seconds,
    ).register(registry)

    CodeReviewPrompt().register(registry)

    # 서버 정보 리소스는 레지스트리 자신을 읽어요.
    ServerInfoResource(
        registry=registry,
        server_name=settings.service_name,
        server_version=settings.service_version,
        server_description=settings.service_description,
        author=settings.service_author,
    ).register(registry)

    if freeze:
        registry.freeze()
    return registry


def _select_greetings(languages: list[str]) -> dict[str, str]:
    if not languages:
        return dict(GREETING_TEMPLATES)
    unknown = [language for language in languages if language not in GREETING_TEMPLATES]
    if unknown:
        known_text = ", ".join(GREETING_TEMPLATES)
        raise ConfigurationError(f"알 수 없는 인사말 언어가 설정됐어요: {', '.join(unknown)}. 지원 목록: {known_text}")
    return {language: GREETING_TEMPLATES[language] for language in languages}
