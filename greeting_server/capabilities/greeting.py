"""사용자 이름과 언어를 받아 인사말을 만드는 도구예요."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from greeting_server.capabilities.base import BaseTool
from greeting_server.core.content import InvocationResult
from libs.common.errors import ConfigurationError

GREETING_TEMPLATES: dict[str, str] = {
    "korean": "안녕하세요, {name}님! 반갑습니다!",
    "english": "Hello, {name}! Nice to meet you!",
    "japanese": "こんにちは、{name}さん！お会いできて嬉しいです！",
    "spanish": "¡Hola, {name}! ¡Encantado de conocerte!",
    "french": "Bonjour, {name}! Ravi de vous rencontrer!",
    "chinese": "你好，{name}！很高兴见到你！",
}


class GreetingTool(BaseTool):
    """언어별 템플릿 표로 인사말을 만드는 도구예요.

    지원 언어는 `templates`의 키가 곧 스키마의 enum이 돼요. 언어를 추가하거나
    줄이려면 생성자에 다른 표를 넘기면 돼요.
    """

    def __init__(self, *, templates: Mapping[str, str] | None = None) -> None:
        table = dict(templates if templates is not None else GREETING_TEMPLATES)
        if not table:
            raise ConfigurationError("인사말 템플릿이 하나 이상 필요해요.")
        self._templates = table

    @property
    def name(self) -> str:
        return "greeting"

    @property
    def description(self) -> str:
        return "Greets a user in their preferred language with a personalized message"

    @property
    def languages(self) -> list[str]:
        return list(self._templates)

    @property
    def input_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "name": {"type": "string", "description": "User name to greet"},
                "language": {
                    "type": "string",
                    "enum": self.languages,
                    "description": "Language for the greeting",
                },
            },
            "required": ["name", "language"],
        }

    @property
    def metadata(self) -> dict[str, Any]:
        return {"description": "다국어 인사말 생성", "supportedLanguages": self.languages}

    async def execute(self, arguments: dict[str, Any]) -> InvocationResult:
        template = self._templates[arguments["language"]]
        return InvocationResult.text(template.format(name=arguments["name"]))
