"""서버가 노출하는 capability의 추상 기반 클래스예요.

새 도구를 추가하려면 `BaseTool`을 상속하고 `name`, `description`,
`input_schema`, `execute`를 구현한 뒤 `build_default_registry`에 등록하면 돼요.
프롬프트는 `BasePrompt`, 정적 리소스는 `BaseResource`를 같은 방식으로 써요.
"""

from __future__ import annotations

import abc
from typing import Any

from greeting_server.core.content import InvocationResult, PromptResult, ResourceResult
from greeting_server.core.registry import CapabilityRegistry


class BaseTool(abc.ABC):
    """모든 도구가 구현해야 하는 추상 클래스예요.

    `execute`는 이미 검증된 인자만 받아요. 예상 가능한 실패(0으로 나누기,
    잘못된 타임존 등)는 `InvocationResult.failure`를 반환하거나
    `DomainError`를 올려서 알려요.
    """

    @property
    @abc.abstractmethod
    def name(self) -> str:
        """도구의 고유 이름이에요. 클라이언트가 호출할 때 사용돼요."""

    @property
    @abc.abstractmethod
    def description(self) -> str:
        """도구가 무엇을 하는지 설명하는 문장이에요."""

    @property
    @abc.abstractmethod
    def input_schema(self) -> dict[str, Any]:
        """JSON Schema 부분집합 형식의 입력 파라미터 정의예요.

        예시::

            {
                "type": "object",
                "properties": {
                    "name": {"type": "string", "description": "인사할 사용자 이름이에요."},
                },
                "required": ["name"],
            }
        """

    @property
    def metadata(self) -> dict[str, Any]:
        """서버 정보 리소스에 노출할 부가 설명이에요."""
        return {}

    @abc.abstractmethod
    async def execute(self, arguments: dict[str, Any]) -> InvocationResult | str:
        """도구를 실행하고 결과를 반환해요."""

    def register(self, registry: CapabilityRegistry) -> None:
        registry.register_tool(
            self.name,
            self.description,
            self.input_schema,
            self.execute,
            metadata=self.metadata,
        )


class BasePrompt(abc.ABC):
    @property
    @abc.abstractmethod
    def name(self) -> str: ...

    @property
    @abc.abstractmethod
    def description(self) -> str: ...

    @property
    @abc.abstractmethod
    def input_schema(self) -> dict[str, Any]: ...

    @abc.abstractmethod
    async def render(self, arguments: dict[str, Any]) -> PromptResult | str:
        """인자로 템플릿을 채운 메시지를 반환해요."""

    def register(self, registry: CapabilityRegistry) -> None:
        registry.register_prompt(self.name, self.description, self.input_schema, self.render)


class BaseResource(abc.ABC):
    @property
    @abc.abstractmethod
    def name(self) -> str: ...

    @property
    @abc.abstractmethod
    def uri(self) -> str: ...

    @property
    @abc.abstractmethod
    def metadata(self) -> dict[str, Any]:
        """``name``, ``description``, ``mimeType`` 등을 담은 딕셔너리예요."""

    @abc.abstractmethod
    async def read(self) -> ResourceResult | dict[str, Any] | str | bytes:
        """읽을 때마다 새로 만든 스냅샷을 반환해요."""

    def register(self, registry: CapabilityRegistry) -> None:
        registry.register_resource(self.name, self.uri, self.metadata, self.read)
