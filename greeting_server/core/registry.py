"""도구, 리소스, 프롬프트를 종류별로 등록하고 조회하는 레지스트리예요."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, KeysView, ValuesView
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

from greeting_server.core.errors import CapabilityNotFoundError, RegistrationError
from greeting_server.core.schema import EMPTY_OBJECT_SCHEMA, check_schema
from libs.common.logging import get_logger

logger = get_logger("greeting_server.registry")

CapabilityHandler = Callable[..., Union[Awaitable[object], object]]


class CapabilityKind(str, Enum):
    TOOL = "tool"
    RESOURCE = "resource"
    PROMPT = "prompt"


@dataclass(slots=True, frozen=True)
class CapabilityDescriptor:
    name: str
    kind: CapabilityKind
    description: str
    handler: CapabilityHandler
    input_schema: dict[str, Any] | None = None
    uri: str | None = None
    mime_type: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


class CapabilityRegistry:
    """capability를 (종류, 이름)으로 관리하는 중앙 레지스트리예요.

    시작 단계에서 모든 등록을 마친 뒤 `freeze()`를 호출하면 이후로는 읽기만
    가능해요. 디스패치가 등록과 경합하지 않으므로 잠금이 필요 없어요.

    사용법::

        registry = CapabilityRegistry()
        registry.register_tool("greeting", "인사말을 만들어요.", schema, handler)
        registry.freeze()

        descriptor = registry.resolve(CapabilityKind.TOOL, "greeting")
    """

    def __init__(self) -> None:
        self._entries: dict[CapabilityKind, dict[str, CapabilityDescriptor]] = {kind: {} for kind in CapabilityKind}
        self._resource_uris: dict[str, str] = {}
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        self._frozen = True
        logger.info(
            "registry_frozen",
            tools=len(self._entries[CapabilityKind.TOOL]),
            resources=len(self._entries[CapabilityKind.RESOURCE]),
            prompts=len(self._entries[CapabilityKind.PROMPT]),
        )

    def register(self, descriptor: CapabilityDescriptor) -> None:
        """descriptor를 등록해요. 같은 종류에 같은 이름이 있으면 `RegistrationError`예요."""
        if self._frozen:
            raise RegistrationError(f"레지스트리가 이미 고정돼서 {descriptor.name!r}을 등록할 수 없어요.")
        if not isinstance(descriptor.name, str) or not descriptor.name.strip():
            raise RegistrationError("capability 이름은 비어 있지 않은 문자열이어야 해요.")

        table = self._entries[descriptor.kind]
        if descriptor.name in table:
            raise RegistrationError(f"이미 등록된 {descriptor.kind.value} 이름이에요: {descriptor.name!r}")

        owner = f"{descriptor.kind.value} {descriptor.name!r}"
        if descriptor.input_schema is not None:
            check_schema(descriptor.input_schema, owner=owner)

        if descriptor.kind is CapabilityKind.RESOURCE:
            if not descriptor.uri:
                raise RegistrationError(f"{owner}: 리소스에는 uri가 필요해요.")
            if descriptor.uri in self._resource_uris:
                raise RegistrationError(f"{owner}: 이미 등록된 리소스 uri예요: {descriptor.uri}")
            self._resource_uris[descriptor.uri] = descriptor.name

        table[descriptor.name] = descriptor

    def register_tool(
        self,
        name: str,
        description: str,
        input_schema: dict[str, Any],
        handler: CapabilityHandler,
        *,
        metadata: dict[str, Any] | None = None,
    ) -> CapabilityDescriptor:
        descriptor = CapabilityDescriptor(
            name=name,
            kind=CapabilityKind.TOOL,
            description=description,
            handler=handler,
            input_schema=input_schema,
            metadata=dict(metadata or {}),
        )
        self.register(descriptor)
        return descriptor

    def register_resource(
        self,
        name: str,
        uri: str,
        metadata: dict[str, Any],
        handler: CapabilityHandler,
    ) -> CapabilityDescriptor:
        """정적 리소스를 등록해요.

        `metadata`의 ``description``과 ``mimeType`` 키는 목록 응답에 쓰이고,
        나머지 키는 그대로 descriptor에 보관돼요.
        """
        description = metadata.get("description")
        mime_type = metadata.get("mimeType")
        descriptor = CapabilityDescriptor(
            name=name,
            kind=CapabilityKind.RESOURCE,
            description=description if isinstance(description, str) else "",
            handler=handler,
            uri=uri,
            mime_type=mime_type if isinstance(mime_type, str) else None,
            metadata=dict(metadata),
        )
        self.register(descriptor)
        return descriptor

    def register_prompt(
        self,
        name: str,
        description: str,
        input_schema: dict[str, Any] | None,
        handler: CapabilityHandler,
    ) -> CapabilityDescriptor:
        descriptor = CapabilityDescriptor(
            name=name,
            kind=CapabilityKind.PROMPT,
            description=description,
            handler=handler,
            input_schema=input_schema if input_schema is not None else EMPTY_OBJECT_SCHEMA,
        )
        self.register(descriptor)
        return descriptor

    def resolve(self, kind: CapabilityKind, name: str) -> CapabilityDescriptor:
        descriptor = self._entries[kind].get(name)
        if descriptor is None:
            raise CapabilityNotFoundError(kind.value, name)
        return descriptor

    def resolve_resource_uri(self, uri: str) -> CapabilityDescriptor:
        name = self._resource_uris.get(uri)
        if name is None:
            raise CapabilityNotFoundError(CapabilityKind.RESOURCE.value, uri)
        return self._entries[CapabilityKind.RESOURCE][name]

    def names(self, kind: CapabilityKind) -> KeysView[str]:
        """등록 순서대로 이름을 돌려주는 뷰예요. 여러 번 순회해도 돼요."""
        return self._entries[kind].keys()

    def descriptors(self, kind: CapabilityKind) -> ValuesView[CapabilityDescriptor]:
        return self._entries[kind].values()

    def snapshot(self) -> dict[str, list[str]]:
        """현재 등록된 이름을 종류별로 묶은 새 딕셔너리예요."""
        return {
            "tools": list(self.names(CapabilityKind.TOOL)),
            "resources": list(self.names(CapabilityKind.RESOURCE)),
            "prompts": list(self.names(CapabilityKind.PROMPT)),
        }

    def __len__(self) -> int:
        return sum(len(table) for table in self._entries.values())

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, tuple) or len(key) != 2:
            return False
        kind, name = key
        return isinstance(kind, CapabilityKind) and name in self._entries[kind]
