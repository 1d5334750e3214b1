"""요청 하나를 조회 → 검증 → 실행 → 정규화까지 끝내는 디스패처예요."""

from __future__ import annotations

import inspect
import time
from dataclasses import dataclass, field
from typing import Any, Union

import structlog

from greeting_server.core.content import (
    InvocationResult,
    PromptResult,
    ResourceResult,
    normalize_failure,
    normalize_prompt_result,
    normalize_resource_result,
    normalize_tool_result,
)
from greeting_server.core.errors import CapabilityFaultError
from greeting_server.core.registry import CapabilityDescriptor, CapabilityKind, CapabilityRegistry
from greeting_server.core.schema import EMPTY_OBJECT_SCHEMA, validate_arguments
from libs.common.errors import DomainError
from libs.common.logging import get_logger

logger = get_logger("greeting_server.dispatcher")

UNEXPECTED_TOOL_FAILURE_TEXT = "도구 실행 중 예상치 못한 오류가 발생했어요."

DispatchResult = Union[InvocationResult, PromptResult, ResourceResult]


@dataclass(slots=True)
class InvocationRequest:
    kind: CapabilityKind
    capability_name: str
    arguments: object = field(default_factory=dict)
    request_id: str | int | None = None


class Dispatcher:
    """레지스트리에 등록된 capability를 실행해요.

    조회 실패(`CapabilityNotFoundError`)와 검증 실패(`ArgumentValidationError`)는
    프로토콜 오류로 전달되도록 그대로 올려요. 핸들러 안의 실패는 이 경계에서
    모두 잡아서, 요청 하나가 서버 전체나 다른 요청에 영향을 주지 않게 해요.

    - 도구: 도메인 오류와 예상치 못한 예외 모두 ``is_error=True`` 결과가 돼요.
    - 프롬프트/리소스: 도메인 오류는 그대로, 예상치 못한 예외는
      `CapabilityFaultError`로 바꿔서 올려요.
    """

    def __init__(self, registry: CapabilityRegistry) -> None:
        self._registry = registry

    @property
    def registry(self) -> CapabilityRegistry:
        return self._registry

    async def dispatch(self, request: InvocationRequest) -> DispatchResult:
        with _request_context(request):
            if request.kind is CapabilityKind.TOOL:
                return await self._dispatch_tool(request)
            if request.kind is CapabilityKind.PROMPT:
                return await self._dispatch_prompt(request)
            return await self._dispatch_resource(request)

    async def call_tool(
        self,
        name: str,
        arguments: object = None,
        *,
        request_id: str | int | None = None,
    ) -> InvocationResult:
        request = InvocationRequest(
            CapabilityKind.TOOL, name, arguments if arguments is not None else {}, request_id
        )
        with _request_context(request):
            return await self._dispatch_tool(request)

    async def get_prompt(
        self,
        name: str,
        arguments: object = None,
        *,
        request_id: str | int | None = None,
    ) -> PromptResult:
        request = InvocationRequest(
            CapabilityKind.PROMPT, name, arguments if arguments is not None else {}, request_id
        )
        with _request_context(request):
            return await self._dispatch_prompt(request)

    async def read_resource(self, uri: str, *, request_id: str | int | None = None) -> ResourceResult:
        request = InvocationRequest(CapabilityKind.RESOURCE, uri, {}, request_id)
        with _request_context(request):
            return await self._dispatch_resource(request)

    async def _dispatch_tool(self, request: InvocationRequest) -> InvocationResult:
        descriptor = self._resolve(request)
        arguments = self._validate(descriptor, request.arguments)

        started = time.perf_counter()
        try:
            raw = await _invoke(descriptor, arguments)
            result = normalize_tool_result(raw)
        except DomainError as exc:
            logger.info(
                "capability_domain_error",
                error_code=exc.error_code,
                retryable=exc.retryable,
                error=exc.message,
            )
            return normalize_failure(exc)
        except Exception as exc:
            logger.exception("capability_fault", error=str(exc))
            return InvocationResult.failure(UNEXPECTED_TOOL_FAILURE_TEXT)

        logger.info(
            "capability_dispatched",
            is_error=result.is_error,
            elapsed_ms=round((time.perf_counter() - started) * 1000, 2),
        )
        return result

    async def _dispatch_prompt(self, request: InvocationRequest) -> PromptResult:
        descriptor = self._resolve(request)
        arguments = self._validate(descriptor, request.arguments)
        try:
            raw = await _invoke(descriptor, arguments)
            result = normalize_prompt_result(raw, description=descriptor.description or None)
        except DomainError:
            raise
        except Exception as exc:
            logger.exception("capability_fault", error=str(exc))
            raise CapabilityFaultError(descriptor.kind.value, descriptor.name) from exc
        logger.info("capability_dispatched", messages=len(result.messages))
        return result

    async def _dispatch_resource(self, request: InvocationRequest) -> ResourceResult:
        # 리소스는 고정 식별자로만 접근하므로 인자 검증 단계가 없어요.
        try:
            descriptor = self._registry.resolve_resource_uri(request.capability_name)
        except DomainError as exc:
            logger.info("capability_not_found", error=exc.message)
            raise
        try:
            raw = await _invoke(descriptor, None)
            result = normalize_resource_result(
                raw,
                uri=descriptor.uri or request.capability_name,
                mime_type=descriptor.mime_type,
            )
        except DomainError:
            raise
        except Exception as exc:
            logger.exception("capability_fault", error=str(exc))
            raise CapabilityFaultError(descriptor.kind.value, descriptor.name) from exc
        logger.info("capability_dispatched", contents=len(result.contents))
        return result

    def _resolve(self, request: InvocationRequest) -> CapabilityDescriptor:
        try:
            return self._registry.resolve(request.kind, request.capability_name)
        except DomainError as exc:
            logger.info("capability_not_found", error=exc.message)
            raise

    def _validate(self, descriptor: CapabilityDescriptor, arguments: object) -> dict[str, Any]:
        if descriptor.input_schema is None and isinstance(arguments, dict):
            return dict(arguments)
        try:
            return validate_arguments(
                descriptor.input_schema or EMPTY_OBJECT_SCHEMA,
                arguments,
                capability_name=descriptor.name,
            )
        except DomainError as exc:
            logger.info("capability_invalid_arguments", error=exc.message)
            raise


async def _invoke(descriptor: CapabilityDescriptor, arguments: dict[str, Any] | None) -> object:
    outcome = descriptor.handler() if arguments is None else descriptor.handler(arguments)
    if inspect.isawaitable(outcome):
        return await outcome
    return outcome


def _request_context(request: InvocationRequest):
    return structlog.contextvars.bound_contextvars(
        request_id=request.request_id,
        capability_kind=request.kind.value,
        capability=request.capability_name,
    )
