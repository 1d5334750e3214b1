"""capability 등록과 디스패치 과정에서 발생하는 오류 타입이에요."""

from __future__ import annotations

from dataclasses import dataclass

from libs.common.errors import DomainError, NotFoundError, ValidationError


@dataclass(slots=True, frozen=True)
class FieldViolation:
    field: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"field": self.field, "message": self.message}


class RegistrationError(DomainError):
    """시작 단계에서만 발생하고, 발생하면 서버 기동을 중단해요."""

    def __init__(self, message: str) -> None:
        super().__init__("REGISTRATION_FAILED", message, retryable=False)


class CapabilityNotFoundError(NotFoundError):
    def __init__(self, kind: str, name: str) -> None:
        super().__init__(f"알 수 없는 capability예요: {kind} {name!r}")
        self.kind = kind
        self.name = name


class ArgumentValidationError(ValidationError):
    def __init__(self, capability_name: str, violations: list[FieldViolation]) -> None:
        detail = "; ".join(f"{v.field}: {v.message}" for v in violations)
        super().__init__(f"{capability_name}의 인자가 올바르지 않아요: {detail}")
        self.capability_name = capability_name
        self.violations = violations


class CapabilityFaultError(DomainError):
    """핸들러 안에서 처리되지 않은 예외가 디스패처 경계에서 잡혔어요."""

    def __init__(self, kind: str, name: str) -> None:
        super().__init__(
            "CAPABILITY_FAULT",
            f"{kind} {name!r} 실행 중 예상치 못한 오류가 발생했어요.",
            retryable=True,
        )
        self.kind = kind
        self.name = name


class TransportError(DomainError):
    def __init__(self, message: str) -> None:
        super().__init__("TRANSPORT_FAILED", message, retryable=False)
