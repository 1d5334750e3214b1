"""capability 입력 스키마를 선언하고 검증하는 모듈이에요.

스키마는 JSON Schema의 작은 부분집합을 그대로 딕셔너리로 표현해요::

    {
        "type": "object",
        "properties": {
            "num1": {"type": "number", "description": "첫 번째 숫자예요."},
            "operator": {"type": "string", "enum": ["+", "-", "*", "/"]},
            "timezone": {"type": "string", "default": "Asia/Seoul"},
        },
        "required": ["num1", "operator"],
    }

`check_schema`는 등록 시점에 선언 자체가 올바른지 확인하고,
`validate_arguments`는 요청마다 인자를 검사해서 필드가 채워진 새 딕셔너리를
돌려주거나 위반 목록을 담은 `ArgumentValidationError`를 올려요.
암묵적인 형 변환은 하지 않아요. 문자열 ``"10"``은 number가 아니에요.
"""

from __future__ import annotations

import math
from typing import Any

from greeting_server.core.errors import ArgumentValidationError, FieldViolation, RegistrationError

SUPPORTED_TYPES = frozenset({"string", "number", "integer", "boolean", "array", "object"})

EMPTY_OBJECT_SCHEMA: dict[str, Any] = {"type": "object", "properties": {}}


def check_schema(schema: dict[str, Any], *, owner: str) -> None:
    """선언된 스키마가 검증기로 해석 가능한지 확인해요. 실패하면 `RegistrationError`예요."""
    if not isinstance(schema, dict) or schema.get("type") != "object":
        raise RegistrationError(f"{owner}: 입력 스키마의 최상위 type은 object여야 해요.")

    properties = schema.get("properties", {})
    if not isinstance(properties, dict):
        raise RegistrationError(f"{owner}: properties는 딕셔너리여야 해요.")

    for field_name, field_schema in properties.items():
        if not isinstance(field_schema, dict):
            raise RegistrationError(f"{owner}: {field_name} 필드 선언이 딕셔너리가 아니에요.")
        field_type = field_schema.get("type")
        if field_type not in SUPPORTED_TYPES:
            raise RegistrationError(f"{owner}: {field_name} 필드의 type {field_type!r}은 지원하지 않아요.")
        if "enum" in field_schema:
            choices = field_schema["enum"]
            if not isinstance(choices, list) or not choices:
                raise RegistrationError(f"{owner}: {field_name} 필드의 enum은 비어 있지 않은 리스트여야 해요.")
            for choice in choices:
                if _type_error(choice, field_type) is not None:
                    raise RegistrationError(f"{owner}: {field_name} 필드의 enum 값 {choice!r}이 type과 맞지 않아요.")
        if "default" in field_schema and _check_value(field_schema["default"], field_schema) is not None:
            raise RegistrationError(f"{owner}: {field_name} 필드의 default가 선언과 맞지 않아요.")

    required = schema.get("required", [])
    if not isinstance(required, list):
        raise RegistrationError(f"{owner}: required는 리스트여야 해요.")
    unknown = [name for name in required if name not in properties]
    if unknown:
        raise RegistrationError(f"{owner}: required에 선언되지 않은 필드가 있어요: {', '.join(map(str, unknown))}")


def validate_arguments(
    schema: dict[str, Any],
    arguments: object,
    *,
    capability_name: str,
) -> dict[str, Any]:
    """인자를 검증하고 default가 채워진 새 딕셔너리를 반환해요.

    선언되지 않은 필드는 결과에서 빠져요. ``additionalProperties: false``가
    선언돼 있으면 대신 위반으로 보고해요. 위반은 하나만이 아니라 전부 모아요.
    """
    if arguments is None:
        arguments = {}
    if not isinstance(arguments, dict):
        raise ArgumentValidationError(
            capability_name,
            [FieldViolation(field="$", message="인자는 객체여야 해요.")],
        )

    properties: dict[str, Any] = schema.get("properties", {})
    required: list[str] = schema.get("required", [])
    violations: list[FieldViolation] = []
    validated: dict[str, Any] = {}

    for field_name, field_schema in properties.items():
        if field_name not in arguments or arguments[field_name] is None:
            if field_name in required:
                violations.append(FieldViolation(field=field_name, message="필수 필드가 없어요."))
            elif "default" in field_schema:
                validated[field_name] = field_schema["default"]
            continue

        value = arguments[field_name]
        error = _check_value(value, field_schema)
        if error is not None:
            violations.append(FieldViolation(field=field_name, message=error))
            continue
        validated[field_name] = value

    if schema.get("additionalProperties") is False:
        for extra_name in arguments:
            if extra_name not in properties:
                violations.append(FieldViolation(field=str(extra_name), message="선언되지 않은 필드예요."))

    if violations:
        raise ArgumentValidationError(capability_name, violations)
    return validated


def _check_value(value: object, field_schema: dict[str, Any]) -> str | None:
    field_type = field_schema.get("type")
    error = _type_error(value, field_type)
    if error is not None:
        return error

    choices = field_schema.get("enum")
    if choices is not None and value not in choices:
        allowed = ", ".join(str(choice) for choice in choices)
        return f"{value!r}은 허용된 값이 아니에요. 허용: {allowed}"

    if field_type == "string" and isinstance(value, str):
        min_length = field_schema.get("minLength")
        if isinstance(min_length, int) and len(value) < min_length:
            return f"최소 {min_length}자 이상이어야 해요."
    if field_type in ("number", "integer") and isinstance(value, (int, float)):
        minimum = field_schema.get("minimum")
        maximum = field_schema.get("maximum")
        if isinstance(minimum, (int, float)) and value < minimum:
            return f"{minimum} 이상이어야 해요."
        if isinstance(maximum, (int, float)) and value > maximum:
            return f"{maximum} 이하여야 해요."
    return None


def _type_error(value: object, field_type: object) -> str | None:
    if field_type == "string":
        return None if isinstance(value, str) else "문자열이어야 해요."
    if field_type == "boolean":
        return None if isinstance(value, bool) else "불리언이어야 해요."
    if field_type == "array":
        return None if isinstance(value, list) else "배열이어야 해요."
    if field_type == "object":
        return None if isinstance(value, dict) else "객체여야 해요."
    # bool은 int의 하위 타입이라 숫자 검사에서 먼저 걸러내요.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return "숫자여야 해요."
    if isinstance(value, float) and not math.isfinite(value):
        return "유한한 실수여야 해요."
    if field_type == "integer" and not (isinstance(value, int) or value.is_integer()):
        return "정수여야 해요."
    return None


def describe_prompt_arguments(schema: dict[str, Any]) -> list[dict[str, Any]]:
    """프롬프트 스키마를 MCP `prompts/list`의 arguments 형식으로 바꿔요."""
    required = set(schema.get("required", []))
    arguments: list[dict[str, Any]] = []
    for field_name, field_schema in schema.get("properties", {}).items():
        item: dict[str, Any] = {"name": field_name, "required": field_name in required}
        description = field_schema.get("description")
        if isinstance(description, str):
            item["description"] = description
        arguments.append(item)
    return arguments
