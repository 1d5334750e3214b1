"""두 수에 사칙연산을 적용하는 도구예요."""

from __future__ import annotations

import math
import operator as _operator
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from greeting_server.capabilities.base import BaseTool
from greeting_server.core.content import InvocationResult

DIVISION_BY_ZERO_TEXT = "오류: 0으로 나눌 수 없습니다."
OUT_OF_RANGE_TEXT = "오류: 계산 결과가 너무 커서 표현할 수 없습니다."


@dataclass(slots=True, frozen=True)
class Operation:
    symbol: str
    label: str
    apply: Callable[[float, float], float]


DEFAULT_OPERATIONS: tuple[Operation, ...] = (
    Operation("+", "더하기", _operator.add),
    Operation("-", "빼기", _operator.sub),
    Operation("*", "곱하기", _operator.mul),
    Operation("/", "나누기", _operator.truediv),
)


def format_number(value: float) -> str:
    """정수값이면 소수점 없이, 아니면 가장 짧은 표현으로 숫자를 써요."""
    if isinstance(value, bool):
        value = int(value)
    if isinstance(value, int):
        return str(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return repr(value)


class CalculatorTool(BaseTool):
    def __init__(self, *, operations: tuple[Operation, ...] = DEFAULT_OPERATIONS) -> None:
        self._operations = {operation.symbol: operation for operation in operations}

    @property
    def name(self) -> str:
        return "calculator"

    @property
    def description(self) -> str:
        return (
            "Performs basic arithmetic operations (addition, subtraction, multiplication, division) "
            "on two numbers"
        )

    @property
    def input_schema(self) -> dict[str, Any]:
        symbols = list(self._operations)
        return {
            "type": "object",
            "properties": {
                "num1": {"type": "number", "description": "First number"},
                "num2": {"type": "number", "description": "Second number"},
                "operator": {
                    "type": "string",
                    "enum": symbols,
                    "description": f"Operator for calculation ({', '.join(symbols)})",
                },
            },
            "required": ["num1", "num2", "operator"],
        }

    @property
    def metadata(self) -> dict[str, Any]:
        return {"description": "기본 산술 연산", "supportedOperations": list(self._operations)}

    async def execute(self, arguments: dict[str, Any]) -> InvocationResult:
        num1 = arguments["num1"]
        num2 = arguments["num2"]
        operation = self._operations[arguments["operator"]]

        if operation.symbol == "/" and num2 == 0:
            return InvocationResult.failure(DIVISION_BY_ZERO_TEXT)

        try:
            result = operation.apply(num1, num2)
            left, right, value = format_number(num1), format_number(num2), format_number(result)
        except (OverflowError, ValueError):
            # 실수 범위를 넘는 정수 나눗셈이나 자릿수 한도를 넘는 정수 출력이에요.
            return InvocationResult.failure(OUT_OF_RANGE_TEXT)
        return InvocationResult.text(
            f"{left} {operation.symbol} {right} = {value}\n"
            f"({left} {operation.label} {right}는 {value}입니다)"
        )
