"""코드 리뷰 요청 프롬프트를 만드는 템플릿이에요."""

from __future__ import annotations

from typing import Any

from greeting_server.capabilities.base import BasePrompt
from greeting_server.core.content import PromptMessage, PromptResult

REVIEW_CHECKLIST = """다음 관점에서 코드 리뷰를 진행해주세요:

1. **코드 품질**
   - 가독성: 코드가 읽기 쉽고 이해하기 쉬운가?
   - 명명 규칙: 변수, 함수, 클래스명이 명확하고 일관적인가?
   - 코드 구조: 적절히 모듈화되고 구조화되어 있는가?

2. **성능**
   - 비효율적인 알고리즘이나 로직이 있는가?
   - 메모리 사용이 최적화되어 있는가?
   - 불필요한 연산이나 반복이 있는가?

3. **보안**
   - 보안 취약점이 있는가?
   - 입력 검증이 적절히 이루어지고 있는가?
   - 민감한 정보가 노출되지 않는가?

4. **에러 처리**
   - 예외 상황을 적절히 처리하고 있는가?
   - 에러 메시지가 명확한가?
   - 경계 조건을 고려하고 있는가?

5. **모범 사례**
   - 해당 언어/프레임워크의 모범 사례를 따르고 있는가?
   - 코딩 컨벤션을 준수하고 있는가?
   - 불필요한 중복 코드가 있는가?

6. **개선 제안**
   - 구체적인 개선 방안을 제시해주세요
   - 리팩토링이 필요한 부분을 지적해주세요
   - 더 나은 대안이 있다면 제시해주세요

각 항목에 대해 구체적인 예시와 함께 상세하게 설명해주세요."""


def render_code_review(code: str, language: str | None) -> str:
    language_info = f"({language})" if language else ""
    fence_language = language or ""
    return (
        f"다음 코드를 상세하게 리뷰해주세요 {language_info}:\n\n"
        f"```{fence_language}\n{code}\n```\n\n"
        f"{REVIEW_CHECKLIST}"
    )


class CodeReviewPrompt(BasePrompt):
    @property
    def name(self) -> str:
        return "code_review"

    @property
    def description(self) -> str:
        return "Generates a detailed code review prompt for the provided code"

    @property
    def input_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "code": {"type": "string", "description": "Code to review"},
                "language": {
                    "type": "string",
                    "description": "Programming language of the code (optional)",
                },
            },
            "required": ["code"],
        }

    async def render(self, arguments: dict[str, Any]) -> PromptResult:
        text = render_code_review(arguments["code"], arguments.get("language"))
        return PromptResult(messages=[PromptMessage(role="user", text=text)])
