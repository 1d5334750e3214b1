"""텍스트 프롬프트로 이미지를 생성하는 도구예요."""

from __future__ import annotations

from typing import Any

import httpx

from greeting_server.capabilities.base import BaseTool
from greeting_server.core.content import InvocationResult
from libs.common.errors import ConfigurationError, DomainError, UpstreamError, UpstreamTransientError
from libs.common.logging import get_logger
from libs.common.retry import retry_async

logger = get_logger("greeting_server.capabilities.image")

DEFAULT_IMAGE_MODEL = "black-forest-labs/FLUX.1-schnell"
DEFAULT_INFERENCE_BASE_URL = "https://router.huggingface.co/hf-inference/models"
MISSING_TOKEN_TEXT = "오류: HF_TOKEN 환경 변수가 설정되지 않았습니다.\nHugging Face API 토큰을 설정해주세요."
IMAGE_ANNOTATIONS: dict[str, Any] = {"annotations": {"audience": ["user"], "priority": 0.9}}


class ImageGenerationTool(BaseTool):
    """Hugging Face 추론 API로 이미지를 만들어 바이너리 블록으로 돌려줘요.

    토큰은 시작할 때 설정에서 주입받아요. 토큰이 비어 있으면 호출마다
    `ConfigurationError`를 올리고, 디스패처가 이를 오류 결과로 바꿔요.
    HTTP 클라이언트는 호출마다 새로 만들어요.
    """

    def __init__(
        self,
        *,
        token: str,
        model: str = DEFAULT_IMAGE_MODEL,
        base_url: str = DEFAULT_INFERENCE_BASE_URL,
        inference_steps: int = 5,
        timeout_seconds: float = 60.0,
        retries: int = 1,
        retry_base_delay_seconds: float = 1.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._token = token
        self._model = model
        self._base_url = base_url.rstrip("/")
        self._inference_steps = inference_steps
        self._timeout_seconds = timeout_seconds
        self._retries = retries
        self._retry_base_delay_seconds = retry_base_delay_seconds
        self._transport = transport

    @property
    def name(self) -> str:
        return "generate_image"

    @property
    def description(self) -> str:
        return f"Generates an image from a text prompt using AI image generation ({self._model.split('/')[-1]} model)"

    @property
    def input_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "prompt": {"type": "string", "description": "Text description of the image to generate"},
            },
            "required": ["prompt"],
        }

    @property
    def metadata(self) -> dict[str, Any]:
        return {
            "description": f"AI 이미지 생성 ({self._model.split('/')[-1]} 모델)",
            "model": self._model,
            "requiresToken": "HF_TOKEN",
        }

    async def execute(self, arguments: dict[str, Any]) -> InvocationResult:
        if not self._token:
            raise ConfigurationError(MISSING_TOKEN_TEXT)

        prompt = arguments["prompt"]
        try:
            data, mime_type = await retry_async(
                lambda: self._request_image(prompt),
                retries=self._retries,
                base_delay_seconds=self._retry_base_delay_seconds,
                max_delay_seconds=10.0,
                retry_filter=lambda exc: isinstance(exc, DomainError) and exc.retryable,
                operation="generate_image",
            )
        except DomainError as exc:
            return InvocationResult.failure(f"이미지 생성 중 오류가 발생했습니다: {exc.message}")

        logger.info("image_generated", model=self._model, byte_count=len(data), mime_type=mime_type)
        return InvocationResult.binary(data, mime_type, meta=IMAGE_ANNOTATIONS)

    async def _request_image(self, prompt: str) -> tuple[bytes, str]:
        headers = {
            "Authorization": f"Bearer {self._token}",
            "Accept": "image/png",
        }
        payload = {
            "inputs": prompt,
            "parameters": {"num_inference_steps": self._inference_steps},
        }

        try:
            async with httpx.AsyncClient(timeout=self._timeout_seconds, transport=self._transport) as client:
                response = await client.post(f"{self._base_url}/{self._model}", json=payload, headers=headers)
        except httpx.TimeoutException as exc:
            raise UpstreamTransientError("이미지 생성 요청이 시간 초과됐어요.") from exc
        except httpx.HTTPError as exc:
            raise UpstreamTransientError(f"이미지 생성 서버에 연결하지 못했어요: {exc}") from exc

        if response.status_code == 429 or response.status_code >= 500:
            raise UpstreamTransientError(
                f"이미지 생성 서버가 일시적으로 응답하지 못했어요 ({response.status_code}): {_upstream_message(response)}"
            )
        if response.status_code >= 400:
            raise UpstreamError(f"이미지 생성 요청이 거부됐어요 ({response.status_code}): {_upstream_message(response)}")

        content_type = response.headers.get("content-type", "").split(";", 1)[0].strip().lower()
        if not content_type.startswith("image/"):
            raise UpstreamError(f"이미지 대신 {content_type or '알 수 없는 형식'} 응답을 받았어요.")
        if not response.content:
            raise UpstreamError("이미지 생성 서버가 빈 응답을 보냈어요.")
        return response.content, content_type


def _upstream_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text.strip()[:200] or "응답 본문이 없어요."
    if isinstance(body, dict):
        error_value = body.get("error")
        if isinstance(error_value, str):
            return error_value
    return str(body)[:200]
