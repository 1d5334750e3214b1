from __future__ import annotations

from typing import Annotated, Literal

from pydantic import AliasChoices, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="GREETING_",
        extra="ignore",
        env_file=".env",
        env_file_encoding="utf-8",
        populate_by_name=True,
    )

    service_name: str = "greeting-server"
    service_version: str = "1.0.0"
    service_description: str = "MCP 서버 - 인사말, 계산기, 시간 조회, 이미지 생성 기능 제공"
    service_author: str = "MCP Developer"

    transport: Literal["stdio", "http"] = "stdio"
    host: str = "127.0.0.1"
    port: int = 8090
    log_level: str = "INFO"

    # HF_TOKEN은 접두사 없이도 읽어요. 허깅페이스 도구들이 쓰는 관례 이름이에요.
    hf_token: str = Field(default="", validation_alias=AliasChoices("GREETING_HF_TOKEN", "HF_TOKEN", "hf_token"))
    image_model: str = "black-forest-labs/FLUX.1-schnell"
    image_inference_base_url: str = "https://router.huggingface.co/hf-inference/models"
    image_inference_steps: int = Field(default=5, ge=1)
    image_timeout_seconds: float = 60.0
    image_retries: int = Field(default=1, ge=0)
    image_retry_base_delay_seconds: float = 1.0

    default_timezone: str = "Asia/Seoul"
    # CSV 문자열 또는 리스트 모두 허용해요. 비어 있으면 내장 언어를 전부 써요.
    greeting_languages: Annotated[list[str], NoDecode] = Field(default_factory=list)

    @field_validator("greeting_languages", mode="before")
    @classmethod
    def _parse_languages(cls, value: object) -> list[str]:
        """환경변수에서 CSV 문자열로 들어온 경우 리스트로 변환해요."""
        if isinstance(value, str):
            return [part.strip().lower() for part in value.split(",") if part.strip()]
        return value  # type: ignore[return-value]

    @model_validator(mode="after")
    def _warn_missing_token(self) -> "Settings":
        """토큰이 없으면 generate_image가 항상 실패하므로 시작할 때 알려줘요."""
        import logging

        if not self.hf_token:
            logging.getLogger("greeting_server.settings").warning(
                "HF_TOKEN이 설정되지 않았어요. generate_image 도구는 오류 결과만 반환해요."
            )
        return self


def load_settings() -> Settings:
    return Settings()
