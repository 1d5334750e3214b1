"""지정한 타임존의 현재 시각을 알려주는 도구예요."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from greeting_server.capabilities.base import BaseTool
from greeting_server.core.content import InvocationResult

HOME_TIMEZONE = "Asia/Seoul"
HOME_TIMEZONE_LABEL = "한국"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_korean_datetime(moment: datetime) -> str:
    """``2025. 01. 02. 13:04:05`` 형태의 24시간제 문자열이에요."""
    return moment.strftime("%Y. %m. %d. %H:%M:%S")


class TimeTool(BaseTool):
    def __init__(
        self,
        *,
        default_timezone: str = HOME_TIMEZONE,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._default_timezone = default_timezone
        self._clock = clock

    @property
    def name(self) -> str:
        return "time"

    @property
    def description(self) -> str:
        return (
            "Returns the current time in the specified timezone "
            f"(defaults to {self._default_timezone} if not provided)"
        )

    @property
    def input_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "timezone": {
                    "type": "string",
                    "description": (
                        "IANA timezone identifier (e.g., Asia/Seoul, America/New_York, Europe/London). "
                        f"Defaults to {self._default_timezone}"
                    ),
                },
            },
        }

    @property
    def metadata(self) -> dict[str, Any]:
        return {"description": "지정된 타임존의 현재 시간 조회", "defaultTimezone": self._default_timezone}

    async def execute(self, arguments: dict[str, Any]) -> InvocationResult:
        # 빈 문자열도 생략한 것으로 봐요.
        tz_name = arguments.get("timezone") or self._default_timezone
        try:
            zone = ZoneInfo(tz_name)
        except (ZoneInfoNotFoundError, ValueError, OSError):
            return InvocationResult.failure(
                f"오류: 유효하지 않은 timezone입니다. ({tz_name})\n"
                "올바른 IANA timezone 식별자를 사용해주세요. (예: Asia/Seoul, America/New_York, Europe/London)"
            )

        local_now = self._clock().astimezone(zone)
        label = HOME_TIMEZONE_LABEL if tz_name == HOME_TIMEZONE else tz_name
        return InvocationResult.text(f"현재 {label} 시간: {format_korean_datetime(local_now)}")
