from __future__ import annotations

import pytest

from libs.common.errors import UpstreamError, UpstreamTransientError
from libs.common.retry import retry_async


@pytest.mark.asyncio
async def test_retry_async_retries_only_allowed_errors() -> None:
    attempts: list[int] = []

    async def flaky() -> str:
        attempts.append(1)
        if len(attempts) < 3:
            raise UpstreamTransientError()
        return "ok"

    result = await retry_async(
        flaky,
        retries=2,
        base_delay_seconds=0.0,
        max_delay_seconds=0.0,
        retry_filter=lambda exc: isinstance(exc, UpstreamTransientError),
    )
    assert result == "ok"
    assert len(attempts) == 3


@pytest.mark.asyncio
async def test_retry_async_raises_non_retryable_error_immediately() -> None:
    attempts: list[int] = []

    async def rejected() -> str:
        attempts.append(1)
        raise UpstreamError("거절됐어요.")

    with pytest.raises(UpstreamError):
        await retry_async(
            rejected,
            retries=3,
            base_delay_seconds=0.0,
            max_delay_seconds=0.0,
            retry_filter=lambda exc: isinstance(exc, UpstreamTransientError),
        )
    assert len(attempts) == 1
