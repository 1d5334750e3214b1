from __future__ import annotations

import asyncio
import random
from collections.abc import Awaitable, Callable
from typing import TypeVar

from libs.common.logging import get_logger

T = TypeVar("T")

logger = get_logger("libs.common.retry")


async def retry_async(
    func: Callable[[], Awaitable[T]],
    *,
    retries: int,
    base_delay_seconds: float,
    max_delay_seconds: float,
    retry_filter: Callable[[Exception], bool],
    operation: str = "operation",
) -> T:
    """`retry_filter`가 허용한 예외에 한해 지수 백오프로 다시 시도해요.

    마지막 시도까지 실패하면 원래 예외를 그대로 올려요.
    """
    attempt = 0
    while True:
        try:
            return await func()
        except Exception as exc:
            if attempt >= retries or not retry_filter(exc):
                raise

            delay = min(base_delay_seconds * (2**attempt), max_delay_seconds)
            jitter = random.uniform(0, delay * 0.2)
            logger.warning(
                "retry_scheduled",
                operation=operation,
                attempt=attempt + 1,
                retries=retries,
                delay_seconds=round(delay + jitter, 3),
                error=str(exc),
            )
            await asyncio.sleep(delay + jitter)
            attempt += 1
