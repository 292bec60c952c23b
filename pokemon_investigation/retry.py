import asyncio
from collections.abc import Awaitable, Callable
import logging
from typing import TypeVar

import httpx

from pokemon_investigation.errors import (
    FetchTimeoutError,
    HTTPStatusError,
    NetworkError,
    NonRetryableError,
    RetryExhaustedError,
)


logger = logging.getLogger(__name__)
T = TypeVar("T")


def is_transient_error(exc: BaseException) -> bool:
    # Timeouts, dropped connections, rate limiting and server errors may recover.
    if isinstance(exc, HTTPStatusError):
        return exc.status_code == 429 or 500 <= exc.status_code < 600
    return isinstance(
        exc,
        (NetworkError, FetchTimeoutError, httpx.TimeoutException, httpx.NetworkError, TimeoutError),
    )


def backoff_delay(base_delay: float, attempt: int) -> float:
    return base_delay * 2 ** (attempt - 1)


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    *,
    max_attempts: int,
    base_delay: float,
    context: str,
    on_attempt_failure: Callable[[int, Exception], None] | None = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    last_error: Exception | None = None

    for attempt in range(1, max_attempts + 1):
        try:
            return await operation()
        except Exception as exc:
            last_error = exc
            if on_attempt_failure:
                on_attempt_failure(attempt, exc)

            if not is_transient_error(exc):
                raise NonRetryableError(context, attempt, max_attempts) from exc
            if attempt == max_attempts:
                break

            delay = backoff_delay(base_delay, attempt)
            logger.info(
                "retrying after transient failure",
                extra={"context": context, "attempt": attempt, "max_attempts": max_attempts, "delay_seconds": delay},
            )
            await sleep(delay)

    raise RetryExhaustedError(context, max_attempts) from last_error
