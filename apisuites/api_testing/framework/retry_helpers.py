# ================================================================================
# Retry Helpers Module
# ================================================================================
#
# Generic exponential-backoff retry for zero-argument async operations.
#
# The helper knows nothing about HTTP: it retries every exception, including
# 4xx errors that will never succeed. Only wrap operations that are genuinely
# transient.
#
# Usage:
#   users = await retry(lambda: users_api.get_all(), max_retries=3, base_delay_ms=500)
#
# ================================================================================

import asyncio
from typing import Awaitable, Callable, Optional, TypeVar

import allure
from loguru import logger


T = TypeVar("T")

DEFAULT_MAX_RETRIES = 3
DEFAULT_BASE_DELAY_MS = 1000


def backoff_delay_ms(attempt: int, base_delay_ms: int = DEFAULT_BASE_DELAY_MS) -> int:
    """
    Delay before the retry that follows failed attempt `attempt` (0-based).

    Formula: base * (2 ^ attempt)
    """
    return base_delay_ms * (2 ** attempt)


async def retry(
    operation: Callable[[], Awaitable[T]],
    max_retries: int = DEFAULT_MAX_RETRIES,
    base_delay_ms: int = DEFAULT_BASE_DELAY_MS,
    description: Optional[str] = None,
) -> T:
    """
    Run `operation`, retrying on failure with exponential backoff.

    Args:
        operation: Zero-argument callable returning an awaitable
        max_retries: Additional attempts after the first (>= 0)
        base_delay_ms: Delay before the first retry; doubles each time
        description: Human-readable label for logging

    Returns:
        Result of the first successful attempt

    Raises:
        ValueError: If max_retries is negative
        Exception: The last attempt's exception, unchanged
    """
    if max_retries < 0:
        raise ValueError(f"max_retries must be >= 0, got {max_retries}")

    label = description or getattr(operation, "__name__", "operation")

    for attempt in range(max_retries + 1):
        try:
            return await operation()
        except Exception as e:
            if attempt == max_retries:
                logger.error(
                    f"{label}: all {max_retries + 1} attempts failed. Last error: {e}"
                )
                raise

            delay_ms = backoff_delay_ms(attempt, base_delay_ms)
            logger.warning(
                f"{label}: attempt {attempt + 1}/{max_retries + 1} failed with {e!r}. "
                f"Retrying in {delay_ms}ms"
            )
            with allure.step(f"Retry {label} in {delay_ms}ms (attempt {attempt + 2})"):
                await asyncio.sleep(delay_ms / 1000)


__all__ = [
    "DEFAULT_BASE_DELAY_MS",
    "DEFAULT_MAX_RETRIES",
    "backoff_delay_ms",
    "retry",
]
