"""Bounded retry loop shared by every forge operation."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from .errors import ErrorHandler
from .exceptions import NetworkError

logger = logging.getLogger(__name__)

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[Any]]


class RequestExecutor:
    """Runs one logical operation with retries and exponential backoff.

    ``thunk`` performs a single attempt. Failures are classified by the
    :class:`ErrorHandler`; retryable ones are attempted again after
    ``retry_delay`` until ``max_retries`` attempts have been made. A
    :class:`NetworkError` on the first attempt is raised immediately.
    """

    def __init__(
        self,
        error_handler: ErrorHandler | None = None,
        max_retries: int = 3,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.error_handler = error_handler or ErrorHandler()
        self.max_retries = max(1, max_retries)
        self._sleep = sleep

    async def execute(
        self,
        operation: str,
        thunk: Callable[[], Awaitable[T]],
        context: dict[str, Any] | None = None,
    ) -> T:
        context = context or {}
        last_error: Exception | None = None

        for attempt in range(1, self.max_retries + 1):
            logger.debug(
                "Making %s request",
                operation,
                extra={"context": {"operation": operation, "attempt": attempt, **context}},
            )
            try:
                result = await thunk()
            except Exception as exc:
                error = self.error_handler.classify(exc)
                last_error = error
                logger.warning(
                    "%s request failed",
                    operation,
                    extra={
                        "context": {
                            "operation": operation,
                            "attempt": attempt,
                            "error": error,
                            **context,
                        }
                    },
                )

                if isinstance(error, NetworkError) and attempt == 1:
                    raise error

                if self.error_handler.should_retry(error) and attempt < self.max_retries:
                    delay = self.error_handler.retry_delay(attempt)
                    await self._sleep(delay / 1000)
                    continue

                raise error

            logger.debug(
                "%s request successful",
                operation,
                extra={"context": {"operation": operation, "attempt": attempt, **context}},
            )
            return result

        raise last_error or RuntimeError(f"{operation} made no attempts")
