"""Retry strategy with exponential backoff for LLM calls.

Retries true rate limiting and transient upstream failures, honoring the
server's retry-after hint. Quota exhaustion, auth failures and rejected
requests fail immediately.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
)

from partner_reports.utils.errors import ProviderError

from .providers import OPENAI_QUOTA_EXHAUSTED_CODE

logger = logging.getLogger(__name__)

T = TypeVar("T")

TRANSIENT_STATUSES = frozenset({500, 502, 503, 504})


@dataclass
class RetryConfig:
    """Configuration for retry behavior."""

    max_retries: int = 2
    initial_delay: float = 0.5
    max_delay: float = 8.0
    backoff_factor: float = 2.0


def is_retryable_error(exception: BaseException) -> bool:
    """Check if a failure should be retried.

    Args:
        exception: Exception raised by the wrapped call

    Returns:
        True for rate limiting (not quota exhaustion) and 5xx gateway errors
    """
    if not isinstance(exception, ProviderError):
        return False
    if exception.status == 429:
        return exception.code != OPENAI_QUOTA_EXHAUSTED_CODE
    return exception.status in TRANSIENT_STATUSES


def backoff_delay(config: RetryConfig, attempt: int, retry_after: Optional[float] = None) -> float:
    """Calculate the wait before retrying.

    Args:
        config: Retry configuration
        attempt: Number of retries already made (0 for the first retry)
        retry_after: Server-supplied hint in seconds, if any

    Returns:
        Delay in seconds
    """
    delay = min(config.max_delay, config.initial_delay * (config.backoff_factor ** attempt))
    return max(retry_after or 0.0, delay)


class RetryStrategy:
    """Handles retry logic with exponential backoff."""

    def __init__(
        self,
        config: RetryConfig,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
    ):
        """Initialize retry strategy.

        Args:
            config: Retry configuration
            sleep: Async sleep function (defaults to asyncio.sleep)
        """
        self.config = config
        self.sleep = sleep or asyncio.sleep

    def _wait(self, retry_state: RetryCallState) -> float:
        exception = retry_state.outcome.exception() if retry_state.outcome else None
        retry_after = getattr(exception, "retry_after", None)
        return backoff_delay(self.config, retry_state.attempt_number - 1, retry_after)

    def _before_sleep(self, retry_state: RetryCallState) -> None:
        exception = retry_state.outcome.exception() if retry_state.outcome else None
        delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
        logger.info(
            f"[LLM] Attempt {retry_state.attempt_number} failed: {exception!r}. "
            f"Retrying in {delay:.2f}s ({retry_state.attempt_number}/{self.config.max_retries})"
        )

    async def execute_with_retry(
        self,
        func: Callable[..., Awaitable[T]],
        *args: Any,
        **kwargs: Any,
    ) -> T:
        """Execute an async function with retry logic.

        Args:
            func: Async function to execute
            *args: Positional arguments for func
            **kwargs: Keyword arguments for func

        Returns:
            Result from func

        Raises:
            Exception: The last error, unchanged, once retries are exhausted
                or as soon as a non-retryable error occurs
        """
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.config.max_retries + 1),
            wait=self._wait,
            retry=retry_if_exception(is_retryable_error),
            sleep=self.sleep,
            before_sleep=self._before_sleep,
            reraise=True,
        )

        async for attempt_state in retrying:
            with attempt_state:
                return await func(*args, **kwargs)

        # Should not reach here, but type checker needs this
        raise RuntimeError("Unexpected state in retry loop")
