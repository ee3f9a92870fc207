"""
Bounded exponential backoff for one logical AI request.

States: attempting -> (waiting -> attempting)* -> terminal.
At most `retries + 1` attempts; total wait is `delay * (2**retries - 1)`.
"""

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from .errors import AIRequestError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_RETRIES = 3
DEFAULT_DELAY_S = 1.0


def _is_retryable(error: BaseException) -> bool:
    return isinstance(error, AIRequestError) and error.retryable


def _log_retry(total_attempts: int) -> Callable[[RetryCallState], None]:
    def before_sleep(retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception()
        wait = retry_state.next_action.sleep if retry_state.next_action else 0
        left = total_attempts - retry_state.attempt_number
        logger.warning(
            f"AI call failed. Retrying in {wait}s... ({left} attempts left)",
            extra={"kind": error.kind.value, "status_code": error.status_code},
        )

    return before_sleep


async def retry_with_backoff(
    fn: Callable[[], Awaitable[T]],
    retries: int = DEFAULT_RETRIES,
    delay: float = DEFAULT_DELAY_S,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """
    Await `fn` until it succeeds, a terminal error occurs, or retries run out.

    Args:
        fn: Zero-argument coroutine factory; called once per attempt.
        retries: Attempts remaining after the first one.
        delay: Wait in seconds before the first retry; doubles each time.
        sleep: Awaitable used for the wait (injected by tests).

    Returns:
        Whatever `fn` returned on the successful attempt.

    Raises:
        AIRequestError: The last error, when it is terminal or retries are exhausted.
    """
    total_attempts = max(retries, 0) + 1
    retrying = AsyncRetrying(
        stop=stop_after_attempt(total_attempts),
        wait=wait_exponential(multiplier=delay, exp_base=2),
        retry=retry_if_exception(_is_retryable),
        before_sleep=_log_retry(total_attempts),
        sleep=sleep,
        reraise=True,
    )
    return await retrying(fn)
