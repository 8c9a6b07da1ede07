"""Retry with exponential backoff for backend calls."""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Tuple, Type, TypeVar

from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from .clients.base import TranslationError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """
    Backoff settings for one backend call.

    Wait before retry n (1-based) is ``min(base_delay * 2**(n-1) + U(0, jitter), max_delay)``.
    """

    max_attempts: int = 3
    base_delay: float = 4.0
    max_delay: float = 30.0
    jitter: float = 1.0

    @classmethod
    def from_config(cls, cfg) -> "RetryPolicy":
        return cls(
            max_attempts=cfg.max_retries,
            base_delay=cfg.retry_base_delay,
            max_delay=cfg.retry_max_delay,
            jitter=cfg.retry_jitter,
        )


def _log_retry(retry_state: RetryCallState) -> None:
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    wait = retry_state.next_action.sleep if retry_state.next_action else 0
    logger.warning(
        "Attempt %d failed (%s), retrying in %.1fs",
        retry_state.attempt_number,
        exc,
        wait,
    )


def retry_with_backoff(
    func: Callable[[], T],
    policy: RetryPolicy = RetryPolicy(),
    retry_on: Tuple[Type[BaseException], ...] = (TranslationError,),
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """
    Call ``func`` until it succeeds or the policy's attempts run out.

    Args:
        func: Zero-argument callable performing one attempt
        policy: Backoff settings
        retry_on: Exception types that trigger another attempt; anything else propagates at once
        sleep: Sleep function (tests inject a no-op)

    Returns:
        The first successful result

    Raises:
        The last exception once attempts are exhausted
    """
    retrying = Retrying(
        stop=stop_after_attempt(max(1, policy.max_attempts)),
        wait=wait_exponential_jitter(
            multiplier=policy.base_delay,
            max=policy.max_delay,
            jitter=policy.jitter,
        ),
        retry=retry_if_exception_type(retry_on),
        before_sleep=_log_retry,
        sleep=sleep,
        reraise=True,
    )
    return retrying(func)
