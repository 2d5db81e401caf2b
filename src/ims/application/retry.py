"""Bounded retry for units of work that lose a concurrency race.

Only ConcurrencyConflictError is retried; every other domain error is a
definite answer and surfaces immediately.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TypeVar

import structlog
from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ims.domain.exceptions import ConcurrencyConflictError

logger = structlog.get_logger(__name__)

DEFAULT_MAX_ATTEMPTS = 3

T = TypeVar("T")


def _log_retry(retry_state: RetryCallState) -> None:
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        "Concurrency conflict, retrying unit of work",
        attempt=retry_state.attempt_number,
        error=str(exc),
    )


def run_with_retry(operation: Callable[[], T], max_attempts: int = DEFAULT_MAX_ATTEMPTS) -> T:
    """Run ``operation``; re-run it on ConcurrencyConflictError.

    After ``max_attempts`` the last ConcurrencyConflictError is re-raised.
    """
    retrying = Retrying(
        stop=stop_after_attempt(max(1, max_attempts)),
        wait=wait_exponential(multiplier=0.01, max=0.25),
        retry=retry_if_exception_type(ConcurrencyConflictError),
        before_sleep=_log_retry,
        reraise=True,
    )
    return retrying(operation)
