"""Bounded retry with exponential backoff for any fallible callable."""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional, TypeVar

from restupdate.domain.errors import Permanent
from restupdate.domain.models import RetryPolicy

log = logging.getLogger("restupdate.retry")

T = TypeVar("T")


def retry(
    operation: Callable[[], T],
    *,
    attempts: int,
    initial_delay_s: float,
    multiplier: float = 2.0,
    sleep: Callable[[float], None] = time.sleep,
    describe: str = "operation",
) -> T:
    """Run ``operation`` until it succeeds or ``attempts`` are used up.

    Args:
        operation: Zero-argument callable to run.
        attempts: Total number of calls allowed (at least one is made).
        initial_delay_s: Sleep before the second call; multiplied after each
            further failure.
        multiplier: Backoff factor applied to the delay.
        sleep: Injectable sleep function.
        describe: Label used in log messages.

    Returns:
        The value returned by the first successful call.

    Raises:
        Exception: The error wrapped by :class:`Permanent` immediately, or the
            last transient error once attempts are exhausted.
    """
    remaining = max(1, int(attempts))
    total = remaining
    delay = float(initial_delay_s)
    attempt = 0
    while True:
        attempt += 1
        try:
            return operation()
        except Permanent as stop:
            log.warning("%s failed permanently on attempt %d/%d: %s", describe, attempt, total, stop.error)
            raise stop.error from stop
        except Exception as exc:
            remaining -= 1
            if remaining <= 0:
                log.warning("%s failed on attempt %d/%d, giving up: %s", describe, attempt, total, exc)
                raise
            log.warning(
                "%s failed on attempt %d/%d, retrying in %.1fs: %s",
                describe,
                attempt,
                total,
                delay,
                exc,
            )
            sleep(delay)
            delay *= multiplier


def retry_with_policy(
    policy: RetryPolicy,
    operation: Callable[[], T],
    *,
    sleep: Optional[Callable[[float], None]] = None,
    describe: str = "operation",
) -> T:
    """Run :func:`retry` with the settings from ``policy``."""
    return retry(
        operation,
        attempts=policy.max_attempts,
        initial_delay_s=policy.initial_delay_s,
        multiplier=policy.backoff_multiplier,
        sleep=sleep or time.sleep,
        describe=describe,
    )


__all__ = ["retry", "retry_with_policy"]
