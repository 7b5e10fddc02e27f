"""Minimal async retry for transport calls with explicit error contracts.

Only delivery failures are retried here. A page that arrives but fails
validation is never retried: the scroll driver aborts instead.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import random
import time
from typing import TYPE_CHECKING, TypeVar

import httpx

from scrollgate._http import RETRYABLE_STATUS_CODES
from scrollgate.errors import TransportError, _walk_exception_chain

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

T = TypeVar("T")

# Statuses where the server refused the request before touching the cursor.
_CURSOR_SAFE_STATUS_CODES: frozenset[int] = frozenset({429, 503})


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retry policy with exponential backoff and optional jitter."""

    max_attempts: int = 3
    initial_delay_s: float = 0.5
    backoff_multiplier: float = 2.0
    max_delay_s: float = 5.0
    jitter: bool = True  # "full jitter" when enabled
    max_elapsed_s: float | None = 30.0

    def __post_init__(self) -> None:
        """Validate invariants to keep retry behavior predictable."""
        if self.max_attempts < 1:
            raise ValueError("RetryPolicy.max_attempts must be >= 1")
        if self.initial_delay_s < 0:
            raise ValueError("RetryPolicy.initial_delay_s must be >= 0")
        if self.backoff_multiplier <= 0:
            raise ValueError("RetryPolicy.backoff_multiplier must be > 0")
        if self.max_delay_s < 0:
            raise ValueError("RetryPolicy.max_delay_s must be >= 0")
        if self.max_elapsed_s is not None and self.max_elapsed_s < 0:
            raise ValueError("RetryPolicy.max_elapsed_s must be >= 0 or None")


def _retry_after_from_error(exc: BaseException) -> float | None:
    if isinstance(exc, TransportError):
        v = exc.retry_after_s
        if isinstance(v, (int, float)) and v >= 0:
            return float(v)
    return None


def _is_transient_network_error(exc: BaseException) -> bool:
    for e in _walk_exception_chain(exc):
        if isinstance(e, (TimeoutError, httpx.TimeoutException, httpx.TransportError)):
            return True
    return False


def should_retry_search(exc: BaseException) -> bool:
    """Return True when an initial search request should be retried.

    Opening a scroll has no cursor to corrupt, so transient network failures
    and the usual retryable statuses are all fair game.
    """
    if isinstance(exc, asyncio.CancelledError):
        return False

    if isinstance(exc, TransportError):
        if exc.retryable is True:
            return True
        if isinstance(exc.status_code, int):
            return exc.status_code in RETRYABLE_STATUS_CODES

    return _is_transient_network_error(exc)


def should_retry_advance(exc: BaseException) -> bool:
    """Return True when a scroll-advance request should be retried.

    Each advance moves the server-side cursor. An ambiguous failure (timeout,
    dropped connection, 5xx after processing) may already have consumed a
    page, so retries only happen on explicit "not processed" signals.
    """
    if isinstance(exc, asyncio.CancelledError):
        return False

    if isinstance(exc, TransportError):
        if _retry_after_from_error(exc) is not None:
            return True
        return (
            isinstance(exc.status_code, int)
            and exc.status_code in _CURSOR_SAFE_STATUS_CODES
        )

    return False


def _compute_backoff_delay(policy: RetryPolicy, *, retry_index: int) -> float:
    # retry_index starts at 1 for the first retry sleep.
    base = policy.initial_delay_s * (
        policy.backoff_multiplier ** max(0, retry_index - 1)
    )
    base = min(policy.max_delay_s, base)
    if base <= 0:
        return 0.0
    if not policy.jitter:
        return base
    return random.random() * base  # noqa: S311


async def retry_async(
    factory: Callable[[], Awaitable[T]],
    *,
    policy: RetryPolicy,
    should_retry: Callable[[BaseException], bool] = should_retry_search,
) -> T:
    """Run an async factory with bounded retries."""
    start = time.monotonic()
    last_exc: BaseException | None = None

    for attempt in range(1, policy.max_attempts + 1):
        try:
            return await factory()
        except Exception as exc:
            last_exc = exc
            if not should_retry(exc) or attempt >= policy.max_attempts:
                raise

            retry_after = _retry_after_from_error(exc)
            delay = _compute_backoff_delay(policy, retry_index=attempt)
            if retry_after is not None:
                delay = max(delay, retry_after)

            if policy.max_elapsed_s is not None:
                remaining = policy.max_elapsed_s - (time.monotonic() - start)
                if remaining <= 0:
                    raise
                delay = min(delay, remaining)

            if delay > 0:
                await asyncio.sleep(delay)

    if last_exc is None:  # pragma: no cover
        raise RuntimeError("retry_async exhausted without an exception")
    raise last_exc
