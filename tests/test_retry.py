"""Retry predicates and bounded retry loop."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from scrollgate.errors import TransportError
from scrollgate.retry import (
    RetryPolicy,
    _compute_backoff_delay,
    retry_async,
    should_retry_advance,
    should_retry_search,
)

pytestmark = pytest.mark.unit

_NO_SLEEP = RetryPolicy(max_attempts=3, initial_delay_s=0, jitter=False)


def _wrapped_network_error() -> TransportError:
    try:
        try:
            raise httpx.ConnectError("refused")
        except httpx.ConnectError as exc:
            raise TransportError("POST /_search/scroll request failed") from exc
    except TransportError as err:
        return err


@pytest.mark.parametrize("status", [408, 429, 500, 502, 503, 504])
def test_search_retries_retryable_statuses(status: int) -> None:
    assert should_retry_search(TransportError("x", status_code=status))


@pytest.mark.parametrize("status", [400, 401, 404])
def test_search_does_not_retry_client_errors(status: int) -> None:
    assert not should_retry_search(TransportError("x", status_code=status))


def test_search_retries_wrapped_network_errors() -> None:
    assert should_retry_search(_wrapped_network_error())


def test_advance_only_retries_explicit_not_processed_signals() -> None:
    assert should_retry_advance(TransportError("x", status_code=429))
    assert should_retry_advance(TransportError("x", status_code=503))
    assert should_retry_advance(TransportError("x", status_code=500, retry_after_s=1))
    assert not should_retry_advance(TransportError("x", status_code=500))
    assert not should_retry_advance(TransportError("x", status_code=504, retryable=True))
    assert not should_retry_advance(_wrapped_network_error())


def test_cancellation_is_never_retried() -> None:
    assert not should_retry_search(asyncio.CancelledError())
    assert not should_retry_advance(asyncio.CancelledError())


def test_unknown_exceptions_are_not_retried() -> None:
    assert not should_retry_search(ValueError("bad"))
    assert not should_retry_advance(ValueError("bad"))


def test_backoff_is_exponential_and_capped() -> None:
    policy = RetryPolicy(initial_delay_s=1.0, backoff_multiplier=2.0, max_delay_s=3.0, jitter=False)

    assert _compute_backoff_delay(policy, retry_index=1) == 1.0
    assert _compute_backoff_delay(policy, retry_index=2) == 2.0
    assert _compute_backoff_delay(policy, retry_index=3) == 3.0


@pytest.mark.asyncio
async def test_retry_async_recovers_after_transient_failure() -> None:
    calls = 0

    async def flaky() -> str:
        nonlocal calls
        calls += 1
        if calls < 3:
            raise TransportError("busy", status_code=503)
        return "ok"

    assert await retry_async(flaky, policy=_NO_SLEEP) == "ok"
    assert calls == 3


@pytest.mark.asyncio
async def test_retry_async_gives_up_after_max_attempts() -> None:
    calls = 0

    async def always_busy() -> str:
        nonlocal calls
        calls += 1
        raise TransportError("busy", status_code=503)

    with pytest.raises(TransportError, match="busy"):
        await retry_async(always_busy, policy=_NO_SLEEP)
    assert calls == 3


@pytest.mark.asyncio
async def test_retry_async_does_not_retry_when_predicate_refuses() -> None:
    calls = 0

    async def fails() -> str:
        nonlocal calls
        calls += 1
        raise TransportError("gone", status_code=404)

    with pytest.raises(TransportError):
        await retry_async(fails, policy=_NO_SLEEP, should_retry=should_retry_advance)
    assert calls == 1
