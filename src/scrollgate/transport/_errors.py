"""Shared transport-side error helpers.

Transports attach retry metadata via TransportError so the scroll driver can
retry deterministically without brittle substring matching.
"""

from __future__ import annotations

import asyncio
from typing import Any

import httpx

from scrollgate._http import RETRYABLE_STATUS_CODES
from scrollgate.errors import TransportError, _walk_exception_chain

_BODY_PREVIEW_CHARS = 200


def extract_status_code(exc: BaseException) -> int | None:
    """Walk the exception chain to find an HTTP status code."""
    for e in _walk_exception_chain(exc):
        for attr in ("status_code", "status"):
            value = getattr(e, attr, None)
            if isinstance(value, int) and 100 <= value <= 599:
                return value
        response = getattr(e, "response", None)
        value = getattr(response, "status_code", None)
        if isinstance(value, int) and 100 <= value <= 599:
            return value
    return None


def parse_retry_after(headers: Any) -> float | None:
    """Return the ``Retry-After`` header in seconds, if it is a number."""
    if headers is None:
        return None
    try:
        raw = headers.get("Retry-After")
    except AttributeError:
        return None
    if not isinstance(raw, str) or not raw.strip():
        return None
    try:
        seconds = float(raw)
    except ValueError:
        return None
    return seconds if seconds >= 0 else None


def _auth_hint(status_code: int | None) -> str | None:
    if status_code in {401, 403}:
        return "Check credentials (set SCROLLGATE_API_KEY or Config.api_key)."
    if status_code == 404:
        return "The index or scroll context is gone; the cursor may have expired."
    return None


def status_error(
    status_code: int,
    body: str,
    *,
    phase: str,
    headers: Any = None,
) -> TransportError:
    """Build a TransportError for a delivered non-2xx response."""
    retry_after_s = parse_retry_after(headers)
    preview = body[:_BODY_PREVIEW_CHARS]
    return TransportError(
        f"{phase} request failed (status={status_code}): {preview}"
        if preview
        else f"{phase} request failed (status={status_code})",
        hint=_auth_hint(status_code),
        retryable=status_code in RETRYABLE_STATUS_CODES or retry_after_s is not None,
        status_code=status_code,
        retry_after_s=retry_after_s,
        phase=phase,
    )


def wrap_transport_error(
    exc: BaseException,
    *,
    phase: str,
    message: str | None = None,
) -> TransportError:
    """Map HTTP client exceptions into TransportError with retry metadata."""
    if isinstance(exc, asyncio.CancelledError):
        raise exc

    # Already wrapped — fill in missing context only.
    if isinstance(exc, TransportError):
        if exc.phase is None:
            exc.phase = phase
        return exc

    status_code = extract_status_code(exc)
    retryable = isinstance(status_code, int) and status_code in RETRYABLE_STATUS_CODES
    if not retryable:
        for e in _walk_exception_chain(exc):
            if isinstance(e, (httpx.TimeoutException, httpx.TransportError)):
                retryable = True
                break

    msg = message or f"{phase} request failed"
    status_note = f" (status={status_code})" if isinstance(status_code, int) else ""
    cause = str(exc)
    return TransportError(
        f"{msg}{status_note}: {cause}" if cause else f"{msg}{status_note}",
        hint=_auth_hint(status_code),
        retryable=retryable,
        status_code=status_code,
        phase=phase,
    )
