"""Exception hierarchy for scrollgate.

Page validation itself never raises; these exceptions belong to the client
surface (configuration, transport and the ``Scroll`` driver).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator

    from scrollgate.outcome import ErrorKind


class ScrollgateError(Exception):
    """Base exception for all scrollgate errors."""

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint


class ConfigurationError(ScrollgateError):
    """Configuration validation or resolution failed."""


class ScrollStateError(ScrollgateError):
    """A scroll operation was called in a state that does not allow it."""


class TransportError(ScrollgateError):
    """A request could not be delivered or the server refused it.

    Transports attach retry metadata so the scroll driver can perform bounded
    retries without brittle substring matching.
    """

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        retryable: bool | None = None,
        status_code: int | None = None,
        retry_after_s: float | None = None,
        phase: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.retryable = retryable
        self.status_code = status_code
        self.retry_after_s = retry_after_s
        self.phase = phase


class ScrollAbortedError(ScrollgateError):
    """A page failed validation; the scroll cannot continue from it."""

    def __init__(
        self,
        kind: ErrorKind,
        *,
        detail: str = "",
        phase: str | None = None,
        hint: str | None = None,
    ) -> None:
        message = f"Scroll aborted ({kind.value}): {kind.description}"
        if detail:
            message = f"{message} [{detail}]"
        super().__init__(message, hint=hint)
        self.kind = kind
        self.detail = detail
        self.phase = phase


def _walk_exception_chain(exc: BaseException) -> Iterator[BaseException]:
    """Yield *exc* and its ``__cause__``/``__context__`` chain, skipping cycles."""
    seen: set[int] = set()
    stack: list[BaseException] = [exc]
    while stack:
        cur = stack.pop()
        if id(cur) in seen:
            continue
        seen.add(id(cur))
        yield cur

        cause = cur.__cause__
        if isinstance(cause, BaseException):
            stack.append(cause)
        context = cur.__context__
        if isinstance(context, BaseException):
            stack.append(context)
