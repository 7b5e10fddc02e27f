"""Validation outcomes for scroll pages.

Failures are values, not exceptions: a page either validates into a
``Success`` carrying the parsed document and its continuation token, or it
is classified into exactly one ``ErrorKind`` wrapped in a ``Failure``.
"""

from __future__ import annotations

import dataclasses
import enum
from typing import TYPE_CHECKING, TypeGuard

if TYPE_CHECKING:
    from scrollgate.document import ParsedDocument


class ErrorKind(enum.Enum):
    """Closed taxonomy of page validation failures."""

    PARSE_ERROR = "parse_error"
    ERROR_FLAG_SET = "error_flag_set"
    TIMED_OUT = "timed_out"
    MISSING_SHARD_INFO = "missing_shard_info"
    SHARD_FAILURES = "shard_failures"
    MISSING_HITS = "missing_hits"
    MISSING_SCROLL_ID = "missing_scroll_id"

    @property
    def description(self) -> str:
        """One-line human description of the condition."""
        return _DESCRIPTIONS[self]


_DESCRIPTIONS: dict[ErrorKind, str] = {
    ErrorKind.PARSE_ERROR: "response body is not a JSON object",
    ErrorKind.ERROR_FLAG_SET: "response reports an error",
    ErrorKind.TIMED_OUT: "search timed out before all shards answered",
    ErrorKind.MISSING_SHARD_INFO: "response carries no usable shard statistics",
    ErrorKind.SHARD_FAILURES: "one or more shards failed",
    ErrorKind.MISSING_HITS: "response has no hits array",
    ErrorKind.MISSING_SCROLL_ID: "response has no scroll id",
}


@dataclasses.dataclass(frozen=True, slots=True, eq=False)
class Success:
    """A page that passed every gate.

    Compared and hashed by identity; the document is an unhashable mapping.
    """

    document: ParsedDocument
    scroll_id: str


@dataclasses.dataclass(frozen=True, slots=True)
class Failure:
    """A page rejected by one gate."""

    kind: ErrorKind
    detail: str = ""

    def __str__(self) -> str:
        """Return ``kind: detail`` for log lines."""
        base = self.kind.value
        return f"{base}: {self.detail}" if self.detail else base


ValidationOutcome = Success | Failure


def is_success(outcome: ValidationOutcome) -> TypeGuard[Success]:
    """Return True when ``outcome`` is a ``Success``."""
    return isinstance(outcome, Success)
