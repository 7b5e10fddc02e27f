"""Scroll page validation: six ordered gates from raw text to a trusted page.

Gate order is part of the contract. Presence and type checks come before
value checks, and the first gate that rejects a page decides its
``ErrorKind``:

1. parse        -> ``PARSE_ERROR``
2. ``error``     -> ``ERROR_FLAG_SET``
3. ``timed_out`` -> ``TIMED_OUT``
4. ``_shards``   -> ``MISSING_SHARD_INFO`` / ``SHARD_FAILURES``
5. ``hits.hits`` -> ``MISSING_HITS``
6. ``_scroll_id`` -> ``MISSING_SCROLL_ID``
"""

from __future__ import annotations

from collections.abc import Callable
import json
import logging
from typing import Any

from scrollgate.document import ParsedDocument
from scrollgate.outcome import ErrorKind, Failure, Success, ValidationOutcome

log = logging.getLogger(__name__)

RawResponse = str | bytes | bytearray

_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1

Gate = Callable[[dict[str, Any]], Failure | None]


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-standard JSON constant {name}")


def _first_key_wins(pairs: list[tuple[str, Any]]) -> dict[str, Any]:
    # Duplicate members resolve to the first occurrence.
    obj: dict[str, Any] = {}
    for key, value in pairs:
        obj.setdefault(key, value)
    return obj


def _parse(raw: RawResponse) -> dict[str, Any] | Failure:
    if isinstance(raw, (bytes, bytearray)):
        try:
            text = bytes(raw).decode("utf-8")
        except UnicodeDecodeError as exc:
            return Failure(ErrorKind.PARSE_ERROR, f"invalid UTF-8 at byte {exc.start}")
    elif isinstance(raw, str):
        text = raw
    else:
        raise TypeError(
            f"raw response must be str or bytes, got {type(raw).__name__}"
        )

    try:
        root = json.loads(
            text,
            parse_constant=_reject_constant,
            object_pairs_hook=_first_key_wins,
        )
    except RecursionError:
        return Failure(ErrorKind.PARSE_ERROR, "nesting too deep")
    except ValueError as exc:
        # Integers past the interpreter digit limit land here; shorter big
        # integers are kept exact rather than rejected as out of double range.
        return Failure(ErrorKind.PARSE_ERROR, str(exc))

    if not isinstance(root, dict):
        return Failure(
            ErrorKind.PARSE_ERROR, f"root is {type(root).__name__}, not an object"
        )
    return root


def _is_false(value: Any) -> bool:
    return value is False


def _is_int32(value: Any) -> bool:
    return (
        isinstance(value, int)
        and not isinstance(value, bool)
        and _INT32_MIN <= value <= _INT32_MAX
    )


def _check_error_flag(root: dict[str, Any]) -> Failure | None:
    # Any shape other than an explicit false counts as an error.
    if "error" in root and not _is_false(root["error"]):
        return Failure(ErrorKind.ERROR_FLAG_SET, f"error={root['error']!r:.80}")
    return None


def _check_timed_out(root: dict[str, Any]) -> Failure | None:
    if "timed_out" in root and not _is_false(root["timed_out"]):
        return Failure(ErrorKind.TIMED_OUT, f"timed_out={root['timed_out']!r:.80}")
    return None


def _check_shards(root: dict[str, Any]) -> Failure | None:
    shards = root.get("_shards")
    if not isinstance(shards, dict):
        return Failure(
            ErrorKind.MISSING_SHARD_INFO, "_shards is missing or not an object"
        )
    failed = shards.get("failed")
    if not _is_int32(failed):
        return Failure(
            ErrorKind.MISSING_SHARD_INFO, "_shards.failed is missing or not an integer"
        )
    if failed > 0:
        return Failure(ErrorKind.SHARD_FAILURES, f"{failed} shard(s) failed")
    return None


def _check_hits(root: dict[str, Any]) -> Failure | None:
    hits = root.get("hits")
    if not isinstance(hits, dict) or not isinstance(hits.get("hits"), list):
        return Failure(ErrorKind.MISSING_HITS, "hits.hits is missing or not an array")
    return None


def _check_scroll_id(root: dict[str, Any]) -> Failure | None:
    if not isinstance(root.get("_scroll_id"), str):
        return Failure(
            ErrorKind.MISSING_SCROLL_ID, "_scroll_id is missing or not a string"
        )
    return None


GATES: tuple[Gate, ...] = (
    _check_error_flag,
    _check_timed_out,
    _check_shards,
    _check_hits,
    _check_scroll_id,
)


def validate(raw: RawResponse) -> ValidationOutcome:
    """Validate one scroll page and extract its continuation token.

    Args:
        raw: Response body as text or UTF-8 bytes.

    Returns:
        ``Success(document, scroll_id)`` when every gate passes, otherwise
        ``Failure(kind)`` from the first gate that rejected the page. A
        failure never exposes the parsed tree.

    Raises:
        TypeError: ``raw`` is neither text nor bytes.
    """
    parsed = _parse(raw)
    if isinstance(parsed, Failure):
        log.debug("Scroll page rejected: %s", parsed)
        return parsed

    for gate in GATES:
        failure = gate(parsed)
        if failure is not None:
            log.debug("Scroll page rejected: %s", failure)
            return failure

    scroll_id: str = parsed["_scroll_id"]
    document = ParsedDocument._from_validated(parsed, scroll_id=scroll_id)
    return Success(document, scroll_id)


class ScrollResultValidator:
    """Stateless validator object; safe to share across threads and tasks."""

    __slots__ = ()

    def validate(self, raw: RawResponse) -> ValidationOutcome:
        """Validate one scroll page. See ``scrollgate.validator.validate``."""
        return validate(raw)

    __call__ = validate
