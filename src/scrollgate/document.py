"""Parsed scroll page shared between the validator and hit consumers.

The validator parses a page once. Code that walks ``hits.hits`` reads the
same tree through this type instead of parsing the payload a second time.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any


class ParsedDocument(Mapping[str, Any]):
    """Read-only view over a validated scroll page.

    Instances are only built by the validator after every gate has passed,
    so ``hits`` is always a list and ``scroll_id`` always a string.
    """

    __slots__ = ("_hits", "_root", "_scroll_id")

    def __init__(self) -> None:
        raise TypeError(
            "ParsedDocument is produced by scrollgate.validate(); "
            "it cannot be constructed directly"
        )

    @classmethod
    def _from_validated(
        cls, root: dict[str, Any], *, scroll_id: str
    ) -> ParsedDocument:
        doc = object.__new__(cls)
        doc._root = root
        doc._hits = root["hits"]["hits"]
        doc._scroll_id = scroll_id
        return doc

    # --- Mapping protocol over the root object ---

    def __getitem__(self, key: str) -> Any:
        return self._root[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._root)

    def __len__(self) -> int:
        return len(self._root)

    def __repr__(self) -> str:
        return (
            f"ParsedDocument(scroll_id={self._scroll_id!r}, "
            f"hits={len(self._hits)}, total_hits={self.total_hits})"
        )

    # --- Page accessors ---

    @property
    def root(self) -> dict[str, Any]:
        """The top-level object exactly as validated."""
        return self._root

    @property
    def scroll_id(self) -> str:
        return self._scroll_id

    @property
    def hits(self) -> list[Any]:
        """The ``hits.hits`` array. Entries are not validated."""
        return self._hits

    @property
    def is_empty(self) -> bool:
        """True when the page carries no hits, which ends a scroll."""
        return not self._hits

    @property
    def shards(self) -> Mapping[str, Any]:
        return self._root["_shards"]

    @property
    def total_hits(self) -> int | None:
        """``hits.total`` as an int.

        Supports both the legacy bare integer and the ``{"value": n}`` shape.
        """
        total = self._root["hits"].get("total")
        if isinstance(total, dict):
            total = total.get("value")
        if isinstance(total, int) and not isinstance(total, bool):
            return total
        return None

    @property
    def took_ms(self) -> int | None:
        took = self._root.get("took")
        if isinstance(took, int) and not isinstance(took, bool):
            return took
        return None
