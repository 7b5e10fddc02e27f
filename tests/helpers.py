"""Test helpers: scroll page builders.

Keep this file tiny and purpose-built: every suite builds pages the same way
so a change to the page shape lands in one place.
"""

from __future__ import annotations

import json
from typing import Any

_OMIT = object()


def page_dict(
    *,
    scroll_id: Any = "scroll-1",
    hits: Any = _OMIT,
    failed: Any = 0,
    total: Any = _OMIT,
    **extra: Any,
) -> dict[str, Any]:
    """Return a well-formed scroll page; pass ``None`` to drop a field."""
    body: dict[str, Any] = {"took": 3, "timed_out": False}
    if failed is not None:
        body["_shards"] = {"total": 5, "successful": 5, "skipped": 0, "failed": failed}
    if hits is not None:
        hit_list = [{"_id": "1", "_source": {"n": 1}}] if hits is _OMIT else hits
        container: dict[str, Any] = {"hits": hit_list}
        if total is not _OMIT:
            container["total"] = total
        body["hits"] = container
    if scroll_id is not None:
        body["_scroll_id"] = scroll_id
    body.update(extra)
    return body


def page(**kwargs: Any) -> str:
    """Return ``page_dict(**kwargs)`` serialized as JSON text."""
    return json.dumps(page_dict(**kwargs))


def empty_page(scroll_id: str = "scroll-end") -> str:
    return page(scroll_id=scroll_id, hits=[])
