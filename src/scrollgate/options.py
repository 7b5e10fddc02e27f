"""Per-scroll options layered over ``Config``."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel

from scrollgate.config import _KEEP_ALIVE_PATTERN
from scrollgate.errors import ConfigurationError

QueryInput = BaseModel | dict[str, Any]


@dataclass(frozen=True)
class ScrollOptions:
    """Optional knobs for a single ``Scroll``."""

    #: Search body sent when the scroll is opened. Pydantic models are dumped
    #: by alias with ``None`` fields dropped.
    query: QueryInput | None = None
    #: Overrides ``Config.page_size`` for this scroll.
    page_size: int | None = None
    #: Overrides ``Config.keep_alive`` for this scroll.
    keep_alive: str | None = None
    #: Release the server-side cursor when iteration ends.
    clear_on_exit: bool = True

    def __post_init__(self) -> None:
        """Validate option shapes early for clear errors."""
        if self.query is not None and not isinstance(self.query, (dict, BaseModel)):
            raise ConfigurationError(
                "query must be a dict or a Pydantic model instance",
                hint="Pass query={'query': {'match_all': {}}}.",
            )
        if self.page_size is not None and (
            not isinstance(self.page_size, int) or self.page_size < 1
        ):
            raise ConfigurationError(
                "page_size must be a positive integer",
                hint="Pass page_size=500 or leave it unset to use Config.page_size.",
            )
        if self.keep_alive is not None and not _KEEP_ALIVE_PATTERN.fullmatch(
            str(self.keep_alive)
        ):
            raise ConfigurationError(
                f"Invalid keep_alive: {self.keep_alive!r}",
                hint="Use a positive time value with a unit, e.g. '30s', '1m'.",
            )

    def query_body(self) -> dict[str, Any]:
        """Return the search body as a fresh dict."""
        query = self.query
        if query is None:
            return {}
        if isinstance(query, BaseModel):
            return query.model_dump(by_alias=True, exclude_none=True)
        return dict(query)
