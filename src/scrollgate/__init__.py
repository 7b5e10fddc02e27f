"""scrollgate: trustworthy page-by-page iteration over search scroll APIs.

Public API:
    - validate(): Validate one raw scroll page into Success or Failure
    - ScrollResultValidator: Stateless validator object
    - ParsedDocument: The parsed page shared with hit consumers
    - Scroll: Async driver that threads the continuation token
    - iter_pages(): One-call iteration over a whole result set
    - Config / ScrollOptions: Configuration
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from scrollgate.config import Config
from scrollgate.document import ParsedDocument
from scrollgate.errors import (
    ConfigurationError,
    ScrollAbortedError,
    ScrollgateError,
    ScrollStateError,
    TransportError,
)
from scrollgate.options import ScrollOptions
from scrollgate.outcome import (
    ErrorKind,
    Failure,
    Success,
    ValidationOutcome,
    is_success,
)
from scrollgate.retry import RetryPolicy
from scrollgate.scroll import Scroll
from scrollgate.validator import ScrollResultValidator, validate

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from scrollgate.options import QueryInput

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("scrollgate")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"

# Library-level NullHandler: stay silent unless the consumer configures logging.
logging.getLogger("scrollgate").addHandler(logging.NullHandler())


async def iter_pages(
    index: str,
    query: QueryInput | None = None,
    *,
    config: Config,
    options: ScrollOptions | None = None,
) -> AsyncIterator[ParsedDocument]:
    """Yield every non-empty page of a search over its own HTTP transport.

    Args:
        index: Index name or pattern to search.
        query: Search body; falls back to ``options.query``.
        config: Cluster connection and paging settings.
        options: Optional per-scroll overrides.

    Example:
        config = Config(url="http://localhost:9200")
        async for page in iter_pages("logs-*", config=config):
            for hit in page.hits:
                print(hit["_id"])
    """
    async with Scroll.from_config(index, config=config, options=options) as scroll:
        async for page in scroll.pages(query):
            yield page


__all__ = [
    "Config",
    "ConfigurationError",
    "ErrorKind",
    "Failure",
    "ParsedDocument",
    "RetryPolicy",
    "Scroll",
    "ScrollAbortedError",
    "ScrollOptions",
    "ScrollResultValidator",
    "ScrollStateError",
    "ScrollgateError",
    "Success",
    "TransportError",
    "ValidationOutcome",
    "is_success",
    "iter_pages",
    "validate",
]
