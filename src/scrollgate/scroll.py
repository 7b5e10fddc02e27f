"""Scroll driver: open a cursor, validate every page, thread the token.

The driver owns recovery policy. Delivery failures are retried within a
``RetryPolicy``; a page that fails validation aborts the scroll with the
exact ``ErrorKind`` and the token is forgotten, never reused.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Self
from urllib.parse import quote

from pydantic import BaseModel

from scrollgate.errors import (
    ConfigurationError,
    ScrollAbortedError,
    ScrollStateError,
    TransportError,
)
from scrollgate.options import ScrollOptions
from scrollgate.outcome import Failure
from scrollgate.retry import (
    RetryPolicy,
    retry_async,
    should_retry_advance,
    should_retry_search,
)
from scrollgate.transport.models import TransportRequest
from scrollgate.validator import ScrollResultValidator

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable
    from types import TracebackType

    from scrollgate.config import Config
    from scrollgate.document import ParsedDocument
    from scrollgate.options import QueryInput
    from scrollgate.transport.base import Transport

log = logging.getLogger(__name__)

DEFAULT_KEEP_ALIVE = "1m"
DEFAULT_PAGE_SIZE = 1000

_SCROLL_PATH = "/_search/scroll"


class Scroll:
    """Iterate one search result set page by page.

    Example:
        async with Scroll(transport, "logs-*", config=config) as scroll:
            async for page in scroll.pages({"query": {"match_all": {}}}):
                for hit in page.hits:
                    handle(hit)

    A ``Scroll`` owns a single server-side cursor and must not be driven from
    several tasks at once.
    """

    def __init__(
        self,
        transport: Transport,
        index: str,
        *,
        config: Config | None = None,
        options: ScrollOptions | None = None,
        validator: ScrollResultValidator | None = None,
        owns_transport: bool = False,
    ) -> None:
        """Bind the scroll to a transport and an index pattern."""
        if not isinstance(index, str) or not index.strip("/ "):
            raise ConfigurationError(
                "index must be a non-empty string",
                hint="Pass an index name or pattern such as 'logs-*'.",
            )
        self.transport = transport
        self.index = index.strip("/ ")
        self.options = options or ScrollOptions()
        self._validate: Callable[[str], Any] = validator or ScrollResultValidator()
        self._owns_transport = owns_transport

        self.keep_alive = self.options.keep_alive or (
            config.keep_alive if config is not None else DEFAULT_KEEP_ALIVE
        )
        self.page_size = self.options.page_size or (
            config.page_size if config is not None else DEFAULT_PAGE_SIZE
        )
        self.retry: RetryPolicy = config.retry if config is not None else RetryPolicy()

        self._scroll_id: str | None = None
        self._started = False
        self._exhausted = False
        self.pages_read = 0
        self.hits_read = 0

    @classmethod
    def from_config(
        cls,
        index: str,
        *,
        config: Config,
        options: ScrollOptions | None = None,
    ) -> Scroll:
        """Build a scroll over its own HTTP transport, closed with the scroll."""
        from scrollgate.transport.http import HttpTransport

        return cls(
            HttpTransport.from_config(config),
            index,
            config=config,
            options=options,
            owns_transport=True,
        )

    @property
    def scroll_id(self) -> str | None:
        """Token of the last validated page, or None when no cursor is held."""
        return self._scroll_id

    @property
    def active(self) -> bool:
        return self._scroll_id is not None

    @property
    def exhausted(self) -> bool:
        """True once an empty page has been read."""
        return self._exhausted

    # --- Cursor operations ---

    async def start(self, query: QueryInput | None = None) -> ParsedDocument:
        """Open the scroll and return the first validated page."""
        if self._started:
            raise ScrollStateError(
                "scroll already started",
                hint="Create a new Scroll to run another query.",
            )
        self._started = True

        body = self._search_body(query)
        request = TransportRequest(
            method="POST",
            path=f"/{quote(self.index, safe=',*')}/_search",
            body=body,
            params={"scroll": self.keep_alive},
        )
        log.info("Opening scroll on %s (page_size=%s)", self.index, body.get("size"))
        response = await retry_async(
            lambda: self.transport.send(request),
            policy=self.retry,
            should_retry=should_retry_search,
        )
        return await self._accept(response.text, phase="search")

    async def next_page(self) -> ParsedDocument:
        """Return the next validated page.

        The first call opens the scroll with ``options.query``; without one
        the caller must ``start(query)`` explicitly.
        """
        if not self._started:
            if self.options.query is None:
                raise ScrollStateError(
                    "no active scroll and no query",
                    hint="Pass ScrollOptions(query=...) or call start(query).",
                )
            return await self.start()
        if self._exhausted:
            raise ScrollStateError("scroll is exhausted")
        if self._scroll_id is None:
            raise ScrollStateError(
                "no active scroll cursor",
                hint="The scroll was cleared or aborted; start a new Scroll.",
            )

        request = TransportRequest(
            method="POST",
            path=_SCROLL_PATH,
            body={"scroll": self.keep_alive, "scroll_id": self._scroll_id},
        )
        response = await retry_async(
            lambda: self.transport.send(request),
            policy=self.retry,
            should_retry=should_retry_advance,
        )
        return await self._accept(response.text, phase="scroll")

    async def clear(self) -> bool:
        """Release the server-side cursor.

        Returns True when a cursor was held. A 404 means the server already
        dropped it and counts as cleared. The token is forgotten even when
        the request fails.
        """
        scroll_id, self._scroll_id = self._scroll_id, None
        if scroll_id is None:
            return False
        await self._clear_token(scroll_id)
        return True

    async def pages(
        self, query: QueryInput | None = None
    ) -> AsyncIterator[ParsedDocument]:
        """Yield non-empty pages until the scroll runs dry.

        The cursor is released on exit when ``options.clear_on_exit`` is set,
        including when the consumer stops early.
        """
        if self._started and query is not None:
            raise ScrollStateError(
                "scroll already started",
                hint="The query applies only when the scroll opens; "
                "create a new Scroll to run another query.",
            )
        try:
            if self._started:
                page = await self.next_page()
            else:
                page = await self.start(query)
            while not page.is_empty:
                yield page
                page = await self.next_page()
        finally:
            if self.options.clear_on_exit:
                await self._release()

    async def aclose(self) -> None:
        """Release the cursor and close an owned transport."""
        try:
            await self._release()
        finally:
            if self._owns_transport:
                await self.transport.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    # --- Internals ---

    def _search_body(self, query: QueryInput | None) -> dict[str, Any]:
        if query is None:
            body = self.options.query_body()
        elif isinstance(query, BaseModel):
            body = query.model_dump(by_alias=True, exclude_none=True)
        elif isinstance(query, dict):
            body = dict(query)
        else:
            raise ConfigurationError(
                f"query must be a dict or a Pydantic model, got {type(query).__name__}"
            )
        body.setdefault("size", self.page_size)
        return body

    async def _accept(self, text: str, *, phase: str) -> ParsedDocument:
        outcome = self._validate(text)
        if isinstance(outcome, Failure):
            stale = self._scroll_id
            self._scroll_id = None
            log.warning("Scroll on %s aborted in %s: %s", self.index, phase, outcome)
            if stale is not None:
                await self._clear_quietly(stale)
            raise ScrollAbortedError(
                outcome.kind,
                detail=outcome.detail,
                phase=phase,
                hint="Restart the scroll; a rejected page cannot be resumed.",
            )

        document = outcome.document
        self._scroll_id = outcome.scroll_id
        self._exhausted = document.is_empty
        self.pages_read += 1
        self.hits_read += len(document.hits)
        log.debug(
            "Scroll on %s page %d: %d hits",
            self.index,
            self.pages_read,
            len(document.hits),
        )
        return document

    async def _clear_token(self, scroll_id: str) -> None:
        request = TransportRequest(
            method="DELETE", path=_SCROLL_PATH, body={"scroll_id": [scroll_id]}
        )
        try:
            await self.transport.send(request)
        except TransportError as exc:
            if exc.status_code != 404:
                raise
            log.debug("Scroll cursor already released by the server")

    async def _clear_quietly(self, scroll_id: str) -> None:
        try:
            await self._clear_token(scroll_id)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            # Cleanup should never mask the primary failure.
            log.warning("Scroll cleanup failed: %s", exc)

    async def _release(self) -> None:
        scroll_id, self._scroll_id = self._scroll_id, None
        if scroll_id is not None:
            await self._clear_quietly(scroll_id)
