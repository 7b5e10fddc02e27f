"""HTTP transport backed by ``httpx.AsyncClient``."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

import httpx

from scrollgate.transport._errors import status_error, wrap_transport_error
from scrollgate.transport.models import TransportRequest, TransportResponse

if TYPE_CHECKING:
    from scrollgate.config import Config

log = logging.getLogger(__name__)


class HttpTransport:
    """Send scroll requests to a single cluster endpoint.

    Host selection and failover are left to whatever sits in front of
    ``base_url`` (a load balancer or a coordinating node).
    """

    def __init__(
        self,
        base_url: str,
        *,
        api_key: str | None = None,
        timeout_s: float = 30.0,
        verify: bool = True,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize with a base URL; ``client`` overrides connection setup."""
        self.base_url = base_url.rstrip("/")
        headers = {"Accept": "application/json"}
        if api_key:
            headers["Authorization"] = f"ApiKey {api_key}"
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=timeout_s,
            verify=verify,
        )
        if client is not None and api_key:
            self._client.headers.update(headers)

    @classmethod
    def from_config(cls, config: Config) -> HttpTransport:
        """Build a transport from resolved configuration."""
        return cls(
            str(config.url),
            api_key=config.api_key,
            timeout_s=config.request_timeout_s,
            verify=config.verify_tls,
        )

    async def send(self, request: TransportRequest) -> TransportResponse:
        """Send one request; non-2xx statuses raise TransportError."""
        phase = f"{request.method} {request.path}"
        kwargs: dict[str, Any] = {"params": request.params or None}
        if request.body is not None:
            kwargs["json"] = request.body
        try:
            response = await self._client.request(
                request.method, request.path, **kwargs
            )
        except asyncio.CancelledError:
            raise
        except httpx.HTTPError as exc:
            raise wrap_transport_error(exc, phase=phase) from exc

        text = response.text
        if response.is_error:
            raise status_error(
                response.status_code, text, phase=phase, headers=response.headers
            )
        log.debug("%s -> %s (%d bytes)", phase, response.status_code, len(text))
        return TransportResponse(status_code=response.status_code, text=text)

    async def aclose(self) -> None:
        """Close the underlying client when this transport created it."""
        if self._owns_client:
            await self._client.aclose()
