"""Transport protocol: minimal interface for delivering scroll requests."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from scrollgate.transport.models import TransportRequest, TransportResponse


@runtime_checkable
class Transport(Protocol):
    """Deliver one request and return its body.

    Implementations raise ``TransportError`` for delivery failures and for
    non-2xx statuses. Application-level content (error flags, shard
    failures) is left to the page validator.
    """

    async def send(self, request: TransportRequest) -> TransportResponse:
        """Send ``request`` and return the delivered response."""
        ...

    async def aclose(self) -> None:
        """Release connections held by the transport."""
        ...
