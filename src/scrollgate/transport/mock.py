"""Mock transport for testing and offline runs."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable
import json
from typing import Any

from scrollgate.transport._errors import status_error
from scrollgate.transport.models import TransportRequest, TransportResponse

ScriptedReply = str | dict[str, Any] | TransportResponse | BaseException


class MockTransport:
    """Replay scripted replies in order and record every request.

    Replies may be raw body text, a dict (serialized as JSON), a full
    ``TransportResponse`` (non-2xx statuses raise like a real transport), or
    an exception to raise. ``DELETE`` requests are acknowledged without
    consuming a scripted reply unless ``script_deletes`` is set.
    """

    def __init__(
        self, replies: Iterable[ScriptedReply] = (), *, script_deletes: bool = False
    ) -> None:
        """Initialize with the replies to hand out."""
        self._replies: deque[ScriptedReply] = deque(replies)
        self.script_deletes = script_deletes
        self.requests: list[TransportRequest] = []
        self.closed = False

    def add(self, *replies: ScriptedReply) -> None:
        """Queue more replies."""
        self._replies.extend(replies)

    @property
    def pending(self) -> int:
        return len(self._replies)

    async def send(self, request: TransportRequest) -> TransportResponse:
        """Return the next scripted reply for ``request``."""
        self.requests.append(request)
        if request.method == "DELETE" and not self.script_deletes:
            return TransportResponse(
                status_code=200, text='{"succeeded":true,"num_freed":1}'
            )
        if not self._replies:
            raise AssertionError(f"MockTransport has no reply for {request!r}")

        reply = self._replies.popleft()
        if isinstance(reply, BaseException):
            raise reply
        if isinstance(reply, TransportResponse):
            if not reply.ok:
                raise status_error(
                    reply.status_code,
                    reply.text,
                    phase=f"{request.method} {request.path}",
                )
            return reply
        if isinstance(reply, dict):
            return TransportResponse(status_code=200, text=json.dumps(reply))
        return TransportResponse(status_code=200, text=reply)

    async def aclose(self) -> None:
        """Mark the transport closed."""
        self.closed = True
