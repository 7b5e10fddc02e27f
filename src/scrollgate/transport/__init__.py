"""Transport implementations."""

from .base import Transport
from .http import HttpTransport
from .mock import MockTransport
from .models import TransportRequest, TransportResponse

__all__ = [
    "HttpTransport",
    "MockTransport",
    "Transport",
    "TransportRequest",
    "TransportResponse",
]
