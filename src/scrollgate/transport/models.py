"""Domain models for the transport layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

HttpMethod = Literal["GET", "POST", "DELETE"]


@dataclass(frozen=True)
class TransportRequest:
    """One HTTP request against the cluster, relative to the base URL."""

    method: HttpMethod
    path: str
    body: dict[str, Any] | None = None
    params: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class TransportResponse:
    """A delivered response; ``text`` is handed to the page validator as-is."""

    status_code: int
    text: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300
