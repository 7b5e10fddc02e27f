"""Configuration: frozen Config with environment auto-resolution."""

from __future__ import annotations

from dataclasses import dataclass, field
import os
import re
from urllib.parse import urlparse

from dotenv import load_dotenv

from scrollgate.errors import ConfigurationError
from scrollgate.retry import RetryPolicy

load_dotenv()

URL_ENV_VAR = "SCROLLGATE_URL"
API_KEY_ENV_VAR = "SCROLLGATE_API_KEY"

# Elasticsearch time units accepted for the scroll keep-alive.
_KEEP_ALIVE_PATTERN = re.compile(r"^[1-9]\d*(?:nanos|micros|ms|s|m|h|d)$")


@dataclass(frozen=True)
class Config:
    """Immutable configuration for a scroll session.

    ``url`` and ``api_key`` are auto-resolved from ``SCROLLGATE_URL`` and
    ``SCROLLGATE_API_KEY`` when left as *None*.

    Example:
        config = Config(url="http://localhost:9200", keep_alive="2m")
    """

    url: str | None = None
    api_key: str | None = None
    #: How long the server keeps the cursor alive between pages.
    keep_alive: str = "1m"
    #: Hits per page requested when opening the scroll.
    page_size: int = 1000
    request_timeout_s: float = 30.0
    verify_tls: bool = True
    retry: RetryPolicy = field(default_factory=RetryPolicy)

    def __post_init__(self) -> None:
        """Auto-resolve connection settings and validate configuration."""
        if self.url is None:
            object.__setattr__(self, "url", os.environ.get(URL_ENV_VAR))
        if self.api_key is None:
            object.__setattr__(self, "api_key", os.environ.get(API_KEY_ENV_VAR))

        if not self.url:
            raise ConfigurationError(
                "Cluster URL required",
                hint=f"Set {URL_ENV_VAR} or pass Config(url='http://host:9200').",
            )
        parsed = urlparse(self.url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ConfigurationError(
                f"Invalid cluster URL: {self.url!r}",
                hint="Use an absolute http(s) URL such as 'http://localhost:9200'.",
            )

        if not isinstance(self.keep_alive, str) or not _KEEP_ALIVE_PATTERN.fullmatch(
            self.keep_alive
        ):
            raise ConfigurationError(
                f"Invalid keep_alive: {self.keep_alive!r}",
                hint="Use a positive time value with a unit, e.g. '30s', '1m', '5m'.",
            )
        if self.page_size < 1:
            raise ConfigurationError(
                f"page_size must be ≥ 1, got {self.page_size}",
                hint="This controls how many hits each page returns.",
            )
        if self.request_timeout_s <= 0:
            raise ConfigurationError(
                f"request_timeout_s must be > 0, got {self.request_timeout_s}",
                hint="This bounds each HTTP request in seconds.",
            )

    def __str__(self) -> str:
        """Return a redacted, developer-friendly representation."""
        return (
            f"Config(url={self.url!r}, "
            f"api_key={'[REDACTED]' if self.api_key else None}, "
            f"keep_alive={self.keep_alive!r}, page_size={self.page_size})"
        )

    __repr__ = __str__
