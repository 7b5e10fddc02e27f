"""Pytest configuration and fixtures.

Provides environment isolation, logging configuration, and page builders.
Fixtures marked autouse apply to every test.
"""

from __future__ import annotations

from contextlib import suppress
import logging
import os

import pytest

from scrollgate.config import Config
from scrollgate.retry import RetryPolicy

# =============================================================================
# Environment Isolation (Autouse)
# =============================================================================


@pytest.fixture(autouse=True)
def block_dotenv(request, monkeypatch):
    """Prevent python-dotenv from loading project .env files during tests.

    Opt-out: @pytest.mark.allow_dotenv
    """
    if request.node.get_closest_marker("allow_dotenv"):
        return
    with suppress(Exception):
        monkeypatch.setattr(
            "dotenv.load_dotenv", lambda *_args, **_kwargs: False, raising=False
        )


@pytest.fixture(autouse=True)
def isolate_scrollgate_env(monkeypatch):
    """Clear SCROLLGATE_* env vars so tests never talk to a real cluster."""
    for key in list(os.environ.keys()):
        if key.startswith("SCROLLGATE_"):
            monkeypatch.delenv(key, raising=False)


# =============================================================================
# Logging
# =============================================================================


@pytest.fixture(scope="session", autouse=True)
def quiet_noisy_libraries():
    """Suppress noisy third-party loggers."""
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


# =============================================================================
# Shared Fixtures
# =============================================================================

CLUSTER_URL = "http://search.test:9200"


@pytest.fixture
def no_retry_config() -> Config:
    """Config with a single attempt so failures surface immediately."""
    return Config(url=CLUSTER_URL, retry=RetryPolicy(max_attempts=1))


@pytest.fixture
def fast_retry_config() -> Config:
    """Config that retries without sleeping."""
    return Config(
        url=CLUSTER_URL,
        retry=RetryPolicy(max_attempts=3, initial_delay_s=0, jitter=False),
    )
