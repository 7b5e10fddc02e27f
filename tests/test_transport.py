"""Transport characterization tests.

These tests pin the exact requests sent to the cluster and the mapping of
delivery failures into TransportError, using httpx's in-process mock
transport instead of a network.
"""

from __future__ import annotations

import json
from typing import Any

import httpx
import pytest

from scrollgate.config import Config
from scrollgate.errors import TransportError
from scrollgate.transport import (
    HttpTransport,
    MockTransport,
    Transport,
    TransportRequest,
    TransportResponse,
)
from tests.conftest import CLUSTER_URL
from tests.helpers import page

pytestmark = pytest.mark.contract


def _http_transport(
    handler: Any, *, api_key: str | None = None
) -> tuple[HttpTransport, list[httpx.Request]]:
    seen: list[httpx.Request] = []

    def _record(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return handler(request)

    client = httpx.AsyncClient(base_url=CLUSTER_URL, transport=httpx.MockTransport(_record))
    return HttpTransport(CLUSTER_URL, api_key=api_key, client=client), seen


def test_transports_satisfy_protocol() -> None:
    assert isinstance(MockTransport(), Transport)
    assert isinstance(HttpTransport(CLUSTER_URL), Transport)


@pytest.mark.asyncio
async def test_http_transport_sends_json_body_and_params() -> None:
    transport, seen = _http_transport(lambda _r: httpx.Response(200, text=page()))

    response = await transport.send(
        TransportRequest(
            method="POST",
            path="/logs-*/_search",
            body={"size": 10},
            params={"scroll": "1m"},
        )
    )

    assert response == TransportResponse(status_code=200, text=page())
    [request] = seen
    assert request.method == "POST"
    assert request.url.path == "/logs-*/_search"
    assert request.url.params["scroll"] == "1m"
    assert json.loads(request.content) == {"size": 10}


@pytest.mark.asyncio
async def test_http_transport_sets_api_key_header() -> None:
    transport, seen = _http_transport(
        lambda _r: httpx.Response(200, text="{}"), api_key="k123"
    )

    await transport.send(TransportRequest(method="GET", path="/"))

    assert seen[0].headers["Authorization"] == "ApiKey k123"


@pytest.mark.asyncio
async def test_http_transport_maps_error_status_with_retry_after() -> None:
    transport, _ = _http_transport(
        lambda _r: httpx.Response(
            429, text='{"error":"too_many_requests"}', headers={"Retry-After": "2"}
        )
    )

    with pytest.raises(TransportError) as exc:
        await transport.send(TransportRequest(method="POST", path="/_search/scroll"))

    err = exc.value
    assert err.status_code == 429
    assert err.retry_after_s == 2.0
    assert err.retryable is True
    assert err.phase == "POST /_search/scroll"


@pytest.mark.asyncio
async def test_http_transport_hints_on_missing_scroll_context() -> None:
    transport, _ = _http_transport(
        lambda _r: httpx.Response(404, text='{"error":"search_context_missing_exception"}')
    )

    with pytest.raises(TransportError) as exc:
        await transport.send(TransportRequest(method="POST", path="/_search/scroll"))

    assert exc.value.status_code == 404
    assert exc.value.retryable is False
    assert exc.value.hint is not None
    assert "expired" in exc.value.hint


@pytest.mark.asyncio
async def test_http_transport_wraps_network_errors() -> None:
    def _refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    transport, _ = _http_transport(_refuse)

    with pytest.raises(TransportError) as exc:
        await transport.send(TransportRequest(method="GET", path="/"))

    assert exc.value.retryable is True
    assert exc.value.status_code is None
    assert isinstance(exc.value.__cause__, httpx.ConnectError)


@pytest.mark.asyncio
async def test_http_transport_leaves_injected_client_open() -> None:
    transport, _ = _http_transport(lambda _r: httpx.Response(200, text="{}"))

    await transport.aclose()

    assert not transport._client.is_closed


@pytest.mark.asyncio
async def test_http_transport_from_config_closes_own_client() -> None:
    transport = HttpTransport.from_config(Config(url=CLUSTER_URL + "/", api_key="k"))

    assert transport.base_url == CLUSTER_URL
    assert transport._client.headers["Authorization"] == "ApiKey k"
    await transport.aclose()
    assert transport._client.is_closed


# =============================================================================
# MockTransport
# =============================================================================


@pytest.mark.asyncio
async def test_mock_transport_replays_in_order_and_records() -> None:
    transport = MockTransport(["first", {"n": 2}, TransportResponse(200, "third")])
    req = TransportRequest(method="POST", path="/_search/scroll")

    texts = [(await transport.send(req)).text for _ in range(3)]

    assert texts == ["first", '{"n": 2}', "third"]
    assert transport.requests == [req, req, req]
    assert transport.pending == 0


@pytest.mark.asyncio
async def test_mock_transport_raises_scripted_failures() -> None:
    transport = MockTransport(
        [TransportError("boom", status_code=502), TransportResponse(503, "busy")]
    )
    req = TransportRequest(method="POST", path="/_search/scroll")

    with pytest.raises(TransportError, match="boom"):
        await transport.send(req)
    with pytest.raises(TransportError) as exc:
        await transport.send(req)
    assert exc.value.status_code == 503


@pytest.mark.asyncio
async def test_mock_transport_acknowledges_deletes_without_script() -> None:
    transport = MockTransport()

    response = await transport.send(TransportRequest(method="DELETE", path="/_search/scroll"))

    assert response.ok
    assert json.loads(response.text)["succeeded"] is True


@pytest.mark.asyncio
async def test_mock_transport_fails_loudly_when_script_runs_out() -> None:
    with pytest.raises(AssertionError, match="no reply"):
        await MockTransport().send(TransportRequest(method="POST", path="/x/_search"))
