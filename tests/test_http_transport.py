import asyncio

import aiohttp
import pytest

from core.exceptions import TransportError
from core.http.blocklist import is_forbidden_host
from core.http.transport import HttpTransport, TransportResponse
from tests.http_fakes import FakeResponse, FakeSession


def _transport(session: FakeSession, **kwargs) -> HttpTransport:
    async def _factory() -> FakeSession:
        return session

    return HttpTransport(
        "http://calygo.test", session_factory=_factory, timeout=7.5, **kwargs
    )


def test_transport_response_ok_range() -> None:
    assert TransportResponse(status=200).ok
    assert TransportResponse(status=204).ok
    assert not TransportResponse(status=304).ok
    assert not TransportResponse(status=422).ok


def test_resolve_joins_relative_urls() -> None:
    transport = _transport(FakeSession())
    assert transport.resolve("/api/sales") == "http://calygo.test/api/sales"
    assert transport.resolve("api/visits") == "http://calygo.test/api/visits"
    assert transport.resolve("https://other.test/x") == "https://other.test/x"


@pytest.mark.asyncio
async def test_send_passes_request_through() -> None:
    session = FakeSession(responses=[FakeResponse(status=201, text_data='{"id": 9}')])
    transport = _transport(session)

    response = await transport.send(
        "/api/sales", "post", {"Content-Type": "application/json"}, '{"amount": "10"}'
    )

    assert response == TransportResponse(status=201, body='{"id": 9}')
    method, url, kwargs = session.requests[0]
    assert (method, url) == ("POST", "http://calygo.test/api/sales")
    assert kwargs["headers"] == {"Content-Type": "application/json"}
    assert kwargs["data"] == '{"amount": "10"}'
    assert kwargs["timeout"].total == 7.5


@pytest.mark.asyncio
async def test_send_reports_error_statuses_without_raising() -> None:
    session = FakeSession(responses=[FakeResponse(status=400, text_data="Invalid data")])

    response = await _transport(session).send("/api/visits", "POST")

    assert response.status == 400
    assert not response.ok


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [aiohttp.ClientConnectionError("refused"), asyncio.TimeoutError()],
)
async def test_send_maps_connection_failures(error) -> None:
    session = FakeSession(responses=[error])

    with pytest.raises(TransportError) as exc_info:
        await _transport(session).send("/api/sales", "POST")

    assert exc_info.value.details["url"] == "http://calygo.test/api/sales"


@pytest.mark.asyncio
async def test_send_refuses_forbidden_hosts() -> None:
    session = FakeSession()

    with pytest.raises(TransportError):
        await _transport(session).send(
            "https://nominatim.openstreetmap.org/search", "GET"
        )

    assert session.requests == []


def test_is_forbidden_host_matches_known_hosts() -> None:
    assert is_forbidden_host("https://overpass-api.de/api/interpreter")
    assert is_forbidden_host("https://nominatim.openstreetmap.org/search")
    assert is_forbidden_host("https://a.tile.openstreetmap.org/1/1/1.png")
    assert not is_forbidden_host("http://calygo.test/api/sales")


@pytest.mark.asyncio
async def test_send_accepts_undecodable_success_body() -> None:
    body = b'{"id": "\xff"}'
    session = FakeSession(responses=[FakeResponse(status=201, content=body)])

    response = await _transport(session).send("/api/sales", "POST")

    assert response.ok
    assert "\ufffd" in response.body
