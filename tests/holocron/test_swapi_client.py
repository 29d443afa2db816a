"""Tests for the HTTP transport using ``httpx.MockTransport``."""

from __future__ import annotations

import httpx
import pytest

from holocron.client import PeopleTransport, SwapiClient
from holocron.errors import TransportError

BASE_URL = "https://swapi.test/api/"

PAGE_PAYLOAD = {
    "message": "ok",
    "total_records": 82,
    "total_pages": 7,
    "previous": None,
    "next": "https://swapi.test/api/people?page=2&limit=12",
    "results": [
        {"uid": "1", "name": "Luke Skywalker", "url": "https://swapi.test/api/people/1"},
        {"uid": 2, "name": "C-3PO", "url": "https://swapi.test/api/people/2"},
    ],
}

DETAIL_PAYLOAD = {
    "message": "ok",
    "result": {
        "uid": "1",
        "description": "A person within the Star Wars universe",
        "properties": {
            "name": "Luke Skywalker",
            "gender": "male",
            "height": 172,
            "homeworld": None,
        },
    },
}


def _client(handler) -> SwapiClient:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return SwapiClient(BASE_URL, page_size=12, http_client=http_client)


def test_urls_strip_trailing_slash_and_carry_limit() -> None:
    client = SwapiClient(BASE_URL, page_size=12, http_client=httpx.AsyncClient())

    assert client.page_url(3) == "https://swapi.test/api/people?page=3&limit=12"
    assert client.detail_url("10") == "https://swapi.test/api/people/10"
    assert isinstance(client, PeopleTransport)


@pytest.mark.asyncio
async def test_get_page_parses_envelope() -> None:
    seen: list[httpx.URL] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url)
        return httpx.Response(200, json=PAGE_PAYLOAD)

    client = _client(handler)
    envelope = await client.get_page(1)

    assert seen[0].params["page"] == "1"
    assert seen[0].params["limit"] == "12"
    assert envelope.total_pages == 7
    assert envelope.total_records == 82
    assert [person.uid for person in envelope.results] == ["1", "2"]
    assert envelope.previous is None


@pytest.mark.asyncio
async def test_get_person_returns_detail_record() -> None:
    client = _client(lambda request: httpx.Response(200, json=DETAIL_PAYLOAD))

    detail = await client.get_person("1")

    assert detail.uid == "1"
    assert detail.name == "Luke Skywalker"
    assert detail.attribute("gender") == "male"
    assert detail.attribute("height") == "172"
    assert detail.attribute("homeworld") is None


@pytest.mark.asyncio
async def test_non_success_status_raises_transport_error() -> None:
    client = _client(lambda request: httpx.Response(404, json={"message": "not found"}))

    with pytest.raises(TransportError) as excinfo:
        await client.get_person("999")

    assert excinfo.value.status_code == 404
    assert excinfo.value.url.endswith("/people/999")


@pytest.mark.asyncio
async def test_connection_failure_raises_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = _client(handler)

    with pytest.raises(TransportError) as excinfo:
        await client.get_page(1)

    assert excinfo.value.status_code is None


@pytest.mark.asyncio
async def test_invalid_json_raises_transport_error() -> None:
    client = _client(lambda request: httpx.Response(200, text="<html>maintenance</html>"))

    with pytest.raises(TransportError, match="not valid JSON"):
        await client.get_page(1)


@pytest.mark.asyncio
async def test_unexpected_shape_raises_transport_error() -> None:
    client = _client(lambda request: httpx.Response(200, json={"message": "ok"}))

    with pytest.raises(TransportError, match="Malformed detail payload"):
        await client.get_person("1")


@pytest.mark.asyncio
async def test_aclose_leaves_injected_client_open() -> None:
    http_client = httpx.AsyncClient(
        transport=httpx.MockTransport(lambda request: httpx.Response(200, json=PAGE_PAYLOAD))
    )
    client = SwapiClient(BASE_URL, http_client=http_client)

    await client.aclose()

    assert not http_client.is_closed
    await http_client.aclose()
