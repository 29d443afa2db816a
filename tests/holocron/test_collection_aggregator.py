"""Tests for materializing the full people collection."""

from __future__ import annotations

import logging

import pytest

from holocron.cache import CacheStore
from holocron.errors import FatalFetchError
from holocron.schemas.people import PageEnvelope
from holocron.services.collection_aggregator import (
    PAGE_CAP,
    CollectionAggregator,
    merge_pages,
)
from holocron.services.page_fetcher import PageFetcher
from tests.holocron.support.fake_transport import (
    FakeClock,
    FakePeopleTransport,
    make_people,
)


def _aggregator(
    transport: FakePeopleTransport,
    clock: FakeClock | None = None,
    *,
    page_cap: int = PAGE_CAP,
) -> CollectionAggregator:
    cache = CacheStore(
        {"page": 300.0, "detail": 600.0, "all": 300.0}, clock=clock or FakeClock()
    )
    return CollectionAggregator(PageFetcher(transport, cache), cache, page_cap=page_cap)


@pytest.mark.asyncio
async def test_fetch_all_merges_every_page_in_order() -> None:
    transport = FakePeopleTransport(make_people(108))
    aggregator = _aggregator(transport)

    people = await aggregator.fetch_all()

    assert [person.uid for person in people] == [str(i) for i in range(1, 109)]
    assert sorted(transport.page_calls) == list(range(1, 10))
    assert transport.page_calls[0] == 1
    assert aggregator.last_failures == []


@pytest.mark.asyncio
async def test_failed_middle_page_is_skipped(caplog: pytest.LogCaptureFixture) -> None:
    transport = FakePeopleTransport(make_people(108), failing_pages={5})
    aggregator = _aggregator(transport)

    with caplog.at_level(logging.WARNING):
        people = await aggregator.fetch_all()

    uids = [int(person.uid) for person in people]
    assert len(people) == 96
    assert uids == sorted(uids)
    assert not set(range(49, 61)) & set(uids)
    assert [failure.resource for failure in aggregator.last_failures] == ["page:5"]
    assert "Skipping page 5" in caplog.text


@pytest.mark.asyncio
async def test_first_page_failure_is_fatal() -> None:
    transport = FakePeopleTransport(make_people(108), failing_pages={1})
    aggregator = _aggregator(transport)

    with pytest.raises(FatalFetchError) as excinfo:
        await aggregator.fetch_all()

    assert excinfo.value.resource == "page:1"
    assert transport.page_calls == [1]
    assert aggregator.cache.get("all") is None


@pytest.mark.asyncio
async def test_second_call_within_ttl_issues_no_requests() -> None:
    transport = FakePeopleTransport(make_people(108))
    aggregator = _aggregator(transport)

    first = await aggregator.fetch_all()
    calls_after_first = transport.network_calls
    second = await aggregator.fetch_all()

    assert second == first
    assert transport.network_calls == calls_after_first


@pytest.mark.asyncio
async def test_expired_collection_reuses_fresh_pages() -> None:
    transport = FakePeopleTransport(make_people(24))
    clock = FakeClock()
    cache = CacheStore({"page": 300.0, "all": 60.0}, clock=clock)
    aggregator = CollectionAggregator(PageFetcher(transport, cache), cache)

    await aggregator.fetch_all()
    clock.advance(61.0)
    people = await aggregator.fetch_all()

    assert len(people) == 24
    assert transport.page_calls == [1, 2]


@pytest.mark.asyncio
async def test_page_cap_bounds_the_fan_out() -> None:
    transport = FakePeopleTransport(make_people(12 * 15))
    aggregator = _aggregator(transport)

    people = await aggregator.fetch_all()

    assert len(people) == 12 * PAGE_CAP
    assert max(transport.page_calls) == PAGE_CAP


@pytest.mark.asyncio
async def test_custom_page_cap_is_honoured() -> None:
    transport = FakePeopleTransport(make_people(60))
    aggregator = _aggregator(transport, page_cap=2)

    people = await aggregator.fetch_all()

    assert len(people) == 24
    assert sorted(transport.page_calls) == [1, 2]


@pytest.mark.asyncio
async def test_single_page_collection_needs_no_fan_out() -> None:
    transport = FakePeopleTransport(make_people(5))
    aggregator = _aggregator(transport)

    people = await aggregator.fetch_all()

    assert len(people) == 5
    assert transport.page_calls == [1]


@pytest.mark.asyncio
async def test_empty_collection_is_cached() -> None:
    transport = FakePeopleTransport([], total_pages=0)
    aggregator = _aggregator(transport)

    assert await aggregator.fetch_all() == []
    assert await aggregator.fetch_all() == []
    assert transport.page_calls == [1]


def test_merge_pages_keeps_first_occurrence_of_each_uid() -> None:
    people = make_people(3)
    pages = [
        PageEnvelope(total_records=4, total_pages=2, results=people[:2]),
        PageEnvelope(total_records=4, total_pages=2, results=[people[1], people[2]]),
    ]

    assert [person.uid for person in merge_pages(pages)] == ["1", "2", "3"]


def test_page_cap_must_be_positive() -> None:
    with pytest.raises(ValueError):
        _aggregator(FakePeopleTransport([]), page_cap=0)
