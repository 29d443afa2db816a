"""Service wiring for the catalog layer and its FastAPI dependencies.

The cache must outlive individual requests, so the full object graph is built
once per application (see :func:`build_catalog_services`) and stored on
``app.state``.  Route dependencies simply hand out its members.
"""

from __future__ import annotations

import time
from dataclasses import dataclass

import httpx
from fastapi import Depends, Request

from holocron.cache import CacheStore, Clock
from holocron.client import PeopleTransport, SwapiClient
from holocron.services.collection_aggregator import CollectionAggregator
from holocron.services.comparison import ComparisonService
from holocron.services.detail_batcher import DetailBatcher
from holocron.services.favorites import FavoritesStore, JsonKeyValueFile
from holocron.services.page_fetcher import PageFetcher
from holocron.services.view_engine import ViewEngine
from holocron.settings import AppSettings


@dataclass(slots=True)
class CatalogServices:
    """Everything a request handler may need, sharing one cache and transport."""

    settings: AppSettings
    transport: PeopleTransport
    cache: CacheStore
    page_fetcher: PageFetcher
    aggregator: CollectionAggregator
    detail_batcher: DetailBatcher
    view_engine: ViewEngine
    comparison: ComparisonService
    favorites: FavoritesStore

    async def aclose(self) -> None:
        if isinstance(self.transport, SwapiClient):
            await self.transport.aclose()


def build_catalog_services(
    settings: AppSettings,
    *,
    transport: PeopleTransport | None = None,
    http_client: httpx.AsyncClient | None = None,
    clock: Clock = time.monotonic,
    favorites: FavoritesStore | None = None,
) -> CatalogServices:
    """Construct the catalog object graph from ``settings``.

    ``transport`` replaces the HTTP client entirely; ``http_client`` keeps the
    real :class:`SwapiClient` but routes it through the supplied httpx client
    (tests pass one backed by ``httpx.MockTransport``).
    """

    if transport is None:
        transport = SwapiClient(
            settings.base_url,
            page_size=settings.page_size,
            timeout=settings.request_timeout_seconds,
            http_client=http_client,
        )
    cache = CacheStore(settings.ttl_policy(), clock=clock)
    page_fetcher = PageFetcher(transport, cache)
    aggregator = CollectionAggregator(page_fetcher, cache, page_cap=settings.page_cap)
    detail_batcher = DetailBatcher(
        transport, cache, concurrency_limit=settings.detail_concurrency_limit
    )
    view_engine = ViewEngine(
        page_fetcher, aggregator, detail_batcher, page_size=settings.page_size
    )
    if favorites is None:
        favorites = FavoritesStore(JsonKeyValueFile(settings.favorites_path))

    return CatalogServices(
        settings=settings,
        transport=transport,
        cache=cache,
        page_fetcher=page_fetcher,
        aggregator=aggregator,
        detail_batcher=detail_batcher,
        view_engine=view_engine,
        comparison=ComparisonService(detail_batcher),
        favorites=favorites,
    )


def get_catalog_services(request: Request) -> CatalogServices:
    """Return the application-wide services created during startup."""

    services = getattr(request.app.state, "catalog", None)
    if services is None:
        raise RuntimeError("Catalog services have not been initialised")
    return services


def get_view_engine(
    services: CatalogServices = Depends(get_catalog_services),
) -> ViewEngine:
    return services.view_engine


def get_detail_batcher(
    services: CatalogServices = Depends(get_catalog_services),
) -> DetailBatcher:
    return services.detail_batcher


def get_comparison_service(
    services: CatalogServices = Depends(get_catalog_services),
) -> ComparisonService:
    return services.comparison


def get_favorites_store(
    services: CatalogServices = Depends(get_catalog_services),
) -> FavoritesStore:
    return services.favorites


__all__ = [
    "CatalogServices",
    "build_catalog_services",
    "get_catalog_services",
    "get_comparison_service",
    "get_detail_batcher",
    "get_favorites_store",
    "get_view_engine",
]
