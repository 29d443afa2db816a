"""Materialize the whole people collection from the paginated remote resource.

The remote resource only reveals how many pages exist once the first page has
been fetched, so materialization runs in two phases: a serial probe of page 1
followed by a concurrent fan-out over pages ``2..min(total_pages, page_cap)``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from holocron.cache import CacheStore, collection_key, page_key
from holocron.errors import FatalFetchError, PartialFetchFailure, TransportError
from holocron.schemas.people import PageEnvelope, Person
from holocron.services.caching import CacheableService, cached
from holocron.services.concurrency import settle_all
from holocron.services.page_fetcher import PageFetcher
from holocron.settings import DEFAULT_PAGE_CAP

logger = logging.getLogger(__name__)

PAGE_CAP = DEFAULT_PAGE_CAP


def merge_pages(pages: Iterable[PageEnvelope]) -> list[Person]:
    """Concatenate page results in the given order, keeping the first of each uid."""

    seen: set[str] = set()
    merged: list[Person] = []
    for envelope in pages:
        for person in envelope.results:
            if person.uid in seen:
                continue
            seen.add(person.uid)
            merged.append(person)
    return merged


class CollectionAggregator(CacheableService):
    """Build and cache the best-effort full collection under the ``all`` key.

    Page 1 failing is fatal.  Any later page that fails is logged, recorded in
    :attr:`last_failures` and left out of the result; it is not retried.
    """

    def __init__(
        self,
        page_fetcher: PageFetcher,
        cache: CacheStore,
        *,
        page_cap: int = PAGE_CAP,
    ) -> None:
        if page_cap < 1:
            raise ValueError("page_cap must be at least 1")
        super().__init__(cache=cache)
        self._page_fetcher = page_fetcher
        self._page_cap = page_cap
        self.last_failures: list[PartialFetchFailure] = []

    @property
    def page_cap(self) -> int:
        return self._page_cap

    @cached(lambda _self: collection_key())
    async def fetch_all(self) -> list[Person]:
        try:
            first_page = await self._page_fetcher.fetch_page(1)
        except TransportError as exc:
            logger.error("Unable to fetch the first page of people: %s", exc)
            raise FatalFetchError(
                "The first page of people could not be fetched", resource=page_key(1)
            ) from exc

        upper = min(first_page.total_pages, self._page_cap)
        remaining = list(range(2, upper + 1))
        outcomes = await settle_all(
            self._page_fetcher.fetch_page(page) for page in remaining
        )

        pages = [first_page]
        failures: list[PartialFetchFailure] = []
        for page, outcome in zip(remaining, outcomes):
            if isinstance(outcome, BaseException):
                failure = PartialFetchFailure.from_exception(page_key(page), outcome)
                logger.warning(
                    "Skipping page %s while materializing people: %s", page, failure.error
                )
                failures.append(failure)
                continue
            pages.append(outcome)

        self.last_failures = failures
        collection = merge_pages(pages)
        logger.info(
            "Materialized %s people from %s of %s page(s)",
            len(collection),
            len(pages),
            max(upper, 1),
        )
        return collection


__all__ = ["CollectionAggregator", "PAGE_CAP", "merge_pages"]
