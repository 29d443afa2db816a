"""Batch retrieval of person detail records with per-item failure isolation."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from holocron.cache import CacheStore, detail_key
from holocron.client import PeopleTransport
from holocron.errors import FatalFetchError, PartialFetchFailure, TransportError
from holocron.schemas.people import PersonDetail
from holocron.services.caching import CacheableService
from holocron.services.concurrency import settle_all

logger = logging.getLogger(__name__)


class DetailBatcher(CacheableService):
    """Resolve detail records for many uids at once.

    Cached uids are answered from the store; the rest are fetched
    concurrently.  A uid whose fetch fails is logged, recorded in
    :attr:`last_failures` and omitted, so callers must accept a mapping
    smaller than the input.

    The fan-out is unbounded unless ``concurrency_limit`` is given, which
    matters when an attribute filter runs over a very large collection.
    """

    def __init__(
        self,
        transport: PeopleTransport,
        cache: CacheStore,
        *,
        concurrency_limit: int | None = None,
    ) -> None:
        super().__init__(cache=cache)
        self._transport = transport
        self._concurrency_limit = concurrency_limit
        self.last_failures: list[PartialFetchFailure] = []

    async def fetch_details(self, uids: Iterable[str]) -> dict[str, PersonDetail]:
        """Return ``uid -> PersonDetail`` for every uid that could be resolved."""

        ordered = list(dict.fromkeys(uids))
        resolved: dict[str, PersonDetail] = {}
        uncached: list[str] = []
        for uid in ordered:
            cached_detail = self._cache_get(detail_key(uid))
            if cached_detail is not None:
                resolved[uid] = cached_detail
            else:
                uncached.append(uid)

        outcomes = await settle_all(
            (self._fetch_and_cache(uid) for uid in uncached),
            limit=self._concurrency_limit,
        )

        failures: list[PartialFetchFailure] = []
        for uid, outcome in zip(uncached, outcomes):
            if isinstance(outcome, BaseException):
                failure = PartialFetchFailure.from_exception(detail_key(uid), outcome)
                logger.warning("Skipping details for %s: %s", uid, failure.error)
                failures.append(failure)
                continue
            resolved[uid] = outcome
        self.last_failures = failures

        logger.debug(
            "Resolved %s of %s detail record(s) (%s from cache, %s failed)",
            len(resolved),
            len(ordered),
            len(ordered) - len(uncached),
            len(failures),
        )
        # Re-key in input order; cache hits were collected before remote results.
        return {uid: resolved[uid] for uid in ordered if uid in resolved}

    async def fetch_detail(self, uid: str) -> PersonDetail:
        """Return one detail record, raising :class:`FatalFetchError` on failure."""

        cached_detail = self._cache_get(detail_key(uid))
        if cached_detail is not None:
            return cached_detail
        try:
            return await self._fetch_and_cache(uid)
        except TransportError as exc:
            logger.error("Unable to fetch details for %s: %s", uid, exc)
            raise FatalFetchError(
                f"Details for person {uid} could not be fetched", resource=detail_key(uid)
            ) from exc

    async def _fetch_and_cache(self, uid: str) -> PersonDetail:
        detail = await self._transport.get_person(uid)
        self._cache_set(detail_key(uid), detail)
        return detail


__all__ = ["DetailBatcher"]
