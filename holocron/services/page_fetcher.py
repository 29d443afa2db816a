"""Cached access to single pages of the remote people resource."""

from __future__ import annotations

import logging

from holocron.cache import CacheStore, page_key
from holocron.client import PeopleTransport
from holocron.schemas.people import PageEnvelope
from holocron.services.caching import CacheableService, cached

logger = logging.getLogger(__name__)


class PageFetcher(CacheableService):
    """Fetch one page at a time, consulting ``page:<n>`` before the network.

    Transport failures propagate unchanged as ``TransportError``.  Retrying is
    left to the transport.
    """

    def __init__(self, transport: PeopleTransport, cache: CacheStore) -> None:
        super().__init__(cache=cache)
        self._transport = transport

    @cached(lambda _self, page: page_key(page))
    async def fetch_page(self, page: int) -> PageEnvelope:
        if page < 1:
            raise ValueError(f"Page numbers start at 1, got {page}")
        logger.debug("Fetching remote page %s", page)
        return await self._transport.get_page(page)


__all__ = ["PageFetcher"]
