"""Compose the page of people shown to the client.

Exactly one view mode applies to a request, chosen by precedence:

1. an active search query,
2. the favorites-only toggle,
3. an active attribute filter (for example ``gender=female``),
4. the plain remote page.

The first three operate on the materialized collection and paginate locally;
the last one is a straight pass-through of one remote page.
"""

from __future__ import annotations

import logging
from collections.abc import Collection, Iterable, Sequence
from dataclasses import dataclass

from holocron.cache import page_key
from holocron.errors import FatalFetchError, TransportError
from holocron.schemas.people import CatalogView, PaginationView, Person, ViewMode
from holocron.services.collection_aggregator import CollectionAggregator
from holocron.services.detail_batcher import DetailBatcher
from holocron.services.page_fetcher import PageFetcher
from holocron.services.pagination import page_link, paginate
from holocron.settings import DEFAULT_PAGE_SIZE

logger = logging.getLogger(__name__)

ALL_VALUES = "all"
DEFAULT_FILTER_ATTRIBUTE = "gender"
GENDER_OPTIONS: tuple[str, ...] = ("all", "male", "female", "hermaphrodite", "n/a")


@dataclass(frozen=True, slots=True)
class ViewRequest:
    """Normalized inputs for one view computation."""

    page: int = 1
    query: str | None = None
    favorites_only: bool = False
    filter_attribute: str = DEFAULT_FILTER_ATTRIBUTE
    filter_value: str | None = None

    @property
    def is_searching(self) -> bool:
        return bool(self.query)

    @property
    def is_filtering(self) -> bool:
        return self.filter_value is not None

    @property
    def mode(self) -> ViewMode:
        if self.is_searching:
            return ViewMode.SEARCH
        if self.favorites_only:
            return ViewMode.FAVORITES
        if self.is_filtering:
            return ViewMode.ATTRIBUTE_FILTER
        return ViewMode.REMOTE_PAGE


def build_view_request(
    *,
    page: int = 1,
    search: str | None = None,
    favorites_only: bool = False,
    filter_value: str | None = None,
    filter_attribute: str = DEFAULT_FILTER_ATTRIBUTE,
) -> ViewRequest:
    """Return sanitized view inputs; ``"all"`` or blank disables the filter."""

    if page < 1:
        raise ValueError(f"Page numbers start at 1, got {page}")

    normalized_query = (search or "").strip()
    normalized_value = (filter_value or "").strip()
    if normalized_value.lower() == ALL_VALUES:
        normalized_value = ""

    return ViewRequest(
        page=page,
        query=normalized_query or None,
        favorites_only=favorites_only,
        filter_attribute=filter_attribute.strip() or DEFAULT_FILTER_ATTRIBUTE,
        filter_value=normalized_value or None,
    )


def filter_by_name(people: Iterable[Person], query: str) -> list[Person]:
    """Return people whose name contains ``query``, ignoring case."""

    needle = query.lower()
    return [person for person in people if needle in person.name.lower()]


def filter_by_favorites(people: Iterable[Person], favorite_uids: Collection[str]) -> list[Person]:
    return [person for person in people if person.uid in favorite_uids]


def describe_view(request: ViewRequest, total_records: int) -> str:
    """Return the human-readable headline for a computed view."""

    if request.is_searching and request.is_filtering:
        return (
            f'Search results for "{request.query}" ({request.filter_value}): '
            f"{total_records} characters found"
        )
    if request.is_searching:
        return f'Search results for "{request.query}": {total_records} characters found'
    if request.favorites_only:
        return f"Favorites: {total_records} characters"
    if request.is_filtering:
        return f"{request.filter_value} characters: {total_records} found"
    return f"Total: {total_records} characters"


class ViewEngine:
    """Turn a :class:`ViewRequest` into a :class:`CatalogView`."""

    def __init__(
        self,
        page_fetcher: PageFetcher,
        aggregator: CollectionAggregator,
        detail_batcher: DetailBatcher,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        self._page_fetcher = page_fetcher
        self._aggregator = aggregator
        self._detail_batcher = detail_batcher
        self._page_size = page_size

    async def build_view(
        self,
        request: ViewRequest,
        favorite_uids: Collection[str] = (),
    ) -> CatalogView:
        """Compute the view selected by ``request``.

        Raises ``FatalFetchError`` when the collection cannot be materialized
        or the requested remote page cannot be fetched.
        """

        mode = request.mode
        if mode is ViewMode.REMOTE_PAGE:
            pagination = await self._remote_page(request.page)
        else:
            people = await self._select(request, favorite_uids)
            pagination = paginate(people, request.page, self._page_size)

        logger.debug(
            "Built %s view for page %s with %s of %s record(s)",
            mode.value,
            request.page,
            len(pagination.results),
            pagination.total_records,
        )
        return CatalogView(
            **pagination.model_dump(exclude={"results"}),
            results=pagination.results,
            mode=mode,
            page=request.page,
            page_size=self._page_size,
            summary=describe_view(request, pagination.total_records),
        )

    async def _select(
        self, request: ViewRequest, favorite_uids: Collection[str]
    ) -> list[Person]:
        people = await self._aggregator.fetch_all()

        if request.is_searching:
            matches = filter_by_name(people, request.query or "")
            if request.is_filtering:
                matches = await self._filter_by_attribute(matches, request)
            return matches

        if request.favorites_only:
            return filter_by_favorites(people, set(favorite_uids))

        return await self._filter_by_attribute(people, request)

    async def _filter_by_attribute(
        self, people: Sequence[Person], request: ViewRequest
    ) -> list[Person]:
        """Keep people whose detail attribute equals the requested value.

        People whose details could not be fetched are dropped.
        """

        details = await self._detail_batcher.fetch_details(person.uid for person in people)
        return [
            person
            for person in people
            if person.uid in details
            and details[person.uid].attribute(request.filter_attribute) == request.filter_value
        ]

    async def _remote_page(self, page: int) -> PaginationView:
        try:
            envelope = await self._page_fetcher.fetch_page(page)
        except TransportError as exc:
            logger.error("Unable to fetch remote page %s: %s", page, exc)
            raise FatalFetchError(
                f"Page {page} of people could not be fetched", resource=page_key(page)
            ) from exc
        return PaginationView(
            total_records=envelope.total_records,
            total_pages=envelope.total_pages,
            # Remote links are rewritten to the same tokens local pagination uses.
            previous=page_link(page - 1) if envelope.previous else None,
            next=page_link(page + 1) if envelope.next else None,
            results=list(envelope.results),
        )


__all__ = [
    "GENDER_OPTIONS",
    "ViewEngine",
    "ViewRequest",
    "build_view_request",
    "describe_view",
    "filter_by_favorites",
    "filter_by_name",
]
