"""HTTP transport for the remote people resource.

The client owns a single ``httpx.AsyncClient`` and converts every way a call
can go wrong (connection failure, non-2xx status, undecodable body, payload
that does not match the expected shape) into :class:`TransportError`.  It
neither caches nor retries; both concerns live above it.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol, runtime_checkable

import httpx
from pydantic import ValidationError

from holocron.errors import TransportError
from holocron.schemas.people import DetailEnvelope, PageEnvelope, PersonDetail
from holocron.settings import DEFAULT_PAGE_SIZE, DEFAULT_REQUEST_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)


@runtime_checkable
class PeopleTransport(Protocol):
    """Minimal transport surface required by the fetch services."""

    async def get_page(self, page: int) -> PageEnvelope:
        """Return one remote page or raise :class:`TransportError`."""

    async def get_person(self, uid: str) -> PersonDetail:
        """Return one detail record or raise :class:`TransportError`."""


class SwapiClient:
    """Read-only client for ``/people`` and ``/people/{uid}``."""

    def __init__(
        self,
        base_url: str,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
        timeout: float = DEFAULT_REQUEST_TIMEOUT_SECONDS,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._page_size = page_size
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(
            timeout=timeout,
            headers={"Accept": "application/json"},
        )

    def page_url(self, page: int) -> str:
        return f"{self._base_url}/people?page={page}&limit={self._page_size}"

    def detail_url(self, uid: str) -> str:
        return f"{self._base_url}/people/{uid}"

    async def get_page(self, page: int) -> PageEnvelope:
        """Fetch one page of people."""

        url = self.page_url(page)
        payload = await self._get_json(url)
        try:
            return PageEnvelope.model_validate(payload)
        except ValidationError as exc:
            raise TransportError(
                f"Malformed page payload from {url}: {exc.error_count()} error(s)",
                url=url,
            ) from exc

    async def get_person(self, uid: str) -> PersonDetail:
        """Fetch the detail record for ``uid``."""

        url = self.detail_url(uid)
        payload = await self._get_json(url)
        try:
            return DetailEnvelope.model_validate(payload).result
        except ValidationError as exc:
            raise TransportError(
                f"Malformed detail payload from {url}: {exc.error_count()} error(s)",
                url=url,
            ) from exc

    async def _get_json(self, url: str) -> Any:
        try:
            response = await self._http.get(url)
        except httpx.HTTPError as exc:
            logger.debug("Request to %s failed: %s", url, exc)
            raise TransportError(f"Request to {url} failed: {exc}", url=url) from exc

        if not response.is_success:
            raise TransportError(
                f"Request to {url} returned status {response.status_code}",
                url=url,
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as exc:
            raise TransportError(
                f"Response from {url} is not valid JSON",
                url=url,
                status_code=response.status_code,
            ) from exc

    async def aclose(self) -> None:
        """Close the underlying HTTP client when this instance created it."""

        if self._owns_client:
            await self._http.aclose()


__all__ = ["PeopleTransport", "SwapiClient"]
