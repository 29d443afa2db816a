"""Pydantic models for people records, remote envelopes and synthesized views.

Remote payloads are validated into these models at the transport boundary so
services never have to duck-type raw JSON.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Person(BaseModel):
    """Summary entry listed on a remote page."""

    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    uid: str
    name: str
    url: str = ""


class PersonDetail(BaseModel):
    """Extended attributes for a single person (gender, birth year, colors...)."""

    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    uid: str
    description: str = ""
    properties: dict[str, str] = Field(default_factory=dict)

    @field_validator("properties", mode="before")
    @classmethod
    def _stringify_properties(cls, value: Any) -> Any:
        """Remote properties are strings; drop nulls and stringify the rest."""

        if not isinstance(value, dict):
            return value
        return {str(key): str(item) for key, item in value.items() if item is not None}

    @property
    def name(self) -> str:
        return self.properties.get("name", "")

    def attribute(self, name: str) -> str | None:
        """Return a property value by name, ``None`` when absent."""

        return self.properties.get(name)


class PageEnvelope(BaseModel):
    """One page of people as returned by ``GET /people?page=n``."""

    message: str = "ok"
    total_records: int = Field(0, ge=0)
    total_pages: int = Field(0, ge=0)
    previous: str | None = None
    next: str | None = None
    results: list[Person] = Field(default_factory=list)


class DetailEnvelope(BaseModel):
    """Wrapper returned by ``GET /people/{uid}``."""

    message: str = "ok"
    result: PersonDetail


class PaginationView(BaseModel):
    """Pagination envelope synthesized over an in-memory ordered sequence."""

    total_records: int
    total_pages: int
    previous: str | None = None
    next: str | None = None
    results: list[Person] = Field(default_factory=list)


class ViewMode(str, Enum):
    """Which view produced a :class:`CatalogView`, in precedence order."""

    SEARCH = "search"
    FAVORITES = "favorites"
    ATTRIBUTE_FILTER = "attribute_filter"
    REMOTE_PAGE = "remote_page"


class CatalogView(PaginationView):
    """Page of people handed to the presentation layer.

    ``previous`` and ``next`` are always ``page=N`` tokens, for remote pages
    as well as locally paginated views.
    """

    mode: ViewMode
    page: int
    page_size: int
    summary: str = ""


class ComparisonRequest(BaseModel):
    uids: list[str] = Field(..., min_length=1)


class ComparisonEntry(BaseModel):
    """A compared person; ``detail`` is ``None`` when it could not be fetched."""

    uid: str
    name: str | None = None
    detail: PersonDetail | None = None


class ComparisonResponse(BaseModel):
    entries: list[ComparisonEntry]


__all__ = [
    "CatalogView",
    "ComparisonEntry",
    "ComparisonRequest",
    "ComparisonResponse",
    "DetailEnvelope",
    "PageEnvelope",
    "PaginationView",
    "Person",
    "PersonDetail",
    "ViewMode",
]
