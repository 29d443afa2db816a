"""Pydantic schemas for API responses."""

from holocron.schemas.favorites import (  # noqa: F401
    FavoriteCharacter,
    FavoriteCreate,
    FavoriteListResponse,
    FavoriteToggleResponse,
)
from holocron.schemas.people import (  # noqa: F401
    CatalogView,
    ComparisonEntry,
    ComparisonRequest,
    ComparisonResponse,
    DetailEnvelope,
    PageEnvelope,
    PaginationView,
    Person,
    PersonDetail,
    ViewMode,
)
