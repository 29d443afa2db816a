from fastapi import APIRouter, Depends, Query

from holocron.schemas.people import (
    CatalogView,
    ComparisonRequest,
    ComparisonResponse,
    PersonDetail,
)
from holocron.services.comparison import ComparisonService
from holocron.services.dependencies import (
    get_comparison_service,
    get_detail_batcher,
    get_favorites_store,
    get_view_engine,
)
from holocron.services.detail_batcher import DetailBatcher
from holocron.services.favorites import FavoritesStore
from holocron.services.view_engine import GENDER_OPTIONS, ViewEngine, build_view_request

router = APIRouter()


@router.get("/", response_model=CatalogView)
@router.get("", response_model=CatalogView, include_in_schema=False)
async def list_people(
    page: int = Query(1, ge=1, description="1-indexed page number"),
    search: str = Query("", description="Case-insensitive substring of the person's name"),
    gender: str = Query(
        "all",
        description="Gender filter. Options: 'all', 'male', 'female', 'hermaphrodite', 'n/a'.",
    ),
    favorites_only: bool = Query(False, description="Only list people marked as favorites"),
    engine: ViewEngine = Depends(get_view_engine),
    favorites: FavoritesStore = Depends(get_favorites_store),
) -> CatalogView:
    """List people, honouring search, favorites and gender filters.

    Examples:
        /people/?search=sky           # Luke Skywalker, Anakin Skywalker, ...
        /people/?gender=female&page=2
        /people/?favorites_only=true
    """

    normalized_gender = gender.strip().lower() or "all"
    if normalized_gender not in GENDER_OPTIONS:
        raise ValueError(
            f"Unsupported gender filter {gender!r}; expected one of {', '.join(GENDER_OPTIONS)}"
        )

    request = build_view_request(
        page=page,
        search=search,
        favorites_only=favorites_only,
        filter_value=normalized_gender,
    )
    return await engine.build_view(request, favorite_uids=favorites.uids())


@router.post("/compare", response_model=ComparisonResponse)
async def compare_people(
    payload: ComparisonRequest,
    service: ComparisonService = Depends(get_comparison_service),
) -> ComparisonResponse:
    """Return detail records for up to three people side by side."""

    return await service.compare(payload.uids)


@router.get("/{uid}", response_model=PersonDetail)
async def get_person(
    uid: str,
    batcher: DetailBatcher = Depends(get_detail_batcher),
) -> PersonDetail:
    """Get the full detail record for one person."""

    return await batcher.fetch_detail(uid)
