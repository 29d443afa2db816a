"""FastAPI router exposing the persisted favorites list."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status

from holocron.schemas.favorites import (
    FavoriteCharacter,
    FavoriteCreate,
    FavoriteListResponse,
    FavoriteToggleResponse,
)
from holocron.services.dependencies import get_favorites_store
from holocron.services.favorites import FavoritesStore

router = APIRouter()


@router.get("/", response_model=FavoriteListResponse)
@router.get("", response_model=FavoriteListResponse, include_in_schema=False)
def list_favorites(
    store: FavoritesStore = Depends(get_favorites_store),
) -> FavoriteListResponse:
    """Return favorites in the order they were added."""

    favorites = store.entries()
    return FavoriteListResponse(total=len(favorites), favorites=favorites)


@router.post(
    "/",
    response_model=FavoriteCharacter,
    status_code=status.HTTP_201_CREATED,
)
def add_favorite(
    payload: FavoriteCreate,
    store: FavoritesStore = Depends(get_favorites_store),
) -> FavoriteCharacter:
    """Mark a person as a favorite. Adding an existing favorite is a no-op."""

    return store.add(payload.uid, payload.name)


@router.post("/toggle", response_model=FavoriteToggleResponse)
def toggle_favorite(
    payload: FavoriteCreate,
    store: FavoritesStore = Depends(get_favorites_store),
) -> FavoriteToggleResponse:
    """Flip the favorite state of a person."""

    is_favorite = store.toggle(payload.uid, payload.name)
    return FavoriteToggleResponse(uid=payload.uid, is_favorite=is_favorite)


@router.delete("/{uid}", status_code=status.HTTP_204_NO_CONTENT)
def remove_favorite(
    uid: str,
    store: FavoritesStore = Depends(get_favorites_store),
) -> Response:
    """Remove a person from the favorites list."""

    if not store.remove(uid):
        raise HTTPException(status_code=404, detail="Favorite not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
