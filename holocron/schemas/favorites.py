"""Pydantic schemas that power the favorites API surface."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator


class FavoriteCreate(BaseModel):
    """Payload for marking a person as a favorite."""

    uid: str = Field(..., min_length=1, description="Remote identifier of the person")
    name: str = Field(..., description="Display name captured when the favorite is added")

    @field_validator("uid")
    @classmethod
    def _trim_uid(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("uid must not be blank once whitespace is removed")
        return cleaned


class FavoriteCharacter(BaseModel):
    """Persisted favorite record."""

    uid: str
    name: str
    added_at: int = Field(
        ...,
        alias="addedAt",
        description="Epoch milliseconds at which the favorite was added.",
    )

    model_config = {"populate_by_name": True}


class FavoriteListResponse(BaseModel):
    total: int
    favorites: list[FavoriteCharacter]


class FavoriteToggleResponse(BaseModel):
    uid: str
    is_favorite: bool


__all__ = [
    "FavoriteCharacter",
    "FavoriteCreate",
    "FavoriteListResponse",
    "FavoriteToggleResponse",
]
