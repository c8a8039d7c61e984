from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class FavoriteResponse(BaseModel):
    id: Optional[str] = None
    userId: Optional[str] = None
    recipeId: str
    recipeTitle: str = ""
    recipeImage: str = ""
    createdAt: Optional[str] = None


class FavoritesListResponse(BaseModel):
    favorites: list[FavoriteResponse] = Field(default_factory=list)


class FavoriteAddRequest(BaseModel):
    userId: Optional[str] = None
    recipeId: str = Field(..., min_length=1)
    recipeTitle: Optional[str] = None
    recipeImage: Optional[str] = None


class FavoriteAddResponse(BaseModel):
    message: str
    favorite: FavoriteResponse


class FavoriteRemoveRequest(BaseModel):
    userId: Optional[str] = None
    recipeId: str = Field(..., min_length=1)


class MessageResponse(BaseModel):
    message: str
