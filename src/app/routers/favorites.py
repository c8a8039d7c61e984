from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from src.app.deps import get_favorites_service
from src.app.domain.errors import FavoriteConflictError
from src.app.domain.models import Favorite
from src.app.schemas.favorites import (
    FavoriteAddRequest,
    FavoriteAddResponse,
    FavoriteRemoveRequest,
    FavoriteResponse,
    FavoritesListResponse,
    MessageResponse,
)
from src.app.services.favorites_service import FavoritesService

router = APIRouter(prefix="/favorites", tags=["favorites"])


def _favorite_response(favorite: Favorite) -> FavoriteResponse:
    return FavoriteResponse(
        id=favorite.id,
        userId=favorite.owner_id,
        recipeId=favorite.recipe_ref,
        recipeTitle=favorite.title,
        recipeImage=favorite.image,
        createdAt=favorite.created_at.isoformat() if favorite.created_at else None,
    )


@router.get("", response_model=FavoritesListResponse)
def list_guest_favorites(
    service: FavoritesService = Depends(get_favorites_service),
) -> FavoritesListResponse:
    return FavoritesListResponse(favorites=[_favorite_response(f) for f in service.list(None)])


@router.get("/{user_id}", response_model=FavoritesListResponse)
def list_favorites(
    user_id: str,
    service: FavoritesService = Depends(get_favorites_service),
) -> FavoritesListResponse:
    return FavoritesListResponse(favorites=[_favorite_response(f) for f in service.list(user_id)])


@router.post("/add", response_model=FavoriteAddResponse, status_code=status.HTTP_201_CREATED)
def add_favorite(
    payload: FavoriteAddRequest,
    service: FavoritesService = Depends(get_favorites_service),
) -> FavoriteAddResponse:
    try:
        favorite = service.add(
            payload.userId,
            payload.recipeId,
            title=payload.recipeTitle or "",
            image=payload.recipeImage or "",
        )
    except FavoriteConflictError:
        raise HTTPException(status_code=409, detail="Already in favorites")
    return FavoriteAddResponse(message="Added to favorites", favorite=_favorite_response(favorite))


@router.delete("/remove", response_model=MessageResponse)
def remove_favorite(
    payload: FavoriteRemoveRequest,
    service: FavoritesService = Depends(get_favorites_service),
) -> MessageResponse:
    service.remove(payload.userId, payload.recipeId)
    return MessageResponse(message="Removed from favorites")
