from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from src.app.deps import get_shopping_list_service
from src.app.domain.models import ShoppingListItem
from src.app.schemas.shopping_list import (
    ShoppingListAddRequest,
    ShoppingListItemResponse,
    ShoppingListResponse,
)
from src.app.services.shopping_list_service import ShoppingListService

log = logging.getLogger("shopping_list")
router = APIRouter(prefix="/shoppingList", tags=["shopping-list"])


def _list_response(items: list[ShoppingListItem]) -> ShoppingListResponse:
    return ShoppingListResponse(
        list=[
            ShoppingListItemResponse(recipeName=item.recipe_name, ingredients=item.ingredients.to_list())
            for item in items
        ]
    )


@router.get("/{user_id}", response_model=ShoppingListResponse)
def get_shopping_list(
    user_id: str,
    service: ShoppingListService = Depends(get_shopping_list_service),
) -> ShoppingListResponse:
    return _list_response(service.get(user_id))


@router.post("", response_model=ShoppingListResponse)
def add_to_shopping_list(
    payload: ShoppingListAddRequest,
    service: ShoppingListService = Depends(get_shopping_list_service),
) -> ShoppingListResponse:
    items = service.add_ingredients(payload.userId, payload.recipeName, payload.ingredients)
    return _list_response(items)


@router.delete("/{user_id}/{recipe_name}/ingredient/{ingredient}", response_model=ShoppingListResponse)
def remove_ingredient(
    user_id: str,
    recipe_name: str,
    ingredient: str,
    service: ShoppingListService = Depends(get_shopping_list_service),
) -> ShoppingListResponse:
    return _list_response(service.remove_ingredient(user_id, recipe_name, ingredient))


@router.delete("/{user_id}/{recipe_name}", response_model=ShoppingListResponse)
def remove_recipe(
    user_id: str,
    recipe_name: str,
    service: ShoppingListService = Depends(get_shopping_list_service),
) -> ShoppingListResponse:
    return _list_response(service.remove_recipe(user_id, recipe_name))


@router.delete("/{user_id}", response_model=ShoppingListResponse)
def clear_shopping_list(
    user_id: str,
    service: ShoppingListService = Depends(get_shopping_list_service),
) -> ShoppingListResponse:
    log.info("Clearing shopping list for %s", user_id)
    return _list_response(service.clear(user_id))
