from __future__ import annotations

import logging
from typing import Iterable

from src.app.domain.models import ShoppingList, ShoppingListItem
from src.app.infra.db.base import ShoppingListRepository

logger = logging.getLogger(__name__)


class ShoppingListService:
    """
    Per-user shopping lists built from recipe ingredients.

    Every operation returns the owner's current items. Removing from or
    clearing a list that does not exist is a no-op that returns no items.
    """

    def __init__(self, repository: ShoppingListRepository):
        self._repo = repository

    def get(self, owner_id: str) -> list[ShoppingListItem]:
        shopping_list = self._repo.get(owner_id)
        return shopping_list.items if shopping_list else []

    def add_ingredients(
        self,
        owner_id: str,
        recipe_name: str,
        ingredients: Iterable[str],
    ) -> list[ShoppingListItem]:
        shopping_list = self._repo.get(owner_id) or ShoppingList(owner_id=owner_id)
        shopping_list.add_ingredients(recipe_name, ingredients)
        self._repo.save(shopping_list)
        logger.info("Shopping list updated: owner=%s, recipe=%s", owner_id, recipe_name)
        return shopping_list.items

    def remove_ingredient(self, owner_id: str, recipe_name: str, ingredient: str) -> list[ShoppingListItem]:
        shopping_list = self._repo.get(owner_id)
        if shopping_list is None:
            return []
        if shopping_list.remove_ingredient(recipe_name, ingredient):
            self._repo.save(shopping_list)
        return shopping_list.items

    def remove_recipe(self, owner_id: str, recipe_name: str) -> list[ShoppingListItem]:
        shopping_list = self._repo.get(owner_id)
        if shopping_list is None:
            return []
        shopping_list.remove_recipe(recipe_name)
        self._repo.save(shopping_list)
        return shopping_list.items

    def clear(self, owner_id: str) -> list[ShoppingListItem]:
        shopping_list = self._repo.get(owner_id)
        if shopping_list is None:
            return []
        shopping_list.clear()
        self._repo.save(shopping_list)
        return shopping_list.items
