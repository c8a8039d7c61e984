from __future__ import annotations

import logging
from typing import Any, Optional

from postgrest.exceptions import APIError
from supabase import Client

from src.app.domain.errors import FavoriteConflictError, RepositoryError
from src.app.domain.models import Favorite, IngredientSet, ShoppingList, ShoppingListItem
from src.app.infra.db.base import FavoritesRepository, ShoppingListRepository
from src.app.infra.db.supabase_recipes_repo import (
    DB_ERRORS,
    _now_utc,
    _parse_datetime,
    _safe_str,
)

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"


def _row_to_favorite(row: dict[str, Any]) -> Favorite:
    return Favorite(
        id=_safe_str(row.get("id")),
        owner_id=_safe_str(row.get("owner_id")),
        recipe_ref=str(row["recipe_ref"]),
        title=_safe_str(row.get("title")) or "",
        image=_safe_str(row.get("image")) or "",
        created_at=_parse_datetime(row.get("created_at")),
    )


def _row_to_shopping_list(row: dict[str, Any]) -> ShoppingList:
    items: list[ShoppingListItem] = []
    raw_items = row.get("items") if isinstance(row.get("items"), list) else []
    for entry in raw_items:
        if not isinstance(entry, dict) or not entry.get("recipe_name"):
            continue
        ingredients = entry.get("ingredients") if isinstance(entry.get("ingredients"), list) else []
        items.append(
            ShoppingListItem(
                recipe_name=str(entry["recipe_name"]),
                ingredients=IngredientSet(str(item) for item in ingredients),
            )
        )
    return ShoppingList(owner_id=str(row["owner_id"]), items=items)


class SupabaseFavoritesRepository(FavoritesRepository):
    TABLE_NAME = "favorites"

    def __init__(self, client: Client):
        self._client = client

    def _owner_query(self, query, owner_id: Optional[str]):
        if owner_id is None:
            return query.is_("owner_id", "null")
        return query.eq("owner_id", owner_id)

    def list(self, owner_id: Optional[str]) -> list[Favorite]:
        try:
            query = self._client.table(self.TABLE_NAME).select("*")
            result = self._owner_query(query, owner_id).order("created_at", desc=True).execute()
        except DB_ERRORS as error:
            logger.error("Error listing favorites for owner=%s: %s", owner_id, error)
            raise RepositoryError("favorites_list", str(error)) from error
        return [_row_to_favorite(row) for row in result.data or []]

    def find(self, owner_id: Optional[str], recipe_ref: str) -> Optional[Favorite]:
        try:
            query = self._client.table(self.TABLE_NAME).select("*").eq("recipe_ref", recipe_ref)
            result = self._owner_query(query, owner_id).limit(1).execute()
        except DB_ERRORS as error:
            raise RepositoryError("favorites_find", str(error)) from error
        if not result.data:
            return None
        return _row_to_favorite(result.data[0])

    def insert(self, favorite: Favorite) -> Favorite:
        payload = {
            "owner_id": favorite.owner_id,
            "recipe_ref": favorite.recipe_ref,
            "title": favorite.title,
            "image": favorite.image,
            "created_at": _now_utc().isoformat(),
        }
        try:
            result = self._client.table(self.TABLE_NAME).insert(payload).execute()
        except APIError as error:
            if error.code == UNIQUE_VIOLATION:
                raise FavoriteConflictError(favorite.owner_id, favorite.recipe_ref) from error
            logger.error("Error inserting favorite %s: %s", favorite.recipe_ref, error)
            raise RepositoryError("favorites_insert", str(error)) from error
        except DB_ERRORS as error:
            raise RepositoryError("favorites_insert", str(error)) from error

        if not result.data:
            raise RepositoryError("favorites_insert", "no row returned")
        return _row_to_favorite(result.data[0])

    def delete(self, owner_id: Optional[str], recipe_ref: str) -> bool:
        try:
            query = self._client.table(self.TABLE_NAME).delete().eq("recipe_ref", recipe_ref)
            result = self._owner_query(query, owner_id).execute()
        except DB_ERRORS as error:
            raise RepositoryError("favorites_delete", str(error)) from error
        return bool(result.data)


class SupabaseShoppingListRepository(ShoppingListRepository):
    TABLE_NAME = "shopping_lists"

    def __init__(self, client: Client):
        self._client = client

    def get(self, owner_id: str) -> Optional[ShoppingList]:
        try:
            result = (
                self._client.table(self.TABLE_NAME)
                .select("owner_id,items")
                .eq("owner_id", owner_id)
                .limit(1)
                .execute()
            )
        except DB_ERRORS as error:
            logger.error("Error loading shopping list for %s: %s", owner_id, error)
            raise RepositoryError("shopping_list_get", str(error)) from error

        if not result.data:
            return None
        return _row_to_shopping_list(result.data[0])

    def save(self, shopping_list: ShoppingList) -> ShoppingList:
        payload = {
            "owner_id": shopping_list.owner_id,
            "items": [
                {"recipe_name": item.recipe_name, "ingredients": item.ingredients.to_list()}
                for item in shopping_list.items
            ],
            "updated_at": _now_utc().isoformat(),
        }
        try:
            self._client.table(self.TABLE_NAME).upsert(payload, on_conflict="owner_id").execute()
        except DB_ERRORS as error:
            logger.error("Error saving shopping list for %s: %s", shopping_list.owner_id, error)
            raise RepositoryError("shopping_list_save", str(error)) from error
        return shopping_list
