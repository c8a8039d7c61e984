from __future__ import annotations

import os

# Settings() is built at import time and requires these
os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-service-role-key")

from datetime import datetime, timezone
from typing import Any, Optional, Sequence

import pytest

from src.app.domain.errors import FavoriteConflictError
from src.app.domain.models import (
    CategoryCacheEntry,
    Favorite,
    Recipe,
    RecipePage,
    RecipeSummary,
    ShoppingList,
)
from src.app.infra.db.base import (
    MAX_PAGE_LIMIT,
    CategoryCacheRepository,
    FavoritesRepository,
    RecipeRepository,
    ShoppingListRepository,
)


def meal(provider_id: str, title: str = "Meal", **fields: Any) -> dict[str, Any]:
    record: dict[str, Any] = {
        "idMeal": provider_id,
        "strMeal": title,
        "strMealThumb": f"https://img.test/{provider_id}.jpg",
        "strInstructions": "Cook it.",
        "strCategory": "Pasta",
    }
    record.update(fields)
    return record


class RecipeRepositoryStub(RecipeRepository):
    def __init__(self) -> None:
        self.recipes: dict[str, Recipe] = {}
        self.upsert_calls: list[list[str]] = []
        self.fail_upsert = False

    def find_by_id(self, provider_id: str) -> Optional[Recipe]:
        return self.recipes.get(provider_id)

    def find_by_legacy_id(self, legacy_id: str) -> Optional[Recipe]:
        for recipe in self.recipes.values():
            if recipe.legacy_id == legacy_id.lower():
                return recipe
        return None

    def upsert_many(self, recipes: Sequence[Recipe]) -> int:
        if self.fail_upsert:
            raise RuntimeError("database unavailable")
        self.upsert_calls.append([recipe.provider_id for recipe in recipes])
        for recipe in recipes:
            self.recipes[recipe.provider_id] = recipe
        return len({recipe.provider_id for recipe in recipes})

    def _listable(self) -> list[Recipe]:
        return [r for r in self.recipes.values() if r.provider_id and r.title and r.image]

    def list_page(self, page: int, limit: int) -> RecipePage:
        limit = max(1, min(limit, MAX_PAGE_LIMIT))
        listable = sorted(self._listable(), key=lambda r: r.provider_id)
        start = (page - 1) * limit
        items = [r.summary() for r in listable[start:start + limit]]
        return RecipePage(page=page, limit=limit, total=self.count_listable(), items=items)

    def count_listable(self) -> int:
        return len(self._listable())

    def count(self) -> int:
        return len(self.recipes)

    def delete_untitled(self) -> int:
        doomed = [key for key, r in self.recipes.items() if not r.title]
        for key in doomed:
            del self.recipes[key]
        return len(doomed)

    def delete_incomplete(self) -> int:
        doomed = [key for key, r in self.recipes.items() if not r.title or not r.image]
        for key in doomed:
            del self.recipes[key]
        return len(doomed)


class CategoryCacheStub(CategoryCacheRepository):
    def __init__(self) -> None:
        self.entries: dict[str, CategoryCacheEntry] = {}
        self.put_calls: list[str] = []
        self.fail_get = False

    def get(self, category: str) -> Optional[CategoryCacheEntry]:
        if self.fail_get:
            raise RuntimeError("cache read failed")
        return self.entries.get(category)

    def put(self, category: str, summaries: Sequence[RecipeSummary]) -> CategoryCacheEntry:
        self.put_calls.append(category)
        entry = CategoryCacheEntry(category, list(summaries), datetime.now(timezone.utc))
        self.entries[category] = entry
        return entry

    def clear(self) -> int:
        removed = len(self.entries)
        self.entries.clear()
        return removed


class FavoritesRepositoryStub(FavoritesRepository):
    def __init__(self) -> None:
        self.favorites: list[Favorite] = []

    def list(self, owner_id: Optional[str]) -> list[Favorite]:
        return [f for f in self.favorites if f.owner_id == owner_id]

    def find(self, owner_id: Optional[str], recipe_ref: str) -> Optional[Favorite]:
        for favorite in self.favorites:
            if favorite.owner_id == owner_id and favorite.recipe_ref == recipe_ref:
                return favorite
        return None

    def insert(self, favorite: Favorite) -> Favorite:
        if self.find(favorite.owner_id, favorite.recipe_ref) is not None:
            raise FavoriteConflictError(favorite.owner_id, favorite.recipe_ref)
        favorite.id = f"fav-{len(self.favorites) + 1}"
        favorite.created_at = datetime.now(timezone.utc)
        self.favorites.append(favorite)
        return favorite

    def delete(self, owner_id: Optional[str], recipe_ref: str) -> bool:
        favorite = self.find(owner_id, recipe_ref)
        if favorite is None:
            return False
        self.favorites.remove(favorite)
        return True


class ShoppingListRepositoryStub(ShoppingListRepository):
    def __init__(self) -> None:
        self.lists: dict[str, ShoppingList] = {}
        self.save_calls = 0

    def get(self, owner_id: str) -> Optional[ShoppingList]:
        return self.lists.get(owner_id)

    def save(self, shopping_list: ShoppingList) -> ShoppingList:
        self.save_calls += 1
        self.lists[shopping_list.owner_id] = shopping_list
        return shopping_list


class FakeProvider:
    """In-memory stand-in for MealDbClient that records every call."""

    def __init__(self) -> None:
        self.meals: dict[str, dict[str, Any]] = {}
        self.categories: dict[str, list[dict[str, Any]]] = {}
        self.calls: list[tuple[str, str]] = []
        self.error: Optional[Exception] = None

    def add(self, record: dict[str, Any]) -> None:
        self.meals[record["idMeal"]] = record

    def _check(self, name: str, arg: str) -> None:
        self.calls.append((name, arg))
        if self.error is not None:
            raise self.error

    async def lookup_by_id(self, provider_id: str) -> Optional[dict[str, Any]]:
        self._check("lookup", provider_id)
        return self.meals.get(provider_id)

    async def search_by_name(self, query: str) -> list[dict[str, Any]]:
        self._check("search", query)
        needle = query.casefold()
        return [m for m in self.meals.values() if needle in m.get("strMeal", "").casefold()]

    async def filter_by_category(self, category: str) -> list[dict[str, Any]]:
        self._check("category", category)
        return list(self.categories.get(category, []))

    async def search_by_prefix(self, letter: str) -> list[dict[str, Any]]:
        self._check("prefix", letter)
        return [m for m in self.meals.values() if m.get("strMeal", "").lower().startswith(letter)]

    async def aclose(self) -> None:
        pass


@pytest.fixture
def recipe_store() -> RecipeRepositoryStub:
    return RecipeRepositoryStub()


@pytest.fixture
def category_cache() -> CategoryCacheStub:
    return CategoryCacheStub()


@pytest.fixture
def favorites_repo() -> FavoritesRepositoryStub:
    return FavoritesRepositoryStub()


@pytest.fixture
def shopping_list_repo() -> ShoppingListRepositoryStub:
    return ShoppingListRepositoryStub()


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()
