# src/app/domain/models.py
"""
Domain models for the recipe catalog, favorites and shopping lists.
These are pure data structures with no infrastructure dependencies.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Iterable, Iterator, Optional


UNTITLED_RECIPE = "Untitled Recipe"
CATEGORY_CACHE_TTL = timedelta(hours=1)


@dataclass
class RecipeSummary:
    """Lightweight recipe shape used by listings and category snapshots."""
    provider_id: str
    title: str
    image: str = ""
    category: Optional[str] = None


@dataclass
class Recipe:
    """
    Canonical recipe normalized from an upstream record.
    `provider_id` is the upstream id and uniquely identifies the recipe.
    """
    provider_id: str
    title: str
    image: str = ""
    instructions: str = ""
    ingredients: list[str] = field(default_factory=list)
    category: Optional[str] = None

    # Internal id from the previous storage generation (24 hex chars)
    legacy_id: Optional[str] = None

    def summary(self) -> RecipeSummary:
        return RecipeSummary(
            provider_id=self.provider_id,
            title=self.title,
            image=self.image,
            category=self.category,
        )


@dataclass
class RecipePage:
    """One page of the stored catalog."""
    page: int
    limit: int
    total: int
    items: list[RecipeSummary]

    @property
    def total_pages(self) -> int:
        if self.limit <= 0:
            return 0
        return math.ceil(self.total / self.limit)


@dataclass
class CategoryCacheEntry:
    """Snapshot of one category's recipe summaries."""
    category: str
    data: list[RecipeSummary]
    created_at: datetime

    def is_fresh(self, now: datetime, ttl: timedelta = CATEGORY_CACHE_TTL) -> bool:
        """An entry is usable while younger than `ttl` and not empty."""
        if not self.data:
            return False
        return now - self.created_at < ttl


class IngredientSet:
    """Ordered, de-duplicated collection of ingredient lines."""

    def __init__(self, items: Iterable[str] = ()) -> None:
        self._items: dict[str, None] = dict.fromkeys(items)

    def union(self, other: Iterable[str]) -> IngredientSet:
        return IngredientSet([*self._items, *other])

    def without(self, ingredient: str) -> IngredientSet:
        return IngredientSet(item for item in self._items if item != ingredient)

    def to_list(self) -> list[str]:
        return list(self._items)

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, item: object) -> bool:
        return item in self._items

    def __eq__(self, other: object) -> bool:
        if isinstance(other, IngredientSet):
            return set(self._items) == set(other._items)
        return NotImplemented

    def __repr__(self) -> str:
        return f"IngredientSet({self.to_list()!r})"


@dataclass
class ShoppingListItem:
    recipe_name: str
    ingredients: IngredientSet = field(default_factory=IngredientSet)


@dataclass
class ShoppingList:
    """
    A user's shopping list. Holds at most one item per recipe name.
    """
    owner_id: str
    items: list[ShoppingListItem] = field(default_factory=list)

    def find_item(self, recipe_name: str) -> Optional[ShoppingListItem]:
        for item in self.items:
            if item.recipe_name == recipe_name:
                return item
        return None

    def add_ingredients(self, recipe_name: str, ingredients: Iterable[str]) -> None:
        item = self.find_item(recipe_name)
        if item is None:
            self.items.append(ShoppingListItem(recipe_name, IngredientSet(ingredients)))
            return
        item.ingredients = item.ingredients.union(ingredients)

    def remove_ingredient(self, recipe_name: str, ingredient: str) -> bool:
        # the item stays in the list even when its last ingredient goes
        item = self.find_item(recipe_name)
        if item is None:
            return False
        item.ingredients = item.ingredients.without(ingredient)
        return True

    def remove_recipe(self, recipe_name: str) -> None:
        self.items = [item for item in self.items if item.recipe_name != recipe_name]

    def clear(self) -> None:
        self.items = []


@dataclass
class Favorite:
    """A saved recipe reference. `owner_id` is None for anonymous favorites."""
    recipe_ref: str
    owner_id: Optional[str] = None
    title: str = ""
    image: str = ""
    id: Optional[str] = None
    created_at: Optional[datetime] = None


class SeedStatus(str, Enum):
    """Lifecycle of a catalog seed sweep."""
    IDLE = "IDLE"
    RUNNING = "RUNNING"
    DONE = "DONE"
    FAILED = "FAILED"


@dataclass
class SeedRun:
    """Observable state of the latest seed sweep."""
    status: SeedStatus = SeedStatus.IDLE
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    letters_fetched: int = 0
    letters_failed: int = 0
    recipes_upserted: int = 0
    error: Optional[str] = None

    @property
    def is_running(self) -> bool:
        return self.status == SeedStatus.RUNNING


@dataclass
class User:
    id: str
    username: Optional[str] = None
    email: Optional[str] = None
    is_guest: bool = False


@dataclass
class AuthSession:
    """Bearer token issued for a user."""
    access_token: str
    expires_in: int
    user: User
