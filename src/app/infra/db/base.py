# src/app/infra/db/base.py
"""
Abstract repositories for recipe data and per-user collections.
These interfaces allow swapping the persistence backend (and stubbing it in tests).
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional, Sequence

from src.app.domain.models import (
    CategoryCacheEntry,
    Favorite,
    Recipe,
    RecipePage,
    RecipeSummary,
    ShoppingList,
)

MAX_PAGE_LIMIT = 100


class RecipeRepository(ABC):
    """
    Persistent store of normalized recipes keyed by provider id.

    Implementations:
    - SupabaseRecipeRepository: `recipes` table in Supabase/Postgres
    """

    @abstractmethod
    def find_by_id(self, provider_id: str) -> Optional[Recipe]:
        """
        Point lookup by provider id.

        Returns:
            The recipe, or None if not stored
        """
        pass

    @abstractmethod
    def find_by_legacy_id(self, legacy_id: str) -> Optional[Recipe]:
        """
        Lookup by the 24-hex internal id of the previous storage generation.

        Returns:
            The recipe, or None if not stored
        """
        pass

    @abstractmethod
    def upsert_many(self, recipes: Sequence[Recipe]) -> int:
        """
        Insert or update recipes by provider id. Unordered: a record that fails
        does not prevent the others from being written.

        Args:
            recipes: Normalized recipes

        Returns:
            Number of recipes written
        """
        pass

    @abstractmethod
    def list_page(self, page: int, limit: int) -> RecipePage:
        """
        Page through recipes that have a provider id, a title and an image.

        Args:
            page: 1-based page number
            limit: Page size (capped at MAX_PAGE_LIMIT)

        Returns:
            RecipePage with lightweight summaries
        """
        pass

    @abstractmethod
    def count_listable(self) -> int:
        """Number of recipes visible to list_page."""
        pass

    @abstractmethod
    def count(self) -> int:
        """Number of stored recipes."""
        pass

    @abstractmethod
    def delete_untitled(self) -> int:
        """
        Delete recipes that have no title.

        Returns:
            Number of recipes removed
        """
        pass

    @abstractmethod
    def delete_incomplete(self) -> int:
        """
        Delete recipes missing a title or an image.

        Returns:
            Number of recipes removed
        """
        pass


class CategoryCacheRepository(ABC):
    """
    Persistent per-category snapshots of recipe summaries.
    """

    @abstractmethod
    def get(self, category: str) -> Optional[CategoryCacheEntry]:
        pass

    @abstractmethod
    def put(self, category: str, summaries: Sequence[RecipeSummary]) -> CategoryCacheEntry:
        """
        Replace the category snapshot and refresh its creation time.
        """
        pass

    @abstractmethod
    def clear(self) -> int:
        """
        Delete every snapshot.

        Returns:
            Number of snapshots removed
        """
        pass


class FavoritesRepository(ABC):
    """
    Favorites per owner. An owner of None means anonymous.
    """

    @abstractmethod
    def list(self, owner_id: Optional[str]) -> list[Favorite]:
        pass

    @abstractmethod
    def find(self, owner_id: Optional[str], recipe_ref: str) -> Optional[Favorite]:
        pass

    @abstractmethod
    def insert(self, favorite: Favorite) -> Favorite:
        """
        Store a new favorite.

        Raises:
            FavoriteConflictError: If (owner, recipe_ref) already exists
        """
        pass

    @abstractmethod
    def delete(self, owner_id: Optional[str], recipe_ref: str) -> bool:
        """
        Returns:
            True if a favorite was removed
        """
        pass


class ShoppingListRepository(ABC):
    """
    One shopping list per owner.
    """

    @abstractmethod
    def get(self, owner_id: str) -> Optional[ShoppingList]:
        pass

    @abstractmethod
    def save(self, shopping_list: ShoppingList) -> ShoppingList:
        """
        Create or replace the owner's list.
        """
        pass
