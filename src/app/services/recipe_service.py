# src/app/services/recipe_service.py
"""
Read-through recipe access.
Serves recipes from the store and the caches, falling back to the provider on a miss.
"""
from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional

from starlette.concurrency import run_in_threadpool

from src.app.domain.errors import InvalidQueryError, InvalidRecipeIdError, RecipeNotFoundError
from src.app.domain.models import CATEGORY_CACHE_TTL, Recipe, RecipePage, RecipeSummary
from src.app.infra.db.base import CategoryCacheRepository, RecipeRepository
from src.services.mealdb_client import MealDbClient
from src.services.normalizer import normalize, normalize_many, provider_id_of, summarize_many
from src.services.search_cache import SearchCache, normalize_query

logger = logging.getLogger(__name__)

LEGACY_ID_PATTERN = re.compile(r"^[0-9a-fA-F]{24}$")
SEARCH_ROUTE_TOKEN = "search"


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def is_legacy_id(value: str) -> bool:
    return bool(LEGACY_ID_PATTERN.match(value))


def validate_recipe_id(recipe_id: Optional[str]) -> str:
    value = (recipe_id or "").strip()
    # "search" or a query string here means a search request hit the id route
    if not value or value == SEARCH_ROUTE_TOKEN or "=" in value:
        raise InvalidRecipeIdError(value)
    return value


@dataclass
class RecipeLookup:
    recipe: Recipe
    from_cache: bool


@dataclass
class SearchResult:
    recipes: list[Recipe]
    from_cache: bool


@dataclass
class CategoryResult:
    category: str
    recipes: list[RecipeSummary]
    from_cache: bool


class RecipeService:
    """
    Orchestrates the recipe store, the category cache, the search cache and
    the upstream provider.

    Responsibilities:
    - Lookup by provider id, with a legacy internal id fallback
    - Name search through the in-memory search cache
    - Category listings through the persistent category cache
    - Write-through of freshly fetched data (failures are logged, never surfaced)
    """

    def __init__(
        self,
        store: RecipeRepository,
        category_cache: CategoryCacheRepository,
        provider: MealDbClient,
        search_cache: SearchCache[list[Recipe]],
        category_ttl: timedelta = CATEGORY_CACHE_TTL,
        clock: Callable[[], datetime] = _now_utc,
    ):
        self._store = store
        self._category_cache = category_cache
        self._provider = provider
        self._search_cache = search_cache
        self._category_ttl = category_ttl
        self._clock = clock

    async def find_cached(self, recipe_id: str) -> Optional[Recipe]:
        """
        Look the recipe up by provider id, then by legacy id when the value
        has the legacy shape.
        """
        recipe = await run_in_threadpool(self._store.find_by_id, recipe_id)
        if recipe is None and is_legacy_id(recipe_id):
            logger.info("Recipe %s not found by provider id, trying legacy id", recipe_id)
            recipe = await run_in_threadpool(self._store.find_by_legacy_id, recipe_id)
        return recipe

    async def get_recipe(self, recipe_id: str) -> RecipeLookup:
        """
        Raises:
            InvalidRecipeIdError: If the id is a misrouted search
            RecipeNotFoundError: If neither the store nor the provider has it
            UpstreamError: If the provider call fails
        """
        recipe_id = validate_recipe_id(recipe_id)

        cached = await self.find_cached(recipe_id)
        if cached is not None:
            return RecipeLookup(recipe=cached, from_cache=True)

        # legacy ids only ever lived in our own store
        if is_legacy_id(recipe_id):
            raise RecipeNotFoundError(recipe_id)

        raw = await self._provider.lookup_by_id(recipe_id)
        if raw is None or not provider_id_of(raw):
            raise RecipeNotFoundError(recipe_id)

        recipe = normalize(raw)
        await self._write_through("recipe_upsert", self._store.upsert_many, [recipe])
        return RecipeLookup(recipe=recipe, from_cache=False)

    async def search(self, query: Optional[str]) -> SearchResult:
        """
        Raises:
            InvalidQueryError: If the query is blank
            RecipeNotFoundError: If the provider has no match
            UpstreamError: If the provider call fails
        """
        key = normalize_query(query)

        cached = self._search_cache.get(key)
        if cached is not None:
            return SearchResult(recipes=cached, from_cache=True)

        meals = await self._provider.search_by_name((query or "").strip())
        recipes = normalize_many(meals)
        if not recipes:
            raise RecipeNotFoundError(key)

        await self._write_through("search_upsert", self._store.upsert_many, recipes)
        self._search_cache.set(key, recipes)
        return SearchResult(recipes=recipes, from_cache=False)

    async def by_category(self, category: Optional[str]) -> CategoryResult:
        name = (category or "").strip().lower()
        if not name:
            raise InvalidQueryError("Category is required")

        entry = None
        try:
            entry = await run_in_threadpool(self._category_cache.get, name)
        except Exception as exc:
            logger.warning("Category cache read failed for %s, refreshing: %s", name, exc)

        if entry is not None and entry.is_fresh(self._clock(), self._category_ttl):
            return CategoryResult(category=name, recipes=entry.data, from_cache=True)

        meals = await self._provider.filter_by_category(name)
        summaries = summarize_many(meals, name)
        await self._write_through("category_put", self._category_cache.put, name, summaries)
        return CategoryResult(category=name, recipes=summaries, from_cache=False)

    async def list_page(self, page: int, limit: int) -> RecipePage:
        return await run_in_threadpool(self._store.list_page, page, limit)

    async def clear_caches(self) -> int:
        """Drop category snapshots and the search cache."""
        removed = await run_in_threadpool(self._category_cache.clear)
        self._search_cache.flush_all()
        logger.info("Cleared %d category snapshots and the search cache", removed)
        return removed

    async def clear_all_caches(self) -> int:
        """
        Drop every cache and delete stored recipes that have no title.

        Returns:
            Number of recipes removed
        """
        await run_in_threadpool(self._category_cache.clear)
        removed = await run_in_threadpool(self._store.delete_untitled)
        self._search_cache.flush_all()
        logger.info("Cleared all caches, removed %d untitled recipes", removed)
        return removed

    async def _write_through(self, operation: str, func: Callable[..., Any], *args: Any) -> None:
        # shielded: a cancelled request must not abort a write that already started
        try:
            await asyncio.shield(run_in_threadpool(func, *args))
        except Exception as exc:
            logger.warning("Write-through %s failed (continuing anyway): %s", operation, exc)
