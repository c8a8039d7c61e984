from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional, Sequence

import httpx
from postgrest.exceptions import APIError
from pydantic import TypeAdapter, ValidationError
from supabase import Client

from src.app.domain.errors import RepositoryError
from src.app.domain.models import (
    UNTITLED_RECIPE,
    CategoryCacheEntry,
    Recipe,
    RecipePage,
    RecipeSummary,
)
from src.app.infra.db.base import MAX_PAGE_LIMIT, CategoryCacheRepository, RecipeRepository

logger = logging.getLogger(__name__)

SUMMARY_COLUMNS = "provider_id,title,image,category"
DB_ERRORS = (APIError, httpx.HTTPError)

_DATETIME = TypeAdapter(datetime)


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def _parse_datetime(value: str | datetime | None) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str):
        return None

    # timestamptz text may carry a trimmed fraction such as ".12345"
    try:
        return _DATETIME.validate_python(value)
    except ValidationError:
        return None


def _safe_str(value: object) -> str | None:
    return str(value) if value else None


def _row_to_recipe(row: dict[str, Any]) -> Recipe:
    ingredients = row.get("ingredients")
    return Recipe(
        provider_id=str(row["provider_id"]),
        title=_safe_str(row.get("title")) or UNTITLED_RECIPE,
        image=_safe_str(row.get("image")) or "",
        instructions=_safe_str(row.get("instructions")) or "",
        ingredients=[str(item) for item in ingredients] if isinstance(ingredients, list) else [],
        category=_safe_str(row.get("category")),
        legacy_id=_safe_str(row.get("legacy_id")),
    )


def _recipe_to_row(recipe: Recipe) -> dict[str, Any]:
    row: dict[str, Any] = {
        "provider_id": recipe.provider_id,
        "title": recipe.title,
        "image": recipe.image,
        "instructions": recipe.instructions,
        "ingredients": list(recipe.ingredients),
        "category": recipe.category,
        "updated_at": _now_utc().isoformat(),
    }
    # never clobber an existing legacy id with null
    if recipe.legacy_id:
        row["legacy_id"] = recipe.legacy_id
    return row


def _row_to_summary(row: dict[str, Any]) -> RecipeSummary:
    return RecipeSummary(
        provider_id=str(row.get("provider_id") or ""),
        title=_safe_str(row.get("title")) or UNTITLED_RECIPE,
        image=_safe_str(row.get("image")) or "",
        category=_safe_str(row.get("category")),
    )


def _summary_to_row(summary: RecipeSummary) -> dict[str, Any]:
    return {
        "provider_id": summary.provider_id,
        "title": summary.title,
        "image": summary.image,
        "category": summary.category,
    }


class SupabaseRecipeRepository(RecipeRepository):
    TABLE_NAME = "recipes"

    def __init__(self, client: Client):
        self._client = client

    def find_by_id(self, provider_id: str) -> Optional[Recipe]:
        return self._find_one("provider_id", provider_id)

    def find_by_legacy_id(self, legacy_id: str) -> Optional[Recipe]:
        return self._find_one("legacy_id", legacy_id.lower())

    def _find_one(self, column: str, value: str) -> Optional[Recipe]:
        try:
            result = (
                self._client.table(self.TABLE_NAME)
                .select("*")
                .eq(column, value)
                .limit(1)
                .execute()
            )
        except DB_ERRORS as error:
            logger.error("Error fetching recipe by %s=%s: %s", column, value, error)
            raise RepositoryError("find", str(error)) from error

        if not result.data:
            return None
        return _row_to_recipe(result.data[0])

    def upsert_many(self, recipes: Sequence[Recipe]) -> int:
        rows = self._dedupe_rows(recipes)
        if not rows:
            return 0

        try:
            self._client.table(self.TABLE_NAME).upsert(rows, on_conflict="provider_id").execute()
            return len(rows)
        except DB_ERRORS as error:
            logger.warning("Batch upsert of %d recipes failed, retrying per record: %s", len(rows), error)

        written = 0
        for row in rows:
            try:
                self._client.table(self.TABLE_NAME).upsert(row, on_conflict="provider_id").execute()
                written += 1
            except DB_ERRORS as error:
                logger.warning("Upsert failed for recipe %s: %s", row["provider_id"], error)

        if written == 0:
            raise RepositoryError("upsert", f"none of {len(rows)} recipes could be written")
        return written

    @staticmethod
    def _dedupe_rows(recipes: Sequence[Recipe]) -> list[dict[str, Any]]:
        # Postgres rejects an upsert that touches the same key twice
        by_id: dict[str, dict[str, Any]] = {}
        for recipe in recipes:
            by_id[recipe.provider_id] = _recipe_to_row(recipe)
        return list(by_id.values())

    def list_page(self, page: int, limit: int) -> RecipePage:
        page = max(page, 1)
        limit = max(1, min(limit, MAX_PAGE_LIMIT))
        start = (page - 1) * limit

        try:
            result = (
                self._listable_query(SUMMARY_COLUMNS)
                .order("provider_id")
                .range(start, start + limit - 1)
                .execute()
            )
        except DB_ERRORS as error:
            logger.error("Error listing recipes page=%d limit=%d: %s", page, limit, error)
            raise RepositoryError("list", str(error)) from error

        items = [_row_to_summary(row) for row in result.data or []]
        return RecipePage(page=page, limit=limit, total=self.count_listable(), items=items)

    def _listable_query(self, columns: str, count: Optional[str] = None):
        return (
            self._client.table(self.TABLE_NAME)
            .select(columns, count=count)
            .neq("provider_id", "")
            .neq("title", "")
            .neq("image", "")
        )

    def count_listable(self) -> int:
        try:
            result = self._listable_query("provider_id", count="exact").limit(1).execute()
        except DB_ERRORS as error:
            raise RepositoryError("count", str(error)) from error
        return result.count or 0

    def count(self) -> int:
        try:
            result = (
                self._client.table(self.TABLE_NAME)
                .select("provider_id", count="exact")
                .limit(1)
                .execute()
            )
        except DB_ERRORS as error:
            raise RepositoryError("count", str(error)) from error
        return result.count or 0

    def delete_untitled(self) -> int:
        return self._delete_where("title.is.null,title.eq.")

    def delete_incomplete(self) -> int:
        return self._delete_where("title.is.null,title.eq.,image.is.null,image.eq.")

    def _delete_where(self, condition: str) -> int:
        try:
            result = self._client.table(self.TABLE_NAME).delete().or_(condition).execute()
        except DB_ERRORS as error:
            logger.error("Error deleting recipes where %s: %s", condition, error)
            raise RepositoryError("delete", str(error)) from error

        removed = len(result.data or [])
        logger.info("Deleted %d recipes where %s", removed, condition)
        return removed


class SupabaseCategoryCacheRepository(CategoryCacheRepository):
    TABLE_NAME = "category_cache"

    def __init__(self, client: Client):
        self._client = client

    def get(self, category: str) -> Optional[CategoryCacheEntry]:
        try:
            result = (
                self._client.table(self.TABLE_NAME)
                .select("category,data,created_at")
                .eq("category", category)
                .limit(1)
                .execute()
            )
        except DB_ERRORS as error:
            logger.error("Error reading category cache %s: %s", category, error)
            raise RepositoryError("category_get", str(error)) from error

        if not result.data:
            return None

        row = result.data[0]
        data = row.get("data") if isinstance(row.get("data"), list) else []
        return CategoryCacheEntry(
            category=str(row["category"]),
            data=[_row_to_summary(item) for item in data if isinstance(item, dict)],
            created_at=_parse_datetime(row.get("created_at")) or datetime.fromtimestamp(0, timezone.utc),
        )

    def put(self, category: str, summaries: Sequence[RecipeSummary]) -> CategoryCacheEntry:
        entry = CategoryCacheEntry(category=category, data=list(summaries), created_at=_now_utc())
        payload = {
            "category": category,
            "data": [_summary_to_row(summary) for summary in entry.data],
            "created_at": entry.created_at.isoformat(),
        }
        try:
            self._client.table(self.TABLE_NAME).upsert(payload, on_conflict="category").execute()
        except DB_ERRORS as error:
            logger.error("Error writing category cache %s: %s", category, error)
            raise RepositoryError("category_put", str(error)) from error
        return entry

    def clear(self) -> int:
        try:
            result = self._client.table(self.TABLE_NAME).delete().neq("category", "").execute()
        except DB_ERRORS as error:
            raise RepositoryError("category_clear", str(error)) from error
        return len(result.data or [])
