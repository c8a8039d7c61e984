from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, TypeVar

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from src.app.deps import get_recipe_service, get_seeder
from src.app.domain.errors import InvalidQueryError, InvalidRecipeIdError, RecipeNotFoundError
from src.app.domain.models import Recipe, RecipeSummary, SeedRun
from src.app.schemas.recipes import (
    CategoryRecipesResponse,
    ClearCacheResponse,
    RecipeDetailResponse,
    RecipeListResponse,
    RecipeResponse,
    RecipeSearchResponse,
    RecipeSummaryResponse,
    SeedRunResponse,
    SeedTriggerResponse,
)
from src.app.services.recipe_service import RecipeService
from src.services.errors import UpstreamError, UpstreamStatusError, UpstreamTimeoutError
from src.services.seeder import CatalogSeeder

log = logging.getLogger("recipes")
router = APIRouter(prefix="/recipes", tags=["recipes"])

DISCONNECT_POLL_SECONDS = 0.25
DEFAULT_PAGE_LIMIT = 50
MAX_PAGE_LIMIT = 100

T = TypeVar("T")


def _summary_response(summary: RecipeSummary) -> RecipeSummaryResponse:
    return RecipeSummaryResponse(
        providerId=summary.provider_id,
        title=summary.title,
        image=summary.image,
        category=summary.category,
    )


def _recipe_response(recipe: Recipe) -> RecipeResponse:
    return RecipeResponse(
        providerId=recipe.provider_id,
        title=recipe.title,
        image=recipe.image,
        category=recipe.category,
        instructions=recipe.instructions,
        ingredients=list(recipe.ingredients),
    )


def _seed_response(run: SeedRun) -> SeedRunResponse:
    return SeedRunResponse(
        status=run.status.value,
        startedAt=run.started_at.isoformat() if run.started_at else None,
        finishedAt=run.finished_at.isoformat() if run.finished_at else None,
        lettersFetched=run.letters_fetched,
        lettersFailed=run.letters_failed,
        recipesUpserted=run.recipes_upserted,
        error=run.error,
    )


def _upstream_http_error(exc: UpstreamError) -> HTTPException:
    if isinstance(exc, UpstreamStatusError):
        return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="External API failed")
    if isinstance(exc, UpstreamTimeoutError):
        return HTTPException(status_code=status.HTTP_504_GATEWAY_TIMEOUT, detail="No response from external API")
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error")


async def _cancel_on_disconnect(request: Request, awaitable: Awaitable[T]) -> T:
    """Await `awaitable`, cancelling it if the client goes away first."""
    task = asyncio.ensure_future(awaitable)
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=DISCONNECT_POLL_SECONDS)
            if done:
                return task.result()
            if await request.is_disconnected():
                log.info("Client disconnected from %s, cancelling", request.url.path)
                task.cancel()
                raise HTTPException(status_code=499, detail="Client closed request")
    finally:
        if not task.done():
            task.cancel()


@router.get("", response_model=RecipeListResponse)
async def list_recipes(
    page: int = Query(default=1),
    limit: int = Query(default=DEFAULT_PAGE_LIMIT),
    service: RecipeService = Depends(get_recipe_service),
) -> RecipeListResponse:
    # zero or negative values fall back to the defaults
    page = page if page > 0 else 1
    limit = min(limit if limit > 0 else DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT)
    result = await service.list_page(page, limit)
    log.info("Serving %d recipes (page %d) from database", len(result.items), result.page)
    return RecipeListResponse(
        page=result.page,
        limit=result.limit,
        total=result.total,
        totalPages=result.total_pages,
        recipes=[_summary_response(item) for item in result.items],
    )


@router.get("/search", response_model=RecipeSearchResponse)
async def search_recipes(
    request: Request,
    q: str | None = Query(default=None),
    service: RecipeService = Depends(get_recipe_service),
) -> RecipeSearchResponse:
    try:
        result = await _cancel_on_disconnect(request, service.search(q))
    except InvalidQueryError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except RecipeNotFoundError:
        raise HTTPException(status_code=404, detail="No recipes found")
    except UpstreamError as exc:
        log.error("Search failed for %r: %s", q, exc)
        raise _upstream_http_error(exc)
    return RecipeSearchResponse(
        fromCache=result.from_cache,
        recipes=[_recipe_response(recipe) for recipe in result.recipes],
    )


@router.get("/category/{category}", response_model=CategoryRecipesResponse)
async def recipes_by_category(
    category: str,
    request: Request,
    service: RecipeService = Depends(get_recipe_service),
) -> CategoryRecipesResponse:
    try:
        result = await _cancel_on_disconnect(request, service.by_category(category))
    except InvalidQueryError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except UpstreamError as exc:
        log.error("Category fetch failed for %s: %s", category, exc)
        raise _upstream_http_error(exc)
    return CategoryRecipesResponse(
        category=result.category,
        fromCache=result.from_cache,
        recipes=[_summary_response(item) for item in result.recipes],
    )


@router.delete("/cache", response_model=ClearCacheResponse)
async def clear_cache(service: RecipeService = Depends(get_recipe_service)) -> ClearCacheResponse:
    await service.clear_caches()
    return ClearCacheResponse(message="All caches cleared")


@router.delete("/clear-all-cache", response_model=ClearCacheResponse)
async def clear_all_cache(service: RecipeService = Depends(get_recipe_service)) -> ClearCacheResponse:
    removed = await service.clear_all_caches()
    return ClearCacheResponse(message="All caches cleared successfully", removedRecipes=removed)


@router.post("/admin/seed", response_model=SeedTriggerResponse, status_code=status.HTTP_202_ACCEPTED)
async def trigger_seed(seeder: CatalogSeeder = Depends(get_seeder)) -> SeedTriggerResponse:
    started = seeder.start()
    message = "Seeding started in background" if started else "Seeding already in progress"
    log.info("Admin seeding requested: started=%s", started)
    return SeedTriggerResponse(message=message, started=started, seed=_seed_response(seeder.status))


@router.get("/admin/seed", response_model=SeedRunResponse)
async def seed_status(seeder: CatalogSeeder = Depends(get_seeder)) -> SeedRunResponse:
    return _seed_response(seeder.status)


# keep last: the catch-all id route would shadow the routes above
@router.get("/{recipe_id}", response_model=RecipeDetailResponse)
async def get_recipe(
    recipe_id: str,
    request: Request,
    service: RecipeService = Depends(get_recipe_service),
) -> RecipeDetailResponse:
    try:
        result = await _cancel_on_disconnect(request, service.get_recipe(recipe_id))
    except InvalidRecipeIdError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except RecipeNotFoundError:
        raise HTTPException(status_code=404, detail="Recipe not found")
    except UpstreamError as exc:
        log.error("Lookup failed for recipe %s: %s", recipe_id, exc)
        raise _upstream_http_error(exc)
    return RecipeDetailResponse(fromCache=result.from_cache, recipe=_recipe_response(result.recipe))
