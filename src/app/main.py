from __future__ import annotations
import logging
import sys
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from src.app.config import settings
from src.app.deps import get_provider, get_search_cache, get_seeder, get_supabase
from src.app.infra.db.base import RecipeRepository
from src.app.infra.db.supabase_recipes_repo import SupabaseRecipeRepository
from src.app.routers.favorites import router as favorites_router
from src.app.routers.recipes import router as recipes_router
from src.app.routers.shopping_list import router as shopping_list_router
from src.app.routers.users import router as users_router
from src.services.seeder import CatalogSeeder

# Plain stdout logging (fine for dev and containers)
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Recipe Planner API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.FRONTEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(recipes_router)
app.include_router(shopping_list_router)
app.include_router(favorites_router)
app.include_router(users_router)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"detail": "Invalid request", "errors": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


async def seed_if_catalog_is_small(store: RecipeRepository, seeder: CatalogSeeder, threshold: int) -> bool:
    """
    Start a background seed when the store holds fewer than `threshold` recipes.

    Returns:
        True if a sweep was started
    """
    if threshold <= 0:
        return False
    try:
        total = await run_in_threadpool(store.count)
    except Exception:
        logger.exception("Could not count stored recipes, skipping auto-seed")
        return False
    if total >= threshold:
        return False
    logger.info("Catalog has %d recipes (< %d), starting seed", total, threshold)
    return seeder.start()


@app.on_event("startup")
async def startup() -> None:
    await get_search_cache().start()
    if settings.AUTO_SEED_MIN_RECIPES > 0:
        await seed_if_catalog_is_small(
            SupabaseRecipeRepository(get_supabase()),
            get_seeder(),
            settings.AUTO_SEED_MIN_RECIPES,
        )


@app.on_event("shutdown")
async def shutdown() -> None:
    await get_search_cache().stop()
    await get_provider().aclose()


@app.get("/health")
def health():
    return {"ok": True}
