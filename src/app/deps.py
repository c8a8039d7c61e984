# src/app/deps.py (singletons exposed as dependencies)

from __future__ import annotations

from datetime import timedelta

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel
from supabase import Client, create_client

from src.app.config import settings
from src.app.domain.models import Recipe
from src.app.infra.auth.base import AuthProvider
from src.app.infra.auth.supabase_auth import SupabaseAuthProvider
from src.app.infra.db.base import (
    CategoryCacheRepository,
    FavoritesRepository,
    RecipeRepository,
    ShoppingListRepository,
)
from src.app.infra.db.supabase_recipes_repo import (
    SupabaseCategoryCacheRepository,
    SupabaseRecipeRepository,
)
from src.app.infra.db.supabase_user_data_repo import (
    SupabaseFavoritesRepository,
    SupabaseShoppingListRepository,
)
from src.app.services.favorites_service import FavoritesService
from src.app.services.recipe_service import RecipeService
from src.app.services.shopping_list_service import ShoppingListService
from src.services.mealdb_client import MealDbClient
from src.services.search_cache import SearchCache
from src.services.seeder import CatalogSeeder

_client: Client | None = None
_provider: MealDbClient | None = None
_search_cache: SearchCache[list[Recipe]] | None = None
_seeder: CatalogSeeder | None = None


def get_supabase() -> Client:
    global _client
    if _client is None:
        _client = create_client(str(settings.SUPABASE_URL),
                                settings.SUPABASE_SERVICE_ROLE_KEY)
    return _client


def get_provider() -> MealDbClient:
    global _provider
    if _provider is None:
        _provider = MealDbClient(
            base_url=settings.MEALDB_BASE_URL,
            timeout=settings.UPSTREAM_TIMEOUT_SECONDS,
        )
    return _provider


def get_search_cache() -> SearchCache[list[Recipe]]:
    global _search_cache
    if _search_cache is None:
        _search_cache = SearchCache(
            ttl=settings.SEARCH_CACHE_TTL_SECONDS,
            sweep_interval=settings.SEARCH_CACHE_SWEEP_SECONDS,
        )
    return _search_cache


def get_recipe_store(supa: Client = Depends(get_supabase)) -> RecipeRepository:
    return SupabaseRecipeRepository(supa)


def get_category_cache(supa: Client = Depends(get_supabase)) -> CategoryCacheRepository:
    return SupabaseCategoryCacheRepository(supa)


def get_favorites_repo(supa: Client = Depends(get_supabase)) -> FavoritesRepository:
    return SupabaseFavoritesRepository(supa)


def get_shopping_list_repo(supa: Client = Depends(get_supabase)) -> ShoppingListRepository:
    return SupabaseShoppingListRepository(supa)


def get_seeder() -> CatalogSeeder:
    global _seeder
    if _seeder is None:
        _seeder = CatalogSeeder(
            provider=get_provider(),
            store=SupabaseRecipeRepository(get_supabase()),
            batch_size=settings.SEED_BATCH_SIZE,
        )
    return _seeder


def get_auth_provider() -> AuthProvider:
    return SupabaseAuthProvider(
        str(settings.SUPABASE_URL),
        settings.SUPABASE_ANON_KEY or settings.SUPABASE_SERVICE_ROLE_KEY,
    )


def get_recipe_service(
    store: RecipeRepository = Depends(get_recipe_store),
    category_cache: CategoryCacheRepository = Depends(get_category_cache),
    provider: MealDbClient = Depends(get_provider),
    search_cache: SearchCache[list[Recipe]] = Depends(get_search_cache),
) -> RecipeService:
    return RecipeService(
        store=store,
        category_cache=category_cache,
        provider=provider,
        search_cache=search_cache,
        category_ttl=timedelta(seconds=settings.CATEGORY_CACHE_TTL_SECONDS),
    )


def get_shopping_list_service(
    repo: ShoppingListRepository = Depends(get_shopping_list_repo),
) -> ShoppingListService:
    return ShoppingListService(repo)


def get_favorites_service(
    repo: FavoritesRepository = Depends(get_favorites_repo),
) -> FavoritesService:
    return FavoritesService(repo)


auth_scheme = HTTPBearer(auto_error=False)

class CurrentUser(BaseModel):
    id: str
    email: str | None = None
    name: str | None = None
    isGuest: bool = False

async def get_current_user(
    cred: HTTPAuthorizationCredentials | None = Depends(auth_scheme),
    supa: Client = Depends(get_supabase),
) -> CurrentUser:
    """
    Receives Authorization: Bearer <access_token> issued by /users/login or
    /users/guest, validates it against Supabase Auth and returns the user.
    """
    if cred is None or cred.scheme.lower() != "bearer":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing token")

    token = cred.credentials
    try:
        res = supa.auth.get_user(token)
        user = res.user if res else None
        if not user:
            raise HTTPException(status_code=401, detail="Invalid token")

        meta = getattr(user, "user_metadata", None) or {}
        name = meta.get("username") if isinstance(meta, dict) else None
        is_guest = bool(getattr(user, "is_anonymous", False))

        return CurrentUser(id=str(user.id), email=user.email, name=name, isGuest=is_guest)
    except HTTPException:
        raise
    except Exception:
        raise HTTPException(status_code=401, detail="Invalid/expired token")
