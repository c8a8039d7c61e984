from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field


class RecipeSummaryResponse(BaseModel):
    providerId: str
    title: str
    image: str = ""
    category: Optional[str] = None


class RecipeResponse(RecipeSummaryResponse):
    instructions: str = ""
    ingredients: list[str] = Field(default_factory=list)


class RecipeDetailResponse(BaseModel):
    fromCache: bool
    recipe: RecipeResponse


class RecipeSearchResponse(BaseModel):
    fromCache: bool
    recipes: list[RecipeResponse] = Field(default_factory=list)


class CategoryRecipesResponse(BaseModel):
    category: str
    fromCache: bool
    recipes: list[RecipeSummaryResponse] = Field(default_factory=list)


class RecipeListResponse(BaseModel):
    page: int
    limit: int
    total: int
    totalPages: int
    recipes: list[RecipeSummaryResponse] = Field(default_factory=list)


class ClearCacheResponse(BaseModel):
    message: str
    removedRecipes: Optional[int] = None


class SeedRunResponse(BaseModel):
    status: Literal["IDLE", "RUNNING", "DONE", "FAILED"]
    startedAt: Optional[str] = None
    finishedAt: Optional[str] = None
    lettersFetched: int = 0
    lettersFailed: int = 0
    recipesUpserted: int = 0
    error: Optional[str] = None


class SeedTriggerResponse(BaseModel):
    message: str
    started: bool
    seed: SeedRunResponse
