from __future__ import annotations

from typing import Optional

from pydantic import AnyUrl, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8-sig",
        case_sensitive=False,
        extra="ignore",
    )

    SUPABASE_URL: AnyUrl
    SUPABASE_SERVICE_ROLE_KEY: str
    SUPABASE_ANON_KEY: Optional[str] = None
    APP_ENV: str = "local"
    FRONTEND_CORS_ORIGINS: list[str] = Field(
        default_factory=lambda: ["http://localhost:5173", "http://localhost:3000"],
    )

    MEALDB_BASE_URL: str = "https://www.themealdb.com/api/json/v1/1"
    UPSTREAM_TIMEOUT_SECONDS: float = Field(default=15.0, gt=0)

    SEARCH_CACHE_TTL_SECONDS: float = Field(default=3600.0, gt=0)
    SEARCH_CACHE_SWEEP_SECONDS: float = Field(default=600.0, gt=0)
    CATEGORY_CACHE_TTL_SECONDS: int = Field(default=3600, gt=0)

    SEED_BATCH_SIZE: int = Field(default=4, ge=1)
    # seed on startup when the catalog holds fewer recipes than this (0 disables)
    AUTO_SEED_MIN_RECIPES: int = Field(default=0, ge=0)


settings = Settings()
