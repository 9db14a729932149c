# app/core/config.py
from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Required env vars (.env):
      - DATABASE_URL (Supabase Postgres connection string)
      - SUPABASE_JWT_SECRET (JWT signing secret from Supabase project settings)

    Optional:
      - SELLER_PROFILE_FETCH_TIMEOUT_SECONDS (checkout seller lookup budget)
      - PAYMENT_METHOD_POLICY ("any" | "all", see CheckoutOrchestrator)
    """

    PROJECT_NAME: str = "Gamchha Marketplace API"
    API_V1_STR: str = "/api/v1"

    # DB config
    DATABASE_URL: str

    # JWT verification (backend-side)
    SUPABASE_JWT_SECRET: str
    SUPABASE_JWT_ALG: str = "HS256"

    # Cart persistence
    CART_STORAGE_PREFIX: str = "gamchha-cart"

    # Checkout
    SELLER_PROFILE_FETCH_TIMEOUT_SECONDS: float = 5.0
    PAYMENT_METHOD_POLICY: Literal["any", "all"] = "any"
    UPI_CURRENCY: str = "INR"

    CORS_ORIGINS: list[str] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:3000",
    ]

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()
