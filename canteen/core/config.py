# canteen/core/config.py
from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Everything has a development default so the API boots with a local
    SQLite file and the demo catalog. For a deployment set at least:
      - DATABASE_URL (Postgres connection string)
      - JWT_SECRET

    Optional:
      - SUPABASE_URL / SUPABASE_KEY / SUPABASE_SERVICE_ROLE_KEY
        (remote cart profile store and menu image storage)
    """

    PROJECT_NAME: str = "Underground Canteen API"
    API_V1_STR: str = "/api/v1"

    DATABASE_URL: str = "sqlite:///./canteen.db"

    # Session tokens issued by /auth/login
    JWT_SECRET: str = "canteen-dev-secret-change-me"
    JWT_ALG: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 720

    # Supabase (optional)
    SUPABASE_URL: str | None = None
    SUPABASE_KEY: str | None = None
    SUPABASE_SERVICE_ROLE_KEY: str | None = None
    SUPABASE_STORAGE_BUCKET: str = "assets"
    SUPABASE_PROFILE_TABLE: str = "profiles"

    # Where cart snapshots are persisted between sessions
    CART_STORE: Literal["database", "supabase"] = "database"
    CART_SAVE_DEBOUNCE_SECONDS: float = 0.5
    CART_SAVE_MAX_RETRIES: int = 3
    CART_SAVE_BACKOFF_SECONDS: float = 0.5

    ORDER_NUMBER_PREFIX: str = "CB"
    LOW_STOCK_THRESHOLD: int = 20

    SEED_DEMO_DATA: bool = True

    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()
