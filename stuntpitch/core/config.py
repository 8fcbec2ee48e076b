# stuntpitch/core/config.py
from __future__ import annotations
from pathlib import Path
from pydantic_settings import BaseSettings
from pydantic import Field

# Resolve the .env alongside the package root
ENV_PATH = Path(__file__).resolve().parent.parent / ".env"


class Settings(BaseSettings):

    # --- Database ---
    DATABASE_URL: str = Field(..., description="Full PostgreSQL connection URL (sync, e.g., postgresql+psycopg://...)")
    DATABASE_URL_ASYNC: str | None = Field(
        default=None,
        description="Async PostgreSQL URL (e.g., postgresql+asyncpg://...). Optional; derived if missing.",
    )

    # --- App info ---
    APP_NAME: str = Field(default="StuntPitch Backend")
    CORS_ORIGINS: list[str] = Field(
        default=[
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ]
    )

    # --- OpenAI Integration ---
    OPENAI_API_KEY: str | None = Field(default=None, description="API key for OpenAI services")
    OPENAI_MODEL: str = Field(default="gpt-4o-mini", description="Chat model used by every casting agent")
    OPENAI_EMBEDDING_MODEL: str = Field(default="text-embedding-3-small", description="Model used for profile embeddings")
    EMBEDDING_DIM: int = Field(default=1536)
    USE_VECTOR_FALLBACK: bool = Field(default=True, description="Try embedding search when structured filters match nobody")

    # --- Retry policy for LLM calls (429 / 529) ---
    LLM_MAX_RETRIES: int = Field(default=3, ge=0)
    LLM_BACKOFF_BASE_SECONDS: float = Field(default=2.0, ge=0)

    # --- File storage ---
    STORAGE_DIR: str = Field(default="storage", description="Root folder for uploaded photos and resumes")
    MAX_PHOTO_BYTES: int = Field(default=10 * 1024 * 1024)
    MAX_RESUME_BYTES: int = Field(default=5 * 1024 * 1024)

    # --- Resume analysis ---
    RESUME_ANALYSIS_ENABLED_FOR_ALL: bool = True
    RESUME_ANALYSIS_TIERS: list[str] = Field(default=["pro", "premium"])
    RESUME_ANALYSIS_MAX_PROFILES: int = Field(default=2, ge=0)
    RESUME_FETCH_TIMEOUT_SECONDS: float = Field(default=10.0, gt=0)
    RESUME_TEXT_LIMIT: int = Field(default=3000, gt=0)
    RESUME_MIN_TEXT_CHARS: int = Field(default=50, ge=0)

    # --- Casting assistant ---
    CASTING_STRUCTURED_OUTPUT: bool = Field(
        default=True,
        description="Ask the model for JSON {response, profile_ids}; False falls back to the [PROFILES: ...] text marker",
    )

    class Config:
        env_file = str(ENV_PATH)
        case_sensitive = True

    @property
    def database_url_async_effective(self) -> str:
        """
        Prefer DATABASE_URL_ASYNC; if it's missing, derive from DATABASE_URL by swapping
        '+psycopg' -> '+asyncpg'. If no swap is possible, return DATABASE_URL as-is.
        """
        if self.DATABASE_URL_ASYNC:
            return self.DATABASE_URL_ASYNC
        if "+psycopg" in self.DATABASE_URL:
            return self.DATABASE_URL.replace("+psycopg", "+asyncpg")
        return self.DATABASE_URL


settings = Settings()
