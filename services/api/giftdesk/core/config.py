from __future__ import annotations

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "development"
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    database_url: str = Field(default="sqlite+pysqlite:///./pharmagift.db")
    supabase_database_url: str | None = None
    supabase_url: str | None = None
    supabase_anon_key: str | None = None
    supabase_timeout_sec: int = 10

    secret_key: str = "change-me"
    access_token_expire_minutes: int = 1440

    base_site_url: str = "http://localhost:8080"
    cors_extra_origins: str = ""

    gemini_api_key: str = ""
    gemini_model: str = "gemini-1.5-flash"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta/models"
    gemini_timeout_sec: float = 30.0
    gemini_max_retries: int = 3
    gemini_initial_backoff_sec: float = 1.0
    gemini_safety_threshold: str = "BLOCK_NONE"
    gift_count: int = 4

    anonymous_search_limit: int = 1
    search_burst_limit: int = 10
    max_upload_bytes: int = 10 * 1024 * 1024

    @model_validator(mode="after")
    def _apply_supabase_db_override(self) -> "Settings":
        # Allow `SUPABASE_DATABASE_URL` to override `DATABASE_URL` when provided.
        # Treat empty string as "not set".
        if self.supabase_database_url:
            self.database_url = self.supabase_database_url
        return self


settings = Settings()
