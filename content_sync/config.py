"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All endpoints and secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache): one instance per process

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults provided for all settings: works out-of-the-box with docker-compose
    - link_replace_exempt_apps is a temporary migration table; empty it once those
      apps use the v2 endpoints
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = (
        "postgresql+asyncpg://content_sync:content_sync@db:5432/content_sync"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosting platforms provide postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10

    # Work queue (dramatiq)
    dramatiq_broker: str = "redis"  # "redis" | "stub"
    redis_url: str = "redis://redis:6379/0"
    downstream_high_queue: str = "downstream_high"
    downstream_low_queue: str = "downstream_low"
    downstream_max_retries: int = 20
    downstream_time_limit_ms: int = 120_000

    # Downstream sinks
    draft_content_store_url: str = "http://draft-content-store:3100"
    live_content_store_url: str = "http://content-store:3068"
    content_store_timeout_seconds: float = 10.0
    message_channel_prefix: str = "published_documents"

    # Content rules
    default_locale: str = "en"
    empty_base_path_formats: list[str] = [
        "contact",
        "government",
        "role_appointment",
        "topical_event_about_page",
        "world_location",
    ]
    protected_link_types: list[str] = ["taxons"]
    link_replace_exempt_apps: list[str] = ["specialist-publisher"]

    # Pagination
    pagination_default_count: int = 100
    dependency_page_size: int = 500

    # API
    cors_origins: list[str] = ["http://localhost:3000"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
