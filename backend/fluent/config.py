"""Typed settings configuration - single source of truth."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: str = "sqlite:///./fluent.db"

    # Request routing
    admin_url_paths: list[str] = ["dev/", "graphql/"]
    admin_url_base: str = "admin"
    query_param: str = "l"

    # Domain mode
    force_domain: bool = False
    force_domain_env_var: str = "SS_FLUENT_FORCE_DOMAIN"
    domain_cache_ttl_seconds: int = 60

    # Legacy schema migration
    legacy_locales: list[str] = []
    localised_types_file: str | None = None
    migrate_subclasses_of: str = "DataObject"

    # Logging
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
