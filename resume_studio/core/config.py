"""
Configuration module - loads all env vars using pydantic-settings.
This is the SINGLE SOURCE OF TRUTH for all config values.
"""

from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # App
    environment: str = "development"
    debug: bool = False

    # Database - DATABASE_URL wins over the postgres_* fields
    database_url: str = ""
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "resume_user"
    postgres_password: str = "password"
    postgres_db: str = "resume_studio"

    # MongoDB (AI response cache; empty URI keeps the cache in memory)
    mongodb_uri: str = ""
    mongodb_db: str = "resume_studio_cache"

    # AI provider (OpenAI-compatible)
    ai_provider: str = "openai"
    ai_api_key: str = ""
    ai_base_url: str = ""
    ai_model: str = ""
    ai_cache_enabled: bool = True
    ai_cache_ttl_seconds: int = 7 * 24 * 60 * 60
    ai_cache_max_entries: int = 1000

    # JWT Auth - token lives in an HTTP-only cookie
    jwt_secret_key: str = "change-this-secret"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 7 * 24 * 60
    cookie_name: str = "token"

    # CORS
    frontend_url: str = "http://localhost:3000"

    # Logging
    log_level: str = "INFO"
    log_file: str = ""

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def sqlalchemy_url(self) -> str:
        """Construct the database connection URL"""
        if self.database_url:
            return self.database_url
        return (
            f"postgresql://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    # Pydantic v2 config
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
