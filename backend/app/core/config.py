"""Application configuration managed via environment variables."""
from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "Momentum Insights Backend"
    debug: bool = False
    log_level: str = "INFO"
    database_url: str = "postgresql+psycopg2://momentum@localhost:5432/momentum"
    opik_enabled: bool = False
    opik_api_key: str | None = None
    opik_project: str = "momentum-insights"
    llm_api_key: str | None = None
    llm_base_url: str | None = None
    llm_model: str = "gpt-4o-mini"
    llm_temperature: float = 0.6
    llm_timeout_seconds: float = 30.0
    report_timezone: str = "UTC"

    @field_validator("llm_api_key", "llm_base_url", mode="before")
    @classmethod
    def blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("llm_timeout_seconds", mode="before")
    @classmethod
    def normalize_timeout(cls, value):
        try:
            normalized = float(value)
        except (TypeError, ValueError):
            return 30.0
        return normalized if normalized > 0 else 30.0


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings()


settings = get_settings()
