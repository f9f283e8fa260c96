"""Application configuration managed via environment variables."""
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "Goal Planner Backend"
    debug: bool = False
    log_level: str = "INFO"
    database_url: str = "sqlite:///./goalplanner.db"
    cors_origins: list[str] = ["*"]

    jwt_secret: str = "change-me"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 60 * 24 * 7
    password_hash_rounds: int = 10

    openai_api_key: str | None = None
    openai_model: str = "gpt-4o-mini"
    generation_timeout_seconds: float = 60.0
    max_plan_days: int = 365

    otp_ttl_minutes: int = 10
    mail_provider: str = "noop"
    mail_from: str = "no-reply@goalplanner.local"
    resend_api_key: str | None = None
    otp_cache_size: int = 10_000

    opik_enabled: bool = False
    opik_api_key: str | None = None
    opik_project: str = "goalplanner"


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings()


settings = get_settings()
