"""Settings for the campus booking API, read from the environment and ``.env``."""

from __future__ import annotations

from functools import lru_cache
from typing import List, Literal, Optional

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "Festo Campus"
    app_version: str = "1.0.0"
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = False
    api_prefix: str = "/api"
    log_level: str = "INFO"

    host: str = "0.0.0.0"
    port: int = 8000
    workers: int = 4

    # Postgres parts are ignored when DATABASE_URL is set
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "festo"
    postgres_password: str = "festo_secret"
    postgres_db: str = "festo_campus"
    explicit_database_url: Optional[str] = Field(default=None, validation_alias="DATABASE_URL")
    db_pool_size: int = 20
    db_max_overflow: int = 10

    @computed_field
    @property
    def database_url(self) -> str:
        return self.explicit_database_url or (
            f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    redis_url: str = "redis://localhost:6379/0"

    jwt_secret_key: str = "your-super-secret-key-change-in-production"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60
    refresh_token_expire_days: int = 7

    # Test keys (rzp_test_) outside production
    razorpay_key_id: Optional[str] = None
    razorpay_key_secret: Optional[str] = None
    razorpay_webhook_secret: Optional[str] = None
    currency: str = "INR"

    # Global limit per client IP, plus tighter ones on auth and booking creation
    rate_limit_enabled: bool = True
    rate_limit_per_minute: int = 100
    login_rate_limit_per_minute: int = 5
    register_rate_limit_per_minute: int = 3
    booking_rate_limit_per_minute: int = 10

    cors_origins: List[str] = ["http://localhost:3000", "http://localhost:5173"]


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
