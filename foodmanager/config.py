"""Application configuration helpers."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parent.parent
DATA_DIR = BASE_DIR / "data"


class Settings(BaseSettings):
    """Settings loaded from ``FOODMANAGER_*`` environment variables."""

    environment: str = "development"
    database_path: Path = DATA_DIR / "foodmanager.db"

    # Single demo account; there is no user table.
    admin_id: int = 1
    admin_email: str = "admin@foodmanager.com"
    admin_password: str = "admin123"
    admin_name: str = "Admin User"
    auth_token: str = "demo-token-123"
    token_max_age_days: int = 7

    default_page_size: int = 50

    # Development server and logging.
    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = True
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="FOODMANAGER_",
        env_file=".env",
        extra="ignore",
    )

    @property
    def is_production(self) -> bool:
        return self.environment.strip().lower() == "production"

    @property
    def token_max_age_seconds(self) -> int:
        return self.token_max_age_days * 24 * 60 * 60


@lru_cache
def get_settings() -> Settings:
    return Settings()
