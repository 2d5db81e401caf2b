"""Runtime configuration, read from ``IMS_*`` environment variables or ``.env``."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve data directory relative to the project root.
# When installed in editable mode the project root is the repo root.
_DATA_DIR = Path(__file__).resolve().parents[3] / "data"

_LEVEL_BY_ENVIRONMENT = {
    "production": "INFO",
    "staging": "INFO",
    "development": "DEBUG",
    "test": "WARNING",
}


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="IMS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    database_url: str = f"sqlite:///{_DATA_DIR / 'ims.db'}"
    environment: str = "development"
    log_level: str | None = None
    sqlite_busy_timeout: float = 30.0

    default_low_stock_threshold: int = 10
    default_reorder_point: int = 5
    default_reorder_quantity: int = 20
    default_reservation_minutes: int = 30

    posting_max_attempts: int = 3
    fulfilment_posts_sale: bool = True

    @property
    def effective_log_level(self) -> str:
        if self.log_level:
            return self.log_level.upper()
        return _LEVEL_BY_ENVIRONMENT.get(self.environment.lower(), "INFO")


@lru_cache
def get_settings() -> Settings:
    return Settings()
