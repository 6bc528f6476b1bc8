from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel


class Settings(BaseModel):
    # Project root (repo root in local dev, /app in Docker)
    project_root: Path = Path(__file__).resolve().parents[2]

    # Database URL:
    # - Default for local dev: sqlite file in the project root (shop_sms.db)
    # - Override in Docker / production using the DATABASE_URL env var
    database_url: str = os.getenv(
        "DATABASE_URL",
        f"sqlite:///{(Path(__file__).resolve().parents[2] / 'shop_sms.db')}",
    )

    # Shared secret for the /sms/settings endpoints
    admin_token: str | None = None

    log_level: str = "INFO"

    def model_post_init(self, __context: object) -> None:  # type: ignore[override]
        env_token = os.getenv("ADMIN_TOKEN")
        if env_token:
            object.__setattr__(self, "admin_token", env_token)
        env_level = os.getenv("LOG_LEVEL")
        if env_level:
            object.__setattr__(self, "log_level", env_level.upper())


@lru_cache
def get_settings() -> Settings:
    return Settings()


def configure_logging() -> None:
    """Configure root logging once, using LOG_LEVEL."""
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
