"""Service configuration loaded once from the environment (or a .env file)."""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

DEFAULT_ALLOWED_FILE_TYPES = "epub,pdf,mobi,azw,azw3,txt"


class Settings(BaseSettings):
    """Every value comes from the environment, .env, or these defaults."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # --- Upload policy ---
    allowed_file_types: str = DEFAULT_ALLOWED_FILE_TYPES
    upload_dir: Path = Path("./uploads")
    max_file_size_mb: int = 25

    # --- Server ---
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "info"

    @property
    def allowed_types(self) -> list[str]:
        return [t.strip() for t in self.allowed_file_types.split(",")]

    @property
    def allowed_extensions(self) -> set[str]:
        return {t.lower() for t in self.allowed_types}

    @property
    def max_file_size_bytes(self) -> int:
        return self.max_file_size_mb * 1024 * 1024


@lru_cache()
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()


def ensure_upload_dir(settings: Settings) -> Path:
    """Create the upload directory if needed. Failure is logged, not raised."""
    path = Path(settings.upload_dir)
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        logger.warning("Failed to create upload directory %s: %s", path, exc)
    return path
