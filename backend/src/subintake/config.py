"""Configuration management for subintake.

Uses pydantic-settings to load configuration from environment variables.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _find_env_file() -> Path | None:
    """Search for .env file in common locations."""
    # Check current working directory first
    cwd = Path.cwd()
    if (cwd / ".env").exists():
        return cwd / ".env"

    # Check parent directories (up to 5 levels) for project root .env
    check_dir = cwd
    for _ in range(5):
        if (check_dir / ".env").exists():
            return check_dir / ".env"
        parent = check_dir.parent
        if parent == check_dir:
            break
        check_dir = parent

    # backend/src/subintake/config.py -> project root
    project_root = Path(__file__).resolve().parent.parent.parent.parent
    if (project_root / ".env").exists():
        return project_root / ".env"

    return None


_env_file = _find_env_file()


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=str(_env_file) if _env_file else ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # =========================
    # Environment
    # =========================
    environment: Literal["development", "staging", "production"] = "development"

    # =========================
    # Logging
    # =========================
    log_level: str = "INFO"
    log_format: Literal["json", "text"] = "text"

    # =========================
    # Augmentation provider
    # =========================
    anthropic_api_key: str = Field(default="", repr=False)
    anthropic_model: str = "claude-haiku-4-5-20251001"
    augmentation_enabled: bool = True
    augmentation_timeout_seconds: float = Field(default=60.0, gt=0)
    augmentation_text_limit: int = Field(
        default=10000,
        ge=1,
        description="Characters of document text sent for full-text augmentation",
    )
    supplement_text_limit: int = Field(
        default=8000,
        ge=1,
        description="Characters of document text sent for targeted supplementation",
    )

    # =========================
    # Parsing
    # =========================
    min_native_text_chars: int = Field(
        default=100,
        ge=0,
        description="Primary PDF text at or below this length triggers the fallback parser",
    )
    raw_text_limit: int = Field(
        default=500,
        ge=0,
        description="Prefix of source text retained on each record",
    )

    @property
    def is_augmentation_configured(self) -> bool:
        """Check if a hosted augmentation provider can be created."""
        return bool(self.anthropic_api_key)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
