"""Centralised application configuration using pydantic-settings.

All environment variables are read through the Settings class.
Consumers call ``get_settings()`` to obtain a cached, validated instance.
Tests construct ``Settings(_env_file=None, ...)`` directly for isolation.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from highlightwords.markup.structure import BOUNDARY_TAGS

logger = logging.getLogger(__name__)

# src/highlightwords/config.py  ->  parent x3  ->  project root
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


# ---------------------------------------------------------------------------
# Sub-models (one per configuration domain)
# ---------------------------------------------------------------------------
class HighlightConfig(BaseModel):
    """Highlighting behaviour."""

    default_color: str = "rgb(252, 233, 0)"
    select_guard_ms: int = Field(default=1000, ge=0)
    boundary_tags: tuple[str, ...] = tuple(sorted(BOUNDARY_TAGS))

    @field_validator("boundary_tags")
    @classmethod
    def _lowercase_tags(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        tags = tuple(tag.strip().lower() for tag in value if tag.strip())
        if not tags:
            msg = "HIGHLIGHT__BOUNDARY_TAGS must name at least one tag"
            raise ValueError(msg)
        return tags


class AppConfig(BaseModel):
    """Application runtime configuration."""

    host: str = "127.0.0.1"
    port: int = 8080
    log_dir: Path = Path("logs")
    document_path: Path | None = None


# ---------------------------------------------------------------------------
# Root settings
# ---------------------------------------------------------------------------
class Settings(BaseSettings):
    """Application settings with automatic .env loading and type validation.

    Environment variables use double-underscore delimiter for nesting:
    ``HIGHLIGHT__DEFAULT_COLOR``, ``HIGHLIGHT__SELECT_GUARD_MS``,
    ``APP__PORT``, ``APP__DOCUMENT_PATH``, etc.
    """

    model_config = SettingsConfigDict(
        env_file=_PROJECT_ROOT / ".env",
        env_nested_delimiter="__",
        extra="ignore",
    )

    highlight: HighlightConfig = HighlightConfig()
    app: AppConfig = AppConfig()


# ---------------------------------------------------------------------------
# Singleton access
# ---------------------------------------------------------------------------
@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance.

    Call ``get_settings.cache_clear()`` in tests to reset.
    """
    settings = Settings()

    env_file = settings.model_config.get("env_file")
    if env_file is not None and Path(str(env_file)).is_file():
        logger.info("Settings loaded .env from: %s", env_file)
    else:
        logger.info("Settings: no .env file found, using env vars and defaults")

    return settings
