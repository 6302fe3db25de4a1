"""Centralised configuration using pydantic-settings.

All environment variables are read through the Settings class.
Consumers call ``get_settings()`` to obtain a cached, validated instance.
Tests construct ``Settings(_env_file=None, ...)`` directly for isolation.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# src/sourcemark/config.py  ->  parent x3  ->  project root
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent

_CSS_CLASS_CHARS = frozenset(
    "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789-_:/[]."
)


# ---------------------------------------------------------------------------
# Sub-models (one per configuration domain)
# ---------------------------------------------------------------------------
class HighlightConfig(BaseModel):
    """Markup emitted around the active source span and before each line."""

    marker_class: str = "bg-red-100"
    line_number_class: str = "line-number"

    @field_validator("marker_class", "line_number_class")
    @classmethod
    def _plain_css_class(cls, value: str) -> str:
        # Inserted verbatim into class="..."; quotes or brackets would break
        # the surrounding markup.
        if not value or not set(value) <= _CSS_CLASS_CHARS:
            msg = f"invalid CSS class name: {value!r}"
            raise ValueError(msg)
        return value


class EditorConfig(BaseModel):
    """Source editor command configuration."""

    comment_prefix: str = "// "
    restore_delay_seconds: float = 0.0

    @field_validator("comment_prefix")
    @classmethod
    def _single_line_prefix(cls, value: str) -> str:
        if not value or "\n" in value:
            msg = "EDITOR__COMMENT_PREFIX must be a non-empty single-line string"
            raise ValueError(msg)
        return value


class AppConfig(BaseModel):
    """Application runtime configuration."""

    log_dir: Path = Path("logs")
    log_level: str = "INFO"


# ---------------------------------------------------------------------------
# Root settings
# ---------------------------------------------------------------------------
class Settings(BaseSettings):
    """Settings with automatic .env loading and type validation.

    Environment variables use double-underscore delimiter for nesting:
    ``HIGHLIGHT__MARKER_CLASS``, ``EDITOR__COMMENT_PREFIX``,
    ``APP__LOG_DIR``, etc.
    """

    model_config = SettingsConfigDict(
        env_file=_PROJECT_ROOT / ".env",
        env_nested_delimiter="__",
        extra="ignore",
    )

    highlight: HighlightConfig = HighlightConfig()
    editor: EditorConfig = EditorConfig()
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
        logger.debug("Settings: no .env file found, using env vars and defaults")

    return settings
