"""Configuration management for the image schedule service.

This module provides centralized configuration using pydantic-settings,
loading values from environment variables with sensible defaults.

Example:
    >>> from src.api.config import get_settings
    >>> settings = get_settings()
    >>> print(settings.app_name)
    Image Schedule Service
"""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

from imageschedule.constants import (
    DEFAULT_COMPOSITION_INTERVAL_MS,
    DEFAULT_HOLD_MS,
    DEFAULT_MAX_SLOTS,
    DEFAULT_MIN_VISIBLE_MS,
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings can be overridden via environment variables.
    Environment variables use uppercase names matching the attribute names.

    Attributes:
        app_name: Name of the application for OpenAPI docs.
        app_version: API version string.
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR).
        default_min_visible_ms: Minimum display duration when a request omits it.
        default_hold_ms: Hold extension when a request omits it.
        default_max_slots: Slot count when a request omits it.
        default_composition_interval_ms: Composition dwell time when a
            request omits it.
        cache_max_entries: Capacity of the shared schedule cache.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application settings
    app_name: str = "Image Schedule Service"
    app_version: str = "1.0.0"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Scheduling defaults
    default_min_visible_ms: float = DEFAULT_MIN_VISIBLE_MS
    default_hold_ms: float = DEFAULT_HOLD_MS
    default_max_slots: int = DEFAULT_MAX_SLOTS
    default_composition_interval_ms: float = DEFAULT_COMPOSITION_INTERVAL_MS

    # Cache
    cache_max_entries: int = 32


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings instance with values from environment.
    """
    return Settings()
