"""FastAPI dependencies for the image schedule API.

This module provides:
- Settings access
- The shared schedule cache
- Conversion of request config into a ScheduleConfig
"""

import logging

from imageschedule import ScheduleCache, ScheduleConfig

from .config import Settings, get_settings as _get_settings
from .schemas import ScheduleConfigSchema


logger = logging.getLogger(__name__)


# Re-export get_settings for dependency injection
get_settings = _get_settings


# =============================================================================
# Schedule Cache
# =============================================================================


# Global cache instance
_schedule_cache: ScheduleCache | None = None


def get_schedule_cache() -> ScheduleCache:
    """Get the global schedule cache, creating it on first use.

    Returns:
        The shared ScheduleCache instance.
    """
    if _schedule_cache is None:
        return init_schedule_cache(get_settings())
    return _schedule_cache


def init_schedule_cache(settings: Settings) -> ScheduleCache:
    """Initialize the global schedule cache.

    Args:
        settings: Application settings.

    Returns:
        The initialized ScheduleCache instance.
    """
    global _schedule_cache
    _schedule_cache = ScheduleCache(max_entries=settings.cache_max_entries)
    logger.info("Schedule cache initialized: max_entries=%d", settings.cache_max_entries)
    return _schedule_cache


# =============================================================================
# Schedule Configuration
# =============================================================================


def build_schedule_config(
    overrides: ScheduleConfigSchema | None,
    settings: Settings | None = None,
) -> ScheduleConfig:
    """Merge request overrides onto the service defaults.

    Args:
        overrides: Config fields supplied with the request, or None.
        settings: Application settings. If None, uses get_settings().

    Returns:
        Normalized ScheduleConfig.

    Raises:
        ScheduleConfigError: If a merged value is not a usable number.
    """
    if settings is None:
        settings = get_settings()

    values = {
        "min_visible_ms": settings.default_min_visible_ms,
        "hold_ms": settings.default_hold_ms,
        "max_slots": settings.default_max_slots,
        "composition_interval_ms": settings.default_composition_interval_ms,
    }
    if overrides is not None:
        values.update(overrides.model_dump(exclude_none=True))

    return ScheduleConfig(**values)
