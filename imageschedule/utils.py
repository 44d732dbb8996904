"""Utility functions for instant conversion and item time lookup."""

import math
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any


# Attribute/key names probed on an item, in priority order
ITEM_TIME_FIELDS = ("adjusted_timestamp", "original_timestamp", "timestamp", "time_ms")


def is_finite_number(value: Any) -> bool:
    """Return True for real, finite numbers (bools excluded).

    Examples:
        >>> is_finite_number(1.5)
        True
        >>> is_finite_number(float("nan"))
        False
        >>> is_finite_number(True)
        False
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def to_epoch_ms(value: Any) -> float | None:
    """Convert an instant to milliseconds since the Unix epoch.

    Naive datetimes are interpreted as UTC so that results do not depend
    on the host timezone.

    Args:
        value: A number of milliseconds, a datetime, or None.

    Returns:
        Milliseconds since epoch, or None if the value is not a usable instant.

    Examples:
        >>> to_epoch_ms(datetime(1970, 1, 1, 0, 0, 1, tzinfo=timezone.utc))
        1000.0
        >>> to_epoch_ms(2500)
        2500.0
        >>> to_epoch_ms("soon") is None
        True
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.timestamp() * 1000.0
    if is_finite_number(value):
        return float(value)
    return None


def resolve_item_time(item: Any) -> float | None:
    """Default resolver mapping a caller item to its instant in ms.

    Accepts bare numbers and datetimes, mappings, or objects exposing one
    of ``ITEM_TIME_FIELDS``. The first field holding a usable instant wins.

    Args:
        item: Caller item.

    Returns:
        Milliseconds since epoch, or None if no instant can be found.
    """
    if item is None:
        return None
    direct = to_epoch_ms(item)
    if direct is not None:
        return direct

    for name in ITEM_TIME_FIELDS:
        if isinstance(item, Mapping):
            candidate = item.get(name)
        else:
            candidate = getattr(item, name, None)
        resolved = to_epoch_ms(candidate)
        if resolved is not None:
            return resolved
    return None


def snap_to_grid(time_ms: float, grid_ms: int | None) -> float:
    """Round an instant to the nearest multiple of the grid step.

    Halfway values round up, matching a half-up round of ``time / grid``.

    Examples:
        >>> snap_to_grid(1_499, 1_000)
        1000
        >>> snap_to_grid(1_500, 1_000)
        2000
        >>> snap_to_grid(1_234.5, None)
        1234.5
    """
    if not grid_ms or grid_ms <= 0:
        return time_ms
    return math.floor(time_ms / grid_ms + 0.5) * grid_ms
