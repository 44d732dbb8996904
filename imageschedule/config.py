"""Scheduling configuration.

Example:
    >>> from imageschedule.config import ScheduleConfig
    >>> config = ScheduleConfig(min_visible_ms=200, max_slots=3)
    >>> config.min_visible_ms
    1000
"""

import math
from dataclasses import dataclass
from typing import Any

from .constants import (
    COMPOSITION_INTERVAL_FLOOR_MS,
    DEFAULT_COMPOSITION_INTERVAL_MS,
    DEFAULT_HOLD_MS,
    DEFAULT_MAX_SLOTS,
    DEFAULT_MIN_VISIBLE_MS,
    HOLD_MAX_MS,
    HOLD_MIN_MS,
    MIN_VISIBLE_FLOOR_MS,
)
from .errors import ScheduleConfigError


@dataclass
class ScheduleConfig:
    """Timing parameters for the image scheduler.

    Out-of-range values are clamped on initialization rather than rejected;
    only values that are not numbers at all raise.

    Attributes:
        min_visible_ms: Minimum display duration for every image.
            Clamped up to MIN_VISIBLE_FLOOR_MS. Default 3000.
        hold_ms: Extra display time granted when the next image arrives
            after the minimum display ends. Clamped to [0, 180000].
            Default 45000.
        max_slots: Number of concurrent display slots. Floors at 1.
            Default 4.
        composition_interval_ms: Minimum dwell time between composition
            changes. Clamped up to COMPOSITION_INTERVAL_FLOOR_MS; an
            infinite value disables enforcement. Default 2000.
        snap_to_grid: Whether to round each instant to snap_grid_ms.
        snap_grid_ms: Grid step in ms. Non-positive values become None.
    """

    min_visible_ms: float = DEFAULT_MIN_VISIBLE_MS
    hold_ms: float = DEFAULT_HOLD_MS
    max_slots: int = DEFAULT_MAX_SLOTS
    composition_interval_ms: float = DEFAULT_COMPOSITION_INTERVAL_MS
    snap_to_grid: bool = False
    snap_grid_ms: int | None = None

    def __post_init__(self) -> None:
        """Validate and clamp configuration on initialization."""
        self.normalize()

    def normalize(self) -> None:
        """Clamp every parameter into its allowed range.

        Raises:
            ScheduleConfigError: If a parameter is not a number.
        """
        min_visible = _require_number("min_visible_ms", self.min_visible_ms)
        if math.isinf(min_visible):
            raise ScheduleConfigError(
                message="min_visible_ms must be finite",
                details={"parameter": "min_visible_ms", "value": self.min_visible_ms},
            )
        self.min_visible_ms = max(min_visible, MIN_VISIBLE_FLOOR_MS)

        hold = _require_number("hold_ms", self.hold_ms)
        self.hold_ms = min(max(hold, HOLD_MIN_MS), HOLD_MAX_MS)

        slots = _require_number("max_slots", self.max_slots)
        if math.isinf(slots):
            raise ScheduleConfigError(
                message="max_slots must be finite",
                details={"parameter": "max_slots", "value": self.max_slots},
            )
        self.max_slots = max(1, int(slots))

        interval = _require_number(
            "composition_interval_ms",
            self.composition_interval_ms,
        )
        self.composition_interval_ms = max(interval, COMPOSITION_INTERVAL_FLOOR_MS)

        self.snap_to_grid = bool(self.snap_to_grid)
        if self.snap_grid_ms is not None:
            grid = _require_number("snap_grid_ms", self.snap_grid_ms)
            self.snap_grid_ms = math.floor(grid + 0.5) if math.isfinite(grid) and grid > 0 else None

    @property
    def grid_step_ms(self) -> int | None:
        """Grid step in effect, or None when snapping is off."""
        if not self.snap_to_grid:
            return None
        return self.snap_grid_ms

    def cache_key(self) -> tuple:
        """Return a hashable tuple identifying this configuration."""
        return (
            self.min_visible_ms,
            self.hold_ms,
            self.max_slots,
            self.composition_interval_ms,
            self.grid_step_ms,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "min_visible_ms": self.min_visible_ms,
            "hold_ms": self.hold_ms,
            "max_slots": self.max_slots,
            "composition_interval_ms": self.composition_interval_ms,
            "snap_to_grid": self.snap_to_grid,
            "snap_grid_ms": self.snap_grid_ms,
        }


def _require_number(name: str, value: Any) -> float:
    """Return value as a float, rejecting non-numbers and NaN."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ScheduleConfigError(
            message=f"{name} must be a number, got {type(value).__name__}",
            details={"parameter": name, "value": repr(value)},
        )
    if math.isnan(value):
        raise ScheduleConfigError(
            message=f"{name} must not be NaN",
            details={"parameter": name},
        )
    return value
