"""Deterministic image-visibility scheduling.

This package turns a set of timestamped photos into:
- A visibility window per photo (minimum display plus optional hold)
- A bounded slot assignment so at most ``max_slots`` photos show at once
- A compact list of composition segments, rate-limited so the on-screen
  composition never changes faster than ``composition_interval_ms``

Example:
    >>> from imageschedule import ScheduleConfig, compute_schedule
    >>> config = ScheduleConfig(min_visible_ms=6_000, hold_ms=0, max_slots=4)
    >>> schedule = compute_schedule([0, 2_000, 30_000], config)
    >>> for segment in schedule.segments:
    ...     print(segment.start_ms, segment.end_ms, segment.slots)
    0.0 2000.0 (0, None)
    2000.0 6000.0 (0, 1)
    6000.0 30000.0 (None, 1)
    30000.0 36000.0 (0,)

Timestamp Resolution Example:
    >>> from imageschedule import resolve_timestamps
    >>> resolved = resolve_timestamps([None, 5_000, None, None, 20_000])
    >>> [r.time_ms for r in resolved]
    [4000, 5000, 10000, 15000, 20000]
"""

from .cache import ScheduleCache
from .composition import compress_segments, enforce_composition_interval
from .config import ScheduleConfig
from .errors import (
    ScheduleConfigError,
    ScheduleError,
    SlotAssignmentError,
    TimestampResolutionError,
)
from .events import EventStream, build_events
from .query import VisibleEntry, segment_at, surrounding_items, visible_at
from .scheduler import compute_schedule, compute_schedule_from_times
from .schema import Event, HiddenItem, ItemMetadata, Schedule, Segment, VisibleItem
from .segments import build_segments
from .slots import ConcurrencyProfile, bind_slots, measure_concurrency
from .timestamps import ResolvedTimestamp, resolve_timestamps
from .utils import resolve_item_time, snap_to_grid, to_epoch_ms
from .windows import VisibilityWindow, WindowResult, compute_windows, order_entries


__version__ = "1.0.0"

__all__ = [
    # Main API
    "compute_schedule",
    "compute_schedule_from_times",
    "ScheduleConfig",
    "ScheduleCache",
    # Schema
    "Schedule",
    "Segment",
    "Event",
    "VisibleItem",
    "HiddenItem",
    "ItemMetadata",
    # Pipeline stages
    "resolve_timestamps",
    "ResolvedTimestamp",
    "order_entries",
    "compute_windows",
    "VisibilityWindow",
    "WindowResult",
    "build_events",
    "EventStream",
    "measure_concurrency",
    "bind_slots",
    "ConcurrencyProfile",
    "build_segments",
    "compress_segments",
    "enforce_composition_interval",
    # Queries
    "segment_at",
    "visible_at",
    "surrounding_items",
    "VisibleEntry",
    # Errors
    "ScheduleError",
    "ScheduleConfigError",
    "TimestampResolutionError",
    "SlotAssignmentError",
    # Utils
    "resolve_item_time",
    "snap_to_grid",
    "to_epoch_ms",
]
