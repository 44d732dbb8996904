"""Image schedule orchestration.

Runs the full pipeline for one set of items:
1. Instant lookup and optional grid snapping
2. Visibility windows
3. Start/end events
4. Slot assignment (concurrency pass, then binding pass)
5. Segment building
6. Composition-interval enforcement

Example:
    >>> from imageschedule import ScheduleConfig, compute_schedule
    >>> schedule = compute_schedule([0, 8_000], ScheduleConfig(min_visible_ms=60_000, hold_ms=10_000))
    >>> schedule.metadata[0].end_ms
    60000.0
"""

import logging
from collections.abc import Callable, Sequence
from typing import Any

from .composition import enforce_composition_interval
from .config import ScheduleConfig
from .events import build_events
from .schema import HiddenItem, ItemMetadata, Schedule, VisibleItem
from .segments import build_segments
from .slots import bind_slots, filter_events, measure_concurrency
from .utils import resolve_item_time, to_epoch_ms
from .windows import compute_windows, order_entries


logger = logging.getLogger(__name__)


ItemResolver = Callable[[Any], Any]


def compute_schedule(
    items: Sequence[Any] | None,
    config: ScheduleConfig | None = None,
    resolver: ItemResolver | None = None,
) -> Schedule:
    """Compute visibility, slots and segments for a set of items.

    This is a pure function: the same items and config always give an
    identical Schedule, and no state is kept between calls.

    Args:
        items: Caller items in their original order. None or empty gives
            an empty schedule.
        config: Scheduling parameters. If None, uses default ScheduleConfig().
        resolver: Maps an item to its instant (ms number or datetime), or
            None if it has none. If None, uses resolve_item_time().

    Returns:
        Schedule with one metadata entry per item.
    """
    if not items:
        return Schedule.empty()

    if resolver is None:
        resolver = resolve_item_time

    times = [to_epoch_ms(resolver(item)) for item in items]
    return compute_schedule_from_times(times, config)


def compute_schedule_from_times(
    times: Sequence[float | None],
    config: ScheduleConfig | None = None,
) -> Schedule:
    """Compute a schedule from already-resolved instants.

    Args:
        times: Instant per item in ms since epoch; None or non-finite
            values mark the item as unschedulable.
        config: Scheduling parameters. If None, uses default ScheduleConfig().

    Returns:
        Schedule with one metadata entry per time.
    """
    if not times:
        return Schedule.empty()

    if config is None:
        config = ScheduleConfig()

    metadata: list[ItemMetadata] = [HiddenItem(reason="unresolved") for _ in times]

    # Step 1: Sort schedulable items (with optional grid snapping)
    entries = order_entries(times, config.grid_step_ms)
    if not entries:
        logger.debug("No schedulable items among %d inputs", len(times))
        return Schedule(metadata=tuple(metadata))

    # Step 2: Visibility windows
    window_result = compute_windows(entries, config.min_visible_ms, config.hold_ms)

    # Step 3: Events
    stream = build_events(window_result.windows)
    for item_index in stream.rejected:
        metadata[item_index] = HiddenItem(reason="empty_window")

    # Step 4: Slot assignment
    profile = measure_concurrency(stream.events, config.max_slots)
    for item_index in profile.dropped:
        metadata[item_index] = HiddenItem(reason="capacity")

    filtered = filter_events(stream.events, profile.dropped)
    binding = bind_slots(filtered, config.max_slots)

    for window in window_result.windows:
        slot_index = binding.get(window.item_index)
        if slot_index is None:
            continue
        metadata[window.item_index] = VisibleItem(
            start_ms=window.start_ms,
            end_ms=window.end_ms,
            slot_index=slot_index,
            max_concurrency=profile.max_concurrency.get(window.item_index, 1),
        )

    # Step 5: Segments
    raw_segments = build_segments(filtered, binding, profile.max_concurrency, config.max_slots)

    # Step 6: Composition interval
    segments = enforce_composition_interval(raw_segments, config.composition_interval_ms)

    logger.debug(
        "Schedule computed: items=%d scheduled=%d dropped=%d segments=%d (raw=%d)",
        len(times),
        len(binding),
        len(profile.dropped),
        len(segments),
        len(raw_segments),
    )

    return Schedule(
        metadata=tuple(metadata),
        segments=tuple(segments),
        min_start_ms=window_result.min_start_ms,
        max_end_ms=window_result.max_end_ms,
    )
