"""Segment building from the bound slot sweep.

Walks the filtered event stream and emits one segment per stretch of time
with a constant slot mapping. Stretches with no active item are skipped, so
time outside every segment means "nothing visible".

Example:
    >>> from imageschedule.events import build_events
    >>> from imageschedule.segments import build_segments
    >>> from imageschedule.slots import bind_slots, measure_concurrency
    >>> from imageschedule.windows import VisibilityWindow
    >>> stream = build_events([VisibilityWindow(0, 0.0, 6_000.0), VisibilityWindow(1, 2_000.0, 8_000.0)])
    >>> profile = measure_concurrency(stream.events, max_slots=4)
    >>> binding = bind_slots(stream.events, max_slots=4)
    >>> segments = build_segments(stream.events, binding, profile.max_concurrency, max_slots=4)
    >>> [(s.start_ms, s.end_ms, s.slots) for s in segments]
    [(0.0, 2000.0, (0, None)), (2000.0, 6000.0, (0, 1)), (6000.0, 8000.0, (None, 1))]
"""

from collections.abc import Mapping, Sequence

from .schema import Event, Segment
from .slots import slot_table_size


def layout_size_for(
    active: Mapping[int, None],
    max_concurrency: Mapping[int, int],
    max_slots: int,
) -> int:
    """Column count for a set of active items.

    Uses the peak concurrency of the active items so the layout does not
    shrink and regrow while a crowded stretch is still on screen.
    """
    peak = max((max_concurrency.get(item, 1) for item in active), default=1)
    return max(1, min(max_slots, peak))


def build_segments(
    events: Sequence[Event],
    binding: Mapping[int, int],
    max_concurrency: Mapping[int, int],
    max_slots: int,
) -> list[Segment]:
    """Collapse the slot sweep into ordered, non-overlapping segments.

    Args:
        events: Filtered events sorted by Event.sort_key.
        binding: Slot bound to each item by the second slot pass.
        max_concurrency: Peak concurrency per item from the first pass.
        max_slots: Number of slots (>= 1).

    Returns:
        Segments in ascending time order. Adjacent stretches with the same
        layout and slot mapping are merged into one segment.
    """
    if not events:
        return []

    table: list[int | None] = [None] * slot_table_size(events, max_slots)
    active: dict[int, None] = {}
    segments: list[Segment] = []
    last_time = events[0].time

    for event in events:
        if event.time > last_time:
            _append_segment(segments, last_time, event.time, table, active, max_concurrency, max_slots)

        item = event.item_index
        slot_index = binding.get(item)
        if event.type == "end":
            if slot_index is not None and table[slot_index] == item:
                table[slot_index] = None
            active.pop(item, None)
        else:
            if slot_index is not None:
                table[slot_index] = item
            active[item] = None

        last_time = event.time

    return segments


def _append_segment(
    segments: list[Segment],
    start_ms: float,
    end_ms: float,
    table: list[int | None],
    active: Mapping[int, None],
    max_concurrency: Mapping[int, int],
    max_slots: int,
) -> None:
    """Emit the current stretch, merging it into an identical predecessor."""
    if end_ms <= start_ms or not active:
        return

    layout_size = layout_size_for(active, max_concurrency, max_slots)
    slots = tuple(table[:layout_size])

    if segments:
        previous = segments[-1]
        if previous.end_ms == start_ms and previous.signature == (layout_size, slots):
            segments[-1] = Segment(
                start_ms=previous.start_ms,
                end_ms=end_ms,
                layout_size=layout_size,
                slots=slots,
            )
            return

    segments.append(Segment(start_ms=start_ms, end_ms=end_ms, layout_size=layout_size, slots=slots))
