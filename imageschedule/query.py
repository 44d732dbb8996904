"""Probe-time lookups on a computed schedule.

Renderers ask "what is on screen at time T", and scrubbers and hover
previews ask "which composition covers T". These helpers answer both
without recomputing the schedule.
"""

import bisect
from collections.abc import Sequence
from dataclasses import dataclass

from .schema import Schedule, Segment, VisibleItem
from .utils import is_finite_number


@dataclass(frozen=True)
class VisibleEntry:
    """An item shown at a probe time.

    Attributes:
        item_index: Index into the caller's item sequence.
        slot_index: Slot the item occupies.
        start_ms: Item window start.
        end_ms: Item window end.
        max_concurrency: Peak concurrency during the item's window.
    """

    item_index: int
    slot_index: int
    start_ms: float
    end_ms: float
    max_concurrency: int

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "item_index": self.item_index,
            "slot_index": self.slot_index,
            "start_ms": self.start_ms,
            "end_ms": self.end_ms,
            "max_concurrency": self.max_concurrency,
        }


def segment_at(schedule: Schedule, probe_ms: float) -> Segment | None:
    """Return the segment whose [start_ms, end_ms) contains probe_ms.

    Args:
        schedule: A computed schedule.
        probe_ms: Probe time in ms.

    Returns:
        The covering segment, or None outside every segment.
    """
    if not schedule.segments or not is_finite_number(probe_ms):
        return None
    starts = [segment.start_ms for segment in schedule.segments]
    position = bisect.bisect_right(starts, probe_ms) - 1
    if position < 0:
        return None
    segment = schedule.segments[position]
    return segment if probe_ms < segment.end_ms else None


def visible_at(
    schedule: Schedule,
    probe_ms: float,
    force: bool = False,
) -> list[VisibleEntry]:
    """Return the items visible at probe_ms, ordered by slot.

    Args:
        schedule: A computed schedule.
        probe_ms: Probe time in ms.
        force: If True, include every visible item that started at or
            before probe_ms, regardless of its end (used when a caller
            forces a refresh while seeking).

    Returns:
        Visible entries sorted by slot index.
    """
    if not is_finite_number(probe_ms):
        return []

    entries: list[VisibleEntry] = []
    for item_index, meta in enumerate(schedule.metadata):
        if not isinstance(meta, VisibleItem):
            continue
        if force:
            if probe_ms < meta.start_ms:
                continue
        elif not meta.covers(probe_ms):
            continue
        entries.append(VisibleEntry(
            item_index=item_index,
            slot_index=meta.slot_index,
            start_ms=meta.start_ms,
            end_ms=meta.end_ms,
            max_concurrency=meta.max_concurrency,
        ))

    entries.sort(key=lambda entry: (entry.slot_index, entry.item_index))
    return entries


def surrounding_items(
    times: Sequence[float | None],
    probe_ms: float,
) -> tuple[int | None, int | None]:
    """Find the nearest items around a probe time.

    Args:
        times: Instant per item in ms, or None.
        probe_ms: Probe time in ms.

    Returns:
        Tuple of (index of the latest item at or before probe_ms, index of
        the earliest item strictly after probe_ms). Either may be None.
        Ties on time resolve to the lower index.
    """
    if not is_finite_number(probe_ms):
        return None, None

    previous_index: int | None = None
    next_index: int | None = None
    for index, value in enumerate(times):
        if not is_finite_number(value):
            continue
        if value <= probe_ms:
            if previous_index is None or value > times[previous_index]:
                previous_index = index
        elif next_index is None or value < times[next_index]:
            next_index = index

    return previous_index, next_index
