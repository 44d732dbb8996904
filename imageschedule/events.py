"""Start/end event generation for the slot sweep."""

import math
from collections.abc import Sequence
from dataclasses import dataclass

from .schema import Event
from .windows import VisibilityWindow


@dataclass(frozen=True)
class EventStream:
    """Sorted events plus the windows rejected while building them.

    Attributes:
        events: Events ordered by Event.sort_key.
        rejected: Item indices whose window had non-positive or
            non-finite duration; these items are hidden.
    """

    events: tuple[Event, ...]
    rejected: tuple[int, ...]


def build_events(windows: Sequence[VisibilityWindow]) -> EventStream:
    """Emit one start and one end event per usable window.

    At equal time, "end" sorts before "start" so a slot freed at T can be
    taken at T; within a type, lower item index goes first.

    Args:
        windows: Computed visibility windows.

    Returns:
        EventStream with sorted events and rejected item indices.
    """
    events: list[Event] = []
    rejected: list[int] = []

    for window in windows:
        usable = (
            math.isfinite(window.start_ms)
            and math.isfinite(window.end_ms)
            and window.end_ms > window.start_ms
        )
        if not usable:
            rejected.append(window.item_index)
            continue
        events.append(Event(time=window.start_ms, type="start", item_index=window.item_index))
        events.append(Event(time=window.end_ms, type="end", item_index=window.item_index))

    events.sort(key=lambda event: event.sort_key)
    return EventStream(events=tuple(events), rejected=tuple(rejected))
