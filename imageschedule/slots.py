"""Two-pass slot assignment over the sorted event stream.

Pass 1 (``measure_concurrency``) sweeps the events with a first-fit slot
table, recording for every item the peak number of items visible alongside
it, and demoting items that arrive while every slot is taken.

Pass 2 (``bind_slots``) replays first-fit over the events of the surviving
items to obtain the slot binding that segments are built from.

Peak concurrency must be known before segments are laid out, since a
segment's column count follows the peak of its active items rather than the
instantaneous count. That is why the two passes are kept separate.
"""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from .errors import SlotAssignmentError
from .schema import Event


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConcurrencyProfile:
    """Outcome of the concurrency-measuring pass.

    Attributes:
        slot_of: Provisional slot per admitted item.
        max_concurrency: Peak concurrency per admitted item (>= 1).
        dropped: Items demoted for lack of a free slot, in event order.
    """

    slot_of: dict[int, int]
    max_concurrency: dict[int, int]
    dropped: tuple[int, ...]


def slot_table_size(events: Iterable[Event], max_slots: int) -> int:
    """Number of slots a sweep can ever reach.

    First-fit always takes the lowest free slot, so no index at or above the
    number of started items is ever used.
    """
    started = sum(1 for event in events if event.type == "start")
    return max(1, min(max_slots, started))


def _first_free(table: list[int | None]) -> int:
    """Return the lowest free slot index, or -1 if the table is full."""
    for slot_index, occupant in enumerate(table):
        if occupant is None:
            return slot_index
    return -1


def measure_concurrency(events: Sequence[Event], max_slots: int) -> ConcurrencyProfile:
    """Sweep events to measure per-item peak concurrency.

    Earlier-arriving items win slots; an item whose start finds no free
    slot is dropped for good and its end event is ignored.

    Args:
        events: Events sorted by Event.sort_key.
        max_slots: Number of slots (>= 1).

    Returns:
        ConcurrencyProfile for the sweep.
    """
    table: list[int | None] = [None] * slot_table_size(events, max_slots)
    active: dict[int, None] = {}
    slot_of: dict[int, int] = {}
    peak: dict[int, int] = {}
    dropped: list[int] = []
    dropped_set: set[int] = set()

    for event in events:
        item = event.item_index
        if item in dropped_set:
            continue

        if event.type == "end":
            slot_index = slot_of.get(item)
            if slot_index is not None and table[slot_index] == item:
                table[slot_index] = None
            active.pop(item, None)
        else:
            slot_index = _first_free(table)
            if slot_index < 0:
                logger.debug(
                    "Dropping item %d at %.3f: all %d slots occupied",
                    item,
                    event.time,
                    max_slots,
                )
                dropped.append(item)
                dropped_set.add(item)
                continue
            slot_of[item] = slot_index
            table[slot_index] = item
            active[item] = None

        concurrency = max(len(active), 1)
        for active_item in active:
            peak[active_item] = max(peak.get(active_item, 1), concurrency)

    max_concurrency = {item: peak.get(item, 1) for item in slot_of if item not in dropped_set}
    return ConcurrencyProfile(
        slot_of={item: slot for item, slot in slot_of.items() if item not in dropped_set},
        max_concurrency=max_concurrency,
        dropped=tuple(dropped),
    )


def filter_events(events: Iterable[Event], dropped: Iterable[int]) -> list[Event]:
    """Return the events of items that were not dropped, order preserved."""
    excluded = set(dropped)
    return [event for event in events if event.item_index not in excluded]


def bind_slots(events: Sequence[Event], max_slots: int) -> dict[int, int]:
    """Replay first-fit slot binding over a capacity-feasible stream.

    Args:
        events: Filtered events sorted by Event.sort_key.
        max_slots: Number of slots (>= 1).

    Returns:
        Mapping of item index to bound slot.

    Raises:
        SlotAssignmentError: If a start event finds no free slot, which
            means the stream was not capacity-feasible.
    """
    table: list[int | None] = [None] * slot_table_size(events, max_slots)
    binding: dict[int, int] = {}

    for event in events:
        item = event.item_index
        if event.type == "end":
            slot_index = binding.get(item)
            if slot_index is not None and table[slot_index] == item:
                table[slot_index] = None
            continue

        slot_index = _first_free(table)
        if slot_index < 0:
            raise SlotAssignmentError(
                message=f"No free slot for item {item} on a filtered event stream",
                details={"item_index": item, "time": event.time, "max_slots": max_slots},
            )
        binding[item] = slot_index
        table[slot_index] = item

    return binding
