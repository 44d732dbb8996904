"""Record types produced by the image scheduler.

Every scheduling call builds these records fresh; they are frozen and never
mutated after being returned.

Example:
    >>> from imageschedule.schema import Segment, VisibleItem
    >>> item = VisibleItem(start_ms=0.0, end_ms=6000.0, slot_index=0, max_concurrency=1)
    >>> segment = Segment(start_ms=0.0, end_ms=6000.0, layout_size=1, slots=(0,))
    >>> segment.signature
    (1, (0,))
"""

from dataclasses import dataclass
from typing import Any, Literal, Union


EventType = Literal["start", "end"]
HiddenReason = Literal["unresolved", "empty_window", "capacity"]


@dataclass(frozen=True)
class VisibleItem:
    """Metadata for an item that is shown on screen.

    Attributes:
        start_ms: Window start (inclusive), ms since epoch.
        end_ms: Window end (exclusive), ms since epoch.
        slot_index: Display slot occupied, in [0, max_slots).
        max_concurrency: Peak number of simultaneously visible items
            observed during this item's window.
    """

    start_ms: float
    end_ms: float
    slot_index: int
    max_concurrency: int = 1

    @property
    def visible(self) -> bool:
        return True

    @property
    def duration_ms(self) -> float:
        """Return window duration in milliseconds."""
        return self.end_ms - self.start_ms

    def covers(self, time_ms: float) -> bool:
        """Return True if time_ms falls inside [start_ms, end_ms)."""
        return self.start_ms <= time_ms < self.end_ms

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "visible": True,
            "start_ms": self.start_ms,
            "end_ms": self.end_ms,
            "slot_index": self.slot_index,
            "max_concurrency": self.max_concurrency,
        }


@dataclass(frozen=True)
class HiddenItem:
    """Metadata for an item that is never shown.

    Attributes:
        reason: Why the item is hidden:
            - "unresolved": No finite instant could be resolved.
            - "empty_window": Its window had non-positive duration.
            - "capacity": No free slot when it arrived.
        max_concurrency: Always 1 for hidden items.
    """

    reason: HiddenReason = "unresolved"
    max_concurrency: int = 1

    @property
    def visible(self) -> bool:
        return False

    @property
    def start_ms(self) -> None:
        return None

    @property
    def end_ms(self) -> None:
        return None

    @property
    def slot_index(self) -> int:
        return -1

    def covers(self, time_ms: float) -> bool:
        return False

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "visible": False,
            "reason": self.reason,
            "start_ms": None,
            "end_ms": None,
            "slot_index": -1,
            "max_concurrency": self.max_concurrency,
        }


ItemMetadata = Union[VisibleItem, HiddenItem]


@dataclass(frozen=True)
class Event:
    """A window boundary in the event sweep.

    Attributes:
        time: Event time in ms.
        type: "start" or "end".
        item_index: Index into the caller's item sequence.
    """

    time: float
    type: EventType
    item_index: int

    @property
    def sort_key(self) -> tuple[float, int, int]:
        """Ordering key: time, then "end" before "start", then item index."""
        return (self.time, 0 if self.type == "end" else 1, self.item_index)


@dataclass(frozen=True)
class Segment:
    """A stretch of time during which the composition does not change.

    Attributes:
        start_ms: Segment start (inclusive).
        end_ms: Segment end (exclusive).
        layout_size: Number of composition columns to render.
        slots: Item index per slot (length layout_size), None for an empty slot.
    """

    start_ms: float
    end_ms: float
    layout_size: int
    slots: tuple[int | None, ...]

    @property
    def duration_ms(self) -> float:
        """Return segment duration in milliseconds."""
        return self.end_ms - self.start_ms

    @property
    def signature(self) -> tuple[int, tuple[int | None, ...]]:
        """Composition identity: layout size plus slot mapping."""
        return (self.layout_size, self.slots)

    @property
    def item_indices(self) -> list[int]:
        """Return the item indices shown in this segment, in slot order."""
        return [index for index in self.slots if index is not None]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "start_ms": self.start_ms,
            "end_ms": self.end_ms,
            "layout_size": self.layout_size,
            "slots": list(self.slots),
        }


@dataclass(frozen=True)
class Schedule:
    """Complete result of one scheduling call.

    Attributes:
        metadata: One entry per input item, same order as the input.
        segments: Ordered, non-overlapping composition segments.
        min_start_ms: Earliest window start, or None if nothing was scheduled.
        max_end_ms: Latest window end, or None if nothing was scheduled.
    """

    metadata: tuple[ItemMetadata, ...] = ()
    segments: tuple[Segment, ...] = ()
    min_start_ms: float | None = None
    max_end_ms: float | None = None

    @classmethod
    def empty(cls) -> "Schedule":
        """Return the schedule for an empty item list."""
        return cls()

    @property
    def visible_count(self) -> int:
        """Return number of visible items."""
        return sum(1 for meta in self.metadata if meta.visible)

    @property
    def segment_count(self) -> int:
        """Return number of segments."""
        return len(self.segments)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "metadata": [meta.to_dict() for meta in self.metadata],
            "segments": [segment.to_dict() for segment in self.segments],
            "min_start_ms": self.min_start_ms,
            "max_end_ms": self.max_end_ms,
        }
