"""Visibility window calculation.

Each time-sorted item is shown for at least ``min_visible_ms``. When the next
item arrives before that minimum ends, the two windows overlap, and that
overlap is what later forms multi-image compositions. When the next item
arrives later, the current window is extended by ``hold_ms`` but never past
the next arrival. The last item always receives the full hold.

Example:
    >>> from imageschedule.windows import compute_windows
    >>> result = compute_windows([(0, 0.0), (1, 8_000.0)], min_visible_ms=60_000, hold_ms=10_000)
    >>> result.windows[0]
    VisibilityWindow(item_index=0, start_ms=0.0, end_ms=60000.0)
"""

from collections.abc import Sequence
from dataclasses import dataclass

from .utils import is_finite_number, snap_to_grid


@dataclass(frozen=True)
class VisibilityWindow:
    """A computed [start_ms, end_ms) window for one item.

    Attributes:
        item_index: Index into the caller's item sequence.
        start_ms: Window start (inclusive).
        end_ms: Window end (exclusive).
    """

    item_index: int
    start_ms: float
    end_ms: float

    @property
    def duration_ms(self) -> float:
        """Return window duration in milliseconds."""
        return self.end_ms - self.start_ms


@dataclass(frozen=True)
class WindowResult:
    """Windows for all schedulable items plus overall bounds.

    Attributes:
        windows: Windows in time order.
        min_start_ms: Earliest start, or None if there are no windows.
        max_end_ms: Latest end, or None if there are no windows.
    """

    windows: tuple[VisibilityWindow, ...]
    min_start_ms: float | None
    max_end_ms: float | None


def order_entries(
    times: Sequence[float | None],
    grid_ms: int | None = None,
) -> list[tuple[int, float]]:
    """Build the time-sorted (item_index, start_ms) list.

    Non-finite times are dropped. When grid_ms is set, each time is first
    snapped to the nearest grid multiple. Ties keep ascending item index.

    Args:
        times: Resolved instant per item, or None.
        grid_ms: Optional snap grid step in ms.

    Returns:
        Sorted list of (item_index, start_ms).
    """
    entries = [
        (index, snap_to_grid(value, grid_ms))
        for index, value in enumerate(times)
        if is_finite_number(value)
    ]
    entries.sort(key=lambda entry: (entry[1], entry[0]))
    return entries


def compute_windows(
    entries: Sequence[tuple[int, float]],
    min_visible_ms: float,
    hold_ms: float,
) -> WindowResult:
    """Derive a visibility window for every time-sorted entry.

    Args:
        entries: (item_index, start_ms) pairs sorted by start then index.
        min_visible_ms: Minimum display duration (already clamped).
        hold_ms: Hold extension (already clamped, >= 0).

    Returns:
        WindowResult with one window per entry.
    """
    windows: list[VisibilityWindow] = []
    min_start: float | None = None
    max_end: float | None = None

    for position, (item_index, start) in enumerate(entries):
        display_end = start + min_visible_ms

        if position + 1 < len(entries):
            next_start = entries[position + 1][1]
            if next_start < display_end:
                # Early arrival: keep the full minimum and overlap
                end = display_end
            else:
                end = min(display_end + hold_ms, next_start)
        else:
            end = display_end + hold_ms

        windows.append(VisibilityWindow(item_index=item_index, start_ms=start, end_ms=end))

        if min_start is None or start < min_start:
            min_start = start
        if max_end is None or end > max_end:
            max_end = end

    return WindowResult(windows=tuple(windows), min_start_ms=min_start, max_end_ms=max_end)
