"""Timestamp resolution for items with missing capture times.

Photos arrive in index order, some with a genuine capture time and some
without. This module fills the gaps so that every item has a definite
instant, without ever moving an item that carries a genuine capture time.

Resolution order:
    1. Items with a captured instant (authoritative) or a fallback hint
       (e.g. file modification time) are "known".
    2. Items before the first known value are extrapolated backwards.
    3. Items between two known values are spread evenly across the gap.
    4. Items after the last known value are extrapolated forwards.
    5. Non-captured values are pushed forward to keep strict order.

Example:
    >>> from imageschedule.timestamps import resolve_timestamps
    >>> resolved = resolve_timestamps([10_000, None, None, 40_000])
    >>> [r.time_ms for r in resolved]
    [10000, 20000, 30000, 40000]
"""

import math
import time
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal

from .constants import TIMESTAMP_INTERVAL_MS
from .errors import TimestampResolutionError
from .utils import is_finite_number


TimestampSource = Literal["captured", "fallback", "interpolated"]


@dataclass(frozen=True)
class ResolvedTimestamp:
    """A resolved instant for one item.

    Attributes:
        time_ms: Resolved instant in ms since epoch.
        source: Where the value came from:
            - "captured": Genuine capture time, never altered.
            - "fallback": Caller-supplied hint such as file modification time.
            - "interpolated": Synthesized from neighbouring values.
    """

    time_ms: float
    source: TimestampSource

    @property
    def authoritative(self) -> bool:
        """Return True if the value is a genuine capture time."""
        return self.source == "captured"


def resolve_timestamps(
    captured: Sequence[float | None],
    fallbacks: Sequence[float | None] | None = None,
    interval_ms: float = TIMESTAMP_INTERVAL_MS,
    base_ms: float | None = None,
) -> list[ResolvedTimestamp]:
    """Assign a definite instant to every item.

    Args:
        captured: Genuine capture time per item in ms, or None when missing.
        fallbacks: Optional non-authoritative hint per item (same length
            as captured), used only where the capture time is missing.
        interval_ms: Minimum spacing between synthesized values.
        base_ms: Start of the synthesized sequence when nothing is known.
            Defaults to the current wall clock.

    Returns:
        One ResolvedTimestamp per input item, in input order.

    Raises:
        TimestampResolutionError: If fallbacks has a different length than
            captured, or interval_ms is not a positive finite number.
    """
    count = len(captured)
    if fallbacks is not None and len(fallbacks) != count:
        raise TimestampResolutionError(
            message=f"fallbacks has {len(fallbacks)} entries, expected {count}",
            details={"captured": count, "fallbacks": len(fallbacks)},
        )
    if not is_finite_number(interval_ms) or interval_ms <= 0:
        raise TimestampResolutionError(
            message=f"interval_ms must be a positive number, got {interval_ms!r}",
            code="INVALID_INTERVAL",
            details={"interval_ms": repr(interval_ms)},
        )

    if count == 0:
        return []

    hints: list[float | None] = [
        value if is_finite_number(value) else None
        for value in (fallbacks or [None] * count)
    ]

    times: list[float | None] = []
    sources: list[TimestampSource] = []
    for index, value in enumerate(captured):
        if is_finite_number(value):
            times.append(value)
            sources.append("captured")
        elif hints[index] is not None:
            times.append(hints[index])
            sources.append("fallback")
        else:
            times.append(None)
            sources.append("interpolated")

    known = [index for index, value in enumerate(times) if value is not None]

    if not known:
        base = base_ms if is_finite_number(base_ms) else time.time() * 1000.0
        return [
            ResolvedTimestamp(time_ms=base + index * interval_ms, source="interpolated")
            for index in range(count)
        ]

    _fill_leading(times, known[0], interval_ms)
    for start_idx, end_idx in zip(known, known[1:]):
        _fill_gap(times, start_idx, end_idx, interval_ms)
    _fill_trailing(times, known[-1], interval_ms)

    # Strict order only for non-captured values; captured ones stay exact
    for index in range(1, count):
        if sources[index] != "captured" and times[index] <= times[index - 1]:
            times[index] = times[index - 1] + interval_ms

    return [
        ResolvedTimestamp(time_ms=value, source=source)
        for value, source in zip(times, sources)
    ]


def _fill_leading(
    times: list[float | None],
    first_known: int,
    interval_ms: float,
) -> None:
    """Walk backwards from the first known value."""
    for index in range(first_known - 1, -1, -1):
        times[index] = times[index + 1] - interval_ms


def _fill_gap(
    times: list[float | None],
    start_idx: int,
    end_idx: int,
    interval_ms: float,
) -> None:
    """Spread missing values evenly between two known values.

    Spacing never drops below interval_ms, and each value leaves room for
    the remaining items before the known end point.
    """
    gap_count = end_idx - start_idx - 1
    if gap_count <= 0:
        return

    start_time = times[start_idx]
    end_time = times[end_idx]
    available_span = max(end_time - start_time, (gap_count + 1) * interval_ms)
    step = max(interval_ms, math.floor(available_span / (gap_count + 1)))

    for offset in range(1, gap_count + 1):
        candidate = start_time + step * offset
        max_allowed = end_time - interval_ms * (gap_count - offset + 1)
        times[start_idx + offset] = min(candidate, max_allowed)


def _fill_trailing(
    times: list[float | None],
    last_known: int,
    interval_ms: float,
) -> None:
    """Walk forwards from the last known value."""
    for index in range(last_known + 1, len(times)):
        times[index] = times[index - 1] + interval_ms
