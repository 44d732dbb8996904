"""Minimum dwell time between composition changes.

Once a composition (layout size plus slot mapping) is shown, it must stay
on screen for at least ``composition_interval_ms`` before another one may
replace it. Requests that arrive too early are handled in one of three ways:

    - cooldown already elapsed: switch at the requested time.
    - request ends inside the cooldown: absorbed, never shown.
    - request straddles the cooldown end: the current composition is held
      until the cooldown ends, then the request is shown truncated.

Example:
    >>> from imageschedule.composition import enforce_composition_interval
    >>> from imageschedule.schema import Segment
    >>> segments = [Segment(0.0, 1_000.0, 1, (0,)), Segment(1_000.0, 5_000.0, 2, (0, 1))]
    >>> [(s.start_ms, s.end_ms, s.slots) for s in enforce_composition_interval(segments, 2_000)]
    [(0.0, 2000.0, (0,)), (2000.0, 5000.0, (0, 1))]
"""

import math
from collections.abc import Sequence
from dataclasses import replace

from .schema import Segment


def compress_segments(segments: Sequence[Segment]) -> list[Segment]:
    """Drop non-finite segments and merge consecutive equal compositions.

    Args:
        segments: Segments in time order.

    Returns:
        New list where no two neighbours share a signature.
    """
    compressed: list[Segment] = []
    for segment in segments:
        if not (math.isfinite(segment.start_ms) and math.isfinite(segment.end_ms)):
            continue
        if compressed and compressed[-1].signature == segment.signature:
            previous = compressed[-1]
            compressed[-1] = replace(previous, end_ms=max(previous.end_ms, segment.end_ms))
            continue
        compressed.append(segment)
    return compressed


def enforce_composition_interval(
    segments: Sequence[Segment],
    composition_interval_ms: float,
) -> list[Segment]:
    """Rate-limit composition changes across a segment list.

    Args:
        segments: Segments in time order, as built from the slot sweep.
        composition_interval_ms: Minimum time between two visible
            composition changes. Non-positive or infinite values disable
            enforcement.

    Returns:
        New list of segments in which consecutive distinct compositions
        start at least composition_interval_ms apart.
    """
    if not segments:
        return []
    if not math.isfinite(composition_interval_ms) or composition_interval_ms <= 0:
        return list(segments)

    compressed = compress_segments(segments)
    if not compressed:
        return []

    constrained: list[Segment] = []
    current = compressed[0]
    last_change = current.start_ms

    for request in compressed[1:]:
        if request.signature == current.signature:
            current = replace(current, end_ms=max(current.end_ms, request.end_ms))
            continue

        allowed_start = last_change + composition_interval_ms

        if request.start_ms >= allowed_start:
            # Cooldown elapsed
            current = replace(current, end_ms=request.start_ms)
            if current.end_ms > current.start_ms:
                constrained.append(current)
            current = request
            last_change = request.start_ms
            continue

        if request.end_ms <= allowed_start:
            # Entirely inside the cooldown
            current = replace(current, end_ms=max(current.end_ms, request.end_ms))
            continue

        switch_time = max(allowed_start, request.start_ms)
        current = replace(current, end_ms=max(current.end_ms, switch_time))
        if current.end_ms > current.start_ms:
            constrained.append(current)

        # A zero-length remainder is absorbed: it becomes current but is
        # only emitted if a later merge gives it positive duration.
        current = replace(request, start_ms=switch_time)
        last_change = switch_time

    if current.end_ms > current.start_ms:
        constrained.append(current)

    return constrained
