"""Memoization of computed schedules.

Callers often recompute the same schedule many times, for example once per
rendered frame or for every position of a live parameter slider. The cache
key is a content fingerprint of the resolved instants plus the config, so
any change to the items' times or to the config misses, and identical
inputs always hit. Entries are evicted least-recently-used first.

Example:
    >>> from imageschedule.cache import ScheduleCache
    >>> cache = ScheduleCache(max_entries=8)
    >>> first = cache.get_or_compute([0, 8_000])
    >>> cache.get_or_compute([0, 8_000]) is first
    True
"""

import logging
import threading
from collections import OrderedDict
from collections.abc import Hashable, Sequence
from typing import Any

from .config import ScheduleConfig
from .schema import Schedule
from .scheduler import ItemResolver, compute_schedule_from_times
from .utils import resolve_item_time, to_epoch_ms


logger = logging.getLogger(__name__)


DEFAULT_MAX_ENTRIES = 32


class ScheduleCache:
    """Thread-safe LRU cache of schedules keyed by content fingerprint.

    Attributes:
        max_entries: Maximum number of schedules kept.
    """

    def __init__(self, max_entries: int = DEFAULT_MAX_ENTRIES) -> None:
        """Initialize the cache.

        Args:
            max_entries: Maximum number of schedules kept (>= 1).

        Raises:
            ValueError: If max_entries is less than 1.
        """
        if max_entries < 1:
            raise ValueError(f"max_entries must be >= 1, got {max_entries}")
        self.max_entries = max_entries
        self._entries: OrderedDict[Hashable, Schedule] = OrderedDict()
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    @staticmethod
    def fingerprint(times: Sequence[float | None], config: ScheduleConfig) -> tuple:
        """Build the cache key for resolved instants and a config."""
        return (tuple(times), config.cache_key())

    def get_or_compute(
        self,
        items: Sequence[Any] | None,
        config: ScheduleConfig | None = None,
        resolver: ItemResolver | None = None,
    ) -> Schedule:
        """Return the cached schedule for items and config, computing on miss.

        Args:
            items: Caller items in their original order.
            config: Scheduling parameters. If None, uses default ScheduleConfig().
            resolver: Item-to-instant mapping. If None, uses resolve_item_time().

        Returns:
            The Schedule for these inputs.
        """
        if not items:
            return Schedule.empty()
        if config is None:
            config = ScheduleConfig()
        if resolver is None:
            resolver = resolve_item_time

        times = [to_epoch_ms(resolver(item)) for item in items]
        key = self.fingerprint(times, config)

        with self._lock:
            cached = self._entries.get(key)
            if cached is not None:
                self._entries.move_to_end(key)
                self._hits += 1
                return cached
            self._misses += 1

        # Compute outside the lock; a concurrent miss on the same key just
        # produces an identical schedule.
        schedule = compute_schedule_from_times(times, config)

        with self._lock:
            self._entries[key] = schedule
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)
                logger.debug("Evicted least recently used schedule")

        return schedule

    def clear(self) -> None:
        """Drop every cached schedule and reset counters."""
        with self._lock:
            self._entries.clear()
            self._hits = 0
            self._misses = 0

    def stats(self) -> dict[str, int]:
        """Return hit/miss counters and current size."""
        with self._lock:
            return {
                "hits": self._hits,
                "misses": self._misses,
                "size": len(self._entries),
                "max_entries": self.max_entries,
            }

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
