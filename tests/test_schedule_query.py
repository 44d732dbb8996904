"""Tests for imageschedule.query (probe-time lookups)."""

import math

import pytest

from imageschedule import Schedule, ScheduleConfig, compute_schedule
from imageschedule.query import VisibleEntry, segment_at, surrounding_items, visible_at


@pytest.fixture
def pair_schedule(pair_config) -> Schedule:
    """Two photos two seconds apart, each shown for six seconds."""
    return compute_schedule([0, 2_000], pair_config)


class TestSegmentAt:
    """Tests for segment_at()."""

    def test_inside_first_segment(self, pair_schedule):
        segment = segment_at(pair_schedule, 1_000)
        assert segment.slots == (0, None)

    def test_start_is_inclusive(self, pair_schedule):
        assert segment_at(pair_schedule, 2_000).slots == (0, 1)

    def test_end_is_exclusive(self, pair_schedule):
        assert segment_at(pair_schedule, 7_999).slots == (None, 1)
        assert segment_at(pair_schedule, 8_000) is None

    def test_before_first_segment(self, pair_schedule):
        assert segment_at(pair_schedule, -1) is None

    def test_gap_between_segments(self):
        config = ScheduleConfig(hold_ms=0, composition_interval_ms=math.inf)
        schedule = compute_schedule([0, 100_000], config)
        assert segment_at(schedule, 50_000) is None
        assert segment_at(schedule, 100_000).slots == (1,)

    def test_non_finite_probe(self, pair_schedule):
        assert segment_at(pair_schedule, math.nan) is None

    def test_empty_schedule(self):
        assert segment_at(Schedule.empty(), 0) is None


class TestVisibleAt:
    """Tests for visible_at()."""

    def test_both_visible_ordered_by_slot(self, pair_schedule):
        entries = visible_at(pair_schedule, 3_000)
        assert entries == [
            VisibleEntry(item_index=0, slot_index=0, start_ms=0, end_ms=6_000, max_concurrency=2),
            VisibleEntry(item_index=1, slot_index=1, start_ms=2_000, end_ms=8_000, max_concurrency=2),
        ]

    def test_after_first_ends(self, pair_schedule):
        assert [e.item_index for e in visible_at(pair_schedule, 7_000)] == [1]

    def test_force_includes_ended_items(self, pair_schedule):
        assert [e.item_index for e in visible_at(pair_schedule, 7_000, force=True)] == [0, 1]

    def test_force_excludes_future_items(self, pair_schedule):
        assert [e.item_index for e in visible_at(pair_schedule, 1_000, force=True)] == [0]

    def test_nothing_visible(self, pair_schedule):
        assert visible_at(pair_schedule, 50_000) == []
        assert visible_at(pair_schedule, math.inf) == []

    def test_to_dict(self, pair_schedule):
        entry = visible_at(pair_schedule, 3_000)[1]
        assert entry.to_dict() == {
            "item_index": 1,
            "slot_index": 1,
            "start_ms": 2_000,
            "end_ms": 8_000,
            "max_concurrency": 2,
        }


class TestSurroundingItems:
    """Tests for surrounding_items()."""

    def test_between_items(self):
        assert surrounding_items([0, 5_000, 10_000], 7_000) == (1, 2)

    def test_exact_match_is_previous(self):
        assert surrounding_items([0, 5_000, 10_000], 5_000) == (1, 2)

    def test_ties_resolve_to_lower_index(self):
        assert surrounding_items([5_000, 0, 5_000, 9_000, 9_000], 6_000) == (0, 3)

    def test_unordered_input(self):
        assert surrounding_items([10_000, 0, 5_000], 1_000) == (1, 2)

    def test_before_and_after_everything(self):
        assert surrounding_items([1_000, 2_000], 0) == (None, 0)
        assert surrounding_items([1_000, 2_000], 3_000) == (1, None)

    def test_skips_missing_times(self):
        assert surrounding_items([None, 1_000, math.nan, 3_000], 2_000) == (1, 3)

    def test_empty_or_bad_probe(self):
        assert surrounding_items([], 0) == (None, None)
        assert surrounding_items([0], math.nan) == (None, None)
