"""Tests for imageschedule.events and imageschedule.slots."""

import math

import pytest

from imageschedule.errors import SlotAssignmentError
from imageschedule.events import build_events
from imageschedule.schema import Event
from imageschedule.slots import bind_slots, filter_events, measure_concurrency, slot_table_size
from imageschedule.windows import VisibilityWindow, compute_windows, order_entries


def make_windows(*spans: tuple[float, float]) -> list[VisibilityWindow]:
    """Helper to create windows numbered by position."""
    return [
        VisibilityWindow(item_index=index, start_ms=start, end_ms=end)
        for index, (start, end) in enumerate(spans)
    ]


class TestBuildEvents:
    """Tests for start/end event generation."""

    def test_two_events_per_window(self):
        stream = build_events(make_windows((0, 1_000), (500, 1_500)))
        assert len(stream.events) == 4
        assert stream.rejected == ()

    def test_end_sorts_before_start_at_same_time(self):
        """Test that a slot freed at T can be taken at T."""
        stream = build_events(make_windows((0, 1_000), (1_000, 2_000)))
        assert [(e.time, e.type, e.item_index) for e in stream.events] == [
            (0, "start", 0),
            (1_000, "end", 0),
            (1_000, "start", 1),
            (2_000, "end", 1),
        ]

    def test_ties_by_item_index(self):
        stream = build_events(make_windows((0, 1_000), (0, 1_000)))
        starts = [e.item_index for e in stream.events if e.type == "start"]
        assert starts == [0, 1]

    def test_empty_and_non_finite_windows_rejected(self):
        stream = build_events(make_windows((0, 1_000), (500, 500), (600, 400), (0, math.inf)))
        assert stream.rejected == (1, 2, 3)
        assert {e.item_index for e in stream.events} == {0}

    def test_sort_key(self):
        assert Event(time=5, type="end", item_index=9).sort_key < Event(time=5, type="start", item_index=0).sort_key


class TestMeasureConcurrency:
    """Tests for the concurrency-measuring pass."""

    def test_non_overlapping_items_share_slot_zero(self):
        stream = build_events(make_windows((0, 1_000), (1_000, 2_000)))
        profile = measure_concurrency(stream.events, max_slots=1)
        assert profile.dropped == ()
        assert profile.slot_of == {0: 0, 1: 0}
        assert profile.max_concurrency == {0: 1, 1: 1}

    def test_overlap_records_peak(self):
        stream = build_events(make_windows((0, 10_000), (1_000, 2_000), (3_000, 4_000)))
        profile = measure_concurrency(stream.events, max_slots=4)
        assert profile.max_concurrency == {0: 2, 1: 2, 2: 2}
        assert profile.slot_of == {0: 0, 1: 1, 2: 1}

    def test_excess_items_dropped(self):
        """Test that an item arriving when every slot is taken is demoted."""
        stream = build_events(make_windows((0, 10_000), (1_000, 10_000), (2_000, 10_000)))
        profile = measure_concurrency(stream.events, max_slots=2)
        assert profile.dropped == (2,)
        assert 2 not in profile.slot_of
        assert 2 not in profile.max_concurrency
        assert profile.max_concurrency == {0: 2, 1: 2}

    def test_dropped_item_does_not_raise_peak(self):
        stream = build_events(make_windows((0, 10_000), (1_000, 10_000)))
        profile = measure_concurrency(stream.events, max_slots=1)
        assert profile.dropped == (1,)
        assert profile.max_concurrency == {0: 1}

    def test_first_fit_reuses_lowest_slot(self):
        stream = build_events(make_windows((0, 5_000), (1_000, 2_000), (3_000, 6_000)))
        profile = measure_concurrency(stream.events, max_slots=3)
        assert profile.slot_of == {0: 0, 1: 1, 2: 1}

    def test_empty_stream(self):
        profile = measure_concurrency([], max_slots=4)
        assert profile.slot_of == {}
        assert profile.dropped == ()

    def test_huge_max_slots(self):
        stream = build_events(make_windows((0, 10_000), (1_000, 2_000)))
        profile = measure_concurrency(stream.events, max_slots=10**12)
        assert profile.slot_of == {0: 0, 1: 1}
        assert bind_slots(stream.events, max_slots=10**12) == profile.slot_of


class TestSlotTableSize:
    """Tests for slot table sizing."""

    def test_capped_by_started_items(self):
        stream = build_events(make_windows((0, 1_000), (500, 1_500)))
        assert slot_table_size(stream.events, max_slots=10**12) == 2

    def test_capped_by_max_slots(self):
        stream = build_events(make_windows((0, 1_000), (500, 1_500), (600, 1_600)))
        assert slot_table_size(stream.events, max_slots=2) == 2

    def test_empty_stream_keeps_one_slot(self):
        assert slot_table_size([], max_slots=4) == 1


class TestBindSlots:
    """Tests for the binding pass."""

    def test_binding_matches_first_pass(self, burst_times):
        windows = compute_windows(order_entries(burst_times), min_visible_ms=3_000, hold_ms=45_000).windows
        stream = build_events(windows)
        profile = measure_concurrency(stream.events, max_slots=4)
        binding = bind_slots(filter_events(stream.events, profile.dropped), max_slots=4)
        assert profile.dropped
        assert binding == profile.slot_of

    def test_infeasible_stream_raises(self):
        stream = build_events(make_windows((0, 10_000), (1_000, 10_000)))
        with pytest.raises(SlotAssignmentError) as exc_info:
            bind_slots(stream.events, max_slots=1)
        assert exc_info.value.code == "SLOT_BINDING_FAILED"
        assert exc_info.value.details["item_index"] == 1

    def test_filter_events_preserves_order(self):
        stream = build_events(make_windows((0, 3_000), (1_000, 2_000), (1_500, 2_500)))
        filtered = filter_events(stream.events, [1])
        assert [e.item_index for e in filtered] == [0, 2, 2, 0]
