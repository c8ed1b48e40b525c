"""Tests for calendar_engine/scheduling/layout.py

Column packing for the day view. Key guarantees:
- No two events in the same column overlap
- total_columns is the same for every entry of one call
- Placement is greedy in input order (not necessarily minimal)
"""

import pytest

from calendar_engine.scheduling.layout import assign_columns, display_order, layout


def columns_by_id(entries):
    return {entry.event.id: entry.column for entry in entries}


class TestLayout:
    """Greedy interval colouring."""

    def test_empty_day(self):
        assert layout([]) == []

    def test_single_event(self, make_event):
        entries = layout([make_event("a", "09:00", "10:00")])

        assert entries[0].column == 0
        assert entries[0].total_columns == 1

    def test_chain_of_overlaps(self, make_event):
        """A-B and B-C overlap, A-C do not."""
        events = [
            make_event("A", "09:00", "10:00"),
            make_event("B", "09:30", "10:30"),
            make_event("C", "10:15", "11:00"),
        ]

        entries = layout(events)

        assert columns_by_id(entries) == {"A": 0, "B": 1, "C": 0}
        assert {entry.total_columns for entry in entries} == {2}

    def test_back_to_back_share_a_column(self, make_event):
        events = [
            make_event("a", "09:00", "10:00"),
            make_event("b", "10:00", "11:00"),
            make_event("c", "11:00", "12:00"),
        ]

        entries = layout(events)

        assert [entry.column for entry in entries] == [0, 0, 0]
        assert entries[0].total_columns == 1

    def test_three_way_overlap_opens_three_columns(self, make_event):
        events = [
            make_event("a", "09:00", "12:00"),
            make_event("b", "09:30", "11:00"),
            make_event("c", "10:00", "10:30"),
        ]

        entries = layout(events)

        assert [entry.column for entry in entries] == [0, 1, 2]
        assert all(entry.total_columns == 3 for entry in entries)

    def test_total_columns_updated_for_early_entries(self, make_event):
        """The first event is placed when only one column exists."""
        events = [
            make_event("a", "09:00", "10:00"),
            make_event("b", "09:00", "10:00"),
        ]

        entries = layout(events)

        assert entries[0].total_columns == 2

    def test_unsorted_input_stays_valid(self, make_event):
        """A late event must not land beside an earlier long one in the same column."""
        events = [
            make_event("long", "09:00", "12:00"),
            make_event("late", "13:00", "14:00"),
            make_event("mid", "10:00", "11:00"),
        ]

        entries = layout(events)

        assert columns_by_id(entries) == {"long": 0, "late": 0, "mid": 1}

    def test_result_preserves_input_order(self, make_event):
        events = [make_event("z", "11:00", "12:00"), make_event("a", "09:00", "10:00")]

        entries = layout(events)

        assert [entry.event.id for entry in entries] == ["z", "a"]


class TestLayoutInvariants:
    """Properties that hold for any input."""

    @pytest.mark.parametrize(
        "intervals",
        [
            [("09:00", "10:00"), ("09:30", "11:00"), ("10:00", "10:30"), ("10:45", "12:00")],
            [("13:00", "14:00"), ("09:00", "17:00"), ("09:00", "09:30"), ("16:30", "17:00")],
            [("09:00", "09:30")] * 4,
            [("11:00", "12:00"), ("09:00", "10:00"), ("09:30", "11:30"), ("10:00", "11:00")],
        ],
    )
    def test_no_overlap_within_a_column(self, make_event, intervals):
        events = [make_event(f"e{i}", start, end) for i, (start, end) in enumerate(intervals)]

        entries = layout(events)

        for first in entries:
            for second in entries:
                if first is not second and first.column == second.column:
                    assert not first.event.overlaps(second.event)
        assert len({entry.total_columns for entry in entries}) == 1
        assert max(entry.column for entry in entries) + 1 == entries[0].total_columns


class TestHelpers:
    def test_assign_columns_matches_layout(self, make_event):
        events = [make_event("a", "09:00", "10:00"), make_event("b", "09:30", "10:30")]

        assert assign_columns(events) == [0, 1]

    def test_display_order_sorts_by_start_then_end(self, make_event):
        events = [
            make_event("c", "10:00", "11:00"),
            make_event("b", "09:00", "12:00"),
            make_event("a", "09:00", "10:00"),
        ]

        assert [e.id for e in display_order(events)] == ["a", "b", "c"]

    def test_entry_to_dict(self, make_event):
        entry = layout([make_event("a", "09:00", "10:00")])[0]

        assert entry.to_dict() == {
            "event_id": "a",
            "title": "Meeting a",
            "start": "09:00",
            "end": "10:00",
            "column": 0,
            "total_columns": 1,
        }
