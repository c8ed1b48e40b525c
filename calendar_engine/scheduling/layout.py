"""
Tool: Overlap Layout
Purpose: Pack one day's events into non-overlapping display columns

Greedy interval colouring in input order: each event goes into the first
column holding no event it overlaps, otherwise a new column is opened.
Every entry reports the final column count so widths stay consistent.

The result depends on input order and is not guaranteed minimal; validity
(no overlaps inside a column) is the guarantee.
"""

from __future__ import annotations

from collections.abc import Iterable

from calendar_engine.models import Event, LayoutEntry


def assign_columns(events: Iterable[Event]) -> list[int]:
    """Column index for each event, in input order."""
    columns: list[list[Event]] = []
    assignment: list[int] = []

    for event in events:
        for index, column in enumerate(columns):
            # Checking every member keeps columns valid for unsorted input too
            if not any(placed.overlaps(event) for placed in column):
                column.append(event)
                assignment.append(index)
                break
        else:
            columns.append([event])
            assignment.append(len(columns) - 1)

    return assignment


def layout(events: Iterable[Event]) -> list[LayoutEntry]:
    """
    Assign display lanes to events on one day.

    Args:
        events: Events on a single day, in the order they should be placed

    Returns:
        One LayoutEntry per event, in input order
    """
    events = list(events)
    assignment = assign_columns(events)
    total = max(assignment) + 1 if assignment else 0
    return [
        LayoutEntry(event=event, column=column, total_columns=total)
        for event, column in zip(events, assignment)
    ]


def display_order(events: Iterable[Event]) -> list[Event]:
    """Order used for rendering: start, then end, then id."""
    return sorted(events, key=lambda e: (e.start_minutes, e.end_minutes, e.id))
