"""
Tool: Recurrence Expander
Purpose: Record recurrence metadata and its effect on invitations

Recurrence is metadata only. Nothing here materializes instances of a
weekly or monthly series, and conflict detection only ever sees stored
events. The one behavioural rule is that a daily event gets no invitee
copies.
"""

from __future__ import annotations

from datetime import date
from typing import Any

from calendar_engine.models import Event, Recurrence


class RecurrenceExpander:
    """Policy object for recurrence metadata."""

    # Recurrences whose events never spawn per-invitee copies
    SUPPRESSED = frozenset({Recurrence.DAILY})

    def invitations_allowed(self, recurrence: Recurrence | str) -> bool:
        return Recurrence(recurrence) not in self.SUPPRESSED

    def describe(self, event: Event) -> dict[str, Any]:
        recurrence = event.recurrence
        return {
            "event_id": event.id,
            "recurrence": recurrence.value,
            "is_recurring": recurrence != Recurrence.NONE,
            "invitations_allowed": self.invitations_allowed(recurrence),
            "materialized": False,
        }

    def occurrences(self, event: Event, start: date, end: date) -> list[Event]:
        """
        Occurrences of ``event`` between ``start`` and ``end`` (inclusive).

        Only the stored event itself is ever returned.
        """
        if start <= event.date <= end:
            return [event]
        return []
