"""In-memory EventStore. Process-local and lost on exit."""

from __future__ import annotations

import threading
from datetime import date

from calendar_engine.models import Event
from calendar_engine.store.base import EventStore, participates


def _sort_key(event: Event) -> tuple:
    return (event.date, event.start_minutes, event.id)


class MemoryEventStore(EventStore):
    def __init__(self, events: list[Event] | None = None):
        super().__init__()
        self._events: dict[str, Event] = {}
        self._lock = threading.RLock()
        for event in events or []:
            self._events[event.id] = event

    def query(self, participant_id: str, start_date: date, end_date: date) -> list[Event]:
        with self._lock:
            held = {e.parent_id for e in self._events.values() if e.invitee_id == participant_id}
            matches = [
                event
                for event in self._events.values()
                if start_date <= event.date <= end_date and participates(event, participant_id, held)
            ]
        return sorted(matches, key=_sort_key)

    def get(self, event_id: str) -> Event | None:
        with self._lock:
            return self._events.get(event_id)

    def copies_of(self, parent_id: str) -> list[Event]:
        with self._lock:
            copies = [event for event in self._events.values() if event.parent_id == parent_id]
        return sorted(copies, key=lambda e: (e.invitee_id or "", e.id))

    def all(self) -> list[Event]:
        with self._lock:
            return sorted(self._events.values(), key=_sort_key)

    def _write(self, event: Event) -> None:
        with self._lock:
            self._events[event.id] = event

    def _delete(self, event_id: str) -> bool:
        with self._lock:
            return self._events.pop(event_id, None) is not None
