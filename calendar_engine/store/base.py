"""
Tool: Event Store Base
Purpose: Abstract interface for event persistence

Defines the operations the engine consumes from storage, plus change
notification. Subscribers are told after every successful write, so a UI
can refresh without the engine knowing how it renders.

Usage:
    from calendar_engine.store import MemoryEventStore

    store = MemoryEventStore()
    unsubscribe = store.subscribe(lambda change: print(change.kind, change.event_id))
    store.put(event)
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from collections.abc import Callable, Collection
from dataclasses import dataclass
from datetime import date

from calendar_engine.logging_config import get_logger
from calendar_engine.models import Event, Recurrence

logger = get_logger(__name__)


class StoreError(Exception):
    """Opaque storage failure. The engine never retries."""


@dataclass(frozen=True)
class StoreChange:
    kind: str  # "put" or "remove"
    event_id: str


Listener = Callable[[StoreChange], None]


def participates(event: Event, participant_id: str, held_parents: Collection[str] = ()) -> bool:
    """
    Whether ``participant_id`` should see ``event`` in their calendar.

    ``held_parents`` are the ids of creator records the participant already
    holds a copy of. A copy wins over the daily roster path, so an event
    switched to daily after invitations went out is not seen twice.
    """
    if event.is_invite:
        return event.invitee_id == participant_id
    if event.owner_id == participant_id:
        return True
    # Daily events have no copies, so invitees see the creator record itself
    return (
        event.recurrence == Recurrence.DAILY
        and participant_id in event.invitee_ids
        and event.id not in held_parents
    )


class EventStore(ABC):
    """
    Abstract event store.

    Subclasses implement the data operations; listener bookkeeping is shared.
    """

    def __init__(self) -> None:
        self._listeners: list[Listener] = []
        self._listeners_lock = threading.Lock()

    # =========================================================================
    # Data operations
    # =========================================================================

    @abstractmethod
    def query(self, participant_id: str, start_date: date, end_date: date) -> list[Event]:
        """
        Events dated in [start_date, end_date] that ``participant_id`` takes part in.

        Returns:
            Events ordered by (date, start, id)
        """

    @abstractmethod
    def get(self, event_id: str) -> Event | None:
        """Single event by id, or None."""

    @abstractmethod
    def copies_of(self, parent_id: str) -> list[Event]:
        """Per-invitee copies derived from the creator record ``parent_id``."""

    @abstractmethod
    def _write(self, event: Event) -> None:
        """Insert or replace ``event`` keyed by id."""

    @abstractmethod
    def _delete(self, event_id: str) -> bool:
        """Delete by id; False if it did not exist."""

    def put(self, event: Event) -> None:
        self._write(event)
        self._notify(StoreChange("put", event.id))

    def put_many(self, events: list[Event]) -> None:
        for event in events:
            self._write(event)
        for event in events:
            self._notify(StoreChange("put", event.id))

    def remove(self, event_id: str) -> None:
        """
        Remove a single record.

        Raises:
            StoreError: the event does not exist or the backend failed
        """
        if not self._delete(event_id):
            raise StoreError(f"Event not found: {event_id}")
        self._notify(StoreChange("remove", event_id))

    # =========================================================================
    # Change notification
    # =========================================================================

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener``; returns a function that unregisters it."""
        with self._listeners_lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._listeners_lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, change: StoreChange) -> None:
        with self._listeners_lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(change)
            except Exception as e:
                # A broken subscriber must not undo a committed write
                logger.warning("store_listener_failed", kind=change.kind, event_id=change.event_id, error=str(e))
