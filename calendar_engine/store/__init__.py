"""Event stores - persistence behind a narrow interface

Components:
    base.py: EventStore ABC, StoreError, change notifications
    memory.py: Dict-backed store for tests and embedding
    sqlite.py: SQLite-backed store used by the CLI
"""

from calendar_engine.store.base import EventStore, StoreChange, StoreError
from calendar_engine.store.memory import MemoryEventStore
from calendar_engine.store.sqlite import SQLiteEventStore

__all__ = [
    "EventStore",
    "MemoryEventStore",
    "SQLiteEventStore",
    "StoreChange",
    "StoreError",
]
