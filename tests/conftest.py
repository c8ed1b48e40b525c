"""Shared test fixtures for calendar engine tests.

This module provides common fixtures used across all test modules:
- A fixed clock (Monday 2026-10-19 08:00)
- In-memory and temporary SQLite stores
- An event factory and a ready-made CalendarService

Usage:
    def test_something(service, make_event):
        ...
"""

from collections.abc import Callable
from datetime import date, datetime, time
from pathlib import Path

import pytest

from calendar_engine.clock import FixedClock
from calendar_engine.config_models import CalendarConfig
from calendar_engine.models import Event
from calendar_engine.service import CalendarService
from calendar_engine.store import MemoryEventStore, SQLiteEventStore


# ─────────────────────────────────────────────────────────────────────────────
# Path Constants
# ─────────────────────────────────────────────────────────────────────────────

PROJECT_ROOT = Path(__file__).parent.parent
PACKAGE_DIR = PROJECT_ROOT / "calendar_engine"


# ─────────────────────────────────────────────────────────────────────────────
# Calendar Constants
# ─────────────────────────────────────────────────────────────────────────────

MONDAY = date(2026, 10, 19)


# ─────────────────────────────────────────────────────────────────────────────
# Clock Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def now() -> datetime:
    """Monday morning before the working window opens."""
    return datetime(2026, 10, 19, 8, 0)


@pytest.fixture
def clock(now: datetime) -> FixedClock:
    return FixedClock(now)


# ─────────────────────────────────────────────────────────────────────────────
# User Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def owner_id() -> str:
    """Standard meeting owner."""
    return "alice"


@pytest.fixture
def invitee_id() -> str:
    """Standard invitee."""
    return "bob"


# ─────────────────────────────────────────────────────────────────────────────
# Event Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def make_event(owner_id: str) -> Callable[..., Event]:
    """Factory for creator records.

    Usage:
        make_event("e1", "09:00", "10:00", day=TUESDAY)
    """
    created = datetime(2026, 10, 1, 12, 0)

    def _make(event_id: str, start: str, end: str, day: date = MONDAY, **kwargs) -> Event:
        sh, sm = (int(x) for x in start.split(":"))
        eh, em = (int(x) for x in end.split(":"))
        kwargs.setdefault("owner_id", owner_id)
        kwargs.setdefault("title", f"Meeting {event_id}")
        kwargs.setdefault("created_at", created)
        kwargs.setdefault("updated_at", created)
        return Event(id=event_id, date=day, start=time(sh, sm), end=time(eh, em), **kwargs)

    return _make


# ─────────────────────────────────────────────────────────────────────────────
# Store / Service Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def memory_store() -> MemoryEventStore:
    return MemoryEventStore()


@pytest.fixture
def sqlite_store(tmp_path: Path) -> SQLiteEventStore:
    """SQLite store backed by a temporary database file."""
    return SQLiteEventStore(tmp_path / "calendar.db")


@pytest.fixture
def config() -> CalendarConfig:
    return CalendarConfig()


@pytest.fixture
def service(memory_store: MemoryEventStore, clock: FixedClock, config: CalendarConfig) -> CalendarService:
    """CalendarService with sequential ids (evt-1, evt-2, ...)."""
    counter = iter(range(1, 10_000))
    return CalendarService(
        memory_store,
        clock=clock,
        config=config,
        id_factory=lambda: f"evt-{next(counter)}",
    )
