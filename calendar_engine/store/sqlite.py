"""
Tool: SQLite Event Store
Purpose: Persist calendar events in a local SQLite database

One row per record (creator records and invitee copies alike). The
invitee roster is stored as JSON. Every sqlite3 failure surfaces as
StoreError.

Usage:
    from calendar_engine.store.sqlite import SQLiteEventStore

    store = SQLiteEventStore()              # data/calendar.db
    store = SQLiteEventStore(tmp_path / "test.db")
"""

from __future__ import annotations

import json
import sqlite3
from datetime import date
from pathlib import Path

from calendar_engine import DB_PATH
from calendar_engine.logging_config import get_logger
from calendar_engine.models import Event, Recurrence
from calendar_engine.store.base import EventStore, StoreChange, StoreError

logger = get_logger(__name__)

_COLUMNS = (
    "id, owner_id, title, description, location, color, event_date, start_time, end_time, "
    "is_online, meeting_link, room_id, recurrence, invitees, created_at, updated_at, "
    "invitee_id, invite_status, parent_id"
)


class SQLiteEventStore(EventStore):
    def __init__(self, db_path: Path | str | None = None):
        super().__init__()
        self.db_path = Path(db_path) if db_path else DB_PATH
        conn = self.get_connection()
        conn.close()

    def get_connection(self) -> sqlite3.Connection:
        """
        Get database connection, creating tables if needed.

        Returns:
            SQLite connection with row_factory set
        """
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(str(self.db_path))
            conn.row_factory = sqlite3.Row

            cursor = conn.cursor()
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS calendar_events (
                    id TEXT PRIMARY KEY,
                    owner_id TEXT NOT NULL,
                    title TEXT NOT NULL,
                    description TEXT,
                    location TEXT,
                    color TEXT,
                    event_date TEXT NOT NULL,
                    start_time TEXT NOT NULL,
                    end_time TEXT NOT NULL,
                    is_online INTEGER DEFAULT 0,
                    meeting_link TEXT,
                    room_id TEXT,
                    recurrence TEXT DEFAULT 'none'
                        CHECK(recurrence IN ('none', 'daily', 'weekly', 'monthly')),
                    invitees TEXT,
                    created_at DATETIME,
                    updated_at DATETIME,
                    invitee_id TEXT,
                    invite_status TEXT
                        CHECK(invite_status IS NULL OR invite_status IN ('pending', 'accepted', 'declined')),
                    parent_id TEXT
                )
            """)

            cursor.execute("CREATE INDEX IF NOT EXISTS idx_events_owner_date ON calendar_events(owner_id, event_date)")
            cursor.execute("CREATE INDEX IF NOT EXISTS idx_events_invitee ON calendar_events(invitee_id, event_date)")
            cursor.execute("CREATE INDEX IF NOT EXISTS idx_events_parent ON calendar_events(parent_id)")

            conn.commit()
            return conn
        except sqlite3.Error as e:
            raise StoreError(f"Could not open calendar database {self.db_path}: {e}") from e

    # =========================================================================
    # Row mapping
    # =========================================================================

    @staticmethod
    def _to_row(event: Event) -> tuple:
        data = event.to_dict()
        return (
            data["id"],
            data["owner_id"],
            data["title"],
            data["description"],
            data["location"],
            data["color"],
            data["date"],
            data["start"],
            data["end"],
            int(data["is_online"]),
            data["meeting_link"],
            data["room_id"],
            data["recurrence"],
            json.dumps(data["invitees"]),
            data["created_at"],
            data["updated_at"],
            data["invitee_id"],
            data["invite_status"],
            data["parent_id"],
        )

    @staticmethod
    def _from_row(row: sqlite3.Row) -> Event:
        data = dict(row)
        data["date"] = data.pop("event_date")
        data["start"] = data.pop("start_time")
        data["end"] = data.pop("end_time")
        data["invitees"] = json.loads(data["invitees"]) if data.get("invitees") else []
        return Event.from_dict(data)

    # =========================================================================
    # EventStore
    # =========================================================================

    def _fetch(self, sql: str, params: tuple) -> list[Event]:
        conn = self.get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(sql, params)
            rows = cursor.fetchall()
        except sqlite3.Error as e:
            raise StoreError(f"Query failed: {e}") from e
        finally:
            conn.close()
        return [self._from_row(row) for row in rows]

    def query(self, participant_id: str, start_date: date, end_date: date) -> list[Event]:
        # Owned creator records, the participant's own copies, and daily
        # creator records that list the participant in their roster and
        # that the participant holds no copy of
        return self._fetch(
            f"""
            SELECT {_COLUMNS} FROM calendar_events AS e
            WHERE e.event_date BETWEEN ? AND ?
              AND (
                (e.invitee_id IS NULL AND e.owner_id = ?)
                OR e.invitee_id = ?
                OR (
                  e.invitee_id IS NULL
                  AND e.recurrence = ?
                  AND EXISTS (
                    SELECT 1 FROM json_each(e.invitees) AS r
                    WHERE json_extract(r.value, '$.user_id') = ?
                  )
                  AND NOT EXISTS (
                    SELECT 1 FROM calendar_events AS c
                    WHERE c.parent_id = e.id AND c.invitee_id = ?
                  )
                )
              )
            ORDER BY e.event_date ASC, e.start_time ASC, e.id ASC
            """,
            (
                start_date.isoformat(),
                end_date.isoformat(),
                participant_id,
                participant_id,
                Recurrence.DAILY.value,
                participant_id,
                participant_id,
            ),
        )

    def get(self, event_id: str) -> Event | None:
        events = self._fetch(f"SELECT {_COLUMNS} FROM calendar_events WHERE id = ?", (event_id,))
        return events[0] if events else None

    def copies_of(self, parent_id: str) -> list[Event]:
        return self._fetch(
            f"SELECT {_COLUMNS} FROM calendar_events WHERE parent_id = ? ORDER BY invitee_id ASC, id ASC",
            (parent_id,),
        )

    def _write(self, event: Event) -> None:
        self._write_all([event])

    def _write_all(self, events: list[Event]) -> None:
        conn = self.get_connection()
        try:
            cursor = conn.cursor()
            cursor.executemany(
                f"INSERT OR REPLACE INTO calendar_events ({_COLUMNS}) "
                f"VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                [self._to_row(event) for event in events],
            )
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise StoreError(f"Write failed: {e}") from e
        finally:
            conn.close()
        logger.debug("events_written", count=len(events))

    def put_many(self, events: list[Event]) -> None:
        """Write all records in one transaction, then notify."""
        self._write_all(events)
        for event in events:
            self._notify(StoreChange("put", event.id))

    def _delete(self, event_id: str) -> bool:
        conn = self.get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM calendar_events WHERE id = ?", (event_id,))
            conn.commit()
            return cursor.rowcount > 0
        except sqlite3.Error as e:
            raise StoreError(f"Delete failed: {e}") from e
        finally:
            conn.close()
