"""
Tool: Calendar Models
Purpose: Data structures shared by the scheduling engine

Usage:
    from calendar_engine.models import Event, Invitee, InviteStatus, Placement, Recurrence

An Event is the single tagged record for a calendar entry. Its invariants
are checked at construction so the rest of the engine never has to
re-validate a stored event. A Placement is the unvalidated (date, start,
end) triple a caller wants to book; ConflictDetector turns it into a
verdict.

Per-invitee copies are Events too: they share the creator's content and
carry their own ``invitee_id``, ``invite_status`` and ``parent_id``.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime, time
from enum import Enum
from typing import Any


MINUTES_PER_DAY = 24 * 60


class InvalidEventError(ValueError):
    """Raised when an Event would violate its construction invariants."""


class Recurrence(str, Enum):
    """Recurrence metadata. No instances are ever materialized from it."""

    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class InviteStatus(str, Enum):
    """Per-invitee acceptance state."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"

    @property
    def is_terminal(self) -> bool:
        return self is not InviteStatus.PENDING


# =========================================================================
# Time helpers
# =========================================================================


def parse_time(value: str | time) -> time:
    """Parse 'HH:MM' into a minute-resolution time."""
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0)
    try:
        hours, minutes = value.strip().split(":")
        return time(int(hours), int(minutes))
    except (AttributeError, ValueError) as e:
        raise ValueError(f"Invalid time (expected HH:MM): {value!r}") from e


def parse_date(value: str | date) -> date:
    """Parse 'YYYY-MM-DD' into a date. Datetimes are truncated."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value.strip())


def to_minutes(value: time) -> int:
    """Minutes since midnight."""
    return value.hour * 60 + value.minute


def from_minutes(minutes: int) -> time:
    """Inverse of to_minutes. 24:00 is not representable and is rejected."""
    if not 0 <= minutes < MINUTES_PER_DAY:
        raise ValueError(f"Minutes out of range for a single day: {minutes}")
    return time(minutes // 60, minutes % 60)


def format_time(value: time) -> str:
    return f"{value.hour:02d}:{value.minute:02d}"


def intervals_overlap(start_a: int, end_a: int, start_b: int, end_b: int) -> bool:
    """Strict half-open overlap: touching boundaries do not count."""
    return start_a < end_b and end_a > start_b


# =========================================================================
# Records
# =========================================================================


@dataclass(frozen=True)
class Placement:
    """
    A candidate (date, start, end) a caller wants to book.

    Deliberately unvalidated: ``end <= start`` is representable so the
    conflict detector can report it as INVALID_RANGE.
    """

    date: date
    start: time
    end: time

    @property
    def start_minutes(self) -> int:
        return to_minutes(self.start)

    @property
    def end_minutes(self) -> int:
        return to_minutes(self.end)

    def overlaps(self, other: "Placement") -> bool:
        if self.date != other.date:
            return False
        return intervals_overlap(
            self.start_minutes, self.end_minutes, other.start_minutes, other.end_minutes
        )


@dataclass(frozen=True)
class Invitee:
    """Roster entry on the creator's record."""

    user_id: str
    status: InviteStatus = InviteStatus.PENDING

    def to_dict(self) -> dict[str, Any]:
        return {"user_id": self.user_id, "status": self.status.value}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Invitee":
        return cls(user_id=data["user_id"], status=InviteStatus(data.get("status", "pending")))


@dataclass(frozen=True)
class Event:
    """
    A calendar entry: either a creator's record or a per-invitee copy.

    Invariants (checked in __post_init__):
        - start < end on the same day
        - id and owner_id are non-empty
        - a creator record (no invitee_id) never carries an invite_status
        - a copy always carries invitee_id, invite_status and parent_id
    """

    id: str
    owner_id: str
    title: str
    date: date
    start: time
    end: time
    description: str = ""
    location: str | None = None
    color: str = "#3b82f6"
    is_online: bool = False
    meeting_link: str | None = None
    room_id: str | None = None
    recurrence: Recurrence = Recurrence.NONE
    invitees: tuple[Invitee, ...] = ()
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    # Per-invitee copy fields
    invitee_id: str | None = None
    invite_status: InviteStatus | None = None
    parent_id: str | None = None

    def __post_init__(self) -> None:
        if not self.id:
            raise InvalidEventError("Event id must not be empty")
        if not self.owner_id:
            raise InvalidEventError("Event owner_id must not be empty")
        if to_minutes(self.start) >= to_minutes(self.end):
            raise InvalidEventError(
                f"Event start must be before end ({format_time(self.start)} >= {format_time(self.end)})"
            )

        if self.invitee_id is None:
            if self.invite_status is not None or self.parent_id is not None:
                raise InvalidEventError("A creator record cannot carry an invite status")
        elif self.invite_status is None or self.parent_id is None:
            raise InvalidEventError("An invitee copy needs invite_status and parent_id")

        # Normalize a list roster into the immutable ordered form, keeping first occurrences
        seen: set[str] = set()
        roster = []
        for invitee in self.invitees:
            if invitee.user_id not in seen:
                seen.add(invitee.user_id)
                roster.append(invitee)
        object.__setattr__(self, "invitees", tuple(roster))

    # ---------------------------------------------------------------------
    # Derived views
    # ---------------------------------------------------------------------

    @property
    def is_invite(self) -> bool:
        return self.invitee_id is not None

    @property
    def placement(self) -> Placement:
        return Placement(date=self.date, start=self.start, end=self.end)

    @property
    def start_minutes(self) -> int:
        return to_minutes(self.start)

    @property
    def end_minutes(self) -> int:
        return to_minutes(self.end)

    @property
    def invitee_ids(self) -> list[str]:
        return [invitee.user_id for invitee in self.invitees]

    def overlaps(self, other: "Event | Placement") -> bool:
        """Same-day strict overlap."""
        return self.placement.overlaps(other if isinstance(other, Placement) else other.placement)

    def is_finished(self, now: datetime) -> bool:
        """True once the event's end has passed."""
        if self.date < now.date():
            return True
        if self.date == now.date():
            return datetime.combine(self.date, self.end) < now
        return False

    def blocks(self, user_id: str) -> bool:
        """
        Whether this record makes ``user_id`` busy during its interval.

        - A creator record blocks its owner.
        - A copy blocks its invitee unless the invite was declined.
        - A creator record of a daily event (which gets no copies) blocks
          every roster invitee who has not declined.
        """
        if self.is_invite:
            return self.invitee_id == user_id and self.invite_status != InviteStatus.DECLINED
        if self.owner_id == user_id:
            return True
        if self.recurrence == Recurrence.DAILY:
            return any(
                invitee.user_id == user_id and invitee.status != InviteStatus.DECLINED
                for invitee in self.invitees
            )
        return False

    def with_changes(self, **changes: Any) -> "Event":
        """Copy with changes applied; invariants are re-checked."""
        return replace(self, **changes)

    # ---------------------------------------------------------------------
    # Serialization
    # ---------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "owner_id": self.owner_id,
            "title": self.title,
            "description": self.description,
            "location": self.location,
            "color": self.color,
            "date": self.date.isoformat(),
            "start": format_time(self.start),
            "end": format_time(self.end),
            "is_online": self.is_online,
            "meeting_link": self.meeting_link,
            "room_id": self.room_id,
            "recurrence": self.recurrence.value,
            "invitees": [invitee.to_dict() for invitee in self.invitees],
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "invitee_id": self.invitee_id,
            "invite_status": self.invite_status.value if self.invite_status else None,
            "parent_id": self.parent_id,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Event":
        invite_status = data.get("invite_status")
        return cls(
            id=data["id"],
            owner_id=data["owner_id"],
            title=data.get("title", ""),
            description=data.get("description") or "",
            location=data.get("location"),
            color=data.get("color") or "#3b82f6",
            date=parse_date(data["date"]),
            start=parse_time(data["start"]),
            end=parse_time(data["end"]),
            is_online=bool(data.get("is_online", False)),
            meeting_link=data.get("meeting_link"),
            room_id=data.get("room_id"),
            recurrence=Recurrence(data.get("recurrence") or "none"),
            invitees=tuple(Invitee.from_dict(i) for i in data.get("invitees") or []),
            created_at=datetime.fromisoformat(data["created_at"]) if data.get("created_at") else datetime.now(),
            updated_at=datetime.fromisoformat(data["updated_at"]) if data.get("updated_at") else datetime.now(),
            invitee_id=data.get("invitee_id"),
            invite_status=InviteStatus(invite_status) if invite_status else None,
            parent_id=data.get("parent_id"),
        )


@dataclass(frozen=True)
class TimeSlot:
    """A suggested meeting slot."""

    date: date
    start: time
    end: time
    score: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "start": format_time(self.start),
            "end": format_time(self.end),
            "score": self.score,
        }


@dataclass(frozen=True)
class LayoutEntry:
    """Display lane assignment for one event."""

    event: Event
    column: int
    total_columns: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "event_id": self.event.id,
            "title": self.event.title,
            "start": format_time(self.event.start),
            "end": format_time(self.event.end),
            "column": self.column,
            "total_columns": self.total_columns,
        }
