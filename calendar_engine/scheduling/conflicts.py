"""
Tool: Conflict Detector
Purpose: Decide whether a candidate placement may be booked

Rules run in order and stop at the first failure:
    1. INVALID_RANGE    end is not after start
    2. PAST_DATE        date is strictly before today
    3. OFF_DAY          date falls on a policy off-day
    4. PAST_TIME_TODAY  date is today and start is not after now + grace
    5. TIME_CONFLICT    interval overlaps an existing event (half-open)

Failures are returned as values, never raised. The detector is pure: the
caller supplies the comparison set and "now".

Usage:
    from calendar_engine.scheduling.conflicts import ConflictDetector

    detector = ConflictDetector(off_weekdays={4, 5}, grace_minutes=15)
    result = detector.validate(placement, existing, now)
    if not result.ok:
        print(result.rejection.code, result.rejection.conflicting_ids)
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from calendar_engine.models import Event, Placement, format_time, to_minutes


DEFAULT_OFF_WEEKDAYS = frozenset({4, 5})  # Friday, Saturday
DEFAULT_GRACE_MINUTES = 15


class RejectionCode(str, Enum):
    """Why a placement was refused."""

    INVALID_RANGE = "INVALID_RANGE"
    PAST_DATE = "PAST_DATE"
    OFF_DAY = "OFF_DAY"
    PAST_TIME_TODAY = "PAST_TIME_TODAY"
    TIME_CONFLICT = "TIME_CONFLICT"


@dataclass(frozen=True)
class Rejection:
    code: RejectionCode
    message: str
    conflicting_ids: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code.value,
            "message": self.message,
            "conflicting_ids": list(self.conflicting_ids),
        }


@dataclass(frozen=True)
class ValidationResult:
    """Ok when ``rejection`` is None."""

    rejection: Rejection | None = None
    checked_against: tuple[str, ...] = field(default=())

    @property
    def ok(self) -> bool:
        return self.rejection is None

    @classmethod
    def accept(cls, checked_against: Iterable[str] = ()) -> "ValidationResult":
        return cls(rejection=None, checked_against=tuple(checked_against))

    @classmethod
    def reject(
        cls,
        code: RejectionCode,
        message: str,
        conflicting_ids: Iterable[str] = (),
    ) -> "ValidationResult":
        return cls(rejection=Rejection(code, message, tuple(conflicting_ids)))

    def to_dict(self) -> dict[str, Any]:
        if self.rejection is None:
            return {"ok": True}
        return {"ok": False, **self.rejection.to_dict()}


class ConflictDetector:
    """Validates placements against a snapshot of existing events."""

    def __init__(
        self,
        off_weekdays: Iterable[int] = DEFAULT_OFF_WEEKDAYS,
        grace_minutes: int = DEFAULT_GRACE_MINUTES,
    ):
        self.off_weekdays = frozenset(off_weekdays)
        self.grace_minutes = grace_minutes

    def is_off_day(self, placement: Placement) -> bool:
        return placement.date.weekday() in self.off_weekdays

    def is_past_time_today(self, placement: Placement, now: datetime) -> bool:
        """Start must be strictly after now plus the grace buffer."""
        now_minutes = now.hour * 60 + now.minute
        return placement.start_minutes <= now_minutes + self.grace_minutes

    def find_conflicts(
        self,
        placement: Placement,
        existing: Iterable[Event],
        editing_id: str | None = None,
    ) -> list[str]:
        """Ids of events in ``existing`` whose interval overlaps ``placement``."""
        return [
            event.id
            for event in existing
            if event.id != editing_id and event.overlaps(placement)
        ]

    def validate(
        self,
        candidate: Placement,
        existing: Iterable[Event],
        now: datetime,
        editing_id: str | None = None,
        allow_past: bool = False,
    ) -> ValidationResult:
        """
        Validate a candidate placement.

        Args:
            candidate: The placement to check
            existing: The owner's events on the candidate's date
            now: Current local time
            editing_id: Id of the event being edited; excluded from the comparison set
            allow_past: Skip the PAST_DATE and PAST_TIME_TODAY rules (editing an
                event whose original date had already passed)

        Returns:
            ValidationResult; ``result.ok`` or ``result.rejection``
        """
        if to_minutes(candidate.end) <= to_minutes(candidate.start):
            return ValidationResult.reject(
                RejectionCode.INVALID_RANGE,
                f"End time {format_time(candidate.end)} must be after start time "
                f"{format_time(candidate.start)}",
            )

        today = now.date()

        if not allow_past and candidate.date < today:
            return ValidationResult.reject(
                RejectionCode.PAST_DATE,
                "Cannot schedule meetings in the past. Please select today or a future date.",
            )

        if self.is_off_day(candidate):
            return ValidationResult.reject(
                RejectionCode.OFF_DAY,
                f"{candidate.date.strftime('%A')} is an off day. Meetings cannot be scheduled on it.",
            )

        if not allow_past and candidate.date == today and self.is_past_time_today(candidate, now):
            return ValidationResult.reject(
                RejectionCode.PAST_TIME_TODAY,
                f"Start time must be more than {self.grace_minutes} minutes from now.",
            )

        comparison = [event for event in existing if event.id != editing_id]
        conflicts = self.find_conflicts(candidate, comparison)
        if conflicts:
            return ValidationResult.reject(
                RejectionCode.TIME_CONFLICT,
                "This time conflicts with an existing meeting. Please choose a different time.",
                conflicts,
            )

        return ValidationResult.accept(event.id for event in comparison)
