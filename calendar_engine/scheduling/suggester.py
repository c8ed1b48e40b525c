"""
Tool: Slot Suggester
Purpose: Propose a short, ranked list of free meeting slots

Scans ``horizon_days`` days starting today. For each day it collects the
user's busy intervals, walks step-aligned starts inside the working
window and keeps every candidate that fits the window and touches no busy
interval. Today's candidates must start strictly after now plus the grace
buffer.

Scoring (defaults):
    base 100
    +20  starts before 11:00
    +10  starts in [14:00, 16:00)
    -10  starts at or after 16:00
    +10  today, +5 tomorrow

Results are ordered by date ascending, then score descending, and capped.
This is a heuristic shortlist, not an optimal search.

Usage:
    from calendar_engine.scheduling.suggester import SlotSuggester

    suggester = SlotSuggester()
    slots = suggester.suggest("alice", 30, 7, events, now)
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime, timedelta

from calendar_engine.config_models import ScoringConfig
from calendar_engine.models import Event, TimeSlot, from_minutes, intervals_overlap


class SlotSuggester:
    """Ranks free slots inside the working window."""

    def __init__(
        self,
        work_start_hour: int = 9,
        work_end_hour: int = 17,
        step_minutes: int = 30,
        grace_minutes: int = 15,
        max_results: int = 5,
        off_weekdays: Iterable[int] = (),
        scoring: ScoringConfig | None = None,
    ):
        self.work_start = work_start_hour * 60
        self.work_end = work_end_hour * 60
        self.step_minutes = step_minutes
        self.grace_minutes = grace_minutes
        self.max_results = max_results
        self.off_weekdays = frozenset(off_weekdays)
        self.scoring = scoring or ScoringConfig()

    def score(self, start_minutes: int, day_offset: int) -> int:
        """Preference score for a slot starting at ``start_minutes`` on day ``day_offset``."""
        s = self.scoring
        hour = start_minutes // 60

        score = s.base
        if hour < s.morning_before_hour:
            score += s.morning_bonus
        elif s.afternoon_start_hour <= hour < s.afternoon_end_hour:
            score += s.afternoon_bonus
        elif hour >= s.afternoon_end_hour:
            score -= s.late_penalty

        if day_offset == 0:
            score += s.today_bonus
        elif day_offset == 1:
            score += s.tomorrow_bonus
        return score

    @staticmethod
    def busy_intervals(user_id: str, events: Iterable[Event], day: date) -> list[tuple[int, int]]:
        """Sorted (start, end) minute pairs during which ``user_id`` is busy on ``day``."""
        events = list(events)
        # A held copy decides over the daily roster entry of the same event
        held = {event.parent_id for event in events if event.is_invite and event.invitee_id == user_id}
        return sorted(
            (event.start_minutes, event.end_minutes)
            for event in events
            if event.date == day
            and event.blocks(user_id)
            and (event.is_invite or event.owner_id == user_id or event.id not in held)
        )

    def free_starts(
        self,
        duration_minutes: int,
        busy: list[tuple[int, int]],
        earliest_start: int | None = None,
    ) -> list[int]:
        """Step-aligned starts in the window that fit ``duration_minutes`` without touching ``busy``."""
        starts = []
        for start in range(self.work_start, self.work_end, self.step_minutes):
            end = start + duration_minutes
            if end > self.work_end:
                break
            if earliest_start is not None and start <= earliest_start:
                continue
            if any(intervals_overlap(start, end, b_start, b_end) for b_start, b_end in busy):
                continue
            starts.append(start)
        return starts

    def suggest(
        self,
        user_id: str,
        duration_minutes: int,
        horizon_days: int,
        events: Iterable[Event],
        now: datetime,
    ) -> list[TimeSlot]:
        """
        Suggest up to ``max_results`` free slots.

        Args:
            user_id: User to find time for
            duration_minutes: Required meeting length
            horizon_days: Number of days to scan, today included
            events: Events in the horizon the user may participate in
            now: Current local time

        Returns:
            TimeSlots ordered by date, then score (best first)
        """
        if duration_minutes <= 0:
            raise ValueError(f"duration_minutes must be positive, got {duration_minutes}")
        if horizon_days <= 0:
            return []

        events = list(events)
        today = now.date()
        now_minutes = now.hour * 60 + now.minute

        candidates: list[TimeSlot] = []
        for offset in range(horizon_days):
            day = today + timedelta(days=offset)
            if day.weekday() in self.off_weekdays:
                continue

            busy = self.busy_intervals(user_id, events, day)
            earliest = now_minutes + self.grace_minutes if offset == 0 else None

            for start in self.free_starts(duration_minutes, busy, earliest):
                candidates.append(
                    TimeSlot(
                        date=day,
                        start=from_minutes(start),
                        end=from_minutes(start + duration_minutes),
                        score=self.score(start, offset),
                    )
                )

        # Stable sort keeps earlier starts first among equal scores
        candidates.sort(key=lambda slot: (slot.date, -slot.score))
        return candidates[: self.max_results]
