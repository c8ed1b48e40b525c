"""
Tool: Calendar Service
Purpose: Create, edit, delete and respond to meetings against an EventStore

Wires the pure scheduling components to a store and a clock. Every public
operation returns a result dict in the usual shape:

    {"success": True, ...data}
    {"success": False, "error": "<CODE>", "message": str, ...}

Error codes are the ConflictDetector rejection codes plus NOT_FOUND,
FORBIDDEN, INVALID_INPUT and STORE_ERROR. Store failures are reported once
and never retried.

The check-then-write sequence (validate, then put) is not atomic; callers
that allow concurrent writers for one owner must serialize them.

Usage:
    from calendar_engine.service import CalendarService
    from calendar_engine.store import MemoryEventStore

    service = CalendarService(MemoryEventStore())
    result = service.create_event("alice", "Team Sync", "2026-10-19", "09:00", "10:00",
                                  invitees=["bob"])
    service.respond_to_invite("bob", result["copies"][0]["id"], "accept")
"""

from __future__ import annotations

import uuid
from collections.abc import Callable, Iterable
from datetime import date, time, timedelta
from typing import Any

from calendar_engine.clock import SystemClock
from calendar_engine.config_models import CalendarConfig
from calendar_engine.logging_config import bind_operation, get_logger
from calendar_engine.models import (
    Event,
    InvalidEventError,
    Placement,
    Recurrence,
    parse_date,
    parse_time,
)
from calendar_engine.scheduling.conflicts import ConflictDetector, ValidationResult
from calendar_engine.scheduling.invitations import InvitationWorkflow
from calendar_engine.scheduling.layout import display_order, layout
from calendar_engine.scheduling.recurrence import RecurrenceExpander
from calendar_engine.scheduling.suggester import SlotSuggester
from calendar_engine.store.base import EventStore, StoreError

logger = get_logger(__name__)

# Content fields an edit may replace
EDITABLE_FIELDS = frozenset({
    "title",
    "description",
    "location",
    "color",
    "date",
    "start",
    "end",
    "is_online",
    "meeting_link",
    "room_id",
    "recurrence",
    "invitees",
})


def _new_id() -> str:
    return str(uuid.uuid4())


def _rejected(result: ValidationResult) -> dict[str, Any]:
    rejection = result.rejection
    return {
        "success": False,
        "error": rejection.code.value,
        "message": rejection.message,
        "conflicting_ids": list(rejection.conflicting_ids),
    }


def _error(code: str, message: str) -> dict[str, Any]:
    return {"success": False, "error": code, "message": message}


def _store_error(e: StoreError) -> dict[str, Any]:
    logger.error("store_error", error=str(e))
    return {"success": False, "error": "STORE_ERROR", "message": "Calendar storage failed", "detail": str(e)}


class CalendarService:
    def __init__(
        self,
        store: EventStore,
        clock: Any = None,
        config: CalendarConfig | None = None,
        id_factory: Callable[[], str] = _new_id,
    ):
        self.store = store
        self.clock = clock or SystemClock()
        self.config = config or CalendarConfig()
        self.id_factory = id_factory

        policy = self.config.policy
        hours = self.config.working_hours
        suggestions = self.config.suggestions

        self.detector = ConflictDetector(
            off_weekdays=policy.off_weekdays,
            grace_minutes=policy.grace_minutes,
        )
        self.suggester = SlotSuggester(
            work_start_hour=hours.start_hour,
            work_end_hour=hours.end_hour,
            step_minutes=hours.slot_step_minutes,
            grace_minutes=policy.grace_minutes,
            max_results=suggestions.max_results,
            off_weekdays=policy.off_weekdays if suggestions.skip_off_days else (),
            scoring=suggestions.scoring,
        )
        self.recurrence = RecurrenceExpander()
        self.invitations = InvitationWorkflow(recurrence=self.recurrence, id_factory=id_factory)

    # =========================================================================
    # Helpers
    # =========================================================================

    def _owned_on(self, owner_id: str, day: date) -> list[Event]:
        """The owner's creator records on ``day``; the conflict comparison set."""
        return [
            event
            for event in self.store.query(owner_id, day, day)
            if not event.is_invite and event.owner_id == owner_id
        ]

    def validate(
        self,
        owner_id: str,
        placement: Placement,
        editing_id: str | None = None,
        allow_past: bool = False,
    ) -> ValidationResult:
        """Run ConflictDetector against the store's current snapshot."""
        existing = self._owned_on(owner_id, placement.date)
        return self.detector.validate(
            placement,
            existing,
            self.clock.now(),
            editing_id=editing_id,
            allow_past=allow_past,
        )

    # =========================================================================
    # Create / edit / delete
    # =========================================================================

    def create_event(
        self,
        owner_id: str,
        title: str,
        date: date | str,
        start: time | str,
        end: time | str,
        description: str = "",
        location: str | None = None,
        color: str = "#3b82f6",
        is_online: bool = False,
        meeting_link: str | None = None,
        room_id: str | None = None,
        recurrence: Recurrence | str = Recurrence.NONE,
        invitees: Iterable[str] | None = None,
    ) -> dict[str, Any]:
        """
        Create a meeting and its per-invitee copies.

        Args:
            owner_id: Creator
            title: Meeting title (required)
            date: Calendar day
            start: Start time (HH:MM)
            end: End time (HH:MM)
            invitees: User ids to invite; the owner is ignored if listed
            recurrence: none | daily | weekly | monthly (daily creates no copies)

        Returns:
            {"success": True, "event": dict, "copies": [dict, ...]}
            or a rejection/error dict
        """
        bind_operation("create_event", owner_id)

        if not title or not title.strip():
            return _error("INVALID_INPUT", "Please fill in all required fields")
        if isinstance(invitees, str):
            return _error("INVALID_INPUT", "invitees must be a list of user ids")
        try:
            placement = Placement(parse_date(date), parse_time(start), parse_time(end))
            recurrence = Recurrence(recurrence)
        except ValueError as e:
            return _error("INVALID_INPUT", str(e))

        try:
            verdict = self.validate(owner_id, placement)
            if not verdict.ok:
                logger.info("event_rejected", code=verdict.rejection.code.value, date=placement.date.isoformat())
                return _rejected(verdict)

            now = self.clock.now()
            event = Event(
                id=self.id_factory(),
                owner_id=owner_id,
                title=title.strip(),
                description=description,
                location=location or None,
                color=color,
                date=placement.date,
                start=placement.start,
                end=placement.end,
                is_online=is_online,
                meeting_link=meeting_link or None,
                room_id=room_id,
                recurrence=recurrence,
                invitees=InvitationWorkflow.roster_for(invitees or [], owner_id),
                created_at=now,
                updated_at=now,
            )
            copies = self.invitations.create_copies(event)
            self.store.put_many([event, *copies])
        except StoreError as e:
            return _store_error(e)

        logger.info("event_created", event_id=event.id, copies=len(copies), recurrence=recurrence.value)
        return {
            "success": True,
            "event": event.to_dict(),
            "copies": [copy.to_dict() for copy in copies],
        }

    def edit_event(self, user_id: str, event_id: str, **changes: Any) -> dict[str, Any]:
        """
        Replace an event's content, keyed by id.

        Only the owner may edit. ``id``, ``owner_id`` and ``created_at`` are
        kept. Existing invitee copies are left untouched. Roster members
        without a copy (newly added invitees, or every invitee when the event
        stops being daily) get fresh PENDING copies unless the event is daily.

        Args:
            user_id: Acting user (must own the event)
            event_id: Creator record to edit
            **changes: Any of EDITABLE_FIELDS

        Returns:
            {"success": True, "event": dict, "new_copies": [dict, ...]}
            or a rejection/error dict
        """
        bind_operation("edit_event", user_id)

        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            return _error("INVALID_INPUT", f"Fields cannot be edited: {sorted(unknown)}")

        try:
            original = self.store.get(event_id)
            if original is None:
                return _error("NOT_FOUND", f"Event not found: {event_id}")
            if original.is_invite:
                return _error("FORBIDDEN", "Invitation copies cannot be edited; respond to them instead")
            if original.owner_id != user_id:
                return _error("FORBIDDEN", "Only the creator can edit this event")

            try:
                updates = self._normalize_changes(original, changes)
                placement = Placement(
                    updates.get("date", original.date),
                    updates.get("start", original.start),
                    updates.get("end", original.end),
                )
            except ValueError as e:
                return _error("INVALID_INPUT", str(e))

            now = self.clock.now()
            verdict = self.validate(
                user_id,
                placement,
                editing_id=original.id,
                allow_past=original.date < now.date(),
            )
            if not verdict.ok:
                logger.info("edit_rejected", event_id=event_id, code=verdict.rejection.code.value)
                return _rejected(verdict)

            try:
                edited = original.with_changes(**updates, updated_at=now)
            except InvalidEventError as e:
                return _error("INVALID_INPUT", str(e))

            # Roster members without a copy get one; this covers both newly
            # added invitees and the whole roster of an event leaving daily
            holders = {copy.invitee_id for copy in self.store.copies_of(event_id)}
            missing = [user for user in edited.invitee_ids if user not in holders]
            new_copies = self.invitations.create_copies(edited, missing) if missing else []

            self.store.put_many([edited, *new_copies])
        except StoreError as e:
            return _store_error(e)

        logger.info("event_edited", event_id=event_id, new_copies=len(new_copies))
        return {
            "success": True,
            "event": edited.to_dict(),
            "new_copies": [copy.to_dict() for copy in new_copies],
        }

    @staticmethod
    def _normalize_changes(original: Event, changes: dict[str, Any]) -> dict[str, Any]:
        updates: dict[str, Any] = {}
        for key, value in changes.items():
            if key == "date":
                updates[key] = parse_date(value)
            elif key in ("start", "end"):
                updates[key] = parse_time(value)
            elif key == "recurrence":
                updates[key] = Recurrence(value)
            elif key == "invitees":
                if isinstance(value, str):
                    raise ValueError("invitees must be a list of user ids")
                kept = {i.user_id: i for i in original.invitees}
                roster = InvitationWorkflow.roster_for(value or [], original.owner_id)
                updates[key] = tuple(kept.get(i.user_id, i) for i in roster)
            elif key == "title":
                if not value or not str(value).strip():
                    raise ValueError("Title is required")
                updates[key] = str(value).strip()
            else:
                updates[key] = value
        return updates

    def delete_event(self, user_id: str, event_id: str) -> dict[str, Any]:
        """
        Delete the owner's record. Invitee copies are not cascaded.

        Returns:
            {"success": True, "event_id": str, "orphaned_copies": int}
        """
        bind_operation("delete_event", user_id)
        try:
            event = self.store.get(event_id)
            if event is None:
                return _error("NOT_FOUND", f"Event not found: {event_id}")
            if event.is_invite or event.owner_id != user_id:
                return _error("FORBIDDEN", "Only the creator can delete this event")

            orphaned = len(self.store.copies_of(event_id))
            self.store.remove(event_id)
        except StoreError as e:
            return _store_error(e)

        logger.info("event_deleted", event_id=event_id, orphaned_copies=orphaned)
        return {"success": True, "event_id": event_id, "orphaned_copies": orphaned}

    # =========================================================================
    # Invitations
    # =========================================================================

    def respond_to_invite(self, user_id: str, copy_id: str, response: str) -> dict[str, Any]:
        """
        Accept or decline an invitation.

        Responding again after a terminal answer is a no-op and still succeeds
        with ``changed: False``.
        """
        bind_operation("respond_to_invite", user_id)
        try:
            copy = self.store.get(copy_id)
            if copy is None:
                return _error("NOT_FOUND", f"Invitation not found: {copy_id}")
            if not copy.is_invite:
                return _error("INVALID_INPUT", "The creator's own event has no invitation to answer")
            if copy.invitee_id != user_id:
                return _error("FORBIDDEN", "This invitation belongs to another user")

            try:
                result = self.invitations.respond(copy, response, self.clock.now())
            except ValueError as e:
                return _error("INVALID_INPUT", str(e))

            if result.changed:
                self.store.put(result.event)
        except StoreError as e:
            return _store_error(e)

        logger.info(
            "invite_response",
            event_id=copy_id,
            status=result.status.value,
            changed=result.changed,
        )
        return {"success": True, **result.to_dict()}

    def pending_invites(self, user_id: str, start_date: date | str, end_date: date | str) -> dict[str, Any]:
        try:
            start_date, end_date = parse_date(start_date), parse_date(end_date)
        except ValueError as e:
            return _error("INVALID_INPUT", str(e))
        try:
            events = self.store.query(user_id, start_date, end_date)
        except StoreError as e:
            return _store_error(e)
        pending = [e for e in events if e.is_invite and not e.invite_status.is_terminal]
        return {"success": True, "invites": [e.to_dict() for e in pending], "total": len(pending)}

    # =========================================================================
    # Read-only views
    # =========================================================================

    def suggest_times(
        self,
        user_id: str,
        duration_minutes: int | None = None,
        horizon_days: int | None = None,
    ) -> dict[str, Any]:
        """
        Suggest free meeting slots for ``user_id``.

        Returns:
            {"success": True, "suggestions": [{date, start, end, score}], ...}
        """
        bind_operation("suggest_times", user_id)
        settings = self.config.suggestions
        duration = duration_minutes or settings.default_duration_minutes
        horizon = horizon_days or settings.horizon_days
        if duration <= 0 or horizon <= 0:
            return _error("INVALID_INPUT", "Duration and horizon must be positive")

        now = self.clock.now()
        today = now.date()
        try:
            events = self.store.query(user_id, today, today + timedelta(days=horizon - 1))
        except StoreError as e:
            return _store_error(e)

        slots = self.suggester.suggest(user_id, duration, horizon, events, now)
        logger.info("slots_suggested", count=len(slots), duration=duration, horizon=horizon)
        return {
            "success": True,
            "suggestions": [slot.to_dict() for slot in slots],
            "duration_minutes": duration,
            "days_searched": horizon,
        }

    def layout_day(self, user_id: str, day: date | str) -> dict[str, Any]:
        """Column layout of the user's events on ``day``."""
        try:
            day = parse_date(day)
        except ValueError as e:
            return _error("INVALID_INPUT", str(e))
        try:
            events = self.store.query(user_id, day, day)
        except StoreError as e:
            return _store_error(e)

        entries = layout(display_order(events))
        return {
            "success": True,
            "date": day.isoformat(),
            "total_columns": entries[0].total_columns if entries else 0,
            "layout": [entry.to_dict() for entry in entries],
        }

    def list_events(
        self,
        user_id: str,
        start_date: date | str,
        end_date: date | str | None = None,
    ) -> dict[str, Any]:
        """The user's events in range, each flagged with ``is_finished``. The range defaults to one week."""
        try:
            start_date = parse_date(start_date)
            end_date = parse_date(end_date) if end_date else start_date + timedelta(days=6)
        except ValueError as e:
            return _error("INVALID_INPUT", str(e))
        try:
            events = self.store.query(user_id, start_date, end_date)
        except StoreError as e:
            return _store_error(e)

        now = self.clock.now()
        return {
            "success": True,
            "events": [
                {
                    **event.to_dict(),
                    "is_finished": event.is_finished(now),
                    "recurrence_info": self.recurrence.describe(event),
                }
                for event in events
            ],
            "total": len(events),
        }


__all__ = ["EDITABLE_FIELDS", "CalendarService"]
