"""
Tool: Invitation Workflow
Purpose: Per-invitee acceptance state machine

Each (event, invitee) pairing is a copy of the creator's event carrying
its own status:

    PENDING ──accept──▶ ACCEPTED
       │
       └────decline───▶ DECLINED

ACCEPTED and DECLINED are terminal. Responding to a terminal pairing is a
no-op so a repeated click is harmless.

Usage:
    from calendar_engine.scheduling.invitations import InvitationWorkflow

    workflow = InvitationWorkflow()
    copies = workflow.create_copies(event, ["bob", "carol"])
    result = workflow.accept(copies[0], now)
"""

from __future__ import annotations

import uuid
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from calendar_engine.models import Event, Invitee, InviteStatus
from calendar_engine.scheduling.recurrence import RecurrenceExpander


RESPONSES = {
    "accept": InviteStatus.ACCEPTED,
    "accepted": InviteStatus.ACCEPTED,
    "decline": InviteStatus.DECLINED,
    "declined": InviteStatus.DECLINED,
}


@dataclass(frozen=True)
class TransitionResult:
    """Outcome of an accept/decline attempt."""

    event: Event
    changed: bool
    previous: InviteStatus

    @property
    def status(self) -> InviteStatus:
        return self.event.invite_status

    def to_dict(self) -> dict[str, Any]:
        return {
            "event_id": self.event.id,
            "status": self.status.value,
            "previous": self.previous.value,
            "changed": self.changed,
        }


def _new_id() -> str:
    return str(uuid.uuid4())


class InvitationWorkflow:
    def __init__(
        self,
        recurrence: RecurrenceExpander | None = None,
        id_factory: Callable[[], str] = _new_id,
    ):
        self.recurrence = recurrence or RecurrenceExpander()
        self.id_factory = id_factory

    def create_copies(self, event: Event, invitee_ids: Iterable[str] | None = None) -> list[Event]:
        """
        Build one PENDING copy per invitee of a creator's event.

        Args:
            event: The creator's record
            invitee_ids: Invitees to copy for; defaults to the event's roster

        Returns:
            New copies (empty for daily events). The owner is never copied.
        """
        if event.is_invite:
            raise ValueError(f"Cannot create invitations from an invitee copy: {event.id}")
        if not self.recurrence.invitations_allowed(event.recurrence):
            return []

        if invitee_ids is None:
            invitee_ids = event.invitee_ids

        copies = []
        seen: set[str] = set()
        for user_id in invitee_ids:
            if user_id == event.owner_id or user_id in seen:
                continue
            seen.add(user_id)
            copies.append(
                event.with_changes(
                    id=self.id_factory(),
                    invitee_id=user_id,
                    invite_status=InviteStatus.PENDING,
                    parent_id=event.id,
                )
            )
        return copies

    def respond(self, copy: Event, response: InviteStatus | str, now: datetime) -> TransitionResult:
        """
        Apply an accept/decline response to an invitee copy.

        Raises:
            ValueError: ``copy`` is a creator record or ``response`` is not accept/decline
        """
        if not copy.is_invite:
            raise ValueError(f"Event {copy.id} is a creator record and has no invite status")

        target = RESPONSES.get(response.value if isinstance(response, InviteStatus) else str(response).lower())
        if target is None:
            raise ValueError(f"Unknown invitation response: {response!r}")

        current = copy.invite_status
        if current.is_terminal:
            return TransitionResult(event=copy, changed=False, previous=current)

        updated = copy.with_changes(invite_status=target, updated_at=now)
        return TransitionResult(event=updated, changed=True, previous=current)

    def accept(self, copy: Event, now: datetime) -> TransitionResult:
        return self.respond(copy, InviteStatus.ACCEPTED, now)

    def decline(self, copy: Event, now: datetime) -> TransitionResult:
        return self.respond(copy, InviteStatus.DECLINED, now)

    @staticmethod
    def roster_for(invitee_ids: Iterable[str], owner_id: str) -> tuple[Invitee, ...]:
        """Roster entries for the creator's record, dropping the owner and duplicates."""
        seen: set[str] = set()
        roster = []
        for user_id in invitee_ids:
            if user_id and user_id != owner_id and user_id not in seen:
                seen.add(user_id)
                roster.append(Invitee(user_id=user_id))
        return tuple(roster)
