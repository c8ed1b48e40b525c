"""Tests for calendar_engine/scheduling/invitations.py and recurrence.py

The invitation workflow tracks each (event, invitee) pairing:
- PENDING copies are created per invitee (never for daily events)
- accept/decline move PENDING to a terminal state
- Responding to a terminal pairing is a no-op
"""

from datetime import date, datetime

import pytest

from calendar_engine.models import Invitee, InviteStatus, Recurrence
from calendar_engine.scheduling.invitations import InvitationWorkflow
from calendar_engine.scheduling.recurrence import RecurrenceExpander


@pytest.fixture
def workflow() -> InvitationWorkflow:
    counter = iter(range(1, 100))
    return InvitationWorkflow(id_factory=lambda: f"copy-{next(counter)}")


@pytest.fixture
def meeting(make_event):
    return make_event("meet", "09:00", "10:00", invitees=(Invitee("bob"), Invitee("carol")))


@pytest.fixture
def pending_copy(workflow, meeting):
    return workflow.create_copies(meeting)[0]


# ─────────────────────────────────────────────────────────────────────────────
# Copy Creation
# ─────────────────────────────────────────────────────────────────────────────


class TestCreateCopies:
    """Per-invitee copies of the creator's record."""

    def test_one_pending_copy_per_invitee(self, workflow, meeting):
        copies = workflow.create_copies(meeting)

        assert [c.invitee_id for c in copies] == ["bob", "carol"]
        assert all(c.invite_status == InviteStatus.PENDING for c in copies)
        assert all(c.parent_id == "meet" for c in copies)

    def test_copies_get_new_ids(self, workflow, meeting):
        copies = workflow.create_copies(meeting)

        assert [c.id for c in copies] == ["copy-1", "copy-2"]

    def test_copies_share_content(self, workflow, meeting):
        copy = workflow.create_copies(meeting)[0]

        assert copy.title == meeting.title
        assert copy.placement == meeting.placement
        assert copy.owner_id == meeting.owner_id

    def test_creator_record_untouched(self, workflow, meeting):
        workflow.create_copies(meeting)

        assert meeting.invite_status is None
        assert meeting.is_invite is False

    def test_owner_never_copied(self, workflow, meeting):
        copies = workflow.create_copies(meeting, ["alice", "bob", "bob"])

        assert [c.invitee_id for c in copies] == ["bob"]

    def test_daily_events_get_no_copies(self, workflow, make_event):
        daily = make_event(
            "standup", "09:00", "09:15", recurrence=Recurrence.DAILY, invitees=(Invitee("bob"),)
        )

        assert workflow.create_copies(daily) == []

    @pytest.mark.parametrize("recurrence", [Recurrence.NONE, Recurrence.WEEKLY, Recurrence.MONTHLY])
    def test_other_recurrences_get_copies(self, workflow, make_event, recurrence):
        event = make_event("e", "09:00", "10:00", recurrence=recurrence, invitees=(Invitee("bob"),))

        assert len(workflow.create_copies(event)) == 1

    def test_cannot_copy_a_copy(self, workflow, pending_copy):
        with pytest.raises(ValueError):
            workflow.create_copies(pending_copy)

    def test_roster_for_drops_owner_and_duplicates(self):
        roster = InvitationWorkflow.roster_for(["bob", "alice", "", "bob", "carol"], "alice")

        assert roster == (Invitee("bob"), Invitee("carol"))


# ─────────────────────────────────────────────────────────────────────────────
# State Machine
# ─────────────────────────────────────────────────────────────────────────────


class TestTransitions:
    """PENDING -> ACCEPTED | DECLINED, both terminal."""

    def test_accept(self, workflow, pending_copy, now):
        result = workflow.accept(pending_copy, now)

        assert result.changed is True
        assert result.status == InviteStatus.ACCEPTED
        assert result.previous == InviteStatus.PENDING
        assert result.event.updated_at == now

    def test_decline(self, workflow, pending_copy, now):
        result = workflow.decline(pending_copy, now)

        assert result.status == InviteStatus.DECLINED

    def test_decline_after_accept_is_noop(self, workflow, pending_copy, now):
        accepted = workflow.accept(pending_copy, now).event

        result = workflow.decline(accepted, datetime(2026, 10, 19, 9, 0))

        assert result.changed is False
        assert result.status == InviteStatus.ACCEPTED
        assert result.event is accepted

    def test_repeated_accept_is_noop(self, workflow, pending_copy, now):
        accepted = workflow.accept(pending_copy, now).event

        assert workflow.accept(accepted, now).changed is False

    def test_accept_after_decline_is_noop(self, workflow, pending_copy, now):
        declined = workflow.decline(pending_copy, now).event

        result = workflow.accept(declined, now)

        assert result.status == InviteStatus.DECLINED

    @pytest.mark.parametrize("response", ["accept", "ACCEPTED", InviteStatus.ACCEPTED])
    def test_response_spellings(self, workflow, pending_copy, now, response):
        assert workflow.respond(pending_copy, response, now).status == InviteStatus.ACCEPTED

    def test_unknown_response_rejected(self, workflow, pending_copy, now):
        with pytest.raises(ValueError):
            workflow.respond(pending_copy, "maybe", now)

    def test_pending_is_not_a_response(self, workflow, pending_copy, now):
        with pytest.raises(ValueError):
            workflow.respond(pending_copy, InviteStatus.PENDING, now)

    def test_creator_record_has_no_status_to_change(self, workflow, meeting, now):
        with pytest.raises(ValueError):
            workflow.accept(meeting, now)

    def test_result_to_dict(self, workflow, pending_copy, now):
        data = workflow.accept(pending_copy, now).to_dict()

        assert data == {
            "event_id": pending_copy.id,
            "status": "accepted",
            "previous": "pending",
            "changed": True,
        }


# ─────────────────────────────────────────────────────────────────────────────
# Recurrence Metadata
# ─────────────────────────────────────────────────────────────────────────────


class TestRecurrenceExpander:
    """Recurrence is metadata only."""

    def test_only_daily_suppresses_invitations(self):
        expander = RecurrenceExpander()

        assert expander.invitations_allowed("daily") is False
        assert expander.invitations_allowed(Recurrence.WEEKLY) is True
        assert expander.invitations_allowed("none") is True

    def test_describe(self, make_event):
        event = make_event("w", "09:00", "10:00", recurrence=Recurrence.WEEKLY)

        info = RecurrenceExpander().describe(event)

        assert info == {
            "event_id": "w",
            "recurrence": "weekly",
            "is_recurring": True,
            "invitations_allowed": True,
            "materialized": False,
        }

    def test_occurrences_never_materialize_instances(self, make_event):
        event = make_event("w", "09:00", "10:00", recurrence=Recurrence.WEEKLY)

        occurrences = RecurrenceExpander().occurrences(event, date(2026, 10, 1), date(2026, 12, 31))

        assert occurrences == [event]

    def test_occurrences_outside_range(self, make_event):
        event = make_event("d", "09:00", "10:00", recurrence=Recurrence.DAILY)

        assert RecurrenceExpander().occurrences(event, date(2026, 11, 1), date(2026, 11, 30)) == []
