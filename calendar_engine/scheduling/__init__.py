"""Scheduling - pure algorithms over calendar snapshots

Components:
    conflicts.py: ConflictDetector (placement validation)
    suggester.py: SlotSuggester (ranked free slots)
    layout.py: Overlap column packing for a day view
    invitations.py: InvitationWorkflow (per-invitee state machine)
    recurrence.py: RecurrenceExpander (recurrence metadata policy)

None of these touch storage or the clock; callers pass snapshots and "now".
"""

from calendar_engine.scheduling.conflicts import (
    ConflictDetector,
    Rejection,
    RejectionCode,
    ValidationResult,
)
from calendar_engine.scheduling.invitations import InvitationWorkflow, TransitionResult
from calendar_engine.scheduling.layout import layout
from calendar_engine.scheduling.recurrence import RecurrenceExpander
from calendar_engine.scheduling.suggester import SlotSuggester

__all__ = [
    "ConflictDetector",
    "InvitationWorkflow",
    "Rejection",
    "RejectionCode",
    "RecurrenceExpander",
    "SlotSuggester",
    "TransitionResult",
    "ValidationResult",
    "layout",
]
