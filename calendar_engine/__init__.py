"""Calendar Engine — scheduling and conflict resolution for the shared calendar

Philosophy:
    The engine decides whether a placement is valid, what the best free
    placements are, how overlapping events share a day column, and how an
    invitation moves through its lifecycle. Storage and rendering belong
    to the caller.

Components:
    models.py: Event, Invitee, Placement and time helpers
    config_models.py: Typed configuration (args/calendar.yaml)
    clock.py: Injectable "now" suppliers
    scheduling/: Pure algorithms (conflicts, suggestions, layout, invitations)
    store/: EventStore interface with in-memory and SQLite implementations
    service.py: CalendarService wiring store, clock and algorithms together
    cli.py: Command line entry point
"""

from pathlib import Path


# Path constants
PROJECT_ROOT = Path(__file__).parent.parent
ARGS_DIR = PROJECT_ROOT / "args"
DATA_DIR = PROJECT_ROOT / "data"
DB_PATH = DATA_DIR / "calendar.db"

__all__ = [
    "ARGS_DIR",
    "DATA_DIR",
    "DB_PATH",
    "PROJECT_ROOT",
]
