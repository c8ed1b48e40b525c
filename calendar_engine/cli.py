#!/usr/bin/env python3
"""
Calendar Engine Command Line Interface

Main entry point for the `calendar-engine` command. Operates on the SQLite
store (data/calendar.db unless --db is given).

Usage:
    calendar-engine --user alice create --title "Team Sync" --date 2026-10-19 --start 09:00 --end 10:00 --invite bob,carol
    calendar-engine --user alice edit <event-id> --start 10:00 --end 11:00
    calendar-engine --user alice delete <event-id>
    calendar-engine --user bob respond <copy-id> accept
    calendar-engine --user alice suggest --duration 30 --days 7
    calendar-engine --user alice layout --date 2026-10-19
    calendar-engine --user alice list --from 2026-10-19 --to 2026-10-25
"""

import argparse
import json
import sys
from datetime import date

from dotenv import load_dotenv

from calendar_engine.config_models import CalendarConfig, load_and_validate
from calendar_engine.logging_config import get_logger, setup_logging
from calendar_engine.service import CalendarService
from calendar_engine.store import MemoryEventStore, SQLiteEventStore, StoreError

logger = get_logger(__name__)


def _split(value: str | None) -> list[str] | None:
    if value is None:
        return None
    return [x.strip() for x in value.split(",") if x.strip()]


def build_service(db_path: str | None = None, config: CalendarConfig | None = None) -> CalendarService:
    """Service over the configured store backend."""
    config = config or load_and_validate("calendar")
    if config.storage.backend == "memory":
        store = MemoryEventStore()
    else:
        store = SQLiteEventStore(db_path or config.storage.db_path)
    return CalendarService(store, config=config)


def cmd_create(service: CalendarService, args) -> dict:
    return service.create_event(
        owner_id=args.user,
        title=args.title,
        date=args.date,
        start=args.start,
        end=args.end,
        description=args.description,
        location=args.location,
        is_online=args.online,
        meeting_link=args.link,
        room_id=args.room,
        recurrence=args.recurrence,
        invitees=_split(args.invite),
    )


def cmd_edit(service: CalendarService, args) -> dict:
    changes = {
        key: value
        for key, value in {
            "title": args.title,
            "date": args.date,
            "start": args.start,
            "end": args.end,
            "description": args.description,
            "location": args.location,
            "recurrence": args.recurrence,
            "invitees": _split(args.invite),
        }.items()
        if value is not None
    }
    return service.edit_event(args.user, args.event_id, **changes)


def cmd_delete(service: CalendarService, args) -> dict:
    return service.delete_event(args.user, args.event_id)


def cmd_respond(service: CalendarService, args) -> dict:
    return service.respond_to_invite(args.user, args.event_id, args.response)


def cmd_suggest(service: CalendarService, args) -> dict:
    return service.suggest_times(args.user, duration_minutes=args.duration, horizon_days=args.days)


def cmd_layout(service: CalendarService, args) -> dict:
    return service.layout_day(args.user, args.date or date.today())


def cmd_list(service: CalendarService, args) -> dict:
    return service.list_events(args.user, args.start_date or date.today(), args.end_date)


COMMANDS = {
    "create": cmd_create,
    "edit": cmd_edit,
    "delete": cmd_delete,
    "respond": cmd_respond,
    "suggest": cmd_suggest,
    "layout": cmd_layout,
    "list": cmd_list,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="calendar-engine",
        description="Meeting scheduling and conflict resolution",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Book a meeting and invite two people
  calendar-engine --user alice create --title "Team Sync" --date 2026-10-19 --start 09:00 --end 10:00 --invite bob,carol

  # Accept an invitation
  calendar-engine --user bob respond <copy-id> accept

  # Suggest 30-minute slots over the next week
  calendar-engine --user alice suggest --duration 30 --days 7
        """,
    )
    parser.add_argument("--user", required=True, help="Acting user id")
    parser.add_argument("--db", help="SQLite database path")

    sub = parser.add_subparsers(dest="command", required=True)

    create = sub.add_parser("create", help="Create a meeting")
    create.add_argument("--title", required=True)
    create.add_argument("--date", required=True, help="YYYY-MM-DD")
    create.add_argument("--start", required=True, help="HH:MM")
    create.add_argument("--end", required=True, help="HH:MM")
    create.add_argument("--description", default="")
    create.add_argument("--location")
    create.add_argument("--online", action="store_true", help="Online meeting")
    create.add_argument("--link", help="Meeting link")
    create.add_argument("--room", help="Room id")
    create.add_argument("--recurrence", default="none", choices=["none", "daily", "weekly", "monthly"])
    create.add_argument("--invite", help="Invitee ids (comma-separated)")

    edit = sub.add_parser("edit", help="Edit a meeting you created")
    edit.add_argument("event_id")
    edit.add_argument("--title")
    edit.add_argument("--date")
    edit.add_argument("--start")
    edit.add_argument("--end")
    edit.add_argument("--description")
    edit.add_argument("--location")
    edit.add_argument("--recurrence", choices=["none", "daily", "weekly", "monthly"])
    edit.add_argument("--invite", help="Full invitee list (comma-separated)")

    delete = sub.add_parser("delete", help="Delete a meeting you created")
    delete.add_argument("event_id")

    respond = sub.add_parser("respond", help="Accept or decline an invitation")
    respond.add_argument("event_id", help="Invitation copy id")
    respond.add_argument("response", choices=["accept", "decline"])

    suggest = sub.add_parser("suggest", help="Suggest free meeting times")
    suggest.add_argument("--duration", type=int, help="Duration in minutes")
    suggest.add_argument("--days", type=int, help="Days to look ahead")

    day_layout = sub.add_parser("layout", help="Column layout for one day")
    day_layout.add_argument("--date", help="YYYY-MM-DD (default today)")

    listing = sub.add_parser("list", help="List your events")
    listing.add_argument("--from", dest="start_date", help="YYYY-MM-DD (default today)")
    listing.add_argument("--to", dest="end_date", help="YYYY-MM-DD (default a week after --from)")

    return parser


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    setup_logging()

    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        service = build_service(args.db)
    except StoreError as e:
        result = {
            "success": False,
            "error": "STORE_ERROR",
            "message": "Calendar storage failed",
            "detail": str(e),
        }
    else:
        result = COMMANDS[args.command](service, args)

    logger.info(
        "command_finished",
        command=args.command,
        user_id=args.user,
        success=bool(result.get("success")),
        error=result.get("error"),
    )

    if result.get("success"):
        print("OK")
    else:
        print(f"ERROR: {result.get('error')}: {result.get('message', '')}")

    print(json.dumps(result, indent=2, default=str))
    return 0 if result.get("success") else 1


if __name__ == "__main__":
    sys.exit(main())
