from datetime import datetime, timedelta, timezone

import questionary
from rich.console import Console

from cli.banner import render_banner
from cli.menus import ask_text, get_client, pause, run, show_table
from lib.formatting import event_type_label, to_iso

console = Console()

_COLUMNS = [
    ("Date", "date"),
    ("Event", lambda e: event_type_label(e.get("type"))),
    ("Acting User", "actingUserId"),
    ("Member", "memberId"),
    ("Item", "itemId"),
    ("IP", "ipAddress"),
]

_RANGES = [
    questionary.Choice("Last hour", value=timedelta(hours=1)),
    questionary.Choice("Last 24 hours", value=timedelta(days=1)),
    questionary.Choice("Last 7 days", value=timedelta(days=7)),
    questionary.Choice("Last 30 days", value=timedelta(days=30)),
]


def events_menu():
    client, tenant = get_client()
    if client is None:
        return

    from services.event_service import EventService
    service = EventService(client, tenant_id=tenant.id)

    while True:
        render_banner()
        choice = questionary.select(
            "Events",
            choices=[
                questionary.Choice("Recent Events", value="recent"),
                questionary.Choice("Events by Member", value="member"),
                questionary.Choice("Events by Type", value="type"),
                questionary.Separator(),
                questionary.Choice("Poll Trigger", value="poll"),
                questionary.Separator(),
                questionary.Choice("← Back", value="back"),
            ],
            use_indicator=True,
        ).ask()

        if choice == "recent":
            window = _ask_window()
            if window:
                ok, events = run("Fetching events...", service.list_events_by_date_range, *window)
                if ok:
                    show_table("Events", events, _COLUMNS, empty="No events in range.")
        elif choice == "member":
            member_id = ask_text("Acting user ID:")
            window = member_id and _ask_window()
            if window:
                ok, events = run("Fetching events...", service.list_events_by_member, member_id,
                                 start=window[0], end=window[1])
                if ok:
                    show_table("Events by Member", events, _COLUMNS, empty="No events found.")
        elif choice == "type":
            raw = ask_text("Event type code (e.g. 1500):")
            window = raw and _ask_window()
            if window:
                try:
                    event_type = int(raw)
                except ValueError:
                    console.print("[red]✗ Event type must be a number.[/red]")
                    pause()
                    continue
                ok, events = run("Fetching events...", service.list_events_by_type, event_type,
                                 start=window[0], end=window[1])
                if ok:
                    show_table(event_type_label(event_type), events, _COLUMNS, empty="No events found.")
        elif choice == "poll":
            _poll(client, tenant)
        elif choice in ("back", None):
            break


def _ask_window():
    span = questionary.select("Range:", choices=_RANGES).ask()
    if span is None:
        return None
    end = datetime.now(timezone.utc)
    return to_iso(end - span), to_iso(end)


def _poll(client, tenant):
    from services.trigger_service import TRIGGER_EVENTS, EventPoller

    event = questionary.select(
        "Trigger:", choices=[questionary.Choice(k, value=k) for k in TRIGGER_EVENTS]
    ).ask()
    if not event:
        return
    include_user = questionary.confirm("Include acting user details?", default=False).ask()
    poller = EventPoller(client, tenant.id)
    ok, events = run("Polling...", poller.poll, event, include_acting_user=bool(include_user))
    if not ok:
        return
    if events is None:
        console.print("[dim]No new matching events since the last poll.[/dim]")
        pause()
        return
    show_table(f"New events: {event}", events,
               [("Date", "date"), ("Event", "eventTypeName"),
                ("Acting User", lambda e: (e.get("actingUser") or {}).get("email") or e.get("actingUserId")),
                ("Item", "itemId")])
