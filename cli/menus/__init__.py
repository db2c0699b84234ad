"""Shared helpers for CLI menus: tenant selection, client factory, output."""

from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import questionary
from rich.console import Console
from rich.table import Table

from lib.errors import format_error

console = Console()


def select_tenant():
    """Prompt the user to select a tenant. Returns None if none are configured."""
    from services.config_service import list_tenants

    tenants = list_tenants()
    if not tenants:
        console.print(
            "[yellow]No tenants configured.[/yellow] "
            "Go to [bold]Settings → Add Tenant[/bold] first."
        )
        return None
    if len(tenants) == 1:
        return tenants[0]
    return questionary.select(
        "Select tenant:",
        choices=[questionary.Choice(t.name, value=t) for t in tenants],
    ).ask()


def get_client(tenant=None):
    """Return (BitwardenClient, tenant) for the active tenant, or (None, None)."""
    from cli.session import get_active_client, get_active_tenant, set_active_tenant

    tenant = tenant or get_active_tenant() or select_tenant()
    if tenant is None:
        return None, None
    set_active_tenant(tenant)
    try:
        return get_active_client(), tenant
    except Exception as e:
        console.print(f"[red]✗ Cannot use tenant '{tenant.name}': {format_error(e)}[/red]")
        pause()
        return None, None


def pause() -> None:
    questionary.press_any_key_to_continue("Press any key to continue...").ask()


def show_error(e: Exception) -> None:
    console.print(f"[red]✗ {format_error(e)}[/red]")
    pause()


def run(label: str, fn, *args, **kwargs):
    """Call fn under a spinner. Returns (ok, result); errors are printed."""
    with console.status(label):
        try:
            return True, fn(*args, **kwargs)
        except Exception as e:
            error = e
    show_error(error)
    return False, None


def show_table(
    title: str,
    rows: Iterable[Dict],
    columns: Sequence[Tuple[str, str]],
    empty: str = "Nothing found.",
) -> None:
    """Render dict rows as a Rich table. columns is [(header, key-or-callable)]."""
    rows = list(rows)
    if not rows:
        console.print(f"[yellow]{empty}[/yellow]")
        pause()
        return

    table = Table(title=f"{title} ({len(rows)})", show_lines=False)
    for i, (header, _) in enumerate(columns):
        table.add_column(header, style="cyan" if i == 0 else None)
    for row in rows:
        cells = []
        for _, key in columns:
            value = key(row) if callable(key) else row.get(key)
            cells.append("[dim]—[/dim]" if value in (None, "") else str(value))
        table.add_row(*cells)
    console.print(table)
    pause()


def show_record(title: str, record: Optional[Dict]) -> None:
    """Key/value view of a single record."""
    if not record:
        console.print("[yellow]Not found.[/yellow]")
        pause()
        return
    table = Table(title=title, show_header=False, show_lines=False)
    table.add_column("Field", style="bold cyan")
    table.add_column("Value")
    for key, value in record.items():
        table.add_row(str(key), "[dim]—[/dim]" if value in (None, "") else str(value))
    console.print(table)
    pause()


def ask_text(prompt: str, default: str = "") -> Optional[str]:
    value = questionary.text(prompt, default=default).ask()
    return value.strip() if value else None


def ask_ids(prompt: str) -> List[str]:
    """Comma-separated IDs."""
    raw = questionary.text(prompt, instruction="comma-separated").ask() or ""
    return [v.strip() for v in raw.split(",") if v.strip()]


def choose(title: str, items: List[Dict], label) -> Optional[Dict]:
    """Pick one dict from a list by label(item)."""
    if not items:
        console.print("[yellow]Nothing to choose from.[/yellow]")
        pause()
        return None
    return questionary.select(
        title,
        choices=[questionary.Choice(label(i), value=i) for i in items],
    ).ask()
