import questionary
from rich.console import Console
from rich.table import Table

from cli.banner import render_banner
from cli.menus import pause, select_tenant
from lib.environment import Environment
from lib.errors import format_error

console = Console()


def _active_tenant_label() -> str:
    from cli.session import get_active_tenant
    t = get_active_tenant()
    return f"  Switch Tenant  (active: {t.name})" if t else "  Switch Tenant"


def main_menu():
    while True:
        render_banner()
        choice = questionary.select(
            "Main Menu",
            choices=[
                questionary.Choice("  Members", value="members"),
                questionary.Choice("  Collections", value="collections"),
                questionary.Choice("  Groups", value="groups"),
                questionary.Choice("  Policies", value="policies"),
                questionary.Choice("  Events", value="events"),
                questionary.Choice("  Organization  (settings, SSO, directory)", value="organization"),
                questionary.Choice("  Secrets Manager", value="secrets"),
                questionary.Choice("  Import / Export", value="import_export"),
                questionary.Separator(),
                questionary.Choice(_active_tenant_label(), value="switch_tenant"),
                questionary.Choice("  Settings", value="settings"),
                questionary.Choice("  Audit Log", value="audit"),
                questionary.Separator(),
                questionary.Choice("  Exit", value="exit"),
            ],
            use_indicator=True,
        ).ask()

        if choice == "members":
            from cli.menus.members_menu import members_menu
            members_menu()
        elif choice == "collections":
            from cli.menus.collections_menu import collections_menu
            collections_menu()
        elif choice == "groups":
            from cli.menus.groups_menu import groups_menu
            groups_menu()
        elif choice == "policies":
            from cli.menus.policies_menu import policies_menu
            policies_menu()
        elif choice == "events":
            from cli.menus.events_menu import events_menu
            events_menu()
        elif choice == "organization":
            from cli.menus.organization_menu import organization_menu
            organization_menu()
        elif choice == "secrets":
            from cli.menus.secrets_menu import secrets_menu
            secrets_menu()
        elif choice == "import_export":
            from cli.menus.import_export_menu import import_export_menu
            import_export_menu()
        elif choice == "switch_tenant":
            _switch_tenant()
        elif choice == "settings":
            settings_menu()
        elif choice == "audit":
            audit_menu()
        elif choice in ("exit", None):
            console.print("[dim]Goodbye.[/dim]")
            break


def _switch_tenant():
    from cli.session import set_active_tenant
    from services.config_service import list_tenants

    if not list_tenants():
        console.print("[yellow]No tenants configured yet.[/yellow]")
        if questionary.confirm("Add a tenant now?", default=True).ask():
            _add_tenant()
        return

    tenant = select_tenant()
    if tenant:
        set_active_tenant(tenant)
        console.print(f"[green]✓ Active tenant: [bold]{tenant.name}[/bold][/green]")


# ------------------------------------------------------------------
# Settings
# ------------------------------------------------------------------

def settings_menu():
    while True:
        render_banner()
        choice = questionary.select(
            "Settings",
            choices=[
                questionary.Choice("Add Tenant", value="add"),
                questionary.Choice("List Tenants", value="list"),
                questionary.Choice("Test Tenant Credentials", value="test"),
                questionary.Choice("Remove Tenant", value="remove"),
                questionary.Separator(),
                questionary.Choice("Clear Audit Log & Trigger State", value="cleardata"),
                questionary.Separator(),
                questionary.Choice("← Back", value="back"),
            ],
        ).ask()

        if choice == "add":
            _add_tenant()
        elif choice == "list":
            _list_tenants()
        elif choice == "test":
            tenant = select_tenant()
            if tenant:
                _test_tenant(tenant)
                pause()
        elif choice == "remove":
            _remove_tenant()
        elif choice == "cleardata":
            _clear_data()
        elif choice in ("back", None):
            break


def _add_tenant():
    console.print("\n[bold]Add Tenant[/bold]")
    name = questionary.text("Friendly name (e.g. prod, staging):").ask()
    if not name:
        return

    environment = questionary.select(
        "Bitwarden environment:",
        choices=[questionary.Choice(e.label, value=e.value) for e in Environment],
    ).ask()
    if not environment:
        return

    self_hosted_url = None
    if environment == Environment.SELF_HOSTED.value:
        self_hosted_url = questionary.text(
            "Self-hosted base URL:",
            instruction="e.g.  https://bitwarden.example.com",
        ).ask()
        if not self_hosted_url:
            return

    client_id = questionary.text("Client ID:", instruction="organization.<guid>").ask()
    client_secret = questionary.password("Client Secret:").ask()
    notes = questionary.text("Notes (optional):").ask()

    if not all([name, client_id, client_secret]):
        console.print("[red]Cancelled, required fields missing.[/red]")
        return

    try:
        from services.config_service import add_tenant
        tenant = add_tenant(
            name=name,
            client_id=client_id.strip(),
            client_secret=client_secret,
            environment=environment,
            self_hosted_url=self_hosted_url,
            notes=notes or None,
        )
        console.print(f"[green]✓ Tenant '[bold]{name}[/bold]' added.[/green]")
    except Exception as e:
        console.print(f"[red]✗ Error: {format_error(e)}[/red]")
        pause()
        return

    if questionary.confirm("Test credentials now?", default=True).ask():
        _test_tenant(tenant)

    pause()


def _test_tenant(tenant) -> bool:
    from services.config_service import build_client

    with console.status("Verifying credentials with Bitwarden..."):
        try:
            org = build_client(tenant).test_credentials() or {}
        except Exception as e:
            console.print(f"[red]✗ Credential test failed:[/red] {format_error(e)}")
            return False
    console.print(f"[green]✓ Connected to organization[/green] [bold]{org.get('name', '?')}[/bold]")
    return True


def _list_tenants():
    from services.config_service import list_tenants

    tenants = list_tenants()
    if not tenants:
        console.print("[yellow]No tenants configured.[/yellow]")
        pause()
        return

    table = Table(title="Configured Tenants", show_lines=True)
    table.add_column("Name", style="bold cyan")
    table.add_column("Environment")
    table.add_column("Self-hosted URL")
    table.add_column("Client ID")
    table.add_column("Notes")

    for t in tenants:
        table.add_row(
            t.name,
            Environment.parse(t.environment).label,
            t.self_hosted_url or "[dim]—[/dim]",
            t.client_id,
            t.notes or "[dim]—[/dim]",
        )

    console.print(table)
    pause()


def _remove_tenant():
    from cli.session import clear_active_tenant, get_active_tenant
    from services.config_service import deactivate_tenant, list_tenants

    tenants = list_tenants()
    if not tenants:
        console.print("[yellow]No tenants configured.[/yellow]")
        return

    tenant = questionary.select(
        "Select tenant to remove:",
        choices=[questionary.Choice(t.name, value=t) for t in tenants],
    ).ask()

    if not tenant:
        return

    confirmed = questionary.confirm(
        f"Remove tenant '{tenant.name}'? This cannot be undone.", default=False
    ).ask()

    if confirmed:
        deactivate_tenant(tenant.name)
        active = get_active_tenant()
        if active and active.id == tenant.id:
            clear_active_tenant()
        console.print(f"[green]✓ Tenant '{tenant.name}' removed.[/green]")


def _clear_data():
    console.print(
        "\n[bold]Clear Audit Log & Trigger State[/bold]\n"
        "[dim]Deletes all audit log entries and stored event poll times.\n"
        "Tenant configuration is preserved.[/dim]\n"
    )
    confirmed = questionary.confirm(
        "This cannot be undone. Proceed?", default=False
    ).ask()
    if not confirmed:
        return

    from db.database import get_session
    from db.models import AuditLog, TriggerState

    with get_session() as session:
        audit_count = session.query(AuditLog).delete()
        trigger_count = session.query(TriggerState).delete()

    console.print(
        f"[green]✓ Cleared:[/green] "
        f"{audit_count} audit entries, "
        f"{trigger_count} trigger states."
    )
    pause()


# ------------------------------------------------------------------
# Audit Log
# ------------------------------------------------------------------

def audit_menu():
    from services import audit_service

    with console.status("Loading audit log..."):
        logs = audit_service.get_recent(limit=500)

    if not logs:
        console.print("[yellow]No audit log entries yet.[/yellow]")
        pause()
        return

    table = Table(
        title=f"Audit Log: {len(logs)} entries, newest first",
        show_lines=False,
    )
    table.add_column("Timestamp", style="dim", no_wrap=True)
    table.add_column("Resource", style="cyan")
    table.add_column("Operation")
    table.add_column("Target")
    table.add_column("Status")

    from datetime import timezone as _tz
    for entry in logs:
        status_style = {"SUCCESS": "green", "PARTIAL": "yellow"}.get(entry.status, "red")
        target = entry.resource_name or entry.resource_id or ""
        # Timestamps are stored as UTC naive datetimes; show local time
        ts = entry.timestamp.replace(tzinfo=_tz.utc).astimezone()
        table.add_row(
            ts.strftime("%Y-%m-%d %H:%M:%S"),
            entry.resource or "",
            entry.operation or "",
            target or "[dim]—[/dim]",
            f"[{status_style}]{entry.status or ''}[/{status_style}]",
        )

    console.print(table)
    pause()
