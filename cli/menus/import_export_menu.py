import json
from pathlib import Path

import questionary
from rich.console import Console
from rich.table import Table

from cli.banner import render_banner
from cli.menus import ask_text, get_client, pause, run

console = Console()

_VAULT_FORMATS = ["bitwardenjson", "bitwardencsv", "lastpasscsv", "1passwordcsv", "keepass2xml"]


def import_export_menu():
    client, tenant = get_client()
    if client is None:
        return

    from services.import_export_service import ImportExportService
    service = ImportExportService(client, tenant_id=tenant.id)

    while True:
        render_banner()
        choice = questionary.select(
            "Import / Export",
            choices=[
                questionary.Choice("Import Members from CSV", value="import_members"),
                questionary.Choice("Export Members to CSV", value="export_members"),
                questionary.Separator(),
                questionary.Choice("Import Vault Data", value="import_vault"),
                questionary.Choice("Export Vault", value="export_vault"),
                questionary.Separator(),
                questionary.Choice("← Back", value="back"),
            ],
            use_indicator=True,
        ).ask()

        if choice == "import_members":
            _import_members(service)
        elif choice == "export_members":
            _export_members(service)
        elif choice == "import_vault":
            _import_vault(service)
        elif choice == "export_vault":
            _export_vault(service)
        elif choice in ("back", None):
            break


def _read_file(prompt):
    path = questionary.path(prompt).ask()
    if not path:
        return None
    try:
        return Path(path).expanduser().read_text(encoding="utf-8")
    except OSError as e:
        console.print(f"[red]✗ Cannot read {path}: {e}[/red]")
        pause()
        return None


def _write_file(prompt, default, content):
    path = questionary.path(prompt, default=default).ask()
    if not path:
        return
    target = Path(path).expanduser()
    try:
        target.write_text(content, encoding="utf-8")
    except OSError as e:
        console.print(f"[red]✗ Cannot write {target}: {e}[/red]")
    else:
        console.print(f"[green]✓ Written:[/green] {target}")
    pause()


def _import_members(service):
    console.print("\n[bold]Import Members[/bold]")
    console.print("[dim]Columns: email (required), type, accessAll, externalId[/dim]\n")
    text = _read_file("CSV file:")
    if not text:
        return
    ok, summary = run("Inviting members...", service.import_members_csv, text)
    if not ok:
        return

    table = Table(
        title=f"Import: {summary['successCount']} invited, {summary['failureCount']} failed",
        show_lines=False,
    )
    table.add_column("Email", style="cyan")
    table.add_column("Result")
    for r in summary["results"]:
        table.add_row(
            r["email"],
            f"[green]✓ {r.get('memberId') or ''}[/green]" if r["success"] else f"[red]✗ {r['error']}[/red]",
        )
    console.print(table)
    pause()


def _export_members(service):
    include_collections = questionary.confirm("Include collections column?", default=False).ask()
    ok, result = run("Exporting members...", service.export_members_csv, bool(include_collections))
    if ok:
        console.print(f"[green]✓ {result['totalMembers']} member(s) exported.[/green]")
        _write_file("Save to:", "members.csv", result["csv"] + "\n")


def _import_vault(service):
    fmt = questionary.select("Format:", choices=_VAULT_FORMATS).ask()
    if not fmt:
        return
    data = _read_file("File to import:")
    if not data:
        return
    collection_id = ask_text("Target collection ID (optional):")
    if not questionary.confirm("Import into the organization vault?", default=False).ask():
        return
    ok, result = run("Importing...", service.import_organization, fmt, data, collection_id=collection_id)
    if ok:
        console.print(f"[green]✓ {result['message']}[/green]")
        pause()


def _export_vault(service):
    fmt = questionary.select("Format:", choices=["json", "csv", "encrypted_json"]).ask()
    if not fmt:
        return
    ok, result = run("Exporting vault...", service.export_organization, fmt)
    if not ok:
        return
    data = result["data"]
    content = data if isinstance(data, str) else json.dumps(data, indent=2)
    ext = "csv" if fmt == "csv" else "json"
    _write_file("Save to:", f"org-export.{ext}", content)
