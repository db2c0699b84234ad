import questionary
from rich.console import Console
from rich.panel import Panel

from cli.banner import render_banner
from cli.menus import ask_text, get_client, pause, run, show_record, show_table
from lib.formatting import DIRECTORY_TYPE_LABELS, SSO_TYPE_LABELS

console = Console()


def organization_menu():
    client, tenant = get_client()
    if client is None:
        return

    from services.directory_service import DirectoryService
    from services.organization_service import OrganizationService
    from services.sso_service import SsoService
    org = OrganizationService(client, tenant_id=tenant.id)
    sso = SsoService(client, tenant_id=tenant.id)
    directory = DirectoryService(client, tenant_id=tenant.id)

    while True:
        render_banner()
        choice = questionary.select(
            "Organization",
            choices=[
                questionary.Choice("Organization Details", value="get"),
                questionary.Choice("Update Organization", value="update"),
                questionary.Choice("Billing", value="billing"),
                questionary.Choice("Subscription", value="subscription"),
                questionary.Choice("License", value="license"),
                questionary.Choice("Rotate API Key", value="rotate"),
                questionary.Separator(),
                questionary.Choice("SSO Configuration", value="sso"),
                questionary.Choice("Test SSO Connection", value="sso_test"),
                questionary.Separator(),
                questionary.Choice("Directory Configuration", value="directory"),
                questionary.Choice("Trigger Directory Sync", value="sync"),
                questionary.Choice("Directory Sync History", value="history"),
                questionary.Separator(),
                questionary.Choice("← Back", value="back"),
            ],
            use_indicator=True,
        ).ask()

        if choice == "get":
            _show("Fetching organization...", "Organization", org.get_organization)
        elif choice == "update":
            _update(org)
        elif choice == "billing":
            _show("Fetching billing...", "Billing", org.get_billing)
        elif choice == "subscription":
            _show("Fetching subscription...", "Subscription", org.get_subscription)
        elif choice == "license":
            _show("Fetching license...", "License", org.get_license)
        elif choice == "rotate":
            _rotate(org, tenant)
        elif choice == "sso":
            ok, config = run("Fetching SSO configuration...", sso.get_sso_config)
            if ok:
                config = dict(config or {})
                config["type"] = SSO_TYPE_LABELS.get(config.get("type"), config.get("type"))
                show_record("SSO Configuration", config)
        elif choice == "sso_test":
            with console.status("Testing SSO..."):
                result = sso.test_sso_connection()
            style = "green" if result["success"] else "red"
            console.print(Panel(
                "\n".join(f"[bold]{k}[/bold]: {v}" for k, v in result.items() if k != "metadata"),
                title="SSO Connection Test",
                border_style=style,
            ))
            pause()
        elif choice == "directory":
            ok, config = run("Fetching directory configuration...", directory.get_directory_config)
            if ok:
                config = dict(config or {})
                config["type"] = DIRECTORY_TYPE_LABELS.get(config.get("type"), config.get("type"))
                show_record("Directory Configuration", config)
        elif choice == "sync":
            sync_type = questionary.select("Sync type:", choices=["full", "delta"]).ask()
            if sync_type:
                ok, result = run("Triggering sync...", directory.trigger_sync, sync_type)
                if ok:
                    console.print(f"[green]✓ {result['message']}[/green]")
                    pause()
        elif choice == "history":
            ok, history = run("Fetching sync history...", directory.list_sync_history)
            if ok:
                show_table("Directory Sync History", history,
                           [("Date", "date"), ("Type", "type"), ("Status", "status"),
                            ("Users", "usersSynced"), ("Groups", "groupsSynced")],
                           empty="No syncs recorded.")
        elif choice in ("back", None):
            break


def _show(label, title, fn):
    ok, record = run(label, fn)
    if ok:
        show_record(title, record)


def _update(org):
    console.print("\n[bold]Update Organization[/bold] [dim](leave blank to keep current value)[/dim]")
    name = ask_text("Name:")
    business_name = ask_text("Business name:")
    billing_email = ask_text("Billing email:")
    if not any([name, business_name, billing_email]):
        return
    ok, _ = run("Updating organization...", org.update_organization,
                name=name, business_name=business_name, billing_email=billing_email)
    if ok:
        console.print("[green]✓ Organization updated.[/green]")
        pause()


def _rotate(org, tenant):
    if not questionary.confirm(
        "Rotate the organization API key? The stored client secret stops working immediately.",
        default=False,
    ).ask():
        return
    ok, result = run("Rotating API key...", org.rotate_api_key)
    if not ok:
        return
    console.print(f"[green]✓ {result['message']}[/green]")
    new_secret = result.get("apiKey") or result.get("clientSecret")
    if new_secret and questionary.confirm(
        f"Save the new secret to tenant '{tenant.name}'?", default=True
    ).ask():
        from cli.session import reload_active_tenant
        from services.config_service import update_tenant

        update_tenant(tenant.name, client_secret=new_secret)
        reload_active_tenant()
        console.print("[green]✓ Tenant credentials updated.[/green]")
    pause()
