import questionary
from rich.console import Console

from cli.banner import render_banner
from cli.menus import ask_text, choose, get_client, pause, run, show_record, show_table

console = Console()


def secrets_menu():
    client, tenant = get_client()
    if client is None:
        return

    from services.secrets_service import SecretsService
    service = SecretsService(client, tenant_id=tenant.id)

    while True:
        render_banner()
        choice = questionary.select(
            "Secrets Manager",
            choices=[
                questionary.Choice("Secrets", value="secrets"),
                questionary.Choice("Projects", value="projects"),
                questionary.Choice("Service Accounts", value="accounts"),
                questionary.Separator(),
                questionary.Choice("← Back", value="back"),
            ],
            use_indicator=True,
        ).ask()

        if choice == "secrets":
            _secrets_menu(service)
        elif choice == "projects":
            _projects_menu(service)
        elif choice == "accounts":
            _accounts_menu(service)
        elif choice in ("back", None):
            break


# ------------------------------------------------------------------
# Secrets
# ------------------------------------------------------------------

def _secrets_menu(service):
    while True:
        render_banner()
        choice = questionary.select(
            "Secrets",
            choices=[
                questionary.Choice("List Secrets", value="list"),
                questionary.Choice("Show Secret", value="get"),
                questionary.Choice("Create Secret", value="create"),
                questionary.Choice("Update Secret Value", value="update"),
                questionary.Choice("Delete Secret", value="delete"),
                questionary.Separator(),
                questionary.Choice("← Back", value="back"),
            ],
        ).ask()

        if choice == "list":
            ok, secrets = run("Fetching secrets...", service.list_secrets)
            if ok:
                show_table("Secrets", secrets, [("Key", "key"), ("Note", "note"), ("ID", "id")],
                           empty="No secrets found.")
        elif choice == "get":
            secret = _pick(service.list_secrets, "Select secret:", lambda s: s.get("key") or s.get("id"))
            if secret:
                ok, full = run("Fetching secret...", service.get_secret, secret["id"])
                if ok:
                    show_record(full.get("key") or secret["id"], full)
        elif choice == "create":
            key = ask_text("Key:")
            value = questionary.password("Value:").ask() if key else None
            if key and value:
                note = ask_text("Note (optional):")
                project_id = ask_text("Project ID (optional):")
                ok, result = run("Creating secret...", service.create_secret, key, value,
                                 note=note, project_id=project_id)
                if ok:
                    console.print(f"[green]✓ Created secret {key}[/green] [dim]{(result or {}).get('id', '')}[/dim]")
                    pause()
        elif choice == "update":
            secret = _pick(service.list_secrets, "Select secret:", lambda s: s.get("key") or s.get("id"))
            value = questionary.password("New value:").ask() if secret else None
            if value:
                ok, _ = run("Updating secret...", service.update_secret, secret["id"], value=value)
                if ok:
                    console.print("[green]✓ Secret updated.[/green]")
                    pause()
        elif choice == "delete":
            secret = _pick(service.list_secrets, "Select secret:", lambda s: s.get("key") or s.get("id"))
            if secret and questionary.confirm(f"Delete secret '{secret.get('key')}'?", default=False).ask():
                ok, _ = run("Deleting secret...", service.delete_secret, secret["id"])
                if ok:
                    console.print("[green]✓ Secret deleted.[/green]")
                    pause()
        elif choice in ("back", None):
            break


# ------------------------------------------------------------------
# Projects
# ------------------------------------------------------------------

def _projects_menu(service):
    while True:
        render_banner()
        choice = questionary.select(
            "Projects",
            choices=[
                questionary.Choice("List Projects", value="list"),
                questionary.Choice("Project Secrets", value="secrets"),
                questionary.Choice("Project Service Accounts", value="accounts"),
                questionary.Choice("Create Project", value="create"),
                questionary.Choice("Rename Project", value="rename"),
                questionary.Choice("Delete Project", value="delete"),
                questionary.Separator(),
                questionary.Choice("← Back", value="back"),
            ],
        ).ask()

        if choice == "list":
            ok, projects = run("Fetching projects...", service.list_projects)
            if ok:
                show_table("Projects", projects, [("Name", "name"), ("ID", "id")], empty="No projects found.")
        elif choice == "secrets":
            project = _pick(service.list_projects, "Select project:", lambda p: p.get("name"))
            if project:
                ok, secrets = run("Fetching secrets...", service.list_project_secrets, project["id"])
                if ok:
                    show_table(f"Secrets in {project.get('name')}", secrets, [("Key", "key"), ("ID", "id")])
        elif choice == "accounts":
            project = _pick(service.list_projects, "Select project:", lambda p: p.get("name"))
            if project:
                ok, accounts = run("Fetching service accounts...",
                                   service.list_project_service_accounts, project["id"])
                if ok:
                    show_table(f"Service accounts in {project.get('name')}", accounts,
                               [("Name", "name"), ("ID", "id")])
        elif choice == "create":
            name = ask_text("Project name:")
            if name:
                ok, _ = run("Creating project...", service.create_project, name)
                if ok:
                    console.print(f"[green]✓ Created project {name}[/green]")
                    pause()
        elif choice == "rename":
            project = _pick(service.list_projects, "Select project:", lambda p: p.get("name"))
            name = ask_text("New name:") if project else None
            if name:
                ok, _ = run("Renaming project...", service.update_project, project["id"], name)
                if ok:
                    console.print("[green]✓ Project renamed.[/green]")
                    pause()
        elif choice == "delete":
            project = _pick(service.list_projects, "Select project:", lambda p: p.get("name"))
            if project and questionary.confirm(f"Delete project '{project.get('name')}'?", default=False).ask():
                ok, _ = run("Deleting project...", service.delete_project, project["id"])
                if ok:
                    console.print("[green]✓ Project deleted.[/green]")
                    pause()
        elif choice in ("back", None):
            break


# ------------------------------------------------------------------
# Service accounts
# ------------------------------------------------------------------

def _accounts_menu(service):
    while True:
        render_banner()
        choice = questionary.select(
            "Service Accounts",
            choices=[
                questionary.Choice("List Service Accounts", value="list"),
                questionary.Choice("Create Service Account", value="create"),
                questionary.Choice("Delete Service Account", value="delete"),
                questionary.Separator(),
                questionary.Choice("List Access Tokens", value="tokens"),
                questionary.Choice("Create Access Token", value="create_token"),
                questionary.Choice("Revoke Access Token", value="revoke_token"),
                questionary.Separator(),
                questionary.Choice("← Back", value="back"),
            ],
        ).ask()

        if choice == "list":
            ok, accounts = run("Fetching service accounts...", service.list_service_accounts)
            if ok:
                show_table("Service Accounts", accounts, [("Name", "name"), ("ID", "id")],
                           empty="No service accounts found.")
        elif choice == "create":
            name = ask_text("Service account name:")
            if name:
                ok, _ = run("Creating service account...", service.create_service_account, name)
                if ok:
                    console.print(f"[green]✓ Created service account {name}[/green]")
                    pause()
        elif choice == "delete":
            account = _pick_account(service)
            if account and questionary.confirm(f"Delete '{account.get('name')}'?", default=False).ask():
                ok, _ = run("Deleting service account...", service.delete_service_account, account["id"])
                if ok:
                    console.print("[green]✓ Service account deleted.[/green]")
                    pause()
        elif choice == "tokens":
            account = _pick_account(service)
            if account:
                ok, tokens = run("Fetching tokens...", service.list_access_tokens, account["id"])
                if ok:
                    show_table(f"Access tokens of {account.get('name')}", tokens,
                               [("Name", "name"), ("Expires", "expireAt"), ("ID", "id")])
        elif choice == "create_token":
            account = _pick_account(service)
            name = ask_text("Token name:") if account else None
            if name:
                expire_at = ask_text("Expires at (ISO date, optional):")
                ok, result = run("Creating token...", service.create_access_token, account["id"], name,
                                 expire_at=expire_at)
                if ok:
                    show_record("New Access Token (shown once)", result)
        elif choice == "revoke_token":
            account = _pick_account(service)
            if account:
                ok, tokens = run("Fetching tokens...", service.list_access_tokens, account["id"])
                token = choose("Select token:", tokens, lambda t: t.get("name") or t.get("id")) if ok else None
                if token and questionary.confirm(f"Revoke token '{token.get('name')}'?", default=False).ask():
                    ok, _ = run("Revoking token...", service.revoke_access_token, account["id"], token["id"])
                    if ok:
                        console.print("[green]✓ Token revoked.[/green]")
                        pause()
        elif choice in ("back", None):
            break


def _pick(list_fn, title, label):
    ok, items = run("Loading...", list_fn)
    if not ok:
        return None
    return choose(title, items, label)


def _pick_account(service):
    return _pick(service.list_service_accounts, "Select service account:", lambda a: a.get("name") or a.get("id"))
