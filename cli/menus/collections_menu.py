import questionary
from rich.console import Console

from cli.banner import render_banner
from cli.menus import ask_text, choose, get_client, pause, run, show_table
from lib.formatting import member_type_label

console = Console()


def collections_menu():
    client, tenant = get_client()
    if client is None:
        return

    from services.collection_service import CollectionService
    service = CollectionService(client, tenant_id=tenant.id)

    while True:
        render_banner()
        choice = questionary.select(
            "Collections",
            choices=[
                questionary.Choice("List Collections", value="list"),
                questionary.Choice("List Collection Members", value="members"),
                questionary.Choice("List Collection Groups", value="groups"),
                questionary.Separator(),
                questionary.Choice("Create Collection", value="create"),
                questionary.Choice("Rename Collection", value="rename"),
                questionary.Choice("Grant Member Access", value="add_member"),
                questionary.Choice("Revoke Member Access", value="remove_member"),
                questionary.Choice("Delete Collection", value="delete"),
                questionary.Separator(),
                questionary.Choice("← Back", value="back"),
            ],
            use_indicator=True,
        ).ask()

        if choice == "list":
            ok, collections = run("Fetching collections...", service.list_collections)
            if ok:
                show_table("Collections", collections,
                           [("ID", "id"), ("External ID", "externalId"),
                            ("Groups", lambda c: len(c.get("groups") or []))],
                           empty="No collections found.")
        elif choice == "members":
            collection = _pick(service)
            if collection:
                ok, members = run("Fetching members...", service.list_collection_members, collection["id"])
                if ok:
                    show_table("Collection Members", members,
                               [("Email", "email"), ("Type", lambda m: member_type_label(m.get("type"))),
                                ("Access All", lambda m: "yes" if m.get("accessAll") else "no")])
        elif choice == "groups":
            collection = _pick(service)
            if collection:
                ok, groups = run("Fetching groups...", service.list_collection_groups, collection["id"])
                if ok:
                    show_table("Collection Groups", groups,
                               [("Group ID", "id"), ("Read Only", "readOnly"),
                                ("Hide Passwords", "hidePasswords"), ("Manage", "manage")])
        elif choice == "create":
            name = ask_text("Collection name (encrypted name string):")
            if name:
                external_id = ask_text("External ID (optional):")
                ok, result = run("Creating collection...", service.create_collection, name, external_id=external_id)
                if ok:
                    console.print(f"[green]✓ Created collection[/green] [dim]{(result or {}).get('id', '')}[/dim]")
                    pause()
        elif choice == "rename":
            collection = _pick(service)
            if collection:
                name = ask_text("New name:")
                if name:
                    ok, _ = run("Updating collection...", service.update_collection, collection["id"], name=name)
                    if ok:
                        console.print("[green]✓ Collection updated.[/green]")
                        pause()
        elif choice == "add_member":
            _grant(service)
        elif choice == "remove_member":
            collection = _pick(service)
            member_id = collection and ask_text("Member ID:")
            if member_id:
                ok, _ = run("Updating member...", service.remove_member_from_collection, collection["id"], member_id)
                if ok:
                    console.print("[green]✓ Access removed.[/green]")
                    pause()
        elif choice == "delete":
            collection = _pick(service)
            if collection and questionary.confirm(f"Delete collection {collection['id']}?", default=False).ask():
                ok, _ = run("Deleting collection...", service.delete_collection, collection["id"])
                if ok:
                    console.print("[green]✓ Collection deleted.[/green]")
                    pause()
        elif choice in ("back", None):
            break


def _pick(service):
    ok, collections = run("Fetching collections...", service.list_collections)
    if not ok:
        return None
    return choose("Select collection:", collections,
                  lambda c: f"{c.get('externalId') or c.get('id')}")


def _grant(service):
    collection = _pick(service)
    if not collection:
        return
    member_id = ask_text("Member ID:")
    if not member_id:
        return
    perms = questionary.checkbox(
        "Permissions:",
        choices=[
            questionary.Choice("Read only", value="read_only"),
            questionary.Choice("Hide passwords", value="hide_passwords"),
            questionary.Choice("Can manage", value="manage"),
        ],
    ).ask() or []
    ok, _ = run(
        "Updating member...", service.add_member_to_collection,
        collection["id"], member_id,
        read_only="read_only" in perms,
        hide_passwords="hide_passwords" in perms,
        manage="manage" in perms,
    )
    if ok:
        console.print("[green]✓ Access granted.[/green]")
        pause()
