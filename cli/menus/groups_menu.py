import questionary
from rich.console import Console

from cli.banner import render_banner
from cli.menus import ask_ids, ask_text, choose, get_client, pause, run, show_table
from lib.formatting import member_status_label

console = Console()


def groups_menu():
    client, tenant = get_client()
    if client is None:
        return

    from services.group_service import GroupService
    service = GroupService(client, tenant_id=tenant.id)

    while True:
        render_banner()
        choice = questionary.select(
            "Groups",
            choices=[
                questionary.Choice("List Groups", value="list"),
                questionary.Choice("List Group Members", value="members"),
                questionary.Choice("List Group Collections", value="collections"),
                questionary.Separator(),
                questionary.Choice("Create Group", value="create"),
                questionary.Choice("Rename Group", value="rename"),
                questionary.Choice("Add Members", value="add"),
                questionary.Choice("Remove Members", value="remove"),
                questionary.Choice("Delete Group", value="delete"),
                questionary.Separator(),
                questionary.Choice("← Back", value="back"),
            ],
            use_indicator=True,
        ).ask()

        if choice == "list":
            ok, groups = run("Fetching groups...", service.list_groups)
            if ok:
                show_table("Groups", groups,
                           [("Name", "name"), ("Access All", lambda g: "yes" if g.get("accessAll") else "no"),
                            ("External ID", "externalId"), ("ID", "id")],
                           empty="No groups found.")
        elif choice == "members":
            group = _pick(service)
            if group:
                ok, members = run("Fetching members...", service.list_group_members, group["id"])
                if ok:
                    show_table(f"Members of {group.get('name')}", members,
                               [("Email", lambda m: m.get("email") or m.get("error")),
                                ("Status", lambda m: member_status_label(m.get("status")) if "status" in m else None),
                                ("ID", "id")])
        elif choice == "collections":
            group = _pick(service)
            if group:
                ok, collections = run("Fetching collections...", service.list_group_collections, group["id"])
                if ok:
                    show_table(f"Collections of {group.get('name')}", collections,
                               [("Collection ID", "id"), ("Read Only", "readOnly"),
                                ("Hide Passwords", "hidePasswords"), ("Manage", "manage")])
        elif choice == "create":
            name = ask_text("Group name:")
            if name:
                access_all = questionary.confirm("Access all collections?", default=False).ask()
                ok, result = run("Creating group...", service.create_group, name, access_all=bool(access_all))
                if ok:
                    console.print(f"[green]✓ Created group [bold]{name}[/bold][/green] "
                                  f"[dim]{(result or {}).get('id', '')}[/dim]")
                    pause()
        elif choice == "rename":
            group = _pick(service)
            if group:
                name = ask_text("New name:", default=group.get("name") or "")
                if name:
                    ok, _ = run("Updating group...", service.update_group, group["id"], name=name)
                    if ok:
                        console.print("[green]✓ Group updated.[/green]")
                        pause()
        elif choice in ("add", "remove"):
            group = _pick(service)
            member_ids = ask_ids("Member IDs:") if group else []
            if member_ids:
                fn = service.add_group_members if choice == "add" else service.remove_group_members
                ok, result = run("Updating membership...", fn, group["id"], member_ids)
                if ok:
                    console.print(f"[green]✓ Group now has {len(result['memberIds'])} member(s).[/green]")
                    pause()
        elif choice == "delete":
            group = _pick(service)
            if group and questionary.confirm(f"Delete group '{group.get('name')}'?", default=False).ask():
                ok, _ = run("Deleting group...", service.delete_group, group["id"])
                if ok:
                    console.print("[green]✓ Group deleted.[/green]")
                    pause()
        elif choice in ("back", None):
            break


def _pick(service):
    ok, groups = run("Fetching groups...", service.list_groups)
    if not ok:
        return None
    return choose("Select group:", groups, lambda g: g.get("name") or g.get("id"))
