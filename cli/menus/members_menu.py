import questionary
from rich.console import Console

from cli.banner import render_banner
from cli.menus import ask_ids, ask_text, choose, get_client, pause, run, show_record, show_table
from lib.formatting import MEMBER_TYPE_LABELS, member_status_label, member_type_label

console = Console()

_TYPE_CHOICES = [questionary.Choice(label, value=val) for val, label in MEMBER_TYPE_LABELS.items()]

_COLUMNS = [
    ("Email", "email"),
    ("Name", "name"),
    ("Type", lambda m: member_type_label(m.get("type"))),
    ("Status", lambda m: member_status_label(m.get("status"))),
    ("2FA", lambda m: "yes" if m.get("twoFactorEnabled") else "no"),
    ("ID", "id"),
]


def members_menu():
    client, tenant = get_client()
    if client is None:
        return

    from services.member_service import MemberService
    service = MemberService(client, tenant_id=tenant.id)

    while True:
        render_banner()
        choice = questionary.select(
            "Members",
            choices=[
                questionary.Choice("List Members", value="list"),
                questionary.Choice("Member Details", value="get"),
                questionary.Separator(),
                questionary.Choice("Invite Member", value="invite"),
                questionary.Choice("Change Member Type", value="update"),
                questionary.Choice("Set Member Groups", value="groups"),
                questionary.Separator(),
                questionary.Choice("Reinvite", value="reinvite"),
                questionary.Choice("Confirm", value="confirm"),
                questionary.Choice("Revoke", value="revoke"),
                questionary.Choice("Restore", value="restore"),
                questionary.Choice("Remove Member", value="delete"),
                questionary.Separator(),
                questionary.Choice("← Back", value="back"),
            ],
            use_indicator=True,
        ).ask()

        if choice == "list":
            ok, members = run("Fetching members...", service.list_members)
            if ok:
                show_table("Members", members, _COLUMNS, empty="No members found.")
        elif choice == "get":
            member = _pick_member(service)
            if member:
                show_record(member.get("email") or member["id"], member)
        elif choice == "invite":
            _invite(service)
        elif choice == "update":
            _change_type(service)
        elif choice == "groups":
            _set_groups(service)
        elif choice in ("reinvite", "confirm", "revoke", "restore", "delete"):
            _lifecycle(service, choice)
        elif choice in ("back", None):
            break


def _pick_member(service):
    ok, members = run("Fetching members...", service.list_members)
    if not ok:
        return None
    return choose("Select member:", members, lambda m: f"{m.get('email')}  ({member_status_label(m.get('status'))})")


def _invite(service):
    email = ask_text("Email address:")
    if not email:
        return
    member_type = questionary.select("Member type:", choices=_TYPE_CHOICES, default=_TYPE_CHOICES[2]).ask()
    if member_type is None:
        return
    access_all = questionary.confirm("Access all collections?", default=False).ask()
    external_id = ask_text("External ID (optional):")

    ok, result = run("Inviting member...", service.invite_member,
                     email, member_type=member_type, access_all=bool(access_all), external_id=external_id)
    if ok:
        console.print(f"[green]✓ Invited [bold]{email}[/bold][/green] [dim]{(result or {}).get('id', '')}[/dim]")
        pause()


def _change_type(service):
    member = _pick_member(service)
    if not member:
        return
    member_type = questionary.select("New member type:", choices=_TYPE_CHOICES).ask()
    if member_type is None:
        return
    ok, _ = run("Updating member...", service.update_member, member["id"], member_type=member_type)
    if ok:
        console.print(f"[green]✓ {member.get('email')} is now {member_type_label(member_type)}[/green]")
        pause()


def _set_groups(service):
    member = _pick_member(service)
    if not member:
        return
    group_ids = ask_ids("Group IDs:")
    if not questionary.confirm(
        f"Replace the groups of {member.get('email')} with {len(group_ids)} group(s)?", default=False
    ).ask():
        return
    ok, _ = run("Updating groups...", service.update_member_groups, member["id"], group_ids)
    if ok:
        console.print("[green]✓ Groups updated.[/green]")
        pause()


def _lifecycle(service, action):
    member = _pick_member(service)
    if not member:
        return
    if action in ("revoke", "delete") and not questionary.confirm(
        f"{action.capitalize()} {member.get('email')}?", default=False
    ).ask():
        return
    fn = getattr(service, f"{action}_member")
    ok, _ = run(f"{action.capitalize()}...", fn, member["id"])
    if ok:
        console.print(f"[green]✓ {action.capitalize()} done for {member.get('email')}[/green]")
        pause()
