import questionary
from rich.console import Console

from cli.banner import render_banner
from cli.menus import ask_text, get_client, pause, run, show_record, show_table
from lib.formatting import POLICY_TYPE_LABELS, policy_type_label

console = Console()

_POLICY_CHOICES = [questionary.Choice(f"{val:>2}  {label}", value=val) for val, label in POLICY_TYPE_LABELS.items()]

# Prompts for the policy types with structured data: (key, prompt, kind)
_DATA_PROMPTS = {
    1: [("minComplexity", "Minimum complexity (0-4):", int),
        ("minLength", "Minimum length:", int),
        ("requireUpper", "Require uppercase?", bool),
        ("requireLower", "Require lowercase?", bool),
        ("requireNumbers", "Require numbers?", bool),
        ("requireSpecial", "Require special characters?", bool)],
    2: [("defaultType", "Default type (password/passphrase):", str),
        ("minLength", "Minimum length:", int),
        ("minNumbers", "Minimum numbers:", int),
        ("minSpecial", "Minimum special characters:", int),
        ("useUpper", "Use uppercase?", bool),
        ("useLower", "Use lowercase?", bool),
        ("useNumbers", "Use numbers?", bool),
        ("useSpecial", "Use special characters?", bool)],
    7: [("disableHideEmail", "Disable hiding email on Sends?", bool)],
    9: [("minutes", "Maximum vault timeout (minutes):", int)],
}


def policies_menu():
    client, tenant = get_client()
    if client is None:
        return

    from services.policy_service import PolicyService
    service = PolicyService(client, tenant_id=tenant.id)

    while True:
        render_banner()
        choice = questionary.select(
            "Policies",
            choices=[
                questionary.Choice("List Policies", value="list"),
                questionary.Choice("Policy Details", value="get"),
                questionary.Choice("Update Policy", value="update"),
                questionary.Separator(),
                questionary.Choice("← Back", value="back"),
            ],
            use_indicator=True,
        ).ask()

        if choice == "list":
            ok, policies = run("Fetching policies...", service.list_policies)
            if ok:
                show_table("Policies", policies,
                           [("Policy", lambda p: policy_type_label(p.get("type"))),
                            ("Enabled", lambda p: "[green]yes[/green]" if p.get("enabled") else "no"),
                            ("Data", "data")],
                           empty="No policies found.")
        elif choice == "get":
            policy_type = questionary.select("Policy:", choices=_POLICY_CHOICES).ask()
            if policy_type is not None:
                ok, policy = run("Fetching policy...", service.get_policy, policy_type)
                if ok:
                    show_record(policy_type_label(policy_type), policy)
        elif choice == "update":
            _update(service)
        elif choice in ("back", None):
            break


def _ask_value(prompt, kind):
    if kind is bool:
        return questionary.confirm(prompt, default=False).ask()
    raw = ask_text(prompt)
    if raw is None:
        return None
    if kind is int:
        try:
            return int(raw)
        except ValueError:
            console.print(f"[yellow]Ignoring non-numeric value {raw!r}[/yellow]")
            return None
    return raw


def _update(service):
    policy_type = questionary.select("Policy:", choices=_POLICY_CHOICES).ask()
    if policy_type is None:
        return
    enabled = questionary.confirm(f"Enable '{policy_type_label(policy_type)}'?", default=True).ask()
    if enabled is None:
        return

    data = {}
    if enabled and policy_type in _DATA_PROMPTS:
        for key, prompt, kind in _DATA_PROMPTS[policy_type]:
            value = _ask_value(prompt, kind)
            if value is not None:
                data[key] = value

    ok, _ = run("Updating policy...", service.update_policy, policy_type, enabled, data or None)
    if ok:
        console.print(f"[green]✓ {policy_type_label(policy_type)} "
                      f"{'enabled' if enabled else 'disabled'}.[/green]")
        pause()
