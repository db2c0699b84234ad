"""bw-config banner: logo, version, and screen-clear/redraw helper.

Call render_banner() at the top of every menu loop instead of a bare
console.clear() so the logo is always visible above the prompt.
"""

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.text import Text

console = Console()

VERSION = "0.1.0"

_LOGO_TEXT = (
    "    __                                     _____      \n"
    "   / /_ _      __      _________  ____  / __(_)___ _\n"
    "  / __ \\ | /| / /_____/ ___/ __ \\/ __ \\/ /_/ / __ `/\n"
    " / /_/ / |/ |/ /_____/ /__/ /_/ / / / / __/ / /_/ / \n"
    "/_.___/|__/|__/      \\___/\\____/_/ /_/_/ /_/\\__, /  \n"
    "                                           /____/"
)


def _build_banner_panel():
    from cli.session import get_active_tenant

    tenant = get_active_tenant()
    subtitle = (
        f"Active: {tenant.name}  |  v{VERSION}  |  Bitwarden Organization Automation"
        if tenant
        else f"v{VERSION}  |  Bitwarden Organization Automation"
    )

    _lines = _LOGO_TEXT.split("\n")
    _w = max(len(l) for l in _lines)
    _logo = "\n".join(l.ljust(_w) for l in _lines)

    return Panel(
        Align(Text(_logo, style="bold blue", no_wrap=True), align="center"),
        subtitle=subtitle,
        border_style="blue",
        padding=(0, 4),
    )


def render_banner() -> None:
    """Clear the screen and redraw the logo panel."""
    console.clear()
    console.print(_build_banner_panel())
