#!/usr/bin/env python3
"""bw-config: interactive TUI for the Bitwarden Public API.

Installed usage:  bw-config
Development:      pip install -e .  then  bw-config
"""


def main():
    from db.database import init_db
    from cli.banner import render_banner
    from cli.menus import select_tenant
    from cli.menus.main_menu import main_menu
    from cli.session import set_active_tenant
    from lib.log_setup import setup_logging

    setup_logging()
    init_db()
    render_banner()

    # Select active tenant at startup (skipped if none are configured yet)
    from services.config_service import list_tenants
    if list_tenants():
        tenant = select_tenant()
        if tenant:
            set_active_tenant(tenant)

    main_menu()


if __name__ == "__main__":
    main()
