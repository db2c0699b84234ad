"""Active tenant for the running TUI.

The selected TenantConfig and the BitwardenClient built for it live here,
so every menu reuses one client (and one token) until the tenant changes.
Only cli/ touches this module; lib/ and services/ must not depend on it.
"""

from typing import Optional

from db.models import TenantConfig
from lib.bitwarden_client import BitwardenClient

_active_tenant: Optional[TenantConfig] = None
_client: Optional[BitwardenClient] = None


def get_active_tenant() -> Optional[TenantConfig]:
    return _active_tenant


def set_active_tenant(tenant: Optional[TenantConfig]) -> None:
    global _active_tenant, _client
    if tenant is None or _active_tenant is None or tenant.id != _active_tenant.id:
        _client = None
    _active_tenant = tenant


def get_active_client() -> Optional[BitwardenClient]:
    """Client for the active tenant, built on first use."""
    global _client
    if _active_tenant is None:
        return None
    if _client is None:
        from services.config_service import build_client
        _client = build_client(_active_tenant)
    return _client


def reload_active_tenant() -> Optional[TenantConfig]:
    """Re-read the active tenant after its stored credentials changed."""
    global _active_tenant, _client
    if _active_tenant is not None:
        from services.config_service import get_tenant
        _active_tenant = get_tenant(_active_tenant.name)
        _client = None
    return _active_tenant


def clear_active_tenant() -> None:
    set_active_tenant(None)
