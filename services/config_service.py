"""Tenant configuration management with encrypted secret storage.

A tenant is one Bitwarden organization: its environment, optional
self-hosted base URL, and organization API key. The client_secret is
encrypted with Fernet before it is stored.

Key resolution order:
  1. BWCONFIG_SECRET_KEY environment variable (explicit override)
  2. Key file at ~/.config/bw-config/secret.key (auto-created on first run)
"""

import os
import sys
import threading
from pathlib import Path
from typing import Dict, List, Optional

from cryptography.fernet import Fernet, InvalidToken

from db.database import get_session
from db.models import TenantConfig
from lib.auth import BitwardenAuth, Credentials
from lib.bitwarden_client import BitwardenClient
from lib.environment import Environment

_KEY_FILE = Path.home() / ".config" / "bw-config" / "secret.key"

# One token manager per tenant for the life of the process
_auth_by_tenant: Dict[int, BitwardenAuth] = {}
_auth_lock = threading.Lock()


def _chmod_600(path: Path) -> None:
    """Set file permissions to 600 on platforms that support it."""
    if sys.platform != "win32":
        path.chmod(0o600)


def _get_fernet() -> Fernet:
    key = os.environ.get("BWCONFIG_SECRET_KEY")
    if key:
        return Fernet(key.encode())

    if _KEY_FILE.exists():
        return Fernet(_KEY_FILE.read_text().strip().encode())

    # First run: generate and persist
    return Fernet(generate_key().encode())


def generate_key() -> str:
    """Generate a new Fernet encryption key and persist it to the key file."""
    key = Fernet.generate_key().decode()
    _KEY_FILE.parent.mkdir(parents=True, exist_ok=True)
    _KEY_FILE.write_text(key)
    _chmod_600(_KEY_FILE)
    return key


def encrypt_secret(value: str) -> str:
    return _get_fernet().encrypt(value.encode()).decode()


def decrypt_secret(value: str) -> str:
    try:
        return _get_fernet().decrypt(value.encode()).decode()
    except InvalidToken as e:
        raise ValueError(
            "Failed to decrypt client secret — BWCONFIG_SECRET_KEY may be wrong or the record is corrupted."
        ) from e


def _normalise_url(url: Optional[str]) -> Optional[str]:
    return url.strip().rstrip("/") if url and url.strip() else None


def add_tenant(
    name: str,
    client_id: str,
    client_secret: str,
    environment: str = Environment.CLOUD_US.value,
    self_hosted_url: Optional[str] = None,
    notes: Optional[str] = None,
) -> TenantConfig:
    """Add a new tenant configuration to the database."""
    env = Environment.parse(environment)
    self_hosted_url = _normalise_url(self_hosted_url)
    if env is Environment.SELF_HOSTED and not self_hosted_url:
        raise ValueError("Self-hosted URL is required for self-hosted environment")
    with get_session() as session:
        tenant = TenantConfig(
            name=name,
            environment=env.value,
            self_hosted_url=self_hosted_url if env is Environment.SELF_HOSTED else None,
            client_id=client_id.strip(),
            client_secret_enc=encrypt_secret(client_secret),
            notes=notes,
        )
        session.add(tenant)
        session.flush()
        session.refresh(tenant)
        return tenant


def get_tenant(name: str) -> Optional[TenantConfig]:
    """Retrieve an active tenant by name."""
    with get_session() as session:
        return session.query(TenantConfig).filter_by(name=name, is_active=True).first()


def list_tenants() -> List[TenantConfig]:
    """Return all active tenants."""
    with get_session() as session:
        return session.query(TenantConfig).filter_by(is_active=True).order_by(TenantConfig.name).all()


def update_tenant(
    name: str,
    client_id: Optional[str] = None,
    client_secret: Optional[str] = None,
    environment: Optional[str] = None,
    self_hosted_url: Optional[str] = None,
    notes: Optional[str] = None,
) -> Optional[TenantConfig]:
    """Update fields on an existing tenant. Only provided fields are changed."""
    with get_session() as session:
        tenant = session.query(TenantConfig).filter_by(name=name, is_active=True).first()
        if not tenant:
            return None
        if environment is not None:
            tenant.environment = Environment.parse(environment).value
        if self_hosted_url is not None:
            tenant.self_hosted_url = _normalise_url(self_hosted_url)
        if tenant.environment == Environment.SELF_HOSTED.value:
            if not tenant.self_hosted_url:
                raise ValueError("Self-hosted URL is required for self-hosted environment")
        else:
            tenant.self_hosted_url = None
        if client_id is not None:
            tenant.client_id = client_id.strip()
        if client_secret is not None:
            tenant.client_secret_enc = encrypt_secret(client_secret)
        if notes is not None:
            tenant.notes = notes
        session.flush()
        session.refresh(tenant)
        forget_auth(tenant.id)
        return tenant


def deactivate_tenant(name: str) -> bool:
    """Soft-delete a tenant (sets is_active=False)."""
    with get_session() as session:
        tenant = session.query(TenantConfig).filter_by(name=name, is_active=True).first()
        if not tenant:
            return False
        tenant.is_active = False
        forget_auth(tenant.id)
        return True


# ------------------------------------------------------------------
# Client factory
# ------------------------------------------------------------------

def build_credentials(tenant: TenantConfig) -> Credentials:
    return Credentials(
        client_id=tenant.client_id,
        client_secret=decrypt_secret(tenant.client_secret_enc),
        environment=Environment.parse(tenant.environment),
        self_hosted_url=tenant.self_hosted_url,
    )


def get_auth(tenant: TenantConfig) -> BitwardenAuth:
    """Return the process-wide token manager for a tenant, creating it on first use."""
    with _auth_lock:
        auth = _auth_by_tenant.get(tenant.id)
        if auth is None:
            auth = BitwardenAuth(build_credentials(tenant))
            _auth_by_tenant[tenant.id] = auth
        return auth


def forget_auth(tenant_id: int) -> None:
    """Drop the cached token manager (after credential changes or key rotation)."""
    with _auth_lock:
        _auth_by_tenant.pop(tenant_id, None)


def build_client(tenant: TenantConfig) -> BitwardenClient:
    return BitwardenClient(get_auth(tenant))
