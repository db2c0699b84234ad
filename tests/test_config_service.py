import pytest

from db.database import get_session
from db.models import TenantConfig
from lib.environment import Environment
from services import config_service


def test_secret_is_encrypted_at_rest():
    tenant = config_service.add_tenant("acme", "organization.1", "top-secret")

    assert tenant.client_secret_enc != "top-secret"
    assert config_service.decrypt_secret(tenant.client_secret_enc) == "top-secret"


def test_decrypt_with_wrong_key_fails(monkeypatch):
    token = config_service.encrypt_secret("x")
    monkeypatch.setenv("BWCONFIG_SECRET_KEY", config_service.Fernet.generate_key().decode())
    with pytest.raises(ValueError, match="Failed to decrypt"):
        config_service.decrypt_secret(token)


def test_self_hosted_requires_url():
    with pytest.raises(ValueError, match="Self-hosted URL is required"):
        config_service.add_tenant("onprem", "organization.1", "s", environment="selfHosted")


def test_self_hosted_url_is_normalised():
    tenant = config_service.add_tenant(
        "onprem", "organization.1", "s", environment="selfHosted", self_hosted_url=" https://vault.local/ "
    )
    assert tenant.self_hosted_url == "https://vault.local"


def test_cloud_tenant_drops_self_hosted_url():
    tenant = config_service.add_tenant("eu", "organization.1", "s", environment="cloudEU",
                                       self_hosted_url="https://ignored")
    assert tenant.environment == "cloudEU"
    assert tenant.self_hosted_url is None


def test_list_get_and_deactivate():
    config_service.add_tenant("b", "organization.2", "s")
    config_service.add_tenant("a", "organization.1", "s")

    assert [t.name for t in config_service.list_tenants()] == ["a", "b"]
    assert config_service.deactivate_tenant("a") is True
    assert config_service.get_tenant("a") is None
    assert config_service.deactivate_tenant("a") is False
    with get_session() as session:
        assert session.query(TenantConfig).count() == 2


def test_update_tenant_changes_only_given_fields():
    config_service.add_tenant("acme", "organization.1", "old", notes="keep")
    updated = config_service.update_tenant("acme", client_secret="new")

    assert updated.notes == "keep"
    assert config_service.decrypt_secret(updated.client_secret_enc) == "new"
    assert config_service.update_tenant("missing", notes="x") is None


def test_update_tenant_to_self_hosted_requires_url():
    config_service.add_tenant("acme", "organization.1", "s")

    with pytest.raises(ValueError, match="Self-hosted URL is required"):
        config_service.update_tenant("acme", environment="selfHosted", notes="changed")
    stored = config_service.get_tenant("acme")
    assert stored.environment == "cloudUS"
    assert stored.notes is None


def test_update_tenant_switches_environment_with_url():
    config_service.add_tenant("acme", "organization.1", "s")

    updated = config_service.update_tenant(
        "acme", environment="selfHosted", self_hosted_url="https://vault.local/"
    )
    assert updated.environment == "selfHosted"
    assert updated.self_hosted_url == "https://vault.local"

    back = config_service.update_tenant("acme", environment="cloudEU")
    assert back.environment == "cloudEU"
    assert back.self_hosted_url is None


def test_build_credentials():
    tenant = config_service.add_tenant(
        "onprem", "organization.9", "pw", environment="selfHosted", self_hosted_url="https://vault.local"
    )
    creds = config_service.build_credentials(tenant)
    assert creds.client_id == "organization.9"
    assert creds.client_secret == "pw"
    assert creds.environment is Environment.SELF_HOSTED
    assert creds.self_hosted_url == "https://vault.local"


def test_auth_is_shared_per_tenant_until_credentials_change():
    tenant = config_service.add_tenant("acme", "organization.1", "s")
    first = config_service.get_auth(tenant)

    assert config_service.get_auth(tenant) is first
    assert config_service.build_client(tenant).auth is first

    config_service.update_tenant("acme", client_secret="rotated")
    assert config_service.get_auth(config_service.get_tenant("acme")) is not first
