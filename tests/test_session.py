from cli import session
from services import config_service


def setup_function():
    session.clear_active_tenant()


def test_client_is_reused_until_tenant_changes():
    acme = config_service.add_tenant("acme", "organization.1", "s")
    other = config_service.add_tenant("other", "organization.2", "s")

    session.set_active_tenant(acme)
    client = session.get_active_client()
    assert session.get_active_client() is client

    session.set_active_tenant(other)
    assert session.get_active_client() is not client


def test_reload_picks_up_new_credentials():
    acme = config_service.add_tenant("acme", "organization.1", "old")
    session.set_active_tenant(acme)
    before = session.get_active_client()

    config_service.update_tenant("acme", client_secret="new")
    reloaded = session.reload_active_tenant()

    assert config_service.decrypt_secret(reloaded.client_secret_enc) == "new"
    after = session.get_active_client()
    assert after is not before
    assert after.auth.credentials.client_secret == "new"


def test_no_active_tenant_means_no_client():
    assert session.get_active_tenant() is None
    assert session.get_active_client() is None
