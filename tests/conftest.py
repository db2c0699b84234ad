from unittest.mock import MagicMock

import pytest
from cryptography.fernet import Fernet

from lib.auth import BitwardenAuth, CachedToken, Credentials, TokenCache
from lib.bitwarden_client import BitwardenClient


@pytest.fixture(autouse=True)
def isolated_db(tmp_path, monkeypatch):
    """Every test gets its own SQLite file and encryption key."""
    monkeypatch.setenv("BWCONFIG_DB_URL", f"sqlite:///{tmp_path / 'test.db'}")
    monkeypatch.setenv("BWCONFIG_SECRET_KEY", Fernet.generate_key().decode())
    from db.database import init_db
    from services import config_service

    init_db()
    config_service._auth_by_tenant.clear()
    yield


@pytest.fixture
def credentials():
    return Credentials(client_id="organization.1111", client_secret="s3cret")


@pytest.fixture
def clock():
    now = {"t": 1_000_000.0}
    fn = MagicMock(side_effect=lambda: now["t"])
    fn.now = now
    return fn


@pytest.fixture
def http():
    """Fake requests.Session shared by auth and client."""
    return MagicMock()


@pytest.fixture
def auth(credentials, http, clock):
    cache = TokenCache()
    cache.set(CachedToken("cached-token", clock.now["t"] + 600))
    return BitwardenAuth(credentials, cache=cache, session=http, clock=clock)


@pytest.fixture
def client(auth, http):
    return BitwardenClient(auth, session=http)


@pytest.fixture
def api():
    """Mocked BitwardenClient for service tests."""
    return MagicMock(spec=BitwardenClient)
