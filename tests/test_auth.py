import threading
from unittest.mock import MagicMock

import pytest
import requests

from lib.auth import BitwardenAuth, CachedToken, Credentials, TokenCache, shared_token_cache
from lib.errors import AuthenticationError
from tests.helpers import make_response, token_response


def test_fresh_cached_token_makes_no_request(auth, http):
    assert auth.get_token() == "cached-token"
    http.post.assert_not_called()


def test_expired_token_triggers_one_exchange(credentials, http, clock):
    cache = TokenCache()
    cache.set(CachedToken("old", clock.now["t"] - 1))
    http.post.return_value = token_response("new", expires_in=3600)
    auth = BitwardenAuth(credentials, cache=cache, session=http, clock=clock)

    assert auth.get_token() == "new"
    assert http.post.call_count == 1
    assert cache.get().expires_at == clock.now["t"] + 3600 - 60


def test_exchange_posts_form_to_identity(credentials, http, clock):
    http.post.return_value = token_response()
    BitwardenAuth(credentials, session=http, clock=clock).get_token()

    url = http.post.call_args.args[0]
    kwargs = http.post.call_args.kwargs
    assert url == "https://identity.bitwarden.com/connect/token"
    assert kwargs["data"] == {
        "grant_type": "client_credentials",
        "scope": "api.organization",
        "client_id": "organization.1111",
        "client_secret": "s3cret",
    }
    assert kwargs["headers"]["Content-Type"] == "application/x-www-form-urlencoded"


def test_self_hosted_token_url(http, clock):
    creds = Credentials("organization.1", "x", environment="selfHosted", self_hosted_url="https://vault.local/")
    assert BitwardenAuth(creds, session=http, clock=clock).token_url == "https://vault.local/identity/connect/token"


def test_token_cached_until_margin(credentials, http, clock):
    http.post.side_effect = [token_response("a", expires_in=120), token_response("b", expires_in=120)]
    auth = BitwardenAuth(credentials, session=http, clock=clock)

    assert auth.get_token() == "a"
    clock.now["t"] += 59
    assert auth.get_token() == "a"
    clock.now["t"] += 1  # now == expires_at, so no longer valid
    assert auth.get_token() == "b"
    assert http.post.call_count == 2


def test_missing_expires_in_defaults_to_an_hour(credentials, http, clock):
    http.post.return_value = make_response(200, {"access_token": "t"})
    auth = BitwardenAuth(credentials, session=http, clock=clock)
    auth.get_token()
    assert auth.cache.get().expires_at == clock.now["t"] + 3600 - 60


def test_rejected_exchange_raises_and_caches_nothing(credentials, http, clock):
    http.post.return_value = make_response(400, {"error": "invalid_client"}, reason="Bad Request")
    auth = BitwardenAuth(credentials, session=http, clock=clock)

    with pytest.raises(AuthenticationError) as exc_info:
        auth.get_token()
    assert exc_info.value.status_code == 400
    assert "invalid_client" in str(exc_info.value)
    assert auth.cache.get() is None


def test_network_failure_raises_authentication_error(credentials, http, clock):
    http.post.side_effect = requests.ConnectionError("boom")
    auth = BitwardenAuth(credentials, session=http, clock=clock)
    with pytest.raises(AuthenticationError, match="boom"):
        auth.get_token()
    assert not auth.has_cached_token


def test_response_without_access_token_is_an_error(credentials, http, clock):
    http.post.return_value = make_response(200, {"token_type": "Bearer"})
    with pytest.raises(AuthenticationError, match="malformed"):
        BitwardenAuth(credentials, session=http, clock=clock).get_token()


def test_invalidate_forces_new_exchange(auth, http):
    http.post.return_value = token_response("fresh")
    auth.invalidate()
    assert not auth.has_cached_token
    assert auth.get_token() == "fresh"


def test_repr_hides_secret(credentials):
    assert "s3cret" not in repr(credentials)


def test_shared_cache_is_one_instance():
    assert shared_token_cache() is shared_token_cache()


def test_single_flight_serialises_refresh(credentials, clock):
    http = MagicMock()
    started = threading.Event()
    release = threading.Event()

    def slow_post(*args, **kwargs):
        started.set()
        release.wait(timeout=5)
        return token_response("shared")

    http.post.side_effect = slow_post
    auth = BitwardenAuth(credentials, session=http, clock=clock, single_flight=True)

    results = []
    first = threading.Thread(target=lambda: results.append(auth.get_token()))
    first.start()
    started.wait(timeout=5)
    second = threading.Thread(target=lambda: results.append(auth.get_token()))
    second.start()
    release.set()
    first.join(timeout=5)
    second.join(timeout=5)

    assert results == ["shared", "shared"]
    assert http.post.call_count == 1
