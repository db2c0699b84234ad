import pytest

from lib.environment import Environment, resolve_api_url, resolve_identity_url
from lib.errors import ConfigurationError


def test_cloud_us():
    assert resolve_identity_url("cloudUS") == "https://identity.bitwarden.com"
    assert resolve_api_url(Environment.CLOUD_US) == "https://api.bitwarden.com"


def test_cloud_eu():
    assert resolve_identity_url("cloudEU") == "https://identity.bitwarden.eu"
    assert resolve_api_url("cloudEU") == "https://api.bitwarden.eu"


def test_self_hosted_strips_trailing_slash():
    assert resolve_identity_url("selfHosted", "https://vault.example.com/") == "https://vault.example.com/identity"
    assert resolve_api_url("selfHosted", "https://vault.example.com") == "https://vault.example.com/api"


def test_cloud_ignores_self_hosted_url():
    assert resolve_api_url("cloudUS", "https://vault.example.com") == "https://api.bitwarden.com"


@pytest.mark.parametrize("url", [None, "", "   "])
def test_self_hosted_requires_url(url):
    with pytest.raises(ConfigurationError, match="Self-hosted URL is required"):
        resolve_identity_url("selfHosted", url)


def test_unknown_environment():
    with pytest.raises(ConfigurationError):
        Environment.parse("cloudMars")
