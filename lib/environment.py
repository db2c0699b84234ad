"""Bitwarden environment → identity / API base URL resolution."""

from enum import Enum
from typing import Optional, Union

from .errors import ConfigurationError

CLOUD_US_IDENTITY_URL = "https://identity.bitwarden.com"
CLOUD_US_API_URL = "https://api.bitwarden.com"
CLOUD_EU_IDENTITY_URL = "https://identity.bitwarden.eu"
CLOUD_EU_API_URL = "https://api.bitwarden.eu"


class Environment(str, Enum):
    CLOUD_US = "cloudUS"
    CLOUD_EU = "cloudEU"
    SELF_HOSTED = "selfHosted"

    @classmethod
    def parse(cls, value: Union["Environment", str]) -> "Environment":
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise ConfigurationError(
                f"Unknown Bitwarden environment {value!r} "
                f"(expected one of: {', '.join(e.value for e in cls)})"
            ) from None

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS = {
    Environment.CLOUD_US: "Cloud US",
    Environment.CLOUD_EU: "Cloud EU",
    Environment.SELF_HOSTED: "Self-Hosted",
}


def _self_hosted_base(self_hosted_url: Optional[str]) -> str:
    if not self_hosted_url or not self_hosted_url.strip():
        raise ConfigurationError("Self-hosted URL is required for self-hosted environment")
    return self_hosted_url.strip().rstrip("/")


def resolve_identity_url(
    environment: Union[Environment, str], self_hosted_url: Optional[str] = None
) -> str:
    env = Environment.parse(environment)
    if env is Environment.CLOUD_EU:
        return CLOUD_EU_IDENTITY_URL
    if env is Environment.SELF_HOSTED:
        return f"{_self_hosted_base(self_hosted_url)}/identity"
    return CLOUD_US_IDENTITY_URL


def resolve_api_url(
    environment: Union[Environment, str], self_hosted_url: Optional[str] = None
) -> str:
    env = Environment.parse(environment)
    if env is Environment.CLOUD_EU:
        return CLOUD_EU_API_URL
    if env is Environment.SELF_HOSTED:
        return f"{_self_hosted_base(self_hosted_url)}/api"
    return CLOUD_US_API_URL
