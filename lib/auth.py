import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

import requests

from .environment import Environment, resolve_identity_url
from .errors import AuthenticationError, extract_error_message

logger = logging.getLogger(__name__)

TOKEN_PATH = "/connect/token"
SCOPE = "api.organization"
# Tokens are treated as expired this many seconds before the server says so
EXPIRY_MARGIN = 60


@dataclass(frozen=True)
class Credentials:
    """Organization API key for one Bitwarden organization."""

    client_id: str
    client_secret: str
    environment: Environment = Environment.CLOUD_US
    self_hosted_url: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "environment", Environment.parse(self.environment))

    def __repr__(self) -> str:
        return f"<Credentials client_id={self.client_id!r} environment={self.environment.value}>"


@dataclass(frozen=True)
class CachedToken:
    token: str
    expires_at: float  # epoch seconds, margin already subtracted


class TokenCache:
    """Single-slot holder for the current bearer token.

    The slot is replaced whole on every write, so a reader never observes a
    token paired with another token's expiry.
    """

    def __init__(self):
        self._entry: Optional[CachedToken] = None

    def get(self) -> Optional[CachedToken]:
        return self._entry

    def set(self, entry: CachedToken) -> None:
        self._entry = entry

    def clear(self) -> None:
        self._entry = None

    def is_valid(self, now: float) -> bool:
        entry = self._entry
        return entry is not None and now < entry.expires_at


_shared_cache = TokenCache()


def shared_token_cache() -> TokenCache:
    """Return the process-wide cache, for callers that want one token per process."""
    return _shared_cache


class BitwardenAuth:
    """OAuth2 client_credentials token manager for the Bitwarden Public API.

    Tokens are fetched lazily: get_token() returns the cached token while it
    is fresh and performs a new exchange against the identity service
    otherwise. There is no background refresh.

    With single_flight=False (the default) two threads that both see an
    expired cache will both exchange, and the last write wins. Both tokens
    are valid, so this only costs a round trip. single_flight=True
    serialises the refresh path so concurrent callers share one exchange.
    """

    def __init__(
        self,
        credentials: Credentials,
        cache: Optional[TokenCache] = None,
        session: Optional[requests.Session] = None,
        clock: Callable[[], float] = time.time,
        timeout: float = 30,
        single_flight: bool = False,
    ):
        self.credentials = credentials
        self.cache = cache if cache is not None else TokenCache()
        self._session = session or requests.Session()
        self._clock = clock
        self.timeout = timeout
        self._refresh_lock = threading.Lock() if single_flight else None

    @property
    def token_url(self) -> str:
        creds = self.credentials
        return f"{resolve_identity_url(creds.environment, creds.self_hosted_url)}{TOKEN_PATH}"

    @property
    def has_cached_token(self) -> bool:
        """True when get_token() would answer from the cache without an exchange."""
        return self.cache.is_valid(self._clock())

    def get_token(self) -> str:
        """Return a valid access token, exchanging credentials if necessary."""
        entry = self.cache.get()
        if entry is not None and self._clock() < entry.expires_at:
            return entry.token

        if self._refresh_lock is None:
            return self._refresh().token

        with self._refresh_lock:
            # Another thread may have refreshed while we waited
            entry = self.cache.get()
            if entry is not None and self._clock() < entry.expires_at:
                return entry.token
            return self._refresh().token

    def invalidate(self) -> None:
        """Drop the cached token so the next get_token() exchanges again."""
        self.cache.clear()

    def _refresh(self) -> CachedToken:
        creds = self.credentials
        url = self.token_url
        logger.debug("Requesting access token from %s", url)
        try:
            resp = self._session.post(
                url,
                headers={
                    "Content-Type": "application/x-www-form-urlencoded",
                    "Accept": "application/json",
                },
                data={
                    "grant_type": "client_credentials",
                    "scope": SCOPE,
                    "client_id": creds.client_id,
                    "client_secret": creds.client_secret,
                },
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise AuthenticationError(f"Failed to obtain access token: {exc}") from exc

        if not resp.ok:
            payload = _decode(resp)
            raise AuthenticationError(
                f"Failed to obtain access token: "
                f"{extract_error_message(payload, resp.reason or 'token request rejected')}",
                status_code=resp.status_code,
                payload=payload,
            )

        data = _decode(resp)
        if not isinstance(data, dict) or not data.get("access_token"):
            raise AuthenticationError(
                "Failed to obtain access token: malformed token response",
                status_code=resp.status_code,
                payload=data,
            )

        expires_in = float(data.get("expires_in", 3600))
        entry = CachedToken(
            token=data["access_token"],
            expires_at=self._clock() + expires_in - EXPIRY_MARGIN,
        )
        self.cache.set(entry)
        logger.info("Obtained access token for %s (expires in %ds)", creds.client_id, int(expires_in))
        return entry


def _decode(resp: requests.Response):
    if not resp.content:
        return None
    try:
        return resp.json()
    except ValueError:
        return resp.text
