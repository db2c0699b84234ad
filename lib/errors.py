"""Error taxonomy for the Bitwarden Public API transport.

Every failure raised by lib/ is a BitwardenError. API failures carry an
ErrorKind so callers (the request executor's 401 handling, with_retry, the
REST layer) can branch on it without inspecting raw status codes.
"""

import json
from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorKind(str, Enum):
    RATE_LIMITED = "rate_limited"
    UNAUTHORIZED = "unauthorized"
    NOT_RETRYABLE = "not_retryable"
    OTHER = "other"


# Statuses that will not succeed on a plain re-attempt
NON_RETRYABLE_STATUSES = frozenset({400, 401, 403, 404})


def classify_status(status_code: Optional[int]) -> ErrorKind:
    if status_code == 429:
        return ErrorKind.RATE_LIMITED
    if status_code == 401:
        return ErrorKind.UNAUTHORIZED
    if status_code in (400, 403, 404):
        return ErrorKind.NOT_RETRYABLE
    return ErrorKind.OTHER


class BitwardenError(Exception):
    """Base class for everything raised by the transport."""


class ConfigurationError(BitwardenError, ValueError):
    """Credentials or environment settings are incomplete."""


class AuthenticationError(BitwardenError):
    """The client_credentials token exchange failed."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        payload: Any = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload


class BitwardenAPIError(BitwardenError):
    """A request against /public failed.

    kind is derived from status_code; status_code is None for transport
    failures (DNS, connection reset, timeout).
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        payload: Any = None,
        validation_errors: Optional[Dict[str, List[str]]] = None,
        method: Optional[str] = None,
        endpoint: Optional[str] = None,
        kind: Optional[ErrorKind] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload
        self.validation_errors = validation_errors or {}
        self.method = method
        self.endpoint = endpoint
        self.kind = kind or classify_status(status_code)

    @property
    def is_rate_limited(self) -> bool:
        return self.kind is ErrorKind.RATE_LIMITED

    @property
    def is_unauthorized(self) -> bool:
        return self.kind is ErrorKind.UNAUTHORIZED

    def __repr__(self) -> str:
        return (
            f"<BitwardenAPIError kind={self.kind.value} status={self.status_code} "
            f"{self.method} {self.endpoint}: {self.message!r}>"
        )


def extract_error_message(payload: Any, default: str = "An unknown error occurred") -> str:
    """Pull a human-readable message out of an error response body.

    Accepts a decoded JSON body or raw text. Text that parses as JSON is
    treated like a decoded body.
    """
    if payload is None or payload == "":
        return default
    if isinstance(payload, (bytes, bytearray)):
        payload = payload.decode("utf-8", errors="replace")
    if isinstance(payload, str):
        try:
            parsed = json.loads(payload)
        except ValueError:
            return payload
        if not isinstance(parsed, dict):
            return payload
        payload = parsed
    if isinstance(payload, dict):
        return payload.get("message") or payload.get("error") or default
    return default


def extract_validation_errors(payload: Any) -> Dict[str, List[str]]:
    if not isinstance(payload, dict):
        return {}
    raw = payload.get("validationErrors") or {}
    if not isinstance(raw, dict):
        return {}
    errors: Dict[str, List[str]] = {}
    for field, msgs in raw.items():
        if isinstance(msgs, str):
            errors[field] = [msgs]
        elif isinstance(msgs, list):
            errors[field] = [str(m) for m in msgs]
    return errors


def format_error(error: Any) -> str:
    """Render an error for display, appending field-level validation errors.

        "The model state is invalid. - email: Email is required.; type: Invalid"
    """
    message = getattr(error, "message", None) or (str(error) if error is not None else "")
    if not message:
        return "Unknown error occurred"
    validation = getattr(error, "validation_errors", None) or {}
    if validation:
        detail = "; ".join(f"{field}: {', '.join(msgs)}" for field, msgs in validation.items())
        message = f"{message} - {detail}"
    return message
