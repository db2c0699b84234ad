"""Per-request tenant resolution and error mapping for the REST layer."""

from typing import Any, Dict, List, Optional

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse

from lib.errors import AuthenticationError, BitwardenAPIError, ConfigurationError, format_error


def get_client(tenant_name: str):
    """Return (BitwardenClient, tenant) for a tenant name, or raise 404."""
    from services.config_service import build_client, get_tenant

    tenant = get_tenant(tenant_name)
    if not tenant:
        raise HTTPException(status_code=404, detail=f"Tenant '{tenant_name}' not found")
    return build_client(tenant), tenant


def get_service(service_cls, tenant_name: str):
    client, tenant = get_client(tenant_name)
    return service_cls(client, tenant_id=tenant.id)


def access_rows(entries: Optional[List[Any]]) -> Optional[List[Dict]]:
    return [e.model_dump() for e in entries] if entries is not None else None


def _body(error: Exception, extra: Optional[Dict] = None) -> Dict:
    body = {"detail": format_error(error)}
    body.update(extra or {})
    return body


async def bitwarden_api_error_handler(request: Request, exc: BitwardenAPIError):
    return JSONResponse(
        status_code=exc.status_code or 502,
        content=_body(exc, {"kind": exc.kind.value, "validationErrors": exc.validation_errors or None}),
    )


async def authentication_error_handler(request: Request, exc: AuthenticationError):
    return JSONResponse(status_code=401, content=_body(exc))


async def configuration_error_handler(request: Request, exc: ConfigurationError):
    return JSONResponse(status_code=400, content=_body(exc))


async def value_error_handler(request: Request, exc: ValueError):
    return JSONResponse(status_code=400, content=_body(exc))


EXCEPTION_HANDLERS = {
    BitwardenAPIError: bitwarden_api_error_handler,
    AuthenticationError: authentication_error_handler,
    ConfigurationError: configuration_error_handler,
    ValueError: value_error_handler,
}
