"""Organization, SSO and directory API router."""

from typing import Optional

from fastapi import APIRouter

from api.dependencies import get_service
from api.schemas.bitwarden import DirectorySyncRequest, DirectoryUpdate, OrganizationUpdate, SsoUpdate
from services.directory_service import DirectoryService
from services.organization_service import OrganizationService
from services.sso_service import SsoService

router = APIRouter()

_OPTIONAL_ORG_FIELDS = ("businessAddress1", "businessAddress2", "businessAddress3",
                        "businessCountry", "businessTaxNumber")


@router.get("/{tenant}/organization")
def get_organization(tenant: str):
    return get_service(OrganizationService, tenant).get_organization()


@router.put("/{tenant}/organization")
def update_organization(tenant: str, req: OrganizationUpdate):
    optional = {k: getattr(req, k) for k in _OPTIONAL_ORG_FIELDS if k in req.model_fields_set}
    return get_service(OrganizationService, tenant).update_organization(
        name=req.name,
        business_name=req.businessName,
        billing_email=req.billingEmail,
        identifier=req.identifier,
        **optional,
    )


@router.get("/{tenant}/organization/billing")
def get_billing(tenant: str):
    return get_service(OrganizationService, tenant).get_billing()


@router.get("/{tenant}/organization/subscription")
def get_subscription(tenant: str):
    return get_service(OrganizationService, tenant).get_subscription()


@router.get("/{tenant}/organization/license")
def get_license(tenant: str):
    return get_service(OrganizationService, tenant).get_license()


@router.post("/{tenant}/organization/api-key")
def rotate_api_key(tenant: str):
    """Rotate the API key. The stored tenant secret must be updated afterwards."""
    return get_service(OrganizationService, tenant).rotate_api_key()


# ------------------------------------------------------------------
# SSO
# ------------------------------------------------------------------

@router.get("/{tenant}/sso")
def get_sso_config(tenant: str):
    return get_service(SsoService, tenant).get_sso_config()


@router.put("/{tenant}/sso")
def update_sso_config(tenant: str, req: SsoUpdate):
    return get_service(SsoService, tenant).update_sso_config(req.enabled, req.type, **req.fields)


@router.get("/{tenant}/sso/metadata")
def get_sso_metadata(tenant: str):
    return get_service(SsoService, tenant).get_sso_metadata()


@router.post("/{tenant}/sso/test")
def test_sso_connection(tenant: str):
    return get_service(SsoService, tenant).test_sso_connection()


# ------------------------------------------------------------------
# Directory
# ------------------------------------------------------------------

@router.get("/{tenant}/directory")
def get_directory_config(tenant: str):
    return get_service(DirectoryService, tenant).get_directory_config()


@router.put("/{tenant}/directory")
def update_directory_config(tenant: str, req: DirectoryUpdate):
    return get_service(DirectoryService, tenant).update_directory_config(req.enabled, req.type, **req.fields)


@router.post("/{tenant}/directory/sync")
def trigger_sync(tenant: str, req: DirectorySyncRequest):
    return get_service(DirectoryService, tenant).trigger_sync(req.type)


@router.get("/{tenant}/directory/sync-history")
def list_sync_history(
    tenant: str,
    start: Optional[str] = None,
    end: Optional[str] = None,
    return_all: bool = True,
    limit: int = 50,
):
    return get_service(DirectoryService, tenant).list_sync_history(
        start=start, end=end, return_all=return_all, limit=limit
    )
