"""Import / export API router."""

from typing import Optional

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from api.dependencies import access_rows, get_service
from api.schemas.bitwarden import MembersCsvImport, VaultImport
from services.import_export_service import ImportExportService

router = APIRouter()


@router.post("/{tenant}/import")
def import_organization(tenant: str, req: VaultImport):
    return get_service(ImportExportService, tenant).import_organization(
        req.format, req.data, collection_id=req.collectionId
    )


@router.get("/{tenant}/export")
def export_organization(tenant: str, format: str = "json", include_attachments: Optional[bool] = None):
    return get_service(ImportExportService, tenant).export_organization(
        format, include_attachments=include_attachments
    )


@router.post("/{tenant}/members-csv")
def import_members_csv(tenant: str, req: MembersCsvImport):
    """Invite every row with an email; per-row results are returned."""
    return get_service(ImportExportService, tenant).import_members_csv(
        req.csv, default_collections=access_rows(req.defaultCollections)
    )


@router.get("/{tenant}/members-csv", response_class=PlainTextResponse)
def export_members_csv(tenant: str, include_collections: bool = False):
    return get_service(ImportExportService, tenant).export_members_csv(include_collections)["csv"]
