"""Vault import/export and bulk member CSV import/export.

Member CSV files use lower-cased headers on import (``email``, ``type``,
``accessall``, ``externalid``); rows without an email are skipped. Each
row is invited independently, so one failing row does not stop the rest.
"""

import csv
import io
from typing import Any, Dict, List, Optional

from lib.errors import BitwardenError, format_error
from lib.formatting import collection_access
from services import audit_service
from services.base_service import BaseService

MEMBER_CSV_COLUMNS = ["id", "email", "name", "type", "status", "twoFactorEnabled", "accessAll", "externalId"]

DEFAULT_MEMBER_TYPE = 2  # User


def _csv_value(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return value


def parse_members_csv(csv_text: str) -> List[Dict[str, str]]:
    """Rows of a member CSV as dicts keyed by lower-cased header; blank cells dropped."""
    reader = csv.reader(io.StringIO(csv_text.strip()))
    try:
        headers = [h.strip().lower() for h in next(reader)]
    except StopIteration:
        return []
    rows = []
    for values in reader:
        row = {h: v.strip() for h, v in zip(headers, values) if v.strip()}
        if row.get("email"):
            rows.append(row)
    return rows


class ImportExportService(BaseService):
    RESOURCE = "import_export"

    # ------------------------------------------------------------------
    # Vault
    # ------------------------------------------------------------------

    def import_organization(self, format: str, data: str, collection_id: Optional[str] = None) -> Dict:
        body = {"format": format, "data": data}
        if collection_id:
            body["collectionId"] = collection_id
        with self.audited(
            "import_organization", "CREATE", resource_id=collection_id,
            details={"format": format, "bytes": len(data)},
        ):
            result = self.client.import_organization(body)
        return {"success": True, "message": "Import completed successfully", **(result or {})}

    def export_organization(self, format: str, include_attachments: Optional[bool] = None) -> Dict:
        query: Dict[str, Any] = {"format": format}
        if include_attachments is not None:
            query["includeAttachments"] = "true" if include_attachments else "false"
        with self.audited("export_organization", "READ", details=dict(query)):
            result = self.client.export_organization(query)
        return {"success": True, "format": format, "data": result}

    # ------------------------------------------------------------------
    # Members CSV
    # ------------------------------------------------------------------

    def import_members_csv(self, csv_text: str, default_collections: Optional[List[Dict]] = None) -> Dict:
        members = parse_members_csv(csv_text)
        collections = collection_access(default_collections) if default_collections else None

        results: List[Dict] = []
        for member in members:
            email = member["email"]
            try:
                body: Dict[str, Any] = {
                    "email": email,
                    "type": int(member["type"]) if member.get("type") else DEFAULT_MEMBER_TYPE,
                    "accessAll": member.get("accessall", "").lower() == "true",
                }
                if member.get("externalid"):
                    body["externalId"] = member["externalid"]
                if collections:
                    body["collections"] = collections
                created = self.client.create_member(body) or {}
                results.append({"success": True, "email": email, "memberId": created.get("id")})
            except (BitwardenError, ValueError) as exc:
                results.append({"success": False, "email": email, "error": format_error(exc)})

        succeeded = sum(1 for r in results if r["success"])
        summary = {
            "totalProcessed": len(members),
            "successCount": succeeded,
            "failureCount": len(results) - succeeded,
            "results": results,
        }
        self._audit_import(summary)
        return summary

    def _audit_import(self, summary: Dict) -> None:
        audit_service.log(
            resource="member",
            operation="import_members_csv",
            action="CREATE",
            status="SUCCESS" if summary["failureCount"] == 0 else "PARTIAL",
            tenant_id=self.tenant_id,
            details={k: summary[k] for k in ("totalProcessed", "successCount", "failureCount")},
        )

    def export_members_csv(self, include_collections: bool = False) -> Dict:
        with self.audited("export_members_csv", "READ") as details:
            members = self.client.list_members()
            details["count"] = len(members)

        columns = MEMBER_CSV_COLUMNS + (["collections"] if include_collections else [])
        buf = io.StringIO()
        writer = csv.writer(buf, lineterminator="\n")
        writer.writerow(columns)
        for member in members:
            row = [_csv_value(member.get(col)) for col in MEMBER_CSV_COLUMNS]
            if include_collections:
                row.append(";".join(c.get("id", "") for c in (member.get("collections") or [])))
            writer.writerow(row)

        return {"success": True, "totalMembers": len(members), "csv": buf.getvalue().rstrip("\n")}
