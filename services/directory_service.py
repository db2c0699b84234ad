"""Directory connector configuration and sync."""

from typing import Any, Dict, List, Optional

from lib.formatting import DIRECTORY_TYPE_LABELS
from services.base_service import DEFAULT_LIMIT, BaseService

# Keys accepted in the "configuration" block for every directory type
_COMMON_KEYS = ("ldapDirectory", "syncSettings", "filter")

_TYPE_KEYS = {
    0: ("tenantId", "applicationId", "secret"),  # Azure AD
    1: ("orgUrl", "token"),  # Okta
    2: ("clientId", "clientSecret", "region"),  # OneLogin
    3: ("domain", "adminUser", "serviceAccountKey"),  # GSuite
}


def directory_body(enabled: bool, directory_type: int, fields: Dict[str, Any]) -> Dict[str, Any]:
    body: Dict[str, Any] = {
        "enabled": enabled,
        "type": directory_type,
        "syncUsers": fields.get("syncUsers", True),
        "syncGroups": fields.get("syncGroups", True),
        "overwriteExisting": fields.get("overwriteExisting", False),
    }
    keys = _COMMON_KEYS + _TYPE_KEYS.get(directory_type, ())
    configuration = {k: fields[k] for k in keys if fields.get(k)}
    if configuration:
        body["configuration"] = configuration
    return body


class DirectoryService(BaseService):
    RESOURCE = "directory"

    def get_directory_config(self) -> Dict:
        return self.client.get_directory_config()

    def update_directory_config(self, enabled: bool, directory_type: int, **fields: Any) -> Dict:
        body = directory_body(enabled, directory_type, fields)
        with self.audited(
            "update_directory_config", "UPDATE",
            resource_name=DIRECTORY_TYPE_LABELS.get(directory_type, str(directory_type)),
            details={"enabled": enabled, "fields": sorted((body.get("configuration") or {}).keys())},
        ):
            return self.client.update_directory_config(body)

    def trigger_sync(self, sync_type: str = "full") -> Dict:
        with self.audited("trigger_sync", "UPDATE", details={"syncType": sync_type}):
            result = self.client.trigger_directory_sync(sync_type)
        return {
            "success": True,
            "message": "Directory sync triggered successfully",
            "syncType": sync_type,
            **(result or {}),
        }

    def list_sync_history(
        self,
        start: Optional[str] = None,
        end: Optional[str] = None,
        return_all: bool = True,
        limit: int = DEFAULT_LIMIT,
    ) -> List[Dict]:
        query = {k: v for k, v in (("start", start), ("end", end)) if v}
        return self.client.list_directory_sync_history(params=query, return_all=return_all, limit=limit)
