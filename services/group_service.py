"""Group operations and group membership."""

import logging
from typing import Dict, List, Optional

from lib.errors import BitwardenAPIError, ErrorKind
from lib.formatting import collection_access
from services.base_service import DEFAULT_LIMIT, UNSET, BaseService

logger = logging.getLogger(__name__)


class GroupService(BaseService):
    RESOURCE = "group"

    def list_groups(self, return_all: bool = True, limit: int = DEFAULT_LIMIT) -> List[Dict]:
        with self.audited("list_groups", "READ") as details:
            result = self.client.list_groups(return_all=return_all, limit=limit)
            details["count"] = len(result)
        return result

    def get_group(self, group_id: str) -> Dict:
        return self.client.get_group(group_id)

    def create_group(
        self,
        name: str,
        access_all: bool = False,
        external_id: Optional[str] = None,
        collections: Optional[List[Dict]] = None,
    ) -> Dict:
        body: Dict = {"name": name, "accessAll": access_all, "collections": collection_access(collections)}
        if external_id:
            body["externalId"] = external_id
        with self.audited("create_group", "CREATE", resource_name=name) as details:
            result = self.client.create_group(body)
            details["resource_id"] = (result or {}).get("id")
        return result

    def update_group(
        self,
        group_id: str,
        name: Optional[str] = None,
        access_all: Optional[bool] = None,
        external_id=UNSET,
        collections: Optional[List[Dict]] = None,
    ) -> Dict:
        with self.audited("update_group", "UPDATE", resource_id=group_id, resource_name=name):
            current = self.client.get_group(group_id)
            body = {
                "name": name if name is not None else current.get("name"),
                "accessAll": access_all if access_all is not None else current.get("accessAll"),
                "externalId": (external_id or None) if external_id is not UNSET else current.get("externalId"),
                "collections": (
                    collection_access(collections) if collections is not None
                    else (current.get("collections") or [])
                ),
            }
            return self.client.update_group(group_id, body)

    def delete_group(self, group_id: str) -> Dict:
        with self.audited("delete_group", "DELETE", resource_id=group_id):
            self.client.delete_group(group_id)
        return {"success": True, "groupId": group_id}

    # ------------------------------------------------------------------
    # Membership
    # ------------------------------------------------------------------

    def list_group_members(self, group_id: str) -> List[Dict]:
        """Full member records for a group. Members the API rejects with
        400/403/404 are returned as {"id": ..., "error": "Member not found"};
        any other failure propagates."""
        members = []
        for member_id in self.client.get_group_member_ids(group_id):
            try:
                members.append(self.client.get_member(member_id))
            except BitwardenAPIError as exc:
                if exc.kind is not ErrorKind.NOT_RETRYABLE:
                    raise
                logger.info("Skipping member %s of group %s: %s", member_id, group_id, exc)
                members.append({"id": member_id, "error": "Member not found"})
        return members

    def add_group_members(self, group_id: str, member_ids: List[str]) -> Dict:
        with self.audited(
            "add_group_members", "UPDATE", resource_id=group_id,
            details={"added": list(member_ids)},
        ):
            current = self.client.get_group_member_ids(group_id)
            merged = list(dict.fromkeys([*current, *member_ids]))
            self.client.set_group_member_ids(group_id, merged)
        return {"success": True, "groupId": group_id, "memberIds": merged}

    def remove_group_members(self, group_id: str, member_ids: List[str]) -> Dict:
        with self.audited(
            "remove_group_members", "UPDATE", resource_id=group_id,
            details={"removed": list(member_ids)},
        ):
            drop = set(member_ids)
            remaining = [m for m in self.client.get_group_member_ids(group_id) if m not in drop]
            self.client.set_group_member_ids(group_id, remaining)
        return {"success": True, "groupId": group_id, "memberIds": remaining}

    # ------------------------------------------------------------------
    # Collection access
    # ------------------------------------------------------------------

    def list_group_collections(self, group_id: str) -> List[Dict]:
        return self.client.get_group(group_id).get("collections") or []

    def update_group_collections(self, group_id: str, collections: List[Dict]) -> Dict:
        with self.audited(
            "update_group_collections", "UPDATE", resource_id=group_id,
            details={"collections": len(collections)},
        ):
            current = self.client.get_group(group_id)
            body = {
                "name": current.get("name"),
                "accessAll": current.get("accessAll"),
                "externalId": current.get("externalId"),
                "collections": collection_access(collections),
            }
            return self.client.update_group(group_id, body)
