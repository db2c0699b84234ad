"""Collection operations, including member/group access management.

Member access to a collection lives on the member record, so adding or
removing a member rewrites that member's collections list.
"""

from typing import Dict, List, Optional

from lib.formatting import group_access
from services.base_service import DEFAULT_LIMIT, UNSET, BaseService


class CollectionService(BaseService):
    RESOURCE = "collection"

    def list_collections(self, return_all: bool = True, limit: int = DEFAULT_LIMIT) -> List[Dict]:
        with self.audited("list_collections", "READ") as details:
            result = self.client.list_collections(return_all=return_all, limit=limit)
            details["count"] = len(result)
        return result

    def get_collection(self, collection_id: str) -> Dict:
        return self.client.get_collection(collection_id)

    def create_collection(
        self,
        name: str,
        external_id: Optional[str] = None,
        groups: Optional[List[Dict]] = None,
    ) -> Dict:
        body: Dict = {"name": name, "groups": group_access(groups)}
        if external_id:
            body["externalId"] = external_id
        with self.audited("create_collection", "CREATE", resource_name=name) as details:
            result = self.client.create_collection(body)
            details["resource_id"] = (result or {}).get("id")
        return result

    def update_collection(
        self,
        collection_id: str,
        name: Optional[str] = None,
        external_id=UNSET,
        groups: Optional[List[Dict]] = None,
    ) -> Dict:
        with self.audited("update_collection", "UPDATE", resource_id=collection_id, resource_name=name):
            current = self.client.get_collection(collection_id)
            body = {
                "name": name if name is not None else current.get("name"),
                "externalId": (external_id or None) if external_id is not UNSET else current.get("externalId"),
                "groups": group_access(groups) if groups is not None else (current.get("groups") or []),
            }
            return self.client.update_collection(collection_id, body)

    def delete_collection(self, collection_id: str) -> Dict:
        with self.audited("delete_collection", "DELETE", resource_id=collection_id):
            self.client.delete_collection(collection_id)
        return {"success": True, "collectionId": collection_id}

    # ------------------------------------------------------------------
    # Member access
    # ------------------------------------------------------------------

    def list_collection_members(self, collection_id: str) -> List[Dict]:
        """Members that can see the collection: accessAll members plus explicit grants."""
        members = self.client.list_members()
        return [
            m for m in members
            if m.get("accessAll")
            or any(c.get("id") == collection_id for c in (m.get("collections") or []))
        ]

    def add_member_to_collection(
        self,
        collection_id: str,
        member_id: str,
        read_only: bool = False,
        hide_passwords: bool = False,
        manage: bool = False,
    ) -> Dict:
        entry = {"id": collection_id, "readOnly": read_only, "hidePasswords": hide_passwords, "manage": manage}
        with self.audited(
            "add_member_to_collection", "UPDATE", resource_id=collection_id,
            details={"member_id": member_id, "readOnly": read_only,
                     "hidePasswords": hide_passwords, "manage": manage},
        ):
            member = self.client.get_member(member_id)
            collections = list(member.get("collections") or [])
            for i, c in enumerate(collections):
                if c.get("id") == collection_id:
                    collections[i] = entry
                    break
            else:
                collections.append(entry)
            return self.client.update_member(member_id, _member_body(member, collections))

    def remove_member_from_collection(self, collection_id: str, member_id: str) -> Dict:
        with self.audited(
            "remove_member_from_collection", "UPDATE", resource_id=collection_id,
            details={"member_id": member_id},
        ):
            member = self.client.get_member(member_id)
            collections = [c for c in (member.get("collections") or []) if c.get("id") != collection_id]
            return self.client.update_member(member_id, _member_body(member, collections))

    # ------------------------------------------------------------------
    # Group access
    # ------------------------------------------------------------------

    def list_collection_groups(self, collection_id: str) -> List[Dict]:
        return self.client.get_collection(collection_id).get("groups") or []

    def update_collection_groups(self, collection_id: str, groups: List[Dict]) -> Dict:
        with self.audited(
            "update_collection_groups", "UPDATE", resource_id=collection_id,
            details={"groups": len(groups)},
        ):
            current = self.client.get_collection(collection_id)
            body = {
                "name": current.get("name"),
                "externalId": current.get("externalId"),
                "groups": group_access(groups),
            }
            return self.client.update_collection(collection_id, body)


def _member_body(member: Dict, collections: List[Dict]) -> Dict:
    return {
        "type": member.get("type"),
        "accessAll": member.get("accessAll"),
        "externalId": member.get("externalId"),
        "collections": collections,
    }
