"""Organization member operations.

Updates are read-modify-write: the current member is fetched and only the
supplied fields are replaced, because PUT /members/{id} overwrites the
whole record.
"""

from typing import Dict, List, Optional

from lib.formatting import collection_access, is_valid_email, member_type_label
from services.base_service import DEFAULT_LIMIT, UNSET, BaseService


class MemberService(BaseService):
    RESOURCE = "member"

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_members(self, return_all: bool = True, limit: int = DEFAULT_LIMIT) -> List[Dict]:
        with self.audited("list_members", "READ") as details:
            result = self.client.list_members(return_all=return_all, limit=limit)
            details["count"] = len(result)
        return result

    def get_member(self, member_id: str) -> Dict:
        return self.client.get_member(member_id)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def invite_member(
        self,
        email: str,
        member_type: int = 2,
        access_all: bool = False,
        external_id: Optional[str] = None,
        collections: Optional[List[Dict]] = None,
    ) -> Dict:
        if not is_valid_email(email):
            raise ValueError(f"Invalid email address: {email!r}")
        body: Dict = {"email": email, "type": member_type, "accessAll": access_all}
        if external_id:
            body["externalId"] = external_id
        if collections:
            body["collections"] = collection_access(collections)

        with self.audited(
            "invite_member", "CREATE", resource_name=email,
            details={"type": member_type_label(member_type)},
        ) as details:
            result = self.client.create_member(body)
            details["resource_id"] = (result or {}).get("id")
        return result

    def update_member(
        self,
        member_id: str,
        member_type: Optional[int] = None,
        access_all: Optional[bool] = None,
        external_id=UNSET,
        collections: Optional[List[Dict]] = None,
    ) -> Dict:
        """Update a member, keeping current values for fields not supplied.

        external_id="" or None clears the external ID.
        """
        with self.audited("update_member", "UPDATE", resource_id=member_id):
            current = self.client.get_member(member_id)
            body = {
                "type": member_type if member_type is not None else current.get("type"),
                "accessAll": access_all if access_all is not None else current.get("accessAll"),
                "externalId": (external_id or None) if external_id is not UNSET else current.get("externalId"),
                "collections": (
                    collection_access(collections) if collections is not None
                    else current.get("collections")
                ),
            }
            return self.client.update_member(member_id, body)

    def delete_member(self, member_id: str) -> Dict:
        with self.audited("delete_member", "DELETE", resource_id=member_id):
            self.client.delete_member(member_id)
        return {"success": True, "memberId": member_id}

    def reinvite_member(self, member_id: str) -> Dict:
        with self.audited("reinvite_member", "UPDATE", resource_id=member_id):
            self.client.reinvite_member(member_id)
        return {"success": True, "memberId": member_id, "action": "reinvited"}

    def confirm_member(self, member_id: str) -> Dict:
        with self.audited("confirm_member", "UPDATE", resource_id=member_id):
            self.client.confirm_member(member_id)
        return {"success": True, "memberId": member_id, "action": "confirmed"}

    def revoke_member(self, member_id: str) -> Dict:
        with self.audited("revoke_member", "UPDATE", resource_id=member_id):
            self.client.revoke_member(member_id)
        return {"success": True, "memberId": member_id, "action": "revoked"}

    def restore_member(self, member_id: str) -> Dict:
        with self.audited("restore_member", "UPDATE", resource_id=member_id):
            self.client.restore_member(member_id)
        return {"success": True, "memberId": member_id, "action": "restored"}

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------

    def update_member_groups(self, member_id: str, group_ids: List[str]) -> Dict:
        with self.audited(
            "update_member_groups", "UPDATE", resource_id=member_id,
            details={"group_ids": list(group_ids)},
        ):
            self.client.update_member_group_ids(member_id, list(group_ids))
        return {"success": True, "memberId": member_id, "groupIds": list(group_ids)}

    def update_member_collections(self, member_id: str, collections: List[Dict]) -> Dict:
        """Replace a member's collection access, keeping type/accessAll/externalId."""
        with self.audited(
            "update_member_collections", "UPDATE", resource_id=member_id,
            details={"collections": len(collections)},
        ):
            current = self.client.get_member(member_id)
            body = {
                "type": current.get("type"),
                "accessAll": current.get("accessAll"),
                "externalId": current.get("externalId"),
                "collections": collection_access(collections),
            }
            return self.client.update_member(member_id, body)
