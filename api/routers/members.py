"""Members API router."""

from fastapi import APIRouter

from api.dependencies import access_rows, get_service
from api.schemas.bitwarden import CollectionsRequest, GroupIdsRequest, MemberInvite, MemberUpdate
from services.base_service import UNSET
from services.member_service import MemberService

router = APIRouter()


def _service(tenant: str) -> MemberService:
    return get_service(MemberService, tenant)


@router.get("/{tenant}/members")
def list_members(tenant: str, return_all: bool = True, limit: int = 50):
    return _service(tenant).list_members(return_all=return_all, limit=limit)


@router.get("/{tenant}/members/{member_id}")
def get_member(tenant: str, member_id: str):
    return _service(tenant).get_member(member_id)


@router.post("/{tenant}/members")
def invite_member(tenant: str, req: MemberInvite):
    """Invite a user to the organization by email."""
    return _service(tenant).invite_member(
        req.email,
        member_type=req.type,
        access_all=req.accessAll,
        external_id=req.externalId,
        collections=access_rows(req.collections),
    )


@router.put("/{tenant}/members/{member_id}")
def update_member(tenant: str, member_id: str, req: MemberUpdate):
    return _service(tenant).update_member(
        member_id,
        member_type=req.type,
        access_all=req.accessAll,
        external_id=req.externalId if "externalId" in req.model_fields_set else UNSET,
        collections=access_rows(req.collections),
    )


@router.delete("/{tenant}/members/{member_id}")
def delete_member(tenant: str, member_id: str):
    return _service(tenant).delete_member(member_id)


@router.post("/{tenant}/members/{member_id}/reinvite")
def reinvite_member(tenant: str, member_id: str):
    return _service(tenant).reinvite_member(member_id)


@router.post("/{tenant}/members/{member_id}/confirm")
def confirm_member(tenant: str, member_id: str):
    return _service(tenant).confirm_member(member_id)


@router.put("/{tenant}/members/{member_id}/revoke")
def revoke_member(tenant: str, member_id: str):
    return _service(tenant).revoke_member(member_id)


@router.put("/{tenant}/members/{member_id}/restore")
def restore_member(tenant: str, member_id: str):
    return _service(tenant).restore_member(member_id)


@router.put("/{tenant}/members/{member_id}/group-ids")
def update_member_groups(tenant: str, member_id: str, req: GroupIdsRequest):
    return _service(tenant).update_member_groups(member_id, req.groupIds)


@router.put("/{tenant}/members/{member_id}/collections")
def update_member_collections(tenant: str, member_id: str, req: CollectionsRequest):
    return _service(tenant).update_member_collections(member_id, access_rows(req.collections))
