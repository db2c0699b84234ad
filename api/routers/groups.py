"""Groups API router."""

from fastapi import APIRouter

from api.dependencies import access_rows, get_service
from api.schemas.bitwarden import CollectionsRequest, GroupCreate, GroupUpdate, MemberIdsRequest
from services.base_service import UNSET
from services.group_service import GroupService

router = APIRouter()


def _service(tenant: str) -> GroupService:
    return get_service(GroupService, tenant)


@router.get("/{tenant}/groups")
def list_groups(tenant: str, return_all: bool = True, limit: int = 50):
    return _service(tenant).list_groups(return_all=return_all, limit=limit)


@router.get("/{tenant}/groups/{group_id}")
def get_group(tenant: str, group_id: str):
    return _service(tenant).get_group(group_id)


@router.post("/{tenant}/groups")
def create_group(tenant: str, req: GroupCreate):
    return _service(tenant).create_group(
        req.name,
        access_all=req.accessAll,
        external_id=req.externalId,
        collections=access_rows(req.collections),
    )


@router.put("/{tenant}/groups/{group_id}")
def update_group(tenant: str, group_id: str, req: GroupUpdate):
    return _service(tenant).update_group(
        group_id,
        name=req.name,
        access_all=req.accessAll,
        external_id=req.externalId if "externalId" in req.model_fields_set else UNSET,
        collections=access_rows(req.collections),
    )


@router.delete("/{tenant}/groups/{group_id}")
def delete_group(tenant: str, group_id: str):
    return _service(tenant).delete_group(group_id)


@router.get("/{tenant}/groups/{group_id}/members")
def list_group_members(tenant: str, group_id: str):
    return _service(tenant).list_group_members(group_id)


@router.post("/{tenant}/groups/{group_id}/members")
def add_group_members(tenant: str, group_id: str, req: MemberIdsRequest):
    return _service(tenant).add_group_members(group_id, req.memberIds)


@router.delete("/{tenant}/groups/{group_id}/members")
def remove_group_members(tenant: str, group_id: str, req: MemberIdsRequest):
    return _service(tenant).remove_group_members(group_id, req.memberIds)


@router.get("/{tenant}/groups/{group_id}/collections")
def list_group_collections(tenant: str, group_id: str):
    return _service(tenant).list_group_collections(group_id)


@router.put("/{tenant}/groups/{group_id}/collections")
def update_group_collections(tenant: str, group_id: str, req: CollectionsRequest):
    return _service(tenant).update_group_collections(group_id, access_rows(req.collections))
