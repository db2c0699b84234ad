"""Collections API router."""

from fastapi import APIRouter

from api.dependencies import access_rows, get_service
from api.schemas.bitwarden import CollectionCreate, CollectionMemberAccess, CollectionUpdate, GroupsRequest
from services.base_service import UNSET
from services.collection_service import CollectionService

router = APIRouter()


def _service(tenant: str) -> CollectionService:
    return get_service(CollectionService, tenant)


@router.get("/{tenant}/collections")
def list_collections(tenant: str, return_all: bool = True, limit: int = 50):
    return _service(tenant).list_collections(return_all=return_all, limit=limit)


@router.get("/{tenant}/collections/{collection_id}")
def get_collection(tenant: str, collection_id: str):
    return _service(tenant).get_collection(collection_id)


@router.post("/{tenant}/collections")
def create_collection(tenant: str, req: CollectionCreate):
    return _service(tenant).create_collection(
        req.name, external_id=req.externalId, groups=access_rows(req.groups)
    )


@router.put("/{tenant}/collections/{collection_id}")
def update_collection(tenant: str, collection_id: str, req: CollectionUpdate):
    return _service(tenant).update_collection(
        collection_id,
        name=req.name,
        external_id=req.externalId if "externalId" in req.model_fields_set else UNSET,
        groups=access_rows(req.groups),
    )


@router.delete("/{tenant}/collections/{collection_id}")
def delete_collection(tenant: str, collection_id: str):
    return _service(tenant).delete_collection(collection_id)


@router.get("/{tenant}/collections/{collection_id}/members")
def list_collection_members(tenant: str, collection_id: str):
    """Members with access, either explicitly or through accessAll."""
    return _service(tenant).list_collection_members(collection_id)


@router.put("/{tenant}/collections/{collection_id}/members/{member_id}")
def add_member_to_collection(tenant: str, collection_id: str, member_id: str, req: CollectionMemberAccess):
    return _service(tenant).add_member_to_collection(
        collection_id, member_id,
        read_only=req.readOnly, hide_passwords=req.hidePasswords, manage=req.manage,
    )


@router.delete("/{tenant}/collections/{collection_id}/members/{member_id}")
def remove_member_from_collection(tenant: str, collection_id: str, member_id: str):
    return _service(tenant).remove_member_from_collection(collection_id, member_id)


@router.get("/{tenant}/collections/{collection_id}/groups")
def list_collection_groups(tenant: str, collection_id: str):
    return _service(tenant).list_collection_groups(collection_id)


@router.put("/{tenant}/collections/{collection_id}/groups")
def update_collection_groups(tenant: str, collection_id: str, req: GroupsRequest):
    return _service(tenant).update_collection_groups(collection_id, access_rows(req.groups))
