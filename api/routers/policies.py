"""Policies API router."""

from fastapi import APIRouter

from api.dependencies import get_service
from api.schemas.bitwarden import PolicyUpdate
from services.policy_service import PolicyService

router = APIRouter()


@router.get("/{tenant}/policies")
def list_policies(tenant: str, return_all: bool = True, limit: int = 50):
    return get_service(PolicyService, tenant).list_policies(return_all=return_all, limit=limit)


@router.get("/{tenant}/policies/{policy_type}")
def get_policy(tenant: str, policy_type: int):
    return get_service(PolicyService, tenant).get_policy(policy_type)


@router.put("/{tenant}/policies/{policy_type}")
def update_policy(tenant: str, policy_type: int, req: PolicyUpdate):
    """Enable or disable a policy. ``data`` is shaped per policy type."""
    return get_service(PolicyService, tenant).update_policy(policy_type, req.enabled, req.data)
