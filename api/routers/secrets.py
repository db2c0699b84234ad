"""Secrets Manager API router: secrets, projects, service accounts."""

from fastapi import APIRouter

from api.dependencies import get_service
from api.schemas.bitwarden import AccessTokenCreate, NameRequest, SecretCreate, SecretUpdate
from services.base_service import UNSET
from services.secrets_service import SecretsService

router = APIRouter()


def _service(tenant: str) -> SecretsService:
    return get_service(SecretsService, tenant)


# ------------------------------------------------------------------
# Secrets
# ------------------------------------------------------------------

@router.get("/{tenant}/secrets")
def list_secrets(tenant: str, return_all: bool = True, limit: int = 50):
    return _service(tenant).list_secrets(return_all=return_all, limit=limit)


@router.get("/{tenant}/secrets/{secret_id}")
def get_secret(tenant: str, secret_id: str):
    return _service(tenant).get_secret(secret_id)


@router.post("/{tenant}/secrets")
def create_secret(tenant: str, req: SecretCreate):
    return _service(tenant).create_secret(req.key, req.value, note=req.note, project_id=req.projectId)


@router.put("/{tenant}/secrets/{secret_id}")
def update_secret(tenant: str, secret_id: str, req: SecretUpdate):
    return _service(tenant).update_secret(
        secret_id,
        key=req.key,
        value=req.value,
        note=req.note if "note" in req.model_fields_set else UNSET,
        project_id=req.projectId,
    )


@router.delete("/{tenant}/secrets/{secret_id}")
def delete_secret(tenant: str, secret_id: str):
    return _service(tenant).delete_secret(secret_id)


# ------------------------------------------------------------------
# Projects
# ------------------------------------------------------------------

@router.get("/{tenant}/projects")
def list_projects(tenant: str, return_all: bool = True, limit: int = 50):
    return _service(tenant).list_projects(return_all=return_all, limit=limit)


@router.get("/{tenant}/projects/{project_id}")
def get_project(tenant: str, project_id: str):
    return _service(tenant).get_project(project_id)


@router.post("/{tenant}/projects")
def create_project(tenant: str, req: NameRequest):
    return _service(tenant).create_project(req.name)


@router.put("/{tenant}/projects/{project_id}")
def update_project(tenant: str, project_id: str, req: NameRequest):
    return _service(tenant).update_project(project_id, req.name)


@router.delete("/{tenant}/projects/{project_id}")
def delete_project(tenant: str, project_id: str):
    return _service(tenant).delete_project(project_id)


@router.get("/{tenant}/projects/{project_id}/secrets")
def list_project_secrets(tenant: str, project_id: str, return_all: bool = True, limit: int = 50):
    return _service(tenant).list_project_secrets(project_id, return_all=return_all, limit=limit)


@router.get("/{tenant}/projects/{project_id}/service-accounts")
def list_project_service_accounts(tenant: str, project_id: str, return_all: bool = True, limit: int = 50):
    return _service(tenant).list_project_service_accounts(project_id, return_all=return_all, limit=limit)


# ------------------------------------------------------------------
# Service accounts
# ------------------------------------------------------------------

@router.get("/{tenant}/service-accounts")
def list_service_accounts(tenant: str, return_all: bool = True, limit: int = 50):
    return _service(tenant).list_service_accounts(return_all=return_all, limit=limit)


@router.get("/{tenant}/service-accounts/{account_id}")
def get_service_account(tenant: str, account_id: str):
    return _service(tenant).get_service_account(account_id)


@router.post("/{tenant}/service-accounts")
def create_service_account(tenant: str, req: NameRequest):
    return _service(tenant).create_service_account(req.name)


@router.put("/{tenant}/service-accounts/{account_id}")
def update_service_account(tenant: str, account_id: str, req: NameRequest):
    return _service(tenant).update_service_account(account_id, req.name)


@router.delete("/{tenant}/service-accounts/{account_id}")
def delete_service_account(tenant: str, account_id: str):
    return _service(tenant).delete_service_account(account_id)


@router.get("/{tenant}/service-accounts/{account_id}/access-tokens")
def list_access_tokens(tenant: str, account_id: str, return_all: bool = True, limit: int = 50):
    return _service(tenant).list_access_tokens(account_id, return_all=return_all, limit=limit)


@router.post("/{tenant}/service-accounts/{account_id}/access-tokens")
def create_access_token(tenant: str, account_id: str, req: AccessTokenCreate):
    return _service(tenant).create_access_token(account_id, req.name, expire_at=req.expireAt, scopes=req.scopes)


@router.delete("/{tenant}/service-accounts/{account_id}/access-tokens/{token_id}")
def revoke_access_token(tenant: str, account_id: str, token_id: str):
    return _service(tenant).revoke_access_token(account_id, token_id)
