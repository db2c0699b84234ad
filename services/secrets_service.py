"""Secrets Manager operations: secrets, projects and service accounts."""

from typing import Dict, List, Optional

from services.base_service import DEFAULT_LIMIT, UNSET, BaseService


class SecretsService(BaseService):
    RESOURCE = "secret"

    # ------------------------------------------------------------------
    # Secrets
    # ------------------------------------------------------------------

    def list_secrets(self, return_all: bool = True, limit: int = DEFAULT_LIMIT) -> List[Dict]:
        with self.audited("list_secrets", "READ") as details:
            result = self.client.list_secrets(return_all=return_all, limit=limit)
            details["count"] = len(result)
        return result

    def get_secret(self, secret_id: str) -> Dict:
        return self.client.get_secret(secret_id)

    def create_secret(
        self,
        key: str,
        value: str,
        note: Optional[str] = None,
        project_id: Optional[str] = None,
    ) -> Dict:
        body: Dict = {"key": key, "value": value}
        if note:
            body["note"] = note
        if project_id:
            body["projectIds"] = [project_id]
        # The value itself never goes into the audit log.
        with self.audited("create_secret", "CREATE", resource_name=key) as details:
            result = self.client.create_secret(body)
            details["resource_id"] = (result or {}).get("id")
        return result

    def update_secret(
        self,
        secret_id: str,
        key: Optional[str] = None,
        value: Optional[str] = None,
        note=UNSET,
        project_id: Optional[str] = None,
    ) -> Dict:
        """Update a secret, keeping current values for fields not supplied.

        note="" or None clears the note.
        """
        with self.audited("update_secret", "UPDATE", resource_id=secret_id, resource_name=key):
            current = self.client.get_secret(secret_id)
            body: Dict = {
                "key": key if key is not None else current.get("key"),
                "value": value if value is not None else current.get("value"),
                "note": (note or None) if note is not UNSET else current.get("note"),
            }
            project = project_id or current.get("projectId")
            if project:
                body["projectIds"] = [project]
            return self.client.update_secret(secret_id, body)

    def delete_secret(self, secret_id: str) -> Dict:
        with self.audited("delete_secret", "DELETE", resource_id=secret_id):
            self.client.delete_secret(secret_id)
        return {"success": True, "secretId": secret_id}

    def list_secrets_by_project(
        self, project_id: str, return_all: bool = True, limit: int = DEFAULT_LIMIT
    ) -> List[Dict]:
        return self.client.list_project_secrets(project_id, return_all=return_all, limit=limit)

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    def list_projects(self, return_all: bool = True, limit: int = DEFAULT_LIMIT) -> List[Dict]:
        return self.client.list_projects(return_all=return_all, limit=limit)

    def get_project(self, project_id: str) -> Dict:
        return self.client.get_project(project_id)

    def create_project(self, name: str) -> Dict:
        with self.audited("create_project", "CREATE", resource_name=name) as details:
            result = self.client.create_project(name)
            details["resource_id"] = (result or {}).get("id")
        return result

    def update_project(self, project_id: str, name: str) -> Dict:
        with self.audited("update_project", "UPDATE", resource_id=project_id, resource_name=name):
            return self.client.update_project(project_id, name)

    def delete_project(self, project_id: str) -> Dict:
        with self.audited("delete_project", "DELETE", resource_id=project_id):
            self.client.delete_project(project_id)
        return {"success": True, "projectId": project_id}

    def list_project_secrets(
        self, project_id: str, return_all: bool = True, limit: int = DEFAULT_LIMIT
    ) -> List[Dict]:
        return self.client.list_project_secrets(project_id, return_all=return_all, limit=limit)

    def list_project_service_accounts(
        self, project_id: str, return_all: bool = True, limit: int = DEFAULT_LIMIT
    ) -> List[Dict]:
        return self.client.list_project_service_accounts(project_id, return_all=return_all, limit=limit)

    # ------------------------------------------------------------------
    # Service accounts
    # ------------------------------------------------------------------

    def list_service_accounts(self, return_all: bool = True, limit: int = DEFAULT_LIMIT) -> List[Dict]:
        return self.client.list_service_accounts(return_all=return_all, limit=limit)

    def get_service_account(self, account_id: str) -> Dict:
        return self.client.get_service_account(account_id)

    def create_service_account(self, name: str) -> Dict:
        with self.audited("create_service_account", "CREATE", resource_name=name) as details:
            result = self.client.create_service_account(name)
            details["resource_id"] = (result or {}).get("id")
        return result

    def update_service_account(self, account_id: str, name: str) -> Dict:
        with self.audited("update_service_account", "UPDATE", resource_id=account_id, resource_name=name):
            return self.client.update_service_account(account_id, name)

    def delete_service_account(self, account_id: str) -> Dict:
        with self.audited("delete_service_account", "DELETE", resource_id=account_id):
            self.client.delete_service_account(account_id)
        return {"success": True, "serviceAccountId": account_id}

    def list_access_tokens(
        self, account_id: str, return_all: bool = True, limit: int = DEFAULT_LIMIT
    ) -> List[Dict]:
        return self.client.list_access_tokens(account_id, return_all=return_all, limit=limit)

    def create_access_token(
        self,
        account_id: str,
        name: str,
        expire_at: Optional[str] = None,
        scopes: Optional[List[str]] = None,
    ) -> Dict:
        body: Dict = {"name": name}
        if expire_at:
            body["expireAt"] = expire_at
        if scopes:
            body["scopes"] = list(scopes)
        with self.audited(
            "create_access_token", "CREATE", resource_id=account_id, resource_name=name,
            details={"expireAt": expire_at},
        ):
            return self.client.create_access_token(account_id, body)

    def revoke_access_token(self, account_id: str, token_id: str) -> Dict:
        with self.audited(
            "revoke_access_token", "DELETE", resource_id=account_id,
            details={"token_id": token_id},
        ):
            self.client.revoke_access_token(account_id, token_id)
        return {"success": True, "serviceAccountId": account_id, "accessTokenId": token_id}
