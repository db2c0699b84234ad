"""Shared plumbing for the resource services: audit logging and list limits."""

from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

from lib.bitwarden_client import BitwardenClient
from lib.errors import format_error
from services import audit_service

# Marks "argument not supplied" where None is a meaningful value (clear the field)
UNSET: Any = object()

DEFAULT_LIMIT = 50


class BaseService:
    RESOURCE = ""

    def __init__(self, client: BitwardenClient, tenant_id: Optional[int] = None):
        self.client = client
        self.tenant_id = tenant_id

    @contextmanager
    def audited(
        self,
        operation: str,
        action: str,
        resource_id: Optional[str] = None,
        resource_name: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> Iterator[Dict[str, Any]]:
        """Record the wrapped block as SUCCESS or FAILURE in the audit log.

        Yields the details dict so the block can add to it (e.g. a created ID).
        Exceptions are logged and re-raised.
        """
        info: Dict[str, Any] = dict(details or {})
        try:
            yield info
        except Exception as exc:
            audit_service.log(
                resource=self.RESOURCE,
                operation=operation,
                action=action,
                status="FAILURE",
                tenant_id=self.tenant_id,
                resource_id=info.pop("resource_id", resource_id),
                resource_name=resource_name,
                details=info or None,
                error_message=format_error(exc),
            )
            raise
        audit_service.log(
            resource=self.RESOURCE,
            operation=operation,
            action=action,
            status="SUCCESS",
            tenant_id=self.tenant_id,
            resource_id=info.pop("resource_id", resource_id),
            resource_name=resource_name,
            details=info or None,
        )
