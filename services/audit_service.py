"""Audit logging service.

Every operation performed through this toolset is recorded here, providing:
  - Compliance trail for changes to the organization
  - Troubleshooting history (what changed, when, by which tenant)
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from db.database import get_session
from db.models import AuditLog

logger = logging.getLogger(__name__)


def log(
    resource: str,
    operation: str,
    action: str,
    status: str,
    tenant_id: Optional[int] = None,
    resource_id: Optional[str] = None,
    resource_name: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
    error_message: Optional[str] = None,
) -> None:
    """Write an audit log entry. Fire-and-forget: a failing write is logged
    and dropped so it never breaks the operation being audited."""
    try:
        with get_session() as session:
            entry = AuditLog(
                tenant_id=tenant_id,
                timestamp=datetime.utcnow(),
                resource=resource,
                operation=operation,
                action=action,
                status=status,
                resource_id=str(resource_id) if resource_id else None,
                resource_name=str(resource_name) if resource_name else None,
                details=details,
                error_message=error_message,
            )
            session.add(entry)
    except Exception:
        logger.warning("Failed to write audit entry for %s", operation, exc_info=True)


def get_recent(
    tenant_id: Optional[int] = None,
    resource: Optional[str] = None,
    limit: int = 100,
) -> List[AuditLog]:
    """Return recent audit log entries, newest first."""
    with get_session() as session:
        q = session.query(AuditLog)
        if tenant_id is not None:
            q = q.filter(AuditLog.tenant_id == tenant_id)
        if resource is not None:
            q = q.filter(AuditLog.resource == resource)
        return q.order_by(AuditLog.timestamp.desc()).limit(limit).all()


def get_by_resource(
    resource: str,
    resource_id: str,
    tenant_id: Optional[int] = None,
) -> List[AuditLog]:
    """Return all log entries for a specific resource (e.g. a member ID)."""
    with get_session() as session:
        q = session.query(AuditLog).filter(
            AuditLog.resource == resource,
            AuditLog.resource_id == resource_id,
        )
        if tenant_id is not None:
            q = q.filter(AuditLog.tenant_id == tenant_id)
        return q.order_by(AuditLog.timestamp.desc()).all()
