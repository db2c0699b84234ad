"""FastAPI application: REST API layer over the bw-config service layer.

This module exposes the same service layer used by the CLI as a REST API,
so a web or desktop client can be built on top without duplicating any
business logic.

Run with:
    uvicorn api.main:app --reload

The auto-generated OpenAPI docs are available at:
    http://localhost:8000/docs
"""

import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.dependencies import EXCEPTION_HANDLERS
from api.routers import collections, events, groups, import_export, members, organization, policies, secrets

VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    from db.database import init_db
    from lib.log_setup import setup_logging
    setup_logging()
    init_db()
    yield


app = FastAPI(
    title="Bitwarden Organization API",
    description=(
        "REST API layer for Bitwarden Public API automation. "
        "All endpoints mirror the CLI service layer and are scoped to a configured tenant."
    ),
    version=VERSION,
    lifespan=lifespan,
)

# Any origin in dev; set ALLOWED_ORIGINS in production
app.add_middleware(
    CORSMiddleware,
    allow_origins=os.environ.get("ALLOWED_ORIGINS", "*").split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

for exc_class, handler in EXCEPTION_HANDLERS.items():
    app.add_exception_handler(exc_class, handler)

app.include_router(members.router, prefix="/api/v1", tags=["Members"])
app.include_router(collections.router, prefix="/api/v1", tags=["Collections"])
app.include_router(groups.router, prefix="/api/v1", tags=["Groups"])
app.include_router(policies.router, prefix="/api/v1", tags=["Policies"])
app.include_router(events.router, prefix="/api/v1", tags=["Events"])
app.include_router(organization.router, prefix="/api/v1", tags=["Organization"])
app.include_router(secrets.router, prefix="/api/v1", tags=["Secrets Manager"])
app.include_router(import_export.router, prefix="/api/v1", tags=["Import / Export"])


@app.get("/health", tags=["System"])
def health():
    return {"status": "ok", "version": VERSION}


@app.get("/api/v1/tenants", tags=["System"])
def list_tenants():
    from services.config_service import list_tenants as _list
    tenants = _list()
    return [
        {
        "id": t.id,
            "name": t.name,
            "environment": t.environment,
            "self_hosted_url": t.self_hosted_url,
            "client_id": t.client_id,
            "notes": t.notes,
            "created_at": t.created_at.isoformat() if t.created_at else None,
        }
        for t in tenants
    ]


@app.get("/api/v1/audit", tags=["System"])
def get_audit_log(tenant_id: int = None, resource: str = None, limit: int = 100):
    from services import audit_service
    logs = audit_service.get_recent(tenant_id=tenant_id, resource=resource, limit=limit)
    return [_audit_row(e) for e in logs]


def _audit_row(e) -> dict:
    return {
        "id": e.id,
        "tenant_id": e.tenant_id,
        "timestamp": e.timestamp.isoformat(),
        "resource": e.resource,
        "operation": e.operation,
        "action": e.action,
        "status": e.status,
        "resource_id": e.resource_id,
        "resource_name": e.resource_name,
        "details": e.details,
        "error_message": e.error_message,
    }


@app.get("/api/v1/audit/{resource}/{resource_id}", tags=["System"])
def get_resource_history(resource: str, resource_id: str, tenant_id: int = None):
    """Every audit entry for one resource, newest first."""
    from services import audit_service
    return [_audit_row(e) for e in audit_service.get_by_resource(resource, resource_id, tenant_id=tenant_id)]
