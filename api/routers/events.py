"""Events API router."""

from typing import Optional

from fastapi import APIRouter

from api.dependencies import get_client, get_service
from services.event_service import EventService

router = APIRouter()


@router.get("/{tenant}/events")
def list_events(
    tenant: str,
    start: Optional[str] = None,
    end: Optional[str] = None,
    acting_user_id: Optional[str] = None,
    item_id: Optional[str] = None,
    event_type: Optional[int] = None,
    return_all: bool = True,
    limit: int = 50,
):
    """List organization events. ``event_type`` filters client-side."""
    service = get_service(EventService, tenant)
    if event_type is not None:
        return service.list_events_by_type(event_type, start=start, end=end,
                                           return_all=return_all, limit=limit)
    return service.list_events(start=start, end=end, acting_user_id=acting_user_id, item_id=item_id,
                               return_all=return_all, limit=limit)


@router.post("/{tenant}/events/poll/{event}")
def poll_events(tenant: str, event: str, include_acting_user: bool = False):
    """Events since the previous poll of this trigger; [] when nothing matched."""
    from services.trigger_service import EventPoller

    client, t = get_client(tenant)
    return EventPoller(client, t.id).poll(event, include_acting_user=include_acting_user) or []
