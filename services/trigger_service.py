"""Polling trigger over the organization event log.

Each (tenant, trigger) pair remembers when it last polled, so successive
polls return only events that happened since. The first poll looks back
five minutes.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

from db.database import get_session
from db.models import TriggerState
from lib.bitwarden_client import BitwardenClient
from lib.errors import BitwardenAPIError
from lib.formatting import event_type_label, to_iso
from lib.retry import with_retry

logger = logging.getLogger(__name__)

# Trigger key -> Bitwarden event type codes. An empty list matches everything.
TRIGGER_EVENTS: Dict[str, List[int]] = {
    "allEvents": [],
    "memberInvited": [1500],
    "memberAccepted": [1501],
    "memberConfirmed": [1502],
    "memberUpdated": [1503],
    "memberRemoved": [1504],
    "collectionCreated": [1300],
    "collectionUpdated": [1301],
    "collectionDeleted": [1302],
    "groupCreated": [1400],
    "groupUpdated": [1401],
    "groupDeleted": [1402],
    "policyUpdated": [1600, 1601],
    "organizationUpdated": [1505, 1506, 1507, 1508, 1509, 1510, 1511, 1512],
}

INITIAL_LOOKBACK = timedelta(minutes=5)


def get_last_poll_time(tenant_id: int, event: str) -> Optional[str]:
    with get_session() as session:
        state = session.query(TriggerState).filter_by(tenant_id=tenant_id, event=event).first()
        return state.last_poll_time if state else None


def set_last_poll_time(tenant_id: int, event: str, value: str) -> None:
    with get_session() as session:
        state = session.query(TriggerState).filter_by(tenant_id=tenant_id, event=event).first()
        if state is None:
            state = TriggerState(tenant_id=tenant_id, event=event)
            session.add(state)
        state.last_poll_time = value


def reset(tenant_id: int, event: Optional[str] = None) -> int:
    """Forget stored poll times so the next poll starts from the lookback window."""
    with get_session() as session:
        q = session.query(TriggerState).filter_by(tenant_id=tenant_id)
        if event is not None:
            q = q.filter_by(event=event)
        return q.delete()


class EventPoller:
    def __init__(self, client: BitwardenClient, tenant_id: int, max_attempts: int = 3):
        self.client = client
        self.tenant_id = tenant_id
        self.max_attempts = max_attempts

    def poll(
        self,
        event: str = "allEvents",
        include_acting_user: bool = False,
        now: Optional[datetime] = None,
    ) -> Optional[List[Dict]]:
        """Fetch events since the last poll for this trigger.

        Returns None when nothing matched. The stored poll time only moves
        forward after the fetch succeeds; a failed fetch raises and the next
        poll covers the same window again.
        """
        if event not in TRIGGER_EVENTS:
            raise ValueError(f"Unknown trigger event: {event!r}")
        wanted = TRIGGER_EVENTS[event]

        now = now or datetime.now(timezone.utc)
        start = get_last_poll_time(self.tenant_id, event) or to_iso(now - INITIAL_LOOKBACK)
        end = to_iso(now)

        events = with_retry(
            lambda: self.client.request_all("GET", "/events", query={"start": start, "end": end}),
            max_attempts=self.max_attempts,
        )
        set_last_poll_time(self.tenant_id, event, end)

        matched = [e for e in events if not wanted or e.get("type") in wanted]
        logger.debug("Trigger %s: %d of %d events matched (%s .. %s)",
                     event, len(matched), len(events), start, end)
        if not matched:
            return None

        members: Dict[str, Optional[Dict]] = {}
        result = []
        for item in matched:
            enriched = {
                **item,
                "eventTypeName": event_type_label(item.get("type")),
                "triggeredEvent": event,
            }
            acting_user_id = item.get("actingUserId")
            if include_acting_user and acting_user_id:
                if acting_user_id not in members:
                    members[acting_user_id] = self._lookup_member(acting_user_id)
                enriched["actingUser"] = members[acting_user_id]
            result.append(enriched)
        return result

    def _lookup_member(self, member_id: str) -> Optional[Dict]:
        try:
            return self.client.get_member(member_id)
        except BitwardenAPIError as exc:
            logger.info("Acting user %s not available: %s", member_id, exc)
            return None
