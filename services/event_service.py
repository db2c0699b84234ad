"""Organization event log queries.

The events endpoint filters by date range, acting user and item; filtering
by event type is done here on a full fetch.
"""

from datetime import datetime
from typing import Dict, List, Optional, Union

from lib.formatting import to_iso
from services.base_service import DEFAULT_LIMIT, BaseService

DateLike = Union[str, datetime]


def _query(
    start: Optional[DateLike] = None,
    end: Optional[DateLike] = None,
    acting_user_id: Optional[str] = None,
    item_id: Optional[str] = None,
) -> Dict[str, str]:
    query: Dict[str, str] = {}
    if start:
        query["start"] = start if isinstance(start, str) else to_iso(start)
    if end:
        query["end"] = end if isinstance(end, str) else to_iso(end)
    if acting_user_id:
        query["actingUserId"] = acting_user_id
    if item_id:
        query["itemId"] = item_id
    return query


class EventService(BaseService):
    RESOURCE = "event"

    def list_events(
        self,
        start: Optional[DateLike] = None,
        end: Optional[DateLike] = None,
        acting_user_id: Optional[str] = None,
        item_id: Optional[str] = None,
        return_all: bool = True,
        limit: int = DEFAULT_LIMIT,
    ) -> List[Dict]:
        query = _query(start, end, acting_user_id, item_id)
        return self._fetch("list_events", query, return_all, limit)

    def list_events_by_date_range(
        self,
        start: DateLike,
        end: DateLike,
        return_all: bool = True,
        limit: int = DEFAULT_LIMIT,
    ) -> List[Dict]:
        query = {"start": to_iso(start), "end": to_iso(end)}
        return self._fetch("list_events_by_date_range", query, return_all, limit)

    def list_events_by_member(
        self,
        acting_user_id: str,
        start: Optional[DateLike] = None,
        end: Optional[DateLike] = None,
        return_all: bool = True,
        limit: int = DEFAULT_LIMIT,
    ) -> List[Dict]:
        query = _query(start, end, acting_user_id)
        return self._fetch("list_events_by_member", query, return_all, limit)

    def list_events_by_type(
        self,
        event_type: int,
        start: Optional[DateLike] = None,
        end: Optional[DateLike] = None,
        return_all: bool = True,
        limit: int = DEFAULT_LIMIT,
    ) -> List[Dict]:
        # Always a full fetch; the limit applies after filtering.
        events = self._fetch("list_events_by_type", _query(start, end), True, limit)
        matching = [e for e in events if e.get("type") == event_type]
        return matching if return_all else matching[:limit]

    def _fetch(self, operation: str, query: Dict, return_all: bool, limit: int) -> List[Dict]:
        with self.audited(operation, "READ", details=dict(query)) as details:
            result = self.client.list_events(params=query, return_all=return_all, limit=limit)
            details["count"] = len(result)
        return result
