from datetime import datetime, timezone

import pytest

from lib.errors import BitwardenAPIError, ErrorKind
from services import config_service, trigger_service
from services.trigger_service import EventPoller

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def tenant():
    return config_service.add_tenant("acme", "organization.1", "s")


@pytest.fixture
def poller(api, tenant):
    return EventPoller(api, tenant.id, max_attempts=1)


def test_first_poll_looks_back_five_minutes(poller, api, tenant):
    api.request_all.return_value = []

    assert poller.poll("allEvents", now=NOW) is None

    api.request_all.assert_called_once_with(
        "GET", "/events", query={"start": "2024-05-01T11:55:00.000Z", "end": "2024-05-01T12:00:00.000Z"}
    )
    assert trigger_service.get_last_poll_time(tenant.id, "allEvents") == "2024-05-01T12:00:00.000Z"


def test_next_poll_starts_where_the_last_ended(poller, api):
    api.request_all.return_value = []
    poller.poll("allEvents", now=NOW)
    poller.poll("allEvents", now=NOW.replace(minute=7))

    query = api.request_all.call_args.kwargs["query"]
    assert query == {"start": "2024-05-01T12:00:00.000Z", "end": "2024-05-01T12:07:00.000Z"}


def test_poll_times_are_kept_per_trigger(poller, api, tenant):
    api.request_all.return_value = []
    poller.poll("memberInvited", now=NOW)
    assert trigger_service.get_last_poll_time(tenant.id, "groupCreated") is None


def test_poll_filters_and_enriches(poller, api):
    api.request_all.return_value = [
        {"type": 1500, "actingUserId": "u1"},
        {"type": 1000},
        {"type": 1500, "actingUserId": "u1"},
    ]
    api.get_member.return_value = {"id": "u1", "email": "admin@example.com"}

    result = poller.poll("memberInvited", include_acting_user=True, now=NOW)

    assert len(result) == 2
    assert result[0]["eventTypeName"] == "Organization User Invited"
    assert result[0]["triggeredEvent"] == "memberInvited"
    assert result[0]["actingUser"] == {"id": "u1", "email": "admin@example.com"}
    api.get_member.assert_called_once_with("u1")


def test_unresolvable_acting_user_is_none(poller, api):
    api.request_all.return_value = [{"type": 1300, "actingUserId": "gone"}]
    api.get_member.side_effect = BitwardenAPIError("not found", status_code=404)

    [event] = poller.poll("collectionCreated", include_acting_user=True, now=NOW)
    assert event["actingUser"] is None


def test_no_matching_events_returns_none(poller, api):
    api.request_all.return_value = [{"type": 1000}]
    assert poller.poll("groupDeleted", now=NOW) is None


def test_failed_fetch_keeps_the_window(poller, api, tenant):
    api.request_all.side_effect = BitwardenAPIError("boom", kind=ErrorKind.OTHER)
    with pytest.raises(BitwardenAPIError):
        poller.poll("allEvents", now=NOW)
    assert trigger_service.get_last_poll_time(tenant.id, "allEvents") is None


def test_unknown_trigger_is_rejected(poller, api):
    with pytest.raises(ValueError, match="Unknown trigger event"):
        poller.poll("somethingElse", now=NOW)
    api.request_all.assert_not_called()


def test_reset(poller, api, tenant):
    api.request_all.return_value = []
    poller.poll("allEvents", now=NOW)
    poller.poll("memberInvited", now=NOW)

    assert trigger_service.reset(tenant.id, "allEvents") == 1
    assert trigger_service.get_last_poll_time(tenant.id, "allEvents") is None
    assert trigger_service.reset(tenant.id) == 1
