from datetime import datetime, timezone

import pytest

from services import audit_service
from services.event_service import EventService
from services.secrets_service import SecretsService


@pytest.fixture
def secrets(api):
    return SecretsService(api)


@pytest.fixture
def events(api):
    return EventService(api)


# ----------------------------------------------------------------------
# Secrets Manager
# ----------------------------------------------------------------------

def test_create_secret_body_and_audit_hides_value(secrets, api):
    api.create_secret.return_value = {"id": "s1"}
    secrets.create_secret("DB_PASSWORD", "hunter2", note="prod", project_id="p1")

    api.create_secret.assert_called_once_with(
        {"key": "DB_PASSWORD", "value": "hunter2", "note": "prod", "projectIds": ["p1"]}
    )
    [entry] = [e for e in audit_service.get_recent() if e.operation == "create_secret"]
    assert entry.resource_id == "s1"
    assert "hunter2" not in str(entry.details)


def test_update_secret_keeps_current_values_and_project(secrets, api):
    api.get_secret.return_value = {"id": "s1", "key": "K", "value": "old", "note": "n", "projectId": "p1"}
    secrets.update_secret("s1", value="new")
    api.update_secret.assert_called_once_with(
        "s1", {"key": "K", "value": "new", "note": "n", "projectIds": ["p1"]}
    )


def test_update_secret_clears_note(secrets, api):
    api.get_secret.return_value = {"id": "s1", "key": "K", "value": "v", "note": "n"}
    secrets.update_secret("s1", note=None)
    body = api.update_secret.call_args.args[1]
    assert body["note"] is None
    assert "projectIds" not in body


def test_access_token_lifecycle(secrets, api):
    secrets.create_access_token("sa1", "ci", expire_at="2030-01-01T00:00:00Z", scopes=["read"])
    api.create_access_token.assert_called_once_with(
        "sa1", {"name": "ci", "expireAt": "2030-01-01T00:00:00Z", "scopes": ["read"]}
    )
    assert secrets.revoke_access_token("sa1", "t1") == {
        "success": True, "serviceAccountId": "sa1", "accessTokenId": "t1",
    }


def test_project_and_service_account_deletes(secrets, api):
    assert secrets.delete_project("p1") == {"success": True, "projectId": "p1"}
    assert secrets.delete_service_account("sa1") == {"success": True, "serviceAccountId": "sa1"}
    assert secrets.delete_secret("s1") == {"success": True, "secretId": "s1"}


# ----------------------------------------------------------------------
# Events
# ----------------------------------------------------------------------

def test_list_events_passes_filters(events, api):
    api.list_events.return_value = []
    events.list_events(start="2024-01-01T00:00:00Z", acting_user_id="u1", return_all=False, limit=10)
    api.list_events.assert_called_once_with(
        params={"start": "2024-01-01T00:00:00Z", "actingUserId": "u1"}, return_all=False, limit=10
    )


def test_list_events_by_date_range_normalises_dates(events, api):
    api.list_events.return_value = []
    events.list_events_by_date_range(datetime(2024, 1, 1, tzinfo=timezone.utc), "2024-01-02")
    params = api.list_events.call_args.kwargs["params"]
    assert params == {"start": "2024-01-01T00:00:00.000Z", "end": "2024-01-02T00:00:00.000Z"}


def test_list_events_by_type_filters_a_full_fetch(events, api):
    api.list_events.return_value = [{"type": 1000}, {"type": 1005}, {"type": 1000}, {"type": 1000}]

    result = events.list_events_by_type(1000, return_all=False, limit=2)

    assert result == [{"type": 1000}, {"type": 1000}]
    assert api.list_events.call_args.kwargs["return_all"] is True


def test_list_events_by_member(events, api):
    api.list_events.return_value = [{"type": 1000}]
    assert events.list_events_by_member("u1") == [{"type": 1000}]
    assert api.list_events.call_args.kwargs["params"] == {"actingUserId": "u1"}
