import pytest
from fastapi.testclient import TestClient

from api.main import app
from lib.errors import AuthenticationError, BitwardenAPIError
from services import config_service


@pytest.fixture
def tenant():
    return config_service.add_tenant("acme", "organization.1", "s")


@pytest.fixture
def web(tenant, api, monkeypatch):
    monkeypatch.setattr(config_service, "build_client", lambda t: api)
    return TestClient(app)


def test_health():
    resp = TestClient(app).get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_list_tenants_hides_secret(tenant):
    [row] = TestClient(app).get("/api/v1/tenants").json()
    assert row["name"] == "acme"
    assert row["environment"] == "cloudUS"
    assert "client_secret_enc" not in row


def test_unknown_tenant_is_404():
    resp = TestClient(app).get("/api/v1/nobody/members")
    assert resp.status_code == 404
    assert "nobody" in resp.json()["detail"]


def test_list_members(web, api):
    api.list_members.return_value = [{"id": "m1"}]
    resp = web.get("/api/v1/acme/members", params={"return_all": "false", "limit": 5})
    assert resp.status_code == 200
    assert resp.json() == [{"id": "m1"}]
    api.list_members.assert_called_once_with(return_all=False, limit=5)


def test_invite_member(web, api):
    api.create_member.return_value = {"id": "m1"}
    resp = web.post("/api/v1/acme/members", json={"email": "alice@example.com", "type": 1})
    assert resp.status_code == 200
    assert api.create_member.call_args.args[0]["type"] == 1


def test_update_member_omitted_external_id_is_kept(web, api):
    api.get_member.return_value = {"type": 2, "accessAll": False, "externalId": "keep", "collections": []}
    api.update_member.return_value = {"id": "m1"}

    web.put("/api/v1/acme/members/m1", json={"type": 3})
    assert api.update_member.call_args.args[1]["externalId"] == "keep"

    web.put("/api/v1/acme/members/m1", json={"externalId": None})
    assert api.update_member.call_args.args[1]["externalId"] is None


def test_remove_group_members_with_body(web, api):
    api.get_group_member_ids.return_value = ["a", "b"]
    resp = web.request("DELETE", "/api/v1/acme/groups/g1/members", json={"memberIds": ["a"]})
    assert resp.status_code == 200
    assert resp.json()["memberIds"] == ["b"]


def test_api_error_maps_status_and_validation_errors(web, api):
    api.create_member.side_effect = BitwardenAPIError(
        "The model state is invalid.", status_code=400, validation_errors={"email": ["Taken."]}
    )
    resp = web.post("/api/v1/acme/members", json={"email": "alice@example.com"})
    assert resp.status_code == 400
    body = resp.json()
    assert body["detail"] == "The model state is invalid. - email: Taken."
    assert body["kind"] == "not_retryable"
    assert body["validationErrors"] == {"email": ["Taken."]}


def test_transport_error_is_bad_gateway(web, api):
    api.list_groups.side_effect = BitwardenAPIError("Request failed: reset")
    assert web.get("/api/v1/acme/groups").status_code == 502


def test_authentication_error_is_401(web, api):
    api.get_organization.side_effect = AuthenticationError("invalid_client", status_code=400)
    assert web.get("/api/v1/acme/organization").status_code == 401


def test_value_error_is_400(web, api):
    resp = web.post("/api/v1/acme/members", json={"email": "nope"})
    assert resp.status_code == 400
    assert "Invalid email" in resp.json()["detail"]


def test_export_members_csv_is_plain_text(web, api):
    api.list_members.return_value = [{"id": "m1", "email": "a@example.com"}]
    resp = web.get("/api/v1/acme/members-csv")
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/plain")
    assert resp.text.startswith("id,email,name")


def test_poll_with_no_matches_returns_empty_list(web, api):
    api.request_all.return_value = []
    resp = web.post("/api/v1/acme/events/poll/allEvents")
    assert resp.status_code == 200
    assert resp.json() == []


def test_audit_log_endpoint(web, api):
    api.delete_group.return_value = True
    web.delete("/api/v1/acme/groups/g1")
    [entry] = TestClient(app).get("/api/v1/audit", params={"resource": "group"}).json()
    assert entry["operation"] == "delete_group"
    assert entry["status"] == "SUCCESS"


def test_resource_history_endpoint(web, api):
    api.delete_group.return_value = True
    web.delete("/api/v1/acme/groups/g1")
    web.delete("/api/v1/acme/groups/g2")
    rows = TestClient(app).get("/api/v1/audit/group/g1").json()
    assert [r["resource_id"] for r in rows] == ["g1"]
