import pytest

from lib.errors import BitwardenAPIError
from services import audit_service
from services.member_service import MemberService

CURRENT = {
    "id": "m1",
    "type": 2,
    "accessAll": False,
    "externalId": "ext-1",
    "collections": [{"id": "c1", "readOnly": True, "hidePasswords": False, "manage": False}],
}


@pytest.fixture
def service(api):
    return MemberService(api)


def _audit(operation):
    return [e for e in audit_service.get_recent() if e.operation == operation]


def test_invite_member_builds_body_and_audits(service, api):
    api.create_member.return_value = {"id": "new-id"}

    result = service.invite_member("alice@example.com", member_type=1, collections=[{"collectionId": "c9"}])

    assert result == {"id": "new-id"}
    body = api.create_member.call_args.args[0]
    assert body == {
        "email": "alice@example.com",
        "type": 1,
        "accessAll": False,
        "collections": [{"id": "c9", "readOnly": False, "hidePasswords": False, "manage": False}],
    }
    [entry] = _audit("invite_member")
    assert entry.status == "SUCCESS"
    assert entry.resource_id == "new-id"
    assert entry.resource_name == "alice@example.com"
    assert entry.details == {"type": "Admin"}


def test_invite_member_rejects_bad_email(service, api):
    with pytest.raises(ValueError, match="Invalid email"):
        service.invite_member("not-an-email")
    api.create_member.assert_not_called()


def test_update_member_keeps_unsupplied_fields(service, api):
    api.get_member.return_value = CURRENT

    service.update_member("m1", member_type=3)

    api.update_member.assert_called_once_with("m1", {
        "type": 3,
        "accessAll": False,
        "externalId": "ext-1",
        "collections": CURRENT["collections"],
    })


def test_update_member_empty_external_id_clears_it(service, api):
    api.get_member.return_value = CURRENT
    service.update_member("m1", external_id="")
    assert api.update_member.call_args.args[1]["externalId"] is None


def test_failed_update_is_audited_and_reraised(service, api):
    api.get_member.side_effect = BitwardenAPIError("Resource not found.", status_code=404)

    with pytest.raises(BitwardenAPIError):
        service.update_member("m1", member_type=0)

    [entry] = _audit("update_member")
    assert entry.status == "FAILURE"
    assert entry.resource_id == "m1"
    assert entry.error_message == "Resource not found."


@pytest.mark.parametrize("method, client_method, action", [
    ("reinvite_member", "reinvite_member", "reinvited"),
    ("confirm_member", "confirm_member", "confirmed"),
    ("revoke_member", "revoke_member", "revoked"),
    ("restore_member", "restore_member", "restored"),
])
def test_lifecycle_actions(service, api, method, client_method, action):
    assert getattr(service, method)("m1") == {"success": True, "memberId": "m1", "action": action}
    getattr(api, client_method).assert_called_once_with("m1")


def test_delete_member(service, api):
    assert service.delete_member("m1") == {"success": True, "memberId": "m1"}
    api.delete_member.assert_called_once_with("m1")


def test_update_member_groups(service, api):
    result = service.update_member_groups("m1", ("g1", "g2"))
    api.update_member_group_ids.assert_called_once_with("m1", ["g1", "g2"])
    assert result["groupIds"] == ["g1", "g2"]


def test_update_member_collections_replaces_only_collections(service, api):
    api.get_member.return_value = CURRENT
    service.update_member_collections("m1", [{"id": "c2", "manage": True}])

    body = api.update_member.call_args.args[1]
    assert body["type"] == 2 and body["externalId"] == "ext-1"
    assert body["collections"] == [{"id": "c2", "readOnly": False, "hidePasswords": False, "manage": True}]


def test_list_members_audits_count(service, api):
    api.list_members.return_value = [{"id": "a"}, {"id": "b"}]
    assert len(service.list_members(return_all=False, limit=2)) == 2
    api.list_members.assert_called_once_with(return_all=False, limit=2)
    assert _audit("list_members")[0].details == {"count": 2}
