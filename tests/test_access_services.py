import pytest

from lib.errors import BitwardenAPIError
from services.collection_service import CollectionService
from services.group_service import GroupService


@pytest.fixture
def collections(api):
    return CollectionService(api)


@pytest.fixture
def groups(api):
    return GroupService(api)


MEMBER = {
    "id": "m1",
    "type": 2,
    "accessAll": False,
    "externalId": None,
    "collections": [{"id": "c1", "readOnly": True, "hidePasswords": False, "manage": False}],
}


# ----------------------------------------------------------------------
# Collections
# ----------------------------------------------------------------------

def test_create_collection_normalises_groups(collections, api):
    api.create_collection.return_value = {"id": "c1"}
    collections.create_collection("Engineering", external_id="eng", groups=[{"groupId": "g1", "readOnly": True}])
    api.create_collection.assert_called_once_with({
        "name": "Engineering",
        "externalId": "eng",
        "groups": [{"id": "g1", "readOnly": True, "hidePasswords": False, "manage": False}],
    })


def test_update_collection_merges_current(collections, api):
    api.get_collection.return_value = {"id": "c1", "name": "Old", "externalId": "x", "groups": [{"id": "g1"}]}
    collections.update_collection("c1", name="New")
    api.update_collection.assert_called_once_with("c1", {"name": "New", "externalId": "x", "groups": [{"id": "g1"}]})


def test_add_member_to_collection_appends(collections, api):
    api.get_member.return_value = MEMBER
    collections.add_member_to_collection("c2", "m1", manage=True)

    body = api.update_member.call_args.args[1]
    assert [c["id"] for c in body["collections"]] == ["c1", "c2"]
    assert body["collections"][1]["manage"] is True


def test_add_member_to_collection_replaces_existing_entry(collections, api):
    api.get_member.return_value = MEMBER
    collections.add_member_to_collection("c1", "m1", read_only=False, hide_passwords=True)

    body = api.update_member.call_args.args[1]
    assert body["collections"] == [{"id": "c1", "readOnly": False, "hidePasswords": True, "manage": False}]


def test_remove_member_from_collection(collections, api):
    api.get_member.return_value = MEMBER
    collections.remove_member_from_collection("c1", "m1")
    assert api.update_member.call_args.args[1]["collections"] == []


def test_list_collection_members_includes_access_all(collections, api):
    api.list_members.return_value = [
        MEMBER,
        {"id": "m2", "accessAll": True, "collections": []},
        {"id": "m3", "accessAll": False, "collections": [{"id": "c9"}]},
    ]
    assert [m["id"] for m in collections.list_collection_members("c1")] == ["m1", "m2"]


def test_delete_collection(collections, api):
    assert collections.delete_collection("c1") == {"success": True, "collectionId": "c1"}


# ----------------------------------------------------------------------
# Groups
# ----------------------------------------------------------------------

def test_add_group_members_is_a_union(groups, api):
    api.get_group_member_ids.return_value = ["a", "b"]

    result = groups.add_group_members("g1", ["b", "c"])

    api.set_group_member_ids.assert_called_once_with("g1", ["a", "b", "c"])
    assert result == {"success": True, "groupId": "g1", "memberIds": ["a", "b", "c"]}


def test_remove_group_members(groups, api):
    api.get_group_member_ids.return_value = ["a", "b", "c"]
    result = groups.remove_group_members("g1", ["b"])
    api.set_group_member_ids.assert_called_once_with("g1", ["a", "c"])
    assert result["memberIds"] == ["a", "c"]


def test_list_group_members_marks_missing(groups, api):
    api.get_group_member_ids.return_value = ["a", "gone"]
    api.get_member.side_effect = [{"id": "a"}, BitwardenAPIError("nope", status_code=404)]

    assert groups.list_group_members("g1") == [{"id": "a"}, {"id": "gone", "error": "Member not found"}]


@pytest.mark.parametrize("status", [429, 500])
def test_list_group_members_propagates_rate_limit_and_server_errors(groups, api, status):
    api.get_group_member_ids.return_value = ["a", "b"]
    api.get_member.side_effect = [{"id": "a"}, BitwardenAPIError("busy", status_code=status)]

    with pytest.raises(BitwardenAPIError) as exc_info:
        groups.list_group_members("g1")
    assert exc_info.value.status_code == status


def test_update_group_collections_keeps_group_fields(groups, api):
    api.get_group.return_value = {"id": "g1", "name": "Ops", "accessAll": False, "externalId": "ops"}
    groups.update_group_collections("g1", [{"collectionId": "c1", "readOnly": True}])
    api.update_group.assert_called_once_with("g1", {
        "name": "Ops",
        "accessAll": False,
        "externalId": "ops",
        "collections": [{"id": "c1", "readOnly": True, "hidePasswords": False, "manage": False}],
    })


def test_create_group_defaults(groups, api):
    api.create_group.return_value = {"id": "g1"}
    groups.create_group("Ops")
    api.create_group.assert_called_once_with({"name": "Ops", "accessAll": False, "collections": []})
