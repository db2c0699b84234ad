from unittest.mock import MagicMock

import pytest

from lib.errors import BitwardenAPIError, ErrorKind
from services.directory_service import DirectoryService, directory_body
from services.organization_service import OrganizationService
from services.policy_service import PolicyService, shape_policy_data
from services.sso_service import SSO_OIDC, SSO_SAML, SsoService, sso_body


# ----------------------------------------------------------------------
# Policies
# ----------------------------------------------------------------------

def test_master_password_policy_data_omits_unset_fields():
    data = {"minLength": 12, "requireUpper": True, "requireLower": None, "unrelated": "x"}
    assert shape_policy_data(1, True, data) == {"minLength": 12, "requireUpper": True}


def test_password_generator_includes_use_flags_when_triggered():
    data = {"minLength": 14, "useUpper": True}
    assert shape_policy_data(2, True, data) == {"minLength": 14, "useUpper": True}


def test_shaped_type_without_trigger_falls_back_to_raw_data():
    assert shape_policy_data(2, True, {"useUpper": True}) == {"useUpper": True}
    assert shape_policy_data(2, False, {"useUpper": True}) is None
    assert shape_policy_data(9, True, None) is None


def test_unshaped_type_sends_data_as_is():
    assert shape_policy_data(0, False, {"anything": 1}) == {"anything": 1}
    assert shape_policy_data(3, True, {}) is None


def test_update_policy_body(api):
    PolicyService(api).update_policy(9, True, {"minutes": 15})
    api.update_policy.assert_called_once_with(9, {"type": 9, "enabled": True, "data": {"minutes": 15}})


# ----------------------------------------------------------------------
# Organization
# ----------------------------------------------------------------------

def test_update_organization_merges_core_fields(api):
    api.get_organization.return_value = {
        "name": "Acme", "businessName": "Acme Inc", "billingEmail": "billing@acme.test", "identifier": "acme",
    }
    OrganizationService(api).update_organization(name="Acme Corp", businessCountry="US")
    api.update_organization.assert_called_once_with({
        "name": "Acme Corp",
        "businessName": "Acme Inc",
        "billingEmail": "billing@acme.test",
        "identifier": "acme",
        "businessCountry": "US",
    })


def test_update_organization_rejects_unknown_fields(api):
    with pytest.raises(ValueError, match="planet"):
        OrganizationService(api).update_organization(planet="Mars")
    api.get_organization.assert_not_called()


def test_rotate_api_key_invalidates_cached_token(api):
    api.auth = MagicMock()
    api.rotate_api_key.return_value = {"apiKey": "new"}

    result = OrganizationService(api).rotate_api_key()

    api.auth.invalidate.assert_called_once_with()
    assert result["success"] is True
    assert result["apiKey"] == "new"
    assert "update your credentials" in result["message"]


# ----------------------------------------------------------------------
# SSO
# ----------------------------------------------------------------------

def test_oidc_body_keeps_only_oidc_fields():
    body = sso_body(True, SSO_OIDC, {
        "authority": "https://idp", "clientId": "cid", "clientSecret": "",
        "idpEntityId": "ignored", "redirectBehavior": 0, "identifier": "acme",
    })
    assert body == {
        "enabled": True,
        "type": SSO_OIDC,
        "keyConnectorEnabled": False,
        "identifier": "acme",
        "data": {"authority": "https://idp", "clientId": "cid", "redirectBehavior": 0},
    }


def test_disabled_sso_sends_no_data():
    assert sso_body(False, SSO_SAML, {"idpEntityId": "x"})["data"] is None


def test_sso_test_reports_disabled(api):
    api.get_sso_config.return_value = {"enabled": False}
    assert SsoService(api).test_sso_connection() == {
        "success": False,
        "message": "SSO is not enabled for this organization",
    }
    api.get_sso_metadata.assert_not_called()


def test_sso_test_success(api):
    api.get_sso_config.return_value = {"enabled": True, "type": SSO_SAML, "identifier": "acme"}
    api.get_sso_metadata.return_value = "<xml/>"
    result = SsoService(api).test_sso_connection()
    assert result["success"] is True
    assert result["ssoType"] == "SAML 2.0"
    assert result["metadata"] == "<xml/>"


def test_sso_test_never_raises(api):
    api.get_sso_config.return_value = {"enabled": True, "type": SSO_OIDC}
    api.get_sso_metadata.side_effect = BitwardenAPIError("down", kind=ErrorKind.OTHER)
    result = SsoService(api).test_sso_connection()
    assert result == {"success": False, "message": "SSO connection test failed", "error": "down"}


# ----------------------------------------------------------------------
# Directory
# ----------------------------------------------------------------------

def test_directory_body_defaults_and_type_keys():
    body = directory_body(True, 1, {"orgUrl": "https://acme.okta.com", "token": "t", "tenantId": "azure-only"})
    assert body == {
        "enabled": True,
        "type": 1,
        "syncUsers": True,
        "syncGroups": True,
        "overwriteExisting": False,
        "configuration": {"orgUrl": "https://acme.okta.com", "token": "t"},
    }


def test_trigger_sync(api):
    api.trigger_directory_sync.return_value = {"id": "sync-1"}
    result = DirectoryService(api).trigger_sync("delta")
    api.trigger_directory_sync.assert_called_once_with("delta")
    assert result == {
        "success": True,
        "message": "Directory sync triggered successfully",
        "syncType": "delta",
        "id": "sync-1",
    }


def test_sync_history_drops_empty_bounds(api):
    DirectoryService(api).list_sync_history(start="2024-01-01", return_all=False, limit=5)
    api.list_directory_sync_history.assert_called_once_with(
        params={"start": "2024-01-01"}, return_all=False, limit=5
    )
