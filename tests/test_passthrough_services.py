import logging

import pytest

from lib.log_setup import setup_logging
from services.collection_service import CollectionService
from services.directory_service import DirectoryService
from services.group_service import GroupService
from services.organization_service import OrganizationService
from services.policy_service import PolicyService
from services.secrets_service import SecretsService
from services.sso_service import SSO_SAML, SsoService


def test_collection_group_access(api):
    service = CollectionService(api)
    api.get_collection.return_value = {"id": "c1", "name": "Eng", "externalId": None, "groups": [{"id": "g1"}]}
    api.list_collections.return_value = [{"id": "c1"}]

    assert service.list_collections() == [{"id": "c1"}]
    assert service.list_collection_groups("c1") == [{"id": "g1"}]

    service.update_collection_groups("c1", [{"groupId": "g2", "manage": True}])
    api.update_collection.assert_called_once_with("c1", {
        "name": "Eng",
        "externalId": None,
        "groups": [{"id": "g2", "readOnly": False, "hidePasswords": False, "manage": True}],
    })


def test_group_collections_missing_key_is_empty(api):
    api.get_group.return_value = {"id": "g1"}
    assert GroupService(api).list_group_collections("g1") == []


def test_policy_reads(api):
    api.list_policies.return_value = [{"type": 0}]
    api.get_policy.return_value = {"type": 1, "enabled": True}
    service = PolicyService(api)
    assert service.list_policies(return_all=False, limit=1) == [{"type": 0}]
    assert service.get_policy(1) == {"type": 1, "enabled": True}
    api.get_policy.assert_called_once_with(1)


@pytest.mark.parametrize("method", ["get_billing", "get_subscription", "get_license"])
def test_organization_reads(api, method):
    getattr(api, method).return_value = {"object": method}
    assert getattr(OrganizationService(api), method)() == {"object": method}


def test_update_sso_config_sends_saml_body(api):
    SsoService(api).update_sso_config(True, SSO_SAML, idpEntityId="https://idp", spWantAssertionsSigned=True)
    body = api.update_sso_config.call_args.args[0]
    assert body["type"] == SSO_SAML
    assert body["data"] == {"idpEntityId": "https://idp", "spWantAssertionsSigned": True}


def test_directory_config_round(api):
    api.get_directory_config.return_value = {"enabled": False}
    service = DirectoryService(api)
    assert service.get_directory_config() == {"enabled": False}

    service.update_directory_config(True, 0, tenantId="t", applicationId="a", secret="s", syncGroups=False)
    body = api.update_directory_config.call_args.args[0]
    assert body["syncGroups"] is False
    assert body["configuration"] == {"tenantId": "t", "applicationId": "a", "secret": "s"}


def test_secrets_manager_listings(api):
    service = SecretsService(api)
    api.list_project_secrets.return_value = [{"id": "s1"}]
    api.list_project_service_accounts.return_value = [{"id": "sa1"}]
    api.list_access_tokens.return_value = [{"id": "t1"}]

    assert service.list_secrets_by_project("p1") == [{"id": "s1"}]
    assert service.list_project_secrets("p1", return_all=False, limit=3) == [{"id": "s1"}]
    api.list_project_secrets.assert_called_with("p1", return_all=False, limit=3)
    assert service.list_project_service_accounts("p1") == [{"id": "sa1"}]
    assert service.list_access_tokens("sa1") == [{"id": "t1"}]


def test_setup_logging_reads_level_from_env(monkeypatch):
    monkeypatch.setenv("BWCONFIG_LOG_LEVEL", "debug")
    setup_logging()
    assert logging.getLogger().level == logging.DEBUG
    assert logging.getLogger("urllib3").level == logging.WARNING
    setup_logging("WARNING")
