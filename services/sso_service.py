"""SSO configuration operations (OpenID Connect and SAML 2.0)."""

import logging
from typing import Any, Dict

from lib.errors import BitwardenError, format_error
from lib.formatting import SSO_TYPE_LABELS
from services.base_service import BaseService

logger = logging.getLogger(__name__)

SSO_OIDC = 0
SSO_SAML = 1

# Provider data keys accepted per SSO type: (string keys, flag keys).
# String keys are sent only when non-empty; flags whenever supplied.
_PROVIDER_FIELDS = {
    SSO_OIDC: (
        ("authority", "clientId", "clientSecret", "metadataAddress"),
        ("redirectBehavior", "getClaimsFromUserInfoEndpoint"),
    ),
    SSO_SAML: (
        ("spNameIdFormat", "spOutboundSigningAlgorithm", "spSigningBehavior",
         "spMinIncomingSigningAlgorithm", "idpEntityId", "idpBindingType",
         "idpSingleSignOnServiceUrl", "idpSingleLogoutServiceUrl",
         "idpArtifactResolutionServiceUrl", "idpX509PublicCert",
         "idpOutboundSigningAlgorithm"),
        ("spWantAssertionsSigned", "spValidateCertificates",
         "idpAllowUnsolicitedAuthnResponse", "idpDisableOutboundLogoutRequests",
         "idpWantAuthnRequestsSigned"),
    ),
}


def sso_body(enabled: bool, sso_type: int, fields: Dict[str, Any]) -> Dict[str, Any]:
    body: Dict[str, Any] = {
        "enabled": enabled,
        "type": sso_type,
        "keyConnectorEnabled": bool(fields.get("keyConnectorEnabled", False)),
        "data": None,
    }
    if fields.get("identifier"):
        body["identifier"] = fields["identifier"]

    if enabled and sso_type in _PROVIDER_FIELDS:
        strings, flags = _PROVIDER_FIELDS[sso_type]
        data = {k: fields[k] for k in strings if fields.get(k)}
        data.update({k: fields[k] for k in flags if fields.get(k) is not None})
        if data:
            body["data"] = data
    return body


class SsoService(BaseService):
    RESOURCE = "sso"

    def get_sso_config(self) -> Dict:
        return self.client.get_sso_config()

    def update_sso_config(self, enabled: bool, sso_type: int, **fields: Any) -> Dict:
        """Replace the SSO configuration.

        ``fields`` takes the API's own key names (``authority``,
        ``idpEntityId``, ``keyConnectorEnabled``...); keys that do not apply
        to ``sso_type`` are ignored.
        """
        body = sso_body(enabled, sso_type, fields)
        with self.audited(
            "update_sso_config", "UPDATE",
            resource_name=SSO_TYPE_LABELS.get(sso_type, str(sso_type)),
            details={"enabled": enabled, "fields": sorted((body.get("data") or {}).keys())},
        ):
            return self.client.update_sso_config(body)

    def get_sso_metadata(self) -> Any:
        return self.client.get_sso_metadata()

    def test_sso_connection(self) -> Dict[str, Any]:
        """Check that SSO is enabled and its metadata resolves.

        Always returns a result dict with ``success`` and ``message``.
        """
        try:
            config = self.client.get_sso_config() or {}
            if not config.get("enabled"):
                return {"success": False, "message": "SSO is not enabled for this organization"}
            metadata = self.client.get_sso_metadata()
        except BitwardenError as exc:
            logger.info("SSO connection test failed: %s", exc)
            return {
                "success": False,
                "message": "SSO connection test failed",
                "error": format_error(exc),
            }
        return {
            "success": True,
            "message": "SSO configuration is valid",
            "ssoType": "OpenID Connect" if config.get("type") == SSO_OIDC else "SAML 2.0",
            "identifier": config.get("identifier"),
            "metadata": metadata,
        }
