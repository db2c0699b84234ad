"""Organization settings, billing and API key operations."""

from typing import Dict, Optional

from services.base_service import BaseService

_OPTIONAL_FIELDS = (
    "businessAddress1",
    "businessAddress2",
    "businessAddress3",
    "businessCountry",
    "businessTaxNumber",
)


class OrganizationService(BaseService):
    RESOURCE = "organization"

    def get_organization(self) -> Dict:
        return self.client.get_organization()

    def update_organization(
        self,
        name: Optional[str] = None,
        business_name: Optional[str] = None,
        billing_email: Optional[str] = None,
        identifier: Optional[str] = None,
        **optional: Optional[str],
    ) -> Dict:
        """Update organization settings, keeping current values for the core
        fields not supplied.

        Address and tax fields (businessAddress1-3, businessCountry,
        businessTaxNumber) are only sent when passed as keyword arguments.
        """
        unknown = set(optional) - set(_OPTIONAL_FIELDS)
        if unknown:
            raise ValueError(f"Unknown organization field(s): {', '.join(sorted(unknown))}")

        with self.audited("update_organization", "UPDATE", resource_name=name) as details:
            current = self.client.get_organization()
            body = {
                "name": name if name is not None else current.get("name"),
                "businessName": business_name if business_name is not None else current.get("businessName"),
                "billingEmail": billing_email if billing_email is not None else current.get("billingEmail"),
                "identifier": identifier if identifier is not None else current.get("identifier"),
            }
            for key in _OPTIONAL_FIELDS:
                if key in optional:
                    body[key] = optional[key]
            details["fields"] = sorted(k for k, v in body.items() if v is not None)
            return self.client.update_organization(body)

    def get_billing(self) -> Dict:
        return self.client.get_billing()

    def get_subscription(self) -> Dict:
        return self.client.get_subscription()

    def get_license(self) -> Dict:
        return self.client.get_license()

    def rotate_api_key(self) -> Dict:
        """Rotate the organization API key.

        The old key stops working, so the cached token is dropped and the
        stored tenant credentials must be updated before the next call.
        """
        with self.audited("rotate_api_key", "UPDATE"):
            result = self.client.rotate_api_key()
        self.client.auth.invalidate()
        return {
            "success": True,
            "message": "API key rotated successfully. Please update your credentials.",
            **(result or {}),
        }
