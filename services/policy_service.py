"""Organization policy operations."""

from typing import Any, Dict, List, Optional

from lib.formatting import policy_type_label
from services.base_service import DEFAULT_LIMIT, BaseService

# Policy types whose data block has a fixed shape. The first tuple lists the
# keys whose presence switches to the shaped block; the second is the block.
_SHAPED_DATA = {
    1: (  # Master Password
        ("minComplexity", "minLength", "requireUpper", "requireLower", "requireNumbers", "requireSpecial"),
        ("minComplexity", "minLength", "requireUpper", "requireLower", "requireNumbers", "requireSpecial"),
    ),
    2: (  # Password Generator
        ("defaultType", "minLength", "minNumbers", "minSpecial"),
        ("defaultType", "minLength", "minNumbers", "minSpecial",
         "useUpper", "useLower", "useNumbers", "useSpecial"),
    ),
    7: (("disableHideEmail",), ("disableHideEmail",)),  # Send Options
    9: (("minutes",), ("minutes",)),  # Maximum Vault Timeout
}


def shape_policy_data(policy_type: int, enabled: bool, data: Optional[Dict]) -> Optional[Dict]:
    """Build the ``data`` block of a policy update.

    Known policy types get their fixed field set (unset fields omitted) when
    any of their trigger fields is supplied. Otherwise the supplied data is
    sent as-is when the policy is enabled, or for types without a fixed shape.
    """
    data = data or {}
    result: Optional[Dict] = dict(data) if enabled and data else None

    shape = _SHAPED_DATA.get(policy_type)
    if shape is None:
        return dict(data) if data else result
    triggers, fields = shape
    if any(data.get(k) is not None for k in triggers):
        return {k: data[k] for k in fields if data.get(k) is not None}
    return result


class PolicyService(BaseService):
    RESOURCE = "policy"

    def list_policies(self, return_all: bool = True, limit: int = DEFAULT_LIMIT) -> List[Dict]:
        with self.audited("list_policies", "READ") as details:
            result = self.client.list_policies(return_all=return_all, limit=limit)
            details["count"] = len(result)
        return result

    def get_policy(self, policy_type: int) -> Dict:
        return self.client.get_policy(policy_type)

    def update_policy(self, policy_type: int, enabled: bool, data: Optional[Dict[str, Any]] = None) -> Dict:
        body = {
            "type": policy_type,
            "enabled": enabled,
            "data": shape_policy_data(policy_type, enabled, data),
        }
        with self.audited(
            "update_policy", "UPDATE",
            resource_id=str(policy_type),
            resource_name=policy_type_label(policy_type),
            details={"enabled": enabled},
        ):
            return self.client.update_policy(policy_type, body)
