"""Labels and payload helpers shared by services, the CLI, and the API."""

import re
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Union

MEMBER_TYPE_LABELS = {
    0: "Owner",
    1: "Admin",
    2: "User",
    3: "Manager",
    4: "Custom",
}

MEMBER_STATUS_LABELS = {
    -1: "Revoked",
    0: "Invited",
    1: "Accepted",
    2: "Confirmed",
}

POLICY_TYPE_LABELS = {
    0: "Two-Factor Authentication",
    1: "Master Password",
    2: "Password Generator",
    3: "Single Organization",
    4: "Require SSO",
    5: "Personal Ownership",
    6: "Disable Send",
    7: "Send Options",
    8: "Reset Password",
    9: "Maximum Vault Timeout",
    10: "Disable Personal Vault Export",
    11: "Activate Autofill",
}

SSO_TYPE_LABELS = {0: "OpenID Connect", 1: "SAML 2.0"}

DIRECTORY_TYPE_LABELS = {0: "Azure AD", 1: "Okta", 2: "OneLogin", 3: "GSuite"}

EVENT_TYPE_LABELS = {
    # User
    1000: "User Logged In",
    1001: "User Changed Password",
    1002: "User Updated 2FA",
    1003: "User Disabled 2FA",
    1004: "User Recovered 2FA",
    1005: "User Failed Login",
    1006: "User Failed 2FA",
    1007: "User Client Export Vault",
    1008: "User Updated Temp Password",
    # Cipher
    1100: "Cipher Created",
    1101: "Cipher Updated",
    1102: "Cipher Deleted",
    1103: "Cipher Attachment Created",
    1104: "Cipher Attachment Deleted",
    1105: "Cipher Shared",
    1106: "Cipher Updated Collections",
    1107: "Cipher Client Viewed",
    1108: "Cipher Client Toggled Password Visible",
    1109: "Cipher Client Toggled Hidden Field Visible",
    1110: "Cipher Client Toggled Card Code Visible",
    1111: "Cipher Client Copied Password",
    1112: "Cipher Client Copied Hidden Field",
    1113: "Cipher Client Copied Card Code",
    1114: "Cipher Client Autofilled",
    1115: "Cipher Soft Deleted",
    1116: "Cipher Restored",
    # Collection
    1300: "Collection Created",
    1301: "Collection Updated",
    1302: "Collection Deleted",
    # Group
    1400: "Group Created",
    1401: "Group Updated",
    1402: "Group Deleted",
    # Organization user / organization
    1500: "Organization User Invited",
    1501: "Organization User Confirmed",
    1502: "Organization User Updated",
    1503: "Organization User Removed",
    1504: "Organization User Updated Groups",
    1505: "Organization Updated",
    1506: "Organization Purged Vault",
    1507: "Organization Client Exported Vault",
    1508: "Organization Vault Accessed",
    1509: "Organization Enabled SSO",
    1510: "Organization Disabled SSO",
    1511: "Organization Enabled Key Connector",
    1512: "Organization Disabled Key Connector",
    # Policy
    1600: "Policy Updated",
    1601: "Policy Enabled",
    # Provider
    1700: "Provider User Invited",
    1701: "Provider User Confirmed",
    1702: "Provider User Updated",
    1703: "Provider User Removed",
    1704: "Provider Organization Created",
    1705: "Provider Organization Added",
    1706: "Provider Organization Removed",
    1707: "Provider Organization VaultAccessed",
    # Organization domain
    1800: "Organization Domain Added",
    1801: "Organization Domain Removed",
    1802: "Organization Domain Verified",
    1803: "Organization Domain Not Verified",
    # Secrets Manager
    1900: "Secret Accessed",
}

_GUID_RE = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.I)
_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def member_type_label(value: Optional[int]) -> str:
    return MEMBER_TYPE_LABELS.get(value, "Unknown")


def member_status_label(value: Optional[int]) -> str:
    return MEMBER_STATUS_LABELS.get(value, "Unknown")


def policy_type_label(value: Optional[int]) -> str:
    return POLICY_TYPE_LABELS.get(value, "Unknown")


def event_type_label(value: Optional[int]) -> str:
    return EVENT_TYPE_LABELS.get(value, f"Unknown Event ({value})")


def event_type_category(value: int) -> str:
    if 1000 <= value < 1100:
        return "User"
    if 1100 <= value < 1200:
        return "Cipher"
    if 1300 <= value < 1400:
        return "Collection"
    if 1400 <= value < 1500:
        return "Group"
    if 1500 <= value < 1600:
        return "Organization"
    if 1600 <= value < 1700:
        return "Policy"
    return "Other"


def is_valid_guid(value: str) -> bool:
    return bool(value) and bool(_GUID_RE.match(value))


def is_valid_email(value: str) -> bool:
    return bool(value) and bool(_EMAIL_RE.match(value))


def to_iso(value: Union[str, datetime]) -> str:
    """Normalise a datetime or date string to UTC ISO-8601 with a Z suffix."""
    if isinstance(value, str):
        value = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def access_entries(entries: Optional[Iterable[Dict]], id_key: str) -> List[Dict]:
    """Normalise collection/group access rows to the API's access shape.

    Rows may identify the target as "id" or as id_key (e.g. "collectionId");
    missing permission flags default to False.
    """
    result = []
    for entry in entries or []:
        result.append({
            "id": entry.get(id_key) or entry.get("id"),
            "readOnly": bool(entry.get("readOnly", False)),
            "hidePasswords": bool(entry.get("hidePasswords", False)),
            "manage": bool(entry.get("manage", False)),
        })
    return result


def collection_access(entries: Optional[Iterable[Dict]]) -> List[Dict]:
    return access_entries(entries, "collectionId")


def group_access(entries: Optional[Iterable[Dict]]) -> List[Dict]:
    return access_entries(entries, "groupId")


def clean_empty_values(obj: Dict[str, Any]) -> Dict[str, Any]:
    """Drop None/"" values recursively; nested dicts that end up empty are dropped too."""
    cleaned: Dict[str, Any] = {}
    for key, value in obj.items():
        if value is None or value == "":
            continue
        if isinstance(value, dict):
            nested = clean_empty_values(value)
            if nested:
                cleaned[key] = nested
        else:
            cleaned[key] = value
    return cleaned


def chunk(items: List[Any], size: int) -> List[List[Any]]:
    if size < 1:
        raise ValueError("size must be at least 1")
    return [items[i:i + size] for i in range(0, len(items), size)]
