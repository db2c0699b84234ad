from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class AccessEntry(BaseModel):
    """Collection or group access row."""
    id: str
    readOnly: bool = False
    hidePasswords: bool = False
    manage: bool = False


# ------------------------------------------------------------------
# Members
# ------------------------------------------------------------------

class MemberInvite(BaseModel):
    email: str
    type: int = 2
    accessAll: bool = False
    externalId: Optional[str] = None
    collections: Optional[List[AccessEntry]] = None


class MemberUpdate(BaseModel):
    """Omitted fields keep their current value; externalId=null clears it."""
    type: Optional[int] = None
    accessAll: Optional[bool] = None
    externalId: Optional[str] = None
    collections: Optional[List[AccessEntry]] = None


class GroupIdsRequest(BaseModel):
    groupIds: List[str]


class CollectionsRequest(BaseModel):
    collections: List[AccessEntry]


# ------------------------------------------------------------------
# Collections / Groups
# ------------------------------------------------------------------

class CollectionCreate(BaseModel):
    name: str
    externalId: Optional[str] = None
    groups: Optional[List[AccessEntry]] = None


class CollectionUpdate(BaseModel):
    name: Optional[str] = None
    externalId: Optional[str] = None
    groups: Optional[List[AccessEntry]] = None


class CollectionMemberAccess(BaseModel):
    readOnly: bool = False
    hidePasswords: bool = False
    manage: bool = False


class GroupsRequest(BaseModel):
    groups: List[AccessEntry]


class GroupCreate(BaseModel):
    name: str
    accessAll: bool = False
    externalId: Optional[str] = None
    collections: Optional[List[AccessEntry]] = None


class GroupUpdate(BaseModel):
    name: Optional[str] = None
    accessAll: Optional[bool] = None
    externalId: Optional[str] = None
    collections: Optional[List[AccessEntry]] = None


class MemberIdsRequest(BaseModel):
    memberIds: List[str]


# ------------------------------------------------------------------
# Policies / Organization
# ------------------------------------------------------------------

class PolicyUpdate(BaseModel):
    enabled: bool
    data: Optional[Dict[str, Any]] = None


class OrganizationUpdate(BaseModel):
    name: Optional[str] = None
    businessName: Optional[str] = None
    billingEmail: Optional[str] = None
    identifier: Optional[str] = None
    businessAddress1: Optional[str] = None
    businessAddress2: Optional[str] = None
    businessAddress3: Optional[str] = None
    businessCountry: Optional[str] = None
    businessTaxNumber: Optional[str] = None


class SsoUpdate(BaseModel):
    enabled: bool
    type: int = Field(0, description="0 = OpenID Connect, 1 = SAML 2.0")
    fields: Dict[str, Any] = Field(default_factory=dict)


class DirectoryUpdate(BaseModel):
    enabled: bool
    type: int = Field(0, description="0 = Azure AD, 1 = Okta, 2 = OneLogin, 3 = GSuite")
    fields: Dict[str, Any] = Field(default_factory=dict)


class DirectorySyncRequest(BaseModel):
    type: str = "full"


# ------------------------------------------------------------------
# Secrets Manager
# ------------------------------------------------------------------

class SecretCreate(BaseModel):
    key: str
    value: str
    note: Optional[str] = None
    projectId: Optional[str] = None


class SecretUpdate(BaseModel):
    key: Optional[str] = None
    value: Optional[str] = None
    note: Optional[str] = None
    projectId: Optional[str] = None


class NameRequest(BaseModel):
    name: str


class AccessTokenCreate(BaseModel):
    name: str
    expireAt: Optional[str] = None
    scopes: Optional[List[str]] = None


# ------------------------------------------------------------------
# Import / export
# ------------------------------------------------------------------

class VaultImport(BaseModel):
    format: str
    data: str
    collectionId: Optional[str] = None


class MembersCsvImport(BaseModel):
    csv: str
    defaultCollections: Optional[List[AccessEntry]] = None
