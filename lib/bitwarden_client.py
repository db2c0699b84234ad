import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

import requests

from .auth import BitwardenAuth
from .environment import resolve_api_url
from .errors import (
    BitwardenAPIError,
    ErrorKind,
    extract_error_message,
    extract_validation_errors,
)

logger = logging.getLogger(__name__)

PUBLIC_ROOT = "/public"
RATE_LIMIT_MESSAGE = "Rate limit exceeded. Please wait before making more requests."
DEFAULT_MAX_PAGES = 1000


# ----------------------------------------------------------------------
# Page decoding
# ----------------------------------------------------------------------

@dataclass
class ListEnvelope:
    data: List[Any]
    continuation_token: Optional[str]


@dataclass
class BareList:
    items: List[Any]


@dataclass
class Opaque:
    body: Any


Page = Union[ListEnvelope, BareList, Opaque]


def decode_page(body: Any) -> Page:
    """Classify a list-endpoint response.

    Paginated endpoints answer {"object": "list", "data": [...],
    "continuationToken": ...}; a few return a bare array. Anything else is
    not a page.
    """
    if isinstance(body, dict) and isinstance(body.get("data"), list):
        return ListEnvelope(body["data"], body.get("continuationToken") or None)
    if isinstance(body, list):
        return BareList(body)
    return Opaque(body)


def page_items(body: Any) -> List[Any]:
    """Items of a single page regardless of shape ([] for opaque bodies)."""
    page = decode_page(body)
    if isinstance(page, ListEnvelope):
        return page.data
    if isinstance(page, BareList):
        return page.items
    return []


class BitwardenClient:
    """Low-level HTTP client for the Bitwarden Public API.

    Handles bearer authentication, the single re-authentication retry on
    401, error classification, and continuation-token pagination. Business
    logic lives in the services/ layer.
    """

    def __init__(
        self,
        auth: BitwardenAuth,
        session: Optional[requests.Session] = None,
        timeout: float = 30,
        max_pages: int = DEFAULT_MAX_PAGES,
    ):
        self.auth = auth
        self._session = session or requests.Session()
        self.timeout = timeout
        self.max_pages = max_pages

    @property
    def api_url(self) -> str:
        creds = self.auth.credentials
        return resolve_api_url(creds.environment, creds.self_hosted_url)

    # ------------------------------------------------------------------
    # Request executor
    # ------------------------------------------------------------------

    def _headers(self, token: str) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def _send(self, method: str, url: str, token: str, body, query) -> requests.Response:
        kwargs: Dict[str, Any] = {"headers": self._headers(token), "timeout": self.timeout}
        if body:
            kwargs["json"] = body
        if query:
            kwargs["params"] = query
        return self._session.request(method, url, **kwargs)

    def request(
        self,
        method: str,
        endpoint: str,
        body: Optional[Union[Dict, List]] = None,
        query: Optional[Dict] = None,
    ) -> Any:
        """Perform one authenticated call against /public{endpoint}.

        Returns the decoded JSON body (None for an empty body). Raises
        BitwardenAPIError classified by status. A 401 received while a token
        was cached triggers exactly one retry with a freshly exchanged token.
        """
        method = method.upper()
        url = f"{self.api_url}{PUBLIC_ROOT}{endpoint}"
        # Read before get_token(), which always leaves a valid entry behind
        had_cached_token = self.auth.has_cached_token
        token = self.auth.get_token()

        resp = self._dispatch(method, endpoint, url, token, body, query)
        if resp.ok:
            return _decode(resp)

        if resp.status_code == 429:
            logger.warning("Rate limited on %s %s", method, endpoint)
            raise self._error(resp, method, endpoint, message=RATE_LIMIT_MESSAGE)

        if resp.status_code == 401 and had_cached_token:
            logger.info("401 on %s %s; refreshing token and retrying once", method, endpoint)
            self.auth.invalidate()
            token = self.auth.get_token()
            retry = self._dispatch(method, endpoint, url, token, body, query)
            if retry.ok:
                return _decode(retry)
            raise self._error(retry, method, endpoint)

        raise self._error(resp, method, endpoint)

    def _dispatch(self, method, endpoint, url, token, body, query) -> requests.Response:
        try:
            return self._send(method, url, token, body, query)
        except requests.RequestException as exc:
            raise BitwardenAPIError(
                f"Request failed: {exc}",
                method=method,
                endpoint=endpoint,
                kind=ErrorKind.OTHER,
            ) from exc

    def _error(
        self,
        resp: requests.Response,
        method: str,
        endpoint: str,
        message: Optional[str] = None,
    ) -> BitwardenAPIError:
        payload = _decode(resp)
        return BitwardenAPIError(
            message or extract_error_message(payload, resp.reason or f"HTTP {resp.status_code}"),
            status_code=resp.status_code,
            payload=payload,
            validation_errors=extract_validation_errors(payload),
            method=method,
            endpoint=endpoint,
        )

    # ------------------------------------------------------------------
    # Pagination driver
    # ------------------------------------------------------------------

    def request_all(
        self,
        method: str,
        endpoint: str,
        body: Optional[Dict] = None,
        query: Optional[Dict] = None,
    ) -> List[Any]:
        """Follow continuationToken until exhausted and return every item."""
        items: List[Any] = []
        cursor: Optional[str] = None

        for _ in range(self.max_pages):
            qs = dict(query or {})
            if cursor:
                qs["continuationToken"] = cursor

            page = decode_page(self.request(method, endpoint, body, qs))
            if isinstance(page, BareList):
                items.extend(page.items)
                return items
            if not isinstance(page, ListEnvelope):
                return items

            items.extend(page.data)
            if not page.continuation_token:
                return items
            if page.continuation_token == cursor:
                logger.warning(
                    "Server repeated continuation token on %s %s; stopping after %d items",
                    method, endpoint, len(items),
                )
                return items
            cursor = page.continuation_token

        logger.warning(
            "Stopped paginating %s %s after %d pages (%d items)",
            method, endpoint, self.max_pages, len(items),
        )
        return items

    # ------------------------------------------------------------------
    # Convenience wrappers
    # ------------------------------------------------------------------

    def _get(self, endpoint: str, params: Optional[Dict] = None) -> Any:
        return self.request("GET", endpoint, query=params)

    def _post(self, endpoint: str, payload: Optional[Dict] = None) -> Any:
        return self.request("POST", endpoint, body=payload)

    def _put(self, endpoint: str, payload: Optional[Dict] = None) -> Any:
        return self.request("PUT", endpoint, body=payload)

    def _delete(self, endpoint: str) -> bool:
        self.request("DELETE", endpoint)
        return True

    def _list(self, endpoint: str, params: Optional[Dict] = None, return_all: bool = True,
              limit: Optional[int] = None) -> List[Dict]:
        if return_all:
            return self.request_all("GET", endpoint, query=params)
        items = page_items(self._get(endpoint, params))
        return items[:limit] if limit is not None else items

    def test_credentials(self) -> Dict:
        """Fetch the organization this API key belongs to."""
        return self._get("/organizations/self")

    # ------------------------------------------------------------------
    # Members
    # ------------------------------------------------------------------

    def list_members(self, return_all: bool = True, limit: Optional[int] = None) -> List[Dict]:
        return self._list("/members", return_all=return_all, limit=limit)

    def get_member(self, member_id: str) -> Dict:
        return self._get(f"/members/{member_id}")

    def create_member(self, config: Dict) -> Dict:
        return self._post("/members", config)

    def update_member(self, member_id: str, config: Dict) -> Dict:
        return self._put(f"/members/{member_id}", config)

    def delete_member(self, member_id: str) -> bool:
        return self._delete(f"/members/{member_id}")

    def reinvite_member(self, member_id: str) -> Any:
        return self._post(f"/members/{member_id}/reinvite")

    def confirm_member(self, member_id: str) -> Any:
        return self._post(f"/members/{member_id}/confirm")

    def update_member_group_ids(self, member_id: str, group_ids: List[str]) -> Any:
        return self._put(f"/members/{member_id}/group-ids", {"groupIds": group_ids})

    def revoke_member(self, member_id: str) -> Any:
        return self._put(f"/members/{member_id}/revoke")

    def restore_member(self, member_id: str) -> Any:
        return self._put(f"/members/{member_id}/restore")

    # ------------------------------------------------------------------
    # Collections
    # ------------------------------------------------------------------

    def list_collections(self, return_all: bool = True, limit: Optional[int] = None) -> List[Dict]:
        return self._list("/collections", return_all=return_all, limit=limit)

    def get_collection(self, collection_id: str) -> Dict:
        return self._get(f"/collections/{collection_id}")

    def create_collection(self, config: Dict) -> Dict:
        return self._post("/collections", config)

    def update_collection(self, collection_id: str, config: Dict) -> Dict:
        return self._put(f"/collections/{collection_id}", config)

    def delete_collection(self, collection_id: str) -> bool:
        return self._delete(f"/collections/{collection_id}")

    # ------------------------------------------------------------------
    # Groups
    # ------------------------------------------------------------------

    def list_groups(self, return_all: bool = True, limit: Optional[int] = None) -> List[Dict]:
        return self._list("/groups", return_all=return_all, limit=limit)

    def get_group(self, group_id: str) -> Dict:
        return self._get(f"/groups/{group_id}")

    def create_group(self, config: Dict) -> Dict:
        return self._post("/groups", config)

    def update_group(self, group_id: str, config: Dict) -> Dict:
        return self._put(f"/groups/{group_id}", config)

    def delete_group(self, group_id: str) -> bool:
        return self._delete(f"/groups/{group_id}")

    def get_group_member_ids(self, group_id: str) -> List[str]:
        return self._get(f"/groups/{group_id}/member-ids") or []

    def set_group_member_ids(self, group_id: str, member_ids: List[str]) -> Any:
        return self._put(f"/groups/{group_id}/member-ids", {"memberIds": member_ids})

    # ------------------------------------------------------------------
    # Policies
    # ------------------------------------------------------------------

    def list_policies(self, return_all: bool = True, limit: Optional[int] = None) -> List[Dict]:
        return self._list("/policies", return_all=return_all, limit=limit)

    def get_policy(self, policy_type: int) -> Dict:
        return self._get(f"/policies/{policy_type}")

    def update_policy(self, policy_type: int, config: Dict) -> Dict:
        return self._put(f"/policies/{policy_type}", config)

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def list_events(self, params: Optional[Dict] = None, return_all: bool = True,
                    limit: Optional[int] = None) -> List[Dict]:
        return self._list("/events", params=params, return_all=return_all, limit=limit)

    # ------------------------------------------------------------------
    # Organization
    # ------------------------------------------------------------------

    def get_organization(self) -> Dict:
        return self._get("/organizations/self")

    def update_organization(self, config: Dict) -> Dict:
        return self._put("/organizations/self", config)

    def get_billing(self) -> Dict:
        return self._get("/organizations/self/billing")

    def get_subscription(self) -> Dict:
        return self._get("/organizations/self/subscription")

    def get_license(self) -> Dict:
        return self._get("/organizations/self/license")

    def rotate_api_key(self) -> Dict:
        return self._post("/organizations/self/api-key") or {}

    # ------------------------------------------------------------------
    # SSO
    # ------------------------------------------------------------------

    def get_sso_config(self) -> Dict:
        return self._get("/organizations/sso")

    def update_sso_config(self, config: Dict) -> Dict:
        return self._put("/organizations/sso", config)

    def get_sso_metadata(self) -> Any:
        return self._get("/organizations/sso/metadata")

    # ------------------------------------------------------------------
    # Directory sync
    # ------------------------------------------------------------------

    def get_directory_config(self) -> Dict:
        return self._get("/organizations/directory")

    def update_directory_config(self, config: Dict) -> Dict:
        return self._put("/organizations/directory", config)

    def trigger_directory_sync(self, sync_type: str) -> Dict:
        return self._post("/organizations/directory/sync", {"type": sync_type}) or {}

    def list_directory_sync_history(self, params: Optional[Dict] = None, return_all: bool = True,
                                    limit: Optional[int] = None) -> List[Dict]:
        return self._list("/organizations/directory/sync-history", params=params,
                          return_all=return_all, limit=limit)

    # ------------------------------------------------------------------
    # Secrets Manager: secrets
    # ------------------------------------------------------------------

    def list_secrets(self, return_all: bool = True, limit: Optional[int] = None) -> List[Dict]:
        return self._list("/secrets", return_all=return_all, limit=limit)

    def get_secret(self, secret_id: str) -> Dict:
        return self._get(f"/secrets/{secret_id}")

    def create_secret(self, config: Dict) -> Dict:
        return self._post("/secrets", config)

    def update_secret(self, secret_id: str, config: Dict) -> Dict:
        return self._put(f"/secrets/{secret_id}", config)

    def delete_secret(self, secret_id: str) -> bool:
        return self._delete(f"/secrets/{secret_id}")

    # ------------------------------------------------------------------
    # Secrets Manager: projects
    # ------------------------------------------------------------------

    def list_projects(self, return_all: bool = True, limit: Optional[int] = None) -> List[Dict]:
        return self._list("/projects", return_all=return_all, limit=limit)

    def get_project(self, project_id: str) -> Dict:
        return self._get(f"/projects/{project_id}")

    def create_project(self, name: str) -> Dict:
        return self._post("/projects", {"name": name})

    def update_project(self, project_id: str, name: str) -> Dict:
        return self._put(f"/projects/{project_id}", {"name": name})

    def delete_project(self, project_id: str) -> bool:
        return self._delete(f"/projects/{project_id}")

    def list_project_secrets(self, project_id: str, return_all: bool = True,
                             limit: Optional[int] = None) -> List[Dict]:
        return self._list(f"/projects/{project_id}/secrets", return_all=return_all, limit=limit)

    def list_project_service_accounts(self, project_id: str, return_all: bool = True,
                                      limit: Optional[int] = None) -> List[Dict]:
        return self._list(f"/projects/{project_id}/service-accounts",
                          return_all=return_all, limit=limit)

    # ------------------------------------------------------------------
    # Secrets Manager: service accounts
    # ------------------------------------------------------------------

    def list_service_accounts(self, return_all: bool = True, limit: Optional[int] = None) -> List[Dict]:
        return self._list("/service-accounts", return_all=return_all, limit=limit)

    def get_service_account(self, account_id: str) -> Dict:
        return self._get(f"/service-accounts/{account_id}")

    def create_service_account(self, name: str) -> Dict:
        return self._post("/service-accounts", {"name": name})

    def update_service_account(self, account_id: str, name: str) -> Dict:
        return self._put(f"/service-accounts/{account_id}", {"name": name})

    def delete_service_account(self, account_id: str) -> bool:
        return self._delete(f"/service-accounts/{account_id}")

    def list_access_tokens(self, account_id: str, return_all: bool = True,
                           limit: Optional[int] = None) -> List[Dict]:
        return self._list(f"/service-accounts/{account_id}/access-tokens",
                          return_all=return_all, limit=limit)

    def create_access_token(self, account_id: str, config: Dict) -> Dict:
        return self._post(f"/service-accounts/{account_id}/access-tokens", config)

    def revoke_access_token(self, account_id: str, token_id: str) -> bool:
        return self._delete(f"/service-accounts/{account_id}/access-tokens/{token_id}")

    # ------------------------------------------------------------------
    # Import / export
    # ------------------------------------------------------------------

    def import_organization(self, config: Dict) -> Dict:
        return self._post("/import", config) or {}

    def export_organization(self, params: Dict) -> Any:
        return self._get("/export", params)


def _decode(resp: requests.Response) -> Any:
    if not resp.content:
        return None
    try:
        return resp.json()
    except ValueError:
        return resp.text
