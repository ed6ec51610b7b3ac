"""
Remote Document Store Client

Thin client for the REST document service that holds analysis records and
per-user usage stats. Collections hold JSON documents addressed by an id the
service assigns.

API Reference:
- POST   {base}/{collection}                    -> {"id": "..."}
- GET    {base}/{collection}/{id}               -> document (404 when missing)
- PUT    {base}/{collection}/{id}               -> create or replace
- PATCH  {base}/{collection}/{id}               -> merge fields
- DELETE {base}/{collection}/{id}
- GET    {base}/{collection}?where=field==value&orderBy=f&direction=desc&limit=n
                                                -> {"documents": [{"id": ..., ...}]}

Failures are sorted into the two classes the persistence gateway falls back
on (permission denied, store unavailable); anything else raises
DocumentStoreError.
"""

import logging
from typing import Any, Dict, List, Optional

import requests
from requests.exceptions import ConnectionError, RequestException, Timeout

from sentiment_service.exceptions import (
    PermissionDeniedError,
    PersistenceFailure,
    StoreUnavailableError,
)

logger = logging.getLogger(__name__)


PERMISSION_PHRASES = (
    "permission-denied",
    "permission denied",
    "insufficient permissions",
)


class DocumentStoreError(PersistenceFailure):
    """Remote store rejected a request for a reason other than permissions."""


def is_permission_error(status_code: int, body: str) -> bool:
    if status_code in (401, 403):
        return True
    lowered = (body or "").lower()
    return any(phrase in lowered for phrase in PERMISSION_PHRASES)


class RestDocumentStore:
    """
    REST client for the remote document store

    Example:
        >>> store = RestDocumentStore("https://store.example.com/v1", token="...")
        >>> doc_id = store.add("sentiments", {"ownerId": "u1", "summary": "..."})
        >>> store.query("sentiments", {"ownerId": "u1"}, order_by="createdAt", limit=10)
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: int = 10,
        session: Optional[requests.Session] = None
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})
        if token:
            self.session.headers.update({"Authorization": f"Bearer {token}"})
        logger.info(f"Initialized RestDocumentStore at {self.base_url}")

    def _url(self, collection: str, doc_id: Optional[str] = None) -> str:
        if doc_id is None:
            return f"{self.base_url}/{collection}"
        return f"{self.base_url}/{collection}/{doc_id}"

    def _request(self, method: str, url: str, allow_404: bool = False, **kwargs):
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except (ConnectionError, Timeout) as e:
            logger.warning(f"Remote store unreachable ({method} {url}): {e}")
            raise StoreUnavailableError(
                "Remote store unavailable", details=str(e)
            ) from e
        except RequestException as e:
            raise StoreUnavailableError("Remote store request failed", details=str(e)) from e

        if allow_404 and response.status_code == 404:
            return None

        if response.status_code >= 400:
            body = response.text[:500]
            if is_permission_error(response.status_code, body):
                raise PermissionDeniedError(
                    "Remote store permission denied",
                    details=f"{response.status_code}: {body}"
                )
            if response.status_code >= 500:
                raise StoreUnavailableError(
                    "Remote store unavailable",
                    details=f"{response.status_code}: {body}"
                )
            raise DocumentStoreError(
                "Remote store rejected the request",
                details=f"{response.status_code}: {body}",
                status_code=response.status_code
            )

        return response

    @staticmethod
    def _json(response) -> Any:
        if response is None or not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise DocumentStoreError(
                "Invalid response from remote store", details=response.text[:200]
            ) from e

    def add(self, collection: str, data: Dict[str, Any]) -> str:
        """Create a document and return its assigned id"""
        response = self._request("POST", self._url(collection), json=data)
        doc_id = self._json(response).get("id")
        if not doc_id:
            raise DocumentStoreError("Remote store did not return a document id")
        return str(doc_id)

    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        """Fetch a document, or None when it doesn't exist"""
        response = self._request("GET", self._url(collection, doc_id), allow_404=True)
        if response is None:
            return None
        document = self._json(response)
        document.setdefault("id", doc_id)
        return document

    def set(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        """Create or replace a document under a known id"""
        self._request("PUT", self._url(collection, doc_id), json=data)

    def update(self, collection: str, doc_id: str, patch: Dict[str, Any]) -> None:
        """Merge fields into an existing document"""
        self._request("PATCH", self._url(collection, doc_id), json=patch)

    def delete(self, collection: str, doc_id: str) -> None:
        self._request("DELETE", self._url(collection, doc_id), allow_404=True)

    def query(
        self,
        collection: str,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = True,
        limit: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        """
        Query a collection with equality filters

        Args:
            collection: Collection name
            filters: Field name to required value
            order_by: Field to sort by
            descending: Sort direction
            limit: Maximum documents returned

        Returns:
            Documents, each including its "id"
        """
        params: Dict[str, Any] = {}
        if filters:
            params["where"] = [
                f"{field}=={str(value).lower() if isinstance(value, bool) else value}"
                for field, value in filters.items()
            ]
        if order_by:
            params["orderBy"] = order_by
            params["direction"] = "desc" if descending else "asc"
        if limit:
            params["limit"] = limit

        response = self._request("GET", self._url(collection), params=params)
        documents = self._json(response).get("documents", [])
        logger.debug(f"Query on '{collection}' returned {len(documents)} documents")
        return documents

    def __repr__(self) -> str:
        return f"RestDocumentStore(base_url='{self.base_url}')"
