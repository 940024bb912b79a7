"""Thin Firestore REST API client (no firebase-admin).

Uses google-auth for service account tokens and Firestore REST v1.
Avoids grpcio / firebase-admin to keep installs small.
All HTTP calls use httpx.AsyncClient so they do not block the event loop.
Implements the DocumentStoreClient protocol.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any
from urllib.parse import quote

import httpx
from google.auth.exceptions import GoogleAuthError

from firekit.application.dtos.document import DocumentSnapshot
from firekit.application.interfaces.document_store import (
    DocumentCallback,
    QueryCallback,
)
from firekit.domain.exceptions import EncodeError, TransportError
from firekit.domain.filters import CompositeFilter, FieldFilter, Filter
from firekit.infrastructure.firebase._rest_encoding import (
    _encode_value,
    decode_document,
    encode_document,
    merge_field_paths,
)
from firekit.infrastructure.firebase._subscriptions import PollingRegistration
from firekit.shared.utils.generators import generate_document_id

logger = logging.getLogger(__name__)

_FIRESTORE_SCOPE = "https://www.googleapis.com/auth/datastore"
_BASE = "https://firestore.googleapis.com/v1"


def _get_credentials(key_dict: dict):
    """Return google.oauth2.service_account.Credentials for Firestore."""
    from google.oauth2 import service_account

    return service_account.Credentials.from_service_account_info(
        key_dict, scopes=[_FIRESTORE_SCOPE]
    )


def _get_access_token(credentials) -> str:
    from google.auth.transport.requests import Request

    if not credentials.valid:
        credentials.refresh(Request())
    return credentials.token


async def _request_async(
    client: httpx.AsyncClient,
    url: str,
    method: str = "GET",
    body: dict | None = None,
    access_token: str | None = None,
    params: list[tuple[str, str]] | None = None,
) -> Any:
    """Perform async HTTP request to Firestore REST API. 404 returns None.

    Raises:
        TransportError: Network failure or any non-2xx status other than 404.
    """
    headers = {"Content-Type": "application/json"}
    if access_token:
        headers["Authorization"] = f"Bearer {access_token}"
    if method not in ("GET", "PATCH", "POST", "DELETE"):
        raise ValueError(f"Unsupported method: {method!r}")
    try:
        resp = await client.request(
            method, url, headers=headers, json=body, params=params
        )
    except httpx.HTTPError as e:
        raise TransportError(
            f"Firestore request failed: {method} {url}: {e}", details={"url": url}
        ) from e
    if resp.status_code == 404:
        return None
    if not 200 <= resp.status_code < 300:
        raise TransportError(
            f"Firestore returned {resp.status_code} for {method} {url}",
            status_code=resp.status_code,
            details={"url": url, "body": resp.text[:500]},
        )
    if method == "DELETE":
        return {}
    raw = resp.content
    if not raw:
        return {}
    try:
        return json.loads(raw.decode())
    except ValueError as e:
        raise TransportError(
            f"Firestore returned an invalid JSON body for {method} {url}",
            status_code=resp.status_code,
            details={"url": url, "body": resp.text[:500]},
        ) from e


_OP_MAP: dict[str, str] = {
    "==": "EQUAL",
    "!=": "NOT_EQUAL",
    "<": "LESS_THAN",
    "<=": "LESS_THAN_OR_EQUAL",
    ">": "GREATER_THAN",
    ">=": "GREATER_THAN_OR_EQUAL",
    "in": "IN",
    "not-in": "NOT_IN",
    "array-contains": "ARRAY_CONTAINS",
    "array-contains-any": "ARRAY_CONTAINS_ANY",
}


def _encode_filter(filter: Filter) -> dict[str, Any]:
    """Translate a Filter into a structuredQuery 'where' clause."""
    if isinstance(filter, CompositeFilter):
        return {
            "compositeFilter": {
                "op": filter.operator,
                "filters": [_encode_filter(f) for f in filter.filters],
            }
        }
    if isinstance(filter, FieldFilter):
        field = {"fieldPath": filter.field_path}
        if filter.value is None and filter.op_string in ("==", "!="):
            op = "IS_NULL" if filter.op_string == "==" else "IS_NOT_NULL"
            return {"unaryFilter": {"field": field, "op": op}}
        return {
            "fieldFilter": {
                "field": field,
                "op": _OP_MAP[filter.op_string],
                "value": _encode_value(filter.value),
            }
        }
    raise TypeError(f"Unsupported filter type: {type(filter).__name__}")


def _snapshot_from_rest(doc: dict) -> DocumentSnapshot:
    name = doc.get("name", "")
    doc_id = name.split("/")[-1] if name else ""
    return DocumentSnapshot(doc_id, decode_document(doc.get("fields")))


class FirestoreRESTClient:
    """Lightweight Firestore client using REST API (no firebase-admin)."""

    def __init__(
        self,
        project_id: str,
        credentials,
        *,
        database: str = "(default)",
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
        poll_interval: float = 1.0,
    ) -> None:
        self._project_id = project_id
        self._credentials = credentials
        self._prefix = f"projects/{project_id}/databases/{database}/documents"
        self._http = http_client if http_client is not None else httpx.AsyncClient(timeout=timeout)
        self._owns_http = http_client is None
        self._poll_interval = poll_interval

    async def aclose(self) -> None:
        """Close the HTTP client only if we created it (do not close injected client)."""
        if self._owns_http:
            await self._http.aclose()

    async def get_token(self) -> str:
        """Return a valid access token; refreshes in thread pool to avoid blocking.

        Raises:
            TransportError: google-auth could not refresh the token.
        """
        try:
            return await asyncio.to_thread(_get_access_token, self._credentials)
        except GoogleAuthError as e:
            raise TransportError(f"Could not obtain a Firestore access token: {e}") from e

    def _document_url(self, collection: str, document_id: str) -> str:
        return f"{_BASE}/{self._prefix}/{collection}/{quote(document_id, safe='')}"

    def _query_target(self, collection: str) -> tuple[str, str]:
        """Return (parent resource, collection id); nested paths keep their parent document."""
        parent, _, collection_id = f"{self._prefix}/{collection}".rpartition("/")
        return parent, collection_id

    async def get_document(
        self, collection: str, document_id: str
    ) -> DocumentSnapshot | None:
        """Fetch the document; returns None if not found."""
        out = await _request_async(
            self._http,
            self._document_url(collection, document_id),
            access_token=await self.get_token(),
        )
        if not out:
            return None
        return DocumentSnapshot(document_id, decode_document(out.get("fields")))

    async def set_document(
        self,
        collection: str,
        document_id: str,
        data: dict[str, Any],
        *,
        merge: bool = False,
    ) -> None:
        """Write the document with PATCH.

        Without merge the document is replaced. With merge, every leaf field
        path in data goes into updateMask so other stored fields survive.
        """
        try:
            doc = encode_document(data)
        except TypeError as e:
            raise EncodeError(f"{collection}/{document_id}", str(e)) from e
        params: list[tuple[str, str]] | None = None
        if merge:
            paths = merge_field_paths(data)
            if not paths:
                # An empty mask cannot be sent as query params; merging nothing
                # only has to make sure the document exists.
                if await self.get_document(collection, document_id) is not None:
                    return
            else:
                params = [("updateMask.fieldPaths", p) for p in paths]
        await _request_async(
            self._http,
            self._document_url(collection, document_id),
            method="PATCH",
            body=doc,
            access_token=await self.get_token(),
            params=params,
        )

    def allocate_document_id(self, collection: str) -> str:
        """Generate a document ID client-side, as the Firestore SDKs do."""
        return generate_document_id()

    async def query_documents(
        self, collection: str, filter: Filter | None = None
    ) -> list[DocumentSnapshot]:
        """Run a structured query over one collection (all documents if filter is None)."""
        parent, collection_id = self._query_target(collection)
        structured: dict[str, Any] = {"from": [{"collectionId": collection_id}]}
        if filter is not None:
            try:
                structured["where"] = _encode_filter(filter)
            except TypeError as e:
                raise EncodeError(f"filter on {collection}", str(e)) from e
        resp = await _request_async(
            self._http,
            f"{_BASE}/{parent}:runQuery",
            method="POST",
            body={"structuredQuery": structured},
            access_token=await self.get_token(),
        )
        items = resp if isinstance(resp, list) else ([resp] if resp else [])
        return [_snapshot_from_rest(item["document"]) for item in items if "document" in item]

    async def delete_document(self, collection: str, document_id: str) -> None:
        """Delete the document. Idempotent if document is already missing (404)."""
        await _request_async(
            self._http,
            self._document_url(collection, document_id),
            method="DELETE",
            access_token=await self.get_token(),
        )

    def subscribe(
        self,
        collection: str,
        callback: QueryCallback,
        filter: Filter | None = None,
    ) -> PollingRegistration:
        """Poll the query and call callback whenever the matching set changes."""
        return PollingRegistration(
            lambda: self.query_documents(collection, filter),
            callback,
            self._poll_interval,
            f"query {collection}",
        )

    def subscribe_document(
        self,
        collection: str,
        document_id: str,
        callback: DocumentCallback,
    ) -> PollingRegistration:
        """Poll one document and call callback whenever it changes."""
        return PollingRegistration(
            lambda: self.get_document(collection, document_id),
            callback,
            self._poll_interval,
            f"document {collection}/{document_id}",
        )
