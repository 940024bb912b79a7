"""Unit tests for FirestoreRESTClient against a mocked HTTP transport."""

import asyncio
import json
from unittest.mock import MagicMock

import httpx
import pytest
from google.auth import exceptions as google_auth_exceptions

from firekit.application.dtos.document import DocumentSnapshot
from firekit.domain.exceptions import EncodeError, TransportError
from firekit.domain.filters import And, FieldFilter
from firekit.infrastructure.firebase._rest_client import FirestoreRESTClient
from firekit.infrastructure.firebase._subscriptions import PollingRegistration
from firekit.infrastructure.firebase.listener import FirestoreListener
from tests.entities import User

PREFIX = "/v1/projects/demo/databases/(default)/documents"


class Recorder:
    """httpx.MockTransport handler that records requests and replays canned responses."""

    def __init__(self, *responses: httpx.Response) -> None:
        self.requests: list[httpx.Request] = []
        self._responses = list(responses)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        template = self._responses.pop(0) if len(self._responses) > 1 else self._responses[0]
        return httpx.Response(
            template.status_code, content=template.content, headers=template.headers
        )


def _client(handler, **kwargs) -> FirestoreRESTClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    credentials = MagicMock(valid=True, token="test-token")
    return FirestoreRESTClient("demo", credentials, http_client=http, **kwargs)


def _rest_doc(doc_id: str, **fields: str) -> dict:
    return {
        "name": f"projects/demo/databases/(default)/documents/users/{doc_id}",
        "fields": {k: {"stringValue": v} for k, v in fields.items()},
    }


async def test_get_document_decodes_fields() -> None:
    handler = Recorder(httpx.Response(200, json=_rest_doc("u1", name="Ada")))
    client = _client(handler)

    snapshot = await client.get_document("users", "u1")

    assert snapshot == DocumentSnapshot("u1", {"name": "Ada"})
    request = handler.requests[0]
    assert request.method == "GET"
    assert request.url.path == f"{PREFIX}/users/u1"
    assert request.headers["Authorization"] == "Bearer test-token"


async def test_get_missing_document_returns_none() -> None:
    client = _client(Recorder(httpx.Response(404, json={"error": {}})))
    assert await client.get_document("users", "nope") is None


async def test_set_document_replace_sends_no_mask() -> None:
    handler = Recorder(httpx.Response(200, json={}))
    client = _client(handler)

    await client.set_document("users", "u1", {"name": "Ada", "age": 3})

    request = handler.requests[0]
    assert request.method == "PATCH"
    assert "updateMask.fieldPaths" not in request.url.params
    assert json.loads(request.content) == {
        "fields": {"name": {"stringValue": "Ada"}, "age": {"integerValue": "3"}}
    }


async def test_set_document_merge_masks_leaf_paths() -> None:
    handler = Recorder(httpx.Response(200, json={}))
    client = _client(handler)

    await client.set_document(
        "users", "u1", {"name": "Ada", "address": {"city": "London"}}, merge=True
    )

    params = handler.requests[0].url.params
    assert params.get_list("updateMask.fieldPaths") == ["name", "address.city"]


async def test_merge_with_empty_data_on_existing_document_is_noop() -> None:
    handler = Recorder(httpx.Response(200, json=_rest_doc("u1", name="Ada")))
    client = _client(handler)

    await client.set_document("users", "u1", {}, merge=True)

    assert [r.method for r in handler.requests] == ["GET"]


async def test_unencodable_value_raises_encode_error() -> None:
    client = _client(Recorder(httpx.Response(200, json={})))
    with pytest.raises(EncodeError) as exc_info:
        await client.set_document("users", "u1", {"bad": object()})
    assert exc_info.value.details["target"] == "users/u1"


async def test_query_documents_encodes_filter() -> None:
    handler = Recorder(
        httpx.Response(
            200,
            json=[
                {"document": _rest_doc("a", name="Ada")},
                {"readTime": "2025-01-01T00:00:00Z"},
            ],
        )
    )
    client = _client(handler)

    result = await client.query_documents(
        "users", And([FieldFilter("age", ">=", 18), FieldFilter("nickname", "==", None)])
    )

    assert result == [DocumentSnapshot("a", {"name": "Ada"})]
    request = handler.requests[0]
    assert request.method == "POST"
    assert request.url.path == f"{PREFIX}:runQuery"
    query = json.loads(request.content)["structuredQuery"]
    assert query["from"] == [{"collectionId": "users"}]
    assert query["where"] == {
        "compositeFilter": {
            "op": "AND",
            "filters": [
                {
                    "fieldFilter": {
                        "field": {"fieldPath": "age"},
                        "op": "GREATER_THAN_OR_EQUAL",
                        "value": {"integerValue": "18"},
                    }
                },
                {"unaryFilter": {"field": {"fieldPath": "nickname"}, "op": "IS_NULL"}},
            ],
        }
    }


async def test_query_on_subcollection_uses_parent_document() -> None:
    handler = Recorder(httpx.Response(200, json=[]))
    client = _client(handler)

    assert await client.query_documents("users/u1/orders") == []

    request = handler.requests[0]
    assert request.url.path == f"{PREFIX}/users/u1:runQuery"
    assert json.loads(request.content)["structuredQuery"]["from"] == [{"collectionId": "orders"}]


async def test_server_error_raises_transport_error() -> None:
    client = _client(Recorder(httpx.Response(500, text="internal")))
    with pytest.raises(TransportError) as exc_info:
        await client.get_document("users", "u1")
    assert exc_info.value.status_code == 500
    assert exc_info.value.details["body"] == "internal"


async def test_network_error_raises_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = _client(handler)
    with pytest.raises(TransportError, match="connection refused"):
        await client.query_documents("users")


async def test_delete_missing_document_is_idempotent() -> None:
    handler = Recorder(httpx.Response(404))
    client = _client(handler)
    await client.delete_document("users", "gone")
    assert handler.requests[0].method == "DELETE"


def test_allocate_document_id_is_client_side() -> None:
    client = _client(Recorder(httpx.Response(200)))
    first = client.allocate_document_id("users")
    assert len(first) == 20
    assert first != client.allocate_document_id("users")


async def test_aclose_keeps_injected_http_client_open() -> None:
    http = httpx.AsyncClient(transport=httpx.MockTransport(Recorder(httpx.Response(200))))
    client = FirestoreRESTClient("demo", MagicMock(valid=True, token="t"), http_client=http)
    await client.aclose()
    assert not http.is_closed
    await http.aclose()


async def test_polling_subscription_delivers_changes_only() -> None:
    first = httpx.Response(200, json=[{"document": _rest_doc("a", name="Ada")}])
    second = httpx.Response(
        200,
        json=[{"document": _rest_doc("a", name="Ada")}, {"document": _rest_doc("b", name="Bob")}],
    )
    handler = Recorder(first, first, second)
    client = _client(handler, poll_interval=0.01)
    events: list = []

    registration = client.subscribe("users", lambda docs, err: events.append((docs, err)))
    await asyncio.sleep(0.1)
    registration.remove()
    registration.remove()

    assert events[0] == ([DocumentSnapshot("a", {"name": "Ada"})], None)
    assert [s.id for s in events[1][0]] == ["a", "b"]
    assert len(events) == 2
    assert registration.removed


async def test_polling_subscription_reports_errors() -> None:
    client = _client(Recorder(httpx.Response(503, text="unavailable")), poll_interval=0.01)
    events: list = []

    registration = client.subscribe_document("users", "u1", lambda doc, err: events.append((doc, err)))
    await asyncio.sleep(0.05)
    registration.remove()

    assert events
    doc, err = events[0]
    assert doc is None
    assert isinstance(err, TransportError)
    assert err.status_code == 503


def _failing_credentials(error: Exception) -> MagicMock:
    credentials = MagicMock(valid=False, token=None)
    credentials.refresh.side_effect = error
    return credentials


async def test_token_refresh_failure_raises_transport_error() -> None:
    handler = Recorder(httpx.Response(200, json={}))
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    client = FirestoreRESTClient(
        "demo", _failing_credentials(google_auth_exceptions.TransportError("dns failure")), http_client=http
    )

    with pytest.raises(TransportError, match="dns failure") as exc_info:
        await client.get_document("users", "u1")

    assert isinstance(exc_info.value.__cause__, google_auth_exceptions.TransportError)
    assert handler.requests == []


async def test_invalid_json_body_raises_transport_error() -> None:
    client = _client(Recorder(httpx.Response(200, content=b"<html>proxy error</html>")))
    with pytest.raises(TransportError, match="invalid JSON") as exc_info:
        await client.query_documents("users")
    assert exc_info.value.details["body"] == "<html>proxy error</html>"


async def test_unencodable_filter_value_raises_encode_error() -> None:
    handler = Recorder(httpx.Response(200, json=[]))
    client = _client(handler)
    with pytest.raises(EncodeError, match="filter on users"):
        await client.query_documents("users", FieldFilter("born", "==", object()))
    assert handler.requests == []


async def test_polling_keeps_running_after_auth_failure() -> None:
    http = httpx.AsyncClient(transport=httpx.MockTransport(Recorder(httpx.Response(200, json=[]))))
    client = FirestoreRESTClient(
        "demo",
        _failing_credentials(google_auth_exceptions.RefreshError("token expired")),
        http_client=http,
        poll_interval=0.01,
    )
    events: list = []

    registration = client.subscribe("users", lambda docs, err: events.append((docs, err)))
    await asyncio.sleep(0.1)
    registration.remove()

    assert len(events) >= 2
    assert all(docs is None and isinstance(err, TransportError) for docs, err in events)
    assert "token expired" in str(events[0][1])


async def test_listener_reports_polling_failures() -> None:
    client = _client(Recorder(httpx.Response(200, json=[])), poll_interval=0.01)

    with FirestoreListener(User, client, FieldFilter("born", "==", object())) as listener:
        await asyncio.sleep(0.05)
        assert "Cannot encode filter on users" in listener.error_message
        assert listener.objects == []


async def test_unexpected_poll_error_is_wrapped_and_polling_continues() -> None:
    attempts = 0
    events: list = []

    async def poll():
        nonlocal attempts
        attempts += 1
        if attempts == 1:
            raise RuntimeError("boom")
        return ["ok"]

    registration = PollingRegistration(
        poll, lambda payload, err: events.append((payload, err)), 0.01, "test"
    )
    await asyncio.sleep(0.05)
    registration.remove()

    payload, err = events[0]
    assert payload is None
    assert isinstance(err, TransportError)
    assert isinstance(err.__cause__, RuntimeError)
    assert events[1] == (["ok"], None)
