"""In-memory document store for development and testing.

Implements the DocumentStoreClient protocol with push subscriptions:
callbacks fire synchronously, first on subscribe with the current result,
then inside each mutating call whose write changes that result. Data is
lost when the process exits.
"""

from __future__ import annotations

import copy
import itertools
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from firekit.application.dtos.document import DocumentSnapshot
from firekit.application.interfaces.document_store import (
    DocumentCallback,
    QueryCallback,
)
from firekit.domain.filters import Filter
from firekit.infrastructure.memory._matching import matches
from firekit.shared.utils.generators import generate_document_id

logger = logging.getLogger(__name__)


def _deep_merge(target: dict[str, Any], updates: dict[str, Any]) -> None:
    """Merge updates into target; nested maps merge, everything else overwrites."""
    for key, value in updates.items():
        if isinstance(value, dict) and value and isinstance(target.get(key), dict):
            _deep_merge(target[key], value)
        else:
            target[key] = copy.deepcopy(value)


@dataclass
class _Subscription:
    collection: str
    deliver: Callable[[Any, Exception | None], None]
    filter: Filter | None = None
    document_id: str | None = None
    last: Any = None


def _safe_deliver(sub: _Subscription, payload: Any) -> None:
    try:
        sub.deliver(payload, None)
    except Exception:
        logger.exception("Subscription callback for %s raised", sub.collection)


class _MemoryRegistration:
    """ListenerRegistration for InMemoryDocumentStore. remove() is idempotent."""

    def __init__(self, store: InMemoryDocumentStore, token: int) -> None:
        self._store = store
        self._token = token
        self._removed = False

    @property
    def removed(self) -> bool:
        return self._removed

    def remove(self) -> None:
        if self._removed:
            return
        self._removed = True
        self._store._unsubscribe(self._token)


class InMemoryDocumentStore:
    """Process-local document store.

    Thread-safe. Callbacks run outside the data lock but under a delivery
    lock, so each subscription sees results in write order.
    """

    def __init__(self) -> None:
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}
        self._subscriptions: dict[int, _Subscription] = {}
        self._tokens = itertools.count()
        self._lock = threading.RLock()
        # Held from computing a subscription result until it is delivered, so
        # concurrent writers cannot deliver results out of order. Reentrant
        # so callbacks may write to the store.
        self._delivery_lock = threading.RLock()

    # ------------------------------------------------------------------
    # Reads (call with the lock held)
    # ------------------------------------------------------------------

    def _snapshot(self, collection: str, document_id: str) -> DocumentSnapshot | None:
        data = self._collections.get(collection, {}).get(document_id)
        if data is None:
            return None
        return DocumentSnapshot(document_id, copy.deepcopy(data))

    def _query(self, collection: str, filter: Filter | None) -> list[DocumentSnapshot]:
        docs = self._collections.get(collection, {})
        return [
            DocumentSnapshot(doc_id, copy.deepcopy(data))
            for doc_id, data in sorted(docs.items())
            if matches(filter, data)
        ]

    def _current(self, sub: _Subscription) -> Any:
        if sub.document_id is not None:
            return self._snapshot(sub.collection, sub.document_id)
        return self._query(sub.collection, sub.filter)

    # ------------------------------------------------------------------
    # DocumentStoreClient
    # ------------------------------------------------------------------

    async def get_document(
        self, collection: str, document_id: str
    ) -> DocumentSnapshot | None:
        with self._lock:
            return self._snapshot(collection, document_id)

    async def set_document(
        self,
        collection: str,
        document_id: str,
        data: dict[str, Any],
        *,
        merge: bool = False,
    ) -> None:
        with self._lock:
            docs = self._collections.setdefault(collection, {})
            existing = docs.get(document_id)
            if merge and existing is not None:
                _deep_merge(existing, data)
            else:
                docs[document_id] = copy.deepcopy(data)
        self._notify(collection)

    def allocate_document_id(self, collection: str) -> str:
        with self._lock:
            docs = self._collections.get(collection, {})
            while True:
                document_id = generate_document_id()
                if document_id not in docs:
                    return document_id

    async def query_documents(
        self, collection: str, filter: Filter | None = None
    ) -> list[DocumentSnapshot]:
        with self._lock:
            return self._query(collection, filter)

    async def delete_document(self, collection: str, document_id: str) -> None:
        with self._lock:
            removed = self._collections.get(collection, {}).pop(document_id, None)
        if removed is not None:
            self._notify(collection)

    def subscribe(
        self,
        collection: str,
        callback: QueryCallback,
        filter: Filter | None = None,
    ) -> _MemoryRegistration:
        return self._add_subscription(
            _Subscription(collection=collection, deliver=callback, filter=filter)
        )

    def subscribe_document(
        self,
        collection: str,
        document_id: str,
        callback: DocumentCallback,
    ) -> _MemoryRegistration:
        return self._add_subscription(
            _Subscription(collection=collection, deliver=callback, document_id=document_id)
        )

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def _add_subscription(self, sub: _Subscription) -> _MemoryRegistration:
        with self._delivery_lock:
            with self._lock:
                token = next(self._tokens)
                sub.last = self._current(sub)
                self._subscriptions[token] = sub
                initial = sub.last
            logger.debug("Subscribed %s to %s", token, sub.collection)
            _safe_deliver(sub, initial)
        return _MemoryRegistration(self, token)

    def _unsubscribe(self, token: int) -> None:
        with self._lock:
            removed = self._subscriptions.pop(token, None)
        if removed is not None:
            logger.debug("Unsubscribed %s from %s", token, removed.collection)

    def _notify(self, collection: str) -> None:
        with self._delivery_lock:
            pending: list[tuple[int, _Subscription, Any]] = []
            with self._lock:
                for token, sub in self._subscriptions.items():
                    if sub.collection != collection:
                        continue
                    current = self._current(sub)
                    if current != sub.last:
                        sub.last = current
                        pending.append((token, sub, current))
            for token, sub, payload in pending:
                # Skip subscriptions removed by an earlier callback in this batch,
                # and results superseded by a write made from a callback.
                if token in self._subscriptions and sub.last is payload:
                    _safe_deliver(sub, payload)
