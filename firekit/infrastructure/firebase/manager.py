"""Store manager: typed CRUD and listen operations for one collection.

Every operation is a single delegation to the document store client. The
manager keeps no cache; apart from the collection binding its only state
is the dropped_documents diagnostic counter.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Generic, TypeVar

from firekit.application.dtos.document import DocumentSnapshot
from firekit.application.interfaces.document_store import (
    DocumentStoreClient,
    ListenerRegistration,
)
from firekit.domain.entity import FirestoreCollection, FirestoreEntity, collection_name
from firekit.domain.exceptions import DecodeError, PreconditionSkipped
from firekit.domain.filters import Filter
from firekit.infrastructure.firebase._decoding import decode_snapshot, decode_snapshots

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=FirestoreEntity)

ListNotification = Callable[[list[T] | None, Exception | None], None]
ItemNotification = Callable[[T | None, Exception | None], None]


class FirestoreManager(Generic[T]):
    """CRUD and subscriptions for entities of one type in one collection.

    Errors from the client (TransportError) propagate unchanged. Single-document
    reads raise DecodeError on shape mismatch; multi-document reads drop
    undecodable documents and count them in dropped_documents.
    """

    def __init__(
        self,
        entity_type: type[T],
        client: DocumentStoreClient,
        collection: FirestoreCollection | str | None = None,
        *,
        strict_preconditions: bool = False,
    ) -> None:
        """Bind the manager.

        Args:
            entity_type: Entity class used to decode documents.
            client: Document store client.
            collection: Collection override; defaults to entity_type.collection.
            strict_preconditions: Raise PreconditionSkipped from update/delete
                on entities without an id instead of returning silently.
        """
        self._entity_type = entity_type
        self._client = client
        self._collection = (
            collection_name(collection)
            if collection is not None
            else entity_type.collection_name()
        )
        self._strict = strict_preconditions
        self._dropped_lock = threading.Lock()
        self._dropped_documents = 0

    @property
    def entity_type(self) -> type[T]:
        return self._entity_type

    @property
    def collection(self) -> str:
        return self._collection

    @property
    def client(self) -> DocumentStoreClient:
        return self._client

    @property
    def dropped_documents(self) -> int:
        """Total documents dropped by get_all/listen because they failed to decode."""
        return self._dropped_documents

    def _decode_many(self, snapshots: list[DocumentSnapshot]) -> list[T]:
        objects, dropped = decode_snapshots(self._entity_type, snapshots)
        if dropped:
            with self._dropped_lock:
                self._dropped_documents += dropped
        return objects

    def _missing_id(self, operation: str) -> None:
        if self._strict:
            raise PreconditionSkipped(operation, self._entity_type.__name__)
        logger.debug(
            "Skipping %s on %s without id (collection %s)",
            operation,
            self._entity_type.__name__,
            self._collection,
        )

    async def save(self, obj: T) -> str:
        """Merge-upsert obj.

        Uses obj.id as the document ID when set, otherwise allocates one.
        Fields absent from obj's document keep their stored values.

        Returns:
            The document ID written.

        Raises:
            EncodeError: obj cannot be serialized.
            TransportError: The store write failed.
        """
        data = obj.to_document()
        document_id = obj.id or self._client.allocate_document_id(self._collection)
        await self._client.set_document(self._collection, document_id, data, merge=True)
        return document_id

    async def get(self, document_id: str) -> T | None:
        """Return the entity, or None if the document does not exist.

        Raises:
            DecodeError: The stored document does not match the entity type.
            TransportError: The store read failed.
        """
        snapshot = await self._client.get_document(self._collection, document_id)
        if snapshot is None:
            return None
        return decode_snapshot(self._entity_type, snapshot)

    async def get_all(self, filtered_by: Filter | None = None) -> list[T]:
        """Return every decodable entity in the collection, optionally filtered."""
        snapshots = await self._client.query_documents(self._collection, filtered_by)
        return self._decode_many(snapshots)

    async def update(self, obj: T) -> None:
        """Merge-write obj to its existing document ID.

        Without an id this is a no-op (PreconditionSkipped in strict mode).
        """
        if not obj.id:
            self._missing_id("update")
            return
        await self._client.set_document(
            self._collection, obj.id, obj.to_document(), merge=True
        )

    async def delete(self, obj: T) -> None:
        """Delete obj's document.

        Without an id this is a no-op (PreconditionSkipped in strict mode).
        """
        if not obj.id:
            self._missing_id("delete")
            return
        await self._client.delete_document(self._collection, obj.id)

    def listen(
        self,
        notification: ListNotification,
        filtered_by: Filter | None = None,
    ) -> ListenerRegistration:
        """Subscribe to the (filtered) collection.

        notification(objects, None) receives the full current matching set on
        every change, with undecodable documents dropped; notification(None,
        error) reports a subscription failure.
        """

        def on_snapshot(
            snapshots: list[DocumentSnapshot] | None, error: Exception | None
        ) -> None:
            if error is not None:
                notification(None, error)
                return
            notification(self._decode_many(snapshots or []), None)

        return self._client.subscribe(self._collection, on_snapshot, filtered_by)

    def listen_document(
        self,
        document_id: str,
        notification: ItemNotification,
    ) -> ListenerRegistration:
        """Subscribe to one document.

        notification(obj, None) on every change while the document exists;
        a missing document produces no notification; decode failures arrive
        as notification(None, DecodeError).
        """

        def on_snapshot(
            snapshot: DocumentSnapshot | None, error: Exception | None
        ) -> None:
            if error is not None:
                notification(None, error)
                return
            if snapshot is None:
                return
            try:
                obj = decode_snapshot(self._entity_type, snapshot)
            except DecodeError as e:
                notification(None, e)
                return
            notification(obj, None)

        return self._client.subscribe_document(self._collection, document_id, on_snapshot)
