"""Change listeners: live, observable views of a collection query or one document.

A listener subscribes in its constructor and keeps the latest result in an
immutable state snapshot. Every store event replaces either the data or the
error message, never both. Readers see whole snapshots; the subscription
callback is the only writer. Observers registered with add_observer are
called with each new snapshot.

Lifecycle: constructed and subscribed, updating, released. release() is
idempotent and events arriving after it are ignored.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import Any, Generic, TypeVar

from firekit.application.dtos.document import DocumentSnapshot
from firekit.application.interfaces.document_store import (
    DocumentStoreClient,
    ListenerRegistration,
)
from firekit.domain.entity import FirestoreCollection, FirestoreEntity, collection_name
from firekit.domain.exceptions import EMPTY_RESULT_MESSAGE, DecodeError
from firekit.domain.filters import Filter
from firekit.infrastructure.firebase._decoding import decode_snapshot, decode_snapshots

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=FirestoreEntity)

DOCUMENT_NOT_FOUND_MESSAGE = "Document not found"


@dataclass(frozen=True)
class ListenerState(Generic[T]):
    """Latest result of a collection listener."""

    objects: tuple[T, ...] = ()
    error_message: str | None = None
    dropped_documents: int = 0


@dataclass(frozen=True)
class DocumentListenerState(Generic[T]):
    """Latest result of a single-document listener."""

    object: T | None = None
    error_message: str | None = None


class _ObservableListener:
    """State cell, observers, and subscription lifetime shared by both listeners."""

    def __init__(self, initial_state: Any) -> None:
        self._lock = threading.Lock()
        self._state = initial_state
        self._observers: list[Callable[[Any], None]] = []
        self._registration: ListenerRegistration | None = None
        self._released = False

    @property
    def released(self) -> bool:
        return self._released

    def _publish(self, **changes: Any) -> None:
        with self._lock:
            if self._released:
                return
            self._state = replace(self._state, **changes)
            state = self._state
            observers = list(self._observers)
        for observer in observers:
            try:
                observer(state)
            except Exception:
                logger.exception("Listener observer raised")

    def add_observer(self, observer: Callable[[Any], None]) -> Callable[[], None]:
        """Call observer with every new state; returns a function that unregisters it."""
        with self._lock:
            self._observers.append(observer)

        def remove() -> None:
            with self._lock:
                if observer in self._observers:
                    self._observers.remove(observer)

        return remove

    def release(self) -> None:
        """Cancel the subscription. Safe to call more than once."""
        with self._lock:
            if self._released:
                return
            self._released = True
            registration = self._registration
            self._registration = None
            self._observers.clear()
        if registration is not None:
            registration.remove()
        logger.debug("Released %s", type(self).__name__)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()


class FirestoreListener(_ObservableListener, Generic[T]):
    """Live view of a (filtered) collection, exposed as objects and error_message."""

    def __init__(
        self,
        entity_type: type[T],
        client: DocumentStoreClient,
        filter: Filter | None = None,
        collection: FirestoreCollection | str | None = None,
    ) -> None:
        super().__init__(ListenerState())
        self._entity_type = entity_type
        self._filter = filter
        self._collection = (
            collection_name(collection)
            if collection is not None
            else entity_type.collection_name()
        )
        self._registration = client.subscribe(self._collection, self._on_snapshot, filter)

    @property
    def state(self) -> ListenerState[T]:
        return self._state

    @property
    def objects(self) -> list[T]:
        return list(self._state.objects)

    @property
    def error_message(self) -> str | None:
        return self._state.error_message

    @property
    def dropped_documents(self) -> int:
        """Documents dropped from the latest update because they failed to decode."""
        return self._state.dropped_documents

    def _on_snapshot(
        self, snapshots: list[DocumentSnapshot] | None, error: Exception | None
    ) -> None:
        if error is not None:
            self._publish(error_message=str(error))
        elif snapshots is not None:
            objects, dropped = decode_snapshots(self._entity_type, snapshots)
            self._publish(objects=tuple(objects), dropped_documents=dropped)
        else:
            self._publish(error_message=EMPTY_RESULT_MESSAGE)


class DocumentListener(_ObservableListener, Generic[T]):
    """Live view of one document, exposed as object and error_message."""

    def __init__(
        self,
        entity_type: type[T],
        client: DocumentStoreClient,
        document_id: str,
        collection: FirestoreCollection | str | None = None,
    ) -> None:
        super().__init__(DocumentListenerState())
        self._entity_type = entity_type
        self._document_id = document_id
        self._collection = (
            collection_name(collection)
            if collection is not None
            else entity_type.collection_name()
        )
        self._registration = client.subscribe_document(
            self._collection, document_id, self._on_snapshot
        )

    @property
    def state(self) -> DocumentListenerState[T]:
        return self._state

    @property
    def object(self) -> T | None:
        return self._state.object

    @property
    def error_message(self) -> str | None:
        return self._state.error_message

    def _on_snapshot(
        self, snapshot: DocumentSnapshot | None, error: Exception | None
    ) -> None:
        if error is not None:
            self._publish(error_message=str(error))
            return
        if snapshot is None:
            self._publish(error_message=DOCUMENT_NOT_FOUND_MESSAGE)
            return
        try:
            obj = decode_snapshot(self._entity_type, snapshot)
        except DecodeError as e:
            self._publish(error_message=e.message)
            return
        self._publish(object=obj)
