"""Document store client port (DIP).

Implementations: FirestoreRESTClient (Firestore REST v1) and
InMemoryDocumentStore. Managers and listeners depend only on this protocol.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Protocol, TypeAlias

if TYPE_CHECKING:
    from firekit.application.dtos.document import DocumentSnapshot
    from firekit.domain.filters import Filter

# (documents, error): exactly one is set, except for the empty-event edge case.
QueryCallback: TypeAlias = Callable[
    ["list[DocumentSnapshot] | None", "Exception | None"], None
]
# (document, error): document is None when it does not exist.
DocumentCallback: TypeAlias = Callable[
    ["DocumentSnapshot | None", "Exception | None"], None
]


class ListenerRegistration(Protocol):
    """Handle for a live subscription."""

    def remove(self) -> None:
        """Cancel the subscription. Safe to call more than once."""
        ...


class DocumentStoreClient(Protocol):
    """Protocol for document store backends (Firestore REST, in-memory)."""

    async def get_document(
        self, collection: str, document_id: str
    ) -> DocumentSnapshot | None:
        """Return the document or None if it does not exist."""
        ...

    async def set_document(
        self,
        collection: str,
        document_id: str,
        data: dict[str, Any],
        *,
        merge: bool = False,
    ) -> None:
        """Write the document. With merge, only fields present in data are overwritten."""
        ...

    def allocate_document_id(self, collection: str) -> str:
        """Return a new, unused document ID for the collection."""
        ...

    async def query_documents(
        self, collection: str, filter: Filter | None = None
    ) -> list[DocumentSnapshot]:
        """Return all documents in the collection matching filter (all if None)."""
        ...

    async def delete_document(self, collection: str, document_id: str) -> None:
        """Delete the document. Deleting a missing document is not an error."""
        ...

    def subscribe(
        self,
        collection: str,
        callback: QueryCallback,
        filter: Filter | None = None,
    ) -> ListenerRegistration:
        """Call callback with the full matching set on every change."""
        ...

    def subscribe_document(
        self,
        collection: str,
        document_id: str,
        callback: DocumentCallback,
    ) -> ListenerRegistration:
        """Call callback with the document on every change (None once deleted)."""
        ...
