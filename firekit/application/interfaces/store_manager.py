"""Store manager port: typed CRUD and listen operations for one collection."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Protocol, TypeVar

from firekit.domain.entity import FirestoreEntity

if TYPE_CHECKING:
    from firekit.application.interfaces.document_store import ListenerRegistration
    from firekit.domain.filters import Filter

T = TypeVar("T", bound=FirestoreEntity)


class IStoreManager(Protocol[T]):
    """Protocol for store managers (DIP)."""

    async def save(self, obj: T) -> str:
        """Merge-upsert obj; return the effective document ID."""

    async def get(self, document_id: str) -> T | None:
        """Return the entity or None if the document does not exist."""

    async def get_all(self, filtered_by: Filter | None = None) -> list[T]:
        """Return every decodable entity in the collection (optionally filtered)."""

    async def update(self, obj: T) -> None:
        """Merge-write obj to its existing ID."""

    async def delete(self, obj: T) -> None:
        """Delete obj's document."""

    def listen(
        self,
        notification: Callable[[list[T] | None, Exception | None], None],
        filtered_by: Filter | None = None,
    ) -> ListenerRegistration:
        """Subscribe to the (filtered) collection."""

    def listen_document(
        self,
        document_id: str,
        notification: Callable[[T | None, Exception | None], None],
    ) -> ListenerRegistration:
        """Subscribe to one document."""
