"""Generic repository over a store manager (IStoreManager, usually FirestoreManager).

Fixes the entity type at construction so application code never names it
again. Pure delegation: errors from the manager pass through unchanged.
Subclass to add entity-specific queries, e.g.

    class UserRepository(FirestoreRepository[User]):
        async def adults(self) -> list[User]:
            return await self.get_all(FieldFilter("age", ">=", 18))
"""

from __future__ import annotations

from typing import Generic, TypeVar

from firekit.application.interfaces.document_store import ListenerRegistration
from firekit.application.interfaces.store_manager import IStoreManager
from firekit.domain.entity import FirestoreEntity
from firekit.domain.filters import Filter
from firekit.infrastructure.firebase.manager import ListNotification

T = TypeVar("T", bound=FirestoreEntity)


class FirestoreRepository(Generic[T]):
    """Repository-pattern surface (add/get/update/delete/subscribe) for one entity type."""

    def __init__(self, manager: IStoreManager[T]) -> None:
        self._manager = manager

    @property
    def manager(self) -> IStoreManager[T]:
        return self._manager

    async def add(self, obj: T) -> str:
        """Save obj; return its document ID."""
        return await self._manager.save(obj)

    async def get(self, id: str) -> T | None:
        """Return the entity with this ID, or None."""
        return await self._manager.get(id)

    async def get_all(self, filtered_by: Filter | None = None) -> list[T]:
        """Return all entities, optionally filtered."""
        return await self._manager.get_all(filtered_by)

    async def update(self, obj: T) -> None:
        await self._manager.update(obj)

    async def delete(self, obj: T) -> None:
        await self._manager.delete(obj)

    def subscribe(
        self,
        completion: ListNotification,
        filtered_by: Filter | None = None,
    ) -> ListenerRegistration:
        """Subscribe to entities matching filtered_by (all if None)."""
        return self._manager.listen(completion, filtered_by)
