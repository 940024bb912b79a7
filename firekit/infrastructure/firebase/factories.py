"""Factories: build managers, repositories, and listeners bound to an entity type."""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeVar

from firekit.domain.entity import FirestoreEntity
from firekit.infrastructure.firebase.listener import DocumentListener, FirestoreListener
from firekit.infrastructure.firebase.manager import FirestoreManager
from firekit.infrastructure.firebase.repositories.base import FirestoreRepository

if TYPE_CHECKING:
    from firekit.application.interfaces.document_store import DocumentStoreClient
    from firekit.domain.filters import Filter

T = TypeVar("T", bound=FirestoreEntity)
R = TypeVar("R", bound=FirestoreRepository)


def _resolve_client(client: "DocumentStoreClient | None") -> "DocumentStoreClient":
    if client is not None:
        return client
    from firekit.infrastructure.firebase.client import get_document_store

    return get_document_store()


class FirestoreManagerFactory:
    """Factory for FirestoreManager instances."""

    @staticmethod
    def create(
        entity_type: type[T],
        client: "DocumentStoreClient | None" = None,
    ) -> FirestoreManager[T]:
        """Create a manager bound to entity_type.collection.

        Args:
            entity_type: Entity class to manage.
            client: Document store client; if None, uses get_document_store().

        Returns:
            FirestoreManager with strict_preconditions taken from settings.
        """
        from firekit.core.config import get_settings

        return FirestoreManager(
            entity_type,
            _resolve_client(client),
            strict_preconditions=get_settings().strict_preconditions,
        )


class FirestoreRepositoryFactory:
    """Factory for repositories wrapping a FirestoreManager."""

    @staticmethod
    def create(
        entity_type: type[T],
        repository_type: type[R] = FirestoreRepository,
        client: "DocumentStoreClient | None" = None,
    ) -> R:
        """Create repository_type around a new manager for entity_type."""
        return repository_type(FirestoreManagerFactory.create(entity_type, client))


class ListenerFactory:
    """Factory for listeners bound to an entity type."""

    @staticmethod
    def create(
        entity_type: type[T],
        filter: "Filter | None" = None,
        client: "DocumentStoreClient | None" = None,
    ) -> FirestoreListener[T]:
        """Create a collection listener; subscribed before this returns.

        With the Firestore REST client this must run inside an event loop.
        """
        return FirestoreListener(entity_type, _resolve_client(client), filter)

    @staticmethod
    def create_document_listener(
        entity_type: type[T],
        document_id: str,
        client: "DocumentStoreClient | None" = None,
    ) -> DocumentListener[T]:
        """Create a single-document listener; subscribed before this returns."""
        return DocumentListener(entity_type, _resolve_client(client), document_id)
