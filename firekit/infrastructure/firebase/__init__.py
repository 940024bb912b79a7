"""Firestore integration: REST client, managers, listeners, repositories, factories."""

from firekit.infrastructure.firebase._rest_client import FirestoreRESTClient
from firekit.infrastructure.firebase.client import (
    close_firebase,
    get_document_store,
    get_firestore_client,
    init_firebase,
    set_document_store,
)
from firekit.infrastructure.firebase.factories import (
    FirestoreManagerFactory,
    FirestoreRepositoryFactory,
    ListenerFactory,
)
from firekit.infrastructure.firebase.listener import (
    DOCUMENT_NOT_FOUND_MESSAGE,
    DocumentListener,
    DocumentListenerState,
    FirestoreListener,
    ListenerState,
)
from firekit.infrastructure.firebase.manager import FirestoreManager
from firekit.infrastructure.firebase.repositories import FirestoreRepository

__all__ = [
    "DOCUMENT_NOT_FOUND_MESSAGE",
    "DocumentListener",
    "DocumentListenerState",
    "FirestoreListener",
    "FirestoreManager",
    "FirestoreManagerFactory",
    "FirestoreRESTClient",
    "FirestoreRepository",
    "FirestoreRepositoryFactory",
    "ListenerFactory",
    "ListenerState",
    "close_firebase",
    "get_document_store",
    "get_firestore_client",
    "init_firebase",
    "set_document_store",
]
