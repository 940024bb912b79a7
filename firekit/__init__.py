"""firekit: typed entities, managers, repositories, and live listeners over Firestore."""

from firekit.application.dtos import DocumentSnapshot
from firekit.application.interfaces import DocumentStoreClient, ListenerRegistration
from firekit.core import Settings, get_settings
from firekit.domain import (
    EMPTY_RESULT_MESSAGE,
    And,
    CompositeFilter,
    DecodeError,
    EncodeError,
    FieldFilter,
    Filter,
    FirekitException,
    FirestoreCollection,
    FirestoreEntity,
    Or,
    PreconditionSkipped,
    StoreError,
    TransportError,
)
from firekit.infrastructure.firebase import (
    DocumentListener,
    FirestoreListener,
    FirestoreManager,
    FirestoreManagerFactory,
    FirestoreRESTClient,
    FirestoreRepository,
    FirestoreRepositoryFactory,
    ListenerFactory,
    close_firebase,
    get_document_store,
    init_firebase,
    set_document_store,
)
from firekit.infrastructure.memory import InMemoryDocumentStore
from firekit.shared.telemetry import install_null_handler, setup_logging

install_null_handler()

__all__ = [
    "EMPTY_RESULT_MESSAGE",
    "And",
    "CompositeFilter",
    "DecodeError",
    "DocumentListener",
    "DocumentSnapshot",
    "DocumentStoreClient",
    "EncodeError",
    "FieldFilter",
    "Filter",
    "FirekitException",
    "FirestoreCollection",
    "FirestoreEntity",
    "FirestoreListener",
    "FirestoreManager",
    "FirestoreManagerFactory",
    "FirestoreRESTClient",
    "FirestoreRepository",
    "FirestoreRepositoryFactory",
    "InMemoryDocumentStore",
    "ListenerFactory",
    "ListenerRegistration",
    "Or",
    "PreconditionSkipped",
    "Settings",
    "StoreError",
    "TransportError",
    "close_firebase",
    "get_document_store",
    "get_settings",
    "init_firebase",
    "set_document_store",
    "setup_logging",
]
