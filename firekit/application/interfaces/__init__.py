"""Ports (protocols) implemented by the infrastructure layer."""

from firekit.application.interfaces.document_store import (
    DocumentCallback,
    DocumentStoreClient,
    ListenerRegistration,
    QueryCallback,
)
from firekit.application.interfaces.store_manager import IStoreManager

__all__ = [
    "DocumentCallback",
    "DocumentStoreClient",
    "IStoreManager",
    "ListenerRegistration",
    "QueryCallback",
]
