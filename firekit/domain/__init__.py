"""Domain layer: entity contract, filters, and exceptions.

No dependencies on infrastructure. Used by application and
infrastructure layers.
"""

from firekit.domain.entity import FirestoreCollection, FirestoreEntity, collection_name
from firekit.domain.exceptions import (
    EMPTY_RESULT_MESSAGE,
    DecodeError,
    EncodeError,
    FirekitException,
    PreconditionSkipped,
    StoreError,
    TransportError,
)
from firekit.domain.filters import And, CompositeFilter, FieldFilter, Filter, Or

__all__ = [
    # Entity contract
    "FirestoreCollection",
    "FirestoreEntity",
    "collection_name",
    # Filters
    "And",
    "CompositeFilter",
    "FieldFilter",
    "Filter",
    "Or",
    # Exceptions
    "EMPTY_RESULT_MESSAGE",
    "DecodeError",
    "EncodeError",
    "FirekitException",
    "PreconditionSkipped",
    "StoreError",
    "TransportError",
]
