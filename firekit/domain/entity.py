"""Entity contract and collection references.

An entity is a pydantic model stored as one document. Its ``id`` is the
document ID and is never written into the document body. Each entity type
names its collection with the ``collection`` class attribute.

Example:
    class Collections(FirestoreCollection):
        USERS = "users"

    class User(FirestoreEntity):
        collection = Collections.USERS

        name: str
        age: int = 0
"""

from __future__ import annotations

from enum import Enum
from typing import Any, ClassVar, Self

from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic_core import PydanticSerializationError

from firekit.domain.exceptions import DecodeError, EncodeError


class FirestoreCollection(str, Enum):
    """Base for collection-name enums. Subclass and add members."""


def collection_name(collection: FirestoreCollection | str) -> str:
    """Return the store path for a collection reference (enum member or plain string)."""
    name = collection.value if isinstance(collection, Enum) else collection
    name = str(name).strip("/")
    if not name:
        raise ValueError("Collection name must not be empty")
    return name


class FirestoreEntity(BaseModel):
    """Base class for storable entities.

    Subclasses must set ``collection``. Unknown document fields are ignored
    on decode so documents written by other clients still load.
    """

    model_config = ConfigDict(extra="ignore")

    collection: ClassVar[FirestoreCollection | str]

    id: str | None = None

    @classmethod
    def collection_name(cls) -> str:
        """Return the bound collection path; TypeError if the subclass declares none."""
        collection = getattr(cls, "collection", None)
        if collection is None:
            raise TypeError(f"{cls.__name__} does not declare a collection")
        return collection_name(collection)

    def to_document(self) -> dict[str, Any]:
        """Serialize to the store's document shape (without the id).

        Fields holding None are left out, at every nesting level, so a merge
        write keeps whatever the store already has for them. Storing an
        explicit null therefore requires a direct client write.

        Raises:
            EncodeError: A field value cannot be serialized.
        """
        try:
            return self.model_dump(
                mode="python", by_alias=True, exclude={"id"}, exclude_none=True
            )
        except PydanticSerializationError as e:
            raise EncodeError(type(self).__name__, str(e)) from e

    @classmethod
    def from_document(cls, document_id: str, data: dict[str, Any]) -> Self:
        """Build an entity from a stored document.

        Raises:
            DecodeError: The document does not match this entity's schema.
        """
        try:
            return cls.model_validate({**data, "id": document_id})
        except ValidationError as e:
            raise DecodeError(cls.__name__, document_id, str(e)) from e
