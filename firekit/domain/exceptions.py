"""Exceptions raised by firekit.

Store failures derive from StoreError so callers can catch every
document-store problem with one clause; PreconditionSkipped is separate
because it signals a caller mistake, not a store failure.
"""

from typing import Any

# Listener error message when an update carries neither data nor an error.
EMPTY_RESULT_MESSAGE = "No documents were found"


class FirekitException(Exception):
    """Base exception for all firekit errors.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. collection, document_id).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)


class StoreError(FirekitException):
    """Base exception for document store operations."""


class TransportError(StoreError):
    """Network or backend failure reported by the document store client."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.status_code = status_code
        merged = dict(details or {})
        if status_code is not None:
            merged["status_code"] = status_code
        super().__init__(message, "TRANSPORT_ERROR", merged)


class DecodeError(StoreError):
    """Stored document shape does not match the target entity type."""

    def __init__(self, entity_type: str, document_id: str, reason: str) -> None:
        super().__init__(
            f"Cannot decode document {document_id!r} as {entity_type}: {reason}",
            "DECODE_ERROR",
            {"entity_type": entity_type, "document_id": document_id, "reason": reason},
        )


class EncodeError(StoreError):
    """Entity or document data cannot be serialized for the store."""

    def __init__(self, target: str, reason: str) -> None:
        super().__init__(
            f"Cannot encode {target}: {reason}",
            "ENCODE_ERROR",
            {"target": target, "reason": reason},
        )


class PreconditionSkipped(FirekitException):
    """update/delete called on an entity without an id (strict mode only)."""

    def __init__(self, operation: str, entity_type: str) -> None:
        super().__init__(
            f"{operation} requires an id; {entity_type} has none",
            "PRECONDITION_SKIPPED",
            {"operation": operation, "entity_type": entity_type},
        )
