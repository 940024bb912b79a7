"""Application DTOs (no dependency on a concrete store)."""

from firekit.application.dtos.document import DocumentSnapshot

__all__ = ["DocumentSnapshot"]
