"""In-memory document store (tests and local development)."""

from firekit.infrastructure.memory.document_store import InMemoryDocumentStore

__all__ = ["InMemoryDocumentStore"]
