"""Firestore-backed repository implementations."""

from firekit.infrastructure.firebase.repositories.base import FirestoreRepository

__all__ = [
    "FirestoreRepository",
]
