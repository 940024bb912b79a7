"""Pytest configuration and fixtures for firekit.

Tests run against InMemoryDocumentStore; STORE_BACKEND is forced to
'memory' so get_settings() never asks for Firestore credentials.
Sample entities live in tests/entities.py.
"""

import os

import pytest

os.environ["STORE_BACKEND"] = "memory"

from firekit.core.config import get_settings  # noqa: E402
from firekit.infrastructure.firebase import client as client_module  # noqa: E402
from firekit.infrastructure.firebase.manager import FirestoreManager  # noqa: E402
from firekit.infrastructure.memory import InMemoryDocumentStore  # noqa: E402
from tests.entities import Expense, User  # noqa: E402


@pytest.fixture(autouse=True)
def _reset_store_wiring(monkeypatch: pytest.MonkeyPatch):
    """Fresh settings and no leftover store singletons between tests."""
    monkeypatch.setenv("STORE_BACKEND", "memory")
    get_settings.cache_clear()
    client_module.set_document_store(None)
    monkeypatch.setattr(client_module, "_memory_store", None)
    yield
    client_module.set_document_store(None)
    get_settings.cache_clear()


@pytest.fixture
def store() -> InMemoryDocumentStore:
    """Empty in-memory document store."""
    return InMemoryDocumentStore()


@pytest.fixture
def user_manager(store: InMemoryDocumentStore) -> FirestoreManager[User]:
    return FirestoreManager(User, store)


@pytest.fixture
def expense_manager(store: InMemoryDocumentStore) -> FirestoreManager[Expense]:
    return FirestoreManager(Expense, store)
