"""Document store client wiring (Firestore REST or in-memory).

The Firestore client is initialized using either FIREBASE_SERVICE_ACCOUNT_KEY
(JSON string) or FIREBASE_SERVICE_ACCOUNT_PATH (file path). With
STORE_BACKEND=memory, a process-wide InMemoryDocumentStore is used instead.
"""

import json
import logging
from pathlib import Path

from firekit.application.interfaces.document_store import DocumentStoreClient
from firekit.core.config import get_settings
from firekit.infrastructure.firebase._rest_client import (
    FirestoreRESTClient,
    _get_credentials,
)
from firekit.infrastructure.memory.document_store import InMemoryDocumentStore

logger = logging.getLogger(__name__)

_firestore_client: FirestoreRESTClient | None = None
_memory_store: InMemoryDocumentStore | None = None
_store_override: DocumentStoreClient | None = None


def _load_key_dict():
    """Return service account dict from env key or file path."""
    settings = get_settings()
    key_json = settings.firebase_service_account_key.get_secret_value() if settings.firebase_service_account_key else None
    if key_json:
        try:
            return json.loads(key_json)
        except json.JSONDecodeError as e:
            raise ValueError("FIREBASE_SERVICE_ACCOUNT_KEY is not valid JSON") from e
    path = settings.firebase_service_account_path
    if path:
        resolved = Path(path).expanduser().resolve()
        if not resolved.is_file():
            logger.warning(
                "FIREBASE_SERVICE_ACCOUNT_PATH set but file not found: %s (resolved: %s)",
                path,
                resolved,
            )
            return None
        with open(resolved, encoding="utf-8") as f:
            return json.load(f)
    return None


def init_firebase() -> bool:
    """Initialize the Firestore client (REST API + google-auth).

    Uses FIREBASE_SERVICE_ACCOUNT_KEY (full JSON string) if set, otherwise
    FIREBASE_SERVICE_ACCOUNT_PATH (file path). Idempotent if already
    initialized. On invalid/malformed credentials or any initialization
    error, logs the exception and returns False.

    Returns:
        True if Firestore is initialized, False if disabled or on error.
    """
    global _firestore_client
    if _firestore_client is not None:
        return True
    try:
        key_dict = _load_key_dict()
        if not key_dict:
            return False

        project_id = key_dict.get("project_id")
        if not project_id:
            logger.error("Firebase service account JSON missing 'project_id'")
            return False

        settings = get_settings()
        cred = _get_credentials(key_dict)
        _firestore_client = FirestoreRESTClient(
            project_id,
            cred,
            database=settings.firestore_database,
            timeout=settings.firestore_timeout_seconds,
            poll_interval=settings.listener_poll_interval_seconds,
        )
        logger.info("Firestore client initialized for project %s", project_id)
        return True
    except Exception:
        logger.exception("Firebase initialization failed")
        return False


def get_firestore_client() -> FirestoreRESTClient | None:
    """Return the Firestore client, or None if not initialized."""
    return _firestore_client


def set_document_store(store: DocumentStoreClient | None) -> None:
    """Override the store returned by get_document_store (None restores settings-based selection)."""
    global _store_override
    _store_override = store


def get_document_store() -> DocumentStoreClient:
    """Return the configured document store client.

    Order: explicit override, then STORE_BACKEND ('memory' or 'firestore').

    Raises:
        RuntimeError: Firestore backend selected but the client could not be initialized.
    """
    global _memory_store
    if _store_override is not None:
        return _store_override
    if get_settings().store_backend == "memory":
        if _memory_store is None:
            _memory_store = InMemoryDocumentStore()
        return _memory_store
    if _firestore_client is None and not init_firebase():
        raise RuntimeError(
            "Firestore is not configured: set FIREBASE_SERVICE_ACCOUNT_KEY or "
            "FIREBASE_SERVICE_ACCOUNT_PATH, or use STORE_BACKEND=memory"
        )
    return _firestore_client


async def close_firebase() -> None:
    """Close the Firestore client's HTTP connection pool. Call from app shutdown."""
    global _firestore_client
    if _firestore_client is not None:
        await _firestore_client.aclose()
        _firestore_client = None
        logger.info("Firestore HTTP client closed")
