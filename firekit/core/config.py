"""Library configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. Backend-specific requirements (e.g. Firestore
credentials) are validated at load time.
"""

from functools import lru_cache

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment and .env.

    All settings are optional with defaults except the Firestore
    credentials, which are required when store_backend is 'firestore'.
    """

    app_name: str = "firekit"
    debug: bool = False

    # Document store: "firestore" (REST API) or "memory" (process-local, tests/dev)
    store_backend: str = "firestore"

    # Firebase / Firestore: use key (env) or path (file).
    firebase_service_account_key: SecretStr | None = None
    firebase_service_account_path: str | None = None  # Path to JSON file
    firestore_database: str = "(default)"
    firestore_timeout_seconds: float = 30.0

    # Listeners: REST has no push channel, so subscriptions poll.
    listener_poll_interval_seconds: float = 1.0

    # Raise PreconditionSkipped from update/delete on entities without an id.
    strict_preconditions: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_backend(self) -> "Settings":
        """Validate store backend and its required settings.

        - Firestore: FIREBASE_SERVICE_ACCOUNT_KEY or FIREBASE_SERVICE_ACCOUNT_PATH required.
        - Memory: nothing required.
        """
        if self.store_backend == "firestore":
            has_key = (
                self.firebase_service_account_key
                and self.firebase_service_account_key.get_secret_value()
            )
            if not has_key and not self.firebase_service_account_path:
                raise ValueError(
                    "When store_backend is 'firestore', set FIREBASE_SERVICE_ACCOUNT_KEY (full JSON string) "
                    "or FIREBASE_SERVICE_ACCOUNT_PATH (path to JSON file)."
                )
        elif self.store_backend != "memory":
            raise ValueError(
                f"store_backend must be 'firestore' or 'memory', got: {self.store_backend!r}"
            )
        if self.listener_poll_interval_seconds <= 0:
            raise ValueError("LISTENER_POLL_INTERVAL_SECONDS must be greater than 0")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached settings (single instance per process).

    Validation runs on first call, not at import time. In tests, call
    get_settings.cache_clear() before overriding env vars so the next
    get_settings() uses the new values.

    Returns:
        Loaded and validated Settings instance.
    """
    return Settings()
