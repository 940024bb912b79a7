"""Shared telemetry: logging setup."""

from firekit.shared.telemetry.logging import (
    LIBRARY_LOGGER_NAME,
    get_logger,
    install_null_handler,
    setup_logging,
)

__all__ = [
    "LIBRARY_LOGGER_NAME",
    "get_logger",
    "install_null_handler",
    "setup_logging",
]
