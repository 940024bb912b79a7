"""Shared utilities: telemetry and cross-cutting helpers.

Used by domain, application, and infrastructure. No store logic.
"""

from firekit.shared.telemetry import get_logger, setup_logging
from firekit.shared.utils import generate_document_id

__all__ = [
    "generate_document_id",
    "get_logger",
    "setup_logging",
]
