"""Shared utilities: generators."""

from firekit.shared.utils.generators import generate_document_id

__all__ = ["generate_document_id"]
