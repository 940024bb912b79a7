"""Snapshot-to-entity decoding with the partial-result policy.

Multi-document reads keep every decodable document and drop the rest;
each drop is logged so data corruption does not go unnoticed.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TypeVar

from firekit.application.dtos.document import DocumentSnapshot
from firekit.domain.entity import FirestoreEntity
from firekit.domain.exceptions import DecodeError

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=FirestoreEntity)


def decode_snapshot(entity_type: type[T], snapshot: DocumentSnapshot) -> T:
    """Decode one snapshot. Raises DecodeError on shape mismatch."""
    return entity_type.from_document(snapshot.id, snapshot.data)


def decode_snapshots(
    entity_type: type[T], snapshots: Iterable[DocumentSnapshot]
) -> tuple[list[T], int]:
    """Decode snapshots, dropping undecodable ones.

    Returns:
        (decoded entities in input order, number of dropped documents).
    """
    objects: list[T] = []
    dropped = 0
    for snapshot in snapshots:
        try:
            objects.append(decode_snapshot(entity_type, snapshot))
        except DecodeError as e:
            dropped += 1
            logger.warning("Dropping undecodable document: %s", e.message)
    return objects, dropped
