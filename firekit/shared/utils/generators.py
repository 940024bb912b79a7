"""Document ID generators (CUID2)."""

from cuid2 import Cuid

# Firestore auto-IDs are 20 characters; keep generated IDs the same length.
DOCUMENT_ID_LENGTH = 20

_document_id_generator = Cuid(length=DOCUMENT_ID_LENGTH)


def generate_document_id() -> str:
    """Generate a collision-resistant document identifier.

    Returns:
        A new 20-character CUID string, safe to use as a Firestore document ID.
    """
    result = _document_id_generator.generate()
    if not isinstance(result, str):
        raise TypeError(
            f"Expected str from document id generator, got {type(result).__name__}"
        )
    return result
