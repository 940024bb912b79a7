"""Unit tests for Firestore REST value encoding."""

from datetime import UTC, date, datetime, timedelta, timezone
from decimal import Decimal
from enum import Enum
from uuid import UUID

import pytest

from firekit.domain.entity import FirestoreEntity
from firekit.infrastructure.firebase._rest_encoding import (
    _decode_value,
    _encode_value,
    decode_document,
    encode_document,
    merge_field_paths,
    quote_field_name,
)


class Color(str, Enum):
    RED = "red"


def test_scalars_encode_to_typed_values() -> None:
    assert _encode_value(None) == {"nullValue": None}
    assert _encode_value(True) == {"booleanValue": True}
    assert _encode_value(7) == {"integerValue": "7"}
    assert _encode_value(1.5) == {"doubleValue": 1.5}
    assert _encode_value("x") == {"stringValue": "x"}
    assert _encode_value(b"\x00\xff") == {"bytesValue": "AP8="}
    assert _encode_value(Color.RED) == {"stringValue": "red"}


def test_aware_datetimes_are_written_in_utc() -> None:
    plus_two = timezone(timedelta(hours=2))
    value = datetime(2025, 1, 2, 5, 4, 5, 123000, tzinfo=plus_two)
    assert _encode_value(value) == {"timestampValue": "2025-01-02T03:04:05.123000Z"}


def test_unsupported_type_raises_type_error() -> None:
    with pytest.raises(TypeError, match="Unsupported Firestore value type"):
        _encode_value(object())


def test_nested_document_encodes_and_decodes() -> None:
    data = {"name": "Ada", "tags": ["a", "b"], "address": {"city": "London", "zip": None}}
    encoded = encode_document(data)
    assert encoded["fields"]["tags"] == {
        "arrayValue": {"values": [{"stringValue": "a"}, {"stringValue": "b"}]}
    }
    assert decode_document(encoded["fields"]) == data


def test_timestamp_decoding_truncates_nanoseconds() -> None:
    decoded = _decode_value({"timestampValue": "2025-01-02T03:04:05.123456789Z"})
    assert decoded == datetime(2025, 1, 2, 3, 4, 5, 123456, tzinfo=UTC)
    assert _decode_value({"timestampValue": "2025-01-02T03:04:05Z"}) == datetime(
        2025, 1, 2, 3, 4, 5, tzinfo=UTC
    )


def test_decode_empty_containers_and_extra_types() -> None:
    assert decode_document(None) == {}
    assert _decode_value({"arrayValue": {}}) == []
    assert _decode_value({"mapValue": {}}) == {}
    assert _decode_value({"geoPointValue": {"latitude": 1.0, "longitude": 2.0}}) == {
        "latitude": 1.0,
        "longitude": 2.0,
    }


def test_quote_field_name() -> None:
    assert quote_field_name("owner_id") == "owner_id"
    assert quote_field_name("zip code") == "`zip code`"
    assert quote_field_name("a`b") == "`a\\`b`"


def test_merge_field_paths_flattens_nested_maps() -> None:
    data = {"name": "A", "address": {"city": "X", "zip code": "1"}, "tags": [], "meta": {}}
    assert merge_field_paths(data) == [
        "name",
        "address.city",
        "address.`zip code`",
        "tags",
        "meta",
    ]


def test_date_decimal_and_uuid_encode_as_strings() -> None:
    assert _encode_value(date(2000, 1, 2)) == {"stringValue": "2000-01-02"}
    assert _encode_value(Decimal("10.05")) == {"stringValue": "10.05"}
    uid = UUID("12345678-1234-5678-1234-567812345678")
    assert _encode_value(uid) == {"stringValue": str(uid)}


class Invoice(FirestoreEntity):
    collection = "invoices"

    number: UUID
    issued_on: date
    total: Decimal
    created_at: datetime


def test_entity_round_trips_through_rest_fields() -> None:
    """Types without a Firestore counterpart decode back to the declared field type."""
    invoice = Invoice(
        id="i1",
        number=UUID("12345678-1234-5678-1234-567812345678"),
        issued_on=date(2025, 3, 1),
        total=Decimal("199.99"),
        created_at=datetime(2025, 3, 1, 9, 30, tzinfo=UTC),
    )
    fields = encode_document(invoice.to_document())["fields"]
    assert Invoice.from_document("i1", decode_document(fields)) == invoice


def test_naive_datetime_is_stored_as_utc() -> None:
    encoded = _encode_value(datetime(2025, 3, 1, 9, 30))
    assert _decode_value(encoded) == datetime(2025, 3, 1, 9, 30, tzinfo=UTC)
