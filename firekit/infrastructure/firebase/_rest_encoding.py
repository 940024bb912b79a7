"""Encode/decode Python values to/from Firestore REST API 'fields' format.

Firestore has no date, decimal or UUID type: date is stored as an ISO
string, Decimal and UUID as strings; pydantic parses them back into the
declared field type. Naive datetimes are taken as UTC and come back
timezone-aware (UTC), so declare timestamp fields with aware values.
"""

import base64
import re
from datetime import UTC, date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

_SIMPLE_FIELD_NAME = re.compile(r"^[A-Za-z_][A-Za-z_0-9]*$")


def _encode_value(v: Any) -> dict:
    if v is None:
        return {"nullValue": None}
    if isinstance(v, Enum):
        return _encode_value(v.value)
    if isinstance(v, bool):
        return {"booleanValue": v}
    if isinstance(v, int):
        return {"integerValue": str(v)}
    if isinstance(v, float):
        return {"doubleValue": v}
    if isinstance(v, datetime):
        if v.tzinfo is not None:
            v = v.astimezone(UTC)
        return {"timestampValue": v.strftime("%Y-%m-%dT%H:%M:%S.%fZ")}
    if isinstance(v, date):
        return {"stringValue": v.isoformat()}
    if isinstance(v, (Decimal, UUID)):
        return {"stringValue": str(v)}
    if isinstance(v, str):
        return {"stringValue": v}
    if isinstance(v, bytes):
        return {"bytesValue": base64.standard_b64encode(v).decode("ascii")}
    if isinstance(v, (list, tuple, set, frozenset)):
        return {"arrayValue": {"values": [_encode_value(x) for x in v]}}
    if isinstance(v, dict):
        return {"mapValue": {"fields": {str(k): _encode_value(x) for k, x in v.items()}}}
    raise TypeError(f"Unsupported Firestore value type: {type(v)}")


def encode_document(data: dict[str, Any]) -> dict:
    """Convert a Python dict to Firestore REST Document.fields format."""
    return {"fields": {k: _encode_value(v) for k, v in data.items()}}


def _decode_timestamp(raw: str) -> datetime:
    # Firestore returns up to nanosecond precision; fromisoformat accepts at most microseconds.
    raw = raw.replace("Z", "+00:00")
    head, sep, tail = raw.partition(".")
    if sep:
        digits = len(tail) - len(tail.lstrip("0123456789"))
        fraction, offset = tail[:digits], tail[digits:]
        raw = f"{head}.{fraction[:6].ljust(6, '0')}{offset}"
    return datetime.fromisoformat(raw)


def _decode_value(obj: dict) -> Any:
    if "nullValue" in obj:
        return None
    if "booleanValue" in obj:
        return obj["booleanValue"]
    if "integerValue" in obj:
        return int(obj["integerValue"])
    if "doubleValue" in obj:
        return float(obj["doubleValue"])
    if "timestampValue" in obj:
        return _decode_timestamp(obj["timestampValue"])
    if "stringValue" in obj:
        return obj["stringValue"]
    if "bytesValue" in obj:
        return base64.standard_b64decode(obj["bytesValue"])
    if "referenceValue" in obj:
        return obj["referenceValue"]
    if "geoPointValue" in obj:
        return dict(obj["geoPointValue"])
    if "arrayValue" in obj:
        vals = obj.get("arrayValue", {}).get("values") or []
        return [_decode_value(x) for x in vals]
    if "mapValue" in obj:
        fields = obj["mapValue"].get("fields") or {}
        return {k: _decode_value(x) for k, x in fields.items()}
    return None


def decode_document(fields: dict | None) -> dict:
    """Convert Firestore REST Document.fields to a Python dict."""
    if not fields:
        return {}
    return {k: _decode_value(v) for k, v in fields.items()}


def quote_field_name(name: str) -> str:
    """Backtick-quote a field name unless it is a simple identifier."""
    if _SIMPLE_FIELD_NAME.match(name):
        return name
    escaped = name.replace("\\", "\\\\").replace("`", "\\`")
    return f"`{escaped}`"


def merge_field_paths(data: dict[str, Any], prefix: str = "") -> list[str]:
    """Return leaf field paths for a merge write (updateMask.fieldPaths).

    Nested maps are flattened so a merge only touches the supplied leaves;
    an empty map is written as a whole.
    """
    paths: list[str] = []
    for key, value in data.items():
        path = f"{prefix}.{quote_field_name(str(key))}" if prefix else quote_field_name(str(key))
        if isinstance(value, dict) and value:
            paths.extend(merge_field_paths(value, path))
        else:
            paths.append(path)
    return paths
