"""Evaluate Filter values against plain document dicts (Firestore semantics)."""

from typing import Any

from firekit.domain.filters import CompositeFilter, FieldFilter, Filter

_MISSING = object()


def get_field(data: dict[str, Any], field_path: str) -> Any:
    """Return the value at a dotted field path, or _MISSING."""
    current: Any = data
    for part in field_path.split("."):
        if not isinstance(current, dict) or part not in current:
            return _MISSING
        current = current[part]
    return current


def _compare(op: str, left: Any, right: Any) -> bool:
    try:
        if op == "<":
            return left < right
        if op == "<=":
            return left <= right
        if op == ">":
            return left > right
        return left >= right
    except TypeError:
        # Firestore only orders values of the same type.
        return False


def _matches_field(filter: FieldFilter, data: dict[str, Any]) -> bool:
    value = get_field(data, filter.field_path)
    if value is _MISSING:
        return False
    op, target = filter.op_string, filter.value
    if op == "==":
        return value == target
    if op == "!=":
        return value is not None and value != target
    if op in ("<", "<=", ">", ">="):
        return value is not None and target is not None and _compare(op, value, target)
    if op == "in":
        return value in target
    if op == "not-in":
        return value is not None and value not in target
    if op == "array-contains":
        return isinstance(value, list) and target in value
    if op == "array-contains-any":
        return isinstance(value, list) and any(t in value for t in target)
    raise ValueError(f"Unsupported filter operator: {op!r}")


def matches(filter: Filter | None, data: dict[str, Any]) -> bool:
    """Return True when data satisfies filter (always True for None)."""
    if filter is None:
        return True
    if isinstance(filter, CompositeFilter):
        results = (matches(f, data) for f in filter.filters)
        return all(results) if filter.operator == "AND" else any(results)
    if isinstance(filter, FieldFilter):
        return _matches_field(filter, data)
    raise TypeError(f"Unsupported filter type: {type(filter).__name__}")
