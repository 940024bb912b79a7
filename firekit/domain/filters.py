"""Query filters passed through to the document store.

Managers and repositories never interpret filters; the store client
translates them (REST structuredQuery) or evaluates them (in-memory store).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, TypeAlias

# Canonical operator spellings; underscore variants are normalized on construction.
OPERATORS: frozenset[str] = frozenset(
    {
        "==",
        "!=",
        "<",
        "<=",
        ">",
        ">=",
        "in",
        "not-in",
        "array-contains",
        "array-contains-any",
    }
)

# Operators whose value must be a list.
LIST_OPERATORS: frozenset[str] = frozenset({"in", "not-in", "array-contains-any"})


def _normalize_op(op: str) -> str:
    normalized = op.strip().lower().replace("_", "-")
    if normalized not in OPERATORS:
        raise ValueError(f"Unsupported filter operator: {op!r}")
    return normalized


@dataclass(frozen=True)
class FieldFilter:
    """Comparison on one (possibly dotted) field path, e.g. FieldFilter("age", ">=", 18)."""

    field_path: str
    op_string: str
    value: Any

    def __post_init__(self) -> None:
        if not self.field_path:
            raise ValueError("field_path is required")
        op = _normalize_op(self.op_string)
        object.__setattr__(self, "op_string", op)
        if op in LIST_OPERATORS and not isinstance(self.value, (list, tuple)):
            raise ValueError(f"Operator {op!r} requires a list value")


@dataclass(frozen=True)
class CompositeFilter:
    """Conjunction or disjunction of filters."""

    operator: str
    filters: tuple[Filter, ...]

    def __post_init__(self) -> None:
        if self.operator not in ("AND", "OR"):
            raise ValueError(f"Composite operator must be 'AND' or 'OR', got {self.operator!r}")
        object.__setattr__(self, "filters", tuple(self.filters))
        if not self.filters:
            raise ValueError("Composite filter needs at least one filter")


class And(CompositeFilter):
    """All filters must match."""

    def __init__(self, filters: list[Filter] | tuple[Filter, ...]) -> None:
        super().__init__("AND", tuple(filters))


class Or(CompositeFilter):
    """At least one filter must match."""

    def __init__(self, filters: list[Filter] | tuple[Filter, ...]) -> None:
        super().__init__("OR", tuple(filters))


Filter: TypeAlias = FieldFilter | CompositeFilter
