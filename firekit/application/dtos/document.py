"""Document read-model returned by document store clients."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class DocumentSnapshot:
    """Snapshot of a stored document (id + decoded field data)."""

    id: str
    data: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return self.data
