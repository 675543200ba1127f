"""Plain snapshot of a record's field values."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class ObjectValue:
    """Record values detached from the record class.

    ``type_name`` and ``package_path`` identify the record type (class name
    and module); ``items`` maps attribute names to plain values: nested
    records as dicts, date-times as RFC 3339 strings. ``Info.assign_value``
    accepts it back only for the same record type.
    """

    type_name: str
    package_path: str
    items: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type_name": self.type_name,
            "package_path": self.package_path,
            "items": dict(self.items),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ObjectValue:
        return cls(
            type_name=data["type_name"],
            package_path=data["package_path"],
            items=dict(data.get("items") or {}),
        )


__all__ = ["ObjectValue"]
