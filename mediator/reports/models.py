"""Data model for abuse reports."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

# Keys stamped by the server; caller-supplied values for these are discarded.
RESERVED_FIELDS = ("id", "createdAt", "ip")


@dataclass(frozen=True)
class Report:
    """An immutable abuse report."""

    id: str
    created_at: int  # epoch ms
    ip: str
    fields: dict[str, Any] = field(default_factory=dict)  # reason, comment, excerpts...

    def to_dict(self) -> dict[str, Any]:
        data = {k: v for k, v in self.fields.items() if k not in RESERVED_FIELDS}
        data.update({"id": self.id, "createdAt": self.created_at, "ip": self.ip})
        return data

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "Report":
        return cls(
            id=str(d["id"]),
            created_at=int(d.get("createdAt") or 0),
            ip=d.get("ip") or "",
            fields={k: v for k, v in d.items() if k not in RESERVED_FIELDS},
        )
