from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Literal

SyncState = Literal["local", "synced"]

LOCAL: SyncState = "local"
SYNCED: SyncState = "synced"


@dataclass
class Record:
    id: str
    text: str
    category: str
    sync_state: SyncState = LOCAL
    updated_at: str = ""
    remote_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "category": self.category,
            "syncState": self.sync_state,
            "updatedAt": self.updated_at,
            "remoteId": self.remote_id,
        }


@dataclass(frozen=True)
class ConflictDescriptor:
    record_id: str
    remote_id: str
    local_text: str
    local_category: str
    remote_text: str
    remote_category: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ConflictDescriptor:
        return cls(**{key: str(data[key]) for key in cls.__dataclass_fields__})


@dataclass
class MergeReport:
    added: int = 0
    updated: int = 0
    conflicts_count: int = 0
    conflicts: list[ConflictDescriptor] = field(default_factory=list)


def normalize_remote_id(value: object) -> str | None:
    if value is None or isinstance(value, bool):
        return None
    text = str(value).strip()
    return text or None
