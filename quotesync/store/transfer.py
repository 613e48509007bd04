from __future__ import annotations

import json
from typing import Any, Literal

from ..errors import MalformedImportError
from ._store import RecordStore, now_iso
from .types import LOCAL

ImportMode = Literal["replace", "append"]


def export_records(store: RecordStore) -> str:
    return json.dumps([record.to_dict() for record in store.list()], ensure_ascii=False, indent=2)


def parse_import(payload: str) -> list[Any]:
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as exc:
        raise MalformedImportError(f"invalid json: {exc}") from exc
    if not isinstance(data, list):
        raise MalformedImportError("import must be a JSON array")
    return data


def _normalize_entry(entry: Any) -> dict[str, Any]:
    if not isinstance(entry, dict):
        return {"text": str(entry), "syncState": LOCAL, "updatedAt": now_iso()}
    text = entry.get("text")
    return {
        "id": entry.get("id"),
        "text": str(text) if text is not None else "",
        "category": entry.get("category"),
        "remoteId": entry.get("remoteId", entry.get("serverId")),
        "syncState": LOCAL,
        "updatedAt": now_iso(),
    }


def import_records(store: RecordStore, payload: str, *, mode: ImportMode = "replace") -> int:
    """Load an exported JSON array into ``store``; returns the number imported.

    Imported records always start out unsynced. ``append`` keeps the current
    records ahead of the imported ones, ``replace`` discards them.
    """
    if mode not in ("replace", "append"):
        raise ValueError(f"unknown import mode: {mode}")
    entries = [_normalize_entry(entry) for entry in parse_import(payload)]
    if mode == "append":
        store.replace_all([*store.list(), *entries])
    else:
        store.replace_all(entries)
    return len(entries)
