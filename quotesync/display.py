from __future__ import annotations

import json
import random

from .kv import KeyValueStore
from .store import Record, RecordStore
from .store.types import normalize_remote_id

LAST_QUOTE_KEY = "lastQuote"
EMPTY_MESSAGE = "No quotes in this category."


def format_quote(record: Record) -> str:
    return f'"{record.text}" — {record.category}'


def random_quote(
    store: RecordStore,
    category: str | None,
    session: KeyValueStore,
    *,
    rng: random.Random | None = None,
) -> Record | None:
    candidates = store.list(category or "all")
    if not candidates:
        return None
    picked = (rng or random).choice(candidates)
    session.set(LAST_QUOTE_KEY, json.dumps(picked.to_dict(), ensure_ascii=False))
    return picked


def last_displayed(session: KeyValueStore) -> Record | None:
    raw = session.get(LAST_QUOTE_KEY)
    if not raw:
        return None
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        return None
    if not isinstance(data, dict):
        return None
    text = data.get("text")
    category = data.get("category")
    if not isinstance(text, str) or not isinstance(category, str):
        return None
    return Record(
        id=str(data.get("id") or ""),
        text=text,
        category=category,
        sync_state=data.get("syncState") if data.get("syncState") == "synced" else "local",
        updated_at=str(data.get("updatedAt") or ""),
        remote_id=normalize_remote_id(data.get("remoteId")),
    )
