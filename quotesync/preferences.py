from __future__ import annotations

from .config import normalize_policy
from .kv import KeyValueStore

LAST_CATEGORY_KEY = "lastCategory"
MANUAL_RESOLVE_KEY = "manualResolve"


def last_category(storage: KeyValueStore) -> str:
    value = storage.get(LAST_CATEGORY_KEY)
    return value or "all"


def set_last_category(storage: KeyValueStore, category: str | None) -> str:
    value = (category or "").strip() or "all"
    storage.set(LAST_CATEGORY_KEY, value)
    return value


def conflict_policy(storage: KeyValueStore, default: str = "server_wins") -> str:
    """Manual toggle stored alongside the records wins over the configured default."""
    value = storage.get(MANUAL_RESOLVE_KEY)
    if value == "true":
        return "manual"
    if value == "false":
        return "server_wins"
    return normalize_policy(default)


def set_conflict_policy(storage: KeyValueStore, policy: str) -> str:
    normalized = normalize_policy(policy, default="")
    if not normalized:
        raise ValueError(f"unknown conflict policy: {policy}")
    storage.set(MANUAL_RESOLVE_KEY, "true" if normalized == "manual" else "false")
    return normalized
