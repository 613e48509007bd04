from __future__ import annotations

import datetime as dt
import json
import logging
from collections.abc import Iterable, Mapping
from dataclasses import replace
from typing import Any
from uuid import uuid4

from ..errors import ValidationError
from ..kv import KeyValueStore
from .types import LOCAL, SYNCED, ConflictDescriptor, Record, normalize_remote_id

logger = logging.getLogger(__name__)


def now_iso() -> str:
    return dt.datetime.now(dt.UTC).isoformat()


class RecordStore:
    QUOTES_KEY = "quotes"
    CONFLICTS_KEY = "pending_conflicts"
    DEFAULT_CATEGORY = "Imported"
    DEFAULT_QUOTES = (
        ("The best way to predict the future is to invent it.", "Inspiration"),
        ("Do what you can, with what you have, where you are.", "Motivation"),
        (
            "Success is not the key to happiness. Happiness is the key to success.",
            "Happiness",
        ),
        ("Code is like humor. When you have to explain it, it’s bad.", "Programming"),
    )

    def __init__(self, storage: KeyValueStore) -> None:
        self.storage = storage
        self._records: list[Record] = []
        self._pending: dict[str, ConflictDescriptor] = {}
        self._load()

    def close(self) -> None:
        close = getattr(self.storage, "close", None)
        if callable(close):
            close()

    def reload(self) -> None:
        """Re-read the persisted state, picking up writes from other processes."""
        self._records = []
        self._pending = {}
        self._load()

    # -- reads -----------------------------------------------------------

    def __len__(self) -> int:
        return len(self._records)

    def list(self, category: str | None = "all") -> list[Record]:
        if category is None or category == "all":
            return [replace(record) for record in self._records]
        return [replace(record) for record in self._records if record.category == category]

    def distinct_categories(self) -> list[str]:
        return sorted({record.category for record in self._records})

    def get(self, record_id: str) -> Record | None:
        record = self._find(record_id)
        return replace(record) if record is not None else None

    def unsynced(self) -> list[Record]:
        return [
            replace(record)
            for record in self._records
            if record.sync_state != SYNCED and record.remote_id is None
        ]

    # -- user mutations --------------------------------------------------

    def add(self, text: str, category: str) -> Record:
        text = (text or "").strip()
        category = (category or "").strip()
        if not text or not category:
            raise ValidationError("quote text and category are both required")
        record = Record(
            id=self._new_id(),
            text=text,
            category=category,
            sync_state=LOCAL,
            updated_at=now_iso(),
        )
        self._records.append(record)
        self._persist()
        return replace(record)

    def replace_all(self, records: Iterable[Record | Mapping[str, Any]]) -> list[Record]:
        """Swap the whole record set for ``records``.

        Every element must carry non-empty text. Missing or duplicate ids are
        regenerated, a blank category becomes ``DEFAULT_CATEGORY`` and a
        remote id already claimed by an earlier element is dropped. Nothing is
        changed if validation fails.
        """
        items = [
            record.to_dict() if isinstance(record, Record) else dict(record) for record in records
        ]
        for index, item in enumerate(items):
            text = item.get("text")
            if text is None or not str(text).strip():
                raise ValidationError(f"record {index} has empty text")
        built = self._build_records(items)
        self._persist(built)
        self._records = built
        known = {record.id for record in built}
        self._pending = {key: value for key, value in self._pending.items() if key in known}
        self._persist_pending()
        return [replace(record) for record in built]

    # -- sync mutations --------------------------------------------------

    def insert_remote(self, record: Record) -> Record:
        remote_id = normalize_remote_id(record.remote_id)
        if remote_id is None:
            raise ValueError("remote record is missing remote_id")
        if any(existing.remote_id == remote_id for existing in self._records):
            raise ValueError(f"remote id {remote_id} already present")
        record_id = record.id
        if not record_id or self._find(record_id) is not None:
            record_id = self._new_id()
        inserted = Record(
            id=record_id,
            text=record.text,
            category=record.category,
            sync_state=SYNCED,
            updated_at=record.updated_at or now_iso(),
            remote_id=remote_id,
        )
        self._records.append(inserted)
        self._persist()
        return replace(inserted)

    def assign_remote_id(self, record_id: str, remote_id: object) -> Record:
        record = self._require(record_id)
        normalized = normalize_remote_id(remote_id)
        if normalized is None:
            raise ValueError("remote id is empty")
        if record.remote_id is not None:
            raise ValueError(f"record {record_id} already has remote id {record.remote_id}")
        for other in self._records:
            if other.remote_id == normalized:
                raise ValueError(f"remote id {normalized} already belongs to {other.id}")
        record.remote_id = normalized
        record.sync_state = SYNCED
        record.updated_at = now_iso()
        self._persist()
        return replace(record)

    def mark_synced(self, record_id: str) -> Record:
        record = self._require(record_id)
        record.sync_state = SYNCED
        record.updated_at = now_iso()
        self._persist()
        return replace(record)

    def overwrite_content(self, record_id: str, text: str, category: str) -> Record:
        record = self._require(record_id)
        record.text = text
        record.category = category
        record.sync_state = SYNCED
        record.updated_at = now_iso()
        self._persist()
        return replace(record)

    # -- pending conflicts -----------------------------------------------

    def pending_conflicts(self) -> list[ConflictDescriptor]:
        return list(self._pending.values())

    def get_pending_conflict(self, record_id: str) -> ConflictDescriptor | None:
        return self._pending.get(record_id)

    def put_pending_conflict(self, conflict: ConflictDescriptor) -> None:
        self._pending[conflict.record_id] = conflict
        self._persist_pending()

    def drop_pending_conflict(self, record_id: str) -> None:
        if self._pending.pop(record_id, None) is not None:
            self._persist_pending()

    # -- internals -------------------------------------------------------

    def _find(self, record_id: str) -> Record | None:
        for record in self._records:
            if record.id == record_id:
                return record
        return None

    def _require(self, record_id: str) -> Record:
        record = self._find(record_id)
        if record is None:
            raise KeyError(record_id)
        return record

    def _new_id(self, taken: set[str] | None = None) -> str:
        used = taken if taken is not None else {record.id for record in self._records}
        while True:
            candidate = f"q_{uuid4().hex[:12]}"
            if candidate not in used:
                return candidate

    def _build_records(self, items: list[dict[str, Any]]) -> list[Record]:
        built: list[Record] = []
        ids: set[str] = set()
        remote_ids: set[str] = set()
        explicit = {str(item.get("id") or "").strip() for item in items}
        for item in items:
            record_id = str(item.get("id") or "").strip()
            if not record_id or record_id in ids:
                record_id = self._new_id(ids | explicit)
            ids.add(record_id)
            category = str(item.get("category") or "").strip() or self.DEFAULT_CATEGORY
            remote_id = normalize_remote_id(item.get("remoteId", item.get("serverId")))
            sync_state = item.get("syncState")
            if sync_state not in (LOCAL, SYNCED):
                sync_state = SYNCED if item.get("synced") is True else LOCAL
            if remote_id is not None and remote_id in remote_ids:
                logger.warning("dropping duplicate remote id %s on record %s", remote_id, record_id)
                remote_id = None
                sync_state = LOCAL
            if remote_id is not None:
                remote_ids.add(remote_id)
            built.append(
                Record(
                    id=record_id,
                    text=str(item["text"]).strip(),
                    category=category,
                    sync_state=sync_state,
                    updated_at=str(item.get("updatedAt") or "") or now_iso(),
                    remote_id=remote_id,
                )
            )
        return built

    def _load(self) -> None:
        raw = self.storage.get(self.QUOTES_KEY)
        items: list[dict[str, Any]] = []
        if raw:
            try:
                data = json.loads(raw)
            except json.JSONDecodeError:
                logger.warning("stored quotes are not valid json; reseeding defaults")
                data = None
            if isinstance(data, list):
                for entry in data:
                    if isinstance(entry, dict) and str(entry.get("text") or "").strip():
                        items.append(entry)
                    else:
                        logger.warning("skipping malformed stored quote: %r", entry)
        if not items:
            self._seed_defaults()
        else:
            self._records = self._build_records(items)
        self._load_pending()

    def _seed_defaults(self) -> None:
        now = now_iso()
        taken: set[str] = set()
        records = []
        for text, category in self.DEFAULT_QUOTES:
            record_id = self._new_id(taken)
            taken.add(record_id)
            records.append(
                Record(id=record_id, text=text, category=category, sync_state=SYNCED, updated_at=now)
            )
        self._records = records
        self._persist()

    def _load_pending(self) -> None:
        raw = self.storage.get(self.CONFLICTS_KEY)
        if not raw:
            return
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("stored pending conflicts are not valid json; ignoring")
            return
        if not isinstance(data, list):
            return
        known = {record.id for record in self._records}
        for entry in data:
            if not isinstance(entry, dict):
                continue
            try:
                conflict = ConflictDescriptor.from_dict(entry)
            except KeyError:
                continue
            if conflict.record_id in known:
                self._pending[conflict.record_id] = conflict

    def _persist(self, records: list[Record] | None = None) -> None:
        source = self._records if records is None else records
        payload = json.dumps([record.to_dict() for record in source], ensure_ascii=False)
        self.storage.set(self.QUOTES_KEY, payload)

    def _persist_pending(self) -> None:
        payload = json.dumps(
            [conflict.to_dict() for conflict in self._pending.values()], ensure_ascii=False
        )
        self.storage.set(self.CONFLICTS_KEY, payload)
