from __future__ import annotations

import json

import pytest

from quotesync.errors import MalformedImportError, ValidationError
from quotesync.kv import MemoryKeyValueStore
from quotesync.store import LOCAL, RecordStore
from quotesync.store.transfer import export_records, import_records, parse_import


def _store() -> RecordStore:
    return RecordStore(MemoryKeyValueStore())


def test_export_then_import_reproduces_text_category_pairs() -> None:
    source = _store()
    source.add("Test quote", "Testing")
    exported = export_records(source)

    target = _store()
    target.add("Something else", "Other")
    count = import_records(target, exported)

    assert count == 5
    pairs = lambda store: [(r.text, r.category) for r in store.list()]  # noqa: E731
    assert pairs(target) == pairs(source)


def test_export_is_a_json_array_of_records() -> None:
    store = _store()

    data = json.loads(export_records(store))

    assert isinstance(data, list)
    assert {"id", "text", "category", "syncState", "updatedAt", "remoteId"} <= set(data[0])


def test_import_defaults_missing_fields_and_resets_sync_state() -> None:
    store = _store()
    payload = json.dumps(
        [
            {"text": "No category"},
            {"id": "keep-me", "text": "Has id", "category": "Kept", "remoteId": 12},
            "bare string quote",
        ]
    )

    import_records(store, payload)

    records = store.list()
    assert [r.text for r in records] == ["No category", "Has id", "bare string quote"]
    assert records[0].category == "Imported"
    assert records[1].id == "keep-me"
    assert records[1].remote_id == "12"
    assert all(r.sync_state == LOCAL for r in records)


def test_import_append_keeps_existing_records() -> None:
    store = _store()
    before = [r.id for r in store.list()]

    import_records(store, json.dumps([{"text": "extra", "category": "More"}]), mode="append")

    records = store.list()
    assert [r.id for r in records[:4]] == before
    assert records[-1].text == "extra"


@pytest.mark.parametrize("payload", ['{"text": "x"}', "not json", "42"])
def test_malformed_import_leaves_store_unchanged(payload: str) -> None:
    store = _store()
    before = [r.id for r in store.list()]

    with pytest.raises(MalformedImportError):
        import_records(store, payload)

    assert [r.id for r in store.list()] == before


def test_import_with_empty_text_is_rejected() -> None:
    store = _store()

    with pytest.raises(ValidationError):
        import_records(store, json.dumps([{"text": "", "category": "X"}]))

    assert len(store) == 4


def test_parse_import_returns_list() -> None:
    assert parse_import("[1, 2]") == [1, 2]
