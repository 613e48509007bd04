from __future__ import annotations

import threading

from quotesync.errors import DecodeError, NetworkError
from quotesync.kv import MemoryKeyValueStore
from quotesync.notify import RecordingNotifier
from quotesync.store import LOCAL, SYNCED, RecordStore
from quotesync.sync import RemoteAdapter, SyncOrchestrator


def _orchestrator(remote, **kwargs) -> tuple[RecordStore, SyncOrchestrator, RecordingNotifier]:
    store = RecordStore(MemoryKeyValueStore())
    adapter = RemoteAdapter(store, "https://example.test/posts", request_json=remote)
    notifier = RecordingNotifier()
    return store, SyncOrchestrator(store, adapter, notifier=notifier, **kwargs), notifier


def test_sync_once_pushes_fetches_and_merges(fake_remote) -> None:
    fake_remote.posts = [
        {"id": 1, "title": "remote one", "userId": 1},
        {"id": 2, "title": "remote two", "userId": 2},
    ]
    store, orchestrator, notifier = _orchestrator(fake_remote)
    added = store.add("Test quote", "Testing")

    result = orchestrator.sync_once()

    assert result.ok is True
    assert (result.pushed, result.added, result.updated, result.conflicts_count) == (1, 2, 0, 0)
    assert store.get(added.id).sync_state == SYNCED  # type: ignore[union-attr]
    assert len(store) == 7
    assert [call[0] for call in fake_remote.calls] == ["POST", "GET"]
    assert orchestrator.status == "idle"
    assert notifier.messages[-1] == (
        "success",
        "Sync complete. Pushed: 1, Pulled: 2, Updated: 0, Conflicts: 0.",
    )


def test_sync_once_reports_conflicts_under_configured_policy(fake_remote) -> None:
    store, orchestrator, _ = _orchestrator(fake_remote, policy=lambda: "manual")
    store.replace_all([{"id": "l1", "text": "mine", "category": "User-1", "remoteId": 1}])
    fake_remote.posts = [{"id": 1, "title": "theirs", "userId": 1}]

    result = orchestrator.sync_once()

    assert result.conflicts_count == 1
    assert result.conflicts[0].record_id == "l1"
    assert store.get("l1").text == "mine"  # type: ignore[union-attr]
    assert len(store.pending_conflicts()) == 1


def test_fetch_failure_aborts_pass_without_rollback(fake_remote) -> None:
    store, orchestrator, notifier = _orchestrator(fake_remote)
    added = store.add("pushed before failure", "T")
    fake_remote.get_error = NetworkError("offline")

    result = orchestrator.sync_once()

    assert result.ok is False
    assert result.pushed == 1
    assert result.error == "offline"
    assert result.status == "failed"
    assert store.get(added.id).remote_id == "101"  # type: ignore[union-attr]
    assert orchestrator.status == "idle"
    assert notifier.messages[-1] == ("error", "Sync failed: offline")


def test_decode_failure_is_reported_like_network_failure(fake_remote) -> None:
    store, orchestrator, _ = _orchestrator(fake_remote)
    fake_remote.get_error = DecodeError("bad body")
    before = len(store)

    result = orchestrator.sync_once()

    assert result.ok is False
    assert len(store) == before


def test_unexpected_error_is_reported_not_raised(fake_remote) -> None:
    store, orchestrator, _ = _orchestrator(fake_remote)
    fake_remote.get_error = RuntimeError("kaboom")

    result = orchestrator.sync_once()

    assert result.ok is False
    assert result.error == "kaboom"


def test_push_failure_for_one_record_does_not_abort(fake_remote) -> None:
    store, orchestrator, _ = _orchestrator(fake_remote)
    bad = store.add("bad", "T")
    fake_remote.fail_post_titles.add("bad")

    result = orchestrator.sync_once()

    assert result.ok is True
    assert result.pushed == 0
    assert store.get(bad.id).sync_state == LOCAL  # type: ignore[union-attr]


def test_sync_request_while_running_is_ignored(fake_remote) -> None:
    entered = threading.Event()
    release = threading.Event()
    seen: list[object] = []

    def slow_remote(method, url, *, body=None, timeout_s=10.0):
        if method == "GET":
            entered.set()
            release.wait(5)
        return fake_remote(method, url, body=body, timeout_s=timeout_s)

    store, orchestrator, _ = _orchestrator(slow_remote)
    worker = threading.Thread(target=lambda: seen.append(orchestrator.sync_once()))
    worker.start()
    assert entered.wait(5)
    assert orchestrator.status == "syncing"

    concurrent = orchestrator.sync_once()

    release.set()
    worker.join(5)
    assert concurrent.skipped is True
    assert concurrent.ok is False
    assert len(seen) == 1 and seen[0].ok is True  # type: ignore[attr-defined]
    assert [call[0] for call in fake_remote.calls] == ["GET"]


def test_refresh_store_picks_up_external_writes(fake_remote) -> None:
    storage = MemoryKeyValueStore()
    store = RecordStore(storage)
    adapter = RemoteAdapter(store, "https://example.test/posts", request_json=fake_remote)
    orchestrator = SyncOrchestrator(store, adapter, refresh_store=True)

    other = RecordStore(storage)
    other.add("written elsewhere", "T")

    result = orchestrator.sync_once()

    assert result.pushed == 1
