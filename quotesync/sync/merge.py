"""Reconcile the local record set with a snapshot fetched from the remote.

Records are matched on ``remote_id`` only. Content is compared on ``text``
and ``category``; timestamps never take part in conflict detection.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from ..config import CONFLICT_POLICIES
from ..errors import ConflictNotFoundError
from ..store import SYNCED, ConflictDescriptor, MergeReport, Record, RecordStore

logger = logging.getLogger(__name__)

RESOLUTION_CHOICES: tuple[str, ...] = ("keep_local", "use_server")


def merge(
    store: RecordStore,
    remote_records: Iterable[Record],
    *,
    policy: str = "server_wins",
) -> MergeReport:
    if policy not in CONFLICT_POLICIES:
        raise ValueError(f"unknown conflict policy: {policy}")
    report = MergeReport()
    by_remote_id: dict[str, Record] = {
        record.remote_id: record for record in store.list() if record.remote_id is not None
    }

    for remote in remote_records:
        if remote.remote_id is None:
            continue
        local = by_remote_id.get(remote.remote_id)
        if local is None:
            by_remote_id[remote.remote_id] = store.insert_remote(remote)
            report.added += 1
            continue

        if local.text == remote.text and local.category == remote.category:
            store.drop_pending_conflict(local.id)
            if local.sync_state != SYNCED:
                by_remote_id[remote.remote_id] = store.mark_synced(local.id)
                report.updated += 1
            continue

        conflict = ConflictDescriptor(
            record_id=local.id,
            remote_id=remote.remote_id,
            local_text=local.text,
            local_category=local.category,
            remote_text=remote.text,
            remote_category=remote.category,
        )
        report.conflicts_count += 1
        report.conflicts.append(conflict)
        if policy == "server_wins":
            by_remote_id[remote.remote_id] = store.overwrite_content(
                local.id, remote.text, remote.category
            )
            store.drop_pending_conflict(local.id)
        else:
            store.put_pending_conflict(conflict)

    logger.debug(
        "merge done: added=%s updated=%s conflicts=%s policy=%s",
        report.added,
        report.updated,
        report.conflicts_count,
        policy,
    )
    return report


def pending_conflicts(store: RecordStore) -> list[ConflictDescriptor]:
    return store.pending_conflicts()


def resolve_conflict(store: RecordStore, record_id: str, choice: str) -> Record:
    """Apply a manual decision for a conflict left open by ``merge``."""
    normalized = choice.strip().lower().replace("-", "_")
    if normalized not in RESOLUTION_CHOICES:
        raise ValueError(f"unknown resolution choice: {choice}")
    conflict = store.get_pending_conflict(record_id)
    current = store.get(record_id)
    if conflict is None or current is None:
        raise ConflictNotFoundError(f"no pending conflict for {record_id}")
    if normalized == "use_server":
        text, category = conflict.remote_text, conflict.remote_category
    else:
        text, category = current.text, current.category
    resolved = store.overwrite_content(record_id, text, category)
    store.drop_pending_conflict(record_id)
    return resolved
