from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Literal

from ..errors import SyncError
from ..notify import LogNotifier, Notifier
from ..store import ConflictDescriptor, RecordStore
from .adapter import RemoteAdapter
from .merge import merge

logger = logging.getLogger(__name__)

SyncStatus = Literal["idle", "syncing", "failed"]


@dataclass
class SyncResult:
    ok: bool
    pushed: int = 0
    added: int = 0
    updated: int = 0
    conflicts_count: int = 0
    conflicts: list[ConflictDescriptor] = field(default_factory=list)
    error: str | None = None
    skipped: bool = False
    status: SyncStatus = "idle"

    def summary(self) -> str:
        if self.skipped:
            return "Sync already in progress; request ignored."
        if not self.ok:
            return f"Sync failed: {self.error}"
        return (
            f"Sync complete. Pushed: {self.pushed}, Pulled: {self.added}, "
            f"Updated: {self.updated}, Conflicts: {self.conflicts_count}."
        )


class SyncOrchestrator:
    """Runs push, fetch and merge as one pass, at most one pass at a time.

    A request arriving while a pass is in flight is dropped rather than
    queued. Failures abort the pass without rolling back what was already
    applied, and are reported through the notifier instead of raised.
    """

    def __init__(
        self,
        store: RecordStore,
        adapter: RemoteAdapter,
        *,
        policy: str | Callable[[], str] = "server_wins",
        notifier: Notifier | None = None,
        refresh_store: bool = False,
    ) -> None:
        self.store = store
        self.adapter = adapter
        self.policy = policy
        self.notifier = notifier or LogNotifier()
        self.refresh_store = refresh_store
        self.status: SyncStatus = "idle"
        self.last_result: SyncResult | None = None
        self._lock = threading.Lock()

    def current_policy(self) -> str:
        if callable(self.policy):
            return self.policy()
        return self.policy

    def sync_once(self) -> SyncResult:
        if not self._lock.acquire(blocking=False):
            logger.info("sync requested while a pass is running; ignoring")
            return SyncResult(ok=False, skipped=True)
        try:
            self.status = "syncing"
            self.notifier.notify("Syncing…", "info")
            result = self._run_pass()
            if result.ok:
                self.status = "idle"
                self.notifier.notify(result.summary(), "success")
            else:
                self.status = result.status = "failed"
                self.notifier.notify(result.summary(), "error")
                self.status = "idle"
            self.last_result = result
            return result
        finally:
            self._lock.release()

    def _run_pass(self) -> SyncResult:
        pushed = 0
        try:
            if self.refresh_store:
                self.store.reload()
            pushed = self.adapter.push(self.store.unsynced())
            remote_records = self.adapter.fetch()
            report = merge(self.store, remote_records, policy=self.current_policy())
        except SyncError as exc:
            logger.warning("sync pass failed", exc_info=exc)
            return SyncResult(ok=False, pushed=pushed, error=str(exc) or exc.__class__.__name__)
        except Exception as exc:
            logger.exception("sync pass failed unexpectedly")
            detail = str(exc).strip() or exc.__class__.__name__
            return SyncResult(ok=False, pushed=pushed, error=detail)
        return SyncResult(
            ok=True,
            pushed=pushed,
            added=report.added,
            updated=report.updated,
            conflicts_count=report.conflicts_count,
            conflicts=list(report.conflicts),
        )
