from __future__ import annotations

from .adapter import RemoteAdapter
from .daemon import run_sync_daemon
from .merge import merge, pending_conflicts, resolve_conflict
from .sync_pass import SyncOrchestrator, SyncResult

__all__ = [
    "RemoteAdapter",
    "SyncOrchestrator",
    "SyncResult",
    "merge",
    "pending_conflicts",
    "resolve_conflict",
    "run_sync_daemon",
]
