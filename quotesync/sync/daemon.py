from __future__ import annotations

import datetime as dt
import logging
import threading
import traceback
from pathlib import Path

from .sync_pass import SyncOrchestrator

logger = logging.getLogger(__name__)

DEFAULT_LOG_PATH = Path.home() / ".quotesync" / "sync-daemon.log"


def run_sync_daemon(
    orchestrator: SyncOrchestrator,
    interval_s: float,
    *,
    stop_event: threading.Event | None = None,
    run_immediately: bool = False,
    log_path: Path | None = None,
) -> int:
    """Run a sync pass every ``interval_s`` seconds until ``stop_event`` is set.

    Returns the number of passes attempted.
    """
    stop = stop_event or threading.Event()
    passes = 0
    if run_immediately and not stop.is_set():
        _tick(orchestrator, log_path)
        passes += 1
    while not stop.wait(interval_s):
        _tick(orchestrator, log_path)
        passes += 1
    return passes


def _tick(orchestrator: SyncOrchestrator, log_path: Path | None) -> None:
    try:
        result = orchestrator.sync_once()
    except Exception:
        tb = traceback.format_exc()
        logger.error("sync daemon tick crashed\n%s", tb)
        _append_sync_daemon_log(tb, log_path)
        return
    if not result.ok and not result.skipped:
        _append_sync_daemon_log(result.summary(), log_path)


def _append_sync_daemon_log(message: str, log_path: Path | None = None) -> None:
    path = log_path or DEFAULT_LOG_PATH
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        ts = dt.datetime.now(dt.UTC).isoformat()
        with path.open("a", encoding="utf-8", errors="ignore") as handle:
            handle.write(f"\n[{ts}]\n{message}\n")
    except OSError as exc:
        logger.warning("could not write sync daemon log %s", path, exc_info=exc)
