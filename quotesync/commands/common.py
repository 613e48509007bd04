from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Any

import typer
from rich import print

from quotesync.config import QuotesyncConfig, load_config, read_config_file, write_config_file
from quotesync.kv import FileKeyValueStore, SqliteKeyValueStore
from quotesync.notify import ConsoleNotifier, Notifier
from quotesync.preferences import conflict_policy
from quotesync.store import RecordStore
from quotesync.sync import RemoteAdapter, SyncOrchestrator


def store_from_path(db_path: str | None, config: QuotesyncConfig | None = None) -> RecordStore:
    cfg = config or load_config()
    return RecordStore(SqliteKeyValueStore(db_path or cfg.db_path))


def session_storage() -> FileKeyValueStore:
    override = os.environ.get("QUOTESYNC_SESSION_FILE")
    if override:
        return FileKeyValueStore(override)
    return FileKeyValueStore(Path(tempfile.gettempdir()) / f"quotesync-session-{os.getppid()}.json")


def build_orchestrator(
    store: RecordStore,
    config: QuotesyncConfig,
    *,
    notifier: Notifier | None = None,
    refresh_store: bool = False,
) -> SyncOrchestrator:
    adapter = RemoteAdapter(
        store,
        config.server_url,
        fetch_limit=config.fetch_limit,
        timeout_s=config.http_timeout_s,
    )
    return SyncOrchestrator(
        store,
        adapter,
        policy=lambda: conflict_policy(store.storage, config.conflict_policy),
        notifier=notifier or ConsoleNotifier(),
        refresh_store=refresh_store,
    )


def read_config_or_exit() -> dict[str, Any]:
    try:
        return read_config_file()
    except ValueError as exc:
        print(f"[red]Invalid config file: {exc}[/red]")
        raise typer.Exit(code=1) from exc


def write_config_or_exit(data: dict[str, Any]) -> None:
    try:
        write_config_file(data)
    except OSError as exc:
        print(f"[red]Failed to write config: {exc}[/red]")
        raise typer.Exit(code=1) from exc
