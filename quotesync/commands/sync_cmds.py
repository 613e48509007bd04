from __future__ import annotations

import typer
from rich import print
from rich.markup import escape

from quotesync.errors import ConflictNotFoundError
from quotesync.preferences import conflict_policy, set_conflict_policy
from quotesync.sync import pending_conflicts, resolve_conflict, run_sync_daemon


def _tag(value: str) -> str:
    return escape(f"[{value}]")


def sync_once_cmd(*, store_from_path, build_orchestrator, load_config, db_path: str | None) -> None:
    """Push local quotes, pull remote ones and merge them."""

    config = load_config()
    store = store_from_path(db_path, config)
    try:
        result = build_orchestrator(store, config).sync_once()
        pending = pending_conflicts(store)
    finally:
        store.close()
    if pending:
        print(f"{len(pending)} conflict(s) await a decision: quotesync conflicts list")
    if not result.ok:
        raise typer.Exit(code=1)


def sync_daemon_cmd(
    *,
    store_from_path,
    build_orchestrator,
    load_config,
    db_path: str | None,
    interval_s: int | None,
) -> None:
    """Sync on a fixed interval until interrupted."""

    config = load_config()
    interval = interval_s or config.sync_interval_s
    store = store_from_path(db_path, config)
    try:
        orchestrator = build_orchestrator(store, config, refresh_store=True)
        print(f"Auto-sync every {interval}s against {config.server_url}. Ctrl+C to stop.")
        try:
            run_sync_daemon(orchestrator, interval, run_immediately=True)
        except KeyboardInterrupt:
            print("[yellow]Sync daemon stopped[/yellow]")
    finally:
        store.close()


def conflicts_list_cmd(*, store_from_path, db_path: str | None) -> None:
    store = store_from_path(db_path)
    try:
        conflicts = pending_conflicts(store)
    finally:
        store.close()
    if not conflicts:
        print("No pending conflicts")
        return
    for conflict in conflicts:
        print(f"[bold]{conflict.record_id}[/bold] (remote #{conflict.remote_id})")
        print(f"  Server: {escape(conflict.remote_text)} {_tag(conflict.remote_category)}")
        print(f"  Local:  {escape(conflict.local_text)} {_tag(conflict.local_category)}")


def conflicts_resolve_cmd(
    *, store_from_path, db_path: str | None, record_id: str, choice: str
) -> None:
    store = store_from_path(db_path)
    try:
        try:
            record = resolve_conflict(store, record_id, choice)
        except (ConflictNotFoundError, ValueError) as exc:
            print(f"[red]{escape(str(exc))}[/red]")
            raise typer.Exit(code=1) from exc
    finally:
        store.close()
    print(f"[green]✓ Resolved {record.id}[/green]: {escape(record.text)} {_tag(record.category)}")


def policy_cmd(*, store_from_path, load_config, db_path: str | None, policy: str | None) -> None:
    """Show or set the conflict resolution policy."""

    config = load_config()
    store = store_from_path(db_path, config)
    try:
        if policy is None:
            print(conflict_policy(store.storage, config.conflict_policy))
            return
        try:
            applied = set_conflict_policy(store.storage, policy)
        except ValueError as exc:
            print(f"[red]{escape(str(exc))}[/red]")
            raise typer.Exit(code=1) from exc
    finally:
        store.close()
    state = "enabled" if applied == "manual" else "disabled"
    print(f"Manual conflict resolution {state}.")
