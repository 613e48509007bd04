from __future__ import annotations

import json
import logging
from dataclasses import asdict

import typer
from rich import print

from . import __version__
from .commands.common import (
    build_orchestrator,
    read_config_or_exit,
    session_storage,
    store_from_path,
    write_config_or_exit,
)
from .commands.record_cmds import add_cmd, categories_cmd, last_cmd, list_cmd, random_cmd
from .commands.sync_cmds import (
    conflicts_list_cmd,
    conflicts_resolve_cmd,
    policy_cmd,
    sync_daemon_cmd,
    sync_once_cmd,
)
from .commands.transfer_cmds import export_quotes_cmd, import_quotes_cmd
from .config import QuotesyncConfig, get_config_path, load_config

app = typer.Typer(help="quotesync: local-first quotes with remote sync")
sync_app = typer.Typer(help="Sync quotes with the remote endpoint")
conflicts_app = typer.Typer(help="Inspect and resolve sync conflicts")
config_app = typer.Typer(help="Show or edit configuration")
app.add_typer(sync_app, name="sync")
app.add_typer(conflicts_app, name="conflicts")
app.add_typer(config_app, name="config")


@app.callback()
def _main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command()
def add(
    text: str = typer.Argument(..., help="Quote text"),
    category: str = typer.Argument(..., help="Quote category"),
    db_path: str = typer.Option(None, help="Path to SQLite database"),
) -> None:
    """Add a new quote."""
    add_cmd(store_from_path=store_from_path, db_path=db_path, text=text, category=category)


@app.command("list")
def list_quotes(
    category: str = typer.Option(None, help="Category filter ('all' for every quote)"),
    db_path: str = typer.Option(None, help="Path to SQLite database"),
) -> None:
    """List quotes, optionally filtered by category."""
    list_cmd(store_from_path=store_from_path, db_path=db_path, category=category)


@app.command()
def categories(db_path: str = typer.Option(None, help="Path to SQLite database")) -> None:
    """List known categories; the remembered filter is starred."""
    categories_cmd(store_from_path=store_from_path, db_path=db_path)


@app.command()
def random(
    category: str = typer.Option(None, help="Category filter ('all' for every quote)"),
    db_path: str = typer.Option(None, help="Path to SQLite database"),
) -> None:
    """Show a random quote."""
    random_cmd(
        store_from_path=store_from_path,
        session_storage=session_storage,
        db_path=db_path,
        category=category,
    )


@app.command()
def last() -> None:
    """Show the last quote displayed in this shell session."""
    last_cmd(session_storage=session_storage)


@app.command("export")
def export_quotes(
    output: str = typer.Option("quotes.json", "--output", "-o", help="Output file ('-' for stdout)"),
    db_path: str = typer.Option(None, help="Path to SQLite database"),
) -> None:
    """Export quotes to a JSON file."""
    export_quotes_cmd(store_from_path=store_from_path, db_path=db_path, output=output)


@app.command("import")
def import_quotes(
    input_file: str = typer.Argument(..., help="JSON array file ('-' for stdin)"),
    append: bool = typer.Option(False, "--append", help="Keep existing quotes"),
    db_path: str = typer.Option(None, help="Path to SQLite database"),
) -> None:
    """Import quotes from a JSON file (replaces existing quotes unless --append)."""
    import_quotes_cmd(
        store_from_path=store_from_path,
        db_path=db_path,
        input_file=input_file,
        append=append,
    )


@sync_app.command("once")
def sync_once(db_path: str = typer.Option(None, help="Path to SQLite database")) -> None:
    """Run a single sync pass."""
    sync_once_cmd(
        store_from_path=store_from_path,
        build_orchestrator=build_orchestrator,
        load_config=load_config,
        db_path=db_path,
    )


@sync_app.command("daemon")
def sync_daemon(
    interval_s: int = typer.Option(None, min=1, help="Seconds between sync passes"),
    db_path: str = typer.Option(None, help="Path to SQLite database"),
) -> None:
    """Sync periodically in the foreground."""
    sync_daemon_cmd(
        store_from_path=store_from_path,
        build_orchestrator=build_orchestrator,
        load_config=load_config,
        db_path=db_path,
        interval_s=interval_s,
    )


@sync_app.command("policy")
def sync_policy(
    policy: str = typer.Argument(None, help="server-wins or manual"),
    db_path: str = typer.Option(None, help="Path to SQLite database"),
) -> None:
    """Show or set the conflict policy."""
    policy_cmd(store_from_path=store_from_path, load_config=load_config, db_path=db_path, policy=policy)


@conflicts_app.command("list")
def conflicts_list(db_path: str = typer.Option(None, help="Path to SQLite database")) -> None:
    """List conflicts awaiting a manual decision."""
    conflicts_list_cmd(store_from_path=store_from_path, db_path=db_path)


@conflicts_app.command("resolve")
def conflicts_resolve(
    record_id: str = typer.Argument(..., help="Local quote id"),
    choice: str = typer.Argument(..., help="keep-local or use-server"),
    db_path: str = typer.Option(None, help="Path to SQLite database"),
) -> None:
    """Resolve a pending conflict."""
    conflicts_resolve_cmd(
        store_from_path=store_from_path, db_path=db_path, record_id=record_id, choice=choice
    )


@config_app.command("show")
def config_show() -> None:
    """Print the effective configuration."""
    print(f"# {get_config_path()}")
    print(json.dumps(asdict(load_config()), indent=2))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(..., help="Config key"),
    value: str = typer.Argument(..., help="New value"),
) -> None:
    """Write a single key to the config file."""
    if key not in QuotesyncConfig.__dataclass_fields__:
        print(f"[red]Unknown config key: {key}[/red]")
        raise typer.Exit(code=1)
    data = read_config_or_exit()
    data[key] = value
    write_config_or_exit(data)
    print(f"[green]✓ {key} updated[/green]")


@app.command("version")
def version() -> None:
    """Print version."""

    print(__version__)


def main() -> None:
    app()
