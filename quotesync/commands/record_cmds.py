from __future__ import annotations

import typer
from rich import print
from rich.markup import escape
from rich.table import Table

from quotesync.display import EMPTY_MESSAGE, format_quote, last_displayed, random_quote
from quotesync.errors import ValidationError
from quotesync.preferences import last_category, set_last_category


def add_cmd(*, store_from_path, db_path: str | None, text: str, category: str) -> None:
    """Add a quote locally; it is pushed on the next sync."""

    store = store_from_path(db_path)
    try:
        try:
            record = store.add(text, category)
        except ValidationError as exc:
            print(f"[red]{escape(str(exc))}[/red]")
            raise typer.Exit(code=1) from exc
        print(f"[green]✓ Added {record.id}[/green]")
        print("  Quote added locally. Will be synced to server.")
    finally:
        store.close()


def list_cmd(*, store_from_path, db_path: str | None, category: str | None) -> None:
    store = store_from_path(db_path)
    try:
        selected = category or last_category(store.storage)
        if category:
            set_last_category(store.storage, category)
        records = store.list(selected)
    finally:
        store.close()
    if not records:
        print(EMPTY_MESSAGE)
        return
    table = Table("id", "category", "state", "remote", "text")
    for record in records:
        table.add_row(
            record.id,
            escape(record.category),
            record.sync_state,
            record.remote_id or "-",
            escape(record.text),
        )
    print(table)


def categories_cmd(*, store_from_path, db_path: str | None) -> None:
    store = store_from_path(db_path)
    try:
        categories = store.distinct_categories()
        selected = last_category(store.storage)
    finally:
        store.close()
    for name in ["all", *categories]:
        marker = "*" if name == selected else " "
        print(f"{marker} {escape(name)}")


def random_cmd(
    *,
    store_from_path,
    session_storage,
    db_path: str | None,
    category: str | None,
) -> None:
    """Show a random quote from the selected category."""

    store = store_from_path(db_path)
    try:
        selected = category or last_category(store.storage)
        if category:
            set_last_category(store.storage, category)
        record = random_quote(store, selected, session_storage())
    finally:
        store.close()
    if record is None:
        print(EMPTY_MESSAGE)
        return
    print(escape(format_quote(record)))


def last_cmd(*, session_storage) -> None:
    record = last_displayed(session_storage())
    if record is None:
        print("[yellow]No quote shown yet in this session[/yellow]")
        return
    print(escape(format_quote(record)))
