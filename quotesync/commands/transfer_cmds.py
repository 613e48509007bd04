from __future__ import annotations

import sys
from pathlib import Path

import typer
from rich import print
from rich.markup import escape

from quotesync.errors import MalformedImportError, ValidationError
from quotesync.store.transfer import export_records, import_records


def export_quotes_cmd(*, store_from_path, db_path: str | None, output: str) -> None:
    """Export every quote to a JSON array file."""

    store = store_from_path(db_path)
    try:
        output_json = export_records(store)
        count = len(store)
    finally:
        store.close()
    if output == "-":
        sys.stdout.write(output_json + "\n")
        return
    output_path = Path(output).expanduser()
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(output_json + "\n", encoding="utf-8")
    print(f"[green]✓ Exported {count} quotes to {output_path}[/green]")


def import_quotes_cmd(
    *,
    store_from_path,
    db_path: str | None,
    input_file: str,
    append: bool,
) -> None:
    """Import quotes from a JSON array file."""

    if input_file == "-":
        payload = sys.stdin.read()
    else:
        input_path = Path(input_file).expanduser()
        if not input_path.exists():
            print(f"[red]Input file not found: {input_path}[/red]")
            raise typer.Exit(code=1)
        payload = input_path.read_text(encoding="utf-8")

    store = store_from_path(db_path)
    try:
        try:
            count = import_records(store, payload, mode="append" if append else "replace")
        except (MalformedImportError, ValidationError) as exc:
            print(f"[red]Import failed: {escape(str(exc))}[/red]")
            raise typer.Exit(code=1) from exc
    finally:
        store.close()
    print(f"[green]✓ Imported {count} quotes[/green]")
