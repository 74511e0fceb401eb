"""Commands that work on stored records: list, update, delete."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape
from rich.table import Table

from sidecards.exceptions import SideCardsError

from .shared import console, fail, get_config_and_logger, open_session


class SortOrder(str, Enum):
    DATE = "date"
    ALPHA = "alpha"


def _preview(text: str, width: int = 40) -> str:
    first_line = text.strip().splitlines()[0] if text.strip() else ""
    if len(first_line) > width:
        return first_line[: width - 3] + "..."
    return first_line


def register(app: typer.Typer) -> None:
    """Register record commands on the given Typer app."""

    @app.command(name="list")
    def list_records(
        sort: Annotated[
            SortOrder,
            typer.Option("--sort", help="Sort by creation date or alphabetically by text"),
        ] = SortOrder.DATE,
        config_path: Annotated[
            Path | None,
            typer.Option("--config", help="Path to config.yaml", exists=True),
        ] = None,
        log_level: Annotated[
            str | None,
            typer.Option("--log-level", help="Log level (default: config log_level)"),
        ] = None,
    ) -> None:
        """List every flashcard in the vault."""
        config, _logger = get_config_and_logger(config_path, log_level)
        session = open_session(config)

        records = session.store.list()
        if sort is SortOrder.ALPHA:
            records.sort(key=lambda r: (r.text.lower(), r.id))

        if not records:
            console.print("[yellow]No flashcards found[/yellow]")
        else:
            table = Table(
                title=f"Flashcards ({len(records)})",
                show_header=True,
                header_style="bold magenta",
            )
            table.add_column("Id", style="cyan", no_wrap=True)
            table.add_column("Created", no_wrap=True)
            table.add_column("Document")
            table.add_column("Text")
            for record in records:
                table.add_row(
                    record.id,
                    record.created_at.strftime("%Y-%m-%d %H:%M"),
                    record.owner_path,
                    _preview(record.text),
                )
            console.print(table)

        if session.store.unreadable:
            console.print(
                f"[yellow]{len(session.store.unreadable)} record file(s) could not be read[/yellow]"
            )
            for path, reason in sorted(session.store.unreadable.items()):
                console.print(f"  [dim]{escape(path)}: {escape(reason)}[/dim]", highlight=False)

    @app.command(name="update")
    def update_record(
        record_id: Annotated[str, typer.Argument(help="Flashcard id")],
        text: Annotated[str | None, typer.Option("--text", help="New flashcard text")] = None,
        extra: Annotated[str | None, typer.Option("--extra", help="New extra information")] = None,
        config_path: Annotated[
            Path | None,
            typer.Option("--config", help="Path to config.yaml", exists=True),
        ] = None,
        log_level: Annotated[
            str | None,
            typer.Option("--log-level", help="Log level (default: config log_level)"),
        ] = None,
    ) -> None:
        """Change the text and/or extra of a flashcard."""
        config, logger = get_config_and_logger(config_path, log_level)
        changes = {
            key: value for key, value in (("text", text), ("extra", extra)) if value is not None
        }
        if not changes:
            console.print("[yellow]Nothing to update: pass --text and/or --extra[/yellow]")
            raise typer.Exit(code=1)

        session = open_session(config)
        try:
            session.store.update(record_id, **changes)
        except SideCardsError as e:
            fail(e, logger)
        console.print(f"[green]Updated[/green] {record_id}", highlight=False)

    @app.command(name="delete")
    def delete_record(
        record_id: Annotated[str, typer.Argument(help="Flashcard id")],
        config_path: Annotated[
            Path | None,
            typer.Option("--config", help="Path to config.yaml", exists=True),
        ] = None,
        log_level: Annotated[
            str | None,
            typer.Option("--log-level", help="Log level (default: config log_level)"),
        ] = None,
    ) -> None:
        """Delete a flashcard and remove its tokens from every document."""
        config, logger = get_config_and_logger(config_path, log_level)
        session = open_session(config)
        try:
            session.store.delete(record_id)
        except SideCardsError as e:
            fail(e, logger)
        console.print(f"[green]Deleted[/green] {record_id}", highlight=False)
