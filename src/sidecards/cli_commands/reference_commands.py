"""Commands that work on a single document: scan, view, create."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape
from rich.table import Table

from sidecards.constants import DEFAULT_EXTRA, DEFAULT_TEXT
from sidecards.exceptions import SideCardsError

from .shared import console, fail, get_config_and_logger, open_session


def register(app: typer.Typer) -> None:
    """Register document commands on the given Typer app."""

    @app.command(name="scan")
    def scan_document(
        document: Annotated[str, typer.Argument(help="Vault-relative document path")],
        config_path: Annotated[
            Path | None,
            typer.Option("--config", help="Path to config.yaml", exists=True),
        ] = None,
        log_level: Annotated[
            str | None,
            typer.Option("--log-level", help="Log level (default: config log_level)"),
        ] = None,
    ) -> None:
        """List the tokens in a document and whether each has a record."""
        config, logger = get_config_and_logger(config_path, log_level)
        session = open_session(config)
        try:
            text = session.storage.read_text(document)
        except SideCardsError as e:
            fail(e, logger)

        result = session.scanner.scan(text, document)
        if not result.occurrences:
            console.print(f"[yellow]No tokens in {document}[/yellow]")
            return

        table = Table(title=f"Tokens in {document}", show_header=True, header_style="bold magenta")
        table.add_column("Offset", justify="right")
        table.add_column("Id", style="cyan")
        table.add_column("Record")
        for occurrence in result.occurrences:
            status = (
                "[green]ok[/green]"
                if occurrence.record_id in session.store
                else "[red]dangling[/red]"
            )
            table.add_row(str(occurrence.start), occurrence.record_id, status)
        console.print(table)
        logger.info("scan_completed", path=document, tokens=len(result.occurrences))

    @app.command(name="view")
    def view_document(
        document: Annotated[str, typer.Argument(help="Vault-relative document path")],
        dedupe: Annotated[
            bool,
            typer.Option("--dedupe", help="Show a record once even if referenced repeatedly"),
        ] = False,
        config_path: Annotated[
            Path | None,
            typer.Option("--config", help="Path to config.yaml", exists=True),
        ] = None,
        log_level: Annotated[
            str | None,
            typer.Option("--log-level", help="Log level (default: config log_level)"),
        ] = None,
    ) -> None:
        """Show a document's flashcards in token order."""
        config, logger = get_config_and_logger(config_path, log_level)
        session = open_session(config)
        try:
            entries = session.resolver.view_for_document(
                document, dedupe=dedupe or config.dedupe_sorted_view
            )
        except SideCardsError as e:
            fail(e, logger)

        if not entries:
            console.print(f"[yellow]No flashcards for {document}[/yellow]")
            return

        for index, entry in enumerate(entries, 1):
            marker = "" if entry.is_sorted else " [dim](not referenced)[/dim]"
            console.print(f"[bold cyan]{index}. {entry.record.id}[/bold cyan]{marker}")
            console.print(entry.record.text, markup=False)
            if entry.record.extra:
                console.print(entry.record.extra, style="dim", markup=False)
            console.print()

    @app.command(name="create")
    def create_reference(
        document: Annotated[str, typer.Argument(help="Vault-relative document path")],
        offset: Annotated[
            int | None,
            typer.Option("--offset", help="Character offset for the token (default: end)"),
        ] = None,
        text: Annotated[str, typer.Option("--text", help="Flashcard text")] = DEFAULT_TEXT,
        extra: Annotated[str, typer.Option("--extra", help="Extra information")] = DEFAULT_EXTRA,
        config_path: Annotated[
            Path | None,
            typer.Option("--config", help="Path to config.yaml", exists=True),
        ] = None,
        log_level: Annotated[
            str | None,
            typer.Option("--log-level", help="Log level (default: config log_level)"),
        ] = None,
    ) -> None:
        """Create a flashcard and insert its token into a document."""
        config, logger = get_config_and_logger(config_path, log_level)
        session = open_session(config)
        panel = session.panel("cli")
        try:
            position = offset
            if position is None:
                position = len(session.storage.read_text(document))
            record = panel.insert_reference(document, position, text=text, extra=extra)
        except SideCardsError as e:
            fail(e, logger)
        finally:
            session.close()

        console.print(
            f"[green]Created[/green] {record.token} in {escape(document)}", highlight=False
        )
