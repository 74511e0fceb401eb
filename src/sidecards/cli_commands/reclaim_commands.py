"""Reconciliation command."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape
from rich.table import Table

from .shared import console, get_config_and_logger, open_session


def register(app: typer.Typer) -> None:
    """Register the reclaim command on the given Typer app."""

    @app.command(name="reclaim")
    def reclaim(
        dry_run: Annotated[
            bool,
            typer.Option("--dry-run", help="Report what would change without writing"),
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
        """Delete unreferenced flashcards and strip dangling tokens."""
        config, _logger = get_config_and_logger(config_path, log_level)
        session = open_session(config)
        report = session.reclaimer.sweep(dry_run=dry_run)

        title = "Reclaim Summary (dry run)" if dry_run else "Reclaim Summary"
        table = Table(title=title, show_header=True, header_style="bold magenta")
        table.add_column("Item", style="cyan")
        table.add_column("Count", style="green")
        table.add_row("Records deleted", str(len(report.deleted)))
        table.add_row("Tokens stripped", str(report.stripped_tokens))
        table.add_row("Documents rewritten", str(len(report.rewritten_documents)))
        table.add_row("Failures", str(len(report.failed_records) + len(report.failed_documents)))
        console.print(table)

        for record_id in report.deleted:
            console.print(f"  [dim]- {record_id}[/dim]", highlight=False)
        if report.deletion_skipped:
            console.print(
                "[yellow]Some documents could not be read; "
                "no records were deleted this time.[/yellow]"
            )
        if report.unreadable_references:
            console.print(
                "[yellow]Kept tokens of records that failed to load: "
                f"{', '.join(report.unreadable_references)}[/yellow]",
                highlight=False,
            )
        for path, reason in sorted(report.failed_documents.items()):
            console.print(f"[red]FAIL[/red] {escape(path)}: {escape(reason)}", highlight=False)
        if report.has_failures:
            raise typer.Exit(code=1)
