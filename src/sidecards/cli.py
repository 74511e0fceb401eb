"""Command-line interface for sidecards."""

from __future__ import annotations

import typer

from .cli_commands import reclaim_commands, record_commands, reference_commands

app = typer.Typer(
    name="sidecards",
    help="Inline flashcard references for Markdown vaults.",
    no_args_is_help=True,
)

reference_commands.register(app)
record_commands.register(app)
reclaim_commands.register(app)


def cli() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    cli()
