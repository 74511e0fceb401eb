"""Shared utilities for CLI commands."""

from pathlib import Path
from typing import Any, NoReturn

import typer
from rich.console import Console

from sidecards.application.session import SideCardsSession
from sidecards.config import Config, load_config
from sidecards.exceptions import SideCardsError
from sidecards.utils.logging import configure_logging, get_logger

# Shared console for all commands
console = Console()


def get_config_and_logger(
    config_path: Path | None = None,
    log_level: str | None = None,
    verbose: bool = False,
) -> tuple[Config, Any]:
    """Load configuration and configure logging for one command.

    Args:
        config_path: Optional path to config file
        log_level: Logging level; falls back to the configured level
        verbose: Show all log messages on terminal (for debugging)

    Returns:
        Tuple of (Config, Logger)
    """
    try:
        config = load_config(config_path)
    except SideCardsError as e:
        fail(e)

    configure_logging(
        log_level or config.log_level,
        log_dir=config.get_log_dir(),
        verbose=verbose,
    )
    return config, get_logger("cli")


def open_session(config: Config) -> SideCardsSession:
    """Build a session for the configured vault and load its records."""
    try:
        return SideCardsSession(config).open()
    except SideCardsError as e:
        fail(e)


def fail(error: SideCardsError, logger: Any | None = None) -> NoReturn:
    """Report a sidecards error on the console and exit with code 1."""
    if logger is not None:
        logger.error("command_failed", **error.to_dict())
    console.print(f"[bold red]Error:[/bold red] {error.message}")
    if error.suggestion:
        console.print(f"[dim]TIP: {error.suggestion}[/dim]")
    raise typer.Exit(code=1)
