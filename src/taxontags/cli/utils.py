"""
Shared CLI utilities for taxontags commands.

Provides common functionality used across CLI modules.
"""

from __future__ import annotations

import logging
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path
from typing import Any, NoReturn

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import (
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)

from taxontags.core.exceptions import TaxonTagsError
from taxontags.models.config import CompareConfig


@contextmanager
def spinner_progress(
    description: str,
    console: Console | None = None,
    quiet: bool = False,
) -> Generator[Progress, None, None]:
    """Context manager for spinner-style progress display.

    The spinner is suppressed when quiet mode is enabled.

    Args:
        description: Task description to display.
        console: Rich Console instance.
        quiet: If True, suppress the progress display entirely.

    Yields:
        Progress instance (even when quiet, for API consistency).
    """
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TimeElapsedColumn(),
        console=console,
        disable=quiet,
    ) as progress:
        progress.add_task(description=description, total=None)
        yield progress


def setup_logging(verbose: bool = False, console: Console | None = None) -> None:
    """Route package log messages through a Rich handler.

    Warnings are always shown; ``verbose`` lowers the level to INFO so the
    per-genome progress messages of long builds become visible.

    Args:
        verbose: Show INFO messages as well as warnings.
        console: Console the handler writes to (stderr by default).
    """
    level = logging.INFO if verbose else logging.WARNING
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=False,
    )
    package_logger = logging.getLogger("taxontags")
    for old in list(package_logger.handlers):
        if isinstance(old, RichHandler):
            package_logger.removeHandler(old)
    package_logger.addHandler(handler)
    package_logger.setLevel(level)


def fail(console: Console, error: TaxonTagsError) -> NoReturn:
    """Print a package error with its suggestion and exit with status 1."""
    console.print(f"\n[red]Error: {error.message}[/red]")
    if error.suggestion:
        console.print(f"\n[dim]{error.suggestion}[/dim]")
    raise typer.Exit(code=1) from None


def load_config(config: Path | None, **overrides: Any) -> CompareConfig:
    """Load the comparison configuration and apply command-line overrides.

    Args:
        config: Optional YAML configuration file.
        **overrides: Option values; None means "not given on the command line".

    Raises:
        ConfigurationError: If the file or the merged values are invalid.
    """
    base = CompareConfig.from_yaml(config) if config is not None else CompareConfig()
    return base.with_overrides(**overrides)


class QuietConsole:
    """Console wrapper that suppresses output in quiet mode.

    All other console methods are delegated to the wrapped instance.

    Example:
        >>> qc = QuietConsole(Console(), quiet=True)
        >>> qc.print("This won't be shown")
    """

    def __init__(self, console: Console, quiet: bool = False):
        self._console = console
        self._quiet = quiet

    @property
    def console(self) -> Console:
        """The wrapped Console, for output that ignores quiet mode."""
        return self._console

    def print(self, *args: Any, **kwargs: Any) -> None:
        """Print to console unless quiet mode is enabled."""
        if not self._quiet:
            self._console.print(*args, **kwargs)

    def __getattr__(self, name: str) -> Any:
        return getattr(self._console, name)
