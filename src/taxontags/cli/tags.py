"""
Tags command for building per-genome tag directories.

Provides subcommands:
- build: Scan a directory of GTO genomes into a tag directory
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from taxontags.cli.utils import (
    QuietConsole,
    fail,
    load_config,
    setup_logging,
    spinner_progress,
)
from taxontags.core.exceptions import TaxonTagsError
from taxontags.core.tags.scanners import ScannerType

app = typer.Typer(
    name="tags",
    help="Build tag directories of per-genome feature tag sets",
    no_args_is_help=True,
)

console = Console(stderr=True)


@app.command(name="build")
def build(
    genomes: Path = typer.Argument(
        ...,
        help="Directory of GTO genome files",
        exists=True,
        file_okay=False,
    ),
    tag_dir: Path = typer.Argument(
        ...,
        help="Tag directory to create or extend",
    ),
    scanner: ScannerType | None = typer.Option(
        None,
        "--type",
        "-t",
        help="Kind of tag to scan for: role or pgfam (default: role)",
    ),
    roles: Path | None = typer.Option(
        None,
        "--roles",
        "-r",
        help="Role definition file (default: roles.in.subsystems)",
        dir_okay=False,
    ),
    missing: bool = typer.Option(
        False,
        "--missing",
        help="Do not rescan genomes already in the tag directory",
    ),
    clear: bool = typer.Option(
        False,
        "--clear",
        help="Erase the tag directory before processing",
    ),
    config: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="YAML configuration file",
        exists=True,
        dir_okay=False,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Suppress progress output",
    ),
) -> None:
    """
    Build a tag directory from a genome source.

    Each genome's tags are saved as <genome_id>.tags in the tag directory.

    Examples:

        taxontags tags build genomes/ Tags --roles roles.in.subsystems

        taxontags tags build genomes/ Tags --type pgfam --missing
    """
    from taxontags.core.genome_source import GtoDirectorySource
    from taxontags.core.pipeline import build_tags

    setup_logging(verbose, console)
    out = QuietConsole(console, quiet=quiet)

    try:
        settings = load_config(config, scanner=scanner, role_file=roles)
        out.print("\n[bold blue]Tag Directory Builder[/bold blue]\n")
        out.print(f"[bold]Genomes:[/bold] {genomes}")
        out.print(f"[bold]Tag type:[/bold] {settings.scanner.value}")
        tag_scanner = settings.create_scanner()
        source = GtoDirectorySource(genomes)
        with spinner_progress(f"Scanning {len(source)} genomes...", console, quiet):
            stats = build_tags(
                source, tag_dir, tag_scanner, missing_only=missing, clear=clear
            )
    except TaxonTagsError as e:
        fail(console, e)

    out.print(
        f"\n[bold green]{stats.processed} genomes scanned, "
        f"{stats.skipped} skipped.[/bold green]"
    )
    out.print(f"[bold]Output:[/bold] {tag_dir}")
    out.print()
