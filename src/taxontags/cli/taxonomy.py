"""
Taxonomy command for building taxonomic list directories.

Provides subcommands:
- build: Ingest a directory of GTO genomes into a taxonomy directory
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from taxontags.cli.utils import QuietConsole, fail, setup_logging, spinner_progress
from taxontags.core.exceptions import TaxonTagsError

app = typer.Typer(
    name="taxonomy",
    help="Build taxonomic genome lists and the taxonomy tree",
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
    out_dir: Path = typer.Argument(
        ...,
        help="Taxonomy directory to create or extend",
    ),
    clear: bool = typer.Option(
        False,
        "--clear",
        help="Erase the taxonomy directory before processing",
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
    Build taxonomy lists from a genome source.

    For each major rank, lists the genomes in every taxonomic grouping of
    that rank, and records the taxonomy tree linking the groupings.

    If the directory already exists the new genomes are added. If a genome
    already in the directory has had its lineage changed, use --clear.

    Examples:

        taxontags taxonomy build genomes/ TaxTree

        taxontags taxonomy build genomes/ TaxTree --clear -v
    """
    from taxontags.core.genome_source import GtoDirectorySource
    from taxontags.core.pipeline import build_taxonomy
    from taxontags.core.taxonomy.directory import GroupingDirectory

    setup_logging(verbose, console)
    out = QuietConsole(console, quiet=quiet)

    out.print("\n[bold blue]Taxonomy Directory Builder[/bold blue]\n")
    out.print(f"[bold]Genomes:[/bold] {genomes}")
    out.print(f"[bold]Output:[/bold] {out_dir}")

    try:
        source = GtoDirectorySource(genomes)
        with spinner_progress(f"Ingesting {len(source)} genomes...", console, quiet):
            added = build_taxonomy(source, out_dir, clear=clear)
        stores = GroupingDirectory(out_dir).all_rank_stores()
    except TaxonTagsError as e:
        fail(console, e)

    table = Table(title="Groupings per rank")
    table.add_column("Rank", style="cyan")
    table.add_column("Groupings", justify="right")
    for rank, store in stores.items():
        table.add_row(rank, str(len(store)))
    out.print(table)

    out.print(f"\n[bold green]{added} genome memberships recorded.[/bold green]")
    out.print()
