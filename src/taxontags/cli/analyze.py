"""
Analyze command for tag comparisons.

Provides subcommands:
- taxa: Distinguishing tags of every grouping against its siblings
- sets: Compare two genome sets using a pre-built tag directory
- scan-sets: Scan two genome sets from a genome source and compare them
- pipe: Full per-genome what's-changed pipeline over a genome source
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
    name="analyze",
    help="Find the feature tags that distinguish genome groups",
    no_args_is_help=True,
)

console = Console(stderr=True)

ABSENT_HELP = "Maximum fraction of genomes in a set that can have an absent tag (default: 0.2)"
PRESENT_HELP = "Minimum fraction of genomes in a set that can have a present tag (default: 0.8)"


@app.command(name="taxa")
def taxa(
    tax_dir: Path = typer.Argument(
        ...,
        help="Taxonomy directory built by 'taxonomy build'",
    ),
    tag_dir: Path = typer.Argument(
        ...,
        help="Tag directory built by 'tags build' from the same genomes",
    ),
    absent: float | None = typer.Option(None, "--absent", help=ABSENT_HELP),
    present: float | None = typer.Option(None, "--present", help=PRESENT_HELP),
    threads: int | None = typer.Option(
        None,
        "--threads",
        "-t",
        help="Worker threads for the comparison",
        min=1,
    ),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Output report file (default: standard output)",
    ),
    config: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="YAML configuration file",
        exists=True,
        dir_okay=False,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress progress output"),
) -> None:
    """
    Taxonomic differential analysis.

    For each taxonomic grouping with at least one sibling, reports the tags
    that distinguish it from its siblings in the taxonomy tree.

    Examples:

        taxontags analyze taxa TaxTree Tags -o taxa.tbl

        taxontags analyze taxa TaxTree Tags --absent 0.1 --present 0.9
    """
    from taxontags.core.pipeline import analyze_taxa
    from taxontags.core.reports import write_report

    setup_logging(verbose, console)
    out = QuietConsole(console, quiet=quiet)

    try:
        settings = load_config(
            config, max_absent=absent, min_present=present, threads=threads
        )
        engine = settings.create_engine()
        with spinner_progress("Comparing sibling groupings...", console, quiet):
            report = analyze_taxa(tax_dir, tag_dir, engine, settings.threads)
    except TaxonTagsError as e:
        fail(console, e)

    write_report(report, output)
    out.print(f"[bold green]{len(report)} groupings analyzed.[/bold green]")


@app.command(name="sets")
def sets(
    tag_dir: Path = typer.Argument(..., help="Tag directory"),
    list1: Path = typer.Argument(
        ...,
        help="Tab-delimited file with headers, first-set genome IDs in column 1",
        exists=True,
        dir_okay=False,
    ),
    list2: Path = typer.Argument(
        ...,
        help="Tab-delimited file with headers, second-set genome IDs in column 1",
        exists=True,
        dir_okay=False,
    ),
    absent: float | None = typer.Option(None, "--absent", help=ABSENT_HELP),
    present: float | None = typer.Option(None, "--present", help=PRESENT_HELP),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Output report file (default: standard output)",
    ),
    config: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="YAML configuration file",
        exists=True,
        dir_okay=False,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress progress output"),
) -> None:
    """
    What's-changed comparison of two genome sets from a tag directory.

    The sets must not overlap and every genome must be in the tag directory.

    Example:

        taxontags analyze sets Tags set1.tbl set2.tbl -o changes.tbl
    """
    from taxontags.core.io_utils import read_id_set
    from taxontags.core.pipeline import compare_sets
    from taxontags.core.reports import write_report

    setup_logging(verbose, console)
    out = QuietConsole(console, quiet=quiet)

    try:
        settings = load_config(config, max_absent=absent, min_present=present)
        engine = settings.create_engine()
        set1 = read_id_set(list1)
        set2 = read_id_set(list2)
        out.print(f"[bold]Set sizes:[/bold] {len(set1)} and {len(set2)}")
        report = compare_sets(tag_dir, set1, set2, engine)
    except TaxonTagsError as e:
        fail(console, e)

    write_report(report, output)
    out.print(f"[bold green]{len(report)} distinguishing tags found.[/bold green]")


@app.command(name="scan-sets")
def scan_sets(
    genomes: Path = typer.Argument(
        ...,
        help="Directory of GTO genome files",
        exists=True,
        file_okay=False,
    ),
    list1: Path = typer.Argument(
        ...,
        help="Tab-delimited file with headers, first-set genome IDs in column 1",
        exists=True,
        dir_okay=False,
    ),
    list2: Path = typer.Argument(
        ...,
        help="Tab-delimited file with headers, second-set genome IDs in column 1",
        exists=True,
        dir_okay=False,
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
    temp: Path = typer.Option(
        Path("Temp"),
        "--temp",
        help="Temporary directory for the tag files (always erased first)",
    ),
    keep: bool = typer.Option(
        False,
        "--keep",
        help="Keep the temporary tag files after processing",
    ),
    absent: float | None = typer.Option(None, "--absent", help=ABSENT_HELP),
    present: float | None = typer.Option(None, "--present", help=PRESENT_HELP),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Output report file (default: standard output)",
    ),
    config: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="YAML configuration file",
        exists=True,
        dir_okay=False,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress progress output"),
) -> None:
    """
    What's-changed comparison of two genome sets, scanning their tags first.

    Example:

        taxontags analyze scan-sets genomes/ set1.tbl set2.tbl --type pgfam
    """
    from taxontags.core.genome_source import GtoDirectorySource
    from taxontags.core.io_utils import read_id_set
    from taxontags.core.pipeline import compare_sets_full
    from taxontags.core.reports import write_report

    setup_logging(verbose, console)
    out = QuietConsole(console, quiet=quiet)

    try:
        settings = load_config(
            config,
            max_absent=absent,
            min_present=present,
            scanner=scanner,
            role_file=roles,
        )
        engine = settings.create_engine()
        tag_scanner = settings.create_scanner()
        set1 = read_id_set(list1)
        set2 = read_id_set(list2)
        source = GtoDirectorySource(genomes)
        with spinner_progress("Scanning and comparing genome sets...", console, quiet):
            report = compare_sets_full(
                source, set1, set2, engine, tag_scanner, temp, keep=keep
            )
    except TaxonTagsError as e:
        fail(console, e)

    write_report(report, output)
    out.print(f"[bold green]{len(report)} distinguishing tags found.[/bold green]")


@app.command(name="pipe")
def pipe(
    genomes: Path = typer.Argument(
        ...,
        help="Directory of GTO genome files",
        exists=True,
        file_okay=False,
    ),
    out_dir: Path = typer.Argument(..., help="Master output directory"),
    tax_dir: Path = typer.Option(
        Path("TaxTree"),
        "--tax-dir",
        help="Taxonomy directory; reused if it exists unless --clear is given",
    ),
    tag_dir: Path = typer.Option(
        Path("Temp"),
        "--tag-dir",
        help="Temporary directory for the tag files (always rebuilt)",
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
    clear: bool = typer.Option(
        False,
        "--clear",
        help="Erase and rebuild the taxonomy directory before processing",
    ),
    keep: bool = typer.Option(
        False,
        "--keep",
        help="Keep the tag directory when done",
    ),
    absent: float | None = typer.Option(None, "--absent", help=ABSENT_HELP),
    present: float | None = typer.Option(None, "--present", help=PRESENT_HELP),
    threads: int | None = typer.Option(
        None,
        "--threads",
        help="Worker threads for the comparison",
        min=1,
    ),
    config: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="YAML configuration file",
        exists=True,
        dir_okay=False,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress progress output"),
) -> None:
    """
    Full taxonomic what's-changed pipeline.

    Writes <out_dir>/<genome_id>/changes.tbl for every genome, listing each
    distinguishing tag the genome carries, the grouping it distinguishes
    and that grouping's parent.

    Example:

        taxontags analyze pipe genomes/ Changes --type pgfam --clear
    """
    from taxontags.core.genome_source import GtoDirectorySource
    from taxontags.core.pipeline import run_taxon_pipeline

    setup_logging(verbose, console)
    out = QuietConsole(console, quiet=quiet)

    try:
        settings = load_config(
            config,
            max_absent=absent,
            min_present=present,
            threads=threads,
            scanner=scanner,
            role_file=roles,
        )
        engine = settings.create_engine()
        tag_scanner = settings.create_scanner()
        source = GtoDirectorySource(genomes)
        with spinner_progress("Running taxonomic pipeline...", console, quiet):
            n_reports = run_taxon_pipeline(
                source,
                out_dir,
                tax_dir,
                tag_dir,
                tag_scanner,
                engine,
                clear=clear,
                keep=keep,
                max_workers=settings.threads,
            )
    except TaxonTagsError as e:
        fail(console, e)

    out.print(f"[bold green]{n_reports} genome reports written to {out_dir}.[/bold green]")
