"""
Main CLI entry point for taxontags.

Provides subcommands for each stage of the taxonomic tag analysis:
- taxonomy: Build taxonomic genome lists and the taxonomy tree
- tags: Build per-genome tag directories
- analyze: Compare groupings and genome sets
"""

from __future__ import annotations

import typer
from rich import print as rprint

from taxontags import __version__

app = typer.Typer(
    name="taxontags",
    help="Find the feature tags that distinguish taxonomic groupings of genomes",
    add_completion=False,
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        rprint(f"taxontags version {__version__}")
        raise typer.Exit


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """
    Taxontags: distinguishing feature tags for taxonomic groupings.

    Builds a taxonomy over a genome collection, scans each genome for
    feature tags (roles or protein families), and reports the tags that
    are common in one grouping but rare in its siblings.
    """


# Import subcommands
from taxontags.cli import analyze, tags, taxonomy

# Register subcommands
app.add_typer(taxonomy.app, name="taxonomy")
app.add_typer(tags.app, name="tags")
app.add_typer(analyze.app, name="analyze")


if __name__ == "__main__":
    app()
