"""
End-to-end workflows behind the command line.

Each function wires the directories, scanner and engine together for one
command and returns its results; the CLI only handles options and output.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

import polars as pl

from taxontags.core.constants import CHANGES_FILE_NAME
from taxontags.core.exceptions import GenomeSetError, StoreLocationError
from taxontags.core.genome_source import GtoDirectorySource
from taxontags.core.io_utils import clear_directory, ensure_directory
from taxontags.core.reports import (
    genome_changes_report,
    set_compare_report,
    taxon_analysis_report,
    write_report,
)
from taxontags.core.tags.compare import TaxonCompare
from taxontags.core.tags.directory import TagDirectory
from taxontags.core.tags.engine import DifferencingEngine
from taxontags.core.tags.scanners import TagScanner
from taxontags.core.taxonomy.directory import GroupingDirectory
from taxontags.models.genomes import Genome

logger = logging.getLogger(__name__)


@dataclass
class TagBuildStats:
    """Outcome of a tag directory build."""

    processed: int = 0
    skipped: int = 0


def build_taxonomy(source: Iterable[Genome], tax_dir: Path, clear: bool = False) -> int:
    """
    Fill a taxonomy directory from a genome source.

    Args:
        source: Genomes to ingest.
        tax_dir: Taxonomy directory; created if missing.
        clear: Erase the directory first. Needed when a genome's lineage
            has changed since it was last ingested.

    Returns:
        Number of genome memberships added.
    """
    if clear and tax_dir.is_dir():
        logger.info("Erasing output directory %s", tax_dir)
        clear_directory(tax_dir)
    return GroupingDirectory(tax_dir).ingest(source)


def build_tags(
    source: Iterable[Genome],
    tag_dir: Path,
    scanner: TagScanner,
    missing_only: bool = False,
    clear: bool = False,
) -> TagBuildStats:
    """
    Scan a genome source into a tag directory.

    Args:
        source: Genomes to scan.
        tag_dir: Tag directory; created if missing.
        scanner: Tag scanner.
        missing_only: Skip genomes that already have a tag file.
        clear: Erase the directory first.
    """
    if clear and tag_dir.is_dir():
        logger.info("Erasing output tag directory %s", tag_dir)
        clear_directory(tag_dir)
    tags = TagDirectory(tag_dir)
    stats = TagBuildStats()
    for genome in source:
        if missing_only and tags.is_in_directory(genome.genome_id):
            logger.info("Genome %s already in output directory", genome.genome_id)
            stats.skipped += 1
            continue
        logger.info("Processing genome %d: %s", stats.processed + stats.skipped + 1, genome)
        tags.add_genome(genome, scanner)
        stats.processed += 1
    logger.info("%d genomes processed, %d skipped", stats.processed, stats.skipped)
    return stats


def analyze_taxa(
    tax_dir: Path,
    tag_dir: Path,
    engine: DifferencingEngine,
    max_workers: int | None = None,
) -> pl.DataFrame:
    """
    Run the mass comparison and build the taxon analysis report.

    Raises:
        StoreLocationError: If either directory does not exist.
        ComparisonError: If the comparison fails.
    """
    if not tax_dir.is_dir():
        raise StoreLocationError(tax_dir, "taxonomic list directory not found")
    if not tag_dir.is_dir():
        raise StoreLocationError(tag_dir, "tag directory not found")
    compare = TaxonCompare(
        GroupingDirectory(tax_dir), TagDirectory(tag_dir), engine, max_workers
    )
    logger.info(
        "Processing differentiation using max_absent = %s and min_present = %s",
        engine.max_absent,
        engine.min_present,
    )
    diff_map = compare.compute_distinguishing_tags()
    logger.info("Retrieving group names for %d taxonomic IDs", len(diff_map))
    return taxon_analysis_report(diff_map, compare.name_map(diff_map))


def validate_genome_sets(
    set1: set[str], set2: set[str], available: Iterable[str] | None = None
) -> None:
    """
    Check that two genome sets are disjoint and, optionally, available.

    Raises:
        GenomeSetError: For the first offending genome, in sorted order.
    """
    overlap = sorted(set1 & set2)
    if overlap:
        raise GenomeSetError(overlap[0], "is present in both sets")
    if available is not None:
        missing = sorted((set1 | set2) - set(available))
        if missing:
            raise GenomeSetError(missing[0], "is not available for the comparison")


def compare_sets(
    tag_dir: Path,
    set1: set[str],
    set2: set[str],
    engine: DifferencingEngine,
    scanner: TagScanner | None = None,
) -> pl.DataFrame:
    """
    Compare two genome sets using a pre-built tag directory.

    Raises:
        StoreLocationError: If the tag directory does not exist.
        GenomeSetError: If the sets overlap or a genome has no tag file.
    """
    if not tag_dir.is_dir():
        raise StoreLocationError(tag_dir, "tag directory not found")
    tags = TagDirectory(tag_dir)
    logger.info("%d genomes in set 1, %d in set 2", len(set1), len(set2))
    validate_genome_sets(set1, set2, tags.genome_ids())
    return _set_report(tags, set1, set2, engine, scanner)


def compare_sets_full(
    source: GtoDirectorySource,
    set1: set[str],
    set2: set[str],
    engine: DifferencingEngine,
    scanner: TagScanner,
    temp_dir: Path,
    keep: bool = False,
) -> pl.DataFrame:
    """
    Scan two genome sets from a source and compare them.

    The temporary tag directory is always erased before scanning and,
    unless ``keep`` is set, after the comparison.

    Raises:
        GenomeSetError: If the sets overlap or a genome is not in the source.
    """
    by_id = dict(_index_source(source))
    validate_genome_sets(set1, set2, by_id)

    if not ensure_directory(temp_dir):
        logger.info("Erasing temporary tag directory %s", temp_dir)
        clear_directory(temp_dir)
    try:
        tags = TagDirectory(temp_dir)
        for genome_id in sorted(set1 | set2):
            tags.add_genome(source.load(by_id[genome_id]), scanner)
        logger.info("Processing comparison")
        return _set_report(tags, set1, set2, engine, scanner)
    finally:
        if not keep:
            logger.info("Erasing tag files in temporary directory %s", temp_dir)
            clear_directory(temp_dir)


def _index_source(source: GtoDirectorySource) -> list[tuple[str, Path]]:
    return [(source.load(path).genome_id, path) for path in source.files]


def _set_report(
    tags: TagDirectory,
    set1: set[str],
    set2: set[str],
    engine: DifferencingEngine,
    scanner: TagScanner | None,
) -> pl.DataFrame:
    left_counts = tags.tag_counts(set1)
    right_counts = tags.tag_counts(set2)
    left = engine.classify(left_counts, len(set1))
    right = engine.classify(right_counts, len(set2))
    left_tags, right_tags = engine.distinguish(left, right)
    logger.info(
        "%d distinguishing tags for set 1, %d for set 2", len(left_tags), len(right_tags)
    )
    return set_compare_report(
        left_tags,
        right_tags,
        left_counts,
        right_counts,
        tag_name=None if scanner is None else scanner.tag_name,
    )


def run_taxon_pipeline(
    source: Iterable[Genome],
    out_dir: Path,
    tax_dir: Path,
    tag_dir: Path,
    scanner: TagScanner,
    engine: DifferencingEngine,
    clear: bool = False,
    keep: bool = False,
    max_workers: int | None = None,
) -> int:
    """
    Full taxonomic what's-changed pipeline over a genome source.

    The taxonomy directory is reused when it already exists and ``clear``
    is not set; otherwise it is (re)built from the source. The tag
    directory is always rebuilt and, unless ``keep`` is set, erased at the
    end. One ``changes.tbl`` report is written per genome, in a
    subdirectory of ``out_dir`` named after the genome ID.

    Returns:
        Number of genome reports written.
    """
    genomes = list(source)
    ensure_directory(out_dir)

    rebuild = clear or not tax_dir.is_dir()
    if clear and tax_dir.is_dir():
        logger.info("Erasing taxonomic tree directory %s", tax_dir)
        clear_directory(tax_dir)
    directory = GroupingDirectory(tax_dir)
    if rebuild:
        directory.ingest(genomes)
    else:
        logger.info("Taxonomy data will be read from directory %s", tax_dir)

    if not ensure_directory(tag_dir):
        logger.info("Tags will be built in %s", tag_dir)
        clear_directory(tag_dir)
    try:
        tags = TagDirectory(tag_dir)
        for genome in genomes:
            logger.info("Scanning for tags in %s", genome)
            tags.add_genome(genome, scanner)

        compare = TaxonCompare(directory, tags, engine, max_workers)
        diff_map = compare.compute_distinguishing_tags()
        tree = directory.tree()
        wanted = set(diff_map)
        for tax_id in diff_map:
            parent_id = tree.get_parent(tax_id)
            if parent_id is not None:
                wanted.add(parent_id)
        name_map = directory.name_map(wanted)

        for genome in genomes:
            logger.info("Processing differentials for genome %s", genome)
            report = genome_changes_report(
                genome.genome_id,
                genome.name,
                tags.get_tags(genome.genome_id),
                genome.lineage,
                diff_map,
                tree,
                directory,
                name_map,
                tag_name=scanner.tag_name,
            )
            write_report(report, out_dir / genome.genome_id / CHANGES_FILE_NAME)
    finally:
        if not keep:
            logger.info("Erasing tag directory %s", tag_dir)
            clear_directory(tag_dir)
    return len(genomes)
