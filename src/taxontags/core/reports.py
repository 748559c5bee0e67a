"""
Report writers for comparison results.

All reports are headed, tab-delimited tables built as polars DataFrames:

- taxon analysis: one row per grouping with its distinguishing tags;
- set comparison: one row per distinguishing tag of either genome set;
- genome changes: per genome, the distinguishing tags it carries along its
  lineage, with the parent grouping each tag distinguishes it within.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import TextIO

import polars as pl

from taxontags.core.constants import (
    CHANGES_REPORT_COLUMNS,
    SET_REPORT_COLUMNS,
    TAG_LIST_SEPARATOR,
    TAXON_REPORT_COLUMNS,
    UNKNOWN_NAME,
)
from taxontags.core.tags.counts import TagCounts
from taxontags.core.taxonomy.directory import GroupingDirectory
from taxontags.core.taxonomy.tree import TaxonomyTree

logger = logging.getLogger(__name__)

TagNamer = Callable[[str], str]


def _identity(tag: str) -> str:
    return tag


def write_report(
    df: pl.DataFrame,
    output: Path | None = None,
    stream: TextIO | None = None,
) -> None:
    """
    Write a report table to a file, or to a stream (stdout by default).

    Args:
        df: Report table.
        output: Output file; parent directories are created.
        stream: Text stream used when ``output`` is None.
    """
    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        df.write_csv(output, separator="\t", quote_style="never")
        logger.info("Wrote %d report rows to %s", len(df), output)
    else:
        (stream or sys.stdout).write(df.write_csv(separator="\t", quote_style="never"))


def taxon_analysis_report(
    diff_map: Mapping[int, set[str]],
    name_map: Mapping[int, str],
) -> pl.DataFrame:
    """
    Build the taxon analysis table.

    Args:
        diff_map: Grouping ID to distinguishing tags.
        name_map: Grouping ID to name; missing names are reported as unknown.

    Returns:
        DataFrame with columns tax_id, name, tags (sorted, comma-joined),
        in ascending grouping ID order.
    """
    tax_ids = sorted(diff_map)
    return pl.DataFrame(
        {
            "tax_id": tax_ids,
            "name": [name_map.get(t, UNKNOWN_NAME) for t in tax_ids],
            "tags": [TAG_LIST_SEPARATOR.join(sorted(diff_map[t])) for t in tax_ids],
        },
        schema=dict.fromkeys(TAXON_REPORT_COLUMNS, pl.Utf8) | {"tax_id": pl.Int64},
    )


def set_compare_report(
    left_tags: set[str],
    right_tags: set[str],
    left_counts: TagCounts,
    right_counts: TagCounts,
    tag_name: TagNamer | None = None,
) -> pl.DataFrame:
    """
    Build the two-set comparison table.

    Each distinguishing tag is listed with the set it distinguishes (1 or
    2) and the number of genomes carrying it in each set.

    Returns:
        DataFrame with columns set, tag, name, count1, count2, sorted by
        set and then by tag.
    """
    namer = tag_name or _identity
    rows = [(1, tag) for tag in sorted(left_tags)] + [(2, tag) for tag in sorted(right_tags)]
    return pl.DataFrame(
        {
            "set": [s for s, _ in rows],
            "tag": [t for _, t in rows],
            "name": [namer(t) for _, t in rows],
            "count1": [left_counts.get_count(t) for _, t in rows],
            "count2": [right_counts.get_count(t) for _, t in rows],
        },
        schema=dict(
            zip(
                SET_REPORT_COLUMNS,
                (pl.Int64, pl.Utf8, pl.Utf8, pl.Int64, pl.Int64),
                strict=True,
            )
        ),
    )


def genome_changes_report(
    genome_id: str,
    genome_name: str,
    genome_tags: set[str],
    lineage: list[int],
    diff_map: Mapping[int, set[str]],
    tree: TaxonomyTree,
    directory: GroupingDirectory,
    name_map: Mapping[int, str],
    tag_name: TagNamer | None = None,
) -> pl.DataFrame:
    """
    Build the changes table for one genome.

    The lineage is walked from the most specific grouping upward. At each
    grouping that has a parent, the grouping's distinguishing tags found in
    the genome are reported. A tag is reported only at the most specific
    grouping it distinguishes.

    Args:
        genome_id: Genome ID.
        genome_name: Genome name.
        genome_tags: Tag set of the genome.
        lineage: Lineage tax IDs, root first.
        diff_map: Grouping ID to distinguishing tags.
        tree: Taxonomy tree giving each grouping's parent.
        directory: Taxonomy directory giving ranks.
        name_map: Grouping ID to name, covering groupings and parents.
        tag_name: Display name for a tag; defaults to the tag itself.

    Returns:
        DataFrame with the changes report columns.
    """
    namer = tag_name or _identity
    remaining = set(genome_tags)
    rows: list[tuple] = []
    for tax_id in reversed(lineage):
        parent_id = tree.get_parent(tax_id)
        if parent_id is None:
            continue
        diff_tags = diff_map.get(tax_id)
        if not diff_tags:
            continue
        mine = diff_tags & remaining
        if not mine:
            continue
        prefix = (
            genome_id,
            genome_name,
            tax_id,
            directory.rank_of(tax_id) or UNKNOWN_NAME,
            name_map.get(tax_id, UNKNOWN_NAME),
            parent_id,
            directory.rank_of(parent_id) or UNKNOWN_NAME,
            name_map.get(parent_id, UNKNOWN_NAME),
        )
        for tag in sorted(mine):
            rows.append((*prefix, namer(tag)))
        remaining -= mine

    schema = dict.fromkeys(CHANGES_REPORT_COLUMNS, pl.Utf8) | {
        "tax_id": pl.Int64,
        "parent_id": pl.Int64,
    }
    return pl.DataFrame(rows, schema=schema, orient="row")
