"""
Mass taxonomy-based tag comparison.

For every parent in the taxonomy tree with two or more children, each
child grouping is compared against the union of its siblings, giving the
tags that distinguish that child within its parent. Singleton sibling sets
have nothing to be compared against and are skipped.

Sibling sets are independent, so they are processed on a thread pool. Each
unit produces its own partial result and the calling thread merges them.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from pathlib import Path

from taxontags.core.constants import DEFAULT_MAX_ABSENT, DEFAULT_MIN_PRESENT
from taxontags.core.exceptions import ComparisonError, StoreLocationError
from taxontags.core.tags.counts import TagCounts
from taxontags.core.tags.directory import TagDirectory, TagLookup
from taxontags.core.tags.engine import DifferencingEngine
from taxontags.core.taxonomy.directory import GroupingDirectory

logger = logging.getLogger(__name__)


@dataclass
class SiblingData:
    """Genome count and tag counts for one child grouping."""

    tax_id: int
    size: int
    counts: TagCounts


class TaxonCompare:
    """
    Computes the distinguishing tags of every grouping against its siblings.

    Example:
        >>> compare = TaxonCompare.from_paths(Path("TaxTree"), Path("Tags"))
        >>> results = compare.compute_distinguishing_tags()
        >>> results[561]
        {'PGF_00012345', ...}
    """

    def __init__(
        self,
        directory: GroupingDirectory,
        tag_lookup: TagLookup,
        engine: DifferencingEngine,
        max_workers: int | None = None,
    ) -> None:
        """
        Args:
            directory: Taxonomy directory, already ingested.
            tag_lookup: Source of per-genome tag sets.
            engine: Differencing engine holding the tuning fractions.
            max_workers: Thread pool size; None uses the executor default.
        """
        self.directory = directory
        self.tag_lookup = tag_lookup
        self.engine = engine
        self.max_workers = max_workers

    @classmethod
    def from_paths(
        cls,
        tax_dir: Path,
        tag_dir: Path,
        max_absent: float = DEFAULT_MAX_ABSENT,
        min_present: float = DEFAULT_MIN_PRESENT,
        max_workers: int | None = None,
    ) -> TaxonCompare:
        """
        Open existing taxonomy and tag directories for comparison.

        The fractions are validated before either directory is touched.

        Raises:
            InvalidThresholdError: If a fraction is out of range.
            StoreLocationError: If either directory does not exist.
        """
        engine = DifferencingEngine(max_absent, min_present)
        if not tax_dir.is_dir():
            raise StoreLocationError(tax_dir, "taxonomic list directory not found")
        if not tag_dir.is_dir():
            raise StoreLocationError(tag_dir, "tag directory not found")
        return cls(GroupingDirectory(tax_dir), TagDirectory(tag_dir), engine, max_workers)

    def sibling_sets(self) -> list[set[int]]:
        """Sibling sets of the taxonomy tree that have at least two members."""
        return [
            children
            for children in self.directory.tax_tree().values()
            if len(children) > 1
        ]

    def compute_distinguishing_tags(self) -> dict[int, set[str]]:
        """
        Run the mass comparison.

        Returns:
            Mapping from grouping ID to its distinguishing tag set, for
            every grouping that has at least one sibling.

        Raises:
            ComparisonError: If any sibling set fails; no partial result is
                returned.
        """
        sibling_sets = self.sibling_sets()
        logger.info("Comparing %d sibling sets", len(sibling_sets))
        retval: dict[int, set[str]] = {}
        if not sibling_sets:
            return retval

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            future_to_siblings = {
                executor.submit(self.process_siblings, siblings): siblings
                for siblings in sibling_sets
            }
            for future in as_completed(future_to_siblings):
                siblings = future_to_siblings[future]
                try:
                    retval.update(future.result())
                except Exception as e:
                    for pending in future_to_siblings:
                        pending.cancel()
                    raise ComparisonError(siblings, e) from e

        logger.info("Distinguishing tags computed for %d groupings", len(retval))
        return retval

    def process_siblings(self, siblings: Iterable[int]) -> dict[int, set[str]]:
        """
        Compute the distinguishing tags of each member of one sibling set.

        Each sibling is compared against the summed counts of all the
        others.
        """
        sibling_list = self._sibling_data(siblings)
        total = TagCounts()
        total_size = 0
        for data in sibling_list:
            total.merge(data.counts)
            total_size += data.size

        retval: dict[int, set[str]] = {}
        for data in sibling_list:
            rest = total.minus(data.counts)
            tags = self.engine.distinguish_left(
                data.counts, data.size, rest, total_size - data.size
            )
            retval[data.tax_id] = tags
            logger.info("%d distinguishing tags found for %d", len(tags), data.tax_id)
        return retval

    def _sibling_data(self, siblings: Iterable[int]) -> list[SiblingData]:
        genome_sets = self.directory.genome_sets(siblings)
        return [
            SiblingData(
                tax_id,
                len(genomes),
                TagCounts.from_genomes(self.tag_lookup, genomes),
            )
            for tax_id, genomes in genome_sets.items()
        ]

    def name_map(self, tax_ids: Iterable[int]) -> dict[int, str]:
        """Names of the given groupings, for reporting."""
        return self.directory.name_map(tax_ids)
