"""
Sparse tag counter.

``TagCounts`` maps tag strings to integer counts with a zero default for
unseen tags. It is a plain dictionary with explicit increments; tag
aggregation for large genome sets is the hottest path of a comparison, so
the class avoids any per-call overhead beyond a dict lookup.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, ItemsView
from pathlib import Path
from typing import TYPE_CHECKING

import polars as pl

from taxontags.core.constants import TAG_COUNT_COLUMNS
from taxontags.core.io_utils import read_tsv, write_tsv

if TYPE_CHECKING:
    from taxontags.core.tags.directory import TagLookup

logger = logging.getLogger(__name__)


class TagCounts:
    """
    Counts of feature tags across a group of genomes.

    Example:
        >>> counts = TagCounts()
        >>> counts.count_all({"PGF_001", "PGF_002"})
        >>> counts.count("PGF_001")
        2
        >>> counts.get_count("PGF_999")
        0
    """

    def __init__(self, counts: dict[str, int] | None = None) -> None:
        self._counts: dict[str, int] = dict(counts) if counts else {}

    @classmethod
    def from_genomes(cls, lookup: TagLookup, genome_ids: Iterable[str]) -> TagCounts:
        """
        Count the tags of a set of genomes.

        Args:
            lookup: Source of per-genome tag sets.
            genome_ids: Genomes to fold in; unknown genomes contribute nothing.

        Returns:
            New TagCounts where each tag's count is the number of genomes
            carrying it.
        """
        retval = cls()
        for genome_id in genome_ids:
            retval.count_all(lookup.get_tags(genome_id))
        return retval

    @classmethod
    def load(cls, path: Path) -> TagCounts:
        """
        Load counts from a ``tag``/``count`` TSV save file.

        Raises:
            MalformedStoreError: If the header or a row's field count is
                wrong, a tag is blank or a count is not an integer.
        """
        df = read_tsv(path, TAG_COUNT_COLUMNS, int_columns=("count",), required=("tag",))
        retval = cls()
        retval._counts = dict(df.iter_rows())
        logger.debug("Loaded %d tag counts from %s", len(retval), path)
        return retval

    def save(self, path: Path) -> None:
        """Write the counts to a TSV save file, highest count first."""
        ordered = self.sorted_counts()
        df = pl.DataFrame(
            {"tag": [t for t, _ in ordered], "count": [c for _, c in ordered]},
            schema={"tag": pl.Utf8, "count": pl.Int64},
        )
        write_tsv(df, path)

    def count(self, tag: str, incr: int = 1) -> int:
        """Increment a tag's count and return the new value."""
        value = self._counts.get(tag, 0) + incr
        self._counts[tag] = value
        return value

    def count_all(self, tags: Iterable[str]) -> None:
        """Increment the count of every tag in a collection by one."""
        counts = self._counts
        for tag in tags:
            counts[tag] = counts.get(tag, 0) + 1

    def get_count(self, tag: str) -> int:
        """Return the count for a tag, or 0 if it has never been counted."""
        return self._counts.get(tag, 0)

    def merge(self, other: TagCounts) -> None:
        """Add every count from another counter into this one."""
        counts = self._counts
        for tag, value in other._counts.items():
            counts[tag] = counts.get(tag, 0) + value

    def minus(self, other: TagCounts) -> TagCounts:
        """
        Return a new counter holding this counter less another.

        Only meaningful when ``other`` counts a subset of the genomes
        counted here; otherwise counts can go negative.
        """
        retval = TagCounts(self._counts)
        counts = retval._counts
        for tag, value in other._counts.items():
            counts[tag] = counts.get(tag, 0) - value
        return retval

    def clear(self) -> None:
        """Erase all counts."""
        self._counts.clear()

    def items(self) -> ItemsView[str, int]:
        """Unordered view of all (tag, count) pairs."""
        return self._counts.items()

    def sorted_counts(self) -> list[tuple[str, int]]:
        """Return all (tag, count) pairs, highest count first, then by tag."""
        return sorted(self._counts.items(), key=lambda x: (-x[1], x[0]))

    def __len__(self) -> int:
        return len(self._counts)

    def __contains__(self, tag: object) -> bool:
        return tag in self._counts

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TagCounts):
            return NotImplemented
        return self._counts == other._counts

    def __repr__(self) -> str:
        return f"TagCounts({len(self)} tags)"
