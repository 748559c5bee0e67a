"""
Present / absent classification of tags and distinguishing-tag sets.

A tag is *present* in a genome set when at least ``min_present`` of the
genomes carry it, *absent* when at most ``max_absent`` of them do, and
*ambiguous* in between. A tag distinguishes one set from another when it
is present in the first and absent (neither present nor ambiguous) in the
second.

For a set of size ``n``:

    present_min = ceil(n * min_present)
    absent_max  = floor(n * max_absent)

    count >= present_min                -> present
    absent_max < count < present_min    -> ambiguous
    otherwise                           -> absent
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from typing import TYPE_CHECKING, NamedTuple

from taxontags.core.constants import DEFAULT_MAX_ABSENT, DEFAULT_MIN_PRESENT
from taxontags.core.exceptions import InvalidThresholdError
from taxontags.core.tags.counts import TagCounts

if TYPE_CHECKING:
    from taxontags.core.tags.directory import TagLookup

logger = logging.getLogger(__name__)

# Products are rounded before ceil/floor so float error (0.7 * 10 ==
# 7.000000000000001) cannot push an exact boundary to the next integer.
# Tools that apply ceil/floor to the raw product report a present
# threshold of 8 for ten genomes at 0.7; this gives 7.
_BOUNDARY_DIGITS = 9


class TagClassification(NamedTuple):
    """Present and ambiguous tags of a genome set; all other tags are absent."""

    present: frozenset[str]
    ambiguous: frozenset[str]


class DifferencingEngine:
    """
    Compares tag counts of genome sets under fixed tuning fractions.

    The engine holds only its two fractions and is safe to share between
    threads.

    Example:
        >>> engine = DifferencingEngine(max_absent=0.2, min_present=0.8)
        >>> engine.thresholds(10)
        (8, 2)
    """

    def __init__(
        self,
        max_absent: float = DEFAULT_MAX_ABSENT,
        min_present: float = DEFAULT_MIN_PRESENT,
    ) -> None:
        """
        Args:
            max_absent: Largest fraction of a set for a tag to count as
                absent, in [0, 1).
            min_present: Smallest fraction of a set for a tag to count as
                present, in (0, 1].

        Raises:
            InvalidThresholdError: If either fraction is out of range.
        """
        if not 0.0 <= max_absent < 1.0:
            raise InvalidThresholdError("max_absent", max_absent, "[0, 1)")
        if not 0.0 < min_present <= 1.0:
            raise InvalidThresholdError("min_present", min_present, "(0, 1]")
        self._max_absent = max_absent
        self._min_present = min_present

    @property
    def max_absent(self) -> float:
        return self._max_absent

    @property
    def min_present(self) -> float:
        return self._min_present

    def thresholds(self, size: int) -> tuple[int, int]:
        """
        Compute the count thresholds for a set of the given size.

        Returns:
            Tuple of (present_min, absent_max).
        """
        present_min = math.ceil(round(size * self._min_present, _BOUNDARY_DIGITS))
        absent_max = math.floor(round(size * self._max_absent, _BOUNDARY_DIGITS))
        return present_min, absent_max

    def classify(self, counts: TagCounts, size: int) -> TagClassification:
        """
        Split the counted tags of a set into present and ambiguous tags.

        Args:
            counts: Tag counts for the set.
            size: Number of genomes in the set.
        """
        present_min, absent_max = self.thresholds(size)
        present: set[str] = set()
        ambiguous: set[str] = set()
        for tag, count in counts.items():
            if count <= 0:
                continue
            if count >= present_min:
                present.add(tag)
            elif count > absent_max:
                ambiguous.add(tag)
        return TagClassification(frozenset(present), frozenset(ambiguous))

    @staticmethod
    def distinguish(
        left: TagClassification, right: TagClassification
    ) -> tuple[set[str], set[str]]:
        """
        Find the tags that distinguish each of two classified sets.

        Returns:
            Tuple of (left distinguishing tags, right distinguishing tags).
        """
        left_tags = set(left.present - right.present - right.ambiguous)
        right_tags = set(right.present - left.present - left.ambiguous)
        return left_tags, right_tags

    def distinguish_left(
        self,
        left_counts: TagCounts,
        left_size: int,
        right_counts: TagCounts,
        right_size: int,
    ) -> set[str]:
        """
        Find the tags that distinguish the left set from the right set.

        Only the left direction is computed, and only the left counts are
        scanned, so this is cheaper than two calls to ``classify``.

        Args:
            left_counts: Tag counts for the left set.
            left_size: Number of genomes in the left set.
            right_counts: Tag counts for the right set.
            right_size: Number of genomes in the right set.

        Returns:
            Tags present on the left and absent on the right.
        """
        left_present, _ = self.thresholds(left_size)
        right_present, right_absent = self.thresholds(right_size)
        retval: set[str] = set()
        for tag, count in left_counts.items():
            if count <= 0 or count < left_present:
                continue
            other = right_counts.get_count(tag)
            if other <= 0 or (other < right_present and other <= right_absent):
                retval.add(tag)
        return retval

    def distinguish_sets(
        self,
        lookup: TagLookup,
        left_ids: Iterable[str],
        right_ids: Iterable[str],
    ) -> tuple[set[str], set[str]]:
        """
        Compare two genome sets through a tag lookup.

        Args:
            lookup: Source of per-genome tag sets.
            left_ids: Genome IDs of the left set.
            right_ids: Genome IDs of the right set.

        Returns:
            Tuple of (left distinguishing tags, right distinguishing tags).
        """
        left_ids = set(left_ids)
        right_ids = set(right_ids)
        left = self.classify(TagCounts.from_genomes(lookup, left_ids), len(left_ids))
        right = self.classify(TagCounts.from_genomes(lookup, right_ids), len(right_ids))
        logger.debug(
            "Left set: %d present, %d ambiguous; right set: %d present, %d ambiguous",
            len(left.present),
            len(left.ambiguous),
            len(right.present),
            len(right.ambiguous),
        )
        return self.distinguish(left, right)

    def __repr__(self) -> str:
        return (
            f"DifferencingEngine(max_absent={self._max_absent}, "
            f"min_present={self._min_present})"
        )
