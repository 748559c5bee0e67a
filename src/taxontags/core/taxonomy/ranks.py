"""
Taxonomic rank levels.

Ranks are ordered coarsest to finest; a rank's level is its position in
``RANKS``. Ranks outside the tracked set (``no rank``, ``strain``,
``clade`` ...) have no level and are ignored by the taxonomy directory.
"""

from __future__ import annotations

from taxontags.core.constants import RANK_NOT_APPLICABLE, RANKS

_RANK_LEVELS: dict[str, int] = {rank: level for level, rank in enumerate(RANKS)}


def rank_level(rank: str) -> int:
    """
    Return the level of a taxonomic rank.

    Args:
        rank: Rank name, e.g. "genus".

    Returns:
        Level from 0 (superkingdom) to 6 (species), or -1 if the rank is
        not tracked.

    Example:
        >>> rank_level("genus")
        5
        >>> rank_level("strain")
        -1
    """
    return _RANK_LEVELS.get(rank, RANK_NOT_APPLICABLE)


def is_tracked_rank(rank: str) -> bool:
    """Check whether a rank participates in the taxonomy directory."""
    return rank in _RANK_LEVELS


def rank_sort_key(rank: str) -> tuple[int, str]:
    """
    Sort key placing the most specific rank first and unknown ranks last.

    Unknown ranks are ordered alphabetically among themselves.

    Example:
        >>> sorted(["phylum", "foo", "species"], key=rank_sort_key)
        ['species', 'phylum', 'foo']
    """
    level = rank_level(rank)
    if level == RANK_NOT_APPLICABLE:
        return (len(RANKS), rank)
    return (len(RANKS) - 1 - level, "")
