"""
Taxonomy tree built from partial lineages.

Lineages may skip intermediate ranks (a species whose genus is missing
links straight to its family), so the first parent seen for a grouping is
not necessarily its closest one. The tree keeps a flat map from each child
grouping to the most specific parent observed so far, and derives the
parent-to-children view on demand.

The link file has one line per child:

    child_id  level  parent_id
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import NamedTuple

import polars as pl

from taxontags.core.constants import ROOT_GROUP, TREE_LINK_COLUMNS
from taxontags.core.io_utils import read_tsv, write_tsv

logger = logging.getLogger(__name__)


class ParentLink(NamedTuple):
    """Best known parent of a grouping and the parent's rank level."""

    parent_id: int
    level: int


class TaxonomyTree:
    """
    Child-to-parent links with a most-specific-parent-wins merge rule.

    Example:
        >>> tree = TaxonomyTree()
        >>> tree.add_link(9, 99, 1)   # species seen under a phylum first
        >>> tree.add_link(9, 7, 5)    # ... then under its genus
        >>> tree.get_parent(9)
        7
    """

    def __init__(self) -> None:
        self._links: dict[int, ParentLink] = {}

    @classmethod
    def load(cls, path: Path) -> TaxonomyTree:
        """
        Load a tree from a link file; a missing file yields an empty tree.

        Raises:
            MalformedStoreError: If the file layout or an ID is invalid.
        """
        tree = cls()
        if not path.exists():
            return tree
        df = read_tsv(path, TREE_LINK_COLUMNS, int_columns=TREE_LINK_COLUMNS)
        for child_id, level, parent_id in df.iter_rows():
            tree._links[child_id] = ParentLink(parent_id, level)
        logger.info("%d links loaded from taxonomic tree file %s", len(tree), path)
        return tree

    def save(self, path: Path) -> None:
        """Write all links to a file in ascending child ID order."""
        children = sorted(self._links)
        df = pl.DataFrame(
            {
                "child_id": children,
                "level": [self._links[c].level for c in children],
                "parent_id": [self._links[c].parent_id for c in children],
            },
            schema={"child_id": pl.Int64, "level": pl.Int64, "parent_id": pl.Int64},
        )
        write_tsv(df, path)

    def add_link(self, child_id: int, parent_id: int, level: int) -> None:
        """
        Record a proposed parent for a grouping.

        The proposal replaces the current link only if its rank level is
        strictly higher (more specific). At an equal level the existing
        link is kept.

        Args:
            child_id: Child grouping ID.
            parent_id: Proposed parent grouping ID.
            level: Rank level of the proposed parent.
        """
        current = self._links.get(child_id)
        if current is None or level > current.level:
            self._links[child_id] = ParentLink(parent_id, level)
        elif level == current.level and parent_id != current.parent_id:
            logger.warning(
                "Conflicting parents %d and %d at level %d for grouping %d; keeping %d",
                current.parent_id,
                parent_id,
                level,
                child_id,
                current.parent_id,
            )

    def get_parent(self, child_id: int) -> int | None:
        """Return the parent of a grouping, or None if it has no link."""
        link = self._links.get(child_id)
        return None if link is None else link.parent_id

    def get_link(self, child_id: int) -> ParentLink | None:
        """Return the full parent link of a grouping, or None."""
        return self._links.get(child_id)

    def materialize(self) -> dict[int, set[int]]:
        """
        Build the parent-to-children view of the tree.

        Groupings that appear only as parents are placed under the
        synthetic root ``ROOT_GROUP``. The view is rebuilt on every call.

        Returns:
            Mapping of parent ID to the set of its direct children. Always
            contains ``ROOT_GROUP``, mapped to an empty set for an empty tree.
        """
        top_level = {link.parent_id for link in self._links.values()}
        retval: dict[int, set[int]] = {}
        for child_id, link in self._links.items():
            top_level.discard(child_id)
            retval.setdefault(link.parent_id, set()).add(child_id)
        retval[ROOT_GROUP] = top_level
        logger.debug(
            "Taxonomic tree built with %d parents and %d children",
            len(retval),
            len(self._links),
        )
        return retval

    def is_empty(self) -> bool:
        """Check whether the tree has no links."""
        return not self._links

    def __len__(self) -> int:
        return len(self._links)

    def __contains__(self, child_id: object) -> bool:
        return child_id in self._links
