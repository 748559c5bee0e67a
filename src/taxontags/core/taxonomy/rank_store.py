"""
Genome membership lists for one taxonomic rank.

A rank store holds, for every taxonomic grouping at a single rank, the
grouping's ID, its name and the set of IDs of the genomes that belong to
it. It is persisted as a TSV file with one grouping per line:

    tax_id  tax_name  genomes
    561     Escherichia     511145.12,562.2283

Groupings are written in ascending ID order and genome IDs are sorted, so
the same content always produces the same file.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path

import polars as pl

from taxontags.core.constants import GENOME_LIST_SEPARATOR, RANK_MAP_COLUMNS
from taxontags.core.io_utils import read_tsv, write_tsv

logger = logging.getLogger(__name__)


@dataclass
class TaxonGroup:
    """A taxonomic grouping and the genomes in it.

    Attributes:
        tax_id: Taxonomic grouping ID.
        name: Grouping name, fixed at first observation.
        genomes: IDs of the member genomes.
    """

    tax_id: int
    name: str
    genomes: set[str] = field(default_factory=set)

    def add(self, genome_id: str) -> None:
        """Add a genome to this grouping."""
        self.genomes.add(genome_id)


class RankStore:
    """
    Taxonomic groupings for a single rank.

    Example:
        >>> store = RankStore()
        >>> store.add("511145.12", 561, "Escherichia")
        >>> store.members(561)
        {'511145.12'}
        >>> store.members(999) is None
        True
    """

    def __init__(self) -> None:
        self._groups: dict[int, TaxonGroup] = {}

    @classmethod
    def load(cls, path: Path) -> RankStore:
        """
        Load a rank store from a save file.

        A missing file yields an empty store.

        Args:
            path: Rank store TSV file.

        Returns:
            RankStore populated from the file.

        Raises:
            MalformedStoreError: If the file layout or a tax ID is invalid.
        """
        store = cls()
        if not path.exists():
            return store

        df = read_tsv(path, RANK_MAP_COLUMNS, int_columns=("tax_id",))
        for tax_id, name, genomes in df.iter_rows():
            group = TaxonGroup(tax_id, name or "")
            if genomes:
                group.genomes.update(
                    g for g in genomes.split(GENOME_LIST_SEPARATOR) if g
                )
            store._groups[tax_id] = group
        logger.debug("Loaded %d groupings from %s", len(store), path)
        return store

    def save(self, path: Path) -> None:
        """
        Write the complete store to a file, replacing any prior contents.

        Args:
            path: Output TSV file.
        """
        groups = [self._groups[k] for k in sorted(self._groups)]
        df = pl.DataFrame(
            {
                "tax_id": [g.tax_id for g in groups],
                "tax_name": [g.name for g in groups],
                "genomes": [
                    GENOME_LIST_SEPARATOR.join(sorted(g.genomes)) for g in groups
                ],
            },
            schema={"tax_id": pl.Int64, "tax_name": pl.Utf8, "genomes": pl.Utf8},
        )
        write_tsv(df, path)

    def add(self, genome_id: str, tax_id: int, name: str) -> None:
        """
        Add a genome to a grouping, creating the grouping if needed.

        The grouping name is taken from the first observation. A later
        observation with a different name keeps the original and logs a
        warning.

        Args:
            genome_id: ID of the genome to add.
            tax_id: Taxonomic grouping ID.
            name: Taxonomic grouping name.
        """
        group = self._groups.get(tax_id)
        if group is None:
            group = TaxonGroup(tax_id, name)
            self._groups[tax_id] = group
        elif group.name != name:
            logger.warning(
                "Grouping %d already named '%s'; ignoring name '%s' from genome %s",
                tax_id,
                group.name,
                name,
                genome_id,
            )
        group.add(genome_id)

    def get(self, tax_id: int) -> TaxonGroup | None:
        """Return the grouping with the given ID, or None if not present."""
        return self._groups.get(tax_id)

    def members(self, tax_id: int) -> set[str] | None:
        """
        Get the genome IDs of a grouping.

        Returns:
            The grouping's genome set, or None if the ID is not in this store.
        """
        group = self._groups.get(tax_id)
        return None if group is None else group.genomes

    def tax_ids(self) -> list[int]:
        """Return the grouping IDs in ascending order."""
        return sorted(self._groups)

    def __len__(self) -> int:
        return len(self._groups)

    def __contains__(self, tax_id: object) -> bool:
        return tax_id in self._groups

    def __iter__(self) -> Iterator[TaxonGroup]:
        return (self._groups[k] for k in sorted(self._groups))
