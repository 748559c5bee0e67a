"""
Directory of taxonomic genome lists.

The directory holds one rank store file per tracked rank (``<rank>.tax``),
the taxonomy tree link file (``tree.links``) and an index giving the rank
of every taxonomic grouping (``rank.index``):

    taxdir/
        superkingdom.tax ... species.tax
        tree.links
        rank.index

The directory is filled by ``GroupingDirectory.ingest`` from a genome
source and is read-only for everything else. Re-ingesting a genome whose
lineage has changed corrupts the derived structures; clear the directory
and rebuild in that case.
"""

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from collections.abc import Iterable
from pathlib import Path

import polars as pl

from taxontags.core.constants import (
    RANK_INDEX_COLUMNS,
    RANK_INDEX_NAME,
    RANKS,
    TAXON_RANK_MAP_SUFFIX,
    TREE_FILE_NAME,
)
from taxontags.core.exceptions import StoreLocationError
from taxontags.core.genome_source import GenomeSource
from taxontags.core.io_utils import ensure_directory, read_tsv, staged_directory, write_tsv
from taxontags.core.taxonomy.rank_store import RankStore
from taxontags.core.taxonomy.ranks import RANK_NOT_APPLICABLE, rank_level
from taxontags.core.taxonomy.tree import TaxonomyTree

logger = logging.getLogger(__name__)


def rank_file_name(rank: str) -> str:
    """File name of the rank store for a rank."""
    return f"{rank}{TAXON_RANK_MAP_SUFFIX}"


class GroupingDirectory:
    """
    Rank stores, taxonomy tree and rank index for a genome collection.

    Constructing the object creates the directory and empty stub files if
    they are missing, so loading the same location twice is idempotent.

    Example:
        >>> tax_dir = GroupingDirectory(Path("TaxTree"))
        >>> tax_dir.ingest(GtoDirectorySource(Path("genomes")))
        >>> tree = tax_dir.tax_tree()
        >>> genome_sets = tax_dir.genome_sets(tree[1])
    """

    def __init__(self, directory: Path) -> None:
        """
        Open or create a taxonomy directory.

        Args:
            directory: Directory path; created with its parents if absent.

        Raises:
            StoreLocationError: If the directory cannot be created, or its
                files cannot be written or read.
            MalformedStoreError: If the rank index file is corrupt.
        """
        self.directory = directory
        if ensure_directory(directory):
            logger.info("Creating taxon list directory %s", directory)
        else:
            logger.info("Using taxon list directory %s", directory)

        self.tree_file = directory / TREE_FILE_NAME
        self.rank_index_file = directory / RANK_INDEX_NAME
        self.rank_files: dict[str, Path] = {
            rank: directory / rank_file_name(rank) for rank in RANKS
        }

        try:
            for rank, rank_file in self.rank_files.items():
                if not rank_file.is_file():
                    logger.info("Creating new rank file %s", rank_file)
                    RankStore().save(rank_file)
            if not self.rank_index_file.is_file():
                logger.info("Creating rank index file %s", self.rank_index_file)
                self._write_rank_index({}, self.rank_index_file)
                self._rank_index: dict[int, str] = {}
            else:
                self._rank_index = self._read_rank_index(self.rank_index_file)
                logger.info(
                    "%d taxonomic groupings found in rank index", len(self._rank_index)
                )
        except OSError as e:
            raise StoreLocationError(directory, e.strerror or str(e)) from e

        self._store_cache: dict[str, RankStore] = {}
        self._cache_lock = threading.Lock()

    # -------------------------------------------------------------------------
    # Rank index
    # -------------------------------------------------------------------------

    @staticmethod
    def _read_rank_index(path: Path) -> dict[int, str]:
        df = read_tsv(
            path, RANK_INDEX_COLUMNS, int_columns=("tax_id",), required=("rank",)
        )
        return dict(df.iter_rows())

    @staticmethod
    def _write_rank_index(rank_index: dict[int, str], path: Path) -> None:
        tax_ids = sorted(rank_index)
        df = pl.DataFrame(
            {"tax_id": tax_ids, "rank": [rank_index[t] for t in tax_ids]},
            schema={"tax_id": pl.Int64, "rank": pl.Utf8},
        )
        write_tsv(df, path)

    def rank_of(self, tax_id: int) -> str | None:
        """Return the rank of a grouping, or None if it is not in the directory."""
        return self._rank_index.get(tax_id)

    @property
    def rank_index(self) -> dict[int, str]:
        """Copy of the grouping-to-rank index."""
        return dict(self._rank_index)

    # -------------------------------------------------------------------------
    # Rank stores and tree
    # -------------------------------------------------------------------------

    def rank_store(self, rank: str) -> RankStore | None:
        """
        Get the rank store for a rank.

        Stores are loaded once and cached, so concurrent readers share a
        single copy.

        Returns:
            The store, or None if the rank is not tracked.
        """
        if rank_level(rank) == RANK_NOT_APPLICABLE:
            return None
        with self._cache_lock:
            store = self._store_cache.get(rank)
            if store is None:
                store = RankStore.load(self.rank_files[rank])
                self._store_cache[rank] = store
        return store

    def all_rank_stores(self) -> dict[str, RankStore]:
        """
        Load every rank store. Memory-intensive for large collections.

        Returns:
            Mapping of rank name to store, coarsest rank first.
        """
        retval: dict[str, RankStore] = {}
        for rank in RANKS:
            store = self.rank_store(rank)
            if store is not None:
                retval[rank] = store
        return retval

    def tree(self) -> TaxonomyTree:
        """Load the taxonomy tree object."""
        return TaxonomyTree.load(self.tree_file)

    def tax_tree(self) -> dict[int, set[int]]:
        """Return the materialized parent-to-children tree."""
        return self.tree().materialize()

    # -------------------------------------------------------------------------
    # Membership lookups
    # -------------------------------------------------------------------------

    def genome_sets(self, tax_ids: Iterable[int]) -> dict[int, set[str]]:
        """
        Get the genome sets for a batch of groupings.

        Each ID's rank is looked up once in the rank index and each rank
        store needed is loaded once for the whole batch. Unknown IDs map
        to an empty set.

        Args:
            tax_ids: Grouping IDs of interest.

        Returns:
            Mapping of each requested ID to its genome ID set.
        """
        by_rank: dict[str | None, list[int]] = defaultdict(list)
        for tax_id in tax_ids:
            by_rank[self._rank_index.get(tax_id)].append(tax_id)

        retval: dict[int, set[str]] = {}
        for rank, ids in by_rank.items():
            store = None if rank is None else self.rank_store(rank)
            for tax_id in ids:
                members = None if store is None else store.members(tax_id)
                retval[tax_id] = set(members) if members else set()
        return retval

    def name_map(self, tax_ids: Iterable[int]) -> dict[int, str]:
        """
        Get the names of a batch of groupings.

        Returns:
            Mapping of grouping ID to name, for the IDs found in the directory.
        """
        by_rank: dict[str, list[int]] = defaultdict(list)
        for tax_id in tax_ids:
            rank = self._rank_index.get(tax_id)
            if rank is not None:
                by_rank[rank].append(tax_id)

        retval: dict[int, str] = {}
        for rank, ids in by_rank.items():
            store = self.rank_store(rank)
            if store is None:
                continue
            for tax_id in ids:
                group = store.get(tax_id)
                if group is not None:
                    retval[tax_id] = group.name
        return retval

    # -------------------------------------------------------------------------
    # Ingestion
    # -------------------------------------------------------------------------

    def ingest(self, genomes: GenomeSource) -> int:
        """
        Add the genomes from a source to the rank stores and the tree.

        This loads every rank store and the tree into memory at once,
        walks each genome's lineage from leaf to root, and then saves all
        files together. Ranks outside the tracked set are skipped.

        Args:
            genomes: Iterable of genomes exposing ``genome_id`` and
                ``taxonomy()``.

        Returns:
            Number of genome memberships added across all ranks.
        """
        logger.info("Loading taxonomy tree from %s", self.tree_file)
        tax_tree = TaxonomyTree.load(self.tree_file)
        logger.info("Loading rank maps from %s", self.directory)
        rank_stores = [RankStore.load(self.rank_files[rank]) for rank in RANKS]
        rank_index = dict(self._rank_index)

        n_genomes = len(genomes) if hasattr(genomes, "__len__") else None
        g_count = 0
        taxon_count = 0
        for genome in genomes:
            g_count += 1
            if n_genomes is None:
                logger.info("Scanning genome %d: %s", g_count, genome)
            else:
                logger.info("Scanning genome %d of %d: %s", g_count, n_genomes, genome)
            last_child: int | None = None
            for item in genome.taxonomy():
                level = rank_level(item.rank)
                if level == RANK_NOT_APPLICABLE:
                    continue
                rank_stores[level].add(genome.genome_id, item.tax_id, item.name)
                taxon_count += 1
                if last_child is not None:
                    tax_tree.add_link(last_child, item.tax_id, level)
                last_child = item.tax_id
                rank_index[item.tax_id] = item.rank

        logger.info(
            "%d genome IDs added to taxonomy rank maps for %d genomes",
            taxon_count,
            g_count,
        )
        logger.info("Saving data to %s", self.directory)
        try:
            last = (RANK_INDEX_NAME, TREE_FILE_NAME)
            with staged_directory(self.directory, last=last) as stage:
                tax_tree.save(stage / TREE_FILE_NAME)
                for rank, store in zip(RANKS, rank_stores, strict=True):
                    store.save(stage / rank_file_name(rank))
                self._write_rank_index(rank_index, stage / RANK_INDEX_NAME)
        except OSError as e:
            raise StoreLocationError(self.directory, e.strerror or str(e)) from e

        self._rank_index = rank_index
        with self._cache_lock:
            self._store_cache = dict(zip(RANKS, rank_stores, strict=True))
        return taxon_count
