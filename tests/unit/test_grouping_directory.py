"""Unit tests for the taxonomy directory."""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from taxontags.core.constants import RANKS, ROOT_GROUP
from taxontags.core.exceptions import MalformedStoreError, StoreLocationError
from taxontags.core.genome_source import GtoDirectorySource
from taxontags.core.taxonomy.directory import GroupingDirectory
from taxontags.models.genomes import Genome
from tests.factories import (
    BACTERIA,
    CELLULAR_ROOT,
    E_COLI,
    ENTEROBACTERIACEAE,
    ESCHERICHIA,
    GenomeFactory,
)


class TestDirectoryCreation:
    """Tests for opening and creating a taxonomy directory."""

    def test_creates_stub_files(self, temp_dir: Path):
        """A new directory should get a rank file per rank and an index."""
        path = temp_dir / "a" / "TaxTree"
        GroupingDirectory(path)
        for rank in RANKS:
            assert (path / f"{rank}.tax").is_file()
        assert (path / "rank.index").is_file()

    def test_reopen_is_idempotent(self, temp_dir: Path):
        """Opening the same location twice should change nothing."""
        path = temp_dir / "TaxTree"
        GroupingDirectory(path)
        before = {p.name: p.read_text() for p in path.iterdir()}
        GroupingDirectory(path)
        after = {p.name: p.read_text() for p in path.iterdir()}
        assert before == after

    def test_file_in_the_way(self, temp_dir: Path):
        """A regular file at the directory path should be a location error."""
        path = temp_dir / "TaxTree"
        path.write_text("not a directory")
        with pytest.raises(StoreLocationError) as exc_info:
            GroupingDirectory(path)
        assert exc_info.value.path == path

    def test_corrupt_rank_index(self, temp_dir: Path):
        """A corrupt rank index should fail on open."""
        path = temp_dir / "TaxTree"
        GroupingDirectory(path)
        (path / "rank.index").write_text("tax_id\trank\nxyz\tgenus\n")
        with pytest.raises(MalformedStoreError):
            GroupingDirectory(path)

    @pytest.mark.parametrize(
        "row",
        ["562\n", "562\tspecies\textra\n", "562\t\n"],
        ids=["short", "long", "blank-rank"],
    )
    def test_rank_index_bad_row(self, temp_dir: Path, row: str):
        """A rank index row without exactly an ID and a rank should fail on open."""
        path = temp_dir / "TaxTree"
        GroupingDirectory(path)
        (path / "rank.index").write_text("tax_id\trank\n561\tgenus\n" + row)
        with pytest.raises(MalformedStoreError):
            GroupingDirectory(path)


class TestIngest:
    """Tests for ingesting genomes."""

    def test_membership_per_rank(self, temp_dir: Path, two_genus_genomes: list[Genome]):
        """Each genome should be listed at every tracked rank of its lineage."""
        directory = GroupingDirectory(temp_dir / "TaxTree")
        added = directory.ingest(two_genus_genomes)
        assert added == 14 * 7
        sets = directory.genome_sets([562, 590, 543, 2])
        assert len(sets[562]) == 5
        assert len(sets[590]) == 9
        assert len(sets[543]) == 14
        assert len(sets[2]) == 14

    def test_rank_index(self, built_tax_dir: Path):
        """The rank index should know the rank of every ingested grouping."""
        directory = GroupingDirectory(built_tax_dir)
        assert directory.rank_of(562) == "species"
        assert directory.rank_of(590) == "genus"
        assert directory.rank_of(2) == "superkingdom"
        assert directory.rank_of(999999) is None

    def test_untracked_ranks_skipped(self, built_tax_dir: Path):
        """Groupings at untracked ranks should appear nowhere."""
        directory = GroupingDirectory(built_tax_dir)
        assert directory.rank_of(CELLULAR_ROOT[1]) is None
        assert CELLULAR_ROOT[1] not in directory.tax_tree()
        assert directory.tree().get_parent(BACTERIA[1]) is None

    def test_tree_structure(self, built_tax_dir: Path):
        """The tree should link every rank to the next coarser one."""
        view = GroupingDirectory(built_tax_dir).tax_tree()
        assert view[590] == {28901, 54736}
        assert view[543] == {561, 590}
        assert view[561] == {562}
        assert view[ROOT_GROUP] == {2}

    def test_skipped_rank_lineage(self, temp_dir: Path, factory: GenomeFactory):
        """A lineage missing its genus should be repaired by a later genome."""
        directory = GroupingDirectory(temp_dir / "TaxTree")
        partial = factory.genome([BACTERIA, ENTEROBACTERIACEAE, E_COLI])
        full = factory.genome([BACTERIA, ENTEROBACTERIACEAE, ESCHERICHIA, E_COLI])
        directory.ingest([partial])
        assert directory.tree().get_parent(562) == 543
        directory.ingest([full])
        assert directory.tree().get_parent(562) == 561

    def test_incremental_ingest(self, temp_dir: Path, factory: GenomeFactory):
        """A second ingest should add to the existing lists."""
        lineage = [BACTERIA, ENTEROBACTERIACEAE, ESCHERICHIA, E_COLI]
        directory = GroupingDirectory(temp_dir / "TaxTree")
        directory.ingest(factory.genomes(2, lineage))
        directory.ingest(factory.genomes(3, lineage))
        assert len(directory.genome_sets([562])[562]) == 5
        reopened = GroupingDirectory(temp_dir / "TaxTree")
        assert len(reopened.genome_sets([562])[562]) == 5

    def test_ingest_from_gto_source(self, temp_dir: Path, gto_dir: Path):
        """A GTO directory should ingest like the genome models."""
        directory = GroupingDirectory(temp_dir / "FromGto")
        directory.ingest(GtoDirectorySource(gto_dir))
        assert len(directory.genome_sets([590])[590]) == 9

    def test_failed_save_keeps_previous_files(
        self, temp_dir: Path, factory: GenomeFactory
    ):
        """A failure while saving should leave the old files in place."""
        lineage = [BACTERIA, ENTEROBACTERIACEAE, ESCHERICHIA, E_COLI]
        path = temp_dir / "TaxTree"
        directory = GroupingDirectory(path)
        directory.ingest(factory.genomes(2, lineage))
        before = {p.name: p.read_text() for p in path.iterdir() if p.is_file()}

        with patch(
            "taxontags.core.taxonomy.directory.TaxonomyTree.save",
            side_effect=OSError(28, "No space left on device"),
        ):
            with pytest.raises(StoreLocationError, match="No space left"):
                directory.ingest(factory.genomes(3, lineage))

        after = {p.name: p.read_text() for p in path.iterdir() if p.is_file()}
        assert after == before
        assert not [p for p in path.iterdir() if p.name.startswith(".staging-")]

    def test_tree_file_moved_last(self, temp_dir: Path, factory: GenomeFactory):
        """The rank files are in place before the rank index and tree replace theirs."""
        moved = []

        def record(src, dst):
            moved.append(Path(dst).name)
            os.rename(src, dst)

        directory = GroupingDirectory(temp_dir / "TaxTree")
        with patch("taxontags.core.io_utils.os.replace", side_effect=record):
            directory.ingest(factory.genomes(2, [BACTERIA, ENTEROBACTERIACEAE, ESCHERICHIA]))
        assert moved[-2:] == ["rank.index", "tree.links"]
        assert len(moved) == len(RANKS) + 2


class TestLookups:
    """Tests for batch lookups."""

    def test_unknown_ids_give_empty_sets(self, built_tax_dir: Path):
        """Unknown IDs should map to empty sets, not raise."""
        sets = GroupingDirectory(built_tax_dir).genome_sets([562, 424242])
        assert sets[424242] == set()
        assert len(sets[562]) == 5

    def test_name_map(self, built_tax_dir: Path):
        """Names should be returned for known IDs only."""
        names = GroupingDirectory(built_tax_dir).name_map([561, 590, 424242])
        assert names == {561: "Escherichia", 590: "Salmonella"}

    def test_rank_store_cached(self, built_tax_dir: Path):
        """Each rank store should be loaded once per directory object."""
        directory = GroupingDirectory(built_tax_dir)
        assert directory.rank_store("genus") is directory.rank_store("genus")
        assert directory.rank_store("strain") is None

    def test_all_rank_stores(self, built_tax_dir: Path):
        """Every tracked rank should have a store, coarsest first."""
        stores = GroupingDirectory(built_tax_dir).all_rank_stores()
        assert list(stores) == list(RANKS)
        assert stores["species"].tax_ids() == [562, 28901, 54736]
