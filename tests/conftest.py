"""
Shared pytest fixtures for taxontags tests.

Provides reusable genome collections, GTO directories, and built taxonomy
and tag directories for unit and integration testing.
"""

from __future__ import annotations

import tempfile
from pathlib import Path

import pytest

from taxontags.core.tags.directory import TagDirectory
from taxontags.core.tags.scanners import PgfamScanner
from taxontags.core.taxonomy.directory import GroupingDirectory
from taxontags.models.genomes import Genome
from tests.factories import (
    E_COLI,
    ESCHERICHIA,
    S_BONGORI,
    S_ENTERICA,
    SALMONELLA,
    GenomeFactory,
    lineage_under_family,
    write_gto_dir,
)


@pytest.fixture
def temp_dir() -> Path:
    """Temporary directory that is cleaned up after tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def factory() -> GenomeFactory:
    """Genome factory with fresh sequential IDs."""
    return GenomeFactory()


# =============================================================================
# Two-Genus Collection
# =============================================================================
#
#   Enterobacteriaceae (543)
#   |-- Escherichia (561)
#   |   `-- E. coli (562): 5 genomes
#   `-- Salmonella (590)
#       |-- S. enterica (28901): 5 genomes
#       `-- S. bongori (54736): 4 genomes
#
# Every genome carries "common". E. coli genomes carry "ecoli_only", all
# Salmonella genomes carry "salmonella_core", and each Salmonella species
# carries its own "<species>_only" tag.


@pytest.fixture
def two_genus_genomes(factory: GenomeFactory) -> list[Genome]:
    """Fourteen genomes in three species under two sibling genera."""
    ecoli = factory.genomes(
        5, lineage_under_family(ESCHERICHIA, E_COLI), ["common", "ecoli_only"]
    )
    enterica = factory.genomes(
        5,
        lineage_under_family(SALMONELLA, S_ENTERICA),
        ["common", "salmonella_core", "enterica_only"],
    )
    bongori = factory.genomes(
        4,
        lineage_under_family(SALMONELLA, S_BONGORI),
        ["common", "salmonella_core", "bongori_only"],
    )
    return ecoli + enterica + bongori


@pytest.fixture
def gto_dir(temp_dir: Path, two_genus_genomes: list[Genome]) -> Path:
    """Directory of GTO files for the two-genus collection."""
    return write_gto_dir(temp_dir / "genomes", two_genus_genomes)


@pytest.fixture
def built_tax_dir(temp_dir: Path, two_genus_genomes: list[Genome]) -> Path:
    """Taxonomy directory ingested from the two-genus collection."""
    path = temp_dir / "TaxTree"
    GroupingDirectory(path).ingest(two_genus_genomes)
    return path


@pytest.fixture
def built_tag_dir(temp_dir: Path, two_genus_genomes: list[Genome]) -> Path:
    """PGFam tag directory for the two-genus collection."""
    path = temp_dir / "Tags"
    tags = TagDirectory(path)
    scanner = PgfamScanner()
    for genome in two_genus_genomes:
        tags.add_genome(genome, scanner)
    return path


# =============================================================================
# Role Definitions
# =============================================================================


@pytest.fixture
def role_file(temp_dir: Path) -> Path:
    """Role definition file in roles.in.subsystems layout."""
    path = temp_dir / "roles.in.subsystems"
    path.write_text(
        "ThioRedu\tabc123\tThioredoxin reductase (EC 1.8.1.9)\n"
        "AlkyHydrRedu\tdef456\tAlkyl hydroperoxide reductase protein F\n"
        "PhosSynt\t0a1b2c\tPhosphoribosylformylglycinamidine synthase\n"
        "common\t999999\tcommon\n"
        "ecoli_only\t999998\tecoli_only\n"
    )
    return path
