"""
Test data factories for taxonomy and tag tests.

Provides deterministic genome generation, as pydantic models or as GTO
files on disk, with controlled lineages and feature tags.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Sequence
from pathlib import Path

from taxontags.models.genomes import Feature, Genome, TaxItem

# Lineage template: (name, tax_id, rank), root first
Lineage = Sequence[tuple[str, int, str]]

BACTERIA: tuple[str, int, str] = ("Bacteria", 2, "superkingdom")
PROTEOBACTERIA: tuple[str, int, str] = ("Pseudomonadota", 1224, "phylum")
GAMMA: tuple[str, int, str] = ("Gammaproteobacteria", 1236, "class")
ENTEROBACTERALES: tuple[str, int, str] = ("Enterobacterales", 91347, "order")
ENTEROBACTERIACEAE: tuple[str, int, str] = ("Enterobacteriaceae", 543, "family")
ESCHERICHIA: tuple[str, int, str] = ("Escherichia", 561, "genus")
E_COLI: tuple[str, int, str] = ("Escherichia coli", 562, "species")
SALMONELLA: tuple[str, int, str] = ("Salmonella", 590, "genus")
S_ENTERICA: tuple[str, int, str] = ("Salmonella enterica", 28901, "species")
S_BONGORI: tuple[str, int, str] = ("Salmonella bongori", 54736, "species")

CELLULAR_ROOT: tuple[str, int, str] = ("cellular organisms", 131567, "no rank")

ECOLI_LINEAGE: Lineage = (
    CELLULAR_ROOT,
    BACTERIA,
    PROTEOBACTERIA,
    GAMMA,
    ENTEROBACTERALES,
    ENTEROBACTERIACEAE,
    ESCHERICHIA,
    E_COLI,
)


def lineage_under_family(*tail: tuple[str, int, str]) -> list[tuple[str, int, str]]:
    """Full lineage down to Enterobacteriaceae followed by the given groupings."""
    return [*ECOLI_LINEAGE[:6], *tail]


class GenomeFactory:
    """
    Factory for genomes with sequential IDs.

    Each genome gets one CDS feature per tag, carrying the tag both as its
    PGFam and as its functional assignment, so either scanner sees the
    same tags.
    """

    def __init__(self, taxon: int = 562):
        self._taxon = taxon
        self._next = 1

    def next_id(self) -> str:
        genome_id = f"{self._taxon}.{self._next}"
        self._next += 1
        return genome_id

    def genome(
        self,
        lineage: Lineage,
        tags: Iterable[str] = (),
        genome_id: str | None = None,
        name: str | None = None,
    ) -> Genome:
        genome_id = genome_id or self.next_id()
        features = [
            Feature(id=f"fig|{genome_id}.peg.{i}", function=tag, pgfam=tag)
            for i, tag in enumerate(sorted(tags), start=1)
        ]
        return Genome(
            genome_id=genome_id,
            name=name or f"{lineage[-1][0]} strain {genome_id}",
            lineage_items=[
                TaxItem(tax_id=tax_id, name=tax_name, rank=rank)
                for tax_name, tax_id, rank in lineage
            ],
            features=features,
        )

    def genomes(self, count: int, lineage: Lineage, tags: Iterable[str] = ()) -> list[Genome]:
        tags = list(tags)
        return [self.genome(lineage, tags) for _ in range(count)]


def gto_document(genome: Genome) -> dict:
    """Render a genome as a GTO JSON document."""
    return {
        "id": genome.genome_id,
        "scientific_name": genome.name,
        "ncbi_lineage": [
            [item.name, item.tax_id, item.rank] for item in genome.lineage_items
        ],
        "features": [
            {
                "id": f.id,
                "type": f.type,
                "function": f.function,
                "family_assignments": [["PGFAM", f.pgfam, ""]] if f.pgfam else [],
            }
            for f in genome.features
        ],
    }


def write_gto_dir(directory: Path, genomes: Iterable[Genome]) -> Path:
    """Write genomes as ``<genome_id>.gto`` files and return the directory."""
    directory.mkdir(parents=True, exist_ok=True)
    for genome in genomes:
        path = directory / f"{genome.genome_id}.gto"
        path.write_text(json.dumps(gto_document(genome)))
    return directory


def write_id_list(path: Path, genome_ids: Iterable[str]) -> Path:
    """Write a headed, tab-delimited genome ID list."""
    lines = ["genome_id\tgenome_name"]
    lines.extend(f"{g}\tgenome {g}" for g in genome_ids)
    path.write_text("\n".join(lines) + "\n")
    return path
