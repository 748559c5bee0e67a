"""
Data models for genomes, their lineages and their features.

A genome carries its lineage root-to-leaf, as stored in GTO files;
``Genome.taxonomy()`` walks it the other way, from the most specific
grouping to the least specific, which is the order the taxonomy directory
consumes.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any, Self

from pydantic import BaseModel, Field


class TaxItem(BaseModel):
    """One ancestor in a genome's lineage.

    Attributes:
        tax_id: Taxonomic grouping ID.
        name: Grouping name.
        rank: Rank name (may be an untracked rank such as "no rank").
    """

    tax_id: int = Field(description="Taxonomic grouping ID")
    name: str = Field(description="Taxonomic grouping name")
    rank: str = Field(description="Rank name")

    model_config = {"frozen": True}


class Feature(BaseModel):
    """A genome feature with its annotation.

    Attributes:
        id: Feature ID (e.g. fig|511145.12.peg.1).
        type: Feature type; only "CDS" features are scanned for tags.
        function: Functional assignment, possibly multi-role.
        pgfam: Global protein family ID, if assigned.
    """

    id: str = Field(description="Feature ID")
    type: str = Field(default="CDS", description="Feature type")
    function: str = Field(default="", description="Functional assignment")
    pgfam: str | None = Field(default=None, description="Global protein family ID")

    model_config = {"frozen": True}

    @classmethod
    def from_gto(cls, data: dict[str, Any]) -> Self:
        """Build a feature from its GTO JSON object.

        The PGFam comes from the ``family_assignments`` entry whose first
        element is "PGFAM".
        """
        pgfam = None
        for assignment in data.get("family_assignments") or []:
            if len(assignment) >= 2 and assignment[0] == "PGFAM":
                pgfam = assignment[1]
                break
        return cls(
            id=data["id"],
            type=data.get("type", "CDS"),
            function=data.get("function") or "",
            pgfam=pgfam,
        )


class Genome(BaseModel):
    """A classified genome.

    Attributes:
        genome_id: Stable genome ID.
        name: Scientific name.
        lineage_items: Lineage from root to leaf.
        features: Annotated features.
    """

    genome_id: str = Field(description="Genome ID")
    name: str = Field(default="", description="Scientific name")
    lineage_items: list[TaxItem] = Field(
        default_factory=list,
        description="Lineage from the root to the genome's own grouping",
    )
    features: list[Feature] = Field(default_factory=list)

    model_config = {"frozen": True}

    @classmethod
    def from_gto(cls, data: dict[str, Any]) -> Self:
        """Build a genome from a parsed GTO JSON document.

        ``ncbi_lineage`` holds ``[name, tax_id, rank]`` triples, root first.
        """
        lineage = [
            TaxItem(tax_id=int(tax_id), name=name, rank=rank)
            for name, tax_id, rank in data.get("ncbi_lineage") or []
        ]
        features = [Feature.from_gto(f) for f in data.get("features") or []]
        return cls(
            genome_id=data["id"],
            name=data.get("scientific_name", ""),
            lineage_items=lineage,
            features=features,
        )

    def taxonomy(self) -> Iterator[TaxItem]:
        """Iterate over the lineage from the most specific grouping upward."""
        return reversed(self.lineage_items)

    @property
    def lineage(self) -> list[int]:
        """Tax IDs of the lineage, root first."""
        return [item.tax_id for item in self.lineage_items]

    def __str__(self) -> str:
        return f"{self.genome_id} ({self.name})" if self.name else self.genome_id
