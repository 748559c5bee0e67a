"""
Pydantic data models for taxontags.

Provides type-safe models for genomes and their lineages. The comparison
configuration lives in ``taxontags.models.config``.
"""

from taxontags.models.genomes import Feature, Genome, TaxItem

__all__ = [
    "Feature",
    "Genome",
    "TaxItem",
]
