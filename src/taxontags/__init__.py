"""
Taxontags: distinguishing feature tags for taxonomic groupings of genomes.

Builds a rank-indexed taxonomy over a genome collection, reconciles
partial lineages into a single tree, and finds for every grouping the
feature tags that are common in it but rare among its siblings.
"""

__version__ = "0.1.0"
__author__ = "Taxontags Team"

from taxontags.core.tags.compare import TaxonCompare
from taxontags.core.tags.counts import TagCounts
from taxontags.core.tags.directory import TagDirectory
from taxontags.core.tags.engine import DifferencingEngine
from taxontags.core.taxonomy.directory import GroupingDirectory

__all__ = [
    "DifferencingEngine",
    "GroupingDirectory",
    "TagCounts",
    "TagDirectory",
    "TaxonCompare",
    "__version__",
]
