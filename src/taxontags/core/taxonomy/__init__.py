"""
Taxonomy directory: per-rank genome lists, the taxonomy tree and the rank index.
"""

from taxontags.core.taxonomy.directory import GroupingDirectory
from taxontags.core.taxonomy.rank_store import RankStore, TaxonGroup
from taxontags.core.taxonomy.ranks import rank_level
from taxontags.core.taxonomy.tree import ParentLink, TaxonomyTree

__all__ = [
    "GroupingDirectory",
    "ParentLink",
    "RankStore",
    "TaxonGroup",
    "TaxonomyTree",
    "rank_level",
]
