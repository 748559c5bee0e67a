"""
Core algorithms for taxonomy building and tag comparison.

This module contains the taxonomy directory with its rank stores and tree,
the tag directory and scanners, and the differencing engine with its
parallel mass-comparison driver.
"""

from taxontags.core.tags.compare import TaxonCompare
from taxontags.core.tags.engine import DifferencingEngine
from taxontags.core.taxonomy.directory import GroupingDirectory

__all__ = [
    "DifferencingEngine",
    "GroupingDirectory",
    "TaxonCompare",
]
