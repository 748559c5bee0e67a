"""
Feature tags: scanning, per-genome storage, counting and differencing.
"""

from taxontags.core.tags.counts import TagCounts
from taxontags.core.tags.directory import TagDirectory, TagLookup
from taxontags.core.tags.engine import DifferencingEngine, TagClassification
from taxontags.core.tags.scanners import PgfamScanner, RoleScanner, ScannerType, TagScanner

__all__ = [
    "DifferencingEngine",
    "PgfamScanner",
    "RoleScanner",
    "ScannerType",
    "TagClassification",
    "TagCounts",
    "TagDirectory",
    "TagLookup",
    "TagScanner",
]
