"""
Constants used throughout the taxontags package.

Centralizes file names, column layouts, and default tuning values
to keep the on-disk formats consistent between writers and readers.
"""

from __future__ import annotations

# =============================================================================
# Taxonomic Ranks
# =============================================================================

# Tracked ranks, coarsest first. The index of a rank is its level.
RANKS: tuple[str, ...] = (
    "superkingdom",
    "phylum",
    "class",
    "order",
    "family",
    "genus",
    "species",
)

# Level returned for rank names outside RANKS
RANK_NOT_APPLICABLE = -1

# Synthetic root: implicit parent of every group without a parent link
ROOT_GROUP = 1

# =============================================================================
# Taxonomy Directory Layout
# =============================================================================

TAXON_RANK_MAP_SUFFIX = ".tax"
TREE_FILE_NAME = "tree.links"
RANK_INDEX_NAME = "rank.index"

RANK_MAP_COLUMNS: tuple[str, ...] = ("tax_id", "tax_name", "genomes")
TREE_LINK_COLUMNS: tuple[str, ...] = ("child_id", "level", "parent_id")
RANK_INDEX_COLUMNS: tuple[str, ...] = ("tax_id", "rank")

# Separator for genome IDs inside a rank map cell
GENOME_LIST_SEPARATOR = ","

# =============================================================================
# Tag Directory Layout
# =============================================================================

TAG_FILE_SUFFIX = ".tags"
TAG_COUNT_COLUMNS: tuple[str, ...] = ("tag", "count")

# =============================================================================
# Comparison Defaults
# =============================================================================

# Maximum fraction of a genome set that may carry an absent tag
DEFAULT_MAX_ABSENT = 0.2

# Minimum fraction of a genome set that must carry a present tag
DEFAULT_MIN_PRESENT = 0.8

# Only protein-encoding features carry tags
PROTEIN_FEATURE_TYPE = "CDS"

# Placeholder for group names missing from the directory
UNKNOWN_NAME = "<unknown>"

# =============================================================================
# Report Layouts
# =============================================================================

TAXON_REPORT_COLUMNS: tuple[str, ...] = ("tax_id", "name", "tags")
SET_REPORT_COLUMNS: tuple[str, ...] = ("set", "tag", "name", "count1", "count2")
CHANGES_REPORT_COLUMNS: tuple[str, ...] = (
    "genome_id",
    "genome_name",
    "tax_id",
    "rank",
    "name",
    "parent_id",
    "parent_rank",
    "parent_name",
    "tag_name",
)
CHANGES_FILE_NAME = "changes.tbl"

# Separator for tag lists inside a report cell
TAG_LIST_SEPARATOR = ","

# Role definition file looked up in the working directory by default
DEFAULT_ROLE_FILE = "roles.in.subsystems"
