"""
CLI commands for taxontags.

Provides the command-line interface for building taxonomy and tag
directories and running the comparisons.
"""

__all__ = ["analyze", "main", "tags", "taxonomy"]
