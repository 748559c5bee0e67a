"""
Custom exceptions with actionable guidance.

Provides specific error types for the failure scenarios of taxonomy
directory building and tag comparison, each with a suggestion for
resolution.
"""

from __future__ import annotations

from pathlib import Path


class TaxonTagsError(Exception):
    """Base exception for taxontags errors."""

    def __init__(self, message: str, suggestion: str | None = None):
        self.message = message
        self.suggestion = suggestion
        super().__init__(self.full_message)

    @property
    def full_message(self) -> str:
        if self.suggestion:
            return f"{self.message}\n\nSuggestion: {self.suggestion}"
        return self.message


class ConfigurationError(TaxonTagsError):
    """Raised when configuration is invalid."""



class InvalidThresholdError(ConfigurationError):
    """Raised when a tuning fraction is out of its valid range."""

    def __init__(self, param_name: str, value: float, valid_range: str):
        super().__init__(
            message=f"{param_name} = {value} is out of valid range {valid_range}",
            suggestion=(
                f"Set {param_name} to a fraction in {valid_range}. "
                "The defaults are 0.2 for the absence fraction and 0.8 for "
                "the presence fraction."
            ),
        )
        self.param_name = param_name
        self.value = value


class StoreError(TaxonTagsError):
    """Base class for backing-store errors."""



class StoreLocationError(StoreError):
    """Raised when a store directory cannot be created, found or read."""

    def __init__(self, path: Path | str, reason: str):
        super().__init__(
            message=f"Cannot use directory '{path}': {reason}",
            suggestion=(
                "Check that the path is a directory (or can be created) and "
                "that you have read and write permission on it."
            ),
        )
        self.path = Path(path)


class MalformedStoreError(StoreError):
    """Raised when a persisted TSV file does not have the expected layout."""

    def __init__(self, path: Path | str, reason: str):
        super().__init__(
            message=f"Malformed store file '{path}': {reason}",
            suggestion=(
                "The file may have been edited by hand or truncated. Rebuild the "
                "directory with --clear to regenerate it from the genome source."
            ),
        )
        self.path = Path(path)
        self.reason = reason


class ComparisonError(TaxonTagsError):
    """Raised when the mass comparison fails for any sibling set."""

    def __init__(self, siblings: set[int] | frozenset[int], cause: BaseException):
        example = ", ".join(str(x) for x in sorted(siblings)[:5])
        super().__init__(
            message=(
                f"Tag comparison failed for sibling set [{example}]: "
                f"{type(cause).__name__}: {cause}"
            ),
            suggestion=(
                "No partial results were produced. Verify that the taxonomy and "
                "tag directories were built from the same genome source."
            ),
        )
        self.siblings = frozenset(siblings)


class GenomeSetError(TaxonTagsError):
    """Raised when a genome set for a comparison is unusable."""

    def __init__(self, genome_id: str, reason: str):
        super().__init__(
            message=f"Genome {genome_id} {reason}",
            suggestion=(
                "Check the genome list files: the two sets must not overlap and "
                "every genome must be available to the comparison."
            ),
        )
        self.genome_id = genome_id
