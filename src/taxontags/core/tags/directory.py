"""
Directory of per-genome tag sets.

Scanning genomes for tags is expensive, so each genome's tag set is
computed once and saved as ``<genome_id>.tags`` (one tag per line). Any
subset of the directory can then be counted for a comparison without
touching the genomes again.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from taxontags.core.constants import TAG_FILE_SUFFIX
from taxontags.core.exceptions import StoreLocationError
from taxontags.core.io_utils import ensure_directory
from taxontags.core.tags.counts import TagCounts

if TYPE_CHECKING:
    from taxontags.core.tags.scanners import TagScanner
    from taxontags.models.genomes import Genome

logger = logging.getLogger(__name__)


class TagLookup(Protocol):
    """Anything that can return the tag set of a genome."""

    def get_tags(self, genome_id: str) -> set[str]: ...


class TagDirectory:
    """
    On-disk store of genome tag sets.

    Unknown genomes have an empty tag set; asking for one is not an error.

    Example:
        >>> tag_dir = TagDirectory(Path("Tags"))
        >>> tag_dir.add_genome(genome, PgfamScanner())
        >>> tag_dir.get_tags(genome.genome_id)
        {'PGF_00000012', ...}
    """

    def __init__(self, directory: Path) -> None:
        """
        Open a tag directory, creating it if it does not exist.

        Raises:
            StoreLocationError: If the directory cannot be created.
        """
        self.directory = directory
        if ensure_directory(directory):
            logger.info("Creating directory %s for tag sets", directory)
            self._files: dict[str, Path] = {}
        else:
            self._files = {
                path.name[: -len(TAG_FILE_SUFFIX)]: path
                for path in directory.glob(f"*{TAG_FILE_SUFFIX}")
                if path.is_file()
            }
            logger.info("%d tag files found in %s", len(self._files), directory)

    def genome_file(self, genome_id: str) -> Path:
        """Path of the file that holds (or would hold) a genome's tags."""
        return self.directory / f"{genome_id}{TAG_FILE_SUFFIX}"

    def add_genome(self, genome: Genome, scanner: TagScanner) -> set[str]:
        """
        Scan a genome and save its tag set, replacing any earlier one.

        Returns:
            The tag set that was saved.
        """
        tags = scanner.tags_for(genome)
        self.save_tags(genome.genome_id, tags)
        return tags

    def save_tags(self, genome_id: str, tags: Iterable[str]) -> None:
        """Save a precomputed tag set for a genome."""
        path = self.genome_file(genome_id)
        lines = "".join(f"{tag}\n" for tag in sorted(tags))
        try:
            path.write_text(lines, encoding="utf-8")
        except OSError as e:
            raise StoreLocationError(self.directory, e.strerror or str(e)) from e
        self._files[genome_id] = path

    def get_tags(self, genome_id: str) -> set[str]:
        """Return a genome's tag set, or an empty set if it is not stored."""
        path = self._files.get(genome_id)
        if path is None:
            return set()
        with path.open(encoding="utf-8") as f:
            return {line.rstrip("\r\n") for line in f if line.strip()}

    def tag_counts(self, genome_ids: Iterable[str]) -> TagCounts:
        """Count the tags of a set of genomes."""
        return TagCounts.from_genomes(self, genome_ids)

    def is_in_directory(self, genome_id: str) -> bool:
        """Check whether a genome has a tag set here."""
        return genome_id in self._files

    def genome_ids(self) -> list[str]:
        """IDs of all genomes with tag sets, sorted."""
        return sorted(self._files)

    def __contains__(self, genome_id: object) -> bool:
        return genome_id in self._files

    def __len__(self) -> int:
        return len(self._files)
