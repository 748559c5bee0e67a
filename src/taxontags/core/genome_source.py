"""
Genome sources for taxonomy and tag building.

A genome source is any iterable of genomes. ``GtoDirectorySource`` reads
a directory of GTO JSON files lazily, one genome at a time, so a large
collection never has to fit in memory.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Protocol

from taxontags.core.exceptions import MalformedStoreError, StoreLocationError
from taxontags.models.genomes import Genome, TaxItem

logger = logging.getLogger(__name__)

GTO_SUFFIX = ".gto"


class GenomeLike(Protocol):
    """What the taxonomy directory needs from a genome."""

    genome_id: str

    def taxonomy(self) -> Iterator[TaxItem]: ...


GenomeSource = Iterable[GenomeLike]


class GtoDirectorySource:
    """
    Genome source backed by a directory of ``*.gto`` files.

    Genomes are yielded in file-name order. The genome ID comes from the
    ``id`` field inside each file, not from the file name.

    Example:
        >>> source = GtoDirectorySource(Path("genomes/"))
        >>> for genome in source:
        ...     print(genome.genome_id, genome.name)
    """

    def __init__(self, directory: Path) -> None:
        if not directory.is_dir():
            raise StoreLocationError(directory, "genome directory not found")
        self.directory = directory
        self._files = sorted(directory.glob(f"*{GTO_SUFFIX}"))
        logger.info("%d GTO files found in %s", len(self._files), directory)

    def __len__(self) -> int:
        return len(self._files)

    def __iter__(self) -> Iterator[Genome]:
        for path in self._files:
            yield self.load(path)

    @property
    def files(self) -> list[Path]:
        """GTO files in iteration order."""
        return list(self._files)

    @staticmethod
    def load(path: Path) -> Genome:
        """
        Parse one GTO file.

        Raises:
            MalformedStoreError: If the file is not valid JSON or lacks the
                genome fields.
        """
        try:
            with path.open(encoding="utf-8") as f:
                data = json.load(f)
            return Genome.from_gto(data)
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            raise MalformedStoreError(path, f"invalid GTO document ({e})") from None
