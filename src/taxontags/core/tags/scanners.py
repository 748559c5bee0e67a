"""
Tag scanners: strategies that turn a genome into a set of feature tags.

Only protein-coding (``CDS``) features are scanned. Two scanners exist:

- ``RoleScanner`` tags a feature with the IDs of the well-annotated roles
  in its functional assignment, using a role definition file
  (``roles.in.subsystems``: role ID, checksum and role name, tab-delimited,
  no header).
- ``PgfamScanner`` tags a feature with its global protein family ID.
"""

from __future__ import annotations

import logging
import re
from enum import Enum
from pathlib import Path
from typing import Protocol

import polars as pl

from taxontags.core.constants import PROTEIN_FEATURE_TYPE
from taxontags.core.exceptions import ConfigurationError, MalformedStoreError
from taxontags.models.genomes import Feature, Genome

logger = logging.getLogger(__name__)

ROLE_FILE_COLUMNS = ("role_id", "checksum", "role_name")

# Separators between the roles of a multifunctional assignment.
_ROLE_SPLITTER = re.compile(r"\s+/\s+|\s+@\s+|;\s+")
# EC and TC numbers are not part of a role's identity.
_EC_TC_PATTERN = re.compile(r"\s*\((?:EC|TC)\s+[^)]*\)", re.IGNORECASE)
_SPACES = re.compile(r"\s+")


class TagScanner(Protocol):
    """Computes the tag set of a genome."""

    def tags_for(self, genome: Genome) -> set[str]: ...

    def tag_name(self, tag: str) -> str: ...


def split_roles(function: str) -> list[str]:
    """
    Split a functional assignment into its role names.

    Comments (text after ``#`` or ``!``) are dropped first.

    Example:
        >>> split_roles("Thioredoxin reductase (EC 1.8.1.9) / Alkyl hydroperoxide reductase # frameshift")
        ['Thioredoxin reductase (EC 1.8.1.9)', 'Alkyl hydroperoxide reductase']
    """
    function = re.split(r"\s*[#!]", function, maxsplit=1)[0].strip()
    if not function:
        return []
    return [role.strip() for role in _ROLE_SPLITTER.split(function) if role.strip()]


def normalize_role(name: str) -> str:
    """Reduce a role name to its matching key: no EC/TC numbers, lower case."""
    name = _EC_TC_PATTERN.sub("", name)
    return _SPACES.sub(" ", name).strip().lower()


class RoleScanner:
    """
    Tags features with the IDs of well-annotated roles.

    Example:
        >>> scanner = RoleScanner(Path("roles.in.subsystems"))
        >>> scanner.tags_for(genome)
        {'ThioRedu', 'AlkyHydrRedu'}
    """

    def __init__(self, role_file: Path) -> None:
        """
        Load the role definitions.

        Raises:
            ConfigurationError: If the role file does not exist.
            MalformedStoreError: If the role file cannot be parsed.
        """
        if not role_file.is_file():
            raise ConfigurationError(
                f"Role definition file not found: {role_file}",
                suggestion="Pass --roles with the path of a roles.in.subsystems file.",
            )
        logger.info("Loading role definitions from %s", role_file)
        try:
            df = pl.read_csv(
                role_file,
                separator="\t",
                has_header=False,
                infer_schema_length=0,
                quote_char=None,
            )
        except pl.exceptions.NoDataError:
            df = pl.DataFrame(schema={c: pl.Utf8 for c in ROLE_FILE_COLUMNS})
        except pl.exceptions.PolarsError as e:
            raise MalformedStoreError(role_file, str(e).splitlines()[0]) from None
        if df.width != len(ROLE_FILE_COLUMNS):
            raise MalformedStoreError(
                role_file, f"expected {len(ROLE_FILE_COLUMNS)} columns, found {df.width}"
            )

        self._role_ids: dict[str, str] = {}
        self._role_names: dict[str, str] = {}
        for role_id, _, role_name in df.iter_rows():
            if not role_id or not role_name:
                continue
            self._role_ids.setdefault(normalize_role(role_name), role_id)
            self._role_names.setdefault(role_id, role_name)
        logger.info("%d role definitions found in %s", len(self._role_names), role_file)

    def feature_tags(self, feature: Feature) -> set[str]:
        """Role IDs for one feature."""
        if feature.type != PROTEIN_FEATURE_TYPE:
            return set()
        retval = set()
        for role in split_roles(feature.function):
            role_id = self._role_ids.get(normalize_role(role))
            if role_id is not None:
                retval.add(role_id)
        return retval

    def tags_for(self, genome: Genome) -> set[str]:
        retval: set[str] = set()
        for feature in genome.features:
            retval |= self.feature_tags(feature)
        return retval

    def tag_name(self, tag: str) -> str:
        """Role name for a role ID, or the ID itself if it is not defined."""
        return self._role_names.get(tag, tag)

    def __len__(self) -> int:
        return len(self._role_names)


class PgfamScanner:
    """Tags features with their global protein family ID."""

    def feature_tags(self, feature: Feature) -> set[str]:
        """PGFam ID for one feature, as a set of zero or one tags."""
        if feature.type != PROTEIN_FEATURE_TYPE or not feature.pgfam:
            return set()
        return {feature.pgfam}

    def tags_for(self, genome: Genome) -> set[str]:
        retval: set[str] = set()
        for feature in genome.features:
            retval |= self.feature_tags(feature)
        return retval

    def tag_name(self, tag: str) -> str:
        # A family's name is its ID.
        return tag


class ScannerType(str, Enum):
    """Kind of feature tag to scan for."""

    ROLE = "role"
    PGFAM = "pgfam"

    def create(self, role_file: Path | None = None) -> TagScanner:
        """
        Build a scanner of this type.

        Args:
            role_file: Role definition file; required for ``ROLE``.

        Raises:
            ConfigurationError: If a role scanner is requested without a
                role file.
        """
        if self is ScannerType.ROLE:
            if role_file is None:
                raise ConfigurationError(
                    "The role scanner needs a role definition file",
                    suggestion="Pass --roles, or use --type pgfam.",
                )
            return RoleScanner(role_file)
        return PgfamScanner()
