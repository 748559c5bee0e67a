"""Unit tests for the tag scanners."""

from __future__ import annotations

from pathlib import Path

import pytest

from taxontags.core.exceptions import ConfigurationError, MalformedStoreError
from taxontags.core.tags.scanners import (
    PgfamScanner,
    RoleScanner,
    ScannerType,
    normalize_role,
    split_roles,
)
from taxontags.models.genomes import Feature, Genome


def make_genome(*features: Feature) -> Genome:
    return Genome(genome_id="562.1", name="Escherichia coli", features=list(features))


class TestRoleParsing:
    """Tests for splitting and normalizing functional assignments."""

    @pytest.mark.parametrize(
        "function,expected",
        [
            ("Thioredoxin reductase", ["Thioredoxin reductase"]),
            ("Role A / Role B", ["Role A", "Role B"]),
            ("Role A @ Role B", ["Role A", "Role B"]),
            ("Role A; Role B", ["Role A", "Role B"]),
            ("Role A # frameshift", ["Role A"]),
            ("Role A ! comment / Role B", ["Role A"]),
            ("", []),
            ("# only a comment", []),
        ],
    )
    def test_split_roles(self, function, expected):
        assert split_roles(function) == expected

    def test_slash_inside_word_not_split(self):
        """Only spaced separators split roles."""
        assert split_roles("NAD/NADP transhydrogenase") == ["NAD/NADP transhydrogenase"]

    def test_normalize_drops_ec_and_case(self):
        assert normalize_role("Thioredoxin  reductase (EC 1.8.1.9)") == (
            "thioredoxin reductase"
        )
        assert normalize_role("Sodium transporter (TC 2.A.1.1)") == "sodium transporter"


class TestRoleScanner:
    """Tests for role-based tagging."""

    def test_loads_definitions(self, role_file: Path):
        scanner = RoleScanner(role_file)
        assert len(scanner) == 5
        assert scanner.tag_name("ThioRedu") == "Thioredoxin reductase (EC 1.8.1.9)"
        assert scanner.tag_name("Unknown") == "Unknown"

    def test_tags_multifunctional_feature(self, role_file: Path):
        """Each known role of an assignment becomes a tag."""
        scanner = RoleScanner(role_file)
        genome = make_genome(
            Feature(
                id="fig|562.1.peg.1",
                function=(
                    "Thioredoxin reductase (EC 1.8.1.9) / "
                    "Alkyl hydroperoxide reductase protein F"
                ),
            ),
            Feature(id="fig|562.1.peg.2", function="hypothetical protein"),
        )
        assert scanner.tags_for(genome) == {"ThioRedu", "AlkyHydrRedu"}

    def test_ec_number_variants_match(self, role_file: Path):
        """A role should match with a different or missing EC number."""
        scanner = RoleScanner(role_file)
        feature = Feature(id="fig|562.1.peg.1", function="thioredoxin reductase")
        assert scanner.feature_tags(feature) == {"ThioRedu"}

    def test_non_protein_features_skipped(self, role_file: Path):
        scanner = RoleScanner(role_file)
        feature = Feature(id="fig|562.1.rna.1", type="rna", function="Thioredoxin reductase")
        assert scanner.feature_tags(feature) == set()

    def test_missing_file(self, temp_dir: Path):
        with pytest.raises(ConfigurationError, match="not found"):
            RoleScanner(temp_dir / "missing.roles")

    def test_empty_file(self, temp_dir: Path):
        path = temp_dir / "roles.in.subsystems"
        path.write_text("")
        assert len(RoleScanner(path)) == 0

    def test_wrong_column_count(self, temp_dir: Path):
        path = temp_dir / "roles.in.subsystems"
        path.write_text("ThioRedu\tThioredoxin reductase\n")
        with pytest.raises(MalformedStoreError):
            RoleScanner(path)


class TestPgfamScanner:
    """Tests for protein family tagging."""

    def test_tags_families(self):
        genome = make_genome(
            Feature(id="fig|562.1.peg.1", pgfam="PGF_00000001"),
            Feature(id="fig|562.1.peg.2", pgfam="PGF_00000002"),
            Feature(id="fig|562.1.peg.3", pgfam="PGF_00000001"),
            Feature(id="fig|562.1.peg.4"),
        )
        assert PgfamScanner().tags_for(genome) == {"PGF_00000001", "PGF_00000002"}

    def test_non_protein_features_skipped(self):
        genome = make_genome(Feature(id="fig|562.1.rna.1", type="rna", pgfam="PGF_1"))
        assert PgfamScanner().tags_for(genome) == set()

    def test_name_is_id(self):
        assert PgfamScanner().tag_name("PGF_00000001") == "PGF_00000001"


class TestScannerType:
    """Tests for scanner selection."""

    def test_pgfam(self):
        assert isinstance(ScannerType.PGFAM.create(), PgfamScanner)

    def test_role(self, role_file: Path):
        assert isinstance(ScannerType("role").create(role_file), RoleScanner)

    def test_role_requires_file(self):
        with pytest.raises(ConfigurationError, match="role definition file"):
            ScannerType.ROLE.create()
