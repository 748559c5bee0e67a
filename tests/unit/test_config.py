"""Unit tests for the comparison configuration model."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest
from pydantic import ValidationError

from taxontags.core.exceptions import ConfigurationError, InvalidThresholdError
from taxontags.core.tags.scanners import PgfamScanner, RoleScanner, ScannerType
from taxontags.models.config import CompareConfig


class TestCompareConfig:
    """Tests for CompareConfig defaults and validation."""

    def test_defaults(self):
        config = CompareConfig()
        assert config.max_absent == 0.2
        assert config.min_present == 0.8
        assert config.threads is None
        assert config.scanner is ScannerType.ROLE
        assert config.role_file is None

    def test_frozen(self):
        config = CompareConfig()
        with pytest.raises(ValidationError):
            config.max_absent = 0.5

    @pytest.mark.parametrize(
        "values",
        [
            {"max_absent": 1.0},
            {"max_absent": -0.1},
            {"min_present": 0.0},
            {"min_present": 1.2},
            {"threads": 0},
        ],
    )
    def test_out_of_range(self, values):
        with pytest.raises(ValidationError):
            CompareConfig(**values)

    def test_scanner_from_string(self):
        assert CompareConfig(scanner="pgfam").scanner is ScannerType.PGFAM

    def test_create_engine(self):
        engine = CompareConfig(max_absent=0.1, min_present=0.9).create_engine()
        assert engine.max_absent == 0.1
        assert engine.min_present == 0.9

    def test_create_pgfam_scanner(self):
        assert isinstance(CompareConfig(scanner="pgfam").create_scanner(), PgfamScanner)

    def test_create_role_scanner(self, role_file: Path):
        config = CompareConfig(role_file=role_file)
        assert isinstance(config.create_scanner(), RoleScanner)

    def test_default_role_file_missing(self, temp_dir: Path, monkeypatch):
        """Without a role file the scanner looks in the working directory."""
        monkeypatch.chdir(temp_dir)
        with pytest.raises(ConfigurationError, match="roles.in.subsystems"):
            CompareConfig().create_scanner()

    def test_absent_above_present_accepted(self):
        """Overlapping fractions are allowed; the engine classifies as usual."""
        config = CompareConfig(max_absent=0.9, min_present=0.5)
        assert config.create_engine().thresholds(10) == (5, 9)


class TestOverrides:
    """Tests for command-line overrides."""

    def test_none_values_ignored(self):
        config = CompareConfig(max_absent=0.1)
        merged = config.with_overrides(max_absent=None, threads=4)
        assert merged.max_absent == 0.1
        assert merged.threads == 4

    def test_invalid_override(self):
        with pytest.raises(ConfigurationError, match="max_absent"):
            CompareConfig().with_overrides(max_absent=2.0)

    def test_original_unchanged(self):
        config = CompareConfig()
        config.with_overrides(min_present=0.5)
        assert config.min_present == 0.8


class TestYaml:
    """Tests for YAML files."""

    def test_round_trip(self, temp_dir: Path):
        config = CompareConfig(max_absent=0.1, threads=3, scanner="pgfam")
        path = temp_dir / "config.yaml"
        config.to_yaml(path)
        assert CompareConfig.from_yaml(path) == config

    def test_yaml_str_omits_unset_role_file(self):
        text = CompareConfig().to_yaml_str()
        assert "max_absent: 0.2" in text
        assert "scanner: role" in text
        assert "role_file" not in text

    def test_empty_file_gives_defaults(self, temp_dir: Path):
        path = temp_dir / "config.yaml"
        path.write_text("")
        assert CompareConfig.from_yaml(path) == CompareConfig()

    def test_unknown_keys_warned(self, temp_dir: Path, caplog):
        path = temp_dir / "config.yaml"
        path.write_text("min_present: 0.9\nmystery: 1\n")
        with caplog.at_level(logging.WARNING):
            config = CompareConfig.from_yaml(path)
        assert config.min_present == 0.9
        assert "mystery" in caplog.text

    def test_missing_file(self, temp_dir: Path):
        with pytest.raises(ConfigurationError, match="not found"):
            CompareConfig.from_yaml(temp_dir / "missing.yaml")

    def test_not_a_mapping(self, temp_dir: Path):
        path = temp_dir / "config.yaml"
        path.write_text("- 0.2\n- 0.8\n")
        with pytest.raises(ConfigurationError, match="mapping"):
            CompareConfig.from_yaml(path)

    def test_invalid_value_names_file(self, temp_dir: Path):
        path = temp_dir / "config.yaml"
        path.write_text("min_present: 0\n")
        with pytest.raises(ConfigurationError) as exc_info:
            CompareConfig.from_yaml(path)
        assert str(path) in exc_info.value.message
        assert not isinstance(exc_info.value, InvalidThresholdError)
