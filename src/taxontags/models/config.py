"""
Pydantic configuration model for tag comparisons.

The comparison settings can be loaded from a YAML file and overridden by
command-line options:

    max_absent: 0.2
    min_present: 0.8
    threads: 4
    scanner: role
    role_file: roles.in.subsystems
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from taxontags.core.constants import (
    DEFAULT_MAX_ABSENT,
    DEFAULT_MIN_PRESENT,
    DEFAULT_ROLE_FILE,
)
from taxontags.core.exceptions import ConfigurationError
from taxontags.core.tags.engine import DifferencingEngine
from taxontags.core.tags.scanners import ScannerType, TagScanner

logger = logging.getLogger(__name__)


class CompareConfig(BaseModel):
    """Tuning fractions and scanning options for tag comparisons."""

    max_absent: float = Field(
        default=DEFAULT_MAX_ABSENT,
        ge=0.0,
        lt=1.0,
        description="Maximum fraction of genomes in a set that can have an absent tag",
    )
    min_present: float = Field(
        default=DEFAULT_MIN_PRESENT,
        gt=0.0,
        le=1.0,
        description="Minimum fraction of genomes in a set that can have a present tag",
    )
    threads: int | None = Field(
        default=None,
        ge=1,
        description="Worker threads for the mass comparison (None: executor default)",
    )
    scanner: ScannerType = Field(
        default=ScannerType.ROLE,
        description="Kind of feature tag to scan for",
    )
    role_file: Path | None = Field(
        default=None,
        description="Role definition file, required by the role scanner",
    )

    model_config = {"frozen": True}

    def create_engine(self) -> DifferencingEngine:
        """Build a differencing engine from the tuning fractions."""
        return DifferencingEngine(self.max_absent, self.min_present)

    def create_scanner(self) -> TagScanner:
        """
        Build the configured tag scanner.

        The role scanner falls back to ``roles.in.subsystems`` in the
        working directory when no role file is configured.
        """
        return self.scanner.create(self.role_file or Path(DEFAULT_ROLE_FILE))

    def with_overrides(self, **overrides: Any) -> CompareConfig:
        """
        Return a copy with the given non-None values replaced.

        Raises:
            ConfigurationError: If the result is invalid.
        """
        values = self.model_dump()
        values.update({k: v for k, v in overrides.items() if v is not None})
        return _validated(values, "command-line options")

    @classmethod
    def from_yaml(cls, path: Path) -> CompareConfig:
        """
        Load a configuration from a YAML file.

        Unknown keys are ignored.

        Raises:
            ConfigurationError: If the file is missing, is not a mapping or
                holds invalid values.
        """
        import yaml

        if not path.is_file():
            raise ConfigurationError(
                f"Configuration file not found: {path}",
                suggestion="Check the --config path.",
            )
        raw = yaml.safe_load(path.read_text())
        if raw is None:
            raw = {}
        if not isinstance(raw, dict):
            raise ConfigurationError(
                f"YAML config must be a mapping, got {type(raw).__name__}"
            )
        known = {k: v for k, v in raw.items() if k in cls.model_fields}
        ignored = sorted(set(raw) - set(known))
        if ignored:
            logger.warning("Ignoring unknown configuration keys: %s", ", ".join(ignored))
        return _validated(known, str(path))

    def to_yaml(self, path: Path) -> None:
        """Write the configuration to a YAML file."""
        path.write_text(self.to_yaml_str())

    def to_yaml_str(self) -> str:
        """Serialize the configuration to a YAML string."""
        import yaml

        data = self.model_dump(mode="json", exclude_none=True)
        return yaml.dump(data, default_flow_style=False, sort_keys=False)


def _validated(values: dict[str, Any], source: str) -> CompareConfig:
    try:
        return CompareConfig(**values)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'config'}: {err['msg']}"
            for err in e.errors()
        )
        raise ConfigurationError(
            f"Invalid configuration in {source}: {problems}",
            suggestion="max_absent must be in [0, 1) and min_present in (0, 1].",
        ) from None
