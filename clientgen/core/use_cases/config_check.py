"""
Config check use case — validate clientgen.yml and report issues.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from clientgen.core.config.loader import (
    ConfigError,
    config_base_dir,
    find_config_file,
    load_config,
)
from clientgen.core.models.generation import GenerationConfig


@dataclass
class ConfigCheckResult:
    """Result of configuration validation."""

    valid: bool = False
    config: GenerationConfig | None = None
    config_path: Path | None = None
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "config_path": str(self.config_path) if self.config_path else None,
            "errors": self.errors,
            "warnings": self.warnings,
            "config": self.config.model_dump(mode="json") if self.config else None,
        }


def check_config(config_path: Path | None = None) -> ConfigCheckResult:
    """Validate configuration and report issues.

    A missing clientgen.yml is not an error: the defaults are checked
    instead, with a warning.
    """
    result = ConfigCheckResult()

    if config_path is None:
        config_path = find_config_file()
    if config_path is None:
        result.warnings.append("No clientgen.yml found; using built-in defaults.")
    result.config_path = config_path

    try:
        config = load_config(config_path)
    except ConfigError as e:
        result.errors.append(str(e))
        return result
    result.config = config

    base_dir = config_base_dir(config_path)
    spec_path = config.spec_path(base_dir)
    output_dir = config.output_dir(base_dir)

    if not spec_path.is_file():
        result.warnings.append(f"Specification not found: {config.spec}")

    if output_dir.exists():
        result.warnings.append(f"Output directory already exists: {config.output} (generate will refuse to run)")

    if spec_path == output_dir or spec_path.is_relative_to(output_dir):
        result.errors.append("The specification must not live inside the output directory.")

    if config.generator.kind == "container":
        for label, path in (("spec", spec_path), ("output", output_dir)):
            if not path.is_relative_to(base_dir):
                result.errors.append(
                    f"'{label}' resolves outside {base_dir}, which is the directory mounted into the container."
                )

    mode = config.permissions.numeric_mode
    if config.permissions.strategy == "chmod" and mode & 0o700 != 0o700:
        result.warnings.append(
            f"Mode {config.permissions.mode} does not give the owner read/write/traverse access; "
            "generated directories may become unreadable."
        )
    if config.permissions.strategy == "chmod" and mode & 0o006 != 0o006:
        result.warnings.append(
            f"Mode {config.permissions.mode} does not grant read/write to other users; "
            "a generator running as a different user may leave files you cannot edit."
        )

    if config.generator.timeout == 0:
        result.warnings.append("Generator timeout disabled: a hung generator will block forever.")

    result.valid = len(result.errors) == 0
    return result
