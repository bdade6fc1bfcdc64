"""
Configuration loader — reads clientgen.yml into a GenerationConfig.

The config file is optional: without one, clientgen runs with its
built-in defaults relative to the current directory. Relative paths in
the file are resolved against the directory that contains it.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from clientgen.core.models.generation import GenerationConfig

logger = logging.getLogger(__name__)

# Default config filename
CONFIG_FILE = "clientgen.yml"


class ConfigError(Exception):
    """Raised when the configuration is invalid or unreadable."""


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for clientgen.yml starting from the given directory, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to clientgen.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def load_config(path: Path | None = None) -> GenerationConfig:
    """Load and validate configuration.

    Args:
        path: Explicit path to clientgen.yml. If None, defaults are returned.

    Returns:
        Validated GenerationConfig.

    Raises:
        ConfigError: If the file is missing, unreadable, or invalid.
    """
    if path is None:
        logger.debug("No %s, using defaults", CONFIG_FILE)
        return GenerationConfig()

    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    # Allow everything to sit under a top-level "clientgen:" key
    if isinstance(data.get("clientgen"), dict):
        data = data["clientgen"]

    try:
        config = GenerationConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}") from e

    logger.info("Loaded config %s (%s → %s, %s)", path, config.spec, config.output, config.language)
    return config


def apply_overrides(config: GenerationConfig, overrides: dict[str, Any]) -> GenerationConfig:
    """Return a copy of ``config`` with per-run overrides applied.

    Keys are top-level field names, or ``generator.<field>`` /
    ``permissions.<field>`` for nested settings. ``None`` values are ignored.

    Raises:
        ConfigError: If an override is unknown or not a valid value.
    """
    data = config.model_dump()
    for key, value in overrides.items():
        if value is None:
            continue
        section, _, name = key.rpartition(".")
        if section and not isinstance(data.get(section), dict):
            raise ConfigError(f"Unknown option: {key}")
        target = data[section] if section else data
        if name not in target:
            raise ConfigError(f"Unknown option: {key}")
        target[name] = value

    try:
        return GenerationConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid option: {e}") from e


def config_base_dir(config_path: Path | None) -> Path:
    """Directory that relative paths resolve against (and that gets mounted)."""
    return config_path.parent.resolve() if config_path else Path.cwd().resolve()
