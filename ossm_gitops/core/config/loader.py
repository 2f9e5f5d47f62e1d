"""
Configuration loader — reads gitops.yml into a GeneratorConfig.

The file is optional.  When present it supplies defaults that CLI flags
and environment variables override.  Keys may sit at the top level or be
wrapped under a ``generator:`` key.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from ossm_gitops.core.models.generator import GeneratorConfig

logger = logging.getLogger(__name__)

# Default config filename
CONFIG_FILE = "gitops.yml"


class ConfigError(Exception):
    """Raised when generator configuration is invalid or unreadable."""


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for gitops.yml starting from the given directory, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to gitops.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break
        current = parent

    return None


def read_config_file(path: Path) -> dict[str, Any]:
    """Read the raw settings mapping from a config file.

    Raises:
        ConfigError: If the file is missing, unreadable or not a mapping.
    """
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading generator config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    settings = data.get("generator", data)
    if not isinstance(settings, dict):
        raise ConfigError(f"Expected 'generator' to be a mapping in {path}")
    return settings


def build_config(
    path: Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> GeneratorConfig:
    """Resolve the generator configuration.

    Args:
        path: Optional config file.  None means "no file".
        overrides: Values from CLI flags / env vars.  ``None`` values are
            treated as unset so they don't mask the file.

    Returns:
        Validated GeneratorConfig.

    Raises:
        ConfigError: If the file or the merged values are invalid.
    """
    settings: dict[str, Any] = read_config_file(path) if path else {}
    for key, value in (overrides or {}).items():
        if value is not None:
            settings[key] = value

    try:
        config = GeneratorConfig.model_validate(settings)
    except ValidationError as e:
        source = f" in {path}" if path else ""
        raise ConfigError(f"Invalid generator configuration{source}: {e}") from e

    logger.info(
        "Resolved config: repo_url=%s namespace=%s variant=%s",
        config.repo_url, config.observability_namespace, config.variant,
    )
    return config
