"""
Config check use case — validate gitops.yml and show the resolved values.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from ossm_gitops.core.config.loader import ConfigError, build_config
from ossm_gitops.core.models.generator import GeneratorConfig


@dataclass
class ConfigCheckResult:
    """Result of configuration validation."""

    valid: bool = False
    config: GeneratorConfig | None = None
    config_path: Path | None = None
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "config_path": str(self.config_path) if self.config_path else None,
            "errors": self.errors,
            "warnings": self.warnings,
            "config": self.config.model_dump() if self.config else None,
        }


def check_config(config_path: Path | None = None) -> ConfigCheckResult:
    """Validate generator configuration and report issues.

    Args:
        config_path: Optional gitops.yml.  Without one, the built-in
            defaults are checked.

    Returns:
        ConfigCheckResult with validation status and any issues.
    """
    result = ConfigCheckResult(config_path=config_path)

    if config_path is None:
        result.warnings.append("No gitops.yml found; using built-in defaults.")

    try:
        config = build_config(config_path)
    except ConfigError as e:
        result.errors.append(str(e))
        return result
    result.config = config

    if config.strict_fetch and config.skip_fetch:
        result.warnings.append("strict_fetch has no effect while skip_fetch is set.")

    if not config.fetch_url.startswith(("http://", "https://")):
        result.warnings.append(f"fetch_url is not an http(s) URL: {config.fetch_url}")

    result.valid = not result.errors
    return result
