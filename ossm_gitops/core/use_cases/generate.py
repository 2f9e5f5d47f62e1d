"""
Generate use case — resolve configuration and write the manifest tree.

This is the vertical slice the CLI calls: config file + overrides in,
a ``GenerateResult`` out.  Generation errors are caught here and turned
into ``error`` / ``error_kind`` so the caller only renders.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ossm_gitops.core.config.loader import ConfigError, build_config
from ossm_gitops.core.models.generator import GeneratorConfig
from ossm_gitops.core.models.template import GeneratedFile
from ossm_gitops.core.services.manifest_generate import (
    FetchError,
    Fetcher,
    FilesystemError,
    GenerationError,
    GenerationReport,
    ProgressCallback,
    generate,
    render_catalog,
)

logger = logging.getLogger(__name__)


@dataclass
class GenerateResult:
    """Result of a generate run (or a dry run)."""

    config: GeneratorConfig | None = None
    output_root: Path | None = None
    report: GenerationReport | None = None
    planned: list[GeneratedFile] = field(default_factory=list)
    dry_run: bool = False
    error: str | None = None
    error_kind: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict:
        result: dict[str, Any] = {"ok": self.ok, "dry_run": self.dry_run}
        if self.error:
            result["error"] = self.error
            result["error_kind"] = self.error_kind
        if self.config:
            result["config"] = self.config.model_dump()
        if self.output_root:
            result["output_root"] = str(self.output_root)
        if self.dry_run:
            result["files"] = [{"path": f.path, "reason": f.reason} for f in self.planned]
        if self.report:
            result["report"] = self.report.to_dict()
        return result


def run_generate(
    output_root: Path,
    config_path: Path | None = None,
    overrides: dict[str, Any] | None = None,
    *,
    dry_run: bool = False,
    on_progress: ProgressCallback | None = None,
    fetcher: Fetcher | None = None,
) -> GenerateResult:
    """Resolve configuration and generate the tree.

    Args:
        output_root: Root of the GitOps tree.
        config_path: Optional gitops.yml.
        overrides: CLI / env values layered over the file.
        dry_run: Render only; no writes, no fetch.
        on_progress: Passed through to the generator.
        fetcher: Passed through to the generator (tests).

    Returns:
        GenerateResult; never raises for configuration or generation errors.
    """
    result = GenerateResult(output_root=output_root, dry_run=dry_run)

    try:
        config = build_config(config_path, overrides)
    except ConfigError as e:
        result.error = str(e)
        result.error_kind = "config"
        return result
    result.config = config

    if dry_run:
        result.planned = render_catalog(config)
        return result

    try:
        result.report = generate(
            config, output_root, on_progress=on_progress, fetcher=fetcher,
        )
    except FilesystemError as e:
        logger.error("Generation aborted: %s", e)
        result.report = e.report
        result.error = str(e)
        result.error_kind = "filesystem"
    except FetchError as e:
        result.report = e.report
        result.error = str(e)
        result.error_kind = "fetch"
    except GenerationError as e:
        result.report = e.report
        result.error = str(e)
        result.error_kind = "generation"

    return result
