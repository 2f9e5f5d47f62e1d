"""Manifest tree generation — render the catalog and write it to disk.

A run is one linear batch: create directories, write every rendered
template (truncating), then fetch the Bookinfo sample manifest.  There is
no rollback; a failed write leaves the files written before it in place.
"""

from __future__ import annotations

import logging
import string
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from ossm_gitops.core.models.generator import SUBSTITUTION_FIELDS, GeneratorConfig
from ossm_gitops.core.models.template import GeneratedFile, ManifestTemplate
from ossm_gitops.core.services.manifest_catalog import (
    DIRECTORIES,
    PASSTHROUGH_PATH,
    SECTIONS,
    build_catalog,
)
from ossm_gitops.core.services.remote_fetch import FetchResult, fetch_remote

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, str], None]
Fetcher = Callable[[GeneratorConfig], FetchResult]


# ── Errors ──────────────────────────────────────────────────────


class GenerationError(Exception):
    """Base class for generation failures."""

    def __init__(self, message: str, report: GenerationReport | None = None) -> None:
        super().__init__(message)
        self.report = report


class FilesystemError(GenerationError):
    """Directory creation or file write failed. Fatal."""


class FetchError(GenerationError):
    """Remote content retrieval failed. Fatal only in strict mode."""


# ── Report ──────────────────────────────────────────────────────


@dataclass
class GenerationReport:
    """What a generation run produced."""

    output_root: Path
    files: list[GeneratedFile] = field(default_factory=list)
    fetch: FetchResult | None = None

    @property
    def fetch_ok(self) -> bool:
        return self.fetch is None or self.fetch.ok

    @property
    def paths(self) -> list[str]:
        written = [f.path for f in self.files]
        if self.fetch is not None and self.fetch.ok:
            written.append(PASSTHROUGH_PATH)
        return written

    def to_dict(self) -> dict:
        return {
            "output_root": str(self.output_root),
            "files": [{"path": f.path, "reason": f.reason} for f in self.files],
            "fetch": self.fetch.to_dict() if self.fetch else None,
            "fetch_ok": self.fetch_ok,
        }


# ── Rendering ───────────────────────────────────────────────────


def placeholders(template: ManifestTemplate) -> set[str]:
    """Return the placeholder names used in a template body."""
    return {
        name
        for _, name, _, _ in string.Formatter().parse(template.body)
        if name is not None
    }


def render_template(template: ManifestTemplate, config: GeneratorConfig) -> GeneratedFile:
    """Substitute config fields into one template."""
    unknown = placeholders(template) - set(SUBSTITUTION_FIELDS)
    if unknown:
        raise GenerationError(
            f"Template {template.path} references unknown placeholders: "
            f"{', '.join(sorted(unknown))}"
        )
    return GeneratedFile(
        path=template.path,
        content=template.body.format(**config.substitutions()),
        overwrite=True,
        reason=template.reason,
    )


def render_catalog(config: GeneratorConfig) -> list[GeneratedFile]:
    """Render every catalog template without touching the filesystem."""
    return [render_template(t, config) for t in build_catalog(config)]


def expected_files(config: GeneratorConfig) -> list[str]:
    """Return the complete output file set for ``config``."""
    paths = [t.path for t in build_catalog(config)]
    paths.append(PASSTHROUGH_PATH)
    return sorted(paths)


# ── Filesystem ──────────────────────────────────────────────────


def ensure_directories(output_root: Path) -> None:
    """Create every catalog directory under ``output_root``."""
    for rel in DIRECTORIES:
        target = output_root / rel
        try:
            target.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise FilesystemError(f"Cannot create directory {target}: {exc}") from exc


def write_file(output_root: Path, rel_path: str, content: str | bytes) -> Path:
    """Write ``content`` to ``output_root/rel_path``, replacing any file there."""
    target = output_root / rel_path
    try:
        if isinstance(content, bytes):
            target.write_bytes(content)
        else:
            target.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise FilesystemError(f"Cannot write {target}: {exc}") from exc
    logger.debug("Wrote %s", target)
    return target


def _default_fetcher(config: GeneratorConfig) -> FetchResult:
    return fetch_remote(
        config.fetch_url,
        timeout=config.fetch_timeout,
        retries=config.fetch_retries,
    )


# ── Generate ────────────────────────────────────────────────────


def generate(
    config: GeneratorConfig,
    output_root: Path,
    *,
    on_progress: ProgressCallback | None = None,
    fetcher: Fetcher | None = None,
) -> GenerationReport:
    """Generate the full manifest tree under ``output_root``.

    Args:
        config: Resolved generator configuration.
        output_root: Root of the GitOps tree (created if missing).
        on_progress: Optional callback ``(section, message)`` called once
            per logical section and once for the remote fetch.
        fetcher: Optional replacement for the network fetch.

    Returns:
        GenerationReport listing written files and the fetch outcome.

    Raises:
        FilesystemError: A directory or file could not be written.
        FetchError: The remote fetch failed and ``config.strict_fetch``
            is set.  Every templated file has been written by then.
    """
    output_root = Path(output_root)
    report = GenerationReport(output_root=output_root)

    logger.info(
        "Generating tree in %s (variant=%s, namespace=%s)",
        output_root, config.variant, config.observability_namespace,
    )
    ensure_directories(output_root)

    section = None
    for template in build_catalog(config):
        if template.section != section:
            section = template.section
            if on_progress:
                on_progress(section, SECTIONS.get(section, section))
        rendered = render_template(template, config)
        try:
            write_file(output_root, rendered.path, rendered.content)
        except FilesystemError as exc:
            exc.report = report
            raise
        report.files.append(rendered)

    if config.skip_fetch:
        logger.info("Skipping remote fetch of %s", config.fetch_url)
        return report

    if on_progress:
        on_progress("fetch", f"Downloading Bookinfo source from {config.fetch_url}")
    result = (fetcher or _default_fetcher)(config)
    report.fetch = result

    if result.ok:
        try:
            write_file(output_root, PASSTHROUGH_PATH, result.content)
        except FilesystemError as exc:
            exc.report = report
            raise
        return report

    logger.warning(
        "Could not fetch %s: %s (%s left unchanged)",
        result.url, result.error, PASSTHROUGH_PATH,
    )
    if config.strict_fetch:
        raise FetchError(f"Fetch of {result.url} failed: {result.error}", report)
    return report
