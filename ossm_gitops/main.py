"""
OSSM GitOps — CLI entrypoint.

Usage:
    ossm-gitops --help
    ossm-gitops generate --repo-url https://example.com/org/repo.git
    ossm-gitops generate --variant central --strict-fetch
    ossm-gitops catalog
    ossm-gitops config check
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path
from typing import Any, Callable

import click
from click.core import ParameterSource

from ossm_gitops import __version__
from ossm_gitops.core.observability.logging_config import setup_logging

# Options that map 1:1 onto GeneratorConfig fields
_CONFIG_PARAMS = (
    "repo_url",
    "observability_namespace",
    "variant",
    "grafana_datasource",
    "strict_fetch",
    "fetch_url",
    "fetch_timeout",
    "fetch_retries",
    "skip_fetch",
)

_SECTION_ICONS = {
    "observability": "📦",
    "ossm": "🕸️ ",
    "bookinfo": "📚",
    "bootstrap": "🚀",
    "fetch": "🌐",
}


@click.group()
@click.version_option(version=__version__, prog_name="ossm-gitops")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to gitops.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """OSSM GitOps — generate a Service Mesh + Tempo + Bookinfo GitOps tree."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug

    if config_path:
        ctx.obj["config_path"] = Path(config_path)
    else:
        from ossm_gitops.core.config.loader import find_config_file

        ctx.obj["config_path"] = find_config_file()

    if debug:
        level = "DEBUG"
    elif verbose:
        level = "INFO"
    elif quiet:
        level = "ERROR"
    else:
        level = os.environ.get("OSSM_GITOPS_LOG_LEVEL", "WARNING")

    setup_logging(
        level=level,
        log_file=os.environ.get("OSSM_GITOPS_LOG_FILE"),
        log_file_level=os.environ.get("OSSM_GITOPS_LOG_FILE_LEVEL"),
    )


def _config_options(func: Callable) -> Callable:
    """Attach the GeneratorConfig override options to a command."""
    options = [
        click.option(
            "--repo-url",
            envvar="OSSM_GITOPS_REPO_URL",
            default=None,
            help="Git remote the Argo CD applications sync from.",
        ),
        click.option(
            "--observability-namespace",
            envvar="OSSM_GITOPS_OBSERVABILITY_NAMESPACE",
            default=None,
            help="Namespace of the Tempo/MinIO tier.",
        ),
        click.option(
            "--variant",
            type=click.Choice(["initial", "central"]),
            default=None,
            help="initial: tracing-system; central: central-observability + Grafana.",
        ),
        click.option(
            "--grafana-datasource/--no-grafana-datasource",
            default=None,
            help="Emit the GrafanaDatasource manifest (default: from variant).",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _overrides(ctx: click.Context, params: dict[str, Any]) -> dict[str, Any]:
    """Keep only the config values the user actually supplied."""
    overrides = {}
    for name in _CONFIG_PARAMS:
        if name not in params:
            continue
        source = ctx.get_parameter_source(name)
        if source in (ParameterSource.COMMANDLINE, ParameterSource.ENVIRONMENT):
            overrides[name] = params[name]
    return overrides


def _echo_progress(section: str, message: str) -> None:
    click.secho(f"{_SECTION_ICONS.get(section, '•')} {message}...", fg="cyan")


# ── Generate ────────────────────────────────────────────────────


@cli.command()
@_config_options
@click.option(
    "--strict-fetch/--lenient-fetch",
    default=False,
    help="Fail the run when the Bookinfo download fails (default: lenient).",
)
@click.option("--fetch-url", default=None, help="Bookinfo sample manifest URL.")
@click.option("--fetch-timeout", type=float, default=None, help="Download timeout (seconds).")
@click.option("--fetch-retries", type=int, default=None, help="Extra download attempts.")
@click.option("--skip-fetch", is_flag=True, help="Don't download the Bookinfo manifest.")
@click.option(
    "--output-dir",
    "-o",
    type=click.Path(),
    default=".",
    help="Root of the generated tree (default: current directory).",
)
@click.option("--dry-run", is_flag=True, help="List the files without writing anything.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def generate(ctx: click.Context, output_dir: str, dry_run: bool, as_json: bool, **params: Any) -> None:
    """Generate (or update) the GitOps manifest tree.

    Existing files at catalog paths are overwritten; other files are
    left alone.

    Examples:

        ossm-gitops generate --repo-url https://example.com/org/repo.git

        ossm-gitops generate --variant central -o ./ossm

        ossm-gitops generate --dry-run --json
    """
    from ossm_gitops.core.use_cases.generate import run_generate

    quiet = ctx.obj.get("quiet", False)
    show_progress = not (as_json or quiet)

    if show_progress and not dry_run:
        click.secho("🚀 Starting GitOps Repo Generation...", bold=True)

    result = run_generate(
        output_root=Path(output_dir),
        config_path=ctx.obj.get("config_path"),
        overrides=_overrides(ctx, params),
        dry_run=dry_run,
        on_progress=_echo_progress if show_progress else None,
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        if not result.ok:
            sys.exit(1)
        return

    if result.error_kind == "config":
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    if dry_run:
        from ossm_gitops.core.services.manifest_catalog import PASSTHROUGH_PATH

        assert result.config is not None
        fetched = 0 if result.config.skip_fetch else 1
        click.secho(
            f"\n📋 Would write {len(result.planned) + fetched} files to {result.output_root}",
            fg="cyan",
            bold=True,
        )
        for f in result.planned:
            click.echo(f"   📄 {f.path}")
        if fetched:
            click.echo(f"   🌐 {PASSTHROUGH_PATH}  ← {result.config.fetch_url}")
        click.echo()
        return

    report = result.report
    if report is not None and report.fetch is not None and not report.fetch.ok:
        click.secho(
            f"⚠️  Could not download Bookinfo manifest: {report.fetch.error}",
            fg="yellow",
        )

    if not result.ok:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    if quiet:
        return

    assert report is not None
    if ctx.obj.get("verbose"):
        for path in report.paths:
            click.echo(f"   ✓ {path}")

    click.secho("✅ Done! Your GitOps folder structure is ready.", fg="green", bold=True)
    click.echo("👉 Next Step: 'git add .', 'git commit', and 'git push' to your repo.")
    click.echo("👉 Then apply 'bootstrap/app-of-apps.yaml' to your cluster manually once.")


# ── Catalog ─────────────────────────────────────────────────────


@cli.command()
@_config_options
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def catalog(ctx: click.Context, as_json: bool, **params: Any) -> None:
    """List the manifest templates for the resolved configuration."""
    from ossm_gitops.core.config.loader import ConfigError, build_config
    from ossm_gitops.core.services.manifest_catalog import PASSTHROUGH_PATH, build_catalog
    from ossm_gitops.core.services.manifest_generate import placeholders

    try:
        config = build_config(ctx.obj.get("config_path"), _overrides(ctx, params))
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red")
        sys.exit(1)

    templates = build_catalog(config)

    if as_json:
        click.echo(json.dumps({
            "templates": [
                {
                    "path": t.path,
                    "section": t.section,
                    "reason": t.reason,
                    "placeholders": sorted(placeholders(t)),
                }
                for t in templates
            ],
            "passthrough": PASSTHROUGH_PATH,
        }, indent=2))
        return

    section = None
    for t in templates:
        if t.section != section:
            section = t.section
            click.secho(f"\n{_SECTION_ICONS.get(section, '•')} {section}", fg="cyan", bold=True)
        click.echo(f"   📄 {t.path}  ({t.reason})")
    click.secho("\n🌐 fetched", fg="cyan", bold=True)
    click.echo(f"   📄 {PASSTHROUGH_PATH}  ({config.fetch_url})")
    click.echo()


# ── Config ──────────────────────────────────────────────────────


@cli.group()
def config() -> None:
    """Generator configuration commands."""


@config.command("check")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def config_check(ctx: click.Context, as_json: bool) -> None:
    """Validate gitops.yml and show the resolved configuration."""
    from ossm_gitops.core.use_cases.config_check import check_config

    result = check_config(config_path=ctx.obj.get("config_path"))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.valid else 1)

    if result.valid:
        assert result.config is not None
        click.secho("✅ Configuration is valid", fg="green", bold=True)
        if result.config_path:
            click.echo(f"   File: {result.config_path}")
        for key, value in result.config.model_dump().items():
            click.echo(f"   {key}: {value}")
    else:
        click.secho("❌ Configuration errors:", fg="red", bold=True)
        for err in result.errors:
            click.echo(f"   • {err}")

    if result.warnings:
        click.echo()
        click.secho("⚠️  Warnings:", fg="yellow")
        for warn in result.warnings:
            click.echo(f"   • {warn}")

    if not result.valid:
        click.echo()
        sys.exit(1)

    click.echo()


if __name__ == "__main__":
    cli()
