"""
Generator configuration — the explicit input of a generation run.

Every run is driven by one immutable ``GeneratorConfig``.  The two
substitution fields (``repo_url`` and ``observability_namespace``) are the
only values that flow into template bodies; everything else steers the
generator itself (which manifests exist, how the remote fetch behaves).
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

DEFAULT_REPO_URL = "https://github.com/maudis73/ossm.git"

DEFAULT_FETCH_URL = (
    "https://raw.githubusercontent.com/istio/istio/master/"
    "samples/bookinfo/platform/kube/bookinfo.yaml"
)

Variant = Literal["initial", "central"]

# Per-variant defaults: (observability namespace, grafana datasource)
VARIANT_DEFAULTS: dict[str, tuple[str, bool]] = {
    "initial": ("tracing-system", False),
    "central": ("central-observability", True),
}

# Config fields that templates may reference as placeholders
SUBSTITUTION_FIELDS = ("repo_url", "observability_namespace")


class GeneratorConfig(BaseModel):
    """Configuration for one generation run.

    Attributes:
        repo_url: Git remote the Argo CD applications sync from (verbatim).
        observability_namespace: Namespace of the tracing tier.
            Defaults from ``variant`` when omitted.
        variant: ``initial`` (tracing-system, no datasource) or
            ``central`` (central-observability + GrafanaDatasource).
        grafana_datasource: Emit the GrafanaDatasource manifest.
            Defaults from ``variant`` when omitted.
        strict_fetch: Treat a failed remote fetch as fatal.
        fetch_url: Source of the Bookinfo sample manifest.
        fetch_timeout: Per-attempt network timeout in seconds.
        fetch_retries: Extra attempts after a failed fetch.
        skip_fetch: Do not fetch at all (offline runs).
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    repo_url: str = Field(default=DEFAULT_REPO_URL, min_length=1)
    observability_namespace: str = Field(default="", min_length=1)
    variant: Variant = "initial"
    grafana_datasource: bool = False

    strict_fetch: bool = False
    fetch_url: str = DEFAULT_FETCH_URL
    fetch_timeout: float = Field(default=10.0, gt=0)
    fetch_retries: int = Field(default=0, ge=0)
    skip_fetch: bool = False

    @model_validator(mode="before")
    @classmethod
    def _apply_variant_defaults(cls, data: Any) -> Any:
        """Fill namespace and datasource flag from the variant when unset."""
        if not isinstance(data, dict):
            return data
        data = {k: v for k, v in data.items() if v is not None}
        variant = data.get("variant", "initial")
        if not isinstance(variant, str):
            # Left for the Literal field to reject
            variant = "initial"
        namespace, datasource = VARIANT_DEFAULTS.get(variant, VARIANT_DEFAULTS["initial"])
        data.setdefault("observability_namespace", namespace)
        data.setdefault("grafana_datasource", datasource)
        return data

    def substitutions(self) -> dict[str, str]:
        """Return the placeholder mapping used to render template bodies."""
        return {name: getattr(self, name) for name in SUBSTITUTION_FIELDS}
