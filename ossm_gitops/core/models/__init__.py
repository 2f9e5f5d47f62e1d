"""
Domain models — Pydantic types for the manifest generator.

All models are re-exported here for convenient access:

    from ossm_gitops.core.models import GeneratorConfig, ManifestTemplate, GeneratedFile
"""

from ossm_gitops.core.models.generator import (
    DEFAULT_FETCH_URL,
    DEFAULT_REPO_URL,
    SUBSTITUTION_FIELDS,
    VARIANT_DEFAULTS,
    GeneratorConfig,
)
from ossm_gitops.core.models.template import GeneratedFile, ManifestTemplate

__all__ = [
    # generator.py
    "DEFAULT_FETCH_URL",
    "DEFAULT_REPO_URL",
    "SUBSTITUTION_FIELDS",
    "VARIANT_DEFAULTS",
    # template.py
    "GeneratedFile",
    "GeneratorConfig",
    "ManifestTemplate",
]
