"""
Manifest template and generated file models — used by the generator.
"""

from __future__ import annotations

from pydantic import BaseModel


class ManifestTemplate(BaseModel):
    """One entry of the manifest catalog.

    Attributes:
        path:    Output path relative to the tree root.
        body:    Literal YAML with ``{field}`` placeholder markers.
        section: Logical section, used for the progress narrative.
        reason:  What the manifest declares.
    """

    path: str
    body: str
    section: str
    reason: str = ""


class GeneratedFile(BaseModel):
    """A file produced by rendering a template.

    Attributes:
        path:      Relative path from the tree root.
        content:   Full file content.
        overwrite: Whether to overwrite if already exists.
        reason:    Why this file was generated.
    """

    path: str
    content: str
    overwrite: bool = True
    reason: str = ""
