"""
Pydantic models for the namespace grouping view of a workspace.
"""

from pydantic import BaseModel, Field


class ModelEntry(BaseModel):
    """A single model file inside a namespace version."""

    model: str
    existing: bool = False


class VersionGroup(BaseModel):
    """All model files sharing one namespace and version."""

    version: str
    models: list[ModelEntry] = Field(default_factory=list)


NamespaceGrouping = dict[str, list[VersionGroup]]
