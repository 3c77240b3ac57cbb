"""
Pydantic models for workspace migration reports.
"""

from pydantic import BaseModel, Field


class FileMigrationResult(BaseModel):
    """Outcome of migrating one model file."""

    name: str
    success: bool
    changed: bool = False
    message: str = ""
    error: str | None = None


class NamespaceMigration(BaseModel):
    """Migration outcomes of all files in one ``namespace:version``."""

    namespace: str
    files: list[FileMigrationResult] = Field(default_factory=list)

    def add(self, result: FileMigrationResult) -> None:
        self.files.append(result)


class MigrationResult(BaseModel):
    """Workspace migration report."""

    success: bool = True
    namespaces: list[NamespaceMigration] = Field(default_factory=list)

    @property
    def changed_files(self) -> list[str]:
        return [
            f"{namespace.namespace}:{result.name}"
            for namespace in self.namespaces
            for result in namespace.files
            if result.changed
        ]

    @property
    def errors(self) -> list[str]:
        return [
            f"{namespace.namespace}:{result.name}: {result.message}"
            for namespace in self.namespaces
            for result in namespace.files
            if not result.success
        ]
