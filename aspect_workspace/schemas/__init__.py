"""
Pydantic schemas for API request/response models.
"""

from aspect_workspace.schemas.grouping import ModelEntry, NamespaceGrouping, VersionGroup
from aspect_workspace.schemas.migration import (
    FileMigrationResult,
    MigrationResult,
    NamespaceMigration,
)
from aspect_workspace.schemas.packaging import (
    BackupResponse,
    ExportRequest,
    ExportValidation,
    FileError,
    ImportPreview,
    MissingElement,
    NamespaceFiles,
    ValidFile,
    ViolationDetail,
)

__all__ = [
    "ModelEntry",
    "VersionGroup",
    "NamespaceGrouping",
    "FileMigrationResult",
    "NamespaceMigration",
    "MigrationResult",
    "ExportRequest",
    "NamespaceFiles",
    "ViolationDetail",
    "ValidFile",
    "MissingElement",
    "FileError",
    "ExportValidation",
    "ImportPreview",
    "BackupResponse",
]
