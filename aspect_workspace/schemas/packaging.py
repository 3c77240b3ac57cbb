"""
Pydantic models for package import and export requests and reports.
"""

from pydantic import BaseModel, Field, field_validator

from aspect_workspace.schemas.grouping import VersionGroup


class ExportRequest(BaseModel):
    """Request to export the packages of one or more Aspect Model URNs."""

    urns: list[str] = Field(..., min_length=1)

    @field_validator("urns", mode="before")
    @classmethod
    def ensure_list(cls, v):
        if isinstance(v, str):
            return [v]
        return v


class NamespaceFiles(BaseModel):
    """Selection of files inside one ``namespace:version``."""

    namespace: str
    files: list[str] = Field(default_factory=list)

    @field_validator("namespace")
    @classmethod
    def check_versioned_namespace(cls, v: str) -> str:
        if v.count(":") != 1 or not all(v.split(":")):
            raise ValueError("namespace must have the form '<namespace>:<version>'")
        return v


class ViolationDetail(BaseModel):
    """One validation violation."""

    message: str
    focusNode: str | None = None
    errorCode: str


class ValidFile(BaseModel):
    """Validation report of one model file in a package."""

    namespace: str
    fileName: str
    violations: list[ViolationDetail] = Field(default_factory=list)
    existing: bool = False


class MissingElement(BaseModel):
    """A referenced element no file of the package or workspace defines."""

    fileName: str
    focusNode: str
    missingFile: str
    errorMessage: str


class FileError(BaseModel):
    """A package member that could not be processed."""

    file: str
    message: str


class ExportValidation(BaseModel):
    """Result of validating a selection of files for export."""

    token: str
    validFiles: list[ValidFile] = Field(default_factory=list)
    missingElements: list[MissingElement] = Field(default_factory=list)


class ImportPreview(BaseModel):
    """What an import would write, before anything is written."""

    namespaces: dict[str, list[VersionGroup]] = Field(default_factory=dict)
    errors: list[FileError] = Field(default_factory=list)
    ignoredFiles: list[str] = Field(default_factory=list)


class BackupResponse(BaseModel):
    """Location of a created workspace backup."""

    fileName: str
    path: str
