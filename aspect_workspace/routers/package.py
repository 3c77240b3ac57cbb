"""
Package endpoints for ZIP import, export and workspace backups.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from fastapi.responses import Response

from aspect_workspace.config import Settings, get_settings
from aspect_workspace.dependencies import get_backup_scheduler, get_exporter, get_importer
from aspect_workspace.exceptions import WorkspaceError
from aspect_workspace.schemas.grouping import VersionGroup
from aspect_workspace.schemas.packaging import (
    BackupResponse,
    ExportRequest,
    ExportValidation,
    ImportPreview,
    NamespaceFiles,
)
from aspect_workspace.services.backup import BackupScheduler
from aspect_workspace.services.exporter import ExportCoordinator
from aspect_workspace.services.importer import ImportCoordinator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/package", tags=["package"])

ZIP_MEDIA_TYPE = "application/zip"
PACKAGE_FILE_NAME = "package.zip"


def _zip_response(content: bytes, filename: str = PACKAGE_FILE_NAME) -> Response:
    return Response(
        content=content,
        media_type=ZIP_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


async def _read_package(file: UploadFile, settings: Settings) -> bytes:
    """Read an uploaded package, enforcing file type and size limit."""
    if not file.filename or not file.filename.lower().endswith(".zip"):
        raise HTTPException(status_code=400, detail="Only ZIP packages are accepted")

    contents = await file.read()
    max_size = settings.max_upload_size_mb * 1024 * 1024
    if len(contents) > max_size:
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Maximum size is {settings.max_upload_size_mb}MB",
        )
    return contents


@router.post("/export")
def export_package(
    export_request: ExportRequest,
    settings: Annotated[Settings, Depends(get_settings)],
    exporter: Annotated[ExportCoordinator, Depends(get_exporter)],
) -> Response:
    """
    Export the given Aspect Model URNs and every file they reference as a ZIP package.
    """
    content = exporter.export_package(export_request.urns, settings.workspace_dir)
    return _zip_response(content)


@router.post("/validate-export", response_model=ExportValidation)
def validate_export(
    selection: list[NamespaceFiles],
    settings: Annotated[Settings, Depends(get_settings)],
    exporter: Annotated[ExportCoordinator, Depends(get_exporter)],
) -> ExportValidation:
    """
    Validate a selection of workspace files for export.

    The returned token downloads exactly the validated files, once.
    """
    if not selection:
        raise HTTPException(status_code=400, detail="No files selected for export")
    return exporter.validate_for_export(selection, settings.workspace_dir)


@router.get("/export/{token}")
def export_session(
    token: str,
    exporter: Annotated[ExportCoordinator, Depends(get_exporter)],
) -> Response:
    """Download the package of a validated export session."""
    return _zip_response(exporter.export_session(token))


@router.post("/validate-import", response_model=ImportPreview)
async def validate_import(
    file: Annotated[UploadFile, File(...)],
    settings: Annotated[Settings, Depends(get_settings)],
    importer: Annotated[ImportCoordinator, Depends(get_importer)],
) -> ImportPreview:
    """
    Preview the import of a ZIP package without writing to the workspace.
    """
    contents = await _read_package(file, settings)
    return importer.check_import(contents, settings.workspace_dir)


@router.post("/import", response_model=dict[str, list[VersionGroup]])
async def import_package(
    file: Annotated[UploadFile, File(...)],
    settings: Annotated[Settings, Depends(get_settings)],
    importer: Annotated[ImportCoordinator, Depends(get_importer)],
    files_to_import: Annotated[list[str] | None, Form(alias="filesToImport")] = None,
) -> dict[str, list[VersionGroup]]:
    """
    Import a ZIP package into the workspace.

    ``filesToImport`` limits the import to the listed members; all members
    are imported when it is omitted.
    """
    contents = await _read_package(file, settings)
    try:
        return importer.import_package(contents, settings.workspace_dir, files_to_import)
    except WorkspaceError:
        raise
    except Exception as e:
        logger.exception("Failed to import package %s", file.filename)
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/backup-workspace", response_model=BackupResponse)
def backup_workspace(
    settings: Annotated[Settings, Depends(get_settings)],
    scheduler: Annotated[BackupScheduler, Depends(get_backup_scheduler)],
) -> BackupResponse:
    """Write a timestamped ZIP backup of all model files in the workspace."""
    path = scheduler.backup(settings.workspace_dir, settings.backup_dir)
    return BackupResponse(fileName=path.name, path=str(path))
