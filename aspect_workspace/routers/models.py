"""
Model endpoints for single-file CRUD, the namespace view, migration and
validation or formatting of a posted model.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import PlainTextResponse, Response

from aspect_workspace.config import Settings, get_settings
from aspect_workspace.dependencies import get_migrator, get_model_store, get_processor
from aspect_workspace.exceptions import WorkspaceError
from aspect_workspace.schemas.grouping import VersionGroup
from aspect_workspace.schemas.migration import MigrationResult
from aspect_workspace.schemas.packaging import ViolationDetail
from aspect_workspace.services.migrator import MigrationWalker
from aspect_workspace.services.processor import ModelProcessor
from aspect_workspace.services.store import ModelStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/models", tags=["models"])

TURTLE_MEDIA_TYPE = "text/turtle"


async def _read_model(request: Request) -> str:
    body = await request.body()
    if not body.strip():
        raise HTTPException(status_code=400, detail="Request body must contain a model")

    try:
        return body.decode("utf-8")
    except UnicodeDecodeError:
        raise HTTPException(status_code=400, detail="Model must be UTF-8 encoded")


@router.get("", response_class=PlainTextResponse)
def get_model(
    namespace: Annotated[str, Query(description="Model namespace")],
    version: Annotated[str, Query(description="Model version")],
    file_name: Annotated[str, Query(alias="fileName")],
    store: Annotated[ModelStore, Depends(get_model_store)],
) -> PlainTextResponse:
    """Get the Turtle content of a model file."""
    content = store.get_model(namespace, version, file_name)
    return PlainTextResponse(content, media_type=TURTLE_MEDIA_TYPE)


@router.post("")
async def save_model(
    request: Request,
    store: Annotated[ModelStore, Depends(get_model_store)],
    namespace: Annotated[str | None, Query()] = None,
    version: Annotated[str | None, Query()] = None,
    file_name: Annotated[str | None, Query(alias="fileName")] = None,
) -> dict:
    """
    Save a model file from the Turtle request body.

    Namespace, version and file name default to the identity of the model.
    """
    content = await _read_model(request)
    path = store.save_model(content, namespace=namespace, version=version, file_name=file_name)
    return {"path": str(path)}


@router.delete("", status_code=204)
def delete_model(
    namespace: Annotated[str, Query()],
    version: Annotated[str, Query()],
    file_name: Annotated[str, Query(alias="fileName")],
    store: Annotated[ModelStore, Depends(get_model_store)],
) -> Response:
    """Delete a model file."""
    store.delete_model(namespace, version, file_name)
    return Response(status_code=204)


@router.get("/namespaces", response_model=dict[str, list[VersionGroup]])
def get_namespaces(
    store: Annotated[ModelStore, Depends(get_model_store)],
) -> dict[str, list[VersionGroup]]:
    """List all model files grouped by namespace and version."""
    return store.list_namespaces()


@router.post("/migrate-workspace", response_model=MigrationResult)
def migrate_workspace(
    settings: Annotated[Settings, Depends(get_settings)],
    migrator: Annotated[MigrationWalker, Depends(get_migrator)],
    bump_version: Annotated[
        bool, Query(description="Move every file to the next major version")
    ] = False,
) -> MigrationResult:
    """
    Upgrade every model file of the workspace to the current meta-model.

    Per-file failures are part of the result; the call itself only fails if
    the workspace cannot be read.
    """
    try:
        return migrator.migrate(settings.workspace_dir, bump_version=bump_version)
    except WorkspaceError:
        raise
    except Exception as e:
        logger.exception("Failed to migrate workspace %s", settings.workspace_dir)
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/validate", response_model=list[ViolationDetail])
async def validate_model(
    request: Request,
    settings: Annotated[Settings, Depends(get_settings)],
    processor: Annotated[ModelProcessor, Depends(get_processor)],
) -> list[ViolationDetail]:
    """
    Validate the Turtle request body against the workspace.

    Returns an empty list for a valid model.
    """
    content = await _read_model(request)
    return processor.validate_model(content, settings.workspace_dir)


@router.post("/migrate", response_class=PlainTextResponse)
async def migrate_model(
    request: Request,
    processor: Annotated[ModelProcessor, Depends(get_processor)],
) -> PlainTextResponse:
    """Upgrade the Turtle request body to the current meta-model version."""
    content = await _read_model(request)
    return PlainTextResponse(processor.migrate_model(content), media_type=TURTLE_MEDIA_TYPE)


@router.post("/format", response_class=PlainTextResponse)
async def format_model(
    request: Request,
    processor: Annotated[ModelProcessor, Depends(get_processor)],
) -> PlainTextResponse:
    """Reformat the Turtle request body."""
    content = await _read_model(request)
    return PlainTextResponse(processor.format_model(content), media_type=TURTLE_MEDIA_TYPE)
