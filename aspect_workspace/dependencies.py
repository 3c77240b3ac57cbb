"""
FastAPI dependency injection setup.

Provides factory functions for service instances used across routes.
"""

from functools import lru_cache

from aspect_workspace.adapters import (
    MetaModelUpgrader,
    ReferenceValidator,
    TurtleDocumentLoader,
    TurtleSerializer,
)
from aspect_workspace.config import get_settings
from aspect_workspace.services.backup import BackupScheduler
from aspect_workspace.services.exporter import ExportCoordinator, ExportSessionRegistry
from aspect_workspace.services.importer import ImportCoordinator
from aspect_workspace.services.migrator import MigrationWalker
from aspect_workspace.services.processor import ModelProcessor
from aspect_workspace.services.store import ModelStore, create_model_store
from aspect_workspace.utils.archive import PackageArchiver
from aspect_workspace.utils.moves import SequentialMoveApplier


@lru_cache
def get_archiver() -> PackageArchiver:
    """Get cached archiver with the configured size limit."""
    settings = get_settings()
    return PackageArchiver(
        max_uncompressed_bytes=settings.max_package_uncompressed_mb * 1024 * 1024
    )


@lru_cache
def get_loader() -> TurtleDocumentLoader:
    """Get cached document loader instance."""
    return TurtleDocumentLoader()


@lru_cache
def get_importer() -> ImportCoordinator:
    """Get cached import coordinator instance."""
    settings = get_settings()
    return ImportCoordinator(
        archiver=get_archiver(),
        loader=get_loader(),
        move_applier=SequentialMoveApplier(),
        scratch_dir=settings.scratch_dir,
    )


@lru_cache
def get_exporter() -> ExportCoordinator:
    """
    Get cached export coordinator instance.

    The instance owns the export session registry, so it must be shared
    between the validate and download requests.
    """
    settings = get_settings()
    return ExportCoordinator(
        archiver=get_archiver(),
        loader=get_loader(),
        validator=ReferenceValidator(),
        serializer=TurtleSerializer(),
        sessions=ExportSessionRegistry(ttl_minutes=settings.export_session_ttl_minutes),
    )


@lru_cache
def get_migrator() -> MigrationWalker:
    """Get cached migration walker instance."""
    return MigrationWalker(
        loader=get_loader(),
        upgrader=MetaModelUpgrader(),
        serializer=TurtleSerializer(),
    )


@lru_cache
def get_backup_scheduler() -> BackupScheduler:
    """Get cached backup scheduler instance."""
    return BackupScheduler(archiver=get_archiver())


@lru_cache
def get_model_store() -> ModelStore:
    """Get the model store selected by the ``model_store`` setting."""
    settings = get_settings()
    return create_model_store(settings.model_store, settings.workspace_dir, get_loader())


@lru_cache
def get_processor() -> ModelProcessor:
    """Get cached single-model processor instance."""
    return ModelProcessor(
        loader=get_loader(),
        validator=ReferenceValidator(),
        upgrader=MetaModelUpgrader(),
        serializer=TurtleSerializer(),
    )
