"""
Workspace services for the Aspect Model workspace.

- Importer: package preview and import into canonical locations
- Exporter: transitive package export and validate-then-export sessions
- Migrator: workspace-wide meta-model upgrade with optional version bump
- Backup: timestamped workspace snapshots
- Store: single-file model CRUD
- Processor: validation, migration and formatting of a posted model
"""

from aspect_workspace.services.backup import BackupScheduler
from aspect_workspace.services.exporter import ExportCoordinator, ExportSessionRegistry
from aspect_workspace.services.importer import ImportCoordinator
from aspect_workspace.services.migrator import MigrationWalker
from aspect_workspace.services.processor import ModelProcessor
from aspect_workspace.services.store import (
    FileSystemModelStore,
    InMemoryModelStore,
    ModelStore,
    create_model_store,
)

__all__ = [
    "BackupScheduler",
    "ExportCoordinator",
    "ExportSessionRegistry",
    "ImportCoordinator",
    "MigrationWalker",
    "ModelProcessor",
    "ModelStore",
    "FileSystemModelStore",
    "InMemoryModelStore",
    "create_model_store",
]
