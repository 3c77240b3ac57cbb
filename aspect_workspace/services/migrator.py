"""
Workspace migration.

Walks every model file of a workspace, upgrades it to the current meta-model
and writes it back, optionally moving the whole workspace to the next major
model version. Failures are recorded per file; only a workspace that cannot
be enumerated aborts the run.
"""

import logging
from collections.abc import Iterable
from pathlib import Path

from rdflib.compare import isomorphic

from aspect_workspace.adapters.documents import (
    DocumentLoader,
    DocumentSerializer,
    DocumentUpgrader,
    ParsedDocument,
)
from aspect_workspace.adapters.upgrader import rebase_version
from aspect_workspace.exceptions import Conflict, IOFailure, NotFound, WorkspaceError
from aspect_workspace.schemas.migration import (
    FileMigrationResult,
    MigrationResult,
    NamespaceMigration,
)
from aspect_workspace.utils.paths import TTL_EXTENSION, PathResolver
from aspect_workspace.utils.urn import bump_major_version

logger = logging.getLogger(__name__)


class MigrationWalker:
    """Upgrades all model files of a workspace, one file at a time."""

    def __init__(
        self,
        loader: DocumentLoader,
        upgrader: DocumentUpgrader,
        serializer: DocumentSerializer,
        reserved_file_names: Iterable[str] = ("latest.ttl",),
    ):
        self.loader = loader
        self.upgrader = upgrader
        self.serializer = serializer
        self.reserved_file_names = set(reserved_file_names)

    def migrate(self, root: Path, bump_version: bool = False) -> MigrationResult:
        """
        Migrate every model file under ``root``.

        Args:
            root: Workspace root.
            bump_version: Write each file to the next major model version
                instead of upgrading it in place.

        Raises:
            NotFound: If the workspace root does not exist.
            IOFailure: If the workspace cannot be enumerated.
        """
        root = Path(root)
        resolver = PathResolver(root)
        result = MigrationResult()
        groups: dict[str, NamespaceMigration] = {}

        for path in self._model_files(root):
            key = resolver.to_urn(path).versioned_namespace
            if key not in groups:
                groups[key] = NamespaceMigration(namespace=key)
                result.namespaces.append(groups[key])

            outcome = self._migrate_file(path, resolver, bump_version)
            groups[key].add(outcome)
            if not outcome.success:
                result.success = False

        logger.info(
            "Migrated workspace %s: %d changed, %d failed",
            root,
            len(result.changed_files),
            len(result.errors),
        )
        return result

    def _model_files(self, root: Path) -> list[Path]:
        if not root.is_dir():
            raise NotFound(f"Workspace {root} does not exist")
        try:
            return sorted(
                path
                for path in root.glob(f"*/*/*{TTL_EXTENSION}")
                if path.is_file() and path.name not in self.reserved_file_names
            )
        except OSError as exc:
            raise IOFailure(f"Could not enumerate workspace {root}: {exc}") from exc

    def _migrate_file(
        self, path: Path, resolver: PathResolver, bump_version: bool
    ) -> FileMigrationResult:
        try:
            original = self._load(path)
            upgraded = self.upgrader.upgrade(original)
            if bump_version:
                return self._write_bumped(path, upgraded, resolver)
            return self._write_in_place(path, original, upgraded)
        except (WorkspaceError, OSError) as exc:
            message = getattr(exc, "message", None) or str(exc)
            logger.warning("Migration of %s failed: %s", path, message)
            return FileMigrationResult(
                name=path.name,
                success=False,
                message=message,
                error=type(exc).__name__,
            )

    def _load(self, path: Path) -> ParsedDocument:
        document_set = self.loader.load_files([path], strict=False)
        return document_set.documents[0]

    def _write_in_place(
        self, path: Path, original: ParsedDocument, upgraded: ParsedDocument
    ) -> FileMigrationResult:
        if isomorphic(original.graph, upgraded.graph) and original.prefixes == upgraded.prefixes:
            logger.debug("%s is up to date", path)
            return FileMigrationResult(name=path.name, success=True, message="Up to date")

        self.serializer.write(upgraded, path)
        logger.info("Upgraded %s", path)
        return FileMigrationResult(name=path.name, success=True, changed=True, message="Upgraded")

    def _write_bumped(
        self, path: Path, upgraded: ParsedDocument, resolver: PathResolver
    ) -> FileMigrationResult:
        namespace, version, file_name = resolver.split(path)
        new_version = bump_major_version(version)
        destination = resolver.resolve(namespace, new_version, file_name)
        if destination.exists():
            raise Conflict(
                f"{namespace}:{new_version}:{file_name} already exists, not overwriting"
            )

        bumped = rebase_version(upgraded, resolver.to_urn(path), new_version)
        bumped.location = destination
        destination.parent.mkdir(parents=True, exist_ok=True)
        self.serializer.write(bumped, destination)
        logger.info("Migrated %s to version %s", path, new_version)
        return FileMigrationResult(
            name=file_name,
            success=True,
            changed=True,
            message=f"Written to {namespace}:{new_version}",
        )
