"""
Model storage.

CRUD access to single model files, by ``namespace``, ``version`` and file
name. Two strategies are available: the workspace directory on disk and a
process-local in-memory store. ``create_model_store`` picks one by name.
"""

import logging
from pathlib import Path, PurePosixPath
from typing import Protocol

from aspect_workspace.adapters.documents import DocumentLoader
from aspect_workspace.exceptions import IOFailure, NotFound
from aspect_workspace.schemas.grouping import NamespaceGrouping
from aspect_workspace.utils.grouping import group_models_by_namespace
from aspect_workspace.utils.paths import TTL_EXTENSION, PathResolver

logger = logging.getLogger(__name__)

MODEL_STORES = ("filesystem", "memory")


class ModelStore(Protocol):
    def get_model(self, namespace: str, version: str, file_name: str) -> str: ...

    def save_model(
        self,
        content: str,
        namespace: str | None = None,
        version: str | None = None,
        file_name: str | None = None,
    ) -> PurePosixPath: ...

    def delete_model(self, namespace: str, version: str, file_name: str) -> None: ...

    def list_namespaces(self) -> NamespaceGrouping: ...


def _coordinates(
    loader: DocumentLoader,
    content: str,
    namespace: str | None,
    version: str | None,
    file_name: str | None,
) -> tuple[str, str, str]:
    """Fill in missing coordinates from the identity inside ``content``."""
    document = loader.load_bytes(content.encode("utf-8"))
    if namespace and version and file_name:
        return namespace, version, file_name
    identity = document.identity
    return (
        namespace or identity.namespace,
        version or identity.version,
        file_name or f"{identity.name}{TTL_EXTENSION}",
    )


class FileSystemModelStore:
    """Model files stored in the workspace directory."""

    def __init__(
        self,
        root: Path,
        loader: DocumentLoader,
        reserved_file_names: tuple[str, ...] = ("latest.ttl",),
    ):
        self.root = Path(root)
        self.resolver = PathResolver(self.root)
        self.loader = loader
        self.reserved_file_names = set(reserved_file_names)

    def get_model(self, namespace: str, version: str, file_name: str) -> str:
        path = self.resolver.resolve(namespace, version, file_name)
        if not path.is_file():
            raise NotFound(f"File {namespace}:{version}:{file_name} does not exist.")
        return path.read_text(encoding="utf-8")

    def save_model(
        self,
        content: str,
        namespace: str | None = None,
        version: str | None = None,
        file_name: str | None = None,
    ) -> PurePosixPath:
        """
        Write a model file, overwriting an existing one.

        Coordinates that are not given are taken from the model's identity.

        Raises:
            ResolutionError: If the content is not valid Turtle.
            InvalidIdentity: If coordinates are missing and the content
                defines no model element.
        """
        namespace, version, file_name = _coordinates(
            self.loader, content, namespace, version, file_name
        )
        path = self.resolver.resolve(namespace, version, file_name)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        except OSError as exc:
            raise IOFailure(f"Could not write {path}: {exc}") from exc
        logger.info("Saved %s", path)
        return self.resolver.relative(path)

    def delete_model(self, namespace: str, version: str, file_name: str) -> None:
        """Delete a model file and the version and namespace folders it leaves empty."""
        path = self.resolver.resolve(namespace, version, file_name)
        if not path.is_file():
            raise NotFound(f"File {namespace}:{version}:{file_name} does not exist.")
        try:
            path.unlink()
            for directory in (path.parent, path.parent.parent):
                if any(directory.iterdir()):
                    break
                directory.rmdir()
                logger.debug("Removed empty directory %s", directory)
        except OSError as exc:
            raise IOFailure(f"Could not delete {path}: {exc}") from exc
        logger.info("Deleted %s", path)

    def list_namespaces(self) -> NamespaceGrouping:
        if not self.root.is_dir():
            return {}
        paths = [
            path
            for path in self.root.glob(f"*/*/*{TTL_EXTENSION}")
            if path.is_file() and path.name not in self.reserved_file_names
        ]
        return group_models_by_namespace(paths, self.root)


class InMemoryModelStore:
    """Model files kept in memory, keyed by ``namespace/version/file``."""

    def __init__(self, loader: DocumentLoader, models: dict[str, str] | None = None):
        self.loader = loader
        self._models: dict[str, str] = dict(models or {})
        self.resolver = PathResolver(Path("."))

    def get_model(self, namespace: str, version: str, file_name: str) -> str:
        key = self._key(namespace, version, file_name)
        if key not in self._models:
            raise NotFound(f"File {namespace}:{version}:{file_name} does not exist.")
        return self._models[key]

    def save_model(
        self,
        content: str,
        namespace: str | None = None,
        version: str | None = None,
        file_name: str | None = None,
    ) -> PurePosixPath:
        namespace, version, file_name = _coordinates(
            self.loader, content, namespace, version, file_name
        )
        key = self._key(namespace, version, file_name)
        self._models[key] = content
        logger.debug("Stored %s in memory", key)
        return PurePosixPath(key)

    def delete_model(self, namespace: str, version: str, file_name: str) -> None:
        key = self._key(namespace, version, file_name)
        if self._models.pop(key, None) is None:
            raise NotFound(f"File {namespace}:{version}:{file_name} does not exist.")

    def list_namespaces(self) -> NamespaceGrouping:
        return group_models_by_namespace(
            [Path(key) for key in self._models],
            Path("."),
            exists=lambda path: path.as_posix() in self._models,
        )

    def _key(self, namespace: str, version: str, file_name: str) -> str:
        return self.resolver.resolve(namespace, version, file_name).as_posix()


def create_model_store(kind: str, root: Path, loader: DocumentLoader) -> ModelStore:
    """Create the model store named by ``kind`` (``filesystem`` or ``memory``)."""
    if kind == "filesystem":
        return FileSystemModelStore(root, loader)
    if kind == "memory":
        return InMemoryModelStore(loader)
    raise ValueError(f"Unknown model store '{kind}', expected one of {', '.join(MODEL_STORES)}")
