"""
Canonical workspace paths for model files.

Every model file lives at ``<root>/<namespace>/<version>/<filename>``, with
namespace and version taken from the semantic identity inside the document
rather than from wherever the file happened to be found.
"""

import logging
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING

from aspect_workspace.exceptions import InvalidIdentity
from aspect_workspace.utils.urn import ModelUrn

if TYPE_CHECKING:
    from aspect_workspace.adapters.documents import ParsedDocument

logger = logging.getLogger(__name__)

TTL_EXTENSION = ".ttl"


class PathResolver:
    """Derives the fixed three-level location of a model file under a root."""

    def __init__(self, root: Path):
        self.root = Path(root)

    def resolve(self, namespace: str, version: str, filename: str) -> Path:
        _check_component("namespace", namespace)
        _check_component("version", version)
        _check_component("file name", filename)
        return self.root / namespace / version / filename

    def resolve_identity(self, urn: ModelUrn, filename: str | None = None) -> Path:
        return self.resolve(urn.namespace, urn.version, filename or f"{urn.name}{TTL_EXTENSION}")

    def resolve_document(self, document: "ParsedDocument") -> Path:
        """
        Location for a parsed document.

        The file name is kept from the document's source location when it
        has one; in-memory documents are named after their identity.

        Raises:
            InvalidIdentity: If the document defines no model element.
        """
        return self.resolve_identity(document.identity, document.filename)

    def relative(self, path: Path) -> PurePosixPath:
        """Path of ``path`` relative to the root, with forward slashes."""
        try:
            relative = Path(path).resolve().relative_to(self.root.resolve())
        except ValueError as exc:
            raise InvalidIdentity(f"{path} is not inside the workspace {self.root}") from exc
        return PurePosixPath(*relative.parts)

    def split(self, path: Path) -> tuple[str, str, str]:
        """
        Split a workspace path into (namespace, version, file name).

        Raises:
            InvalidIdentity: If the path is not exactly three levels deep.
        """
        parts = self.relative(path).parts
        if len(parts) != 3:
            raise InvalidIdentity(
                f"{path} does not follow the <namespace>/<version>/<file> layout"
            )
        return parts[0], parts[1], parts[2]

    def to_urn(self, path: Path) -> ModelUrn:
        """Identity implied by a file's location (not by its content)."""
        namespace, version, filename = self.split(path)
        return ModelUrn(namespace, version, Path(filename).stem)


def _check_component(label: str, value: str) -> None:
    if not value or value in (".", "..") or "/" in value or "\\" in value:
        raise InvalidIdentity(f"Invalid {label}: {value!r}")
