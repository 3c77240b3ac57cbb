"""
Package export.

Two ways to build a package:

- ``export_package`` resolves Aspect Model URNs from the workspace,
  following references transitively, and zips every file involved.
- ``validate_for_export`` validates an explicit selection of files and
  keeps their bytes in a session; ``export_session`` later zips exactly those
  bytes. The session token ties the two calls together.
"""

import logging
import uuid
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path

from aspect_workspace.adapters.documents import (
    DocumentLoader,
    DocumentSerializer,
    DocumentValidator,
    ParsedDocument,
    Violation,
    ViolationKind,
)
from aspect_workspace.exceptions import (
    InvalidIdentity,
    NotFound,
    ResolutionError,
    WorkspaceError,
)
from aspect_workspace.schemas.packaging import (
    ExportValidation,
    MissingElement,
    NamespaceFiles,
    ValidFile,
    ViolationDetail,
)
from aspect_workspace.utils.archive import PackageArchiver
from aspect_workspace.utils.paths import TTL_EXTENSION, PathResolver
from aspect_workspace.utils.urn import ModelUrn

logger = logging.getLogger(__name__)


@dataclass
class ExportSession:
    """Files captured by one validate-for-export call, keyed by package entry path."""

    token: str
    created_at: datetime
    entries: dict[str, bytes] = field(default_factory=dict)


class ExportSessionRegistry:
    """Holds export sessions until they are consumed or expire."""

    def __init__(
        self,
        ttl_minutes: int = 30,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.ttl = timedelta(minutes=ttl_minutes)
        self.clock = clock
        self._sessions: dict[str, ExportSession] = {}

    def open(self) -> ExportSession:
        self._evict_expired()
        session = ExportSession(token=uuid.uuid4().hex, created_at=self.clock())
        self._sessions[session.token] = session
        return session

    def consume(self, token: str) -> ExportSession:
        self._evict_expired()
        session = self._sessions.pop(token, None)
        if session is None:
            raise NotFound(f"No export session found for token {token}")
        return session

    def discard(self, token: str) -> None:
        self._sessions.pop(token, None)

    def _evict_expired(self) -> None:
        now = self.clock()
        expired = [
            token
            for token, session in self._sessions.items()
            if now - session.created_at >= self.ttl
        ]
        for token in expired:
            del self._sessions[token]
        if expired:
            logger.info("Dropped %d expired export sessions", len(expired))

    def __len__(self) -> int:
        return len(self._sessions)


class ExportCoordinator:
    """Builds Aspect Model packages from the workspace."""

    def __init__(
        self,
        archiver: PackageArchiver,
        loader: DocumentLoader,
        validator: DocumentValidator,
        serializer: DocumentSerializer,
        sessions: ExportSessionRegistry | None = None,
    ):
        self.archiver = archiver
        self.loader = loader
        self.validator = validator
        self.serializer = serializer
        self.sessions = sessions or ExportSessionRegistry()

    def export_package(self, urns: Iterable[str], root: Path) -> bytes:
        """
        Export the files defining ``urns`` and everything they reference.

        Raises:
            InvalidIdentity: If a value is not an Aspect Model URN.
            NotFound: If a requested URN is not defined in the workspace.
            ResolutionError: If a transitive reference cannot be resolved.
        """
        requested = [ModelUrn.parse(urn) for urn in urns]
        document_set = self.loader.load_identities(requested, search_roots=(root,))

        missing = sorted(
            urn for urn, referrers in document_set.unresolved.items() if "<requested>" in referrers
        )
        if missing or not document_set.documents:
            raise NotFound(f"No file found for {', '.join(missing or map(str, requested))}")

        if document_set.unresolved:
            details = ", ".join(sorted(document_set.unresolved))
            raise ResolutionError(f"Unresolved references: {details}")

        resolver = PathResolver(root)
        entries = {_entry_name(resolver, doc): self._content(doc) for doc in document_set}
        logger.info("Exporting %d files for %s", len(entries), ", ".join(map(str, requested)))
        return self.archiver.pack(entries)

    def validate_for_export(
        self, selection: Sequence[NamespaceFiles], root: Path
    ) -> ExportValidation:
        """
        Validate the selected workspace files and keep their bytes for export.

        Raises:
            NotFound: If a selected file does not exist.
        """
        resolver = PathResolver(root)
        session = self.sessions.open()
        report = ExportValidation(token=session.token)

        try:
            for group in selection:
                namespace, version = group.namespace.split(":", 1)
                for file_name in group.files:
                    path = resolver.resolve(namespace, version, file_name)
                    if not path.is_file():
                        raise NotFound(f"File {group.namespace}:{file_name} does not exist.")

                    content = path.read_bytes()
                    session.entries[f"{namespace}/{version}/{file_name}"] = content

                    violations = self._validate(path, root)
                    report.validFiles.append(
                        ValidFile(
                            namespace=group.namespace,
                            fileName=file_name,
                            violations=[violation_detail(v) for v in violations],
                            existing=True,
                        )
                    )
                    report.missingElements.extend(
                        _missing_elements(resolver, violations, file_name)
                    )
        except WorkspaceError:
            self.sessions.discard(session.token)
            raise

        logger.info(
            "Validated %d files for export session %s", len(session.entries), session.token
        )
        return report

    def export_session(self, token: str) -> bytes:
        """
        Pack the files captured by ``validate_for_export``.

        Raises:
            NotFound: If the token is unknown, already used, or captured nothing.
        """
        session = self.sessions.consume(token)
        if not session.entries:
            raise NotFound(f"Export session {token} contains no files")
        return self.archiver.pack(session.entries)

    def _validate(self, path: Path, root: Path) -> list[Violation]:
        try:
            document_set = self.loader.load_files([path], search_roots=(root,), strict=False)
        except ResolutionError as exc:
            return [
                Violation(message=exc.message, focus_identity=None, error_kind=ViolationKind.SYNTAX)
            ]
        return self.validator.validate(document_set)

    def _content(self, document: ParsedDocument) -> bytes:
        if document.location is not None and document.location.is_file():
            return document.location.read_bytes()
        return self.serializer.to_bytes(document)


def _missing_elements(
    resolver: PathResolver, violations: list[Violation], file_name: str
) -> list[MissingElement]:
    missing = []
    for violation in violations:
        if violation.error_kind != ViolationKind.PROCESSING or not violation.focus_identity:
            continue
        urn = ModelUrn.try_parse(violation.focus_identity)
        if urn is None:
            continue
        missing.append(
            MissingElement(
                fileName=file_name,
                focusNode=str(urn),
                missingFile=resolver.relative(resolver.resolve_identity(urn)).as_posix(),
                errorMessage=(
                    f"Referenced element: '{urn}' could not be found in "
                    f"Aspect Model file: '{file_name}'."
                ),
            )
        )
    return missing


def _entry_name(resolver: PathResolver, document: ParsedDocument) -> str:
    if document.location is not None:
        try:
            namespace, version, file_name = resolver.split(document.location)
            return f"{namespace}/{version}/{file_name}"
        except InvalidIdentity:
            pass
    urn = document.identity
    return f"{urn.namespace}/{urn.version}/{document.filename or urn.name + TTL_EXTENSION}"


def violation_detail(violation: Violation) -> ViolationDetail:
    return ViolationDetail(
        message=violation.message,
        focusNode=violation.focus_identity,
        errorCode=violation.error_kind.value,
    )
