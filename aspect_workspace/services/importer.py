"""
Package import.

Importing is a two-phase flow: ``check_import`` extracts a package, works out
where every model file would land and reports it without touching the
workspace; ``import_package`` repeats the resolution and moves the selected
files into place.
"""

import logging
import tempfile
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from pathlib import Path

from aspect_workspace.adapters.documents import DocumentLoader, ParsedDocument
from aspect_workspace.exceptions import Conflict, InvalidIdentity, ResolutionError
from aspect_workspace.schemas.grouping import NamespaceGrouping
from aspect_workspace.schemas.packaging import FileError, ImportPreview
from aspect_workspace.utils.archive import PackageArchiver
from aspect_workspace.utils.grouping import group_models_by_namespace
from aspect_workspace.utils.moves import MoveApplier, SequentialMoveApplier
from aspect_workspace.utils.paths import TTL_EXTENSION, PathResolver

logger = logging.getLogger(__name__)


class ImportCoordinator:
    """Resolves package members to their canonical workspace locations and imports them."""

    def __init__(
        self,
        archiver: PackageArchiver,
        loader: DocumentLoader,
        move_applier: MoveApplier | None = None,
        scratch_dir: Path | None = None,
    ):
        self.archiver = archiver
        self.loader = loader
        self.move_applier = move_applier or SequentialMoveApplier()
        self.scratch_dir = scratch_dir

    def check_import(self, data: bytes, root: Path) -> ImportPreview:
        """
        Preview an import.

        Files whose identity cannot be resolved, that fail to parse or that
        collide with another member are reported in ``errors`` instead of
        failing the preview. Models already present in the workspace are
        flagged ``existing``.
        """
        resolver = PathResolver(root)
        errors: list[FileError] = []

        with self._extracted(data) as (scratch, extracted):
            model_files, ignored = _split_model_files(extracted, scratch)

            parseable = []
            for path in model_files:
                try:
                    self.loader.load_files([path], strict=False)
                except ResolutionError as exc:
                    errors.append(FileError(file=_member_name(path, scratch), message=exc.message))
                else:
                    parseable.append(path)

            document_set = self.loader.load_files(parseable, search_roots=(root,), strict=False)
            members = _package_documents(document_set, scratch)

            targets: dict[Path, Path] = {}
            for document in members:
                member = _member_name(document.location, scratch)
                try:
                    target = resolver.resolve_document(document)
                except InvalidIdentity as exc:
                    errors.append(FileError(file=member, message=exc.message))
                    continue
                if target in targets.values():
                    errors.append(
                        FileError(
                            file=member,
                            message=(
                                "Another file in the package also resolves to "
                                f"{resolver.relative(target)}"
                            ),
                        )
                    )
                    continue
                targets[document.location] = target

            for document in members:
                member = _member_name(document.location, scratch)
                for urn in sorted(str(reference) for reference in document.references):
                    if urn in document_set.unresolved:
                        errors.append(
                            FileError(
                                file=member,
                                message=f"Referenced element: '{urn}' could not be found.",
                            )
                        )

            namespaces = group_models_by_namespace(targets.values(), root)

        logger.info(
            "Checked package: %d model files, %d errors, %d ignored",
            len(targets),
            len(errors),
            len(ignored),
        )
        return ImportPreview(namespaces=namespaces, errors=errors, ignoredFiles=ignored)

    def import_package(
        self,
        data: bytes,
        root: Path,
        files_to_import: Sequence[str] | None = None,
    ) -> NamespaceGrouping:
        """
        Import a package into the workspace at ``root``.

        Args:
            data: ZIP archive bytes.
            root: Workspace root.
            files_to_import: Members to write, as ``namespace/version/file``,
                ``namespace:version:file`` or a bare file name. ``None``
                imports every member.

        Returns:
            Namespace grouping of the written files.

        Raises:
            ResolutionError: If the package does not parse or has unresolved
                references.
            InvalidIdentity: If a selected member has no identity.
            Conflict: If two selected members resolve to the same location.
        """
        resolver = PathResolver(root)
        selection = _normalize_selection(files_to_import)

        with self._extracted(data) as (scratch, extracted):
            model_files, _ignored = _split_model_files(extracted, scratch)
            selected = self._select(model_files, scratch, resolver, selection)
            # Unselected members stay reachable as reference targets only.
            document_set = self.loader.load_files(
                selected, search_roots=(scratch, root), strict=True
            )
            selected_locations = {path.resolve() for path in selected}

            moves: list[tuple[Path, Path]] = []
            for document in _package_documents(document_set, scratch):
                if document.location.resolve() not in selected_locations:
                    continue
                target = resolver.resolve_document(document)
                if any(target == staged for _source, staged in moves):
                    raise Conflict(
                        f"More than one package file resolves to {resolver.relative(target)}"
                    )
                moves.append((document.location, target))

            written = self.move_applier.apply_moves(moves)

        logger.info("Imported %d files into %s", len(written), root)
        return group_models_by_namespace(written, root)

    def _select(
        self,
        model_files: list[Path],
        scratch: Path,
        resolver: PathResolver,
        selection: set[str] | None,
    ) -> list[Path]:
        """
        Pick the members to import.

        A member is selected by its path in the package or by the workspace
        location its identity resolves to. Members that do not parse or have
        no identity can only be selected by their package path.
        """
        if selection is None:
            return list(model_files)

        selected = []
        for path in model_files:
            if _is_selected(_member_name(path, scratch), selection):
                selected.append(path)
                continue
            try:
                (document,) = self.loader.load_files([path], strict=False)
                target = resolver.resolve_document(document)
            except (ResolutionError, InvalidIdentity) as exc:
                logger.debug("Not selecting %s: %s", _member_name(path, scratch), exc.message)
                continue
            if _is_selected(resolver.relative(target).as_posix(), selection):
                selected.append(path)
        return selected

    @contextmanager
    def _extracted(self, data: bytes) -> Iterator[tuple[Path, list[Path]]]:
        if self.scratch_dir is not None:
            self.scratch_dir.mkdir(parents=True, exist_ok=True)
        with tempfile.TemporaryDirectory(prefix="aspect-package-", dir=self.scratch_dir) as tmp:
            scratch = Path(tmp)
            extracted = self.archiver.unpack(data, scratch)
            yield scratch, extracted


def _split_model_files(extracted: list[Path], scratch: Path) -> tuple[list[Path], list[str]]:
    model_files = [path for path in extracted if path.suffix == TTL_EXTENSION]
    ignored = [_member_name(path, scratch) for path in extracted if path.suffix != TTL_EXTENSION]
    return model_files, ignored


def _package_documents(document_set, scratch: Path) -> list[ParsedDocument]:
    """Documents that came from the package, not from workspace resolution."""
    scratch = scratch.resolve()
    members = []
    for document in document_set:
        if document.location is None:
            continue
        try:
            document.location.resolve().relative_to(scratch)
        except ValueError:
            continue
        members.append(document)
    return members


def _member_name(path: Path, scratch: Path) -> str:
    try:
        return path.resolve().relative_to(scratch.resolve()).as_posix()
    except ValueError:
        return path.name


def _normalize_selection(files_to_import: Sequence[str] | None) -> set[str] | None:
    if files_to_import is None:
        return None
    return {
        entry.strip().replace(":", "/").replace("\\", "/").strip("/") for entry in files_to_import
    }


def _is_selected(relative_target: str, selection: set[str]) -> bool:
    return any(
        relative_target == entry or relative_target.endswith("/" + entry) for entry in selection
    )
