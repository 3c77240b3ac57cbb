"""
Turtle document loader.

Parses Aspect Model files with rdflib and resolves references between them.
A reference ``urn:samm:<ns>:<version>#<Name>`` is looked up, per search root,
first in ``<root>/<ns>/<version>/<Name>.ttl`` and then in every other file of
that namespace directory.
"""

import logging
from collections.abc import Iterable, Sequence
from pathlib import Path

from rdflib import Graph

from aspect_workspace.adapters.documents import ParsedDocument, ParsedDocumentSet
from aspect_workspace.exceptions import ResolutionError
from aspect_workspace.utils.paths import TTL_EXTENSION
from aspect_workspace.utils.urn import ModelUrn

logger = logging.getLogger(__name__)


class TurtleDocumentLoader:
    """Loads sets of Turtle documents so that references between them resolve."""

    def __init__(self, reserved_file_names: Iterable[str] = ("latest.ttl",)):
        self.reserved_file_names = set(reserved_file_names)

    def load_bytes(self, content: bytes, location: Path | None = None) -> ParsedDocument:
        """
        Parse one Turtle document.

        Raises:
            ResolutionError: If the content is not valid Turtle.
        """
        graph = Graph()
        try:
            text = content.decode("utf-8-sig")
            graph.parse(data=text, format="turtle")
        except Exception as exc:  # rdflib raises parser-specific error types
            where = location.name if location is not None else "document"
            raise ResolutionError(f"Could not parse {where}: {exc}") from exc

        prefixes = {prefix: str(namespace) for prefix, namespace in graph.namespaces()}
        return ParsedDocument(graph=graph, location=location, prefixes=prefixes)

    def load_files(
        self,
        paths: Sequence[Path],
        search_roots: Sequence[Path] = (),
        strict: bool = True,
    ) -> ParsedDocumentSet:
        """
        Load files together and resolve their references.

        Files that are not part of ``paths`` but are needed to resolve a
        reference are searched for under ``search_roots`` and added to the set.

        Raises:
            ResolutionError: On a syntax error, or on an unresolved reference
                when ``strict`` is set.
        """
        documents = [self._load_path(path) for path in paths]
        return self.load_documents(documents, search_roots=search_roots, strict=strict)

    def load_documents(
        self,
        documents: Sequence[ParsedDocument],
        search_roots: Sequence[Path] = (),
        strict: bool = True,
    ) -> ParsedDocumentSet:
        """
        Resolve the references of already parsed documents.

        Raises:
            ResolutionError: On an unresolved reference when ``strict`` is set.
        """
        document_set = self._resolve(list(documents), search_roots)
        if strict and document_set.unresolved:
            self._raise_unresolved(document_set)
        return document_set

    def load_identities(
        self, urns: Iterable[ModelUrn], search_roots: Sequence[Path]
    ) -> ParsedDocumentSet:
        """
        Load the files defining ``urns`` plus everything they reference.

        Identities that cannot be located at all are reported in
        ``unresolved`` under the key ``"<requested>"``.
        """
        documents: list[ParsedDocument] = []
        missing: set[str] = set()
        for urn in urns:
            if any(doc.defines(urn) for doc in documents):
                continue
            document = self._locate(urn, search_roots, documents)
            if document is None:
                missing.add(str(urn))
            else:
                documents.append(document)

        document_set = self._resolve(documents, search_roots)
        for urn in missing:
            document_set.unresolved.setdefault(urn, set()).add("<requested>")
        return document_set

    def _load_path(self, path: Path) -> ParsedDocument:
        try:
            content = path.read_bytes()
        except OSError as exc:
            raise ResolutionError(f"Could not read {path.name}: {exc}") from exc
        return self.load_bytes(content, location=path)

    def _resolve(
        self, documents: list[ParsedDocument], search_roots: Sequence[Path]
    ) -> ParsedDocumentSet:
        document_set = ParsedDocumentSet(documents=list(documents))
        pending = list(documents)

        while pending:
            document = pending.pop()
            for urn in sorted(document.references):
                if document_set.find(urn) is not None:
                    continue
                located = self._locate(urn, search_roots, document_set.documents)
                if located is None:
                    referrer = document.filename or "document"
                    document_set.unresolved.setdefault(str(urn), set()).add(referrer)
                    continue
                logger.debug("Resolved %s from %s", urn, located.location)
                document_set.documents.append(located)
                pending.append(located)

        # References seen before the defining file was pulled in are resolved now.
        for key in list(document_set.unresolved):
            urn = ModelUrn.try_parse(key)
            if urn is not None and document_set.find(urn) is not None:
                del document_set.unresolved[key]

        return document_set

    def _locate(
        self,
        urn: ModelUrn,
        search_roots: Sequence[Path],
        loaded: Sequence[ParsedDocument],
    ) -> ParsedDocument | None:
        loaded_locations = {doc.location.resolve() for doc in loaded if doc.location is not None}

        for root in search_roots:
            directory = root / urn.namespace / urn.version
            if not directory.is_dir():
                continue

            preferred = directory / f"{urn.name}{TTL_EXTENSION}"
            candidates = [preferred] if preferred.is_file() else []
            candidates += sorted(
                path
                for path in directory.glob(f"*{TTL_EXTENSION}")
                if path != preferred and path.name not in self.reserved_file_names
            )

            for candidate in candidates:
                if candidate.resolve() in loaded_locations:
                    continue
                try:
                    document = self._load_path(candidate)
                except ResolutionError as exc:
                    logger.warning("Skipping unreadable candidate %s: %s", candidate, exc)
                    continue
                if document.defines(urn):
                    return document

        return None

    def _raise_unresolved(self, document_set: ParsedDocumentSet) -> None:
        details = "; ".join(
            f"{urn} (referenced by {', '.join(sorted(referrers))})"
            for urn, referrers in sorted(document_set.unresolved.items())
        )
        raise ResolutionError(f"Unresolved references: {details}")
