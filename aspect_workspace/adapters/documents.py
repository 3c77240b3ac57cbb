"""
Document types and collaborator protocols.

The services talk to model loading, validation, upgrading and serialization
only through the protocols defined here. The default rdflib-backed
implementations live next to this module.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Protocol

from rdflib import RDF, Graph, URIRef

from aspect_workspace.exceptions import InvalidIdentity
from aspect_workspace.utils.urn import ModelUrn

ASPECT_TYPE_NAME = "Aspect"


@dataclass
class ParsedDocument:
    """A parsed model file: graph, prefix header and optional source location."""

    graph: Graph
    location: Path | None = None
    prefixes: dict[str, str] = field(default_factory=dict)

    @property
    def elements(self) -> list[ModelUrn]:
        """Model elements defined (used as subject) in this document, sorted."""
        found = {
            urn
            for subject in set(self.graph.subjects())
            if isinstance(subject, URIRef)
            for urn in [ModelUrn.try_parse(str(subject))]
            if urn is not None
        }
        return sorted(found)

    @property
    def references(self) -> set[ModelUrn]:
        """Model elements referenced by this document but not defined in it."""
        defined = {str(urn) for urn in self.elements}
        referenced = set()
        for obj in self.graph.objects():
            if not isinstance(obj, URIRef) or str(obj) in defined:
                continue
            urn = ModelUrn.try_parse(str(obj))
            if urn is not None:
                referenced.add(urn)
        return referenced

    @property
    def filename(self) -> str | None:
        return self.location.name if self.location is not None else None

    def defines(self, urn: ModelUrn) -> bool:
        return (URIRef(str(urn)), None, None) in self.graph

    @property
    def identity(self) -> ModelUrn:
        """
        The semantic identity of this document.

        Prefers the Aspect element, then the element named like the file,
        then the first element in sorted order.

        Raises:
            InvalidIdentity: If the document defines no model element.
        """
        elements = self.elements
        if not elements:
            where = f" in {self.filename}" if self.filename else ""
            raise InvalidIdentity(f"Invalid file detected{where} - No Aspect Model URN defined")

        for urn in elements:
            for rdf_type in self.graph.objects(URIRef(str(urn)), RDF.type):
                if str(rdf_type).endswith(f"#{ASPECT_TYPE_NAME}"):
                    return urn

        if self.location is not None:
            stem = self.location.stem
            for urn in elements:
                if urn.name == stem:
                    return urn

        return elements[0]


@dataclass
class ParsedDocumentSet:
    """Documents loaded together plus the references none of them define."""

    documents: list[ParsedDocument] = field(default_factory=list)
    unresolved: dict[str, set[str]] = field(default_factory=dict)

    def __iter__(self):
        return iter(self.documents)

    def __len__(self) -> int:
        return len(self.documents)

    def find(self, urn: ModelUrn) -> ParsedDocument | None:
        return next((doc for doc in self.documents if doc.defines(urn)), None)


class ViolationKind(str, Enum):
    SYNTAX = "syntax"
    PROCESSING = "processing"
    STRUCTURE = "structure"


@dataclass(frozen=True)
class Violation:
    message: str
    focus_identity: str | None
    error_kind: ViolationKind


class DocumentLoader(Protocol):
    def load_files(
        self,
        paths: Sequence[Path],
        search_roots: Sequence[Path] = (),
        strict: bool = True,
    ) -> ParsedDocumentSet: ...

    def load_documents(
        self,
        documents: Sequence[ParsedDocument],
        search_roots: Sequence[Path] = (),
        strict: bool = True,
    ) -> ParsedDocumentSet: ...

    def load_identities(
        self, urns: Iterable[ModelUrn], search_roots: Sequence[Path]
    ) -> ParsedDocumentSet: ...

    def load_bytes(self, content: bytes, location: Path | None = None) -> ParsedDocument: ...


class DocumentValidator(Protocol):
    def validate(self, documents: ParsedDocumentSet) -> list[Violation]: ...


class DocumentUpgrader(Protocol):
    def upgrade(self, document: ParsedDocument) -> ParsedDocument: ...


class DocumentSerializer(Protocol):
    def write(self, document: ParsedDocument, destination: Path) -> None: ...

    def to_bytes(self, document: ParsedDocument) -> bytes: ...
