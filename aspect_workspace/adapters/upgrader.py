"""
Meta-model version upgrader.

Moves documents from the legacy BAMM meta-model and older SAMM releases to
the current SAMM meta-model by rewriting meta-model URNs and the prefixes
bound to them. Documents already on the current version come back
unchanged, so running the upgrade twice is a no-op.
"""

import logging
from collections.abc import Callable

from rdflib import Graph, URIRef

from aspect_workspace.adapters.documents import ParsedDocument
from aspect_workspace.exceptions import UnsupportedVersion
from aspect_workspace.utils.urn import ModelUrn, parse_meta_model_urn, version_sort_key

logger = logging.getLogger(__name__)

SAMM_NAMESPACE = "org.eclipse.esmf.samm"
LATEST_META_MODEL_VERSION = "2.1.0"

PREFIX_RENAMES = {
    "bamm": "samm",
    "bamm-c": "samm-c",
    "bamm-e": "samm-e",
}


def remap_document(
    document: ParsedDocument,
    mapper: Callable[[str], str],
    prefix_renames: dict[str, str] | None = None,
) -> ParsedDocument:
    """Return a copy of ``document`` with every URI passed through ``mapper``."""
    prefix_renames = prefix_renames or {}

    def remap(term):
        if isinstance(term, URIRef):
            return URIRef(mapper(str(term)))
        return term

    graph = Graph()
    prefixes: dict[str, str] = {}
    for prefix, namespace in document.prefixes.items():
        new_prefix = prefix_renames.get(prefix, prefix)
        prefixes[new_prefix] = mapper(namespace)

    for prefix, namespace in prefixes.items():
        graph.bind(prefix, namespace, override=True, replace=True)

    for subject, predicate, obj in document.graph:
        graph.add((remap(subject), remap(predicate), remap(obj)))

    return ParsedDocument(graph=graph, location=document.location, prefixes=prefixes)


def rebase_version(document: ParsedDocument, old: ModelUrn, new_version: str) -> ParsedDocument:
    """Move every element of ``old``'s namespace and version to ``new_version``."""
    old_prefix = old.namespace_urn
    new_prefix = old.with_version(new_version).namespace_urn

    def mapper(uri: str) -> str:
        if uri.startswith(old_prefix):
            return new_prefix + uri[len(old_prefix):]
        return uri

    return remap_document(document, mapper)


class MetaModelUpgrader:
    """Rewrites BAMM and older SAMM meta-model references to the latest SAMM."""

    def __init__(self, target_version: str = LATEST_META_MODEL_VERSION):
        self.target_version = target_version

    def upgrade(self, document: ParsedDocument) -> ParsedDocument:
        """
        Upgrade a document to the target meta-model version.

        Raises:
            UnsupportedVersion: If the document uses a newer meta-model.
        """
        for uri in self._uris(document):
            parsed = parse_meta_model_urn(uri)
            if parsed is None:
                continue
            prefix, _namespace, _element_type, version = parsed
            if prefix == "samm" and version_sort_key(version) > version_sort_key(
                self.target_version
            ):
                raise UnsupportedVersion(
                    f"Meta-model version {version} is newer than the supported "
                    f"version {self.target_version}"
                )

        upgraded = remap_document(document, self._map_uri, PREFIX_RENAMES)
        logger.debug("Upgraded %s", document.filename or "document")
        return upgraded

    def _map_uri(self, uri: str) -> str:
        parsed = parse_meta_model_urn(uri)
        if parsed is not None:
            _prefix, _namespace, element_type, _version = parsed
            local_name = uri.split("#", 1)[1]
            return f"urn:samm:{SAMM_NAMESPACE}:{element_type}:{self.target_version}#{local_name}"

        if uri.startswith("urn:bamm:"):
            urn = ModelUrn.try_parse(uri)
            if urn is not None:
                return str(ModelUrn(urn.namespace, urn.version, urn.name, prefix="samm"))
            # Namespace prefixes end at '#' without an element name.
            if uri.endswith("#"):
                return "urn:samm:" + uri[len("urn:bamm:"):]

        return uri

    @staticmethod
    def _uris(document: ParsedDocument):
        yield from document.prefixes.values()
        for triple in document.graph:
            for term in triple:
                if isinstance(term, URIRef):
                    yield str(term)
