"""
Reference validator.

Reports structural problems a package or export cannot work around:
documents without a model element, elements without a type, and
references no loaded document defines. Full SHACL validation against the
meta-model is not performed here.
"""

import logging

from rdflib import RDF, URIRef

from aspect_workspace.adapters.documents import ParsedDocumentSet, Violation, ViolationKind

logger = logging.getLogger(__name__)


class ReferenceValidator:
    """Validates the structure and reference closure of a document set."""

    def validate(self, documents: ParsedDocumentSet) -> list[Violation]:
        violations: list[Violation] = []

        for document in documents:
            name = document.filename or "document"
            elements = document.elements
            if not elements:
                violations.append(
                    Violation(
                        message=f"No Aspect Model element defined in '{name}'.",
                        focus_identity=None,
                        error_kind=ViolationKind.STRUCTURE,
                    )
                )
                continue

            for urn in elements:
                if (URIRef(str(urn)), RDF.type, None) not in document.graph:
                    violations.append(
                        Violation(
                            message=f"Element '{urn}' in '{name}' has no type.",
                            focus_identity=str(urn),
                            error_kind=ViolationKind.STRUCTURE,
                        )
                    )

        for urn, referrers in sorted(documents.unresolved.items()):
            for referrer in sorted(referrers):
                violations.append(
                    Violation(
                        message=(
                            f"Referenced element: '{urn}' could not be found "
                            f"in Aspect Model file: '{referrer}'."
                        ),
                        focus_identity=urn,
                        error_kind=ViolationKind.PROCESSING,
                    )
                )

        logger.debug("Validated %d documents: %d violations", len(documents), len(violations))
        return violations
