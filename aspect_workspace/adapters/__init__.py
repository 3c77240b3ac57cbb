"""
Model document collaborators: loading, validation, upgrade and serialization.
"""

from aspect_workspace.adapters.documents import (
    DocumentLoader,
    DocumentSerializer,
    DocumentUpgrader,
    DocumentValidator,
    ParsedDocument,
    ParsedDocumentSet,
    Violation,
    ViolationKind,
)
from aspect_workspace.adapters.loader import TurtleDocumentLoader
from aspect_workspace.adapters.serializer import TurtleSerializer
from aspect_workspace.adapters.upgrader import MetaModelUpgrader
from aspect_workspace.adapters.validator import ReferenceValidator

__all__ = [
    "DocumentLoader",
    "DocumentSerializer",
    "DocumentUpgrader",
    "DocumentValidator",
    "MetaModelUpgrader",
    "ParsedDocument",
    "ParsedDocumentSet",
    "ReferenceValidator",
    "TurtleDocumentLoader",
    "TurtleSerializer",
    "Violation",
    "ViolationKind",
]
