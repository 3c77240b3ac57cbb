"""
Turtle serializer for parsed documents.
"""

import logging
from pathlib import Path

from aspect_workspace.adapters.documents import ParsedDocument

logger = logging.getLogger(__name__)


class TurtleSerializer:
    """Writes documents back as Turtle, keeping their prefix header."""

    def to_bytes(self, document: ParsedDocument) -> bytes:
        for prefix, namespace in document.prefixes.items():
            document.graph.bind(prefix, namespace, override=True, replace=True)
        serialized = document.graph.serialize(format="turtle")
        if isinstance(serialized, bytes):
            return serialized
        return serialized.encode("utf-8")

    def write(self, document: ParsedDocument, destination: Path) -> None:
        """Serialize ``document`` to ``destination``, overwriting it."""
        destination.write_bytes(self.to_bytes(document))
        logger.debug("Wrote %s", destination)
