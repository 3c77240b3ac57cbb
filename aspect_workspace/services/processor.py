"""
Single-model processing: validation, migration and formatting of a Turtle
document that is posted directly instead of being read from the workspace.
"""

import logging
from pathlib import Path

from aspect_workspace.adapters.documents import (
    DocumentLoader,
    DocumentSerializer,
    DocumentUpgrader,
    DocumentValidator,
    ParsedDocument,
    Violation,
    ViolationKind,
)
from aspect_workspace.exceptions import ResolutionError
from aspect_workspace.schemas.packaging import ViolationDetail
from aspect_workspace.services.exporter import violation_detail

logger = logging.getLogger(__name__)


class ModelProcessor:
    """Validates, upgrades and reformats individual model documents."""

    def __init__(
        self,
        loader: DocumentLoader,
        validator: DocumentValidator,
        upgrader: DocumentUpgrader,
        serializer: DocumentSerializer,
    ):
        self.loader = loader
        self.validator = validator
        self.upgrader = upgrader
        self.serializer = serializer

    def validate_model(self, content: str, root: Path) -> list[ViolationDetail]:
        """
        Validate a model, resolving its references against the workspace.

        A syntax error is reported as a violation, not raised. An empty list
        means the model is valid.
        """
        try:
            document = self._parse(content)
        except ResolutionError as exc:
            violations = [
                Violation(message=exc.message, focus_identity=None, error_kind=ViolationKind.SYNTAX)
            ]
        else:
            document_set = self.loader.load_documents(
                [document], search_roots=(root,), strict=False
            )
            violations = self.validator.validate(document_set)

        logger.info("Validated model: %d violations", len(violations))
        return [violation_detail(violation) for violation in violations]

    def migrate_model(self, content: str) -> str:
        """
        Upgrade a model to the current meta-model version.

        Raises:
            ResolutionError: If the content is not valid Turtle.
            UnsupportedVersion: If the model uses a newer meta-model.
        """
        upgraded = self.upgrader.upgrade(self._parse(content))
        return self._serialize(upgraded)

    def format_model(self, content: str) -> str:
        """
        Reserialize a model with the canonical Turtle layout.

        Raises:
            ResolutionError: If the content is not valid Turtle.
        """
        return self._serialize(self._parse(content))

    def _parse(self, content: str) -> ParsedDocument:
        return self.loader.load_bytes(content.encode("utf-8"))

    def _serialize(self, document: ParsedDocument) -> str:
        return self.serializer.to_bytes(document).decode("utf-8")
