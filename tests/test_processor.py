"""
Tests for single-model processing.
"""

import pytest
from rdflib import Graph
from rdflib.compare import isomorphic

from aspect_workspace.exceptions import ResolutionError, UnsupportedVersion
from aspect_workspace.services.processor import ModelProcessor

from conftest import BAR_URN, FOO_TTL, FUTURE_TTL, LEGACY_TTL

FOO_TEXT = FOO_TTL.decode("utf-8")


@pytest.fixture
def processor(loader, validator, upgrader, serializer) -> ModelProcessor:
    return ModelProcessor(loader, validator, upgrader, serializer)


class TestValidateModel:
    """Tests for ModelProcessor.validate_model."""

    def test_valid_model(self, processor, populated_workspace):
        """Test that references defined in the workspace are not violations."""
        assert processor.validate_model(FOO_TEXT, populated_workspace) == []

    def test_unresolved_reference(self, processor, workspace):
        """Test that a reference missing from the workspace is a processing violation."""
        (violation,) = processor.validate_model(FOO_TEXT, workspace)

        assert violation.errorCode == "processing"
        assert violation.focusNode == BAR_URN

    def test_syntax_error(self, processor, workspace):
        """Test that invalid Turtle is reported, not raised."""
        (violation,) = processor.validate_model("not turtle", workspace)

        assert violation.errorCode == "syntax"


class TestMigrateModel:
    """Tests for ModelProcessor.migrate_model."""

    def test_legacy_model_is_upgraded(self, processor):
        """Test that BAMM models come back in the current SAMM version."""
        migrated = processor.migrate_model(LEGACY_TTL.decode("utf-8"))

        assert "urn:bamm:" not in migrated
        assert "urn:samm:org.eclipse.esmf.samm:meta-model:2.1.0#" in migrated

    def test_newer_meta_model(self, processor):
        """Test that a newer meta-model version is refused."""
        with pytest.raises(UnsupportedVersion):
            processor.migrate_model(FUTURE_TTL.decode("utf-8"))

    def test_invalid_turtle(self, processor):
        with pytest.raises(ResolutionError):
            processor.migrate_model("not turtle")


class TestFormatModel:
    """Tests for ModelProcessor.format_model."""

    def test_format_keeps_the_graph(self, processor):
        """Test that formatting changes the layout only."""
        formatted = processor.format_model(FOO_TEXT)

        assert isomorphic(
            Graph().parse(data=formatted, format="turtle"),
            Graph().parse(data=FOO_TEXT, format="turtle"),
        )
        assert "@prefix samm:" in formatted

    def test_invalid_turtle(self, processor):
        with pytest.raises(ResolutionError):
            processor.format_model("not turtle")
