"""
Tests for URN parsing, path resolution and namespace grouping.
"""

from pathlib import Path, PurePosixPath

import pytest

from aspect_workspace.exceptions import InvalidIdentity
from aspect_workspace.utils.grouping import group_models_by_namespace
from aspect_workspace.utils.paths import PathResolver
from aspect_workspace.utils.urn import (
    ModelUrn,
    bump_major_version,
    parse_meta_model_urn,
    version_sort_key,
)

from conftest import BAR_TTL, FOO_TTL, FOO_URN, write_model


class TestModelUrn:
    """Tests for ModelUrn parsing."""

    def test_parse(self):
        """Test parsing a model element URN."""
        urn = ModelUrn.parse(FOO_URN)

        assert urn.namespace == "com.example"
        assert urn.version == "1.0.0"
        assert urn.name == "Foo"
        assert str(urn) == FOO_URN

    def test_parse_legacy_prefix(self):
        """Test that the legacy bamm prefix is accepted."""
        urn = ModelUrn.parse("urn:bamm:com.example:1.0.0#Foo")

        assert urn.prefix == "bamm"
        assert urn.namespace_urn == "urn:bamm:com.example:1.0.0#"

    @pytest.mark.parametrize(
        "value",
        [
            "urn:samm:org.eclipse.esmf.samm:meta-model:2.1.0#Aspect",
            "urn:samm:com.example:1.0.0#",
            "urn:samm:com.example#Foo",
            "http://example.com#Foo",
        ],
    )
    def test_parse_rejects_non_model_urns(self, value):
        """Test that meta-model and malformed URNs are not model identities."""
        with pytest.raises(InvalidIdentity):
            ModelUrn.parse(value)
        assert ModelUrn.try_parse(value) is None

    def test_parse_meta_model_urn(self):
        """Test splitting a meta-model URN."""
        parsed = parse_meta_model_urn("urn:bamm:io.openmanufacturing:characteristic:2.0.0#Text")

        assert parsed == ("bamm", "io.openmanufacturing", "characteristic", "2.0.0")
        assert parse_meta_model_urn(FOO_URN) is None

    def test_bump_major_version(self):
        """Test that bumping moves to the next major version."""
        assert bump_major_version("1.2.3") == "2.0.0"
        assert bump_major_version("9.0.0") == "10.0.0"

    def test_version_sort_key_is_numeric(self):
        """Test that versions sort numerically, not lexicographically."""
        versions = ["10.0.0", "2.0.0", "1.10.0", "1.2.0"]

        assert sorted(versions, key=version_sort_key) == ["1.2.0", "1.10.0", "2.0.0", "10.0.0"]


class TestPathResolver:
    """Tests for PathResolver."""

    def test_resolve(self, tmp_path):
        """Test the three-level workspace layout."""
        resolver = PathResolver(tmp_path)

        assert resolver.resolve("com.example", "1.0.0", "Foo.ttl") == (
            tmp_path / "com.example" / "1.0.0" / "Foo.ttl"
        )

    def test_resolve_identity_defaults_file_name(self, tmp_path):
        """Test that the file name defaults to the element name."""
        resolver = PathResolver(tmp_path)

        path = resolver.resolve_identity(ModelUrn.parse(FOO_URN))

        assert path == tmp_path / "com.example" / "1.0.0" / "Foo.ttl"

    @pytest.mark.parametrize(
        "namespace,version,filename",
        [
            ("..", "1.0.0", "Foo.ttl"),
            ("com.example", "1.0.0/..", "Foo.ttl"),
            ("com.example", "1.0.0", "../Foo.ttl"),
            ("", "1.0.0", "Foo.ttl"),
        ],
    )
    def test_resolve_rejects_traversal(self, tmp_path, namespace, version, filename):
        """Test that components with separators or '..' are rejected."""
        with pytest.raises(InvalidIdentity):
            PathResolver(tmp_path).resolve(namespace, version, filename)

    def test_resolve_document_uses_content_identity(self, tmp_path, loader):
        """Test that the location comes from content, not from where the file was found."""
        misplaced = tmp_path / "downloads" / "Foo.ttl"
        misplaced.parent.mkdir()
        misplaced.write_bytes(FOO_TTL)
        document = loader.load_bytes(FOO_TTL, location=misplaced)

        target = PathResolver(tmp_path / "models").resolve_document(document)

        assert target == tmp_path / "models" / "com.example" / "1.0.0" / "Foo.ttl"

    def test_resolve_document_without_identity(self, tmp_path, loader):
        """Test that a document without model elements has no location."""
        document = loader.load_bytes(b"@prefix ex: <http://example.com#> .\nex:a ex:b ex:c .\n")

        with pytest.raises(InvalidIdentity, match="No Aspect Model URN defined"):
            PathResolver(tmp_path).resolve_document(document)

    def test_resolve_document_without_location_uses_name(self, tmp_path, loader):
        """Test that in-memory documents are named after their identity."""
        document = loader.load_bytes(BAR_TTL)

        target = PathResolver(tmp_path).resolve_document(document)

        assert target.name == "bar.ttl"

    def test_relative_and_split(self, tmp_path):
        """Test splitting a workspace path into its coordinates."""
        resolver = PathResolver(tmp_path)
        path = tmp_path / "com.example" / "1.0.0" / "Foo.ttl"

        assert resolver.relative(path) == PurePosixPath("com.example/1.0.0/Foo.ttl")
        assert resolver.split(path) == ("com.example", "1.0.0", "Foo.ttl")
        assert resolver.to_urn(path) == ModelUrn("com.example", "1.0.0", "Foo")

    def test_split_rejects_other_depths(self, tmp_path):
        """Test that paths outside the layout are rejected."""
        resolver = PathResolver(tmp_path)

        with pytest.raises(InvalidIdentity):
            resolver.split(tmp_path / "com.example" / "Foo.ttl")
        with pytest.raises(InvalidIdentity):
            resolver.relative(tmp_path.parent / "elsewhere.ttl")


class TestGrouping:
    """Tests for namespace grouping."""

    def test_grouping_is_order_independent(self, workspace):
        """Test that input order does not change the grouping."""
        paths = [
            Path("org.other/1.0.0/Z.ttl"),
            Path("com.example/2.0.0/B.ttl"),
            Path("com.example/1.0.0/A.ttl"),
            Path("com.example/10.0.0/C.ttl"),
            Path("com.example/1.0.0/B.ttl"),
        ]

        forward = group_models_by_namespace(paths, workspace)
        backward = group_models_by_namespace(list(reversed(paths)), workspace)

        assert forward == backward
        assert list(forward) == ["com.example", "org.other"]
        assert [group.version for group in forward["com.example"]] == [
            "1.0.0",
            "2.0.0",
            "10.0.0",
        ]
        assert [entry.model for entry in forward["com.example"][0].models] == ["A.ttl", "B.ttl"]

    def test_existing_reflects_workspace(self, workspace):
        """Test that existing is true only for files present on disk."""
        write_model(workspace, "com.example", "1.0.0", "Foo.ttl", FOO_TTL)

        grouping = group_models_by_namespace(
            [
                workspace / "com.example" / "1.0.0" / "Foo.ttl",
                workspace / "com.example" / "1.0.0" / "Bar.ttl",
            ],
            workspace,
        )

        models = {entry.model: entry.existing for entry in grouping["com.example"][0].models}
        assert models == {"Bar.ttl": False, "Foo.ttl": True}

    def test_paths_outside_layout_are_ignored(self, workspace):
        """Test that paths not three levels deep are left out."""
        grouping = group_models_by_namespace(
            [Path("Foo.ttl"), Path("a/b/c/d.ttl"), Path("a/1.0.0/A.ttl")], workspace
        )

        assert list(grouping) == ["a"]
