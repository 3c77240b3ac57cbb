"""
Tests for workspace migration.
"""

from unittest.mock import patch

import pytest

from aspect_workspace.exceptions import NotFound
from aspect_workspace.services.migrator import MigrationWalker

from conftest import BAR_TTL, FOO_TTL, FUTURE_TTL, LEGACY_TTL, write_model


@pytest.fixture
def migrator(loader, upgrader, serializer) -> MigrationWalker:
    return MigrationWalker(loader, upgrader, serializer)


def outcomes(result):
    return {
        f"{group.namespace}:{outcome.name}": outcome
        for group in result.namespaces
        for outcome in group.files
    }


class TestMigrateInPlace:
    """Tests for MigrationWalker.migrate without version bump."""

    def test_current_files_are_unchanged(self, migrator, populated_workspace):
        """Test that files already on the current meta-model are not rewritten."""
        result = migrator.migrate(populated_workspace)

        assert result.success
        assert result.changed_files == []
        assert [group.namespace for group in result.namespaces] == ["com.example:1.0.0"]
        assert [outcome.name for outcome in result.namespaces[0].files] == ["Bar.ttl", "Foo.ttl"]
        foo = populated_workspace / "com.example" / "1.0.0" / "Foo.ttl"
        assert foo.read_bytes() == FOO_TTL

    def test_legacy_file_is_upgraded(self, migrator, workspace):
        """Test that BAMM models are rewritten to the current SAMM meta-model."""
        path = write_model(workspace, "com.example", "1.0.0", "Legacy.ttl", LEGACY_TTL)

        result = migrator.migrate(workspace)

        assert result.success
        assert result.changed_files == ["com.example:1.0.0:Legacy.ttl"]
        content = path.read_text(encoding="utf-8")
        assert "urn:bamm:" not in content
        assert "urn:samm:org.eclipse.esmf.samm:meta-model:2.1.0#" in content
        assert "urn:samm:com.example:1.0.0#" in content

    def test_migration_is_idempotent(self, migrator, workspace):
        """Test that a second run changes nothing."""
        path = write_model(workspace, "com.example", "1.0.0", "Legacy.ttl", LEGACY_TTL)

        migrator.migrate(workspace)
        first = path.read_bytes()
        second_result = migrator.migrate(workspace)

        assert second_result.success
        assert second_result.changed_files == []
        assert path.read_bytes() == first

    def test_failure_does_not_abort_siblings(self, migrator, workspace):
        """Test that one failing file leaves the others migrated."""
        write_model(workspace, "com.example", "1.0.0", "Future.ttl", FUTURE_TTL)
        write_model(workspace, "com.example", "1.0.0", "Broken.ttl", b"not turtle at all")
        legacy = write_model(workspace, "com.example", "1.0.0", "Legacy.ttl", LEGACY_TTL)

        result = migrator.migrate(workspace)

        assert not result.success
        by_name = outcomes(result)
        assert by_name["com.example:1.0.0:Future.ttl"].error == "UnsupportedVersion"
        assert by_name["com.example:1.0.0:Broken.ttl"].error == "ResolutionError"
        assert by_name["com.example:1.0.0:Legacy.ttl"].success
        assert "urn:bamm:" not in legacy.read_text(encoding="utf-8")
        assert len(result.errors) == 2

    def test_write_error_is_recorded(self, migrator, workspace):
        """Test that an OSError while writing becomes a failed outcome."""
        write_model(workspace, "com.example", "1.0.0", "Legacy.ttl", LEGACY_TTL)

        with patch.object(migrator.serializer, "write", side_effect=PermissionError("read-only")):
            result = migrator.migrate(workspace)

        outcome = outcomes(result)["com.example:1.0.0:Legacy.ttl"]
        assert not outcome.success
        assert outcome.error == "PermissionError"
        assert "read-only" in outcome.message

    def test_reserved_and_misplaced_files_are_skipped(self, migrator, workspace):
        """Test that latest.ttl and files outside the layout are not migrated."""
        write_model(workspace, "com.example", "1.0.0", "latest.ttl", LEGACY_TTL)
        (workspace / "Stray.ttl").write_bytes(LEGACY_TTL)

        result = migrator.migrate(workspace)

        assert result.namespaces == []
        assert "urn:bamm:" in (workspace / "Stray.ttl").read_text(encoding="utf-8")

    def test_missing_workspace(self, migrator, tmp_path):
        """Test that a missing workspace aborts the whole run."""
        with pytest.raises(NotFound):
            migrator.migrate(tmp_path / "does-not-exist")


class TestMigrateWithVersionBump:
    """Tests for MigrationWalker.migrate with bump_version."""

    def test_files_move_to_next_major_version(self, migrator, populated_workspace):
        """Test that every file is written to the bumped version."""
        result = migrator.migrate(populated_workspace, bump_version=True)

        assert result.success
        bumped = populated_workspace / "com.example" / "2.0.0"
        assert sorted(path.name for path in bumped.iterdir()) == ["Bar.ttl", "Foo.ttl"]
        foo = (bumped / "Foo.ttl").read_text(encoding="utf-8")
        assert "urn:samm:com.example:2.0.0#" in foo
        assert "urn:samm:com.example:1.0.0#" not in foo
        assert (populated_workspace / "com.example" / "1.0.0" / "Foo.ttl").exists()

    def test_existing_destination_is_a_conflict(self, migrator, workspace):
        """Test that a file already at the bumped version is not overwritten."""
        existing_content = FOO_TTL.replace(b"1.0.0", b"2.0.0")
        write_model(workspace, "com.example", "1.0.0", "Foo.ttl", FOO_TTL)
        existing = write_model(workspace, "com.example", "2.0.0", "Foo.ttl", existing_content)
        write_model(workspace, "com.example", "1.0.0", "Bar.ttl", BAR_TTL)

        result = migrator.migrate(workspace, bump_version=True)

        assert not result.success
        by_name = outcomes(result)
        conflict = by_name["com.example:1.0.0:Foo.ttl"]
        assert not conflict.success
        assert conflict.error == "Conflict"
        assert by_name["com.example:1.0.0:Bar.ttl"].success
        assert existing.read_bytes() == existing_content
        assert (workspace / "com.example" / "2.0.0" / "Bar.ttl").exists()
