"""
Workspace backups.
"""

import logging
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from aspect_workspace.exceptions import IOFailure, NotFound
from aspect_workspace.utils.archive import PackageArchiver
from aspect_workspace.utils.paths import TTL_EXTENSION

logger = logging.getLogger(__name__)

BACKUP_PREFIX = "backup-"
BACKUP_TIMESTAMP_FORMAT = "%Y.%m.%d-%H.%M.%S"


def backup_file_name(moment: datetime) -> str:
    """``backup-yyyy.MM.dd-HH.mm.ss.zip`` for the given moment."""
    return f"{BACKUP_PREFIX}{moment.strftime(BACKUP_TIMESTAMP_FORMAT)}.zip"


class BackupScheduler:
    """Snapshots every model file of a workspace into a timestamped ZIP."""

    def __init__(
        self,
        archiver: PackageArchiver,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.archiver = archiver
        self.clock = clock

    def backup(self, root: Path, destination: Path | None = None) -> Path:
        """
        Write a backup archive of ``root``.

        Args:
            root: Workspace root.
            destination: Directory the archive is written to; the workspace
                root when omitted.

        Returns:
            Path of the written archive.

        Raises:
            NotFound: If the workspace does not exist.
            IOFailure: If the workspace cannot be read or the archive written.
        """
        root = Path(root)
        if not root.is_dir():
            raise NotFound(f"Workspace {root} does not exist")

        target_dir = Path(destination) if destination is not None else root
        target = target_dir / backup_file_name(self.clock())

        try:
            entries = {
                path.relative_to(root).as_posix(): path.read_bytes()
                for path in sorted(root.rglob(f"*{TTL_EXTENSION}"))
                if path.is_file()
            }
            target_dir.mkdir(parents=True, exist_ok=True)
            target.write_bytes(self.archiver.pack(entries))
        except OSError as exc:
            raise IOFailure(f"Could not write backup {target}: {exc}") from exc

        logger.info("Backed up %d files of %s to %s", len(entries), root, target)
        return target
