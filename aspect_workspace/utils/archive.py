"""
ZIP packaging for Aspect Model packages and workspace backups.

Entry names follow ``<namespace>/<version>/<file>``. Unpacking validates every
entry name before the first byte is written, so a rejected archive never
leaves a partially extracted tree behind.
"""

import io
import logging
import re
import zipfile
from collections.abc import Mapping
from pathlib import Path, PurePosixPath

from aspect_workspace.exceptions import FileNameError, IOFailure, SecurityViolation

logger = logging.getLogger(__name__)

# Housekeeping entries written by desktop archivers
SKIPPED_ENTRY_PARTS = {"__MACOSX", ".DS_Store", "Thumbs.db", "desktop.ini"}

ALLOWED_NAME_PATTERN = re.compile(r"^[A-Za-z0-9._-]+$")

DEFAULT_MAX_UNCOMPRESSED_BYTES = 200 * 1024 * 1024


class PackageArchiver:
    """Builds and extracts package archives."""

    def __init__(self, max_uncompressed_bytes: int = DEFAULT_MAX_UNCOMPRESSED_BYTES):
        self.max_uncompressed_bytes = max_uncompressed_bytes

    def pack(self, entries: Mapping[str, bytes]) -> bytes:
        """
        Create a ZIP archive from relative path to content entries.

        Raises:
            SecurityViolation: If an entry name is absolute or contains ``..``.
        """
        buffer = io.BytesIO()
        written: set[str] = set()

        with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zf:
            for name, content in entries.items():
                entry_name = _normalize_entry_name(name)
                if entry_name in written:
                    continue
                zf.writestr(entry_name, content)
                written.add(entry_name)

        logger.debug("Packed %d entries", len(written))
        return buffer.getvalue()

    def unpack(self, data: bytes, destination: Path) -> list[Path]:
        """
        Extract an archive below ``destination``.

        Returns:
            The extracted file paths, in archive order.

        Raises:
            IOFailure: If the data is not a readable ZIP archive.
            SecurityViolation: If an entry would be written outside
                ``destination`` or the archive exceeds the size limit.
            FileNameError: If an entry name contains disallowed characters.
        """
        destination = Path(destination)
        destination.mkdir(parents=True, exist_ok=True)
        root = destination.resolve()

        with _open_archive(data) as zf:
            planned = self._plan(zf, root)

            extracted = []
            for info, target in planned:
                if info.is_dir():
                    target.mkdir(parents=True, exist_ok=True)
                    continue
                target.parent.mkdir(parents=True, exist_ok=True)
                with zf.open(info) as source:
                    target.write_bytes(source.read())
                extracted.append(target)

        logger.info("Extracted %d files to %s", len(extracted), destination)
        return extracted

    def _plan(self, zf: zipfile.ZipFile, root: Path) -> list[tuple[zipfile.ZipInfo, Path]]:
        planned = []
        total_size = 0

        for info in zf.infolist():
            parts = [part for part in info.filename.replace("\\", "/").split("/") if part]
            if any(part in SKIPPED_ENTRY_PARTS for part in parts):
                logger.debug("Skipping housekeeping entry %s", info.filename)
                continue
            if not parts:
                continue

            target = (root / Path(*parts)).resolve()
            if target == root:
                logger.debug("Skipping entry for the archive root %s", info.filename)
                continue
            if info.filename.startswith(("/", "\\")) or not _is_within(target, root):
                logger.error("Entry is outside of the target directory: %s", info.filename)
                raise SecurityViolation(f"Entry is outside of the target dir: {info.filename}")

            for part in parts:
                if not ALLOWED_NAME_PATTERN.match(part):
                    raise FileNameError(
                        f"The file name '{info.filename}' contains special characters. "
                        "Only letters, digits, '.', '_' and '-' are allowed."
                    )

            total_size += info.file_size
            if total_size > self.max_uncompressed_bytes:
                raise SecurityViolation(
                    f"Package exceeds the maximum uncompressed size of "
                    f"{self.max_uncompressed_bytes} bytes"
                )

            planned.append((info, target))

        return planned


def _open_archive(data: bytes) -> zipfile.ZipFile:
    try:
        return zipfile.ZipFile(io.BytesIO(data))
    except zipfile.BadZipFile as exc:
        raise IOFailure(f"Error reading the zip file: {exc}") from exc


def _normalize_entry_name(name: str) -> str:
    raw = str(name).replace("\\", "/")
    path = PurePosixPath(raw)
    if path.is_absolute() or ".." in path.parts or not path.parts:
        raise SecurityViolation(f"Invalid package entry name: {name}")
    return path.as_posix()


def _is_within(path: Path, root: Path) -> bool:
    try:
        path.relative_to(root)
    except ValueError:
        return False
    return True
