"""
Batch file moves into the workspace.
"""

import logging
import shutil
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from aspect_workspace.exceptions import IOFailure

logger = logging.getLogger(__name__)

Move = tuple[Path, Path]


class MoveApplier(Protocol):
    def apply_moves(self, moves: Sequence[Move]) -> list[Path]: ...


class SequentialMoveApplier:
    """Applies moves one after another; earlier moves stay applied if a later one fails."""

    def apply_moves(self, moves: Sequence[Move]) -> list[Path]:
        applied = []
        for source, target in moves:
            try:
                if not target.parent.exists():
                    target.parent.mkdir(parents=True, exist_ok=True)
                    logger.info("Directories created: %s", target.parent)
                shutil.move(str(source), str(target))
            except OSError as exc:
                raise IOFailure(f"Could not move {source.name} to {target}: {exc}") from exc
            logger.debug("Moved %s -> %s", source, target)
            applied.append(target)
        return applied
