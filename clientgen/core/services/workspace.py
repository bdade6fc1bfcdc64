"""
Workspace preparation — the fresh, empty directory a run generates into.
"""

from __future__ import annotations

import logging
from pathlib import Path

from clientgen.core.errors import WorkspaceCollisionError, WorkspaceCreationError
from clientgen.core.models.receipt import Receipt

logger = logging.getLogger(__name__)


def prepare_workspace(path: Path) -> Receipt:
    """Create ``path`` as a new, empty directory.

    Missing parents are created. An existing path (directory or file) is
    never overwritten or merged into; it is an operator error that needs
    manual cleanup.

    Raises:
        WorkspaceCollisionError: If ``path`` already exists.
        WorkspaceCreationError: If ``path`` cannot be created.
    """
    try:
        path.mkdir(parents=True, exist_ok=False)
    except FileExistsError:
        raise WorkspaceCollisionError(path) from None
    except OSError as e:
        raise WorkspaceCreationError(path, e.strerror or str(e)) from e

    logger.info("Created workspace %s", path)
    return Receipt.success(
        step="workspace",
        output=f"Created {path}",
        metadata={"path": str(path)},
    )


def workspace_status(path: Path) -> dict:
    """Describe the workspace location without touching it.

    Returns:
        {"path": str, "exists": bool, "is_dir": bool, "empty": bool | None}
    """
    exists = path.exists()
    is_dir = path.is_dir()
    return {
        "path": str(path),
        "exists": exists,
        "is_dir": is_dir,
        "empty": (next(path.iterdir(), None) is None) if is_dir else None,
    }
