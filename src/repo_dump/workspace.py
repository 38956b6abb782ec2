"""Per-request workspaces: one private directory per analysis, always removed."""

from __future__ import annotations

import secrets
import shutil
import time
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from repo_dump.exceptions import WorkspaceError
from repo_dump.logging import logger

if TYPE_CHECKING:
    from collections.abc import Iterator


@dataclass(frozen=True)
class Workspace:
    """Scratch directory owned by a single request."""

    request_id: str
    root: Path

    def path_for(self, name: str) -> Path:
        """Return a path inside the workspace."""
        return self.root / name


def new_request_id() -> str:
    """Return a unique, time-ordered identifier for a request."""
    return f"{time.time_ns()}-{secrets.token_hex(4)}"


def remove_workspace(root: Path) -> None:
    """Recursively delete a workspace directory, logging (not raising) on failure."""
    logger.info("cleaning_up_workspace", path=str(root))
    try:
        shutil.rmtree(root)
    except FileNotFoundError:
        return
    except OSError as e:
        logger.warning("workspace_cleanup_failed", path=str(root), error=str(e))


@contextmanager
def request_workspace(base_dir: Path) -> Iterator[Workspace]:
    """Create a fresh workspace under `base_dir` and remove it on exit.

    Removal happens on every exit path, including exceptions.

    Args:
        base_dir (Path): parent directory of all workspaces (created if missing)

    Raises:
        WorkspaceError: if the workspace directory cannot be created

    Yields:
        Iterator[Workspace]: the workspace
    """
    request_id = new_request_id()
    root = Path(base_dir) / request_id
    try:
        root.mkdir(parents=True)
    except OSError as e:
        raise WorkspaceError(path=root, reason=e.strerror or str(e)) from e
    try:
        yield Workspace(request_id=request_id, root=root)
    finally:
        remove_workspace(root)
