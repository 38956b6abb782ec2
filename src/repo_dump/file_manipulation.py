from __future__ import annotations

import os
from enum import Enum, auto
from pathlib import Path
from typing import TYPE_CHECKING

from repo_dump.exceptions import RepositoryAccessError
from repo_dump.logging import logger

if TYPE_CHECKING:
    from collections.abc import Callable

    Visitor = Callable[[Path, bool], "WalkAction"]


class WalkAction(Enum):
    """Outcome returned by a walk visitor for each entry."""

    CONTINUE = auto()
    SKIP_SUBTREE = auto()
    ABORT = auto()


def relpath(path: Path, root: Path) -> str:
    """Send the relative path of path from root.

    Args:
        path (Path): the path to "relativise"
        root (Path): the root to relativise from

    Returns:
        str: the relative path from root to path, with POSIX separators
            (`.` for the root itself). If path is not under root, returns
            the original path as a string.
    """
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return str(path)


def read_file_text(path: Path) -> str:
    """Read a whole file as text.

    Bytes are decoded as UTF-8; invalid sequences become replacement characters
    instead of failing the read.

    Args:
        path (Path): the file to read

    Returns:
        str: the decoded file content
    """
    return path.read_bytes().decode("utf-8", errors="replace")


def ensure_directory(root: Path) -> Path:
    """Check that root is a readable directory and return its absolute form.

    Args:
        root (Path): the directory to check

    Raises:
        RepositoryAccessError: if root is missing, not a directory, or cannot be listed

    Returns:
        Path: the absolute, normalized root
    """
    absolute = Path(os.path.abspath(root))
    if not absolute.is_dir():
        raise RepositoryAccessError(root=absolute, reason="not an existing directory")
    try:
        with os.scandir(absolute):
            pass
    except OSError as e:
        raise RepositoryAccessError(root=absolute, reason=e.strerror or str(e)) from e
    return absolute


def _log_walk_error(error: OSError) -> None:
    logger.debug("walk_entry_skipped", path=error.filename, error=str(error))


def walk_tree(top: Path, visitor: Visitor) -> bool:
    """Walk `top` depth-first, letting `visitor` prune subtrees as they are met.

    The visitor is called once per entry with `(path, is_dir)`, starting with
    `top` itself. Returning `SKIP_SUBTREE` for a directory prevents the walk
    from ever listing it; `ABORT` stops the whole walk. Entries within a
    directory are visited in sorted order. Entries that cannot be listed are
    skipped and the walk continues over their siblings.

    Args:
        top (Path): the directory to walk
        visitor (Visitor): per-entry callback

    Returns:
        bool: False if `top` could not be listed or the visitor aborted, True otherwise
    """
    try:
        with os.scandir(top):
            pass
    except OSError as e:
        _log_walk_error(e)
        return False

    action = visitor(top, True)
    if action is WalkAction.ABORT:
        return False
    if action is WalkAction.SKIP_SUBTREE:
        return True

    for current, dirs, files in os.walk(top, onerror=_log_walk_error):
        base = Path(current)
        kept: list[str] = []
        for name in sorted(dirs):
            action = visitor(base / name, True)
            if action is WalkAction.ABORT:
                return False
            if action is WalkAction.CONTINUE:
                kept.append(name)
        dirs[:] = kept
        for name in sorted(files):
            if visitor(base / name, False) is WalkAction.ABORT:
                return False
    return True
