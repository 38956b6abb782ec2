"""Content extraction: walk a repository and collect file texts under a SelectionPolicy."""

from __future__ import annotations

import os
import stat
from pathlib import Path
from typing import TYPE_CHECKING

from repo_dump.classifier import is_structurally_ignored, is_vcs_metadata
from repo_dump.config import DEFAULT_MAX_FILE_SIZE
from repo_dump.file_manipulation import WalkAction, ensure_directory, read_file_text, relpath, walk_tree
from repo_dump.logging import logger

if TYPE_CHECKING:
    from repo_dump.rules import SelectionPolicy


def _escapes(path: Path, real_root: Path) -> bool:
    try:
        return not path.resolve().is_relative_to(real_root)
    except OSError:
        return True


def _read_into(contents: dict[str, str], path: Path, rel: str) -> None:
    try:
        contents[rel] = read_file_text(path)
    except OSError as e:
        logger.debug("file_unreadable", path=rel, error=str(e))


def _extract_file(
    contents: dict[str, str],
    path: Path,
    rel: str,
    size: int,
    policy: SelectionPolicy,
    max_file_size: int,
) -> None:
    if policy.is_excluded_exact(rel) or is_structurally_ignored(rel, size, max_file_size):
        logger.debug("file_omitted", path=rel)
        return
    _read_into(contents, path, rel)


def _extract_directory(
    contents: dict[str, str],
    top: Path,
    repo_root: Path,
    *,
    recursive: bool,
    policy: SelectionPolicy,
    max_file_size: int,
    real_root: Path,
) -> None:
    def visit(path: Path, is_dir: bool) -> WalkAction:  # noqa: FBT001
        rel = relpath(path, repo_root)
        if is_dir:
            if path != repo_root and is_vcs_metadata(path.name):
                return WalkAction.SKIP_SUBTREE
            if not recursive and path != top:
                return WalkAction.SKIP_SUBTREE
            if path != repo_root and policy.is_excluded(rel):
                return WalkAction.SKIP_SUBTREE
            return WalkAction.CONTINUE

        if policy.is_excluded(rel):
            return WalkAction.CONTINUE
        if path.is_symlink() and _escapes(path, real_root):
            logger.warning("symlink_outside_repository", path=rel)
            return WalkAction.CONTINUE
        try:
            size = path.stat().st_size
        except OSError as e:
            logger.debug("file_unreadable", path=rel, error=str(e))
            return WalkAction.CONTINUE
        if is_structurally_ignored(rel, size, max_file_size):
            return WalkAction.CONTINUE
        _read_into(contents, path, rel)
        return WalkAction.CONTINUE

    if not walk_tree(top, visit):
        logger.debug("root_not_walkable", path=relpath(top, repo_root))


def extract_contents(
    repo_root: Path,
    policy: SelectionPolicy,
    *,
    max_file_size: int = DEFAULT_MAX_FILE_SIZE,
) -> dict[str, str]:
    """Collect the text of every selected file under `repo_root`.

    Each root of the policy is resolved against `repo_root`: missing roots
    (and roots whose real path lies outside the repository) are skipped, a
    file root is read unless it is excluded by exact path or classified as
    ignored, and a directory root is walked depth-first, pruning VCS metadata
    and, when not recursive, every subdirectory. Symlinks leading out of the
    repository are skipped, as are unreadable entries. When two roots yield
    the same path, the later root wins.

    Args:
        repo_root (Path): the repository working tree
        policy (SelectionPolicy): the effective selection
        max_file_size (int): largest file size (bytes) still collected

    Raises:
        RepositoryAccessError: if `repo_root` itself cannot be accessed

    Returns:
        dict[str, str]: relative path -> content, sorted by path; may be empty
    """
    root = ensure_directory(repo_root)
    real_root = root.resolve()
    contents: dict[str, str] = {}

    for root_path, recursive in policy.roots:
        target = Path(os.path.normpath(root / root_path))
        if not target.is_relative_to(root) or _escapes(target, real_root):
            logger.warning("root_outside_repository", path=root_path)
            continue
        try:
            st = target.stat()
        except OSError:
            logger.debug("root_missing", path=root_path)
            continue

        if stat.S_ISDIR(st.st_mode):
            _extract_directory(
                contents,
                target,
                root,
                recursive=recursive,
                policy=policy,
                max_file_size=max_file_size,
                real_root=real_root,
            )
        else:
            _extract_file(contents, target, relpath(target, root), st.st_size, policy, max_file_size)

    return dict(sorted(contents.items()))
