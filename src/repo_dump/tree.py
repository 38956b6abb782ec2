"""Directory tree rendering, independent of the selection rules."""

from __future__ import annotations

import os
import shutil
import subprocess  # noqa: S404
from dataclasses import dataclass, field
from pathlib import Path

from repo_dump.config import VCS_METADATA_NAME
from repo_dump.file_manipulation import WalkAction, walk_tree
from repo_dump.logging import logger

TREE_ARGS = ("-a", "-I", f"{VCS_METADATA_NAME}*", "--gitignore")
TREE_TIMEOUT_SECONDS = 60.0


@dataclass
class _Node:
    dirs: dict[str, _Node] = field(default_factory=dict)
    files: list[str] = field(default_factory=list)


def _sort_key(name: str) -> tuple[str, str]:
    return (name.lower(), name)


def run_external_tree(repo_root: Path, *, timeout: float = TREE_TIMEOUT_SECONDS) -> str:
    """Render the tree with the external `tree` utility.

    The command runs from the parent directory so the first line is the
    repository directory name rather than an absolute path.

    Args:
        repo_root (Path): the directory to render
        timeout (float): seconds before the command is abandoned

    Raises:
        FileNotFoundError: if `tree` is not installed
        subprocess.CalledProcessError: if `tree` exits with an error
        subprocess.TimeoutExpired: if `tree` does not finish in time

    Returns:
        str: the command output
    """
    repo_root = Path(os.path.abspath(repo_root))
    executable = shutil.which("tree")
    if executable is None:
        msg = "tree executable not found on PATH"
        raise FileNotFoundError(msg)
    out = subprocess.run(  # noqa: S603
        [executable, *TREE_ARGS, repo_root.name],
        cwd=str(repo_root.parent),
        text=True,
        capture_output=True,
        check=True,
        timeout=timeout,
    )
    return out.stdout


def render_builtin_tree(repo_root: Path) -> str:
    """Render the tree without external tools.

    The first line is the root directory name. Every other entry gets one
    line, indented per depth level, directories first and suffixed with `/`.
    Anything starting with `.git` is left out along with its subtree, and
    unreadable entries are skipped.

    Args:
        repo_root (Path): the directory to render

    Returns:
        str: the rendered tree, newline terminated
    """
    repo_root = Path(os.path.abspath(repo_root))
    root_node = _Node()
    nodes: dict[Path, _Node] = {repo_root: root_node}

    def visit(path: Path, is_dir: bool) -> WalkAction:  # noqa: FBT001
        if path == repo_root:
            return WalkAction.CONTINUE
        if path.name.startswith(VCS_METADATA_NAME):
            return WalkAction.SKIP_SUBTREE
        parent = nodes.get(path.parent)
        if parent is None:
            return WalkAction.SKIP_SUBTREE
        if is_dir:
            node = _Node()
            parent.dirs[path.name] = node
            nodes[path] = node
        else:
            parent.files.append(path.name)
        return WalkAction.CONTINUE

    walk_tree(repo_root, visit)

    lines: list[str] = [repo_root.name]

    def walk(node: _Node, prefix: str) -> None:
        entries: list[tuple[str, _Node | None]] = [(d, node.dirs[d]) for d in sorted(node.dirs, key=_sort_key)]
        entries.extend((f, None) for f in sorted(node.files, key=_sort_key))
        for idx, (name, child) in enumerate(entries):
            last = idx == len(entries) - 1
            branch = "└── " if last else "├── "
            lines.append(prefix + branch + name + ("/" if child is not None else ""))
            if child is not None:
                walk(child, prefix + ("    " if last else "│   "))

    walk(root_node, "")
    return "\n".join(lines) + "\n"


def render_tree(repo_root: Path, *, use_external: bool = True) -> str:
    """Render the full directory tree of a repository.

    The external `tree` utility is tried first (hiding `.git` and honoring
    `.gitignore`); on any failure the built-in renderer is used.

    Args:
        repo_root (Path): the directory to render
        use_external (bool): whether to try the external utility at all

    Returns:
        str: the rendered tree
    """
    if use_external:
        try:
            return run_external_tree(repo_root)
        except (OSError, subprocess.SubprocessError) as e:
            logger.info("external_tree_unavailable", error=str(e))
    return render_builtin_tree(repo_root)
