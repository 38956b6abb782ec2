from __future__ import annotations

from pathlib import Path

import pytest

from repo_dump.exceptions import RepositoryAccessError
from repo_dump.file_manipulation import WalkAction, ensure_directory, read_file_text, relpath, walk_tree


@pytest.mark.unit
def test_relpath_uses_posix_separators(tmp_path: Path) -> None:
    assert relpath(tmp_path / "src" / "app.py", tmp_path) == "src/app.py"
    assert relpath(tmp_path, tmp_path) == "."


@pytest.mark.unit
def test_relpath_outside_root_returns_original(tmp_path: Path) -> None:
    other = Path("/elsewhere/file.txt")

    assert relpath(other, tmp_path) == str(other)


@pytest.mark.unit
def test_read_file_text_decodes_utf8(tmp_path: Path) -> None:
    path = tmp_path / "u.txt"
    path.write_bytes("héllo".encode())

    assert read_file_text(path) == "héllo"


@pytest.mark.unit
def test_ensure_directory_rejects_missing_root(tmp_path: Path) -> None:
    with pytest.raises(RepositoryAccessError) as exc_info:
        ensure_directory(tmp_path / "missing")

    assert "missing" in str(exc_info.value)


@pytest.mark.unit
def test_walk_tree_prunes_skipped_subtrees(tmp_path: Path) -> None:
    (tmp_path / "keep" / "inner").mkdir(parents=True)
    (tmp_path / "keep" / "inner" / "k.txt").write_text("k", encoding="utf-8")
    (tmp_path / "skip").mkdir()
    (tmp_path / "skip" / "s.txt").write_text("s", encoding="utf-8")
    (tmp_path / "top.txt").write_text("t", encoding="utf-8")
    seen: list[tuple[str, bool]] = []

    def visit(path: Path, is_dir: bool) -> WalkAction:  # noqa: FBT001
        seen.append((relpath(path, tmp_path), is_dir))
        if is_dir and path.name == "skip":
            return WalkAction.SKIP_SUBTREE
        return WalkAction.CONTINUE

    assert walk_tree(tmp_path, visit) is True
    assert (".", True) in seen
    assert ("skip", True) in seen
    assert ("skip/s.txt", False) not in seen
    assert ("keep/inner/k.txt", False) in seen
    assert ("top.txt", False) in seen


@pytest.mark.unit
def test_walk_tree_abort_stops_the_walk(tmp_path: Path) -> None:
    for name in ("a.txt", "b.txt", "c.txt"):
        (tmp_path / name).write_text(name, encoding="utf-8")
    seen: list[str] = []

    def visit(path: Path, is_dir: bool) -> WalkAction:  # noqa: FBT001
        if is_dir:
            return WalkAction.CONTINUE
        seen.append(path.name)
        return WalkAction.ABORT if path.name == "b.txt" else WalkAction.CONTINUE

    assert walk_tree(tmp_path, visit) is False
    assert seen == ["a.txt", "b.txt"]


@pytest.mark.unit
def test_walk_tree_reports_unlistable_top(tmp_path: Path) -> None:
    calls: list[Path] = []

    def visit(path: Path, is_dir: bool) -> WalkAction:  # noqa: FBT001, ARG001
        calls.append(path)
        return WalkAction.CONTINUE

    assert walk_tree(tmp_path / "missing", visit) is False
    assert calls == []
