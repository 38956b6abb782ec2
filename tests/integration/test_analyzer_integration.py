from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from repo_dump import analyzer
from repo_dump.analyzer import AnalyzeRequest, analyze_remote, analyze_repository
from repo_dump.exceptions import GitCommandError, RepositoryAccessError
from repo_dump.rules import PathRule
from repo_dump.settings import Settings

if TYPE_CHECKING:
    from pytest_mock import MockerFixture

    from tests.conftest import MakeRepo


def _fake_clone(files: dict[str, str]):  # noqa: ANN202
    def clone(repo_url: str, dest: Path, *, is_private: bool = False, token: str | None = None) -> Path:  # noqa: ARG001
        for rel, content in files.items():
            path = dest / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        return dest

    return clone


@pytest.mark.integration
def test_analyze_repository_builds_consistent_report(make_repo: MakeRepo) -> None:
    root = make_repo(
        {
            "src/main.go": "package main",
            "src/util/strings.go": "package util",
            "node_modules/x.js": "x",
            "README.md": "# hi",
            ".git/HEAD": "ref: refs/heads/main",
        },
    )

    report = analyze_repository(
        root,
        [PathRule(path="src"), PathRule(path="README.md"), PathRule(path="node_modules", exclude=True)],
        use_external_tree=False,
    )

    assert list(report.contents) == ["README.md", "src/main.go", "src/util/strings.go"]
    assert "node_modules/" in report.tree
    assert ".git" not in report.tree
    headings = [line[4:] for line in report.markdown.splitlines() if line.startswith("### ")]
    assert headings == list(report.contents)
    assert "```go\npackage main\n```" in report.markdown


@pytest.mark.integration
def test_analyze_repository_on_missing_root_fails(tmp_path: Path) -> None:
    with pytest.raises(RepositoryAccessError):
        analyze_repository(tmp_path / "missing", use_external_tree=False)


@pytest.mark.integration
def test_analyze_remote_cleans_workspace_and_saves_artifacts(tmp_path: Path, mocker: MockerFixture) -> None:
    clone_mock = mocker.patch.object(
        analyzer,
        "clone_repository",
        side_effect=_fake_clone({"main.py": "print('ok')", "assets/logo.png": "png"}),
    )
    settings = Settings(
        temp_dir=tmp_path / "temp",
        output_dir=tmp_path / "output",
        use_external_tree=False,
        github_token="tok",
    )

    result = analyze_remote(
        AnalyzeRequest(repo_url="https://github.com/owner/project.git", is_private=True),
        settings,
    )

    assert result.repo_name == "project"
    assert result.report.contents == {"main.py": "print('ok')"}
    assert result.report.tree.startswith("project\n")
    assert clone_mock.call_args.kwargs == {"is_private": True, "token": "tok"}
    assert list((tmp_path / "temp").iterdir()) == []
    saved = json.loads((tmp_path / "output" / f"{result.request_id}_response.json").read_text(encoding="utf-8"))
    assert saved["contents"] == result.report.contents


@pytest.mark.integration
def test_analyze_remote_failure_still_removes_workspace(tmp_path: Path, mocker: MockerFixture) -> None:
    def failing_clone(repo_url: str, dest: Path, **_: object) -> Path:
        dest.mkdir(parents=True)
        (dest / "partial").write_text("x", encoding="utf-8")
        raise GitCommandError(command="git clone", returncode=128, stdout="", stderr="not found")

    mocker.patch.object(analyzer, "clone_repository", side_effect=failing_clone)
    settings = Settings(temp_dir=tmp_path / "temp", output_dir=tmp_path / "output")

    with pytest.raises(GitCommandError):
        analyze_remote(AnalyzeRequest(repo_url="https://github.com/owner/missing"), settings)

    assert list((tmp_path / "temp").iterdir()) == []
    assert not (tmp_path / "output").exists()


@pytest.mark.integration
def test_analyze_remote_survives_persistence_failure(tmp_path: Path, mocker: MockerFixture) -> None:
    mocker.patch.object(analyzer, "clone_repository", side_effect=_fake_clone({"a.txt": "a"}))
    mocker.patch.object(analyzer, "save_report", side_effect=PermissionError("read-only"))
    settings = Settings(temp_dir=tmp_path / "temp", use_external_tree=False)

    result = analyze_remote(AnalyzeRequest(repo_url="https://github.com/o/r"), settings)

    assert result.report.contents == {"a.txt": "a"}
