"""End-to-end analysis: local root -> report, and remote URL -> workspace -> report."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from repo_dump.config import DEFAULT_MAX_FILE_SIZE
from repo_dump.extraction import extract_contents
from repo_dump.logging import logger
from repo_dump.output_construction import RepositoryReport, build_report
from repo_dump.persistence import save_report
from repo_dump.provider import clone_repository, extract_repo_name
from repo_dump.rules import PathRule, normalize_rules
from repo_dump.tree import render_tree
from repo_dump.workspace import request_workspace

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from repo_dump.settings import Settings


class AnalyzeRequest(BaseModel):
    """Payload asking for the analysis of a remote repository."""

    repo_url: str = Field(default="", description="Repository URL to clone")
    is_private: bool = Field(default=False, description="Clone with the configured access token")
    dirs: list[PathRule] = Field(default_factory=list, description="Include/exclude rules")


@dataclass(frozen=True)
class AnalysisResult:
    """A report together with the request it was built for."""

    report: RepositoryReport
    request_id: str
    repo_name: str


def analyze_repository(
    repo_root: Path,
    rules: Sequence[PathRule] = (),
    *,
    max_file_size: int = DEFAULT_MAX_FILE_SIZE,
    use_external_tree: bool = True,
) -> RepositoryReport:
    """Build the report of an already materialized working tree.

    Args:
        repo_root (Path): the repository working tree
        rules (Sequence[PathRule]): include/exclude rules, possibly empty
        max_file_size (int): largest file size (bytes) still collected
        use_external_tree (bool): try the external `tree` utility first

    Raises:
        RepositoryAccessError: if `repo_root` cannot be accessed

    Returns:
        RepositoryReport: tree, contents and markdown
    """
    tree = render_tree(repo_root, use_external=use_external_tree)
    policy = normalize_rules(rules)
    contents = extract_contents(repo_root, policy, max_file_size=max_file_size)
    if not contents:
        logger.warning("no_contents_collected", root=str(repo_root))
    return build_report(tree, contents)


def analyze_remote(request: AnalyzeRequest, settings: Settings) -> AnalysisResult:
    """Clone a repository into a private workspace and build its report.

    The workspace is removed whatever happens. Saving artifacts is best
    effort: a failure is logged and the report is still returned.

    Args:
        request (AnalyzeRequest): the repository and the rules
        settings (Settings): runtime configuration

    Raises:
        WorkspaceError: if the workspace directory cannot be created
        MissingCredentialError: if a private clone is requested without a token
        GitCommandError: if the clone fails
        RepositoryAccessError: if the cloned tree cannot be read

    Returns:
        AnalysisResult: the report and its request identifiers
    """
    repo_name = extract_repo_name(request.repo_url)
    with request_workspace(settings.temp_dir) as workspace:
        repo_dir = clone_repository(
            request.repo_url,
            workspace.path_for(repo_name),
            is_private=request.is_private,
            token=settings.token_value(),
        )
        logger.info("analyzing_repository", request_id=workspace.request_id)
        report = analyze_repository(
            repo_dir,
            request.dirs,
            max_file_size=settings.max_file_size,
            use_external_tree=settings.use_external_tree,
        )

    if settings.save_output:
        try:
            save_report(report, settings.output_dir, workspace.request_id)
        except OSError as e:
            logger.warning("save_output_failed", request_id=workspace.request_id, error=str(e))

    logger.info("analysis_complete", request_id=workspace.request_id, files=len(report.contents))
    return AnalysisResult(report=report, request_id=workspace.request_id, repo_name=repo_name)
