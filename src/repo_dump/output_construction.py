from __future__ import annotations

import io
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from repo_dump.config import CONTENTS_HEADING, REPORT_TITLE, TREE_HEADING, OutputFormat, language_for_path

if TYPE_CHECKING:
    from collections.abc import Mapping


class RepositoryReport(BaseModel):
    """Result of one analysis: tree, per-file contents and the rendered markdown.

    The text and JSON views are projections of these three fields; nothing is
    added or dropped between views.
    """

    model_config = ConfigDict(frozen=True)

    tree: str = Field(..., description="Rendered directory tree")
    contents: dict[str, str] = Field(default_factory=dict, description="Relative path -> file text")
    markdown: str = Field(..., description="Rendered markdown document")

    def to_markdown(self) -> str:
        """Return the markdown view."""
        return self.markdown

    def to_text(self) -> str:
        """Return the plain-text view."""
        return render_text(self.tree, self.markdown)

    def to_json(self) -> str:
        """Return the JSON view."""
        return render_json(self)

    def render(self, fmt: OutputFormat) -> str:
        """Serialize the report in the requested format."""
        if fmt is OutputFormat.JSON:
            return self.to_json()
        if fmt is OutputFormat.TEXT:
            return self.to_text()
        return self.to_markdown()


def render_markdown(tree: str, contents: Mapping[str, str]) -> str:
    """Build the markdown document of a repository report.

    The document holds a title, a "Directory Tree" section with the tree in a
    fenced block, and a "File Contents" section. Files are listed in sorted
    path order, each under a rule and a `###` heading, with its content in a
    fence tagged by the extension's language (untagged when unknown).

    Args:
        tree (str): the rendered directory tree
        contents (Mapping[str, str]): relative path -> file text

    Returns:
        str: the markdown document
    """
    out = io.StringIO()
    out.write(f"{REPORT_TITLE}\n\n")

    out.write("## Directory Tree\n\n```\n")
    out.write(tree)
    out.write("\n```\n\n")

    out.write("## File Contents\n\n")
    for path in sorted(contents):
        out.write("---\n\n")
        out.write(f"### {path}\n\n")
        lang = language_for_path(path)
        out.write(f"```{lang}\n{contents[path]}\n```\n\n")

    return out.getvalue()


def render_text(tree: str, markdown: str) -> str:
    """Build the plain-text view: the tree first, then the markdown retitled "File Contents".

    Args:
        tree (str): the rendered directory tree
        markdown (str): the markdown document

    Returns:
        str: the text document
    """
    body = markdown.replace(f"{REPORT_TITLE}\n\n", f"{CONTENTS_HEADING}\n\n", 1)
    return f"{TREE_HEADING}\n\n{tree}\n\n{body}"


def render_json(report: RepositoryReport) -> str:
    """Serialize `{tree, contents, markdown}` as a JSON object."""
    return report.model_dump_json()


def build_report(tree: str, contents: Mapping[str, str]) -> RepositoryReport:
    """Assemble a report from a tree and collected contents."""
    ordered = dict(sorted(contents.items()))
    return RepositoryReport(tree=tree, contents=ordered, markdown=render_markdown(tree, ordered))


def render_report(report: RepositoryReport, fmt: OutputFormat) -> tuple[str, str]:
    """Serialize a report and give back the matching media type.

    Args:
        report (RepositoryReport): the report to serialize
        fmt (OutputFormat): the requested format

    Returns:
        tuple[str, str]: the body and its media type
    """
    return report.render(fmt), fmt.media_type
