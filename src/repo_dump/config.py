from __future__ import annotations

from enum import StrEnum
from pathlib import PurePosixPath
from types import MappingProxyType
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping

VCS_METADATA_NAME = ".git"
"""Name (and segment prefix) of the version-control metadata directory."""

DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024

REPORT_TITLE = "# Repository Analysis"
TREE_HEADING = "# Directory Tree"
CONTENTS_HEADING = "# File Contents"

BINARY_EXTENSIONS: frozenset[str] = frozenset(
    {
        # executables, objects and libraries
        ".exe",
        ".dll",
        ".so",
        ".dylib",
        ".obj",
        ".o",
        ".a",
        ".lib",
        ".bin",
        ".dat",
        # images
        ".png",
        ".jpg",
        ".jpeg",
        ".gif",
        ".bmp",
        ".tiff",
        ".ico",
        # audio and video
        ".mp3",
        ".mp4",
        ".mov",
        ".avi",
        ".wav",
        ".flac",
        # archives
        ".zip",
        ".tar",
        ".gz",
        ".7z",
        ".rar",
    },
)

EXT2LANG: Mapping[str, str] = MappingProxyType(
    {
        ".c": "c",
        ".cpp": "cpp",
        ".css": "css",
        ".go": "go",
        ".h": "c",
        ".html": "html",
        ".java": "java",
        ".js": "javascript",
        ".json": "json",
        ".kt": "kotlin",
        ".md": "markdown",
        ".php": "php",
        ".py": "python",
        ".rb": "ruby",
        ".rs": "rust",
        ".sh": "bash",
        ".sql": "sql",
        ".swift": "swift",
        ".ts": "typescript",
        ".xml": "xml",
        ".yaml": "yaml",
        ".yml": "yaml",
    },
)


class OutputFormat(StrEnum):
    """Serializations of a repository report."""

    MARKDOWN = "markdown"
    JSON = "json"
    TEXT = "text"

    @classmethod
    def parse(cls, value: str | None) -> OutputFormat:
        """Map a user-supplied format name to an OutputFormat.

        `md` and `txt` are accepted as aliases; empty or unknown names fall
        back to markdown.

        Args:
            value (str | None): the requested format name

        Returns:
            OutputFormat: the matching format
        """
        normalized = (value or "").strip().lower()
        return _FORMAT_ALIASES.get(normalized, cls.MARKDOWN)

    @property
    def media_type(self) -> str:
        """HTTP media type of this serialization."""
        return _MEDIA_TYPES[self]

    @property
    def extension(self) -> str:
        """File extension used for downloads of this serialization."""
        return _EXTENSIONS[self]


_FORMAT_ALIASES: dict[str, OutputFormat] = {
    "markdown": OutputFormat.MARKDOWN,
    "md": OutputFormat.MARKDOWN,
    "json": OutputFormat.JSON,
    "text": OutputFormat.TEXT,
    "txt": OutputFormat.TEXT,
}

_MEDIA_TYPES: dict[OutputFormat, str] = {
    OutputFormat.MARKDOWN: "text/markdown",
    OutputFormat.JSON: "application/json",
    OutputFormat.TEXT: "text/plain",
}

_EXTENSIONS: dict[OutputFormat, str] = {
    OutputFormat.MARKDOWN: "md",
    OutputFormat.JSON: "json",
    OutputFormat.TEXT: "txt",
}


def language_for_path(rel_path: str) -> str:
    """Get the code fence language for a file, based on its extension.

    Args:
        rel_path (str): the file path (only the extension is looked at)

    Returns:
        str: the fence language, or an empty string for unmapped extensions
    """
    return EXT2LANG.get(PurePosixPath(rel_path).suffix.lower(), "")
