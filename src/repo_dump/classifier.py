from __future__ import annotations

from pathlib import PurePosixPath

from repo_dump.config import BINARY_EXTENSIONS, DEFAULT_MAX_FILE_SIZE, VCS_METADATA_NAME


def is_vcs_metadata(rel_path: str) -> bool:
    """Check if a path is, or lies inside, version-control metadata.

    Any segment starting with `.git` matches (`.git`, `.gitignore`, `.github`).

    Args:
        rel_path (str): forward-slash path relative to the repository root

    Returns:
        bool: True if the path is VCS metadata
    """
    return any(part.startswith(VCS_METADATA_NAME) for part in PurePosixPath(rel_path).parts)


def is_binary_extension(rel_path: str) -> bool:
    """Check the (case-insensitive) extension against the binary/media/archive denylist."""
    return PurePosixPath(rel_path).suffix.lower() in BINARY_EXTENSIONS


def is_structurally_ignored(
    rel_path: str,
    size: int,
    max_file_size: int = DEFAULT_MAX_FILE_SIZE,
) -> bool:
    """Decide whether a file is left out regardless of the selection rules.

    Only the path and the size are looked at; the file is never opened.

    Args:
        rel_path (str): forward-slash path relative to the repository root
        size (int): file size in bytes
        max_file_size (int): largest size (bytes) still collected

    Returns:
        bool: True if the file is VCS metadata, binary by extension, or too big
    """
    return is_vcs_metadata(rel_path) or is_binary_extension(rel_path) or size > max_file_size
