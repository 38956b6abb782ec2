"""Selection rules: which paths of a repository get their contents extracted."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, field_validator

from repo_dump.config import VCS_METADATA_NAME

if TYPE_CHECKING:
    from collections.abc import Iterable

ROOT_PATH = "."


def normalize_rel_path(value: str) -> str:
    """Normalize a caller-supplied relative path.

    Strips whitespace, converts backslashes to forward slashes and drops empty
    and `.` segments, so `./src/`, `src` and `src//` all become `src`. The
    repository root itself is `.`.

    Args:
        value (str): the path to normalize

    Returns:
        str: the normalized, forward-slash separated path
    """
    cleaned = (value or "").strip().replace("\\", "/")
    parts = [part for part in cleaned.split("/") if part not in {"", "."}]
    return "/".join(parts) or ROOT_PATH


class PathRule(BaseModel):
    """One caller directive: include or exclude a path relative to the repository root."""

    model_config = ConfigDict(frozen=True)

    path: str = Field(..., description="Path relative to the repository root")
    recursive: bool = Field(default=True, description="Descend into subdirectories (directories only)")
    exclude: bool = Field(default=False, description="Exclude the path instead of including it")

    @field_validator("path", mode="before")
    @classmethod
    def _normalize_path(cls, value: object) -> object:
        if isinstance(value, str):
            return normalize_rel_path(value)
        return value


class SelectionPolicy(BaseModel):
    """Effective selection derived from a list of PathRule.

    Attributes:
        roots: ordered (path, recursive) pairs to traverse.
        excluded: relative paths that are never collected; always holds the
            VCS metadata directory.
    """

    model_config = ConfigDict(frozen=True)

    roots: tuple[tuple[str, bool], ...] = ((ROOT_PATH, True),)
    excluded: frozenset[str] = frozenset({VCS_METADATA_NAME})

    def is_excluded(self, rel_path: str) -> bool:
        """Check a traversed file against the exclusion set.

        A path is excluded when it equals an excluded path or lies under one;
        excluding `lib` leaves `library.txt` alone.

        Args:
            rel_path (str): forward-slash path relative to the repository root

        Returns:
            bool: True if the path is excluded
        """
        return any(rel_path == ex or rel_path.startswith(ex + "/") for ex in self.excluded)

    def is_excluded_exact(self, rel_path: str) -> bool:
        """Check a single-file root against the exclusion set (exact match only)."""
        return rel_path in self.excluded


def normalize_rules(rules: Iterable[PathRule]) -> SelectionPolicy:
    """Turn caller rules into a SelectionPolicy.

    Exclude rules feed the exclusion set; the other rules become traversal
    roots, in caller order. Without any include rule the whole repository is
    traversed recursively. Paths are not checked here: missing ones are
    skipped during extraction.

    Args:
        rules (Iterable[PathRule]): the caller rules, possibly empty

    Returns:
        SelectionPolicy: the effective policy
    """
    excluded = {VCS_METADATA_NAME}
    roots: list[tuple[str, bool]] = []
    for rule in rules:
        if rule.exclude:
            excluded.add(rule.path)
        else:
            roots.append((rule.path, rule.recursive))
    if not roots:
        roots.append((ROOT_PATH, True))
    return SelectionPolicy(roots=tuple(roots), excluded=frozenset(excluded))
