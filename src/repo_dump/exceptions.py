from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class RepoDumpError(Exception):
    """Base exception for errors in the repo_dump package."""


@dataclass(frozen=True)
class GitCommandError(RepoDumpError):
    """Raised when a git command fails."""

    command: str
    returncode: int
    stdout: str
    stderr: str

    def __str__(self) -> str:
        detail = (self.stderr or self.stdout).strip()
        return f"git command failed ({self.returncode}): {self.command} - {detail}"


@dataclass(frozen=True)
class MissingCredentialError(RepoDumpError):
    """Raised when a private repository is requested without an access token."""

    variable: str = "GITHUB_TOKEN"

    def __str__(self) -> str:
        return f"{self.variable} environment variable not set for private repository"


@dataclass(frozen=True)
class RepositoryAccessError(RepoDumpError):
    """Raised when the repository root cannot be read."""

    root: Path
    reason: str = "repository root is not an accessible directory"

    def __str__(self) -> str:
        return f"{self.root}: {self.reason}"


@dataclass(frozen=True)
class InvalidRulesFileError(RepoDumpError):
    """Raised when a rules file cannot be loaded."""

    path: Path
    reason: str

    def __str__(self) -> str:
        return f"invalid rules file {self.path}: {self.reason}"


@dataclass(frozen=True)
class WorkspaceError(RepoDumpError):
    """Raised when a per-request workspace cannot be created."""

    path: Path
    reason: str

    def __str__(self) -> str:
        return f"cannot create workspace {self.path}: {self.reason}"
