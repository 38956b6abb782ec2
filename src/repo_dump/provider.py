"""Repository provider: materialize a remote repository with `git clone`."""

from __future__ import annotations

import shutil
import subprocess  # noqa: S404
from typing import TYPE_CHECKING

from repo_dump.exceptions import GitCommandError, MissingCredentialError
from repo_dump.logging import logger

if TYPE_CHECKING:
    from pathlib import Path

CLONE_ARGS = ("clone", "--config", "core.autocrlf=input")
REDACTED = "***"


def extract_repo_name(repo_url: str) -> str:
    """Extract a repository name from its URL.

    Args:
        repo_url (str): e.g. `https://github.com/owner/project.git`

    Returns:
        str: the last path segment without `.git` (`project`), or `repo` if empty
    """
    trimmed = repo_url.strip().rstrip("/").removesuffix(".git")
    name = trimmed.rsplit("/", 1)[-1].rsplit(":", 1)[-1]
    return name or "repo"


def authenticated_url(repo_url: str, token: str) -> str:
    """Embed an access token in an https URL (`https://<token>@host/...`)."""
    return repo_url.replace("https://", f"https://{token}@", 1)


def _redact(text: str, secret: str | None) -> str:
    if not secret:
        return text
    return text.replace(secret, REDACTED)


def clone_repository(
    repo_url: str,
    dest: Path,
    *,
    is_private: bool = False,
    token: str | None = None,
) -> Path:
    """Clone `repo_url` into `dest`.

    Line endings are normalized on checkout (`core.autocrlf=input`). Private
    repositories need a token, which is injected into the URL and redacted
    from any error report.

    Args:
        repo_url (str): the repository URL
        dest (Path): target directory (must not exist yet)
        is_private (bool): whether the repository needs authentication
        token (str | None): access token for private repositories

    Raises:
        MissingCredentialError: if `is_private` is set without a token
        GitCommandError: if git is missing or the clone fails

    Returns:
        Path: `dest`, now holding the working tree
    """
    url = repo_url
    if is_private:
        if not token:
            raise MissingCredentialError
        url = authenticated_url(repo_url, token)

    command = ["git", *CLONE_ARGS, "--", url, str(dest)]
    shown = _redact(" ".join(command), token)
    logger.info("cloning_repository", repo_url=repo_url, dest=str(dest))

    executable = shutil.which("git")
    if executable is None:
        raise GitCommandError(command=shown, returncode=127, stdout="", stderr="git executable not found")

    out = subprocess.run(  # noqa: S603
        [executable, *command[1:]],
        text=True,
        capture_output=True,
        check=False,
    )
    if out.returncode != 0:
        raise GitCommandError(
            command=shown,
            returncode=out.returncode,
            stdout=_redact(out.stdout, token),
            stderr=_redact(out.stderr, token),
        )
    return dest
