from __future__ import annotations

import os
from pathlib import Path

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, ConfigDict, Field, SecretStr

from repo_dump.config import DEFAULT_MAX_FILE_SIZE

ENV_FILE = find_dotenv(usecwd=True)

ENV_VARIABLES: dict[str, str] = {
    "temp_dir": "REPO_DUMP_TEMP_DIR",
    "output_dir": "REPO_DUMP_OUTPUT_DIR",
    "save_output": "REPO_DUMP_SAVE_OUTPUT",
    "max_file_size": "REPO_DUMP_MAX_FILE_SIZE",
    "use_external_tree": "REPO_DUMP_USE_EXTERNAL_TREE",
    "github_token": "GITHUB_TOKEN",
    "host": "HOST",
    "port": "PORT",
    "log_file": "REPO_DUMP_LOG_FILE",
    "log_level": "REPO_DUMP_LOG_LEVEL",
}


class Settings(BaseModel):
    """Configuration settings for the repo_dump service and CLI."""

    model_config = ConfigDict(frozen=True)

    temp_dir: Path = Field(default=Path("temp_repos"), description="Parent of per-request workspaces.")
    output_dir: Path = Field(default=Path("output"), description="Where generated artifacts are saved.")
    save_output: bool = Field(default=True, description="Persist tree/markdown/json artifacts.")
    max_file_size: int = Field(
        default=DEFAULT_MAX_FILE_SIZE,
        gt=0,
        description="Files above this size (bytes) are left out of the contents.",
    )
    use_external_tree: bool = Field(
        default=True,
        description="Try the external `tree` utility before the built-in renderer.",
    )
    github_token: SecretStr | None = Field(default=None, description="Token for private repositories.")
    host: str = Field(default="0.0.0.0", description="HTTP bind address.")  # noqa: S104
    port: int = Field(default=8080, ge=0, le=65535, description="HTTP port.")
    log_file: str = Field(default="", description="Log file path.")
    log_level: str = Field(default="INFO", description="Log level name.")

    def token_value(self) -> str | None:
        """Return the plain token, or None when no (or an empty) token is configured."""
        if self.github_token is None:
            return None
        return self.github_token.get_secret_value() or None


def load_settings(env_file: str | Path | None = None) -> Settings:
    """Build settings from the process environment, after loading a `.env` file.

    Values already present in the environment win over the `.env` file.

    Args:
        env_file: Explicit `.env` path. Defaults to the nearest `.env` found from the cwd.

    Returns:
        Settings: the validated settings.
    """
    dotenv_path = env_file if env_file is not None else ENV_FILE
    if dotenv_path:
        load_dotenv(dotenv_path, override=False)
    values = {
        field: os.environ[variable]
        for field, variable in ENV_VARIABLES.items()
        if os.environ.get(variable, "") != ""
    }
    return Settings.model_validate(values)
