from __future__ import annotations

import os
from pathlib import Path

import pytest
from pydantic import ValidationError

from repo_dump.config import DEFAULT_MAX_FILE_SIZE
from repo_dump.settings import ENV_VARIABLES, Settings, load_settings


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for variable in ENV_VARIABLES.values():
        monkeypatch.delenv(variable, raising=False)
    return monkeypatch


@pytest.mark.unit
def test_settings_defaults() -> None:
    settings = Settings()

    assert settings.temp_dir == Path("temp_repos")
    assert settings.output_dir == Path("output")
    assert settings.max_file_size == DEFAULT_MAX_FILE_SIZE
    assert settings.port == 8080
    assert settings.use_external_tree is True
    assert settings.token_value() is None


@pytest.mark.unit
def test_settings_rejects_non_positive_size() -> None:
    with pytest.raises(ValidationError):
        Settings(max_file_size=0)


@pytest.mark.unit
def test_load_settings_reads_environment(clean_env: pytest.MonkeyPatch, tmp_path: Path) -> None:
    clean_env.setenv("PORT", "9090")
    clean_env.setenv("GITHUB_TOKEN", "tok")
    clean_env.setenv("REPO_DUMP_SAVE_OUTPUT", "false")
    clean_env.setenv("REPO_DUMP_MAX_FILE_SIZE", "1024")

    settings = load_settings(tmp_path / "absent.env")

    assert settings.port == 9090
    assert settings.token_value() == "tok"
    assert settings.save_output is False
    assert settings.max_file_size == 1024
    assert "tok" not in repr(settings)


@pytest.mark.unit
def test_load_settings_reads_dotenv_file(clean_env: pytest.MonkeyPatch, tmp_path: Path) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text("REPO_DUMP_TEMP_DIR=/tmp/repos\nPORT=7000\n", encoding="utf-8")
    clean_env.setattr(os, "environ", {**os.environ, "PORT": "7001"})

    settings = load_settings(env_file)

    assert settings.temp_dir == Path("/tmp/repos")
    assert settings.port == 7001
