from __future__ import annotations

import pytest

from repo_dump.config import EXT2LANG, OutputFormat, language_for_path


@pytest.mark.unit
@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("markdown", OutputFormat.MARKDOWN),
        ("md", OutputFormat.MARKDOWN),
        ("JSON", OutputFormat.JSON),
        ("text", OutputFormat.TEXT),
        ("txt", OutputFormat.TEXT),
        ("", OutputFormat.MARKDOWN),
        (None, OutputFormat.MARKDOWN),
        ("html", OutputFormat.MARKDOWN),
    ],
)
def test_output_format_parse(raw: str | None, expected: OutputFormat) -> None:
    assert OutputFormat.parse(raw) is expected


@pytest.mark.unit
def test_language_for_path() -> None:
    assert language_for_path("cmd/main.go") == "go"
    assert language_for_path("Lib.RS") == "rust"
    assert language_for_path("Makefile") == ""
    assert language_for_path("notes.txt") == ""


@pytest.mark.unit
def test_extension_table_is_read_only() -> None:
    with pytest.raises(TypeError):
        EXT2LANG[".zig"] = "zig"  # type: ignore[index]
