"""
repo_dump: dump a repository as a tree, its file contents and a markdown document.

Usage
-----
Run `python -m repo_dump.cli --help` for full options. Common examples:
    - Analyze a local checkout, only `src/`, markdown on stdout:
        repo-dump analyze . --include src

    - Clone a repository and write the JSON report:
        repo-dump analyze https://github.com/owner/project.git --format json --output project.json

    - Rules from a file (YAML or JSON list of {path, recursive, exclude}):
        repo-dump analyze . --rules rules.yaml --exclude node_modules

    - Serve the HTTP API:
        repo-dump serve --port 8080
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any

import uvicorn
import yaml
from pydantic import ValidationError

from repo_dump import __version__
from repo_dump.analyzer import AnalyzeRequest, analyze_remote, analyze_repository
from repo_dump.config import OutputFormat
from repo_dump.exceptions import InvalidRulesFileError, RepoDumpError
from repo_dump.logging import logger, setup_logging
from repo_dump.rules import PathRule
from repo_dump.service import create_app
from repo_dump.settings import Settings, load_settings

if TYPE_CHECKING:
    from collections.abc import Sequence

    from repo_dump.output_construction import RepositoryReport


def _include_rule(value: str) -> PathRule:
    return PathRule(path=value)


def _include_flat_rule(value: str) -> PathRule:
    return PathRule(path=value, recursive=False)


def _exclude_rule(value: str) -> PathRule:
    return PathRule(path=value, exclude=True)


def load_rules_file(path: Path) -> list[PathRule]:
    """Load rules from a YAML (or JSON) file.

    The file holds either a list of rule mappings or a mapping with a `dirs`
    list, the same shape as the HTTP payload.

    Args:
        path (Path): the rules file

    Raises:
        InvalidRulesFileError: if the file cannot be read, parsed or validated

    Returns:
        list[PathRule]: the rules, in file order
    """
    try:
        data: Any = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        raise InvalidRulesFileError(path=path, reason=str(e)) from e
    if data is None:
        return []
    if isinstance(data, dict):
        data = data.get("dirs", [])
    if not isinstance(data, list):
        raise InvalidRulesFileError(path=path, reason="expected a list of rules")
    try:
        return [PathRule.model_validate(item) for item in data]
    except ValidationError as e:
        raise InvalidRulesFileError(path=path, reason=str(e)) from e


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser.

    Returns:
        argparse.ArgumentParser: Configured parser.
    """
    p = argparse.ArgumentParser(
        prog="repo-dump",
        description="Dump a repository as a directory tree, file contents and markdown.",
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument("--log-file", type=str, default=None, help="Log file path.")
    p.add_argument("--log-level", type=str, default=None, help="Log level (INFO, DEBUG, ...).")
    sub = p.add_subparsers(dest="command", required=True)

    analyze = sub.add_parser("analyze", help="Analyze a local directory or a repository URL.")
    analyze.add_argument("source", type=str, help="Local directory or repository URL.")
    analyze.add_argument(
        "--include",
        dest="rules",
        action="append",
        type=_include_rule,
        default=[],
        help="Include a path, recursively (repeatable).",
    )
    analyze.add_argument(
        "--include-flat",
        dest="rules",
        action="append",
        type=_include_flat_rule,
        help="Include a directory's direct files only (repeatable).",
    )
    analyze.add_argument(
        "--exclude",
        dest="rules",
        action="append",
        type=_exclude_rule,
        help="Exclude a path and everything under it (repeatable).",
    )
    analyze.add_argument("--rules", dest="rules_file", type=Path, default=None, help="YAML/JSON rules file.")
    analyze.add_argument(
        "--format",
        type=str,
        choices=["markdown", "md", "json", "text", "txt"],
        default="markdown",
        help="Output format.",
    )
    analyze.add_argument("--output", type=Path, default=None, help="Output file (default: stdout).")
    analyze.add_argument("--private", action="store_true", help="Clone with GITHUB_TOKEN.")
    analyze.add_argument("--max-file-size", type=int, default=None, help="Skip files above this size (bytes).")
    analyze.add_argument(
        "--no-external-tree",
        action="store_true",
        help="Always use the built-in tree renderer.",
    )
    analyze.add_argument(
        "--save-output",
        action="store_true",
        help="Also save tree/markdown/json artifacts to the output directory.",
    )

    serve = sub.add_parser("serve", help="Run the HTTP service.")
    serve.add_argument("--host", type=str, default=None, help="Bind address.")
    serve.add_argument("--port", type=int, default=None, help="Port.")
    return p


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments.

    Args:
        argv (Sequence[str] | None): Optional CLI args.

    Returns:
        argparse.Namespace: Parsed arguments.
    """
    return build_parser().parse_args(argv)


def apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    """Overlay the CLI flags that were given on top of the environment settings."""
    update: dict[str, Any] = {}
    if args.log_file:
        update["log_file"] = args.log_file
    if args.log_level:
        update["log_level"] = args.log_level
    if getattr(args, "max_file_size", None) is not None:
        update["max_file_size"] = args.max_file_size
    if getattr(args, "no_external_tree", False):
        update["use_external_tree"] = False
    if args.command == "analyze":
        update["save_output"] = bool(args.save_output)
    if getattr(args, "host", None):
        update["host"] = args.host
    if getattr(args, "port", None) is not None:
        update["port"] = args.port
    if not update:
        return settings
    return Settings.model_validate({**settings.model_dump(), **update})


def run_analyze(args: argparse.Namespace, settings: Settings) -> RepositoryReport:
    """Analyze the requested source and return its report."""
    rules: list[PathRule] = []
    if args.rules_file is not None:
        rules.extend(load_rules_file(args.rules_file))
    rules.extend(args.rules or [])

    local = Path(args.source)
    if local.is_dir():
        logger.info("analyzing_local_directory", path=str(local))
        return analyze_repository(
            local,
            rules,
            max_file_size=settings.max_file_size,
            use_external_tree=settings.use_external_tree,
        )

    request = AnalyzeRequest(repo_url=args.source, is_private=args.private, dirs=rules)
    return analyze_remote(request, settings).report


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point of the `repo-dump` command.

    Args:
        argv (Sequence[str] | None): Optional CLI arguments.

    Returns:
        int: Process exit code.
    """
    args = parse_args(argv)
    settings = apply_overrides(load_settings(), args)
    if settings.log_file or args.log_level:
        setup_logging(settings.log_file or None, settings.log_level, force=True)

    if args.command == "serve":
        uvicorn.run(create_app(settings), host=settings.host, port=settings.port)
        return 0

    fmt = OutputFormat.parse(args.format)
    try:
        report = run_analyze(args, settings)
    except RepoDumpError as e:
        logger.error("analysis_failed", error=str(e))
        sys.stderr.write(f"error: {e}\n")
        return 1

    body = report.render(fmt)
    if args.output is None:
        sys.stdout.write(body)
    else:
        args.output.write_text(body, encoding="utf-8")
        print(f"Wrote {args.output} format={fmt} files={len(report.contents)}")  # noqa: T201
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
