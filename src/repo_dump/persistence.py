from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from repo_dump.logging import logger

if TYPE_CHECKING:
    from repo_dump.output_construction import RepositoryReport


def save_report(report: RepositoryReport, output_dir: Path, report_id: str) -> list[Path]:
    """Write the tree, the markdown and the full JSON of a report to `output_dir`.

    Args:
        report (RepositoryReport): the report to save
        output_dir (Path): destination directory (created if missing)
        report_id (str): prefix of the generated file names

    Raises:
        OSError: if a file cannot be written

    Returns:
        list[Path]: the written files
    """
    out_dir = Path(output_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    artifacts = {
        out_dir / f"{report_id}_tree.txt": report.tree,
        out_dir / f"{report_id}_analysis.md": report.markdown,
        out_dir / f"{report_id}_response.json": report.model_dump_json(indent=2),
    }
    written: list[Path] = []
    for path, text in artifacts.items():
        path.write_text(text, encoding="utf-8")
        logger.info("artifact_saved", path=str(path))
        written.append(path)
    return written
